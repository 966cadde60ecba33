from __future__ import annotations

import contextvars
import uuid
from typing import Optional

# 请求级上下文：由中间件写入，供日志格式化器与异常处理器读取
request_id_ctx: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="")
user_id_ctx: contextvars.ContextVar[Optional[int]] = contextvars.ContextVar("user_id", default=None)
username_ctx: contextvars.ContextVar[str] = contextvars.ContextVar("username", default="")
path_ctx: contextvars.ContextVar[str] = contextvars.ContextVar("path", default="")
method_ctx: contextvars.ContextVar[str] = contextvars.ContextVar("method", default="")
ip_ctx: contextvars.ContextVar[str] = contextvars.ContextVar("ip", default="")


def generate_request_id() -> str:
    return uuid.uuid4().hex[:12]


def set_request_context(
    *,
    request_id: Optional[str] = None,
    user_id: Optional[int] = None,
    username: str = "",
    path: str = "",
    method: str = "",
    ip: str = "",
) -> str:
    """写入当前请求上下文，返回最终使用的 request_id"""
    rid = request_id or generate_request_id()
    request_id_ctx.set(rid)
    user_id_ctx.set(user_id)
    username_ctx.set(username or "")
    path_ctx.set(path or "")
    method_ctx.set(method or "")
    ip_ctx.set(ip or "")
    return rid


def clear_request_context() -> None:
    request_id_ctx.set("")
    user_id_ctx.set(None)
    username_ctx.set("")
    path_ctx.set("")
    method_ctx.set("")
    ip_ctx.set("")


def get_request_context() -> dict:
    return {
        "request_id": request_id_ctx.get(""),
        "user_id": user_id_ctx.get(None),
        "username": username_ctx.get(""),
        "path": path_ctx.get(""),
        "method": method_ctx.get(""),
        "ip": ip_ctx.get(""),
    }


def update_request_user(user) -> None:
    """
    在认证完成后更新当前请求上下文中的用户信息

    DRF 认证发生在视图内部，中间件执行时 request.user 尚未就绪
    """
    if user is None or not getattr(user, "is_authenticated", False):
        return
    user_id_ctx.set(getattr(user, "id", None))
    username_ctx.set(getattr(user, "username", "") or "")
