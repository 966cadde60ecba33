"""
通用权限封装（apps.common.permissions）

职责：
- 放置全局可复用的权限类（基于 Django/DRF 的认证系统）
- 出错时统一抛出 BizError 子类，由全局异常处理器统一包装响应
- 认证通过后顺带刷新请求上下文中的用户信息，便于日志关联操作人
"""

from __future__ import annotations

from typing import Any

from rest_framework.permissions import BasePermission
from rest_framework.request import Request

from .exceptions import AuthError, PermissionDeniedError
from .utils.request_context import update_request_user


def _ensure_authenticated(request: Request):
    """确保用户已登录并返回 User；否则抛 AuthError"""
    user = getattr(request, "user", None)
    if user is None or not user.is_authenticated:
        raise AuthError(message="请先登录后再执行此操作")
    update_request_user(user)
    return user


class AllowAny(BasePermission):
    """允许任何请求通过（公开接口，如健康检查）"""

    def has_permission(self, request: Request, view: Any) -> bool:  # noqa: D401
        return True


class IsAuthenticated(BasePermission):
    """
    需要已登录用户

    等价于 DRF 默认的 IsAuthenticated，但出错时抛 BizError
    """

    message = "请先登录后再执行此操作"

    def has_permission(self, request: Request, view: Any) -> bool:
        _ensure_authenticated(request)
        return True


class IsAdmin(BasePermission):
    """
    需要管理员权限（is_staff == True）

    - 未登录 → 401
    - 已登录但非 staff → 403
    """

    message = "仅管理员可以执行此操作"

    def has_permission(self, request: Request, view: Any) -> bool:
        user = _ensure_authenticated(request)
        if user.is_staff:
            return True
        raise PermissionDeniedError(message=self.message)
