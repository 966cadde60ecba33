"""
统一 API 响应封装（common.response）

目标与作用：
- 所有接口返回结构保持一致，便于前端对接与调试
- 业务代码只关注 code/message/data/extra，不直接操作 DRF Response
- 与 BizError 体系对齐，异常处理器与正常返回共用同一字段语义

约定返回结构：
{
    "code": 0,            # 0 表示成功；非 0 表示业务错误
    "message": "OK",      # 提示信息（给人看的；检查器更新接口在此携带诊断文本）
    "data": {...},        # 业务数据（任意结构；字典或 None）
    "extra": {...}        # 可选，附加元信息
}
"""

from typing import Any, Mapping, Optional

from rest_framework import status
from rest_framework.response import Response

from .exceptions import BizError

SUCCESS_CODE = 0  # 约定：成功永远是 0

Payload = dict[str, Any]


def build_payload(
        *,
        code: int = SUCCESS_CODE,
        message: str = "OK",
        data: Any = None,
        extra: Optional[Mapping[str, Any]] = None,
) -> Payload:
    """构造统一的响应字典，不涉及 HTTP/DRF"""
    payload: Payload = {
        "code": code,
        "message": message,
        "data": data,
    }
    if extra:
        payload["extra"] = dict(extra)
    return payload


def payload_from_biz_error(exc: BizError, data: Any = None) -> Payload:
    """异常处理器将 BizError 转换为对外响应字典"""
    return build_payload(
        code=exc.code,
        message=exc.message,
        data=data,
        extra=exc.extra,
    )


def api_response(
        *,
        code: int = SUCCESS_CODE,
        message: str = "OK",
        data: Any = None,
        http_status: int = status.HTTP_200_OK,
        extra: Optional[Mapping[str, Any]] = None,
) -> Response:
    """统一构造 DRF Response，所有接口/异常的最终出口"""
    payload = build_payload(code=code, message=message, data=data, extra=extra)
    return Response(payload, status=http_status)


def success(data: Any = None, message: str = "OK", *, extra: Optional[Mapping[str, Any]] = None) -> Response:
    """
    业务成功返回

    - HTTP 状态：200
    - code：0
    """
    return api_response(
        code=SUCCESS_CODE,
        message=message,
        data=data,
        http_status=status.HTTP_200_OK,
        extra=extra,
    )


def created(data: Any = None, message: str = "Created") -> Response:
    """新建资源成功（HTTP 201）"""
    return api_response(
        code=SUCCESS_CODE,
        message=message,
        data=data,
        http_status=status.HTTP_201_CREATED,
    )


def acknowledged(message: str = "OK") -> Response:
    """
    无数据的确认返回（如软删成功）：保持 200 + 统一结构，data 固定为 None
    """
    return success(data=None, message=message)


def response_from_biz_error(exc: BizError, data: Any = None) -> Response:
    """根据 BizError 构造 Response"""
    return api_response(
        code=exc.code,
        message=exc.message,
        data=data,
        http_status=exc.http_status,
        extra=exc.extra,
    )
