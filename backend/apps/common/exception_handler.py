"""
自定义全局异常处理器（DRF 入口）：
- 业务目的：统一调用方收到的错误结构，区分请求错误与服务端故障
- 处理策略：
  1) BizError 及子类 → 直接转换为 {code, message, data, extra}
  2) DRF 内置异常（Parse/Validation/Authentication/Permission/NotFound/Throttled）→ 映射为 BizError
  3) 未知/系统异常（数据库不可用等）→ 记录完整日志，返回 500 标准格式，避免泄露内部信息
"""

from typing import Any

from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import (
    ValidationError as DRFValidationError,
    ParseError,
    UnsupportedMediaType,
    AuthenticationFailed,
    NotAuthenticated,
    PermissionDenied as DRFPermissionDenied,
    NotFound as DRFNotFound,
    MethodNotAllowed,
    Throttled,
)
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from .exceptions import (
    BizError,
    BadRequestError,
    ValidationError as BizValidationError,
    AuthError,
    PermissionDeniedError,
    NotFoundError,
    RateLimitError,
)
from .response import api_response, payload_from_biz_error
from .infra.logger import get_logger, logger_extra
from .utils.request_context import get_request_context

logger = get_logger(__name__)

SERVER_ERROR_CODE = 50000


def _extract_message(detail: Any) -> str:
    """
    从 DRF 的 detail 结构中提取第一条可读错误信息

    detail 可能是 str / list[detail] / dict[field -> detail]，其余情况按 str(detail) 处理
    """
    if isinstance(detail, str):
        return detail

    if isinstance(detail, list) and detail:
        return _extract_message(detail[0])

    if isinstance(detail, dict) and detail:
        first_value = next(iter(detail.values()))
        return _extract_message(first_value)

    return str(detail)


def _handle_biz_error(exc: BizError) -> Response:
    if exc.http_status >= 500:
        logger.warning("基础设施异常：%s", exc, extra=logger_extra({"code": exc.code}))
    payload = payload_from_biz_error(exc)
    return Response(payload, status=exc.http_status)


def _handle_unexpected_exception(exc: Exception, context: dict) -> Response:
    """
    处理程序 bug 与持久化层故障：
    - 记录完整异常堆栈到日志；
    - 返回统一的 500 错误响应（不泄露内部细节），附带 request_id 便于排查
    """
    ctx = get_request_context()
    req = context.get("request")
    view = context.get("view")
    logger.exception(
        "Unhandled exception in API",
        exc_info=exc,
        extra=logger_extra(
            {
                "path": getattr(req, "path", None),
                "method": getattr(req, "method", None),
            }
        ),
    )

    return api_response(
        code=SERVER_ERROR_CODE,
        message="内部服务器错误，请联系管理员或稍后重试",
        data=None,
        http_status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        extra={
            "view": view.__class__.__name__ if view else None,
            "request_path": getattr(req, "path", None),
            "request_id": ctx.get("request_id"),
        },
    )


def _map_drf_exception_to_biz(exc: Exception) -> BizError | None:
    """
    把 DRF/Django 内置异常映射为 BizError 子类，映射不到就返回 None
    """
    if isinstance(exc, DRFValidationError):
        return BizValidationError(message=_extract_message(exc.detail), extra={"raw_detail": exc.detail})

    if isinstance(exc, (ParseError, UnsupportedMediaType, MethodNotAllowed)):
        return BadRequestError(message=_extract_message(exc.detail))

    if isinstance(exc, (AuthenticationFailed, NotAuthenticated)):
        return AuthError(message=_extract_message(getattr(exc, "detail", str(exc))))

    if isinstance(exc, DRFPermissionDenied):
        return PermissionDeniedError(message=_extract_message(getattr(exc, "detail", str(exc))))

    if isinstance(exc, (DRFNotFound, Http404)):
        return NotFoundError(message=_extract_message(getattr(exc, "detail", None) or "资源不存在"))

    if isinstance(exc, Throttled):
        return RateLimitError(
            message=_extract_message(getattr(exc, "detail", str(exc))),
            extra={"wait": getattr(exc, "wait", None)},
        )

    return None


def custom_exception_handler(exc: Exception, context: dict) -> Response | None:
    """
    DRF 入口函数：全局异常处理器

    处理顺序：
    1. 业务异常（BizError） → 直接按统一格式返回；
    2. DRF 内置异常 → 映射为 BizError 子类后返回；
    3. DRF 默认 handler 能处理的其它异常 → 包一层统一结构；
    4. 其余视为系统异常 → 500
    """
    if isinstance(exc, BizError):
        return _handle_biz_error(exc)

    mapped = _map_drf_exception_to_biz(exc)
    if mapped is not None:
        return _handle_biz_error(mapped)

    drf_response = drf_exception_handler(exc, context)
    if drf_response is not None:
        raw_data = drf_response.data
        status_code = drf_response.status_code
        return api_response(
            code=40000 if status_code < 500 else SERVER_ERROR_CODE,
            message=_extract_message(raw_data),
            data=None,
            http_status=status_code,
            extra={"raw": raw_data},
        )

    return _handle_unexpected_exception(exc, context)
