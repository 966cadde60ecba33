from __future__ import annotations

from django.utils.deprecation import MiddlewareMixin

from apps.common.utils.request_context import (
    clear_request_context,
    get_request_context,
    set_request_context,
)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestContextMiddleware(MiddlewareMixin):
    """
    在请求生命周期内写入 request_id、用户、方法、路径、IP，供日志格式化器使用；
    响应头回写 X-Request-ID，便于调用方按请求排查日志
    """

    def process_request(self, request):
        user = getattr(request, "user", None)
        authenticated = bool(user and user.is_authenticated)
        set_request_context(
            request_id=request.headers.get(REQUEST_ID_HEADER),
            user_id=getattr(user, "id", None) if authenticated else None,
            username=getattr(user, "username", "") if authenticated else "",
            path=getattr(request, "path", ""),
            method=getattr(request, "method", ""),
            ip=self._get_client_ip(request),
        )

    @staticmethod
    def process_response(request, response):
        _ = request
        request_id = get_request_context().get("request_id")
        if request_id and not response.has_header(REQUEST_ID_HEADER):
            response[REQUEST_ID_HEADER] = request_id
        clear_request_context()
        return response

    @staticmethod
    def _get_client_ip(request) -> str:
        xff = request.META.get("HTTP_X_FORWARDED_FOR")
        if xff:
            return xff.split(",")[0].strip()
        return request.META.get("REMOTE_ADDR", "")
