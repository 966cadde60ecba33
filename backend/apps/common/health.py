from __future__ import annotations

from django.db import connection
from rest_framework.views import APIView
from rest_framework import serializers
from rest_framework.request import Request
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.common import response
from apps.common.permissions import AllowAny
from apps.common.schema_utils import api_response_schema


class HealthCheckView(APIView):
    """
    健康检查接口
    - 用于负载均衡/监控探活，返回统一成功格式
    - 仅执行一次轻量 SELECT 1 确认数据库可用；失败由全局异常处理器按 500 返回
    """

    permission_classes = [AllowAny]
    authentication_classes: list = []

    @extend_schema(
        summary="健康检查",
        tags=["system"],
        request=None,
        responses=api_response_schema("HealthCheck", {"status": serializers.CharField()}),
    )
    def get(self, request: Request) -> Response:
        _ = request
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
        return response.success({"status": "ok"})
