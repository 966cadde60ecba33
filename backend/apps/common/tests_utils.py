from __future__ import annotations

import shutil
import tempfile

from django.contrib.auth import get_user_model
from django.test import override_settings
from rest_framework.test import APIClient


class AdminAPIMixin:
    """
    提供统一的管理员/普通用户客户端构造工具，减少各测试用例的重复代码
    - 直接 force_authenticate，不依赖登录接口
    """

    admin_password: str = "StrongPass123!"

    def make_admin(self, username: str = "admin_test_user"):
        return get_user_model().objects.create_user(
            username=username,
            email=f"{username}@example.com",
            password=self.admin_password,
            is_staff=True,
        )

    def make_player(self, username: str = "alice"):
        return get_user_model().objects.create_user(
            username=username,
            email=f"{username}@example.com",
            password="Passw0rd123",
        )

    def auth_client(self, user) -> APIClient:
        """构造已认证的 APIClient；raise_request_exception 关闭以便断言 500 响应"""
        client = APIClient()
        client.raise_request_exception = False
        client.force_authenticate(user=user)
        return client


class TempMediaRootMixin:
    """
    为每个用例准备独立的临时媒体根目录（子目录尚未创建，便于验证引导拷贝）
    """

    def setUp(self):
        super().setUp()
        self._media_tmp = tempfile.mkdtemp(prefix="media-tests-")
        self.media_root = f"{self._media_tmp}/media"
        self._media_override = override_settings(MEDIA_ROOT=self.media_root)
        self._media_override.enable()
        self.addCleanup(self._media_override.disable)
        self.addCleanup(shutil.rmtree, self._media_tmp, True)
