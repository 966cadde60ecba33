# -*- coding: utf-8 -*-
"""
公共模块单测：
- 上传文件校验（类型/大小）
- 本地媒体存储（引导拷贝、读写、路径清洗）
- 日志脱敏与格式化、统一响应、全局异常处理、请求上下文中间件
"""

from __future__ import annotations

import json
import logging
import tempfile
from io import StringIO
from pathlib import Path

from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command
from django.test import RequestFactory, SimpleTestCase, TestCase
from rest_framework.exceptions import NotAuthenticated, ParseError
from rest_framework.test import APIClient

from apps.common import response
from apps.common.exception_handler import SERVER_ERROR_CODE, custom_exception_handler
from apps.common.exceptions import (
    ChallengeNotFoundError,
    MediaNotFoundError,
    StorageUnavailableError,
    ValidationError,
)
from apps.common.infra.logger import JSONFormatter, PlainFormatter, logger_extra
from apps.common.infra.media_storage import EMBED_DIR, MediaStorage, safe_filename, safe_subdir
from apps.common.tests_utils import TempMediaRootMixin
from apps.common.utils.request_context import clear_request_context, set_request_context
from apps.common.utils.validators import validate_upload_file


class UploadValidatorTests(SimpleTestCase):
    """校验上传文件的类型/大小限制"""

    def test_invalid_suffix_should_fail(self):
        bad = SimpleUploadedFile("bad.exe", b"hello", content_type="application/x-msdownload")
        with self.assertRaises(ValidationError):
            validate_upload_file(bad, allowed_suffixes={".zip"}, max_size_mb=1, field_name="附件")

    def test_exceed_size_should_fail(self):
        big = SimpleUploadedFile("big.zip", b"a" * (2 * 1024 * 1024 + 1), content_type="application/zip")
        with self.assertRaises(ValidationError):
            validate_upload_file(big, allowed_suffixes={".zip"}, max_size_mb=2, field_name="附件")

    def test_missing_file_should_fail(self):
        with self.assertRaises(ValidationError):
            validate_upload_file(None, field_name="附件")

    def test_valid_upload_should_pass(self):
        ok = SimpleUploadedFile("ok.zip", b"abc", content_type="application/zip")
        # 不应抛出异常
        validate_upload_file(ok, allowed_suffixes={".zip"}, max_size_mb=2, field_name="附件")


class MediaStorageTests(SimpleTestCase):
    """本地媒体存储：根目录引导与文件读写"""

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory(prefix="media-storage-")
        self.addCleanup(self._tmp.cleanup)
        self.root = Path(self._tmp.name) / "media"
        self.storage = MediaStorage(self.root)

    def test_init_copies_embedded_defaults(self):
        self.assertTrue(self.storage.init())
        embedded = sorted(p.relative_to(EMBED_DIR) for p in EMBED_DIR.rglob("*") if p.is_file())
        copied = sorted(p.relative_to(self.root) for p in self.root.rglob("*") if p.is_file())
        self.assertTrue(embedded)
        self.assertEqual(copied, embedded)

    def test_init_leaves_existing_root_untouched(self):
        self.root.mkdir(parents=True)
        (self.root / "keep.txt").write_text("mine")
        self.assertFalse(self.storage.init())
        self.assertEqual([p.name for p in self.root.iterdir()], ["keep.txt"])

    def test_save_get_scan_delete(self):
        self.storage.save("challenges/a/attachment", "b.txt", b"bb")
        self.storage.save("challenges/a/attachment", "a.txt", b"a")
        self.assertEqual(self.storage.get("challenges/a/attachment", "b.txt"), b"bb")
        self.assertEqual(self.storage.scan_dir("challenges/a/attachment"), [("a.txt", 1), ("b.txt", 2)])

        self.storage.delete("challenges/a/attachment", "a.txt")
        self.storage.delete("challenges/a/attachment", "a.txt")
        self.assertEqual(self.storage.scan_dir("challenges/a/attachment"), [("b.txt", 2)])

        self.storage.delete_dir("challenges/a")
        self.assertEqual(self.storage.scan_dir("challenges/a/attachment"), [])
        with self.assertRaises(MediaNotFoundError):
            self.storage.get("challenges/a/attachment", "b.txt")

    def test_scan_missing_dir_is_empty(self):
        self.assertEqual(self.storage.scan_dir("nothing/here"), [])

    def test_paths_cannot_escape_root(self):
        self.storage.save("../../outside", "../../evil.txt", b"x")
        self.assertTrue((self.root / "outside" / "evil.txt").is_file())
        self.assertFalse((Path(self._tmp.name) / "evil.txt").exists())

    def test_delete_dir_never_removes_root(self):
        self.storage.init()
        self.storage.delete_dir("..")
        self.assertTrue(self.root.is_dir())

    def test_filesystem_failure_is_storage_unavailable(self):
        self.storage.init()
        (self.root / "blocked").write_bytes(b"file, not a directory")
        with self.assertRaises(StorageUnavailableError):
            self.storage.save("blocked", "x.txt", b"x")

    def test_sanitizers(self):
        self.assertEqual(safe_filename("a/b/../c.txt"), "c.txt")
        self.assertEqual(safe_filename(".."), "")
        self.assertEqual(safe_subdir("./a//../b\\c"), "a/b/c")
        self.assertEqual(safe_subdir(None), "")


class InitMediaCommandTests(TempMediaRootMixin, SimpleTestCase):
    def test_command_bootstraps_then_skips(self):
        out = StringIO()
        call_command("init_media", stdout=out)
        self.assertTrue((Path(self.media_root) / "configs" / "logo.svg").is_file())
        out = StringIO()
        call_command("init_media", stdout=out)
        self.assertIn("跳过", out.getvalue())


class LoggerTests(SimpleTestCase):
    """日志脱敏与格式化"""

    def tearDown(self) -> None:
        clear_request_context()

    def _record(self, extra: dict) -> logging.LogRecord:
        record = logging.makeLogRecord({"name": "apps.test", "levelname": "INFO", "msg": "更新题目"})
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_sensitive_keys_masked(self):
        extra = logger_extra({"checker": "def check(a, b): ...", "Password": "p", "challenge_id": "c1"})
        self.assertEqual(extra, {"checker": "***", "Password": "***", "challenge_id": "c1"})

    def test_plain_formatter_includes_context_and_extras(self):
        set_request_context(request_id="rid-1", username="admin", user_id=1, ip="10.0.0.1", path="/x/")
        line = PlainFormatter().format(self._record({"challenge_id": "c1"}))
        self.assertIn("更新题目 [admin|1|10.0.0.1|/x/|rid-1]", line)
        self.assertTrue(line.endswith("challenge_id=c1"))

    def test_json_formatter(self):
        set_request_context(request_id="rid-2")
        payload = json.loads(JSONFormatter().format(self._record({"fields": ["title"]})))
        self.assertEqual(payload["message"], "更新题目")
        self.assertEqual(payload["request_id"], "rid-2")
        self.assertEqual(payload["fields"], ["title"])


class ResponseAndExceptionHandlerTests(SimpleTestCase):
    """统一响应结构与全局异常处理"""

    def test_success_envelope(self):
        resp = response.success({"a": 1}, message="done", extra={"k": "v"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data, {"code": 0, "message": "done", "data": {"a": 1}, "extra": {"k": "v"}})

    def test_acknowledged_has_null_data(self):
        resp = response.acknowledged()
        self.assertEqual(resp.data, {"code": 0, "message": "OK", "data": None})

    def test_not_found_is_bad_request(self):
        resp = custom_exception_handler(ChallengeNotFoundError(), {})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["code"], 48020)
        self.assertEqual(resp.data["message"], "challenge_not_found")

    def test_drf_exceptions_mapped(self):
        self.assertEqual(custom_exception_handler(ParseError("bad json"), {}).data["code"], 40001)
        resp = custom_exception_handler(NotAuthenticated(), {})
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.data["code"], 40100)

    def test_storage_failure_is_503(self):
        resp = custom_exception_handler(StorageUnavailableError(), {})
        self.assertEqual(resp.status_code, 503)
        self.assertEqual(resp.data["code"], 50303)

    def test_unexpected_error_is_500_with_request_id(self):
        set_request_context(request_id="rid-500")
        self.addCleanup(clear_request_context)
        request = RequestFactory().get("/api/admin/challenges/")
        with self.assertLogs("apps.common.exception_handler", level="ERROR"):
            resp = custom_exception_handler(RuntimeError("db down"), {"request": request, "view": None})
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.data["code"], SERVER_ERROR_CODE)
        self.assertEqual(resp.data["extra"]["request_id"], "rid-500")
        self.assertNotIn("db down", resp.data["message"])


class HealthAndMiddlewareTests(TestCase):
    def test_health_echoes_request_id(self):
        resp = APIClient().get("/health/", HTTP_X_REQUEST_ID="trace-42")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["data"], {"status": "ok"})
        self.assertEqual(resp["X-Request-ID"], "trace-42")

    def test_request_id_generated_when_missing(self):
        resp = APIClient().get("/health/")
        self.assertTrue(resp["X-Request-ID"])
