from __future__ import annotations

import uuid

from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework.test import APIClient, APITestCase

from apps.common.exceptions import ChallengeNotFoundError, ValidationError
from apps.common.tests_utils import AdminAPIMixin, TempMediaRootMixin

from .changeset import GENERAL_FIELDS, UNSET, ChangeSet, Patch, resolve_change_set
from .checker import CheckerLinter, LintResult, PythonCheckerLinter, get_checker_linter
from .models import Challenge
from .repo import ChallengeRepo
from .schemas import (
    AttachmentUploadSchema,
    ChallengeCheckerUpdateSchema,
    ChallengeEnvUpdateSchema,
    ChallengeUpdateSchema,
    normalize_env,
)
from .services import (
    AttachmentDeleteService,
    AttachmentListService,
    AttachmentUploadService,
    ChallengeCheckerUpdateService,
    ChallengeDeleteService,
    ChallengeEnvUpdateService,
    ChallengeFetchService,
    ChallengeUpdateService,
)


# 测试用例：覆盖变更集解析、仓储、检查器校验、生命周期服务与管理端 API

VALID_CHECKER = "def check(operator_id, content):\n    return content == 'flag{ok}'\n"
DYNAMIC_CHECKER = VALID_CHECKER + "\ndef environ(operator_id):\n    return {'FLAG': 'flag{ok}'}\n"


class RecordingLinter(CheckerLinter):
    """记录调用并返回预设结果的校验实现"""

    def __init__(self, result: LintResult | None = None):
        self.result = result or LintResult.valid()
        self.calls: list[tuple[str, str | None]] = []

    def lint(self, challenge: Challenge) -> LintResult:
        self.calls.append((challenge.title, challenge.checker))
        return self.result


class RaisingLinter(CheckerLinter):
    """模拟校验服务故障"""

    def lint(self, challenge: Challenge) -> LintResult:
        raise RuntimeError("linter backend unavailable")


class PatchAndChangeSetTests(TestCase):
    """部分更新解析：absent / present 两态，不存在清空"""

    def test_present_none_is_rejected(self):
        with self.assertRaises(ValueError):
            Patch.present(None)

    def test_absent_is_shared_unset(self):
        self.assertIs(Patch.absent(), UNSET)
        self.assertFalse(UNSET.is_set)
        self.assertEqual(UNSET.get("fallback"), "fallback")

    def test_present_keeps_falsy_values(self):
        self.assertEqual(Patch.present(False).get(), False)
        self.assertEqual(Patch.present("").get(), "")
        self.assertEqual(Patch.present([]).get(), [])

    def test_resolve_treats_missing_and_null_as_absent(self):
        change_set = resolve_change_set({"title": "t2", "description": None}, GENERAL_FIELDS)
        self.assertEqual(change_set.touched, frozenset({"title"}))
        self.assertEqual(change_set.as_update_kwargs(), {"title": "t2"})
        self.assertIs(change_set["description"], UNSET)
        self.assertIs(change_set["category"], UNSET)

    def test_resolve_ignores_fields_outside_group(self):
        change_set = resolve_change_set({"checker": "x", "env": {"duration": 1}}, GENERAL_FIELDS)
        self.assertTrue(change_set.is_empty)
        self.assertEqual(len(change_set), 0)

    def test_change_set_only_accepts_patches(self):
        with self.assertRaises(TypeError):
            ChangeSet({"title": "raw"})  # type: ignore[dict-item]

    def test_change_set_equality_uses_touched_values(self):
        left = ChangeSet({"title": Patch.present("a"), "tags": UNSET})
        right = ChangeSet({"title": Patch.present("a")})
        self.assertEqual(left, right)
        self.assertTrue(left.touches("title"))
        self.assertFalse(left.touches("tags"))


class ChallengeSchemaTests(TestCase):
    """入参校验：非法值在进入变更集前即被拒绝"""

    def test_unknown_field_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            ChallengeUpdateSchema.from_dict({"title": "ok", "flag": "x"})
        self.assertEqual(ctx.exception.extra, {"fields": ["flag"]})

    def test_blank_title_rejected(self):
        with self.assertRaises(ValidationError):
            ChallengeUpdateSchema.from_dict({"title": "   "})

    def test_bool_is_not_a_category(self):
        with self.assertRaises(ValidationError):
            ChallengeUpdateSchema.from_dict({"category": True})

    def test_unknown_category_rejected(self):
        with self.assertRaises(ValidationError):
            ChallengeUpdateSchema.from_dict({"category": 99})

    def test_tags_keep_order_and_duplicates(self):
        schema = ChallengeUpdateSchema.from_dict({"tags": ["web", "sqli", "web"]})
        self.assertEqual(schema.tags, ["web", "sqli", "web"])

    def test_non_object_body_rejected(self):
        with self.assertRaises(ValidationError):
            ChallengeUpdateSchema.from_dict(["title"])  # type: ignore[arg-type]

    def test_env_defaults_filled(self):
        env = normalize_env({"containers": [{"image": " nginx:alpine ", "ports": [80]}]})
        self.assertEqual(env["duration"], 1800)
        self.assertFalse(env["internet"])
        self.assertEqual(
            env["containers"],
            [{"image": "nginx:alpine", "cpu_limit": 0, "memory_limit": 0, "envs": {}, "ports": [80]}],
        )

    def test_env_rejects_bad_port(self):
        with self.assertRaises(ValidationError):
            ChallengeEnvUpdateSchema.from_dict({"env": {"containers": [{"image": "a", "ports": [70000]}]}})

    def test_env_rejects_unknown_key(self):
        with self.assertRaises(ValidationError):
            normalize_env({"duration": 60, "gpu": True})

    def test_checker_must_be_text(self):
        with self.assertRaises(ValidationError):
            ChallengeCheckerUpdateSchema.from_dict({"checker": 42})


class PythonCheckerLinterTests(TestCase):
    """本地检查器校验规则"""

    def setUp(self) -> None:
        self.linter = PythonCheckerLinter()

    def _lint(self, checker: str | None, *, is_dynamic: bool = False) -> LintResult:
        return self.linter.lint(Challenge(title="c", checker=checker, is_dynamic=is_dynamic))

    def test_valid_static_checker(self):
        result = self._lint(VALID_CHECKER)
        self.assertTrue(result.is_valid)
        self.assertIsNone(result.diagnostic)

    def test_empty_checker_is_compile_error(self):
        result = self._lint("   \n")
        self.assertEqual(result.status, LintResult.COMPILE_ERROR)

    def test_syntax_error_reports_position(self):
        result = self._lint("def check(a, b)\n    return True\n")
        self.assertEqual(result.status, LintResult.COMPILE_ERROR)
        self.assertTrue(result.diagnostic.startswith("line 1, column"))

    def test_missing_check_function(self):
        result = self._lint("def verify(a, b):\n    return True\n")
        self.assertEqual(result.status, LintResult.COMPILE_ERROR)
        self.assertIn("check", result.diagnostic)

    def test_check_needs_two_positional_params(self):
        result = self._lint("def check(content):\n    return True\n")
        self.assertEqual(result.status, LintResult.COMPILE_ERROR)

    def test_varargs_satisfy_arity(self):
        self.assertTrue(self._lint("def check(*args):\n    return True\n").is_valid)

    def test_dynamic_requires_environ(self):
        result = self._lint(VALID_CHECKER, is_dynamic=True)
        self.assertEqual(result.status, LintResult.COMPILE_ERROR)
        self.assertIn("environ", result.diagnostic)
        self.assertTrue(self._lint(DYNAMIC_CHECKER, is_dynamic=True).is_valid)

    def test_length_limit(self):
        linter = PythonCheckerLinter(max_length=10)
        result = linter.lint(Challenge(title="c", checker=VALID_CHECKER))
        self.assertEqual(result.status, LintResult.COMPILE_ERROR)

    @override_settings(CHECKER_LINTER="apps.challenges.tests.RaisingLinter")
    def test_linter_resolved_from_settings(self):
        self.assertIsInstance(get_checker_linter(), RaisingLinter)

    def test_default_linter(self):
        self.assertIsInstance(get_checker_linter(), PythonCheckerLinter)


class ChallengeRepoTests(TestCase):
    """仓储：字段级合并与软删可见性"""

    def setUp(self) -> None:
        self.repo = ChallengeRepo()
        self.challenge = Challenge.objects.create(
            title="t1",
            description="desc",
            tags=["misc"],
            env={"duration": 600, "internet": False, "containers": []},
            checker=VALID_CHECKER,
        )

    def test_find_unknown_and_malformed_ids(self):
        with self.assertRaises(ChallengeNotFoundError):
            self.repo.find(uuid.uuid4())
        with self.assertRaises(ChallengeNotFoundError):
            self.repo.find("not-a-uuid")

    def test_apply_update_only_writes_touched_fields(self):
        before = self.challenge.updated_at
        merged = self.repo.apply_update(self.challenge.pk, ChangeSet({"title": Patch.present("t2")}))
        self.assertEqual(merged.title, "t2")
        self.assertEqual(merged.description, "desc")
        self.assertEqual(merged.tags, ["misc"])
        self.assertEqual(merged.checker, VALID_CHECKER)
        self.assertGreaterEqual(merged.updated_at, before)

    def test_empty_change_set_returns_current_row(self):
        merged = self.repo.apply_update(self.challenge.pk, ChangeSet())
        self.assertEqual(merged.title, "t1")
        self.assertEqual(merged.updated_at, self.challenge.updated_at)

    def test_soft_delete_hides_row(self):
        self.repo.soft_delete(self.challenge.pk)
        self.assertTrue(Challenge.objects.filter(pk=self.challenge.pk).exists())
        self.assertTrue(Challenge.objects.get(pk=self.challenge.pk).is_deleted)
        with self.assertRaises(ChallengeNotFoundError):
            self.repo.find(self.challenge.pk)
        with self.assertRaises(ChallengeNotFoundError):
            self.repo.apply_update(self.challenge.pk, ChangeSet({"title": Patch.present("x")}))
        with self.assertRaises(ChallengeNotFoundError):
            self.repo.soft_delete(self.challenge.pk)


class ChallengeLifecycleServiceTests(TestCase):
    """
    服务层单测：
    - 未携带的字段保持原值，携带的字段被覆盖
    - 检查器先保存后校验，校验失败/故障不回滚
    - 软删后所有按 ID 的操作都视为不存在
    """

    def setUp(self) -> None:
        self.challenge = Challenge.objects.create(title="t1")
        self.challenge_id = self.challenge.pk

    def test_walkthrough(self):
        """t1 → t2 → 保存非法检查器 → 删除 → 不可再读写"""
        updated = ChallengeUpdateService().execute(self.challenge_id, ChallengeUpdateSchema(title="t2"))
        self.assertEqual(updated.title, "t2")
        self.assertIsNone(updated.checker)

        result = ChallengeCheckerUpdateService(linter=PythonCheckerLinter()).execute(
            self.challenge_id, ChallengeCheckerUpdateSchema(checker="bad syntax")
        )
        self.assertEqual(result.lint.status, LintResult.COMPILE_ERROR)
        self.assertTrue(result.diagnostic)
        self.assertEqual(ChallengeFetchService().execute(self.challenge_id).checker, "bad syntax")

        ChallengeDeleteService().execute(self.challenge_id)
        with self.assertRaises(ChallengeNotFoundError):
            ChallengeFetchService().execute(self.challenge_id)
        with self.assertRaises(ChallengeNotFoundError):
            ChallengeUpdateService().execute(self.challenge_id, ChallengeUpdateSchema(title="t3"))

    def test_absent_fields_preserved(self):
        Challenge.objects.filter(pk=self.challenge_id).update(
            description="keep me", is_public=True, env={"duration": 60, "internet": True, "containers": []}
        )
        updated = ChallengeUpdateService().execute(self.challenge_id, ChallengeUpdateSchema(is_dynamic=True))
        self.assertTrue(updated.is_dynamic)
        self.assertTrue(updated.is_public)
        self.assertEqual(updated.description, "keep me")
        self.assertEqual(updated.env["duration"], 60)

    def test_false_overwrites_true(self):
        Challenge.objects.filter(pk=self.challenge_id).update(is_public=True)
        updated = ChallengeUpdateService().execute(self.challenge_id, ChallengeUpdateSchema(is_public=False))
        self.assertFalse(updated.is_public)

    def test_null_never_clears(self):
        Challenge.objects.filter(pk=self.challenge_id).update(checker=VALID_CHECKER)
        schema = ChallengeCheckerUpdateSchema.from_dict({"checker": None})
        linter = RecordingLinter()
        result = ChallengeCheckerUpdateService(linter=linter).execute(self.challenge_id, schema)
        self.assertEqual(result.challenge.checker, VALID_CHECKER)
        self.assertIsNone(result.lint)
        self.assertEqual(linter.calls, [])

    def test_linter_receives_merged_record(self):
        Challenge.objects.filter(pk=self.challenge_id).update(title="merged")
        linter = RecordingLinter()
        ChallengeCheckerUpdateService(linter=linter).execute(
            self.challenge_id, ChallengeCheckerUpdateSchema(checker=VALID_CHECKER)
        )
        self.assertEqual(linter.calls, [("merged", VALID_CHECKER)])

    def test_linter_failure_is_advisory(self):
        result = ChallengeCheckerUpdateService(linter=RaisingLinter()).execute(
            self.challenge_id, ChallengeCheckerUpdateSchema(checker=VALID_CHECKER)
        )
        self.assertEqual(result.lint.status, LintResult.OTHER_ERROR)
        self.assertIn("linter backend unavailable", result.diagnostic)
        self.assertEqual(Challenge.objects.get(pk=self.challenge_id).checker, VALID_CHECKER)

    @override_settings(CHECKER_LINTER="apps.challenges.missing.Linter")
    def test_unbuildable_linter_does_not_block_save(self):
        result = ChallengeCheckerUpdateService().execute(
            self.challenge_id, ChallengeCheckerUpdateSchema(checker=VALID_CHECKER)
        )
        self.assertEqual(result.lint.status, LintResult.OTHER_ERROR)
        self.assertTrue(result.diagnostic)
        self.assertEqual(Challenge.objects.get(pk=self.challenge_id).checker, VALID_CHECKER)

    def test_null_env_keeps_template(self):
        env = {"duration": 600, "internet": True, "containers": []}
        Challenge.objects.filter(pk=self.challenge_id).update(env=env)
        schema = ChallengeEnvUpdateSchema.from_dict({"env": None})
        updated = ChallengeEnvUpdateService().execute(self.challenge_id, schema)
        self.assertEqual(updated.env, env)
        self.assertEqual(Challenge.objects.get(pk=self.challenge_id).env, env)

    def test_env_update_overwrites_whole_template(self):
        Challenge.objects.filter(pk=self.challenge_id).update(checker=VALID_CHECKER)
        schema = ChallengeEnvUpdateSchema.from_dict({"env": {"duration": 900, "containers": [{"image": "web"}]}})
        updated = ChallengeEnvUpdateService().execute(self.challenge_id, schema)
        self.assertEqual(updated.env["duration"], 900)
        self.assertEqual(updated.env["containers"][0]["image"], "web")
        self.assertEqual(updated.checker, VALID_CHECKER)
        self.assertEqual(updated.title, "t1")

    def test_checker_update_on_missing_challenge(self):
        linter = RecordingLinter()
        with self.assertRaises(ChallengeNotFoundError):
            ChallengeCheckerUpdateService(linter=linter).execute(
                uuid.uuid4(), ChallengeCheckerUpdateSchema(checker=VALID_CHECKER)
            )
        self.assertEqual(linter.calls, [])


class ChallengeAttachmentServiceTests(TempMediaRootMixin, TestCase):
    """附件服务：上传覆盖、列出、删除"""

    def setUp(self) -> None:
        super().setUp()
        self.challenge = Challenge.objects.create(title="files", has_attachment=True)

    def test_upload_replaces_previous_file(self):
        AttachmentUploadService().execute(
            self.challenge.pk, AttachmentUploadSchema(filename="v1.zip"), content=b"one"
        )
        AttachmentUploadService().execute(
            self.challenge.pk, AttachmentUploadSchema(filename="v2.zip"), content=b"second"
        )
        self.assertEqual(AttachmentListService().execute(self.challenge.pk), [{"filename": "v2.zip", "size": 6}])

    def test_delete_attachments(self):
        AttachmentUploadService().execute(
            self.challenge.pk, AttachmentUploadSchema(filename="a.txt"), content=b"abc"
        )
        AttachmentDeleteService().execute(self.challenge.pk)
        self.assertEqual(AttachmentListService().execute(self.challenge.pk), [])

    @override_settings(ATTACHMENT_MAX_SIZE_MB=1)
    def test_upload_size_limit(self):
        with self.assertRaises(ValidationError):
            AttachmentUploadService().execute(
                self.challenge.pk,
                AttachmentUploadSchema(filename="big.bin"),
                content=b"a" * (1024 * 1024 + 1),
            )

    def test_deleted_challenge_has_no_attachments(self):
        ChallengeDeleteService().execute(self.challenge.pk)
        with self.assertRaises(ChallengeNotFoundError):
            AttachmentListService().execute(self.challenge.pk)


class ChallengeAdminAPITests(TempMediaRootMixin, AdminAPIMixin, APITestCase):
    """管理端 API 冒烟：统一响应结构与状态码"""

    def setUp(self) -> None:
        super().setUp()
        self.admin = self.make_admin()
        self.client = self.auth_client(self.admin)
        self.challenge = Challenge.objects.create(title="t1", tags=["warmup"])

    def _url(self, name: str, challenge_id=None) -> str:
        return reverse(f"challenges:{name}", kwargs={"challenge_id": challenge_id or self.challenge.pk})

    def test_detail(self):
        resp = self.client.get(self._url("detail"))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["code"], 0)
        self.assertEqual(resp.data["data"]["challenge"]["id"], str(self.challenge.pk))
        self.assertEqual(resp.data["data"]["challenge"]["tags"], ["warmup"])

    def test_missing_challenge_is_bad_request(self):
        resp = self.client.get(self._url("detail", uuid.uuid4()))
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["code"], ChallengeNotFoundError.default_code)
        self.assertEqual(resp.data["message"], "challenge_not_found")

    def test_partial_update(self):
        resp = self.client.put(self._url("detail"), {"title": "t2", "description": None}, format="json")
        self.assertEqual(resp.status_code, 200)
        challenge = resp.data["data"]["challenge"]
        self.assertEqual(challenge["title"], "t2")
        self.assertEqual(challenge["tags"], ["warmup"])

    def test_update_rejects_unknown_field(self):
        resp = self.client.put(self._url("detail"), {"checker": "x"}, format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["code"], ValidationError.default_code)
        self.challenge.refresh_from_db()
        self.assertIsNone(self.challenge.checker)

    def test_delete_then_everything_is_not_found(self):
        resp = self.client.delete(self._url("detail"))
        self.assertEqual(resp.status_code, 200)
        self.assertIsNone(resp.data["data"])
        for method, name, body in (
            ("get", "detail", None),
            ("put", "detail", {"title": "t3"}),
            ("delete", "detail", None),
            ("put", "env", {"env": {"duration": 60}}),
            ("put", "checker", {"checker": VALID_CHECKER}),
        ):
            resp = getattr(self.client, method)(self._url(name), body, format="json")
            self.assertEqual(resp.status_code, 400, (method, name))
            self.assertEqual(resp.data["code"], ChallengeNotFoundError.default_code)

    def test_checker_diagnostic_in_message(self):
        resp = self.client.put(self._url("checker"), {"checker": "bad syntax"}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["code"], 0)
        lint = resp.data["data"]["lint"]
        self.assertEqual(lint["status"], LintResult.COMPILE_ERROR)
        self.assertEqual(resp.data["message"], lint["message"])
        self.assertEqual(resp.data["data"]["challenge"]["checker"], "bad syntax")

    def test_checker_valid(self):
        resp = self.client.put(self._url("checker"), {"checker": VALID_CHECKER}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["message"], "OK")
        self.assertEqual(resp.data["data"]["lint"], {"status": "valid", "message": ""})

    def test_checker_absent_skips_lint(self):
        resp = self.client.put(self._url("checker"), {}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertIsNone(resp.data["data"]["lint"])
        self.assertEqual(resp.data["message"], "OK")

    def test_env_update(self):
        resp = self.client.put(self._url("env"), {"env": {"internet": True}}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(
            resp.data["data"]["challenge"]["env"],
            {"duration": 1800, "internet": True, "containers": []},
        )

    def test_env_null_is_ignored(self):
        env = {"duration": 600, "internet": False, "containers": [{"image": "web"}]}
        Challenge.objects.filter(pk=self.challenge.pk).update(env=env)
        resp = self.client.put(self._url("env"), {"env": None}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["data"]["challenge"]["env"], env)
        self.challenge.refresh_from_db()
        self.assertEqual(self.challenge.env, env)

    def test_attachments_roundtrip(self):
        url = self._url("attachments")
        upload = SimpleUploadedFile("../../hint.txt", b"hello", content_type="text/plain")
        resp = self.client.post(url, {"file": upload}, format="multipart")
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.data["data"]["file"], {"filename": "hint.txt", "size": 5})

        resp = self.client.get(url)
        self.assertEqual(resp.data["data"]["items"], [{"filename": "hint.txt", "size": 5}])

        resp = self.client.delete(url)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(self.client.get(url).data["data"]["items"], [])

    def test_upload_without_file(self):
        resp = self.client.post(self._url("attachments"), {}, format="multipart")
        self.assertEqual(resp.status_code, 400)

    def test_player_is_forbidden(self):
        client = self.auth_client(self.make_player())
        resp = client.get(self._url("detail"))
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.data["code"], 40300)

    def test_anonymous_is_unauthorized(self):
        resp = APIClient().put(self._url("detail"), {"title": "x"}, format="json")
        self.assertEqual(resp.status_code, 401)
        self.challenge.refresh_from_db()
        self.assertEqual(self.challenge.title, "t1")


class ChallengeDjangoAdminTests(TestCase):
    """Django 后台：只合并改动字段，隐藏并软删题目"""

    def setUp(self) -> None:
        self.superuser = get_user_model().objects.create_superuser(
            username="root_admin", email="root_admin@example.com", password="StrongPass123!"
        )
        self.client.force_login(self.superuser)
        self.env = {"duration": 600, "internet": False, "containers": [{"image": "web"}]}
        self.challenge = Challenge.objects.create(
            title="t1", tags=["warmup"], env=self.env, checker=VALID_CHECKER
        )
        self.changelist_url = reverse("admin:challenges_challenge_changelist")

    def test_change_form_keeps_env_and_checker(self):
        resp = self.client.post(
            reverse("admin:challenges_challenge_change", args=[self.challenge.pk]),
            {
                "title": "t2",
                "description": "",
                "category": str(Challenge.Category.WEB),
                "tags": '["warmup"]',
                "env": "",
                "checker": "",
            },
        )
        self.assertEqual(resp.status_code, 302)
        self.challenge.refresh_from_db()
        self.assertEqual(self.challenge.title, "t2")
        self.assertEqual(self.challenge.category, Challenge.Category.WEB)
        self.assertEqual(self.challenge.env, self.env)
        self.assertEqual(self.challenge.checker, VALID_CHECKER)

    def test_soft_delete_action(self):
        resp = self.client.post(
            self.changelist_url,
            {"action": "soft_delete_selected", "_selected_action": [str(self.challenge.pk)], "index": "0"},
        )
        self.assertEqual(resp.status_code, 302)
        self.challenge.refresh_from_db()
        self.assertIsNotNone(self.challenge.deleted_at)
        with self.assertRaises(ChallengeNotFoundError):
            ChallengeFetchService().execute(self.challenge.pk)

    def test_changelist_hides_deleted_rows(self):
        Challenge.objects.create(title="still-alive-challenge")
        gone = Challenge.objects.create(title="already-gone-challenge")
        ChallengeDeleteService().execute(gone.pk)
        resp = self.client.get(self.changelist_url)
        self.assertEqual(resp.status_code, 200)
        self.assertContains(resp, "still-alive-challenge")
        self.assertNotContains(resp, "already-gone-challenge")
        change_url = reverse("admin:challenges_challenge_change", args=[gone.pk])
        self.assertEqual(self.client.get(change_url).status_code, 302)
