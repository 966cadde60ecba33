"""
题目模块后台配置：
- 列表只展示未软删的题目，删除一律走软删动作，不提供物理删除
- 主要服务于运维/出题人后台排查，日常编辑走管理端 API
"""

from __future__ import annotations

from django.contrib import admin, messages

from apps.common.infra.logger import get_logger, logger_extra

from .changeset import GENERAL_FIELDS, ChangeSet, Patch
from .models import Challenge
from .repo import ChallengeRepo

logger = get_logger(__name__)


class AdminAuditMixin:
    """后台审计日志：记录新增与修改"""

    audit_model = ""

    def _audit(self, request, obj, action: str):
        logger.info(
            f"Admin{action}",
            extra=logger_extra(
                {
                    "admin": getattr(request.user, "username", None),
                    "model": self.audit_model or obj.__class__.__name__,
                    "object_id": str(getattr(obj, "pk", "")),
                    "action": action,
                }
            ),
        )

    def log_change(self, request, obj, message):
        super().log_change(request, obj, message)  # type: ignore[misc]
        self._audit(request, obj, "change")

    def log_addition(self, request, obj, message):
        super().log_addition(request, obj, message)  # type: ignore[misc]
        self._audit(request, obj, "add")


@admin.register(Challenge)
class ChallengeAdmin(AdminAuditMixin, admin.ModelAdmin):
    """
    题目后台：
    - 隐藏已软删记录，批量软删代替物理删除
    - 运行环境与检查器只读，需走管理端 API（环境校验 / 检查器先保存后校验）
    - 编辑已有题目时只合并表单中改动过的常规字段，不整行覆盖
    """

    audit_model = "Challenge"
    list_display = ("title", "category", "is_public", "is_dynamic", "has_attachment", "updated_at")
    list_filter = ("category", "is_public", "is_dynamic")
    search_fields = ("title",)
    readonly_fields = ("id", "env", "checker", "created_at", "updated_at", "deleted_at")
    actions = ["soft_delete_selected"]
    challenge_repo = ChallengeRepo()

    def get_queryset(self, request):
        return super().get_queryset(request).alive()

    def has_delete_permission(self, request, obj=None):
        return False

    def save_model(self, request, obj, form, change):
        if not change:
            super().save_model(request, obj, form, change)
            return
        patches = {
            name: Patch.present(getattr(obj, name))
            for name in form.changed_data
            if name in GENERAL_FIELDS and getattr(obj, name) is not None
        }
        merged = self.challenge_repo.apply_update(obj.pk, ChangeSet(patches))
        obj.updated_at = merged.updated_at

    @admin.action(description="软删除所选题目")
    def soft_delete_selected(self, request, queryset):
        count = 0
        for challenge in queryset:
            if self.challenge_repo.soft_delete_by_pk(challenge.pk):
                count += 1
                self._audit(request, challenge, "soft_delete")
        self.message_user(request, f"已软删除 {count} 道题目", level=messages.SUCCESS)
