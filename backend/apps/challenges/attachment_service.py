# apps/challenges/attachment_service.py

from __future__ import annotations

from typing import Any, List

from django.conf import settings

from apps.common.base.base_service import BaseService
from apps.common.infra.logger import get_logger, logger_extra
from apps.common.infra.media_storage import MediaStorage, get_media_storage, safe_filename
from apps.common.exceptions import ValidationError

from .repo import ChallengeRepo
from .schemas import AttachmentUploadSchema

logger = get_logger(__name__)

DEFAULT_ATTACHMENT_MAX_SIZE_MB = 10


class _AttachmentService(BaseService):
    """
    题目附件服务公共部分：
    - 附件存放在媒体目录 challenges/{id}/attachment 下
    - 操作前先确认题目未被删除；文件读写不参与数据库事务
    """

    atomic_enabled = False

    def __init__(self, challenge_repo: ChallengeRepo | None = None, storage: MediaStorage | None = None):
        self.challenge_repo = challenge_repo or ChallengeRepo()
        self._storage = storage

    @property
    def storage(self) -> MediaStorage:
        # 未注入时按当前 MEDIA_ROOT 取默认存储
        return self._storage or get_media_storage()


class AttachmentListService(_AttachmentService):
    """列出题目附件：[{filename, size}]，按文件名排序"""

    def perform(self, challenge_id: Any) -> List[dict]:
        challenge = self.challenge_repo.find(challenge_id)
        return [
            {"filename": name, "size": size}
            for name, size in self.storage.scan_dir(challenge.attachment_dir)
        ]


class AttachmentUploadService(_AttachmentService):
    """
    上传题目附件：
    - 每道题只保留一个附件，上传前清空原附件目录
    - 大小上限取 settings.ATTACHMENT_MAX_SIZE_MB
    """

    def perform(self, challenge_id: Any, schema: AttachmentUploadSchema, *, content: bytes) -> dict:
        challenge = self.challenge_repo.find(challenge_id)
        max_size_mb = getattr(settings, "ATTACHMENT_MAX_SIZE_MB", DEFAULT_ATTACHMENT_MAX_SIZE_MB)
        if len(content) > max_size_mb * 1024 * 1024:
            raise ValidationError(message=f"附件过大，单个文件请控制在 {max_size_mb}MB 内")
        filename = safe_filename(schema.filename)
        if not filename:
            raise ValidationError(message="文件名不合法")
        self.storage.delete_dir(challenge.attachment_dir)
        self.storage.save(challenge.attachment_dir, filename, content)
        logger.info(
            "上传题目附件",
            extra=logger_extra({"challenge_id": str(challenge.pk), "attachment": filename, "size": len(content)}),
        )
        return {"filename": filename, "size": len(content)}


class AttachmentDeleteService(_AttachmentService):
    """删除题目全部附件，目录不存在时视为成功"""

    def perform(self, challenge_id: Any) -> None:
        challenge = self.challenge_repo.find(challenge_id)
        self.storage.delete_dir(challenge.attachment_dir)
        logger.info("删除题目附件", extra=logger_extra({"challenge_id": str(challenge.pk)}))
