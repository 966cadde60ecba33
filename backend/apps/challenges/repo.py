# apps/challenges/repo.py

from __future__ import annotations

from typing import Any

from django.core.exceptions import ValidationError as DjangoValidationError
from django.utils import timezone

from apps.common.base.base_repo import BaseRepo
from apps.common.exceptions import ChallengeNotFoundError

from .changeset import ChangeSet
from .models import Challenge


# 仓储层：封装题目的点查、字段级合并更新与软删，已软删的记录对所有按 ID 的读写不可见


class ChallengeRepo(BaseRepo[Challenge]):
    """
    题目仓储：
    - find：只返回未软删的记录，否则抛 ChallengeNotFoundError
    - apply_update：行锁 + 单条 UPDATE，只写入变更集中被覆盖的字段
    - soft_delete：条件 UPDATE 写入删除时间，已删除/不存在时抛 ChallengeNotFoundError
    """

    model = Challenge
    soft_delete_field = "deleted_at"

    def find(self, challenge_id: Any) -> Challenge:
        try:
            challenge = self.get_or_none(pk=challenge_id)
        except DjangoValidationError:
            # 非法 UUID 与不存在同等对待
            challenge = None
        if challenge is None:
            raise ChallengeNotFoundError()
        return challenge

    def apply_update(self, challenge_id: Any, change_set: ChangeSet) -> Challenge:
        """
        把变更集原子地合并进持久化记录并返回合并后的记录
        - 空变更集仅校验记录存在并返回当前值
        - updated_at 随任何非空变更刷新（QuerySet.update 不会触发 auto_now）
        """
        data = change_set.as_update_kwargs()
        if data:
            data["updated_at"] = timezone.now()
        challenge = self.update_by_pk(challenge_id, data)
        if challenge is None:
            raise ChallengeNotFoundError()
        return challenge

    def soft_delete(self, challenge_id: Any) -> None:
        if not self.soft_delete_by_pk(challenge_id):
            raise ChallengeNotFoundError()
