# apps/challenges/crud_service.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from apps.common.base.base_service import BaseService
from apps.common.infra.logger import get_logger, logger_extra

from .changeset import CHECKER_FIELDS, ENV_FIELDS, GENERAL_FIELDS, resolve_change_set
from .checker import CheckerLinter, LintResult, get_checker_linter
from .models import Challenge
from .repo import ChallengeRepo
from .schemas import ChallengeCheckerUpdateSchema, ChallengeEnvUpdateSchema, ChallengeUpdateSchema

logger = get_logger(__name__)


# 服务层：题目管理生命周期（查看 / 常规更新 / 环境更新 / 检查器更新 / 软删）
# 仓储与检查器校验实现均由构造函数注入，便于测试替换


@dataclass(frozen=True)
class CheckerUpdateResult:
    """检查器更新结果：已落库的题目 + 校验结果（未改动检查器时为 None）"""

    challenge: Challenge
    lint: LintResult | None

    @property
    def diagnostic(self) -> str | None:
        return self.lint.diagnostic if self.lint is not None else None


class ChallengeFetchService(BaseService[Challenge]):
    """按 ID 读取未删除的题目，已软删或不存在时抛 ChallengeNotFoundError"""

    atomic_enabled = False

    def __init__(self, challenge_repo: ChallengeRepo | None = None):
        self.challenge_repo = challenge_repo or ChallengeRepo()

    def perform(self, challenge_id: Any) -> Challenge:
        return self.challenge_repo.find(challenge_id)


class ChallengeUpdateService(BaseService[Challenge]):
    """
    常规字段更新服务：
    - 只改动请求携带的常规字段，未携带的字段（含 env/checker）保持原值
    - 空请求视为无操作，仍会校验题目存在并返回当前记录
    """

    fields = GENERAL_FIELDS
    action = "更新题目"

    def __init__(self, challenge_repo: ChallengeRepo | None = None):
        self.challenge_repo = challenge_repo or ChallengeRepo()

    def perform(self, challenge_id: Any, schema: ChallengeUpdateSchema) -> Challenge:
        change_set = resolve_change_set(schema.to_dict(), self.fields)
        challenge = self.challenge_repo.apply_update(challenge_id, change_set)
        logger.info(
            self.action,
            extra=logger_extra({"challenge_id": str(challenge.pk), "fields": sorted(change_set.touched)}),
        )
        return challenge


class ChallengeEnvUpdateService(ChallengeUpdateService):
    """运行环境更新服务：env 携带时整体覆盖，缺省或 null 时不改动"""

    fields = ENV_FIELDS
    action = "更新题目运行环境"

    def perform(self, challenge_id: Any, schema: ChallengeEnvUpdateSchema) -> Challenge:  # type: ignore[override]
        return super().perform(challenge_id, schema)


class ChallengeCheckerUpdateService(BaseService[CheckerUpdateResult]):
    """
    检查器更新服务（先保存后校验）：
    1) 在事务内写入新脚本；未携带 checker 时不改动，也不触发校验
    2) 事务提交后对合并后的完整题目调用检查器校验
    3) 校验结果随返回值带出；校验失败或校验服务异常都不会回滚已保存的脚本
    """

    atomic_enabled = False

    def __init__(self, challenge_repo: ChallengeRepo | None = None, linter: CheckerLinter | None = None):
        self.challenge_repo = challenge_repo or ChallengeRepo()
        # 未注入时在校验阶段按配置构造，构造失败同样按 other_error 返回
        self.linter = linter

    def perform(self, challenge_id: Any, schema: ChallengeCheckerUpdateSchema) -> CheckerUpdateResult:
        change_set = resolve_change_set(schema.to_dict(), CHECKER_FIELDS)
        with self.atomic(savepoint=self.atomic_savepoint):
            challenge = self.challenge_repo.apply_update(challenge_id, change_set)
        if not change_set.touches("checker"):
            return CheckerUpdateResult(challenge=challenge, lint=None)
        lint = self._lint(challenge)
        extra = logger_extra({"challenge_id": str(challenge.pk), "lint_status": lint.status})
        if lint.is_valid:
            logger.info("更新题目检查器", extra=extra)
        else:
            logger.warning("题目检查器已保存但校验未通过", extra=extra)
        return CheckerUpdateResult(challenge=challenge, lint=lint)

    def _lint(self, challenge: Challenge) -> LintResult:
        try:
            linter = self.linter or get_checker_linter()
            return linter.lint(challenge)
        except Exception as exc:
            # 校验服务自身故障不影响已保存的脚本，按 other_error 返回
            logger.exception(
                "检查器校验服务异常",
                extra=logger_extra({"challenge_id": str(challenge.pk)}),
            )
            return LintResult.other_error(str(exc))


class ChallengeDeleteService(BaseService[None]):
    """软删题目：写入删除时间，之后所有按 ID 的读写均视为不存在"""

    def __init__(self, challenge_repo: ChallengeRepo | None = None):
        self.challenge_repo = challenge_repo or ChallengeRepo()

    def perform(self, challenge_id: Any) -> None:
        self.challenge_repo.soft_delete(challenge_id)
        logger.info("删除题目", extra=logger_extra({"challenge_id": str(challenge_id)}))
