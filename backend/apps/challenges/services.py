"""
题目服务聚合模块：对外导出题目管理相关的业务服务
- 生命周期：查看 / 常规更新 / 环境更新 / 检查器更新 / 软删
- 附件：列出 / 上传（覆盖）/ 删除
"""

from __future__ import annotations

from .attachment_service import AttachmentDeleteService, AttachmentListService, AttachmentUploadService
from .crud_service import (
    ChallengeCheckerUpdateService,
    ChallengeDeleteService,
    ChallengeEnvUpdateService,
    ChallengeFetchService,
    ChallengeUpdateService,
    CheckerUpdateResult,
)

# 对外导出服务列表
__all__ = [
    "ChallengeFetchService",  # 题目查看
    "ChallengeUpdateService",  # 常规字段更新
    "ChallengeEnvUpdateService",  # 运行环境更新
    "ChallengeCheckerUpdateService",  # 检查器更新（先保存后校验）
    "ChallengeDeleteService",  # 软删
    "CheckerUpdateResult",
    "AttachmentListService",
    "AttachmentUploadService",
    "AttachmentDeleteService",
]
