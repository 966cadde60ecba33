"""
题目模块的序列化工具函数：
- 将模型对象/校验结果转换为接口响应数据
- 轻量 Presenter，视图层与测试复用，避免重复手写字典
"""

from __future__ import annotations

from typing import Optional

from .checker import LintResult
from .models import Challenge


def _iso(value) -> str | None:
    return value.isoformat() if hasattr(value, "isoformat") else value


def serialize_challenge(challenge: Challenge) -> dict:
    """题目详情：管理端视图，包含运行环境与检查器脚本"""
    return {
        "id": str(challenge.pk),
        "title": challenge.title,
        "description": challenge.description,
        "category": challenge.category,
        "tags": list(challenge.tags or []),
        "is_public": challenge.is_public,
        "is_dynamic": challenge.is_dynamic,
        "has_attachment": challenge.has_attachment,
        "env": challenge.env,
        "checker": challenge.checker,
        "created_at": _iso(challenge.created_at),
        "updated_at": _iso(challenge.updated_at),
    }


def serialize_lint(lint: Optional[LintResult]) -> dict | None:
    """检查器校验结果；未触发校验时为 None"""
    return lint.to_dict() if lint is not None else None
