# apps/challenges/schemas.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, List, Optional

from apps.common.base.base_schema import BaseSchema
from apps.common.exceptions import ValidationError
from apps.common.utils.validators import (
    ensure_int_range,
    ensure_str_list,
    ensure_type,
    forbid_dangerous_html,
)

from .models import Challenge


# Schema 层：定义题目各更新接口的入参结构与校验逻辑
# 约定：所有字段默认 None，None 即“请求未携带”，由变更集解析为 absent

DEFAULT_ENV_DURATION = 1800


@dataclass
class ChallengeUpdateSchema(BaseSchema[None]):
    """
    常规字段更新入参：
    - 题面字段与三个开关均可单独携带
    - 不携带的字段保持原值
    """
    auto_validate: ClassVar[bool] = True
    # 题目标题
    title: Optional[str] = None
    # 题目描述
    description: Optional[str] = None
    # 分类编号
    category: Optional[int] = None
    # 标签（保持提交顺序，不去重）
    tags: Optional[List[str]] = None
    # 是否公开
    is_public: Optional[bool] = None
    # 是否动态题
    is_dynamic: Optional[bool] = None
    # 是否带附件
    has_attachment: Optional[bool] = None

    def validate(self) -> None:
        """只校验携带的字段"""
        if self.title is not None:
            ensure_type(self.title, str, field_name="题目标题")
            if not self.title.strip():
                raise ValidationError(message="题目标题不能为空")
            if len(self.title) > 255:
                raise ValidationError(message="题目标题不可超过 255 个字符")
            forbid_dangerous_html(self.title, field_name="题目标题")
        if self.description is not None:
            ensure_type(self.description, str, field_name="题目描述")
            forbid_dangerous_html(self.description, field_name="题目描述")
        if self.category is not None:
            ensure_type(self.category, int, field_name="分类")
            if self.category not in Challenge.Category.values:
                raise ValidationError(message="分类不正确")
        if self.tags is not None:
            ensure_str_list(self.tags, field_name="标签", max_item_length=64)
        for name in ("is_public", "is_dynamic", "has_attachment"):
            value = getattr(self, name)
            if value is not None:
                ensure_type(value, bool, field_name=name)


@dataclass
class ChallengeEnvUpdateSchema(BaseSchema[None]):
    """
    运行环境更新入参：
    - env 携带时整体覆盖原模板（补齐 duration/internet 默认值）
    - env 缺省或为 null 时不改动；本接口不提供清空能力
    """
    auto_validate: ClassVar[bool] = True
    # 运行环境模板
    env: Optional[Dict[str, Any]] = None

    def validate(self) -> None:
        if self.env is None:
            return
        self.env = normalize_env(self.env)


@dataclass
class ChallengeCheckerUpdateSchema(BaseSchema[None]):
    """
    检查器更新入参：
    - checker 携带时覆盖原脚本；脚本能否通过编译不在此校验（先保存后检查）
    """
    auto_validate: ClassVar[bool] = True
    # 检查器脚本
    checker: Optional[str] = None

    def validate(self) -> None:
        if self.checker is not None:
            ensure_type(self.checker, str, field_name="检查器脚本")


@dataclass
class AttachmentUploadSchema(BaseSchema[None]):
    """附件上传入参：仅包含原始文件名"""
    auto_validate: ClassVar[bool] = True
    # 上传的原始文件名
    filename: str = ""

    def validate(self) -> None:
        if not self.filename or not self.filename.strip():
            raise ValidationError(message="请提供文件名")


def normalize_env(env: Any) -> Dict[str, Any]:
    """
    校验并规范化运行环境模板：
    {
      "duration": 秒数(>0，默认 1800),
      "internet": 是否允许外网(默认 false),
      "containers": [{"image", "cpu_limit", "memory_limit", "envs", "ports"}]
    }
    """
    if not isinstance(env, dict):
        raise ValidationError(message="运行环境必须是 JSON 对象")
    unknown = set(env) - {"duration", "internet", "containers"}
    if unknown:
        raise ValidationError(message=f"运行环境包含不支持的字段：{', '.join(sorted(unknown))}")
    duration = env.get("duration", DEFAULT_ENV_DURATION)
    ensure_int_range(duration, field_name="运行时长", min_value=1)
    internet = env.get("internet", False)
    ensure_type(internet, bool, field_name="internet")
    containers = env.get("containers", [])
    if not isinstance(containers, list):
        raise ValidationError(message="containers 必须是数组")
    return {
        "duration": duration,
        "internet": internet,
        "containers": [_normalize_container(item, idx) for idx, item in enumerate(containers, start=1)],
    }


def _normalize_container(container: Any, idx: int) -> Dict[str, Any]:
    label = f"第 {idx} 个容器"
    if not isinstance(container, dict):
        raise ValidationError(message=f"{label}配置必须是 JSON 对象")
    image = container.get("image")
    if not isinstance(image, str) or not image.strip():
        raise ValidationError(message=f"{label}的镜像不能为空")
    cpu_limit = container.get("cpu_limit", 0)
    ensure_int_range(cpu_limit, field_name=f"{label}的 CPU 限制", min_value=0)
    memory_limit = container.get("memory_limit", 0)
    ensure_int_range(memory_limit, field_name=f"{label}的内存限制", min_value=0)
    envs = container.get("envs", {})
    if not isinstance(envs, dict) or not all(
        isinstance(key, str) and isinstance(value, str) for key, value in envs.items()
    ):
        raise ValidationError(message=f"{label}的环境变量必须是字符串键值对")
    ports = container.get("ports", [])
    if not isinstance(ports, list):
        raise ValidationError(message=f"{label}的端口必须是数组")
    for port in ports:
        ensure_int_range(port, field_name=f"{label}的端口", min_value=1, max_value=65535)
    return {
        "image": image.strip(),
        "cpu_limit": cpu_limit,
        "memory_limit": memory_limit,
        "envs": dict(envs),
        "ports": list(ports),
    }
