# apps/common/base/base_schema.py

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, fields
from typing import Any, ClassVar, Dict, Generic, Iterable, Mapping, Optional, TypeVar

from apps.common.exceptions import ValidationError

T = TypeVar("T")
SchemaType = TypeVar("SchemaType", bound="BaseSchema[Any]")


@dataclass
class BaseSchema(ABC, Generic[T]):
    """
    业务 Schema / DTO 基类

    目的：
        - 用于 Service 层在外部输入与领域对象之间传递结构化数据；
        - 聚合字段校验逻辑，替代零散的 serializer/表单校验；
        - 请求中未出现（或显式为 null）的字段统一保持为 None，供变更集解析使用

    子类示例：
        @dataclass
        class ChallengeUpdateSchema(BaseSchema):
            title: Optional[str] = None

            def validate(self):
                if self.title is not None and not self.title.strip():
                    raise ValidationError("题目标题不能为空")
    """

    #: 是否在 __post_init__ 中自动执行 validate
    auto_validate: ClassVar[bool] = False
    #: 字段别名映射：兼容前端不同命名风格到内部字段
    ALIASES: ClassVar[dict[str, str]] = {}
    #: 是否拒绝未声明的字段；关闭时静默丢弃
    forbid_unknown: ClassVar[bool] = True

    def __post_init__(self):
        if self.auto_validate:
            self.validate()

    @abstractmethod
    def validate(self) -> None:
        """子类实现字段/业务约束校验，出错时抛 ValidationError"""

    def to_dict(
            self,
            *,
            exclude_none: bool = False,
            exclude: Iterable[str] | None = None,
    ) -> Dict[str, Any]:
        """将 Schema 转为 dict，支持过滤 None 或移除指定字段"""
        data = asdict(self)
        if exclude_none:
            data = {key: value for key, value in data.items() if value is not None}
        if exclude:
            for key in exclude:
                data.pop(key, None)
        return data

    @classmethod
    def field_names(cls) -> list[str]:
        return [f.name for f in fields(cls)]

    @classmethod
    def from_dict(
            cls: type[SchemaType],
            data: Mapping[str, Any],
            *,
            auto_validate: Optional[bool] = None,
    ) -> SchemaType:
        """
        将外部 payload 转为 Schema；auto_validate 控制是否立即校验
        """
        if not isinstance(data, Mapping):
            raise ValidationError(message="请求体必须是 JSON 对象")
        normalized = dict(data)
        for alias, target in cls.ALIASES.items():
            if alias not in normalized:
                continue
            value = normalized.pop(alias)
            normalized.setdefault(target, value)
        known = set(cls.field_names())
        unknown = sorted(key for key in normalized if key not in known)
        if unknown:
            if cls.forbid_unknown:
                raise ValidationError(message=f"不支持的字段：{', '.join(unknown)}", extra={"fields": unknown})
            normalized = {key: value for key, value in normalized.items() if key in known}
        try:
            instance = cls(**normalized)  # type: ignore[arg-type]
        except TypeError as exc:
            raise ValidationError(message="请求参数不完整") from exc
        if auto_validate or (auto_validate is None and cls.auto_validate):
            instance.validate()
        return instance
