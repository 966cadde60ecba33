"""
部分更新解析器：把“字段各自可选”的请求转换为字段级变更集

- 每个字段只有两种决策：absent（保持原值不动）/ present（覆盖为新值）
- 不存在“清空为 null”的决策：请求中缺省或显式 null 都视为 absent，
  Patch.present(None) 直接拒绝，因此任何字段一旦有值只能被覆盖、不能被清空
- 解析器不做字段校验，校验由 Schema 层在此之前完成
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Generic, Iterable, Iterator, Mapping, Optional, TypeVar

V = TypeVar("V")

# 题目字段分组：不同接口只允许改动各自的字段组
GENERAL_FIELDS: tuple[str, ...] = (
    "title",
    "description",
    "category",
    "tags",
    "is_public",
    "is_dynamic",
    "has_attachment",
)
ENV_FIELDS: tuple[str, ...] = ("env",)
CHECKER_FIELDS: tuple[str, ...] = ("checker",)


@dataclass(frozen=True)
class Patch(Generic[V]):
    """
    单字段补丁值：is_set=False 表示不改动；is_set=True 表示覆盖为 value

    不要直接调用构造函数，使用 Patch.absent() / Patch.present(value)
    """

    is_set: bool
    value: Optional[V] = None

    @staticmethod
    def absent() -> "Patch[Any]":
        return UNSET

    @staticmethod
    def present(value: V) -> "Patch[V]":
        if value is None:
            raise ValueError("Patch 不支持把字段清空为 None，只能保持或覆盖")
        return Patch(is_set=True, value=value)

    def get(self, default: Optional[V] = None) -> Optional[V]:
        return self.value if self.is_set else default

    def __repr__(self) -> str:
        return f"Patch.present({self.value!r})" if self.is_set else "Patch.absent()"


UNSET: Patch[Any] = Patch(is_set=False)


class ChangeSet:
    """
    字段级变更集：field -> Patch，不可变

    持久化层只写入 touched 中的字段，其余列保持原值
    """

    __slots__ = ("_patches",)

    def __init__(self, patches: Mapping[str, Patch[Any]] | None = None):
        cleaned: dict[str, Patch[Any]] = {}
        for field_name, patch in (patches or {}).items():
            if not isinstance(patch, Patch):
                raise TypeError(f"字段 {field_name} 的变更必须是 Patch 实例")
            cleaned[field_name] = patch
        self._patches = MappingProxyType(cleaned)

    def __getitem__(self, field_name: str) -> Patch[Any]:
        return self._patches.get(field_name, UNSET)

    def __iter__(self) -> Iterator[str]:
        return iter(self._patches)

    def __len__(self) -> int:
        return len(self.touched)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ChangeSet):
            return NotImplemented
        return self.as_update_kwargs() == other.as_update_kwargs()

    def __repr__(self) -> str:
        return f"ChangeSet({dict(self._patches)!r})"

    @property
    def touched(self) -> frozenset[str]:
        """被覆盖的字段集合"""
        return frozenset(name for name, patch in self._patches.items() if patch.is_set)

    @property
    def is_empty(self) -> bool:
        return not self.touched

    def touches(self, field_name: str) -> bool:
        return self[field_name].is_set

    def as_update_kwargs(self) -> dict[str, Any]:
        """转换为 QuerySet.update 可直接使用的参数，只包含被覆盖的字段"""
        return {name: patch.value for name, patch in self._patches.items() if patch.is_set}


def resolve_change_set(payload: Mapping[str, Any], fields: Iterable[str]) -> ChangeSet:
    """
    按字段清单解析变更集：
    - 请求中缺省或值为 None → absent
    - 其余 → present(value)
    清单以外的键一律忽略
    """
    patches: dict[str, Patch[Any]] = {}
    for field_name in fields:
        value = payload.get(field_name)
        patches[field_name] = UNSET if value is None else Patch.present(value)
    return ChangeSet(patches)
