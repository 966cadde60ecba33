# apps/common/base/base_repo.py

from __future__ import annotations

from abc import ABC
from typing import Any, Generic, Mapping, Optional, TypeVar

from django.db import transaction
from django.db.models import Model, QuerySet
from django.utils import timezone

T = TypeVar("T", bound=Model)


class BaseRepo(ABC, Generic[T]):
    """
    Repository（数据访问层）基类：
    - 业务目标：统一封装 Django ORM 读写细节，给 Service 提供稳定接口
    - 软删支持：声明 soft_delete_field 后，默认 QuerySet 自动排除已软删记录，
      soft_delete_by_pk() 以条件 UPDATE 写入删除时间
    - 用法示例：class ChallengeRepo(BaseRepo[Challenge]): model = Challenge
    """

    #: 子类必须指定对应的模型
    model: type[T]

    #: 软删标记字段（DateTimeField，非空即视为已删除）；为空表示模型不支持软删
    soft_delete_field: Optional[str] = None

    # ------------------------
    # QuerySet 构建
    # ------------------------

    def get_all_queryset(self) -> QuerySet[T]:
        """包含已软删记录的原始 QuerySet，仅供后台/审计使用"""
        if not getattr(self, "model", None):
            raise NotImplementedError("BaseRepo 子类必须声明 model 属性")
        return self.model._default_manager.all()

    def get_queryset(self) -> QuerySet[T]:
        """
        默认 QuerySet：声明了软删字段时只返回未删除记录
        """
        qs = self.get_all_queryset()
        if self.soft_delete_field:
            qs = qs.filter(**{f"{self.soft_delete_field}__isnull": True})
        return qs

    def filter(self, *, queryset: Optional[QuerySet[T]] = None, **filters) -> QuerySet[T]:
        """通用过滤入口，允许注入自定义 QuerySet"""
        qs = queryset if queryset is not None else self.get_queryset()
        return qs.filter(**filters)

    def get_or_none(self, *, queryset: Optional[QuerySet[T]] = None, **filters) -> Optional[T]:
        """返回符合条件的单个对象，未命中则为 None"""
        return self.filter(queryset=queryset, **filters).first()

    # ------------------------
    # 写操作
    # ------------------------

    def update_by_pk(self, pk: Any, data: Mapping[str, Any]) -> Optional[T]:
        """
        按主键对“存活”记录做字段级合并更新：
        - 同一事务内先行锁（select_for_update），再以单条 UPDATE 只写入 data 中的字段
        - 返回合并后的最新记录；记录不存在（或已软删）时返回 None
        - 调用方只会看到更新前或完整更新后的行，不会读到中间状态
        """
        with transaction.atomic():
            locked = self.get_queryset().select_for_update().filter(pk=pk)
            if not locked.exists():
                return None
            if data:
                locked.update(**dict(data))
            return self.get_queryset().get(pk=pk)

    def soft_delete_by_pk(self, pk: Any) -> bool:
        """
        软删：条件 UPDATE 仅命中未删除记录，返回是否真正删除了一行
        """
        if not self.soft_delete_field:
            raise NotImplementedError(f"{self.model.__name__} 未声明 soft_delete_field，不支持软删")
        affected = self.get_queryset().filter(pk=pk).update(**{self.soft_delete_field: timezone.now()})
        return affected > 0

