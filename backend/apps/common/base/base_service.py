# apps/common/base/base_service.py

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from django.db import transaction

from apps.common.exceptions import BizError
from apps.common.infra.logger import get_logger

logger = get_logger(__name__)

ServiceReturn = TypeVar("ServiceReturn")


class BaseService(ABC, Generic[ServiceReturn]):
    """
    Service 层业务逻辑基类

    约束：
        - 负责编排业务逻辑，不直接处理 HTTP
        - 使用普通 Python 参数，避免依赖 request
        - 通过仓储/Repo 访问持久化层，仓储实例由构造函数显式注入
        - 默认在事务中执行 `perform`；需要在事务外调用外部服务的子类关闭 atomic_enabled
        - 预期内的业务失败使用 BizError；系统异常向上抛出交由全局 500 处理，不做重试

    标准流程：validate(...) -> perform(...) -> handle_error(...)
    """

    atomic_enabled: bool = True
    atomic_savepoint: bool = True

    @staticmethod
    def atomic(*args, **kwargs):
        """为子类提供 `transaction.atomic` 上下文管理器"""
        return transaction.atomic(*args, **kwargs)

    def validate(self, *args, **kwargs) -> None:
        """可选的业务预检查钩子，默认空实现"""
        return None

    @abstractmethod
    def perform(self, *args, **kwargs) -> ServiceReturn:
        """子类必须实现的业务核心逻辑"""

    def execute(self, *args, **kwargs) -> ServiceReturn:
        """Service 对外的统一入口，封装标准流程"""
        try:
            self.validate(*args, **kwargs)
            if self.atomic_enabled:
                with self.atomic(savepoint=self.atomic_savepoint):
                    return self.perform(*args, **kwargs)
            return self.perform(*args, **kwargs)
        except Exception as exc:
            return self.handle_error(exc)

    __call__ = execute

    def handle_error(self, exc: Exception) -> ServiceReturn:
        """
        业务错误原样抛出；系统异常记录堆栈后向上抛出，交由全局异常处理器按 500 返回
        """
        if isinstance(exc, BizError):
            raise exc
        logger.exception("Service 层出现未捕获的系统异常，向上抛出以按 500 处理", exc_info=exc)
        raise exc
