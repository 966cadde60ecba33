"""
检查器校验服务

- 对外约定：CheckerLinter.lint(challenge) -> LintResult，入参为更新后的完整题目记录
- 结果三态：valid / compile_error(诊断文本) / other_error(错误描述)，诊断文本原样透传给调用方
- 默认实现 PythonCheckerLinter 在本地做语法与入口函数检查；
  可通过 settings.CHECKER_LINTER 指向其他实现（如远程编译服务的适配器）
"""

from __future__ import annotations

import ast
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from django.conf import settings
from django.utils.module_loading import import_string

from .models import Challenge

DEFAULT_CHECKER_LINTER = "apps.challenges.checker.PythonCheckerLinter"
DEFAULT_CHECKER_MAX_LENGTH = 64 * 1024


@dataclass(frozen=True)
class LintResult:
    """检查器校验结果；message 为不透明文本，本层不做解析"""

    VALID = "valid"
    COMPILE_ERROR = "compile_error"
    OTHER_ERROR = "other_error"

    status: str
    message: str = ""

    @classmethod
    def valid(cls) -> "LintResult":
        return cls(status=cls.VALID)

    @classmethod
    def compile_error(cls, diagnostics: str) -> "LintResult":
        return cls(status=cls.COMPILE_ERROR, message=diagnostics)

    @classmethod
    def other_error(cls, message: str) -> "LintResult":
        return cls(status=cls.OTHER_ERROR, message=message or "检查器校验服务异常")

    @property
    def is_valid(self) -> bool:
        return self.status == self.VALID

    @property
    def diagnostic(self) -> Optional[str]:
        """校验失败时给调用方展示的提示，通过时为 None"""
        return None if self.is_valid else self.message

    def to_dict(self) -> dict:
        return {"status": self.status, "message": self.message}


class CheckerLinter(ABC):
    """检查器校验服务约定：实现方可以抛异常，调用方会统一转为 other_error"""

    @abstractmethod
    def lint(self, challenge: Challenge) -> LintResult:
        ...


class PythonCheckerLinter(CheckerLinter):
    """
    本地检查器校验：检查器脚本为 Python 源码

    规则：
    - 脚本不能为空，长度不超过 CHECKER_MAX_LENGTH
    - 必须能通过语法解析
    - 必须在顶层定义 check(operator_id, content)，至少两个位置参数
    - 动态题还必须定义 environ(operator_id)，至少一个位置参数
    """

    def __init__(self, max_length: Optional[int] = None):
        self.max_length = max_length or getattr(settings, "CHECKER_MAX_LENGTH", DEFAULT_CHECKER_MAX_LENGTH)

    def lint(self, challenge: Challenge) -> LintResult:
        source = challenge.checker or ""
        if not source.strip():
            return LintResult.compile_error("检查器脚本为空")
        if len(source) > self.max_length:
            return LintResult.compile_error(f"检查器脚本长度超过上限 {self.max_length} 个字符")
        try:
            module = ast.parse(source, filename="checker.py", mode="exec")
        except SyntaxError as exc:
            return LintResult.compile_error(f"line {exc.lineno}, column {exc.offset}: {exc.msg}")

        functions = {
            node.name: node
            for node in module.body
            if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef))
        }
        problems = [self._require_function(functions, "check", 2)]
        if challenge.is_dynamic:
            problems.append(self._require_function(functions, "environ", 1))
        problems = [problem for problem in problems if problem]
        if problems:
            return LintResult.compile_error("\n".join(problems))
        return LintResult.valid()

    @staticmethod
    def _require_function(functions: dict, name: str, min_positional: int) -> Optional[str]:
        node = functions.get(name)
        if node is None:
            return f"缺少入口函数 {name}()"
        args = node.args
        positional = len(args.posonlyargs) + len(args.args)
        if positional < min_positional and args.vararg is None:
            return f"入口函数 {name}() 至少需要 {min_positional} 个位置参数，当前为 {positional}"
        return None


def get_checker_linter() -> CheckerLinter:
    """按 settings.CHECKER_LINTER 构造检查器校验实现"""
    dotted = getattr(settings, "CHECKER_LINTER", None) or DEFAULT_CHECKER_LINTER
    linter_cls = import_string(dotted)
    return linter_cls()
