"""
日志封装：提供统一的日志记录器

- 通过 settings.LOG_PATH 配置输出目录，文件名固定为 system.log
- 支持 PLAIN（默认）和 JSON 两种格式，由 settings.LOG_FORMAT 切换
- 按日期自动轮转日志文件，保留 30 天
- 自动注入请求上下文（request_id、user_id、username、ip、path）
- 业务 extra 字段经 logger_extra 脱敏后追加在日志行尾
"""

from __future__ import annotations

import json
import logging
import logging.handlers
import os
from datetime import datetime
from pathlib import Path
from typing import Optional

from django.conf import settings as django_settings

_configured = False

# LogRecord 自带属性，格式化 extra 时需要排除
_RESERVED_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def _record_extras(record: logging.LogRecord) -> dict:
    """提取调用方通过 extra= 传入的业务字段"""
    return {key: value for key, value in vars(record).items() if key not in _RESERVED_ATTRS}


class JSONFormatter(logging.Formatter):
    """
    JSON 格式化器，单行输出：
    {"timestamp": "2026-10-19 16:57:25", "level": "INFO", "logger": "apps.challenges.crud_service",
     "message": "更新题目", "request_id": "9f1c2a7b3d4e", "challenge_id": "…"}
    """

    def format(self, record: logging.LogRecord) -> str:
        from apps.common.utils.request_context import get_request_context

        ctx = get_request_context()
        log_dict = {
            "timestamp": datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in ("request_id", "username", "user_id", "ip", "path"):
            if ctx.get(key) not in (None, ""):
                log_dict[key] = ctx[key]
        for key, value in _record_extras(record).items():
            log_dict.setdefault(key, value)
        if record.exc_info:
            log_dict["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_dict, ensure_ascii=False, default=str)


class PlainFormatter(logging.Formatter):
    """
    纯文本格式化器：
    {timestamp} {level} {logger} {message} [{username}|{user_id}|{ip}|{path}|{request_id}] k=v ...

    输出示例：
    2026-10-19 16:57:25 INFO apps.challenges.crud_service 更新题目 [admin|1|127.0.0.1|/api/admin/challenges/…/|9f1c2a7b3d4e] fields=['title']
    """

    def format(self, record: logging.LogRecord) -> str:
        from apps.common.utils.request_context import get_request_context

        ctx = get_request_context()
        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        context_info = "[{}|{}|{}|{}|{}]".format(
            ctx.get("username") or "-",
            ctx.get("user_id") if ctx.get("user_id") is not None else "-",
            ctx.get("ip") or "-",
            ctx.get("path") or "-",
            ctx.get("request_id") or "-",
        )
        log_line = f"{timestamp} {record.levelname} {record.name} {record.getMessage()} {context_info}"
        extras = _record_extras(record)
        if extras:
            log_line += " " + " ".join(f"{key}={value}" for key, value in extras.items())
        if record.exc_info:
            log_line += "\n" + self.formatException(record.exc_info)
        return log_line


class SafeTimedRotatingFileHandler(logging.handlers.TimedRotatingFileHandler):
    """轮转失败（文件被占用）时跳过本次轮转，避免 PermissionError 中断日志"""

    def doRollover(self):
        try:
            super().doRollover()
        except PermissionError:
            pass


def get_log_path_from_settings() -> str:
    """基于 settings.LOG_PATH 生成日志文件路径：{LOG_PATH}/system.log"""
    log_dir = Path(getattr(django_settings, "LOG_PATH", "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)
    return str(log_dir / "system.log")


def build_formatter(fmt: Optional[str] = None) -> logging.Formatter:
    fmt = (fmt or getattr(django_settings, "LOG_FORMAT", "plain") or "plain").lower()
    if fmt == "json":
        return JSONFormatter()
    return PlainFormatter()


def configure_logging(force: bool = False, *, level: Optional[int] = None, log_file_path: Optional[str] = None) -> None:
    """
    配置日志系统（进程内只配置一次，force=True 可重建）

    配置内容：
    - 根 logger 级别取 settings.LOG_LEVEL（默认 INFO）
    - 文件 handler：每天午夜轮转，保留 30 天
    - DEBUG 模式额外输出到控制台
    """
    global _configured
    if _configured and not force:
        return

    if level is None:
        level = logging.getLevelName(str(getattr(django_settings, "LOG_LEVEL", "INFO")).upper())
        if not isinstance(level, int):
            level = logging.INFO
    log_file_path = log_file_path or get_log_path_from_settings()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in list(root_logger.handlers):
        handler.close()
    root_logger.handlers.clear()

    formatter = build_formatter()

    file_handler = SafeTimedRotatingFileHandler(
        filename=log_file_path,
        when="midnight",
        interval=1,
        backupCount=30,
        encoding="utf-8",
        delay=True,
    )
    file_handler.suffix = "%Y-%m-%d"
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    if getattr(django_settings, "DEBUG", False) or os.getenv("LOG_CONSOLE", "0") == "1":
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.DEBUG)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    _configured = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    获取 logger 实例

    使用方式：
        logger = get_logger(__name__)
        logger.info("更新题目", extra=logger_extra({"challenge_id": str(challenge.id)}))
    """
    if not _configured:
        configure_logging()
    return logging.getLogger(name)


# 敏感字段：检查器脚本与 Flag 一样视为机密，不写入日志
SENSITIVE_KEYS = {"password", "token", "secret", "flag", "checker", "authorization"}


def sanitize_extra(extra: Optional[dict] = None) -> dict:
    """过滤敏感字段，避免在日志中泄露密码/Token/检查器源码等"""
    if not extra:
        return {}
    return {key: ("***" if key.lower() in SENSITIVE_KEYS else value) for key, value in extra.items()}


def logger_extra(extra: Optional[dict] = None) -> dict:
    """封装 extra，自动过滤敏感字段"""
    return sanitize_extra(extra)
