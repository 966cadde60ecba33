"""
校验工具集合：提供 Schema 层常用的类型与格式校验，不通过时统一抛 ValidationError
"""

from __future__ import annotations

from typing import Any, Iterable

from apps.common.exceptions import ValidationError


def ensure_type(value: Any, expected: type | tuple[type, ...], *, field_name: str) -> None:
    """
    严格类型校验；bool 是 int 的子类，期望 int 时需显式排除 bool
    """
    expected_tuple = expected if isinstance(expected, tuple) else (expected,)
    if isinstance(value, bool) and bool not in expected_tuple:
        raise ValidationError(message=f"{field_name} 类型不正确")
    if not isinstance(value, expected_tuple):
        raise ValidationError(message=f"{field_name} 类型不正确")


def ensure_str_list(value: Any, *, field_name: str, max_item_length: int | None = None) -> None:
    """校验字符串列表：只检查类型与长度，不去重也不改变顺序"""
    if not isinstance(value, list):
        raise ValidationError(message=f"{field_name} 必须是字符串数组")
    for item in value:
        if not isinstance(item, str):
            raise ValidationError(message=f"{field_name} 只能包含字符串")
        if max_item_length is not None and len(item) > max_item_length:
            raise ValidationError(message=f"{field_name} 单项长度不可超过 {max_item_length}")


def ensure_int_range(value: Any, *, field_name: str, min_value: int | None = None, max_value: int | None = None) -> None:
    ensure_type(value, int, field_name=field_name)
    if min_value is not None and value < min_value:
        raise ValidationError(message=f"{field_name} 不可小于 {min_value}")
    if max_value is not None and value > max_value:
        raise ValidationError(message=f"{field_name} 不可大于 {max_value}")


def forbid_dangerous_html(value: str, *, field_name: str = "字段") -> None:
    """
    拒绝常见危险 HTML 片段（如 <script>/<iframe>/javascript: 等），降低 XSS 风险
    允许普通文本和 Markdown，但若检测到可执行片段则阻断
    """
    if not value:
        return
    lower = value.lower()
    dangerous_markers = [
        "<script",
        "javascript:",
        "onerror=",
        "onload=",
        "<iframe",
        "<object",
        "<embed",
        "svg/onload",
    ]
    if any(marker in lower for marker in dangerous_markers):
        raise ValidationError(message=f"{field_name} 含有潜在危险的 HTML/脚本片段")


def validate_upload_file(
    uploaded_file,
    *,
    allowed_suffixes: Iterable[str] | None = None,
    max_size_mb: int = 10,
    field_name: str = "文件",
) -> None:
    """
    通用上传校验：后缀/大小
    """
    if uploaded_file is None:
        raise ValidationError(message=f"请上传{field_name}")
    name_lower = (getattr(uploaded_file, "name", "") or "").lower()
    size = getattr(uploaded_file, "size", 0) or 0

    if allowed_suffixes and name_lower:
        suffix = "." + name_lower.split(".")[-1] if "." in name_lower else ""
        allowed = {s.lower() for s in allowed_suffixes}
        if suffix not in allowed:
            raise ValidationError(message=f"{field_name}类型不受支持，请检查文件后缀")

    if size > max_size_mb * 1024 * 1024:
        raise ValidationError(message=f"{field_name}大小不可超过 {max_size_mb}MB")
