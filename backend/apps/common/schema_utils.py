# apps/common/schema_utils.py
from __future__ import annotations

from rest_framework import serializers
from drf_spectacular.utils import inline_serializer


_CACHE: dict[str, type[serializers.Serializer]] = {}


def _cached(name: str, builder):
    """简单缓存，避免重复生成同名 inline serializer 导致冲突"""
    if name not in _CACHE:
        _CACHE[name] = builder()
    return _CACHE[name]


def api_response_schema(
    name: str,
    data_fields: dict | None,
    *,
    extra_serializer: serializers.Field | None = None,
) -> serializers.Serializer:
    """
    构造统一响应 Schema：code/message/data/extra
    - name 用于生成唯一的响应/数据命名
    - data_fields 为 data 内部的字段定义；为 None 时 data 固定为 null
    """
    if data_fields is None:
        data_field = serializers.JSONField(allow_null=True, required=False, help_text="固定为 null")
    else:
        normalized_fields = {}
        for key, value in data_fields.items():
            if isinstance(value, type) and issubclass(value, serializers.Serializer):
                normalized_fields[key] = value()
            else:
                normalized_fields[key] = value
        data_field = inline_serializer(name=f"{name}Data", fields=normalized_fields)
    return inline_serializer(
        name=f"{name}Response",
        fields={
            "code": serializers.IntegerField(help_text="业务状态码，0 表示成功"),
            "message": serializers.CharField(help_text="提示信息"),
            "data": data_field,
            "extra": extra_serializer
            if extra_serializer
            else serializers.DictField(required=False, allow_null=True, help_text="附加信息"),
        },
    )


def list_response(name: str, item_serializer, extra_fields: dict | None = None):
    """列表响应：data.items 为数组，可选附加字段"""
    items_field = (
        item_serializer(many=True)
        if isinstance(item_serializer, type) and issubclass(item_serializer, serializers.Serializer)
        else serializers.ListField(child=item_serializer)
    )
    fields = {"items": items_field}
    if extra_fields:
        fields.update(extra_fields)
    return api_response_schema(name, fields)


def challenge_detail_serializer():
    return _cached(
        "ChallengeDetail",
        lambda: inline_serializer(
            name="ChallengeDetail",
            fields={
                "id": serializers.UUIDField(help_text="题目 ID"),
                "title": serializers.CharField(help_text="题目标题"),
                "description": serializers.CharField(help_text="题目描述", allow_blank=True),
                "category": serializers.IntegerField(help_text="分类编号"),
                "tags": serializers.ListField(child=serializers.CharField(), help_text="标签（保持提交顺序）"),
                "is_public": serializers.BooleanField(help_text="是否公开"),
                "is_dynamic": serializers.BooleanField(help_text="是否动态题"),
                "has_attachment": serializers.BooleanField(help_text="是否带附件"),
                "env": serializers.JSONField(help_text="运行环境模板", allow_null=True),
                "checker": serializers.CharField(help_text="检查器脚本", allow_null=True),
                "created_at": serializers.DateTimeField(help_text="创建时间"),
                "updated_at": serializers.DateTimeField(help_text="更新时间"),
            },
        ),
    )


def lint_result_serializer():
    return _cached(
        "CheckerLintResult",
        lambda: inline_serializer(
            name="CheckerLintResult",
            fields={
                "status": serializers.ChoiceField(
                    choices=["valid", "compile_error", "other_error"], help_text="检查结果"
                ),
                "message": serializers.CharField(help_text="诊断信息，校验通过时为空", allow_blank=True),
            },
        ),
    )


def media_file_serializer():
    return _cached(
        "MediaFileItem",
        lambda: inline_serializer(
            name="MediaFileItem",
            fields={
                "filename": serializers.CharField(help_text="文件名"),
                "size": serializers.IntegerField(help_text="文件大小（字节）"),
            },
        ),
    )
