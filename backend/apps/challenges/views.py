from __future__ import annotations

from django.conf import settings
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiExample, extend_schema, extend_schema_view, inline_serializer
from rest_framework import serializers
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.common import response
from apps.common.permissions import IsAdmin
from apps.common.schema_utils import (
    api_response_schema,
    challenge_detail_serializer,
    lint_result_serializer,
    list_response,
    media_file_serializer,
)
from apps.common.utils.validators import validate_upload_file

from .attachment_service import DEFAULT_ATTACHMENT_MAX_SIZE_MB
from .schemas import (
    AttachmentUploadSchema,
    ChallengeCheckerUpdateSchema,
    ChallengeEnvUpdateSchema,
    ChallengeUpdateSchema,
)
from .serializers import serialize_challenge, serialize_lint
from .services import (
    AttachmentDeleteService,
    AttachmentListService,
    AttachmentUploadService,
    ChallengeCheckerUpdateService,
    ChallengeDeleteService,
    ChallengeEnvUpdateService,
    ChallengeFetchService,
    ChallengeUpdateService,
)


# 视图层：管理端题目接口，仅做参数转换与服务调用；全部要求管理员权限


def _challenge_response_schema(name: str):
    return api_response_schema(name, {"challenge": challenge_detail_serializer()})


@extend_schema_view(
    get=extend_schema(tags=["admin-challenges"]),
    put=extend_schema(tags=["admin-challenges"]),
    delete=extend_schema(tags=["admin-challenges"]),
)
class AdminChallengeDetailView(APIView):
    """题目详情 / 常规字段更新 / 软删"""

    permission_classes = [IsAdmin]

    @extend_schema(
        summary="题目详情",
        operation_id="admin_challenge_detail",
        request=None,
        responses=_challenge_response_schema("AdminChallengeDetail"),
    )
    def get(self, request: Request, challenge_id) -> Response:
        challenge = ChallengeFetchService().execute(challenge_id)
        return response.success({"challenge": serialize_challenge(challenge)})

    @extend_schema(
        summary="更新题目常规字段",
        description="只改动请求中携带的字段；缺省或 null 的字段保持原值，不支持清空",
        operation_id="admin_challenge_update",
        request=inline_serializer(
            name="AdminChallengeUpdateRequest",
            fields={
                "title": serializers.CharField(required=False),
                "description": serializers.CharField(required=False, allow_blank=True),
                "category": serializers.IntegerField(required=False),
                "tags": serializers.ListField(child=serializers.CharField(), required=False),
                "is_public": serializers.BooleanField(required=False),
                "is_dynamic": serializers.BooleanField(required=False),
                "has_attachment": serializers.BooleanField(required=False),
            },
        ),
        responses=_challenge_response_schema("AdminChallengeUpdate"),
        examples=[OpenApiExample("仅修改标题", value={"title": "t2"}, request_only=True)],
    )
    def put(self, request: Request, challenge_id) -> Response:
        schema = ChallengeUpdateSchema.from_dict(request.data, auto_validate=True)
        challenge = ChallengeUpdateService().execute(challenge_id, schema)
        return response.success({"challenge": serialize_challenge(challenge)}, message="题目已更新")

    @extend_schema(
        summary="删除题目（软删）",
        operation_id="admin_challenge_delete",
        request=None,
        responses=api_response_schema("AdminChallengeDelete", None),
    )
    def delete(self, request: Request, challenge_id) -> Response:
        ChallengeDeleteService().execute(challenge_id)
        return response.acknowledged(message="题目已删除")


@extend_schema_view(put=extend_schema(tags=["admin-challenges"]))
class AdminChallengeEnvView(APIView):
    """运行环境模板更新"""

    permission_classes = [IsAdmin]

    @extend_schema(
        summary="更新题目运行环境",
        operation_id="admin_challenge_env_update",
        request=inline_serializer(
            name="AdminChallengeEnvRequest",
            fields={"env": serializers.JSONField(required=False, help_text="运行环境模板，整体覆盖")},
        ),
        responses=_challenge_response_schema("AdminChallengeEnvUpdate"),
    )
    def put(self, request: Request, challenge_id) -> Response:
        schema = ChallengeEnvUpdateSchema.from_dict(request.data, auto_validate=True)
        challenge = ChallengeEnvUpdateService().execute(challenge_id, schema)
        return response.success({"challenge": serialize_challenge(challenge)}, message="运行环境已更新")


@extend_schema_view(put=extend_schema(tags=["admin-challenges"]))
class AdminChallengeCheckerView(APIView):
    """
    检查器更新：先保存后校验
    - 保存成功即返回 200；校验未通过时 message 携带诊断文本，data.lint 给出结构化状态
    """

    permission_classes = [IsAdmin]

    @extend_schema(
        summary="更新题目检查器",
        operation_id="admin_challenge_checker_update",
        request=inline_serializer(
            name="AdminChallengeCheckerRequest",
            fields={"checker": serializers.CharField(required=False, help_text="检查器脚本")},
        ),
        responses=api_response_schema(
            "AdminChallengeCheckerUpdate",
            {
                "challenge": challenge_detail_serializer(),
                "lint": lint_result_serializer(),
            },
        ),
    )
    def put(self, request: Request, challenge_id) -> Response:
        schema = ChallengeCheckerUpdateSchema.from_dict(request.data, auto_validate=True)
        result = ChallengeCheckerUpdateService().execute(challenge_id, schema)
        return response.success(
            {"challenge": serialize_challenge(result.challenge), "lint": serialize_lint(result.lint)},
            message=result.diagnostic or "OK",
        )


@extend_schema_view(
    get=extend_schema(tags=["admin-challenges"]),
    post=extend_schema(tags=["admin-challenges"]),
    delete=extend_schema(tags=["admin-challenges"]),
)
class AdminChallengeAttachmentView(APIView):
    """题目附件：列出 / 上传（覆盖原附件）/ 删除"""

    permission_classes = [IsAdmin]
    parser_classes = [MultiPartParser, FormParser]

    @extend_schema(
        summary="题目附件列表",
        operation_id="admin_challenge_attachment_list",
        request=None,
        responses=list_response("AdminChallengeAttachmentList", media_file_serializer()),
    )
    def get(self, request: Request, challenge_id) -> Response:
        items = AttachmentListService().execute(challenge_id)
        return response.success({"items": items})

    @extend_schema(
        summary="上传题目附件",
        operation_id="admin_challenge_attachment_upload",
        request={"multipart/form-data": OpenApiTypes.OBJECT},
        responses=api_response_schema("AdminChallengeAttachmentUpload", {"file": media_file_serializer()}),
    )
    def post(self, request: Request, challenge_id) -> Response:
        uploaded = request.FILES.get("file")
        max_size_mb = getattr(settings, "ATTACHMENT_MAX_SIZE_MB", DEFAULT_ATTACHMENT_MAX_SIZE_MB)
        validate_upload_file(uploaded, max_size_mb=max_size_mb, field_name="附件")
        schema = AttachmentUploadSchema.from_dict({"filename": uploaded.name}, auto_validate=True)
        saved = AttachmentUploadService().execute(challenge_id, schema, content=uploaded.read())
        return response.created({"file": saved}, message="附件已上传")

    @extend_schema(
        summary="删除题目附件",
        operation_id="admin_challenge_attachment_delete",
        request=None,
        responses=api_response_schema("AdminChallengeAttachmentDelete", None),
    )
    def delete(self, request: Request, challenge_id) -> Response:
        AttachmentDeleteService().execute(challenge_id)
        return response.acknowledged(message="附件已删除")
