from __future__ import annotations

from django.urls import path

from .views import (
    AdminChallengeAttachmentView,
    AdminChallengeCheckerView,
    AdminChallengeDetailView,
    AdminChallengeEnvView,
)

app_name = "challenges"

# 路由配置：
# - 挂载在 api/admin/challenges/ 之下，由 Config.urls include
# - 仅管理端接口：详情/常规更新/软删、运行环境、检查器、附件
urlpatterns = [
    # 题目详情 / 常规更新 / 软删
    path("<uuid:challenge_id>/", AdminChallengeDetailView.as_view(), name="detail"),
    # 运行环境模板
    path("<uuid:challenge_id>/env/", AdminChallengeEnvView.as_view(), name="env"),
    # 检查器（先保存后校验）
    path("<uuid:challenge_id>/checker/", AdminChallengeCheckerView.as_view(), name="checker"),
    # 附件列表 / 上传 / 删除
    path("<uuid:challenge_id>/attachments/", AdminChallengeAttachmentView.as_view(), name="attachments"),
]
