from __future__ import annotations

import uuid

from django.db import models

# 模型文件：定义题目的数据结构与软删标记，不承载业务流程


class ChallengeQuerySet(models.QuerySet):
    """题目 QuerySet：提供存活/已删除两个常用过滤"""

    def alive(self):
        return self.filter(deleted_at__isnull=True)

    def deleted(self):
        return self.filter(deleted_at__isnull=False)


class Challenge(models.Model):
    """
    题目主体：
    - 主键为 UUID，创建后不可变
    - 题面（标题/描述/分类/标签）与三个独立开关（公开/动态/附件）可分别更新
    - env 为动态环境模板，checker 为检查器脚本，二者为空表示未配置
    - deleted_at 非空即视为已软删；软删是终态，本模块不提供恢复/物理删除
    """

    class Category(models.IntegerChoices):
        MISC = 1, "Misc"
        WEB = 2, "Web"
        PWN = 3, "Pwn"
        CRYPTO = 4, "Crypto"
        REVERSE = 5, "Reverse"
        FORENSICS = 6, "Forensics"

    # 题目 ID
    id = models.UUIDField("题目 ID", primary_key=True, default=uuid.uuid4, editable=False)
    # 题目标题
    title = models.CharField("题目标题", max_length=255, help_text="展示给选手的题目名称")
    # 题目描述
    description = models.TextField("题目描述", blank=True, default="", help_text="完整题面描述，支持 Markdown")
    # 分类
    category = models.PositiveSmallIntegerField(
        "分类",
        choices=Category.choices,
        default=Category.MISC,
        help_text="题目分类编号",
    )
    # 标签：保持提交顺序，不去重
    tags = models.JSONField("标签", default=list, blank=True, help_text="按提交顺序保存的标签列表")
    # 是否公开
    is_public = models.BooleanField("是否公开", default=False, help_text="公开题目可被比赛引用与展示")
    # 是否动态题
    is_dynamic = models.BooleanField("动态题", default=False, help_text="动态题需要运行环境并由检查器生成环境变量")
    # 是否带附件
    has_attachment = models.BooleanField("带附件", default=False, help_text="是否向选手提供附件下载")
    # 运行环境模板
    env = models.JSONField("运行环境", null=True, blank=True, help_text="动态环境模板；为空表示未配置")
    # 检查器脚本
    checker = models.TextField("检查器脚本", null=True, blank=True, help_text="自定义检查器源码；为空表示未配置")
    # 创建时间
    created_at = models.DateTimeField("创建时间", auto_now_add=True)
    # 更新时间：每次应用变更集时刷新
    updated_at = models.DateTimeField("更新时间", auto_now=True)
    # 软删时间
    deleted_at = models.DateTimeField("删除时间", null=True, blank=True, db_index=True)

    objects = ChallengeQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "题目"
        verbose_name_plural = "题目"

    def __str__(self) -> str:
        return f"{self.title} ({self.id})"

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def attachment_dir(self) -> str:
        """附件在媒体目录下的存放路径"""
        return f"challenges/{self.id}/attachment"
