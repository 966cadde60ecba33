import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Challenge",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                        verbose_name="题目 ID",
                    ),
                ),
                ("title", models.CharField(help_text="展示给选手的题目名称", max_length=255, verbose_name="题目标题")),
                (
                    "description",
                    models.TextField(blank=True, default="", help_text="完整题面描述，支持 Markdown", verbose_name="题目描述"),
                ),
                (
                    "category",
                    models.PositiveSmallIntegerField(
                        choices=[
                            (1, "Misc"),
                            (2, "Web"),
                            (3, "Pwn"),
                            (4, "Crypto"),
                            (5, "Reverse"),
                            (6, "Forensics"),
                        ],
                        default=1,
                        help_text="题目分类编号",
                        verbose_name="分类",
                    ),
                ),
                (
                    "tags",
                    models.JSONField(blank=True, default=list, help_text="按提交顺序保存的标签列表", verbose_name="标签"),
                ),
                (
                    "is_public",
                    models.BooleanField(default=False, help_text="公开题目可被比赛引用与展示", verbose_name="是否公开"),
                ),
                (
                    "is_dynamic",
                    models.BooleanField(
                        default=False, help_text="动态题需要运行环境并由检查器生成环境变量", verbose_name="动态题"
                    ),
                ),
                (
                    "has_attachment",
                    models.BooleanField(default=False, help_text="是否向选手提供附件下载", verbose_name="带附件"),
                ),
                (
                    "env",
                    models.JSONField(blank=True, help_text="动态环境模板；为空表示未配置", null=True, verbose_name="运行环境"),
                ),
                (
                    "checker",
                    models.TextField(blank=True, help_text="自定义检查器源码；为空表示未配置", null=True, verbose_name="检查器脚本"),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="创建时间")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="更新时间")),
                (
                    "deleted_at",
                    models.DateTimeField(blank=True, db_index=True, null=True, verbose_name="删除时间"),
                ),
            ],
            options={
                "verbose_name": "题目",
                "verbose_name_plural": "题目",
                "ordering": ["-created_at"],
            },
        ),
    ]
