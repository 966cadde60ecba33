from __future__ import annotations

from django.core.management.base import BaseCommand

from apps.common.infra.media_storage import MediaStorage


class Command(BaseCommand):
    help = "初始化媒体目录：根目录不存在时创建并写入默认资源，已存在则跳过"

    def add_arguments(self, parser):
        parser.add_argument("--root", default=None, help="媒体根目录，默认取 settings.MEDIA_ROOT")

    def handle(self, *args, **options):
        storage = MediaStorage(options.get("root"))
        if storage.init():
            self.stdout.write(self.style.SUCCESS(f"媒体目录已创建：{storage.root}"))
        else:
            self.stdout.write(self.style.WARNING(f"媒体目录已存在，跳过初始化：{storage.root}"))
