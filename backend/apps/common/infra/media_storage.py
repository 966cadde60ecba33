"""
媒体文件存储（本地磁盘）

- 以 “目录路径 + 文件名” 为键保存二进制附件，根目录取 settings.MEDIA_ROOT
- 首次使用时若根目录不存在，则创建并拷贝随代码发布的默认资源（embed/ 目录）
- 路径统一清洗，防止通过 ../ 逃逸到根目录之外
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import List, Optional, Tuple

from django.conf import settings

from apps.common.exceptions import MediaNotFoundError, StorageUnavailableError
from apps.common.infra.logger import get_logger, logger_extra

logger = get_logger(__name__)

#: 随代码发布的默认资源目录，init() 时整体拷贝到根目录
EMBED_DIR = Path(__file__).resolve().parent / "embed"


class MediaStorage:
    """
    本地媒体存储
    - 显式构造、显式 init()；读写接口在首次调用时也会兜底执行 init()
    - 文件系统异常统一转换为 StorageUnavailableError，由全局异常处理器按 503 返回
    """

    def __init__(self, root: str | Path | None = None, *, embed_dir: str | Path | None = None):
        media_root = root or getattr(settings, "MEDIA_ROOT", None) or "media"
        self.root = Path(media_root).resolve()
        self.embed_dir = Path(embed_dir) if embed_dir else EMBED_DIR
        self._initialized = False

    # ------------------------
    # 生命周期
    # ------------------------

    def init(self) -> bool:
        """
        根目录不存在时创建并写入默认资源；已存在则保持原样
        返回是否执行了引导拷贝
        """
        if self.root.exists():
            self._initialized = True
            return False
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            copied = 0
            if self.embed_dir.is_dir():
                for source in sorted(self.embed_dir.rglob("*")):
                    if not source.is_file():
                        continue
                    target = self.root / source.relative_to(self.embed_dir)
                    target.parent.mkdir(parents=True, exist_ok=True)
                    shutil.copyfile(source, target)
                    copied += 1
        except OSError as exc:
            logger.exception("媒体目录初始化失败", extra=logger_extra({"root": str(self.root)}))
            raise StorageUnavailableError() from exc
        logger.info("媒体目录已初始化", extra=logger_extra({"root": str(self.root), "copied": copied}))
        self._initialized = True
        return True

    def _ensure_ready(self) -> None:
        if not self._initialized:
            self.init()

    # ------------------------
    # 读写接口
    # ------------------------

    def get(self, path: str, filename: str) -> bytes:
        """读取文件内容，不存在时抛 MediaNotFoundError"""
        self._ensure_ready()
        target = self._file_path(path, filename)
        try:
            return target.read_bytes()
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as exc:
            raise MediaNotFoundError() from exc
        except OSError as exc:
            logger.exception("读取媒体文件失败", extra=logger_extra({"target": str(target)}))
            raise StorageUnavailableError() from exc

    def save(self, path: str, filename: str, data: bytes) -> None:
        """写入文件（覆盖同名文件），自动创建父目录"""
        self._ensure_ready()
        target = self._file_path(path, filename)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as exc:
            logger.exception("写入媒体文件失败", extra=logger_extra({"target": str(target)}))
            raise StorageUnavailableError() from exc

    def delete(self, path: str, filename: str) -> None:
        """删除单个文件，文件不存在时视为成功"""
        self._ensure_ready()
        target = self._file_path(path, filename)
        try:
            target.unlink(missing_ok=True)
        except OSError as exc:
            logger.exception("删除媒体文件失败", extra=logger_extra({"target": str(target)}))
            raise StorageUnavailableError() from exc

    def scan_dir(self, path: str) -> List[Tuple[str, int]]:
        """
        列出目录下的文件（不含子目录），返回 [(文件名, 字节数)]，按文件名排序；
        目录不存在时返回空列表
        """
        self._ensure_ready()
        directory = self._dir_path(path)
        if not directory.is_dir():
            return []
        try:
            return sorted(
                (entry.name, entry.stat().st_size)
                for entry in directory.iterdir()
                if entry.is_file()
            )
        except OSError as exc:
            logger.exception("扫描媒体目录失败", extra=logger_extra({"target": str(directory)}))
            raise StorageUnavailableError() from exc

    def delete_dir(self, path: str) -> None:
        """递归删除目录，不存在时视为成功；不允许删除根目录本身"""
        self._ensure_ready()
        directory = self._dir_path(path)
        if directory == self.root or not directory.exists():
            return
        try:
            shutil.rmtree(directory)
        except OSError as exc:
            logger.exception("删除媒体目录失败", extra=logger_extra({"target": str(directory)}))
            raise StorageUnavailableError() from exc

    # ------------------------
    # 路径处理
    # ------------------------

    def _dir_path(self, path: str) -> Path:
        subdir = safe_subdir(path)
        return self.root / subdir if subdir else self.root

    def _file_path(self, path: str, filename: str) -> Path:
        name = safe_filename(filename)
        if not name:
            raise MediaNotFoundError(message="文件名不合法")
        return self._dir_path(path) / name


def safe_filename(filename: str) -> str:
    """去除路径片段，只保留文件名本身；非法名称返回空串"""
    name = Path(str(filename or "").replace("\\", "/")).name
    if name in {"", ".", ".."}:
        return ""
    return name[-200:]


def safe_subdir(subdir: Optional[str]) -> str:
    """清洗子目录，剔除 .. / . / 空白片段，防止逃逸到媒体根目录之外"""
    if not subdir:
        return ""
    parts = [
        part
        for part in str(subdir).replace("\\", "/").split("/")
        if part and part not in {".", ".."}
    ]
    return "/".join(parts)


_default_storage: Optional[MediaStorage] = None


def get_media_storage() -> MediaStorage:
    """
    返回进程级默认存储；MEDIA_ROOT 变化（如测试 override_settings）时重建实例
    """
    global _default_storage
    root = Path(getattr(settings, "MEDIA_ROOT", None) or "media").resolve()
    if _default_storage is None or _default_storage.root != root:
        _default_storage = MediaStorage(root)
    return _default_storage
