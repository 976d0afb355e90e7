"""文件系统工具：目录删除与原子写入

所有失败统一转换为 FileSystemError，并携带涉及的路径。
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path

from mmsetup.core.exceptions import FileSystemError

logger = logging.getLogger(__name__)


def ensure_dir(path: str | Path) -> Path:
    """创建目录（含父目录），已存在则跳过"""
    p = Path(path)
    try:
        p.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FileSystemError(f"failed to create directory: {p}", path=str(p)) from e
    return p


def remove_dir_if_exists(path: str | Path) -> bool:
    """递归删除目录，不存在时什么也不做

    返回:
        bool: 是否实际删除了目录
    """
    p = Path(path)
    if not p.exists():
        return False
    try:
        shutil.rmtree(p)
    except OSError as e:
        raise FileSystemError(f"failed to remove directory: {p}", path=str(p)) from e
    logger.info("已删除目录: %s", p)
    return True


def read_text(path: str | Path) -> str:
    """读取整个文本文件，不做换行符转换"""
    p = Path(path)
    try:
        with open(p, encoding="utf-8", newline="") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise FileSystemError(f"failed reading {p}", path=str(p)) from e


def atomic_write(path: str | Path, content: str) -> None:
    """原子写入文件：先写临时文件再 rename，防止中途崩溃导致损坏

    实现:
        1. 在同目录创建临时文件
        2. 写入内容并保留原文件权限位
        3. os.replace 原子替换目标文件
        4. 如果失败，清理临时文件
    """
    p = Path(path)
    try:
        mode = p.stat().st_mode & 0o777 if p.exists() else None
        fd, tmp = tempfile.mkstemp(dir=str(p.parent), suffix=".tmp")
    except OSError as e:
        raise FileSystemError(f"failed writing {p}", path=str(p)) from e
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        if mode is not None:
            os.chmod(tmp, mode)
        os.replace(tmp, str(p))
    except OSError as e:
        try:
            os.unlink(tmp)
        except OSError:
            # 临时文件清理失败不影响原异常抛出
            pass
        raise FileSystemError(f"failed writing {p}", path=str(p)) from e
