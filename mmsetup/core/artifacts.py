"""构建产物探测

wheel 是否已存在只看文件名：``{name}-{version}-*.whl``。
不做校验和或内容检查，存在即视为可用。
"""

from __future__ import annotations

import glob
import logging
import os
import re
from pathlib import Path

from mmsetup.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

_GLOB_META_RE = re.compile(r"[*?\[\]]")


def wheel_pattern(wheelhouse: str | Path, name: str, version: str) -> str:
    """构造 wheel 匹配模式，包名/版本中出现 glob 元字符视为配置错误"""
    for part in (name, version):
        if not part or _GLOB_META_RE.search(part):
            raise ConfigError(f"invalid glob pattern: {name}-{version}-*.whl")
    return os.path.join(glob.escape(str(wheelhouse)), f"{name}-{version}-*.whl")


def find_wheels(wheelhouse: str | Path, name: str, version: str) -> list[Path]:
    """列出 wheelhouse 中匹配 name+version 的所有 wheel"""
    pattern = wheel_pattern(wheelhouse, name, version)
    return sorted(Path(p) for p in glob.glob(pattern))


def wheel_exists(wheelhouse: str | Path, name: str, version: str) -> bool:
    """wheelhouse 中是否至少有一个匹配 name+version 的 wheel"""
    pattern = wheel_pattern(wheelhouse, name, version)
    hit = next(glob.iglob(pattern), None)
    if hit is not None:
        logger.info("已有构建产物: %s", hit)
    return hit is not None
