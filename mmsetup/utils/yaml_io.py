"""YAML 配置读取

只接受顶层为映射的文档；文件缺失或为空视为没有配置。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from mmsetup.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

# mmsetup.yml 只放少量目录/工具链参数，超过这个大小基本是指错了文件
MAX_CONFIG_BYTES = 64 * 1024


def read_mapping(path: str | Path) -> dict[str, Any]:
    """读取 YAML 映射

    返回:
        dict: 顶层映射；文件不存在或内容为空时为 {}

    异常:
        ConfigError: 文件过大、无法读取、YAML 语法错误或顶层不是映射
    """
    p = Path(path)
    if not p.is_file():
        logger.info("未找到配置文件 %s，使用默认值", p)
        return {}

    try:
        size = p.stat().st_size
        if size > MAX_CONFIG_BYTES:
            raise ConfigError(f"配置文件无效: {p} 过大 ({size} 字节)")
        text = p.read_text(encoding="utf-8")
        data = yaml.safe_load(text)
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"配置文件无效: {p}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"配置文件无效: {p} 顶层应为映射，实际为 {type(data).__name__}"
        )
    return data
