"""集中配置管理

目录布局和工具链参数的统一入口，默认值即原始安装脚本中的常量。
支持从 YAML 文件加载 + 编程式覆盖；固定版本号不在此处配置。
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path

from mmsetup.core.exceptions import ConfigError
from mmsetup.utils.yaml_io import read_mapping

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "mmsetup.yml"

# YAML 会把未加引号的 3.10 读成浮点 3.1，这些字段只接受字符串
STR_FIELDS = ("work_dir", "wheelhouse", "venv_dir", "python_version", "uv_install_url")


@dataclass
class Config:
    """安装流程全局配置"""

    # 目录（相对 work_dir）
    work_dir: str = "."
    wheelhouse: str = ".wheelhouse"
    venv_dir: str = ".venv"

    # 工具链
    python_version: str = "3.12"
    pip_tooling: list[str] = field(
        default_factory=lambda: ["pip", "setuptools<81", "wheel"],
    )
    uv_install_url: str = "https://astral.sh/uv/install.sh"

    # 自定义扩展 (放不到字段里的配置项)
    extra: dict = field(default_factory=dict)

    @classmethod
    def from_file(cls, path: str = DEFAULT_CONFIG_FILE) -> Config:
        """从 YAML 文件加载配置，不存在则返回默认"""
        data = read_mapping(path)
        if not data:
            return cls()
        known = {f.name for f in cls.__dataclass_fields__.values()} - {"extra"}
        matched = {k: v for k, v in data.items() if k in known}
        extra = {k: v for k, v in data.items() if k not in known}
        for name in STR_FIELDS:
            if name in matched and not isinstance(matched[name], str):
                raise ConfigError(
                    f"{name} 必须是字符串 (实际为 {type(matched[name]).__name__}: "
                    f"{matched[name]!r})，数字形式的值请加引号"
                )
        if "pip_tooling" in matched:
            tooling = matched["pip_tooling"]
            if not isinstance(tooling, list):
                raise ConfigError("pip_tooling 必须是列表")
            if not all(isinstance(t, str) for t in tooling):
                raise ConfigError("pip_tooling 的每一项必须是字符串")
        cfg = cls(**matched)
        cfg.extra = extra
        return cfg

    def to_dict(self) -> dict:
        return asdict(self)

    # ---- 派生路径 ----

    @property
    def root(self) -> Path:
        return Path(self.work_dir).resolve()

    @property
    def wheelhouse_path(self) -> Path:
        return self.root / self.wheelhouse

    @property
    def venv_path(self) -> Path:
        return self.root / self.venv_dir

    @property
    def python_bin(self) -> Path:
        return self.venv_path / "bin" / "python"

    def checkout_path(self, checkout_dir: str) -> Path:
        return self.root / checkout_dir


# 全局单例，首次 import 时不加载文件；由 CLI 入口显式初始化
_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config()
    return _current


def init_config(path: str = DEFAULT_CONFIG_FILE) -> Config:
    """从文件初始化全局配置"""
    global _current  # noqa: PLW0603
    _current = Config.from_file(path)
    logger.info("配置已加载: %s %s", path, _current.to_dict())
    return _current


def reset_config() -> None:
    """恢复未初始化状态（测试用）"""
    global _current  # noqa: PLW0603
    _current = None
