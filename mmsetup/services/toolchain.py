"""工具链准备：uv / 虚拟环境 / pip 工具

职责:
- 确认 uv 可用：先查 PATH，再查常见安装目录，最后通过官方脚本自动安装
- 创建虚拟环境（已存在则跳过）
- 确认虚拟环境内有 pip/setuptools/wheel（构建 wheel 需要）

新发现的可执行目录写入共享的 ProcessEnv，后续所有子进程自动可见。
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from mmsetup.core.config import Config
from mmsetup.core.exceptions import SpawnError, ToolchainError
from mmsetup.utils.shell import CommandExecutor, ProcessEnv

logger = logging.getLogger(__name__)


class Toolchain:
    """uv 与虚拟环境管理"""

    def __init__(
        self,
        config: Config,
        executor: CommandExecutor,
        env: ProcessEnv,
        home: str | None = None,
    ) -> None:
        self.config = config
        self.executor = executor
        self.env = env
        self.home = home if home is not None else os.environ.get("HOME", "")

    # ---- uv ----

    def uv_is_available(self) -> bool:
        try:
            return self.executor.probe(["uv", "--version"], env=self.env) == 0
        except SpawnError:
            return False

    def candidate_dirs(self) -> list[Path]:
        """uv 安装脚本可能的落点"""
        if not self.home:
            return []
        home = Path(self.home)
        return [home / ".local" / "bin", home / ".cargo" / "bin"]

    def _adopt_candidates(self) -> None:
        for d in self.candidate_dirs():
            if (d / "uv").exists():
                self.env.prepend_path(d)

    def install_uv(self) -> None:
        """通过官方安装脚本安装 uv（需要 curl 或 wget）"""
        url = self.config.uv_install_url
        if self.env.command_exists("curl"):
            script = f"curl -LsSf {url} | sh"
        elif self.env.command_exists("wget"):
            script = f"wget -qO- {url} | sh"
        else:
            raise ToolchainError(
                "uv is missing and cannot be auto-installed "
                "because neither curl nor wget is available"
            )
        self.executor.run(["sh", "-c", script], label="install uv", env=self.env)

    def ensure_uv(self) -> None:
        if self.uv_is_available():
            return

        for d in self.candidate_dirs():
            if (d / "uv").exists():
                self.env.prepend_path(d)
                if self.uv_is_available():
                    logger.info("使用已安装的 uv: %s", d)
                    return

        logger.info("uv 不可用，尝试自动安装")
        self.install_uv()
        self._adopt_candidates()
        if self.uv_is_available():
            return

        raise ToolchainError(
            "uv installation completed but `uv` is still not on PATH. "
            "Try sourcing your shell rc (for example `source ~/.bashrc` or "
            "`source ~/.zshrc`) or add ~/.local/bin to PATH"
        )

    # ---- 虚拟环境 ----

    def ensure_venv(self) -> None:
        if self.config.python_bin.exists():
            logger.info("虚拟环境已存在: %s", self.config.venv_path)
            return
        self.executor.run(
            ["uv", "venv", "--python", self.config.python_version,
             str(self.config.venv_path)],
            label="create virtual environment",
            env=self.env,
            cwd=self.config.root,
        )

    def ensure_pip_tooling(self) -> None:
        python = str(self.config.python_bin)
        if self.executor.probe([python, "-c", "import pip"], env=self.env) == 0:
            return
        self.executor.run(
            ["uv", "pip", "install", "--python", python, *self.config.pip_tooling],
            label="install pip tooling",
            env=self.env,
        )
