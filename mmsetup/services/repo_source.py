"""Git 源码获取

按固定 tag 做浅克隆（--depth 1 --branch），随后删除 .git 目录，
避免构建工具把检出目录当作嵌套仓库处理。
"""

from __future__ import annotations

import logging
from pathlib import Path

from mmsetup.core.models import PackageSpec
from mmsetup.utils.fs import remove_dir_if_exists
from mmsetup.utils.shell import CommandExecutor, ProcessEnv

logger = logging.getLogger(__name__)


class GitSource:
    """固定版本的 Git 仓库来源"""

    def __init__(self, executor: CommandExecutor, env: ProcessEnv) -> None:
        self.executor = executor
        self.env = env

    def clone(self, spec: PackageSpec, dest: Path) -> None:
        """浅克隆 spec.tag 到 dest（dest 必须不存在）"""
        self.executor.run(
            ["git", "clone", "--depth", "1", "--branch", spec.tag, spec.url, str(dest)],
            label=f"clone {spec.name}",
            env=self.env,
        )
        logger.info("Git 就绪: %s@%s -> %s", spec.name, spec.tag, dest)

    @staticmethod
    def strip_metadata(dest: Path) -> None:
        """删除检出目录中的 .git"""
        remove_dir_if_exists(dest / ".git")
