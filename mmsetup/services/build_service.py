"""构建服务：单个受管包的「检出 → 打补丁 → 构建 wheel → 安装」

状态机（任一步失败即终止，无自动重试）:
  1. 检查产物: wheelhouse 已有 {name}-{version}-*.whl 则直接跳到安装
  2. 清理: 删除旧检出目录
  3. 克隆: 浅克隆固定 tag
  4. 去元数据: 删除 .git
  5. 打补丁: 应用包定义中的源码补丁
  6. 构建: pip wheel --no-deps --no-build-isolation
  7. 安装: uv pip install --no-index --find-links wheelhouse，只认本地产物

产物是否存在完全基于文件系统，跨进程重启同样成立。
"""

from __future__ import annotations

import logging
import time
from pathlib import Path

from mmsetup.core.artifacts import find_wheels, wheel_exists
from mmsetup.core.config import Config
from mmsetup.core.models import BuildResult, PackageSpec
from mmsetup.core.patcher import apply_patches
from mmsetup.services.repo_source import GitSource
from mmsetup.utils.fs import remove_dir_if_exists
from mmsetup.utils.shell import CommandExecutor, ProcessEnv

logger = logging.getLogger(__name__)


class PackageBuilder:
    """受管包构建/安装"""

    def __init__(
        self,
        config: Config,
        executor: CommandExecutor,
        env: ProcessEnv,
        git: GitSource | None = None,
    ) -> None:
        self.config = config
        self.executor = executor
        self.env = env
        self.git = git or GitSource(executor, env)

    def checkout_path(self, spec: PackageSpec) -> Path:
        return self.config.checkout_path(spec.checkout_dir)

    def is_built(self, spec: PackageSpec) -> bool:
        """wheelhouse 中是否已有该版本的 wheel"""
        return wheel_exists(self.config.wheelhouse_path, spec.name, spec.version)

    def build(self, spec: PackageSpec) -> int:
        """重新检出、打补丁并构建 wheel，返回被修改的文件数"""
        checkout = self.checkout_path(spec)
        remove_dir_if_exists(checkout)
        self.git.clone(spec, checkout)
        self.git.strip_metadata(checkout)
        patched = apply_patches(spec, checkout)
        self.executor.run(
            [str(self.config.python_bin), "-m", "pip", "wheel", "-v", str(checkout),
             "--no-deps", "--no-build-isolation",
             "--wheel-dir", str(self.config.wheelhouse_path)],
            label=f"build {spec.name} wheel",
            env=self.env,
        )
        return patched

    def install(self, spec: PackageSpec) -> None:
        """从 wheelhouse 安装固定版本，禁止访问远程索引"""
        self.executor.run(
            ["uv", "pip", "install", "-v",
             "--python", str(self.config.python_bin),
             "--no-deps", "--no-index",
             "--find-links", str(self.config.wheelhouse_path),
             spec.requirement],
            label=f"install {spec.name}",
            env=self.env,
        )

    def build_and_install(self, spec: PackageSpec) -> BuildResult:
        """产物存在则只安装，否则先构建再安装"""
        start = time.monotonic()
        if self.is_built(spec):
            logger.info("构建产物命中: %s==%s，跳过构建", spec.name, spec.version)
            status, patched = "cached", 0
        else:
            status, patched = "built", self.build(spec)
        self.install(spec)
        wheels = find_wheels(self.config.wheelhouse_path, spec.name, spec.version)
        duration = time.monotonic() - start
        logger.info("%s==%s 安装完成 (%s, %.1fs)", spec.name, spec.version, status, duration)
        return BuildResult(
            spec=spec, status=status, wheels=[w.name for w in wheels],
            duration=duration, patched_files=patched,
        )
