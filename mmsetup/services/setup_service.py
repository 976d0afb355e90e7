"""安装编排：组装并执行完整的步骤流水线

步骤顺序:
  [purge]                          仅 --purge 时插入，删除 wheelhouse 和全部检出目录
  1. Ensuring wheelhouse directory
  2. Ensuring uv availability
  3. Ensuring Python virtual environment
  4. Ensuring pip tooling
  5-7. Building/installing mmcv / mmaction2 / mmengine
  8. Running uv sync               无论是否 verbose 都实时输出
"""

from __future__ import annotations

import logging
from pathlib import Path

from mmsetup.core.config import Config
from mmsetup.core.models import BuildResult, OutputMode, PackageSpec, PipelineReport
from mmsetup.core.packages import PACKAGES
from mmsetup.core.pipeline import StepPipeline, StepReporter
from mmsetup.services.build_service import PackageBuilder
from mmsetup.services.toolchain import Toolchain
from mmsetup.utils.fs import ensure_dir, remove_dir_if_exists
from mmsetup.utils.shell import CommandExecutor, ProcessEnv

logger = logging.getLogger(__name__)


class SetupService:
    """provisioning 流程入口"""

    def __init__(
        self,
        config: Config,
        executor: CommandExecutor,
        env: ProcessEnv,
        toolchain: Toolchain,
        builder: PackageBuilder,
        packages: tuple[PackageSpec, ...] = PACKAGES,
    ) -> None:
        self.config = config
        self.executor = executor
        self.env = env
        self.toolchain = toolchain
        self.builder = builder
        self.packages = packages
        self.results: dict[str, BuildResult] = {}

    def managed_dirs(self) -> list[Path]:
        """--purge 删除的目录: wheelhouse + 各包检出目录"""
        return [
            self.config.wheelhouse_path,
            *(self.config.checkout_path(p.checkout_dir) for p in self.packages),
        ]

    def purge(self) -> None:
        removed = sum(1 for d in self.managed_dirs() if remove_dir_if_exists(d))
        logger.info("purge 完成，删除 %d 个目录", removed)

    def ensure_wheelhouse(self) -> None:
        ensure_dir(self.config.wheelhouse_path)

    def build_package(self, spec: PackageSpec) -> None:
        self.results[spec.name] = self.builder.build_and_install(spec)

    def sync(self) -> None:
        self.executor.run(
            ["uv", "sync"], label="uv sync", mode=OutputMode.STREAM,
            env=self.env, cwd=self.config.root,
        )

    def build_pipeline(self, reporter: StepReporter | None = None, *,
                       purge: bool = False) -> StepPipeline:
        """按固定顺序组装流水线"""
        pipeline = StepPipeline(reporter)
        pipeline.add("Ensuring wheelhouse directory", self.ensure_wheelhouse)
        pipeline.add("Ensuring uv availability", self.toolchain.ensure_uv)
        pipeline.add("Ensuring Python virtual environment", self.toolchain.ensure_venv)
        pipeline.add("Ensuring pip tooling", self.toolchain.ensure_pip_tooling)
        for spec in self.packages:
            pipeline.add(
                f"Building/installing {spec.name}",
                lambda spec=spec: self.build_package(spec),
            )
        pipeline.add("Running uv sync", self.sync, streams=True)
        if purge:
            pipeline.insert_first("Purging mmaction cache directories", self.purge)
        return pipeline

    def run(self, reporter: StepReporter | None = None, *,
            purge: bool = False) -> PipelineReport:
        """执行完整流程，任一步失败抛 StepFailedError"""
        self.results = {}
        return self.build_pipeline(reporter, purge=purge).run()
