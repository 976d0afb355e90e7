"""服务容器：统一依赖注入

同一容器内共享一个 CommandExecutor 和一个 ProcessEnv，
toolchain 对 PATH 的调整因此对后续所有子进程可见。

用法:
    container = ServiceContainer(config, verbose=True)
    container.setup.run(reporter, purge=False)

    # 测试时注入 fake 执行器
    container = ServiceContainer(config, executor=FakeExecutor())
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from mmsetup.utils.shell import CommandExecutor, LocalExecutor, ProcessEnv

if TYPE_CHECKING:
    from mmsetup.core.config import Config
    from mmsetup.services.build_service import PackageBuilder
    from mmsetup.services.setup_service import SetupService
    from mmsetup.services.toolchain import Toolchain


class ServiceContainer:
    """懒加载服务容器"""

    def __init__(
        self,
        config: Config | None = None,
        *,
        verbose: bool = False,
        executor: CommandExecutor | None = None,
        env: ProcessEnv | None = None,
    ) -> None:
        if config is None:
            from mmsetup.core.config import get_config
            config = get_config()
        self._config = config
        self.executor: CommandExecutor = executor or LocalExecutor(verbose=verbose)
        self.env = env or ProcessEnv()
        self._instances: dict[str, object] = {}

    @property
    def config(self) -> Config:
        return self._config

    @property
    def toolchain(self) -> Toolchain:
        if "toolchain" not in self._instances:
            from mmsetup.services.toolchain import Toolchain
            self._instances["toolchain"] = Toolchain(
                self._config, self.executor, self.env,
            )
        return self._instances["toolchain"]  # type: ignore[return-value]

    @property
    def builder(self) -> PackageBuilder:
        if "builder" not in self._instances:
            from mmsetup.services.build_service import PackageBuilder
            self._instances["builder"] = PackageBuilder(
                self._config, self.executor, self.env,
            )
        return self._instances["builder"]  # type: ignore[return-value]

    @property
    def setup(self) -> SetupService:
        if "setup" not in self._instances:
            from mmsetup.services.setup_service import SetupService
            self._instances["setup"] = SetupService(
                self._config, self.executor, self.env,
                toolchain=self.toolchain, builder=self.builder,
            )
        return self._instances["setup"]  # type: ignore[return-value]
