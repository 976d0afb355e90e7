"""步骤流水线

按顺序执行一组具名步骤，记录每步耗时并通过 StepReporter 上报生命周期事件。
遇到第一个失败立即停止，抛出携带步骤名的 StepFailedError（__cause__ 为原始异常）。
流水线本身不关心事件如何渲染。

用法:
    pipeline = StepPipeline(reporter)
    pipeline.add("Ensuring wheelhouse directory", ensure_wheelhouse)
    pipeline.add("Running uv sync", run_sync, streams=True)
    pipeline.run()
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Protocol

from mmsetup.core.exceptions import StepFailedError
from mmsetup.core.models import PipelineReport, Step, StepOutcome

logger = logging.getLogger(__name__)


def format_elapsed(seconds: float) -> str:
    """耗时格式化: 一分钟内 ``12.3s``，否则 ``2m 5s``"""
    if seconds < 60:
        return f"{seconds:.1f}s"
    whole = int(seconds)
    return f"{whole // 60}m {whole % 60}s"


class StepReporter(Protocol):
    """步骤生命周期事件接收方"""

    def on_start(self, index: int, total: int, step: Step) -> None:
        ...

    def on_success(self, index: int, total: int, step: Step, elapsed: float) -> None:
        ...

    def on_failure(self, index: int, total: int, step: Step, elapsed: float) -> None:
        ...


class NullReporter:
    """丢弃所有事件"""

    def on_start(self, index: int, total: int, step: Step) -> None:
        pass

    def on_success(self, index: int, total: int, step: Step, elapsed: float) -> None:
        pass

    def on_failure(self, index: int, total: int, step: Step, elapsed: float) -> None:
        pass


class StepPipeline:
    """顺序、失败即停的步骤执行器"""

    def __init__(
        self,
        reporter: StepReporter | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.reporter: StepReporter = reporter or NullReporter()
        self._clock = clock
        self._steps: list[Step] = []
        self.report = PipelineReport()

    @property
    def steps(self) -> list[Step]:
        return list(self._steps)

    def add(self, name: str, action: Callable[[], None], *, streams: bool = False) -> Step:
        """追加步骤"""
        step = Step(name=name, action=action, streams=streams)
        self._steps.append(step)
        return step

    def insert_first(self, name: str, action: Callable[[], None]) -> Step:
        """在最前面插入步骤（用于 purge）"""
        step = Step(name=name, action=action)
        self._steps.insert(0, step)
        return step

    def run(self) -> PipelineReport:
        """依次执行全部步骤，失败时抛 StepFailedError"""
        total = len(self._steps)
        self.report = PipelineReport()
        for index, step in enumerate(self._steps, start=1):
            self.reporter.on_start(index, total, step)
            started = self._clock()
            try:
                step.action()
            except Exception as e:
                elapsed = self._clock() - started
                self.report.outcomes.append(StepOutcome(
                    name=step.name, index=index, total=total,
                    elapsed=elapsed, success=False, error=str(e),
                ))
                self.reporter.on_failure(index, total, step, elapsed)
                logger.error("[%d/%d] %s 失败 (%s): %s",
                             index, total, step.name, format_elapsed(elapsed), e)
                raise StepFailedError(step.name, elapsed) from e
            elapsed = self._clock() - started
            self.report.outcomes.append(StepOutcome(
                name=step.name, index=index, total=total,
                elapsed=elapsed, success=True,
            ))
            self.reporter.on_success(index, total, step, elapsed)
            logger.info("[%d/%d] %s 完成 (%s)",
                        index, total, step.name, format_elapsed(elapsed))
        return self.report
