"""步骤进度渲染

两种 StepReporter 实现:
  LogReporter      verbose 模式，每个事件输出一行静态日志
  SpinnerReporter  默认模式，步骤运行期间显示单行动画，结束后落一行状态
"""

from __future__ import annotations

from typing import Any

import click
from rich.console import Console
from rich.progress import Progress, ProgressColumn, TextColumn, TimeElapsedColumn
from rich.text import Text

from mmsetup.core.models import Step
from mmsetup.core.pipeline import format_elapsed

OK_GLYPH = "✔"
FAIL_GLYPH = "✖"
START_GLYPH = "→"

BAR_FRAMES = ("▁", "▂", "▃", "▄", "▅", "▆", "▇", "█", "▇", "▆", "▅", "▄", "▃", "▂")


def _counter(index: int, total: int) -> str:
    return f"[{index}/{total}]"


class LogReporter:
    """静态行输出（verbose 模式）"""

    def close(self) -> None:
        pass

    def on_start(self, index: int, total: int, step: Step) -> None:
        click.echo(
            f"{click.style(START_GLYPH, fg='cyan', bold=True)} "
            f"{_counter(index, total)} {click.style(step.name, fg='cyan')}"
        )

    def on_success(self, index: int, total: int, step: Step, elapsed: float) -> None:
        self._finish(OK_GLYPH, "green", index, total, step, elapsed)

    def on_failure(self, index: int, total: int, step: Step, elapsed: float) -> None:
        self._finish(FAIL_GLYPH, "red", index, total, step, elapsed)

    @staticmethod
    def _finish(glyph: str, color: str, index: int, total: int,
                step: Step, elapsed: float) -> None:
        click.echo(
            f"{click.style(glyph, fg=color, bold=True)} "
            f"{_counter(index, total)} {click.style(step.name, fg=color)} "
            f"{click.style(f'({format_elapsed(elapsed)})', dim=True)}"
        )


class BarSpinnerColumn(ProgressColumn):
    """柱状起伏的 spinner，每次刷新前进一帧"""

    def __init__(self, frames: tuple[str, ...] = BAR_FRAMES) -> None:
        super().__init__()
        self.frames = frames
        self._index = 0

    def render(self, task: Any) -> Text:
        char = self.frames[self._index % len(self.frames)]
        self._index += 1
        return Text(char, style="bold cyan")


class SpinnerReporter:
    """单行动画进度（默认模式）

    streams=True 的步骤会直接向终端输出，启动时不挂动画，只打印一行开始标记。
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(highlight=False, soft_wrap=False)
        self._progress: Progress | None = None

    def _create_progress(self) -> Progress:
        return Progress(
            BarSpinnerColumn(),
            TextColumn("{task.fields[counter]}", style="dim", markup=False),
            TextColumn("{task.description}", markup=False),
            TimeElapsedColumn(),
            console=self.console,
            transient=True,
            refresh_per_second=11,
        )

    def on_start(self, index: int, total: int, step: Step) -> None:
        if step.streams:
            self.console.print(Text.assemble(
                (START_GLYPH, "bold cyan"), " ",
                (_counter(index, total), "dim"), " ", (step.name, "cyan"),
            ))
            return
        self._progress = self._create_progress()
        self._progress.add_task(step.name, total=None, counter=_counter(index, total))
        self._progress.start()

    def on_success(self, index: int, total: int, step: Step, elapsed: float) -> None:
        self._finish(OK_GLYPH, "green", index, total, step, elapsed)

    def on_failure(self, index: int, total: int, step: Step, elapsed: float) -> None:
        self._finish(FAIL_GLYPH, "red", index, total, step, elapsed)

    def close(self) -> None:
        """停止仍在运行的动画并恢复光标（中断时由 CLI 调用）"""
        if self._progress is not None:
            self._progress.stop()
            self._progress = None

    def _finish(self, glyph: str, color: str, index: int, total: int,
                step: Step, elapsed: float) -> None:
        self.close()
        self.console.print(Text.assemble(
            (glyph, f"bold {color}"), " ",
            (_counter(index, total), "dim"), " ", (step.name, color), " ",
            (f"({format_elapsed(elapsed)})", "dim"),
        ))
