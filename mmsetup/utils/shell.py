"""Shell 命令执行工具：统一子进程调用

通过 CommandExecutor 协议抽象子进程执行，方便测试替换。
两种输出策略:
  - QUIET:  捕获 stdout/stderr，仅在非零退出时完整转储到 stderr
  - STREAM: 子进程直接继承终端输出
verbose=True 时所有命令一律按 STREAM 执行，并在执行前打印命令标签。

PATH 调整通过 ProcessEnv 显式传入每次调用，不修改 os.environ。
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, Sequence

import click

from mmsetup.core.exceptions import CommandFailedError, SpawnError
from mmsetup.core.models import CommandResult, OutputMode

logger = logging.getLogger(__name__)


# =========================================================================
# 子进程环境
# =========================================================================

@dataclass
class ProcessEnv:
    """子进程环境变量：以当前进程环境为基线，叠加 PATH 前缀"""

    path_prefix: list[str] = field(default_factory=list)
    base: dict[str, str] | None = None

    def _base(self) -> dict[str, str]:
        return dict(os.environ if self.base is None else self.base)

    @property
    def path_entries(self) -> list[str]:
        existing = self._base().get("PATH", "")
        entries = [p for p in existing.split(os.pathsep) if p]
        return [*self.path_prefix, *entries]

    def prepend_path(self, directory: str | Path) -> bool:
        """把目录加到 PATH 最前面；目录不存在或已在 PATH 中则忽略"""
        d = Path(directory)
        if not d.is_dir():
            return False
        if str(d) in self.path_entries:
            return False
        self.path_prefix.insert(0, str(d))
        logger.info("PATH 已前置: %s", d)
        return True

    def as_environ(self) -> dict[str, str]:
        env = self._base()
        env["PATH"] = os.pathsep.join(self.path_entries)
        return env

    def command_exists(self, name: str) -> bool:
        """PATH 中是否存在同名的可执行文件"""
        for entry in self.path_entries:
            candidate = Path(entry) / name
            if candidate.is_file() and os.access(candidate, os.X_OK):
                return True
        return False


# =========================================================================
# 命令执行器协议
# =========================================================================

class CommandExecutor(Protocol):
    """命令执行器协议：抽象子进程调用

    测试时可注入 fake 实现，无需 patch subprocess。
    """

    def run(
        self,
        args: Sequence[str],
        *,
        label: str,
        mode: OutputMode = OutputMode.QUIET,
        env: ProcessEnv | None = None,
        cwd: str | Path | None = None,
    ) -> CommandResult:
        """执行命令，失败抛 ExecutionError 子类"""
        ...

    def probe(
        self,
        args: Sequence[str],
        *,
        env: ProcessEnv | None = None,
    ) -> int:
        """静默执行命令并返回退出码，无法启动时抛 SpawnError"""
        ...


# =========================================================================
# 默认实现: 本地子进程执行器
# =========================================================================

class LocalExecutor:
    """本地子进程执行器（默认实现）"""

    def __init__(self, verbose: bool = False) -> None:
        self.verbose = verbose

    def run(
        self,
        args: Sequence[str],
        *,
        label: str,
        mode: OutputMode = OutputMode.QUIET,
        env: ProcessEnv | None = None,
        cwd: str | Path | None = None,
    ) -> CommandResult:
        argv = [str(a) for a in args]
        environ = (env or ProcessEnv()).as_environ()
        stream = self.verbose or mode is OutputMode.STREAM

        if self.verbose:
            click.secho(f"$ {label}: {shlex.join(argv)}", fg="cyan", dim=True)
        logger.info("  %s: %s", label, shlex.join(argv))

        start = time.monotonic()
        try:
            if stream:
                proc = subprocess.run(
                    argv,
                    stdin=subprocess.DEVNULL,
                    env=environ,
                    cwd=cwd,
                    check=False,
                )
            else:
                proc = subprocess.run(
                    argv,
                    stdin=subprocess.DEVNULL,
                    capture_output=True,
                    env=environ,
                    cwd=cwd,
                    check=False,
                )
        except OSError as e:
            raise SpawnError(label) from e
        duration = time.monotonic() - start

        if proc.returncode == 0:
            return CommandResult(returncode=0, duration=duration)

        result = CommandResult(
            returncode=proc.returncode,
            duration=duration,
            stdout=proc.stdout or b"",
            stderr=proc.stderr or b"",
        )
        if not stream:
            dump_output(label, result)
        logger.error("%s 失败 (rc=%d, %.1fs)", label, proc.returncode, duration)
        raise CommandFailedError(label, proc.returncode)

    def probe(
        self,
        args: Sequence[str],
        *,
        env: ProcessEnv | None = None,
    ) -> int:
        argv = [str(a) for a in args]
        try:
            proc = subprocess.run(
                argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                env=(env or ProcessEnv()).as_environ(),
                check=False,
            )
        except OSError as e:
            raise SpawnError(shlex.join(argv)) from e
        return proc.returncode


def dump_output(label: str, result: CommandResult) -> None:
    """把捕获的 stdout/stderr 分段转储到 stderr"""
    click.echo(err=True)
    click.echo(
        click.style("Command failed:", fg="red", bold=True) + f" {label}",
        err=True,
    )
    if result.stdout:
        click.secho("--- stdout ---", fg="yellow", err=True)
        click.echo(result.stdout.decode("utf-8", errors="replace"), err=True)
    if result.stderr:
        click.secho("--- stderr ---", fg="yellow", err=True)
        click.echo(result.stderr.decode("utf-8", errors="replace"), err=True)
