"""共享 fixture：记录调用的 fake 命令执行器 + 指向 tmp_path 的配置

FakeExecutor 不启动任何子进程:
  - run() 记录调用，可按 label 注入副作用（hooks）或失败（fail_on）
  - probe() 按程序名返回预设退出码，值可以是 int、异常或 callable(env)
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

import pytest

from mmsetup.core.config import Config, reset_config
from mmsetup.core.exceptions import CommandFailedError
from mmsetup.core.models import CommandResult, OutputMode
from mmsetup.utils.shell import ProcessEnv


@dataclass
class RecordedCall:
    label: str
    args: list[str]
    mode: OutputMode
    cwd: str | None


class FakeExecutor:
    def __init__(self) -> None:
        self.calls: list[RecordedCall] = []
        self.probes: list[list[str]] = []
        self.hooks: dict[str, Callable[[list[str]], None]] = {}
        self.fail_on: dict[str, int] = {}
        self.probe_results: dict[str, Any] = {}

    def run(self, args, *, label, mode=OutputMode.QUIET, env=None, cwd=None):
        argv = [str(a) for a in args]
        self.calls.append(RecordedCall(label, argv, mode, str(cwd) if cwd else None))
        hook = self.hooks.get(label)
        if hook is not None:
            hook(argv)
        if label in self.fail_on:
            raise CommandFailedError(label, self.fail_on[label])
        return CommandResult(returncode=0)

    def probe(self, args, *, env=None):
        argv = [str(a) for a in args]
        self.probes.append(argv)
        result = self.probe_results.get(Path(argv[0]).name, 0)
        if isinstance(result, Exception):
            raise result
        if callable(result):
            return result(env)
        return result

    @property
    def labels(self) -> list[str]:
        return [c.label for c in self.calls]

    def call(self, label: str) -> RecordedCall:
        return next(c for c in self.calls if c.label == label)


@pytest.fixture()
def fake_executor() -> FakeExecutor:
    return FakeExecutor()


def produce_wheel(argv: list[str]) -> None:
    """模拟 pip wheel: 按检出目录名生成对应版本的 wheel"""
    versions = {".mmcv": ("mmcv", "2.1.0"), ".mmaction2": ("mmaction2", "1.2.0"),
                ".mmengine": ("mmengine", "0.10.7")}
    name, version = versions[Path(argv[5]).name]
    wheel_dir = Path(argv[argv.index("--wheel-dir") + 1])
    (wheel_dir / f"{name}-{version}-py3-none-any.whl").touch()


def clone_with_sources(argv: list[str]) -> None:
    dest = Path(argv[-1])
    (dest / ".git").mkdir(parents=True)
    (dest / "setup.py").write_text("def get_version():\n    a\n    b\n    c\n", encoding="utf-8")
    for rel in ("mmaction/apis/inference.py", "mmengine/runner/checkpoint.py"):
        (dest / rel).parent.mkdir(parents=True, exist_ok=True)
        (dest / rel).write_text("x = torch.load(f)\n", encoding="utf-8")


@pytest.fixture()
def source_hooks(fake_executor: FakeExecutor) -> FakeExecutor:
    """为三个包注册模拟 clone / pip wheel 的 hook"""
    for name in ("mmcv", "mmaction2", "mmengine"):
        fake_executor.hooks[f"clone {name}"] = clone_with_sources
        fake_executor.hooks[f"build {name} wheel"] = produce_wheel
    return fake_executor


@pytest.fixture()
def config(tmp_path: Path) -> Config:
    return Config(work_dir=str(tmp_path))


@pytest.fixture()
def process_env(tmp_path: Path) -> ProcessEnv:
    empty_bin = tmp_path / "empty_bin"
    empty_bin.mkdir()
    return ProcessEnv(base={"PATH": str(empty_bin), "HOME": str(tmp_path / "home")})


@pytest.fixture(autouse=True)
def _reset_global_config():
    yield
    reset_config()
