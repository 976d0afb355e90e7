"""CLI 集成测试：CliRunner + FakeExecutor，不启动真实子进程"""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

import mmsetup.cli as cli_module
from mmsetup import __version__
from mmsetup.cli import main
from mmsetup.cli.reporters import SpinnerReporter
from mmsetup.core.models import Step
from mmsetup.services.container import ServiceContainer
from mmsetup.utils.logger import reset_logging


@pytest.fixture(autouse=True)
def _clean_logging():
    yield
    reset_logging()


@pytest.fixture()
def config_file(tmp_path: Path) -> Path:
    f = tmp_path / "mmsetup.yml"
    f.write_text(f"work_dir: {tmp_path}\n", encoding="utf-8")
    return f


@pytest.fixture()
def wired(monkeypatch, fake_executor, process_env, source_hooks):
    """把 CLI 创建的容器替换为注入 FakeExecutor 的版本"""
    created: list[ServiceContainer] = []

    def factory(config, *, verbose=False):
        c = ServiceContainer(config, verbose=verbose, executor=fake_executor, env=process_env)
        created.append(c)
        return c

    monkeypatch.setattr(cli_module, "ServiceContainer", factory)
    return created


def invoke(*args: str):
    return CliRunner().invoke(main, list(args))


class TestHelpAndVersion:
    def test_help(self) -> None:
        result = invoke("--help")
        assert result.exit_code == 0
        assert "--purge" in result.output
        assert "--debug" in result.output

    def test_version(self) -> None:
        result = invoke("--version")
        assert result.exit_code == 0
        assert __version__ in result.output


class TestSuccessfulRun:
    def test_quiet_mode(self, wired, config_file) -> None:
        result = invoke("--config", str(config_file))
        assert result.exit_code == 0, result.output
        assert "Debug output: disabled" in result.output
        assert "✔ [1/8] Ensuring wheelhouse directory" in result.output
        assert "→ [8/8] Running uv sync" in result.output
        assert "✔ Setup completed successfully." in result.output

    def test_verbose_mode(self, wired, config_file) -> None:
        result = invoke("--verbose", "--config", str(config_file))
        assert result.exit_code == 0, result.output
        assert "Debug output: enabled" in result.output
        assert "→ [5/8] Building/installing mmcv" in result.output
        assert len(wired) == 1

    def test_debug_passes_verbose(self, monkeypatch, config_file) -> None:
        seen: dict[str, bool] = {}

        class Recorder:
            def __init__(self, config, *, verbose=False):
                seen["verbose"] = verbose
                self.setup = self

            def run(self, reporter, *, purge=False):
                seen["purge"] = purge

        monkeypatch.setattr(cli_module, "ServiceContainer", Recorder)
        result = invoke("--debug", "--purge", "--config", str(config_file))
        assert result.exit_code == 0
        assert seen == {"verbose": True, "purge": True}

    def test_purge_has_nine_steps(self, wired, config_file) -> None:
        result = invoke("--purge", "--config", str(config_file))
        assert result.exit_code == 0, result.output
        assert "[1/9] Purging mmaction cache directories" in result.output
        assert "[9/9] Running uv sync" in result.output


class TestFailures:
    def test_step_failure_exit_code(self, wired, config_file, fake_executor) -> None:
        fake_executor.fail_on["clone mmcv"] = 128
        result = invoke("--config", str(config_file))
        assert result.exit_code == 1
        assert "✖ [5/8] Building/installing mmcv" in result.output
        assert (
            "Error: step failed: Building/installing mmcv: "
            "command failed (clone mmcv) with status 128"
        ) in result.output
        assert "Setup completed successfully" not in result.output

    def test_invalid_config(self, tmp_path: Path) -> None:
        bad = tmp_path / "bad.yml"
        bad.write_text("work_dir: [\n", encoding="utf-8")
        result = invoke("--config", str(bad))
        assert result.exit_code == 1
        assert "Error: 配置文件无效" in result.output

    def test_keyboard_interrupt(self, monkeypatch, config_file) -> None:
        seen: list = []

        class Interrupted:
            def __init__(self, config, *, verbose=False):
                self.setup = self

            def run(self, reporter, *, purge=False):
                seen.append(reporter)
                reporter.on_start(1, 8, Step("Ensuring wheelhouse directory", lambda: None))
                raise KeyboardInterrupt

        monkeypatch.setattr(cli_module, "ServiceContainer", Interrupted)
        result = invoke("--config", str(config_file))
        assert result.exit_code == 130
        assert "Interrupted by user" in result.output
        assert isinstance(seen[0], SpinnerReporter)
        assert seen[0]._progress is None
