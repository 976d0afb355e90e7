"""mmsetup 命令行接口

单命令 CLI：构建并安装 mmcv / mmaction2 / mmengine 的本地 wheel，最后执行 uv sync。
"""

import sys

import click

from mmsetup import __version__
from mmsetup.cli.reporters import LogReporter, SpinnerReporter
from mmsetup.core.config import DEFAULT_CONFIG_FILE, init_config
from mmsetup.core.exceptions import SetupError
from mmsetup.services.container import ServiceContainer
from mmsetup.utils.logger import setup_logging


def print_header(debug: bool) -> None:
    """打印工具名与当前输出模式"""
    click.echo(
        f"{click.style('mmsetup', fg='cyan', bold=True)} "
        + click.style(
            "CLI that installs mmaction stack with local wheel builds and runs uv sync",
            dim=True,
        )
    )
    if debug:
        mode = click.style("Debug output: enabled", fg="yellow")
    else:
        mode = click.style("Debug output: disabled", dim=True)
    click.echo(f"{click.style('•', fg='cyan')} {mode}")


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--debug", "--verbose", "debug", is_flag=True, default=False,
    help="Show command output while running setup",
)
@click.option(
    "--purge", is_flag=True, default=False,
    help="Delete .wheelhouse, .mmaction2, .mmengine, and .mmcv before reinstalling",
)
@click.option(
    "--config", "-c", "config_path", default=DEFAULT_CONFIG_FILE, show_default=True,
    help="配置文件路径（不存在则使用默认值）",
)
@click.version_option(version=__version__)
def main(debug: bool, purge: bool, config_path: str) -> None:
    """Install mmaction stack with local wheel builds and run uv sync"""
    setup_logging(verbose=debug)
    print_header(debug)

    try:
        config = init_config(config_path)
        container = ServiceContainer(config, verbose=debug)
        reporter = LogReporter() if debug else SpinnerReporter()
        try:
            container.setup.run(reporter, purge=purge)
        finally:
            reporter.close()
    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        sys.exit(130)
    except SetupError as e:
        click.echo(f"{click.style('Error:', fg='red', bold=True)} {e.chain()}", err=True)
        sys.exit(1)

    click.secho("✔ Setup completed successfully.", fg="green", bold=True)
