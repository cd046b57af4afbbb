# src/picotest_explorer/cli/main.py

"""
Command line entry point: the `picotest-explorer` group and its global options.
"""

from importlib.metadata import PackageNotFoundError, version

import click
import structlog

from picotest_explorer.cli.config_cmds import config_cli
from picotest_explorer.cli.test_cmds import list_cli, run_cli, watch_cli
from picotest_explorer.cli.utils import logging_options
from picotest_explorer.telemetry import StructLogger

DIST_NAME = "picotest-explorer"

log: StructLogger = structlog.get_logger("cli.main")


def _dist_version() -> str:
    try:
        return version(DIST_NAME)
    except PackageNotFoundError:
        return "0.0.0-dev"


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(_dist_version(), "-V", "--version", package_name=DIST_NAME)
@logging_options
@click.pass_context
def cli(ctx: click.Context, log_level: str | None, log_file: str | None, json_logs: bool | None):
    """
    PicoTest Explorer: discover and run PicoTest tests.

    The configured test command is run with its load arguments to list the
    tests as JSON, and with its run arguments to stream lifecycle events
    while the tests execute.

    Global logging options apply to every subcommand unless the subcommand
    repeats them. Logging settings in picotest.toml come last.
    """
    # Subcommands set up logging once their configuration file is read.
    ctx.ensure_object(dict)
    ctx.obj.update(LOG_LEVEL=log_level, LOG_FILE=log_file, JSON_LOGS=bool(json_logs))


for command in (config_cli, list_cli, run_cli, watch_cli):
    cli.add_command(command)

if __name__ == "__main__":
    cli()

# 🖥️⚙️
