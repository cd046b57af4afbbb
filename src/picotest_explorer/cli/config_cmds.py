# src/picotest_explorer/cli/config_cmds.py

from pathlib import Path

import click
import structlog
from rich.pretty import pretty_repr

from picotest_explorer.cli.utils import (
    logging_options,
    resolve_config_path,
    setup_logging_from_context,
    workspace_options,
)
from picotest_explorer.config import load_config, resolve_run_spec
from picotest_explorer.exceptions import ConfigurationError
from picotest_explorer.telemetry import StructLogger

log: StructLogger = structlog.get_logger("cli.config")


@click.group(name="config")
def config_cli():
    """Commands for inspecting and validating configuration."""
    pass


@config_cli.command(name="show")
@workspace_options
@logging_options
@click.pass_context
def show_config(ctx: click.Context, workspace: Path, config_path: Path | None, **kwargs):
    """Load, validate, and display the configuration."""
    setup_logging_from_context(
        ctx,
        local_log_level=kwargs.get("log_level"),
        local_log_file=kwargs.get("log_file"),
        local_json_logs=kwargs.get("json_logs"),
    )
    config_path = resolve_config_path(workspace, config_path)
    log.info("Executing 'config show' command", config_path=str(config_path))

    try:
        config = load_config(config_path)
        click.echo(pretty_repr(config, expand_all=True))
        if config.explorer.test_command:
            click.echo(pretty_repr(resolve_run_spec(config.explorer, workspace), expand_all=True))
        else:
            log.warning("No test command configured.")
    except ConfigurationError as e:
        log.error("Failed to load or validate configuration", error=str(e))
        click.echo(f"Error: Configuration problem in '{config_path}':\n{e}", err=True)
        ctx.exit(1)

# 🔼⚙️
