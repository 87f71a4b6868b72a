# src/caserun/cli/config_cmds.py

from pathlib import Path

import click
import structlog
from rich.pretty import pretty_repr

from caserun.cli.utils import (
    config_option,
    load_config_or_exit,
    logging_options,
    setup_logging_from_context,
)
from caserun.telemetry import StructLogger

log: StructLogger = structlog.get_logger("cli.config")


@click.group(name="config")
def config_cli():
    """Commands for inspecting and validating configuration."""
    pass


@config_cli.command(name="show")
@config_option
@logging_options
@click.pass_context
def show_config(ctx: click.Context, config_path: Path, **kwargs):
    """Load, validate, and display the effective configuration."""
    setup_logging_from_context(
        ctx,
        local_log_level=kwargs.get("log_level"),
        local_log_file=kwargs.get("log_file"),
        local_json_logs=kwargs.get("json_logs"),
        default_log_level="WARNING",
    )
    log.info("Executing 'config show' command", config_path=str(config_path))

    config = load_config_or_exit(ctx, config_path)
    if not config_path.is_file():
        log.warning("Configuration file not found; showing defaults", config_path=str(config_path))

    click.echo(pretty_repr(config, expand_all=True))

# 🔼⚙️
