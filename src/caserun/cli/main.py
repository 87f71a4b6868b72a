# src/caserun/cli/main.py

"""
Main CLI entry point for caserun using Click.
Handles global options like logging level.
"""

import click
import structlog

from caserun import __version__
from caserun.cli.config_cmds import config_cli
from caserun.cli.run_cmds import ids_cli, run_cli
from caserun.cli.utils import logging_options, setup_logging_from_context
from caserun.telemetry import StructLogger

log: StructLogger = structlog.get_logger("cli.main")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, "-V", "--version", package_name="caserun")
@logging_options
@click.pass_context
def cli(
    ctx: click.Context,
    log_level: str | None,
    log_file: str | None,
    json_logs: bool | None,
):
    """
    caserun: sequential test execution engine.

    Discovers test classes, runs their lifecycle members and cases in order
    and reports one outcome per test.
    Configuration precedence: CLI options > Environment Variables > Config File > Defaults.
    """
    ctx.ensure_object(dict)

    ctx.obj["LOG_LEVEL"] = log_level
    ctx.obj["LOG_FILE"] = log_file
    ctx.obj["JSON_LOGS"] = json_logs if json_logs is not None else False

    setup_logging_from_context(ctx, default_log_level="WARNING")
    log.debug(
        "Main CLI group initialized",
        log_level=log_level,
        log_file=log_file,
        json_logs=json_logs,
    )


cli.add_command(config_cli)
cli.add_command(ids_cli)
cli.add_command(run_cli)

if __name__ == "__main__":
    cli()

# 🖥️⚙️
