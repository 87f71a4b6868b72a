# src/caserun/cli/utils.py

import logging
import sys
from pathlib import Path

import click
import structlog

from caserun.config import CaserunConfig, load_config
from caserun.exceptions import ConfigurationError
from caserun.telemetry.logger import setup_logging as core_setup_logging

log = structlog.get_logger("cli.utils")

LOG_LEVEL_CHOICES = click.Choice(list(logging.getLevelNamesMapping().keys()), case_sensitive=False)


def logging_options(f):
    """Decorator to add logging options to any command."""
    f = click.option(
        "-l",
        "--log-level",
        type=LOG_LEVEL_CHOICES,
        default=None,
        envvar="CASERUN_LOG_LEVEL",
        help="Set the logging level (overrides config file).",
    )(f)
    f = click.option(
        "--log-file",
        type=click.Path(dir_okay=False, writable=True, resolve_path=True),
        default=None,
        envvar="CASERUN_LOG_FILE",
        help="Path to write logs to a file (JSON format).",
    )(f)
    f = click.option(
        "--json-logs",
        is_flag=True,
        default=None,
        envvar="CASERUN_JSON_LOGS",
        help="Output console logs as JSON.",
    )(f)
    return f


def config_option(f):
    """Decorator adding the shared --config-path option."""
    return click.option(
        "-c",
        "--config-path",
        type=click.Path(file_okay=True, dir_okay=False, path_type=Path),
        default=Path("caserun.toml"),
        show_default=True,
        envvar="CASERUN_CONF",
        show_envvar=True,
        help="Path to the caserun configuration file; defaults apply if it does not exist.",
    )(f)


def setup_logging_from_context(
    ctx: click.Context,
    local_log_level: str | None = None,
    local_log_file: str | None = None,
    local_json_logs: bool | None = None,
    default_log_level: str = "INFO",
) -> None:
    """
    Setup logging using context values, allowing local overrides.
    """
    obj = ctx.obj or {}
    log_level_str = local_log_level or obj.get("LOG_LEVEL") or default_log_level
    log_file_path = local_log_file or obj.get("LOG_FILE")
    use_json_logs = local_json_logs if local_json_logs is not None else obj.get("JSON_LOGS", False)

    numeric_level = logging.getLevelNamesMapping().get(log_level_str.upper())
    if numeric_level is None:
        numeric_level = logging.INFO
        log_level_str = "INFO"

    core_setup_logging(
        level=numeric_level,
        json_logs=use_json_logs,
        log_file=log_file_path,
    )

    log.debug(
        "CLI logging initialized via utils",
        level=log_level_str,
        file=log_file_path or "console",
        json=use_json_logs,
    )


def load_config_or_exit(ctx: click.Context, config_path: Path) -> CaserunConfig:
    """Loads the configuration, turning configuration errors into exit code 2."""
    try:
        return load_config(config_path)
    except ConfigurationError as e:
        log.error("Failed to load or validate configuration", error=str(e))
        click.echo(f"Error: Configuration problem in '{config_path}':\n{e}", err=True)
        ctx.exit(2)


def add_root_dir(root_dir: Path) -> None:
    """Makes test modules under ``root_dir`` importable."""
    path = str(root_dir.resolve())
    if path not in sys.path:
        sys.path.insert(0, path)
        log.debug("Added root directory to sys.path", root_dir=path)

# ⚙️🛠️
