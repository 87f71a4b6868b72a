# src/caserun/cli/run_cmds.py

"""
Commands that discover and execute tests.
"""

from pathlib import Path

import click
import structlog
from rich.console import Console
from rich.table import Table

from caserun.cli.utils import (
    add_root_dir,
    config_option,
    load_config_or_exit,
    logging_options,
    setup_logging_from_context,
)
from caserun.engine.descriptor import Descriptor
from caserun.engine.discovery import DiscoveryRequest
from caserun.engine.engine import CaserunEngine
from caserun.engine.execution.aggregation import get_suppressed
from caserun.engine.identifier import UniqueIdFormat
from caserun.engine.listeners import ExecutionSummary
from caserun.exceptions import CaserunError
from caserun.results import STATUS_EMOJI_MAP, ExecutionStatus
from caserun.telemetry import StructLogger

log: StructLogger = structlog.get_logger("cli.run")


def _build_engine(ctx: click.Context, config_path: Path, root_dir: Path, **kwargs) -> CaserunEngine:
    config = load_config_or_exit(ctx, config_path)
    setup_logging_from_context(
        ctx,
        local_log_level=kwargs.get("log_level"),
        local_log_file=kwargs.get("log_file"),
        local_json_logs=kwargs.get("json_logs"),
        default_log_level=config.global_config.log_level,
    )
    add_root_dir(root_dir)
    return CaserunEngine(config)


def _render_summary(summary: ExecutionSummary, id_format: UniqueIdFormat) -> None:
    console = Console()
    table = Table(title="caserun summary")
    table.add_column("Status")
    table.add_column("Cases", justify="right")
    table.add_column("Containers", justify="right")
    for status in ExecutionStatus:
        table.add_row(
            f"{STATUS_EMOJI_MAP[status]} {status.name}",
            str(summary.cases[status]),
            str(summary.containers[status]),
        )
    console.print(table)

    for record in summary.failures:
        click.echo(f"{record.status.name}: {id_format.serialize(record.descriptor.unique_id)}")
        click.echo(f"    {type(record.cause).__name__}: {record.cause}")
        for suppressed in get_suppressed(record.cause):
            click.echo(f"    suppressed {type(suppressed).__name__}: {suppressed}")


@click.command(name="run")
@click.argument("modules", nargs=-1)
@click.option(
    "-s",
    "--select",
    "selected_ids",
    multiple=True,
    help="Unique id of a class or method to run; may be repeated.",
)
@click.option(
    "--root-dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=Path("."),
    show_default=True,
    help="Directory prepended to sys.path so test modules can be imported.",
)
@config_option
@logging_options
@click.pass_context
def run_cli(
    ctx: click.Context,
    modules: tuple[str, ...],
    selected_ids: tuple[str, ...],
    root_dir: Path,
    config_path: Path,
    **kwargs,
):
    """Discover and execute the test classes in MODULES."""
    if not modules and not selected_ids:
        raise click.UsageError("Provide at least one module or --select unique id.")

    engine = _build_engine(ctx, config_path, root_dir, **kwargs)
    log.info("Executing 'run' command", modules=list(modules), selected=list(selected_ids))

    try:
        summary = engine.run(DiscoveryRequest(modules=modules, unique_ids=selected_ids))
    except CaserunError as e:
        log.error("Run aborted", error=str(e))
        click.echo(f"Error: {e}", err=True)
        ctx.exit(2)

    _render_summary(summary, engine.id_format)
    if summary.has_failures:
        ctx.exit(1)


def _echo_tree(descriptor: Descriptor, id_format: UniqueIdFormat, depth: int = 0) -> None:
    click.echo(f"{'  ' * depth}{id_format.serialize(descriptor.unique_id)}  ({descriptor.display_name})")
    for child in descriptor.children:
        _echo_tree(child, id_format, depth + 1)


@click.command(name="ids")
@click.argument("modules", nargs=-1, required=True)
@click.option(
    "--root-dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=Path("."),
    show_default=True,
    help="Directory prepended to sys.path so test modules can be imported.",
)
@config_option
@logging_options
@click.pass_context
def ids_cli(ctx: click.Context, modules: tuple[str, ...], root_dir: Path, config_path: Path, **kwargs):
    """List the unique ids discovered in MODULES."""
    engine = _build_engine(ctx, config_path, root_dir, **kwargs)
    try:
        root = engine.discover(DiscoveryRequest(modules=modules))
    except CaserunError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(2)
    _echo_tree(root, engine.id_format)

# 🔼⚙️
