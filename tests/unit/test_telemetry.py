#
# tests/unit/test_telemetry.py
#
"""
Tests for the structlog setup and custom processors.
"""

import json
import logging
from pathlib import Path

import structlog

from caserun.telemetry import run_context, setup_logging
from caserun.telemetry.logger.processors import add_emoji_processor, remove_extra_keys_processor


def test_emoji_prefix_by_level() -> None:
    event = add_emoji_processor(None, "error", {"event": "Execution failed", "level": "error"})
    assert event["event"] == "❌ Execution failed"


def test_emoji_leaves_unknown_levels_alone() -> None:
    event = add_emoji_processor(None, "msg", {"event": "plain"})
    assert event["event"] == "plain"


def test_remove_extra_keys() -> None:
    event = remove_extra_keys_processor(None, "info", {"event": "x", "_record": object(), "keep": 1})
    assert event == {"event": "x", "keep": 1}


def test_file_logging_writes_json(tmp_path: Path) -> None:
    log_file = tmp_path / "caserun.log"
    setup_logging(level=logging.INFO, log_file=str(log_file), console=False)

    structlog.get_logger("engine").info("Execution finished", cases=3)
    for handler in logging.getLogger().handlers:
        handler.flush()

    records = [json.loads(line) for line in log_file.read_text().splitlines()]
    finished = [r for r in records if "Execution finished" in r["event"]]
    assert finished
    assert finished[0]["cases"] == 3
    assert finished[0]["level"] == "info"
    assert finished[0]["logger"] == "engine"


def test_level_filters_console(tmp_path: Path) -> None:
    setup_logging(level=logging.WARNING, console=False, log_file=str(tmp_path / "out.log"))

    structlog.get_logger("engine").info("hidden")
    structlog.get_logger("engine").warning("shown")
    for handler in logging.getLogger().handlers:
        handler.flush()

    text = (tmp_path / "out.log").read_text()
    assert "shown" in text
    assert "hidden" not in text


def _read_records(log_file: Path) -> list[dict]:
    for handler in logging.getLogger().handlers:
        handler.flush()
    return [json.loads(line) for line in log_file.read_text().splitlines()]


def test_run_context_tags_events_inside_the_run(tmp_path: Path) -> None:
    log_file = tmp_path / "run.log"
    setup_logging(level=logging.INFO, log_file=str(log_file), console=False)
    logger = structlog.get_logger("engine")

    with run_context("suite") as run_id:
        logger.info("inside")
    logger.info("outside")

    records = {r["event"].split(" ", 1)[-1]: r for r in _read_records(log_file)}
    assert records["inside"]["engine_id"] == "suite"
    assert records["inside"]["run_id"] == run_id
    assert "run_id" not in records["outside"]


def test_each_run_gets_its_own_id() -> None:
    with run_context("suite") as first:
        pass
    with run_context("suite") as second:
        pass
    assert first != second


def test_unopenable_log_file_keeps_console_logging(tmp_path: Path) -> None:
    setup_logging(level=logging.INFO, log_file=str(tmp_path / "missing" / "out.log"))

    handlers = logging.getLogger().handlers
    assert len(handlers) == 1
    assert not isinstance(handlers[0], logging.FileHandler)
