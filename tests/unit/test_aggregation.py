#
# tests/unit/test_aggregation.py
#
"""
Tests for combining failures from independent steps.
"""

import pytest

from caserun.engine.execution.aggregation import (
    combine,
    execute_and_aggregate,
    get_suppressed,
    start_aggregate,
)


def test_first_failure_is_returned_as_is() -> None:
    error = ValueError("a")
    assert combine(None, error) is error
    assert get_suppressed(error) == ()


def test_later_failures_are_suppressed_in_order() -> None:
    first, second, third = ValueError("a"), KeyError("b"), RuntimeError("c")

    result = combine(combine(combine(None, first), second), third)

    assert result is first
    assert get_suppressed(first) == (second, third)
    assert get_suppressed(second) == ()


def test_suppressed_failures_show_up_as_notes() -> None:
    primary = ValueError("a")
    combine(primary, RuntimeError("boom"))
    assert "Suppressed: RuntimeError: boom" in primary.__notes__


def test_combining_a_failure_with_itself_is_a_no_op() -> None:
    error = ValueError("a")
    assert combine(error, error) is error
    assert get_suppressed(error) == ()


def test_same_sequence_gives_same_structure() -> None:
    def run() -> tuple[str, list[str]]:
        errors = [ValueError("a"), ValueError("b"), ValueError("c")]
        current = None
        for error in errors:
            current = combine(current, error)
        return str(current), [str(e) for e in get_suppressed(current)]

    assert run() == run() == ("a", ["b", "c"])


class TestExecuteAndAggregate:
    """execute_and_aggregate runs steps without short-circuiting."""

    def test_success_keeps_current(self) -> None:
        calls = []
        assert execute_and_aggregate(None, calls.append, 1) is None
        assert calls == [1]

    def test_failures_are_collected_across_steps(self) -> None:
        def fail(message: str) -> None:
            raise RuntimeError(message)

        current = execute_and_aggregate(None, fail, "A")
        current = execute_and_aggregate(current, lambda: None)
        current = execute_and_aggregate(current, fail, "B")

        assert str(current) == "A"
        assert [str(e) for e in get_suppressed(current)] == ["B"]

    def test_base_exceptions_are_not_swallowed(self) -> None:
        def interrupt() -> None:
            raise KeyboardInterrupt

        with pytest.raises(KeyboardInterrupt):
            execute_and_aggregate(None, interrupt)


class TestStartAggregate:
    """A failure re-raised in a later node starts from a clean slate."""

    def test_clears_failures_attached_by_an_earlier_aggregate(self) -> None:
        shared = RuntimeError("shared")
        combine(shared, ValueError("first teardown"))

        assert start_aggregate(shared) is shared
        assert get_suppressed(shared) == ()
        assert not getattr(shared, "__notes__", [])

    def test_keeps_notes_added_elsewhere(self) -> None:
        error = RuntimeError("x")
        error.add_note("context from the test")
        combine(error, ValueError("teardown"))

        start_aggregate(error)

        assert error.__notes__ == ["context from the test"]

    def test_reraised_failure_only_carries_the_current_suppressed(self) -> None:
        shared = RuntimeError("shared")

        def fail() -> None:
            raise shared

        def teardown(message: str) -> None:
            raise ValueError(message)

        first = execute_and_aggregate(None, fail)
        first = execute_and_aggregate(first, teardown, "first run")
        second = execute_and_aggregate(None, fail)
        second = execute_and_aggregate(second, teardown, "second run")

        assert second is shared
        assert [str(e) for e in get_suppressed(second)] == ["second run"]
        assert shared.__notes__ == ["Suppressed: ValueError: second run"]
