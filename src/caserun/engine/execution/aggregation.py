#
# src/caserun/engine/execution/aggregation.py
#
"""
Combines failures from independent steps into a single reportable exception.

The first failure stays primary; later ones are attached to it as
suppressed exceptions in the order they occurred. Nothing is dropped.

Attaching mutates the primary exception (an attribute plus one note per
suppressed failure). Test code may raise the same exception object more
than once, e.g. a module-level constant, so a node calls ``start_aggregate``
on every failure it catches first. That clears whatever an earlier node
attached and leaves notes added by anyone else alone.
"""
from collections.abc import Callable
from typing import Any

SUPPRESSED_ATTR = "__caserun_suppressed__"
NOTES_ATTR = "__caserun_notes__"


def get_suppressed(exception: BaseException | None) -> tuple[BaseException, ...]:
    if exception is None:
        return ()
    return tuple(getattr(exception, SUPPRESSED_ATTR, ()))


def start_aggregate(exception: BaseException) -> BaseException:
    """Makes ``exception`` the primary failure of a new aggregate and returns it."""
    added_notes = getattr(exception, NOTES_ATTR, None)
    if added_notes:
        notes = getattr(exception, "__notes__", None)
        if notes is not None:
            for note in added_notes:
                if note in notes:
                    notes.remove(note)
    for attr in (SUPPRESSED_ATTR, NOTES_ATTR):
        if hasattr(exception, attr):
            delattr(exception, attr)
    return exception


def combine(current: BaseException | None, new_failure: BaseException) -> BaseException:
    """
    Returns ``new_failure`` if there is no current failure, otherwise attaches
    it to ``current`` as suppressed and returns ``current`` unchanged.
    """
    if current is None:
        return new_failure
    if new_failure is current:
        return current
    suppressed = getattr(current, SUPPRESSED_ATTR, None)
    if suppressed is None:
        suppressed = []
        setattr(current, SUPPRESSED_ATTR, suppressed)
    suppressed.append(new_failure)

    note = f"Suppressed: {type(new_failure).__name__}: {new_failure}"
    current.add_note(note)
    added_notes = getattr(current, NOTES_ATTR, None)
    if added_notes is None:
        added_notes = []
        setattr(current, NOTES_ATTR, added_notes)
    added_notes.append(note)
    return current


def execute_and_aggregate(
    current: BaseException | None, func: Callable[..., Any], *args: Any
) -> BaseException | None:
    """Runs ``func`` and folds any exception it raises into ``current``."""
    try:
        func(*args)
    except Exception as e:
        if current is None:
            return start_aggregate(e)
        return combine(current, e)
    return current


# 🔼⚙️
