#
# src/caserun/api/assumptions.py
#
"""
Helpers test code calls to end a case without failing it.
"""

from typing import NoReturn

from caserun.exceptions import CaseAborted, CaseSkipped


def skip(reason: str = "") -> NoReturn:
    """Marks the running case as skipped."""
    raise CaseSkipped(reason)


def abort(reason: str = "") -> NoReturn:
    """Marks the running case as aborted."""
    raise CaseAborted(reason)


def assume_true(condition: bool, message: str = "Assumption failed") -> None:
    if not condition:
        raise CaseAborted(message)


def assume_false(condition: bool, message: str = "Assumption failed") -> None:
    if condition:
        raise CaseAborted(message)


# 🔼⚙️
