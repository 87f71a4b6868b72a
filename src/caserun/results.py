#
# src/caserun/results.py
#
"""
Terminal outcomes of executed descriptors and how failures map onto them.
"""

from enum import Enum, auto
from typing import TYPE_CHECKING

import structlog
from attrs import define, field

from caserun.engine.execution.aggregation import get_suppressed
from caserun.exceptions import CaseAborted, CaseSkipped
from caserun.protocols import ExecutionListener

if TYPE_CHECKING:
    from caserun.engine.descriptor import Descriptor

log: structlog.stdlib.BoundLogger = structlog.get_logger("results")


class ExecutionStatus(Enum):
    """The four terminal outcomes a descriptor can report."""

    SUCCESSFUL = auto()
    FAILED = auto()
    SKIPPED = auto()  # intentionally not run, or disabled
    ABORTED = auto()  # an assumption did not hold


# Used by the CLI summary.
STATUS_EMOJI_MAP = {
    ExecutionStatus.SUCCESSFUL: "✅",
    ExecutionStatus.FAILED: "❌",
    ExecutionStatus.SKIPPED: "⏭️",
    ExecutionStatus.ABORTED: "⚠️",
}


@define(frozen=True, slots=True)
class ExecutionResult:
    """A classified outcome, ready to be reported to a listener."""

    status: ExecutionStatus
    cause: BaseException | None = field(default=None)
    reason: str | None = field(default=None)

    @classmethod
    def successful(cls) -> "ExecutionResult":
        return cls(ExecutionStatus.SUCCESSFUL)

    @classmethod
    def skipped(cls, reason: str) -> "ExecutionResult":
        return cls(ExecutionStatus.SKIPPED, reason=reason)

    @classmethod
    def failed(cls, cause: BaseException) -> "ExecutionResult":
        return cls(ExecutionStatus.FAILED, cause=cause)

    @classmethod
    def classify(cls, exception: BaseException | None) -> "ExecutionResult":
        """
        Maps the aggregate failure of a node onto an outcome.

        Skip and abort signals only count as such when they are the sole
        failure; once anything else was suppressed into them the node failed.
        """
        if exception is None:
            return cls.successful()
        if not get_suppressed(exception):
            if isinstance(exception, CaseSkipped):
                return cls(ExecutionStatus.SKIPPED, cause=exception, reason=exception.reason or "unknown")
            if isinstance(exception, CaseAborted):
                return cls(ExecutionStatus.ABORTED, cause=exception, reason=exception.reason or None)
        return cls(ExecutionStatus.FAILED, cause=exception)

    def report(self, listener: ExecutionListener, descriptor: "Descriptor") -> None:
        log.debug(
            "Reporting outcome",
            unique_id=str(descriptor.unique_id),
            status=self.status.name,
            **({"error": repr(self.cause)} if self.cause is not None else {}),
        )
        if self.status is ExecutionStatus.SUCCESSFUL:
            listener.execution_succeeded(descriptor)
        elif self.status is ExecutionStatus.SKIPPED:
            listener.execution_skipped(descriptor, self.reason or "unknown")
        elif self.status is ExecutionStatus.ABORTED:
            listener.execution_aborted(descriptor, self.cause)
        else:
            listener.execution_failed(descriptor, self.cause)


# 🔼⚙️
