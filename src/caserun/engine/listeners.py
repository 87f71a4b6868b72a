#
# src/caserun/engine/listeners.py
#
"""
Ready-made ExecutionListener implementations.
"""

from collections import Counter

import structlog
from attrs import define, field

from caserun.engine.descriptor import Descriptor
from caserun.protocols import ExecutionListener
from caserun.results import ExecutionStatus
from caserun.telemetry import StructLogger

log: StructLogger = structlog.get_logger("engine.listeners")


@define(frozen=True, slots=True)
class ExecutionEvent:
    """One listener call, as recorded by RecordingListener."""

    kind: str  # "started", "succeeded", "failed", "skipped" or "aborted"
    descriptor: Descriptor
    cause: BaseException | None = field(default=None)
    reason: str | None = field(default=None)


class RecordingListener(ExecutionListener):
    """Keeps every call in order."""

    def __init__(self) -> None:
        self.events: list[ExecutionEvent] = []

    def execution_started(self, descriptor: Descriptor) -> None:
        self.events.append(ExecutionEvent("started", descriptor))

    def execution_succeeded(self, descriptor: Descriptor) -> None:
        self.events.append(ExecutionEvent("succeeded", descriptor))

    def execution_failed(self, descriptor: Descriptor, cause: BaseException) -> None:
        self.events.append(ExecutionEvent("failed", descriptor, cause=cause))

    def execution_skipped(self, descriptor: Descriptor, reason: str) -> None:
        self.events.append(ExecutionEvent("skipped", descriptor, reason=reason))

    def execution_aborted(self, descriptor: Descriptor, cause: BaseException) -> None:
        self.events.append(ExecutionEvent("aborted", descriptor, cause=cause))

    def events_for(self, descriptor: Descriptor) -> list[ExecutionEvent]:
        return [event for event in self.events if event.descriptor is descriptor]

    def kinds_for(self, descriptor: Descriptor) -> list[str]:
        return [event.kind for event in self.events_for(descriptor)]


@define(frozen=True, slots=True)
class FailureRecord:
    """A descriptor that failed or aborted, with its cause."""

    descriptor: Descriptor
    status: ExecutionStatus
    cause: BaseException


@define(slots=True)
class ExecutionSummary:
    """Aggregated outcome counts for cases and containers."""

    cases: Counter = field(factory=Counter)
    containers: Counter = field(factory=Counter)
    failures: list[FailureRecord] = field(factory=list)
    skipped_reasons: dict[str, str] = field(factory=dict)

    @property
    def cases_found(self) -> int:
        return sum(self.cases.values())

    @property
    def has_failures(self) -> bool:
        return any(record.status is ExecutionStatus.FAILED for record in self.failures)


class SummaryListener(ExecutionListener):
    """Builds an ExecutionSummary as outcomes arrive."""

    def __init__(self) -> None:
        self.summary = ExecutionSummary()

    def _count(self, descriptor: Descriptor, status: ExecutionStatus) -> None:
        if descriptor.is_case:
            self.summary.cases[status] += 1
        elif descriptor.parent is not None:
            self.summary.containers[status] += 1

    def execution_started(self, descriptor: Descriptor) -> None:
        pass

    def execution_succeeded(self, descriptor: Descriptor) -> None:
        self._count(descriptor, ExecutionStatus.SUCCESSFUL)

    def execution_failed(self, descriptor: Descriptor, cause: BaseException) -> None:
        self._count(descriptor, ExecutionStatus.FAILED)
        self.summary.failures.append(FailureRecord(descriptor, ExecutionStatus.FAILED, cause))

    def execution_skipped(self, descriptor: Descriptor, reason: str) -> None:
        self._count(descriptor, ExecutionStatus.SKIPPED)
        self.summary.skipped_reasons[str(descriptor.unique_id)] = reason

    def execution_aborted(self, descriptor: Descriptor, cause: BaseException) -> None:
        self._count(descriptor, ExecutionStatus.ABORTED)
        self.summary.failures.append(FailureRecord(descriptor, ExecutionStatus.ABORTED, cause))


class LoggingListener(ExecutionListener):
    """Logs every outcome through structlog."""

    def __init__(self, logger: StructLogger | None = None) -> None:
        self._log = logger or log

    def execution_started(self, descriptor: Descriptor) -> None:
        self._log.debug("Execution started", unique_id=str(descriptor.unique_id))

    def execution_succeeded(self, descriptor: Descriptor) -> None:
        self._log.debug("Execution succeeded", unique_id=str(descriptor.unique_id))

    def execution_failed(self, descriptor: Descriptor, cause: BaseException) -> None:
        self._log.error("Execution failed", unique_id=str(descriptor.unique_id), error=repr(cause))

    def execution_skipped(self, descriptor: Descriptor, reason: str) -> None:
        self._log.info("Execution skipped", unique_id=str(descriptor.unique_id), reason=reason)

    def execution_aborted(self, descriptor: Descriptor, cause: BaseException) -> None:
        self._log.warning("Execution aborted", unique_id=str(descriptor.unique_id), error=repr(cause))


class CompositeListener(ExecutionListener):
    """Forwards every call to each listener in registration order."""

    def __init__(self, *listeners: ExecutionListener) -> None:
        self.listeners = list(listeners)

    def execution_started(self, descriptor: Descriptor) -> None:
        for listener in self.listeners:
            listener.execution_started(descriptor)

    def execution_succeeded(self, descriptor: Descriptor) -> None:
        for listener in self.listeners:
            listener.execution_succeeded(descriptor)

    def execution_failed(self, descriptor: Descriptor, cause: BaseException) -> None:
        for listener in self.listeners:
            listener.execution_failed(descriptor, cause)

    def execution_skipped(self, descriptor: Descriptor, reason: str) -> None:
        for listener in self.listeners:
            listener.execution_skipped(descriptor, reason)

    def execution_aborted(self, descriptor: Descriptor, cause: BaseException) -> None:
        for listener in self.listeners:
            listener.execution_aborted(descriptor, cause)


# 🔼⚙️
