#
# src/caserun/exceptions.py
#
"""
Exception hierarchy for caserun.

Engine errors derive from CaserunError. The skip and abort signals are
raised by test code itself and are translated into outcomes, so they are
kept outside that hierarchy, as are the assertion failures raised by
caserun.api.assertions.
"""


class CaserunError(Exception):
    """Base class for all errors raised by the caserun engine."""

    pass


class ConfigurationError(CaserunError):
    """Raised when the configuration file or values are invalid."""

    pass


class DiscoveryError(CaserunError):
    """Raised when test modules or classes cannot be resolved."""

    def __init__(self, message: str, target: str | None = None, details: Exception | None = None):
        self.target = target
        self.details = details
        full_message = message
        if target:
            full_message += f" (Target: '{target}')"
        super().__init__(full_message)
        if details:
            self.add_note(f"Original error: {type(details).__name__}: {details}")


class MalformedIdentifierError(CaserunError):
    """Raised when text cannot be parsed into a unique id."""

    def __init__(self, message: str, text: str | None = None):
        self.text = text
        super().__init__(message)


class LifecycleViolationError(CaserunError):
    """
    Raised when a lifecycle member cannot be invoked in the current state,
    e.g. an instance-scoped before_all member with no shared instance.
    """

    pass


class InstanceCreationError(LifecycleViolationError):
    """Raised when a test class cannot be instantiated."""

    pass


class InstancePostProcessingError(LifecycleViolationError):
    """Raised when an InstancePostProcessor fails on a fresh instance."""

    pass


class CaseSkipped(Exception):
    """Signal raised by test code to mark the current case as skipped."""

    def __init__(self, reason: str = ""):
        self.reason = reason
        super().__init__(reason)


class CaseAborted(Exception):
    """Signal raised by test code when an assumption does not hold."""

    def __init__(self, reason: str = ""):
        self.reason = reason
        super().__init__(reason)


class AssertionFailedError(AssertionError):
    """Raised by the helpers in caserun.api.assertions; ``message`` may be None."""

    def __init__(self, message: str | None = None):
        self.message = message
        if message is None:
            super().__init__()
        else:
            super().__init__(message)


class MultipleFailuresError(AssertionFailedError):
    """Raised by assert_all with every failed assertion of the group, in order."""

    def __init__(self, heading: str | None, failures: list[BaseException]):
        self.heading = heading or "Multiple Failures"
        self.failures = tuple(failures)
        count = len(self.failures)
        lines = [f"{self.heading} ({count} failure{'' if count == 1 else 's'})"]
        lines.extend(f"\t{failure}" for failure in self.failures)
        super().__init__("\n".join(lines))


# 🔼⚙️
