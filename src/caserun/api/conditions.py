#
# src/caserun/api/conditions.py
#
"""
Conditions deciding whether a test class or case is executed at all.
"""

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Protocol, TypeVar, runtime_checkable

from attrs import define, field

from caserun.api.lifecycle import unwrap_member

if TYPE_CHECKING:
    from caserun.engine.context import ExecutionContext

T = TypeVar("T")

CONDITIONS_ATTR = "__caserun_conditions__"


@define(frozen=True, slots=True)
class ConditionResult:
    """Outcome of evaluating a condition."""

    enabled: bool
    reason: str | None = field(default=None)

    @classmethod
    def enabled_result(cls, reason: str | None = None) -> "ConditionResult":
        return cls(True, reason)

    @classmethod
    def disabled_result(cls, reason: str | None = None) -> "ConditionResult":
        return cls(False, reason)


@runtime_checkable
class Condition(Protocol):
    """Decides, given the current context, if a node should run."""

    def evaluate(self, context: "ExecutionContext") -> ConditionResult:
        ...


@define(frozen=True, slots=True)
class DisabledCondition:
    """Unconditionally disables the annotated element."""

    reason: str | None = field(default=None)

    def evaluate(self, context: "ExecutionContext") -> ConditionResult:
        return ConditionResult.disabled_result(self.reason)


@define(frozen=True, slots=True)
class PredicateCondition:
    """Enables the element only while ``predicate(context)`` is truthy."""

    predicate: Callable[["ExecutionContext"], Any]
    reason: str | None = field(default=None)

    def evaluate(self, context: "ExecutionContext") -> ConditionResult:
        if self.predicate(context):
            return ConditionResult.enabled_result()
        return ConditionResult.disabled_result(self.reason)


def _add_condition(target: T, condition: Condition) -> T:
    func = unwrap_member(target)
    own = func.__dict__.get(CONDITIONS_ATTR, ()) if isinstance(func, type) else getattr(func, CONDITIONS_ATTR, ())
    setattr(func, CONDITIONS_ATTR, tuple(own) + (condition,))
    return target


def disabled(reason: str | None = None) -> Callable[[T], T]:
    """Disables a test class or member."""
    return lambda target: _add_condition(target, DisabledCondition(reason))


def enabled_if(predicate: Callable[["ExecutionContext"], Any], reason: str | None = None) -> Callable[[T], T]:
    """Runs a test class or member only when ``predicate(context)`` holds."""
    return lambda target: _add_condition(target, PredicateCondition(predicate, reason))


def get_conditions(target: Any) -> tuple[Condition, ...]:
    func = unwrap_member(target)
    if isinstance(func, type):
        return tuple(func.__dict__.get(CONDITIONS_ATTR, ()))
    return tuple(getattr(func, CONDITIONS_ATTR, ()))


def evaluate_conditions(conditions: tuple[Condition, ...], context: "ExecutionContext") -> ConditionResult:
    """The first disabling condition wins; no conditions means enabled."""
    for condition in conditions:
        result = condition.evaluate(context)
        if not result.enabled:
            return result
    return ConditionResult.enabled_result()


# 🔼⚙️
