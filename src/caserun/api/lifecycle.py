#
# src/caserun/api/lifecycle.py
#
"""
Decorators tagging test classes and their members.

Member decorators accept plain functions as well as ``staticmethod`` and
``classmethod`` objects, in either decorator order. Tags are stored on the
underlying function so the reflective locator can read them from the class
namespace.
"""

from collections.abc import Callable
from enum import Enum
from typing import Any, TypeVar

T = TypeVar("T")

ROLES_ATTR = "__caserun_roles__"
DISPLAY_NAME_ATTR = "__caserun_display_name__"
LIFECYCLE_ATTR = "__caserun_lifecycle__"
EXTENSIONS_ATTR = "__caserun_extensions__"


class MemberRole(str, Enum):
    """Roles a member of a test class can be tagged with."""

    TEST = "test"
    BEFORE_ALL = "before_all"
    AFTER_ALL = "after_all"
    BEFORE_EACH = "before_each"
    AFTER_EACH = "after_each"


class Lifecycle(str, Enum):
    """Instance lifecycle policy of a test class."""

    PER_METHOD = "per_method"
    PER_CLASS = "per_class"


def unwrap_member(member: Any) -> Any:
    """Returns the function behind a staticmethod/classmethod, or the member itself."""
    if isinstance(member, (staticmethod, classmethod)):
        return member.__func__
    return member


def get_roles(member: Any) -> frozenset[MemberRole]:
    return frozenset(getattr(unwrap_member(member), ROLES_ATTR, ()))


def _tag(role: MemberRole) -> Callable[[T], T]:
    def decorator(member: T) -> T:
        func = unwrap_member(member)
        if not callable(func):
            raise TypeError(f"@{role.value} can only decorate callables, got {member!r}")
        roles = set(getattr(func, ROLES_ATTR, ()))
        roles.add(role)
        setattr(func, ROLES_ATTR, frozenset(roles))
        return member

    decorator.__name__ = role.value
    return decorator


test = _tag(MemberRole.TEST)
before_all = _tag(MemberRole.BEFORE_ALL)
after_all = _tag(MemberRole.AFTER_ALL)
before_each = _tag(MemberRole.BEFORE_EACH)
after_each = _tag(MemberRole.AFTER_EACH)

# Keep pytest from treating the decorator as a test function when imported
# into test modules.
test.__test__ = False


def display_name(name: str) -> Callable[[T], T]:
    """Overrides the display name of a test class or member."""

    def decorator(target: T) -> T:
        setattr(unwrap_member(target), DISPLAY_NAME_ATTR, name)
        return target

    return decorator


def get_display_name(target: Any, default: str) -> str:
    func = unwrap_member(target)
    if isinstance(func, type):
        return func.__dict__.get(DISPLAY_NAME_ATTR) or default
    return getattr(func, DISPLAY_NAME_ATTR, None) or default


def test_instance(lifecycle: Lifecycle | str) -> Callable[[type], type]:
    """Selects the instance lifecycle policy of a test class."""
    policy = Lifecycle(lifecycle)

    def decorator(cls: type) -> type:
        setattr(cls, LIFECYCLE_ATTR, policy)
        return cls

    return decorator


test_instance.__test__ = False


def get_lifecycle(cls: type, default: Lifecycle = Lifecycle.PER_METHOD) -> Lifecycle:
    return getattr(cls, LIFECYCLE_ATTR, default)


def extend_with(*extensions: Any) -> Callable[[T], T]:
    """
    Registers extensions (types or instances) on a test class or member.

    Class-level registrations are visible to every case of the class;
    member-level ones only to that case.
    """

    def decorator(target: T) -> T:
        func = unwrap_member(target)
        # Read the target's own namespace so subclasses extend, not share, the tuple.
        own = func.__dict__.get(EXTENSIONS_ATTR, ()) if isinstance(func, type) else getattr(func, EXTENSIONS_ATTR, ())
        setattr(func, EXTENSIONS_ATTR, tuple(own) + extensions)
        return target

    return decorator


def get_extensions(target: Any) -> tuple[Any, ...]:
    """
    Collects registered extensions; for classes, base classes come first.
    """
    func = unwrap_member(target)
    if isinstance(func, type):
        collected: list[Any] = []
        for klass in reversed(func.__mro__):
            collected.extend(klass.__dict__.get(EXTENSIONS_ATTR, ()))
        return tuple(collected)
    return tuple(getattr(func, EXTENSIONS_ATTR, ()))


# 🔼⚙️
