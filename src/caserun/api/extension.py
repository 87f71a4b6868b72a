#
# src/caserun/api/extension.py
#
"""
Extension roles and the callback base classes extensions implement.

An extension may implement any subset of the roles below. The engine only
asks "does this extension support role R" and never depends on a concrete
extension type.
"""

from collections.abc import Iterable
from enum import Enum, auto
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from caserun.engine.context import ExecutionContext


class ExtensionRole(Enum):
    """Lifecycle hook points an extension can participate in."""

    BEFORE_ALL = auto()
    AFTER_ALL = auto()
    BEFORE_EACH = auto()
    AFTER_EACH = auto()
    INSTANCE_POST_PROCESSING = auto()


class Extension:
    """Marker base for all extensions."""

    pass


class BeforeAllCallbacks(Extension):
    """Hooks around the before_all members of a test class."""

    def pre_before_all(self, context: "ExecutionContext") -> None:
        pass

    def post_before_all(self, context: "ExecutionContext") -> None:
        pass


class AfterAllCallbacks(Extension):
    """Hooks around the after_all members of a test class."""

    def pre_after_all(self, context: "ExecutionContext") -> None:
        pass

    def post_after_all(self, context: "ExecutionContext") -> None:
        pass


class BeforeEachCallbacks(Extension):
    """Hooks around the before_each members of a case."""

    def pre_before_each(self, context: "ExecutionContext") -> None:
        pass

    def post_before_each(self, context: "ExecutionContext") -> None:
        pass


class AfterEachCallbacks(Extension):
    """Hooks around the after_each members of a case."""

    def pre_after_each(self, context: "ExecutionContext") -> None:
        pass

    def post_after_each(self, context: "ExecutionContext") -> None:
        pass


class InstancePostProcessor(Extension):
    """Gets a chance to prepare every freshly created test instance."""

    def post_process_test_instance(self, context: "ExecutionContext") -> None:
        pass


ROLE_TYPES: dict[ExtensionRole, type[Extension]] = {
    ExtensionRole.BEFORE_ALL: BeforeAllCallbacks,
    ExtensionRole.AFTER_ALL: AfterAllCallbacks,
    ExtensionRole.BEFORE_EACH: BeforeEachCallbacks,
    ExtensionRole.AFTER_EACH: AfterEachCallbacks,
    ExtensionRole.INSTANCE_POST_PROCESSING: InstancePostProcessor,
}


def supports(extension: Any, role: ExtensionRole) -> bool:
    return isinstance(extension, ROLE_TYPES[role])


def extensions_for(
    extensions: Iterable[Any], role: ExtensionRole, reverse: bool = False
) -> list[Any]:
    """
    Selects the extensions supporting ``role`` in registration order.

    With ``reverse`` the last registered extension comes first, which is the
    order used for the after_all and after_each groups.
    """
    selected = [ext for ext in extensions if supports(ext, role)]
    if reverse:
        selected.reverse()
    return selected


# 🔼⚙️
