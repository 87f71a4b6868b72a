#
# src/caserun/protocols.py
#
"""
Defines the runtime protocols the engine consumes from its collaborators.
"""
from enum import Enum, auto
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from attrs import define

from caserun.api.lifecycle import MemberRole

if TYPE_CHECKING:
    from caserun.engine.descriptor import Descriptor


class MethodSortOrder(Enum):
    """Order in which members across a class hierarchy are returned."""

    HIERARCHY_DOWN = auto()  # base classes first
    HIERARCHY_UP = auto()  # most-derived class first


@define(frozen=True, slots=True)
class Member:
    """A tagged member resolved on a test class."""

    owner: type  # class the member is resolved against
    name: str
    role: MemberRole
    is_static: bool = False
    declaring_class: type | None = None

    @property
    def is_instance_scoped(self) -> bool:
        return not self.is_static

    @property
    def qualified_name(self) -> str:
        return f"{(self.declaring_class or self.owner).__qualname__}.{self.name}"


@runtime_checkable
class ExecutionListener(Protocol):
    """
    Receives the outcome of every executed descriptor.

    Each descriptor gets exactly one terminal call. Cases always get a
    started call first; containers skip it when they are disabled.
    """

    def execution_started(self, descriptor: "Descriptor") -> None:
        ...

    def execution_succeeded(self, descriptor: "Descriptor") -> None:
        ...

    def execution_failed(self, descriptor: "Descriptor", cause: BaseException) -> None:
        ...

    def execution_skipped(self, descriptor: "Descriptor", reason: str) -> None:
        ...

    def execution_aborted(self, descriptor: "Descriptor", cause: BaseException) -> None:
        ...


@runtime_checkable
class MemberLocator(Protocol):
    """Finds the members of a class tagged with a role."""

    def find_members(
        self,
        test_class: type,
        role: MemberRole,
        order: MethodSortOrder = MethodSortOrder.HIERARCHY_DOWN,
    ) -> list[Member]:
        ...


@runtime_checkable
class MemberInvoker(Protocol):
    """Invokes a resolved member against an instance, or the class for static members."""

    def invoke(self, member: Member, instance: Any | None) -> Any:
        ...


# 🔼⚙️
