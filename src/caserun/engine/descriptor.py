# src/caserun/engine/descriptor.py

"""
Static description of the test tree built by discovery.

Descriptors form an acyclic tree: each node owns its children while a child
only holds a weak reference back to its parent.
"""

import weakref
from collections.abc import Iterator

from attrs import define, field

from caserun.engine.identifier import UniqueId


@define(eq=False)
class Descriptor:
    """Base node of the descriptor tree."""

    unique_id: UniqueId = field()
    display_name: str = field()
    _children: list["Descriptor"] = field(factory=list, init=False, repr=False)
    _parent_ref: weakref.ref | None = field(default=None, init=False, repr=False)

    @property
    def parent(self) -> "Descriptor | None":
        return self._parent_ref() if self._parent_ref is not None else None

    @property
    def children(self) -> tuple["Descriptor", ...]:
        return tuple(self._children)

    @property
    def is_container(self) -> bool:
        return False

    @property
    def is_case(self) -> bool:
        return False

    def add_child(self, child: "Descriptor") -> None:
        if child.parent is not None:
            raise ValueError(f"Descriptor {child.unique_id} already has a parent")
        if any(c.unique_id == child.unique_id for c in self._children):
            raise ValueError(f"Duplicate descriptor id {child.unique_id}")
        child._parent_ref = weakref.ref(self)
        self._children.append(child)

    def remove_child(self, child: "Descriptor") -> None:
        self._children.remove(child)
        child._parent_ref = None

    def walk(self) -> Iterator["Descriptor"]:
        """Yields this descriptor and all descendants in pre-order."""
        yield self
        for child in self._children:
            yield from child.walk()

    def find(self, unique_id: UniqueId) -> "Descriptor | None":
        for descriptor in self.walk():
            if descriptor.unique_id == unique_id:
                return descriptor
        return None


@define(eq=False)
class EngineDescriptor(Descriptor):
    """Root of a run; groups every discovered container."""

    @property
    def is_container(self) -> bool:
        return True


@define(eq=False)
class ContainerDescriptor(Descriptor):
    """A test class grouping cases and class-level lifecycle members."""

    test_class: type = field(kw_only=True)

    @property
    def is_container(self) -> bool:
        return True


@define(eq=False)
class CaseDescriptor(Descriptor):
    """A single test member of a test class."""

    test_class: type = field(kw_only=True)
    method_name: str = field(kw_only=True)

    @property
    def is_case(self) -> bool:
        return True


# 🔼⚙️
