# src/caserun/engine/context.py

"""
Per-branch run-time state threaded through the execution tree.
"""

from typing import TYPE_CHECKING, Any

import structlog
from attrs import evolve, field, mutable

from caserun.api.extension import ExtensionRole, extensions_for

if TYPE_CHECKING:
    from caserun.engine.descriptor import Descriptor

log: structlog.stdlib.BoundLogger = structlog.get_logger("engine.context")


@mutable(slots=True)
class ExecutionContext:
    """
    Mutable state of one active branch of the run.

    A child context is always derived, never shared: it starts from the
    parent's values and a copy of its attribute bag, so anything the child
    publishes stays invisible to the parent and to siblings. Extensions can
    only be added going down the tree.
    """

    descriptor: "Descriptor | None" = field(default=None)
    test_class: type | None = field(default=None)
    test_instance: Any | None = field(default=None)
    extensions: tuple[Any, ...] = field(default=(), converter=tuple)
    attributes: dict[str, Any] = field(factory=dict)
    parent: "ExecutionContext | None" = field(default=None, repr=False)

    def derive(self, descriptor: "Descriptor | None" = None, **overrides: Any) -> "ExecutionContext":
        """Creates a child context for ``descriptor``; overrides apply to the child only."""
        if "extensions" in overrides:
            raise ValueError("Extensions are inherited; use register_extensions on the child")
        return evolve(
            self,
            descriptor=descriptor if descriptor is not None else self.descriptor,
            attributes=dict(self.attributes),
            parent=self,
            **overrides,
        )

    def register_extensions(self, *extensions: Any) -> None:
        """
        Adds extensions to this context. Types are instantiated once; a type
        or instance that is already registered is ignored.
        """
        registered = list(self.extensions)
        for extension in extensions:
            if isinstance(extension, type):
                if any(type(existing) is extension for existing in registered):
                    continue
                extension = extension()
            elif any(existing is extension for existing in registered):
                continue
            registered.append(extension)
            log.debug(
                "Registered extension",
                extension=type(extension).__name__,
                descriptor=str(self.descriptor.unique_id) if self.descriptor else None,
            )
        self.extensions = tuple(registered)

    def get_extensions(self, role: ExtensionRole, reverse: bool = False) -> list[Any]:
        return extensions_for(self.extensions, role, reverse=reverse)

    def publish_instance(self, instance: Any | None) -> None:
        self.test_instance = instance

    def get_attribute(self, key: str, default: Any = None) -> Any:
        return self.attributes.get(key, default)

    def set_attribute(self, key: str, value: Any) -> None:
        self.attributes[key] = value


# 🔼⚙️
