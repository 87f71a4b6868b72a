# src/caserun/engine/discovery.py

"""
Builds the descriptor tree from Python modules, classes and unique ids.
"""

import importlib
import inspect
from types import ModuleType

import structlog
from attrs import define, field

from caserun.api.lifecycle import MemberRole, get_display_name
from caserun.engine.descriptor import CaseDescriptor, ContainerDescriptor, Descriptor, EngineDescriptor
from caserun.engine.identifier import UniqueId, UniqueIdFormat
from caserun.exceptions import CaserunError, DiscoveryError, MalformedIdentifierError
from caserun.protocols import MemberLocator, MethodSortOrder
from caserun.telemetry import StructLogger

log: StructLogger = structlog.get_logger("engine.discovery")

CLASS_SEGMENT_TYPE = "class"
METHOD_SEGMENT_TYPE = "method"


@define(frozen=True, slots=True)
class DiscoveryRequest:
    """What to discover: module names, classes, and/or serialized unique ids."""

    modules: tuple[str, ...] = field(factory=tuple, converter=tuple)
    classes: tuple[type, ...] = field(factory=tuple, converter=tuple)
    unique_ids: tuple[str, ...] = field(factory=tuple, converter=tuple)


class Discoverer:
    """Resolves a DiscoveryRequest into an EngineDescriptor tree."""

    def __init__(self, engine_id: str, id_format: UniqueIdFormat, locator: MemberLocator):
        self.engine_id = engine_id
        self.id_format = id_format
        self.locator = locator
        self._log = log.bind(engine_id=engine_id)

    def discover(self, request: DiscoveryRequest) -> EngineDescriptor:
        root = EngineDescriptor(UniqueId.for_engine(self.engine_id), self.engine_id)

        for module_name in request.modules:
            for test_class in self.find_test_classes(self._import_module(module_name)):
                self._add_class(root, test_class)

        for test_class in request.classes:
            if not self.is_test_class(test_class):
                raise DiscoveryError("Class declares no test members", target=test_class.__qualname__)
            self._add_class(root, test_class)

        if request.unique_ids:
            selected = [self._parse_selected_id(text) for text in request.unique_ids]
            for unique_id in selected:
                self._resolve_unique_id(root, unique_id)
            self._prune(root, selected)

        cases = sum(1 for d in root.walk() if d.is_case)
        self._log.info("Discovery complete", containers=len(root.children), cases=cases)
        return root

    # --- Classes and members ---

    def is_test_class(self, candidate: type) -> bool:
        return bool(self._test_member_names(candidate))

    def find_test_classes(self, module: ModuleType) -> list[type]:
        """Classes defined in ``module`` itself that declare test members, in definition order."""
        return [
            value
            for value in vars(module).values()
            if inspect.isclass(value)
            and value.__module__ == module.__name__
            and self.is_test_class(value)
        ]

    def _test_member_names(self, test_class: type) -> list[str]:
        members = self.locator.find_members(test_class, MemberRole.TEST, MethodSortOrder.HIERARCHY_DOWN)
        return [member.name for member in members]

    def _class_id(self, root: EngineDescriptor, test_class: type) -> UniqueId:
        class_id = root.unique_id.append(
            CLASS_SEGMENT_TYPE, f"{test_class.__module__}.{test_class.__qualname__}"
        )
        try:
            self.id_format.check_segment(class_id.last_segment)
        except MalformedIdentifierError as e:
            raise DiscoveryError(
                "Test class has no unique id in the configured format",
                target=test_class.__qualname__,
                details=e,
            ) from e
        return class_id

    def _add_class(self, root: EngineDescriptor, test_class: type) -> ContainerDescriptor:
        class_id = self._class_id(root, test_class)
        existing = root.find(class_id)
        if isinstance(existing, ContainerDescriptor):
            return existing

        container = ContainerDescriptor(
            class_id,
            get_display_name(test_class, test_class.__qualname__),
            test_class=test_class,
        )
        for name in self._test_member_names(test_class):
            raw = inspect.getattr_static(test_class, name)
            container.add_child(
                CaseDescriptor(
                    class_id.append(METHOD_SEGMENT_TYPE, name),
                    get_display_name(raw, name),
                    test_class=test_class,
                    method_name=name,
                )
            )
        root.add_child(container)
        self._log.debug(
            "Resolved test class",
            unique_id=str(class_id),
            cases=len(container.children),
        )
        return container

    # --- Unique id selection ---

    def _parse_selected_id(self, text: str) -> UniqueId:
        try:
            unique_id = self.id_format.parse(text)
        except CaserunError as e:
            raise DiscoveryError(f"Cannot select '{text}'", target=text, details=e) from e
        if unique_id.engine_id != self.engine_id:
            raise DiscoveryError(
                f"Unique id belongs to engine '{unique_id.engine_id}', not '{self.engine_id}'",
                target=text,
            )
        return unique_id

    def _resolve_unique_id(self, root: EngineDescriptor, unique_id: UniqueId) -> None:
        """Makes sure the node addressed by ``unique_id`` exists in the tree."""
        if root.find(unique_id) is not None or len(unique_id.segments) == 1:
            return
        class_segment = unique_id.segments[1]
        if class_segment.type != CLASS_SEGMENT_TYPE:
            raise DiscoveryError(f"Unsupported segment type '{class_segment.type}'", target=str(unique_id))
        test_class = self._import_class(class_segment.value)
        if not self.is_test_class(test_class):
            raise DiscoveryError("Class declares no test members", target=class_segment.value)
        self._add_class(root, test_class)
        if root.find(unique_id) is None:
            raise DiscoveryError("No test found for unique id", target=self.id_format.serialize(unique_id))

    def _prune(self, node: Descriptor, selected: list[UniqueId]) -> None:
        for child in node.children:
            on_path = any(
                s.has_prefix(child.unique_id) or child.unique_id.has_prefix(s) for s in selected
            )
            if not on_path:
                node.remove_child(child)
            else:
                self._prune(child, selected)

    # --- Imports ---

    def _import_module(self, module_name: str) -> ModuleType:
        try:
            return importlib.import_module(module_name)
        except Exception as e:
            self._log.error("Failed to import test module", module=module_name, error=str(e))
            raise DiscoveryError("Failed to import test module", target=module_name, details=e) from e

    def _import_class(self, path: str) -> type:
        """Resolves "package.module.Outer.Inner" by trying the longest importable module prefix."""
        parts = path.split(".")
        for split in range(len(parts) - 1, 0, -1):
            module_name = ".".join(parts[:split])
            try:
                target = importlib.import_module(module_name)
            except ModuleNotFoundError:
                continue
            try:
                for attr in parts[split:]:
                    target = getattr(target, attr)
            except AttributeError:
                continue
            if inspect.isclass(target):
                return target
        raise DiscoveryError("Cannot resolve test class", target=path)


# 🔼⚙️
