# src/caserun/engine/engine.py

"""
The caserun engine: discovery plus sequential execution of the tree.
"""

from typing import Any

import structlog

from caserun.commons.reflection import ReflectiveMemberInvoker, ReflectiveMemberLocator
from caserun.config.loader import import_object
from caserun.config.models import CaserunConfig
from caserun.engine.context import ExecutionContext
from caserun.engine.descriptor import EngineDescriptor
from caserun.engine.discovery import Discoverer, DiscoveryRequest
from caserun.engine.execution.nodes import build_node
from caserun.engine.identifier import UniqueIdFormat
from caserun.engine.listeners import (
    CompositeListener,
    ExecutionSummary,
    LoggingListener,
    SummaryListener,
)
from caserun.engine.request import ExecutionRequest
from caserun.protocols import ExecutionListener, MemberInvoker, MemberLocator
from caserun.telemetry import StructLogger, run_context

log: StructLogger = structlog.get_logger("engine")

DEFAULT_ENGINE_ID = "caserun"


class CaserunEngine:
    """
    Discovers tests and runs them one branch at a time.

    The unique id format is taken from the configuration once and stays
    fixed for the lifetime of the engine.
    """

    def __init__(
        self,
        config: CaserunConfig | None = None,
        engine_id: str = DEFAULT_ENGINE_ID,
        locator: MemberLocator | None = None,
        invoker: MemberInvoker | None = None,
    ):
        self.config = config or CaserunConfig()
        self.engine_id = engine_id
        self.id_format: UniqueIdFormat = self.config.identifier.to_format()
        self.locator = locator or ReflectiveMemberLocator(self.config.discovery.method_prefix)
        self.invoker = invoker or ReflectiveMemberInvoker()
        self._log = log.bind(engine_id=engine_id)
        self._log.debug("Engine initialized", id_format=repr(self.id_format))

    def configured_extensions(self) -> tuple[Any, ...]:
        """Resolves the extension import paths from the configuration."""
        return tuple(import_object(path) for path in self.config.execution.extensions)

    def discover(self, request: DiscoveryRequest) -> EngineDescriptor:
        return Discoverer(self.engine_id, self.id_format, self.locator).discover(request)

    def create_request(
        self,
        root: EngineDescriptor,
        listener: ExecutionListener,
        extensions: tuple[Any, ...] = (),
    ) -> ExecutionRequest:
        return ExecutionRequest(
            root=root,
            listener=listener,
            config=self.config,
            extensions=self.configured_extensions() + tuple(extensions),
            locator=self.locator,
            invoker=self.invoker,
        )

    def execute(self, request: ExecutionRequest) -> None:
        """Runs the whole tree under ``request.root``; returns when every branch is done."""
        with run_context(self.engine_id):
            self._log.info("Starting execution", root=self.id_format.serialize(request.root.unique_id))
            build_node(request.root).execute(request, ExecutionContext())
            self._log.info("Execution finished")

    def run(
        self,
        discovery_request: DiscoveryRequest,
        listener: ExecutionListener | None = None,
        extensions: tuple[Any, ...] = (),
    ) -> ExecutionSummary:
        """Discovers, executes and summarizes in one call."""
        summary_listener = SummaryListener()
        listeners: list[ExecutionListener] = [summary_listener, LoggingListener()]
        if listener is not None:
            listeners.append(listener)

        root = self.discover(discovery_request)
        self.execute(self.create_request(root, CompositeListener(*listeners), extensions))
        return summary_listener.summary


# 🔼⚙️
