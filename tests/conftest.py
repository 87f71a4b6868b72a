import logging
from collections.abc import Callable

import pytest
import structlog

from caserun.config import CaserunConfig
from caserun.engine.descriptor import Descriptor, EngineDescriptor
from caserun.engine.discovery import DiscoveryRequest
from caserun.engine.engine import CaserunEngine
from caserun.engine.listeners import RecordingListener


@pytest.fixture(autouse=True)
def reset_logging():
    """CLI tests reconfigure logging globally; undo that after every test."""
    yield
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        handler.close()
        root_logger.removeHandler(handler)
    structlog.reset_defaults()


@pytest.fixture
def journal() -> list[str]:
    """Ordered record of lifecycle calls made by sample test classes."""
    return []


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def config() -> CaserunConfig:
    return CaserunConfig()


@pytest.fixture
def engine(config: CaserunConfig) -> CaserunEngine:
    return CaserunEngine(config)


@pytest.fixture
def run_classes(engine: CaserunEngine, listener: RecordingListener) -> Callable[..., EngineDescriptor]:
    """Discovers the given classes and executes them against ``listener``."""

    def _run(*classes: type, extensions: tuple = ()) -> EngineDescriptor:
        root = engine.discover(DiscoveryRequest(classes=classes))
        engine.execute(engine.create_request(root, listener, extensions))
        return root

    return _run


@pytest.fixture
def find() -> Callable[[Descriptor, str], Descriptor]:
    """
    Looks up a descriptor by display name. Classes declared inside a test
    function match on the last part of their qualified name.
    """

    def _find(root: Descriptor, name: str) -> Descriptor:
        for descriptor in root.walk():
            if descriptor.display_name.rsplit(".", 1)[-1] == name:
                return descriptor
        raise LookupError(name)

    return _find
