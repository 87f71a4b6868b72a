#
# tests/unit/test_engine.py
#
"""
End-to-end tests of CaserunEngine: discovery, execution and the listener
contract across a whole run.
"""

from collections import Counter
from unittest.mock import Mock, call

import pytest

from caserun.api import (
    BeforeAllCallbacks,
    after_all,
    before_all,
    disabled,
    skip,
    test,
)
from caserun.config import CaserunConfig, ExecutionConfig
from caserun.engine.descriptor import EngineDescriptor
from caserun.engine.discovery import DiscoveryRequest
from caserun.engine.engine import CaserunEngine
from caserun.engine.execution.nodes import NODE_TYPES, build_node
from caserun.engine.listeners import RecordingListener
from caserun.exceptions import ConfigurationError
from caserun.protocols import ExecutionListener, Member
from caserun.results import ExecutionStatus

TERMINAL_KINDS = {"succeeded", "failed", "skipped", "aborted"}

# Referenced by dotted path from the configuration in the tests below.
CONFIGURED_CALLS: list[str] = []


class ConfiguredExtension(BeforeAllCallbacks):
    def pre_before_all(self, context):
        CONFIGURED_CALLS.append(context.test_class.__name__)


def _sample_classes():
    class Passing:
        @before_all
        @staticmethod
        def setup():
            pass

        @test
        def one(self):
            pass

        @test
        def two(self):
            skip("not today")

    class Failing:
        @after_all
        @staticmethod
        def teardown():
            raise RuntimeError("teardown")

        @test
        def broken(self):
            raise AssertionError("nope")

    @disabled("off")
    class Disabled:
        @test
        def never(self):
            pass

    return Passing, Failing, Disabled


class TestListenerContract:
    """Every descriptor gets exactly one terminal outcome, after its start."""

    def test_one_terminal_event_per_descriptor(self, engine: CaserunEngine) -> None:
        listener = RecordingListener()
        engine.run(DiscoveryRequest(classes=_sample_classes()), listener=listener)

        terminal = Counter(e.descriptor for e in listener.events if e.kind in TERMINAL_KINDS)
        executed = {e.descriptor for e in listener.events}
        assert all(count == 1 for count in terminal.values())
        assert set(terminal) == executed

    def test_started_precedes_terminal_and_children_nest(self, engine: CaserunEngine) -> None:
        listener = RecordingListener()
        engine.run(DiscoveryRequest(classes=_sample_classes()), listener=listener)

        open_descriptors = []
        for event in listener.events:
            if event.kind == "started":
                open_descriptors.append(event.descriptor)
            elif event.descriptor in open_descriptors:
                # A descriptor finishes only after all its started children finished.
                assert open_descriptors[-1] is event.descriptor
                open_descriptors.pop()
        assert open_descriptors == []

    def test_engine_descriptor_brackets_the_run(self, engine: CaserunEngine) -> None:
        listener = RecordingListener()
        engine.run(DiscoveryRequest(classes=_sample_classes()), listener=listener)

        assert isinstance(listener.events[0].descriptor, EngineDescriptor)
        assert listener.events[0].kind == "started"
        assert isinstance(listener.events[-1].descriptor, EngineDescriptor)
        assert listener.events[-1].kind == "succeeded"


class TestSummary:
    """The summary returned by CaserunEngine.run."""

    def test_counts(self, engine: CaserunEngine) -> None:
        summary = engine.run(DiscoveryRequest(classes=_sample_classes()))

        assert summary.cases[ExecutionStatus.SUCCESSFUL] == 1
        assert summary.cases[ExecutionStatus.SKIPPED] == 1
        assert summary.cases[ExecutionStatus.FAILED] == 1
        assert summary.cases_found == 3
        assert summary.containers[ExecutionStatus.SUCCESSFUL] == 1
        assert summary.containers[ExecutionStatus.FAILED] == 1
        assert summary.containers[ExecutionStatus.SKIPPED] == 1
        assert summary.has_failures

    def test_failures_carry_causes(self, engine: CaserunEngine) -> None:
        summary = engine.run(DiscoveryRequest(classes=_sample_classes()))

        causes = sorted(str(record.cause) for record in summary.failures)
        assert causes == ["nope", "teardown"]
        assert all(record.status is ExecutionStatus.FAILED for record in summary.failures)

    def test_skip_reasons_are_keyed_by_unique_id(self, engine: CaserunEngine) -> None:
        summary = engine.run(DiscoveryRequest(classes=_sample_classes()))

        reasons = list(summary.skipped_reasons.values())
        assert "not today" in reasons
        assert any("off" in reason for reason in reasons)

    def test_clean_run(self, engine: CaserunEngine) -> None:
        class Fine:
            @test
            def ok(self):
                pass

        summary = engine.run(DiscoveryRequest(classes=[Fine]))
        assert not summary.has_failures
        assert summary.failures == []


class TestConfiguredEngine:
    """Engine behavior driven by configuration."""

    def test_configured_extensions_are_loaded(self) -> None:
        CONFIGURED_CALLS.clear()
        config = CaserunConfig(execution=ExecutionConfig(extensions=[f"{__name__}:ConfiguredExtension"]))

        class Fine:
            @test
            def ok(self):
                pass

        CaserunEngine(config).run(DiscoveryRequest(classes=[Fine]))
        assert CONFIGURED_CALLS == ["Fine"]

    def test_bad_extension_path(self) -> None:
        config = CaserunConfig(execution=ExecutionConfig(extensions=["caserun_missing_module:Nope"]))

        with pytest.raises(ConfigurationError, match="Cannot import"):
            CaserunEngine(config).configured_extensions()

    def test_custom_engine_id(self) -> None:
        engine = CaserunEngine(engine_id="suite")

        class Fine:
            @test
            def ok(self):
                pass

        root = engine.discover(DiscoveryRequest(classes=[Fine]))
        assert engine.id_format.serialize(root.unique_id) == "[engine:suite]"


class TestNodeFactory:
    def test_descriptor_types_map_to_nodes(self, engine: CaserunEngine) -> None:
        class Fine:
            @test
            def ok(self):
                pass

        root = engine.discover(DiscoveryRequest(classes=[Fine]))
        for descriptor in root.walk():
            node = build_node(descriptor)
            assert isinstance(node, NODE_TYPES[type(descriptor)])
            assert node.descriptor is descriptor

    def test_unknown_descriptor_type(self) -> None:
        with pytest.raises(TypeError, match="No execution node"):
            build_node(object())


class TestCollaborators:
    """Listeners and member invokers are plain protocol implementations."""

    def test_mock_listener_receives_calls_in_order(self, engine: CaserunEngine) -> None:
        class Fine:
            @test
            def ok(self):
                pass

        listener = Mock(spec=ExecutionListener)
        root = engine.discover(DiscoveryRequest(classes=[Fine]))
        engine.execute(engine.create_request(root, listener))

        container = root.children[0]
        case = container.children[0]
        assert listener.mock_calls == [
            call.execution_started(root),
            call.execution_started(container),
            call.execution_started(case),
            call.execution_succeeded(case),
            call.execution_succeeded(container),
            call.execution_succeeded(root),
        ]

    def test_custom_invoker_is_used_for_every_member(self) -> None:
        invoked: list[str] = []

        class TracingInvoker:
            def invoke(self, member: Member, instance):
                invoked.append(f"{member.role.value}:{member.name}")

        class Fine:
            @before_all
            @staticmethod
            def setup():
                raise AssertionError("never called directly")

            @test
            def ok(self):
                raise AssertionError("never called directly")

        engine = CaserunEngine(invoker=TracingInvoker())
        summary = engine.run(DiscoveryRequest(classes=[Fine]))

        assert invoked == ["before_all:setup", "test:ok"]
        assert not summary.has_failures
