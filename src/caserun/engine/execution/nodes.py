#
# src/caserun/engine/execution/nodes.py
#
"""
Execution nodes: the units that run a descriptor subtree.

The set of node kinds is closed and chosen by descriptor type through
NODE_TYPES. Every node shares one contract: ``execute(request, context)``
runs it in the context its caller derived for it and reports exactly one
terminal outcome. Nodes never raise for test failures; whatever a test
class, a condition or an extension raises ends up as that node's outcome.
"""

import inspect
from typing import Any, Protocol

import structlog

from caserun.api.conditions import evaluate_conditions, get_conditions
from caserun.api.extension import ExtensionRole
from caserun.api.lifecycle import Lifecycle, MemberRole, get_extensions, get_lifecycle
from caserun.commons.reflection import is_static_member, new_instance
from caserun.engine.context import ExecutionContext
from caserun.engine.descriptor import (
    CaseDescriptor,
    ContainerDescriptor,
    Descriptor,
    EngineDescriptor,
)
from caserun.engine.execution.aggregation import execute_and_aggregate, start_aggregate
from caserun.engine.request import ExecutionRequest
from caserun.exceptions import (
    InstanceCreationError,
    InstancePostProcessingError,
    LifecycleViolationError,
)
from caserun.protocols import Member, MethodSortOrder
from caserun.results import ExecutionResult
from caserun.telemetry import StructLogger

log: StructLogger = structlog.get_logger("engine.execution")


class ExecutionNode(Protocol):
    """Shared contract of every node kind."""

    descriptor: Descriptor

    def execute(self, request: ExecutionRequest, context: ExecutionContext) -> None:
        ...


def invoke_lifecycle_member(request: ExecutionRequest, member: Member, instance: Any | None) -> Any:
    """Invokes a member, refusing instance-scoped members when no instance exists."""
    if instance is None and member.is_instance_scoped:
        raise LifecycleViolationError(
            f"Failed to invoke @{member.role.value} member [{member.qualified_name}]. "
            "Either declare it as a staticmethod/classmethod or annotate the test class "
            "with @test_instance(Lifecycle.PER_CLASS)."
        )
    return request.invoker.invoke(member, instance)


def resolve_lifecycle(request: ExecutionRequest, test_class: type) -> Lifecycle:
    return get_lifecycle(test_class, request.config.execution.default_lifecycle)


def _execute_children(
    request: ExecutionRequest,
    context: ExecutionContext,
    children: tuple[Descriptor, ...],
) -> None:
    for child in children:
        build_node(child).execute(request, context.derive(child))


def create_test_instance(descriptor: Descriptor, context: ExecutionContext) -> Any:
    """
    Creates the test instance, publishes it into ``context`` and lets every
    InstancePostProcessor see it.
    """
    test_class = context.test_class
    try:
        instance = new_instance(test_class)
    except InstanceCreationError as e:
        e.add_note(f"Descriptor: {descriptor.unique_id}")
        raise
    context.publish_instance(instance)
    log.debug(
        "Created test instance",
        unique_id=str(descriptor.unique_id),
        test_class=test_class.__qualname__,
    )

    for processor in context.get_extensions(ExtensionRole.INSTANCE_POST_PROCESSING):
        try:
            processor.post_process_test_instance(context)
        except Exception as e:
            raise InstancePostProcessingError(
                f"Failed to post-process test instance of type [{test_class.__qualname__}] "
                f"for descriptor [{descriptor.unique_id}]"
            ) from e
    return instance


class EngineExecutionNode:
    """Runs every top-level container of a run."""

    def __init__(self, descriptor: EngineDescriptor):
        self.descriptor = descriptor

    def execute(self, request: ExecutionRequest, context: ExecutionContext) -> None:
        listener = request.listener
        listener.execution_started(self.descriptor)
        engine_context = context.derive(self.descriptor)
        engine_context.register_extensions(*request.extensions)
        log.info(
            "Executing engine",
            unique_id=str(self.descriptor.unique_id),
            containers=len(self.descriptor.children),
        )
        _execute_children(request, engine_context, self.descriptor.children)
        listener.execution_succeeded(self.descriptor)


class ContainerExecutionNode:
    """
    Runs a test class: before_all, every child, then after_all.

    With the per-class lifecycle a single instance is created before
    before_all and shared by all cases; otherwise each case creates its own
    instance in its own derived context. Any failure here, skip and abort
    signals included, fails the container.
    """

    def __init__(self, descriptor: ContainerDescriptor):
        self.descriptor = descriptor

    def execute(self, request: ExecutionRequest, context: ExecutionContext) -> None:
        descriptor = self.descriptor
        listener = request.listener
        test_class = descriptor.test_class
        node_log = log.bind(unique_id=str(descriptor.unique_id))

        class_context = context.derive(descriptor, test_class=test_class, test_instance=None)

        try:
            condition = evaluate_conditions(get_conditions(test_class), class_context)
        except Exception as e:
            node_log.warning("Evaluating test class conditions failed", error=repr(e))
            listener.execution_started(descriptor)
            ExecutionResult.failed(start_aggregate(e)).report(listener, descriptor)
            return

        if not condition.enabled:
            reason = (
                f"Skipped test class [{test_class.__qualname__}]; "
                f"reason: {condition.reason or 'unknown'}"
            )
            node_log.info("Test class disabled", reason=reason)
            listener.execution_skipped(descriptor, reason)
            return

        listener.execution_started(descriptor)

        exception: BaseException | None = None
        setup_attempted = False
        try:
            class_context.register_extensions(*get_extensions(test_class))
            lifecycle = resolve_lifecycle(request, test_class)
            node_log.debug("Executing test class", lifecycle=lifecycle.value)
            if lifecycle is Lifecycle.PER_CLASS:
                create_test_instance(descriptor, class_context)
            setup_attempted = True
            self._execute_before_all(request, class_context)
            _execute_children(request, class_context, descriptor.children)
        except Exception as e:
            node_log.warning("Test class setup failed", error=repr(e))
            exception = start_aggregate(e)

        if setup_attempted:
            exception = self._execute_after_all(request, class_context, exception)

        if exception is None:
            ExecutionResult.successful().report(listener, descriptor)
        else:
            ExecutionResult.failed(exception).report(listener, descriptor)

    def _execute_before_all(self, request: ExecutionRequest, context: ExecutionContext) -> None:
        callbacks = context.get_extensions(ExtensionRole.BEFORE_ALL)
        instance = context.test_instance

        for callback in callbacks:
            callback.pre_before_all(context)

        for member in request.locator.find_members(
            self.descriptor.test_class, MemberRole.BEFORE_ALL, MethodSortOrder.HIERARCHY_DOWN
        ):
            invoke_lifecycle_member(request, member, instance)

        for callback in callbacks:
            callback.post_before_all(context)

    def _execute_after_all(
        self,
        request: ExecutionRequest,
        context: ExecutionContext,
        exception: BaseException | None,
    ) -> BaseException | None:
        # Every step runs; failures are folded into the running aggregate.
        callbacks = context.get_extensions(ExtensionRole.AFTER_ALL, reverse=True)
        instance = context.test_instance

        for callback in callbacks:
            exception = execute_and_aggregate(exception, callback.pre_after_all, context)

        for member in request.locator.find_members(
            self.descriptor.test_class, MemberRole.AFTER_ALL, MethodSortOrder.HIERARCHY_UP
        ):
            exception = execute_and_aggregate(
                exception, invoke_lifecycle_member, request, member, instance
            )

        for callback in callbacks:
            exception = execute_and_aggregate(exception, callback.post_after_all, context)

        return exception


class CaseExecutionNode:
    """
    Runs one test member between before_each and after_each.

    The disable check comes first; only an enabled case registers its own
    extensions and, under the per-method lifecycle, creates its instance.
    """

    def __init__(self, descriptor: CaseDescriptor):
        self.descriptor = descriptor

    def _raw_member(self) -> Any:
        return inspect.getattr_static(self.descriptor.test_class, self.descriptor.method_name)

    def execute(self, request: ExecutionRequest, context: ExecutionContext) -> None:
        descriptor = self.descriptor
        listener = request.listener
        listener.execution_started(descriptor)

        try:
            raw_member = self._raw_member()
            condition = evaluate_conditions(get_conditions(raw_member), context)
            if condition.enabled:
                context.register_extensions(*get_extensions(raw_member))
                if resolve_lifecycle(request, descriptor.test_class) is Lifecycle.PER_METHOD:
                    create_test_instance(descriptor, context)
        except Exception as e:
            # Nothing of the case has run yet, so there is nothing to tear down.
            log.warning(
                "Preparing test method failed",
                unique_id=str(descriptor.unique_id),
                error=repr(e),
            )
            ExecutionResult.failed(start_aggregate(e)).report(listener, descriptor)
            return

        if not condition.enabled:
            listener.execution_skipped(
                descriptor,
                f"Skipped test method [{descriptor.method_name}]; "
                f"reason: {condition.reason or 'unknown'}",
            )
            return

        exception: BaseException | None = None
        try:
            self._execute_before_each(request, context)
            self._invoke_test_member(request, context)
        except Exception as e:
            exception = start_aggregate(e)

        exception = self._execute_after_each(request, context, exception)
        ExecutionResult.classify(exception).report(listener, descriptor)

    def _execute_before_each(self, request: ExecutionRequest, context: ExecutionContext) -> None:
        callbacks = context.get_extensions(ExtensionRole.BEFORE_EACH)

        for callback in callbacks:
            callback.pre_before_each(context)

        for member in request.locator.find_members(
            self.descriptor.test_class, MemberRole.BEFORE_EACH, MethodSortOrder.HIERARCHY_DOWN
        ):
            invoke_lifecycle_member(request, member, context.test_instance)

        for callback in callbacks:
            callback.post_before_each(context)

    def _invoke_test_member(self, request: ExecutionRequest, context: ExecutionContext) -> None:
        member = Member(
            owner=self.descriptor.test_class,
            name=self.descriptor.method_name,
            role=MemberRole.TEST,
            is_static=is_static_member(self._raw_member()),
        )
        result = invoke_lifecycle_member(request, member, context.test_instance)
        if inspect.iscoroutine(result):
            result.close()
            raise LifecycleViolationError(
                f"Test member [{member.qualified_name}] is a coroutine function; "
                "async test members are not supported"
            )

    def _execute_after_each(
        self,
        request: ExecutionRequest,
        context: ExecutionContext,
        exception: BaseException | None,
    ) -> BaseException | None:
        callbacks = context.get_extensions(ExtensionRole.AFTER_EACH, reverse=True)

        for callback in callbacks:
            exception = execute_and_aggregate(exception, callback.pre_after_each, context)

        for member in request.locator.find_members(
            self.descriptor.test_class, MemberRole.AFTER_EACH, MethodSortOrder.HIERARCHY_UP
        ):
            exception = execute_and_aggregate(
                exception, invoke_lifecycle_member, request, member, context.test_instance
            )

        for callback in callbacks:
            exception = execute_and_aggregate(exception, callback.post_after_each, context)

        return exception


NODE_TYPES: dict[type[Descriptor], type] = {
    EngineDescriptor: EngineExecutionNode,
    ContainerDescriptor: ContainerExecutionNode,
    CaseDescriptor: CaseExecutionNode,
}


def build_node(descriptor: Descriptor) -> ExecutionNode:
    """Wraps a descriptor in the node kind registered for its type."""
    node_type = NODE_TYPES.get(type(descriptor))
    if node_type is None:
        for descriptor_type, candidate in NODE_TYPES.items():
            if isinstance(descriptor, descriptor_type):
                node_type = candidate
                break
    if node_type is None:
        raise TypeError(f"No execution node registered for {type(descriptor).__name__}")
    return node_type(descriptor)


# 🔼⚙️
