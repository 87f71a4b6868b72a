#
# tests/unit/test_api.py
#
"""
Tests for the decorators, conditions and assumption helpers of caserun.api.
"""

import pytest

from caserun.api import (
    Lifecycle,
    MemberRole,
    abort,
    assume_false,
    assume_true,
    before_all,
    disabled,
    display_name,
    enabled_if,
    extend_with,
    skip,
    test,
    test_instance,
)
from caserun.api.conditions import evaluate_conditions, get_conditions
from caserun.api.extension import (
    AfterEachCallbacks,
    BeforeEachCallbacks,
    ExtensionRole,
    InstancePostProcessor,
    extensions_for,
    supports,
)
from caserun.api.lifecycle import get_display_name, get_extensions, get_lifecycle, get_roles
from caserun.engine.context import ExecutionContext
from caserun.exceptions import CaseAborted, CaseSkipped


class EachHooks(BeforeEachCallbacks, AfterEachCallbacks):
    pass


class PostProcessor(InstancePostProcessor):
    pass


class TestMemberDecorators:
    """Role tags on functions, staticmethods and classmethods."""

    def test_tags_plain_function(self) -> None:
        @test
        def case():
            pass

        assert get_roles(case) == {MemberRole.TEST}

    def test_tags_staticmethod_in_either_order(self) -> None:
        outer = before_all(staticmethod(lambda: None))
        inner = staticmethod(before_all(lambda: None))

        assert isinstance(outer, staticmethod)
        assert get_roles(outer) == {MemberRole.BEFORE_ALL}
        assert get_roles(inner) == {MemberRole.BEFORE_ALL}

    def test_multiple_roles_accumulate(self) -> None:
        @test
        @before_all
        def member():
            pass

        assert get_roles(member) == {MemberRole.TEST, MemberRole.BEFORE_ALL}

    def test_rejects_non_callables(self) -> None:
        with pytest.raises(TypeError):
            test(42)


class TestClassDecorators:
    """Class-level metadata and its inheritance rules."""

    def test_display_name_is_not_inherited_by_subclasses(self) -> None:
        @display_name("Friendly")
        class Base:
            pass

        class Child(Base):
            pass

        assert get_display_name(Base, "Base") == "Friendly"
        assert get_display_name(Child, "Child") == "Child"

    def test_lifecycle_defaults_and_inherits(self) -> None:
        @test_instance(Lifecycle.PER_CLASS)
        class Shared:
            pass

        class Child(Shared):
            pass

        class Plain:
            pass

        assert get_lifecycle(Shared) is Lifecycle.PER_CLASS
        assert get_lifecycle(Child) is Lifecycle.PER_CLASS
        assert get_lifecycle(Plain) is Lifecycle.PER_METHOD
        assert get_lifecycle(Plain, Lifecycle.PER_CLASS) is Lifecycle.PER_CLASS

    def test_lifecycle_accepts_strings(self) -> None:
        @test_instance("per_class")
        class Shared:
            pass

        assert get_lifecycle(Shared) is Lifecycle.PER_CLASS

    def test_extensions_collect_base_first_without_sharing(self) -> None:
        @extend_with(EachHooks)
        class Base:
            pass

        @extend_with(PostProcessor)
        class Child(Base):
            pass

        assert get_extensions(Base) == (EachHooks,)
        assert get_extensions(Child) == (EachHooks, PostProcessor)

    def test_member_extensions(self) -> None:
        hooks = EachHooks()

        @extend_with(hooks)
        @test
        def case():
            pass

        assert get_extensions(case) == (hooks,)


class TestExtensionRoles:
    """Capability checks on extension objects."""

    def test_supports_checks_capabilities(self) -> None:
        hooks = EachHooks()

        assert supports(hooks, ExtensionRole.BEFORE_EACH)
        assert supports(hooks, ExtensionRole.AFTER_EACH)
        assert not supports(hooks, ExtensionRole.BEFORE_ALL)
        assert not supports(object(), ExtensionRole.INSTANCE_POST_PROCESSING)

    def test_extensions_for_keeps_or_reverses_order(self) -> None:
        first, second, other = EachHooks(), EachHooks(), PostProcessor()

        assert extensions_for([first, other, second], ExtensionRole.AFTER_EACH) == [first, second]
        assert extensions_for([first, other, second], ExtensionRole.AFTER_EACH, reverse=True) == [
            second,
            first,
        ]


class TestConditions:
    """Disable and enable-if conditions."""

    def test_no_conditions_means_enabled(self) -> None:
        class Plain:
            pass

        assert evaluate_conditions(get_conditions(Plain), ExecutionContext()).enabled

    def test_disabled_carries_reason(self) -> None:
        @disabled("not today")
        class Off:
            pass

        result = evaluate_conditions(get_conditions(Off), ExecutionContext())
        assert not result.enabled
        assert result.reason == "not today"

    def test_enabled_if_sees_context(self) -> None:
        @enabled_if(lambda ctx: ctx.get_attribute("env") == "ci", "only on ci")
        def member():
            pass

        local = ExecutionContext(attributes={"env": "local"})
        ci = ExecutionContext(attributes={"env": "ci"})

        assert evaluate_conditions(get_conditions(member), local).reason == "only on ci"
        assert evaluate_conditions(get_conditions(member), ci).enabled

    def test_class_conditions_are_not_inherited(self) -> None:
        @disabled()
        class Off:
            pass

        class Child(Off):
            pass

        assert get_conditions(Child) == ()


class TestAssumptions:
    """Helpers raising the skip and abort signals."""

    def test_skip(self) -> None:
        with pytest.raises(CaseSkipped) as exc_info:
            skip("later")
        assert exc_info.value.reason == "later"

    def test_abort(self) -> None:
        with pytest.raises(CaseAborted):
            abort("broken env")

    def test_assume_true_and_false(self) -> None:
        assume_true(True)
        assume_false(False)
        with pytest.raises(CaseAborted, match="needs network"):
            assume_true(False, "needs network")
        with pytest.raises(CaseAborted):
            assume_false(True)
