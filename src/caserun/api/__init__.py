#
# src/caserun/api/__init__.py
#
"""
Public API for writing test classes and extensions.
"""
from .assertions import (
    assert_all,
    assert_equals,
    assert_false,
    assert_none,
    assert_not_equals,
    assert_not_none,
    assert_not_same,
    assert_same,
    assert_throws,
    assert_true,
    expect_throws,
    fail,
)
from .assumptions import abort, assume_false, assume_true, skip
from .conditions import Condition, ConditionResult, disabled, enabled_if
from .extension import (
    AfterAllCallbacks,
    AfterEachCallbacks,
    BeforeAllCallbacks,
    BeforeEachCallbacks,
    Extension,
    ExtensionRole,
    InstancePostProcessor,
)
from .lifecycle import (
    Lifecycle,
    MemberRole,
    after_all,
    after_each,
    before_all,
    before_each,
    display_name,
    extend_with,
    test,
    test_instance,
)

__all__ = [
    "AfterAllCallbacks",
    "AfterEachCallbacks",
    "BeforeAllCallbacks",
    "BeforeEachCallbacks",
    "Condition",
    "ConditionResult",
    "Extension",
    "ExtensionRole",
    "InstancePostProcessor",
    "Lifecycle",
    "MemberRole",
    "abort",
    "after_all",
    "after_each",
    "assert_all",
    "assert_equals",
    "assert_false",
    "assert_none",
    "assert_not_equals",
    "assert_not_none",
    "assert_not_same",
    "assert_same",
    "assert_throws",
    "assert_true",
    "assume_false",
    "assume_true",
    "before_all",
    "before_each",
    "disabled",
    "display_name",
    "enabled_if",
    "expect_throws",
    "extend_with",
    "fail",
    "skip",
    "test",
    "test_instance",
]

# 🔼⚙️
