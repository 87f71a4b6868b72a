#
# src/caserun/api/assertions.py
#
"""
Assertion helpers for test members.

Every helper raises AssertionFailedError (an AssertionError) on failure.
Messages may be given as a string or as a zero-argument callable that is
only called when the assertion fails. A user message is prepended to the
generated one as ``"<message> ==> "``.
"""

from collections.abc import Callable
from typing import Any, NoReturn, TypeVar

from caserun.engine.execution.aggregation import combine, get_suppressed, start_aggregate
from caserun.exceptions import AssertionFailedError, MultipleFailuresError

E = TypeVar("E", bound=BaseException)

Message = str | Callable[[], str | None] | None


def _resolve(message: Message) -> str | None:
    return message() if callable(message) else message


def _prefixed(message: Message, text: str) -> str:
    user_message = _resolve(message)
    return f"{user_message} ==> {text}" if user_message else text


def _describe(value: Any, ambiguous: bool = False) -> str:
    if ambiguous:
        return f"{type(value).__qualname__}@{id(value):x}<{value}>"
    return f"<{value}>"


def _expected_but_was(expected: Any, actual: Any) -> str:
    # Different objects that print the same get their type and identity.
    ambiguous = expected is not actual and str(expected) == str(actual)
    return f"expected: {_describe(expected, ambiguous)} but was: {_describe(actual, ambiguous)}"


def _type_name(exception_type: type) -> str:
    if exception_type.__module__ == "builtins":
        return exception_type.__qualname__
    return f"{exception_type.__module__}.{exception_type.__qualname__}"


def fail(message: Message = None) -> NoReturn:
    raise AssertionFailedError(_resolve(message))


def assert_true(condition: bool | Callable[[], bool], message: Message = None) -> None:
    if callable(condition):
        condition = condition()
    if not condition:
        fail(message)


def assert_false(condition: bool | Callable[[], bool], message: Message = None) -> None:
    if callable(condition):
        condition = condition()
    if condition:
        fail(message)


def assert_none(actual: Any, message: Message = None) -> None:
    if actual is not None:
        fail(_prefixed(message, _expected_but_was(None, actual)))


def assert_not_none(actual: Any, message: Message = None) -> None:
    if actual is None:
        fail(_prefixed(message, "expected: not <None>"))


def assert_equals(expected: Any, actual: Any, message: Message = None) -> None:
    if not expected == actual:
        fail(_prefixed(message, _expected_but_was(expected, actual)))


def assert_not_equals(unexpected: Any, actual: Any, message: Message = None) -> None:
    if unexpected == actual:
        fail(_prefixed(message, f"expected: not equal but was: <{actual}>"))


def assert_same(expected: Any, actual: Any, message: Message = None) -> None:
    if expected is not actual:
        fail(_prefixed(message, _expected_but_was(expected, actual)))


def assert_not_same(unexpected: Any, actual: Any, message: Message = None) -> None:
    if unexpected is actual:
        fail(_prefixed(message, f"expected: not same but was: <{actual}>"))


def expect_throws(expected_type: type[E], executable: Callable[[], Any], message: Message = None) -> E:
    """
    Runs ``executable`` and returns the exception it raised, which must be an
    instance of ``expected_type``. Any other Exception fails the assertion
    and is chained as its cause.
    """
    try:
        executable()
    except expected_type as e:
        return e
    except Exception as e:
        raise AssertionFailedError(
            _prefixed(
                message,
                "Unexpected exception type thrown ==> "
                f"expected: <{_type_name(expected_type)}> but was: <{_type_name(type(e))}>",
            )
        ) from e
    fail(_prefixed(message, f"Expected {_type_name(expected_type)} to be thrown, but nothing was thrown."))


def assert_throws(expected_type: type[BaseException], executable: Callable[[], Any], message: Message = None) -> None:
    expect_throws(expected_type, executable, message)


def assert_all(*executables: Callable[[], Any], heading: str | None = None) -> None:
    """
    Runs every executable, then fails with a MultipleFailuresError listing
    each AssertionError in the order they occurred. Any other exception is
    not an assertion failure and propagates immediately.
    """
    failure: BaseException | None = None
    for executable in executables:
        try:
            executable()
        except AssertionError as e:
            failure = combine(failure, e) if failure is not None else start_aggregate(e)

    if failure is not None:
        failures = [failure, *get_suppressed(failure)]
        # The group error carries the failures; the first one goes back to its plain state.
        start_aggregate(failure)
        raise MultipleFailuresError(heading, failures)


# 🔼⚙️
