#
# src/caserun/commons/reflection.py
#
"""
Reflection-based member lookup and invocation.

These are the default implementations of the MemberLocator and
MemberInvoker protocols, built on class namespaces and the MRO.
"""
from typing import Any

import structlog

from caserun.api.lifecycle import MemberRole, get_roles, unwrap_member
from caserun.exceptions import InstanceCreationError
from caserun.protocols import Member, MemberInvoker, MemberLocator, MethodSortOrder

log = structlog.get_logger("commons.reflection")


def class_hierarchy(test_class: type) -> list[type]:
    """Returns the MRO of ``test_class`` without ``object``, most-derived first."""
    return [klass for klass in test_class.__mro__ if klass is not object]


def is_static_member(raw: Any) -> bool:
    return isinstance(raw, (staticmethod, classmethod))


def new_instance(test_class: type) -> Any:
    """Instantiates a test class through its no-argument constructor."""
    try:
        return test_class()
    except Exception as e:
        raise InstanceCreationError(
            f"Failed to create test instance of type [{test_class.__qualname__}]"
        ) from e


class ReflectiveMemberLocator(MemberLocator):
    """
    Finds tagged members by walking class namespaces.

    Within a class members keep their declaration order. A member redefined
    in a subclass is only considered on the most-derived definition, and
    only if that definition carries the role itself.

    With ``test_prefix`` set, untagged callables whose name starts with the
    prefix also count as test members.
    """

    def __init__(self, test_prefix: str | None = None) -> None:
        self.test_prefix = test_prefix

    def _has_role(self, name: str, raw: Any, role: MemberRole) -> bool:
        roles = get_roles(raw)
        if role in roles:
            return True
        return (
            role is MemberRole.TEST
            and bool(self.test_prefix)
            and not roles
            and name.startswith(self.test_prefix)
            and callable(unwrap_member(raw))
            and not isinstance(raw, type)
        )

    def find_members(
        self,
        test_class: type,
        role: MemberRole,
        order: MethodSortOrder = MethodSortOrder.HIERARCHY_DOWN,
    ) -> list[Member]:
        hierarchy = class_hierarchy(test_class)
        seen: set[str] = set()
        per_class: list[list[Member]] = []

        for klass in hierarchy:
            found: list[Member] = []
            for name, raw in vars(klass).items():
                if name in seen:
                    continue
                if self._has_role(name, raw, role):
                    found.append(
                        Member(
                            owner=test_class,
                            name=name,
                            role=role,
                            is_static=is_static_member(raw),
                            declaring_class=klass,
                        )
                    )
            seen.update(vars(klass).keys())
            per_class.append(found)

        if order is MethodSortOrder.HIERARCHY_DOWN:
            per_class.reverse()

        members = [member for found in per_class for member in found]
        log.debug(
            "Resolved members",
            test_class=test_class.__qualname__,
            role=role.value,
            order=order.name,
            count=len(members),
        )
        return members


class ReflectiveMemberInvoker(MemberInvoker):
    """Calls members without arguments, bound to the instance or the class."""

    def invoke(self, member: Member, instance: Any | None) -> Any:
        target = instance if instance is not None else member.owner
        return getattr(target, member.name)()


# 🔼⚙️
