# src/caserun/engine/request.py

"""
The request handed to the execution tree for one run.
"""

from typing import Any

from attrs import define, field

from caserun.commons.reflection import ReflectiveMemberInvoker, ReflectiveMemberLocator
from caserun.config.models import CaserunConfig
from caserun.engine.descriptor import EngineDescriptor
from caserun.protocols import ExecutionListener, MemberInvoker, MemberLocator


@define(frozen=True, slots=True)
class ExecutionRequest:
    """Root descriptor, result sink and the oracles the nodes rely on."""

    root: EngineDescriptor
    listener: ExecutionListener
    config: CaserunConfig = field(factory=CaserunConfig)
    extensions: tuple[Any, ...] = field(factory=tuple, converter=tuple)
    locator: MemberLocator = field(factory=ReflectiveMemberLocator)
    invoker: MemberInvoker = field(factory=ReflectiveMemberInvoker)


# 🔼⚙️
