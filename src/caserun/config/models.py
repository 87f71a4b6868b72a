#
# config/models.py
#
"""
Attrs-based data models for the caserun configuration structure.
"""

import logging
from typing import Any

from attrs import define, field

from caserun.api.lifecycle import Lifecycle
from caserun.engine.identifier import UniqueIdFormat


# --- Validators ---
def _validate_log_level(inst: Any, attr: Any, value: str) -> None:
    """Validator for standard logging level names."""
    valid = logging.getLevelNamesMapping().keys()
    if value.upper() not in valid:
        raise ValueError(f"Invalid log_level '{value}'. Must be one of {list(valid)}.")


def _validate_token(inst: Any, attr: Any, value: str) -> None:
    if not isinstance(value, str) or not value:
        raise ValueError(f"Field '{attr.name}' must be a non-empty string, got {value!r}")
    if any(ch in value for ch in "[]"):
        raise ValueError(f"Field '{attr.name}' must not contain brackets, got {value!r}")


# --- Sections ---
@define(frozen=True, slots=True)
class GlobalConfig:
    """Global settings."""
    log_level: str = field(default="INFO", validator=_validate_log_level)

    @property
    def numeric_log_level(self) -> int:
        return logging.getLevelNamesMapping()[self.log_level.upper()]


@define(frozen=True, slots=True)
class IdentifierConfig:
    """Text format of unique ids; fixed for the lifetime of an engine."""
    segment_delimiter: str = field(default="/", validator=_validate_token)
    type_value_separator: str = field(default=":", validator=_validate_token)

    def __attrs_post_init__(self) -> None:
        if self.segment_delimiter == self.type_value_separator:
            raise ValueError("segment_delimiter and type_value_separator must differ")
        # Class segment values are dotted module paths.
        if "." in self.segment_delimiter:
            raise ValueError(f"segment_delimiter must not contain '.', got {self.segment_delimiter!r}")

    def to_format(self) -> UniqueIdFormat:
        return UniqueIdFormat(self.segment_delimiter, self.type_value_separator)


@define(frozen=True, slots=True)
class ExecutionConfig:
    """Execution defaults and engine-wide extensions."""
    default_lifecycle: Lifecycle = field(default=Lifecycle.PER_METHOD, converter=Lifecycle)
    # Dotted paths in the form "package.module:Name"
    extensions: tuple[str, ...] = field(factory=tuple, converter=tuple)


@define(frozen=True, slots=True)
class DiscoveryConfig:
    """Controls which members count as tests in addition to @test."""
    method_prefix: str | None = field(default=None)


@define(frozen=True, slots=True)
class CaserunConfig:
    """Root configuration object for caserun."""
    global_config: GlobalConfig = field(factory=GlobalConfig, metadata={"toml_name": "global"})
    identifier: IdentifierConfig = field(factory=IdentifierConfig)
    execution: ExecutionConfig = field(factory=ExecutionConfig)
    discovery: DiscoveryConfig = field(factory=DiscoveryConfig)


# 🔼⚙️
