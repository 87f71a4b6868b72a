# src/caserun/engine/identifier.py

"""
Hierarchical unique ids for descriptors.

A unique id is an ordered sequence of (type, value) segments rooted at an
engine segment, rendered as ``[engine:caserun]/[class:pkg.Cls]/[method:m]``.
The delimiter and separator are fixed per engine through UniqueIdFormat.
"""

import re
from collections.abc import Iterable
from typing import Any

from attrs import define, field

from caserun.exceptions import MalformedIdentifierError

ENGINE_SEGMENT_TYPE = "engine"
DEFAULT_SEGMENT_DELIMITER = "/"
DEFAULT_TYPE_VALUE_SEPARATOR = ":"


@define(frozen=True, slots=True)
class Segment:
    """A single typed step of a unique id."""

    type: str
    value: str


def _validate_segments(inst: Any, attr: Any, value: tuple[Segment, ...]) -> None:
    if not value:
        raise MalformedIdentifierError("UniqueId must contain at least one segment")
    first = value[0]
    if first.type != ENGINE_SEGMENT_TYPE:
        raise MalformedIdentifierError(
            f"UniqueId must start with engine segment but starts with type '{first.type}'"
        )


@define(frozen=True, slots=True)
class UniqueId:
    """Immutable address of a node in the descriptor tree."""

    segments: tuple[Segment, ...] = field(converter=tuple, validator=_validate_segments)

    @classmethod
    def for_engine(cls, engine_id: str) -> "UniqueId":
        return cls((Segment(ENGINE_SEGMENT_TYPE, engine_id),))

    @property
    def engine_id(self) -> str:
        return self.segments[0].value

    @property
    def last_segment(self) -> Segment:
        return self.segments[-1]

    @property
    def parent(self) -> "UniqueId | None":
        if len(self.segments) == 1:
            return None
        return UniqueId(self.segments[:-1])

    def append(self, segment_type: str, value: str) -> "UniqueId":
        """Returns a new id with one more segment; the receiver is unchanged."""
        return UniqueId(self.segments + (Segment(segment_type, value),))

    def has_prefix(self, other: "UniqueId") -> bool:
        """True if ``other`` is this id or one of its ancestors."""
        size = len(other.segments)
        return size <= len(self.segments) and self.segments[:size] == other.segments

    def __str__(self) -> str:
        return DEFAULT_FORMAT.render(self)


@define(frozen=True, slots=True)
class UniqueIdFormat:
    """
    Text format for unique ids.

    Parsing is the exact inverse of serialization for every well-formed text.
    The segment type ends at the first separator, so values may contain the
    separator but types may not. Values may never contain the delimiter;
    serialize refuses such ids instead of producing text that parses back
    into different segments.
    """

    segment_delimiter: str = field(default=DEFAULT_SEGMENT_DELIMITER)
    type_value_separator: str = field(default=DEFAULT_TYPE_VALUE_SEPARATOR)
    _segment_pattern: re.Pattern = field(init=False, repr=False, eq=False)

    def __attrs_post_init__(self) -> None:
        if not self.segment_delimiter or not self.type_value_separator:
            raise ValueError("Segment delimiter and type/value separator must not be empty")
        if self.segment_delimiter == self.type_value_separator:
            raise ValueError("Segment delimiter and type/value separator must differ")
        sep = re.escape(self.type_value_separator)
        pattern = re.compile(rf"\[((?:(?!{sep}).)+){sep}(.+)\]", re.DOTALL)
        object.__setattr__(self, "_segment_pattern", pattern)

    def parse(self, text: str) -> UniqueId:
        parts = text.split(self.segment_delimiter)
        segments = [self._parse_segment(part, text) for part in parts]
        return UniqueId(segments)

    def serialize(self, unique_id: UniqueId) -> str:
        for segment in unique_id.segments:
            self.check_segment(segment)
        return self.render(unique_id)

    def render(self, unique_id: UniqueId) -> str:
        """Formats without checking that the text would parse back."""
        return self.segment_delimiter.join(self._format_segment(s) for s in unique_id.segments)

    def check_segment(self, segment: Segment) -> None:
        """Raises MalformedIdentifierError if ``segment`` cannot be written in this format."""
        if not segment.type or not segment.value:
            problem = "an empty type or value"
        elif self.type_value_separator in segment.type:
            problem = f"the separator '{self.type_value_separator}' in its type"
        elif self.segment_delimiter in segment.type or self.segment_delimiter in segment.value:
            problem = f"the delimiter '{self.segment_delimiter}'"
        else:
            return
        text = self._format_segment(segment)
        raise MalformedIdentifierError(
            f"Segment '{text}' cannot be serialized: it contains {problem}", text=text
        )

    def _parse_segment(self, part: str, text: str) -> Segment:
        match = self._segment_pattern.fullmatch(part)
        if not match:
            raise MalformedIdentifierError(f"'{text}' is not a well-formed UniqueId", text=text)
        return Segment(match.group(1), match.group(2))

    def _format_segment(self, segment: Segment) -> str:
        return f"[{segment.type}{self.type_value_separator}{segment.value}]"


DEFAULT_FORMAT = UniqueIdFormat()


def parse(
    text: str,
    delimiter: str = DEFAULT_SEGMENT_DELIMITER,
    separator: str = DEFAULT_TYPE_VALUE_SEPARATOR,
) -> UniqueId:
    return UniqueIdFormat(delimiter, separator).parse(text)


def serialize(
    unique_id: UniqueId,
    delimiter: str = DEFAULT_SEGMENT_DELIMITER,
    separator: str = DEFAULT_TYPE_VALUE_SEPARATOR,
) -> str:
    return UniqueIdFormat(delimiter, separator).serialize(unique_id)


def from_segments(pairs: Iterable[tuple[str, str]]) -> UniqueId:
    """Builds a UniqueId from (type, value) pairs."""
    return UniqueId(Segment(t, v) for t, v in pairs)


# 🔼⚙️
