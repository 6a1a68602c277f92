"""Data models for text annotation marks.

Immutable dataclasses for the three edit kinds a user can apply to the
plain description text.  Offsets are character indices into the base
text; span marks cover the half-open range ``[start, end)``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, TypeAlias, Union

EmphasisLevel: TypeAlias = Literal["reduced", "moderate", "strong"]

EMPHASIS_LEVELS: frozenset[str] = frozenset({"reduced", "moderate", "strong"})


@dataclass(frozen=True)
class EmphasisMark:
    """Stress the text in ``[start, end)``."""

    start: int
    end: int
    level: EmphasisLevel = "moderate"

    kind: Literal["emphasis"] = field(default="emphasis", init=False, repr=False)


@dataclass(frozen=True)
class ProsodyMark:
    """Shift pitch, rate and/or volume over ``[start, end)``.

    Values are passed through as written (``"+20%"``, ``"-15%"``,
    ``"medium"``).  A mark with no value set renders as plain text.
    """

    start: int
    end: int
    pitch: str | None = None
    rate: str | None = None
    volume: str | None = None

    kind: Literal["prosody"] = field(default="prosody", init=False, repr=False)

    @property
    def attributes(self) -> tuple[tuple[str, str], ...]:
        """Present attributes in output order; empty strings count as absent."""
        pairs = (("pitch", self.pitch), ("rate", self.rate), ("volume", self.volume))
        return tuple((name, value) for name, value in pairs if value)


@dataclass(frozen=True)
class BreakMark:
    """A zero-width pause of ``duration_ms`` inserted at offset ``at``."""

    at: int
    duration_ms: int

    kind: Literal["break"] = field(default="break", init=False, repr=False)


SpanMark: TypeAlias = Union[EmphasisMark, ProsodyMark]
Mark: TypeAlias = Union[EmphasisMark, ProsodyMark, BreakMark]


def is_span(mark: Mark) -> bool:
    return not isinstance(mark, BreakMark)


def sort_key(mark: Mark) -> int:
    """Primary key for canonical order: ``at`` for breaks, ``start`` for spans."""
    if isinstance(mark, BreakMark):
        return mark.at
    return mark.start
