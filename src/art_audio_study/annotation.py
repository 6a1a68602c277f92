"""AnnotationModel -- the editable mark collection over a plain text.

Holds the base text and the user's marks, admits each new mark only if
it is in range and does not overlap an existing span, and hands the
compiler a canonical, offset-ordered view of the collection.

Admission is all-or-nothing: a rejected mark leaves the collection
untouched.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Literal

from .exceptions import MarkError, OverlapError, RangeError
from .models import (
    EMPHASIS_LEVELS,
    BreakMark,
    EmphasisMark,
    Mark,
    SpanMark,
    sort_key,
)

logger = logging.getLogger(__name__)

TextChangePolicy = Literal["clear", "keep_in_range"]


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def find_overlap(spans: Iterable[SpanMark]) -> tuple[SpanMark, SpanMark] | None:
    """Return the first overlapping pair of span marks, or ``None``.

    Spans are ordered by start offset; a pair overlaps when the earlier
    one ends after the later one starts.  Shared boundaries are allowed.
    """
    ordered = sorted(spans, key=lambda s: s.start)
    for earlier, later in zip(ordered, ordered[1:]):
        if earlier.end > later.start:
            return earlier, later
    return None


def check_range(mark: Mark, text_length: int) -> None:
    """Raise :class:`RangeError` if *mark* does not fit a text of *text_length*."""
    if isinstance(mark, BreakMark):
        if not 0 <= mark.at <= text_length:
            raise RangeError("Break offset outside text", offset=mark.at, text_length=text_length)
        return
    if mark.start < 0 or mark.start > text_length:
        raise RangeError("Span start outside text", offset=mark.start, text_length=text_length)
    if mark.end > text_length:
        raise RangeError("Span end outside text", offset=mark.end, text_length=text_length)
    if mark.start >= mark.end:
        raise RangeError(
            f"Span [{mark.start}, {mark.end}) is empty or reversed",
            offset=mark.start,
            text_length=text_length,
        )


def check_payload(mark: Mark) -> None:
    """Raise :class:`MarkError` for an unknown emphasis level or negative pause."""
    if isinstance(mark, EmphasisMark) and mark.level not in EMPHASIS_LEVELS:
        raise MarkError(f"Unknown emphasis level {mark.level!r}")
    if isinstance(mark, BreakMark) and mark.duration_ms < 0:
        raise MarkError(f"Break duration must be non-negative, got {mark.duration_ms}")


def _overlaps(a: SpanMark, b: SpanMark) -> bool:
    return not (a.end <= b.start or a.start >= b.end)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


class AnnotationModel:
    """Base text plus an append-only collection of marks.

    Parameters
    ----------
    text:
        The plain text being annotated.
    on_text_change:
        What :meth:`set_text` does with existing marks.  ``"clear"`` drops
        them all (offsets are meaningless after an edit); ``"keep_in_range"``
        keeps the marks that still fit the new text.
    """

    def __init__(self, text: str = "", on_text_change: TextChangePolicy = "clear") -> None:
        if on_text_change not in ("clear", "keep_in_range"):
            raise ValueError(f"Unknown text change policy {on_text_change!r}")
        self._text = text
        self._marks: list[Mark] = []
        self.on_text_change = on_text_change

    @property
    def text(self) -> str:
        return self._text

    @property
    def marks(self) -> tuple[Mark, ...]:
        """Marks in insertion order."""
        return tuple(self._marks)

    def __len__(self) -> int:
        return len(self._marks)

    def add_mark(self, mark: Mark) -> None:
        """Admit *mark* or raise without touching the collection.

        Raises :class:`RangeError` for offsets outside the text,
        :class:`MarkError` for an invalid payload and
        :class:`OverlapError` when a span mark overlaps an existing span.
        """
        check_range(mark, len(self._text))
        check_payload(mark)
        if not isinstance(mark, BreakMark):
            for existing in self._marks:
                if isinstance(existing, BreakMark):
                    continue
                if _overlaps(mark, existing):
                    logger.debug("Rejected %r: overlaps %r", mark, existing)
                    raise OverlapError(
                        f"[{mark.start}, {mark.end}) overlaps existing "
                        f"[{existing.start}, {existing.end}); clear formatting and re-apply"
                    )
        self._marks.append(mark)

    def extend(self, marks: Iterable[Mark]) -> None:
        """Admit several marks at once; on any failure none are kept."""
        snapshot = list(self._marks)
        try:
            for mark in marks:
                self.add_mark(mark)
        except Exception:
            self._marks = snapshot
            raise

    def remove(self, mark: Mark) -> None:
        """Remove the first mark equal to *mark* (``ValueError`` if absent)."""
        self._marks.remove(mark)

    def clear(self) -> None:
        self._marks.clear()

    def set_text(self, text: str) -> None:
        """Replace the base text, applying the configured mark policy."""
        self._text = text
        if self.on_text_change == "clear":
            self.clear()
            return
        kept: list[Mark] = []
        for mark in self._marks:
            try:
                check_range(mark, len(text))
            except RangeError:
                logger.debug("Dropped %r after text change", mark)
                continue
            kept.append(mark)
        self._marks = kept

    def marks_ordered_for_compilation(self) -> list[Mark]:
        """All marks in canonical order (stable: ties keep insertion order)."""
        return sorted(self._marks, key=sort_key)


def ordered_marks(marks: Sequence[Mark]) -> list[Mark]:
    """Canonical order for a bare sequence of marks."""
    return sorted(marks, key=sort_key)
