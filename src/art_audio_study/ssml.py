"""SSML compiler -- turn base text plus marks into a speech document.

Output is an Azure-flavoured SSML document:

  mark             SSML
  ─────────────    ──────────────────────────────
  EmphasisMark     <emphasis level="...">
  ProsodyMark      <prosody pitch rate volume>  (present attrs only;
                                                  none set -> unwrapped)
  BreakMark        <break time="...ms"/>

The text is walked left to right with a cursor.  Every break is written
exactly once, immediately before the character at its offset: breaks on
a span's start go before the opening tag, breaks strictly inside a span
go inside it, and breaks at the end of the text go last.

Compilation either returns a complete document or raises; it is a pure
function of its arguments.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .annotation import AnnotationModel, check_payload, check_range, find_overlap, ordered_marks
from .exceptions import OverlapError
from .models import BreakMark, EmphasisMark, Mark, ProsodyMark, SpanMark
from .presets import get_preset

logger = logging.getLogger(__name__)

SYNTHESIS_NS = "http://www.w3.org/2001/10/synthesis"
MSTTS_NS = "https://www.w3.org/2001/mstts"

DEFAULT_VOICE = "en-US-JaneNeural"
DEFAULT_LANGUAGE = "en-US"


def escape_xml(text: str) -> str:
    """Escape the five XML reserved characters (``&`` first)."""
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&apos;")
    )


def _break_tag(duration_ms: int) -> str:
    return f'<break time="{duration_ms}ms"/>'


# ---------------------------------------------------------------------------
# Body builder
# ---------------------------------------------------------------------------


class _BodyWriter:
    """Append-only buffer that tracks how far into the text it has written."""

    def __init__(self, text: str, breaks_by_position: dict[int, list[int]]) -> None:
        self._text = text
        self._breaks = breaks_by_position
        self._positions = sorted(breaks_by_position)
        self._parts: list[str] = []
        self.cursor = 0

    def breaks_at(self, pos: int) -> None:
        for duration_ms in self._breaks.get(pos, ()):
            self._parts.append(_break_tag(duration_ms))

    def _slice(self, start: int, end: int) -> str:
        """Escaped ``text[start:end]`` with breaks strictly inside it."""
        parts: list[str] = []
        pos = start
        for p in self._positions:
            if p <= start:
                continue
            if p >= end:
                break
            parts.append(escape_xml(self._text[pos:p]))
            parts.extend(_break_tag(ms) for ms in self._breaks[p])
            pos = p
        parts.append(escape_xml(self._text[pos:end]))
        return "".join(parts)

    def plain_until(self, pos: int) -> None:
        """Write plain text (and its breaks) from the cursor up to *pos*."""
        assert pos >= self.cursor, "cursor moved backwards"
        if pos > self.cursor:
            self.breaks_at(self.cursor)
            self._parts.append(self._slice(self.cursor, pos))
            self.cursor = pos

    def span(self, mark: SpanMark) -> None:
        self.plain_until(mark.start)
        self.breaks_at(mark.start)
        inner = self._slice(mark.start, mark.end)
        if isinstance(mark, EmphasisMark):
            self._parts.append(f'<emphasis level="{escape_xml(mark.level)}">{inner}</emphasis>')
        elif isinstance(mark, ProsodyMark):
            attrs = "".join(f' {name}="{escape_xml(value)}"' for name, value in mark.attributes)
            if attrs:
                self._parts.append(f"<prosody{attrs}>{inner}</prosody>")
            else:
                self._parts.append(inner)
        self.cursor = mark.end

    def finish(self) -> str:
        end = len(self._text)
        self.plain_until(end)
        self.breaks_at(end)
        return "".join(self._parts)


def _envelope(body: str, voice_name: str, language: str) -> str:
    return (
        '<?xml version="1.0" encoding="utf-8"?>\n'
        '<speak version="1.0"\n'
        f'  xmlns="{SYNTHESIS_NS}"\n'
        f'  xmlns:mstts="{MSTTS_NS}"\n'
        f'  xml:lang="{escape_xml(language)}">\n'
        f'  <voice name="{escape_xml(voice_name)}">\n'
        f"    {body}\n"
        "  </voice>\n"
        "</speak>"
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def compile_ssml(
    text: str,
    marks: Iterable[Mark],
    voice_name: str = DEFAULT_VOICE,
    language: str = DEFAULT_LANGUAGE,
) -> str:
    """Compile *text* and *marks* into a complete SSML document.

    Raises :class:`~art_audio_study.exceptions.OverlapError` if span marks
    overlap and :class:`~art_audio_study.exceptions.RangeError` if any
    offset falls outside *text*.
    """
    ordered = ordered_marks(list(marks))
    spans: list[SpanMark] = []
    breaks_by_position: dict[int, list[int]] = {}

    for mark in ordered:
        check_range(mark, len(text))
        check_payload(mark)
        if isinstance(mark, BreakMark):
            breaks_by_position.setdefault(mark.at, []).append(mark.duration_ms)
        else:
            spans.append(mark)

    pair = find_overlap(spans)
    if pair is not None:
        earlier, later = pair
        raise OverlapError(
            f"[{earlier.start}, {earlier.end}) overlaps [{later.start}, {later.end}); "
            "overlapping edits are not supported"
        )

    writer = _BodyWriter(text, breaks_by_position)
    for span in spans:
        writer.span(span)
    body = writer.finish()

    logger.debug("Compiled %d marks over %d chars into %d chars of SSML", len(ordered), len(text), len(body))
    return _envelope(body, voice_name, language)


def build_ssml_from_text(
    text: str,
    voice_name: str = DEFAULT_VOICE,
    language: str = DEFAULT_LANGUAGE,
    preset: str | None = None,
) -> str:
    """Compile *text* under a single whole-text prosody preset.

    Unknown preset names fall back to the default preset.
    """
    p = get_preset(preset)
    marks: list[Mark] = []
    if text:
        marks.append(ProsodyMark(0, len(text), pitch=p.pitch, rate=p.rate, volume=p.volume))
    return compile_ssml(text, marks, voice_name, language)


class SSMLCompiler:
    """Compile annotated text to SSML for one voice and language.

    Parameters
    ----------
    voice_name:
        Target voice identifier, e.g. ``"en-US-Jenny:DragonHDLatestNeural"``.
    language:
        BCP-47 language tag for ``xml:lang``.
    """

    def __init__(self, voice_name: str = DEFAULT_VOICE, language: str = DEFAULT_LANGUAGE) -> None:
        self.voice_name = voice_name
        self.language = language

    def compile(self, text: str, marks: Iterable[Mark] = ()) -> str:
        return compile_ssml(text, marks, self.voice_name, self.language)

    def compile_model(self, model: AnnotationModel) -> str:
        """Compile the current state of an :class:`AnnotationModel`."""
        return compile_ssml(model.text, model.marks_ordered_for_compilation(), self.voice_name, self.language)

    def from_preset(self, text: str, preset: str | None = None) -> str:
        return build_ssml_from_text(text, self.voice_name, self.language, preset)
