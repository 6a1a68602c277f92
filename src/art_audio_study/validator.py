"""SSML validator -- structural checks on compiled speech documents.

Used to inspect documents before they are sent to the speech service
(including hand-written SSML passed through verbatim).

  S1  Document is well-formed XML                              ERROR
  S2  Root is <speak> with version and xml:lang                ERROR
  S3  Exactly one <voice> with a name attribute                ERROR
  S4  <emphasis> level is one of: reduced, moderate, strong    WARNING
  S5  <break> time is a duration (NNNms or N.Ns)               ERROR
  S6  <prosody> pitch/rate/volume match a valid format         WARNING
  S7  <prosody>/<emphasis> nested inside one another           WARNING
  S8  No unknown elements present                              INFO
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from lxml import etree

from .models import EMPHASIS_LEVELS

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_KNOWN_ELEMENTS = frozenset({"speak", "voice", "prosody", "emphasis", "break", "s", "p"})

_XML_LANG = "{http://www.w3.org/XML/1998/namespace}lang"

_TIME_RE = re.compile(r"^\d+ms$|^\d+(\.\d+)?s$")
_RELATIVE_RE = re.compile(r"^[+\-]?\d+(\.\d+)?(%|st|Hz|dB)?$")
_PITCH_WORDS = frozenset({"default", "x-low", "low", "medium", "high", "x-high"})
_RATE_WORDS = frozenset({"default", "x-slow", "slow", "medium", "fast", "x-fast"})
_VOLUME_WORDS = frozenset({"default", "silent", "x-soft", "soft", "medium", "loud", "x-loud"})

_PROSODY_WORDS: dict[str, frozenset[str]] = {
    "pitch": _PITCH_WORDS,
    "rate": _RATE_WORDS,
    "volume": _VOLUME_WORDS,
}


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ValidationIssue:
    """A single validation finding."""

    severity: Literal["error", "warning", "info"]
    rule: str
    message: str
    line: int | None = None


@dataclass
class ValidationResult:
    """Outcome of validating an SSML document."""

    valid: bool = True
    issues: list[ValidationIssue] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _strip_ns(tag: str) -> str:
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


class _Walker:
    """Stateful tree walker that accumulates validation issues."""

    def __init__(self) -> None:
        self.issues: list[ValidationIssue] = []
        self.voices = 0

    def _add(
        self,
        severity: Literal["error", "warning", "info"],
        rule: str,
        message: str,
        el: etree._Element | None = None,
    ) -> None:
        line = el.sourceline if el is not None else None
        self.issues.append(ValidationIssue(severity=severity, rule=rule, message=message, line=line))

    def check_speak(self, el: etree._Element) -> None:
        if el.get("version") is None:
            self._add("error", "S2", "<speak> is missing required attribute 'version'", el)
        if el.get(_XML_LANG) is None:
            self._add("error", "S2", "<speak> is missing required attribute 'xml:lang'", el)
        self.walk(el, in_span=False)
        if self.voices != 1:
            self._add("error", "S3", f"Expected exactly one <voice>, found {self.voices}", el)

    def check_voice(self, el: etree._Element) -> None:
        self.voices += 1
        if not el.get("name"):
            self._add("error", "S3", "<voice> is missing required attribute 'name'", el)
        self.walk(el, in_span=False)

    def check_emphasis(self, el: etree._Element, in_span: bool) -> None:
        level = el.get("level")
        if level is not None and level not in EMPHASIS_LEVELS:
            self._add("warning", "S4", f'<emphasis> level="{level}" is not one of: reduced, moderate, strong', el)
        if in_span:
            self._add("warning", "S7", "<emphasis> is nested inside another span element", el)
        self.walk(el, in_span=True)

    def check_prosody(self, el: etree._Element, in_span: bool) -> None:
        for name, words in _PROSODY_WORDS.items():
            value = el.get(name)
            if value is None:
                continue
            if value not in words and not _RELATIVE_RE.match(value):
                self._add("warning", "S6", f'<prosody> {name}="{value}" is not a recognised value', el)
        if in_span:
            self._add("warning", "S7", "<prosody> is nested inside another span element", el)
        self.walk(el, in_span=True)

    def check_break(self, el: etree._Element) -> None:
        time = el.get("time")
        if time is not None and not _TIME_RE.match(time):
            self._add("error", "S5", f'<break> time="{time}" is not a valid duration', el)
        if len(el) > 0 or (el.text and el.text.strip()):
            self._add("error", "S5", "<break> must be an empty element", el)

    def walk(self, el: etree._Element, in_span: bool) -> None:
        for child in el:
            if isinstance(child, (etree._Comment, etree._ProcessingInstruction)):
                continue
            tag = _strip_ns(child.tag)  # type: ignore[arg-type]

            if tag not in _KNOWN_ELEMENTS:
                self._add("info", "S8", f"Unknown element <{tag}>", child)
                self.walk(child, in_span=in_span)
            elif tag == "voice":
                self.check_voice(child)
            elif tag == "emphasis":
                self.check_emphasis(child, in_span=in_span)
            elif tag == "prosody":
                self.check_prosody(child, in_span=in_span)
            elif tag == "break":
                self.check_break(child)
            else:
                self.walk(child, in_span=in_span)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


class SSMLValidator:
    """Validate SSML documents produced by the compiler or supplied by hand."""

    def validate(self, ssml: str) -> ValidationResult:
        """Validate an SSML string.

        ``valid`` is ``True`` when no errors are found (warnings and info
        issues are allowed).
        """
        result = ValidationResult()

        # S1: well-formed XML
        try:
            root = etree.fromstring(ssml.encode("utf-8"))  # noqa: S320
        except etree.XMLSyntaxError as exc:
            result.valid = False
            result.issues.append(
                ValidationIssue(
                    severity="error",
                    rule="S1",
                    message=f"Malformed XML: {exc}",
                    line=getattr(exc, "lineno", None),
                )
            )
            return result

        walker = _Walker()
        root_tag = _strip_ns(root.tag)
        if root_tag == "speak":
            walker.check_speak(root)
        else:
            walker._add("error", "S2", f"Expected root element <speak>, got <{root_tag}>", root)

        result.issues = walker.issues
        result.valid = not any(i.severity == "error" for i in result.issues)
        return result

    def validate_file(self, path: str | Path) -> ValidationResult:
        """Validate an SSML file from disk."""
        return self.validate(Path(path).read_text(encoding="utf-8"))
