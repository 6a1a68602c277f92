"""Shared test fixtures for the art_audio_study test suite."""

from __future__ import annotations

import pytest

from art_audio_study.annotation import AnnotationModel
from art_audio_study.ssml import SSMLCompiler

# ---------------------------------------------------------------------------
# Sample texts
# ---------------------------------------------------------------------------

HELLO = "Hello world"

AMPERSAND = "A & B"

PAUSE_HERE = "Pause here"

DESCRIPTION = (
    "A swirling night sky fills the canvas above a quiet village. "
    "Thick, rhythmic brushstrokes turn the stars into glowing whirlpools."
)

RESERVED = "Tom & \"Jerry\" <3 'cheese'"


def body_of(ssml: str) -> str:
    """Return the inner content of the ``<voice>`` element."""
    start = ssml.index(">", ssml.index("<voice")) + 1
    end = ssml.rindex("</voice>")
    return ssml[start:end].strip()


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def hello_model() -> AnnotationModel:
    return AnnotationModel(HELLO)


@pytest.fixture()
def description_model() -> AnnotationModel:
    return AnnotationModel(DESCRIPTION)


@pytest.fixture()
def compiler() -> SSMLCompiler:
    return SSMLCompiler(voice_name="en-US-JaneNeural", language="en-US")
