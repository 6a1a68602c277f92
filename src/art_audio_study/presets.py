"""Emotion presets used when speech is built from plain text.

Each preset is a whole-text prosody setting.  Values are starting points
for the study and are expected to be tuned.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class EmotionPreset:
    name: str
    pitch: str | None = None
    rate: str | None = None
    volume: str | None = None


DEFAULT_PRESET = "warm"

PRESETS: dict[str, EmotionPreset] = {
    "neutral": EmotionPreset("neutral", pitch="medium", rate="0%"),
    "warm": EmotionPreset("warm", pitch="+5%", rate="-5%"),
    "excited": EmotionPreset("excited", pitch="+20%", rate="+15%"),
    "somber": EmotionPreset("somber", pitch="-10%", rate="-10%", volume="-10%"),
    "mysterious": EmotionPreset("mysterious", pitch="+10%", rate="-5%", volume="-15%"),
}


def get_preset(name: str | None) -> EmotionPreset:
    """Look up a preset by name, falling back to :data:`DEFAULT_PRESET`."""
    if name is None:
        return PRESETS[DEFAULT_PRESET]
    return PRESETS.get(name.strip().lower(), PRESETS[DEFAULT_PRESET])
