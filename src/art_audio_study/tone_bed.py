"""ToneBed -- a quiet sustained chord played under the voice.

Placeholder music bed for the third study condition: a few sine
partials summed at low gain, rendered to 16-bit mono WAV.
"""

from __future__ import annotations

import io
import wave

import numpy as np

SAMPLE_RATE = 24_000  # Hz -- matches the 24 kHz speech output format
DEFAULT_FREQUENCIES = (220.0, 261.63, 329.63)  # A3, C4, E4
DEFAULT_GAIN = 0.03  # per partial
FADE_S = 0.005


def _sine(freq: float, n_samples: int, sample_rate: int) -> np.ndarray:
    t = np.arange(n_samples) / sample_rate
    return np.sin(2 * np.pi * freq * t)


def _apply_fades(samples: np.ndarray, sample_rate: int) -> np.ndarray:
    """Short linear fade-in/fade-out to avoid clicks."""
    fade_samples = min(int(sample_rate * FADE_S), samples.size // 2)
    if fade_samples > 0:
        samples[:fade_samples] *= np.linspace(0, 1, fade_samples)
        samples[-fade_samples:] *= np.linspace(1, 0, fade_samples)
    return samples


def _to_wav_bytes(samples: np.ndarray, sample_rate: int) -> bytes:
    """Encode float64 samples to 16-bit PCM WAV bytes."""
    clipped = np.clip(samples, -1.0, 1.0)
    pcm = (clipped * 32767).astype(np.int16)

    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(sample_rate)
        wf.writeframes(pcm.tobytes())
    return buf.getvalue()


class ToneBed:
    """Render a drone chord of *frequencies*, each partial at *gain*."""

    def __init__(
        self,
        frequencies: tuple[float, ...] = DEFAULT_FREQUENCIES,
        gain: float = DEFAULT_GAIN,
        sample_rate: int = SAMPLE_RATE,
    ) -> None:
        if not frequencies:
            raise ValueError("ToneBed needs at least one frequency")
        self.frequencies = tuple(frequencies)
        self.gain = gain
        self.sample_rate = sample_rate

    def samples(self, seconds: float) -> np.ndarray:
        if seconds <= 0:
            raise ValueError(f"seconds must be positive, got {seconds}")
        n_samples = int(self.sample_rate * seconds)
        mix = np.zeros(n_samples, dtype=np.float64)
        for freq in self.frequencies:
            mix += self.gain * _sine(freq, n_samples, self.sample_rate)
        return _apply_fades(mix, self.sample_rate)

    def render(self, seconds: float) -> bytes:
        """Return *seconds* of the chord as WAV bytes."""
        return _to_wav_bytes(self.samples(seconds), self.sample_rate)
