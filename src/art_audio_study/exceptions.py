"""Custom exception hierarchy for the art_audio_study package."""


class ArtAudioStudyError(Exception):
    """Base exception for all art_audio_study errors."""


class MarkError(ArtAudioStudyError):
    """Raised when a mark carries an invalid payload (level, duration)."""


class OverlapError(MarkError):
    """Raised when two span marks would overlap."""


class RangeError(MarkError):
    """Raised when a mark offset falls outside the current base text."""

    def __init__(self, message: str, offset: int | None = None, text_length: int | None = None) -> None:
        self.offset = offset
        self.text_length = text_length
        location = ""
        if offset is not None:
            location = f" (offset {offset}"
            if text_length is not None:
                location += f", text length {text_length}"
            location += ")"
        super().__init__(f"{message}{location}")


class SynthesisConfigError(ArtAudioStudyError):
    """Raised when the speech-synthesis client is missing credentials."""


class UpstreamSynthesisError(ArtAudioStudyError):
    """Raised when the speech-synthesis service rejects or fails a request.

    ``reason`` is the service's own text, kept verbatim.
    """

    def __init__(self, status_code: int | None, reason: str) -> None:
        self.status_code = status_code
        self.reason = reason
        if status_code is None:
            super().__init__(f"Speech synthesis failed: {reason}")
        else:
            super().__init__(f"Speech synthesis failed ({status_code}): {reason}")
