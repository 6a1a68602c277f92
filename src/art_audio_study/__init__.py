"""Art Audio Study -- prosody-annotated speech for artwork descriptions.

Public API re-exports for convenient access::

    from art_audio_study import AnnotationModel, EmphasisMark, SSMLCompiler
"""

from ._version import __version__
from .annotation import AnnotationModel, find_overlap
from .exceptions import (
    ArtAudioStudyError,
    MarkError,
    OverlapError,
    RangeError,
    SynthesisConfigError,
    UpstreamSynthesisError,
)
from .models import BreakMark, EmphasisMark, Mark, ProsodyMark
from .presets import PRESETS, EmotionPreset
from .ssml import SSMLCompiler, build_ssml_from_text, compile_ssml, escape_xml
from .synthesis import AzureSpeechClient
from .tone_bed import ToneBed
from .validator import SSMLValidator, ValidationIssue, ValidationResult

__all__ = [
    "__version__",
    # Annotation
    "AnnotationModel",
    "find_overlap",
    # Models
    "Mark",
    "EmphasisMark",
    "ProsodyMark",
    "BreakMark",
    # Compilation
    "SSMLCompiler",
    "compile_ssml",
    "build_ssml_from_text",
    "escape_xml",
    "PRESETS",
    "EmotionPreset",
    # Validation
    "SSMLValidator",
    "ValidationIssue",
    "ValidationResult",
    # Audio
    "AzureSpeechClient",
    "ToneBed",
    # Exceptions
    "ArtAudioStudyError",
    "MarkError",
    "OverlapError",
    "RangeError",
    "SynthesisConfigError",
    "UpstreamSynthesisError",
]
