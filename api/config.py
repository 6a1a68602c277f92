"""API server configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache

from art_audio_study.ssml import DEFAULT_LANGUAGE, DEFAULT_VOICE
from art_audio_study.synthesis import DEFAULT_OUTPUT_FORMAT


@dataclass
class Settings:
    """Application settings, configurable via environment variables.

    Environment variables:
        AAS_HOST: Server bind address (default "0.0.0.0")
        AAS_PORT: Server port (default 8000)
        AAS_DEBUG: Enable debug mode ("1" or "true")
        AAS_CORS_ORIGINS: Comma-separated allowed origins (default: none)
        AAS_MAX_BODY_KB: Maximum request body in kilobytes (default 256)
        SPEECH_KEY / AZURE_SPEECH_KEY: Azure Speech subscription key
        SPEECH_REGION / AZURE_SPEECH_REGION: Azure Speech region
        AAS_VOICE_NAME: Default voice (default "en-US-JaneNeural")
        AAS_OUTPUT_FORMAT: Default audio format
        AAS_LANGUAGE: Default xml:lang (default "en-US")
        AAS_SPEECH_TIMEOUT: Speech request timeout in seconds (default 30)
    """

    host: str = field(default_factory=lambda: os.getenv("AAS_HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("AAS_PORT", "8000")))
    debug: bool = field(
        default_factory=lambda: os.getenv("AAS_DEBUG", "").lower() in ("1", "true")
    )
    cors_origins: list[str] = field(default_factory=lambda: _parse_cors())
    max_body_kb: int = field(default_factory=lambda: int(os.getenv("AAS_MAX_BODY_KB", "256")))

    speech_key: str = field(
        default_factory=lambda: os.getenv("SPEECH_KEY") or os.getenv("AZURE_SPEECH_KEY", "")
    )
    speech_region: str = field(
        default_factory=lambda: os.getenv("SPEECH_REGION") or os.getenv("AZURE_SPEECH_REGION", "")
    )
    voice_name: str = field(default_factory=lambda: os.getenv("AAS_VOICE_NAME", DEFAULT_VOICE))
    output_format: str = field(
        default_factory=lambda: os.getenv("AAS_OUTPUT_FORMAT", DEFAULT_OUTPUT_FORMAT)
    )
    language: str = field(default_factory=lambda: os.getenv("AAS_LANGUAGE", DEFAULT_LANGUAGE))
    speech_timeout: float = field(
        default_factory=lambda: float(os.getenv("AAS_SPEECH_TIMEOUT", "30"))
    )

    @property
    def max_body_bytes(self) -> int:
        return self.max_body_kb * 1024


def _parse_cors() -> list[str]:
    raw = os.getenv("AAS_CORS_ORIGINS", "")
    if not raw:
        return []
    return [o.strip() for o in raw.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
