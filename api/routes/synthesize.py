"""Synthesis endpoints: SSML to speech audio, tone bed."""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from fastapi.responses import Response
from pydantic import BaseModel

from art_audio_study import AzureSpeechClient, ToneBed, build_ssml_from_text

from ..config import Settings, get_settings

router = APIRouter()

MAX_TONE_BED_SECONDS = 120.0


class AzureTTSRequest(BaseModel):
    text: str | None = None
    ssml: str | None = None
    voice_name: str | None = None
    output_format: str | None = None
    language: str | None = None
    preset: str | None = None


async def get_speech_client(
    settings: Settings = Depends(get_settings),
) -> AsyncIterator[AzureSpeechClient]:
    client = AzureSpeechClient(
        settings.speech_key,
        settings.speech_region,
        output_format=settings.output_format,
        timeout=settings.speech_timeout,
    )
    try:
        yield client
    finally:
        await client.aclose()


@router.post("/azure-tts")
async def azure_tts(
    request: AzureTTSRequest,
    x_emotion_preset: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
    client: AzureSpeechClient = Depends(get_speech_client),
) -> Response:
    ssml = (request.ssml or "").strip()
    if not ssml:
        text = (request.text or "").strip()
        if not text:
            raise HTTPException(status_code=400, detail="Missing text or ssml")
        ssml = build_ssml_from_text(
            text,
            voice_name=(request.voice_name or settings.voice_name).strip(),
            language=(request.language or settings.language).strip(),
            preset=request.preset or x_emotion_preset,
        )

    output_format = (request.output_format or settings.output_format).strip()
    audio = await client.synthesize(ssml, output_format=output_format)
    return Response(
        content=audio,
        media_type="audio/mpeg",
        headers={"Cache-Control": "no-store"},
    )


@router.get("/tone-bed")
async def tone_bed(seconds: float = Query(default=30.0, gt=0, le=MAX_TONE_BED_SECONDS)) -> Response:
    wav_bytes = ToneBed().render(seconds)
    return Response(
        content=wav_bytes,
        media_type="audio/wav",
        headers={"Content-Disposition": "inline; filename=tone-bed.wav"},
    )
