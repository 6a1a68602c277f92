"""Azure Speech REST client.

Posts an SSML document to the text-to-speech endpoint and returns the
audio bytes.  Uses httpx for async HTTP; the service's error text is
passed back to the caller unchanged inside
:class:`~art_audio_study.exceptions.UpstreamSynthesisError`.
"""

from __future__ import annotations

import logging

import httpx

from .exceptions import SynthesisConfigError, UpstreamSynthesisError

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_FORMAT = "audio-24khz-48kbitrate-mono-mp3"
USER_AGENT = "art-audio-study"


def endpoint_for(region: str) -> str:
    return f"https://{region}.tts.speech.microsoft.com/cognitiveservices/v1"


class AzureSpeechClient:
    """Thin async wrapper around the Azure Speech text-to-speech endpoint.

    Call :meth:`aclose` (or use as an async context manager) when done.

    Parameters
    ----------
    key, region:
        Speech resource credentials.
    output_format:
        Value of the ``X-Microsoft-OutputFormat`` header.
    transport:
        Optional httpx transport, for tests.
    """

    def __init__(
        self,
        key: str,
        region: str,
        output_format: str = DEFAULT_OUTPUT_FORMAT,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not key:
            raise SynthesisConfigError("Missing SPEECH_KEY / AZURE_SPEECH_KEY")
        if not region:
            raise SynthesisConfigError("Missing SPEECH_REGION / AZURE_SPEECH_REGION")
        self.region = region
        self.output_format = output_format
        self.endpoint = endpoint_for(region)
        self._client = httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            headers={
                "Ocp-Apim-Subscription-Key": key,
                "User-Agent": USER_AGENT,
            },
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "AzureSpeechClient":
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()

    async def synthesize(self, ssml: str, output_format: str | None = None) -> bytes:
        """Synthesize *ssml* and return the encoded audio.

        Raises :class:`UpstreamSynthesisError` on a non-2xx response or a
        transport failure.  Not retried.
        """
        if not ssml.strip():
            raise ValueError("SSML payload is empty")

        headers = {
            "Content-Type": "application/ssml+xml",
            "X-Microsoft-OutputFormat": output_format or self.output_format,
        }
        try:
            resp = await self._client.post(self.endpoint, content=ssml.encode("utf-8"), headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("Speech service unreachable at %s: %s", self.endpoint, exc)
            raise UpstreamSynthesisError(None, str(exc)) from exc

        if resp.is_error:
            reason = resp.text or resp.reason_phrase
            logger.warning("Speech service returned %s: %s", resp.status_code, reason)
            raise UpstreamSynthesisError(resp.status_code, reason)

        logger.debug("Synthesized %d bytes of audio (%s)", len(resp.content), headers["X-Microsoft-OutputFormat"])
        return resp.content
