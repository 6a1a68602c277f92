"""Tests for the art audio study REST API.

Covers:
- Health endpoint
- SSML compile endpoint: marks, canonical order, overlap/range errors
- SSML validate endpoint
- Azure TTS endpoint: verbatim SSML, preset-built SSML, upstream errors
- Tone bed endpoint
- Request size limit
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable, Iterator

import httpx
import pytest
from fastapi.testclient import TestClient

from api.app import app
from api.config import Settings, get_settings
from api.routes.synthesize import get_speech_client
from art_audio_study import AzureSpeechClient
from art_audio_study.ssml import compile_ssml

from conftest import HELLO, PAUSE_HERE, body_of

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture()
def client() -> Iterator[TestClient]:
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


@pytest.fixture()
def speech_requests() -> list[httpx.Request]:
    return []


@pytest.fixture()
def use_speech_service(speech_requests: list[httpx.Request]) -> Callable[[Handler], None]:
    """Route the API's speech client through a mock transport."""

    def install(handler: Handler) -> None:
        def recording(request: httpx.Request) -> httpx.Response:
            speech_requests.append(request)
            return handler(request)

        async def fake_client() -> AsyncIterator[AzureSpeechClient]:
            speech = AzureSpeechClient("secret", "eastus", transport=httpx.MockTransport(recording))
            try:
                yield speech
            finally:
                await speech.aclose()

        app.dependency_overrides[get_speech_client] = fake_client

    return install


def _audio_ok(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, content=b"ID3-fake-mp3")


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


class TestHealth:
    def test_health_returns_ok(self, client: TestClient) -> None:
        resp = client.get("/v1/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert isinstance(data["version"], str)


# ---------------------------------------------------------------------------
# Compile
# ---------------------------------------------------------------------------


class TestCompileEndpoint:
    def test_emphasis(self, client: TestClient) -> None:
        resp = client.post(
            "/v1/ssml/compile",
            json={
                "text": HELLO,
                "marks": [{"kind": "emphasis", "start": 0, "end": 5, "level": "strong"}],
            },
        )
        assert resp.status_code == 200
        data = resp.json()
        assert body_of(data["ssml"]) == '<emphasis level="strong">Hello</emphasis> world'
        assert 'name="en-US-JaneNeural"' in data["ssml"]

    def test_no_marks_escaped(self, client: TestClient) -> None:
        resp = client.post("/v1/ssml/compile", json={"text": "A & B"})
        assert resp.status_code == 200
        assert body_of(resp.json()["ssml"]) == "A &amp; B"

    def test_breaks_and_canonical_order(self, client: TestClient) -> None:
        resp = client.post(
            "/v1/ssml/compile",
            json={
                "text": PAUSE_HERE,
                "marks": [
                    {"kind": "prosody", "start": 6, "end": 10, "rate": "-15%"},
                    {"kind": "break", "at": 5, "duration_ms": 200},
                    {"kind": "break", "at": 5, "duration_ms": 100},
                ],
                "voice_name": "en-US-Aria:DragonHDLatestNeural",
                "language": "en-GB",
            },
        )
        assert resp.status_code == 200
        data = resp.json()
        assert body_of(data["ssml"]) == (
            'Pause<break time="200ms"/><break time="100ms"/> <prosody rate="-15%">here</prosody>'
        )
        assert 'xml:lang="en-GB"' in data["ssml"]
        assert [m["kind"] for m in data["marks"]] == ["break", "break", "prosody"]
        assert data["marks"][0]["duration_ms"] == 200
        assert data["marks"][2]["pitch"] is None

    def test_matches_library_output(self, client: TestClient) -> None:
        resp = client.post("/v1/ssml/compile", json={"text": HELLO, "marks": []})
        assert resp.json()["ssml"] == compile_ssml(HELLO, [])

    def test_overlap_returns_409(self, client: TestClient) -> None:
        resp = client.post(
            "/v1/ssml/compile",
            json={
                "text": HELLO,
                "marks": [
                    {"kind": "emphasis", "start": 0, "end": 5},
                    {"kind": "prosody", "start": 2, "end": 8, "pitch": "+20%"},
                ],
            },
        )
        assert resp.status_code == 409
        assert resp.json()["error"] == "overlap_error"

    def test_out_of_range_returns_400(self, client: TestClient) -> None:
        resp = client.post(
            "/v1/ssml/compile",
            json={"text": HELLO, "marks": [{"kind": "break", "at": 40, "duration_ms": 100}]},
        )
        assert resp.status_code == 400
        assert resp.json()["error"] == "range_error"

    def test_unknown_kind_returns_422(self, client: TestClient) -> None:
        resp = client.post(
            "/v1/ssml/compile",
            json={"text": HELLO, "marks": [{"kind": "whisper", "start": 0, "end": 5}]},
        )
        assert resp.status_code == 422

    def test_bad_level_returns_422(self, client: TestClient) -> None:
        resp = client.post(
            "/v1/ssml/compile",
            json={"text": HELLO, "marks": [{"kind": "emphasis", "start": 0, "end": 5, "level": "huge"}]},
        )
        assert resp.status_code == 422

    def test_negative_duration_returns_422(self, client: TestClient) -> None:
        resp = client.post(
            "/v1/ssml/compile",
            json={"text": HELLO, "marks": [{"kind": "break", "at": 0, "duration_ms": -1}]},
        )
        assert resp.status_code == 422

    def test_missing_text_returns_422(self, client: TestClient) -> None:
        resp = client.post("/v1/ssml/compile", json={"marks": []})
        assert resp.status_code == 422


# ---------------------------------------------------------------------------
# Validate
# ---------------------------------------------------------------------------


class TestValidateEndpoint:
    def test_compiled_document_valid(self, client: TestClient) -> None:
        resp = client.post("/v1/ssml/validate", json={"ssml": compile_ssml(HELLO, [])})
        assert resp.status_code == 200
        assert resp.json() == {"valid": True, "issues": []}

    def test_malformed(self, client: TestClient) -> None:
        resp = client.post("/v1/ssml/validate", json={"ssml": "<speak>"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["valid"] is False
        assert data["issues"][0]["rule"] == "S1"


# ---------------------------------------------------------------------------
# Azure TTS
# ---------------------------------------------------------------------------


class TestAzureTTSEndpoint:
    def test_ssml_used_verbatim(
        self,
        client: TestClient,
        use_speech_service: Callable[[Handler], None],
        speech_requests: list[httpx.Request],
    ) -> None:
        use_speech_service(_audio_ok)
        ssml = compile_ssml(HELLO, [])
        resp = client.post("/v1/azure-tts", json={"ssml": ssml, "text": "ignored"})
        assert resp.status_code == 200
        assert resp.content == b"ID3-fake-mp3"
        assert resp.headers["content-type"] == "audio/mpeg"
        assert resp.headers["cache-control"] == "no-store"
        assert speech_requests[0].content == ssml.encode("utf-8")

    def test_text_built_with_preset_header(
        self,
        client: TestClient,
        use_speech_service: Callable[[Handler], None],
        speech_requests: list[httpx.Request],
    ) -> None:
        use_speech_service(_audio_ok)
        resp = client.post(
            "/v1/azure-tts",
            json={"text": "  A & B  ", "voice_name": "en-US-Davis:DragonHDLatestNeural"},
            headers={"x-emotion-preset": "excited"},
        )
        assert resp.status_code == 200
        sent = speech_requests[0].content.decode("utf-8")
        assert '<prosody pitch="+20%" rate="+15%">A &amp; B</prosody>' in sent
        assert 'name="en-US-Davis:DragonHDLatestNeural"' in sent

    def test_body_preset_wins_over_header(
        self,
        client: TestClient,
        use_speech_service: Callable[[Handler], None],
        speech_requests: list[httpx.Request],
    ) -> None:
        use_speech_service(_audio_ok)
        client.post(
            "/v1/azure-tts",
            json={"text": "Hi", "preset": "somber"},
            headers={"x-emotion-preset": "excited"},
        )
        assert 'volume="-10%"' in speech_requests[0].content.decode("utf-8")

    def test_output_format_forwarded(
        self,
        client: TestClient,
        use_speech_service: Callable[[Handler], None],
        speech_requests: list[httpx.Request],
    ) -> None:
        use_speech_service(_audio_ok)
        client.post("/v1/azure-tts", json={"text": "Hi", "output_format": "riff-24khz-16bit-mono-pcm"})
        assert speech_requests[0].headers["X-Microsoft-OutputFormat"] == "riff-24khz-16bit-mono-pcm"

    def test_missing_text_and_ssml(
        self,
        client: TestClient,
        use_speech_service: Callable[[Handler], None],
        speech_requests: list[httpx.Request],
    ) -> None:
        use_speech_service(_audio_ok)
        resp = client.post("/v1/azure-tts", json={"text": "   "})
        assert resp.status_code == 400
        assert speech_requests == []

    def test_upstream_failure_returns_502(
        self,
        client: TestClient,
        use_speech_service: Callable[[Handler], None],
    ) -> None:
        use_speech_service(lambda request: httpx.Response(400, text="Invalid voice name"))
        resp = client.post("/v1/azure-tts", json={"text": "Hi"})
        assert resp.status_code == 502
        data = resp.json()
        assert data["error"] == "upstream_synthesis_error"
        assert data["detail"] == "Invalid voice name"
        assert data["upstream_status"] == 400

    def test_missing_credentials_returns_500(self, client: TestClient) -> None:
        app.dependency_overrides[get_settings] = lambda: Settings(speech_key="", speech_region="")
        resp = client.post("/v1/azure-tts", json={"text": "Hi"})
        assert resp.status_code == 500
        assert resp.json()["error"] == "synthesis_config_error"


# ---------------------------------------------------------------------------
# Tone bed
# ---------------------------------------------------------------------------


class TestToneBedEndpoint:
    def test_returns_wav(self, client: TestClient) -> None:
        resp = client.get("/v1/tone-bed", params={"seconds": 1})
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "audio/wav"
        assert resp.content[:4] == b"RIFF"

    def test_zero_seconds_rejected(self, client: TestClient) -> None:
        resp = client.get("/v1/tone-bed", params={"seconds": 0})
        assert resp.status_code == 422

    def test_too_long_rejected(self, client: TestClient) -> None:
        resp = client.get("/v1/tone-bed", params={"seconds": 10_000})
        assert resp.status_code == 422


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------


class TestBodySizeLimit:
    def test_oversized_body_rejected(self, client: TestClient) -> None:
        resp = client.post("/v1/ssml/compile", json={"text": "a" * (300 * 1024)})
        assert resp.status_code == 413
        assert resp.json()["error"] == "payload_too_large"
