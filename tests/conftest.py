"""Shared test fixtures for the cobalt_client test suite.

WHY: Most client tests need the same canned instance responses and a way
to see exactly which requests the client sent. Centralizing both here
keeps the test modules focused on behavior.

HOW: Sample payloads are module-level dicts shaped like real cobalt
responses. The ``fake_cobalt`` fixture builds a CobaltClient on an
httpx.MockTransport that replays queued responses in order and records
every request it receives.

RULES:
- No test talks to the network except test_e2e.py
- Each queued response is consumed by exactly one request
- Running out of queued responses fails the test loudly
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx
import pytest

from cobalt_client.api.client import CobaltClient

BASE_URL = "https://api.cobalt.tools"
API_KEY = "test-api-key"

INSTANCE_INFO: Dict[str, Any] = {
    "cobalt": {
        "version": "10.9.4",
        "url": "https://api.cobalt.tools",
        "startTime": "1640995200000",
        "services": ["youtube", "twitter", "tiktok", "instagram"],
    },
    "git": {
        "commit": "abc123",
        "branch": "main",
        "remote": "imputnet/cobalt",
    },
}

TUNNEL_RESPONSE: Dict[str, Any] = {
    "status": "tunnel",
    "url": "https://api.cobalt.tools/tunnel?id=abc123",
    "filename": "video.mp4",
}

REDIRECT_RESPONSE: Dict[str, Any] = {
    "status": "redirect",
    "url": "https://cdn.example.com/video.mp4",
    "filename": "twitter_video.mp4",
}

LOCAL_PROCESSING_RESPONSE: Dict[str, Any] = {
    "status": "local-processing",
    "type": "merge",
    "service": "youtube",
    "tunnel": [
        "https://api.cobalt.tools/tunnel?id=video1",
        "https://api.cobalt.tools/tunnel?id=audio1",
    ],
    "output": {
        "type": "video/mp4",
        "filename": "merged-video.mp4",
        "metadata": {"title": "Test Video", "artist": "Someone"},
        "subtitles": False,
    },
    "audio": {
        "copy": True,
        "format": "m4a",
        "bitrate": "128",
        "cover": True,
        "cropCover": False,
    },
    "isHLS": False,
}

PICKER_RESPONSE: Dict[str, Any] = {
    "status": "picker",
    "picker": [
        {"type": "photo", "url": "https://cdn.example.com/1.jpg"},
        {"type": "video", "url": "https://cdn.example.com/2.mp4", "thumb": "https://cdn.example.com/2.jpg"},
    ],
}

ERROR_RESPONSE: Dict[str, Any] = {
    "status": "error",
    "error": {
        "code": "error.api.content.video.unavailable",
        "context": {"service": "youtube"},
    },
}

TUNNEL_BYTES = bytes([1, 2, 3, 4, 5])


class FakeCobalt:
    """Replays queued httpx responses and records the requests that hit it."""

    def __init__(self) -> None:
        self.responses: List[httpx.Response] = []
        self.requests: List[httpx.Request] = []
        self.transport = httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            raise AssertionError("Unexpected request: {} {}".format(request.method, request.url))
        return self.responses.pop(0)

    def queue_json(self, data: Any, status_code: int = 200) -> None:
        self.responses.append(httpx.Response(status_code, json=data))

    def queue_text(self, text: str, status_code: int) -> None:
        self.responses.append(httpx.Response(status_code, text=text))

    def queue_bytes(self, content: bytes, status_code: int = 200) -> None:
        self.responses.append(
            httpx.Response(status_code, content=content, headers={"Content-Type": "video/mp4"})
        )

    def client(self, api_key: Optional[str] = API_KEY, base_url: str = BASE_URL) -> CobaltClient:
        return CobaltClient(base_url, api_key, transport=self.transport)


@pytest.fixture
def fake_cobalt() -> FakeCobalt:
    """A fresh fake instance with an empty response queue."""
    return FakeCobalt()
