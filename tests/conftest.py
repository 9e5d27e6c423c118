"""
Shared pytest fixtures and helpers for all test modules.

IMPORTANT: INFERENCE_API_KEY must be set before the app is imported because
`app.config.settings` is instantiated at import time. Real network calls
never happen in tests: every aiohttp session is replaced through
`app.integrations.http_client.request_session`.
"""

import io
import json
import os

os.environ.setdefault("INFERENCE_API_KEY", "stub-key-for-tests")

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient
from PIL import Image

# App import happens AFTER the environment is prepared above.
from app.main import app  # noqa: E402


@pytest.fixture
def client():
    """FastAPI TestClient; unhandled errors come back as 500 responses."""
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


# ---------------------------------------------------------------------------
# Image helpers
# ---------------------------------------------------------------------------


def make_tiny_jpeg() -> bytes:
    """Create a minimal 10×10 JPEG in memory."""
    buf = io.BytesIO()
    Image.new("RGB", (10, 10), color=(128, 128, 128)).save(buf, format="JPEG")
    return buf.getvalue()


def make_tiny_png() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (4, 4), color=(10, 200, 30)).save(buf, format="PNG")
    return buf.getvalue()


# ---------------------------------------------------------------------------
# Model output helpers
# ---------------------------------------------------------------------------


REAL_RESULT = {
    "verdict": "Real",
    "confidence": 82,
    "summary": "Natural sensor noise and consistent lighting throughout.",
    "issues": [],
    "clear": ["Lighting Consistency"],
}

AI_RESULT = {
    "verdict": "AI Generated",
    "confidence": 94,
    "summary": "Garbled signage and melted jewelry geometry.",
    "issues": [
        {
            "name": "Garbled Text",
            "description": "Shop sign letters resolve into pseudo-glyphs.",
            "severity": "HIGH",
        },
        {
            "name": "Edge Halo",
            "description": "Soft halo around the subject's hair.",
            "severity": "MEDIUM",
        },
    ],
    "clear": ["Compression Artifacts"],
    "metadata": {
        "exif_present": False,
        "software_fingerprint": "Diffusion-style noise profile",
    },
}


def model_envelope(content: str) -> dict:
    """Wrap message content the way a chat-completions endpoint does."""
    return {
        "id": "chatcmpl-test",
        "choices": [{"index": 0, "message": {"role": "assistant", "content": content}}],
        "usage": {"prompt_tokens": 1200, "completion_tokens": 150, "total_tokens": 1350},
    }


def envelope_for(result: dict) -> dict:
    return model_envelope(json.dumps(result))


# ---------------------------------------------------------------------------
# aiohttp mocking
# ---------------------------------------------------------------------------


def make_mock_response(status=200, json_data=None, text="", content=b"", headers=None):
    """Build a mock aiohttp response usable as `async with session.x(...) as resp`."""
    mock_resp = MagicMock()
    mock_resp.__aenter__ = AsyncMock(return_value=mock_resp)
    mock_resp.__aexit__ = AsyncMock(return_value=None)
    mock_resp.status = status
    mock_resp.read = AsyncMock(return_value=content)
    mock_resp.text = AsyncMock(return_value=text)
    if isinstance(json_data, Exception):
        mock_resp.json = AsyncMock(side_effect=json_data)
    else:
        mock_resp.json = AsyncMock(return_value=json_data)
    mock_resp.headers = headers if headers is not None else {}
    return mock_resp


def make_mock_session(get_response=None, post_response=None):
    """Mock session whose .get()/.post() return the given response(s) or raise."""
    mock_session = MagicMock()
    for method, response in (("get", get_response), ("post", post_response)):
        if isinstance(response, (list, Exception)):
            setattr(mock_session, method, MagicMock(side_effect=response))
        else:
            setattr(mock_session, method, MagicMock(return_value=response))
    return mock_session


def patch_session(mock_session):
    """
    Patch http_client.request_session to yield mock_session directly,
    bypassing aiohttp.ClientSession construction entirely.
    """
    @asynccontextmanager
    async def _fake_request_session():
        yield mock_session

    return patch(
        "app.integrations.http_client.request_session",
        side_effect=_fake_request_session,
    )


@pytest.fixture
def no_retry_delay(monkeypatch):
    from app.config import settings

    monkeypatch.setattr(settings, "inference_retry_initial_delay", 0.0)
    monkeypatch.setattr(settings, "inference_retry_max_delay", 0.0)
