"""
Input normalization: turns an inline payload or a remote URL into a single
CanonicalImage (content type + base64 data URI).

Inline bytes are wrapped verbatim, without re-encoding or size checks.
Remote references are fetched with browser-like headers so naive hot-link
protection serves the image instead of an error page.
"""

import asyncio
import base64
import logging
from typing import Optional

import aiohttp

from app.config import settings
from app.core.errors import FetchError, InputError
from app.integrations import http_client as http_module
from app.schemas.analysis import (
    AnalyzeImageRequest,
    CanonicalImage,
    ImageInput,
    InlineBytes,
    RemoteReference,
)

logger = logging.getLogger(__name__)

UPLOAD_HINT = "Try uploading the image file directly instead."


def resolve_image_input(body: AnalyzeImageRequest) -> ImageInput:
    """
    Pick exactly one input variant from the request body.

    When both fields are supplied the inline payload wins; the URL is ignored.
    """
    if body.image_base64:
        if body.image_url:
            logger.info("[NORMALIZE] Both imageBase64 and imageUrl supplied; using inline payload")
        return InlineBytes(base64_payload=body.image_base64, mime_hint=body.image_mime_type)
    if body.image_url:
        return RemoteReference(url=body.image_url.strip())
    raise InputError("No image provided")


def to_data_uri(content_type: str, payload_b64: str) -> str:
    return f"data:{content_type};base64,{payload_b64}"


def browser_headers(url: str) -> dict:
    return {
        "User-Agent": settings.fetch_user_agent,
        "Accept": "image/avif,image/webp,image/apng,image/svg+xml,image/*,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
        "Referer": url,
    }


async def normalize(image_input: Optional[ImageInput]) -> CanonicalImage:
    if isinstance(image_input, InlineBytes):
        content_type = image_input.mime_hint or settings.default_content_type
        return CanonicalImage(
            content_type=content_type,
            data_uri=to_data_uri(content_type, image_input.base64_payload),
        )
    if isinstance(image_input, RemoteReference):
        return await fetch_remote_image(image_input.url)
    raise InputError("No image provided")


async def fetch_remote_image(url: str) -> CanonicalImage:
    """Download a remote image and encode it as a data URI."""
    timeout = aiohttp.ClientTimeout(total=settings.fetch_timeout_sec)

    async with http_module.request_session() as session:
        try:
            async with session.get(url, headers=browser_headers(url), timeout=timeout) as response:
                if not 200 <= response.status < 300:
                    logger.warning(f"[NORMALIZE] Remote fetch failed with status {response.status}")
                    raise FetchError(
                        f"Could not fetch image from URL: status {response.status}. {UPLOAD_HINT}",
                        status=response.status,
                    )
                content = await response.read()
                content_type = response.headers.get("Content-Type") or settings.default_content_type
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning(f"[NORMALIZE] Remote fetch error: {e!r}")
            raise FetchError(f"Could not fetch image from URL: {str(e) or 'request timed out'}. {UPLOAD_HINT}")

    logger.info(f"[NORMALIZE] Fetched remote image ({len(content)} bytes, {content_type})")
    payload = base64.b64encode(content).decode("ascii")
    return CanonicalImage(content_type=content_type, data_uri=to_data_uri(content_type, payload))
