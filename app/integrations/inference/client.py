"""
Inference client: posts a multimodal chat request to the configured
OpenAI-compatible endpoint and returns the decoded response envelope.

Each attempt has a hard timeout. Transport failures and 5xx answers are
retried with exponential back-off up to `inference_max_attempts` in total;
4xx answers are returned to the caller immediately.
"""

import asyncio
import logging
import time

import aiohttp
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception, stop_after_attempt, wait_exponential

from app.config import settings
from app.core.errors import ConfigurationError, ParseError, TransportError, UpstreamError
from app.integrations import http_client as http_module
from app.schemas.analysis import AnalysisRequest

logger = logging.getLogger(__name__)


def as_messages(request: AnalysisRequest) -> list[dict]:
    """Render the request as an OpenAI-style multimodal chat message list."""
    return [
        {"role": "system", "content": request.system_prompt},
        {
            "role": "user",
            "content": [
                {"type": "text", "text": request.user_text},
                {"type": "image_url", "image_url": {"url": request.image.data_uri}},
            ],
        },
    ]


def build_chat_body(request: AnalysisRequest) -> dict:
    return {
        "model": settings.inference_model,
        "messages": as_messages(request),
        "temperature": settings.inference_temperature,
    }


def _headers() -> dict:
    return {
        "Authorization": f"Bearer {settings.inference_api_key}",
        "Content-Type": "application/json",
        "HTTP-Referer": settings.inference_referer,
        "X-Title": settings.inference_title,
    }


def is_retryable(exc: BaseException) -> bool:
    """Transport failures and 5xx answers are transient; everything else is final."""
    if isinstance(exc, TransportError):
        return True
    return isinstance(exc, UpstreamError) and exc.retryable


def _log_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception()
    delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
    logger.warning(
        f"[INFERENCE] Attempt {retry_state.attempt_number} failed "
        f"({getattr(exc, 'message', exc)}); retrying in {delay:.1f}s"
    )


def _retry_policy() -> AsyncRetrying:
    return AsyncRetrying(
        stop=stop_after_attempt(max(1, settings.inference_max_attempts)),
        wait=wait_exponential(
            multiplier=settings.inference_retry_initial_delay,
            max=settings.inference_retry_max_delay,
            exp_base=settings.inference_retry_exp_base,
        ),
        retry=retry_if_exception(is_retryable),
        before_sleep=_log_retry,
        reraise=True,
    )


async def _post_once(body: dict) -> dict:
    timeout = aiohttp.ClientTimeout(total=settings.inference_timeout_sec)

    async with http_module.request_session() as session:
        try:
            async with session.post(
                settings.inference_url, json=body, headers=_headers(), timeout=timeout
            ) as response:
                if not 200 <= response.status < 300:
                    err_text = await response.text()
                    logger.error(f"[INFERENCE] AI API error [{response.status}]: {err_text}")
                    raise UpstreamError(response.status, err_text)
                try:
                    return await response.json(content_type=None)
                except ValueError as e:
                    raise ParseError(f"Inference response is not valid JSON: {e}")
        except asyncio.TimeoutError:
            raise TransportError(
                f"Inference request timed out after {settings.inference_timeout_sec:g}s"
            )
        except aiohttp.ClientError as e:
            raise TransportError(f"Could not reach inference service: {e}")


async def invoke(request: AnalysisRequest) -> dict:
    """Send one analysis request, retrying transient failures."""
    if not settings.inference_api_key:
        raise ConfigurationError("Inference API key is not configured")

    body = build_chat_body(request)

    async for attempt in _retry_policy():
        with attempt:
            start = time.perf_counter()
            raw = await _post_once(body)

    latency = time.perf_counter() - start
    usage = raw.get("usage") if isinstance(raw, dict) else None
    logger.info(
        f"[INFERENCE] {settings.inference_model} answered in {latency:.2f}s "
        f"(attempt {attempt.retry_state.attempt_number}, usage={usage})"
    )
    return raw
