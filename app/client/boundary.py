"""
Client request boundary: one POST /analyze-image round trip.

Maps every failure onto the error taxonomy so the orchestrator only has to
handle ImageAnalysisError:
  - non-2xx reply or {"error": ...} body → AnalysisFailedError
  - network failure / timeout            → TransportError
  - 2xx body that is not a valid result  → SchemaError
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

import aiohttp
from pydantic import ValidationError

from app.config import settings
from app.core.errors import AnalysisFailedError, SchemaError, TransportError
from app.integrations import http_client as http_module
from app.schemas.analysis import AnalysisResult

logger = logging.getLogger(__name__)

RequestBoundary = Callable[[dict], Awaitable[AnalysisResult]]


class AnalyzeImageBoundary:
    def __init__(self, base_url: Optional[str] = None, timeout_sec: Optional[float] = None):
        self.base_url = (base_url or settings.client_base_url).rstrip("/")
        self.timeout_sec = timeout_sec or settings.client_timeout_sec

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/analyze-image"

    async def __call__(self, payload: dict) -> AnalysisResult:
        timeout = aiohttp.ClientTimeout(total=self.timeout_sec)

        async with http_module.request_session() as session:
            try:
                async with session.post(self.endpoint, json=payload, timeout=timeout) as response:
                    try:
                        data = await response.json(content_type=None)
                    except ValueError:
                        data = None
                    status = response.status
            except asyncio.TimeoutError:
                raise TransportError("The analysis timed out. Please try again.")
            except aiohttp.ClientError as e:
                raise TransportError(f"Could not reach the analysis service: {e}")

        if isinstance(data, dict) and data.get("error"):
            raise AnalysisFailedError(str(data["error"]), status=status)
        if not 200 <= status < 300:
            raise AnalysisFailedError(f"Analysis failed with status {status}", status=status)
        if not isinstance(data, dict):
            raise SchemaError("result", "must be a JSON object")

        try:
            return AnalysisResult.model_validate(data)
        except ValidationError as e:
            first = e.errors()[0]
            raise SchemaError(".".join(str(p) for p in first["loc"]), first["msg"].lower())
