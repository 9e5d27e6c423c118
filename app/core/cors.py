"""
CORS helpers.

CORSMiddleware answers real preflights (Origin + Access-Control-Request-Method)
before routing; EmptyPreflightCORSMiddleware keeps its headers but sends an
empty body. Bare OPTIONS probes and error responses rendered by our exception
handlers get `cors_headers()` attached explicitly so browsers can always read
the body.
"""

from typing import Optional

from fastapi.middleware.cors import CORSMiddleware
from starlette.datastructures import Headers
from starlette.responses import Response

from app.config import settings

ALLOW_HEADERS = "authorization, x-client-info, apikey, content-type"


def allowed_origin(origin: Optional[str]) -> Optional[str]:
    """Access-Control-Allow-Origin value for a request origin, or None if not allowed.

    The header carries a single origin or "*": a configured list is matched
    against the request's Origin and the match is echoed back.
    """
    origins = settings.cors_allow_origins
    if not origins or "*" in origins:
        return "*"
    if origin and origin in origins:
        return origin
    return None


def cors_headers(origin: Optional[str] = None) -> dict:
    headers = {
        "Access-Control-Allow-Methods": "POST, OPTIONS",
        "Access-Control-Allow-Headers": ALLOW_HEADERS,
    }
    allow = allowed_origin(origin)
    if allow:
        headers["Access-Control-Allow-Origin"] = allow
        if allow != "*":
            headers["Vary"] = "Origin"
    return headers


class EmptyPreflightCORSMiddleware(CORSMiddleware):
    """CORSMiddleware whose successful preflight answer has no body."""

    def preflight_response(self, request_headers: Headers) -> Response:
        response = super().preflight_response(request_headers=request_headers)
        if response.status_code != 200:
            return response
        headers = {
            key: value
            for key, value in response.headers.items()
            if key not in ("content-length", "content-type")
        }
        return Response(status_code=200, headers=headers)
