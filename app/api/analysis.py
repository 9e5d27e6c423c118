"""
Analysis route: /analyze-image

Accepts a JSON body { "imageBase64"?: str, "imageUrl"?: str, "imageMimeType"?: str }
and answers with the validated AnalysisResult. Failures are raised as
ImageAnalysisError subclasses and rendered as { "error": message } by the
handler registered in app/main.py.
"""

import json
import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError

from app.core.cors import cors_headers
from app.core.errors import InputError
from app.schemas.analysis import AnalysisResult, AnalyzeImageRequest, ErrorResponse
from app.services import analysis_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Analysis"])


@router.options("/analyze-image", include_in_schema=False)
async def analyze_image_options(request: Request):
    return Response(status_code=200, headers=cors_headers(request.headers.get("origin")))


@router.post(
    "/analyze-image",
    response_model=AnalysisResult,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def analyze_image(request: Request):
    """
    Run one forensic analysis on an inline or remote image.
    """
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise InputError("Invalid JSON body")

    if not isinstance(payload, dict):
        raise InputError("Request body must be a JSON object")

    try:
        body = AnalyzeImageRequest.model_validate(payload)
    except ValidationError as e:
        field = ".".join(str(part) for part in e.errors()[0]["loc"])
        raise InputError(f"Invalid '{field}' in request body")

    result = await analysis_service.analyze_image(body)

    logger.info(f"[ROUTE] /analyze-image -> {result.verdict.value} ({result.confidence}%)")
    return JSONResponse(content=result.to_response())
