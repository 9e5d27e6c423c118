"""
Analysis pipeline: request body → validated AnalysisResult.

    normalize → build → invoke → validate

Each stage raises its own ImageAnalysisError subclass; nothing is caught
here, so the route's exception handler sees the original failure.
"""

import logging
import os
import time

import psutil

from app.integrations.inference import client as inference_client
from app.schemas.analysis import AnalysisResult, AnalyzeImageRequest, InlineBytes
from app.services import normalizer, prompt_builder, validator

logger = logging.getLogger(__name__)


def log_memory(stage: str) -> None:
    """Log current process and system memory usage. Only runs when DEBUG logging is active."""
    if not logger.isEnabledFor(logging.DEBUG):
        return
    process = psutil.Process(os.getpid())
    mem_info = process.memory_info()
    sys_mem = psutil.virtual_memory()
    logger.debug(
        f"[MEMORY] {stage} | "
        f"PID: {os.getpid()} | "
        f"Process RSS: {mem_info.rss / 1024 / 1024:.2f} MB | "
        f"System Available: {sys_mem.available / 1024 / 1024:.2f} MB / {sys_mem.total / 1024 / 1024:.2f} MB"
    )


async def analyze_image(body: AnalyzeImageRequest) -> AnalysisResult:
    start = time.perf_counter()

    image_input = normalizer.resolve_image_input(body)
    source = "inline" if isinstance(image_input, InlineBytes) else "url"
    logger.info(f"[PIPELINE] Analysis started ({source} input)")

    image = await normalizer.normalize(image_input)
    log_memory(f"Normalized: {image.content_type}, {len(image.data_uri)} chars")

    request = prompt_builder.build(image)
    raw = await inference_client.invoke(request)
    result = validator.validate(raw)

    log_memory("Validated")
    logger.info(
        f"[PIPELINE] Analysis finished in {time.perf_counter() - start:.2f}s: "
        f"{result.verdict.value} ({result.confidence}%)"
    )
    return result
