"""
Response validation: model envelope → AnalysisResult.

The model is asked for bare JSON but sometimes wraps it in a markdown code
fence, so fences are stripped before parsing. Anything that still fails to
parse is a ParseError; anything that parses but breaks the result contract
is a SchemaError naming the first offending field. A partial result is
never returned.
"""

import json
import logging
import re

from pydantic import ValidationError

from app.core.errors import ParseError, SchemaError
from app.schemas.analysis import AnalysisResult

logger = logging.getLogger(__name__)

_LEADING_FENCE = re.compile(r"^```[a-zA-Z]*[ \t]*\n?")
_TRAILING_FENCE = re.compile(r"\n?[ \t]*```$")


def extract_content(raw: dict) -> str:
    """Pull the assistant text out of a chat-completions envelope."""
    try:
        content = raw["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        raise ParseError("Inference response did not contain a message")
    if not isinstance(content, str) or not content.strip():
        raise ParseError("Inference response message was empty")
    return content


def strip_code_fences(content: str) -> str:
    text = content.strip()
    text = _LEADING_FENCE.sub("", text, count=1)
    text = _TRAILING_FENCE.sub("", text, count=1)
    return text.strip()


def _schema_error(exc: ValidationError) -> SchemaError:
    first = exc.errors()[0]
    field = ".".join(str(part) for part in first["loc"]) or "result"
    return SchemaError(field, first["msg"].lower())


def parse_result(text: str) -> AnalysisResult:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning(f"[VALIDATE] Model output is not JSON: {text[:200]!r}")
        raise ParseError(f"Could not parse analysis result: {e.msg}")

    if not isinstance(data, dict):
        raise SchemaError("result", "must be a JSON object")

    try:
        return AnalysisResult.model_validate(data)
    except ValidationError as e:
        error = _schema_error(e)
        logger.warning(f"[VALIDATE] {error.message}")
        raise error


def validate(raw: dict) -> AnalysisResult:
    result = parse_result(strip_code_fences(extract_content(raw)))
    logger.info(
        f"[VALIDATE] verdict={result.verdict.value} confidence={result.confidence} "
        f"issues={len(result.issues)} clear={len(result.clear)}"
    )
    return result
