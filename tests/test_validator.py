"""
Unit tests for app/services/validator.py.

Every failure must be a ParseError or SchemaError, and no partial result is
ever returned.
"""

import json

import pytest

from app.core.errors import ParseError, SchemaError
from app.schemas.analysis import AnalysisResult, Severity, Verdict
from app.services.validator import strip_code_fences, validate
from tests.conftest import AI_RESULT, REAL_RESULT, envelope_for, model_envelope


def _with(**overrides) -> dict:
    return envelope_for({**REAL_RESULT, **overrides})


# ---------------------------------------------------------------------------
# Happy paths
# ---------------------------------------------------------------------------


def test_valid_result():
    result = validate(envelope_for(REAL_RESULT))

    assert isinstance(result, AnalysisResult)
    assert result.verdict is Verdict.REAL
    assert result.confidence == 82
    assert result.issues == []
    assert result.clear == ["Lighting Consistency"]
    assert result.metadata is None


def test_issues_and_partial_metadata():
    result = validate(envelope_for(AI_RESULT))

    assert result.verdict is Verdict.AI_GENERATED
    assert [i.name for i in result.issues] == ["Garbled Text", "Edge Halo"]
    assert result.issues[0].severity is Severity.HIGH
    assert result.metadata.exif_present is False
    assert result.metadata.software_fingerprint == "Diffusion-style noise profile"
    assert result.metadata.compression_analysis == ""
    assert result.metadata.metadata_verdict == ""


def test_metadata_null_subfields_use_defaults():
    result = validate(_with(metadata={"exif_present": None, "provenance_signals": None}))
    assert result.metadata.exif_present is False
    assert result.metadata.provenance_signals == ""


@pytest.mark.parametrize(
    "content",
    [
        "```json\n{body}\n```",
        "```\n{body}\n```",
        "  ```JSON\n{body}```  ",
        "\n\n{body}\n\n",
    ],
)
def test_fenced_output_equals_bare_output(content):
    body = json.dumps(AI_RESULT)
    fenced = validate(model_envelope(content.replace("{body}", body)))
    bare = validate(model_envelope(body))
    assert fenced == bare


def test_strip_code_fences_leaves_bare_json_alone():
    assert strip_code_fences('{"a": "```"}') == '{"a": "```"}'


def test_extra_fields_are_ignored():
    result = validate(_with(reasoning="long chain of thought"))
    assert result.verdict is Verdict.REAL


def test_serialization_uses_wire_names_and_omits_missing_metadata():
    data = validate(envelope_for(REAL_RESULT)).to_response()
    assert data == REAL_RESULT


# ---------------------------------------------------------------------------
# Verdict and confidence ranges
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("verdict", [v.value for v in Verdict])
def test_all_verdict_literals_accepted(verdict):
    assert validate(_with(verdict=verdict)).verdict.value == verdict


@pytest.mark.parametrize("verdict", ["Fake", "real", "AI-Generated", "", "Likely AI"])
def test_unknown_verdict_rejected(verdict):
    with pytest.raises(SchemaError) as exc:
        validate(_with(verdict=verdict))
    assert exc.value.field == "verdict"


@pytest.mark.parametrize("confidence", [1, 50, 100])
def test_confidence_in_range_accepted(confidence):
    assert validate(_with(confidence=confidence)).confidence == confidence


@pytest.mark.parametrize("confidence", [0, 101, -5, 82.5, 82.0, "82", True, None])
def test_confidence_out_of_range_or_non_integer_rejected(confidence):
    with pytest.raises(SchemaError) as exc:
        validate(_with(confidence=confidence))
    assert exc.value.field == "confidence"
    assert exc.value.status_code == 500


# ---------------------------------------------------------------------------
# Structural failures
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("field", ["verdict", "confidence", "summary", "issues", "clear"])
def test_missing_required_field(field):
    data = {k: v for k, v in REAL_RESULT.items() if k != field}
    with pytest.raises(SchemaError) as exc:
        validate(envelope_for(data))
    assert exc.value.field == field


@pytest.mark.parametrize(
    "issue, field",
    [
        ({"name": "", "description": "d", "severity": "LOW"}, "issues.0.name"),
        ({"name": "n", "description": "", "severity": "LOW"}, "issues.0.description"),
        ({"name": "n", "description": "d", "severity": "CRITICAL"}, "issues.0.severity"),
        ({"name": "n", "description": "d"}, "issues.0.severity"),
    ],
)
def test_bad_issue_rejected(issue, field):
    with pytest.raises(SchemaError) as exc:
        validate(_with(issues=[issue]))
    assert exc.value.field == field


def test_clear_must_be_list_of_strings():
    with pytest.raises(SchemaError) as exc:
        validate(_with(clear=["Lighting", 3]))
    assert exc.value.field.startswith("clear")


def test_metadata_must_be_object():
    with pytest.raises(SchemaError) as exc:
        validate(_with(metadata="none found"))
    assert exc.value.field == "metadata"


def test_top_level_array_rejected():
    with pytest.raises(SchemaError):
        validate(model_envelope("[1, 2, 3]"))


# ---------------------------------------------------------------------------
# Parse failures
# ---------------------------------------------------------------------------


def test_not_json_at_all():
    with pytest.raises(ParseError):
        validate(model_envelope("not json at all"))


def test_truncated_json():
    with pytest.raises(ParseError):
        validate(model_envelope('{"verdict": "Real", "confidence": 8'))


@pytest.mark.parametrize(
    "raw",
    [
        {},
        {"choices": []},
        {"choices": [{"message": {}}]},
        {"choices": [{"message": {"content": None}}]},
        {"choices": [{"message": {"content": "   "}}]},
    ],
)
def test_missing_content(raw):
    with pytest.raises(ParseError):
        validate(raw)


def test_verdict_leaning_is_exhaustive():
    assert {v for v in Verdict if v.leans_real} == {Verdict.REAL, Verdict.LIKELY_REAL}
    assert {v for v in Verdict if v.leans_ai} == {Verdict.AI_GENERATED, Verdict.LIKELY_AI_GENERATED}
    assert [v for v in Verdict if not (v.leans_real or v.leans_ai)] == [Verdict.UNCERTAIN]
