from enum import Enum
from typing import Annotated, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, field_validator


class Verdict(str, Enum):
    AI_GENERATED = "AI Generated"
    LIKELY_AI_GENERATED = "Likely AI Generated"
    UNCERTAIN = "Uncertain"
    LIKELY_REAL = "Likely Real"
    REAL = "Real"

    @property
    def leans_real(self) -> bool:
        return self in (Verdict.REAL, Verdict.LIKELY_REAL)

    @property
    def leans_ai(self) -> bool:
        return self in (Verdict.AI_GENERATED, Verdict.LIKELY_AI_GENERATED)


class Severity(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


NonEmptyStr = Annotated[StrictStr, Field(min_length=1)]


# ---------------------------------------------------------------------------
# Inbound
# ---------------------------------------------------------------------------


class AnalyzeImageRequest(BaseModel):
    """Body of POST /analyze-image. At most one of the image fields is used."""
    model_config = ConfigDict(populate_by_name=True)

    image_base64: Optional[str] = Field(None, alias="imageBase64")
    image_url: Optional[str] = Field(None, alias="imageUrl")
    image_mime_type: Optional[str] = Field(None, alias="imageMimeType")


class InlineBytes(BaseModel):
    model_config = ConfigDict(frozen=True)

    base64_payload: str
    mime_hint: Optional[str] = None


class RemoteReference(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str


ImageInput = Union[InlineBytes, RemoteReference]


class CanonicalImage(BaseModel):
    model_config = ConfigDict(frozen=True)

    content_type: str
    data_uri: str


class AnalysisRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    system_prompt: str
    user_text: str
    image: CanonicalImage


# ---------------------------------------------------------------------------
# Result contract (field names are the wire names)
# ---------------------------------------------------------------------------


class IssueRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: NonEmptyStr
    description: NonEmptyStr
    severity: Severity


class ForensicMetadata(BaseModel):
    """Supplementary metadata findings. Every field is optional."""
    model_config = ConfigDict(frozen=True)

    exif_present: bool = False
    software_fingerprint: str = ""
    compression_analysis: str = ""
    provenance_signals: str = ""
    tampering_indicators: str = ""
    metadata_verdict: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _null_means_missing(cls, value, info):
        if value is None:
            return cls.model_fields[info.field_name].default
        return value


class AnalysisResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    verdict: Verdict
    confidence: Annotated[StrictInt, Field(ge=1, le=100, description="Confidence in the stated verdict")]
    summary: StrictStr
    issues: List[IssueRecord]
    clear: List[StrictStr]
    metadata: Optional[ForensicMetadata] = None

    def to_response(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)


class ErrorResponse(BaseModel):
    error: str
