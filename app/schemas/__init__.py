from app.schemas.analysis import (
    AnalysisRequest,
    AnalysisResult,
    AnalyzeImageRequest,
    CanonicalImage,
    ErrorResponse,
    ForensicMetadata,
    ImageInput,
    InlineBytes,
    IssueRecord,
    RemoteReference,
    Severity,
    Verdict,
)

__all__ = [
    "AnalysisRequest",
    "AnalysisResult",
    "AnalyzeImageRequest",
    "CanonicalImage",
    "ErrorResponse",
    "ForensicMetadata",
    "ImageInput",
    "InlineBytes",
    "IssueRecord",
    "RemoteReference",
    "Severity",
    "Verdict",
]
