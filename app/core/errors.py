"""
Failure taxonomy for the analysis pipeline.

Every failure a caller can see is an `ImageAnalysisError` carrying a
user-facing message and the HTTP status the proxy answers with. The
FastAPI handler in app/main.py renders them as `{"error": message}`.
"""

from typing import Optional


class ImageAnalysisError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InputError(ImageAnalysisError):
    """No image supplied, or the request body is unusable."""
    status_code = 400


class FetchError(ImageAnalysisError):
    """A remote image could not be retrieved."""
    status_code = 400

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class UpstreamError(ImageAnalysisError):
    """The inference service answered with a non-2xx status."""

    def __init__(self, status: int, body: str):
        super().__init__(f"AI API error [{status}]: {body}")
        self.status = status
        self.body = body

    @property
    def retryable(self) -> bool:
        return self.status >= 500


class TransportError(ImageAnalysisError):
    """Network-level failure (DNS, reset, timeout) reaching a remote service."""


class ParseError(ImageAnalysisError):
    """Model output is not valid JSON after fence stripping."""


class SchemaError(ImageAnalysisError):
    """Model output is valid JSON but breaks the result contract."""

    def __init__(self, field: str, reason: str):
        super().__init__(f"Invalid analysis result: '{field}' {reason}")
        self.field = field
        self.reason = reason


class ConfigurationError(ImageAnalysisError):
    """The service is missing configuration it needs to run an analysis."""


class AnalysisFailedError(ImageAnalysisError):
    """Client side: the analysis endpoint reported an error."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class SubmissionInFlightError(ImageAnalysisError):
    """Client side: a submit arrived while another analysis is running."""
    status_code = 409
