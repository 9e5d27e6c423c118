"""
Client-side session state for one analysis.

`ClientSession` is owned by the orchestrator and replaced wholesale on every
submit and reset. `CancellationToken` ties together the tasks that belong to
one session (status ticker + request) so abandoning the session stops both.
`Submission` is the raw input emitted by an upload surface.
"""

import asyncio
import base64
import mimetypes
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from app.core.errors import InputError
from app.schemas.analysis import AnalysisResult

SCAN_STEPS = (
    "Uploading image...",
    "Scanning textures and anatomy...",
    "Checking lighting and edges...",
    "Compiling forensic verdict...",
)


class Phase(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    LOADING = "loading"
    RESULT = "result"
    ERROR = "error"

    @property
    def in_flight(self) -> bool:
        return self in (Phase.SUBMITTING, Phase.LOADING)


@dataclass
class ClientSession:
    phase: Phase = Phase.IDLE
    preview_uri: str = ""
    scan_step_index: int = 0
    result: Optional[AnalysisResult] = None
    error: Optional[str] = None

    @property
    def status_label(self) -> Optional[str]:
        if self.phase is not Phase.LOADING:
            return None
        return SCAN_STEPS[self.scan_step_index]


class CancellationToken:
    """Cancels every task bound to it, including tasks bound after cancel()."""

    def __init__(self) -> None:
        self._cancelled = False
        self._tasks: list[asyncio.Future] = []

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def bind(self, task: asyncio.Future) -> asyncio.Future:
        if self._cancelled:
            task.cancel()
        else:
            self._tasks.append(task)
        return task

    def cancel(self) -> None:
        self._cancelled = True
        for task in self._tasks:
            if not task.done():
                task.cancel()


@dataclass(frozen=True)
class Submission:
    preview_uri: str
    image_base64: Optional[str] = None
    image_mime_type: Optional[str] = None
    image_url: Optional[str] = None

    @classmethod
    def from_bytes(cls, data: bytes, mime_type: str) -> "Submission":
        if not mime_type or not mime_type.startswith("image/"):
            raise InputError(f"Unsupported file type: {mime_type or 'unknown'}")
        encoded = base64.b64encode(data).decode("ascii")
        return cls(
            preview_uri=f"data:{mime_type};base64,{encoded}",
            image_base64=encoded,
            image_mime_type=mime_type,
        )

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "Submission":
        path = Path(path)
        mime_type, _ = mimetypes.guess_type(path.name)
        return cls.from_bytes(path.read_bytes(), mime_type or "")

    @classmethod
    def from_url(cls, url: str) -> "Submission":
        url = (url or "").strip()
        if not url:
            raise InputError("No image URL provided")
        return cls(preview_uri=url, image_url=url)

    def to_payload(self) -> dict:
        payload = {
            "imageBase64": self.image_base64,
            "imageMimeType": self.image_mime_type,
            "imageUrl": self.image_url,
        }
        return {k: v for k, v in payload.items() if v is not None}
