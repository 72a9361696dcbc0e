from dataclasses import dataclass, field
from typing import Optional, Dict, Any
import time

AnalysisResult = Dict[str, Any]


@dataclass
class UploadedFile:
    filename: str
    content_type: str
    data: bytes = b""

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class ValidationOutcome:
    valid: bool
    error: Optional[str] = None


@dataclass
class ExtractionOutcome:
    success: bool
    text: Optional[str] = None
    error: Optional[str] = None
    kind: Optional[str] = None


@dataclass
class AnalysisOutcome:
    success: bool
    data: Optional[AnalysisResult] = None
    error: Optional[str] = None
    kind: Optional[str] = None


@dataclass
class Notification:
    kind: str
    message: str
    ttl_ms: int
    created_at: float = field(default_factory=lambda: time.monotonic())

    def expired(self, now: Optional[float] = None) -> bool:
        now = time.monotonic() if now is None else now
        return (now - self.created_at) * 1000 >= self.ttl_ms


UPLOAD = "upload"
LOADING = "loading"
RESULTS = "results"


@dataclass(frozen=True)
class ViewState:
    view: str = UPLOAD
    message: Optional[str] = None
    analysis: Optional[AnalysisResult] = None
