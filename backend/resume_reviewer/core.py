from pydantic import BaseModel, Field
from typing import Dict, Any, List, Optional

MAX_FILE_MB = 5
MAX_FILE_BYTES = MAX_FILE_MB * 1024 * 1024

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

SUPPORTED_TYPES = {
    PDF_MIME: "pdf",
    DOCX_MIME: "docx",
}

MIN_TEXT_LENGTH = 50

API_KEY_STORAGE_KEY = "openai_api_key"
API_KEY_PREFIX = "sk-"

REQUIRED_FIELDS = (
    "score_overall",
    "scores",
    "interview_probability",
    "top_strengths",
    "critical_weaknesses",
    "recruiter_summary",
    "rewritten_bullets",
)

REQUIRED_SCORES = ("impact", "clarity", "structure", "skills", "ats_compatibility")

CATEGORY_LABELS = {
    "impact": "Impact",
    "clarity": "Clarity",
    "structure": "Structure",
    "skills": "Skills",
    "ats_compatibility": "ATS Score",
}

EXTRACTING_MESSAGE = "Extracting text from your resume..."
ANALYZING_MESSAGE = "AI recruiter reviewing your resume..."

ERROR_BANNER_MS = 5000
SUCCESS_BANNER_MS = 3000


class AnalyzeResponse(BaseModel):
    status: bool = True
    analysis: Dict[str, Any]


class ErrorResponse(BaseModel):
    status: bool = False
    kind: str
    message: str


class NotificationOut(BaseModel):
    kind: str
    message: str
    ttl_ms: int = Field(ge=0)


class StateResponse(BaseModel):
    status: bool = True
    view: str
    flow: str
    message: Optional[str] = None
    analysis: Optional[Dict[str, Any]] = None
    modal_open: bool = False
    api_key_configured: bool = False
    notifications: List[NotificationOut] = []
