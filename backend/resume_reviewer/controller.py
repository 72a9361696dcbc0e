from __future__ import annotations

import logging
from typing import Optional, Tuple

from resume_reviewer.core import (
    ANALYZING_MESSAGE,
    API_KEY_PREFIX,
    EXTRACTING_MESSAGE,
)
from resume_reviewer.errors import CredentialMissing, UnexpectedError
from resume_reviewer.models import UploadedFile
from resume_reviewer.services.analyzer import AnalysisClient
from resume_reviewer.services.credentials import CredentialStore
from resume_reviewer.services.parse import process_resume
from resume_reviewer.services.presenter import Presenter
from resume_reviewer.services.report import API_KEY_MASK

logger = logging.getLogger(__name__)

NO_API_KEY = "Please configure your OpenAI API key first"
UNEXPECTED = "An unexpected error occurred. Please try again."
BUSY = "An analysis is already in progress. Please wait for it to finish."

# Flow states
IDLE = "idle"
EXTRACTING = "extracting"
ANALYZING = "analyzing"
RESULTS = "results"
ERROR = "error"

# Flow events
FILE_SELECTED = "file_selected"
NO_CREDENTIAL = "no_credential"
EXTRACTED = "extracted"
EXTRACTION_FAILED = "extraction_failed"
ANALYZED = "analyzed"
ANALYSIS_FAILED = "analysis_failed"
CRASHED = "crashed"
RESET = "reset"

TRANSITIONS = {
    (IDLE, FILE_SELECTED): EXTRACTING,
    (IDLE, NO_CREDENTIAL): ERROR,
    (EXTRACTING, EXTRACTED): ANALYZING,
    (EXTRACTING, EXTRACTION_FAILED): ERROR,
    (ANALYZING, ANALYZED): RESULTS,
    (ANALYZING, ANALYSIS_FAILED): ERROR,
}


def next_state(state: str, event: str) -> str:
    """Pure transition function of the upload flow."""
    if event == RESET:
        return IDLE
    if event == CRASHED:
        return ERROR
    # A finished flow (results or error) behaves like idle for a new upload.
    if state in (RESULTS, ERROR):
        state = IDLE
    try:
        return TRANSITIONS[(state, event)]
    except KeyError:
        raise ValueError(f"Invalid transition: {event} while {state}") from None


class CredentialModal:
    """API key dialog; opening and closing never touches the upload flow."""

    def __init__(self, credentials: CredentialStore, presenter: Presenter):
        self.credentials = credentials
        self.presenter = presenter
        self.is_open = False
        self.value = ""

    def open(self) -> None:
        self.value = API_KEY_MASK if self.credentials.has() else ""
        self.is_open = True

    def close(self) -> None:
        self.is_open = False
        self.value = ""

    def save(self, raw: Optional[str]) -> bool:
        api_key = (raw or "").strip()

        if not api_key or api_key == API_KEY_MASK:
            self.presenter.notify_error("Please enter a valid API key")
            return False

        if not api_key.startswith(API_KEY_PREFIX):
            self.presenter.notify_error(f'Invalid API key format. OpenAI keys start with "{API_KEY_PREFIX}"')
            return False

        self.credentials.save(api_key)
        self.close()
        self.presenter.show_success("API key saved successfully!")
        logger.info("API key saved")
        return True

    def clear(self) -> None:
        self.credentials.clear()
        self.close()
        logger.info("API key cleared")


class ReviewApp:
    """Sequences upload -> extraction -> AI analysis -> results for one user."""

    def __init__(
        self,
        credentials: CredentialStore,
        analyzer: Optional[AnalysisClient] = None,
        presenter: Optional[Presenter] = None,
    ):
        self.credentials = credentials
        self.analyzer = analyzer or AnalysisClient(credentials)
        self.presenter = presenter or Presenter()
        self.modal = CredentialModal(credentials, self.presenter)
        self.state = IDLE
        self.busy = False
        self.last_error: Optional[Tuple[str, str]] = None

    def _advance(self, event: str) -> None:
        self.state = next_state(self.state, event)

    def _fail(self, event: str, kind: str, message: str) -> None:
        self._advance(event)
        self.last_error = (kind, message)
        self.presenter.show_error(message)

    def reset(self) -> bool:
        if self.busy:
            self.presenter.notify_error(BUSY)
            return False
        self._advance(RESET)
        self.last_error = None
        self.presenter.show_upload()
        return True

    async def handle_file_upload(self, file: Optional[UploadedFile]) -> None:
        if self.busy:
            self.presenter.notify_error(BUSY)
            return

        self.last_error = None
        if not self.credentials.has():
            self._fail(NO_CREDENTIAL, CredentialMissing.kind, NO_API_KEY)
            self.modal.open()
            return

        self.busy = True
        try:
            self._advance(FILE_SELECTED)
            self.presenter.show_loading(EXTRACTING_MESSAGE)

            result = await process_resume(file)
            if not result.success:
                self._fail(EXTRACTION_FAILED, result.kind, result.error)
                return

            self._advance(EXTRACTED)
            self.presenter.show_loading(ANALYZING_MESSAGE)

            analysis = await self.analyzer.analyze_resume(result.text)
            if not analysis.success:
                self._fail(ANALYSIS_FAILED, analysis.kind, analysis.error)
                return

            self.presenter.show_results(analysis.data)
            self._advance(ANALYZED)

        except Exception:
            logger.exception("Upload handling error")
            self._fail(CRASHED, UnexpectedError.kind, UNEXPECTED)
        finally:
            self.busy = False
