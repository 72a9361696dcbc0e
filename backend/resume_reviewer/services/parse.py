from __future__ import annotations

import io
import logging
from typing import Optional

import fitz  # pymupdf
from docx import Document
from starlette.concurrency import run_in_threadpool

from resume_reviewer.core import MAX_FILE_BYTES, MAX_FILE_MB, MIN_TEXT_LENGTH, SUPPORTED_TYPES
from resume_reviewer.errors import ExtractionError, ReviewError, ValidationError
from resume_reviewer.models import ExtractionOutcome, UploadedFile, ValidationOutcome

logger = logging.getLogger(__name__)

PDF_FAILED = "Failed to extract text from PDF. Please ensure the file is not corrupted."
DOCX_FAILED = "Failed to extract text from DOCX. Please ensure the file is not corrupted."
TOO_SHORT = "Extracted text is too short. Please ensure your resume has readable content."


def _join(parts) -> str:
    return "\n".join(parts).replace("\x00", " ").strip()


def validate_file(file: Optional[UploadedFile]) -> ValidationOutcome:
    if file is None:
        return ValidationOutcome(valid=False, error="No file selected")

    if file.content_type not in SUPPORTED_TYPES:
        return ValidationOutcome(
            valid=False,
            error="Unsupported file type. Please upload a PDF or DOCX file.",
        )

    if file.size > MAX_FILE_BYTES:
        return ValidationOutcome(
            valid=False,
            error=f"File too large. Maximum size is {MAX_FILE_MB}MB.",
        )

    return ValidationOutcome(valid=True)


def extract_text_from_pdf(data: bytes) -> str:
    try:
        with fitz.open(stream=data, filetype="pdf") as doc:
            chunks = [page.get_text("text") for page in doc]
    except Exception as e:
        logger.error("PDF extraction error: %s", e)
        raise ExtractionError(PDF_FAILED) from e

    text = _join(chunks)
    if not text:
        raise ExtractionError(PDF_FAILED)
    return text


def extract_text_from_docx(data: bytes) -> str:
    try:
        doc = Document(io.BytesIO(data))
        parts = [p.text for p in doc.paragraphs]
        # include tables (basic)
        for table in doc.tables:
            for row in table.rows:
                parts.append(" | ".join(cell.text.strip() for cell in row.cells))
    except Exception as e:
        logger.error("DOCX extraction error: %s", e)
        raise ExtractionError(DOCX_FAILED) from e

    text = _join(parts)
    if not text:
        logger.error("DOCX extraction error: no text content found")
        raise ExtractionError(DOCX_FAILED)
    return text


EXTRACTORS = {
    "pdf": extract_text_from_pdf,
    "docx": extract_text_from_docx,
}


def extract_text(file: UploadedFile) -> str:
    """Validate, extract and length-check; raises a ReviewError on any failure."""
    validation = validate_file(file)
    if not validation.valid:
        raise ValidationError(validation.error)

    extractor = EXTRACTORS[SUPPORTED_TYPES[file.content_type]]
    text = extractor(file.data)

    if len(text) < MIN_TEXT_LENGTH:
        raise ExtractionError(TOO_SHORT)
    return text


async def process_resume(file: Optional[UploadedFile]) -> ExtractionOutcome:
    validation = validate_file(file)
    if not validation.valid:
        return ExtractionOutcome(success=False, error=validation.error, kind=ValidationError.kind)

    try:
        text = await run_in_threadpool(extract_text, file)
    except ReviewError as e:
        return ExtractionOutcome(success=False, error=e.message, kind=e.kind)

    logger.info("Extracted %d characters from %s", len(text), file.filename)
    return ExtractionOutcome(success=True, text=text)
