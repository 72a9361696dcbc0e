import copy
import io
import json

import fitz  # pymupdf
import httpx
import pytest
from docx import Document

from resume_reviewer.controller import ReviewApp
from resume_reviewer.core import DOCX_MIME, PDF_MIME
from resume_reviewer.main import app
from resume_reviewer.models import UploadedFile
from resume_reviewer.services.analyzer import AnalysisClient
from resume_reviewer.services.credentials import CredentialStore, MemoryStorage

OPENAI_URL = "https://api.openai.test/v1/chat/completions"
TEST_KEY = "sk-test-1234567890"

RESUME_TEXT = (
    "Jane Doe\n"
    "Senior Backend Engineer\n"
    "jane@example.com | +1 555 222 1111\n"
    "Experience\n"
    "- Built payment APIs in Python serving 2M requests per day\n"
    "- Reduced p95 latency by 35% by introducing Redis caching\n"
    "- Led migration of 40 services to Kubernetes\n"
    "Skills\n"
    "Python, FastAPI, PostgreSQL, Docker, AWS\n"
)

SAMPLE_ANALYSIS = {
    "score_overall": 72,
    "scores": {
        "impact": 80,
        "clarity": 70,
        "structure": 65,
        "skills": 75,
        "ats_compatibility": 68,
    },
    "interview_probability": "60%",
    "top_strengths": [
        "Quantified backend impact",
        "Modern cloud stack",
        "Clear leadership signal",
    ],
    "critical_weaknesses": [
        "No summary section",
        "Education missing",
        "Little detail on scope",
    ],
    "recruiter_summary": "Solid backend profile with measurable wins. Needs a summary and education.",
    "rewritten_bullets": [
        {
            "original": "Led migration of 40 services to Kubernetes",
            "improved": "Led migration of 40 services to Kubernetes, cutting deploy time by 60%",
        }
    ],
}


@pytest.fixture
def anyio_backend():
    return "asyncio"


def make_pdf(text: str = RESUME_TEXT) -> bytes:
    doc = fitz.open()
    page = doc.new_page()
    page.insert_textbox(fitz.Rect(72, 72, 540, 770), text, fontsize=10)
    data = doc.tobytes()
    doc.close()
    return data


def make_docx(text: str = RESUME_TEXT) -> bytes:
    doc = Document()
    for line in text.splitlines():
        doc.add_paragraph(line)
    buf = io.BytesIO()
    doc.save(buf)
    return buf.getvalue()


def completion_body(analysis) -> dict:
    content = analysis if isinstance(analysis, str) else json.dumps(analysis)
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


class FakeOpenAI:
    """Records requests and answers them with a canned chat completion."""

    def __init__(self, status_code: int = 200, body=None):
        self.status_code = status_code
        self.body = completion_body(SAMPLE_ANALYSIS) if body is None else body
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if isinstance(self.body, (bytes, str)):
            return httpx.Response(self.status_code, content=self.body)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def sent_payload(self, index: int = 0) -> dict:
        return json.loads(self.requests[index].content)


@pytest.fixture
def sample_analysis():
    return copy.deepcopy(SAMPLE_ANALYSIS)


@pytest.fixture
def pdf_file():
    return UploadedFile(filename="resume.pdf", content_type=PDF_MIME, data=make_pdf())


@pytest.fixture
def docx_file():
    return UploadedFile(filename="resume.docx", content_type=DOCX_MIME, data=make_docx())


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def credentials(storage):
    store = CredentialStore(storage)
    store.save(TEST_KEY)
    return store


@pytest.fixture
def fake_openai():
    return FakeOpenAI()


@pytest.fixture
def analyzer(credentials, fake_openai):
    return AnalysisClient(
        credentials,
        endpoint=OPENAI_URL,
        model="gpt-4",
        transport=fake_openai.transport,
    )


@pytest.fixture
def review(credentials, analyzer):
    return ReviewApp(credentials, analyzer=analyzer)


@pytest.fixture
async def client(anyio_backend, review):
    previous = app.state.review
    app.state.review = review
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.state.review = previous
