import json

import pytest

from conftest import OPENAI_URL, RESUME_TEXT, SAMPLE_ANALYSIS, TEST_KEY, FakeOpenAI, completion_body
from resume_reviewer.core import REQUIRED_FIELDS, REQUIRED_SCORES
from resume_reviewer.errors import ResponseShapeError
from resume_reviewer.services.analyzer import AnalysisClient, validate_analysis_response
from resume_reviewer.services.credentials import CredentialStore, MemoryStorage
from resume_reviewer.services.prompts import SYSTEM_PROMPT


def _client(fake: FakeOpenAI, credentials=None) -> AnalysisClient:
    if credentials is None:
        credentials = CredentialStore(MemoryStorage(), default=TEST_KEY)
    return AnalysisClient(credentials, endpoint=OPENAI_URL, model="gpt-4", transport=fake.transport)


@pytest.mark.anyio
async def test_successful_analysis_returns_object_unchanged(fake_openai, analyzer):
    outcome = await analyzer.analyze_resume(RESUME_TEXT)
    assert outcome.success is True
    assert outcome.error is None
    assert outcome.data == SAMPLE_ANALYSIS


@pytest.mark.anyio
async def test_request_shape(fake_openai, analyzer):
    await analyzer.analyze_resume(RESUME_TEXT)

    assert len(fake_openai.requests) == 1
    request = fake_openai.requests[0]
    assert request.method == "POST"
    assert str(request.url) == OPENAI_URL
    assert request.headers["Authorization"] == f"Bearer {TEST_KEY}"

    payload = fake_openai.sent_payload()
    assert payload["model"] == "gpt-4"
    assert payload["temperature"] == 0.3
    assert payload["max_tokens"] == 2000
    assert payload["response_format"] == {"type": "json_object"}
    assert payload["messages"] == [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": "Analyze this resume:\n\n" + RESUME_TEXT},
    ]


def test_rubric_names_every_dimension():
    for key in REQUIRED_FIELDS + REQUIRED_SCORES:
        assert f'"{key}"' in SYSTEM_PROMPT
    assert "Select 3-5 bullet points" in SYSTEM_PROMPT


@pytest.mark.anyio
async def test_missing_credential_fails_without_request():
    fake = FakeOpenAI()
    outcome = await _client(fake, CredentialStore(MemoryStorage())).analyze_resume(RESUME_TEXT)
    assert outcome.success is False
    assert outcome.kind == "credential_missing"
    assert outcome.error == "API key not configured. Please add your OpenAI API key."
    assert fake.requests == []


@pytest.mark.anyio
@pytest.mark.parametrize(
    "status,kind,message",
    [
        (401, "auth", "Invalid API key. Please check your OpenAI API key."),
        (429, "rate_limited", "Rate limit exceeded. Please try again in a moment."),
        (500, "provider", "OpenAI service error. Please try again later."),
    ],
)
async def test_http_status_mapping(status, kind, message):
    fake = FakeOpenAI(status_code=status, body={"error": {"message": "ignored"}})
    outcome = await _client(fake).analyze_resume(RESUME_TEXT)
    assert outcome.success is False
    assert outcome.kind == kind
    assert outcome.error == message


@pytest.mark.anyio
async def test_other_status_uses_provider_message():
    fake = FakeOpenAI(status_code=400, body={"error": {"message": "This model's maximum context length is exceeded"}})
    outcome = await _client(fake).analyze_resume(RESUME_TEXT)
    assert outcome.kind == "provider"
    assert outcome.error == "This model's maximum context length is exceeded"


@pytest.mark.anyio
async def test_other_status_without_body_falls_back_to_status():
    fake = FakeOpenAI(status_code=503, body=b"<html>down</html>")
    outcome = await _client(fake).analyze_resume(RESUME_TEXT)
    assert outcome.kind == "provider"
    assert outcome.error == "API request failed with status 503"


@pytest.mark.anyio
async def test_non_json_content_is_a_parse_error():
    fake = FakeOpenAI(body=completion_body("Sure! Here is my review: great resume"))
    outcome = await _client(fake).analyze_resume(RESUME_TEXT)
    assert outcome.success is False
    assert outcome.kind == "response_parse"


@pytest.mark.anyio
async def test_unexpected_body_is_a_parse_error():
    fake = FakeOpenAI(body={"choices": []})
    outcome = await _client(fake).analyze_resume(RESUME_TEXT)
    assert outcome.kind == "response_parse"


@pytest.mark.anyio
async def test_missing_field_is_a_shape_error():
    partial = {k: v for k, v in SAMPLE_ANALYSIS.items() if k != "recruiter_summary"}
    fake = FakeOpenAI(body=completion_body(partial))
    outcome = await _client(fake).analyze_resume(RESUME_TEXT)
    assert outcome.kind == "response_shape"
    assert outcome.error == "Invalid AI response: missing field 'recruiter_summary'"


def test_first_missing_field_is_reported_in_fixed_order():
    with pytest.raises(ResponseShapeError) as exc:
        validate_analysis_response({"rewritten_bullets": [], "scores": {}})
    assert str(exc.value) == "Invalid AI response: missing field 'score_overall'"

    analysis = json.loads(json.dumps(SAMPLE_ANALYSIS))
    del analysis["scores"]["structure"]
    del analysis["scores"]["ats_compatibility"]
    with pytest.raises(ResponseShapeError) as exc:
        validate_analysis_response(analysis)
    assert str(exc.value) == "Invalid AI response: missing score 'structure'"


def test_top_level_fields_checked_before_scores():
    analysis = json.loads(json.dumps(SAMPLE_ANALYSIS))
    analysis["scores"] = {}
    del analysis["rewritten_bullets"]
    with pytest.raises(ResponseShapeError, match="missing field 'rewritten_bullets'"):
        validate_analysis_response(analysis)


def test_validator_is_presence_only():
    odd = {field: None for field in REQUIRED_FIELDS}
    odd["scores"] = {key: "not a number" for key in REQUIRED_SCORES}
    odd["score_overall"] = 250
    odd["top_strengths"] = []
    validate_analysis_response(odd)


def test_non_object_response_is_rejected():
    with pytest.raises(ResponseShapeError):
        validate_analysis_response(["score_overall"])
    analysis = dict(SAMPLE_ANALYSIS, scores=None)
    with pytest.raises(ResponseShapeError, match="missing score 'impact'"):
        validate_analysis_response(analysis)
