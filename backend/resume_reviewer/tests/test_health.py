import pytest

from resume_reviewer.main import limiter


@pytest.mark.anyio
async def test_health_reports_key_and_limiter(client):
    r = await client.get("/health")
    assert r.status_code == 200
    data = r.json()
    assert data["ok"] is True
    assert data["api_key_configured"] is True
    assert isinstance(data["rate_limit_enabled"], bool)


@pytest.mark.anyio
async def test_health_after_key_cleared(client, review):
    review.credentials.clear()
    data = (await client.get("/health")).json()
    assert data["api_key_configured"] is False


def test_limiter_has_no_global_default_limits():
    assert not limiter._default_limits
