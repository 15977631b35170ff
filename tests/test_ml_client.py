import json

import pytest
import requests

from hiring_engine.core.exceptions import UpstreamError
from hiring_engine.services import ml_client as ml_module
from hiring_engine.services.ml_client import MLServiceClient

BASE_URL = "http://ml-service.test"


def make_response(status_code=200, payload=None, text=None):
    response = requests.Response()
    response.status_code = status_code
    response.url = BASE_URL
    if text is not None:
        response._content = text.encode()
    else:
        response._content = json.dumps(payload if payload is not None else {}).encode()
    return response


class FakePost:
    """Replays a scripted sequence of responses (or exceptions) for requests.post."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def __call__(self, url, timeout=None, **kwargs):
        self.calls.append({"url": url, "timeout": timeout, **kwargs})
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def client():
    return MLServiceClient(BASE_URL, timeout=30, upload_timeout=60, max_attempts=3, retry_backoff=0)


def install(monkeypatch, *outcomes):
    fake = FakePost(*outcomes)
    monkeypatch.setattr(ml_module.requests, "post", fake)
    return fake


def test_match_returns_score_and_details(client, monkeypatch):
    fake = install(monkeypatch, make_response(payload={"fitScore": 82, "matchDetails": {"matchedSkills": ["Python"]}}))
    result = client.match({"skills": ["Python"]}, {"requiredSkills": ["Python"]})

    assert result == {"fitScore": 82.0, "matchDetails": {"matchedSkills": ["Python"]}}
    call = fake.calls[0]
    assert call["url"] == f"{BASE_URL}/match"
    assert call["timeout"] == 30
    assert call["json"] == {"resume": {"skills": ["Python"]}, "jobDescription": {"requiredSkills": ["Python"]}}


def test_retries_on_5xx_then_succeeds(client, monkeypatch):
    fake = install(
        monkeypatch,
        make_response(503, {"error": "warming up"}),
        make_response(payload={"questions": ["Why us?"]}),
    )
    assert client.interview({}, {}) == ["Why us?"]
    assert len(fake.calls) == 2


def test_retries_exhausted_on_5xx(client, monkeypatch):
    fake = install(monkeypatch, make_response(502, {"error": "bad gateway"}))
    with pytest.raises(UpstreamError) as exc:
        client.improve({}, {}, {})
    assert len(fake.calls) == 3
    assert exc.value.details == {"endpoint": "improve", "upstreamStatus": 502, "upstreamError": "bad gateway"}


def test_no_retry_on_4xx(client, monkeypatch):
    fake = install(monkeypatch, make_response(422, {"error": "resume is required"}))
    with pytest.raises(UpstreamError) as exc:
        client.match({}, {})
    assert len(fake.calls) == 1
    assert exc.value.status_code == 500
    assert exc.value.details["upstreamStatus"] == 422
    assert exc.value.details["upstreamError"] == "resume is required"


def test_timeout_is_retried_then_reported(client, monkeypatch):
    fake = install(monkeypatch, requests.exceptions.Timeout("read timed out"))
    with pytest.raises(UpstreamError) as exc:
        client.parse_jd("Engineer", "Acme", "Build things")
    assert len(fake.calls) == 3
    assert "timed out" in exc.value.message
    assert exc.value.details == {"endpoint": "parse-jd"}


def test_connection_error_reported(client, monkeypatch):
    install(monkeypatch, requests.exceptions.ConnectionError("refused"))
    with pytest.raises(UpstreamError) as exc:
        client.interview({}, {})
    assert "unreachable" in exc.value.message


@pytest.mark.parametrize("payload", [
    {"fitScore": "high", "matchDetails": {}},
    {"fitScore": True, "matchDetails": {}},
    {"fitScore": 140, "matchDetails": {}},
    {"fitScore": -1, "matchDetails": {}},
    {"fitScore": 50, "matchDetails": ["not", "a", "dict"]},
    {"matchDetails": {}},
])
def test_malformed_match_payload(client, monkeypatch, payload):
    fake = install(monkeypatch, make_response(payload=payload))
    with pytest.raises(UpstreamError) as exc:
        client.match({}, {})
    assert len(fake.calls) == 1
    assert exc.value.details["endpoint"] == "match"


def test_non_json_body(client, monkeypatch):
    install(monkeypatch, make_response(text="<html>oops</html>"))
    with pytest.raises(UpstreamError) as exc:
        client.improve({}, {}, {})
    assert exc.value.details["upstreamError"] == "response body is not JSON"


def test_interview_requires_question_list(client, monkeypatch):
    install(monkeypatch, make_response(payload={"questions": "none"}))
    with pytest.raises(UpstreamError):
        client.interview({}, {})


def test_parse_resume_sends_multipart(client, monkeypatch, tmp_path):
    stored = tmp_path / "cv.pdf"
    stored.write_bytes(b"%PDF-1.4")
    fake = install(monkeypatch, make_response(payload={"extractedText": "Jane", "parsedData": {"name": "Jane"}}))

    result = client.parse_resume(str(stored), "cv.pdf", "application/pdf")

    assert result == {"extractedText": "Jane", "parsedData": {"name": "Jane"}}
    call = fake.calls[0]
    assert call["timeout"] == 60
    assert call["files"]["resume"] == ("cv.pdf", b"%PDF-1.4", "application/pdf")


def test_parse_resume_requires_parsed_data(client, monkeypatch, tmp_path):
    stored = tmp_path / "cv.pdf"
    stored.write_bytes(b"%PDF-1.4")
    install(monkeypatch, make_response(payload={"extractedText": "Jane"}))
    with pytest.raises(UpstreamError):
        client.parse_resume(str(stored), "cv.pdf")


def test_parse_resume_flattens_skill_objects(client, monkeypatch, tmp_path):
    stored = tmp_path / "cv.pdf"
    stored.write_bytes(b"%PDF-1.4")
    skills = [{"name": "Python", "level": "expert"}, " SQL ", ""]
    install(monkeypatch, make_response(payload={"parsedData": {"name": "Jane", "skills": skills}}))

    result = client.parse_resume(str(stored), "cv.pdf")

    assert result["parsedData"]["skills"] == ["Python", "SQL"]


@pytest.mark.parametrize("skills", ["Python, SQL", [["Python"]], [{"level": "expert"}], [42]])
def test_parse_resume_rejects_unreadable_skills(client, monkeypatch, tmp_path, skills):
    stored = tmp_path / "cv.pdf"
    stored.write_bytes(b"%PDF-1.4")
    install(monkeypatch, make_response(payload={"parsedData": {"skills": skills}}))
    with pytest.raises(UpstreamError) as exc:
        client.parse_resume(str(stored), "cv.pdf")
    assert exc.value.details["endpoint"] == "parse-resume"


def test_unconfigured_base_url(monkeypatch):
    fake = install(monkeypatch, make_response(payload={}))
    with pytest.raises(UpstreamError) as exc:
        MLServiceClient(None).match({}, {})
    assert exc.value.message == "ML_SERVICE_URL is not configured"
    assert fake.calls == []
