import pytest

from app import models
from app.models import GeminiProvider, GenerationError, extract_candidate_text
from app.schemas import GenerationConfig


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


def candidate(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


class RecordedCalls(list):
    def __init__(self, monkeypatch):
        super().__init__()
        self.monkeypatch = monkeypatch

    def install(self, response):
        def fake_post(url, **kwargs):
            self.append((url, kwargs))
            return response
        self.monkeypatch.setattr(models.requests, "post", fake_post)


@pytest.fixture
def calls(monkeypatch):
    return RecordedCalls(monkeypatch)


def test_extract_candidate_text():
    assert extract_candidate_text(candidate("Hi there")) == "Hi there"

@pytest.mark.parametrize("payload", [
    {},
    None,
    [],
    {"candidates": []},
    {"candidates": [{}]},
    {"candidates": [{"content": {"parts": []}}]},
    {"candidates": [{"content": {"parts": [{}]}}]},
    candidate(""),
    candidate(None),
    candidate(42),
    candidate(["Thanks"]),
])
def test_extract_candidate_text_missing(payload):
    assert extract_candidate_text(payload) is None

def test_generate_posts_prompt_and_config(calls):
    calls.install(FakeResponse(200, candidate("Thanks for stopping by!")))
    provider = GeminiProvider(api_key="secret", model="gemini-1.5-flash")

    text = provider.generate("Write a reply", GenerationConfig())

    assert text == "Thanks for stopping by!"
    assert len(calls) == 1
    url, kwargs = calls[0]
    assert url == "https://generativelanguage.googleapis.com/v1beta/models/gemini-1.5-flash:generateContent"
    assert kwargs["params"] == {"key": "secret"}
    assert kwargs["timeout"] is None
    assert kwargs["json"] == {
        "contents": [{"parts": [{"text": "Write a reply"}]}],
        "generationConfig": {"temperature": 0.75, "maxOutputTokens": 350, "topP": 0.95},
    }

def test_generate_missing_candidate_returns_none(calls):
    calls.install(FakeResponse(200, {"promptFeedback": {"blockReason": "SAFETY"}}))
    assert GeminiProvider(api_key="k").generate("p", GenerationConfig()) is None

@pytest.mark.parametrize("status", [400, 403, 429, 500, 503])
def test_generate_raises_on_error_status(calls, caplog, status):
    calls.install(FakeResponse(status, text='{"error": "nope"}'))
    with pytest.raises(GenerationError) as exc:
        GeminiProvider(api_key="k").generate("p", GenerationConfig())
    assert exc.value.status_code == status
    assert exc.value.body == '{"error": "nope"}'
    assert f"Gemini API error {status}" in caplog.text
    assert len(calls) == 1

def test_generate_uses_configured_endpoint(calls):
    calls.install(FakeResponse(200, candidate("ok")))
    provider = GeminiProvider(api_key="k", model="gemini-pro", base_url="http://localhost:9000/v1/", timeout=5.0)
    provider.generate("p", GenerationConfig())
    url, kwargs = calls[0]
    assert url == "http://localhost:9000/v1/models/gemini-pro:generateContent"
    assert kwargs["timeout"] == 5.0

def test_generate_non_string_candidate_returns_none(calls):
    calls.install(FakeResponse(200, candidate(12345)))
    assert GeminiProvider(api_key="k").generate("p", GenerationConfig()) is None
