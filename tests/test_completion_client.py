import asyncio
import time

import pytest

from resume_optimizer.models.completion_models import CompletionRequest, ContactInfo
from resume_optimizer.optimization.optimizer_service import ResumeOptimizer
from resume_optimizer.services.completion_client import CompletionClient, describe_error, parse_envelope
from resume_optimizer.services.http_transport import Transport, TransportProvider
from resume_optimizer.utils.errors import (
    BackendExhaustedError,
    ConfigurationError,
    EnvelopeError,
    HttpError,
    NetworkError,
    SafetyBlockedError,
    TransportTimeoutError,
)


def run(coro):
    return asyncio.run(coro)


def test_first_attempt_success_sends_generate_content_payload(make_client, transport, envelope, sleeper):
    transport.steps = [(200, envelope("hello"))]
    client = make_client(model="gemini-1.5-flash", top_p=0.8, top_k=40)

    assert run(client.generate_text("Say hi", temperature=0.2, max_tokens=64)) == "hello"

    call = transport.calls[0]
    assert call["method"] == "POST"
    assert call["url"].endswith("/gemini-1.5-flash:generateContent?key=test-key")
    assert call["headers"]["Content-Type"] == "application/json"
    assert call["body"] == {
        "contents": [{"parts": [{"text": "Say hi"}]}],
        "generationConfig": {"temperature": 0.2, "maxOutputTokens": 64, "topP": 0.8, "topK": 40},
    }
    assert sleeper.delays == []


def test_retries_with_exponential_backoff_then_succeeds(make_client, transport, envelope, sleeper):
    transport.steps = [
        NetworkError("connection reset"),
        (503, {"error": {"message": "overloaded"}}),
        (200, envelope("third time lucky")),
    ]
    client = make_client(max_retries=3)

    assert run(client.generate_text("prompt")) == "third time lucky"
    assert len(transport.calls) == 3
    assert sleeper.delays == [2, 4]


def test_exhaustion_reports_attempts_and_last_error(make_client, transport, sleeper):
    transport.steps = [(500, "boom"), (500, "boom"), (429, "slow down")]
    client = make_client(max_retries=3)

    with pytest.raises(BackendExhaustedError) as exc_info:
        run(client.generate_text("prompt"))

    assert exc_info.value.attempts == 3
    assert isinstance(exc_info.value.last_error, HttpError)
    assert exc_info.value.last_error.status_code == 429
    assert "after 3 attempts" in str(exc_info.value)
    assert len(transport.calls) == 3
    # No wait after the final attempt
    assert sleeper.delays == [2, 4]


def test_missing_api_key_makes_no_request(make_client, transport):
    client = make_client(api_key=None)
    with pytest.raises(ConfigurationError):
        run(client.generate_text("prompt"))
    assert transport.calls == []


def test_envelope_failures_are_retried(make_client, transport, envelope):
    transport.steps = [
        (200, {"candidates": []}),
        (200, envelope("   ")),
        (200, "not json at all"),
    ]
    client = make_client(max_retries=3)

    with pytest.raises(BackendExhaustedError) as exc_info:
        run(client.generate_text("prompt"))
    assert len(transport.calls) == 3
    assert "parse JSON" in str(exc_info.value.last_error)


def test_timeout_counts_as_failed_attempt(make_client, transport, envelope, sleeper):
    transport.steps = [TransportTimeoutError("Request timeout after 30000ms", elapsed_ms=30000), (200, envelope("ok"))]
    client = make_client(max_retries=2)

    assert run(client.generate_text("prompt")) == "ok"
    assert sleeper.delays == [2]


def test_safety_block_is_retried_by_default(make_client, transport, envelope):
    transport.steps = [(200, envelope("", finish_reason="SAFETY")), (200, envelope("clean"))]
    client = make_client(max_retries=2)
    assert run(client.generate_text("prompt")) == "clean"


def test_safety_block_fails_fast_when_configured(make_client, transport, envelope, sleeper):
    transport.steps = [(200, envelope("", finish_reason="SAFETY")), (200, envelope("clean"))]
    client = make_client(max_retries=3, fail_fast_on_safety=True)

    with pytest.raises(BackendExhaustedError) as exc_info:
        run(client.generate_text("prompt"))
    assert exc_info.value.attempts == 1
    assert isinstance(exc_info.value.last_error, SafetyBlockedError)
    assert len(transport.calls) == 1
    assert sleeper.delays == []


class FakeClock:
    """Monotonic clock that only moves when the client waits between attempts."""

    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now

    async def sleep(self, delay):
        self.now += delay


class StallingTransport(Transport):
    name = "stalling"

    def __init__(self, stall_seconds):
        self.stall_seconds = stall_seconds
        self.calls = 0

    async def initialize(self):
        pass

    async def send(self, url, method, headers, body, timeout_ms):
        self.calls += 1
        await asyncio.sleep(self.stall_seconds)
        raise NetworkError("connection reset")


def test_overall_deadline_stops_retries(make_client, transport):
    transport.steps = [NetworkError("down") for _ in range(3)]
    clock = FakeClock()
    client = make_client(max_retries=3, overall_deadline_seconds=4, clock=clock, sleep=clock.sleep)

    with pytest.raises(BackendExhaustedError) as exc_info:
        run(client.generate_text("prompt"))

    # 2s wait fits in the deadline, the 4s wait does not
    assert clock.now == 2
    assert [call["timeout_ms"] for call in transport.calls] == [4000, 2000]
    assert exc_info.value.attempts == 2


def test_overall_deadline_caps_each_attempt_timeout(make_client, transport):
    transport.steps = [NetworkError("down") for _ in range(3)]
    clock = FakeClock()
    client = make_client(
        max_retries=3, timeout_ms=30000, overall_deadline_seconds=7, clock=clock, sleep=clock.sleep
    )

    with pytest.raises(BackendExhaustedError) as exc_info:
        run(client.generate_text("prompt"))

    assert [call["timeout_ms"] for call in transport.calls] == [7000, 5000, 1000]
    assert exc_info.value.attempts == 3


def test_overall_deadline_bounds_wall_clock_of_slow_attempt():
    stalling = StallingTransport(stall_seconds=2)
    provider = TransportProvider(factories={"httpx": lambda: stalling})
    client = CompletionClient(
        provider,
        api_key="test-key",
        timeout_ms=30000,
        max_retries=3,
        overall_deadline_seconds=0.5,
    )

    started = time.monotonic()
    with pytest.raises(BackendExhaustedError) as exc_info:
        run(client.generate_text("prompt"))
    elapsed = time.monotonic() - started

    assert elapsed < 1.5
    assert stalling.calls == 1
    assert isinstance(exc_info.value.last_error, TransportTimeoutError)


def test_overall_deadline_must_be_positive(make_client):
    with pytest.raises(ValueError):
        make_client(overall_deadline_seconds=0)


def test_max_retries_must_be_positive(make_client):
    with pytest.raises(ValueError):
        make_client(max_retries=0)


@pytest.mark.parametrize(
    "data",
    [
        [],
        {"error": {"message": "API key not valid"}},
        {"candidates": []},
        {"candidates": ["text"]},
        {"candidates": [{"content": {}}]},
        {"candidates": [{"content": {"parts": []}}]},
        {"candidates": [{"content": {"parts": [{"text": ""}]}}]},
    ],
)
def test_parse_envelope_rejects_unusable_responses(data):
    with pytest.raises(EnvelopeError):
        parse_envelope(data)


def test_parse_envelope_returns_first_part_text(envelope):
    assert parse_envelope(envelope("generated")) == "generated"


def test_describe_error_hints():
    assert "rate limit" in describe_error(HttpError(429, ""))
    assert "unavailable" in describe_error(HttpError(503, ""))
    assert "5000ms" in describe_error(TransportTimeoutError("t", elapsed_ms=5000))


def test_check_connection_reports_success(make_client, transport, envelope):
    transport.steps = [(200, envelope("API is working!"))]
    result = run(make_client().check_connection())

    assert result["connected"] is True
    assert result["testResponse"] == "API is working!"
    assert transport.calls[0]["body"]["generationConfig"]["maxOutputTokens"] == 100
    assert transport.calls[0]["timeout_ms"] == 10000


def test_check_connection_never_raises(make_client, transport):
    transport.steps = [(401, "unauthorized")]
    result = run(make_client().check_connection())
    assert result["connected"] is False
    assert "unauthorized" in result["error"]

    result = run(make_client(api_key=None).check_connection())
    assert result == {"connected": False, "error": "API key not configured", "model": "gemini-1.5-flash"}


def test_optimizer_repairs_fenced_model_output(make_client, transport, envelope):
    raw = '```json\n{"name": "Ana Lee", "summary": "Python engineer."}\n```'
    transport.steps = [(200, envelope(raw))]
    optimizer = ResumeOptimizer(make_client(), current_year=2024)
    request = CompletionRequest(
        jobDescription="Senior Python engineer, AWS",
        resumeText="Engineer at Acme",
        contactInfo=ContactInfo(fullName="Ana Lee", email="ana@x.com"),
    )

    resume = run(optimizer.generate(request)).to_dict()

    assert resume["name"] == "Ana Lee"
    assert resume["summary"] == "Python engineer."
    assert resume["email"] == "ana@x.com"
    assert resume["experience"] and resume["skillGroups"] and resume["education"]

    prompt = transport.calls[0]["body"]["contents"][0]["parts"][0]["text"]
    assert "Senior Python engineer, AWS" in prompt
    assert "Engineer at Acme" in prompt
    assert "ana@x.com" in prompt
    assert transport.calls[0]["body"]["generationConfig"]["temperature"] == 0.7
