import asyncio
import json
import os
import sys
import tempfile
from pathlib import Path

import pytest

# Ensure the project root is importable
project_root = Path(__file__).resolve().parents[1]
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

# Settings are read at import time, so the environment must be set first
_db_dir = tempfile.mkdtemp(prefix="resume-optimizer-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_db_dir}/test.db"
os.environ["MYSQL_HOST"] = ""
os.environ["GEMINI_API_KEY"] = "test-key"
os.environ["SENTRY_DSN"] = ""
os.environ["HTTP_TRANSPORT"] = "auto"
os.environ["LOG_LEVEL"] = "WARNING"

from fastapi.testclient import TestClient  # noqa: E402

from resume_optimizer.config import settings  # noqa: E402
from resume_optimizer.services.completion_client import CompletionClient  # noqa: E402
from resume_optimizer.services.http_transport import (  # noqa: E402
    Transport,
    TransportProvider,
    TransportResponse,
)
from resume_optimizer.utils.errors import NetworkError  # noqa: E402


class FakeResponse(TransportResponse):
    def __init__(self, status_code, body, url="https://fake.local/"):
        reason = "OK" if 200 <= status_code < 300 else "Error"
        super().__init__(status_code, reason, {"Content-Type": "application/json"}, url)
        self._body = body

    def text(self):
        return self._body


class ScriptedTransport(Transport):
    """Replays queued steps: (status, payload) tuples or exceptions to raise."""

    name = "scripted"

    def __init__(self, steps=None):
        self.steps = list(steps or [])
        self.calls = []

    async def initialize(self):
        pass

    async def send(self, url, method, headers, body, timeout_ms):
        self.calls.append({
            "url": url,
            "method": method,
            "headers": headers,
            "body": json.loads(body) if body else None,
            "timeout_ms": timeout_ms,
        })
        if not self.steps:
            raise NetworkError("no scripted response left")
        step = self.steps.pop(0)
        if isinstance(step, BaseException):
            raise step
        status_code, payload = step
        body = payload if isinstance(payload, str) else json.dumps(payload)
        return FakeResponse(status_code, body, url)


class SleepRecorder:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


def gemini_envelope(text, finish_reason="STOP"):
    return {"candidates": [{"content": {"parts": [{"text": text}]}, "finishReason": finish_reason}]}


@pytest.fixture
def envelope():
    return gemini_envelope


@pytest.fixture
def transport():
    return ScriptedTransport()


@pytest.fixture
def sleeper():
    return SleepRecorder()


@pytest.fixture
def provider(transport):
    return TransportProvider(factories={"httpx": lambda: transport})


@pytest.fixture
def make_client(provider, sleeper):
    """Build a CompletionClient over the scripted transport with recorded sleeps."""
    def _make(**overrides):
        options = {"api_key": "test-key", "sleep": sleeper}
        options.update(overrides)
        return CompletionClient(provider, **options)
    return _make


def _reset_database():
    from resume_optimizer.database.connection import Base, engine
    import resume_optimizer.database.models  # noqa: F401

    async def reset():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)
        await engine.dispose()

    asyncio.run(reset())


@pytest.fixture
def ai_options():
    """Overrides applied to the CompletionClient used by the API."""
    return {"api_key": "test-key"}


@pytest.fixture
def client(transport, sleeper, ai_options):
    """Provide a FastAPI TestClient on a fresh SQLite schema with a scripted AI backend."""
    _reset_database()

    from resume_optimizer.main import app
    from resume_optimizer.api.dependencies import get_completion_client, get_transport_provider

    api_provider = TransportProvider(factories={"httpx": lambda: transport})

    def override_completion_client():
        return CompletionClient.from_settings(api_provider, settings, sleep=sleeper, **ai_options)

    app.dependency_overrides[get_transport_provider] = lambda: api_provider
    app.dependency_overrides[get_completion_client] = override_completion_client

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def user_headers(client):
    r = client.post("/api/v1/users", json={"fullName": "Ana Lee", "email": "ana@x.com"})
    assert r.status_code == 201
    return {"X-User-Id": r.json()["userUuid"]}
