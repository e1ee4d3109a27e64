import asyncio

import httpx
import pytest

from resume_optimizer.services.http_transport import (
    DEFAULT_HEADERS,
    HttpxTransport,
    RequestsTransport,
    SocketTransport,
    Transport,
    TransportProvider,
    merge_headers,
    resolve_order,
)
from resume_optimizer.utils.errors import (
    HttpError,
    NetworkError,
    ParseError,
    TransportTimeoutError,
)


def run(coro):
    return asyncio.run(coro)


class BrokenTransport(Transport):
    def __init__(self, name):
        self.name = name

    async def initialize(self):
        raise RuntimeError(f"{self.name} not installed")

    async def send(self, url, method, headers, body, timeout_ms):
        raise AssertionError("never bound")


class SlowTransport(Transport):
    name = "slow"

    async def initialize(self):
        pass

    async def send(self, url, method, headers, body, timeout_ms):
        await asyncio.sleep(5)


def test_resolve_order():
    assert resolve_order("auto") == ["httpx", "requests", "socket"]
    assert resolve_order("socket") == ["socket", "httpx", "requests"]
    with pytest.raises(ValueError):
        resolve_order("curl")


def test_merge_headers_keeps_defaults():
    merged = merge_headers({"Accept": "text/plain", "X-Trace": "1"})
    assert merged["User-Agent"] == DEFAULT_HEADERS["User-Agent"]
    assert merged["Accept"] == "text/plain"
    assert merged["X-Trace"] == "1"


def test_provider_falls_back_to_next_transport(transport):
    created = []

    def broken():
        created.append("httpx")
        return BrokenTransport("httpx")

    def working():
        created.append("requests")
        return transport

    provider = TransportProvider(factories={"httpx": broken, "requests": working})
    transport.steps = [(200, {"ok": True}), (200, {"ok": True})]

    run(provider.request("https://fake.local/a"))
    run(provider.request("https://fake.local/b"))

    # Selection happens once; the bound transport is reused
    assert created == ["httpx", "requests"]
    assert provider.bound is transport
    info = provider.describe()
    assert info["transport"] == "scripted"
    assert info["initialized"] is True
    assert info["preferenceOrder"] == ["httpx", "requests", "socket"]
    assert "httpx" in info["unavailable"]


def test_provider_honours_preference(transport):
    provider = TransportProvider(
        preference="socket",
        factories={"httpx": lambda: BrokenTransport("httpx"), "socket": lambda: transport},
    )
    assert run(provider.get()) is transport
    assert provider.describe()["unavailable"] == {}


def test_provider_without_any_transport_raises():
    provider = TransportProvider(factories={"httpx": lambda: BrokenTransport("httpx")})
    with pytest.raises(NetworkError):
        run(provider.get())
    assert provider.describe()["initialized"] is False


def test_non_2xx_raises_http_error(transport):
    transport.steps = [(404, '{"error": "model not found"}')]
    with pytest.raises(HttpError) as exc_info:
        run(transport.request("https://fake.local/x", method="post", body="{}"))
    assert exc_info.value.status_code == 404
    assert "model not found" in exc_info.value.body
    assert transport.calls[0]["method"] == "POST"


def test_invalid_json_body_raises_parse_error(transport):
    transport.steps = [(200, "<html>oops</html>")]
    response = run(transport.request("https://fake.local/x"))
    assert response.ok
    with pytest.raises(ParseError):
        response.json()


def test_timeout_is_enforced_around_send():
    with pytest.raises(TransportTimeoutError) as exc_info:
        run(SlowTransport().request("https://fake.local/x", timeout_ms=50))
    assert exc_info.value.elapsed_ms >= 0


def _httpx_transport(handler):
    transport = HttpxTransport()
    transport._client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return transport


def test_httpx_transport_normalizes_response():
    def handler(request):
        assert request.headers["user-agent"] == DEFAULT_HEADERS["User-Agent"]
        assert request.content == b'{"q": 1}'
        return httpx.Response(200, json={"answer": 42}, headers={"X-Request-Id": "abc"})

    async def scenario():
        transport = _httpx_transport(handler)
        try:
            return await transport.request("https://api.local/v1", method="POST", body='{"q": 1}')
        finally:
            await transport.close()

    response = run(scenario())
    assert response.status_code == 200
    assert response.headers["x-request-id"] == "abc"
    assert response.json() == {"answer": 42}


@pytest.mark.parametrize(
    "exc, expected",
    [
        (httpx.ConnectError("refused"), NetworkError),
        (httpx.ReadTimeout("too slow"), TransportTimeoutError),
    ],
)
def test_httpx_transport_maps_errors(exc, expected):
    def handler(request):
        raise exc

    async def scenario():
        transport = _httpx_transport(handler)
        try:
            await transport.request("https://api.local/v1")
        finally:
            await transport.close()

    with pytest.raises(expected):
        run(scenario())


def test_socket_transport_rejects_unsupported_url():
    async def scenario():
        transport = SocketTransport()
        await transport.initialize()
        await transport.request("ftp://files.local/resume.txt")

    with pytest.raises(NetworkError):
        run(scenario())


@pytest.mark.parametrize("factory", [RequestsTransport, SocketTransport])
def test_blocking_transports_map_connection_refused(factory):
    async def scenario():
        transport = factory()
        await transport.initialize()
        try:
            await transport.request("http://127.0.0.1:9/", timeout_ms=2000)
        finally:
            await transport.close()

    with pytest.raises((NetworkError, TransportTimeoutError)):
        run(scenario())
