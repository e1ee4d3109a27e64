"""Outbound HTTP transports with httpx, requests and http.client fallback."""
import asyncio
import http.client
import json
import ssl
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Mapping, Optional
from urllib.parse import urlsplit

import httpx
import requests

from resume_optimizer.utils.cleaning import redact_api_key
from resume_optimizer.utils.errors import (
    HttpError,
    NetworkError,
    ParseError,
    TransportTimeoutError,
)
from resume_optimizer.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": "ATS-Resume-Optimizer/1.0",
    "Accept": "application/json",
    "Content-Type": "application/json",
}

DEFAULT_TIMEOUT_MS = 30000

# Highest-level client first
TRANSPORT_ORDER = ("httpx", "requests", "socket")


def merge_headers(headers: Optional[Mapping[str, str]]) -> Dict[str, str]:
    merged = dict(DEFAULT_HEADERS)
    if headers:
        merged.update(headers)
    return merged


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


class TransportResponse(ABC):
    """Normalized response returned by every transport."""

    def __init__(self, status_code: int, reason: str, headers: Mapping[str, str], url: str):
        self.status_code = status_code
        self.reason = reason
        self.headers = {k.lower(): v for k, v in headers.items()}
        self.url = url

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @abstractmethod
    def text(self) -> str:
        """Decoded response body."""

    def json(self) -> Any:
        """Parse the body as JSON, raising ParseError when it is not valid JSON."""
        body = self.text()
        try:
            return json.loads(body)
        except ValueError as e:
            raise ParseError(f"Failed to parse JSON response: {e}") from e

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(status_code={self.status_code}, url={redact_api_key(self.url)})>"


class HttpxResponse(TransportResponse):
    def __init__(self, response: httpx.Response):
        super().__init__(response.status_code, response.reason_phrase, response.headers, str(response.url))
        self._response = response

    def text(self) -> str:
        return self._response.text


class RequestsResponse(TransportResponse):
    def __init__(self, response: requests.Response):
        super().__init__(response.status_code, response.reason or "", response.headers, response.url)
        self._response = response

    def text(self) -> str:
        return self._response.text


class SocketResponse(TransportResponse):
    def __init__(self, status_code: int, reason: str, headers: Mapping[str, str], url: str, body: bytes):
        super().__init__(status_code, reason, headers, url)
        self._body = body
        self._text: Optional[str] = None

    def text(self) -> str:
        if self._text is None:
            self._text = self._body.decode("utf-8", errors="replace")
        return self._text


class Transport(ABC):
    """One concrete outbound HTTP mechanism."""

    name: str = "abstract"

    @abstractmethod
    async def initialize(self) -> None:
        """Prepare the underlying client; raise if it is unusable here."""
        pass

    @abstractmethod
    async def send(
        self,
        url: str,
        method: str,
        headers: Dict[str, str],
        body: Optional[str],
        timeout_ms: int,
    ) -> TransportResponse:
        """Issue the request and return the raw normalized response."""
        pass

    async def close(self) -> None:
        pass

    async def request(
        self,
        url: str,
        *,
        method: str = "GET",
        headers: Optional[Mapping[str, str]] = None,
        body: Optional[str] = None,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
    ) -> TransportResponse:
        """
        Perform one request.

        Raises:
            TransportTimeoutError: no response within ``timeout_ms``
            NetworkError: connection-level failure
            HttpError: non-2xx status
        """
        started = time.monotonic()
        try:
            response = await asyncio.wait_for(
                self.send(url, method.upper(), merge_headers(headers), body, timeout_ms),
                timeout=timeout_ms / 1000,
            )
        except asyncio.TimeoutError as e:
            elapsed = _elapsed_ms(started)
            raise TransportTimeoutError(f"Request timeout after {elapsed}ms", elapsed_ms=elapsed) from e

        if not response.ok:
            raise HttpError(response.status_code, response.text(), response.reason)

        logger.debug(
            "HTTP request completed",
            extra={
                "transport": self.name,
                "url": redact_api_key(url),
                "status_code": response.status_code,
                "elapsed_ms": _elapsed_ms(started),
            },
        )
        return response


class HttpxTransport(Transport):
    """Native async client."""

    name = "httpx"

    def __init__(self):
        self._client: Optional[httpx.AsyncClient] = None

    async def initialize(self) -> None:
        self._client = httpx.AsyncClient(follow_redirects=True)

    async def send(self, url, method, headers, body, timeout_ms) -> TransportResponse:
        started = time.monotonic()
        try:
            response = await self._client.request(
                method,
                url,
                headers=headers,
                content=body.encode("utf-8") if body is not None else None,
                timeout=httpx.Timeout(timeout_ms / 1000),
            )
        except httpx.TimeoutException as e:
            elapsed = _elapsed_ms(started)
            raise TransportTimeoutError(f"Request timeout after {elapsed}ms", elapsed_ms=elapsed) from e
        except httpx.HTTPError as e:
            raise NetworkError(f"Network error: {e}") from e
        return HttpxResponse(response)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


class RequestsTransport(Transport):
    """Blocking requests session run in a worker thread."""

    name = "requests"

    def __init__(self):
        self._session: Optional[requests.Session] = None

    async def initialize(self) -> None:
        self._session = requests.Session()

    async def send(self, url, method, headers, body, timeout_ms) -> TransportResponse:
        started = time.monotonic()
        try:
            response = await asyncio.to_thread(
                self._session.request,
                method,
                url,
                headers=headers,
                data=body.encode("utf-8") if body is not None else None,
                timeout=timeout_ms / 1000,
            )
        except requests.Timeout as e:
            elapsed = _elapsed_ms(started)
            raise TransportTimeoutError(f"Request timeout after {elapsed}ms", elapsed_ms=elapsed) from e
        except requests.RequestException as e:
            raise NetworkError(f"Network error: {e}") from e
        return RequestsResponse(response)

    async def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None


class SocketTransport(Transport):
    """Standard-library http.client connection run in a worker thread."""

    name = "socket"

    def __init__(self):
        self._ssl_context: Optional[ssl.SSLContext] = None

    async def initialize(self) -> None:
        self._ssl_context = ssl.create_default_context()

    def _perform(self, url: str, method: str, headers: Dict[str, str], body: Optional[str], timeout: float) -> SocketResponse:
        parts = urlsplit(url)
        if parts.scheme not in ("http", "https") or not parts.hostname:
            raise NetworkError(f"Unsupported URL: {redact_api_key(url)}")

        path = parts.path or "/"
        if parts.query:
            path = f"{path}?{parts.query}"

        if parts.scheme == "https":
            conn = http.client.HTTPSConnection(
                parts.hostname, parts.port or 443, timeout=timeout, context=self._ssl_context
            )
        else:
            conn = http.client.HTTPConnection(parts.hostname, parts.port or 80, timeout=timeout)

        payload = body.encode("utf-8") if body is not None else None
        if payload is not None:
            headers = {**headers, "Content-Length": str(len(payload))}

        try:
            conn.request(method, path, body=payload, headers=headers)
            response = conn.getresponse()
            data = response.read()
            return SocketResponse(response.status, response.reason, dict(response.getheaders()), url, data)
        finally:
            conn.close()

    async def send(self, url, method, headers, body, timeout_ms) -> TransportResponse:
        started = time.monotonic()
        try:
            return await asyncio.to_thread(self._perform, url, method, headers, body, timeout_ms / 1000)
        except TimeoutError as e:
            elapsed = _elapsed_ms(started)
            raise TransportTimeoutError(f"Request timeout after {elapsed}ms", elapsed_ms=elapsed) from e
        except (OSError, http.client.HTTPException) as e:
            raise NetworkError(f"Network error: {e}") from e


TRANSPORT_FACTORIES: Dict[str, Callable[[], Transport]] = {
    "httpx": HttpxTransport,
    "requests": RequestsTransport,
    "socket": SocketTransport,
}


def resolve_order(preference: str = "auto") -> List[str]:
    """Preferred mechanism first, the rest keep their default order."""
    order = list(TRANSPORT_ORDER)
    if preference and preference != "auto":
        if preference not in order:
            raise ValueError(f"Unknown HTTP transport: {preference}")
        order.remove(preference)
        order.insert(0, preference)
    return order


class TransportProvider:
    """
    Binds to the first transport that initializes and reuses it afterwards.

    Created once at application startup and handed to consumers explicitly.
    """

    def __init__(
        self,
        preference: str = "auto",
        factories: Optional[Mapping[str, Callable[[], Transport]]] = None,
    ):
        self.order = resolve_order(preference)
        self._factories = dict(factories or TRANSPORT_FACTORIES)
        self._transport: Optional[Transport] = None
        self._failures: Dict[str, str] = {}

    @property
    def bound(self) -> Optional[Transport]:
        return self._transport

    async def get(self) -> Transport:
        if self._transport is None:
            self._transport = await self._select()
        return self._transport

    async def _select(self) -> Transport:
        for name in self.order:
            factory = self._factories.get(name)
            if factory is None:
                continue
            transport = factory()
            try:
                await transport.initialize()
            except Exception as e:
                self._failures[name] = str(e)
                logger.warning(
                    f"HTTP transport {name} unavailable, trying next",
                    extra={"transport": name, "error": str(e)},
                )
                continue
            logger.info(f"Using {name} HTTP transport", extra={"transport": name})
            return transport

        raise NetworkError("No HTTP transport available")

    async def request(self, url: str, **kwargs: Any) -> TransportResponse:
        transport = await self.get()
        return await transport.request(url, **kwargs)

    def describe(self) -> Dict[str, Any]:
        return {
            "transport": self._transport.name if self._transport else None,
            "initialized": self._transport is not None,
            "preferenceOrder": list(self.order),
            "unavailable": dict(self._failures),
        }

    async def aclose(self) -> None:
        if self._transport is not None:
            await self._transport.close()
            self._transport = None
