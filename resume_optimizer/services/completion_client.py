"""Gemini generateContent client with bounded retry and envelope validation."""
import asyncio
import json
import time
from typing import Any, Awaitable, Callable, Dict, Optional

from resume_optimizer.config import Settings, settings as default_settings
from resume_optimizer.services.http_transport import TransportProvider
from resume_optimizer.utils.cleaning import redact_api_key
from resume_optimizer.utils.errors import (
    BackendExhaustedError,
    ConfigurationError,
    EnvelopeError,
    HttpError,
    SafetyBlockedError,
    TransportError,
    TransportTimeoutError,
)
from resume_optimizer.utils.logging import get_logger

logger = get_logger(__name__)

CONNECTION_CHECK_PROMPT = "Hello, this is a test. Please respond with 'API is working!'"
CONNECTION_CHECK_TIMEOUT_MS = 10000
CONNECTION_CHECK_MAX_TOKENS = 100

HTTP_ERROR_HINTS = {
    400: "Bad request sent to AI service",
    401: "API key invalid or unauthorized",
    403: "API key invalid or unauthorized",
    404: "AI model not found",
    429: "AI service rate limit exceeded",
}


def describe_error(error: BaseException) -> str:
    """Human readable summary of a failed attempt."""
    if isinstance(error, HttpError):
        hint = HTTP_ERROR_HINTS.get(error.status_code)
        if hint is None and error.status_code >= 500:
            hint = "AI service unavailable"
        return f"{hint or 'AI service request failed'} (HTTP {error.status_code})"
    if isinstance(error, TransportTimeoutError):
        return f"AI service timeout after {error.elapsed_ms}ms"
    return str(error)


def parse_envelope(data: Any) -> str:
    """
    Extract generated text from a generateContent response.

    Raises:
        SafetyBlockedError: the candidate finished with reason SAFETY
        EnvelopeError: error payload, no candidates, no parts or empty text
    """
    if not isinstance(data, dict):
        raise EnvelopeError("Unexpected response format from AI service")

    if data.get("error"):
        error = data["error"]
        message = error.get("message") if isinstance(error, dict) else str(error)
        raise EnvelopeError(f"AI API error: {message or 'unknown error'}")

    candidates = data.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        raise EnvelopeError("No response candidates returned by AI service")

    candidate = candidates[0]
    if not isinstance(candidate, dict):
        raise EnvelopeError("Malformed response candidate")

    if candidate.get("finishReason") == "SAFETY":
        raise SafetyBlockedError("Response blocked by safety filters")

    content = candidate.get("content")
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list) or not parts or not isinstance(parts[0], dict):
        raise EnvelopeError("No content parts in AI response")

    text = parts[0].get("text")
    if not isinstance(text, str) or not text.strip():
        raise EnvelopeError("Empty text in AI response")

    return text


class CompletionClient:
    """Sends prompts to the generative backend through an injected transport provider."""

    def __init__(
        self,
        provider: TransportProvider,
        api_key: Optional[str],
        model: str = "gemini-1.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1/models",
        timeout_ms: int = 30000,
        max_retries: int = 3,
        temperature: float = 0.7,
        max_tokens: int = 4096,
        top_p: float = 0.8,
        top_k: int = 40,
        overall_deadline_seconds: Optional[float] = None,
        fail_fast_on_safety: bool = False,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        if overall_deadline_seconds is not None and overall_deadline_seconds <= 0:
            raise ValueError("overall_deadline_seconds must be positive")
        self.provider = provider
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout_ms = timeout_ms
        self.max_retries = max_retries
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.top_p = top_p
        self.top_k = top_k
        self.overall_deadline_seconds = overall_deadline_seconds
        self.fail_fast_on_safety = fail_fast_on_safety
        self._sleep = sleep
        self._clock = clock

    @classmethod
    def from_settings(
        cls,
        provider: TransportProvider,
        config: Optional[Settings] = None,
        **overrides: Any,
    ) -> "CompletionClient":
        config = config or default_settings
        options: Dict[str, Any] = {
            "api_key": config.gemini_api_key,
            "model": config.gemini_model,
            "base_url": config.gemini_api_url,
            "timeout_ms": config.ai_response_timeout_ms,
            "max_retries": config.ai_max_retries,
            "temperature": config.ai_temperature,
            "max_tokens": config.ai_max_tokens,
            "top_p": config.ai_top_p,
            "top_k": config.ai_top_k,
            "overall_deadline_seconds": config.ai_overall_deadline_seconds,
            "fail_fast_on_safety": config.ai_fail_fast_on_safety,
        }
        options.update(overrides)
        return cls(provider, **options)

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    @property
    def endpoint_url(self) -> str:
        return f"{self.base_url}/{self.model}:generateContent?key={self.api_key}"

    def build_payload(self, prompt: str, temperature: float, max_tokens: int) -> Dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": max_tokens,
                "topP": self.top_p,
                "topK": self.top_k,
            },
        }

    async def _attempt(self, payload: Dict[str, Any], timeout_ms: int) -> str:
        response = await self.provider.request(
            self.endpoint_url,
            method="POST",
            body=json.dumps(payload),
            timeout_ms=timeout_ms,
        )
        return parse_envelope(response.json())

    def _attempt_timeout_ms(self, started: float) -> Optional[int]:
        """Per-attempt timeout, capped by what is left of the overall deadline; None once it has passed."""
        if self.overall_deadline_seconds is None:
            return self.timeout_ms
        remaining = self.overall_deadline_seconds - (self._clock() - started)
        if remaining <= 0:
            return None
        return max(1, min(self.timeout_ms, int(remaining * 1000)))

    async def generate_text(
        self,
        prompt: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        """
        Return the generated text for ``prompt``.

        Attempts are sequential; after failed attempt ``n`` the client waits
        ``2 ** n`` seconds before the next one. With an overall deadline, each
        attempt's timeout is capped by the time left, and no attempt or wait
        starts that would end past it.

        Raises:
            ConfigurationError: no API key configured (no request is made)
            BackendExhaustedError: every attempt failed
        """
        if not self.configured:
            raise ConfigurationError("Gemini API key not configured")

        payload = self.build_payload(
            prompt,
            self.temperature if temperature is None else temperature,
            self.max_tokens if max_tokens is None else max_tokens,
        )
        started = self._clock()
        last_error: Optional[BaseException] = None

        for attempt in range(1, self.max_retries + 1):
            log_context = {
                "attempt": attempt,
                "max_retries": self.max_retries,
                "model": self.model,
                "url": redact_api_key(self.endpoint_url),
            }
            timeout_ms = self._attempt_timeout_ms(started)
            if timeout_ms is None:
                logger.error(
                    "AI attempt skipped, overall deadline reached",
                    extra={**log_context, "deadline_seconds": self.overall_deadline_seconds},
                )
                raise BackendExhaustedError(attempt - 1, last_error) from last_error

            try:
                text = await self._attempt(payload, timeout_ms)
                logger.info(
                    "AI completion received",
                    extra={**log_context, "response_length": len(text)},
                )
                return text
            except SafetyBlockedError as e:
                last_error = e
                logger.warning(
                    "AI completion blocked by safety filters",
                    extra={**log_context, "error": str(e)},
                )
                if self.fail_fast_on_safety:
                    raise BackendExhaustedError(attempt, e) from e
            except (TransportError, EnvelopeError) as e:
                last_error = e
                logger.warning(
                    f"AI attempt {attempt} failed: {describe_error(e)}",
                    extra={**log_context, "error": str(e), "error_type": type(e).__name__},
                )

            if attempt == self.max_retries:
                break

            delay = 2 ** attempt
            if self.overall_deadline_seconds is not None:
                elapsed = self._clock() - started
                if elapsed + delay > self.overall_deadline_seconds:
                    logger.error(
                        "AI retry skipped, overall deadline would be exceeded",
                        extra={**log_context, "elapsed_seconds": round(elapsed, 3), "delay_seconds": delay},
                    )
                    raise BackendExhaustedError(attempt, last_error) from last_error

            logger.info(f"Waiting {delay}s before retry", extra=log_context)
            await self._sleep(delay)

        logger.error(
            f"AI service failed after {self.max_retries} attempts",
            extra={"model": self.model, "error": str(last_error)},
        )
        raise BackendExhaustedError(self.max_retries, last_error) from last_error

    async def check_connection(self, timeout_ms: int = CONNECTION_CHECK_TIMEOUT_MS) -> Dict[str, Any]:
        """Single short request used by health checks; never raises."""
        if not self.configured:
            return {"connected": False, "error": "API key not configured", "model": self.model}

        payload = {
            "contents": [{"parts": [{"text": CONNECTION_CHECK_PROMPT}]}],
            "generationConfig": {"temperature": 0.7, "maxOutputTokens": CONNECTION_CHECK_MAX_TOKENS},
        }
        started = self._clock()
        try:
            text = await self._attempt(payload, timeout_ms)
        except (TransportError, EnvelopeError) as e:
            logger.error("AI connection test failed", extra={"error": str(e), "model": self.model})
            return {"connected": False, "error": describe_error(e), "model": self.model}

        return {
            "connected": True,
            "model": self.model,
            "responseTimeMs": int((self._clock() - started) * 1000),
            "testResponse": text[:100] + ("..." if len(text) > 100 else ""),
        }
