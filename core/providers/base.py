"""LLM provider interface shared by every backend.

A provider turns one (system, user) prompt pair into one completion.
Subclasses implement ``_complete`` against their SDK; the base class owns
the JSON guard, the empty-response check, timing and usage accounting, so
Gemini, Claude and OpenAI all return the same ``LLMResponse``.
"""

from __future__ import annotations

import abc
import hashlib
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class LLMConfig:
    """Immutable configuration for a single LLM call."""

    model: str = ""
    temperature: float = 0.8
    max_tokens: int = 8192
    timeout_seconds: int = 60
    retry_attempts: int = 1
    retry_base_delay: float = 2.0


@dataclass
class Completion:
    """Raw output of one SDK call, before any parsing."""

    text: str
    model: str
    stop_reason: str = ""
    input_tokens: int = 0
    output_tokens: int = 0


@dataclass
class LLMResponse:
    """Standardised response from any LLM provider."""

    raw_text: str
    parsed_json: Any = None
    model: str = ""
    provider: str = ""
    input_tokens: int = 0
    output_tokens: int = 0
    latency_ms: int = 0
    stop_reason: str = ""
    prompt_hash: str = ""
    result_hash: str = ""


def _digest(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()[:16]


class LLMProvider(abc.ABC):
    """Abstract base class for LLM providers."""

    provider_name: str = "base"
    # False when the SDK accepts a response schema natively
    schema_in_prompt: bool = True

    @abc.abstractmethod
    def _complete(
        self,
        cfg: LLMConfig,
        system_prompt: str,
        user_prompt: str,
        *,
        json_mode: bool,
        schema: Optional[Dict[str, Any]] = None,
    ) -> Completion:
        """Run one SDK call (with ``_with_retry``) and return its text and usage."""
        ...

    def generate_json(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        config: Optional[LLMConfig] = None,
        schema_hint: Optional[Dict[str, Any]] = None,
    ) -> LLMResponse:
        """Send a prompt and return a parsed JSON response.

        Parameters
        ----------
        system_prompt : str
            System-level instruction (persona, rules, output format).
        user_prompt : str
            User-level content (language context, request).
        config : LLMConfig, optional
            Override default config for this call.
        schema_hint : dict, optional
            Expected response schema.  Passed natively where the SDK
            supports it, otherwise appended to the system prompt.

        Returns
        -------
        LLMResponse
            Contains ``parsed_json`` and usage metadata.

        Raises
        ------
        LLMError
            On API failure, timeout, or invalid JSON after all retries.
        """
        from .guards import JSONOutputGuard

        cfg = self._default_config(config)
        system = system_prompt + JSONOutputGuard.system_prompt_suffix()
        if schema_hint and self.schema_in_prompt:
            system += (
                "\nThe JSON must match this schema:\n"
                + json.dumps(schema_hint, ensure_ascii=False)
            )

        t0 = time.time()
        completion = self._complete(
            cfg, system, user_prompt, json_mode=True, schema=schema_hint,
        )
        latency_ms = int((time.time() - t0) * 1000)

        parsed = JSONOutputGuard.enforce(completion.text, stop_reason=completion.stop_reason)
        return self._response(
            completion,
            latency_ms,
            prompt=system + user_prompt,
            parsed=parsed,
            result=json.dumps(parsed, sort_keys=True, ensure_ascii=False),
        )

    def generate_text(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        config: Optional[LLMConfig] = None,
    ) -> LLMResponse:
        """Send a prompt and return free-form text in ``raw_text``."""
        cfg = self._default_config(config)
        t0 = time.time()
        completion = self._complete(cfg, system_prompt, user_prompt, json_mode=False)
        latency_ms = int((time.time() - t0) * 1000)

        completion.text = completion.text.strip()
        if not completion.text:
            raise LLMEmptyResponseError(
                f"{self.provider_name} returned no text", provider=self.provider_name,
            )
        return self._response(
            completion, latency_ms, prompt=system_prompt + user_prompt, result=completion.text,
        )

    def _response(
        self,
        completion: Completion,
        latency_ms: int,
        *,
        prompt: str,
        result: str,
        parsed: Any = None,
    ) -> LLMResponse:
        return LLMResponse(
            raw_text=completion.text,
            parsed_json=parsed,
            model=completion.model,
            provider=self.provider_name,
            input_tokens=completion.input_tokens or 0,
            output_tokens=completion.output_tokens or 0,
            latency_ms=latency_ms,
            stop_reason=completion.stop_reason,
            prompt_hash=_digest(prompt),
            result_hash=_digest(result),
        )

    def _default_config(self, config: Optional[LLMConfig]) -> LLMConfig:
        return config or LLMConfig()

    def _with_retry(self, cfg: LLMConfig, call: Callable[[], T]) -> T:
        """Run ``call`` with a bounded retry on transient failures.

        Exceptions raised by the SDK are classified into the ``LLMError``
        family first; only ``retryable`` errors are attempted again.
        """
        attempt = 0
        while True:
            try:
                return call()
            except LLMError as e:
                err, cause = e, None
            except Exception as e:
                err, cause = classify_exception(e, provider=self.provider_name), e
                logger.error(
                    "%s call failed (attempt %d): %s", self.provider_name, attempt + 1, e,
                )
            if not err.retryable or attempt >= cfg.retry_attempts:
                if cause is None:
                    raise err
                raise err from cause
            attempt += 1
            delay = cfg.retry_base_delay * (2 ** (attempt - 1))
            logger.warning(
                "%s: retry %d/%d in %.1fs (%s)",
                self.provider_name, attempt, cfg.retry_attempts, delay, err,
            )
            time.sleep(delay)


class LLMError(Exception):
    """Base exception for LLM provider errors."""

    user_message = "The language engine failed unexpectedly. Please try again."

    def __init__(self, message: str, provider: str = "", retryable: bool = False):
        super().__init__(message)
        self.provider = provider
        self.retryable = retryable


class LLMAuthError(LLMError):
    """Credentials missing or rejected."""

    user_message = "The language engine rejected the API credentials. Check your API key."

    def __init__(self, message: str, provider: str = ""):
        super().__init__(message, provider=provider, retryable=False)


class LLMRateLimitError(LLMError):
    """Provider is throttling requests."""

    user_message = "The language engine is rate-limiting requests. Wait a moment and try again."

    def __init__(self, message: str, provider: str = ""):
        super().__init__(message, provider=provider, retryable=True)


class LLMTimeoutError(LLMError):
    """LLM call exceeded timeout."""

    user_message = "The language engine did not answer in time. Please try again."

    def __init__(self, message: str, provider: str = ""):
        super().__init__(message, provider=provider, retryable=True)


class LLMUnavailableError(LLMError):
    """Provider unreachable or failing server-side."""

    user_message = "The language engine is currently unreachable. Check your connection and try again."

    def __init__(self, message: str, provider: str = ""):
        super().__init__(message, provider=provider, retryable=True)


class LLMEmptyResponseError(LLMError):
    """Provider returned no content."""

    user_message = "The language engine returned an empty response."

    def __init__(self, message: str, provider: str = ""):
        super().__init__(message, provider=provider, retryable=False)


class LLMJSONError(LLMError):
    """LLM returned invalid JSON that could not be repaired."""

    user_message = "The language engine returned a response that could not be read."

    def __init__(self, message: str, raw_text: str = "", provider: str = ""):
        super().__init__(message, provider=provider, retryable=False)
        self.raw_text = raw_text


class LLMSchemaError(LLMError):
    """LLM returned JSON that does not match the declared response shape."""

    user_message = "The language engine returned data in an unexpected shape."

    def __init__(self, message: str, raw_text: str = "", provider: str = ""):
        super().__init__(message, provider=provider, retryable=False)
        self.raw_text = raw_text


_AUTH_NAMES = ("Authentication", "PermissionDenied", "Unauthenticated", "Unauthorized")
_RATE_NAMES = ("RateLimit", "ResourceExhausted", "TooManyRequests")
_TIMEOUT_NAMES = ("Timeout", "DeadlineExceeded")
_UNAVAILABLE_NAMES = (
    "Connection", "ServiceUnavailable", "InternalServer", "ServerError", "Overloaded",
)


def classify_exception(exc: BaseException, provider: str = "") -> LLMError:
    """Map an SDK exception onto the ``LLMError`` family.

    SDK exception classes are never imported here; each SDK is an optional
    install.  HTTP status codes are read from ``status_code`` (anthropic,
    openai) or ``code`` (google.api_core), then the class name is matched.
    """
    if isinstance(exc, LLMError):
        return exc

    message = f"{type(exc).__name__}: {exc}"
    status = getattr(exc, "status_code", None)
    if status is None:
        code = getattr(exc, "code", None)
        status = code if isinstance(code, int) else None

    if status in (401, 403):
        return LLMAuthError(message, provider=provider)
    if status == 429:
        return LLMRateLimitError(message, provider=provider)
    if status in (408, 504):
        return LLMTimeoutError(message, provider=provider)
    if isinstance(status, int) and status >= 500:
        return LLMUnavailableError(message, provider=provider)

    if isinstance(exc, TimeoutError):
        return LLMTimeoutError(message, provider=provider)
    if isinstance(exc, ConnectionError):
        return LLMUnavailableError(message, provider=provider)

    name = type(exc).__name__
    if any(n in name for n in _AUTH_NAMES):
        return LLMAuthError(message, provider=provider)
    if any(n in name for n in _RATE_NAMES):
        return LLMRateLimitError(message, provider=provider)
    if any(n in name for n in _TIMEOUT_NAMES):
        return LLMTimeoutError(message, provider=provider)
    if any(n in name for n in _UNAVAILABLE_NAMES):
        return LLMUnavailableError(message, provider=provider)

    return LLMError(message, provider=provider, retryable=False)
