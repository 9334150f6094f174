"""LLM Provider abstraction layer.

Supports multiple LLM backends (Google Gemini, Anthropic Claude, OpenAI)
with a unified interface, audit logging, and output guards.
"""

from .base import (
    Completion,
    LLMAuthError,
    LLMConfig,
    LLMEmptyResponseError,
    LLMError,
    LLMJSONError,
    LLMProvider,
    LLMRateLimitError,
    LLMResponse,
    LLMSchemaError,
    LLMTimeoutError,
    LLMUnavailableError,
    classify_exception,
)
from .guards import JSONOutputGuard
from .audit import AuditLogger, AuditRecord
from .registry import get_provider, get_default_model_for_provider, get_models_for_provider

__all__ = [
    "Completion",
    "LLMProvider",
    "LLMResponse",
    "LLMConfig",
    "LLMError",
    "LLMAuthError",
    "LLMRateLimitError",
    "LLMTimeoutError",
    "LLMUnavailableError",
    "LLMEmptyResponseError",
    "LLMJSONError",
    "LLMSchemaError",
    "classify_exception",
    "JSONOutputGuard",
    "AuditLogger",
    "AuditRecord",
    "get_provider",
    "get_default_model_for_provider",
    "get_models_for_provider",
]
