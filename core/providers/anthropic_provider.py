"""Anthropic Claude provider.

Claude has no response-schema switch, so ``generate_json`` appends the
schema to the system prompt and the JSON guard does the rest.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from .base import Completion, LLMAuthError, LLMConfig, LLMProvider

logger = logging.getLogger(__name__)


class AnthropicProvider(LLMProvider):
    provider_name = "anthropic"

    def __init__(
        self,
        api_key: str = "",
        default_model: str = "claude-sonnet-4-5-20250929",
        base_url: Optional[str] = None,
    ):
        self.api_key = api_key
        self.default_model = default_model
        self.base_url = base_url
        self._client = None

    @property
    def client(self):
        if self._client is None:
            if not self.api_key:
                raise LLMAuthError("Anthropic API key is not set", provider=self.provider_name)
            try:
                from anthropic import Anthropic
            except ImportError:
                raise LLMAuthError(
                    "anthropic package required: pip install anthropic",
                    provider=self.provider_name,
                )
            # Retries are ours (_with_retry), not the SDK's
            kwargs: Dict[str, Any] = {"api_key": self.api_key, "max_retries": 0}
            if self.base_url:
                kwargs["base_url"] = self.base_url
            self._client = Anthropic(**kwargs)
        return self._client

    def _complete(
        self,
        cfg: LLMConfig,
        system_prompt: str,
        user_prompt: str,
        *,
        json_mode: bool,
        schema: Optional[Dict[str, Any]] = None,
    ) -> Completion:
        model = cfg.model or self.default_model
        client = self.client
        response = self._with_retry(
            cfg,
            lambda: client.messages.create(
                model=model,
                max_tokens=cfg.max_tokens,
                temperature=cfg.temperature,
                system=system_prompt,
                messages=[{"role": "user", "content": user_prompt}],
                timeout=cfg.timeout_seconds,
            ),
        )
        blocks = getattr(response, "content", None) or []
        usage = getattr(response, "usage", None)
        return Completion(
            text="".join(getattr(b, "text", "") for b in blocks),
            model=model,
            stop_reason=getattr(response, "stop_reason", "") or "",
            input_tokens=getattr(usage, "input_tokens", 0),
            output_tokens=getattr(usage, "output_tokens", 0),
        )
