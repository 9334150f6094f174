"""OpenAI chat-completions provider.

JSON calls use ``response_format={"type": "json_object"}``; the schema
itself travels in the system prompt.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from .base import Completion, LLMAuthError, LLMConfig, LLMProvider

logger = logging.getLogger(__name__)


class OpenAIProvider(LLMProvider):
    provider_name = "openai"

    def __init__(
        self,
        api_key: str = "",
        default_model: str = "gpt-4o",
    ):
        self.api_key = api_key
        self.default_model = default_model
        self._client = None

    @property
    def client(self):
        if self._client is None:
            if not self.api_key:
                raise LLMAuthError("OpenAI API key is not set", provider=self.provider_name)
            try:
                from openai import OpenAI
            except ImportError:
                raise LLMAuthError(
                    "openai package required: pip install openai",
                    provider=self.provider_name,
                )
            self._client = OpenAI(api_key=self.api_key, max_retries=0)
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
        kwargs: Dict[str, Any] = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": cfg.temperature,
            "max_tokens": cfg.max_tokens,
            "timeout": cfg.timeout_seconds,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        client = self.client
        response = self._with_retry(cfg, lambda: client.chat.completions.create(**kwargs))

        choice = response.choices[0]
        usage = response.usage
        return Completion(
            text=choice.message.content or "",
            model=model,
            stop_reason=choice.finish_reason or "",
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
        )
