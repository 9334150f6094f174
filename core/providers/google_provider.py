"""Google Gemini provider, the default backend for GlossaForge.

Built on ``google-generativeai``.  JSON calls use structured output
(``response_mime_type`` + ``response_schema``), so the schema is not
repeated in the prompt.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from .base import Completion, LLMAuthError, LLMConfig, LLMEmptyResponseError, LLMProvider

logger = logging.getLogger(__name__)


class GoogleProvider(LLMProvider):
    """LLM Provider backed by Google Gemini API.

    The API key is passed in explicitly (see ``GlossaForgeSettings``);
    the provider never reads the environment itself.
    """

    provider_name = "google"
    schema_in_prompt = False

    def __init__(
        self,
        api_key: str = "",
        default_model: str = "gemini-2.0-flash",
    ):
        self.api_key = api_key
        self.default_model = default_model
        self._models: Dict[str, Any] = {}
        self._configured = False

    def _model(self, name: str):
        if name not in self._models:
            if not self.api_key:
                raise LLMAuthError("Google API key is not set", provider=self.provider_name)
            try:
                import google.generativeai as genai
            except ImportError:
                raise LLMAuthError(
                    "google-generativeai package required: pip install google-generativeai",
                    provider=self.provider_name,
                )
            if not self._configured:
                genai.configure(api_key=self.api_key)
                self._configured = True
            self._models[name] = genai.GenerativeModel(name)
        return self._models[name]

    def _complete(
        self,
        cfg: LLMConfig,
        system_prompt: str,
        user_prompt: str,
        *,
        json_mode: bool,
        schema: Optional[Dict[str, Any]] = None,
    ) -> Completion:
        model_name = cfg.model or self.default_model
        model = self._model(model_name)

        gen_config: Dict[str, Any] = {
            "temperature": cfg.temperature,
            "max_output_tokens": cfg.max_tokens,
        }
        if json_mode:
            gen_config["response_mime_type"] = "application/json"
            if schema:
                gen_config["response_schema"] = schema

        response = self._with_retry(
            cfg,
            lambda: model.generate_content(
                f"{system_prompt}\n\n{user_prompt}",
                generation_config=gen_config,
                request_options={"timeout": cfg.timeout_seconds},
            ),
        )

        usage = getattr(response, "usage_metadata", None)
        return Completion(
            text=_response_text(response),
            model=model_name,
            stop_reason=_finish_reason(response),
            input_tokens=getattr(usage, "prompt_token_count", 0),
            output_tokens=getattr(usage, "candidates_token_count", 0),
        )


def _response_text(response) -> str:
    feedback = getattr(response, "prompt_feedback", None)
    if feedback is not None and getattr(feedback, "block_reason", None):
        raise LLMEmptyResponseError(f"Prompt blocked: {feedback.block_reason}", provider="google")
    try:
        return response.text or ""
    except ValueError:
        # .text raises when the candidate has no parts (safety stop etc.)
        return ""


def _finish_reason(response) -> str:
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return ""
    reason = getattr(candidates[0], "finish_reason", "")
    return getattr(reason, "name", str(reason))
