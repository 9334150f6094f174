"""Runtime settings: which LLM to call, with which credential, how patiently.

Settings are built once (from the environment or the Streamlit sidebar)
and passed explicitly to whatever needs them; nothing downstream reads
``os.environ`` on its own.
"""

from __future__ import annotations

import logging
import os
from typing import Literal, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError

from core.providers.base import LLMConfig, LLMProvider
from core.providers.registry import get_default_model_for_provider, get_provider

from ..errors import SettingsError

API_KEY_ENV = {
    "google": "GOOGLE_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
}

# Settings fields that come from an environment variable
FIELD_ENV = {
    "provider": "GLOSSAFORGE_PROVIDER",
    "model": "GLOSSAFORGE_MODEL",
    "timeout_seconds": "GLOSSAFORGE_TIMEOUT",
    "public_url": "GLOSSAFORGE_PUBLIC_URL",
}

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_PUBLIC_URL = "http://localhost:8501"


class GlossaForgeSettings(BaseModel):
    """Provider selection, credential and call limits."""

    provider: Literal["google", "anthropic", "openai"] = "google"
    model: str = ""
    api_key: str = Field(default="", repr=False)
    temperature: float = Field(default=0.8, ge=0.0, le=2.0)
    max_tokens: int = Field(default=8192, gt=0)
    timeout_seconds: int = Field(default=60, gt=0)
    retry_attempts: int = Field(default=1, ge=0, le=3)
    retry_base_delay: float = Field(default=2.0, ge=0.0)
    data_dir: Optional[str] = None
    log_level: str = "INFO"
    public_url: str = DEFAULT_PUBLIC_URL

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "GlossaForgeSettings":
        env = os.environ if environ is None else environ
        provider = env.get("GLOSSAFORGE_PROVIDER", "google")
        kwargs = {
            "provider": provider,
            "model": env.get("GLOSSAFORGE_MODEL", ""),
            "api_key": env.get(API_KEY_ENV.get(provider, ""), ""),
            "data_dir": env.get("GLOSSAFORGE_DATA_DIR") or None,
            "log_level": env.get("GLOSSAFORGE_LOG_LEVEL", "INFO"),
            "public_url": env.get("GLOSSAFORGE_PUBLIC_URL") or DEFAULT_PUBLIC_URL,
        }
        timeout = env.get("GLOSSAFORGE_TIMEOUT")
        if timeout:
            try:
                kwargs["timeout_seconds"] = int(timeout)
            except ValueError as e:
                raise SettingsError(
                    f"GLOSSAFORGE_TIMEOUT must be a whole number of seconds, not {timeout!r}."
                ) from e
        try:
            return cls(**kwargs)
        except ValidationError as e:
            names = sorted({
                FIELD_ENV.get(str(err["loc"][0]), str(err["loc"][0]))
                for err in e.errors() if err["loc"]
            })
            raise SettingsError(f"Invalid setting: {', '.join(names)}.") from e

    @property
    def resolved_model(self) -> str:
        return self.model or get_default_model_for_provider(self.provider) or ""

    def llm_config(self) -> LLMConfig:
        return LLMConfig(
            model=self.resolved_model,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            timeout_seconds=self.timeout_seconds,
            retry_attempts=self.retry_attempts,
            retry_base_delay=self.retry_base_delay,
        )

    def build_provider(self) -> LLMProvider:
        return get_provider(self.provider, self.resolved_model, api_key=self.api_key)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
