"""Supported provider/model combinations and the provider factory.

The Streamlit sidebar and ``GlossaForgeSettings`` both read the catalog
from here; ``get_provider`` is the only place a concrete provider class is
instantiated.
"""
from __future__ import annotations

import importlib
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Tuple

from .base import LLMProvider


@dataclass(frozen=True)
class ModelInfo:
    provider: str
    provider_label: str
    model_id: str
    label: str
    tier: str  # standard / fast / premium
    description: str = ""


_PROVIDER_LABELS: Dict[str, str] = {
    "google": "Gemini",
    "anthropic": "Claude",
    "openai": "ChatGPT",
}

# (provider, model_id, label, tier, description)
_MODELS: List[Tuple[str, str, str, str, str]] = [
    ("google", "gemini-2.0-flash", "Gemini 2.0 Flash", "standard",
     "Fast structured output. Good default for word lists"),
    ("google", "gemini-2.5-flash", "Gemini 2.5 Flash", "fast",
     "Newer flash model with better phonotactic consistency"),
    ("google", "gemini-2.5-pro", "Gemini 2.5 Pro", "premium",
     "Deepest grammar reasoning. Slower"),
    ("anthropic", "claude-sonnet-4-5-20250929", "Claude Sonnet 4.5", "standard",
     "Balanced speed and quality"),
    ("anthropic", "claude-haiku-4-5-20251001", "Claude Haiku 4.5", "fast",
     "Fast and cheap. Fine for vocabulary extension"),
    ("openai", "gpt-4o", "GPT-4o", "standard", "General-purpose model"),
    ("openai", "gpt-4o-mini", "GPT-4o mini", "fast", "Fast, low-cost variant"),
]

MODEL_CATALOG: List[ModelInfo] = [
    ModelInfo(provider, _PROVIDER_LABELS[provider], model_id, label, tier, description)
    for provider, model_id, label, tier, description in _MODELS
]

# provider id -> (module, class name), imported lazily so a missing SDK
# only matters for the provider actually selected
_PROVIDER_CLASSES: Dict[str, Tuple[str, str]] = {
    "google": (".google_provider", "GoogleProvider"),
    "anthropic": (".anthropic_provider", "AnthropicProvider"),
    "openai": (".openai_provider", "OpenAIProvider"),
}


# ---------------------------------------------------------------------------
# Catalog queries (dicts, for UI widgets)
# ---------------------------------------------------------------------------

def get_model_catalog() -> List[Dict[str, Any]]:
    return [asdict(m) for m in MODEL_CATALOG]


def get_providers() -> List[Dict[str, str]]:
    """Providers in catalog order, as ``{"id", "label"}`` dicts."""
    ids = list(dict.fromkeys(m.provider for m in MODEL_CATALOG))
    return [{"id": p, "label": _PROVIDER_LABELS[p]} for p in ids]


def get_models_for_provider(provider: str) -> List[Dict[str, Any]]:
    return [asdict(m) for m in MODEL_CATALOG if m.provider == provider]


def get_default_model_for_provider(provider: str) -> Optional[str]:
    """The provider's standard-tier model, else its first listed model."""
    models = [m for m in MODEL_CATALOG if m.provider == provider]
    if not models:
        return None
    standard = next((m for m in models if m.tier == "standard"), models[0])
    return standard.model_id


def validate_provider_model(provider: str, model_id: str) -> bool:
    return any(m.provider == provider and m.model_id == model_id for m in MODEL_CATALOG)


# ---------------------------------------------------------------------------
# Provider factory
# ---------------------------------------------------------------------------

def get_provider(
    provider_name: str,
    model: Optional[str] = None,
    api_key: str = "",
) -> LLMProvider:
    """Instantiate the provider for ``provider_name``.

    The API key is passed in explicitly and never read from the
    environment here.  ``model`` overrides the provider's default model.

    Raises
    ------
    ValueError
        If the provider_name is not recognized.
    """
    try:
        module_name, class_name = _PROVIDER_CLASSES[provider_name]
    except KeyError:
        raise ValueError(
            f"Unknown LLM provider: {provider_name!r}. "
            f"Supported: {', '.join(_PROVIDER_CLASSES)}"
        ) from None

    cls = getattr(importlib.import_module(module_name, __package__), class_name)
    kwargs: Dict[str, Any] = {"api_key": api_key}
    if model:
        kwargs["default_model"] = model
    return cls(**kwargs)
