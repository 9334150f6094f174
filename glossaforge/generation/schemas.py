"""Declared response shapes for the generation protocol.

Two views of the same contract:

* ``*_SCHEMA`` dicts are sent to the provider as the structured-output
  hint (Gemini ``response_schema`` format; other providers get it in the
  system prompt).
* Pydantic payload models validate what actually came back.  Anything
  that does not fit becomes ``LLMSchemaError`` at this boundary, so the
  UI never renders a half-populated record.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from core.providers.base import LLMSchemaError

from ..config.models import GrammarRules, VocabularyWord

logger = logging.getLogger(__name__)

P = TypeVar("P", bound=BaseModel)

# ---------------------------------------------------------------------------
# Provider-facing schemas
# ---------------------------------------------------------------------------

WORD_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "id": {"type": "STRING"},
        "native": {"type": "STRING"},
        "meaning": {"type": "STRING"},
        "pronunciation": {"type": "STRING"},
    },
    "required": ["id", "native", "meaning", "pronunciation"],
}

GRAMMAR_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "wordOrder": {"type": "STRING"},
        "pluralRule": {"type": "STRING"},
        "tenseRule": {"type": "STRING"},
        "adjectivePlacement": {"type": "STRING"},
    },
    "required": ["wordOrder", "pluralRule", "tenseRule", "adjectivePlacement"],
}

CORE_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "description": {"type": "STRING"},
        "grammar": GRAMMAR_SCHEMA,
        "vocabulary": {"type": "ARRAY", "items": WORD_SCHEMA},
    },
    "required": ["description", "grammar", "vocabulary"],
}

VOCABULARY_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {"vocabulary": {"type": "ARRAY", "items": WORD_SCHEMA}},
    "required": ["vocabulary"],
}

TRANSLATION_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "translation": {"type": "STRING"},
        "pronunciation": {"type": "STRING"},
        "breakdown": {"type": "STRING"},
    },
    "required": ["translation", "pronunciation", "breakdown"],
}

PHONEME_SUGGESTION_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {"phonemes": {"type": "ARRAY", "items": {"type": "STRING"}}},
    "required": ["phonemes"],
}


# ---------------------------------------------------------------------------
# Payload models
# ---------------------------------------------------------------------------

class _Payload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CoreGeneration(_Payload):
    """Result of ``generate_core``."""
    description: str = Field(min_length=1)
    grammar: GrammarRules
    vocabulary: List[VocabularyWord] = Field(min_length=1)


class VocabularyBatch(_Payload):
    """Result of ``extend_vocabulary``."""
    vocabulary: List[VocabularyWord] = Field(min_length=1)


class Translation(_Payload):
    """Result of ``translate_text``."""
    translation: str = Field(min_length=1)
    pronunciation: str = ""
    breakdown: str = ""

    @field_validator("breakdown", mode="before")
    @classmethod
    def _flatten_breakdown(cls, v: Any) -> Any:
        # Some models return the breakdown as a list of per-word glosses
        if isinstance(v, list):
            lines = []
            for item in v:
                if isinstance(item, dict):
                    lines.append(", ".join(f"{k}: {val}" for k, val in item.items()))
                else:
                    lines.append(str(item))
            return "\n".join(lines)
        return v


class PhonemeSuggestion(_Payload):
    """Result of ``suggest_phonemes`` before catalog filtering."""
    phonemes: List[str] = Field(min_length=1)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

_WRAPPER_KEYS = ("result", "data", "response", "output", "language")


def _unwrap(data: Any, expected_key: str, list_key: Optional[str]) -> Any:
    # Bare array where an object with a single list field was declared
    if list_key and isinstance(data, list):
        return {list_key: data}
    # LLM sometimes wraps in a container key
    if isinstance(data, dict) and expected_key not in data:
        for wrap_key in _WRAPPER_KEYS:
            inner = data.get(wrap_key)
            if isinstance(inner, dict) and expected_key in inner:
                logger.info("Unwrapped response from '%s' key", wrap_key)
                return inner
            if list_key and wrap_key != list_key and isinstance(inner, list):
                return {list_key: inner}
    return data


def parse_payload(
    model_cls: Type[P],
    data: Any,
    *,
    expected_key: str,
    list_key: Optional[str] = None,
    provider: str = "",
) -> P:
    """Validate provider JSON against ``model_cls`` or raise ``LLMSchemaError``."""
    data = _unwrap(data, expected_key, list_key)
    try:
        return model_cls.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()[:5]
        )
        raw = json.dumps(data, ensure_ascii=False)[:500]
        logger.warning("%s schema mismatch: %s", model_cls.__name__, problems)
        raise LLMSchemaError(
            f"{model_cls.__name__} response did not match schema: {problems}",
            raw_text=raw,
            provider=provider,
        ) from e
