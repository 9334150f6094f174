"""Shared fixtures for the GlossaForge test suite.

Provides a scripted LLM provider that runs canned raw text through the
real JSON guard, plus sample records and mock generation payloads.
"""

from __future__ import annotations

import copy
import json
from typing import Any, Callable, Dict, List, Optional, Sequence

import pytest

from core.providers.base import Completion, LLMEmptyResponseError, LLMProvider
from core.storage import InMemoryStore
from glossaforge.config.models import Conlang, GrammarRules, VocabularyWord
from glossaforge.generation.generator import ConlangGenerator
from glossaforge.persistence.library import ConlangLibrary


# ---------------------------------------------------------------------------
# Mock payloads
# ---------------------------------------------------------------------------

_CORE_WORDS = [
    ("pata", "water", "ˈpa.ta"),
    ("tapa", "stone", "ˈta.pa"),
    ("apa", "mother", "ˈa.pa"),
    ("tata", "father", "ˈta.ta"),
    ("papa", "bread", "ˈpa.pa"),
    ("at", "one", "at"),
    ("ap", "two", "ap"),
    ("tap", "three", "tap"),
    ("pat", "sun", "pat"),
    ("atta", "moon", "ˈat.ta"),
    ("appa", "fire", "ˈap.pa"),
    ("tatap", "tree", "ˈta.tap"),
    ("papat", "river", "ˈpa.pat"),
    ("ata", "sky", "ˈa.ta"),
    ("pa", "I", "pa"),
]

MOCK_CORE_RESPONSE: Dict[str, Any] = {
    "description": "A clipped, percussive tongue built from three sounds.",
    "grammar": {
        "wordOrder": "SOV",
        "pluralRule": "Reduplicate the first syllable.",
        "tenseRule": "Suffix -at marks the past.",
        "adjectivePlacement": "After the noun.",
    },
    "vocabulary": [
        {"id": str(i + 1), "native": n, "meaning": m, "pronunciation": p}
        for i, (n, m, p) in enumerate(_CORE_WORDS)
    ],
}

MOCK_EXTEND_RESPONSE: Dict[str, Any] = {
    "vocabulary": [
        {"id": "1", "native": "tatta", "meaning": "wolf", "pronunciation": "ˈtat.ta"},
        {"id": "x1", "native": "pappa", "meaning": "bear", "pronunciation": "ˈpap.pa"},
    ],
}

MOCK_TRANSLATION_RESPONSE: Dict[str, Any] = {
    "translation": "pa pata apa",
    "pronunciation": "pa ˈpa.ta ˈa.pa",
    "breakdown": "pa = I; pata = water; apa = mother",
}


# ---------------------------------------------------------------------------
# Scripted provider
# ---------------------------------------------------------------------------

class FakeProvider(LLMProvider):
    """Provider that replays canned raw responses in order.

    Items may be dicts/lists (serialised to JSON), raw strings (returned
    as the completion text) or exceptions (raised).  ``on_call`` runs
    before each response is returned, with the provider as argument.
    Parsing, the JSON guard and empty-text checks are the real ones from
    ``LLMProvider``.
    """

    provider_name = "fake"

    def __init__(
        self,
        responses: Sequence[Any] = (),
        on_call: Optional[Callable[["FakeProvider"], None]] = None,
    ):
        self.responses: List[Any] = list(responses)
        self.on_call = on_call
        self.calls: List[Dict[str, Any]] = []

    def _complete(self, cfg, system_prompt, user_prompt, *, json_mode, schema=None) -> Completion:
        self.calls.append({
            "kind": "json" if json_mode else "text",
            "system": system_prompt,
            "user": user_prompt,
            "schema": schema,
        })
        if self.on_call is not None:
            self.on_call(self)
        if not self.responses:
            raise LLMEmptyResponseError("no scripted response left", provider=self.provider_name)
        item = self.responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        text = item if isinstance(item, str) else json.dumps(item, ensure_ascii=False)
        return Completion(text=text, model="fake-model", input_tokens=10, output_tokens=20)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def generator(fake_provider) -> ConlangGenerator:
    return ConlangGenerator(fake_provider)


@pytest.fixture
def library() -> ConlangLibrary:
    return ConlangLibrary(InMemoryStore())


@pytest.fixture
def sample_conlang() -> Conlang:
    """A generated, unsaved language with non-ASCII IPA in its lexicon."""
    return Conlang(
        name="Patuan",
        description="Soft aspirated stops and open vowels.",
        phonemes=["p", "pʰ", "t", "a", "u", "ˈ"],
        vibe="Breathy and calm",
        grammar=GrammarRules(
            word_order="VSO",
            plural_rule="Suffix -u",
            tense_rule="Prefix ta- for future",
            adjective_placement="Before the noun",
        ),
        vocabulary=[
            VocabularyWord(id="1", native="ˈpʰa.tu", meaning="river", pronunciation="ˈpʰa.tu"),
            VocabularyWord(id="2", native="tu", meaning="stone", pronunciation="tu"),
        ],
    )


@pytest.fixture
def make_provider() -> Callable[..., FakeProvider]:
    """Factory for providers with scripted responses and an ``on_call`` hook."""
    return FakeProvider


@pytest.fixture
def mock_core_response() -> Dict[str, Any]:
    return copy.deepcopy(MOCK_CORE_RESPONSE)


@pytest.fixture
def mock_extend_response() -> Dict[str, Any]:
    return copy.deepcopy(MOCK_EXTEND_RESPONSE)


@pytest.fixture
def mock_translation_response() -> Dict[str, Any]:
    return copy.deepcopy(MOCK_TRANSLATION_RESPONSE)
