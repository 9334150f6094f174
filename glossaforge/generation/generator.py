"""Conlang Generator: the client side of the generation protocol.

Every operation is one request and one response:

  1. validate the user input (no network call on bad input)
  2. build the prompt and declare the response schema
  3. call the injected LLM provider
  4. validate the payload and return typed results

The generator never mutates the caller's ``Conlang``; the caller merges.
"""
from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence, TypeVar

from core.providers.audit import AuditLogger
from core.providers.base import LLMConfig, LLMError, LLMProvider, LLMResponse, LLMSchemaError

from ..config import ipa
from ..config.models import Conlang, VocabularyWord, unique_vocabulary
from ..errors import ConlangValidationError
from . import prompts
from .schemas import (
    CORE_SCHEMA,
    PHONEME_SUGGESTION_SCHEMA,
    TRANSLATION_SCHEMA,
    VOCABULARY_SCHEMA,
    CoreGeneration,
    PhonemeSuggestion,
    Translation,
    VocabularyBatch,
    parse_payload,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_EXTEND_COUNT = 10
MAX_EXTEND_COUNT = 50


# ---------------------------------------------------------------------------
# Input checks (shared with the controller, which runs them without an engine)
# ---------------------------------------------------------------------------

def check_core_inputs(name: str, phonemes: Sequence[str]) -> None:
    if not name or not name.strip():
        raise ConlangValidationError("Please provide a name for your language first.")
    if not phonemes:
        raise ConlangValidationError(
            "Please select at least one IPA symbol to build your phonology."
        )


def check_extend_inputs(conlang: Conlang, count: int) -> None:
    if not conlang.phonemes:
        raise ConlangValidationError("Select phonemes before extending the vocabulary.")
    if not 1 <= count <= MAX_EXTEND_COUNT:
        raise ConlangValidationError(
            f"Word count must be between 1 and {MAX_EXTEND_COUNT}."
        )


def check_text(value: str, message: str) -> None:
    if not value or not value.strip():
        raise ConlangValidationError(message)


TRANSLATE_TEXT_MISSING = "Enter some text to translate."
ASK_QUERY_MISSING = "Ask the assistant a question first."
SUGGEST_VIBE_MISSING = "Please provide a vibe first so I know what sounds to suggest."
EXPAND_VIBE_MISSING = "Write a short vibe first, then expand it."


class ConlangGenerator:
    """LLM-backed operations on a constructed language.

    Parameters
    ----------
    provider : LLMProvider
        Backend to call.  Credential and model are the provider's concern.
    config : LLMConfig, optional
        Per-call limits (timeout, retries, temperature).
    audit : AuditLogger, optional
        Receives one record per call, successful or not.
    """

    def __init__(
        self,
        provider: LLMProvider,
        config: Optional[LLMConfig] = None,
        audit: Optional[AuditLogger] = None,
    ) -> None:
        self.provider = provider
        self.config = config
        self.audit = audit

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def generate_core(self, name: str, vibe: str, phonemes: Sequence[str]) -> CoreGeneration:
        """Generate description, grammar and a starter vocabulary.

        Raises
        ------
        ConlangValidationError
            If ``name`` is blank or ``phonemes`` is empty.
        LLMError
            On any provider or response failure.
        """
        check_core_inputs(name, phonemes)

        system, user = prompts.build_core_prompt(name.strip(), vibe, list(phonemes))
        logger.info(
            "generate_core: name=%r phonemes=%d", name, len(phonemes),
        )
        result = self._call_json(
            "generate_core", system, user, CORE_SCHEMA,
            lambda data: parse_payload(
                CoreGeneration, data, expected_key="vocabulary",
                provider=self.provider.provider_name,
            ),
        )
        if len(result.vocabulary) != prompts.CORE_VOCABULARY_SIZE:
            logger.warning(
                "generate_core: expected %d words, got %d",
                prompts.CORE_VOCABULARY_SIZE, len(result.vocabulary),
            )
        return result.model_copy(update={"vocabulary": unique_vocabulary(result.vocabulary)})

    def extend_vocabulary(
        self,
        conlang: Conlang,
        theme: str = "general",
        count: int = DEFAULT_EXTEND_COUNT,
    ) -> List[VocabularyWord]:
        """Generate ``count`` new words; ids never collide with ``conlang``'s."""
        check_extend_inputs(conlang, count)

        system, user = prompts.build_extend_prompt(conlang, theme, count)
        batch = self._call_json(
            "extend_vocabulary", system, user, VOCABULARY_SCHEMA,
            lambda data: parse_payload(
                VocabularyBatch, data, expected_key="vocabulary", list_key="vocabulary",
                provider=self.provider.provider_name,
            ),
        )
        return unique_vocabulary(batch.vocabulary, taken=conlang.vocabulary_ids())

    def translate_text(self, conlang: Conlang, text: str) -> Translation:
        check_text(text, TRANSLATE_TEXT_MISSING)

        system, user = prompts.build_translate_prompt(conlang, text.strip())
        return self._call_json(
            "translate_text", system, user, TRANSLATION_SCHEMA,
            lambda data: parse_payload(
                Translation, data, expected_key="translation",
                provider=self.provider.provider_name,
            ),
        )

    def ask_assistant(self, conlang: Conlang, query: str) -> str:
        check_text(query, ASK_QUERY_MISSING)

        system, user = prompts.build_assistant_prompt(conlang, query.strip())
        return self._call_text("ask_assistant", system, user)

    def suggest_phonemes(self, vibe: str) -> List[str]:
        """Return 15-25 catalog symbols fitting ``vibe``.

        Symbols outside the IPA catalog are dropped; if nothing usable is
        left the response counts as malformed.
        """
        check_text(vibe, SUGGEST_VIBE_MISSING)

        system, user = prompts.build_suggest_phonemes_prompt(vibe.strip())
        suggestion = self._call_json(
            "suggest_phonemes", system, user, PHONEME_SUGGESTION_SCHEMA,
            lambda data: parse_payload(
                PhonemeSuggestion, data, expected_key="phonemes", list_key="phonemes",
                provider=self.provider.provider_name,
            ),
        )
        known = ipa.filter_known(suggestion.phonemes)
        dropped = len(suggestion.phonemes) - len(known)
        if dropped:
            logger.info("suggest_phonemes: dropped %d unknown/duplicate symbols", dropped)
        if not known:
            raise LLMSchemaError(
                "None of the suggested phonemes are in the IPA catalog",
                raw_text=", ".join(suggestion.phonemes),
                provider=self.provider.provider_name,
            )
        return known[: prompts.SUGGESTED_PHONEMES_MAX]

    def expand_vibe(self, vibe: str) -> str:
        check_text(vibe, EXPAND_VIBE_MISSING)

        system, user = prompts.build_expand_vibe_prompt(vibe.strip())
        return self._call_text("expand_vibe", system, user)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _call_json(
        self,
        operation: str,
        system: str,
        user: str,
        schema: dict,
        parse: Callable[[object], T],
    ) -> T:
        response: Optional[LLMResponse] = None
        try:
            response = self.provider.generate_json(
                system, user, config=self.config, schema_hint=schema,
            )
            result = parse(response.parsed_json)
        except LLMError as e:
            self._audit(operation, response, error=str(e))
            logger.error("%s failed: %s", operation, e)
            raise
        self._audit(operation, response)
        return result

    def _call_text(self, operation: str, system: str, user: str) -> str:
        try:
            response = self.provider.generate_text(system, user, config=self.config)
        except LLMError as e:
            self._audit(operation, None, error=str(e))
            logger.error("%s failed: %s", operation, e)
            raise
        self._audit(operation, response)
        return response.raw_text.strip()

    def _audit(
        self,
        operation: str,
        response: Optional[LLMResponse],
        error: Optional[str] = None,
    ) -> None:
        if self.audit is not None:
            self.audit.log(
                response,
                operation=operation,
                provider=self.provider.provider_name,
                error=error,
            )
