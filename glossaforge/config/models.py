"""
GlossaForge - Data Models
=========================

Defines the Pydantic v2 models for one constructed language:

  Reference : Phoneme
  Record    : VocabularyWord, GrammarRules, Conlang

Convention
----------
- Python attributes are snake_case; the JSON wire form is camelCase
  (``wordOrder``, ``createdAt`` ...) so files exported by the browser
  version of GlossaForge load unchanged.  Both spellings are accepted.
- ``VocabularyWord`` is frozen: words are appended or replaced, never
  edited in place.
"""

from __future__ import annotations

import secrets
import time
from typing import Any, Dict, Iterable, List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

_ID_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"
ID_LENGTH = 9
DEFAULT_WORD_ORDER = "SVO"


def new_conlang_id() -> str:
    """Return a fresh 9-character base-36 record id."""
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(ID_LENGTH))


def now_ms() -> int:
    return int(time.time() * 1000)


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> Dict[str, Any]:
        """Dump with camelCase keys, JSON-compatible values."""
        return self.model_dump(by_alias=True, mode="json")


# ============================================================
# Reference data
# ============================================================


class Phoneme(_WireModel):
    """One IPA glyph from the inventory catalog."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    category: str
    description: str
    example: str = ""


# ============================================================
# Conlang record
# ============================================================


class VocabularyWord(_WireModel):
    """A single lexicon entry.

    Attributes:
        id:            Unique within one Conlang.
        native:        Surface form in the language's own phonemes.
        meaning:       English gloss.
        pronunciation: Phonemic transcription.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    native: str
    meaning: str
    pronunciation: str

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v: Any) -> Any:
        # Models occasionally number words with bare integers
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(int(v))
        return v


class GrammarRules(_WireModel):
    """Four free-text grammar descriptions. Not a formal grammar."""

    word_order: str
    plural_rule: str
    tense_rule: str
    adjective_placement: str

    @classmethod
    def default(cls) -> "GrammarRules":
        return cls(
            word_order=DEFAULT_WORD_ORDER,
            plural_rule="",
            tense_rule="",
            adjective_placement="",
        )


def unique_vocabulary(
    words: Iterable[VocabularyWord],
    taken: Iterable[str] = (),
) -> List[VocabularyWord]:
    """Return ``words`` with blank or colliding ids reassigned.

    An id collides when it is in ``taken`` or was already used by an
    earlier word of ``words``.  Reassigned ids keep the original as a
    prefix (``"3"`` becomes ``"3-2"``, ``"3-3"`` ...).
    """
    seen: Set[str] = set(taken)
    result: List[VocabularyWord] = []
    for word in words:
        word_id = word.id.strip()
        if not word_id or word_id in seen:
            base = word_id or "w"
            n = 2
            while f"{base}-{n}" in seen:
                n += 1
            word_id = f"{base}-{n}"
        if word_id != word.id:
            word = word.model_copy(update={"id": word_id})
        seen.add(word_id)
        result.append(word)
    return result


class Conlang(_WireModel):
    """The aggregate root: one constructed language.

    ``id`` and ``created_at`` stay ``None`` until the record is first
    saved; after that they never change.
    """

    id: Optional[str] = None
    name: str = ""
    description: str = ""
    phonemes: List[str] = Field(default_factory=list)
    vibe: str = ""
    grammar: GrammarRules = Field(default_factory=GrammarRules.default)
    vocabulary: List[VocabularyWord] = Field(default_factory=list)
    created_at: Optional[int] = None

    # -- validators ----------------------------------------------------------

    @field_validator("phonemes", mode="after")
    @classmethod
    def _dedupe_phonemes(cls, v: List[str]) -> List[str]:
        out: List[str] = []
        for symbol in v:
            if symbol and symbol not in out:
                out.append(symbol)
        return out

    @field_validator("vocabulary", mode="after")
    @classmethod
    def _unique_word_ids(cls, v: List[VocabularyWord]) -> List[VocabularyWord]:
        # Files, share links and old library slots may repeat word ids
        return unique_vocabulary(v)

    @field_validator("created_at", mode="before")
    @classmethod
    def _coerce_timestamp(cls, v: Any) -> Any:
        if isinstance(v, float):
            return int(v)
        return v

    # -- helpers -------------------------------------------------------------

    @classmethod
    def new(cls) -> "Conlang":
        """Empty record, as the editor opens it."""
        return cls()

    @property
    def is_saved(self) -> bool:
        return self.id is not None

    def ensure_identity(self, timestamp_ms: Optional[int] = None) -> "Conlang":
        """Return a copy with ``id``/``created_at`` filled in when missing."""
        update: Dict[str, Any] = {}
        if not self.id:
            update["id"] = new_conlang_id()
        if self.created_at is None:
            update["created_at"] = timestamp_ms if timestamp_ms is not None else now_ms()
        return self.model_copy(update=update) if update else self

    def with_vocabulary_appended(self, words: Iterable[VocabularyWord]) -> "Conlang":
        """Return a copy with ``words`` appended and all ids kept unique."""
        added = unique_vocabulary(words, taken=(w.id for w in self.vocabulary))
        return self.model_copy(update={"vocabulary": [*self.vocabulary, *added]})

    def vocabulary_ids(self) -> List[str]:
        return [w.id for w in self.vocabulary]
