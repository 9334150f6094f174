"""Prompt templates for every LLM-backed conlang operation.

All prompt constants are module-level so the UI can show them.  Each
``build_*`` function returns a ``(system_prompt, user_prompt)`` pair; the
full language context is rebuilt on every call since providers hold no
conversation state.
"""

from __future__ import annotations

import json
from typing import List, Tuple

from ..config.models import Conlang

CORE_VOCABULARY_SIZE = 15
ASSISTANT_WORD_LIMIT = 150
SUGGESTED_PHONEMES_MIN = 15
SUGGESTED_PHONEMES_MAX = 25
DEFAULT_VIBE = "A unique constructed language"

# ------------------------------------------------------------------
# System prompts
# ------------------------------------------------------------------

CONLANGER_SYSTEM_PROMPT = """\
You are an expert conlanger (constructed-language designer).
You design languages that are internally consistent: every word obeys the
language's phonetic inventory and the phonotactics implied by earlier words.
"""

CONSULTANT_SYSTEM_PROMPT = """\
You are a professional linguistic consultant helping a conlanger.
Give concise, helpful and linguistically sound answers or suggestions.
"""

PHONOLOGIST_SYSTEM_PROMPT = """\
You are a phonologist who maps aesthetic descriptions onto sound inventories.
Use only standard IPA symbols.
"""

WRITER_SYSTEM_PROMPT = """\
You are a worldbuilding writer who turns short mood notes about a language
into vivid, concrete aesthetic direction for a conlanger.
"""

# ------------------------------------------------------------------
# User message templates  (the {variables} are filled at runtime)
# ------------------------------------------------------------------

CORE_PROMPT_TEMPLATE = """\
Create a foundation for a new language called "{name}".
Aesthetic Direction: {vibe}
Allowed Phonetic Inventory (STRICTLY use only these IPA symbols): {phonemes}

Requirements:
1. Write a 2-3 sentence description of the language's vibe.
2. Define grammar: Word Order (VSO, SOV, SVO, etc.), Pluralization rules, Tense rules, and Adjective placement.
3. Generate {count} common vocabulary words. Ensure the 'native' and 'pronunciation' strings ONLY use the allowed IPA symbols provided above.
4. Give every word a short unique 'id'.

Return a JSON object with this exact structure:
{{
  "description": "...",
  "grammar": {{"wordOrder": "...", "pluralRule": "...", "tenseRule": "...", "adjectivePlacement": "..."}},
  "vocabulary": [{{"id": "...", "native": "...", "meaning": "...", "pronunciation": "..."}}]
}}
"""

EXTEND_PROMPT_TEMPLATE = """\
Given the conlang "{name}" with the following characteristics:
Vibe: {description}
Phonemes: {phonemes}
Grammar: {grammar}
Existing Words: {existing}

Generate {count} NEW unique vocabulary words on the theme: {theme}.
Do not repeat any existing meaning.
Ensure 'native' and 'pronunciation' strictly follow the phonetic inventory and phonotactics implied by existing words.
Use ids that are not in this list: {existing_ids}

Return a JSON object with this exact structure:
{{"vocabulary": [{{"id": "...", "native": "...", "meaning": "...", "pronunciation": "..."}}]}}
"""

TRANSLATE_PROMPT_TEMPLATE = """\
Translate the following text into the conlang "{name}".
Phonemes: {phonemes}
Grammar: {grammar}
Dictionary:
{dictionary}

Text: "{text}"

Rules:
- Respect the stated word order ({word_order}) and the plural, tense and adjective rules.
- Prefer dictionary words. If a needed word is missing, coin one using ONLY the phonemes above.
- The breakdown explains each word (gloss and any newly coined word).

Return a JSON object with this exact structure:
{{"translation": "...", "pronunciation": "...", "breakdown": "..."}}
"""

ASSISTANT_PROMPT_TEMPLATE = """\
Language Context:
Name: {name}
Description: {description}
Phonemes: {phonemes}
Grammar: {grammar}
Vocabulary size: {vocab_size} words

User Query: "{query}"

Keep the answer under {word_limit} words.
"""

SUGGEST_PHONEMES_TEMPLATE = """\
Suggest a phoneme inventory of {min_count} to {max_count} IPA symbols for a constructed language with this vibe:
{vibe}

Include both consonants and vowels. One symbol per entry, no slashes or brackets.

Return a JSON object with this exact structure:
{{"phonemes": ["...", "..."]}}
"""

EXPAND_VIBE_TEMPLATE = """\
Expand this short description of a language's feel into 3-4 evocative sentences
covering sound texture, rhythm, and the culture that speaks it:
"{vibe}"

Reply with the expanded description only.
"""


# ------------------------------------------------------------------
# Context helpers
# ------------------------------------------------------------------

def _phoneme_list(conlang: Conlang) -> str:
    return ", ".join(conlang.phonemes)


def _grammar_json(conlang: Conlang) -> str:
    return json.dumps(conlang.grammar.to_wire(), ensure_ascii=False)


def _dictionary_block(conlang: Conlang) -> str:
    if not conlang.vocabulary:
        return "(empty)"
    return "\n".join(
        f"- {w.native} /{w.pronunciation}/ = {w.meaning}" for w in conlang.vocabulary
    )


# ------------------------------------------------------------------
# Public builders
# ------------------------------------------------------------------

def build_core_prompt(name: str, vibe: str, phonemes: List[str]) -> Tuple[str, str]:
    user = CORE_PROMPT_TEMPLATE.format(
        name=name,
        vibe=vibe.strip() or DEFAULT_VIBE,
        phonemes=", ".join(phonemes),
        count=CORE_VOCABULARY_SIZE,
    )
    return CONLANGER_SYSTEM_PROMPT, user


def build_extend_prompt(conlang: Conlang, theme: str, count: int) -> Tuple[str, str]:
    user = EXTEND_PROMPT_TEMPLATE.format(
        name=conlang.name,
        description=conlang.description or conlang.vibe,
        phonemes=_phoneme_list(conlang),
        grammar=_grammar_json(conlang),
        existing=", ".join(w.meaning for w in conlang.vocabulary) or "(none)",
        existing_ids=", ".join(conlang.vocabulary_ids()) or "(none)",
        count=count,
        theme=theme.strip() or "general",
    )
    return CONLANGER_SYSTEM_PROMPT, user


def build_translate_prompt(conlang: Conlang, text: str) -> Tuple[str, str]:
    user = TRANSLATE_PROMPT_TEMPLATE.format(
        name=conlang.name,
        phonemes=_phoneme_list(conlang),
        grammar=_grammar_json(conlang),
        dictionary=_dictionary_block(conlang),
        text=text,
        word_order=conlang.grammar.word_order or "as described",
    )
    return CONLANGER_SYSTEM_PROMPT, user


def build_assistant_prompt(conlang: Conlang, query: str) -> Tuple[str, str]:
    user = ASSISTANT_PROMPT_TEMPLATE.format(
        name=conlang.name,
        description=conlang.description or conlang.vibe,
        phonemes=_phoneme_list(conlang),
        grammar=_grammar_json(conlang),
        vocab_size=len(conlang.vocabulary),
        query=query,
        word_limit=ASSISTANT_WORD_LIMIT,
    )
    return CONSULTANT_SYSTEM_PROMPT, user


def build_suggest_phonemes_prompt(vibe: str) -> Tuple[str, str]:
    user = SUGGEST_PHONEMES_TEMPLATE.format(
        vibe=vibe,
        min_count=SUGGESTED_PHONEMES_MIN,
        max_count=SUGGESTED_PHONEMES_MAX,
    )
    return PHONOLOGIST_SYSTEM_PROMPT, user


def build_expand_vibe_prompt(vibe: str) -> Tuple[str, str]:
    return WRITER_SYSTEM_PROMPT, EXPAND_VIBE_TEMPLATE.format(vibe=vibe)
