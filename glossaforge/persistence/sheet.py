"""Markdown reference sheet for a conlang (phonology, grammar, lexicon)."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List

from ..config import ipa
from ..config.models import Conlang

_CATEGORY_TITLES: Dict[str, str] = {
    "pulmonic": "Consonants",
    "non_pulmonic": "Non-pulmonic",
    "vowel": "Vowels",
    "ext_ipa": "Extended",
    "diacritic": "Diacritics & modifiers",
    "tone_stress": "Stress & tone",
}


def _cell(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", " ")


def render_markdown(conlang: Conlang) -> str:
    """Generate a human-readable Markdown reference sheet for *conlang*."""
    lines: List[str] = []

    lines.append(f"# {conlang.name or 'Untitled language'}")
    lines.append("")
    if conlang.description:
        lines.append(conlang.description)
        lines.append("")
    if conlang.vibe and conlang.vibe != conlang.description:
        lines.append(f"> {conlang.vibe}")
        lines.append("")
    if conlang.created_at is not None:
        created = datetime.fromtimestamp(conlang.created_at / 1000, tz=timezone.utc)
        lines.append(f"*Created {created:%Y-%m-%d}*")
        lines.append("")

    # Phonology, grouped by catalog category
    lines.append("## Phonology")
    lines.append("")
    if conlang.phonemes:
        groups: Dict[str, List[str]] = {}
        for symbol in conlang.phonemes:
            entry = ipa.lookup(symbol)
            title = _CATEGORY_TITLES.get(entry.category, "Other") if entry else "Other"
            groups.setdefault(title, []).append(symbol)
        for title in [*_CATEGORY_TITLES.values(), "Other"]:
            if title in groups:
                lines.append(f"- **{title}**: {' '.join(groups[title])}")
    else:
        lines.append("*No phonemes selected.*")
    lines.append("")

    lines.append("## Grammar")
    lines.append("")
    grammar = conlang.grammar
    lines.append(f"- **Word order**: {grammar.word_order or '-'}")
    lines.append(f"- **Plurals**: {grammar.plural_rule or '-'}")
    lines.append(f"- **Tense**: {grammar.tense_rule or '-'}")
    lines.append(f"- **Adjectives**: {grammar.adjective_placement or '-'}")
    lines.append("")

    lines.append(f"## Lexicon ({len(conlang.vocabulary)} words)")
    lines.append("")
    if conlang.vocabulary:
        lines.append("| Native | Pronunciation | Meaning |")
        lines.append("|--------|---------------|---------|")
        for word in sorted(conlang.vocabulary, key=lambda w: w.meaning.lower()):
            lines.append(
                f"| {_cell(word.native)} | /{_cell(word.pronunciation)}/ | {_cell(word.meaning)} |"
            )
    else:
        lines.append("*No words yet.*")
    lines.append("")

    return "\n".join(lines)


def sheet_filename(conlang: Conlang) -> str:
    stem = "".join(ch if ch.isalnum() else "_" for ch in conlang.name.strip()).strip("_")
    return f"{stem or 'conlang'}_reference.md"
