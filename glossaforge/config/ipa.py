"""
GlossaForge - IPA Inventory Catalog
===================================

Static reference tables for the phoneme picker and for validating
phoneme suggestions coming back from the LLM.

Six sections, in display order:

* **PULMONIC_CONSONANTS** -- the main IPA consonant chart.
* **NON_PULMONIC** -- clicks, implosives and ejectives.
* **VOWELS** -- the IPA vowel trapezoid.
* **EXT_IPA** -- extIPA symbols and rare extensions.
* **DIACRITICS** -- diacritics and modifier letters.
* **TONES_STRESS** -- stress, length and tone marks.

Plus **PRESETS**: named starting points (vibe text + phoneme set).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from .models import Phoneme


def _section(category: str, rows: List[Tuple[str, str, str]]) -> List[Phoneme]:
    return [
        Phoneme(symbol=s, category=category, description=d, example=e)
        for s, d, e in rows
    ]


# ====================================================================
# 1.  Pulmonic consonants
# ====================================================================

PULMONIC_CONSONANTS: List[Phoneme] = _section("pulmonic", [
    # plosives
    ("p", "Voiceless bilabial plosive", "spin"),
    ("b", "Voiced bilabial plosive", "bed"),
    ("t", "Voiceless alveolar plosive", "stop"),
    ("d", "Voiced alveolar plosive", "dog"),
    ("ʈ", "Voiceless retroflex plosive", "Hindi ṭāl"),
    ("ɖ", "Voiced retroflex plosive", "Hindi ḍāl"),
    ("c", "Voiceless palatal plosive", "Hungarian tyúk"),
    ("ɟ", "Voiced palatal plosive", "Hungarian gyár"),
    ("k", "Voiceless velar plosive", "skin"),
    ("g", "Voiced velar plosive", "go"),
    ("q", "Voiceless uvular plosive", "Arabic qalb"),
    ("ɢ", "Voiced uvular plosive", "Inuktitut"),
    ("ʔ", "Glottal stop", "uh-oh"),
    # nasals
    ("m", "Bilabial nasal", "man"),
    ("ɱ", "Labiodental nasal", "symphony"),
    ("n", "Alveolar nasal", "no"),
    ("ɳ", "Retroflex nasal", "Tamil kaṇ"),
    ("ɲ", "Palatal nasal", "Spanish año"),
    ("ŋ", "Velar nasal", "sing"),
    ("ɴ", "Uvular nasal", "Japanese hon"),
    # trills, taps
    ("ʙ", "Bilabial trill", "Nias"),
    ("r", "Alveolar trill", "Spanish perro"),
    ("ʀ", "Uvular trill", "Standard German rot"),
    ("ⱱ", "Labiodental flap", "Mono"),
    ("ɾ", "Alveolar tap", "Spanish pero"),
    ("ɽ", "Retroflex flap", "Hindi baṛā"),
    # fricatives
    ("ɸ", "Voiceless bilabial fricative", "Japanese fuji"),
    ("β", "Voiced bilabial fricative", "Spanish haba"),
    ("f", "Voiceless labiodental fricative", "fan"),
    ("v", "Voiced labiodental fricative", "van"),
    ("θ", "Voiceless dental fricative", "thin"),
    ("ð", "Voiced dental fricative", "this"),
    ("s", "Voiceless alveolar fricative", "sea"),
    ("z", "Voiced alveolar fricative", "zoo"),
    ("ʃ", "Voiceless postalveolar fricative", "ship"),
    ("ʒ", "Voiced postalveolar fricative", "measure"),
    ("ʂ", "Voiceless retroflex fricative", "Mandarin shì"),
    ("ʐ", "Voiced retroflex fricative", "Russian жук"),
    ("ç", "Voiceless palatal fricative", "German ich"),
    ("ʝ", "Voiced palatal fricative", "Spanish mayo"),
    ("x", "Voiceless velar fricative", "Scottish loch"),
    ("ɣ", "Voiced velar fricative", "Spanish lago"),
    ("χ", "Voiceless uvular fricative", "German Bach"),
    ("ʁ", "Voiced uvular fricative", "French rouge"),
    ("ħ", "Voiceless pharyngeal fricative", "Arabic ḥamām"),
    ("ʕ", "Voiced pharyngeal fricative", "Arabic ʿayn"),
    ("h", "Voiceless glottal fricative", "hat"),
    ("ɦ", "Voiced glottal fricative", "ahead"),
    # lateral fricatives
    ("ɬ", "Voiceless alveolar lateral fricative", "Welsh llan"),
    ("ɮ", "Voiced alveolar lateral fricative", "Zulu dla"),
    # approximants
    ("ʋ", "Labiodental approximant", "Hindi vāla"),
    ("ɹ", "Alveolar approximant", "red"),
    ("ɻ", "Retroflex approximant", "Tamil ḻ"),
    ("j", "Palatal approximant", "yes"),
    ("ɰ", "Velar approximant", "Spanish agua"),
    ("w", "Labial-velar approximant", "we"),
    # lateral approximants
    ("l", "Alveolar lateral approximant", "leaf"),
    ("ɭ", "Retroflex lateral approximant", "Tamil ḷ"),
    ("ʎ", "Palatal lateral approximant", "Italian figlio"),
    ("ʟ", "Velar lateral approximant", "Mid-Waghi"),
])

# ====================================================================
# 2.  Non-pulmonic consonants
# ====================================================================

NON_PULMONIC: List[Phoneme] = _section("non_pulmonic", [
    ("ʘ", "Bilabial click", "!Xóõ"),
    ("ǀ", "Dental click", "tsk-tsk"),
    ("ǃ", "Postalveolar click", "Zulu q"),
    ("ǂ", "Palatoalveolar click", "Khoekhoe"),
    ("ǁ", "Alveolar lateral click", "Xhosa x"),
    ("ɓ", "Bilabial implosive", "Swahili bwana"),
    ("ɗ", "Alveolar implosive", "Vietnamese đi"),
    ("ʄ", "Palatal implosive", "Sindhi"),
    ("ɠ", "Velar implosive", "Sindhi"),
    ("ʛ", "Uvular implosive", "Mam"),
    ("pʼ", "Bilabial ejective", "Georgian"),
    ("tʼ", "Alveolar ejective", "Amharic"),
    ("kʼ", "Velar ejective", "Navajo"),
    ("sʼ", "Alveolar fricative ejective", "Amharic"),
])

# ====================================================================
# 3.  Vowels
# ====================================================================

VOWELS: List[Phoneme] = _section("vowel", [
    ("i", "Close front unrounded", "see"),
    ("y", "Close front rounded", "French tu"),
    ("ɨ", "Close central unrounded", "Russian ты"),
    ("ʉ", "Close central rounded", "Australian goose"),
    ("ɯ", "Close back unrounded", "Japanese kuki"),
    ("u", "Close back rounded", "food"),
    ("ɪ", "Near-close front unrounded", "sit"),
    ("ʏ", "Near-close front rounded", "German hübsch"),
    ("ʊ", "Near-close back rounded", "foot"),
    ("e", "Close-mid front unrounded", "French été"),
    ("ø", "Close-mid front rounded", "French peu"),
    ("ɘ", "Close-mid central unrounded", "Paicî"),
    ("ɵ", "Close-mid central rounded", "Swedish full"),
    ("ɤ", "Close-mid back unrounded", "Mandarin gē"),
    ("o", "Close-mid back rounded", "French eau"),
    ("ə", "Mid central (schwa)", "about"),
    ("ɛ", "Open-mid front unrounded", "bed"),
    ("œ", "Open-mid front rounded", "French œuf"),
    ("ɜ", "Open-mid central unrounded", "nurse"),
    ("ɞ", "Open-mid central rounded", "Irish English"),
    ("ʌ", "Open-mid back unrounded", "cup"),
    ("ɔ", "Open-mid back rounded", "thought"),
    ("æ", "Near-open front unrounded", "cat"),
    ("ɐ", "Near-open central", "German besser"),
    ("a", "Open front unrounded", "Spanish casa"),
    ("ɶ", "Open front rounded", "Danish"),
    ("ɑ", "Open back unrounded", "father"),
    ("ɒ", "Open back rounded", "British lot"),
])

# ====================================================================
# 4.  extIPA & rare extensions
# ====================================================================

EXT_IPA: List[Phoneme] = _section("ext_ipa", [
    ("ʍ", "Voiceless labial-velar fricative", "which (some accents)"),
    ("ɥ", "Labial-palatal approximant", "French huit"),
    ("ʜ", "Voiceless epiglottal fricative", "Agul"),
    ("ʢ", "Voiced epiglottal fricative", "Agul"),
    ("ʡ", "Epiglottal plosive", "Archi"),
    ("ɕ", "Voiceless alveolo-palatal fricative", "Mandarin xī"),
    ("ʑ", "Voiced alveolo-palatal fricative", "Polish źle"),
    ("ɺ", "Alveolar lateral flap", "Japanese (variant)"),
    ("ɧ", "Sj-sound", "Swedish sjö"),
    ("ʦ", "Voiceless alveolar affricate", "German Zeit"),
    ("ʣ", "Voiced alveolar affricate", "Italian zero"),
    ("ʧ", "Voiceless postalveolar affricate", "church"),
    ("ʤ", "Voiced postalveolar affricate", "judge"),
    ("ʨ", "Voiceless alveolo-palatal affricate", "Mandarin jī"),
    ("ʥ", "Voiced alveolo-palatal affricate", "Polish dźwięk"),
    ("ꞎ", "Retroflex lateral fricative", "Toda"),
    ("ʪ", "Voiceless lateral fricative (extIPA)", "lisp"),
    ("ʫ", "Voiced lateral fricative (extIPA)", "lisp"),
    ("ʩ", "Velopharyngeal fricative", "disordered speech"),
])

# ====================================================================
# 5.  Diacritics & modifiers
# ====================================================================

DIACRITICS: List[Phoneme] = _section("diacritic", [
    ("ʰ", "Aspirated", "pʰ in pin"),
    ("ʷ", "Labialized", "kʷ in queen"),
    ("ʲ", "Palatalized", "Russian tʲ"),
    ("ˠ", "Velarized", "dark ɫ"),
    ("ˤ", "Pharyngealized", "Arabic emphatics"),
    ("ⁿ", "Nasal release", "dⁿ"),
    ("ˡ", "Lateral release", "dˡ"),
    ("̃", "Nasalized", "French bon"),
    ("̥", "Voiceless", "n̥"),
    ("̬", "Voiced", "s̬"),
    ("̩", "Syllabic", "button n̩"),
    ("̯", "Non-syllabic", "i̯ in diphthongs"),
    ("̪", "Dental", "t̪"),
    ("̺", "Apical", "t̺"),
    ("̻", "Laminal", "t̻"),
    ("̈", "Centralized", "ë"),
    ("̚", "No audible release", "stop̚"),
    ("ʼ", "Ejective", "kʼ"),
])

# ====================================================================
# 6.  Stress & tones
# ====================================================================

TONES_STRESS: List[Phoneme] = _section("tone_stress", [
    ("ˈ", "Primary stress", "ˈfoʊnəˌtɪk"),
    ("ˌ", "Secondary stress", "ˌfoʊnəˈtɪʃən"),
    ("ː", "Long", "eː"),
    ("ˑ", "Half-long", "eˑ"),
    (".", "Syllable break", "ɹi.ækt"),
    ("˥", "Extra-high tone", "Cantonese"),
    ("˦", "High tone", "Cantonese"),
    ("˧", "Mid tone", "Cantonese"),
    ("˨", "Low tone", "Cantonese"),
    ("˩", "Extra-low tone", "Cantonese"),
    ("↗", "Global rise", "intonation"),
    ("↘", "Global fall", "intonation"),
])


SECTIONS: List[Tuple[str, List[Phoneme]]] = [
    ("Pulmonic Consonants", PULMONIC_CONSONANTS),
    ("Non-Pulmonic & Clicks", NON_PULMONIC),
    ("Vowels", VOWELS),
    ("extIPA & Rare Extensions", EXT_IPA),
    ("Diacritics & Modifiers", DIACRITICS),
    ("Stress & Tones", TONES_STRESS),
]

_BY_SYMBOL: Dict[str, Phoneme] = {
    p.symbol: p for _title, items in SECTIONS for p in items
}


def all_phonemes() -> List[Phoneme]:
    """Every catalog entry, in display order."""
    return [p for _title, items in SECTIONS for p in items]


def catalog_symbols() -> FrozenSet[str]:
    return frozenset(_BY_SYMBOL)


def phonemes_by_category() -> Dict[str, List[Phoneme]]:
    """Section title -> entries, in display order."""
    return {title: list(items) for title, items in SECTIONS}


def lookup(symbol: str) -> Optional[Phoneme]:
    return _BY_SYMBOL.get(symbol)


def filter_known(symbols: Iterable[str]) -> List[str]:
    """Keep catalog symbols only, deduplicated, first occurrence wins."""
    out: List[str] = []
    for raw in symbols:
        symbol = str(raw).strip()
        if symbol in _BY_SYMBOL and symbol not in out:
            out.append(symbol)
    return out


# ====================================================================
# 7.  Presets
# ====================================================================

@dataclass(frozen=True)
class Preset:
    """A named starting point for a new language."""

    name: str
    vibe: str
    phonemes: Tuple[str, ...]


PRESETS: List[Preset] = [
    Preset(
        name="Elvish Melodic",
        vibe="Flowing, liquid and vowel-rich, like wind through silver leaves. Soft consonants, no harsh stops at word ends.",
        phonemes=("l", "r", "n", "m", "s", "θ", "v", "w", "j", "t", "k", "a", "e", "i", "o", "u", "ː"),
    ),
    Preset(
        name="Harsh Mountain Tongue",
        vibe="Guttural and clipped, spoken by clans in cold high passes. Heavy clusters, uvulars and ejectives.",
        phonemes=("k", "q", "g", "x", "χ", "ʁ", "ʔ", "kʼ", "tʼ", "t", "d", "r", "z", "ʃ", "a", "ɔ", "u", "ə"),
    ),
    Preset(
        name="Desert Trade Pidgin",
        vibe="Simple, practical and easy to shout across a bazaar. Open syllables, few vowels, pharyngeal colour.",
        phonemes=("b", "t", "d", "k", "s", "ʃ", "ħ", "ʕ", "h", "m", "n", "l", "r", "w", "j", "a", "i", "u"),
    ),
    Preset(
        name="Click Chorus",
        vibe="Percussive and rhythmic, with clicks used as a second drum line under sung vowels and tones.",
        phonemes=("ǀ", "ǃ", "ǁ", "ʘ", "k", "g", "ŋ", "m", "n", "h", "a", "e", "i", "o", "u", "˥", "˩"),
    ),
]


def get_preset(name: str) -> Optional[Preset]:
    for preset in PRESETS:
        if preset.name == name:
            return preset
    return None
