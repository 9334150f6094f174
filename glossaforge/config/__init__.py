"""Data model, IPA catalog and runtime settings."""

from .models import Conlang, GrammarRules, Phoneme, VocabularyWord, unique_vocabulary
from .settings import GlossaForgeSettings

__all__ = [
    "Conlang",
    "GrammarRules",
    "Phoneme",
    "VocabularyWord",
    "unique_vocabulary",
    "GlossaForgeSettings",
]
