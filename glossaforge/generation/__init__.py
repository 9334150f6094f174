"""Generation protocol: prompts, response schemas and the generator client."""

from .generator import ConlangGenerator
from .schemas import CoreGeneration, PhonemeSuggestion, Translation, VocabularyBatch

__all__ = [
    "ConlangGenerator",
    "CoreGeneration",
    "PhonemeSuggestion",
    "Translation",
    "VocabularyBatch",
]
