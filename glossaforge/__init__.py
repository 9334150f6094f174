"""GlossaForge: constructed-language builder backed by a hosted LLM."""

__version__ = "0.3.0"
