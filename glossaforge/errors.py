"""Application-level exceptions (everything that is not a provider failure)."""

from __future__ import annotations


class GlossaForgeError(Exception):
    """Base class for GlossaForge errors carrying a user-facing message."""

    @property
    def user_message(self) -> str:
        return str(self)


class ConlangValidationError(GlossaForgeError):
    """User input is incomplete; raised before any LLM call is made."""


class ConlangImportError(GlossaForgeError):
    """An imported file is not a valid conlang record."""


class ShareTokenError(GlossaForgeError):
    """A share token is malformed, truncated or does not decode to a record."""


class StorageCorruptedError(GlossaForgeError):
    """The saved-languages slot exists but cannot be parsed."""


class SettingsError(GlossaForgeError):
    """An environment variable holds a value the settings model rejects."""
