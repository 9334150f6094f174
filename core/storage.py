"""Durable storage slot for the saved-languages collection.

Supports two modes:
- JSON file on the local filesystem (default, survives restarts)
- In-memory slot for tests and throwaway sessions

A store holds exactly one named slot of text; parsing is the caller's job.
"""

from __future__ import annotations

import abc
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)

SLOT_NAME = "glossaforge_saved"
DEFAULT_DATA_DIR = Path.home() / ".glossaforge"


class LibraryStore(abc.ABC):
    """A single named slot holding the serialized saved-languages array."""

    @abc.abstractmethod
    def read(self) -> Optional[str]:
        """Return the slot contents, or None if nothing was ever written."""
        ...

    @abc.abstractmethod
    def write(self, text: str) -> None:
        """Replace the slot contents."""
        ...

    @abc.abstractmethod
    def preserve(self, text: str) -> str:
        """Keep ``text`` outside the slot; return where it went."""
        ...


class InMemoryStore(LibraryStore):
    """Slot kept in process memory."""

    def __init__(self, initial: Optional[str] = None):
        self._text = initial
        self.preserved: List[str] = []

    def read(self) -> Optional[str]:
        return self._text

    def write(self, text: str) -> None:
        self._text = text

    def preserve(self, text: str) -> str:
        self.preserved.append(text)
        return f"memory:{len(self.preserved)}"


class JsonFileStore(LibraryStore):
    """Slot stored as ``<data_dir>/glossaforge_saved.json``."""

    def __init__(self, path: Path):
        self.path = Path(path)

    @classmethod
    def in_dir(cls, data_dir: Optional[str] = None) -> "JsonFileStore":
        base = Path(data_dir).expanduser() if data_dir else DEFAULT_DATA_DIR
        return cls(base / f"{SLOT_NAME}.json")

    def read(self) -> Optional[str]:
        if not self.path.exists():
            return None
        return self.path.read_text(encoding="utf-8")

    def write(self, text: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Write to a sibling temp file then swap, so a crash never leaves half a slot
        fd, tmp = tempfile.mkstemp(
            prefix=f".{SLOT_NAME}.", suffix=".tmp", dir=str(self.path.parent),
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise
        logger.info("Saved library slot: %s (%d bytes)", self.path, len(text.encode("utf-8")))

    def preserve(self, text: str) -> str:
        """Copy ``text`` to ``glossaforge_saved.corrupt-<ms>.json`` beside the slot."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        target = self.path.with_name(f"{SLOT_NAME}.corrupt-{int(time.time() * 1000)}.json")
        target.write_text(text, encoding="utf-8")
        logger.warning("Kept unreadable library slot as %s", target)
        return str(target)
