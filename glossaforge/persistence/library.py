"""Saved-languages library.

An ordered collection of ``Conlang`` records keyed by ``id``, backed by a
single ``LibraryStore`` slot.  Every mutation rewrites the whole slot.
"""
from __future__ import annotations

import json
import logging
from typing import List, Optional

from pydantic import ValidationError

from core.storage import LibraryStore

from ..config.models import Conlang
from ..errors import StorageCorruptedError

logger = logging.getLogger(__name__)


class ConlangLibrary:
    """Insert-or-replace / remove-by-id collection of saved languages."""

    def __init__(self, store: LibraryStore) -> None:
        self.store = store
        self._items: List[Conlang] = []
        # Raw text of a slot that failed to load; set aside before the next rewrite
        self._unreadable: Optional[str] = None

    def load(self) -> List[Conlang]:
        """Read the slot into memory.

        Raises
        ------
        StorageCorruptedError
            If the slot holds anything but a JSON array of records.  The
            in-memory collection is left untouched in that case, and the
            slot text is copied aside by the store before the next save
            or delete overwrites it.
        """
        text = self.store.read()
        if text is None or not text.strip():
            self._items = []
            self._unreadable = None
            return self.all()
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            self._unreadable = text
            raise StorageCorruptedError(
                f"Saved languages could not be read (invalid JSON at line {e.lineno})."
            ) from e
        if not isinstance(data, list):
            self._unreadable = text
            raise StorageCorruptedError("Saved languages could not be read (expected a list).")
        try:
            items = [Conlang.model_validate(entry) for entry in data]
        except ValidationError as e:
            self._unreadable = text
            raise StorageCorruptedError(
                f"Saved languages could not be read ({e.error_count()} invalid fields)."
            ) from e
        self._items = items
        self._unreadable = None
        logger.info("Loaded %d saved languages", len(items))
        return self.all()

    def all(self) -> List[Conlang]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def get(self, conlang_id: str) -> Optional[Conlang]:
        for item in self._items:
            if item.id == conlang_id:
                return item
        return None

    def save(self, conlang: Conlang) -> Conlang:
        """Insert or replace ``conlang`` and persist; return the stored record.

        Identity (``id``, ``created_at``) is assigned on first save.  A
        record whose id is already present replaces that entry in place;
        otherwise it goes to the front of the collection.
        """
        record = conlang.ensure_identity()
        for i, item in enumerate(self._items):
            if item.id == record.id:
                self._items[i] = record
                break
        else:
            self._items.insert(0, record)
        self._flush()
        logger.info("Saved language %r (%s)", record.name, record.id)
        return record

    def delete(self, conlang_id: str) -> bool:
        remaining = [item for item in self._items if item.id != conlang_id]
        if len(remaining) == len(self._items):
            return False
        self._items = remaining
        self._flush()
        logger.info("Deleted language %s", conlang_id)
        return True

    @property
    def has_unreadable_slot(self) -> bool:
        return self._unreadable is not None

    def _flush(self) -> None:
        if self._unreadable is not None:
            location = self.store.preserve(self._unreadable)
            logger.warning("Unreadable saved languages kept at %s", location)
            self._unreadable = None
        payload = [item.to_wire() for item in self._items]
        self.store.write(json.dumps(payload, ensure_ascii=False))
