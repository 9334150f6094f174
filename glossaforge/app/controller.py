"""View controller for the GlossaForge UI.

Holds the transient UI state (current view, edit buffer, assistant chat,
notifications, per-operation loading flags) and turns user intents into
generator / library calls.  Nothing here imports Streamlit; the UI layer
only renders this state and calls the intent methods.

Usage::

    ctrl = ConlangController(generator, ConlangLibrary(store))
    ctrl.bootstrap(share_token=None)
    ctrl.start_new()
    ctrl.set_name("Test")
    ctrl.set_phonemes(["p", "a", "t"])
    ctrl.generate()
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, TypeVar

from core.providers.base import LLMError

from ..config import ipa
from ..config.models import Conlang, GrammarRules
from ..errors import ConlangValidationError, GlossaForgeError, StorageCorruptedError
from ..generation.generator import (
    ASK_QUERY_MISSING,
    DEFAULT_EXTEND_COUNT,
    EXPAND_VIBE_MISSING,
    SUGGEST_VIBE_MISSING,
    TRANSLATE_TEXT_MISSING,
    ConlangGenerator,
    check_core_inputs,
    check_extend_inputs,
    check_text,
)
from ..generation.schemas import Translation
from ..persistence.library import ConlangLibrary
from ..persistence.sharing import (
    build_share_url,
    decode_share_token,
    export_json,
    import_json,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AppView(str, Enum):
    HOME = "home"
    EDITOR = "editor"
    SAVED = "saved"


class Operation(str, Enum):
    """LLM-backed operations, each with its own loading flag."""

    GENERATE = "generate"
    EXTEND = "extend"
    TRANSLATE = "translate"
    ASK = "ask"
    SUGGEST_SOUNDS = "suggest_sounds"
    EXPAND_VIBE = "expand_vibe"


OPERATION_LABELS: Dict[Operation, str] = {
    Operation.GENERATE: "Language generation",
    Operation.EXTEND: "Vocabulary extension",
    Operation.TRANSLATE: "Translation",
    Operation.ASK: "The assistant",
    Operation.SUGGEST_SOUNDS: "Sound suggestion",
    Operation.EXPAND_VIBE: "Vibe expansion",
}


@dataclass
class ChatMessage:
    role: str  # user / assistant
    text: str


@dataclass
class Notification:
    """A dismissible message shown above the current view."""
    message: str
    level: str = "error"  # error / info / success
    details: List[str] = field(default_factory=list)


class ConlangController:
    """Orchestrates UI intents over an injected generator and library."""

    def __init__(self, generator: Optional[ConlangGenerator], library: ConlangLibrary) -> None:
        self.generator = generator
        self.library = library
        self.view = AppView.HOME
        self.current = Conlang.new()
        self.chat: List[ChatMessage] = []
        self.translation: Optional[Translation] = None
        self.notifications: List[Notification] = []
        self.busy: Dict[Operation, bool] = {op: False for op in Operation}
        # Bumped whenever the edit buffer is swapped for another record
        self._buffer_version = 0

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def saved(self) -> List[Conlang]:
        return self.library.all()

    @property
    def buffer_version(self) -> int:
        """Changes whenever a different record is opened in the editor."""
        return self._buffer_version

    def is_busy(self, op: Operation) -> bool:
        return self.busy[op]

    @property
    def any_busy(self) -> bool:
        return any(self.busy.values())

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    def bootstrap(self, share_token: Optional[str] = None) -> None:
        """Load the library, then open a shared record if a token is given."""
        try:
            self.library.load()
        except StorageCorruptedError as e:
            logger.error("Saved library unreadable: %s", e)
            self._notify(
                e.user_message,
                details=["A copy of the unreadable file is kept before anything is saved."],
            )
        except OSError as e:
            logger.error("Saved library could not be opened: %s", e)
            self._notify("Saved languages could not be opened.")
        if share_token:
            self.load_share_token(share_token)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def go_home(self) -> None:
        self.view = AppView.HOME

    def open_library(self) -> None:
        self.view = AppView.SAVED

    def start_new(self) -> None:
        self._replace_buffer(Conlang.new())
        self.view = AppView.EDITOR

    def open_saved(self, conlang_id: str) -> bool:
        record = self.library.get(conlang_id)
        if record is None:
            self._notify("That language is no longer in your library.")
            return False
        self._replace_buffer(record)
        self.view = AppView.EDITOR
        return True

    def load_preset(self, name: str) -> bool:
        """Fill vibe and phonemes from a named preset; other fields are kept."""
        preset = ipa.get_preset(name)
        if preset is None:
            self._notify(f"Unknown preset: {name}")
            return False
        if self.view != AppView.EDITOR:
            self.start_new()
        self.current = self.current.model_copy(
            update={"vibe": preset.vibe, "phonemes": list(preset.phonemes)}
        )
        return True

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def set_name(self, name: str) -> None:
        self.current = self.current.model_copy(update={"name": name})

    def set_vibe(self, vibe: str) -> None:
        self.current = self.current.model_copy(update={"vibe": vibe})

    def set_phonemes(self, phonemes: Iterable[str]) -> None:
        # model_validate runs the dedupe validator; model_copy would not
        data = self.current.model_dump()
        data["phonemes"] = list(phonemes)
        self.current = Conlang.model_validate(data)

    def toggle_phoneme(self, symbol: str) -> None:
        phonemes = list(self.current.phonemes)
        if symbol in phonemes:
            phonemes.remove(symbol)
        else:
            phonemes.append(symbol)
        self.set_phonemes(phonemes)

    def update_grammar(self, **fields: str) -> None:
        data = self.current.grammar.model_dump()
        unknown = set(fields) - set(data)
        if unknown:
            raise ValueError(f"Unknown grammar fields: {sorted(unknown)}")
        data.update(fields)
        self.current = self.current.model_copy(
            update={"grammar": GrammarRules.model_validate(data)}
        )

    # ------------------------------------------------------------------
    # Generation intents
    # ------------------------------------------------------------------

    def generate(self) -> bool:
        c = self.current

        def apply(result) -> None:
            self.current = self.current.model_copy(update={
                "description": result.description,
                "grammar": result.grammar,
                "vocabulary": list(result.vocabulary),
            })
            self._notify(
                f"{self.current.name} is ready with {len(result.vocabulary)} words.",
                level="success",
            )

        return self._run(
            Operation.GENERATE,
            lambda gen: gen.generate_core(c.name, c.vibe, c.phonemes),
            apply,
            check=lambda: check_core_inputs(c.name, c.phonemes),
        )

    def extend_vocabulary(self, theme: str = "general", count: int = DEFAULT_EXTEND_COUNT) -> bool:
        c = self.current

        def apply(words) -> None:
            self.current = self.current.with_vocabulary_appended(words)

        return self._run(
            Operation.EXTEND,
            lambda gen: gen.extend_vocabulary(c, theme=theme, count=count),
            apply,
            check=lambda: check_extend_inputs(c, count),
        )

    def translate(self, text: str) -> bool:
        c = self.current

        def apply(result: Translation) -> None:
            self.translation = result

        return self._run(
            Operation.TRANSLATE,
            lambda gen: gen.translate_text(c, text),
            apply,
            check=lambda: check_text(text, TRANSLATE_TEXT_MISSING),
        )

    def ask(self, query: str) -> bool:
        if not query or not query.strip():
            self._notify(ASK_QUERY_MISSING)
            return False
        if self.busy[Operation.ASK]:
            return self._reject_overlap(Operation.ASK)
        c = self.current
        self.chat.append(ChatMessage(role="user", text=query.strip()))

        def apply(answer: str) -> None:
            self.chat.append(ChatMessage(role="assistant", text=answer))

        return self._run(Operation.ASK, lambda gen: gen.ask_assistant(c, query), apply)

    def suggest_sounds(self) -> bool:
        vibe = self.current.vibe

        def apply(symbols: List[str]) -> None:
            self.set_phonemes(symbols)

        return self._run(
            Operation.SUGGEST_SOUNDS,
            lambda gen: gen.suggest_phonemes(vibe),
            apply,
            check=lambda: check_text(vibe, SUGGEST_VIBE_MISSING),
        )

    def expand_vibe(self) -> bool:
        vibe = self.current.vibe

        def apply(expanded: str) -> None:
            self.set_vibe(expanded)

        return self._run(
            Operation.EXPAND_VIBE,
            lambda gen: gen.expand_vibe(vibe),
            apply,
            check=lambda: check_text(vibe, EXPAND_VIBE_MISSING),
        )

    # ------------------------------------------------------------------
    # Persistence intents
    # ------------------------------------------------------------------

    def save(self) -> bool:
        if not self.current.name.strip():
            self._notify("Please provide a name for your language first.")
            return False
        try:
            self.current = self.library.save(self.current)
        except OSError as e:
            logger.error("Save failed: %s", e)
            self._notify("Your language could not be saved to disk.")
            return False
        self._notify(f"Saved {self.current.name}.", level="success")
        self.view = AppView.SAVED
        return True

    def delete(self, conlang_id: str) -> bool:
        try:
            removed = self.library.delete(conlang_id)
        except OSError as e:
            logger.error("Delete failed: %s", e)
            self._notify("The library could not be updated on disk.")
            return False
        if not removed:
            self._notify("That language is no longer in your library.", level="info")
        return removed

    def import_file(self, text) -> bool:
        try:
            record = import_json(text)
        except GlossaForgeError as e:
            self._notify(e.user_message)
            return False
        self._replace_buffer(record)
        self.view = AppView.EDITOR
        return True

    def export_file(self) -> str:
        return export_json(self.current)

    def share_url(self, base_url: str) -> str:
        return build_share_url(base_url, self.current)

    def load_share_token(self, token: str) -> bool:
        try:
            record = decode_share_token(token)
        except GlossaForgeError as e:
            logger.warning("Rejected share token: %s", e)
            self._notify(e.user_message)
            return False
        self._replace_buffer(record)
        self.view = AppView.EDITOR
        return True

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def dismiss(self, index: int) -> None:
        if 0 <= index < len(self.notifications):
            del self.notifications[index]

    def clear_notifications(self) -> None:
        self.notifications.clear()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _notify(self, message: str, level: str = "error", details: Optional[List[str]] = None) -> None:
        self.notifications.append(Notification(message=message, level=level, details=details or []))

    def _replace_buffer(self, record: Conlang) -> None:
        self.current = record
        self.chat = []
        self.translation = None
        self._buffer_version += 1

    def _reject_overlap(self, op: Operation) -> bool:
        logger.info("Rejected overlapping %s request", op.value)
        self._notify(f"{OPERATION_LABELS[op]} is already in progress.", level="info")
        return False

    def _run(
        self,
        op: Operation,
        call: Callable[[ConlangGenerator], T],
        apply: Callable[[T], Any],
        check: Optional[Callable[[], None]] = None,
    ) -> bool:
        """Run one LLM-backed operation and merge its result.

        ``check`` validates the user input before anything else, so a
        missing name is reported even when no engine is configured.
        Returns True only when the result was merged into the buffer.
        """
        if self.busy[op]:
            return self._reject_overlap(op)
        if check is not None:
            try:
                check()
            except ConlangValidationError as e:
                self._notify(e.user_message)
                return False
        if self.generator is None:
            self._notify("No language engine is configured. Add an API key in the sidebar.")
            return False

        version = self._buffer_version
        self.busy[op] = True
        try:
            result = call(self.generator)
        except ConlangValidationError as e:
            self._notify(e.user_message)
            return False
        except LLMError as e:
            self._notify(e.user_message, details=[str(e)])
            return False
        except GlossaForgeError as e:
            self._notify(e.user_message)
            return False
        except Exception as e:
            logger.exception("%s failed unexpectedly", op.value)
            self._notify(f"{OPERATION_LABELS[op]} failed unexpectedly.", details=[str(e)])
            return False
        finally:
            self.busy[op] = False

        if version != self._buffer_version:
            logger.info("Discarding %s result for a record that is no longer open", op.value)
            return False
        apply(result)
        return True
