"""Tests for the UI view controller: intents, overlap policy and stale results."""
from __future__ import annotations

import pytest

from core.providers.base import LLMTimeoutError
from core.storage import InMemoryStore
from glossaforge.app.controller import AppView, ConlangController, Operation
from glossaforge.config.models import Conlang
from glossaforge.generation.generator import ConlangGenerator
from glossaforge.persistence.library import ConlangLibrary
from glossaforge.persistence.sharing import export_json, token_from_url


def _controller(provider, library=None) -> ConlangController:
    library = library or ConlangLibrary(InMemoryStore())
    ctrl = ConlangController(ConlangGenerator(provider), library)
    ctrl.bootstrap()
    return ctrl


def _ready(ctrl, name="Test", phonemes=("p", "a", "t")):
    ctrl.start_new()
    ctrl.set_name(name)
    ctrl.set_phonemes(list(phonemes))


def _levels(ctrl):
    return [n.level for n in ctrl.notifications]


# ---------------------------------------------------------------------------
# Navigation and editing
# ---------------------------------------------------------------------------

class TestNavigation:
    def test_starts_on_home(self, fake_provider):
        ctrl = _controller(fake_provider)
        assert ctrl.view == AppView.HOME
        assert ctrl.notifications == []

    def test_start_new_opens_empty_editor(self, fake_provider):
        ctrl = _controller(fake_provider)
        ctrl.set_name("Leftover")
        ctrl.start_new()
        assert ctrl.view == AppView.EDITOR
        assert ctrl.current == Conlang.new()

    def test_views_freely_navigable(self, fake_provider):
        ctrl = _controller(fake_provider)
        ctrl.open_library()
        assert ctrl.view == AppView.SAVED
        ctrl.go_home()
        assert ctrl.view == AppView.HOME

    def test_load_preset_from_home(self, fake_provider):
        ctrl = _controller(fake_provider)
        assert ctrl.load_preset("Click Chorus")
        assert ctrl.view == AppView.EDITOR
        assert "ǃ" in ctrl.current.phonemes
        assert "Percussive" in ctrl.current.vibe

    def test_load_preset_keeps_name(self, fake_provider):
        ctrl = _controller(fake_provider)
        _ready(ctrl, name="Mine")
        ctrl.load_preset("Elvish Melodic")
        assert ctrl.current.name == "Mine"

    def test_unknown_preset(self, fake_provider):
        ctrl = _controller(fake_provider)
        assert ctrl.load_preset("Nope") is False
        assert _levels(ctrl) == ["error"]

    def test_open_missing_record(self, fake_provider):
        ctrl = _controller(fake_provider)
        assert ctrl.open_saved("missing") is False
        assert ctrl.view == AppView.HOME


class TestEditing:
    def test_toggle_phoneme(self, fake_provider):
        ctrl = _controller(fake_provider)
        _ready(ctrl)
        ctrl.toggle_phoneme("k")
        ctrl.toggle_phoneme("a")
        assert ctrl.current.phonemes == ["p", "t", "k"]

    def test_set_phonemes_dedupes(self, fake_provider):
        ctrl = _controller(fake_provider)
        ctrl.set_phonemes(["p", "p", "a"])
        assert ctrl.current.phonemes == ["p", "a"]

    def test_update_grammar(self, fake_provider):
        ctrl = _controller(fake_provider)
        ctrl.update_grammar(word_order="VSO", tense_rule="none")
        assert ctrl.current.grammar.word_order == "VSO"
        assert ctrl.current.grammar.tense_rule == "none"

    def test_update_grammar_rejects_unknown_field(self, fake_provider):
        ctrl = _controller(fake_provider)
        with pytest.raises(ValueError):
            ctrl.update_grammar(mood="subjunctive")


# ---------------------------------------------------------------------------
# Generation intents
# ---------------------------------------------------------------------------

class TestGenerate:
    def test_generate_populates_record(self, make_provider, mock_core_response):
        provider = make_provider([mock_core_response])
        ctrl = _controller(provider)
        _ready(ctrl)

        assert ctrl.generate() is True
        c = ctrl.current
        assert c.description
        assert c.grammar.word_order == "SOV"
        assert len(c.vocabulary) == 15
        assert c.phonemes == ["p", "a", "t"]
        assert c.name == "Test"
        assert _levels(ctrl) == ["success"]
        assert ctrl.busy[Operation.GENERATE] is False

    def test_non_json_response_keeps_vocabulary(self, make_provider, mock_core_response):
        provider = make_provider([mock_core_response, "Sorry, I can only answer in prose."])
        ctrl = _controller(provider)
        _ready(ctrl)
        ctrl.generate()
        before = ctrl.current
        ctrl.clear_notifications()

        assert ctrl.generate() is False
        assert ctrl.current == before
        assert len(ctrl.current.vocabulary) == 15
        assert _levels(ctrl) == ["error"]
        assert "could not be read" in ctrl.notifications[0].message

    def test_missing_name_reported_without_call(self, fake_provider):
        ctrl = _controller(fake_provider)
        _ready(ctrl, name="")
        assert ctrl.generate() is False
        assert fake_provider.calls == []
        assert ctrl.notifications[0].message == "Please provide a name for your language first."

    def test_missing_phonemes_reported_without_call(self, fake_provider):
        ctrl = _controller(fake_provider)
        _ready(ctrl, phonemes=())
        assert ctrl.generate() is False
        assert fake_provider.calls == []
        assert "IPA symbol" in ctrl.notifications[0].message

    def test_provider_failure_surfaces_user_message(self, make_provider):
        provider = make_provider([LLMTimeoutError("deadline exceeded", provider="fake")])
        ctrl = _controller(provider)
        _ready(ctrl)
        assert ctrl.generate() is False
        assert ctrl.notifications[0].message == LLMTimeoutError.user_message
        assert ctrl.busy[Operation.GENERATE] is False

    def test_unexpected_exception_is_caught(self, make_provider):
        provider = make_provider([RuntimeError("kaboom")])
        ctrl = _controller(provider)
        _ready(ctrl)
        assert ctrl.generate() is False
        assert _levels(ctrl) == ["error"]

    def test_no_engine_configured(self):
        ctrl = ConlangController(None, ConlangLibrary(InMemoryStore()))
        _ready(ctrl)
        assert ctrl.generate() is False
        assert "API key" in ctrl.notifications[0].message

    def test_missing_name_reported_before_missing_engine(self):
        ctrl = ConlangController(None, ConlangLibrary(InMemoryStore()))
        ctrl.start_new()
        ctrl.set_phonemes(["p", "a"])
        assert ctrl.generate() is False
        assert len(ctrl.notifications) == 1
        assert "name" in ctrl.notifications[0].message

    def test_missing_vibe_reported_before_missing_engine(self):
        ctrl = ConlangController(None, ConlangLibrary(InMemoryStore()))
        ctrl.start_new()
        assert ctrl.suggest_sounds() is False
        assert "vibe" in ctrl.notifications[0].message
        assert "API key" not in ctrl.notifications[0].message


class TestOtherOperations:
    def test_extend_appends_unique_words(self, make_provider, mock_core_response, mock_extend_response):
        provider = make_provider([mock_core_response, mock_extend_response])
        ctrl = _controller(provider)
        _ready(ctrl)
        ctrl.generate()

        assert ctrl.extend_vocabulary("animals", 2) is True
        ids = ctrl.current.vocabulary_ids()
        assert len(ids) == 17
        assert len(set(ids)) == 17

    def test_translate_sets_result(self, make_provider, sample_conlang, mock_translation_response):
        provider = make_provider([mock_translation_response])
        ctrl = _controller(provider)
        ctrl.import_file(export_json(sample_conlang))

        assert ctrl.translate("I drink water") is True
        assert ctrl.translation.translation == "pa pata apa"

    def test_ask_appends_chat(self, make_provider):
        provider = make_provider(["Use vowel harmony."])
        ctrl = _controller(provider)
        _ready(ctrl)

        assert ctrl.ask("How do I sound smoother?") is True
        assert [(m.role, m.text) for m in ctrl.chat] == [
            ("user", "How do I sound smoother?"),
            ("assistant", "Use vowel harmony."),
        ]

    def test_failed_ask_keeps_question(self, make_provider):
        provider = make_provider([LLMTimeoutError("slow")])
        ctrl = _controller(provider)
        _ready(ctrl)
        assert ctrl.ask("Hello?") is False
        assert [m.role for m in ctrl.chat] == ["user"]

    def test_blank_question_ignored(self, fake_provider):
        ctrl = _controller(fake_provider)
        assert ctrl.ask("  ") is False
        assert ctrl.chat == []
        assert fake_provider.calls == []

    def test_suggest_sounds_replaces_phonemes(self, make_provider):
        provider = make_provider([{"phonemes": ["m", "n", "a", "xx"]}])
        ctrl = _controller(provider)
        _ready(ctrl)
        ctrl.set_vibe("humming")
        assert ctrl.suggest_sounds() is True
        assert ctrl.current.phonemes == ["m", "n", "a"]

    def test_suggest_sounds_needs_vibe(self, fake_provider):
        ctrl = _controller(fake_provider)
        _ready(ctrl)
        assert ctrl.suggest_sounds() is False
        assert "vibe" in ctrl.notifications[0].message
        assert fake_provider.calls == []

    def test_expand_vibe(self, make_provider):
        provider = make_provider(["Long vowels drift like fog over marshland."])
        ctrl = _controller(provider)
        _ready(ctrl)
        ctrl.set_vibe("foggy")
        assert ctrl.expand_vibe() is True
        assert ctrl.current.vibe.startswith("Long vowels")


# ---------------------------------------------------------------------------
# Overlap policy and stale results
# ---------------------------------------------------------------------------

class TestOverlapPolicy:
    def test_same_operation_rejected_while_in_flight(self, make_provider, mock_core_response):
        nested = {}

        def reenter(provider):
            if len(provider.calls) == 1:
                nested["result"] = ctrl.generate()

        provider = make_provider([mock_core_response], on_call=reenter)
        ctrl = _controller(provider)
        _ready(ctrl)

        assert ctrl.generate() is True
        assert nested["result"] is False
        assert len(provider.calls) == 1
        assert "info" in _levels(ctrl)
        assert any("already in progress" in n.message for n in ctrl.notifications)

    def test_different_operation_proceeds(self, make_provider, mock_core_response, mock_translation_response):
        nested = {}

        def reenter(provider):
            if len(provider.calls) == 1:
                assert ctrl.is_busy(Operation.GENERATE)
                nested["result"] = ctrl.translate("water")

        # The nested translate consumes its response first
        provider = make_provider([mock_translation_response, mock_core_response], on_call=reenter)
        ctrl = _controller(provider)
        _ready(ctrl)

        assert ctrl.generate() is True
        assert nested["result"] is True
        assert len(provider.calls) == 2
        assert ctrl.translation.translation == "pa pata apa"
        assert len(ctrl.current.vocabulary) == 15

    def test_flag_cleared_after_failure(self, make_provider, mock_core_response):
        provider = make_provider(["garbage", mock_core_response])
        ctrl = _controller(provider)
        _ready(ctrl)
        ctrl.generate()
        assert ctrl.generate() is True


class TestStaleResults:
    def test_result_discarded_after_start_new(self, make_provider, mock_core_response):
        def switch(provider):
            ctrl.start_new()

        provider = make_provider([mock_core_response], on_call=switch)
        ctrl = _controller(provider)
        _ready(ctrl)

        assert ctrl.generate() is False
        assert ctrl.current == Conlang.new()
        assert ctrl.busy[Operation.GENERATE] is False

    def test_result_discarded_after_opening_other_record(self, make_provider, mock_extend_response):
        library = ConlangLibrary(InMemoryStore())
        other = library.save(Conlang(name="Other", phonemes=["k"]))

        def switch(provider):
            ctrl.open_saved(other.id)

        provider = make_provider([mock_extend_response], on_call=switch)
        ctrl = _controller(provider, library)
        _ready(ctrl)

        assert ctrl.extend_vocabulary("animals", 2) is False
        assert ctrl.current.name == "Other"
        assert ctrl.current.vocabulary == []

    def test_edits_to_same_record_do_not_discard(self, make_provider, mock_core_response):
        def edit(provider):
            ctrl.set_vibe("changed mid-flight")

        provider = make_provider([mock_core_response], on_call=edit)
        ctrl = _controller(provider)
        _ready(ctrl)

        assert ctrl.generate() is True
        assert ctrl.current.vibe == "changed mid-flight"
        assert len(ctrl.current.vocabulary) == 15


# ---------------------------------------------------------------------------
# Persistence intents
# ---------------------------------------------------------------------------

class TestPersistence:
    def test_save_goes_to_library(self, fake_provider):
        ctrl = _controller(fake_provider)
        _ready(ctrl)
        assert ctrl.save() is True
        assert ctrl.view == AppView.SAVED
        assert ctrl.current.id is not None
        assert [c.id for c in ctrl.saved] == [ctrl.current.id]

    def test_save_twice_keeps_one_entry(self, fake_provider):
        ctrl = _controller(fake_provider)
        _ready(ctrl)
        ctrl.save()
        ctrl.set_vibe("edited")
        ctrl.save()
        assert len(ctrl.saved) == 1
        assert ctrl.saved[0].vibe == "edited"

    def test_save_requires_name(self, fake_provider):
        ctrl = _controller(fake_provider)
        _ready(ctrl, name=" ")
        assert ctrl.save() is False
        assert ctrl.saved == []

    def test_save_two_delete_one(self, fake_provider):
        ctrl = _controller(fake_provider)
        _ready(ctrl, name="One")
        ctrl.save()
        first_id = ctrl.current.id
        _ready(ctrl, name="Two")
        ctrl.save()

        assert ctrl.delete(first_id) is True
        assert [c.name for c in ctrl.saved] == ["Two"]

    def test_open_saved_record(self, fake_provider):
        ctrl = _controller(fake_provider)
        _ready(ctrl, name="Kept")
        ctrl.save()
        saved_id = ctrl.current.id
        ctrl.start_new()

        assert ctrl.open_saved(saved_id) is True
        assert ctrl.view == AppView.EDITOR
        assert ctrl.current.name == "Kept"

    def test_import_file(self, fake_provider, sample_conlang):
        ctrl = _controller(fake_provider)
        assert ctrl.import_file(export_json(sample_conlang)) is True
        assert ctrl.view == AppView.EDITOR
        assert ctrl.current == sample_conlang

    def test_import_bad_file(self, fake_provider):
        ctrl = _controller(fake_provider)
        assert ctrl.import_file("{nope") is False
        assert ctrl.view == AppView.HOME
        assert "Invalid JSON file formatting" in ctrl.notifications[0].message

    def test_export_file(self, fake_provider, sample_conlang):
        ctrl = _controller(fake_provider)
        ctrl.import_file(export_json(sample_conlang))
        assert "ˈpʰa.tu" in ctrl.export_file()


class TestBootstrap:
    def test_share_link_opens_editor(self, fake_provider, sample_conlang):
        sender = _controller(fake_provider)
        sender.import_file(export_json(sample_conlang))
        url = sender.share_url("http://localhost:8501/")

        receiver = ConlangController(None, ConlangLibrary(InMemoryStore()))
        receiver.bootstrap(share_token=token_from_url(url))

        assert receiver.view == AppView.EDITOR
        assert receiver.current == sample_conlang
        assert receiver.current.vocabulary[0].native == "ˈpʰa.tu"

    def test_bad_share_token_stays_home(self):
        ctrl = ConlangController(None, ConlangLibrary(InMemoryStore()))
        ctrl.bootstrap(share_token="bm90IGpzb24")
        assert ctrl.view == AppView.HOME
        assert _levels(ctrl) == ["error"]

    def test_corrupted_storage_reported(self):
        library = ConlangLibrary(InMemoryStore("{{{ not json"))
        ctrl = ConlangController(None, library)
        ctrl.bootstrap()
        assert ctrl.view == AppView.HOME
        assert ctrl.saved == []
        assert "could not be read" in ctrl.notifications[0].message

    def test_save_after_corrupted_storage_keeps_old_contents(self, fake_provider):
        store = InMemoryStore("[{not json")
        ctrl = _controller(fake_provider, ConlangLibrary(store))
        _ready(ctrl, name="New")
        assert ctrl.save() is True

        assert store.preserved == ["[{not json"]
        assert [c.name for c in ConlangLibrary(store).load()] == ["New"]

    def test_saved_records_loaded(self, sample_conlang):
        store = InMemoryStore()
        ConlangLibrary(store).save(sample_conlang)
        ctrl = ConlangController(None, ConlangLibrary(store))
        ctrl.bootstrap()
        assert [c.name for c in ctrl.saved] == ["Patuan"]


class TestNotifications:
    def test_dismiss_and_clear(self, fake_provider):
        ctrl = _controller(fake_provider)
        ctrl.load_preset("Nope")
        ctrl.open_saved("missing")
        ctrl.dismiss(0)
        assert len(ctrl.notifications) == 1
        ctrl.dismiss(5)
        assert len(ctrl.notifications) == 1
        ctrl.clear_notifications()
        assert ctrl.notifications == []
