"""
GlossaForge -- Conlang Builder (Streamlit UI)
=============================================

Three views over one ``ConlangController`` kept in ``st.session_state``:

* **Home** -- start a new language, pick a preset or import a file.
* **Editor** -- phonology, grammar, lexicon, translation and the assistant.
* **Library** -- saved languages.

A ``?share=<token>`` query parameter opens the shared language on first load.

Run with::

    streamlit run glossaforge/app/streamlit_app.py
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Optional, Tuple

# Ensure project root is on sys.path (needed for Streamlit Cloud deployment)
_PROJECT_ROOT = str(Path(__file__).resolve().parent.parent.parent)
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

import pandas as pd
import streamlit as st

# ---------------------------------------------------------------------------
# Project imports
# ---------------------------------------------------------------------------

from core.providers.audit import AuditLogger
from core.providers.base import LLMError
from core.providers.registry import get_models_for_provider, get_providers
from core.storage import JsonFileStore
from glossaforge.app.controller import AppView, ConlangController, Operation
from glossaforge.app.version import version_label
from glossaforge.config import ipa
from glossaforge.config.settings import API_KEY_ENV, GlossaForgeSettings, configure_logging
from glossaforge.errors import SettingsError
from glossaforge.generation.generator import (
    DEFAULT_EXTEND_COUNT,
    MAX_EXTEND_COUNT,
    ConlangGenerator,
)
from glossaforge.persistence.library import ConlangLibrary
from glossaforge.persistence.sharing import export_filename, export_json
from glossaforge.persistence.sheet import render_markdown, sheet_filename

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

GRAMMAR_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("word_order", "Word order"),
    ("plural_rule", "Plurals"),
    ("tense_rule", "Tense"),
    ("adjective_placement", "Adjectives"),
)

SPINNER_TEXT = {
    Operation.GENERATE: "Forging grammar and core vocabulary...",
    Operation.EXTEND: "Coining new words...",
    Operation.TRANSLATE: "Translating...",
    Operation.ASK: "Consulting the linguist...",
    Operation.SUGGEST_SOUNDS: "Listening for the right sounds...",
    Operation.EXPAND_VIBE: "Expanding the vibe...",
}


# ---------------------------------------------------------------------------
# Session-state initialisation
# ---------------------------------------------------------------------------

def _init_session_state() -> None:
    """Ensure every required session-state key exists."""
    if "settings" not in st.session_state:
        try:
            settings = GlossaForgeSettings.from_env()
        except SettingsError as e:
            st.error(e.user_message)
            settings = GlossaForgeSettings()
        configure_logging(settings.log_level)
        st.session_state["settings"] = settings
    if "audit" not in st.session_state:
        st.session_state["audit"] = AuditLogger()
    if "controller" not in st.session_state:
        settings = st.session_state["settings"]
        library = ConlangLibrary(JsonFileStore.in_dir(settings.data_dir))
        st.session_state["controller"] = ConlangController(None, library)
    defaults = {
        "bootstrapped": False,
        "engine_signature": None,
        "last_upload": None,
    }
    for key, default in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = default


def _ctrl() -> ConlangController:
    return st.session_state["controller"]


def _key(field: str) -> str:
    """Widget key scoped to the record currently open in the editor."""
    return f"{field}_{_ctrl().buffer_version}"


# ---------------------------------------------------------------------------
# Engine wiring
# ---------------------------------------------------------------------------

def _build_generator(settings: GlossaForgeSettings, audit: AuditLogger) -> Optional[ConlangGenerator]:
    if not settings.api_key:
        return None
    provider = settings.build_provider()
    return ConlangGenerator(provider, config=settings.llm_config(), audit=audit)


def _sync_generator() -> None:
    """Rebuild the generator when provider, model or key changed."""
    settings: GlossaForgeSettings = st.session_state["settings"]
    signature = (settings.provider, settings.resolved_model, settings.api_key)
    if signature == st.session_state["engine_signature"]:
        return
    ctrl = _ctrl()
    try:
        ctrl.generator = _build_generator(settings, st.session_state["audit"])
    except (ImportError, ValueError, LLMError) as e:
        logger.error("Could not initialise %s provider: %s", settings.provider, e)
        ctrl.generator = None
        st.session_state["sidebar_error"] = f"{settings.provider} is unavailable: {e}"
    else:
        st.session_state.pop("sidebar_error", None)
    st.session_state["engine_signature"] = signature


# ---------------------------------------------------------------------------
# Widget <-> controller binding
# ---------------------------------------------------------------------------

def _sync_editor_widgets(ctrl: ConlangController) -> None:
    """Push the edit buffer into the editor's widget state.

    Only safe before the widgets are instantiated in a run, i.e. at the
    top of the editor or inside a callback.
    """
    c = ctrl.current
    version = ctrl.buffer_version
    st.session_state[f"name_{version}"] = c.name
    st.session_state[f"vibe_{version}"] = c.vibe
    for field, _label in GRAMMAR_FIELDS:
        st.session_state[f"grammar_{field}_{version}"] = getattr(c.grammar, field)
    for i, (_title, items) in enumerate(ipa.SECTIONS):
        section = {p.symbol for p in items}
        st.session_state[f"section_{i}_{version}"] = [s for s in c.phonemes if s in section]


def _dispatch(intent: Callable[[ConlangController], Any], op: Optional[Operation] = None) -> None:
    """Button callback: run an intent, then refresh bound widgets."""
    ctrl = _ctrl()
    if op is not None:
        with st.spinner(SPINNER_TEXT[op]):
            intent(ctrl)
    else:
        intent(ctrl)
    _sync_editor_widgets(ctrl)


def _on_name_change() -> None:
    _ctrl().set_name(st.session_state[_key("name")])


def _on_vibe_change() -> None:
    _ctrl().set_vibe(st.session_state[_key("vibe")])


def _on_grammar_change(field: str) -> None:
    _ctrl().update_grammar(**{field: st.session_state[_key(f"grammar_{field}")]})


def _on_phonemes_change() -> None:
    ctrl = _ctrl()
    known = ipa.catalog_symbols()
    selected = []
    for i in range(len(ipa.SECTIONS)):
        selected.extend(st.session_state.get(_key(f"section_{i}"), []))
    # Symbols from imported records that the picker cannot show are kept
    extras = [s for s in ctrl.current.phonemes if s not in known]
    ctrl.set_phonemes([*selected, *extras])


# ---------------------------------------------------------------------------
# Shared pieces
# ---------------------------------------------------------------------------

def _render_notifications() -> None:
    ctrl = _ctrl()
    for i, note in enumerate(ctrl.notifications):
        cols = st.columns([12, 1])
        with cols[0]:
            text = note.message
            if note.details:
                text += "\n\n" + "\n".join(f"- {d}" for d in note.details)
            if note.level == "success":
                st.success(text)
            elif note.level == "info":
                st.info(text)
            else:
                st.error(text)
        with cols[1]:
            st.button("✕", key=f"dismiss_{i}_{id(note)}", on_click=ctrl.dismiss, args=(i,))


def _format_created(created_at: Optional[int]) -> str:
    if created_at is None:
        return "unsaved"
    return datetime.fromtimestamp(created_at / 1000).strftime("%Y-%m-%d %H:%M")


# ===================================================================
# Home
# ===================================================================

def _render_home() -> None:
    ctrl = _ctrl()
    st.title("GlossaForge")
    st.markdown(
        "Design a constructed language: pick its sounds, describe its feel, "
        "and let the language engine draft grammar and vocabulary."
    )

    col_new, col_lib = st.columns(2)
    with col_new:
        st.button(
            "Start a new language",
            type="primary",
            use_container_width=True,
            on_click=_dispatch,
            args=(lambda c: c.start_new(),),
        )
    with col_lib:
        st.button(
            f"Open library ({len(ctrl.saved)})",
            use_container_width=True,
            on_click=ctrl.open_library,
        )

    st.divider()
    st.subheader("Start from a preset")
    preset_names = [p.name for p in ipa.PRESETS]
    choice = st.selectbox("Preset", preset_names, key="home_preset")
    preset = ipa.get_preset(choice)
    if preset is not None:
        st.caption(preset.vibe)
        st.caption(" ".join(preset.phonemes))
    st.button(
        "Use preset",
        on_click=_dispatch,
        args=(lambda c: c.load_preset(choice),),
    )

    st.divider()
    st.subheader("Import a language file")
    _render_import_uploader("home_import")


def _render_import_uploader(key: str) -> None:
    uploaded = st.file_uploader("Language JSON", type=["json"], key=key)
    if uploaded is None:
        return
    signature = (key, uploaded.name, uploaded.size)
    if st.session_state["last_upload"] == signature:
        return
    st.session_state["last_upload"] = signature
    ctrl = _ctrl()
    if ctrl.import_file(uploaded.getvalue()):
        logger.info("Imported %s", uploaded.name)
    st.rerun()


# ===================================================================
# Library
# ===================================================================

def _render_saved() -> None:
    ctrl = _ctrl()
    head, back = st.columns([4, 1])
    with head:
        st.header("Your languages")
    with back:
        st.button("Back home", on_click=ctrl.go_home)

    saved = ctrl.saved
    if not saved:
        st.info("No saved languages yet. Start a new one from the home screen.")
        return

    for record in saved:
        with st.container(border=True):
            info, actions = st.columns([4, 1])
            with info:
                st.markdown(f"### {record.name or 'Untitled'}")
                if record.description:
                    st.caption(record.description)
                st.caption(
                    f"{len(record.phonemes)} phonemes · {len(record.vocabulary)} words · "
                    f"{record.grammar.word_order or '-'} · created {_format_created(record.created_at)}"
                )
            with actions:
                st.button(
                    "Open",
                    key=f"open_{record.id}",
                    on_click=_dispatch,
                    args=(lambda c, rid=record.id: c.open_saved(rid),),
                )
                st.download_button(
                    "JSON",
                    data=export_json(record),
                    file_name=export_filename(record),
                    mime="application/json",
                    key=f"dl_{record.id}",
                )
                st.button(
                    "Delete",
                    key=f"delete_{record.id}",
                    on_click=ctrl.delete,
                    args=(record.id,),
                )


# ===================================================================
# Editor
# ===================================================================

def _render_editor() -> None:
    ctrl = _ctrl()
    if _key("name") not in st.session_state:
        _sync_editor_widgets(ctrl)

    top = st.columns([4, 1, 1])
    with top[0]:
        st.text_input("Language name", key=_key("name"), on_change=_on_name_change)
    with top[1]:
        st.button("Home", on_click=ctrl.go_home, use_container_width=True)
    with top[2]:
        st.button(
            "Save",
            type="primary",
            on_click=_dispatch,
            args=(lambda c: c.save(),),
            use_container_width=True,
        )

    left, right = st.columns([2, 3])
    with left:
        _render_vibe_and_sounds(ctrl)
    with right:
        tabs = st.tabs(["Overview", "Lexicon", "Translate", "Assistant", "Share & export"])
        with tabs[0]:
            _render_overview(ctrl)
        with tabs[1]:
            _render_lexicon(ctrl)
        with tabs[2]:
            _render_translate(ctrl)
        with tabs[3]:
            _render_assistant(ctrl)
        with tabs[4]:
            _render_share_export(ctrl)


def _render_vibe_and_sounds(ctrl: ConlangController) -> None:
    st.subheader("Vibe")
    st.text_area(
        "Aesthetic direction",
        key=_key("vibe"),
        on_change=_on_vibe_change,
        height=120,
    )
    c1, c2 = st.columns(2)
    with c1:
        st.button(
            "Expand vibe",
            disabled=ctrl.is_busy(Operation.EXPAND_VIBE) or not ctrl.current.vibe.strip(),
            on_click=_dispatch,
            args=(lambda c: c.expand_vibe(), Operation.EXPAND_VIBE),
            use_container_width=True,
        )
    with c2:
        st.button(
            "Suggest sounds",
            disabled=ctrl.is_busy(Operation.SUGGEST_SOUNDS),
            on_click=_dispatch,
            args=(lambda c: c.suggest_sounds(), Operation.SUGGEST_SOUNDS),
            use_container_width=True,
        )

    st.subheader(f"Phonology ({len(ctrl.current.phonemes)} selected)")
    preset_col, apply_col = st.columns([3, 1])
    with preset_col:
        preset_name = st.selectbox(
            "Preset", [p.name for p in ipa.PRESETS], key="editor_preset",
            label_visibility="collapsed",
        )
    with apply_col:
        st.button(
            "Load",
            on_click=_dispatch,
            args=(lambda c: c.load_preset(preset_name),),
        )

    for i, (title, items) in enumerate(ipa.SECTIONS):
        with st.expander(title, expanded=(i == 0)):
            descriptions = {p.symbol: f"{p.symbol}  {p.description}" for p in items}
            st.multiselect(
                title,
                options=[p.symbol for p in items],
                format_func=lambda s, d=descriptions: d.get(s, s),
                key=_key(f"section_{i}"),
                on_change=_on_phonemes_change,
                label_visibility="collapsed",
            )
    unknown = [s for s in ctrl.current.phonemes if ipa.lookup(s) is None]
    if unknown:
        st.caption("Not in the picker: " + " ".join(unknown))

    st.button(
        "Generate language",
        type="primary",
        disabled=ctrl.is_busy(Operation.GENERATE),
        on_click=_dispatch,
        args=(lambda c: c.generate(), Operation.GENERATE),
        use_container_width=True,
    )


def _render_overview(ctrl: ConlangController) -> None:
    c = ctrl.current
    if c.description:
        st.markdown(c.description)
    else:
        st.caption("Generate the language to get a description.")
    st.markdown("**Grammar**")
    for field, label in GRAMMAR_FIELDS:
        st.text_input(
            label,
            key=_key(f"grammar_{field}"),
            on_change=_on_grammar_change,
            args=(field,),
        )


def _render_lexicon(ctrl: ConlangController) -> None:
    words = ctrl.current.vocabulary
    if words:
        df = pd.DataFrame(
            [
                {"Native": w.native, "Pronunciation": f"/{w.pronunciation}/", "Meaning": w.meaning}
                for w in words
            ]
        )
        filter_text = st.text_input("Filter", key="lexicon_filter", placeholder="meaning or native form")
        if filter_text:
            mask = (
                df["Meaning"].str.contains(filter_text, case=False, regex=False)
                | df["Native"].str.contains(filter_text, case=False, regex=False)
            )
            df = df[mask]
        st.dataframe(df, hide_index=True, use_container_width=True)
        st.caption(f"{len(words)} words")
    else:
        st.info("No vocabulary yet.")

    st.markdown("**Extend vocabulary**")
    theme_col, count_col = st.columns([3, 1])
    with theme_col:
        theme = st.text_input("Theme", value="general", key="extend_theme")
    with count_col:
        count = st.number_input(
            "Words", min_value=1, max_value=MAX_EXTEND_COUNT,
            value=DEFAULT_EXTEND_COUNT, key="extend_count",
        )
    st.button(
        "Extend",
        disabled=ctrl.is_busy(Operation.EXTEND),
        on_click=_dispatch,
        args=(lambda c: c.extend_vocabulary(theme, int(count)), Operation.EXTEND),
    )


def _render_translate(ctrl: ConlangController) -> None:
    with st.form("translate_form"):
        text = st.text_area("Text to translate", height=100)
        submitted = st.form_submit_button(
            "Translate", disabled=ctrl.is_busy(Operation.TRANSLATE),
        )
    if submitted:
        with st.spinner(SPINNER_TEXT[Operation.TRANSLATE]):
            ctrl.translate(text)
        st.rerun()

    result = ctrl.translation
    if result is not None:
        st.markdown(f"### {result.translation}")
        if result.pronunciation:
            st.caption(f"/{result.pronunciation}/")
        if result.breakdown:
            st.markdown(result.breakdown)


def _render_assistant(ctrl: ConlangController) -> None:
    for msg in ctrl.chat:
        with st.chat_message(msg.role):
            st.markdown(msg.text)
    with st.form("assistant_form", clear_on_submit=True):
        query = st.text_input("Ask the linguistic assistant")
        submitted = st.form_submit_button("Ask", disabled=ctrl.is_busy(Operation.ASK))
    if submitted:
        with st.spinner(SPINNER_TEXT[Operation.ASK]):
            ctrl.ask(query)
        st.rerun()


def _render_share_export(ctrl: ConlangController) -> None:
    c = ctrl.current
    settings: GlossaForgeSettings = st.session_state["settings"]

    st.markdown("**Share link**")
    st.code(ctrl.share_url(settings.public_url), language=None)
    st.caption("Anyone opening this link gets a copy of the language in their editor.")

    st.markdown("**Download**")
    d1, d2 = st.columns(2)
    with d1:
        st.download_button(
            "Language JSON",
            data=ctrl.export_file(),
            file_name=export_filename(c),
            mime="application/json",
            use_container_width=True,
        )
    with d2:
        st.download_button(
            "Reference sheet (Markdown)",
            data=render_markdown(c),
            file_name=sheet_filename(c),
            mime="text/markdown",
            use_container_width=True,
        )

    st.markdown("**Import**")
    _render_import_uploader("editor_import")


# ===================================================================
# Sidebar
# ===================================================================

def _render_sidebar() -> None:
    settings: GlossaForgeSettings = st.session_state["settings"]
    with st.sidebar:
        st.title("GlossaForge")
        st.caption("Conlang builder")

        st.divider()
        st.markdown("**Language engine**")
        providers = get_providers()
        provider_ids = [p["id"] for p in providers]
        labels = {p["id"]: p["label"] for p in providers}
        provider = st.selectbox(
            "Provider",
            provider_ids,
            index=provider_ids.index(settings.provider),
            format_func=lambda pid: labels[pid],
        )
        models = get_models_for_provider(provider)
        model_ids = [m["model_id"] for m in models]
        current_model = settings.resolved_model if provider == settings.provider else ""
        model = st.selectbox(
            "Model",
            model_ids,
            index=model_ids.index(current_model) if current_model in model_ids else 0,
            format_func=lambda mid: next(m["label"] for m in models if m["model_id"] == mid),
        )
        api_key = st.text_input(
            "API key",
            value=settings.api_key if provider == settings.provider else "",
            type="password",
            help=f"Or set {API_KEY_ENV[provider]} before launching.",
        )
        if (provider, model, api_key) != (settings.provider, settings.resolved_model, settings.api_key):
            st.session_state["settings"] = settings.model_copy(
                update={"provider": provider, "model": model, "api_key": api_key}
            )
        _sync_generator()
        if st.session_state.get("sidebar_error"):
            st.warning(st.session_state["sidebar_error"])
        elif _ctrl().generator is None:
            st.caption("Enter an API key to enable generation.")

        summary = st.session_state["audit"].summary()
        if summary["total_calls"]:
            st.divider()
            st.markdown("**Usage this session**")
            st.caption(
                f"Calls: {summary['total_calls']} (errors: {summary['errors']})  \n"
                f"Tokens: {summary['total_input_tokens']} in / {summary['total_output_tokens']} out"
            )

        st.divider()
        if st.button("Reset session", key="btn_reset"):
            for k in list(st.session_state.keys()):
                del st.session_state[k]
            st.rerun()
        st.caption(version_label())


# ===================================================================
# Main application
# ===================================================================

def main() -> None:
    """Entry point for the Streamlit conlang builder."""

    st.set_page_config(
        page_title="GlossaForge",
        page_icon="🗣️",
        layout="wide",
        initial_sidebar_state="expanded",
    )

    _init_session_state()
    ctrl = _ctrl()

    if not st.session_state["bootstrapped"]:
        ctrl.bootstrap(share_token=st.query_params.get("share"))
        st.session_state["bootstrapped"] = True

    _render_sidebar()
    _render_notifications()

    if ctrl.view == AppView.HOME:
        _render_home()
    elif ctrl.view == AppView.SAVED:
        _render_saved()
    else:
        _render_editor()


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    main()
