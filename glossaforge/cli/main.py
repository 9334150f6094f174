"""CLI interface for GlossaForge."""
from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional

import typer

from core.providers.audit import AuditLogger
from core.providers.base import LLMError
from core.storage import JsonFileStore

from ..config.models import Conlang
from ..config.settings import API_KEY_ENV, GlossaForgeSettings, configure_logging
from ..errors import GlossaForgeError
from ..generation.generator import DEFAULT_EXTEND_COUNT, ConlangGenerator
from ..persistence.library import ConlangLibrary
from ..persistence.sharing import (
    build_share_url,
    decode_share_token,
    export_filename,
    read_file,
    token_from_url,
    write_file,
)
from ..persistence.sheet import render_markdown, sheet_filename

logger = logging.getLogger(__name__)

app = typer.Typer(help="GlossaForge - build constructed languages with an LLM")
library_app = typer.Typer(help="Manage the saved-languages library")
app.add_typer(library_app, name="library")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _settings() -> GlossaForgeSettings:
    return GlossaForgeSettings.from_env()


def _generator(settings: GlossaForgeSettings) -> ConlangGenerator:
    if not settings.api_key:
        raise GlossaForgeError(
            f"No API key for {settings.provider}: set {API_KEY_ENV[settings.provider]}."
        )
    return ConlangGenerator(
        settings.build_provider(), config=settings.llm_config(), audit=AuditLogger(),
    )


def _library(settings: GlossaForgeSettings) -> ConlangLibrary:
    library = ConlangLibrary(JsonFileStore.in_dir(settings.data_dir))
    library.load()
    return library


def _split_phonemes(raw: str) -> List[str]:
    return [p.strip() for p in raw.replace(" ", ",").split(",") if p.strip()]


@contextmanager
def _user_errors() -> Iterator[None]:
    """Print the user-facing message for known failures and exit 1."""
    try:
        yield
    except (LLMError, GlossaForgeError) as e:
        logger.debug("Command failed: %s", e)
        print(f"Error: {e.user_message}", file=sys.stderr)
        raise typer.Exit(code=1)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise typer.Exit(code=1)


@app.callback()
def _main_options(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    with _user_errors():
        configure_logging("DEBUG" if verbose else _settings().log_level)


# ---------------------------------------------------------------------------
# Generation commands
# ---------------------------------------------------------------------------

@app.command()
def generate(
    name: str = typer.Argument(..., help="Language name"),
    phonemes: str = typer.Option(..., help='Comma-separated IPA symbols, e.g. "p,a,t"'),
    vibe: str = typer.Option("", help="Aesthetic direction"),
    out: Optional[Path] = typer.Option(None, "--out", help="Output JSON file"),
):
    """Generate description, grammar and core vocabulary for a new language."""
    with _user_errors():
        settings = _settings()
        symbols = _split_phonemes(phonemes)
        print(f"[1/2] Generating {name!r} with {len(symbols)} phonemes ({settings.resolved_model})")
        result = _generator(settings).generate_core(name, vibe, symbols)
        conlang = Conlang(
            name=name,
            vibe=vibe,
            phonemes=symbols,
            description=result.description,
            grammar=result.grammar,
            vocabulary=result.vocabulary,
        )
        target = out or Path(export_filename(conlang))
        write_file(conlang, target)
        print(f"[2/2] Wrote {len(conlang.vocabulary)} words to {target}")


@app.command()
def extend(
    file: Path = typer.Argument(..., help="Language JSON file"),
    theme: str = typer.Option("general", help="Theme for the new words"),
    count: int = typer.Option(DEFAULT_EXTEND_COUNT, help="Number of words"),
    out: Optional[Path] = typer.Option(None, "--out", help="Write here instead of FILE"),
):
    """Add themed vocabulary to a language file."""
    with _user_errors():
        conlang = read_file(file)
        words = _generator(_settings()).extend_vocabulary(conlang, theme=theme, count=count)
        conlang = conlang.with_vocabulary_appended(words)
        write_file(conlang, out or file)
        for w in words:
            print(f"  + {w.native} /{w.pronunciation}/ = {w.meaning}")
        print(f"✓ {len(conlang.vocabulary)} words in total")


@app.command()
def translate(
    file: Path = typer.Argument(..., help="Language JSON file"),
    text: str = typer.Argument(..., help="Text to translate"),
):
    """Translate text into the language."""
    with _user_errors():
        result = _generator(_settings()).translate_text(read_file(file), text)
        print(result.translation)
        if result.pronunciation:
            print(f"/{result.pronunciation}/")
        if result.breakdown:
            print()
            print(result.breakdown)


@app.command()
def ask(
    file: Path = typer.Argument(..., help="Language JSON file"),
    query: str = typer.Argument(..., help="Question for the linguistic assistant"),
):
    """Ask the linguistic assistant about a language."""
    with _user_errors():
        print(_generator(_settings()).ask_assistant(read_file(file), query))


@app.command()
def suggest(vibe: str = typer.Argument(..., help="Aesthetic direction")):
    """Suggest a phoneme inventory for a vibe."""
    with _user_errors():
        symbols = _generator(_settings()).suggest_phonemes(vibe)
        print(",".join(symbols))


# ---------------------------------------------------------------------------
# Sharing and export
# ---------------------------------------------------------------------------

@app.command()
def share(
    file: Path = typer.Argument(..., help="Language JSON file"),
    base_url: Optional[str] = typer.Option(None, help="App URL the link should open"),
):
    """Print a share link for a language file."""
    with _user_errors():
        print(build_share_url(base_url or _settings().public_url, read_file(file)))


@app.command()
def unshare(
    token: str = typer.Argument(..., help="Share token or full share URL"),
    out: Optional[Path] = typer.Option(None, "--out", help="Output JSON file"),
):
    """Decode a share link back into a language file."""
    with _user_errors():
        if "://" in token or token.startswith("?"):
            token = token_from_url(token) or ""
        conlang = decode_share_token(token)
        target = out or Path(export_filename(conlang))
        write_file(conlang, target)
        print(f"✓ {conlang.name or 'Untitled'} written to {target}")


@app.command()
def sheet(
    file: Path = typer.Argument(..., help="Language JSON file"),
    out: Optional[Path] = typer.Option(None, "--out", help="Output Markdown file"),
):
    """Write a Markdown reference sheet for a language file."""
    with _user_errors():
        conlang = read_file(file)
        target = out or Path(sheet_filename(conlang))
        target.write_text(render_markdown(conlang), encoding="utf-8")
        print(f"✓ Reference sheet written to {target}")


# ---------------------------------------------------------------------------
# Library
# ---------------------------------------------------------------------------

@library_app.command("list")
def library_list():
    """List saved languages."""
    with _user_errors():
        items = _library(_settings()).all()
        if not items:
            print("No saved languages.")
            return
        for c in items:
            print(f"{c.id}  {c.name:<24} {len(c.phonemes):>3} phonemes {len(c.vocabulary):>4} words")


@library_app.command("delete")
def library_delete(conlang_id: str = typer.Argument(..., help="Language id")):
    """Delete a saved language."""
    with _user_errors():
        if not _library(_settings()).delete(conlang_id):
            print(f"Error: no saved language with id {conlang_id}", file=sys.stderr)
            raise typer.Exit(code=1)
        print(f"✓ Deleted {conlang_id}")


@library_app.command("save")
def library_save(file: Path = typer.Argument(..., help="Language JSON file")):
    """Save a language file into the library."""
    with _user_errors():
        record = _library(_settings()).save(read_file(file))
        print(f"✓ Saved {record.name} as {record.id}")


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
