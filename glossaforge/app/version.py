"""Build info shown in the Streamlit sidebar footer."""
from __future__ import annotations

import subprocess
from functools import lru_cache
from pathlib import Path

from glossaforge import __version__

_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


def _git(*args: str) -> str:
    """Run a read-only git query in the project root; 'unknown' on failure."""
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=str(_PROJECT_ROOT),
            capture_output=True,
            text=True,
            timeout=5,
        )
    except (OSError, subprocess.SubprocessError):
        return "unknown"
    if result.returncode != 0:
        return "unknown"
    return result.stdout.strip() or "unknown"


@lru_cache(maxsize=1)
def version_label() -> str:
    """Return e.g. 'GlossaForge v0.3.0 (abc1234)', or without the hash outside a checkout."""
    commit = _git("rev-parse", "--short", "HEAD")
    if commit == "unknown":
        return f"GlossaForge v{__version__}"
    return f"GlossaForge v{__version__} ({commit})"
