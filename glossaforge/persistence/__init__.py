"""Saved-languages library, file export/import and share links."""

from .library import ConlangLibrary
from .sharing import (
    build_share_url,
    decode_share_token,
    encode_share_token,
    export_filename,
    export_json,
    import_json,
    read_file,
    token_from_url,
    write_file,
)
from .sheet import render_markdown, sheet_filename

__all__ = [
    "ConlangLibrary",
    "build_share_url",
    "decode_share_token",
    "encode_share_token",
    "export_filename",
    "export_json",
    "import_json",
    "read_file",
    "token_from_url",
    "write_file",
    "render_markdown",
    "sheet_filename",
]
