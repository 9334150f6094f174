"""File export/import and URL share tokens.

Both representations carry one whole ``Conlang`` as JSON with camelCase
keys.  Share tokens additionally go through UTF-8 and URL-safe base64
(no padding) so IPA symbols survive a trip through a query string.
"""
from __future__ import annotations

import base64
import binascii
import json
import logging
from pathlib import Path
from typing import Optional, Union
from urllib.parse import parse_qs, parse_qsl, urlencode, urlsplit, urlunsplit

from pydantic import ValidationError

from ..config.models import Conlang
from ..errors import ConlangImportError, ShareTokenError

logger = logging.getLogger(__name__)

SHARE_PARAM = "share"


# ---------------------------------------------------------------------------
# File export / import
# ---------------------------------------------------------------------------

def export_json(conlang: Conlang, indent: Optional[int] = 2) -> str:
    return json.dumps(conlang.to_wire(), ensure_ascii=False, indent=indent)


def import_json(text: Union[str, bytes]) -> Conlang:
    """Parse an exported record.

    Raises
    ------
    ConlangImportError
        On malformed JSON or a document that is not a conlang record.
    """
    if isinstance(text, bytes):
        try:
            text = text.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ConlangImportError("Invalid JSON file: not UTF-8 text.") from e
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConlangImportError(
            f"Invalid JSON file formatting (line {e.lineno}, column {e.colno})."
        ) from e
    if not isinstance(data, dict):
        raise ConlangImportError("Invalid language file: expected a JSON object.")
    try:
        return Conlang.model_validate(data)
    except ValidationError as e:
        fields = ", ".join(
            ".".join(str(p) for p in err["loc"]) for err in e.errors()[:3]
        )
        raise ConlangImportError(f"Invalid language file: bad fields ({fields}).") from e


def write_file(conlang: Conlang, path: Union[str, Path]) -> Path:
    path = Path(path)
    path.write_text(export_json(conlang), encoding="utf-8")
    logger.info("Exported %r to %s", conlang.name, path)
    return path


def read_file(path: Union[str, Path]) -> Conlang:
    return import_json(Path(path).read_bytes())


def export_filename(conlang: Conlang) -> str:
    stem = "".join(ch if ch.isalnum() else "_" for ch in conlang.name.strip()).strip("_")
    return f"{stem or 'conlang'}.json"


# ---------------------------------------------------------------------------
# Share tokens
# ---------------------------------------------------------------------------

def encode_share_token(conlang: Conlang) -> str:
    raw = json.dumps(conlang.to_wire(), ensure_ascii=False, separators=(",", ":"))
    return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii").rstrip("=")


def decode_share_token(token: str) -> Conlang:
    """Decode a share token into a record.

    Accepts URL-safe and standard base64, padded or not.  A ``+`` that a
    query-string parser turned into a space is restored.

    Raises
    ------
    ShareTokenError
        If the token is empty, truncated or does not hold a record.
    """
    cleaned = (token or "").strip().replace(" ", "+").replace("\n", "").rstrip("=")
    if not cleaned:
        raise ShareTokenError("The share link is empty.")
    cleaned = cleaned.replace("-", "+").replace("_", "/")
    cleaned += "=" * (-len(cleaned) % 4)
    try:
        raw = base64.b64decode(cleaned, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ShareTokenError("The share link is malformed or truncated.") from e
    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ShareTokenError("The share link is malformed or truncated.") from e
    if not isinstance(data, dict):
        raise ShareTokenError("The share link does not contain a language.")
    try:
        return Conlang.model_validate(data)
    except ValidationError as e:
        raise ShareTokenError("The share link does not contain a valid language.") from e


def build_share_url(base_url: str, conlang: Conlang) -> str:
    """Return ``base_url`` with the record's token in the ``share`` parameter."""
    parts = urlsplit(base_url)
    query = [(k, v) for k, v in parse_qsl(parts.query) if k != SHARE_PARAM]
    query.append((SHARE_PARAM, encode_share_token(conlang)))
    return urlunsplit(parts._replace(query=urlencode(query)))


def token_from_url(url: str) -> Optional[str]:
    values = parse_qs(urlsplit(url).query).get(SHARE_PARAM)
    return values[0] if values else None
