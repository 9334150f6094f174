"""Tests for file export/import, share tokens and the Markdown sheet."""
from __future__ import annotations

import base64
import json

import pytest

from glossaforge.config.models import Conlang
from glossaforge.errors import ConlangImportError, ShareTokenError
from glossaforge.persistence.sharing import (
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
from glossaforge.persistence.sheet import render_markdown


class TestFileExport:
    def test_round_trip(self, sample_conlang):
        assert import_json(export_json(sample_conlang)) == sample_conlang

    def test_saved_record_round_trip(self, sample_conlang):
        saved = sample_conlang.ensure_identity(timestamp_ms=1700000000000)
        assert import_json(export_json(saved)) == saved

    def test_ipa_written_unescaped(self, sample_conlang):
        text = export_json(sample_conlang)
        assert "ˈpʰa.tu" in text
        assert "\\u02c8" not in text

    def test_camel_case_keys(self, sample_conlang):
        data = json.loads(export_json(sample_conlang))
        assert set(data["grammar"]) == {"wordOrder", "pluralRule", "tenseRule", "adjectivePlacement"}
        assert "createdAt" in data

    def test_write_and_read_file(self, tmp_path, sample_conlang):
        path = write_file(sample_conlang, tmp_path / "patuan.json")
        assert read_file(path) == sample_conlang

    def test_bytes_with_bom_accepted(self, sample_conlang):
        raw = b"\xef\xbb\xbf" + export_json(sample_conlang).encode("utf-8")
        assert import_json(raw) == sample_conlang

    def test_export_filename(self):
        assert export_filename(Conlang(name="High Elvish!")) == "High_Elvish.json"
        assert export_filename(Conlang()) == "conlang.json"


class TestFileImportErrors:
    def test_malformed_json(self):
        with pytest.raises(ConlangImportError, match="Invalid JSON file formatting"):
            import_json("{oops")

    def test_not_an_object(self):
        with pytest.raises(ConlangImportError):
            import_json("[1, 2, 3]")

    def test_wrong_field_types(self):
        with pytest.raises(ConlangImportError, match="vocabulary"):
            import_json('{"name": "X", "vocabulary": "lots"}')

    def test_partial_record_gets_defaults(self):
        c = import_json('{"name": "Sparse"}')
        assert c.name == "Sparse"
        assert c.grammar.word_order == "SVO"
        assert c.id is None

    def test_repeated_word_ids_made_unique(self):
        raw = json.dumps({
            "name": "Dup",
            "vocabulary": [
                {"id": "1", "native": "pa", "meaning": "sun", "pronunciation": "pa"},
                {"id": "1", "native": "ta", "meaning": "moon", "pronunciation": "ta"},
            ],
        })
        ids = import_json(raw).vocabulary_ids()
        assert len(ids) == len(set(ids)) == 2


class TestShareToken:
    def test_round_trip_with_ipa(self, sample_conlang):
        token = encode_share_token(sample_conlang)
        decoded = decode_share_token(token)
        assert decoded == sample_conlang
        assert decoded.vocabulary[0].native == "ˈpʰa.tu"

    def test_token_is_url_safe_without_padding(self, sample_conlang):
        token = encode_share_token(sample_conlang)
        assert "=" not in token
        assert "+" not in token
        assert "/" not in token

    def test_standard_base64_with_padding_accepted(self, sample_conlang):
        raw = json.dumps(sample_conlang.to_wire(), ensure_ascii=False).encode("utf-8")
        legacy = base64.b64encode(raw).decode("ascii")
        assert decode_share_token(legacy) == sample_conlang

    def test_plus_turned_into_space_restored(self, sample_conlang):
        raw = json.dumps(sample_conlang.to_wire(), ensure_ascii=False).encode("utf-8")
        legacy = base64.b64encode(raw).decode("ascii")
        assert decode_share_token(legacy.replace("+", " ")) == sample_conlang

    def test_truncated_token(self, sample_conlang):
        token = encode_share_token(sample_conlang)
        with pytest.raises(ShareTokenError):
            decode_share_token(token[: len(token) // 2])

    @pytest.mark.parametrize("token", ["", "   ", "!!!not-base64!!!"])
    def test_malformed_token(self, token):
        with pytest.raises(ShareTokenError):
            decode_share_token(token)

    def test_token_of_non_record(self):
        token = base64.urlsafe_b64encode(b"[1, 2]").decode("ascii")
        with pytest.raises(ShareTokenError):
            decode_share_token(token)

    def test_repeated_word_ids_made_unique(self):
        record = {
            "name": "Dup",
            "vocabulary": [
                {"id": "7", "native": "pa", "meaning": "sun", "pronunciation": "pa"},
                {"id": "7", "native": "ta", "meaning": "moon", "pronunciation": "ta"},
            ],
        }
        token = base64.urlsafe_b64encode(json.dumps(record).encode("utf-8")).decode("ascii")
        assert decode_share_token(token).vocabulary_ids() == ["7", "7-2"]


class TestShareUrl:
    def test_build_and_extract(self, sample_conlang):
        url = build_share_url("https://glossaforge.app/", sample_conlang)
        assert url.startswith("https://glossaforge.app/?share=")
        assert decode_share_token(token_from_url(url)) == sample_conlang

    def test_existing_query_kept_and_share_replaced(self, sample_conlang):
        url = build_share_url("http://localhost:8501/?theme=dark&share=old", sample_conlang)
        assert "theme=dark" in url
        assert url.count("share=") == 1

    def test_no_token(self):
        assert token_from_url("http://localhost:8501/") is None


class TestMarkdownSheet:
    def test_sections_present(self, sample_conlang):
        md = render_markdown(sample_conlang)
        assert md.startswith("# Patuan")
        assert "## Phonology" in md
        assert "## Grammar" in md
        assert "- **Word order**: VSO" in md
        assert "## Lexicon (2 words)" in md
        assert "| ˈpʰa.tu | /ˈpʰa.tu/ | river |" in md

    def test_phonemes_grouped_by_category(self, sample_conlang):
        md = render_markdown(sample_conlang)
        assert "- **Consonants**: p t" in md
        assert "- **Vowels**: a u" in md
        assert "- **Other**: pʰ" in md

    def test_pipes_escaped(self):
        c = Conlang.model_validate({
            "name": "Pipe",
            "vocabulary": [{"id": "1", "native": "ǀa", "meaning": "a|b", "pronunciation": "ǀa"}],
        })
        assert "a\\|b" in render_markdown(c)

    def test_empty_record(self):
        md = render_markdown(Conlang())
        assert "# Untitled language" in md
        assert "*No phonemes selected.*" in md
        assert "*No words yet.*" in md
