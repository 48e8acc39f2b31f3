"""
Tests for document parsing and atomic writes
"""
import json
import os
import stat

import pytest

from linkstash.migrations.document import (
    Document,
    atomic_write_bytes,
    atomic_write_text,
    read_document,
    write_document,
)
from linkstash.migrations.errors import MalformedDocument


class TestDocument:

    def test_from_json(self):
        doc = Document.from_json('{"version": 2, "articles": [], "owner": "sam"}')
        assert doc.version == 2
        assert doc.records == []
        assert doc.payload["owner"] == "sam"

    def test_from_json_bytes(self):
        doc = Document.from_json('{"version": 1, "articles": ["é"]}'.encode("utf-8"))
        assert doc.records == ["é"]

    def test_missing_records_is_none(self):
        assert Document.from_json('{"version": 4}').records is None

    @pytest.mark.parametrize("text, message", [
        ("nope", "not valid JSON"),
        ("42", "must be a JSON object"),
        ('{"version": 1.5}', "must be an integer"),
        ('{"version": null}', "must be an integer"),
        ('{"version": -3}', "must be >= 0"),
        ("[" * 5000 + "]" * 5000, "nested too deeply"),
    ])
    def test_invalid(self, text, message):
        with pytest.raises(MalformedDocument, match=message):
            Document.from_json(text)

    def test_to_json_keeps_key_order(self):
        doc = Document.from_json('{"version": 1, "articles": [], "owner": "sam"}')
        doc.version = 4
        doc.records = {"list": []}
        assert doc.to_json() == '{"version":4,"articles":{"list":[]},"owner":"sam"}'

    def test_to_dict_does_not_mutate_payload(self):
        doc = Document.from_json('{"version": 1, "articles": []}')
        doc.version = 2
        doc.to_dict()
        assert doc.payload["version"] == 1


class TestReadWrite:

    def test_read_missing(self, data_file):
        assert read_document(data_file) is None

    def test_read_sets_location_on_error(self, data_file):
        data_file.write_text("{", encoding="utf-8")
        with pytest.raises(MalformedDocument) as exc_info:
            read_document(data_file)
        assert exc_info.value.location == data_file

    def test_write_then_read(self, data_file):
        write_document(data_file, Document(version=4, records={"list": []}))
        doc = read_document(data_file)
        assert doc.version == 4
        assert json.loads(data_file.read_text()) == {"version": 4, "articles": {"list": []}}

    def test_atomic_write_creates_parent(self, tmp_path):
        target = tmp_path / "nested" / "dir" / "doc.json"
        atomic_write_text(target, "{}")
        assert target.read_text() == "{}"

    def test_atomic_write_replaces_content(self, data_file):
        data_file.write_text("old", encoding="utf-8")
        atomic_write_text(data_file, "new")
        assert data_file.read_text() == "new"
        assert list(data_file.parent.iterdir()) == [data_file]

    def test_atomic_write_no_newline_translation(self, data_file):
        atomic_write_text(data_file, "a\r\nb\n")
        assert data_file.read_bytes() == b"a\r\nb\n"

    def test_atomic_write_bytes(self, data_file):
        atomic_write_bytes(data_file, b"\x00\r\n\xff")
        assert data_file.read_bytes() == b"\x00\r\n\xff"

    @pytest.mark.skipif(os.name == "nt", reason="POSIX file modes")
    def test_atomic_write_keeps_mode(self, data_file):
        data_file.write_text("old", encoding="utf-8")
        os.chmod(data_file, 0o600)
        atomic_write_text(data_file, "new")
        assert stat.S_IMODE(data_file.stat().st_mode) == 0o600
