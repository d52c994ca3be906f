"""Tests for tracespine.core.loader: TOML parsing and single-file loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from tracespine.core.errors import FileAccessError, SchemaError, TomlSyntaxError
from tracespine.core.loader import load_file, load_toml, parse_toml
from tracespine.core.models import ArtName, LoadSession


class TestParseToml:
    def test_valid(self):
        assert parse_toml('[REQ-a]\ntext = "x"\n') == {"REQ-a": {"text": "x"}}

    def test_syntax_error_has_position(self):
        with pytest.raises(TomlSyntaxError) as exc_info:
            parse_toml('[REQ-a]\ntext = "x\n')
        error = exc_info.value
        assert error.context.line == 2
        assert str(error).startswith("[2:")

    def test_syntax_error_keeps_cause(self):
        with pytest.raises(TomlSyntaxError) as exc_info:
            parse_toml("[REQ-a\n")
        assert exc_info.value.cause is not None


class TestLoadToml:
    def test_loads_into_session(self):
        session = LoadSession()
        assert load_toml(Path("a.rsk"), "[REQ-a]\n[REQ-b]\n", session) == 2
        assert ArtName.from_str("req-b") in session.artifacts


class TestLoadFile:
    def test_loads_file(self, tmp_path: Path):
        f = tmp_path / "a.rsk"
        f.write_text('[REQ-a]\ntext = "hello"\n')
        session = LoadSession()
        assert load_file(f, session) == 1
        art = session.artifacts[ArtName.from_str("REQ-a")]
        assert art.path == f
        assert art.text == "hello"

    def test_missing_file(self, tmp_path: Path):
        missing = tmp_path / "missing.rsk"
        with pytest.raises(FileAccessError, match="Error loading path") as exc_info:
            load_file(missing, LoadSession())
        assert exc_info.value.context.path == str(missing)

    def test_not_utf8(self, tmp_path: Path):
        f = tmp_path / "bad.rsk"
        f.write_bytes(b"[REQ-a]\ntext = \"\xff\xfe\"\n")
        with pytest.raises(FileAccessError):
            load_file(f, LoadSession())

    def test_schema_error_carries_path(self, tmp_path: Path):
        f = tmp_path / "a.rsk"
        f.write_text("[REQ-a]\nbogus = 1\n")
        with pytest.raises(SchemaError) as exc_info:
            load_file(f, LoadSession())
        assert exc_info.value.context.path == str(f)

    def test_syntax_error_carries_path(self, tmp_path: Path):
        f = tmp_path / "a.rsk"
        f.write_text("[REQ-a\n")
        with pytest.raises(TomlSyntaxError) as exc_info:
            load_file(f, LoadSession())
        assert exc_info.value.context.path == str(f)
