"""Tests for tracespine.core.models: names, locations, artifacts, settings."""

from __future__ import annotations

from pathlib import Path

import pytest

from tracespine.core.errors import ArtNameError, LocError, SchemaError
from tracespine.core.models import (
    DEFAULT_REPO_NAMES,
    Artifact,
    ArtName,
    ArtType,
    LoadSession,
    Loc,
    Settings,
)


# ── ArtName ─────────────────────────────────────────────────────────────


class TestArtName:
    def test_case_insensitive_equality(self):
        assert ArtName.from_str("REQ-foo") == ArtName.from_str("req-FOO")

    def test_hash_matches_equality(self):
        assert len({ArtName.from_str("REQ-foo"), ArtName.from_str("Req-Foo")}) == 1

    def test_raw_spelling_kept(self):
        name = ArtName.from_str("Req-Foo")
        assert name.raw == "Req-Foo"
        assert str(name) == "Req-Foo"

    def test_value_is_upper(self):
        assert ArtName.from_str("spc-core-load").value == "SPC-CORE-LOAD"

    def test_strips_surrounding_whitespace(self):
        assert ArtName.from_str("  REQ-a ").raw == "REQ-a"

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("REQ-a", ArtType.REQ),
            ("spc-a", ArtType.SPC),
            ("TST-a", ArtType.TST),
            ("DOC-a", ArtType.OTHER),
            ("REQ", ArtType.REQ),
        ],
    )
    def test_type_from_first_segment(self, raw, expected):
        assert ArtName.from_str(raw).type is expected

    @pytest.mark.parametrize("raw", ["", "REQ-", "-REQ", "REQ--a", "REQ a", "REQ-a!", "REQ-[a]"])
    def test_invalid(self, raw):
        with pytest.raises(ArtNameError):
            ArtName.from_str(raw)

    def test_ordering_by_segments(self):
        ordered = sorted([ArtName.from_str("SPC-b"), ArtName.from_str("req-a"), ArtName.from_str("REQ-B")])
        assert [n.raw for n in ordered] == ["req-a", "REQ-B", "SPC-b"]


# ── Loc ─────────────────────────────────────────────────────────────────


class TestLoc:
    def test_path_only(self):
        loc = Loc.from_str("src/a.py")
        assert loc == Loc(Path("src/a.py"))

    def test_path_and_line(self):
        loc = Loc.from_str("src/a.py:12")
        assert (loc.path, loc.line, loc.col) == (Path("src/a.py"), 12, None)

    def test_path_line_col(self):
        loc = Loc.from_str("src/a.py:12:4")
        assert (loc.line, loc.col) == (12, 4)

    def test_str_round_trip(self):
        assert str(Loc.from_str("src/a.py:12:4")) == "src/a.py:12:4"

    def test_empty_path(self):
        with pytest.raises(LocError):
            Loc.from_str(":12")

    def test_non_numeric_line(self):
        with pytest.raises(LocError, match="line"):
            Loc.from_str("src/a.py:abc")

    def test_zero_line(self):
        with pytest.raises(LocError):
            Loc.from_str("src/a.py:0")


# ── Artifact ────────────────────────────────────────────────────────────


class TestArtifact:
    def test_type_follows_name(self):
        art = Artifact(name=ArtName.from_str("TST-x"), path=Path("a.rsk"))
        assert art.type is ArtType.TST

    def test_computed_fields_start_empty(self):
        art = Artifact(name=ArtName.from_str("REQ-x"), path=Path("a.rsk"))
        assert art.parts == set()
        assert art.completed is None
        assert art.tested is None

    def test_from_str(self):
        name, art = Artifact.from_str(
            '[SPC-core]\npartof = "REQ-[a, b]"\ntext = "hello"\nrefs = ["x.py"]\nloc = "x.py:3"\n'
        )
        assert name == ArtName.from_str("spc-core")
        assert art.path == Path("from_str")
        assert art.partof == {ArtName.from_str("REQ-a"), ArtName.from_str("REQ-b")}
        assert art.text == "hello"
        assert art.refs == ["x.py"]
        assert art.loc == Loc(Path("x.py"), 3)

    def test_from_str_requires_single_table(self):
        with pytest.raises(SchemaError, match="single table"):
            Artifact.from_str("[REQ-a]\n[REQ-b]\n")

    def test_from_str_rejects_non_table(self):
        with pytest.raises(SchemaError, match="single table"):
            Artifact.from_str('REQ-a = "text"\n')


# ── Settings ────────────────────────────────────────────────────────────


class TestSettings:
    def test_defaults(self):
        settings = Settings()
        assert settings.disabled is False
        assert list(settings.paths) == []
        assert settings.repo_names == set(DEFAULT_REPO_NAMES)

    def test_from_table(self):
        fragment = Settings.from_table({"paths": ["a", "b"], "repo_names": [".jj"], "disabled": False})
        assert list(fragment.paths) == [Path("a"), Path("b")]
        assert fragment.repo_names == {".jj"}

    def test_from_table_ignores_unknown_keys(self):
        fragment = Settings.from_table({"colour": "blue"})
        assert list(fragment.paths) == []

    def test_from_table_bad_paths(self):
        with pytest.raises(SchemaError, match="settings has invalid attribute: paths"):
            Settings.from_table({"paths": "a"})

    def test_from_table_bad_disabled(self):
        with pytest.raises(SchemaError, match="disabled"):
            Settings.from_table({"disabled": "yes"})


class TestLoadSession:
    def test_record_failure(self):
        session = LoadSession()
        error = ValueError("boom")
        session.record_failure(Path("a.rsk"), error)
        assert session.failures == [(Path("a.rsk"), error)]
