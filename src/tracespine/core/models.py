"""
Data model for artifacts and the settings that control how they are found.

An artifact is declared as a table in an ``.rsk`` TOML file::

    [SPC-core-load-table]
    partof = "REQ-core-[load, artifacts]"
    text = "load artifacts from a table, see {repo}/docs/load.md"
    refs = ["src/tracespine/core/table.py"]
    loc = "src/tracespine/core/table.py:40"

The table key is the :class:`ArtName`; its first segment decides the
:class:`ArtType`. ``parts``, ``completed`` and ``tested`` are computed by a
linking phase and stay empty / ``None`` after loading.

Tags:
    artifacts, data-model, dataclasses, tracespine
"""

from __future__ import annotations

import re
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from tracespine.core.errors import ArtNameError, LocError, SchemaError

ARTIFACT_EXTENSION = ".rsk"

ARTIFACT_ATTRS = frozenset({"disabled", "text", "refs", "partof", "loc"})

DEFAULT_GLOBALS = frozenset({"repo", "cwd"})

DEFAULT_REPO_NAMES = frozenset({".git", ".hg", ".svn"})

_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_]+(-[A-Za-z0-9_]+)*$")
_LOC_PATTERN = re.compile(r"^(?P<path>.*?)(?::(?P<line>[^:]*))?(?::(?P<col>[^:]*))?$")

Variables = dict[str, str]


class ArtType(str, Enum):
    """Artifact category, taken from the first segment of the name."""

    REQ = "REQ"       # requirement
    SPC = "SPC"       # specification
    TST = "TST"       # test
    OTHER = "OTHER"

    @classmethod
    def from_prefix(cls, prefix: str) -> ArtType:
        try:
            return cls(prefix.upper())
        except ValueError:
            return cls.OTHER


@dataclass(frozen=True, eq=False)
class ArtName:
    """
    Case-insensitive hierarchical artifact identifier.

    ``raw`` keeps the spelling it was declared with; equality and hashing use
    the upper-cased segments, so ``REQ-foo`` and ``req-FOO`` are the same name.

    Examples:
        >>> ArtName.from_str("SPC-core-load") == ArtName.from_str("spc-CORE-load")
        True
        >>> ArtName.from_str("TST-core").type
        <ArtType.TST: 'TST'>
    """

    raw: str
    segments: tuple[str, ...]

    @classmethod
    def from_str(cls, raw: str) -> ArtName:
        name = raw.strip()
        if not _NAME_PATTERN.match(name):
            raise ArtNameError(f"invalid artifact name: {raw!r}")
        return cls(raw=name, segments=tuple(s.upper() for s in name.split("-")))

    @property
    def value(self) -> str:
        """Normalized (upper-case) form."""
        return "-".join(self.segments)

    @property
    def type(self) -> ArtType:
        return ArtType.from_prefix(self.segments[0])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ArtName):
            return NotImplemented
        return self.segments == other.segments

    def __hash__(self) -> int:
        return hash(self.segments)

    def __lt__(self, other: ArtName) -> bool:
        return self.segments < other.segments

    def __str__(self) -> str:
        return self.raw

    def __repr__(self) -> str:
        return f"ArtName({self.raw!r})"


@dataclass(frozen=True)
class Loc:
    """A source location: ``path[:line[:col]]``."""

    path: Path
    line: int | None = None
    col: int | None = None

    @classmethod
    def from_str(cls, raw: str) -> Loc:
        match = _LOC_PATTERN.match(raw.strip())
        path = match.group("path") if match else ""
        if not path:
            raise LocError(f"loc must start with a path: {raw!r}")
        line = _loc_position(match.group("line"), "line", raw)
        col = _loc_position(match.group("col"), "column", raw)
        return cls(path=Path(path), line=line, col=col)

    def __str__(self) -> str:
        out = str(self.path)
        if self.line is not None:
            out += f":{self.line}"
        if self.col is not None:
            out += f":{self.col}"
        return out


def _loc_position(value: str | None, what: str, raw: str) -> int | None:
    if value is None:
        return None
    if not value.isdigit() or int(value) < 1:
        raise LocError(f"loc {what} must be a positive integer: {raw!r}")
    return int(value)


@dataclass
class Artifact:
    """One tracked item, as declared in an ``.rsk`` file."""

    name: ArtName
    path: Path
    text: str = ""
    refs: list[str] = field(default_factory=list)
    partof: set[ArtName] = field(default_factory=set)
    loc: Loc | None = None

    # Computed by the linking phase
    parts: set[ArtName] = field(default_factory=set)
    completed: float | None = None
    tested: float | None = None

    type: ArtType = field(init=False)

    def __post_init__(self) -> None:
        self.type = self.name.type

    @classmethod
    def from_str(cls, text: str) -> tuple[ArtName, Artifact]:
        """Load a single artifact table from TOML text.

        Mostly used to make tests and one-off checks easier; the artifact's
        path is ``from_str``.
        """
        from tracespine.core.loader import parse_toml
        from tracespine.core.table import artifact_from_table

        table = parse_toml(text)
        if len(table) != 1:
            raise SchemaError("must contain a single table")
        (key, value), = table.items()
        name = ArtName.from_str(key)
        if not isinstance(value, dict):
            raise SchemaError("must contain a single table", artifact=key)
        return name, artifact_from_table(name, Path("from_str"), value)


@dataclass
class Settings:
    """
    Project settings.

    One merged value exists per load. Each ``[settings]`` table in a file is
    parsed into a raw fragment with :meth:`from_table` and merged by
    :func:`tracespine.core.vars.resolve_settings`.

    Attributes:
        disabled: A disabled file contributes nothing
        paths: Directories still to be scanned (FIFO)
        repo_names: Directory names that mark a repository root
        color: Display hint
    """

    disabled: bool = False
    paths: deque[Path] = field(default_factory=deque)
    repo_names: set[str] = field(default_factory=lambda: set(DEFAULT_REPO_NAMES))
    color: bool = True

    @classmethod
    def from_table(cls, table: dict[str, Any]) -> Settings:
        """Parse a raw ``[settings]`` fragment. Unknown keys are ignored."""
        disabled = table.get("disabled", False)
        if not isinstance(disabled, bool):
            raise SchemaError("settings has invalid attribute: disabled", artifact="settings", attribute="disabled")
        paths = _str_list(table, "paths", "settings")
        repo_names = _str_list(table, "repo_names", "settings")
        return cls(
            disabled=disabled,
            paths=deque(Path(p) for p in paths),
            repo_names=set(repo_names),
        )


def _str_list(table: dict[str, Any], attr: str, owner: str) -> list[str]:
    """Read an optional list-of-strings attribute."""
    value = table.get(attr, [])
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise SchemaError(f"{owner} has invalid attribute: {attr}", artifact=owner, attribute=attr)
    return list(value)


Artifacts = dict[ArtName, Artifact]


@dataclass
class LoadSession:
    """
    Accumulators for one load, passed down the call chain.

    Attributes:
        artifacts: Every artifact loaded so far, keyed by name
        settings: ``(file, fragment)`` for each enabled ``[settings]`` table
        variables: ``(file, globals)`` for each ``[globals]`` table
        loaded_dirs: Resolved directories already scanned
        loaded_files: Resolved ``.rsk`` files already loaded
        failures: ``(path, error)`` for every file or entry that failed
    """

    artifacts: Artifacts = field(default_factory=dict)
    settings: list[tuple[Path, Settings]] = field(default_factory=list)
    variables: list[tuple[Path, Variables]] = field(default_factory=list)
    loaded_dirs: set[Path] = field(default_factory=set)
    loaded_files: set[Path] = field(default_factory=set)
    failures: list[tuple[Path, Exception]] = field(default_factory=list)

    def record_failure(self, path: Path, error: Exception) -> None:
        self.failures.append((path, error))
