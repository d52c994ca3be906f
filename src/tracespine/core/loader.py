"""
Reading and parsing single ``.rsk`` files.

TOML parsing is delegated to :mod:`tomllib`; this module turns its decode
errors (and I/O errors) into :class:`~tracespine.core.errors.LoadError`
subclasses that name the offending file and position, then hands the table
to :func:`tracespine.core.table.load_table`.
"""

from __future__ import annotations

import re
import tomllib
from pathlib import Path
from typing import Any

from tracespine.core.errors import FileAccessError, LoadError, TomlSyntaxError
from tracespine.core.logging import get_logger
from tracespine.core.models import LoadSession
from tracespine.core.table import load_table

logger = get_logger(__name__)

_POSITION_RE = re.compile(r"\(at line (?P<line>\d+), column (?P<col>\d+)\)")


def parse_toml(text: str) -> dict[str, Any]:
    """Parse TOML text into a table.

    Raises:
        TomlSyntaxError: with ``[line:col] message`` and the position in the
            error context when the decoder reports one.
    """
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise _syntax_error(exc) from exc


def _syntax_error(exc: tomllib.TOMLDecodeError) -> TomlSyntaxError:
    message = getattr(exc, "msg", None) or str(exc)
    line = getattr(exc, "lineno", None)
    col = getattr(exc, "colno", None)
    if line is None:
        match = _POSITION_RE.search(str(exc))
        if match:
            line, col = int(match.group("line")), int(match.group("col"))
            message = _POSITION_RE.sub("", message).strip()
    if line is None:
        return TomlSyntaxError(message, cause=exc)
    error = TomlSyntaxError(f"[{line}:{col}] {message}", cause=exc)
    error.context.line = line
    error.context.column = col
    return error


def load_toml(path: Path, text: str, session: LoadSession) -> int:
    """Parse ``text`` (the contents of ``path``) and load its declarations."""
    table = parse_toml(text)
    return load_table(table, path, session)


def load_file(path: Path, session: LoadSession) -> int:
    """Load the artifacts declared in one file.

    Returns:
        Number of artifacts added to ``session``.

    Raises:
        FileAccessError: the file cannot be read.
        LoadError: the file is not valid TOML or violates the schema. The
            error context carries the path.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise FileAccessError(f"Error loading path {str(path)!r}: {exc}", cause=exc).with_context(
            path=path
        ) from exc

    try:
        count = load_toml(path, text, session)
    except LoadError as exc:
        raise exc.with_context(path=path)
    logger.debug("file_loaded", path=str(path), artifacts=count)
    return count
