"""
Recursive discovery of ``.rsk`` files below a directory.

Files at one level are loaded before any subdirectory is visited, and a
directory's subdirectories are only visited when that level produced at
least one artifact. A tree of unrelated code (vendored dependencies, build
output) nested under a scanned root is therefore never walked unless it
declares artifacts at its top.

Failures are best-effort: an unreadable entry or a bad file is logged with
its path, recorded on the session, and the scan carries on with its
siblings. The result is an Err only after the whole subtree was visited.

Symlinks are followed. A dangling link is skipped, and a file reached
through several links is loaded once, keyed by its resolved path.

Architecture:
    ::

        load_dir(root)
          |-- a.rsk  -> load_file  -> Ok(2)
          |-- b.rsk  -> load_file  -> Err(SchemaError)   logged, recorded
          |-- notes.txt               ignored
          |-- sub/                    collected
          |
          +-- loaded 2 at this level -> load_dir(sub)
          |
          Err(LoadError("some files failed to load"))

Tags:
    filesystem, recursive-scan, partial-failure, tracespine
"""

from __future__ import annotations

import stat
from pathlib import Path

from tracespine.core.errors import FileAccessError, LoadError, categorize_error
from tracespine.core.loader import load_file
from tracespine.core.logging import get_logger
from tracespine.core.models import ARTIFACT_EXTENSION, LoadSession
from tracespine.core.result import Err, Ok, Result, try_result

logger = get_logger(__name__)


def _list_dir(path: Path) -> list[Path]:
    try:
        return sorted(path.iterdir())
    except OSError as exc:
        raise FileAccessError(f"cannot read directory {str(path)!r}: {exc}", cause=exc).with_context(
            path=path
        ) from exc


def _entry_mode(entry: Path) -> int | None:
    """Mode of what ``entry`` points to.

    ``None`` for a dangling symlink (editor lock files, stale build links).

    Raises:
        OSError: the type of ``entry`` cannot be determined.
    """
    try:
        return entry.stat().st_mode
    except FileNotFoundError:
        if entry.is_symlink():
            return None
        raise


def load_dir(path: Path, session: LoadSession) -> Result[int]:
    """Load every ``.rsk`` file below ``path`` into ``session``.

    The caller is responsible for marking ``path`` itself as visited;
    subdirectories are marked (by resolved path) before being descended into.

    Returns:
        Ok with the number of artifacts loaded in the whole subtree, or Err
        with a LoadError if any file, entry or subdirectory failed. Artifacts
        from the files that did load stay in ``session`` either way.
    """
    listing = try_result(lambda: _list_dir(path), FileAccessError)
    if isinstance(listing, Err):
        logger.error("dir_load_failed", path=str(path), error=str(listing.error))
        session.record_failure(path, listing.error)
        return listing

    num_loaded = 0
    failed = False
    subdirs: list[Path] = []

    for entry in listing.value:
        try:
            mode = _entry_mode(entry)
        except OSError as exc:
            error = FileAccessError(f"cannot determine file type: {exc}", cause=exc).with_context(path=entry)
            logger.error(
                "entry_load_failed",
                path=str(entry),
                category=categorize_error(exc).value,
                error=str(error),
            )
            session.record_failure(entry, error)
            failed = True
            continue

        if mode is None:
            log = logger.warning if entry.suffix == ARTIFACT_EXTENSION else logger.debug
            log("dangling_link_skipped", path=str(entry))
        elif stat.S_ISDIR(mode):
            subdirs.append(entry)
        elif stat.S_ISREG(mode) and entry.suffix == ARTIFACT_EXTENSION:
            target = entry.resolve()
            if target in session.loaded_files:
                logger.debug("file_already_loaded", path=str(entry), target=str(target))
                continue
            session.loaded_files.add(target)
            match try_result(lambda: load_file(entry, session), LoadError):
                case Ok(count):
                    num_loaded += count
                case Err(error):
                    logger.error("file_load_failed", path=str(entry), **error.to_dict())
                    session.record_failure(entry, error)
                    failed = True

    if num_loaded > 0:
        for subdir in subdirs:
            key = subdir.resolve()
            if key in session.loaded_dirs:
                continue
            session.loaded_dirs.add(key)
            match load_dir(subdir, session):
                case Ok(count):
                    num_loaded += count
                case Err(_):
                    failed = True
    elif subdirs:
        logger.debug("subdirs_skipped", path=str(path), count=len(subdirs))

    if failed:
        return Err(LoadError("some files failed to load").with_context(path=path))
    return Ok(num_loaded)
