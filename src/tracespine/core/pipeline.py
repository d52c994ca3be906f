"""
Path resolution driver: from one starting path to a resolved artifact set.

Manifesto:
    Load as much as possible, then report every problem. A bad file deep in
    the tree must not hide the artifacts of its siblings, but the load as a
    whole still fails so nothing downstream mistakes a partial set for a
    complete one.

Architecture:
    ::

        start path
          |
          +-- file?  load_file ----------------+
          +-- dir?   queue it                  |
                                               v
        settings.paths (FIFO) <------- resolve_settings(fragments)
          |                                    ^
          +-- pop dir, skip if visited         |
          +-- load_dir(dir) -------------------+   may enqueue new dirs
          |
        queue empty
          |
          +-- resolve_default_vars  (per [globals] fragment)
          +-- resolve_vars          (references between globals)
          +-- fill_text_fields      (every artifact's text)
          |
        (artifacts, settings)  or  LoadError(failures=[...])

    Settings found while scanning one root can name further roots, so the
    queue is drained until empty rather than computed up front.

Examples:
    >>> from pathlib import Path
    >>> from tracespine.core.pipeline import load_path
    >>> artifacts, settings = load_path(Path("design"))  # doctest: +SKIP

Tags:
    pipeline, orchestration, settings-cascade, variables, tracespine
"""

from __future__ import annotations

import time
from pathlib import Path

from tracespine.core.errors import LoadError
from tracespine.core.loader import load_file
from tracespine.core.logging import LogContext, get_logger
from tracespine.core.models import Artifacts, LoadSession, Settings, Variables
from tracespine.core.result import Err
from tracespine.core.scanner import load_dir
from tracespine.core.vars import (
    RepoMap,
    fill_text_fields,
    resolve_default_vars,
    resolve_settings,
    resolve_vars,
)

logger = get_logger(__name__)


def load_path_raw(path: Path, session: LoadSession | None = None) -> tuple[Artifacts, Settings]:
    """Load every artifact reachable from ``path`` and resolve its text.

    Linking (parents, parts, coverage) does not happen here.

    Args:
        path: A single ``.rsk`` file or a directory to scan.
        session: Accumulators to load into. Pass one to inspect what did
            load when the call raises.

    Returns:
        The artifact set and the merged project settings.

    Raises:
        LoadError: ``path`` is neither a file nor a directory, a settings or
            variable resolution step failed, or (after every queued directory
            was scanned) any file or directory failed; ``failures`` then lists
            each ``(path, error)``.
    """
    session = session if session is not None else LoadSession()
    settings = Settings()
    repo_map: RepoMap = {}

    logger.info("loading_artifact_files", path=str(path))
    if path.is_file():
        session.loaded_files.add(path.resolve())
        load_file(path, session)
        resolve_settings(settings, repo_map, session.settings)
    elif path.is_dir():
        settings.paths.append(path.resolve())
    else:
        raise LoadError(f"File is not valid type: {path}").with_context(path=path)

    failed_dirs: list[Path] = []
    while settings.paths:
        directory = settings.paths.popleft().resolve()
        if directory in session.loaded_dirs:
            continue
        logger.debug("loading_dir", path=str(directory))
        session.settings.clear()
        session.loaded_dirs.add(directory)
        with LogContext(load_root=str(directory)):
            result = load_dir(directory, session)
        if isinstance(result, Err):
            logger.error("dir_load_failed", path=str(directory), error=str(result.error))
            failed_dirs.append(directory)
        resolve_settings(settings, repo_map, session.settings)

    if failed_dirs:
        dirs = ", ".join(f"<{d}>" for d in failed_dirs)
        raise LoadError(
            f"Error loading {dirs}: some files failed to load",
            failures=session.failures,
        )

    logger.info("resolving_default_globals")
    variables: Variables = {}
    for var_path, fragment in session.variables:
        resolve_default_vars(fragment, var_path, variables, repo_map, settings.repo_names)

    logger.info("resolving_variables", count=len(variables))
    resolve_vars(variables)

    logger.info("filling_text_fields", count=len(session.artifacts))
    fill_text_fields(session.artifacts, settings, variables, repo_map)

    return session.artifacts, settings


def load_path(path: Path) -> tuple[Artifacts, Settings]:
    """Load artifacts from ``path``, logging a timed summary."""
    start = time.perf_counter()
    logger.info("load_path_started", path=str(path))
    artifacts, settings = load_path_raw(path)
    logger.info(
        "load_path_done",
        artifacts=len(artifacts),
        seconds=round(time.perf_counter() - start, 3),
    )
    return artifacts, settings
