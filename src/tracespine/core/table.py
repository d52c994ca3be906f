"""
Validation of one file's worth of declarations.

A parsed ``.rsk`` file is a table whose top-level keys are:

* ``settings``: project settings fragment (``disabled``, ``paths``, ``repo_names``)
* ``globals``: string variables for text substitution
* anything else: one artifact, keyed by its name

Artifact tables accept only ``disabled``, ``text``, ``refs``, ``partof`` and
``loc``. Validation is fail-fast per file: the first problem raises, and
nothing from the file reaches the session.

Tags:
    schema-validation, artifacts, toml, tracespine
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from tracespine.core.errors import (
    DuplicateArtifactError,
    ReservedGlobalError,
    SchemaError,
)
from tracespine.core.logging import get_logger
from tracespine.core.models import (
    ARTIFACT_ATTRS,
    DEFAULT_GLOBALS,
    Artifact,
    Artifacts,
    ArtName,
    LoadSession,
    Loc,
    Settings,
    Variables,
)
from tracespine.core.names import parse_names

logger = get_logger(__name__)

_MISSING = object()


def _get_attr(table: dict[str, Any], attr: str, default: Any, kind: type, owner: str) -> Any:
    """Return ``table[attr]`` (or ``default``), checking its type."""
    value = table.get(attr, _MISSING)
    if value is _MISSING:
        return default
    if not isinstance(value, kind):
        raise SchemaError(f"{owner} has invalid attribute: {attr}", artifact=owner, attribute=attr)
    return value


def _get_str_list(table: dict[str, Any], attr: str, owner: str) -> list[str]:
    values = _get_attr(table, attr, [], list, owner)
    if not all(isinstance(v, str) for v in values):
        raise SchemaError(f"{owner} has invalid attribute: {attr}", artifact=owner, attribute=attr)
    return list(values)


def artifact_from_table(name: ArtName, path: Path, table: dict[str, Any]) -> Artifact:
    """Build an artifact from its attribute table.

    Raises:
        SchemaError: unknown attribute or wrong attribute type.
        NameGrammarError, ArtNameError: malformed ``partof``.
        LocError: malformed ``loc``.
    """
    invalid = sorted(k for k in table if k not in ARTIFACT_ATTRS)
    if invalid:
        raise SchemaError(f"{name} has invalid attributes: {invalid}", artifact=name.raw)

    owner = name.raw
    partof = _get_attr(table, "partof", "", str, owner)
    loc = _get_attr(table, "loc", "", str, owner)
    return Artifact(
        name=name,
        path=path,
        text=_get_attr(table, "text", "", str, owner),
        refs=_get_str_list(table, "refs", owner),
        partof=parse_names(partof),
        loc=Loc.from_str(loc) if loc else None,
    )


def _load_globals(table: Any) -> Variables:
    if not isinstance(table, dict):
        raise SchemaError("globals must be a Table", attribute="globals")
    variables: Variables = {}
    for key, value in table.items():
        if key in DEFAULT_GLOBALS:
            raise ReservedGlobalError(key)
        if not isinstance(value, str):
            raise SchemaError(f"{key} global var must be of type str", artifact="globals", attribute=key)
        variables[key] = value
    return variables


def load_table(table: dict[str, Any], path: Path, session: LoadSession) -> int:
    """Load every declaration in ``table`` into ``session``.

    ``table`` is consumed: ``settings`` and ``globals`` are popped from it.

    Args:
        table: Parsed file contents.
        path: File the table came from; stored on each artifact.
        session: Accumulators for the current load.

    Returns:
        Number of artifacts added (disabled artifacts are not counted).

    Raises:
        SchemaError: any declaration does not match the schema.
        DuplicateArtifactError: a name is already loaded.
        ReservedGlobalError: ``globals`` declares ``repo`` or ``cwd``.
    """
    settings_fragment: Settings | None = None
    variables: Variables | None = None

    if "settings" in table:
        raw = table.pop("settings")
        if not isinstance(raw, dict):
            raise SchemaError("settings must be a Table", attribute="settings")
        settings_fragment = Settings.from_table(raw)
        if settings_fragment.disabled:
            logger.debug("file_disabled", path=str(path))
            return 0

    if "globals" in table:
        variables = _load_globals(table.pop("globals"))

    staged: Artifacts = {}
    for key, value in table.items():
        name = ArtName.from_str(key)
        if not isinstance(value, dict):
            raise SchemaError(f"All top-level values must be a table: {key}", artifact=key)
        previous = session.artifacts.get(name) or staged.get(name)
        if previous is not None:
            raise DuplicateArtifactError(key, previous.path)
        if _get_attr(value, "disabled", False, bool, key):
            continue
        staged[name] = artifact_from_table(name, path, value)

    if settings_fragment is not None:
        session.settings.append((path, settings_fragment))
    if variables is not None:
        session.variables.append((path, variables))
    session.artifacts.update(staged)
    return len(staged)
