"""
Variable and settings resolution.

Placeholders use ``{name}`` syntax; ``{{`` and ``}}`` are literal braces.
Two variables are always available and may not be declared by users:

* ``cwd``: directory of the file the value was declared in
* ``repo``: nearest enclosing directory that contains one of
  ``Settings.repo_names`` (``.git``, ``.hg``, ``.svn`` by default)

Resolution happens in passes driven by :mod:`tracespine.core.pipeline`:

1. :func:`resolve_settings` after each scanned root, which may enqueue more
   roots from ``[settings] paths``
2. :func:`resolve_default_vars` per ``[globals]`` fragment
3. :func:`resolve_vars` for references between globals
4. :func:`fill_text_fields` into every artifact's ``text``

Tags:
    variables, settings, text-substitution, tracespine
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path

from tracespine.core.errors import VariableError
from tracespine.core.logging import get_logger
from tracespine.core.models import Artifact, Artifacts, Settings, Variables
from tracespine.core.result import Err, Ok, Result, collect_all_errors

logger = get_logger(__name__)

_PLACEHOLDER_RE = re.compile(r"\{\{|\}\}|\{([^{}]*)\}")

RepoMap = dict[Path, Path | None]


def find_repo(directory: Path, repo_names: Iterable[str], repo_map: RepoMap | None = None) -> Path | None:
    """Walk up from ``directory`` to the first one containing a repo marker.

    Results are cached in ``repo_map`` keyed by the starting directory.
    """
    directory = directory.resolve()
    if repo_map is not None and directory in repo_map:
        return repo_map[directory]
    names = list(repo_names)
    found: Path | None = None
    for candidate in (directory, *directory.parents):
        if any((candidate / name).exists() for name in names):
            found = candidate
            break
    if repo_map is not None:
        repo_map[directory] = found
    return found


def _substitute(text: str, lookup: Callable[[str], str | None], keep_escapes: bool = False) -> str:
    """Replace placeholders using ``lookup``.

    ``lookup`` returns ``None`` to leave a placeholder untouched.
    """

    def replace(match: re.Match[str]) -> str:
        token = match.group(0)
        if token in ("{{", "}}"):
            return token if keep_escapes else token[0]
        value = lookup(match.group(1).strip())
        return token if value is None else value

    return _PLACEHOLDER_RE.sub(replace, text)


def _placeholders(text: str) -> list[str]:
    return [m.group(1).strip() for m in _PLACEHOLDER_RE.finditer(text) if m.group(1) is not None]


class _DefaultVars:
    """Lazily computed ``cwd``/``repo`` for one directory."""

    def __init__(self, cwd: Path, repo_names: Iterable[str], repo_map: RepoMap):
        self.cwd = cwd
        self._repo_names = repo_names
        self._repo_map = repo_map

    def __call__(self, name: str) -> str | None:
        if name == "cwd":
            return str(self.cwd)
        if name == "repo":
            repo = find_repo(self.cwd, self._repo_names, self._repo_map)
            if repo is None:
                raise VariableError(f"{{repo}} used but no repository found above {self.cwd}").with_context(
                    path=self.cwd
                )
            return str(repo)
        return None


def resolve_settings(
    settings: Settings,
    repo_map: RepoMap,
    fragments: Iterable[tuple[Path, Settings]],
) -> Settings:
    """Merge settings fragments into ``settings``.

    Each path in a fragment may use ``{cwd}`` and ``{repo}``; relative paths
    are taken relative to the declaring file's directory. Paths already
    queued are not queued again.

    Raises:
        VariableError: unknown placeholder, or ``{repo}`` with no repository.
    """
    for file_path, fragment in fragments:
        settings.repo_names.update(fragment.repo_names)
        defaults = _DefaultVars(file_path.parent.resolve(), settings.repo_names, repo_map)
        for raw in fragment.paths:
            text = str(raw)
            unknown = [name for name in _placeholders(text) if name not in ("cwd", "repo")]
            if unknown:
                raise VariableError(
                    f"settings paths may only use {{cwd}} and {{repo}}, found: {unknown}"
                ).with_context(path=file_path)
            path = Path(_substitute(text, defaults))
            if not path.is_absolute():
                path = defaults.cwd / path
            path = path.resolve()
            if path not in settings.paths:
                logger.debug("settings_path_queued", path=str(path), declared_in=str(file_path))
                settings.paths.append(path)
    return settings


def resolve_default_vars(
    fragment: Variables,
    path: Path,
    variables: Variables,
    repo_map: RepoMap,
    repo_names: Iterable[str],
) -> Variables:
    """Substitute ``{cwd}``/``{repo}`` in one ``[globals]`` fragment and add it to ``variables``.

    Other placeholders are left for :func:`resolve_vars`.

    Raises:
        VariableError: a name is already defined by another file.
    """
    defaults = _DefaultVars(path.parent.resolve(), repo_names, repo_map)
    for key, value in fragment.items():
        if key in variables:
            raise VariableError(f"global var {key!r} exists twice, second at {path}").with_context(
                path=path, attribute=key
            )
        variables[key] = _substitute(value, defaults, keep_escapes=True)
    return variables


def resolve_vars(variables: Variables) -> Variables:
    """Resolve references between variables in place.

    Raises:
        VariableError: circular or unknown reference.
    """
    resolved: set[str] = set()

    def visit(name: str, stack: list[str]) -> str:
        if name in resolved:
            return variables[name]
        if name in stack:
            cycle = " -> ".join([*stack[stack.index(name):], name])
            raise VariableError(f"circular reference in variables: {cycle}").with_context(attribute=name)

        def lookup(ref: str) -> str:
            if ref not in variables:
                raise VariableError(f"variable {name!r} references unknown variable {ref!r}").with_context(
                    attribute=name
                )
            return visit(ref, [*stack, name])

        variables[name] = _substitute(variables[name], lookup, keep_escapes=True)
        resolved.add(name)
        return variables[name]

    for name in list(variables):
        visit(name, [])
    # resolved values hold literal braces
    for name, value in variables.items():
        variables[name] = _substitute(value, lambda _: None)
    return variables


def _fill_text(
    artifact: Artifact,
    settings: Settings,
    variables: Mapping[str, str],
    repo_map: RepoMap,
) -> Result[str]:
    defaults = _DefaultVars(artifact.path.parent.resolve(), settings.repo_names, repo_map)

    def lookup(name: str) -> str:
        if name in variables:
            return variables[name]
        value = defaults(name)
        if value is None:
            raise VariableError(f"{artifact.name} text uses unknown variable {name!r}")
        return value

    try:
        return Ok(_substitute(artifact.text, lookup))
    except VariableError as exc:
        return Err(exc.with_context(path=artifact.path, artifact=artifact.name.raw))


def fill_text_fields(
    artifacts: Artifacts,
    settings: Settings,
    variables: Variables,
    repo_map: RepoMap,
) -> Artifacts:
    """Substitute resolved variables into every artifact's ``text``.

    Every artifact is attempted; failures are reported together.

    Raises:
        VariableError: one or more texts reference unknown variables.
    """
    results: list[Result[tuple[Artifact, str]]] = []
    for artifact in artifacts.values():
        results.append(_fill_text(artifact, settings, variables, repo_map).map(lambda text, a=artifact: (a, text)))

    match collect_all_errors(results):
        case Ok(filled):
            for artifact, text in filled:
                artifact.text = text
        case Err(VariableError() as error):
            raise error
        case Err(error):
            raise VariableError(str(error), context=getattr(error, "context", None)) from error
    return artifacts
