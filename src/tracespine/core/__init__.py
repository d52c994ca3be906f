"""tracespine core -- discovery, parsing and load resolution of artifacts.

Manifesto:
    Artifacts are declared where the work happens: in ``.rsk`` TOML files
    next to the code, tests and documents they describe. The core finds
    those files, validates every declaration against a strict schema,
    expands compact ``partof`` references and resolves variables, and
    reports every problem it found instead of stopping at the first.

Architecture::

    Layer 1 -- Type System & Errors
        errors.py          Structured error hierarchy (TraceError, LoadError)
        result.py          Result[T] envelope (Ok / Err / try_result)
        models.py          ArtName, Artifact, Settings, LoadSession
        logging.py         structlog configuration
        settings.py        Process settings (TRACESPINE_* env vars)

    Layer 2 -- Parsing & Validation
        names.py           Bracket/comma name expansion for ``partof``
        table.py           Schema validation of one file's declarations
        loader.py          TOML file loading

    Layer 3 -- Discovery & Resolution
        scanner.py         Recursive, best-effort directory scan
        vars.py            Settings merge, repo discovery, variables
        pipeline.py        load_path: queue of roots to resolved artifacts
"""

from tracespine.core.errors import (
    ArtNameError,
    DuplicateArtifactError,
    ErrorCategory,
    FileAccessError,
    LoadError,
    LocError,
    NameGrammarError,
    ReservedGlobalError,
    SchemaError,
    TomlSyntaxError,
    TraceError,
    VariableError,
)
from tracespine.core.loader import load_file, load_toml, parse_toml
from tracespine.core.models import (
    ARTIFACT_EXTENSION,
    Artifact,
    Artifacts,
    ArtName,
    ArtType,
    LoadSession,
    Loc,
    Settings,
    Variables,
)
from tracespine.core.names import parse_names, split_names
from tracespine.core.pipeline import load_path, load_path_raw
from tracespine.core.result import Err, Ok, Result
from tracespine.core.scanner import load_dir
from tracespine.core.table import load_table

__all__ = [
    # errors
    "TraceError",
    "LoadError",
    "ErrorCategory",
    "FileAccessError",
    "TomlSyntaxError",
    "NameGrammarError",
    "ArtNameError",
    "LocError",
    "SchemaError",
    "DuplicateArtifactError",
    "ReservedGlobalError",
    "VariableError",
    # result
    "Result",
    "Ok",
    "Err",
    # models
    "ARTIFACT_EXTENSION",
    "Artifact",
    "Artifacts",
    "ArtName",
    "ArtType",
    "LoadSession",
    "Loc",
    "Settings",
    "Variables",
    # loading
    "split_names",
    "parse_names",
    "load_table",
    "parse_toml",
    "load_toml",
    "load_file",
    "load_dir",
    "load_path_raw",
    "load_path",
]
