"""
Structured error types for tracespine.

Every failure raised while discovering and loading artifact files is a
TraceError. Errors carry a category, structured context (file path,
artifact, attribute, source position) and an optional chained cause so the
loader can log each failure with its path and still report the aggregate.

Manifesto:
    - **Typed Error Hierarchy:** One class per failure kind in the load pipeline
    - **Rich Context:** Errors know which file, artifact and attribute failed
    - **Error Chaining:** Preserve the original OSError/TOMLDecodeError as cause
    - **Partial failure:** LoadError carries every (path, error) pair that was
      collected during a best-effort scan

Architecture:
    ::

        TraceError  (category, context, cause)
          |
          +-- LoadError  (failures)
                +-- FileAccessError      SOURCE   unreadable file or entry
                +-- TomlSyntaxError      PARSE    malformed TOML, with line/col
                +-- NameGrammarError     PARSE    bad partof expansion syntax
                +-- ArtNameError         PARSE    malformed artifact name
                +-- LocError             PARSE    malformed loc string
                +-- SchemaError          VALIDATION
                |     +-- DuplicateArtifactError
                |     +-- ReservedGlobalError
                +-- VariableError        CONFIG   unknown/circular variables

Examples:
    >>> error = SchemaError("REQ-foo has invalid attribute: text")
    >>> error.with_context(path="reqs/foo.rsk", artifact="REQ-foo")
    SchemaError('REQ-foo has invalid attribute: text', category=VALIDATION)
    >>> error.context.path
    'reqs/foo.rsk'

Tags:
    error-handling, exception-hierarchy, error-context, tracespine, loader
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification.

    Attributes:
        SOURCE: Unreadable file, undeterminable directory entry
        PARSE: TOML syntax, name grammar, name and loc syntax
        VALIDATION: Schema violations in artifact, settings or globals tables
        CONFIG: Variable and settings resolution problems
        INTERNAL: Aggregated or unexpected failures
    """

    SOURCE = "SOURCE"             # Unreadable file or directory entry
    PARSE = "PARSE"               # Syntax errors
    VALIDATION = "VALIDATION"     # Schema violations
    CONFIG = "CONFIG"             # Variable and settings resolution
    INTERNAL = "INTERNAL"         # Aggregates, bugs


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Only fields that are set show up in ``to_dict()``.

    Attributes:
        path: File or directory being loaded
        artifact: Artifact name being validated
        attribute: Attribute (or settings key) that failed
        line: 1-based line in the source file, when known
        column: 1-based column in the source file, when known
        metadata: Additional key-value pairs
    """

    path: str | None = None
    artifact: str | None = None
    attribute: str | None = None
    line: int | None = None
    column: int | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["path", "artifact", "attribute", "line", "column"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class TraceError(Exception):
    """
    Base exception for all tracespine errors.

    Subclasses set ``default_category`` so callers never have to pass one.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> TraceError:
        """
        Add context to this error (fluent API).

        Usage:
            raise SchemaError("bad value").with_context(
                path=str(path),
                artifact="REQ-foo",
            )
        """
        for key, value in kwargs.items():
            if isinstance(value, Path):
                value = str(value)
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# LOAD ERRORS
# =============================================================================


class LoadError(TraceError):
    """
    Failure to load artifacts.

    A LoadError raised at the end of a best-effort scan carries every
    ``(path, error)`` pair that was collected in ``failures``; errors raised
    for a single file leave it empty.
    """

    default_category = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        failures: list[tuple[Path, Exception]] | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.failures: list[tuple[Path, Exception]] = list(failures or [])

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.failures:
            result["failures"] = [
                {"path": str(path), "error": str(error)} for path, error in self.failures
            ]
        return result


class FileAccessError(LoadError):
    """A file could not be read, or a directory entry could not be inspected."""

    default_category = ErrorCategory.SOURCE


class TomlSyntaxError(LoadError):
    """Malformed TOML. ``context.line``/``context.column`` hold the position."""

    default_category = ErrorCategory.PARSE


class NameGrammarError(LoadError):
    """Invalid bracket/comma name expansion syntax."""

    default_category = ErrorCategory.PARSE


class ArtNameError(LoadError):
    """A string is not a valid artifact name."""

    default_category = ErrorCategory.PARSE


class LocError(LoadError):
    """A ``loc`` string is not a valid source location."""

    default_category = ErrorCategory.PARSE


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class SchemaError(LoadError):
    """
    A declaration table does not match the expected shape.

    Never recoverable: the file must be fixed.
    """

    default_category = ErrorCategory.VALIDATION

    def __init__(
        self,
        message: str,
        *,
        artifact: str | None = None,
        attribute: str | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        if artifact is not None:
            self.context.artifact = artifact
        if attribute is not None:
            self.context.attribute = attribute


class DuplicateArtifactError(SchemaError):
    """An artifact name was declared twice."""

    def __init__(self, name: str, previous_path: Path, message: str | None = None):
        self.name = name
        self.previous_path = previous_path
        super().__init__(
            message or f"Overlapping key found <{name}> other key at: {previous_path}",
            artifact=name,
        )


class ReservedGlobalError(SchemaError):
    """A ``globals`` table declares one of the injected default variables."""

    def __init__(self, key: str, message: str | None = None):
        self.key = key
        super().__init__(
            message or f"cannot use variables: repo, cwd (found {key!r})",
            attribute=key,
        )


# =============================================================================
# RESOLUTION ERRORS
# =============================================================================


class VariableError(LoadError):
    """Unknown, duplicated or circular variables, or a missing repository."""

    default_category = ErrorCategory.CONFIG


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def categorize_error(error: Exception) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, TraceError):
        return error.category
    if isinstance(error, OSError):
        return ErrorCategory.SOURCE
    if isinstance(error, ValueError):
        return ErrorCategory.VALIDATION
    return ErrorCategory.INTERNAL


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "TraceError",
    "LoadError",
    "FileAccessError",
    "TomlSyntaxError",
    "NameGrammarError",
    "ArtNameError",
    "LocError",
    "SchemaError",
    "DuplicateArtifactError",
    "ReservedGlobalError",
    "VariableError",
    "categorize_error",
]
