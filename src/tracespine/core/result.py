"""
Result envelope for best-effort loading.

Loading an artifact tree is batch work: one malformed file must not abort
the scan of its siblings. Operations that aggregate many sub-loads return
``Ok`` or ``Err`` instead of raising, so the caller decides when a partial
failure becomes fatal.

Manifesto:
    - **Explicit over Implicit:** Directory scans return a Result, never a
      half-raised exception
    - **Report everything:** ``collect_all_errors`` folds many failures into
      one error that still lists each message

Usage:
    from tracespine.core.result import Err, Ok

    match load_dir(root, session):
        case Ok(count):
            logger.info("loaded", count=count)
        case Err(error):
            logger.error("failed", error=str(error))
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

from tracespine.core.errors import ErrorCategory, LoadError

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """A value produced without error."""

    value: T

    def unwrap(self) -> T:
        return self.value

    def map(self, f: Callable[[T], U]) -> Result[U]:
        return Ok(f(self.value))

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[T]):
    """
    The exception that stopped a value from being produced.

    ``map`` passes the Err through unchanged; ``unwrap`` raises the error.
    """

    error: Exception

    def unwrap(self) -> T:
        raise self.error

    def map(self, f: Callable[[T], U]) -> Result[U]:
        return self  # type: ignore[return-value]

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Ok[T] | Err[T]


def try_result(
    f: Callable[[], T],
    catch: type[Exception] | tuple[type[Exception], ...] = Exception,
) -> Result[T]:
    """
    Call ``f`` and wrap its return value or exception.

    Only exceptions matching ``catch`` become an Err; anything else
    propagates, so programming errors are never mistaken for a bad file.
    """
    try:
        return Ok(f())
    except catch as e:
        return Err(e)


def collect_all_errors(results: list[Result[T]]) -> Result[list[T]]:
    """
    Combine results into one, keeping every error.

    All Ok gives ``Ok([values...])``. A single error is returned as-is;
    several are folded into one LoadError whose
    ``context.metadata["errors"]`` lists every message.

    Examples:
        >>> collect_all_errors([Ok(1), Ok(2)]).unwrap()
        [1, 2]
        >>> err = collect_all_errors([Err(ValueError("a")), Err(ValueError("b"))])
        >>> str(err.error)
        'Multiple errors (2): a; b'
    """
    values: list[T] = []
    errors: list[Exception] = []
    for result in results:
        match result:
            case Ok(value):
                values.append(value)
            case Err(error):
                errors.append(error)

    if not errors:
        return Ok(values)
    if len(errors) == 1:
        return Err(errors[0])

    messages = [str(e) for e in errors]
    shown = "; ".join(messages[:3]) + ("..." if len(messages) > 3 else "")
    folded = LoadError(f"Multiple errors ({len(errors)}): {shown}", category=ErrorCategory.INTERNAL)
    folded.context.metadata.update(error_count=len(errors), errors=messages)
    return Err(folded)


__all__ = [
    "Ok",
    "Err",
    "Result",
    "try_result",
    "collect_all_errors",
]
