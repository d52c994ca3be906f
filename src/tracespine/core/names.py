"""
Bracket/comma expansion of artifact names.

``partof`` values are written compactly: a comma separated list where any
item may end in a bracket group that is expanded against the prefix before
it. Groups nest::

    "REQ-core-[load, link]"                ->  REQ-core-load, REQ-core-link
    "he-[ho, hi, ha-[ha, he]]"             ->  he-ho, he-hi, he-ha-ha, he-ha-he

Spaces, ``\\n`` and ``\\r`` are ignored everywhere. A ``[`` needs a non-empty
prefix, so ``"[hi]"`` and ``"hi-[ho, [he]]"`` are rejected, and an
unterminated group is an error.

Tags:
    parser, recursive-descent, artifact-names, tracespine
"""

from __future__ import annotations

from collections.abc import Iterator

from tracespine.core.errors import NameGrammarError
from tracespine.core.models import ArtName

_WHITESPACE = frozenset(" \n\r")


def _split_names(chars: Iterator[str], in_brackets: bool) -> list[str]:
    """Consume ``chars`` up to the end of input (or the closing ``]``)."""
    out: list[str] = []
    current: list[str] = []
    while True:
        c = next(chars, None)
        if c is None:
            if in_brackets:
                raise NameGrammarError("brackets are not closed")
            break
        if c in _WHITESPACE:
            continue
        if c == "[":
            if not current:
                raise NameGrammarError(
                    "cannot have '[' after characters ',' or ']' or at start of string"
                )
            prefix = "".join(current)
            out.extend(prefix + inner for inner in _split_names(chars, True))
            current.clear()
        elif c == "]":
            break
        elif c == ",":
            out.append("".join(current))
            current.clear()
        else:
            current.append(c)
    out.append("".join(current))
    return [name for name in out if name]


def split_names(text: str) -> list[str]:
    """Expand ``text`` into the ordered list of raw name strings.

    Raises:
        NameGrammarError: unclosed bracket or ``[`` without a prefix.
    """
    return _split_names(iter(text), False)


def parse_names(text: str) -> set[ArtName]:
    """Expand ``text`` into the set of artifact names it denotes.

    Raises:
        NameGrammarError: invalid expansion syntax.
        ArtNameError: an expanded item is not a valid name.
    """
    return {ArtName.from_str(raw) for raw in split_names(text)}
