"""Identifier normalisation and collision-free name allocation."""

import re
from typing import Iterable, Optional, Set

_SPLIT_RE = re.compile(r"[^a-zA-Z0-9]")
_TRAILING_DIGITS_RE = re.compile(r"\d+$")


def camel_case(name: str, upper: bool = False) -> str:
    """Turn arbitrary block-editor text into a Python identifier.

    Apostrophes are dropped, the rest is split on every non-alphanumeric
    character and each part is title-cased. Unless ``upper`` is set the
    first part is lower-cased entirely ("My Var" -> "myVar").
    """
    parts = _SPLIT_RE.split((name or "").replace("'", ""))
    parts = [part[:1].upper() + part[1:].lower() for part in parts]
    if not upper:
        parts[0] = parts[0].lower()

    result = "".join(parts)
    if not result:
        result = "_"
    if result[0].isdigit():
        result = "_" + result
    return result


class IdentifierAllocator:
    """Hands out names that are unique within one namespace.

    A name already taken gets its trailing number bumped ("score2" ->
    "score3"), or "2" appended when it has none. Names in ``reserved`` are
    never returned.
    """

    def __init__(self, reserved: Optional[Iterable[str]] = None) -> None:
        self.used: Set[str] = set(reserved or ())

    def allocate(self, candidate: str) -> str:
        name = candidate
        while name in self.used:
            match = _TRAILING_DIGITS_RE.search(name)
            if match is None:
                name = name + "2"
            else:
                name = name[: match.start()] + str(int(match.group(0)) + 1)
        self.used.add(name)
        return name

    def __contains__(self, name: str) -> bool:
        return name in self.used
