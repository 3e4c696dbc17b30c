# modpeek/identifiers.py
from __future__ import annotations

import re

__all__ = [
    "VERSION_REGEX",
    "CORE_MOD_IDS",
    "isValidModID",
    "isValidVersion",
    "toModID",
]



VERSION_REGEX = r"^\d{1,5}\.\d{1,4}\.\d{1,4}(?:-(?:rc|pre|dev)\.\d{1,4})?$"
_VERSION_RE = re.compile(VERSION_REGEX, re.ASCII)

CORE_MOD_IDS: frozenset[str] = frozenset({"game", "creative", "survival"})



def _isLower(ch: str) -> bool:
    return "a" <= ch <= "z"



def _isDigit(ch: str) -> bool:
    return "0" <= ch <= "9"



def isValidModID(value: str | None) -> bool:
    """Lowercase ASCII letters and digits, starting with a letter."""
    if not value:
        return False
    for idx, ch in enumerate(value):
        if _isLower(ch):
            continue
        if _isDigit(ch) and idx > 0:
            continue
        return False
    return True



def isValidVersion(value: str) -> bool:
    # fullmatch so a trailing newline is not accepted by '$'
    return _VERSION_RE.fullmatch(value) is not None



def toModID(name: str) -> str:
    """
    Derive a mod ID from a display name by keeping ASCII letters and digits, lowercased.

    Raises ValueError when the name starts with a digit or nothing usable is left.
    """
    if name is None:
        raise ValueError("Can't convert a missing name to a mod ID")

    out: list[str] = []
    for idx, ch in enumerate(name):
        isLetter = _isLower(ch) or "A" <= ch <= "Z"
        isDigit = _isDigit(ch)
        if isDigit and idx == 0:
            raise ValueError(
                f"Can't convert {name!r} to a mod ID automatically, because it starts with a number"
            )
        if isLetter or isDigit:
            out.append(ch.lower())

    modId = "".join(out)
    if not modId:
        raise ValueError(f"Can't convert {name!r} to a mod ID automatically, it has no letters or digits")
    if not isValidModID(modId):
        raise ValueError(f"Can't convert {name!r} to a mod ID automatically, the result {modId!r} is not valid")
    return modId
