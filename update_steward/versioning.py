"""Version classification and ordering utilities.

Used by the global update filter (snapshot handling) and by the Maven
Central resolver adapter (selecting strictly newer versions, ascending).

Ordering rules:

- Versions are split into numeric and alphabetic tokens; '.', '-' and '_'
  are equivalent separators and a leading 'v' before a digit is dropped.
- Numeric tokens compare as integers; alphabetic tokens compare
  case-insensitively after canonicalization (RELEASE/GA -> final, CR -> rc).
- A numeric token sorts after an alphabetic one at the same position.
- When one version is a prefix of the other, a tail of zeros or stable
  markers is insignificant, a pre-release tail sorts first, and any other
  tail sorts last.
"""

from __future__ import annotations

import re
from functools import cmp_to_key
from typing import Final, Iterable, List, Union

Token = Union[int, str]

_SNAPSHOT: Final[re.Pattern[str]] = re.compile(r"snapshot", re.IGNORECASE)

_SEPARATORS: Final[re.Pattern[str]] = re.compile(r"[._-]+")
_TOKENS: Final[re.Pattern[str]] = re.compile(r"\d+|[A-Za-z]+")

_CANONICAL: Final[dict[str, str]] = {"release": "final", "ga": "final", "cr": "rc"}
_PRERELEASE_TOKENS: Final[frozenset[str]] = frozenset(
    {"snapshot", "alpha", "beta", "rc", "milestone", "m", "preview", "ea"}
)


def _require(version: str) -> str:
    s = (version or "").strip()
    if not s:
        raise ValueError("version must be a non-empty string")
    return s


def is_snapshot(version: str) -> bool:
    """Return True for SNAPSHOT builds (any case, anywhere in the string)."""
    return bool(_SNAPSHOT.search(_require(version)))


def _tokenize(version: str) -> List[Token]:
    s = _require(version)
    if len(s) > 1 and s[0] in "vV" and s[1].isdigit():
        s = s[1:]
    tokens: List[Token] = []
    for part in _SEPARATORS.split(s):
        for tok in _TOKENS.findall(part):
            if tok.isdigit():
                tokens.append(int(tok))
            else:
                low = tok.lower()
                tokens.append(_CANONICAL.get(low, low))
    return tokens


def _tail_weight(tail: List[Token]) -> int:
    # 0: insignificant, -1: pre-release tail, 1: meaningful tail
    for tok in tail:
        if tok == 0 or tok == "final":
            continue
        if isinstance(tok, str) and tok in _PRERELEASE_TOKENS:
            return -1
        return 1
    return 0


def compare_versions(a: str, b: str) -> int:
    """Return -1, 0 or 1 as ``a`` sorts before, equal to or after ``b``."""
    ta = _tokenize(a)
    tb = _tokenize(b)
    for xa, xb in zip(ta, tb):
        if type(xa) is type(xb):
            if xa != xb:
                return -1 if xa < xb else 1  # type: ignore[operator]
        else:
            return 1 if isinstance(xa, int) else -1

    common = min(len(ta), len(tb))
    if len(ta) > common:
        return _tail_weight(ta[common:])
    if len(tb) > common:
        return -_tail_weight(tb[common:])
    return 0


def sort_versions(versions: Iterable[str]) -> list[str]:
    """Return the versions sorted ascending by :func:`compare_versions`."""
    return sorted(versions, key=cmp_to_key(compare_versions))


def newer_versions(current: str, candidates: Iterable[str]) -> list[str]:
    """Return the distinct candidates strictly newer than ``current``, ascending."""
    seen: set[str] = set()
    result: list[str] = []
    for v in candidates:
        s = v.strip() if isinstance(v, str) else ""
        if not s or s in seen:
            continue
        seen.add(s)
        if compare_versions(s, current) > 0:
            result.append(s)
    return sort_versions(result)


__all__ = [
    "compare_versions",
    "is_snapshot",
    "newer_versions",
    "sort_versions",
]
