"""Natural ordering of camera dump file names (img_2 before img_10)."""

from __future__ import annotations

import locale
import re
from functools import cmp_to_key
from pathlib import Path
from typing import Iterable

_FIRST_DIGITS = re.compile(r"[0-9]+")


def numeric_key(name: str) -> int | None:
    """Value of the first run of decimal digits in name, or None."""
    match = _FIRST_DIGITS.search(name)
    return int(match.group()) if match else None


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def compare_names(a: str, b: str, numeric: bool = True) -> int:
    """Numeric when both names carry a number, locale collation otherwise."""
    if numeric:
        ka, kb = numeric_key(a), numeric_key(b)
        if ka is not None and kb is not None and ka != kb:
            return -1 if ka < kb else 1
    collated = _sign(locale.strcoll(a, b))
    if collated:
        return collated
    return (a > b) - (a < b)


def natural_sort(paths: Iterable[Path], numeric: bool = True) -> list[Path]:
    """Order paths by file name; the full path breaks remaining ties."""

    def _compare(p: Path, q: Path) -> int:
        by_name = compare_names(p.name, q.name, numeric)
        if by_name:
            return by_name
        sp, sq = str(p), str(q)
        return (sp > sq) - (sp < sq)

    return sorted(paths, key=cmp_to_key(_compare))
