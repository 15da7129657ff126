"""
Reduce artifact listings to one build per logical package.
"""
from __future__ import annotations

from typing import Dict, Iterable, Protocol

from pkgmirror.domain.package_utils import decode_package_name


class Comparator(Protocol):
    async def compare(self, new: str, old: str) -> int: ...


async def reduce_package_list(filenames: Iterable[str], comparator: Comparator) -> Dict[str, str]:
    """
    Map each logical package name to its newest artifact filename.

    Filenames are visited in the given order. An entry is replaced only when a
    later filename compares strictly newer, so among builds with equal
    versions the first one seen wins. Callers pass listings in their natural
    order (directory enumeration, release asset order) and the result depends
    on it for ties.

    ComparatorError propagates to the caller.
    """
    reduced: Dict[str, str] = {}
    for filename in filenames:
        name = decode_package_name(filename)
        current = reduced.get(name)
        if current is None:
            reduced[name] = filename
        elif await comparator.compare(filename, current) > 0:
            reduced[name] = filename
    return reduced
