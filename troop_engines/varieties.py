"""
Variety arithmetic primitives.

A *varieties* map is cookie type code -> package count.  Every helper here
follows one rule: Cookie Share is a virtual donation unit and is left out
of "physical" sums unless a caller explicitly asks for it.

Physical totals are always computed by summing the non-Cookie-Share
entries, never by subtracting Cookie Share from a grand total, so a
record that is pure donation comes out at exactly zero physical packages.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from troop_kernel.domain.cookies import COOKIE_SHARE
from troop_kernel.domain.values import Varieties


def sum_physical_packages(varieties: Mapping[str, int] | None) -> int:
    """Sum of the absolute counts of every non-Cookie-Share variety."""
    if not varieties:
        return 0
    return sum(
        abs(count)
        for cookie_type, count in varieties.items()
        if cookie_type != COOKIE_SHARE
    )


def build_physical_varieties(varieties: Mapping[str, int] | None) -> Varieties:
    """Copy of ``varieties`` with Cookie Share and zero counts removed."""
    if not varieties:
        return {}
    return {
        cookie_type: count
        for cookie_type, count in varieties.items()
        if cookie_type != COOKIE_SHARE and count
    }


def cookie_share_count(varieties: Mapping[str, int] | None) -> int:
    if not varieties:
        return 0
    return abs(varieties.get(COOKIE_SHARE, 0))


def accumulate_varieties(
    target: Varieties,
    source: Mapping[str, int] | None,
    *,
    sign: int = 1,
    include_cookie_share: bool = False,
) -> Varieties:
    """Add ``sign * source`` into ``target`` in place and return it."""
    if not source:
        return target
    for cookie_type, count in source.items():
        if not count:
            continue
        if cookie_type == COOKIE_SHARE and not include_cookie_share:
            continue
        target[cookie_type] = target.get(cookie_type, 0) + sign * count
    return target


def merge_varieties(
    maps: Iterable[Mapping[str, int]],
    *,
    include_cookie_share: bool = False,
) -> Varieties:
    """Sum several variety maps into a new one."""
    merged: Varieties = {}
    for varieties in maps:
        accumulate_varieties(
            merged, varieties, include_cookie_share=include_cookie_share
        )
    return merged


def ordered_varieties(
    varieties: Mapping[str, int],
    order: Iterable[str],
) -> Varieties:
    """Re-key ``varieties`` in registry display order, unknown codes last."""
    ordered: Varieties = {}
    for cookie_type in order:
        if cookie_type in varieties:
            ordered[cookie_type] = varieties[cookie_type]
    for cookie_type in sorted(varieties):
        if cookie_type not in ordered:
            ordered[cookie_type] = varieties[cookie_type]
    return ordered
