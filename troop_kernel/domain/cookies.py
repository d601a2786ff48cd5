"""
Cookies -- the season's cookie registry.

Responsibility:
    Holds the per-variety facts every calculator needs: display name,
    per-package price, whether the variety is physical, the retail export
    column name, and the ledger platform's numeric cookie id.

Architecture position:
    Kernel > Domain -- pure value objects.  Instances are built by
    ``troop_config`` from the season YAML; the kernel never reads files.

Invariants enforced:
    - Cookie Share (``COOKIE_SHARE``) is the only non-physical variety in
      a standard season, and ``physical_types`` never contains it.
    - Prices are ``Decimal``.
    - Lookups of a type code missing from the registry raise
      ``UnknownCookieTypeError``.  Parsers only ever emit registry codes,
      so the error signals a programming mistake, not bad upstream data.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal

from troop_kernel.exceptions import UnknownCookieTypeError

COOKIE_SHARE = "COOKIE_SHARE"


@dataclass(frozen=True, slots=True)
class CookieDefinition:
    """One cookie variety."""

    type: str
    display_name: str
    price: Decimal
    is_physical: bool = True
    dc_column_name: str | None = None
    sc_api_id: int | None = None
    sc_transfer_abbr: str | None = None
    sort_order: int = 0
    name_variations: tuple[str, ...] = ()


@dataclass(frozen=True)
class CookieRegistry:
    """
    Ordered, immutable set of cookie definitions.

    Contract:
        Built once per configuration load.  Iteration follows
        ``sort_order``.

    Guarantees:
        - ``physical_types`` lists every physical code in display order.
        - ``id_map`` maps ledger-platform cookie ids to type codes.
        - ``dc_columns`` maps retail export column names to type codes.
    """

    definitions: tuple[CookieDefinition, ...]
    _by_type: dict[str, CookieDefinition] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        ordered = tuple(sorted(self.definitions, key=lambda d: d.sort_order))
        object.__setattr__(self, "definitions", ordered)
        object.__setattr__(self, "_by_type", {d.type: d for d in ordered})

    def __iter__(self):
        return iter(self.definitions)

    def __contains__(self, cookie_type: object) -> bool:
        return cookie_type in self._by_type

    def get(self, cookie_type: str) -> CookieDefinition:
        try:
            return self._by_type[cookie_type]
        except KeyError:
            raise UnknownCookieTypeError(cookie_type) from None

    def price(self, cookie_type: str) -> Decimal:
        return self.get(cookie_type).price

    def is_physical(self, cookie_type: str) -> bool:
        return self.get(cookie_type).is_physical

    @property
    def physical_types(self) -> tuple[str, ...]:
        return tuple(d.type for d in self.definitions if d.is_physical)

    @property
    def id_map(self) -> dict[int, str]:
        return {
            d.sc_api_id: d.type
            for d in self.definitions
            if d.sc_api_id is not None
        }

    @property
    def dc_columns(self) -> dict[str, str]:
        return {
            d.dc_column_name: d.type
            for d in self.definitions
            if d.dc_column_name
        }

    def normalize_name(self, name: str) -> str | None:
        """Resolve a display name or known variation to a type code."""
        needle = name.strip().lower()
        for d in self.definitions:
            candidates = (d.type, d.display_name, *d.name_variations)
            if any(needle == c.lower() for c in candidates):
                return d.type
        return None

    def with_id_map(self, id_map: Mapping[int, str] | None) -> dict[int, str]:
        """Registry id map overlaid with a run-time map from the API."""
        merged = self.id_map
        if id_map:
            merged.update(
                {int(k): v for k, v in id_map.items() if v in self._by_type}
            )
        return merged

    def revenue(self, varieties: Mapping[str, int]) -> Decimal:
        """Dollar value of the physical packages in a variety map."""
        total = Decimal("0")
        for cookie_type, count in varieties.items():
            if cookie_type == COOKIE_SHARE or not count:
                continue
            total += self.price(cookie_type) * count
        return total


def build_registry(definitions: Iterable[CookieDefinition]) -> CookieRegistry:
    return CookieRegistry(definitions=tuple(definitions))
