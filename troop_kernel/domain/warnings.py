"""
Warnings -- data-quality findings collected during a reconciliation pass.

Responsibility:
    ``DataWarning`` records one upstream value the ledger could not
    classify.  ``WarningLog`` is the collector threaded explicitly through
    importers and classifiers; nothing here is global.

Architecture position:
    Kernel > Domain -- pure, in-memory.

Invariants enforced:
    - Warnings are never raised; the record they describe is still kept
      in degraded form (null classification, packages still counted).
    - A warning added with a ``dedupe_key`` already seen in the same log
      is dropped, so one unknown transfer code yields one warning no
      matter how many transfers carry it.  Warnings a log is seeded with
      count as seen under their ``raw_value``, so a later import that
      dedupes by raw value does not repeat them.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Hashable, Iterable, Iterator
from dataclasses import dataclass

from troop_kernel.domain.enums import WarningType
from troop_kernel.logging_config import get_logger

logger = get_logger("domain.warnings")


@dataclass(frozen=True, slots=True)
class DataWarning:
    """One classification miss."""

    type: WarningType
    message: str
    order_number: str | None = None
    raw_value: str | None = None
    scout: str | None = None


class WarningLog:
    """
    Ordered collector of ``DataWarning`` records.

    Contract:
        Owned by one reconciliation pass.  ``add`` logs each accepted
        warning at WARNING level under ``troop_kernel.domain.warnings``.
    """

    def __init__(self, warnings: Iterable[DataWarning] = ()):
        self._warnings: list[DataWarning] = []
        self._seen: set[Hashable] = set()
        for w in warnings:
            self._warnings.append(w)
            self._seen.add((w.type, w.raw_value))

    def add(
        self,
        warning: DataWarning,
        *,
        dedupe_key: Hashable | None = None,
    ) -> bool:
        """Record a warning.  Returns False if it was a duplicate."""
        if dedupe_key is not None:
            key = (warning.type, dedupe_key)
            if key in self._seen:
                return False
            self._seen.add(key)
        self._warnings.append(warning)
        logger.warning(
            "data_warning_recorded",
            extra={
                "warning_type": warning.type.value,
                "order_number": warning.order_number,
                "raw_value": warning.raw_value,
            },
        )
        return True

    def extend(self, warnings: Iterable[DataWarning]) -> None:
        for w in warnings:
            self._warnings.append(w)

    def count(self, warning_type: WarningType) -> int:
        return sum(1 for w in self._warnings if w.type == warning_type)

    def counts_by_type(self) -> dict[WarningType, int]:
        counts = Counter(w.type for w in self._warnings)
        return {t: counts.get(t, 0) for t in WarningType}

    def to_tuple(self) -> tuple[DataWarning, ...]:
        return tuple(self._warnings)

    def __iter__(self) -> Iterator[DataWarning]:
        return iter(self._warnings)

    def __len__(self) -> int:
        return len(self._warnings)
