"""
SeasonConfig schema.

Defines the human-authored, reviewable configuration for one cookie
season.  YAML files under ``troop_config/sets`` are parsed into these
types by the loader.

The proceeds policy and classification vocabularies are kernel value
types (``troop_kernel.domain.policies``) so that engines can take them as
arguments without importing this package.  A season file only needs to
list vocabulary entries when a platform changes its wording.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from troop_kernel.domain.cookies import CookieDefinition, CookieRegistry
from troop_kernel.domain.policies import (
    OrderVocabulary,
    ProceedsPolicy,
    ProceedsTier,
    TransferVocabulary,
)

__all__ = [
    "OrderVocabulary",
    "ProceedsPolicy",
    "ProceedsTier",
    "SeasonConfig",
    "TransferVocabulary",
    "TroopIdentity",
]


@dataclass(frozen=True)
class TroopIdentity:
    """Hints used to tell outgoing troop-to-troop transfers from inbound."""

    number: str | None = None
    name: str | None = None


@dataclass(frozen=True)
class SeasonConfig:
    """Root configuration artifact for one season."""

    config_id: str
    version: int
    season: str
    cookies: tuple[CookieDefinition, ...]
    troop: TroopIdentity = field(default_factory=TroopIdentity)
    proceeds: ProceedsPolicy = field(default_factory=ProceedsPolicy)
    order_vocabulary: OrderVocabulary = field(default_factory=OrderVocabulary)
    transfer_vocabulary: TransferVocabulary = field(
        default_factory=TransferVocabulary
    )
    checksum: str = ""

    @property
    def registry(self) -> CookieRegistry:
        return CookieRegistry(definitions=self.cookies)
