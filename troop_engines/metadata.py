"""
troop_engines.metadata -- import provenance, counts and health checks.

The build time is an argument: engines never read the wall clock, so
two passes over the same input with the same build time produce equal
metadata.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime

from troop_kernel.domain.dataset import HealthChecks, ImportSource, UnifiedMetadata
from troop_kernel.domain.entities import Scout
from troop_kernel.domain.warnings import WarningLog


def build_health_checks(warnings: WarningLog) -> HealthChecks:
    return HealthChecks(
        warnings_count=len(warnings),
        counts_by_type=warnings.counts_by_type(),
    )


def build_unified_metadata(
    scouts: Mapping[str, Scout],
    warnings: WarningLog,
    *,
    build_time: datetime,
    last_import_dc: datetime | None = None,
    last_import_sc: datetime | None = None,
    cookie_id_map: Mapping[int, str] | None = None,
    sources: Iterable[ImportSource] = (),
    config_checksum: str = "",
) -> UnifiedMetadata:
    return UnifiedMetadata(
        last_import_dc=last_import_dc,
        last_import_sc=last_import_sc,
        cookie_id_map=dict(cookie_id_map or {}),
        sources=tuple(sources),
        unified_build_time=build_time,
        scout_count=len(scouts),
        order_count=sum(len(s.orders) for s in scouts.values()),
        config_checksum=config_checksum,
        health_checks=build_health_checks(warnings),
    )
