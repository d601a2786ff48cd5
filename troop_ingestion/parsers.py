"""
Cookie-line parsing for ledger-platform payloads.

The platform keys per-variety counts by its own numeric cookie id.  Ids
are translated through the registry's id map overlaid with the run-time
map the platform itself publishes.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from troop_kernel.domain.enums import WarningType
from troop_kernel.domain.raw import CookieLine
from troop_kernel.domain.values import Varieties
from troop_kernel.domain.warnings import DataWarning, WarningLog
from troop_kernel.logging_config import get_logger

logger = get_logger("ingestion.parsers")


def parse_varieties_from_api(
    lines: Iterable[CookieLine],
    id_map: Mapping[int, str],
    *,
    warnings: WarningLog | None = None,
    order_number: str | None = None,
) -> tuple[Varieties, int]:
    """Translate cookie lines into ``(varieties, total_packages)``.

    Quantities are taken as absolute values.  A line with an unknown id
    is left out of ``varieties`` but still counts toward the total, and
    records an ``UNKNOWN_COOKIE_ID`` warning.  Lines with a zero quantity
    or no id are ignored.
    """
    varieties: Varieties = {}
    total = 0
    for line in lines:
        if line.cookie_id is None or line.quantity == 0:
            continue
        quantity = abs(line.quantity)
        total += quantity
        cookie_type = id_map.get(line.cookie_id)
        if cookie_type is None:
            logger.warning(
                "unknown_cookie_id",
                extra={
                    "cookie_id": line.cookie_id,
                    "quantity": line.quantity,
                    "order_number": order_number,
                },
            )
            if warnings is not None:
                warnings.add(
                    DataWarning(
                        type=WarningType.UNKNOWN_COOKIE_ID,
                        message=(
                            f"Unknown cookie ID {line.cookie_id} "
                            f"in order {order_number or '(none)'}"
                        ),
                        order_number=order_number,
                        raw_value=str(line.cookie_id),
                    )
                )
            continue
        varieties[cookie_type] = varieties.get(cookie_type, 0) + quantity
    return varieties, total
