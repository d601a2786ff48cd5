"""
Serialization of a ``UnifiedDataset`` for reports and snapshots.

Dataclasses become objects keyed by field name (``from_`` is written as
``from``), money stays exact as a decimal string, enums are written as
their values and datetimes as ISO 8601.  Mapping keys are always strings.
Output is deterministic: ``dataset_to_json`` sorts keys.
"""

from __future__ import annotations

import dataclasses
import json
from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from troop_kernel.domain.dataset import UnifiedDataset


def _key(value: Any) -> str:
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def to_plain(obj: Any) -> Any:
    """Recursively convert domain values into JSON-ready builtins."""
    if isinstance(obj, Enum):
        return obj.value
    if obj is None or isinstance(obj, (bool, int, float, str)):
        return obj
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.name.rstrip("_"): to_plain(getattr(obj, f.name))
            for f in dataclasses.fields(obj)
            if f.name != "source_row" and f.name != "raw"
        }
    if isinstance(obj, Mapping):
        return {_key(k): to_plain(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_plain(v) for v in obj]
    if isinstance(obj, (set, frozenset)):
        return sorted(to_plain(v) for v in obj)
    raise TypeError(f"Cannot serialize {type(obj).__name__}")


def dataset_to_dict(dataset: UnifiedDataset) -> dict[str, Any]:
    return to_plain(dataset)


def dataset_to_json(dataset: UnifiedDataset, *, indent: int | None = 2) -> str:
    return json.dumps(dataset_to_dict(dataset), sort_keys=True, indent=indent)
