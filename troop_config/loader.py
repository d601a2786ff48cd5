"""
Configuration Loader (``troop_config.loader``).

Responsibility
--------------
Loads a season YAML file and parses it into typed ``troop_config.schema``
dataclass instances.  This is internal tooling; the single public entry
point for runtime config is ``troop_config.get_active_config()``.

Architecture position
---------------------
**Config layer** -- infrastructure tooling.  Depends on the kernel's
cookie definitions and exceptions, never on engines or services.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass from ``schema.py``.
* Prices and proceeds rates are parsed through ``str`` into ``Decimal``
  so YAML floats never leak binary artifacts into money.
* Proceeds tiers are sorted by descending ``min_pga`` and must include a
  floor tier at ``min_pga: 0``.
* Cookie type codes, platform cookie ids and export column names are
  unique within a season.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``ConfigurationNotFoundError``.
* Malformed YAML or missing required keys  -> ``InvalidConfigurationError``.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import replace
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from troop_config.schema import (
    OrderVocabulary,
    ProceedsPolicy,
    ProceedsTier,
    SeasonConfig,
    TransferVocabulary,
    TroopIdentity,
)
from troop_kernel.domain.cookies import CookieDefinition
from troop_kernel.exceptions import (
    ConfigurationNotFoundError,
    InvalidConfigurationError,
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_decimal(value: Any) -> Decimal:
    """Parse a YAML scalar into ``Decimal`` via its string form."""
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"Cannot parse decimal from {value!r}") from exc


def parse_cookie(data: dict[str, Any]) -> CookieDefinition:
    """
    Parse a ``CookieDefinition`` from a dict.

    Raises:
        KeyError: if ``type``, ``display_name`` or ``price`` is missing.
    """
    return CookieDefinition(
        type=data["type"],
        display_name=data["display_name"],
        price=parse_decimal(data["price"]),
        is_physical=data.get("is_physical", True),
        dc_column_name=data.get("dc_column_name"),
        sc_api_id=data.get("sc_api_id"),
        sc_transfer_abbr=data.get("sc_transfer_abbr"),
        sort_order=data.get("sort_order", 0),
        name_variations=tuple(data.get("name_variations", ())),
    )


def parse_proceeds(data: dict[str, Any]) -> ProceedsPolicy:
    """Parse the proceeds block; absent keys keep their defaults."""
    defaults = ProceedsPolicy()
    tiers = defaults.tiers
    if "tiers" in data:
        tiers = tuple(
            sorted(
                (
                    ProceedsTier(min_pga=int(t["min_pga"]), rate=parse_decimal(t["rate"]))
                    for t in data["tiers"]
                ),
                key=lambda t: t.min_pga,
                reverse=True,
            )
        )
        if not tiers or tiers[-1].min_pga != 0:
            raise ValueError("proceeds.tiers must include a tier with min_pga 0")
    return ProceedsPolicy(
        tiers=tiers,
        exempt_packages_per_scout=int(
            data.get("exempt_packages_per_scout", defaults.exempt_packages_per_scout)
        ),
        packages_per_case=int(data.get("packages_per_case", defaults.packages_per_case)),
    )


def _parse_vocabulary(cls: type, data: dict[str, Any]) -> Any:
    """Build a vocabulary dataclass, turning YAML lists into tuples."""
    known = set(cls.__dataclass_fields__)
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown {cls.__name__} keys: {sorted(unknown)}")
    kwargs = {
        k: tuple(v) if isinstance(v, list) else v
        for k, v in data.items()
    }
    return cls(**kwargs)


def parse_order_vocabulary(data: dict[str, Any]) -> OrderVocabulary:
    return _parse_vocabulary(OrderVocabulary, data)


def parse_transfer_vocabulary(data: dict[str, Any]) -> TransferVocabulary:
    return _parse_vocabulary(TransferVocabulary, data)


def _check_unique(cookies: tuple[CookieDefinition, ...]) -> None:
    for attr in ("type", "sc_api_id", "dc_column_name"):
        values = [getattr(c, attr) for c in cookies if getattr(c, attr) is not None]
        duplicates = sorted({str(v) for v in values if values.count(v) > 1})
        if duplicates:
            raise ValueError(f"Duplicate cookie {attr}: {duplicates}")


def parse_season(data: dict[str, Any]) -> SeasonConfig:
    """
    Parse a complete ``SeasonConfig`` (without checksum) from a dict.

    Raises:
        KeyError: if ``config_id``, ``season`` or ``cookies`` is missing.
        ValueError: if a value is invalid.
    """
    cookies = tuple(parse_cookie(c) for c in data["cookies"])
    _check_unique(cookies)
    troop = data.get("troop") or {}
    return SeasonConfig(
        config_id=data["config_id"],
        version=int(data.get("version", 1)),
        season=str(data["season"]),
        cookies=cookies,
        troop=TroopIdentity(
            number=str(troop["number"]) if troop.get("number") is not None else None,
            name=troop.get("name"),
        ),
        proceeds=parse_proceeds(data.get("proceeds") or {}),
        order_vocabulary=parse_order_vocabulary(data.get("order_vocabulary") or {}),
        transfer_vocabulary=parse_transfer_vocabulary(
            data.get("transfer_vocabulary") or {}
        ),
    )


def load_season_file(path: Path) -> SeasonConfig:
    """
    Load and parse one season file, attaching its checksum.

    Raises:
        ConfigurationNotFoundError: if ``path`` does not exist.
        InvalidConfigurationError: if the YAML is malformed or invalid.
    """
    if not path.is_file():
        raise ConfigurationNotFoundError(path.stem, str(path))
    try:
        data = load_yaml_file(path)
        config = parse_season(data)
    except (yaml.YAMLError, KeyError, TypeError, ValueError) as exc:
        raise InvalidConfigurationError(str(path), str(exc)) from exc
    return replace(config, checksum=compute_checksum(data))


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
