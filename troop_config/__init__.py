"""
troop_config -- single public entrypoint for season configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Returns a frozen ``SeasonConfig`` holding the
    cookie registry, proceeds policy, troop identity hints and the
    classification vocabularies.

Architecture position:
    Configuration -- YAML-driven.  This package sits above
    ``troop_kernel`` and below ``troop_engines`` callers in
    ``troop_services``.  The kernel MUST NEVER import from
    ``troop_config``; engines receive the pieces they need as arguments.

Invariants enforced:
    - Single entrypoint: all runtime config flows through
      ``get_active_config()``.
    - Deterministic: the same YAML always produces the same checksum.

Failure modes:
    - ``ConfigurationNotFoundError`` -- no YAML file for the season.
    - ``InvalidConfigurationError`` -- the file is malformed or invalid.

Audit relevance:
    Every successful call emits a ``TROOP_CONFIG_TRACE`` log entry with
    the config id, version, season and checksum.  The checksum is copied
    into every dataset's metadata so a reconciliation can be tied to the
    exact configuration that produced it.
"""

from __future__ import annotations

from pathlib import Path

from troop_config.loader import load_season_file
from troop_config.schema import (
    OrderVocabulary,
    ProceedsPolicy,
    ProceedsTier,
    SeasonConfig,
    TransferVocabulary,
    TroopIdentity,
)
from troop_kernel.logging_config import get_logger

_logger = get_logger("config")

# Default configuration sets directory
_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"
_DEFAULT_SEASON = "default"


def get_active_config(
    season: str | None = None,
    config_dir: Path | None = None,
) -> SeasonConfig:
    """The ONLY public configuration entrypoint.

    Non-goals:
        - This function does NOT cache; callers hold the returned config
          for the duration of a reconciliation pass.

    Args:
        season: Name of the season file (without ``.yaml``).  Defaults to
            ``default``.
        config_dir: Override path to configuration sets directory.
            Defaults to troop_config/sets/.

    Raises:
        ConfigurationNotFoundError: If no file exists for the season.
        InvalidConfigurationError: If the file fails to parse.
    """
    sets_dir = config_dir or _DEFAULT_CONFIG_DIR
    name = season or _DEFAULT_SEASON
    config = load_season_file(sets_dir / f"{name}.yaml")

    _logger.info(
        "TROOP_CONFIG_TRACE",
        extra={
            "trace_type": "TROOP_CONFIG_TRACE",
            "config_id": config.config_id,
            "config_version": config.version,
            "season": config.season,
            "checksum": config.checksum,
            "cookie_count": len(config.cookies),
        },
    )
    return config


__all__ = [
    "OrderVocabulary",
    "ProceedsPolicy",
    "ProceedsTier",
    "SeasonConfig",
    "TransferVocabulary",
    "TroopIdentity",
    "get_active_config",
]
