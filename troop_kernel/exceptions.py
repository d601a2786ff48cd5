"""
Typed Exception Hierarchy for the Troop Ledger Kernel.

===============================================================================
WHEN THIS MODULE IS USED
===============================================================================

Data-quality problems in upstream exports (unknown order types, unknown
payment statuses, unknown transfer codes, unknown cookie ids) are NOT
exceptions.  They become ``DataWarning`` records on a ``WarningLog`` and the
offending record is kept in degraded form.  A scout name that matches
nothing is a silent skip.

Exceptions are reserved for STRUCTURAL failures: the active configuration
cannot be found or is malformed, a raw payload is not the shape the
importer contract requires, or code asks for the price of a cookie type
that is not in the registry.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    TroopKernelError (base)
    |
    +-- ConfigError
    |   +-- ConfigurationNotFoundError
    |   +-- InvalidConfigurationError
    |
    +-- IngestionError
    |   +-- InputShapeError
    |   +-- UnsupportedSourceError
    |
    +-- CookieRegistryError
        +-- UnknownCookieTypeError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category   | Code                        | When Raised
-----------|-----------------------------|------------------------------------
Config     | CONFIGURATION_NOT_FOUND     | No season YAML for requested name
           | INVALID_CONFIGURATION       | YAML parsed but content is invalid
-----------|-----------------------------|------------------------------------
Ingestion  | INPUT_SHAPE_ERROR           | Payload is not a mapping/list where
           |                             | one is required
           | UNSUPPORTED_SOURCE          | File extension has no adapter
-----------|-----------------------------|------------------------------------
Registry   | UNKNOWN_COOKIE_TYPE         | Price/definition lookup for a type
           |                             | code missing from the registry

===============================================================================
HANDLING PATTERNS
===============================================================================

    try:
        config = get_active_config("2025")
    except ConfigurationNotFoundError as e:
        log.error("config_missing", extra={"season": e.season})

    try:
        state = import_smart_cookie_orders(state, payload, imported_at=now)
    except InputShapeError as e:
        api_response(code=e.code, source=e.source, expected=e.expected)
"""


class TroopKernelError(Exception):
    """
    Base exception for all troop ledger errors.

    All subclasses carry a ``code`` class attribute for machine-readable
    error identification.
    """

    code: str = "TROOP_KERNEL_ERROR"


# Configuration


class ConfigError(TroopKernelError):
    """Base exception for configuration errors."""

    code: str = "CONFIG_ERROR"


class ConfigurationNotFoundError(ConfigError):
    """No configuration set exists for the requested season."""

    code: str = "CONFIGURATION_NOT_FOUND"

    def __init__(self, season: str, path: str):
        self.season = season
        self.path = path
        super().__init__(f"No configuration for season {season!r} at {path}")


class InvalidConfigurationError(ConfigError):
    """Configuration file parsed but its content is invalid."""

    code: str = "INVALID_CONFIGURATION"

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid configuration {path}: {reason}")


# Ingestion


class IngestionError(TroopKernelError):
    """Base exception for raw-source ingestion errors."""

    code: str = "INGESTION_ERROR"


class InputShapeError(IngestionError):
    """A raw payload does not have the structure its importer requires."""

    code: str = "INPUT_SHAPE_ERROR"

    def __init__(self, source: str, expected: str, received: str):
        self.source = source
        self.expected = expected
        self.received = received
        super().__init__(
            f"{source}: expected {expected}, received {received}"
        )


class UnsupportedSourceError(IngestionError):
    """No adapter exists for the given export file."""

    code: str = "UNSUPPORTED_SOURCE"

    def __init__(self, path: str, suffix: str):
        self.path = path
        self.suffix = suffix
        super().__init__(f"No adapter for {suffix!r} files: {path}")


# Cookie registry


class CookieRegistryError(TroopKernelError):
    """Base exception for cookie registry lookups."""

    code: str = "COOKIE_REGISTRY_ERROR"


class UnknownCookieTypeError(CookieRegistryError):
    """A cookie type code is not defined in the active registry."""

    code: str = "UNKNOWN_COOKIE_TYPE"

    def __init__(self, cookie_type: str):
        self.cookie_type = cookie_type
        super().__init__(f"Unknown cookie type: {cookie_type}")
