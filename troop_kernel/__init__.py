"""
Troop Kernel

Domain model and ambient infrastructure for reconciling cookie-sale
activity from the retail platform and the troop ledger platform:
- Closed classification enums
- Frozen order, transfer and allocation records
- Structured JSON logging
- Typed exceptions
"""

__version__ = "0.1.0"
