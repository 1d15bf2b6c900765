"""
Workshop Kernel

Shared foundation of the workshop ledger:
- Decimal Money value objects with explicit, single rounding
- Injectable clock (engines never read the wall clock)
- Typed exceptions with machine-readable codes
- Structured JSON logging with request context
- SQLAlchemy models and read-only selectors
"""

__version__ = "0.1.0"
