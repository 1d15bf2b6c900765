"""
Typed exception hierarchy for the workshop kernel.

Every error carries a class-level ``code`` (machine-readable, API-safe)
and its context as attributes, so callers catch by type and read
structured data instead of parsing messages:

    try:
        totals = compute_totals(lines)
    except InvalidLineError as e:
        return {"error": e.code, "line": e.line_index, "field": e.field}

Hierarchy:

    WorkshopError (base)
    |
    +-- LedgerError
    |   +-- InvalidLineError
    |
    +-- NotFoundError
    |   +-- VehicleNotFoundError
    |   +-- DocumentNotFoundError
    |
    +-- ConfigurationError
        +-- InvalidConfigurationError

Value-object construction problems (bad currency code, float amounts)
stay ``ValueError`` / ``TypeError``, the same as the built-in numeric
types they wrap.
"""

from typing import Any


class WorkshopError(Exception):
    """
    Base exception for all workshop kernel errors.

    All subclasses must have a ``code`` class attribute.
    """

    code: str = "WORKSHOP_ERROR"


# Ledger


class LedgerError(WorkshopError):
    """Base exception for tax ledger errors."""

    code: str = "LEDGER_ERROR"


class InvalidLineError(LedgerError):
    """
    A priced line carries a value that is not a finite number.

    Raised for NaN, Infinity or non-numeric input. Negative quantities
    and prices are the caller's validation concern and are not rejected
    here.
    """

    code: str = "INVALID_LINE"

    def __init__(self, field: str, value: Any, line_index: int | None = None):
        self.field = field
        self.value = str(value)
        self.line_index = line_index
        where = f" (line {line_index})" if line_index is not None else ""
        super().__init__(f"Invalid {field}{where}: {value!r}")


# Lookups


class NotFoundError(WorkshopError):
    """Base exception for missing records."""

    code: str = "NOT_FOUND"


class VehicleNotFoundError(NotFoundError):
    """Vehicle with given ID was not found."""

    code: str = "VEHICLE_NOT_FOUND"

    def __init__(self, vehicle_id: Any):
        self.vehicle_id = str(vehicle_id)
        super().__init__(f"Vehicle not found: {vehicle_id}")


class DocumentNotFoundError(NotFoundError):
    """Repair order, budget or invoice with given ID was not found."""

    code: str = "DOCUMENT_NOT_FOUND"

    def __init__(self, document_type: str, document_id: Any):
        self.document_type = document_type
        self.document_id = str(document_id)
        super().__init__(f"{document_type} not found: {document_id}")


# Configuration


class ConfigurationError(WorkshopError):
    """Base exception for configuration errors."""

    code: str = "CONFIGURATION_ERROR"


class InvalidConfigurationError(ConfigurationError):
    """A configuration value is missing or malformed."""

    code: str = "INVALID_CONFIGURATION"

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Invalid configuration for {key}: {reason}")
