"""
WorkshopConfig schema.

Frozen dataclasses for the workshop's runtime configuration.  YAML files
are parsed into these types by ``workshop_config.loader``; callers only
ever see a ``WorkshopConfig`` returned by ``get_active_config()``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal


@dataclass(frozen=True)
class TaxConfig:
    """Indirect-tax regime and its rates, as percentages (7.00 = 7%)."""

    name: str = "IGIC"
    default_rate_percent: Decimal = Decimal("7.00")
    labor_rate_percent: Decimal = Decimal("7.00")
    parts_rate_percent: Decimal = Decimal("7.00")


@dataclass(frozen=True)
class ReportingConfig:
    monthly_series_length: int = 6
    top_customers_limit: int = 5


@dataclass(frozen=True)
class DatabaseConfig:
    url: str = "sqlite:///workshop.db"
    echo: bool = False


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"


@dataclass(frozen=True)
class WorkshopConfig:
    """
    The sole runtime configuration artifact.

    checksum is the SHA-256 of the parsed source document and identifies
    the exact configuration a process ran with.
    """

    config_id: str
    version: int
    currency: str
    timezone: str = "UTC"
    tax: TaxConfig = field(default_factory=TaxConfig)
    reporting: ReportingConfig = field(default_factory=ReportingConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    checksum: str = ""
