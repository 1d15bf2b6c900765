"""
Configuration Loader (``workshop_config.loader``).

Responsibility
--------------
Loads a YAML configuration file and parses it into the frozen
``workshop_config.schema`` dataclasses.  Runtime callers go through
``workshop_config.get_active_config()`` instead of calling this directly.

Invariants enforced
-------------------
* Every parse error raises ``InvalidConfigurationError`` naming the
  offending key; there are no silent defaults for malformed values.
* Decimal settings (tax rates) must be written as strings or integers in
  YAML; a bare ``7.0`` parses as a binary float and is rejected.
* ``compute_checksum`` is a deterministic SHA-256 of the parsed document.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from workshop_config.schema import (
    DatabaseConfig,
    LoggingConfig,
    ReportingConfig,
    TaxConfig,
    WorkshopConfig,
)
from workshop_kernel.domain.currency import CurrencyRegistry
from workshop_kernel.exceptions import InvalidConfigurationError

_LOG_LEVELS = frozenset({"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"})


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        InvalidConfigurationError: if the document is not a mapping.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise InvalidConfigurationError(str(path), "top level must be a mapping")
    return data


def parse_decimal(key: str, value: Any) -> Decimal:
    """Parse a decimal setting written as a string or an integer."""
    if isinstance(value, bool) or isinstance(value, float):
        raise InvalidConfigurationError(key, f"write decimals as quoted strings, got {value!r}")
    try:
        result = Decimal(str(value).strip())
    except InvalidOperation as e:
        raise InvalidConfigurationError(key, f"not a decimal number: {value!r}") from e
    if not result.is_finite():
        raise InvalidConfigurationError(key, f"not a finite number: {value!r}")
    return result


def parse_rate(key: str, value: Any) -> Decimal:
    """Parse a tax rate percentage in [0, 100]."""
    rate = parse_decimal(key, value)
    if rate < 0 or rate > 100:
        raise InvalidConfigurationError(key, f"rate must be between 0 and 100, got {rate}")
    return rate


def parse_positive_int(key: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InvalidConfigurationError(key, f"must be a positive integer, got {value!r}")
    return value


def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
    section = data.get(key) or {}
    if not isinstance(section, dict):
        raise InvalidConfigurationError(key, "must be a mapping")
    return section


def parse_tax(data: dict[str, Any]) -> TaxConfig:
    """
    Parse the ``tax`` section.

    labor_rate and parts_rate fall back to default_rate when omitted.
    """
    default = TaxConfig()
    default_rate = parse_rate(
        "tax.default_rate", data.get("default_rate", default.default_rate_percent)
    )
    return TaxConfig(
        name=str(data.get("name", default.name)),
        default_rate_percent=default_rate,
        labor_rate_percent=parse_rate("tax.labor_rate", data.get("labor_rate", default_rate)),
        parts_rate_percent=parse_rate("tax.parts_rate", data.get("parts_rate", default_rate)),
    )


def parse_reporting(data: dict[str, Any]) -> ReportingConfig:
    default = ReportingConfig()
    return ReportingConfig(
        monthly_series_length=parse_positive_int(
            "reporting.monthly_series_length",
            data.get("monthly_series_length", default.monthly_series_length),
        ),
        top_customers_limit=parse_positive_int(
            "reporting.top_customers_limit",
            data.get("top_customers_limit", default.top_customers_limit),
        ),
    )


def parse_database(data: dict[str, Any]) -> DatabaseConfig:
    default = DatabaseConfig()
    url = data.get("url", default.url)
    if not isinstance(url, str) or not url.strip():
        raise InvalidConfigurationError("database.url", "must be a non-empty string")
    return DatabaseConfig(url=url.strip(), echo=bool(data.get("echo", default.echo)))


def parse_logging(data: dict[str, Any]) -> LoggingConfig:
    level = str(data.get("level", LoggingConfig().level)).upper()
    if level not in _LOG_LEVELS:
        raise InvalidConfigurationError("logging.level", f"unknown level {level!r}")
    return LoggingConfig(level=level)


def parse_timezone(value: Any) -> str:
    """IANA zone name used for "today" and month boundaries."""
    if not isinstance(value, str) or not value.strip():
        raise InvalidConfigurationError("timezone", "must be an IANA zone name")
    try:
        ZoneInfo(value.strip())
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise InvalidConfigurationError("timezone", f"unknown zone {value!r}") from e
    return value.strip()


def parse_config(data: dict[str, Any]) -> WorkshopConfig:
    """
    Parse a whole configuration document.

    Raises:
        InvalidConfigurationError: on any missing or malformed value.
    """
    config_id = data.get("config_id")
    if not config_id:
        raise InvalidConfigurationError("config_id", "is required")

    currency = str(data.get("currency", "EUR")).upper()
    if not CurrencyRegistry.is_valid(currency):
        raise InvalidConfigurationError("currency", f"unsupported currency {currency!r}")

    return WorkshopConfig(
        config_id=str(config_id),
        version=parse_positive_int("version", data.get("version", 1)),
        currency=currency,
        timezone=parse_timezone(data.get("timezone", "UTC")),
        tax=parse_tax(_section(data, "tax")),
        reporting=parse_reporting(_section(data, "reporting")),
        database=parse_database(_section(data, "database")),
        logging=parse_logging(_section(data, "logging")),
        checksum=compute_checksum(data),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of data."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
