"""
workshop_config -- single public entrypoint for workshop configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  No other component reads configuration
    files or environment variables directly.  Returns a frozen
    ``WorkshopConfig``.

Architecture position:
    Configuration -- sits above ``workshop_kernel`` and below
    ``workshop_services``.  The kernel and the engines never import from
    ``workshop_config``; services receive the config (or the values they
    need from it) as constructor arguments.

Environment:
    WORKSHOP_CONFIG        path of a YAML file replacing the packaged
                           ``sets/default.yaml``.
    WORKSHOP_DATABASE_URL  overrides ``database.url``.

Failure modes:
    - ``FileNotFoundError`` -- the selected configuration file is missing.
    - ``yaml.YAMLError`` -- the file is not valid YAML.
    - ``InvalidConfigurationError`` -- a value is missing or malformed.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``WORKSHOP_CONFIG_TRACE`` log entry with the config id, version,
    checksum and tax rates in force.
"""

from __future__ import annotations

import dataclasses
import logging
import os
from pathlib import Path

from workshop_config.loader import load_yaml_file, parse_config
from workshop_config.schema import (
    DatabaseConfig,
    LoggingConfig,
    ReportingConfig,
    TaxConfig,
    WorkshopConfig,
)

_logger = logging.getLogger("workshop_kernel.config")

CONFIG_PATH_ENV = "WORKSHOP_CONFIG"
DATABASE_URL_ENV = "WORKSHOP_DATABASE_URL"

DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"


def get_active_config(config_path: Path | str | None = None) -> WorkshopConfig:
    """The ONLY public configuration entrypoint.

    Resolution order for the file: explicit ``config_path``, then
    ``$WORKSHOP_CONFIG``, then the packaged default set.  The database URL
    may be overridden by ``$WORKSHOP_DATABASE_URL``.

    Does NOT cache; callers hold the returned config for the life of the
    process or request.

    Raises:
        FileNotFoundError: If the configuration file does not exist.
        InvalidConfigurationError: If validation fails.
    """
    if config_path is None:
        config_path = os.environ.get(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH
    path = Path(config_path)

    config = parse_config(load_yaml_file(path))

    database_url = os.environ.get(DATABASE_URL_ENV)
    if database_url:
        config = dataclasses.replace(
            config,
            database=dataclasses.replace(config.database, url=database_url),
        )

    _logger.info(
        "WORKSHOP_CONFIG_TRACE",
        extra={
            "trace_type": "WORKSHOP_CONFIG_TRACE",
            "config_set_id": config.config_id,
            "config_set_version": config.version,
            "checksum": config.checksum,
            "source": str(path),
            "currency": config.currency,
            "timezone": config.timezone,
            "tax_regime": config.tax.name,
            "labor_rate_percent": str(config.tax.labor_rate_percent),
            "parts_rate_percent": str(config.tax.parts_rate_percent),
            "database_overridden": bool(database_url),
        },
    )

    return config


__all__ = [
    "get_active_config",
    "WorkshopConfig",
    "TaxConfig",
    "ReportingConfig",
    "DatabaseConfig",
    "LoggingConfig",
    "CONFIG_PATH_ENV",
    "DATABASE_URL_ENV",
    "DEFAULT_CONFIG_PATH",
]
