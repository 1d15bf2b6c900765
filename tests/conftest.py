"""
Pytest fixtures for the workshop ledger test suite.

Provides:
- Structured logging configured once per session, plus a captured_logs
  fixture returning the JSON records
- In-memory SQLite sessions with all tables created
- A deterministic clock and a test configuration
- Small factories for customers, vehicles and articles
"""

import json
import logging
from datetime import UTC, datetime
from decimal import Decimal
from io import StringIO
from typing import Generator
from uuid import uuid4

import pytest
from sqlalchemy.orm import Session

from workshop_config.schema import WorkshopConfig
from workshop_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from workshop_kernel.domain.clock import DeterministicClock
from workshop_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from workshop_kernel.models import Article, Customer, Vehicle


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture workshop_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            compute_totals([])
            logs = captured_logs()
            assert any(r["message"] == "ledger_totals_computed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("workshop_kernel")
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def db_engine():
    """A fresh in-memory SQLite database with every table created."""
    engine = init_engine_from_url("sqlite://")
    create_tables()
    yield engine
    drop_tables()
    reset_engine()


@pytest.fixture
def session(db_engine) -> Generator[Session, None, None]:
    """Provide a database session for testing; rolled back at teardown."""
    s = get_session()
    yield s
    s.rollback()
    s.close()


# =============================================================================
# Clock and configuration
# =============================================================================


@pytest.fixture
def deterministic_clock():
    """Mid-March 2024, so "this month" and "last month" are unambiguous."""
    return DeterministicClock(datetime(2024, 3, 15, 10, 30, tzinfo=UTC))


@pytest.fixture
def workshop_config() -> WorkshopConfig:
    """Configuration with IGIC at 7% and default reporting settings."""
    return WorkshopConfig(config_id="test", version=1, currency="EUR")


# =============================================================================
# Data factories
# =============================================================================


@pytest.fixture
def make_customer(session):
    def _make(name: str = "Taller Cliente", tax_id: str | None = None) -> Customer:
        customer = Customer(name=name, tax_id=tax_id or f"X{uuid4().hex[:8].upper()}")
        session.add(customer)
        session.flush()
        return customer

    return _make


@pytest.fixture
def customer(make_customer) -> Customer:
    return make_customer("Ana Pérez", "12345678Z")


@pytest.fixture
def make_vehicle(session, customer):
    def _make(
        model_year: int | None = 2018,
        fuel_type: str | None = "Gasolina",
        is_plugin_hybrid: bool = False,
        electric_range_km: int | None = None,
        plate: str | None = None,
    ) -> Vehicle:
        vehicle = Vehicle(
            customer_id=customer.id,
            plate=plate or uuid4().hex[:8].upper(),
            make="Seat",
            model="León",
            model_year=model_year,
            fuel_type=fuel_type,
            is_plugin_hybrid=is_plugin_hybrid,
            electric_range_km=electric_range_km,
        )
        session.add(vehicle)
        session.flush()
        return vehicle

    return _make


@pytest.fixture
def vehicle(make_vehicle) -> Vehicle:
    return make_vehicle(plate="1234ABC")


@pytest.fixture
def make_article(session):
    def _make(
        reference: str,
        stock: int | None = 10,
        minimum_stock: int | None = 2,
        sale_price: str = "10.00",
        is_active: bool = True,
    ) -> Article:
        article = Article(
            reference=reference,
            description=f"Article {reference}",
            sale_price=Decimal(sale_price),
            stock=stock,
            minimum_stock=minimum_stock,
            is_active=is_active,
        )
        session.add(article)
        session.flush()
        return article

    return _make
