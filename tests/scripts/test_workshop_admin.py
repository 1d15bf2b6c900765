"""
Tests for the workshop administration script.

Each test runs the commands against a SQLite file database selected
through a temporary configuration file.
"""

from decimal import Decimal

import pytest
import yaml
from sqlalchemy import inspect, select

from scripts.workshop_admin import main
from workshop_kernel.db.engine import get_engine, reset_engine, session_scope
from workshop_kernel.models import Customer, Invoice, InvoiceLine, Vehicle


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    monkeypatch.delenv("WORKSHOP_DATABASE_URL", raising=False)
    path = tmp_path / "taller.yaml"
    path.write_text(yaml.safe_dump({
        "config_id": "script-test",
        "version": 1,
        "currency": "EUR",
        "database": {"url": f"sqlite:///{tmp_path / 'taller.db'}"},
        "logging": {"level": "DEBUG"},
    }), encoding="utf-8")
    yield str(path)
    reset_engine()


@pytest.fixture
def seeded(config_file):
    assert main(["--config", config_file, "init-db"]) == 0
    with session_scope() as session:
        customer = Customer(name="Ana Pérez", tax_id="12345678Z")
        session.add(customer)
        session.flush()
        session.add(Vehicle(customer_id=customer.id, plate="1234ABC", make="Seat",
                            model="Ibiza", model_year=2003, fuel_type="Gasolina"))
        session.add(Vehicle(customer_id=customer.id, plate="5678DEF", make="Toyota",
                            model="Prius", model_year=2019, fuel_type="Híbrido"))
        invoice = Invoice(number="F-1", customer_id=customer.id)
        invoice.lines.append(InvoiceLine(kind="labor", description="Revisión",
                                         quantity=Decimal("2"), unit_price=Decimal("45.00"),
                                         tax_rate_percent=Decimal("7")))
        session.add(invoice)
    return config_file


class TestInitDb:

    def test_creates_tables(self, config_file, capsys):
        assert main(["--config", config_file, "init-db"]) == 0

        tables = set(inspect(get_engine()).get_table_names())
        assert {"customers", "vehicles", "repair_orders", "budgets", "invoices"} <= tables
        assert "Tables created" in capsys.readouterr().out

    def test_missing_config_file(self, tmp_path, capsys):
        assert main(["--config", str(tmp_path / "absent.yaml"), "init-db"]) == 1
        assert "ERROR" in capsys.readouterr().err


class TestClassify:

    def test_all_vehicles(self, seeded, capsys):
        assert main(["--config", seeded, "classify"]) == 0

        out = capsys.readouterr().out
        assert "1234ABC" in out
        assert "5678DEF" in out
        with session_scope() as session:
            labels = dict(session.execute(select(Vehicle.plate, Vehicle.environmental_label)).all())
        assert labels == {"1234ABC": "B", "5678DEF": "ECO"}

    def test_single_plate(self, seeded, capsys):
        assert main(["--config", seeded, "classify", "--plate", "5678DEF"]) == 0

        assert "1234ABC" not in capsys.readouterr().out

    def test_unknown_plate(self, seeded, capsys):
        assert main(["--config", seeded, "classify", "--plate", "0000XXX"]) == 1
        assert "0000XXX" in capsys.readouterr().err


class TestRefreshAndReport:

    def test_refresh_totals(self, seeded, capsys):
        assert main(["--config", seeded, "refresh-totals"]) == 0

        with session_scope() as session:
            invoice = session.scalars(select(Invoice)).one()
            assert invoice.taxable_base == Decimal("90.00")
            assert invoice.tax_total == Decimal("6.30")
            assert invoice.total == Decimal("96.30")
        assert "invoices" in capsys.readouterr().out

    def test_report(self, seeded, capsys):
        assert main(["--config", seeded, "report"]) == 0

        assert "WORKSHOP SUMMARY" in capsys.readouterr().out
