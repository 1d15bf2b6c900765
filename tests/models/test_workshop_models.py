"""
Tests for the workshop ORM models.

Covers:
- Column defaults (status, rates, totals, series)
- Unique constraints on plate, tax id, order code and invoice number
- Cascading line relationships on repair orders, budgets and invoices
- Decimal round trips through Numeric columns
- Timestamps stored in UTC and read back timezone-aware
"""

from datetime import UTC, datetime
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from workshop_kernel.models import (
    Budget,
    BudgetLine,
    Customer,
    CustomerType,
    Invoice,
    InvoiceKind,
    InvoiceLine,
    PartConsumption,
    RepairOrder,
    RepairOrderStatus,
    Vehicle,
    WorkEntry,
)


class TestCustomerAndVehicle:

    def test_customer_defaults(self, session, customer):
        session.expire_all()
        stored = session.get(Customer, customer.id)

        assert stored.customer_type == CustomerType.INDIVIDUAL.value
        assert stored.created_at is not None

    def test_vehicle_belongs_to_customer(self, session, customer, vehicle):
        session.expire_all()

        assert [v.plate for v in session.get(Customer, customer.id).vehicles] == ["1234ABC"]
        assert vehicle.is_plugin_hybrid is False
        assert vehicle.environmental_label is None

    def test_duplicate_plate_rejected(self, session, make_vehicle):
        make_vehicle(plate="0000BBB")

        with pytest.raises(IntegrityError):
            make_vehicle(plate="0000BBB")

    def test_duplicate_tax_id_rejected(self, session, make_customer):
        make_customer("Uno", "B12345678")

        with pytest.raises(IntegrityError):
            make_customer("Dos", "B12345678")


class TestRepairOrder:

    def _order(self, session, customer, vehicle, code="OR-0001") -> RepairOrder:
        order = RepairOrder(code=code, customer_id=customer.id, vehicle_id=vehicle.id)
        session.add(order)
        session.flush()
        return order

    def test_defaults(self, session, customer, vehicle):
        order = self._order(session, customer, vehicle)

        assert order.status == RepairOrderStatus.OPEN
        assert order.is_open
        assert order.total == Decimal("0")

    def test_finished_order_is_not_open(self, session, customer, vehicle):
        order = self._order(session, customer, vehicle)
        order.status = RepairOrderStatus.FINISHED

        assert not order.is_open

    def test_lines_cascade(self, session, customer, vehicle):
        order = self._order(session, customer, vehicle)
        order.work_entries.append(WorkEntry(
            description="Cambio de aceite",
            actual_hours=Decimal("0.50"),
            labor_rate=Decimal("45.00"),
        ))
        order.consumptions.append(PartConsumption(
            description="Filtro de aceite",
            quantity=Decimal("1"),
            unit_price=Decimal("12.50"),
        ))
        session.flush()
        session.expire_all()

        stored = session.get(RepairOrder, order.id)
        assert stored.work_entries[0].actual_hours == Decimal("0.50")
        assert stored.consumptions[0].tax_rate_percent == Decimal("7.00")

        session.delete(stored)
        session.flush()
        assert session.scalars(select(WorkEntry)).all() == []
        assert session.scalars(select(PartConsumption)).all() == []

    def test_duplicate_code_rejected(self, session, customer, vehicle):
        self._order(session, customer, vehicle, code="OR-9")

        with pytest.raises(IntegrityError):
            self._order(session, customer, vehicle, code="OR-9")


class TestBudgetAndInvoice:

    def test_budget_defaults(self, session, customer, vehicle):
        budget = Budget(code="P-1", customer_id=customer.id, vehicle_id=vehicle.id)
        budget.lines.append(BudgetLine(
            description="Pastillas de freno",
            quantity=Decimal("1"),
            unit_price=Decimal("60.00"),
        ))
        session.add(budget)
        session.flush()

        assert budget.approved is False
        assert budget.approved_at is None
        assert budget.lines[0].kind == "other"
        assert budget.lines[0].tax_rate_percent == Decimal("7.00")

    def test_invoice_defaults(self, session, customer):
        invoice = Invoice(number="F-2024-001", customer_id=customer.id)
        invoice.lines.append(InvoiceLine(
            kind="part",
            description="Batería",
            quantity=Decimal("1"),
            unit_price=Decimal("95.00"),
            tax_rate_percent=Decimal("7.00"),
        ))
        session.add(invoice)
        session.flush()
        session.expire_all()

        stored = session.get(Invoice, invoice.id)
        assert stored.series == "F"
        assert stored.kind == InvoiceKind.ORDINARY.value
        assert stored.issued_at is not None
        assert stored.lines[0].amount == Decimal("0")

    def test_duplicate_invoice_number_rejected(self, session, customer):
        session.add(Invoice(number="F-1", customer_id=customer.id))
        session.flush()
        session.add(Invoice(number="F-1", customer_id=customer.id))

        with pytest.raises(IntegrityError):
            session.flush()

    def test_vehicle_table_registered(self):
        assert Vehicle.__tablename__ == "vehicles"
        assert "environmental_label" in Vehicle.__table__.columns


class TestTimestamps:
    """Every datetime column stores UTC and reads back aware."""

    def test_local_time_stored_as_same_instant(self, session, customer):
        local = datetime(2024, 7, 1, 0, 30, tzinfo=ZoneInfo("Atlantic/Canary"))
        invoice = Invoice(number="F-UTC", customer_id=customer.id, issued_at=local)
        session.add(invoice)
        session.flush()
        session.expire_all()

        stored = session.get(Invoice, invoice.id).issued_at

        assert stored.tzinfo is not None
        assert stored.utcoffset().total_seconds() == 0
        assert stored == datetime(2024, 6, 30, 23, 30, tzinfo=UTC)

    def test_naive_value_taken_as_utc(self, session, customer):
        invoice = Invoice(number="F-NAIVE", customer_id=customer.id, issued_at=datetime(2024, 3, 1, 8, 0))
        session.add(invoice)
        session.flush()
        session.expire_all()

        assert session.get(Invoice, invoice.id).issued_at == datetime(2024, 3, 1, 8, 0, tzinfo=UTC)

    def test_server_default_is_aware(self, session, customer):
        session.expire_all()

        assert session.get(type(customer), customer.id).created_at.tzinfo is not None
