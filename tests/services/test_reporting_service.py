"""
Tests for ReportingService.

The deterministic clock stands at 2024-03-15 10:30 UTC, so March 2024 is
the current month and February 2024 the previous one.
"""

from datetime import UTC, date, datetime
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest

from workshop_config.schema import ReportingConfig, WorkshopConfig
from workshop_kernel.domain.clock import DeterministicClock
from workshop_kernel.domain.values import Money
from workshop_kernel.models import Invoice, RepairOrder, RepairOrderStatus
from workshop_services.reporting_service import ReportingService


@pytest.fixture
def service(session, deterministic_clock, workshop_config):
    return ReportingService(session, deterministic_clock, workshop_config)


@pytest.fixture
def billed(session, make_customer):
    ana = make_customer("Ana", "11111111H")
    ben = make_customer("Ben", "22222222J")
    rows = [
        ("F-1", ana, datetime(2024, 2, 10, 12, 0), "100.00"),
        ("F-2", ben, datetime(2024, 3, 1, 8, 0), "200.00"),
        ("F-3", ana, datetime(2024, 3, 15, 9, 0), "50.00"),
        ("F-4", ben, datetime(2024, 3, 15, 18, 0), "25.00"),
        ("F-0", ana, datetime(2023, 6, 30, 12, 0), "500.00"),
    ]
    for number, customer, issued_at, total in rows:
        session.add(Invoice(number=number, customer_id=customer.id, issued_at=issued_at, total=Decimal(total)))
    session.flush()
    return ana, ben


class TestBillingSummary:

    def test_current_and_previous_month(self, service, billed):
        summary = service.billing_summary()

        assert summary.current_month.start == date(2024, 3, 1)
        assert summary.current_month.end == date(2024, 3, 31)
        assert summary.current_total == Money.of("275.00", "EUR")
        assert summary.previous_total == Money.of("100.00", "EUR")
        assert summary.change_percent == Decimal("175")

    def test_monthly_series(self, service, billed):
        summary = service.billing_summary()

        assert len(summary.monthly) == 6
        assert summary.monthly[0].month_start == date(2023, 10, 1)
        assert summary.monthly[-1].total == Money.of("275.00", "EUR")
        assert summary.monthly[-2].total == Money.of("100.00", "EUR")

    def test_top_customers_over_all_invoices(self, service, billed):
        ana, ben = billed

        summary = service.billing_summary()

        assert [c.customer_id for c in summary.top_customers] == [ana.id, ben.id]
        assert summary.top_customers[0].total == Money.of("650.00", "EUR")

    def test_configured_lengths(self, session, deterministic_clock, billed):
        config = WorkshopConfig(
            config_id="short",
            version=1,
            currency="EUR",
            reporting=ReportingConfig(monthly_series_length=2, top_customers_limit=1),
        )

        summary = ReportingService(session, deterministic_clock, config).billing_summary()

        assert len(summary.monthly) == 2
        assert len(summary.top_customers) == 1

    def test_no_billing(self, service):
        summary = service.billing_summary()

        assert summary.current_total.is_zero
        assert summary.change_percent == Decimal("100")
        assert summary.top_customers == ()

    def test_summary_logged(self, service, billed, captured_logs):
        service.billing_summary()

        records = [r for r in captured_logs() if r["message"] == "billing_summary_computed"]
        assert records[0]["document_count"] == 5
        assert records[0]["current_total"] == "275.00"


class TestRevenueToday:

    def test_sums_whole_day(self, service, billed):
        assert service.revenue_today() == Money.of("75.00", "EUR")

    def test_nothing_today(self, service, billed, deterministic_clock):
        deterministic_clock.advance(86400)

        assert service.revenue_today().is_zero


class TestLocalCalendar:
    """A Canary Islands workshop bills on local days and months."""

    @pytest.fixture
    def canary_service(self, session, workshop_config):
        clock = DeterministicClock(datetime(2024, 7, 1, 9, 0, tzinfo=ZoneInfo("Atlantic/Canary")))
        return ReportingService(session, clock, workshop_config)

    @pytest.fixture
    def just_after_local_midnight(self, session, customer):
        session.add(Invoice(
            number="F-7",
            customer_id=customer.id,
            issued_at=datetime(2024, 6, 30, 23, 30, tzinfo=UTC),
            total=Decimal("100.00"),
        ))
        session.flush()

    def test_revenue_today_uses_local_day(self, canary_service, just_after_local_midnight):
        assert canary_service.revenue_today() == Money.of("100.00", "EUR")

    def test_billing_month_uses_local_month(self, canary_service, just_after_local_midnight):
        summary = canary_service.billing_summary()

        assert summary.current_month.start == date(2024, 7, 1)
        assert summary.current_total == Money.of("100.00", "EUR")
        assert summary.previous_total.is_zero


class TestOpenOrders:

    def test_counts(self, session, service, customer, vehicle):
        statuses = [
            RepairOrderStatus.OPEN,
            RepairOrderStatus.OPEN,
            RepairOrderStatus.IN_PROGRESS,
            RepairOrderStatus.WAITING,
            RepairOrderStatus.FINISHED,
            RepairOrderStatus.INVOICED,
        ]
        for i, status in enumerate(statuses):
            session.add(RepairOrder(code=f"OR-{i}", customer_id=customer.id, vehicle_id=vehicle.id, status=status))
        session.flush()
        session.expire_all()

        summary = service.open_orders()

        assert summary.open_count == 4
        assert summary.by_status == {
            "abierta": 2,
            "en_curso": 1,
            "a_la_espera": 1,
            "terminada": 1,
            "facturada": 1,
        }

    def test_no_orders(self, service):
        summary = service.open_orders()

        assert summary.open_count == 0
        assert summary.by_status == {}


class TestInventorySummary:

    def test_below_minimum_and_value(self, service, make_article, captured_logs):
        make_article("FILTRO", stock=10, minimum_stock=2, sale_price="12.50")
        make_article("PASTILLA", stock=2, minimum_stock=2, sale_price="30.00")
        make_article("ACEITE", stock=1, minimum_stock=5, sale_price="8.00")
        make_article("RETIRADO", stock=0, minimum_stock=5, is_active=False)

        summary = service.inventory_summary()

        assert summary.article_count == 3
        assert [i.reference for i in summary.below_minimum] == ["ACEITE", "PASTILLA"]
        assert summary.value == Money.of("193.00", "EUR")
        records = [r for r in captured_logs() if r["message"] == "stock_below_minimum"]
        assert records[0]["references"] == ["ACEITE", "PASTILLA"]

    def test_empty_inventory(self, service):
        summary = service.inventory_summary()

        assert summary.article_count == 0
        assert summary.below_minimum == ()
        assert summary.value.is_zero
