"""
workshop_services.reporting_service -- Dashboard and reports figures.

Responsibility:
    Load billing, order and stock data through the read-only selectors and
    compute the dashboard / reports figures with the pure reporting engine.

Architecture position:
    Services -- the only layer that knows what "today" is, through the
    injected Clock.  Read-only: never flushes or commits.

Invariants enforced:
    - Billing figures sum stored, already-rounded invoice totals.
    - "This month" and "today" come from the injected clock, never from
      the wall clock directly.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.orm import Session

from workshop_config.schema import WorkshopConfig
from workshop_engines.reporting import (
    BilledDocument,
    CustomerTotal,
    DateRange,
    MonthlyTotal,
    StockItem,
    count_open_orders,
    inventory_value,
    items_below_minimum,
    monthly_series,
    period_change_percent,
    top_customers,
    total_billed,
)
from workshop_kernel.domain.clock import Clock
from workshop_kernel.domain.values import Money
from workshop_kernel.logging_config import get_logger
from workshop_kernel.selectors.article_selector import ArticleSelector
from workshop_kernel.selectors.invoice_selector import InvoiceSelector
from workshop_kernel.selectors.repair_order_selector import RepairOrderSelector

logger = get_logger("services.reporting")


@dataclass(frozen=True)
class BillingSummary:
    current_month: DateRange
    current_total: Money
    previous_total: Money
    change_percent: Decimal
    monthly: tuple[MonthlyTotal, ...]
    top_customers: tuple[CustomerTotal, ...]


@dataclass(frozen=True)
class OpenOrdersSummary:
    open_count: int
    by_status: dict[str, int]


@dataclass(frozen=True)
class InventorySummary:
    article_count: int
    below_minimum: tuple[StockItem, ...]
    value: Money


class ReportingService:
    """Read-only figures for the dashboard and the reports screen."""

    def __init__(self, session: Session, clock: Clock, config: WorkshopConfig):
        self.session = session
        self.clock = clock
        self.config = config
        self.currency = config.currency

    @property
    def tz(self):
        """Zone of the injected clock; calendar days and months are its, not UTC's."""
        return self.clock.now().tzinfo

    def _billed_documents(self, date_range: DateRange | None = None) -> list[BilledDocument]:
        return [
            BilledDocument(
                document_id=s.invoice_id,
                customer_id=s.customer_id,
                issued_on=s.issued_on,
                total=Money(s.total, self.currency),
            )
            for s in InvoiceSelector(self.session, self.tz).billed_documents(date_range)
        ]

    def billing_summary(self) -> BillingSummary:
        """
        Current vs previous calendar month, the monthly series up to this
        month, and the customers with the highest billing overall.
        """
        today = self.clock.today()
        current = DateRange.month_of(today)
        previous = current.previous_month()
        documents = self._billed_documents()

        current_total = total_billed(documents, current, self.currency)
        previous_total = total_billed(documents, previous, self.currency)

        summary = BillingSummary(
            current_month=current,
            current_total=current_total,
            previous_total=previous_total,
            change_percent=period_change_percent(current_total, previous_total),
            monthly=tuple(monthly_series(
                documents,
                as_of=today,
                months=self.config.reporting.monthly_series_length,
                currency=self.currency,
            )),
            top_customers=tuple(top_customers(
                documents,
                limit=self.config.reporting.top_customers_limit,
                currency=self.currency,
            )),
        )

        logger.info("billing_summary_computed", extra={
            "month_start": current.start.isoformat(),
            "document_count": len(documents),
            "current_total": current_total.amount,
            "previous_total": previous_total.amount,
        })
        return summary

    def revenue_today(self) -> Money:
        """Sum of the invoices issued today."""
        return total_billed(
            self._billed_documents(DateRange.day(self.clock.today())),
            currency=self.currency,
        )

    def open_orders(self) -> OpenOrdersSummary:
        """Repair orders still in the workshop, and every order by status."""
        statuses = [getattr(s, "value", s) for s in RepairOrderSelector(self.session).statuses()]
        return OpenOrdersSummary(
            open_count=count_open_orders(statuses),
            by_status=dict(Counter(statuses)),
        )

    def inventory_summary(self) -> InventorySummary:
        """Articles at or below minimum stock and the value of the stock."""
        items = [
            StockItem(
                reference=a.reference,
                stock=a.stock,
                minimum_stock=a.minimum_stock,
                sale_price=a.sale_price,
            )
            for a in ArticleSelector(self.session).stock_items()
        ]
        below = items_below_minimum(items)
        if below:
            logger.info("stock_below_minimum", extra={
                "count": len(below),
                "references": [i.reference for i in below],
            })
        return InventorySummary(
            article_count=len(items),
            below_minimum=tuple(below),
            value=inventory_value(items, self.currency),
        )
