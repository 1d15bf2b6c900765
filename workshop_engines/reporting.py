"""
Reporting Engine - Date-range billing figures and stock indicators.

Pure functions over frozen DTOs.  Services load the DTOs through the
selectors and pass "today" in explicitly; this module never reads the
wall clock.

Billing figures sum the stored, already-rounded document totals, so a
report always matches the sum of the printed invoices.

Date ranges are inclusive on both ends, the way the reports screen
selects "this month": from the first day through the last day.
"""

from __future__ import annotations

import calendar
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any

from workshop_engines.tracer import traced_engine
from workshop_kernel.domain.values import Currency, Money

CLOSED_ORDER_STATUSES = frozenset({"terminada", "facturada"})


@dataclass(frozen=True)
class DateRange:
    """Inclusive range of calendar days."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f"DateRange start {self.start} is after end {self.end}")

    @classmethod
    def month_of(cls, day: date) -> DateRange:
        """The calendar month containing day."""
        last = calendar.monthrange(day.year, day.month)[1]
        return cls(day.replace(day=1), day.replace(day=last))

    @classmethod
    def day(cls, day: date) -> DateRange:
        return cls(day, day)

    def previous_month(self) -> DateRange:
        """The calendar month before the one this range starts in."""
        return DateRange.month_of(self.start.replace(day=1) - timedelta(days=1))

    def contains(self, value: date | datetime) -> bool:
        if isinstance(value, datetime):
            value = value.date()
        return self.start <= value <= self.end


@dataclass(frozen=True)
class BilledDocument:
    """An issued invoice as the reports see it."""

    document_id: Any
    customer_id: Any
    issued_on: date
    total: Money


@dataclass(frozen=True)
class MonthlyTotal:
    month_start: date
    total: Money


@dataclass(frozen=True)
class CustomerTotal:
    customer_id: Any
    total: Money


@dataclass(frozen=True)
class StockItem:
    """Stock position of one article; missing counts are treated as zero."""

    reference: str
    stock: int | None
    minimum_stock: int | None
    sale_price: Decimal

    @property
    def is_below_minimum(self) -> bool:
        return (self.stock or 0) <= (self.minimum_stock or 0)


def filter_in_range(
    documents: Iterable[BilledDocument],
    date_range: DateRange,
) -> list[BilledDocument]:
    """Documents issued within date_range, in input order."""
    return [d for d in documents if date_range.contains(d.issued_on)]


def total_billed(
    documents: Iterable[BilledDocument],
    date_range: DateRange | None = None,
    currency: str | Currency = "EUR",
) -> Money:
    """Sum of document totals, optionally restricted to a date range."""
    total = Money.zero(Currency.coerce(currency))
    for document in documents:
        if date_range is None or date_range.contains(document.issued_on):
            total = total + document.total
    return total


def period_change_percent(current: Money, previous: Money) -> Decimal:
    """
    Percentage change from previous to current.

    A previous period with no billing reports 100 (growth from nothing),
    the way the dashboard shows it.  The result is not rounded.
    """
    if previous.is_zero:
        return Decimal("100")
    return (current.amount - previous.amount) / previous.amount * Decimal("100")


@traced_engine("reporting.monthly_series", "1.0", fingerprint_fields=("as_of", "months"))
def monthly_series(
    documents: Sequence[BilledDocument],
    as_of: date,
    months: int = 6,
    currency: str | Currency = "EUR",
) -> list[MonthlyTotal]:
    """
    Billing per calendar month, for the given number of months up to as_of's month.

    Oldest month first.  Months without billing report zero.
    """
    if months < 1:
        raise ValueError(f"months must be positive, got {months}")

    ranges = [DateRange.month_of(as_of)]
    while len(ranges) < months:
        ranges.append(ranges[-1].previous_month())
    ranges.reverse()

    return [
        MonthlyTotal(month_start=r.start, total=total_billed(documents, r, currency))
        for r in ranges
    ]


def top_customers(
    documents: Iterable[BilledDocument],
    limit: int = 5,
    currency: str | Currency = "EUR",
) -> list[CustomerTotal]:
    """Customers ranked by billed total, highest first; ties by customer id."""
    cur = Currency.coerce(currency)
    totals: dict[Any, Money] = {}
    for document in documents:
        totals[document.customer_id] = totals.get(document.customer_id, Money.zero(cur)) + document.total

    ranked = sorted(totals.items(), key=lambda item: (-item[1].amount, str(item[0])))
    return [CustomerTotal(customer_id, total) for customer_id, total in ranked[:limit]]


def items_below_minimum(items: Iterable[StockItem]) -> list[StockItem]:
    """Articles whose stock is at or below their minimum."""
    return [item for item in items if item.is_below_minimum]


def inventory_value(items: Iterable[StockItem], currency: str | Currency = "EUR") -> Money:
    """Sum of stock x sale price; missing stock counts as zero."""
    value = Decimal("0")
    for item in items:
        value += Decimal(item.stock or 0) * item.sale_price
    return Money(value, Currency.coerce(currency))


def count_open_orders(statuses: Iterable[str]) -> int:
    """Repair orders that are neither finished nor invoiced."""
    return sum(
        1 for status in statuses
        if getattr(status, "value", status) not in CLOSED_ORDER_STATUSES
    )
