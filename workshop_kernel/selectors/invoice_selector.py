"""
Module: workshop_kernel.selectors.invoice_selector
Responsibility: Read-only invoice queries feeding the billing reports.
Architecture position: Kernel > Selectors.

Reports sum the stored, rounded invoice totals returned here; nothing in
this module recomputes a total.

Invoices are stored with UTC timestamps but billed on local calendar
days: the selector is built with the workshop's time zone, and both the
day bounds of a range and each invoice's ``issued_on`` are taken in it.
"""

from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta, tzinfo
from decimal import Decimal
from typing import Protocol
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from workshop_kernel.models.invoice import Invoice
from workshop_kernel.selectors.base import BaseSelector


class _InclusiveRange(Protocol):
    start: date
    end: date


@dataclass(frozen=True)
class InvoiceSummary:
    """An issued invoice reduced to what the reports need."""

    invoice_id: UUID
    number: str
    customer_id: UUID
    issued_at: datetime
    issued_on: date
    total: Decimal


class InvoiceSelector(BaseSelector):
    """Read-only access to invoices, with calendar days in ``tz``."""

    def __init__(self, session: Session, tz: tzinfo = UTC):
        super().__init__(session)
        self.tz = tz

    def _midnight(self, day: date) -> datetime:
        return datetime.combine(day, time.min, tzinfo=self.tz)

    def billed_documents(self, date_range: _InclusiveRange | None = None) -> list[InvoiceSummary]:
        """
        Invoices ordered by issue time, optionally limited to a range of days.

        Args:
            date_range: Anything with inclusive ``start`` and ``end`` dates
                (e.g. workshop_engines.reporting.DateRange).  Every invoice
                issued on the end day, local time, is included.
        """
        query = select(
            Invoice.id,
            Invoice.number,
            Invoice.customer_id,
            Invoice.issued_at,
            Invoice.total,
        ).order_by(Invoice.issued_at, Invoice.number)

        if date_range is not None:
            lower = self._midnight(date_range.start)
            upper = self._midnight(date_range.end + timedelta(days=1))
            query = query.where(Invoice.issued_at >= lower, Invoice.issued_at < upper)

        return [
            InvoiceSummary(
                invoice_id=row.id,
                number=row.number,
                customer_id=row.customer_id,
                issued_at=row.issued_at,
                issued_on=row.issued_at.astimezone(self.tz).date(),
                total=row.total,
            )
            for row in self.session.execute(query).all()
        ]
