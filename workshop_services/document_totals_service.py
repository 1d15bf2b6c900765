"""
workshop_services.document_totals_service -- Ledger totals for stored documents.

Responsibility:
    Turn the lines of a repair order, budget or invoice into priced lines,
    aggregate them with the tax ledger, round once and persist the rounded
    totals on the document.

Architecture position:
    Services -- stateful orchestration over engines + kernel.
    Receives Session and WorkshopConfig via constructor injection.  Flushes
    but never commits; the caller owns the transaction.

Invariants enforced:
    - Totals are computed at full precision and rounded exactly once, by
      ``LedgerTotals.rounded()``, before they are written.
    - A document's stored totals are always recomputed from its lines,
      never adjusted incrementally.

Failure modes:
    - DocumentNotFoundError for an unknown document id.
    - InvalidLineError (propagated from the ledger) for a NaN or infinite
      line value; nothing is written in that case.

Usage:
    with session_scope() as session:
        service = DocumentTotalsService(session, get_active_config())
        totals = service.refresh_invoice(invoice_id)
        print(totals.grand_total)
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from workshop_config.schema import WorkshopConfig
from workshop_engines.tax_ledger import LedgerTotals, LineKind, PricedLine, TaxLedger
from workshop_kernel.domain.clock import Clock
from workshop_kernel.exceptions import DocumentNotFoundError, InvalidLineError
from workshop_kernel.logging_config import LogContext, get_logger
from workshop_kernel.models.budget import Budget
from workshop_kernel.models.invoice import Invoice
from workshop_kernel.models.repair_order import RepairOrder

logger = get_logger("services.document_totals")


def _line_kind(value: str | None) -> LineKind:
    """Stored line kind to LineKind; unrecognised kinds count as OTHER."""
    try:
        return LineKind(value)
    except ValueError:
        return LineKind.OTHER


class DocumentTotalsService:
    """
    Computes and stores the totals of repair orders, budgets and invoices.

    Contract:
        Every ``refresh_*`` method loads the document, builds its priced
        lines, runs the ledger, writes the rounded totals and returns them.
    Non-goals:
        - Does not validate line signs; negative quantities are the input
          layer's concern.
        - Does not keep invoices consistent with the orders they bill.
    """

    def __init__(self, session: Session, config: WorkshopConfig):
        self.session = session
        self.config = config
        self.ledger = TaxLedger(config.currency)

    def _get(self, model: type, document_type: str, document_id: UUID) -> Any:
        document = self.session.get(model, document_id)
        if document is None:
            logger.warning("document_not_found", extra={
                "document_type": document_type,
                "document_id": str(document_id),
            })
            raise DocumentNotFoundError(document_type, document_id)
        return document

    def _compute(self, document_type: str, lines: list[PricedLine]) -> LedgerTotals:
        try:
            return self.ledger.compute(lines).rounded()
        except InvalidLineError as e:
            logger.error("document_line_invalid", extra={
                "document_type": document_type,
                "field": e.field,
                "line_index": e.line_index,
            })
            raise

    # ------------------------------------------------------------------
    # Repair orders
    # ------------------------------------------------------------------

    def repair_order_lines(self, order: RepairOrder) -> list[PricedLine]:
        """
        Priced lines of a repair order: labor first, then parts.

        A work entry bills its actual hours, or its estimated hours while no
        actual time is recorded, at its hourly labor rate.  Entries with no
        hours or no rate are not billable yet and are skipped.
        """
        tax = self.config.tax
        lines: list[PricedLine] = []

        for entry in order.work_entries:
            hours = entry.actual_hours if entry.actual_hours is not None else entry.estimated_hours
            if hours is None or entry.labor_rate is None:
                logger.warning("work_entry_skipped", extra={
                    "work_entry_id": str(entry.id),
                    "has_hours": hours is not None,
                    "has_rate": entry.labor_rate is not None,
                })
                continue
            lines.append(PricedLine(
                quantity=hours,
                unit_price=entry.labor_rate,
                tax_rate_percent=tax.labor_rate_percent,
                kind=LineKind.LABOR,
                description=entry.description,
            ))

        for consumption in order.consumptions:
            rate = consumption.tax_rate_percent
            lines.append(PricedLine(
                quantity=consumption.quantity,
                unit_price=consumption.unit_price,
                tax_rate_percent=rate if rate is not None else tax.parts_rate_percent,
                kind=LineKind.PART,
                description=consumption.description,
            ))

        return lines

    def refresh_repair_order(self, order_id: UUID) -> LedgerTotals:
        """Recompute and store a repair order's subtotal, tax and total."""
        with LogContext.bind(document_id=str(order_id)):
            order = self._get(RepairOrder, "RepairOrder", order_id)
            totals = self._compute("RepairOrder", self.repair_order_lines(order))

            order.subtotal = totals.subtotal.amount
            order.tax_total = totals.tax_total.amount
            order.total = totals.grand_total.amount
            self.session.flush()

            logger.info("repair_order_totals_refreshed", extra={
                "code": order.code,
                "line_count": totals.line_count,
                "subtotal": totals.subtotal.amount,
                "tax_total": totals.tax_total.amount,
                "total": totals.grand_total.amount,
            })
            return totals

    # ------------------------------------------------------------------
    # Budgets
    # ------------------------------------------------------------------

    def refresh_budget(self, budget_id: UUID) -> LedgerTotals:
        """Recompute and store a budget's labor, parts, tax and grand totals."""
        with LogContext.bind(document_id=str(budget_id)):
            budget = self._get(Budget, "Budget", budget_id)
            lines = [
                PricedLine(
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    tax_rate_percent=line.tax_rate_percent,
                    kind=_line_kind(line.kind),
                    description=line.description,
                )
                for line in budget.lines
            ]
            totals = self._compute("Budget", lines)

            budget.labor_total = totals.subtotal_for(LineKind.LABOR).amount
            budget.parts_total = totals.subtotal_for(LineKind.PART).amount
            budget.tax_total = totals.tax_total.amount
            budget.total = totals.grand_total.amount
            self.session.flush()

            logger.info("budget_totals_refreshed", extra={
                "code": budget.code,
                "line_count": totals.line_count,
                "total": totals.grand_total.amount,
            })
            return totals

    def approve_budget(self, budget_id: UUID, clock: Clock) -> datetime:
        """
        Mark a budget approved at the clock's current time.

        Approving an approved budget keeps the original approval time.
        """
        with LogContext.bind(document_id=str(budget_id)):
            budget = self._get(Budget, "Budget", budget_id)
            if budget.approved and budget.approved_at is not None:
                logger.info("budget_already_approved", extra={"code": budget.code})
                return budget.approved_at

            budget.approved = True
            budget.approved_at = clock.now()
            self.session.flush()

            logger.info("budget_approved", extra={
                "code": budget.code,
                "approved_at": budget.approved_at,
            })
            return budget.approved_at

    # ------------------------------------------------------------------
    # Invoices
    # ------------------------------------------------------------------

    def refresh_invoice(self, invoice_id: UUID) -> LedgerTotals:
        """
        Recompute and store an invoice's taxable base, tax and total.

        Each line's ``amount`` is set to its rounded tax-exclusive amount.
        """
        with LogContext.bind(document_id=str(invoice_id)):
            invoice = self._get(Invoice, "Invoice", invoice_id)
            priced = [
                PricedLine(
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    tax_rate_percent=line.tax_rate_percent,
                    kind=_line_kind(line.kind),
                    description=line.description,
                )
                for line in invoice.lines
            ]
            totals = self._compute("Invoice", priced)

            for line, priced_line in zip(invoice.lines, priced):
                line.amount = self.ledger.line_amount(priced_line).amount
            invoice.taxable_base = totals.subtotal.amount
            invoice.tax_total = totals.tax_total.amount
            invoice.total = totals.grand_total.amount
            self.session.flush()

            logger.info("invoice_totals_refreshed", extra={
                "number": invoice.number,
                "line_count": totals.line_count,
                "taxable_base": totals.subtotal.amount,
                "tax_total": totals.tax_total.amount,
                "total": totals.grand_total.amount,
            })
            return totals
