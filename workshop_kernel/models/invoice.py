"""
Module: workshop_kernel.models.invoice
Responsibility: ORM persistence for invoices and invoice lines.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - number is unique (uq_invoice_number).
    - taxable_base, tax_total and total are rounded once from the
      full-precision ledger result; total == taxable_base + tax_total holds
      for the full-precision values, not necessarily for rounded ones.
    - InvoiceLine.amount is the rounded tax-exclusive line amount.

Audit relevance:
    issued_at and total feed every billing report.  Reports sum these stored,
    already-rounded totals.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import ForeignKey, Index, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from workshop_kernel.db.base import Base, TrackedBase
from workshop_kernel.db.types import MoneyAmount, Percentage, QuantityAmount


class InvoiceKind(str, Enum):
    PROFORMA = "proforma"
    SIMPLIFIED = "simplificada"
    ORDINARY = "ordinaria"
    CORRECTIVE = "rectificativa"


class Invoice(TrackedBase):
    """An invoice issued to a customer, optionally for a repair order."""

    __tablename__ = "invoices"

    __table_args__ = (
        UniqueConstraint("number", name="uq_invoice_number"),
        Index("idx_invoice_issued_at", "issued_at"),
        Index("idx_invoice_customer", "customer_id"),
    )

    number: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )

    series: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        default="F",
    )

    kind: Mapped[InvoiceKind] = mapped_column(
        String(20),
        nullable=False,
        default=InvoiceKind.ORDINARY,
    )

    customer_id: Mapped[UUID] = mapped_column(
        ForeignKey("customers.id"),
        nullable=False,
    )

    repair_order_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("repair_orders.id"),
        nullable=True,
    )

    issued_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now(),
    )

    taxable_base: Mapped[Decimal] = mapped_column(
        MoneyAmount,
        nullable=False,
        default=Decimal("0"),
    )

    tax_total: Mapped[Decimal] = mapped_column(
        MoneyAmount,
        nullable=False,
        default=Decimal("0"),
    )

    total: Mapped[Decimal] = mapped_column(
        MoneyAmount,
        nullable=False,
        default=Decimal("0"),
    )

    notes: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    lines: Mapped[list["InvoiceLine"]] = relationship(
        back_populates="invoice",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Invoice {self.series}-{self.number} total={self.total}>"


class InvoiceLine(Base):
    """A priced line on an invoice (tipo, descripcion, cantidad, ... importe)."""

    __tablename__ = "invoice_lines"

    __table_args__ = (Index("idx_invoice_line_invoice", "invoice_id"),)

    invoice_id: Mapped[UUID] = mapped_column(
        ForeignKey("invoices.id"),
        nullable=False,
    )

    kind: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    quantity: Mapped[Decimal] = mapped_column(
        QuantityAmount,
        nullable=False,
    )

    unit_price: Mapped[Decimal] = mapped_column(
        MoneyAmount,
        nullable=False,
    )

    tax_rate_percent: Mapped[Decimal] = mapped_column(
        Percentage,
        nullable=False,
    )

    amount: Mapped[Decimal] = mapped_column(
        MoneyAmount,
        nullable=False,
        default=Decimal("0"),
    )

    invoice: Mapped["Invoice"] = relationship(
        back_populates="lines",
    )
