"""
Module: workshop_kernel.models.budget
Responsibility: ORM persistence for customer quotes (presupuestos) and their
    priced lines.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - code is unique (uq_budget_code).
    - labor_total, parts_total, tax_total and total are rounded once from the
      full-precision ledger result of the budget's lines.
    - approved_at is set iff approved is True.
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from workshop_kernel.db.base import Base, TrackedBase
from workshop_kernel.db.types import MoneyAmount, Percentage, QuantityAmount


class Budget(TrackedBase):
    """A quote for a vehicle, optionally attached to a repair order."""

    __tablename__ = "budgets"

    __table_args__ = (
        UniqueConstraint("code", name="uq_budget_code"),
        Index("idx_budget_customer", "customer_id"),
    )

    code: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )

    customer_id: Mapped[UUID] = mapped_column(
        ForeignKey("customers.id"),
        nullable=False,
    )

    vehicle_id: Mapped[UUID] = mapped_column(
        ForeignKey("vehicles.id"),
        nullable=False,
    )

    repair_order_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("repair_orders.id"),
        nullable=True,
    )

    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    labor_total: Mapped[Decimal] = mapped_column(
        MoneyAmount,
        nullable=False,
        default=Decimal("0"),
    )

    parts_total: Mapped[Decimal] = mapped_column(
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

    approved: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    approved_at: Mapped[datetime | None] = mapped_column(
        nullable=True,
    )

    lines: Mapped[list["BudgetLine"]] = relationship(
        back_populates="budget",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Budget {self.code} total={self.total}>"


class BudgetLine(Base):
    """A priced line on a budget; kind is "labor", "part" or "other"."""

    __tablename__ = "budget_lines"

    __table_args__ = (Index("idx_budget_line_budget", "budget_id"),)

    budget_id: Mapped[UUID] = mapped_column(
        ForeignKey("budgets.id"),
        nullable=False,
    )

    kind: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="other",
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
        default=Decimal("7.00"),
    )

    budget: Mapped["Budget"] = relationship(
        back_populates="lines",
    )
