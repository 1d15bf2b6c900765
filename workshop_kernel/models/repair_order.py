"""
Module: workshop_kernel.models.repair_order
Responsibility: ORM persistence for repair orders, the labor recorded on them
    (work entries) and the parts consumed.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - code is unique (uq_repair_order_code).
    - subtotal, tax_total and total are the rounded results of the tax ledger;
      they are written only by DocumentTotalsService and never summed from
      other stored amounts.

Failure modes:
    - IntegrityError on duplicate code or dangling customer/vehicle reference.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import ForeignKey, Index, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from workshop_kernel.db.base import Base, TrackedBase
from workshop_kernel.db.types import MoneyAmount, Percentage, QuantityAmount


class RepairOrderStatus(str, Enum):
    """Repair order lifecycle status.

    FINISHED and INVOICED orders are no longer counted as open.
    """

    OPEN = "abierta"
    IN_PROGRESS = "en_curso"
    WAITING = "a_la_espera"
    FINISHED = "terminada"
    INVOICED = "facturada"


class RepairOrder(TrackedBase):
    """
    A job opened for a customer's vehicle.

    Guarantees:
        - work_entries and consumptions are deleted with the order.
        - The persisted totals are zero until the order is first refreshed.
    """

    __tablename__ = "repair_orders"

    __table_args__ = (
        UniqueConstraint("code", name="uq_repair_order_code"),
        Index("idx_repair_order_status", "status"),
        Index("idx_repair_order_vehicle", "vehicle_id"),
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

    status: Mapped[RepairOrderStatus] = mapped_column(
        String(20),
        nullable=False,
        default=RepairOrderStatus.OPEN,
    )

    opened_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now(),
    )

    closed_at: Mapped[datetime | None] = mapped_column(
        nullable=True,
    )

    notes: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    # Rounded ledger results
    subtotal: Mapped[Decimal] = mapped_column(
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

    work_entries: Mapped[list["WorkEntry"]] = relationship(
        back_populates="repair_order",
        cascade="all, delete-orphan",
    )

    consumptions: Mapped[list["PartConsumption"]] = relationship(
        back_populates="repair_order",
        cascade="all, delete-orphan",
    )

    @property
    def is_open(self) -> bool:
        return self.status not in (RepairOrderStatus.FINISHED, RepairOrderStatus.INVOICED)

    def __repr__(self) -> str:
        return f"<RepairOrder {self.code} ({self.status})>"


class WorkEntry(Base):
    """
    Labor recorded against a repair order (parte de trabajo).

    Hours are decimal (0.25 = a quarter hour).  labor_rate is the price per
    hour.  Any of the three may be missing while the job is in progress.
    """

    __tablename__ = "work_entries"

    __table_args__ = (Index("idx_work_entry_order", "repair_order_id"),)

    repair_order_id: Mapped[UUID] = mapped_column(
        ForeignKey("repair_orders.id"),
        nullable=False,
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    estimated_hours: Mapped[Decimal | None] = mapped_column(
        QuantityAmount,
        nullable=True,
    )

    actual_hours: Mapped[Decimal | None] = mapped_column(
        QuantityAmount,
        nullable=True,
    )

    labor_rate: Mapped[Decimal | None] = mapped_column(
        MoneyAmount,
        nullable=True,
    )

    repair_order: Mapped["RepairOrder"] = relationship(
        back_populates="work_entries",
    )


class PartConsumption(Base):
    """An article consumed on a repair order, priced at the time of use."""

    __tablename__ = "part_consumptions"

    __table_args__ = (Index("idx_part_consumption_order", "repair_order_id"),)

    repair_order_id: Mapped[UUID] = mapped_column(
        ForeignKey("repair_orders.id"),
        nullable=False,
    )

    article_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("articles.id"),
        nullable=True,
    )

    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
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

    repair_order: Mapped["RepairOrder"] = relationship(
        back_populates="consumptions",
    )
