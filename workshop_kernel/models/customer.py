"""
Module: workshop_kernel.models.customer
Responsibility: ORM persistence for workshop customers and their vehicles.
    Vehicle rows carry the raw fuel data the emissions classifier reads and
    the stored label identifier it writes back.
Architecture position: Kernel > Models.  May import from db/base.py only.
    MUST NOT import from services/, selectors/, domain/, or outer layers.

Invariants enforced:
    - plate is unique across the workshop (uq_vehicle_plate).
    - tax_id is unique across customers (uq_customer_tax_id).
    - environmental_label holds only the label identifier ("CERO", "ECO",
      "C", "B", "SIN_DISTINTIVO"); display data is always re-derived.

Failure modes:
    - IntegrityError on duplicate plate or tax_id.
"""

from enum import Enum
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from workshop_kernel.db.base import TrackedBase


class CustomerType(str, Enum):
    """Individual or company customer."""

    INDIVIDUAL = "particular"
    COMPANY = "empresa"


class Customer(TrackedBase):
    """
    A person or company the workshop bills.

    Guarantees:
        - tax_id (NIF/CIF) is unique.
        - vehicles lists every vehicle registered to this customer.
    """

    __tablename__ = "customers"

    __table_args__ = (
        UniqueConstraint("tax_id", name="uq_customer_tax_id"),
        Index("idx_customer_name", "name"),
    )

    customer_type: Mapped[CustomerType] = mapped_column(
        String(20),
        nullable=False,
        default=CustomerType.INDIVIDUAL,
    )

    # NIF / CIF
    tax_id: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )

    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
    )

    email: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )

    phone: Mapped[str | None] = mapped_column(
        String(20),
        nullable=True,
    )

    vehicles: Mapped[list["Vehicle"]] = relationship(
        back_populates="customer",
    )

    def __repr__(self) -> str:
        return f"<Customer {self.tax_id}: {self.name}>"


class Vehicle(TrackedBase):
    """
    A vehicle registered at the workshop.

    Contract:
        model_year, fuel_type, is_plugin_hybrid and electric_range_km are the
        classifier inputs.  They may be missing; a vehicle with missing year
        or fuel is labelled SIN_DISTINTIVO rather than rejected.

    Non-goals:
        - This model does NOT compute its own label; VehicleLabelService does.
    """

    __tablename__ = "vehicles"

    __table_args__ = (
        UniqueConstraint("plate", name="uq_vehicle_plate"),
        Index("idx_vehicle_customer", "customer_id"),
    )

    customer_id: Mapped[UUID] = mapped_column(
        ForeignKey("customers.id"),
        nullable=False,
    )

    # Registration plate (matrícula)
    plate: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )

    make: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    model: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    # Classifier inputs
    model_year: Mapped[int | None] = mapped_column(
        nullable=True,
    )

    fuel_type: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
    )

    is_plugin_hybrid: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    electric_range_km: Mapped[int | None] = mapped_column(
        nullable=True,
    )

    # Stored label identifier, written back by VehicleLabelService
    environmental_label: Mapped[str | None] = mapped_column(
        String(20),
        nullable=True,
    )

    customer: Mapped["Customer"] = relationship(
        back_populates="vehicles",
    )

    def __repr__(self) -> str:
        return f"<Vehicle {self.plate}: {self.make} {self.model}>"
