"""
Module: workshop_kernel.models.article
Responsibility: ORM persistence for spare parts and consumables kept in stock.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - reference is unique (uq_article_reference).
    - tax_rate_percent defaults to 7.00 (general IGIC rate).
"""

from decimal import Decimal

from sqlalchemy import Boolean, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from workshop_kernel.db.base import TrackedBase
from workshop_kernel.db.types import MoneyAmount, Percentage


class Article(TrackedBase):
    """A part or consumable that can be sold and consumed on repair orders."""

    __tablename__ = "articles"

    __table_args__ = (
        UniqueConstraint("reference", name="uq_article_reference"),
        Index("idx_article_active", "is_active"),
    )

    reference: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    sale_price: Mapped[Decimal] = mapped_column(
        MoneyAmount,
        nullable=False,
    )

    cost_price: Mapped[Decimal | None] = mapped_column(
        MoneyAmount,
        nullable=True,
    )

    stock: Mapped[int | None] = mapped_column(
        nullable=True,
        default=0,
    )

    minimum_stock: Mapped[int | None] = mapped_column(
        nullable=True,
        default=0,
    )

    tax_rate_percent: Mapped[Decimal] = mapped_column(
        Percentage,
        nullable=False,
        default=Decimal("7.00"),
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )

    def __repr__(self) -> str:
        return f"<Article {self.reference}>"
