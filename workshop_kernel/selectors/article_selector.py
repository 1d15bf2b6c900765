"""Read-only article (stock) queries."""

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import select

from workshop_kernel.models.article import Article
from workshop_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class ArticleStock:
    reference: str
    description: str
    stock: int | None
    minimum_stock: int | None
    sale_price: Decimal


class ArticleSelector(BaseSelector):
    """Read-only access to articles."""

    def stock_items(self, active_only: bool = True) -> list[ArticleStock]:
        """Stock position of every article, ordered by reference."""
        query = select(Article).order_by(Article.reference)
        if active_only:
            query = query.where(Article.is_active.is_(True))
        return [
            ArticleStock(
                reference=a.reference,
                description=a.description,
                stock=a.stock,
                minimum_stock=a.minimum_stock,
                sale_price=a.sale_price,
            )
            for a in self.session.scalars(query).all()
        ]
