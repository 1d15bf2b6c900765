"""Read-only selectors returning frozen DTOs."""

from workshop_kernel.selectors.article_selector import ArticleSelector, ArticleStock
from workshop_kernel.selectors.base import BaseSelector
from workshop_kernel.selectors.invoice_selector import InvoiceSelector, InvoiceSummary
from workshop_kernel.selectors.repair_order_selector import RepairOrderSelector

__all__ = [
    "BaseSelector",
    "InvoiceSelector",
    "InvoiceSummary",
    "RepairOrderSelector",
    "ArticleSelector",
    "ArticleStock",
]
