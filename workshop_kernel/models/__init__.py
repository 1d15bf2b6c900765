"""ORM models for the workshop kernel."""

from workshop_kernel.models.article import Article
from workshop_kernel.models.budget import Budget, BudgetLine
from workshop_kernel.models.customer import Customer, CustomerType, Vehicle
from workshop_kernel.models.invoice import Invoice, InvoiceKind, InvoiceLine
from workshop_kernel.models.repair_order import (
    PartConsumption,
    RepairOrder,
    RepairOrderStatus,
    WorkEntry,
)

__all__ = [
    "Customer",
    "CustomerType",
    "Vehicle",
    "Article",
    "RepairOrder",
    "RepairOrderStatus",
    "WorkEntry",
    "PartConsumption",
    "Budget",
    "BudgetLine",
    "Invoice",
    "InvoiceKind",
    "InvoiceLine",
]
