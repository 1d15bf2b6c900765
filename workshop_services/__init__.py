"""
workshop_services -- Package init and public API.

Responsibility:
    Session-bound orchestration that composes the pure engines
    (workshop_engines) with the ORM models and selectors
    (workshop_kernel).  This is the only layer that holds database
    sessions and knows the current date (through an injected Clock).

Dependency direction:
    workshop_services -> workshop_engines  (allowed)
    workshop_services -> workshop_kernel   (allowed)
    workshop_services -> workshop_config   (allowed, schema types only)
    workshop_engines  -> workshop_services (FORBIDDEN)
    workshop_kernel   -> workshop_services (FORBIDDEN)
"""

from workshop_services.document_totals_service import DocumentTotalsService
from workshop_services.reporting_service import (
    BillingSummary,
    InventorySummary,
    OpenOrdersSummary,
    ReportingService,
)
from workshop_services.vehicle_label_service import VehicleLabelService

__all__ = [
    "DocumentTotalsService",
    "ReportingService",
    "BillingSummary",
    "OpenOrdersSummary",
    "InventorySummary",
    "VehicleLabelService",
]
