"""
Module: workshop_engines
Responsibility:
    Package entrypoint re-exporting the pure calculation engines: the tax
    ledger, the emissions classifier and the reporting functions.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import workshop_kernel.domain, workshop_kernel.exceptions and
    workshop_kernel.logging_config.  MUST NOT import workshop_services.

Invariants enforced:
    - Purity: engines never call ``datetime.now()`` or ``date.today()``.
      Callers pass "today" in explicitly.
    - Decimal-only arithmetic: floats are refused at the value boundary.
    - Determinism: identical inputs always produce identical outputs.

Every engine entrypoint is wrapped with ``@traced_engine`` and emits a
WORKSHOP_ENGINE_TRACE record with an input fingerprint.
"""

from workshop_engines.emissions import (
    LABEL_INFO,
    EmissionsClassifier,
    EmissionsLabel,
    FuelType,
    LabelInfo,
    VehicleFuelProfile,
    classify,
    label_info,
    normalize_fuel_type,
)
from workshop_engines.reporting import (
    BilledDocument,
    CustomerTotal,
    DateRange,
    MonthlyTotal,
    StockItem,
    count_open_orders,
    filter_in_range,
    inventory_value,
    items_below_minimum,
    monthly_series,
    period_change_percent,
    top_customers,
    total_billed,
)
from workshop_engines.tax_ledger import (
    LedgerTotals,
    LineKind,
    PricedLine,
    RateBreakdown,
    TaxLedger,
    compute_totals,
)
from workshop_engines.tracer import traced_engine

__all__ = [
    # Tax ledger
    "PricedLine",
    "LineKind",
    "LedgerTotals",
    "RateBreakdown",
    "TaxLedger",
    "compute_totals",
    # Emissions
    "FuelType",
    "EmissionsLabel",
    "LabelInfo",
    "LABEL_INFO",
    "VehicleFuelProfile",
    "EmissionsClassifier",
    "classify",
    "label_info",
    "normalize_fuel_type",
    # Reporting
    "DateRange",
    "BilledDocument",
    "MonthlyTotal",
    "CustomerTotal",
    "StockItem",
    "filter_in_range",
    "total_billed",
    "period_change_percent",
    "monthly_series",
    "top_customers",
    "items_below_minimum",
    "inventory_value",
    "count_open_orders",
    # Tracing
    "traced_engine",
]
