#!/usr/bin/env python3
"""
Workshop administration commands against the configured database.

Reads the active configuration (packaged default, $WORKSHOP_CONFIG or
--config), configures structured logging at the configured level and
connects to ``database.url`` (overridable with $WORKSHOP_DATABASE_URL).

Usage:
    python3 scripts/workshop_admin.py init-db
    python3 scripts/workshop_admin.py classify [--plate 1234ABC]
    python3 scripts/workshop_admin.py refresh-totals
    python3 scripts/workshop_admin.py report
"""

import argparse
import sys
from decimal import Decimal
from pathlib import Path
from zoneinfo import ZoneInfo

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from sqlalchemy import select  # noqa: E402

from workshop_config import get_active_config  # noqa: E402
from workshop_config.schema import WorkshopConfig  # noqa: E402
from workshop_kernel.db.engine import (  # noqa: E402
    create_tables,
    init_engine_from_url,
    session_scope,
)
from workshop_kernel.domain.clock import SystemClock  # noqa: E402
from workshop_kernel.exceptions import WorkshopError  # noqa: E402
from workshop_kernel.logging_config import configure_logging  # noqa: E402
from workshop_kernel.models import Budget, Invoice, RepairOrder, Vehicle  # noqa: E402
from workshop_services import (  # noqa: E402
    DocumentTotalsService,
    ReportingService,
    VehicleLabelService,
)

W = 60


def cmd_init_db(args: argparse.Namespace, config: WorkshopConfig) -> int:
    create_tables()
    print(f"  Tables created in {config.database.url}")
    return 0


def cmd_classify(args: argparse.Namespace, config: WorkshopConfig) -> int:
    with session_scope() as session:
        query = select(Vehicle.id, Vehicle.plate).order_by(Vehicle.plate)
        if args.plate:
            query = query.where(Vehicle.plate == args.plate)
        rows = session.execute(query).all()
        if args.plate and not rows:
            print(f"  No vehicle with plate {args.plate}", file=sys.stderr)
            return 1

        service = VehicleLabelService(session)
        for vehicle_id, plate in rows:
            label = service.classify_vehicle(vehicle_id)
            print(f"  {plate:<12} {label.display_name}")
    return 0


def cmd_refresh_totals(args: argparse.Namespace, config: WorkshopConfig) -> int:
    with session_scope() as session:
        service = DocumentTotalsService(session, config)
        counts = {}
        for model, refresh in (
            (RepairOrder, service.refresh_repair_order),
            (Budget, service.refresh_budget),
            (Invoice, service.refresh_invoice),
        ):
            ids = session.scalars(select(model.id)).all()
            for document_id in ids:
                refresh(document_id)
            counts[model.__tablename__] = len(ids)

    for table, count in counts.items():
        print(f"  {table:<16} {count:>6} refreshed")
    return 0


def cmd_report(args: argparse.Namespace, config: WorkshopConfig) -> int:
    with session_scope() as session:
        service = ReportingService(session, SystemClock(ZoneInfo(config.timezone)), config)
        billing = service.billing_summary()
        today = service.revenue_today()
        orders = service.open_orders()
        inventory = service.inventory_summary()

    print("=" * W)
    print("  WORKSHOP SUMMARY".center(W))
    print("=" * W)
    print(f"  Billed this month   {billing.current_total.display():>16}")
    print(f"  Billed last month   {billing.previous_total.display():>16}")
    print(f"  Change              {billing.change_percent.quantize(Decimal('0.1')):>15}%")
    print(f"  Billed today        {today.display():>16}")
    print()
    print("  Monthly billing")
    for month in billing.monthly:
        print(f"    {month.month_start:%Y-%m}  {month.total.display():>16}")
    print()
    print("  Top customers")
    for entry in billing.top_customers:
        print(f"    {str(entry.customer_id)[:8]}  {entry.total.display():>16}")
    print()
    print(f"  Open repair orders  {orders.open_count:>14}")
    print(f"  Stock value         {inventory.value.display():>16}")
    for item in inventory.below_minimum:
        print(f"    LOW {item.reference:<20} stock={item.stock} min={item.minimum_stock}")
    print()
    return 0


COMMANDS = {
    "init-db": cmd_init_db,
    "classify": cmd_classify,
    "refresh-totals": cmd_refresh_totals,
    "report": cmd_report,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Workshop administration commands")
    parser.add_argument("--config", help="YAML configuration file (default: packaged set)")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create all tables")
    classify = sub.add_parser("classify", help="Assign DGT environmental labels")
    classify.add_argument("--plate", help="Only the vehicle with this plate")
    sub.add_parser("refresh-totals", help="Recompute stored document totals")
    sub.add_parser("report", help="Print billing, order and stock figures")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = get_active_config(args.config)
    except (FileNotFoundError, WorkshopError) as exc:
        print(f"  ERROR: {exc}", file=sys.stderr)
        return 1

    configure_logging(level=config.logging.level)
    init_engine_from_url(config.database.url, echo=config.database.echo)

    try:
        return COMMANDS[args.command](args, config)
    except WorkshopError as exc:
        print(f"  ERROR [{exc.code}]: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
