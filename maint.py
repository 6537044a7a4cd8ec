#!/usr/bin/env python3
"""
Unified CLI for vehicle maintenance tracking.

Commands:
  register   - Register a new vehicle
  edit       - Edit vehicle profile fields
  status     - Show maintenance alerts (overdue, due soon, ok)
  history    - View service records
  log        - Add a new service record
  update-km  - Update the odometer (reductions need --reason)
  intervals  - Show or change maintenance intervals
  audit      - List odometer reductions
  sync       - Deliver queued service records
"""

import argparse
import sys
from datetime import date
from pathlib import Path
from tabulate import tabulate
from typing import List, Optional

from config import configure_logging, load_settings
from models import (
    Alert,
    Category,
    MaintenanceError,
    ServiceRecord,
    Status,
    SyncQueue,
    YamlStore,
    alert_summary,
    edit_vehicle,
    log_service,
    new_service_record,
    reconcile,
    record_alert,
    register_vehicle,
    sort_alerts,
    update_intervals,
    update_odometer,
    vehicle_alerts,
)
from models.maintenance import owned_vehicle
from models.odometer import build_odometer_change
from models.validation import parse_odometer

# =============================================================================
# Formatting helpers
# =============================================================================


def format_km(km: Optional[float]) -> str:
    """Format a distance for display."""
    return f"{km:,.0f}" if km is not None else "-"


def format_cost(cost: Optional[float]) -> str:
    """Format cost for display."""
    return f"R$ {cost:,.2f}" if cost is not None else "-"


def format_remaining(alert: Alert) -> str:
    """Format remaining distance; negative when overdue."""
    if not alert.has_record:
        return "-"
    if alert.remaining_km < 0:
        return f"-{abs(alert.remaining_km):,.0f}"
    return f"{alert.remaining_km:,.0f}"


def truncate(text: Optional[str], max_len: int = 30) -> str:
    """Truncate text with ellipsis if too long."""
    if text is None:
        return "-"
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def parse_assignment(text: str) -> tuple:
    """Split 'category=km' into its two halves."""
    if "=" not in text:
        raise argparse.ArgumentTypeError(f"expected CATEGORY=KM, got '{text}'")
    key, value = text.split("=", 1)
    return key.strip(), value.strip()


# =============================================================================
# Status command
# =============================================================================


def make_status_table(alerts: List[Alert]) -> List[List[str]]:
    """Convert alerts to table rows."""
    rows = []
    for alert in alerts:
        last_done = "-"
        if alert.has_record:
            last_done = format_km(alert.last_service_km)
            if alert.last_service_date:
                last_done = f"{alert.last_service_date} @ {last_done}"
        rows.append(
            [
                alert.category.display_name,
                last_done,
                format_km(alert.interval_km),
                format_km(alert.due_km) if alert.has_record else "-",
                format_remaining(alert),
                f"{alert.usage_percent:.0f}%" if alert.has_record else "-",
            ]
        )
    return rows


def cmd_status(args, store, settings):
    """Show maintenance alerts for the vehicle."""
    vehicle = owned_vehicle(store, args.vehicle_id, args.user)
    alerts = sort_alerts(
        vehicle_alerts(store, args.vehicle_id, args.user, settings.due_soon_ratio)
    )
    if args.status:
        wanted = Status.from_label(args.status)
        alerts = [a for a in alerts if a.status == wanted]

    counts = alert_summary(alerts)
    print(f"Vehicle: {vehicle.name}")
    print(f"Odometer: {vehicle.odometer:,} km")
    print(f"Due-soon threshold: {settings.due_soon_ratio:.0%} of interval")
    print()

    headers = ["Maintenance", "Last Done", "Interval", "Due (km)", "Remaining", "Used"]
    for status, title in (
        (Status.OVERDUE, "OVERDUE"),
        (Status.DUE_SOON, "DUE SOON"),
        (Status.OK, "OK"),
    ):
        group = [a for a in alerts if a.status == status]
        if group:
            print(f"{title}:")
            print(tabulate(make_status_table(group), headers=headers, tablefmt="simple"))
            print()

    if counts[Status.NO_RECORD.label]:
        print("NO RECORD:")
        for alert in alerts:
            if alert.status == Status.NO_RECORD:
                print(f"  {alert.category.display_name}")
        print()

    return 0


# =============================================================================
# History command
# =============================================================================


def make_history_table(records: List[ServiceRecord]) -> List[List[str]]:
    """Convert service records to table rows."""
    rows = []
    for record in records:
        rows.append(
            [
                record.service_date,
                format_km(record.odometer),
                record.category.display_name,
                format_km(record.interval_override),
                format_cost(record.cost),
                truncate(record.notes),
            ]
        )
    return rows


def sort_records(records: List[ServiceRecord], sort_by: str, reverse: bool) -> List[ServiceRecord]:
    if sort_by == "date":
        return sorted(records, key=lambda r: (r.service_date, r.odometer), reverse=reverse)
    if sort_by == "category":
        return sorted(records, key=lambda r: (r.category.key, r.odometer), reverse=reverse)
    return sorted(records, key=lambda r: r.odometer, reverse=reverse)


def cmd_history(args, store, settings):
    """View service records."""
    vehicle = owned_vehicle(store, args.vehicle_id, args.user)
    all_records = store.service_records(args.vehicle_id)
    records = sort_records(all_records, args.sort, reverse=not args.asc)

    if args.category:
        category = Category.from_key(args.category)
        records = [r for r in records if r.category == category]
    if args.since:
        records = [r for r in records if r.service_date >= args.since]

    total_cost = sum(r.cost for r in records if r.cost is not None)

    print(f"Vehicle: {vehicle.name}")
    print(f"Odometer: {vehicle.odometer:,} km")
    print(f"Total records: {len(all_records)}")
    if args.category or args.since:
        print(f"Showing: {len(records)} (filtered)")
    if total_cost > 0:
        print(f"Total cost: {format_cost(total_cost)}")
    print()

    if not records:
        print("No service records found.")
        return 0

    headers = ["Date", "Odometer", "Maintenance", "Interval", "Cost", "Notes"]
    print(tabulate(make_history_table(records), headers=headers, tablefmt="simple"))
    return 0


# =============================================================================
# Log command
# =============================================================================


def cmd_log(args, store, settings):
    """Add a new service record."""
    record = new_service_record(
        args.vehicle_id,
        args.category,
        args.odometer,
        args.date or date.today().isoformat(),
        interval=args.interval,
        cost=args.cost,
        notes=args.notes,
    )

    print(f"Adding service record to {args.vehicle_id}:")
    print(f"  Maintenance: {record.category.display_name}")
    print(f"  Date:        {record.service_date}")
    print(f"  Odometer:    {record.odometer:,} km")
    if record.interval_override:
        print(f"  Interval:    {record.interval_override:,} km")
    if record.cost is not None:
        print(f"  Cost:        {format_cost(record.cost)}")
    if record.notes:
        print(f"  Notes:       {record.notes}")
    print()

    if args.dry_run:
        owned_vehicle(store, args.vehicle_id, args.user)
        print("(dry run - no changes made)")
        return 0

    queue = SyncQueue(settings.queue_path) if settings.offline_queue else None
    saved = log_service(store, args.user, record, queue)
    if not saved.synced:
        print("Store unavailable: record queued for sync.")
        return 0

    alert = record_alert(store, saved, settings.due_soon_ratio)
    print("Record saved.")
    print(f"Next due at {alert.due_km:,} km ({alert.status.label})")
    return 0


# =============================================================================
# Update odometer command
# =============================================================================


def cmd_update_km(args, store, settings):
    """Update the vehicle odometer."""
    vehicle = owned_vehicle(store, args.vehicle_id, args.user)

    print(f"Vehicle: {vehicle.name}")
    print(f"Current odometer: {vehicle.odometer:,} km")
    print(f"New odometer:     {args.odometer:,.0f} km")
    if args.reason:
        print(f"Reason:           {args.reason}")
    print()

    if args.dry_run:
        value = parse_odometer(args.odometer, "new odometer")
        build_odometer_change(vehicle, args.user, value, args.reason)
        print("(dry run - no changes made)")
        return 0

    result = update_odometer(store, args.vehicle_id, args.user, args.odometer, args.reason)
    if result.is_reduction:
        print("Odometer reduced - reason recorded.")
    else:
        print("Odometer updated.")
    return 0


# =============================================================================
# Register / edit commands
# =============================================================================


def cmd_register(args, store, settings):
    """Register a new vehicle."""
    vehicle = register_vehicle(
        store,
        args.user,
        args.vehicle_id,
        args.make,
        args.model,
        args.year,
        odometer=args.odometer,
        vehicle_type=args.type,
        oil_type=args.oil_type,
    )
    print(f"Registered {vehicle.name} as '{vehicle.id}' ({vehicle.odometer:,} km).")
    return 0


def cmd_edit(args, store, settings):
    """Edit vehicle profile fields."""
    vehicle = edit_vehicle(
        store,
        args.user,
        args.vehicle_id,
        vehicle_type=args.type,
        make=args.make,
        model=args.model,
        year=args.year,
        oil_type=args.oil_type,
    )
    print(f"Updated {vehicle.name}.")
    return 0


# =============================================================================
# Intervals / audit / sync commands
# =============================================================================


def cmd_intervals(args, store, settings):
    """Show or change the user's maintenance intervals."""
    vehicle = owned_vehicle(store, args.vehicle_id, args.user)
    if args.set:
        intervals = update_intervals(store, vehicle.owner_id, dict(args.set))
        print("Intervals saved.")
        print()
    else:
        intervals = store.fetch_intervals(vehicle.owner_id)

    rows = [
        [category.display_name, category.key, format_km(km), "" if intervals.is_default(category) else "*"]
        for category, km in intervals
    ]
    print(tabulate(rows, headers=["Maintenance", "Key", "Interval (km)", "Custom"], tablefmt="simple"))
    return 0


def cmd_audit(args, store, settings):
    """List odometer reductions."""
    vehicle = owned_vehicle(store, args.vehicle_id, args.user)
    changes = store.odometer_changes(args.vehicle_id)

    print(f"Vehicle: {vehicle.name}")
    print(f"Odometer reductions: {len(changes)}")
    print()
    if not changes:
        return 0

    rows = [
        [c.created_at, format_km(c.old_value), format_km(c.new_value), c.user_id, truncate(c.reason, 40)]
        for c in changes
    ]
    print(tabulate(rows, headers=["When", "Old (km)", "New (km)", "By", "Reason"], tablefmt="simple"))
    return 0


def cmd_sync(args, store, settings):
    """Deliver queued service records."""
    queue = SyncQueue(settings.queue_path)
    result = reconcile(store, queue)
    print(f"Delivered: {result.delivered}")
    print(f"Failed:    {result.failed}")
    print(f"Remaining: {result.remaining}")
    return 0 if result.failed == 0 else 1


# =============================================================================
# Main
# =============================================================================

COMMANDS = {
    "register": cmd_register,
    "edit": cmd_edit,
    "status": cmd_status,
    "history": cmd_history,
    "log": cmd_log,
    "update-km": cmd_update_km,
    "intervals": cmd_intervals,
    "audit": cmd_audit,
    "sync": cmd_sync,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Mecânico Digital - vehicle maintenance tracker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --user ana civic register --make Honda --model Civic --year 2019 --odometer 42000
  %(prog)s --user ana civic status
  %(prog)s --user ana civic status --status overdue
  %(prog)s --user ana civic log oil --odometer 42000 --cost 180
  %(prog)s --user ana civic update-km 41000 --reason "panel replaced"
  %(prog)s --user ana civic intervals --set oil=8000 --set tire=50000
  %(prog)s --user ana civic history --category oil
""",
    )
    parser.add_argument("--config", type=Path, help="Path to a YAML settings file")
    parser.add_argument("--data-dir", type=Path, help="Data directory (overrides settings)")
    parser.add_argument("--user", type=str, help="Acting user id (default: MECANICO_USER)")
    parser.add_argument("vehicle_id", type=str, help="Vehicle id (e.g., 'civic')")

    subparsers = parser.add_subparsers(dest="command", required=True)

    register_parser = subparsers.add_parser("register", help="Register a new vehicle")
    register_parser.add_argument("--make", required=True)
    register_parser.add_argument("--model", required=True)
    register_parser.add_argument("--year", type=int, required=True)
    register_parser.add_argument("--odometer", type=int, default=0)
    register_parser.add_argument("--type", choices=["car", "motorcycle"], default="car")
    register_parser.add_argument("--oil-type", type=str, help="Oil type label (e.g., '5W-30')")

    edit_parser = subparsers.add_parser("edit", help="Edit vehicle profile fields")
    edit_parser.add_argument("--make")
    edit_parser.add_argument("--model")
    edit_parser.add_argument("--year", type=int)
    edit_parser.add_argument("--type", choices=["car", "motorcycle"])
    edit_parser.add_argument("--oil-type", type=str)

    status_parser = subparsers.add_parser("status", help="Show maintenance alerts")
    status_parser.add_argument(
        "--status",
        choices=[s.label for s in Status],
        help="Only show alerts with this status",
    )

    history_parser = subparsers.add_parser("history", help="View service records")
    history_parser.add_argument("--category", type=str, help="Filter to a category key (e.g., 'oil')")
    history_parser.add_argument("--since", type=str, help="Show only records since date (YYYY-MM-DD)")
    history_parser.add_argument(
        "--sort",
        choices=["odometer", "date", "category"],
        default="odometer",
        help="Sort order (default: odometer)",
    )
    history_parser.add_argument("--asc", action="store_true", help="Sort ascending instead of descending")

    log_parser = subparsers.add_parser("log", help="Add a new service record")
    log_parser.add_argument("category", type=str, help="Category key (e.g., 'oil', 'brake_pad')")
    log_parser.add_argument("--odometer", type=int, required=True, help="Odometer at time of service")
    log_parser.add_argument("--date", type=str, help="Service date in YYYY-MM-DD format (default: today)")
    log_parser.add_argument("--interval", type=int, help="Interval override for this service (km)")
    log_parser.add_argument("--cost", type=float, help="Cost of service")
    log_parser.add_argument("--notes", type=str, help="Notes about the service")
    log_parser.add_argument("--dry-run", action="store_true", help="Show what would be added without saving")

    update_parser = subparsers.add_parser("update-km", help="Update the odometer")
    update_parser.add_argument("odometer", type=float, help="New odometer reading")
    update_parser.add_argument("--reason", type=str, help="Required when lowering the odometer")
    update_parser.add_argument("--dry-run", action="store_true", help="Show what would be updated without saving")

    intervals_parser = subparsers.add_parser("intervals", help="Show or change maintenance intervals")
    intervals_parser.add_argument(
        "--set",
        type=parse_assignment,
        action="append",
        metavar="CATEGORY=KM",
        help="Set an interval (repeatable)",
    )

    subparsers.add_parser("audit", help="List odometer reductions")
    subparsers.add_parser("sync", help="Deliver queued service records")

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args.config)
        configure_logging(settings.log_level)
        if args.data_dir:
            settings = settings.model_copy(update={"data_dir": args.data_dir})
        args.user = args.user or settings.default_user
        if not args.user:
            print("Error: no user given (use --user or MECANICO_USER)")
            return 1

        store = YamlStore(settings.data_dir)
        return COMMANDS[args.command](args, store, settings)
    except MaintenanceError as e:
        print(f"Error: {e.message}")
        return 1


if __name__ == "__main__":
    sys.exit(main() or 0)
