#!/usr/bin/env python3
"""
Unified CLI for fleet maintenance tracking.

Commands:
  vehicles        - List vehicles with current mileage and status counts
  status          - Show which services are overdue, due soon, or ok
  notifications   - Show prioritized dashboard alerts
  history         - View maintenance history for a vehicle
  log-maintenance - Add a maintenance record
  log-odometer    - Add an odometer reading
  catalog         - List tracked service types and intervals
"""

import argparse
import sys
from datetime import date, datetime
from pathlib import Path
from tabulate import tabulate
from typing import List, Optional

from fleet import (
    ROLE_ADMIN,
    ROLE_DRIVER,
    SERVICE_INTERVALS_MILES,
    Fleet,
    MaintenanceRecord,
    NotificationItem,
    OdometerLog,
    ServiceStatus,
    Status,
    add_record,
    count_high_priority,
    load_fleet,
    normalize_service_type,
)
from fleet.service_type import keywords_for

# =============================================================================
# Formatting helpers
# =============================================================================


def format_miles(miles: Optional[float]) -> str:
    """Format mileage for display."""
    return f"{miles:,.0f}" if miles is not None else "-"


def format_cents(cents: Optional[int]) -> str:
    """Format an amount in cents as dollars for display."""
    return f"${cents / 100:,.2f}" if cents is not None else "-"


def truncate(text: Optional[str], max_len: int = 30) -> str:
    """Truncate text with ellipsis if too long."""
    if text is None:
        return "-"
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def dollars_to_cents(dollars: Optional[float]) -> Optional[int]:
    """Convert a dollar amount from the command line to cents."""
    if dollars is None:
        return None
    return int(round(dollars * 100))


# =============================================================================
# Vehicles command
# =============================================================================


def make_vehicles_table(fleet: Fleet) -> List[List[str]]:
    """Convert the fleet's vehicles to table rows."""
    rows = []
    for vehicle in fleet.vehicles:
        current = fleet.current_odometer(vehicle.id)
        if current is not None:
            mileage = format_miles(current)
        elif vehicle.initial_odometer is not None:
            mileage = f"{format_miles(fleet.display_odometer(vehicle.id))} (initial)"
        else:
            mileage = "-"
        counts = fleet.status_counts(vehicle.id)
        rows.append(
            [
                vehicle.id,
                vehicle.name,
                vehicle.plate or "-",
                mileage,
                counts["overdue"],
                counts["warning"],
                counts["ok"],
            ]
        )
    return rows


def cmd_vehicles(args):
    """List vehicles with current mileage and status counts."""
    fleet = load_fleet(args.data_file)

    print(f"Vehicles: {len(fleet.vehicles)}")
    print()

    if not fleet.vehicles:
        print("No vehicles found.")
        return 0

    headers = ["ID", "Vehicle", "Plate", "Mileage", "Overdue", "Warning", "OK"]
    print(tabulate(make_vehicles_table(fleet), headers=headers, tablefmt="simple"))
    return 0


# =============================================================================
# Status command
# =============================================================================


def make_status_table(services: List[ServiceStatus]) -> List[List[str]]:
    """Convert service status list to table rows."""
    rows = []
    for svc in services:
        rows.append(
            [
                svc.service.value,
                format_miles(svc.last_service_miles),
                format_miles(svc.interval),
                format_miles(svc.miles_since),
                format_miles(svc.miles_until_due),
            ]
        )
    return rows


def cmd_status(args):
    """Show which services are overdue, due soon, or ok."""
    fleet = load_fleet(args.data_file)
    vehicle = fleet.get_vehicle(args.vehicle_id)
    if vehicle is None:
        print(f"Error: Unknown vehicle '{args.vehicle_id}'")
        return 1

    threshold = args.threshold
    if threshold is None:
        threshold = fleet.settings.warning_threshold_miles

    current = fleet.current_odometer(vehicle.id)
    reading = fleet.latest_reading(vehicle.id)

    # Header
    print(f"Vehicle: {vehicle.name}")
    if reading is not None:
        print(
            f"Current mileage: {current:,.0f} "
            f"(as of {reading.date.isoformat()}, {reading.source.value})"
        )
    else:
        print("Current mileage: unknown (no readings recorded)")
    print(f"Warning threshold: {threshold:,.0f} mi")
    print()

    statuses = fleet.get_service_status(vehicle.id, warning_threshold_miles=threshold)

    headers = ["Service", "Last Done (mi)", "Interval", "Since", "Until Due"]
    for status, title in (
        (Status.OVERDUE, "OVERDUE:"),
        (Status.WARNING, "DUE SOON:"),
        (Status.OK, "OK:"),
    ):
        group = [s for s in statuses if s.status == status]
        if group:
            print(title)
            print(tabulate(make_status_table(group), headers=headers, tablefmt="simple"))
            print()

    return 0


# =============================================================================
# Notifications command
# =============================================================================


def make_notifications_table(items: List[NotificationItem]) -> List[List[str]]:
    """Convert notifications to table rows."""
    return [
        [
            item.priority.label.upper(),
            item.vehicle_label,
            item.title,
            item.description,
            item.id,
        ]
        for item in items
    ]


def cmd_notifications(args):
    """Show prioritized dashboard alerts."""
    fleet = load_fleet(args.data_file)

    if args.role == ROLE_DRIVER and not args.driver:
        print("Error: --driver is required with --role driver")
        return 1

    now = datetime.now()
    if args.now:
        try:
            now = date.fromisoformat(args.now)
        except ValueError:
            print(f"Error: Invalid date '{args.now}' (expected YYYY-MM-DD)")
            return 1

    items = fleet.get_notifications(
        args.role,
        now,
        driver_id=args.driver,
        dismissed=set(args.dismiss or []),
        warning_threshold_miles=args.threshold,
    )

    print(f"Notifications: {len(items)} ({count_high_priority(items)} high priority)")
    print()

    if not items:
        print("Nothing needs attention.")
        return 0

    headers = ["Priority", "Vehicle", "Alert", "Details", "ID"]
    print(tabulate(make_notifications_table(items), headers=headers, tablefmt="simple"))
    return 0


# =============================================================================
# History command
# =============================================================================


def make_history_table(records: List[MaintenanceRecord]) -> List[List[str]]:
    """Convert maintenance records to table rows."""
    rows = []
    for rec in records:
        service = normalize_service_type(rec.type)
        rows.append(
            [
                rec.date,
                format_miles(rec.odometer),
                rec.type or "-",
                service.value if service else "-",
                rec.vendor or "-",
                format_cents(rec.cost_cents),
                truncate(rec.notes),
            ]
        )
    return rows


def cmd_history(args):
    """View maintenance history for a vehicle."""
    fleet = load_fleet(args.data_file)
    vehicle = fleet.get_vehicle(args.vehicle_id)
    if vehicle is None:
        print(f"Error: Unknown vehicle '{args.vehicle_id}'")
        return 1

    records = fleet.get_history_sorted(
        vehicle.id, sort_by=args.sort, reverse=not args.asc
    )
    total = len(records)

    # Apply filters
    if args.type:
        records = [r for r in records if args.type.lower() in (r.type or "").lower()]

    if args.since:
        records = [r for r in records if r.date >= args.since]

    total_cost = sum(r.cost_cents for r in records if r.cost_cents is not None)

    # Header
    print(f"Vehicle: {vehicle.name}")
    print(f"Current mileage: {format_miles(fleet.display_odometer(vehicle.id))}")
    print(f"Total records: {total}")
    if args.type or args.since:
        print(f"Showing: {len(records)} (filtered)")
    if total_cost > 0:
        print(f"Total cost: {format_cents(total_cost)}")
    print()

    if not records:
        print("No maintenance records found.")
        return 0

    headers = ["Date", "Mileage", "Type", "Tracked As", "Vendor", "Cost", "Notes"]
    print(tabulate(make_history_table(records), headers=headers, tablefmt="simple"))
    return 0


# =============================================================================
# Log commands
# =============================================================================


def cmd_log_maintenance(args):
    """Add a maintenance record."""
    fleet = load_fleet(args.data_file)
    vehicle = fleet.get_vehicle(args.vehicle_id)
    if vehicle is None:
        print(f"Error: Unknown vehicle '{args.vehicle_id}'")
        return 1

    record = MaintenanceRecord(
        id=None,
        vehicle_id=vehicle.id,
        date=args.date or date.today().isoformat(),
        odometer=args.mileage,
        type=args.type,
        cost_cents=dollars_to_cents(args.cost),
        vendor=args.vendor,
        notes=args.notes,
    )
    service = normalize_service_type(record.type)

    # Show what will be added
    print(f"Adding maintenance record to {args.data_file}:")
    print(f"  Vehicle: {vehicle.name}")
    print(f"  Type:    {record.type}")
    if service:
        print(f"  Tracked: {service.value}")
    else:
        print("  Tracked: - (not a tracked service type)")
    print(f"  Date:    {record.date}")
    if record.odometer is not None:
        print(f"  Mileage: {record.odometer:,.0f}")
    if record.vendor:
        print(f"  Vendor:  {record.vendor}")
    if record.cost_cents is not None:
        print(f"  Cost:    {format_cents(record.cost_cents)}")
    if record.notes:
        print(f"  Notes:   {record.notes}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    add_record(args.data_file, "maintenance", record)
    print("Record saved.")
    return 0


def cmd_log_odometer(args):
    """Add an odometer reading."""
    fleet = load_fleet(args.data_file)
    vehicle = fleet.get_vehicle(args.vehicle_id)
    if vehicle is None:
        print(f"Error: Unknown vehicle '{args.vehicle_id}'")
        return 1

    old_miles = fleet.current_odometer(vehicle.id)
    log = OdometerLog(
        id=None,
        vehicle_id=vehicle.id,
        driver_id=args.driver,
        date=args.date or date.today().isoformat(),
        odometer=args.mileage,
    )

    print(f"Vehicle: {vehicle.name}")
    print(f"Current mileage: {format_miles(old_miles)}")
    print(f"New reading:     {format_miles(log.odometer)} ({log.date})")
    if old_miles is not None and log.odometer < old_miles:
        print("Warning: new reading is lower than the current mileage")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    add_record(args.data_file, "odometerLogs", log)
    print("Reading saved.")
    return 0


# =============================================================================
# Catalog command
# =============================================================================


def cmd_catalog(args):
    """List tracked service types and intervals."""
    fleet = load_fleet(args.data_file)

    rows = []
    for service, interval in fleet.settings.service_intervals.items():
        default = SERVICE_INTERVALS_MILES[service]
        interval_str = f"{interval:,.0f} mi"
        if interval != default:
            interval_str += f" (default {default:,.0f})"
        rows.append([service.value, interval_str, ", ".join(keywords_for(service))])

    print(f"Warning threshold: {fleet.settings.warning_threshold_miles:,.0f} mi")
    print(f"Weekly check due after: {fleet.settings.weekly_check_max_age_days} days")
    print()
    headers = ["Service", "Interval", "Matches"]
    print(tabulate(rows, headers=headers, tablefmt="simple"))
    return 0


# =============================================================================
# Main
# =============================================================================


def main():
    parser = argparse.ArgumentParser(
        description="Fleet maintenance tracker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s data/fleet.yaml vehicles
  %(prog)s data/fleet.yaml status truck-12
  %(prog)s data/fleet.yaml status truck-12 --threshold 500
  %(prog)s data/fleet.yaml notifications
  %(prog)s data/fleet.yaml notifications --role driver --driver d-ana
  %(prog)s data/fleet.yaml history truck-12 --type oil
  %(prog)s data/fleet.yaml log-maintenance truck-12 --type "Oil Change" \\
      --mileage 58000 --vendor "Quick Lube" --cost 49.99
  %(prog)s data/fleet.yaml log-odometer truck-12 58250
  %(prog)s data/fleet.yaml catalog
""",
    )
    parser.add_argument(
        "data_file",
        type=Path,
        help="Path to fleet YAML file",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # Vehicles subcommand
    subparsers.add_parser(
        "vehicles", help="List vehicles with current mileage and status counts"
    )

    # Status subcommand
    status_parser = subparsers.add_parser(
        "status", help="Show which services are overdue, due soon, or ok"
    )
    status_parser.add_argument("vehicle_id", type=str, help="Vehicle ID")
    status_parser.add_argument(
        "--threshold",
        type=float,
        help="Warning threshold in miles (default: from settings)",
    )

    # Notifications subcommand
    notifications_parser = subparsers.add_parser(
        "notifications", help="Show prioritized dashboard alerts"
    )
    notifications_parser.add_argument(
        "--role",
        choices=[ROLE_ADMIN, ROLE_DRIVER],
        default=ROLE_ADMIN,
        help="Whose view to show (default: admin)",
    )
    notifications_parser.add_argument(
        "--driver",
        type=str,
        help="Driver ID (required for --role driver)",
    )
    notifications_parser.add_argument(
        "--dismiss",
        type=str,
        nargs="*",
        help="Notification IDs to leave out",
    )
    notifications_parser.add_argument(
        "--now",
        type=str,
        help="Evaluate as of date YYYY-MM-DD (default: now)",
    )
    notifications_parser.add_argument(
        "--threshold",
        type=float,
        help="Warning threshold in miles (default: from settings)",
    )

    # History subcommand
    history_parser = subparsers.add_parser(
        "history", help="View maintenance history for a vehicle"
    )
    history_parser.add_argument("vehicle_id", type=str, help="Vehicle ID")
    history_parser.add_argument(
        "--type",
        type=str,
        help="Filter to types containing text (case-insensitive, e.g., 'oil')",
    )
    history_parser.add_argument(
        "--since",
        type=str,
        help="Show only records since date (YYYY-MM-DD)",
    )
    history_parser.add_argument(
        "--sort",
        choices=["date", "miles", "type"],
        default="date",
        help="Sort order (default: date)",
    )
    history_parser.add_argument(
        "--asc",
        action="store_true",
        help="Sort ascending instead of descending",
    )

    # Log maintenance subcommand
    log_parser = subparsers.add_parser(
        "log-maintenance", help="Add a maintenance record"
    )
    log_parser.add_argument("vehicle_id", type=str, help="Vehicle ID")
    log_parser.add_argument(
        "--type",
        type=str,
        required=True,
        help="Service description (e.g., 'Oil Change', 'brake pads')",
    )
    log_parser.add_argument(
        "--date",
        type=str,
        help="Service date in YYYY-MM-DD format (default: today)",
    )
    log_parser.add_argument(
        "--mileage",
        type=int,
        help="Odometer at time of service",
    )
    log_parser.add_argument(
        "--vendor",
        type=str,
        help="Who performed the service",
    )
    log_parser.add_argument(
        "--cost",
        type=float,
        help="Cost of service in dollars",
    )
    log_parser.add_argument(
        "--notes",
        type=str,
        help="Notes about the service",
    )
    log_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be added without saving",
    )

    # Log odometer subcommand
    odometer_parser = subparsers.add_parser(
        "log-odometer", help="Add an odometer reading"
    )
    odometer_parser.add_argument("vehicle_id", type=str, help="Vehicle ID")
    odometer_parser.add_argument("mileage", type=int, help="Odometer reading")
    odometer_parser.add_argument(
        "--driver",
        type=str,
        help="Driver ID who took the reading",
    )
    odometer_parser.add_argument(
        "--date",
        type=str,
        help="Reading date in YYYY-MM-DD format (default: today)",
    )
    odometer_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be added without saving",
    )

    # Catalog subcommand
    subparsers.add_parser("catalog", help="List tracked service types and intervals")

    args = parser.parse_args()

    # Validate data file exists
    if not args.data_file.exists():
        print(f"Error: File not found: {args.data_file}")
        return 1

    # Dispatch to command handler
    if args.command == "vehicles":
        return cmd_vehicles(args)
    elif args.command == "status":
        return cmd_status(args)
    elif args.command == "notifications":
        return cmd_notifications(args)
    elif args.command == "history":
        return cmd_history(args)
    elif args.command == "log-maintenance":
        return cmd_log_maintenance(args)
    elif args.command == "log-odometer":
        return cmd_log_odometer(args)
    elif args.command == "catalog":
        return cmd_catalog(args)

    return 0


if __name__ == "__main__":
    sys.exit(main() or 0)
