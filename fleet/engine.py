"""
Service interval engine.

Computes, for every service type in the catalog, how far a vehicle has
driven since that service was last done and whether it is due.

Logic:
- A maintenance record counts toward a service type when its free-text type
  normalizes to it and it carries an odometer reading
- Last service mileage is the highest such reading (0 if never serviced)
- miles_since = current - last, miles_until_due = interval - miles_since
  (both floored at 0)
- Unknown current odometer forces WARNING for every type
"""

from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from .calculations import (
    calc_miles_since,
    calc_miles_until_due,
    check_status,
    clamp_miles,
)
from .odometer import DEFAULT_ODOMETER_SOURCES, OdometerSource, resolve_current_odometer
from .records import MaintenanceRecord, OdometerLog, WeeklyCheck
from .service_status import ServiceStatus
from .service_type import SERVICE_INTERVALS_MILES, ServiceType, normalize_service_type
from .status import Status

DEFAULT_WARNING_THRESHOLD_MILES = 250


def build_intervals(
    overrides: Optional[Mapping[ServiceType, int]] = None,
) -> Dict[ServiceType, int]:
    """Catalog intervals with overrides applied, in catalog order."""
    intervals = dict(SERVICE_INTERVALS_MILES)
    for service, miles in (overrides or {}).items():
        if service in intervals:
            intervals[service] = clamp_miles(miles) or 0
    return intervals


def last_service_odometers(
    vehicle_id: str, maintenance: Iterable[MaintenanceRecord]
) -> Dict[ServiceType, int]:
    """Highest recorded odometer per service type for a vehicle."""
    last: Dict[ServiceType, int] = {}
    for rec in maintenance:
        if rec.vehicle_id != vehicle_id:
            continue
        service = normalize_service_type(rec.type)
        if service is None:
            continue
        miles = clamp_miles(rec.odometer)
        if miles is None:
            continue
        if service not in last or miles > last[service]:
            last[service] = miles
    return last


def compute_service_statuses(
    vehicle_id: str,
    maintenance: Iterable[MaintenanceRecord],
    current_odometer: Optional[int],
    warning_threshold_miles: int = DEFAULT_WARNING_THRESHOLD_MILES,
    intervals: Optional[Mapping[ServiceType, int]] = None,
) -> List[ServiceStatus]:
    """
    Calculate the status of every catalog service type for a vehicle.

    Always returns one entry per service type, in catalog order.

    Args:
        current_odometer: Resolved current mileage, or None if unknown
        warning_threshold_miles: Miles before the interval at which status
            turns from OK to WARNING (boundary counts as WARNING)
        intervals: Per-service overrides merged onto the catalog
    """
    catalog = build_intervals(intervals)
    threshold = clamp_miles(warning_threshold_miles) or 0

    if current_odometer is None:
        return [
            ServiceStatus(
                service=service,
                miles_since=0,
                miles_until_due=interval,
                status=Status.WARNING,
                interval=interval,
            )
            for service, interval in catalog.items()
        ]

    current = clamp_miles(current_odometer) or 0
    last_service = last_service_odometers(vehicle_id, maintenance)

    statuses = []
    for service, interval in catalog.items():
        last_miles = last_service.get(service)
        miles_since = calc_miles_since(current, last_miles or 0)
        status = check_status(miles_since, interval, threshold)
        miles_until_due = (
            0 if status == Status.OVERDUE else calc_miles_until_due(miles_since, interval)
        )
        statuses.append(
            ServiceStatus(
                service=service,
                miles_since=miles_since,
                miles_until_due=miles_until_due,
                status=status,
                interval=interval,
                last_service_miles=last_miles,
            )
        )
    return statuses


def vehicle_service_statuses(
    vehicle_id: str,
    odometer_logs: Iterable[OdometerLog] = (),
    maintenance: Sequence[MaintenanceRecord] = (),
    weekly_checks: Iterable[WeeklyCheck] = (),
    warning_threshold_miles: int = DEFAULT_WARNING_THRESHOLD_MILES,
    intervals: Optional[Mapping[ServiceType, int]] = None,
    sources: Sequence[OdometerSource] = DEFAULT_ODOMETER_SOURCES,
) -> List[ServiceStatus]:
    """Resolve the current odometer from all sources, then compute statuses."""
    current = resolve_current_odometer(
        vehicle_id, odometer_logs, maintenance, weekly_checks, sources
    )
    return compute_service_statuses(
        vehicle_id, maintenance, current, warning_threshold_miles, intervals
    )
