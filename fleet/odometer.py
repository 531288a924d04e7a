"""
Current odometer resolution.

A vehicle's mileage is reported in several places: weekly checks, odometer
logs and maintenance records. The resolver merges them into one ranked list
and picks the most recent reading. On a date tie the earlier source in the
precedence list wins; within one source the higher reading wins.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Iterable, List, Optional, Sequence

from .calculations import clamp_miles, parse_date
from .records import MaintenanceRecord, OdometerLog, Vehicle, WeeklyCheck


class OdometerSource(Enum):
    """Places an odometer reading can come from."""

    WEEKLY_CHECK = "weekly-check"
    ODOMETER_LOG = "odometer-log"
    MAINTENANCE = "maintenance"


DEFAULT_ODOMETER_SOURCES = (
    OdometerSource.WEEKLY_CHECK,
    OdometerSource.ODOMETER_LOG,
    OdometerSource.MAINTENANCE,
)


@dataclass(frozen=True)
class OdometerReading:
    """A single dated odometer reading for a vehicle."""

    vehicle_id: str
    date: date
    odometer: int
    source: OdometerSource


def _readings_from(records, vehicle_id: str, source: OdometerSource) -> List[OdometerReading]:
    readings = []
    for rec in records:
        if rec.vehicle_id != vehicle_id:
            continue
        miles = clamp_miles(rec.odometer)
        day = parse_date(rec.date)
        if miles is None or day is None:
            continue
        readings.append(OdometerReading(vehicle_id, day, miles, source))
    return readings


def collect_readings(
    vehicle_id: str,
    odometer_logs: Iterable[OdometerLog] = (),
    maintenance: Iterable[MaintenanceRecord] = (),
    weekly_checks: Iterable[WeeklyCheck] = (),
    sources: Sequence[OdometerSource] = DEFAULT_ODOMETER_SOURCES,
) -> List[OdometerReading]:
    """Gather every usable reading for a vehicle from the enabled sources."""
    by_source = {
        OdometerSource.WEEKLY_CHECK: weekly_checks,
        OdometerSource.ODOMETER_LOG: odometer_logs,
        OdometerSource.MAINTENANCE: maintenance,
    }
    readings = []
    for source in sources:
        readings.extend(_readings_from(by_source[source], vehicle_id, source))
    return readings


def resolve_latest_reading(
    vehicle_id: str,
    odometer_logs: Iterable[OdometerLog] = (),
    maintenance: Iterable[MaintenanceRecord] = (),
    weekly_checks: Iterable[WeeklyCheck] = (),
    sources: Sequence[OdometerSource] = DEFAULT_ODOMETER_SOURCES,
) -> Optional[OdometerReading]:
    """Pick the most recent reading, or None if the vehicle has none."""
    readings = collect_readings(
        vehicle_id, odometer_logs, maintenance, weekly_checks, sources
    )
    if not readings:
        return None
    rank = {source: i for i, source in enumerate(sources)}
    return max(readings, key=lambda r: (r.date, -rank[r.source], r.odometer))


def resolve_current_odometer(
    vehicle_id: str,
    odometer_logs: Iterable[OdometerLog] = (),
    maintenance: Iterable[MaintenanceRecord] = (),
    weekly_checks: Iterable[WeeklyCheck] = (),
    sources: Sequence[OdometerSource] = DEFAULT_ODOMETER_SOURCES,
    vehicle: Optional[Vehicle] = None,
) -> Optional[int]:
    """
    Best known current mileage for a vehicle.

    Returns None when no dated reading exists. If a vehicle is passed, its
    initial odometer is used as a last resort in that case only; service
    status callers leave it out so an unknown odometer stays unknown.
    """
    latest = resolve_latest_reading(
        vehicle_id, odometer_logs, maintenance, weekly_checks, sources
    )
    if latest is not None:
        return latest.odometer
    if vehicle is not None:
        return clamp_miles(vehicle.initial_odometer)
    return None
