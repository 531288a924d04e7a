"""
Dashboard notifications.

Folds per-vehicle service statuses and weekly-check recency into a flat,
prioritized alert list scoped to what the caller may see.
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import AbstractSet, Iterable, List, Mapping, Optional, Sequence, Union

from .calculations import days_between, parse_date
from .engine import DEFAULT_WARNING_THRESHOLD_MILES, vehicle_service_statuses
from .odometer import DEFAULT_ODOMETER_SOURCES, OdometerSource
from .records import Assignment, MaintenanceRecord, OdometerLog, Vehicle, WeeklyCheck
from .service_status import ServiceStatus
from .service_type import ServiceType
from .status import Status

WEEKLY_CHECK_MAX_AGE_DAYS = 8

ROLE_ADMIN = "admin"
ROLE_DRIVER = "driver"


class Priority(Enum):
    """Alert priority. Lower value = shown first."""

    HIGH = 1
    MEDIUM = 2
    LOW = 3

    @property
    def label(self) -> str:
        return self.name.lower()


class NotificationType(Enum):
    """Alert kinds, with their tie-break rank within a priority."""

    WEEKLY_CHECK = "weekly-check"
    MAINTENANCE = "maintenance"

    @property
    def rank(self) -> int:
        return 0 if self is NotificationType.WEEKLY_CHECK else 1


@dataclass
class NotificationItem:
    """A single actionable alert for the dashboard."""

    id: str
    type: NotificationType
    title: str
    description: str
    vehicle_label: str
    priority: Priority
    href: str

    @property
    def sort_key(self):
        return (self.priority.value, self.type.rank)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type.value,
            "title": self.title,
            "description": self.description,
            "vehicleLabel": self.vehicle_label,
            "priority": self.priority.label,
            "href": self.href,
        }


def visible_vehicles(
    vehicles: Iterable[Vehicle],
    assignments: Iterable[Assignment],
    role: str,
    driver_id: Optional[str] = None,
    today: Optional[date] = None,
) -> List[Vehicle]:
    """
    Vehicles the caller may see, in input order.

    Admins see every vehicle. Anyone else sees the vehicles of their
    assignments active on `today` (all of their assignments if today is None).
    """
    vehicles = list(vehicles)
    if role == ROLE_ADMIN:
        return vehicles
    if driver_id is None:
        return []
    assigned = {
        a.vehicle_id
        for a in assignments
        if a.driver_id == driver_id and (today is None or a.is_active_on(today))
    }
    return [v for v in vehicles if v.id in assigned]


def maintenance_notification(
    vehicle: Vehicle, statuses: Sequence[ServiceStatus]
) -> Optional[NotificationItem]:
    """One alert per vehicle: overdue services win over due-soon ones."""
    overdue = [s.service.value for s in statuses if s.status == Status.OVERDUE]
    if overdue:
        return NotificationItem(
            id=f"maintenance-overdue-{vehicle.id}",
            type=NotificationType.MAINTENANCE,
            title=f"{len(overdue)} Overdue Maintenance",
            description=", ".join(overdue),
            vehicle_label=vehicle.name,
            priority=Priority.HIGH,
            href="/maintenance",
        )
    warning = [s.service.value for s in statuses if s.status == Status.WARNING]
    if warning:
        return NotificationItem(
            id=f"maintenance-warning-{vehicle.id}",
            type=NotificationType.MAINTENANCE,
            title=f"{len(warning)} Maintenance Due Soon",
            description=", ".join(warning),
            vehicle_label=vehicle.name,
            priority=Priority.MEDIUM,
            href="/maintenance",
        )
    return None


def latest_weekly_check(
    vehicle_id: str, weekly_checks: Iterable[WeeklyCheck]
) -> Optional[WeeklyCheck]:
    """Most recent weekly check for a vehicle by date."""
    dated = [
        (parse_date(c.date), c) for c in weekly_checks if c.vehicle_id == vehicle_id
    ]
    dated = [(d, c) for d, c in dated if d is not None]
    if not dated:
        return None
    return max(dated, key=lambda pair: pair[0])[1]


def weekly_check_notification(
    vehicle: Vehicle,
    weekly_checks: Iterable[WeeklyCheck],
    now: Union[date, datetime],
    max_age_days: int = WEEKLY_CHECK_MAX_AGE_DAYS,
) -> Optional[NotificationItem]:
    """Alert when the last weekly check is max_age_days or more old, or missing."""
    today = parse_date(now)
    latest = latest_weekly_check(vehicle.id, weekly_checks)
    if latest is None:
        description = "Never checked in"
    else:
        age = days_between(parse_date(latest.date), today)
        if age < max_age_days:
            return None
        description = f"{age} days overdue"
    return NotificationItem(
        id=f"weekly-check-overdue-{vehicle.id}",
        type=NotificationType.WEEKLY_CHECK,
        title="Overdue Weekly Check",
        description=description,
        vehicle_label=vehicle.name,
        priority=Priority.HIGH,
        href="/weekly-check",
    )


def build_notifications(
    vehicles: Iterable[Vehicle],
    maintenance: Sequence[MaintenanceRecord],
    weekly_checks: Sequence[WeeklyCheck],
    assignments: Iterable[Assignment],
    role: str,
    now: Union[date, datetime],
    driver_id: Optional[str] = None,
    odometer_logs: Sequence[OdometerLog] = (),
    dismissed: AbstractSet[str] = frozenset(),
    warning_threshold_miles: int = DEFAULT_WARNING_THRESHOLD_MILES,
    intervals: Optional[Mapping[ServiceType, int]] = None,
    max_age_days: int = WEEKLY_CHECK_MAX_AGE_DAYS,
    sources: Sequence[OdometerSource] = DEFAULT_ODOMETER_SOURCES,
) -> List[NotificationItem]:
    """
    Build the prioritized alert list for the caller.

    Maintenance alerts come from the service engine with the odometer resolved
    from every enabled source, weekly checks included. Weekly-check alerts
    come from check recency relative to `now`. Dismissed ids are dropped.

    Ordering: priority (high first), then weekly-check before maintenance,
    then vehicle order as given.
    """
    today = parse_date(now)
    shown = visible_vehicles(vehicles, assignments, role, driver_id, today)

    items: List[NotificationItem] = []
    for vehicle in shown:
        statuses = vehicle_service_statuses(
            vehicle.id,
            odometer_logs,
            maintenance,
            weekly_checks,
            warning_threshold_miles,
            intervals,
            sources,
        )
        item = maintenance_notification(vehicle, statuses)
        if item is not None:
            items.append(item)

    for vehicle in shown:
        item = weekly_check_notification(vehicle, weekly_checks, today, max_age_days)
        if item is not None:
            items.append(item)

    active = [item for item in items if item.id not in dismissed]
    return sorted(active, key=lambda item: item.sort_key)


def count_high_priority(items: Iterable[NotificationItem]) -> int:
    """Number of high priority alerts, for the dashboard badge."""
    return sum(1 for item in items if item.priority == Priority.HIGH)
