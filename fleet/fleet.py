"""Fleet class - the aggregate over all stored collections."""

from datetime import date, datetime
from typing import AbstractSet, Dict, List, Optional, Union

from .calculations import parse_date
from .engine import vehicle_service_statuses
from .notifications import (
    NotificationItem,
    build_notifications,
    latest_weekly_check,
    visible_vehicles,
)
from .odometer import OdometerReading, resolve_current_odometer, resolve_latest_reading
from .records import (
    Assignment,
    CleanlinessLog,
    Driver,
    MaintenanceRecord,
    OdometerLog,
    Receipt,
    Vehicle,
    WeeklyCheck,
)
from .service_status import ServiceStatus
from .service_type import normalize_service_type
from .settings import FleetSettings
from .status import Status


class Fleet:
    """All fleet records plus settings, with per-vehicle calculations."""

    def __init__(
        self,
        vehicles: Optional[List[Vehicle]] = None,
        drivers: Optional[List[Driver]] = None,
        assignments: Optional[List[Assignment]] = None,
        maintenance: Optional[List[MaintenanceRecord]] = None,
        odometer_logs: Optional[List[OdometerLog]] = None,
        weekly_checks: Optional[List[WeeklyCheck]] = None,
        receipts: Optional[List[Receipt]] = None,
        cleanliness: Optional[List[CleanlinessLog]] = None,
        settings: Optional[FleetSettings] = None,
    ):
        self.vehicles = vehicles or []
        self.drivers = drivers or []
        self.assignments = assignments or []
        self.maintenance = maintenance or []
        self.odometer_logs = odometer_logs or []
        self.weekly_checks = weekly_checks or []
        self.receipts = receipts or []
        self.cleanliness = cleanliness or []
        self.settings = settings or FleetSettings()

    def get_vehicle(self, vehicle_id: str) -> Optional[Vehicle]:
        """Find a vehicle by id."""
        for vehicle in self.vehicles:
            if vehicle.id == vehicle_id:
                return vehicle
        return None

    def get_driver(self, driver_id: str) -> Optional[Driver]:
        """Find a driver by id."""
        for driver in self.drivers:
            if driver.id == driver_id:
                return driver
        return None

    def get_maintenance_for_vehicle(self, vehicle_id: str) -> List[MaintenanceRecord]:
        """All maintenance records for a vehicle, including unrecognized types."""
        return [m for m in self.maintenance if m.vehicle_id == vehicle_id]

    def get_history_sorted(
        self, vehicle_id: str, sort_by: str = "date", reverse: bool = True
    ) -> List[MaintenanceRecord]:
        """
        Get a vehicle's maintenance records sorted by specified field.

        Args:
            sort_by: "date", "miles", or "type"
            reverse: If True, newest/highest first (default)
        """
        records = self.get_maintenance_for_vehicle(vehicle_id)
        if sort_by == "date":
            return sorted(
                records, key=lambda m: parse_date(m.date) or date.min, reverse=reverse
            )
        elif sort_by == "miles":
            return sorted(records, key=lambda m: m.odometer or 0, reverse=reverse)
        elif sort_by == "type":
            return sorted(
                records,
                key=lambda m: ((m.type or "").lower(), parse_date(m.date) or date.min),
                reverse=reverse,
            )
        return records

    def latest_reading(self, vehicle_id: str) -> Optional[OdometerReading]:
        """Most recent odometer reading from the configured sources."""
        return resolve_latest_reading(
            vehicle_id,
            self.odometer_logs,
            self.maintenance,
            self.weekly_checks,
            self.settings.odometer_sources,
        )

    def current_odometer(self, vehicle_id: str) -> Optional[int]:
        """Current mileage from recorded readings only (None if unknown)."""
        return resolve_current_odometer(
            vehicle_id,
            self.odometer_logs,
            self.maintenance,
            self.weekly_checks,
            self.settings.odometer_sources,
        )

    def display_odometer(self, vehicle_id: str) -> Optional[int]:
        """Current mileage for display, falling back to the initial odometer."""
        return resolve_current_odometer(
            vehicle_id,
            self.odometer_logs,
            self.maintenance,
            self.weekly_checks,
            self.settings.odometer_sources,
            vehicle=self.get_vehicle(vehicle_id),
        )

    def get_service_status(
        self, vehicle_id: str, warning_threshold_miles: Optional[int] = None
    ) -> List[ServiceStatus]:
        """Status of every catalog service type for a vehicle."""
        if warning_threshold_miles is None:
            warning_threshold_miles = self.settings.warning_threshold_miles
        return vehicle_service_statuses(
            vehicle_id,
            self.odometer_logs,
            self.maintenance,
            self.weekly_checks,
            warning_threshold_miles,
            self.settings.service_intervals,
            self.settings.odometer_sources,
        )

    def status_counts(self, vehicle_id: str) -> Dict[str, int]:
        """Number of service types per status for a vehicle."""
        statuses = self.get_service_status(vehicle_id)
        return {
            status.label: sum(1 for s in statuses if s.status == status)
            for status in Status
        }

    def last_weekly_check(self, vehicle_id: str) -> Optional[WeeklyCheck]:
        """Most recent weekly check for a vehicle."""
        return latest_weekly_check(vehicle_id, self.weekly_checks)

    def untracked_maintenance(self, vehicle_id: str) -> List[MaintenanceRecord]:
        """Maintenance records whose type maps to no catalog service."""
        return [
            m
            for m in self.get_maintenance_for_vehicle(vehicle_id)
            if normalize_service_type(m.type) is None
        ]

    def visible_vehicles(
        self, role: str, driver_id: Optional[str] = None, today: Optional[date] = None
    ) -> List[Vehicle]:
        """Vehicles the given role may see."""
        return visible_vehicles(self.vehicles, self.assignments, role, driver_id, today)

    def get_notifications(
        self,
        role: str,
        now: Union[date, datetime],
        driver_id: Optional[str] = None,
        dismissed: AbstractSet[str] = frozenset(),
        warning_threshold_miles: Optional[int] = None,
    ) -> List[NotificationItem]:
        """Prioritized dashboard alerts for the caller."""
        if warning_threshold_miles is None:
            warning_threshold_miles = self.settings.warning_threshold_miles
        return build_notifications(
            self.vehicles,
            self.maintenance,
            self.weekly_checks,
            self.assignments,
            role,
            now,
            driver_id=driver_id,
            odometer_logs=self.odometer_logs,
            dismissed=dismissed,
            warning_threshold_miles=warning_threshold_miles,
            intervals=self.settings.service_intervals,
            max_age_days=self.settings.weekly_check_max_age_days,
            sources=self.settings.odometer_sources,
        )
