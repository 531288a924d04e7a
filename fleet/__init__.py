"""
Fleet maintenance tracking models.

This package provides data models and calculations for a vehicle fleet:
- Status: Service urgency levels (OVERDUE, WARNING, OK)
- ServiceType: Fixed catalog of tracked services and their intervals
- Vehicle, Driver, Assignment, MaintenanceRecord, OdometerLog, WeeklyCheck,
  Receipt, CleanlinessLog: Stored records
- resolve_current_odometer: Best known mileage from all reading sources
- compute_service_statuses: Mileage since service and status per type
- build_notifications: Prioritized dashboard alerts
- Fleet: Main aggregate combining all data
"""

from .status import Status
from .service_type import (
    SERVICE_INTERVALS_MILES,
    SERVICE_TYPE_RULES,
    ServiceType,
    normalize_service_type,
)
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
from .calculations import (
    calc_miles_since,
    calc_miles_until_due,
    check_status,
    clamp_miles,
    parse_date,
)
from .odometer import (
    DEFAULT_ODOMETER_SOURCES,
    OdometerReading,
    OdometerSource,
    resolve_current_odometer,
    resolve_latest_reading,
)
from .service_status import ServiceStatus
from .engine import (
    DEFAULT_WARNING_THRESHOLD_MILES,
    compute_service_statuses,
    vehicle_service_statuses,
)
from .notifications import (
    ROLE_ADMIN,
    ROLE_DRIVER,
    WEEKLY_CHECK_MAX_AGE_DAYS,
    NotificationItem,
    NotificationType,
    Priority,
    build_notifications,
    count_high_priority,
)
from .settings import FleetSettings
from .fleet import Fleet
from .loader import (
    add_record,
    create_fleet_file,
    delete_record,
    load_fleet,
    update_record,
)

__all__ = [
    "Status",
    "ServiceType",
    "SERVICE_INTERVALS_MILES",
    "SERVICE_TYPE_RULES",
    "normalize_service_type",
    "Vehicle",
    "Driver",
    "Assignment",
    "MaintenanceRecord",
    "OdometerLog",
    "WeeklyCheck",
    "Receipt",
    "CleanlinessLog",
    "calc_miles_since",
    "calc_miles_until_due",
    "check_status",
    "clamp_miles",
    "parse_date",
    "OdometerSource",
    "OdometerReading",
    "DEFAULT_ODOMETER_SOURCES",
    "resolve_current_odometer",
    "resolve_latest_reading",
    "ServiceStatus",
    "DEFAULT_WARNING_THRESHOLD_MILES",
    "compute_service_statuses",
    "vehicle_service_statuses",
    "Priority",
    "NotificationType",
    "NotificationItem",
    "ROLE_ADMIN",
    "ROLE_DRIVER",
    "WEEKLY_CHECK_MAX_AGE_DAYS",
    "build_notifications",
    "count_high_priority",
    "FleetSettings",
    "Fleet",
    "load_fleet",
    "create_fleet_file",
    "add_record",
    "update_record",
    "delete_record",
]
