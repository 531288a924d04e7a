"""YAML loading and saving utilities for fleet data."""

import logging
import uuid
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml

from .fleet import Fleet
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
from .settings import FleetSettings

logger = logging.getLogger(__name__)

# collection key -> (record class, Fleet attribute, [(attribute, YAML key)])
COLLECTIONS: Dict[str, Tuple[type, str, List[Tuple[str, str]]]] = {
    "vehicles": (
        Vehicle,
        "vehicles",
        [
            ("id", "id"),
            ("label", "label"),
            ("vin", "vin"),
            ("plate", "plate"),
            ("make", "make"),
            ("model", "model"),
            ("year", "year"),
            ("notes", "notes"),
            ("initial_odometer", "initialOdometer"),
        ],
    ),
    "drivers": (
        Driver,
        "drivers",
        [
            ("id", "id"),
            ("name", "name"),
            ("phone", "phone"),
            ("email", "email"),
            ("notes", "notes"),
        ],
    ),
    "assignments": (
        Assignment,
        "assignments",
        [
            ("id", "id"),
            ("vehicle_id", "vehicleId"),
            ("driver_id", "driverId"),
            ("start_date", "startDate"),
            ("end_date", "endDate"),
            ("job", "job"),
            ("notes", "notes"),
        ],
    ),
    "maintenance": (
        MaintenanceRecord,
        "maintenance",
        [
            ("id", "id"),
            ("vehicle_id", "vehicleId"),
            ("date", "date"),
            ("odometer", "odometer"),
            ("type", "type"),
            ("cost_cents", "costCents"),
            ("vendor", "vendor"),
            ("notes", "notes"),
            ("receipt_images", "receiptImages"),
        ],
    ),
    "odometerLogs": (
        OdometerLog,
        "odometer_logs",
        [
            ("id", "id"),
            ("vehicle_id", "vehicleId"),
            ("driver_id", "driverId"),
            ("date", "date"),
            ("odometer", "odometer"),
        ],
    ),
    "weeklyChecks": (
        WeeklyCheck,
        "weekly_checks",
        [
            ("id", "id"),
            ("vehicle_id", "vehicleId"),
            ("driver_id", "driverId"),
            ("date", "date"),
            ("odometer", "odometer"),
            ("odometer_photo", "odometerPhoto"),
            ("exterior_images", "exteriorImages"),
            ("interior_images", "interiorImages"),
            ("notes", "notes"),
            ("submitted_at", "submittedAt"),
        ],
    ),
    "receipts": (
        Receipt,
        "receipts",
        [
            ("id", "id"),
            ("vehicle_id", "vehicleId"),
            ("driver_id", "driverId"),
            ("date", "date"),
            ("service_type", "serviceType"),
            ("amount_cents", "amountCents"),
            ("notes", "notes"),
            ("images", "images"),
        ],
    ),
    "cleanliness": (
        CleanlinessLog,
        "cleanliness",
        [
            ("id", "id"),
            ("vehicle_id", "vehicleId"),
            ("driver_id", "driverId"),
            ("date", "date"),
            ("exterior_images", "exteriorImages"),
            ("interior_images", "interiorImages"),
            ("notes", "notes"),
        ],
    ),
}


def _collection(collection: str) -> Tuple[type, str, List[Tuple[str, str]]]:
    if collection not in COLLECTIONS:
        raise ValueError(f"Unknown collection '{collection}'")
    return COLLECTIONS[collection]


def _plain(value: Any) -> Any:
    """Unquoted YAML dates load as date objects; keep them as ISO strings."""
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


def record_from_dict(collection: str, dct: Dict[str, Any]) -> Any:
    """Build a record object from its camelCase mapping."""
    cls, _, fields = _collection(collection)
    kwargs = {attr: _plain(dct.get(key)) for attr, key in fields}
    return cls(**kwargs)


def record_to_dict(collection: str, record: Any) -> Dict[str, Any]:
    """Serialize a record to its camelCase mapping, omitting empty values."""
    _, _, fields = _collection(collection)
    d: Dict[str, Any] = {}
    for attr, key in fields:
        value = getattr(record, attr, None)
        if value is None or value == []:
            continue
        d[key] = _plain(value)
    return d


def _read_raw(filename: Union[str, Path]) -> Dict[str, Any]:
    """Load the raw YAML data (not parsed into objects)."""
    with open(filename, "r") as fp:
        data = yaml.load(fp, Loader=yaml.SafeLoader)
    return data or {}


def _write_raw(filename: Union[str, Path], data: Dict[str, Any]) -> None:
    with open(filename, "w") as fp:
        yaml.dump(
            data,
            fp,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
            width=120,
        )


def load_fleet(filename: Union[str, Path]) -> Fleet:
    """Load a fleet from a YAML file."""
    data = _read_raw(filename)
    kwargs: Dict[str, Any] = {}
    for collection, (_, attr, _) in COLLECTIONS.items():
        kwargs[attr] = [
            record_from_dict(collection, dct)
            for dct in data.get(collection) or []
            if isinstance(dct, dict)
        ]
    kwargs["settings"] = FleetSettings.from_dict(data.get("settings"))
    return Fleet(**kwargs)


def create_fleet_file(
    filename: Union[str, Path], settings: Optional[FleetSettings] = None
) -> None:
    """Create a new fleet YAML file with empty collections."""
    data: Dict[str, Any] = {"settings": settings.to_dict() if settings else {}}
    for collection in COLLECTIONS:
        data[collection] = []
    _write_raw(filename, data)
    logger.info("Created fleet file %s", filename)


def save_settings(filename: Union[str, Path], settings: FleetSettings) -> None:
    """Replace the settings section of a fleet YAML file."""
    data = _read_raw(filename)
    data["settings"] = settings.to_dict()
    _write_raw(filename, data)


def add_record(filename: Union[str, Path], collection: str, record: Any) -> Any:
    """
    Append a record to a collection in a fleet YAML file.

    Assigns a new id when the record has none. Returns the stored record.
    """
    _collection(collection)
    data = _read_raw(filename)

    if not record.id:
        record.id = uuid.uuid4().hex

    if data.get(collection) is None:
        data[collection] = []
    data[collection].append(record_to_dict(collection, record))

    _write_raw(filename, data)
    logger.info("Added %s record %s", collection, record.id)
    return record


def _index_of(records: List[Dict[str, Any]], collection: str, record_id: str) -> int:
    for index, dct in enumerate(records):
        if isinstance(dct, dict) and dct.get("id") == record_id:
            return index
    raise KeyError(f"No {collection} record with id '{record_id}'")


def update_record(filename: Union[str, Path], collection: str, record: Any) -> Any:
    """Replace the record with the same id in a fleet YAML file."""
    _collection(collection)
    data = _read_raw(filename)

    records = data.get(collection) or []
    index = _index_of(records, collection, record.id)
    records[index] = record_to_dict(collection, record)
    data[collection] = records

    _write_raw(filename, data)
    logger.info("Updated %s record %s", collection, record.id)
    return record


def delete_record(filename: Union[str, Path], collection: str, record_id: str) -> None:
    """
    Remove a record by id from a fleet YAML file.

    Deleting a vehicle leaves its history records in place.
    """
    _collection(collection)
    data = _read_raw(filename)

    records = data.get(collection) or []
    index = _index_of(records, collection, record_id)
    del records[index]
    data[collection] = records

    _write_raw(filename, data)
    logger.info("Deleted %s record %s", collection, record_id)
