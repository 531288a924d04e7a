"""Stored fleet records: vehicles, drivers, assignments and history logs."""

from datetime import date
from typing import List, Optional

from .calculations import parse_date


class Vehicle:
    """A fleet vehicle."""

    def __init__(
            self,
            id: str,
            label: str,
            vin: Optional[str] = None,
            plate: Optional[str] = None,
            make: Optional[str] = None,
            model: Optional[str] = None,
            year: Optional[int] = None,
            notes: Optional[str] = None,
            initial_odometer: Optional[float] = None,
    ):
        self.id = id
        self.label = label
        self.vin = vin
        self.plate = plate
        self.make = make
        self.model = model
        self.year = year
        self.notes = notes
        self.initial_odometer = initial_odometer

    @property
    def name(self) -> str:
        """Human-readable vehicle name."""
        if self.label:
            return self.label
        parts = [str(p) for p in (self.year, self.make, self.model) if p]
        return " ".join(parts) or self.id


class Driver:
    """A driver who can be assigned to vehicles."""

    def __init__(
            self,
            id: str,
            name: str,
            phone: Optional[str] = None,
            email: Optional[str] = None,
            notes: Optional[str] = None,
    ):
        self.id = id
        self.name = name
        self.phone = phone
        self.email = email
        self.notes = notes


class Assignment:
    """A vehicle/driver pairing over a date range."""

    def __init__(
            self,
            id: str,
            vehicle_id: str,
            driver_id: str,
            start_date: str,
            end_date: Optional[str] = None,
            job: Optional[str] = None,
            notes: Optional[str] = None,
    ):
        self.id = id
        self.vehicle_id = vehicle_id
        self.driver_id = driver_id
        self.start_date = start_date
        self.end_date = end_date
        self.job = job
        self.notes = notes

    def is_active_on(self, day: date) -> bool:
        """
        Check if the assignment covers the given day.

        Both ends are inclusive. A missing or unreadable start date places no
        lower bound; a missing end date means open-ended.
        """
        start = parse_date(self.start_date)
        if start is not None and day < start:
            return False
        end = parse_date(self.end_date)
        if end is not None and day > end:
            return False
        return True


class MaintenanceRecord:
    """A record of maintenance performed on a vehicle."""

    def __init__(
            self,
            id: str,
            vehicle_id: str,
            date: str,
            odometer: Optional[float] = None,
            type: Optional[str] = None,
            cost_cents: Optional[int] = None,
            vendor: Optional[str] = None,
            notes: Optional[str] = None,
            receipt_images: Optional[List[str]] = None,
    ):
        self.id = id
        self.vehicle_id = vehicle_id
        self.date = date
        self.odometer = odometer
        self.type = type
        self.cost_cents = cost_cents
        self.vendor = vendor
        self.notes = notes
        self.receipt_images = receipt_images or []


class OdometerLog:
    """A driver-reported odometer reading."""

    def __init__(
            self,
            id: str,
            vehicle_id: str,
            driver_id: Optional[str],
            date: str,
            odometer: float,
    ):
        self.id = id
        self.vehicle_id = vehicle_id
        self.driver_id = driver_id
        self.date = date
        self.odometer = odometer


class WeeklyCheck:
    """A weekly driver attestation with odometer reading and photos."""

    def __init__(
            self,
            id: str,
            vehicle_id: str,
            driver_id: Optional[str],
            date: str,
            odometer: float,
            odometer_photo: Optional[str] = None,
            exterior_images: Optional[List[str]] = None,
            interior_images: Optional[List[str]] = None,
            notes: Optional[str] = None,
            submitted_at: Optional[str] = None,
    ):
        self.id = id
        self.vehicle_id = vehicle_id
        self.driver_id = driver_id
        self.date = date
        self.odometer = odometer
        self.odometer_photo = odometer_photo
        self.exterior_images = exterior_images or []
        self.interior_images = interior_images or []
        self.notes = notes
        self.submitted_at = submitted_at


class Receipt:
    """A driver-submitted expense receipt."""

    def __init__(
            self,
            id: str,
            vehicle_id: str,
            driver_id: Optional[str],
            date: str,
            service_type: Optional[str] = None,
            amount_cents: Optional[int] = None,
            notes: Optional[str] = None,
            images: Optional[List[str]] = None,
    ):
        self.id = id
        self.vehicle_id = vehicle_id
        self.driver_id = driver_id
        self.date = date
        self.service_type = service_type
        self.amount_cents = amount_cents
        self.notes = notes
        self.images = images or []


class CleanlinessLog:
    """Weekly exterior/interior photos of a vehicle."""

    def __init__(
            self,
            id: str,
            vehicle_id: str,
            driver_id: Optional[str],
            date: str,
            exterior_images: Optional[List[str]] = None,
            interior_images: Optional[List[str]] = None,
            notes: Optional[str] = None,
    ):
        self.id = id
        self.vehicle_id = vehicle_id
        self.driver_id = driver_id
        self.date = date
        self.exterior_images = exterior_images or []
        self.interior_images = interior_images or []
        self.notes = notes
