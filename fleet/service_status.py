"""ServiceStatus dataclass for calculated service status."""

from dataclasses import dataclass
from typing import Optional

from .service_type import ServiceType
from .status import Status


@dataclass
class ServiceStatus:
    """Calculated mileage status for one service type on one vehicle."""

    service: ServiceType
    miles_since: int
    miles_until_due: int
    status: Status
    interval: int
    last_service_miles: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "service": self.service.value,
            "milesSince": self.miles_since,
            "milesUntilDue": self.miles_until_due,
            "status": self.status.label,
        }
