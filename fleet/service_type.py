"""Service type catalog and free-text normalization."""

from enum import Enum
from typing import Optional


class ServiceType(Enum):
    """Tracked service categories, in catalog order."""

    OIL_CHANGE = "Oil Change"
    TIRE_ROTATION = "Tire Rotation"
    FLUID_CHECK = "Fluid Check"
    BRAKE_INSPECTION = "Brake Inspection"
    FILTER_REPLACEMENT = "Filter Replacement"
    MAJOR_INSPECTION = "Major Inspection"

    @classmethod
    def from_name(cls, name: str) -> Optional["ServiceType"]:
        """Look up a service type by its display name (case-insensitive)."""
        wanted = name.strip().lower()
        for service in cls:
            if service.value.lower() == wanted:
                return service
        return None


SERVICE_INTERVALS_MILES = {
    ServiceType.OIL_CHANGE: 5000,
    ServiceType.TIRE_ROTATION: 5000,
    ServiceType.FLUID_CHECK: 5000,
    ServiceType.BRAKE_INSPECTION: 5000,
    ServiceType.FILTER_REPLACEMENT: 20000,
    ServiceType.MAJOR_INSPECTION: 30000,
}

# Evaluated top to bottom; first match wins.
SERVICE_TYPE_RULES = (
    ("oil", ServiceType.OIL_CHANGE),
    ("tire", ServiceType.TIRE_ROTATION),
    ("fluid", ServiceType.FLUID_CHECK),
    ("brake", ServiceType.BRAKE_INSPECTION),
    ("filter", ServiceType.FILTER_REPLACEMENT),
    ("major", ServiceType.MAJOR_INSPECTION),
    ("tune", ServiceType.MAJOR_INSPECTION),
)


def normalize_service_type(text: Optional[str]) -> Optional[ServiceType]:
    """
    Map a free-text maintenance label to a catalog service type.

    Matching is a case-insensitive substring test against SERVICE_TYPE_RULES.
    Returns None for empty text or text that matches no rule.
    """
    if not text:
        return None
    lowered = text.strip().lower()
    for keyword, service in SERVICE_TYPE_RULES:
        if keyword in lowered:
            return service
    return None


def keywords_for(service: ServiceType) -> list[str]:
    """Keywords that normalize to the given service type."""
    return [keyword for keyword, target in SERVICE_TYPE_RULES if target == service]
