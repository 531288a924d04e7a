"""Status enum for service urgency levels."""

from enum import Enum


class Status(Enum):
    """Service status categories. Lower value = more urgent."""

    OVERDUE = 1
    WARNING = 2  # Within the warning threshold, or odometer unknown
    OK = 3

    @property
    def label(self) -> str:
        """Lowercase name used in JSON output and templates."""
        return self.name.lower()
