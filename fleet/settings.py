"""Fleet-wide configuration stored in the data file's settings section."""

from typing import Any, Dict, List, Optional, Sequence

from .calculations import clamp_miles
from .engine import DEFAULT_WARNING_THRESHOLD_MILES, build_intervals
from .notifications import WEEKLY_CHECK_MAX_AGE_DAYS
from .odometer import DEFAULT_ODOMETER_SOURCES, OdometerSource
from .service_type import SERVICE_INTERVALS_MILES, ServiceType


class FleetSettings:
    """Thresholds, intervals and odometer sources used by the calculations."""

    def __init__(
            self,
            warning_threshold_miles: int = DEFAULT_WARNING_THRESHOLD_MILES,
            weekly_check_max_age_days: int = WEEKLY_CHECK_MAX_AGE_DAYS,
            service_intervals: Optional[Dict[ServiceType, int]] = None,
            odometer_sources: Optional[Sequence[OdometerSource]] = None,
    ):
        self.warning_threshold_miles = warning_threshold_miles
        self.weekly_check_max_age_days = weekly_check_max_age_days
        self.service_intervals = build_intervals(service_intervals)
        self.odometer_sources = tuple(odometer_sources or DEFAULT_ODOMETER_SOURCES)

    @classmethod
    def from_dict(cls, dct: Optional[Dict[str, Any]]) -> "FleetSettings":
        """Parse the camelCase settings mapping, ignoring unknown entries."""
        dct = dct or {}

        threshold = clamp_miles(dct.get("warningThresholdMiles"))
        max_age = clamp_miles(dct.get("weeklyCheckMaxAgeDays"))

        intervals = {}
        for name, miles in (dct.get("serviceIntervals") or {}).items():
            service = ServiceType.from_name(str(name))
            miles = clamp_miles(miles)
            if service is not None and miles is not None:
                intervals[service] = miles

        sources: List[OdometerSource] = []
        for name in dct.get("odometerSources") or []:
            try:
                source = OdometerSource(name)
            except ValueError:
                continue
            if source not in sources:
                sources.append(source)

        return cls(
            warning_threshold_miles=(
                threshold if threshold is not None else DEFAULT_WARNING_THRESHOLD_MILES
            ),
            weekly_check_max_age_days=(
                max_age if max_age is not None else WEEKLY_CHECK_MAX_AGE_DAYS
            ),
            service_intervals=intervals,
            odometer_sources=sources,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the settings mapping, omitting defaults."""
        d: Dict[str, Any] = {}
        if self.warning_threshold_miles != DEFAULT_WARNING_THRESHOLD_MILES:
            d["warningThresholdMiles"] = self.warning_threshold_miles
        if self.weekly_check_max_age_days != WEEKLY_CHECK_MAX_AGE_DAYS:
            d["weeklyCheckMaxAgeDays"] = self.weekly_check_max_age_days
        changed = {
            service.value: miles
            for service, miles in self.service_intervals.items()
            if miles != SERVICE_INTERVALS_MILES[service]
        }
        if changed:
            d["serviceIntervals"] = changed
        if self.odometer_sources != DEFAULT_ODOMETER_SOURCES:
            d["odometerSources"] = [s.value for s in self.odometer_sources]
        return d
