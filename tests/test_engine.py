#!/usr/bin/env python3
"""
Tests for the service interval engine.

Covers the complete status rules:
1. Never serviced - treated as serviced at mile 0
2. Service-based intervals - miles counted from the highest recorded service
3. Free-text types - only normalizable records count
4. Unknown odometer - every service forced to WARNING
5. Threshold boundary - exactly threshold miles left is WARNING
"""

import pytest
from fleet import (
    MaintenanceRecord,
    OdometerLog,
    ServiceType,
    Status,
    WeeklyCheck,
    compute_service_statuses,
    vehicle_service_statuses,
)
from fleet.engine import build_intervals, last_service_odometers


def maint(type, odometer, day="2025-01-15", vehicle_id="v1"):
    return MaintenanceRecord(f"m-{type}-{odometer}", vehicle_id, day, odometer, type)


def by_service(statuses):
    return {s.service: s for s in statuses}


class TestBuildIntervals:
    """Tests for build_intervals."""

    def test_defaults(self):
        intervals = build_intervals()
        assert intervals[ServiceType.OIL_CHANGE] == 5000
        assert len(intervals) == 6

    def test_override_keeps_all_types(self):
        intervals = build_intervals({ServiceType.OIL_CHANGE: 3000})
        assert intervals[ServiceType.OIL_CHANGE] == 3000
        assert intervals[ServiceType.TIRE_ROTATION] == 5000
        assert list(intervals) == list(ServiceType)

    def test_negative_override_clamped(self):
        intervals = build_intervals({ServiceType.OIL_CHANGE: -10})
        assert intervals[ServiceType.OIL_CHANGE] == 0


class TestLastServiceOdometers:
    """Tests for last_service_odometers."""

    def test_takes_highest_reading_per_type(self):
        records = [
            maint("Oil Change", 10000, "2025-01-01"),
            maint("oil change", 15000, "2024-06-01"),
            maint("Tire rotation", 12000),
        ]
        last = last_service_odometers("v1", records)
        assert last[ServiceType.OIL_CHANGE] == 15000
        assert last[ServiceType.TIRE_ROTATION] == 12000

    def test_ignores_records_without_odometer(self):
        last = last_service_odometers("v1", [maint("Oil Change", None)])
        assert ServiceType.OIL_CHANGE not in last

    def test_ignores_unrecognized_types(self):
        last = last_service_odometers("v1", [maint("Wiper blades", 9000)])
        assert last == {}

    def test_ignores_other_vehicles(self):
        last = last_service_odometers("v1", [maint("Oil Change", 9000, vehicle_id="v2")])
        assert last == {}


class TestComputeServiceStatuses:
    """Tests for compute_service_statuses."""

    def test_always_six_entries_in_catalog_order(self):
        statuses = compute_service_statuses("v1", [], 1000)
        assert [s.service for s in statuses] == list(ServiceType)

    def test_unknown_odometer_forces_warning(self):
        statuses = compute_service_statuses("v1", [maint("Oil Change", 10000)], None)
        assert len(statuses) == 6
        for s in statuses:
            assert s.status == Status.WARNING
            assert s.miles_since == 0
            assert s.miles_until_due == s.interval

    def test_never_serviced_counts_from_zero(self):
        statuses = by_service(compute_service_statuses("v1", [], 4000))
        oil = statuses[ServiceType.OIL_CHANGE]
        assert oil.miles_since == 4000
        assert oil.miles_until_due == 1000
        assert oil.last_service_miles is None
        assert oil.status == Status.OK

    @pytest.mark.parametrize(
        "current, status, until_due",
        [
            (14999, Status.WARNING, 1),
            (14750, Status.WARNING, 250),
            (14749, Status.OK, 251),
            (15000, Status.OVERDUE, 0),
            (18000, Status.OVERDUE, 0),
        ],
    )
    def test_oil_change_thresholds(self, current, status, until_due):
        """Single oil change at 10,000 with the default 250 mile threshold."""
        records = [maint("Oil Change", 10000)]
        oil = by_service(compute_service_statuses("v1", records, current))[
            ServiceType.OIL_CHANGE
        ]
        assert oil.status == status
        assert oil.miles_until_due == until_due
        assert oil.miles_since == current - 10000

    def test_free_text_type_counts(self):
        records = [maint("Full Synthetic Oil Change", 10000)]
        oil = by_service(compute_service_statuses("v1", records, 11000))[
            ServiceType.OIL_CHANGE
        ]
        assert oil.last_service_miles == 10000
        assert oil.miles_since == 1000

    def test_unrecognized_type_affects_nothing(self):
        with_wipers = compute_service_statuses(
            "v1", [maint("Wiper blades", 12000)], 12000
        )
        without = compute_service_statuses("v1", [], 12000)
        assert with_wipers == without

    def test_odometer_below_last_service_clamps_to_zero(self):
        """A reading lower than the service mileage does not go negative."""
        oil = by_service(
            compute_service_statuses("v1", [maint("Oil Change", 20000)], 19000)
        )[ServiceType.OIL_CHANGE]
        assert oil.miles_since == 0
        assert oil.miles_until_due == 5000
        assert oil.status == Status.OK

    def test_custom_threshold(self):
        oil = by_service(
            compute_service_statuses(
                "v1", [maint("Oil Change", 10000)], 14000, warning_threshold_miles=1000
            )
        )[ServiceType.OIL_CHANGE]
        assert oil.status == Status.WARNING

    def test_negative_threshold_clamped(self):
        oil = by_service(
            compute_service_statuses(
                "v1", [maint("Oil Change", 10000)], 14999, warning_threshold_miles=-5
            )
        )[ServiceType.OIL_CHANGE]
        assert oil.status == Status.OK

    def test_interval_override(self):
        statuses = by_service(
            compute_service_statuses(
                "v1", [], 3500, intervals={ServiceType.OIL_CHANGE: 3000}
            )
        )
        assert statuses[ServiceType.OIL_CHANGE].status == Status.OVERDUE
        assert statuses[ServiceType.TIRE_ROTATION].status == Status.OK

    def test_idempotent(self):
        records = [maint("Oil Change", 10000), maint("Brake pads", 12000)]
        first = compute_service_statuses("v1", records, 14900)
        second = compute_service_statuses("v1", records, 14900)
        assert first == second

    def test_to_dict(self):
        oil = compute_service_statuses("v1", [maint("Oil Change", 10000)], 14999)[0]
        assert oil.to_dict() == {
            "service": "Oil Change",
            "milesSince": 4999,
            "milesUntilDue": 1,
            "status": "warning",
        }


class TestVehicleServiceStatuses:
    """Integration tests resolving the odometer before computing status."""

    def test_no_readings_anywhere(self):
        statuses = vehicle_service_statuses("v1")
        assert len(statuses) == 6
        assert all(s.status == Status.WARNING for s in statuses)
        assert all(s.miles_since == 0 for s in statuses)

    def test_maintenance_record_supplies_odometer(self):
        """
        Only maintenance data: the oil change at 1,000 is also the current
        reading, so oil is fresh and never-serviced types sit at 1,000 miles.
        """
        records = [maint("Oil Change", 1000, "2025-01-01")]
        statuses = by_service(vehicle_service_statuses("v1", maintenance=records))
        assert statuses[ServiceType.OIL_CHANGE].miles_since == 0
        assert statuses[ServiceType.TIRE_ROTATION].miles_since == 1000
        assert all(s.status == Status.OK for s in statuses.values())

    def test_weekly_check_reading_used(self):
        records = [maint("Oil Change", 10000, "2025-01-01")]
        checks = [WeeklyCheck("w1", "v1", "d1", "2025-03-01", 15100)]
        logs = [OdometerLog("o1", "v1", "d1", "2025-02-01", 12000)]
        oil = by_service(
            vehicle_service_statuses(
                "v1", odometer_logs=logs, maintenance=records, weekly_checks=checks
            )
        )[ServiceType.OIL_CHANGE]
        assert oil.miles_since == 5100
        assert oil.status == Status.OVERDUE

    def test_overdue_and_warning_mix(self):
        records = [maint("Oil Change", 10000), maint("Tire rotation", 10200)]
        logs = [OdometerLog("o1", "v1", "d1", "2025-03-01", 15000)]
        statuses = by_service(
            vehicle_service_statuses("v1", odometer_logs=logs, maintenance=records)
        )
        assert statuses[ServiceType.OIL_CHANGE].status == Status.OVERDUE
        assert statuses[ServiceType.TIRE_ROTATION].status == Status.WARNING
