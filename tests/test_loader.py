#!/usr/bin/env python3
"""Tests for YAML loading and saving utilities."""

from pathlib import Path

import pytest
import yaml

from fleet import (
    Fleet,
    FleetSettings,
    MaintenanceRecord,
    OdometerLog,
    ServiceType,
    Vehicle,
    add_record,
    create_fleet_file,
    delete_record,
    load_fleet,
    update_record,
)
from fleet.loader import record_from_dict, record_to_dict, save_settings

FLEET_YAML = """
settings:
  warningThresholdMiles: 500
  serviceIntervals:
    Oil Change: 4000

vehicles:
  - id: v1
    label: Truck 1
    make: Ford
    year: 2019
    initialOdometer: 8000

drivers:
  - id: d1
    name: Ana

assignments:
  - id: a1
    vehicleId: v1
    driverId: d1
    startDate: 2025-01-01

maintenance:
  - id: m1
    vehicleId: v1
    date: '2025-02-01'
    odometer: 10000
    type: Oil Change
    costCents: 4999
    receiptImages:
      - receipts/m1.jpg

odometerLogs:
  - id: o1
    vehicleId: v1
    driverId: d1
    date: '2025-03-01'
    odometer: 12000
"""


@pytest.fixture
def fleet_file(tmp_path):
    path = tmp_path / "fleet.yaml"
    path.write_text(FLEET_YAML)
    return path


# =============================================================================
# load_fleet tests
# =============================================================================


class TestLoadFleet:
    """Tests for load_fleet function."""

    def test_loads_collections(self, fleet_file):
        fleet = load_fleet(fleet_file)

        assert isinstance(fleet, Fleet)
        assert fleet.vehicles[0].label == "Truck 1"
        assert fleet.vehicles[0].initial_odometer == 8000
        assert fleet.drivers[0].name == "Ana"
        assert fleet.maintenance[0].cost_cents == 4999
        assert fleet.maintenance[0].receipt_images == ["receipts/m1.jpg"]
        assert fleet.odometer_logs[0].odometer == 12000
        assert fleet.weekly_checks == []
        assert fleet.receipts == []

    def test_unquoted_dates_become_strings(self, fleet_file):
        fleet = load_fleet(fleet_file)
        assert fleet.assignments[0].start_date == "2025-01-01"

    def test_loads_settings(self, fleet_file):
        fleet = load_fleet(fleet_file)
        assert fleet.settings.warning_threshold_miles == 500
        assert fleet.settings.service_intervals[ServiceType.OIL_CHANGE] == 4000

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        fleet = load_fleet(path)
        assert fleet.vehicles == []
        assert fleet.settings.warning_threshold_miles == 250

    def test_file_not_found(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_fleet(tmp_path / "missing.yaml")

    def test_loads_sample_data(self):
        fleet = load_fleet(Path(__file__).parent.parent / "data" / "fleet.yaml")
        assert len(fleet.vehicles) > 0


class TestRecordDicts:
    """Tests for record_from_dict and record_to_dict."""

    def test_to_dict_omits_empty(self):
        record = MaintenanceRecord("m1", "v1", "2025-02-01", 10000, "Oil Change")
        assert record_to_dict("maintenance", record) == {
            "id": "m1",
            "vehicleId": "v1",
            "date": "2025-02-01",
            "odometer": 10000,
            "type": "Oil Change",
        }

    def test_from_dict(self):
        record = record_from_dict(
            "odometerLogs",
            {"id": "o1", "vehicleId": "v1", "date": "2025-03-01", "odometer": 12000},
        )
        assert isinstance(record, OdometerLog)
        assert record.driver_id is None
        assert record.odometer == 12000

    def test_unknown_collection(self):
        with pytest.raises(ValueError, match="Unknown collection"):
            record_to_dict("trips", Vehicle("v1", "Truck 1"))


# =============================================================================
# create_fleet_file / save_settings tests
# =============================================================================


class TestCreateFleetFile:
    """Tests for create_fleet_file function."""

    def test_creates_empty_collections(self, tmp_path):
        path = tmp_path / "new.yaml"
        create_fleet_file(path)

        data = yaml.safe_load(path.read_text())
        assert data["settings"] == {}
        assert data["vehicles"] == []
        assert data["weeklyChecks"] == []
        assert load_fleet(path).vehicles == []

    def test_with_settings(self, tmp_path):
        path = tmp_path / "new.yaml"
        create_fleet_file(path, FleetSettings(warning_threshold_miles=300))
        assert load_fleet(path).settings.warning_threshold_miles == 300

    def test_save_settings(self, fleet_file):
        save_settings(fleet_file, FleetSettings(weekly_check_max_age_days=10))
        fleet = load_fleet(fleet_file)
        assert fleet.settings.weekly_check_max_age_days == 10
        assert fleet.settings.warning_threshold_miles == 250
        assert len(fleet.vehicles) == 1


# =============================================================================
# add/update/delete tests
# =============================================================================


class TestAddRecord:
    """Tests for add_record function."""

    def test_appends(self, fleet_file):
        record = MaintenanceRecord("m2", "v1", "2025-03-15", 12100, "Tire Rotation")
        add_record(fleet_file, "maintenance", record)

        fleet = load_fleet(fleet_file)
        assert [m.id for m in fleet.maintenance] == ["m1", "m2"]
        assert fleet.maintenance[1].type == "Tire Rotation"

    def test_assigns_id(self, fleet_file):
        record = OdometerLog(None, "v1", "d1", "2025-03-20", 12300)
        stored = add_record(fleet_file, "odometerLogs", record)

        assert stored.id
        assert load_fleet(fleet_file).odometer_logs[-1].id == stored.id

    def test_to_empty_collection(self, fleet_file):
        add_record(fleet_file, "vehicles", Vehicle("v2", "Van 2"))
        assert [v.id for v in load_fleet(fleet_file).vehicles] == ["v1", "v2"]

    def test_unknown_collection(self, fleet_file):
        with pytest.raises(ValueError):
            add_record(fleet_file, "trips", Vehicle("v2", "Van 2"))

    def test_preserves_settings(self, fleet_file):
        add_record(fleet_file, "vehicles", Vehicle("v2", "Van 2"))
        assert load_fleet(fleet_file).settings.warning_threshold_miles == 500


class TestUpdateRecord:
    """Tests for update_record function."""

    def test_replaces(self, fleet_file):
        record = MaintenanceRecord("m1", "v1", "2025-02-01", 10050, "Oil Change")
        update_record(fleet_file, "maintenance", record)

        fleet = load_fleet(fleet_file)
        assert len(fleet.maintenance) == 1
        assert fleet.maintenance[0].odometer == 10050
        assert fleet.maintenance[0].cost_cents is None

    def test_missing_id(self, fleet_file):
        record = MaintenanceRecord("nope", "v1", "2025-02-01", 10050, "Oil Change")
        with pytest.raises(KeyError):
            update_record(fleet_file, "maintenance", record)


class TestDeleteRecord:
    """Tests for delete_record function."""

    def test_deletes(self, fleet_file):
        delete_record(fleet_file, "odometerLogs", "o1")
        assert load_fleet(fleet_file).odometer_logs == []

    def test_vehicle_history_kept(self, fleet_file):
        delete_record(fleet_file, "vehicles", "v1")
        fleet = load_fleet(fleet_file)
        assert fleet.vehicles == []
        assert len(fleet.maintenance) == 1

    def test_missing_id(self, fleet_file):
        with pytest.raises(KeyError):
            delete_record(fleet_file, "drivers", "nope")

    def test_missing_collection_section(self, fleet_file):
        with pytest.raises(KeyError):
            delete_record(fleet_file, "receipts", "r1")
