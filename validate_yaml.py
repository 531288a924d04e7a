#!/usr/bin/env python3
"""
Validate fleet data files.

Checks each file under data/ against schema.yaml, then checks the records
against each other: ids must be unique within a collection, and references
to vehicles and drivers that do not exist are reported as warnings (deleting
a vehicle leaves its history behind, so they are not errors).
"""
import sys
from collections import Counter
from pathlib import Path
from typing import Any, Dict, List, Tuple

import yaml
from jsonschema import Draft7Validator

# collection -> reference fields checked against vehicles/drivers
REFERENCES = {
    "assignments": ("vehicleId", "driverId"),
    "maintenance": ("vehicleId",),
    "odometerLogs": ("vehicleId", "driverId"),
    "weeklyChecks": ("vehicleId", "driverId"),
    "receipts": ("vehicleId", "driverId"),
    "cleanliness": ("vehicleId", "driverId"),
}


def load_schema() -> dict:
    """Load the JSON schema from schema.yaml."""
    schema_path = Path(__file__).parent / "schema.yaml"
    with open(schema_path) as f:
        return yaml.safe_load(f)


def schema_errors(data: Any, schema: dict) -> List[str]:
    """Every schema violation in the document, in path order."""
    errors = []
    validator = Draft7Validator(schema)
    found = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.path])
    for error in found:
        errors.append(f"Schema validation error: {error.message}")
        if error.path:
            errors.append(f"  at path: {'.'.join(str(p) for p in error.path)}")
    return errors


def duplicate_ids(data: Dict[str, Any]) -> List[str]:
    """Ids used more than once within the same collection."""
    errors = []
    for collection, records in data.items():
        if collection == "settings" or not records:
            continue
        counts = Counter(r.get("id") for r in records)
        for record_id, count in counts.items():
            if count > 1:
                errors.append(
                    f"Duplicate id '{record_id}' in {collection} ({count} records)"
                )
    return errors


def dangling_references(data: Dict[str, Any]) -> List[str]:
    """References to vehicles or drivers missing from the file."""
    known = {
        "vehicleId": {v.get("id") for v in data.get("vehicles") or []},
        "driverId": {d.get("id") for d in data.get("drivers") or []},
    }
    warnings = []
    for collection, fields in REFERENCES.items():
        for record in data.get(collection) or []:
            for field in fields:
                value = record.get(field)
                if value and value not in known[field]:
                    warnings.append(
                        f"{collection} '{record.get('id')}': unknown {field} '{value}'"
                    )
    return warnings


def check_fleet_file(filepath: Path, schema: dict) -> Tuple[List[str], List[str]]:
    """Validate a single fleet YAML file. Returns (errors, warnings)."""
    try:
        with open(filepath) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        return [f"YAML parse error: {e}"], []
    except OSError as e:
        return [f"Error: {e}"], []

    errors = schema_errors(data, schema)
    if errors:
        return errors, []
    return duplicate_ids(data), dangling_references(data)


def validate_fleet_file(filepath: Path, schema: dict) -> List[str]:
    """Validate a single fleet YAML file. Returns list of errors."""
    errors, _ = check_fleet_file(filepath, schema)
    return errors


def main():
    """Validate all fleet YAML files in the data/ directory."""
    schema = load_schema()
    data_dir = Path(__file__).parent / "data"

    if not data_dir.exists():
        print(f"Error: data directory not found: {data_dir}")
        return 1

    yaml_files = list(data_dir.glob("*.yaml")) + list(data_dir.glob("*.yml"))

    if not yaml_files:
        print(f"Warning: No YAML files found in {data_dir}")
        return 0

    all_valid = True
    for filepath in sorted(yaml_files):
        errors, warnings = check_fleet_file(filepath, schema)
        if errors:
            print(f"FAIL: {filepath.name}")
            for error in errors:
                print(f"  {error}")
            all_valid = False
        else:
            print(f"OK: {filepath.name}")
        for warning in warnings:
            print(f"  warning: {warning}")

    return 0 if all_valid else 1


if __name__ == "__main__":
    sys.exit(main())
