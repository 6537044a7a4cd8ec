"""YAML-backed record store for vehicles, service records and intervals.

Layout under the data directory:

    vehicles/<vehicle id>.yaml   vehicle, serviceRecords, odometerChanges
    intervals/<user id>.yaml     category -> km

Each mutation loads the raw YAML document, changes it, and writes it back
through a temporary file, so a document is either fully updated or untouched.
"""

import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .calculations import latest_records_by_category
from .category import Category
from .errors import ConflictError, InvalidInput, NotFound, StoreError
from .intervals import IntervalSet
from .odometer_change import OdometerChange
from .service_record import ServiceRecord
from .vehicle import PROFILE_FIELDS, Vehicle

logger = logging.getLogger(__name__)

_SAFE_ID = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


def dump_yaml_atomic(path: Path, data: Any) -> None:
    """Dump data to path through a temp file in the same directory, then rename."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fp:
            yaml.dump(
                data,
                fp,
                default_flow_style=False,
                allow_unicode=True,
                sort_keys=False,
                width=120,
            )
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


def _check_id(value: str, field: str) -> str:
    if not value or not isinstance(value, str) or not _SAFE_ID.match(value):
        raise InvalidInput(f"Invalid {field}: {value!r}")
    return value


class YamlStore:
    """Record store over a directory of YAML documents."""

    def __init__(self, data_dir: Union[str, Path]):
        self.data_dir = Path(data_dir)
        self.vehicles_dir = self.data_dir / "vehicles"
        self.intervals_dir = self.data_dir / "intervals"

    # -------------------------------------------------------------------------
    # Raw document I/O
    # -------------------------------------------------------------------------

    def vehicle_path(self, vehicle_id: str) -> Path:
        return self.vehicles_dir / f"{_check_id(vehicle_id, 'vehicle id')}.yaml"

    def intervals_path(self, user_id: str) -> Path:
        return self.intervals_dir / f"{_check_id(user_id, 'user id')}.yaml"

    def _read(self, path: Path) -> Optional[Dict[str, Any]]:
        """Load a raw document, or None when it does not exist."""
        try:
            with open(path, "r", encoding="utf-8") as fp:
                return yaml.load(fp, Loader=yaml.SafeLoader) or {}
        except FileNotFoundError:
            return None
        except (OSError, yaml.YAMLError) as e:
            raise StoreError(f"Could not read {path.name}: {e}") from e

    def _write(self, path: Path, data: Dict[str, Any]) -> None:
        """Write a document atomically (temp file + rename)."""
        try:
            dump_yaml_atomic(path, data)
        except (OSError, yaml.YAMLError) as e:
            raise StoreError(f"Could not write {path.name}: {e}") from e

    def _load_vehicle_doc(self, vehicle_id: str) -> Dict[str, Any]:
        data = self._read(self.vehicle_path(vehicle_id))
        if data is None:
            raise NotFound(f"Vehicle '{vehicle_id}' not found")
        if not isinstance(data.get("vehicle"), dict):
            raise StoreError(f"Vehicle document '{vehicle_id}' is malformed")
        return data

    # -------------------------------------------------------------------------
    # Vehicles
    # -------------------------------------------------------------------------

    def create_vehicle(self, vehicle: Vehicle) -> Vehicle:
        """Create a new vehicle document with empty history."""
        path = self.vehicle_path(vehicle.id)
        if path.exists():
            raise ConflictError(f"Vehicle '{vehicle.id}' already exists")
        self._write(
            path,
            {"vehicle": vehicle.to_dict(), "serviceRecords": [], "odometerChanges": []},
        )
        logger.info("Registered vehicle %s for user %s", vehicle.id, vehicle.owner_id)
        return vehicle

    def fetch_vehicle(self, vehicle_id: str) -> Vehicle:
        return Vehicle.from_dict(self._load_vehicle_doc(vehicle_id)["vehicle"])

    def list_vehicles(self, owner_id: Optional[str] = None) -> List[Vehicle]:
        """All vehicles, optionally only those owned by owner_id."""
        vehicles = []
        for path in sorted(self.vehicles_dir.glob("*.yaml")):
            vehicle = self.fetch_vehicle(path.stem)
            if owner_id is None or vehicle.owner_id == owner_id:
                vehicles.append(vehicle)
        return vehicles

    def update_vehicle_profile(self, vehicle_id: str, **fields: Any) -> Vehicle:
        """
        Update profile fields (type, make, model, year, oil type).

        Only fields that are provided (non-None) change; the odometer is not a
        profile field.
        """
        unknown = set(fields) - set(PROFILE_FIELDS)
        if unknown:
            raise InvalidInput(f"Not editable: {', '.join(sorted(unknown))}")
        data = self._load_vehicle_doc(vehicle_id)
        vehicle = Vehicle.from_dict(data["vehicle"])
        for name, value in fields.items():
            if value is not None:
                setattr(vehicle, name, value)
        data["vehicle"] = vehicle.to_dict()
        self._write(self.vehicle_path(vehicle_id), data)
        return vehicle

    def update_vehicle_odometer(self, vehicle_id: str, value: int) -> Vehicle:
        """Set the stored odometer without any audit bookkeeping."""
        return self.apply_odometer_update(vehicle_id, value, None)

    def apply_odometer_update(
        self, vehicle_id: str, value: int, change: Optional[OdometerChange]
    ) -> Vehicle:
        """
        Set the odometer and, when given, append the audit entry.

        Both land in the same document write: either both are stored or
        neither is.
        """
        data = self._load_vehicle_doc(vehicle_id)
        if change is not None:
            if change.vehicle_id != vehicle_id:
                raise InvalidInput("Audit entry belongs to another vehicle")
            if data.get("odometerChanges") is None:
                data["odometerChanges"] = []
            data["odometerChanges"].append(change.to_dict())
        data["vehicle"]["odometer"] = value
        self._write(self.vehicle_path(vehicle_id), data)
        return Vehicle.from_dict(data["vehicle"])

    # -------------------------------------------------------------------------
    # Service records
    # -------------------------------------------------------------------------

    def service_records(self, vehicle_id: str) -> List[ServiceRecord]:
        """All records for a vehicle, highest odometer first."""
        data = self._load_vehicle_doc(vehicle_id)
        records = [ServiceRecord.from_dict(r) for r in data.get("serviceRecords") or []]
        return sorted(records, key=lambda r: r.odometer, reverse=True)

    def last_records_by_category(self, vehicle_id: str) -> Dict[Category, ServiceRecord]:
        return latest_records_by_category(self.service_records(vehicle_id))

    def append_service_record(self, record: ServiceRecord) -> ServiceRecord:
        """
        Append a record to its vehicle's document.

        Raises ConflictError when a record with the same vehicle, category,
        odometer and date already exists.
        """
        data = self._load_vehicle_doc(record.vehicle_id)
        if data.get("serviceRecords") is None:
            data["serviceRecords"] = []

        for existing in data["serviceRecords"]:
            if ServiceRecord.from_dict(existing).dedup_key == record.dedup_key:
                raise ConflictError("Duplicate service record")

        data["serviceRecords"].append(record.to_dict())
        self._write(self.vehicle_path(record.vehicle_id), data)
        record.synced = True
        logger.info(
            "Recorded %s for vehicle %s at %d km",
            record.category.key,
            record.vehicle_id,
            record.odometer,
        )
        return record

    # -------------------------------------------------------------------------
    # Odometer audit trail
    # -------------------------------------------------------------------------

    def append_odometer_change(self, change: OdometerChange) -> OdometerChange:
        data = self._load_vehicle_doc(change.vehicle_id)
        if data.get("odometerChanges") is None:
            data["odometerChanges"] = []
        data["odometerChanges"].append(change.to_dict())
        self._write(self.vehicle_path(change.vehicle_id), data)
        return change

    def odometer_changes(self, vehicle_id: str) -> List[OdometerChange]:
        data = self._load_vehicle_doc(vehicle_id)
        return [OdometerChange.from_dict(c) for c in data.get("odometerChanges") or []]

    # -------------------------------------------------------------------------
    # Intervals
    # -------------------------------------------------------------------------

    def fetch_intervals(self, user_id: str) -> IntervalSet:
        """The user's intervals, or the defaults when none were saved."""
        data = self._read(self.intervals_path(user_id))
        if not data:
            return IntervalSet()
        return IntervalSet(data)

    def save_intervals(self, user_id: str, intervals: IntervalSet) -> IntervalSet:
        self._write(self.intervals_path(user_id), intervals.to_dict())
        logger.info("Saved maintenance intervals for user %s", user_id)
        return intervals
