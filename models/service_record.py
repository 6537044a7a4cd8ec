"""ServiceRecord class for logged maintenance."""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from .category import Category


class ServiceRecord:
    """A record of maintenance performed. Append-only once stored."""

    def __init__(
            self,
            vehicle_id: str,
            category: Category,
            odometer: int,
            service_date: str,
            interval_override: Optional[int] = None,
            cost: Optional[float] = None,
            notes: Optional[str] = None,
            id: Optional[str] = None,
            created_at: Optional[str] = None,
            synced: bool = True,
    ):
        self.id = id or uuid.uuid4().hex
        self.vehicle_id = vehicle_id
        self.category = Category.from_key(category)
        self.odometer = odometer
        self.service_date = service_date
        self.interval_override = interval_override
        self.cost = cost
        self.notes = notes
        self.created_at = created_at or datetime.now(timezone.utc).isoformat(timespec="seconds")
        self.synced = synced

    @property
    def dedup_key(self) -> Tuple[str, str, int, str]:
        """Identity used by the store to reject duplicate submissions."""
        return (self.vehicle_id, self.category.key, self.odometer, self.service_date)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize, omitting None values for cleaner YAML."""
        d: Dict[str, Any] = {
            "id": self.id,
            "vehicleId": self.vehicle_id,
            "category": self.category.key,
            "odometer": self.odometer,
            "date": self.service_date,
        }
        if self.interval_override is not None:
            d["intervalKm"] = self.interval_override
        if self.cost is not None:
            d["cost"] = self.cost
        if self.notes is not None:
            d["notes"] = self.notes
        d["createdAt"] = self.created_at
        return d

    @classmethod
    def from_dict(cls, dct: Dict[str, Any], synced: bool = True) -> "ServiceRecord":
        return cls(
            vehicle_id=dct["vehicleId"],
            category=Category.from_key(dct["category"]),
            odometer=dct["odometer"],
            service_date=str(dct["date"]),
            interval_override=dct.get("intervalKm"),
            cost=dct.get("cost"),
            notes=dct.get("notes"),
            id=dct.get("id"),
            created_at=dct.get("createdAt"),
            synced=synced,
        )
