"""Vehicle class for the registered vehicle and its odometer."""

from typing import Any, Dict, Optional

PROFILE_FIELDS = ("vehicle_type", "make", "model", "year", "oil_type")


class Vehicle:
    """A user's vehicle. The odometer only moves through update_odometer()."""

    def __init__(
        self,
        id: str,
        owner_id: str,
        make: str,
        model: str,
        year: int,
        odometer: int = 0,
        vehicle_type: str = "car",
        oil_type: Optional[str] = None,
    ):
        self.id = id
        self.owner_id = owner_id
        self.vehicle_type = vehicle_type
        self.make = make
        self.model = model
        self.year = year
        self.odometer = odometer
        self.oil_type = oil_type

    @property
    def name(self) -> str:
        """Human-readable vehicle name."""
        return f"{self.year} {self.make} {self.model}"

    def is_owned_by(self, user_id: Optional[str]) -> bool:
        return user_id is not None and self.owner_id == user_id

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the camelCase document format."""
        d: Dict[str, Any] = {
            "id": self.id,
            "ownerId": self.owner_id,
            "type": self.vehicle_type,
            "make": self.make,
            "model": self.model,
            "year": self.year,
            "odometer": self.odometer,
        }
        if self.oil_type is not None:
            d["oilType"] = self.oil_type
        return d

    @classmethod
    def from_dict(cls, dct: Dict[str, Any]) -> "Vehicle":
        return cls(
            id=dct["id"],
            owner_id=dct["ownerId"],
            make=dct["make"],
            model=dct["model"],
            year=dct["year"],
            odometer=dct.get("odometer") or 0,
            vehicle_type=dct.get("type") or "car",
            oil_type=dct.get("oilType"),
        )
