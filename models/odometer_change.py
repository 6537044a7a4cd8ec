"""OdometerChange dataclass for the odometer reduction audit trail."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


@dataclass(frozen=True)
class OdometerChange:
    """Audit entry written whenever a user lowers a vehicle's odometer."""

    vehicle_id: str
    user_id: str
    old_value: int
    new_value: int
    reason: str
    method: str = "manual"
    created_at: str = field(default_factory=_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "vehicleId": self.vehicle_id,
            "userId": self.user_id,
            "oldValue": self.old_value,
            "newValue": self.new_value,
            "reason": self.reason,
            "method": self.method,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, dct: Dict[str, Any]) -> "OdometerChange":
        return cls(
            vehicle_id=dct["vehicleId"],
            user_id=dct["userId"],
            old_value=dct["oldValue"],
            new_value=dct["newValue"],
            reason=dct["reason"],
            method=dct.get("method", "manual"),
            created_at=dct["createdAt"],
        )
