"""Alert dataclass for calculated maintenance status."""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .category import Category
from .status import Status


@dataclass(frozen=True)
class Alert:
    """Calculated due information for one category. Never persisted."""

    category: Category
    status: Status
    last_service_km: int = 0
    due_km: int = 0
    remaining_km: int = 0
    interval_km: Optional[int] = None
    usage_percent: float = 0.0
    last_service_date: Optional[str] = None

    @property
    def is_due(self) -> bool:
        return self.status in (Status.OVERDUE, Status.DUE_SOON)

    @property
    def has_record(self) -> bool:
        return self.status != Status.NO_RECORD

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category.key,
            "name": self.category.display_name,
            "status": self.status.label,
            "lastServiceKm": self.last_service_km,
            "dueKm": self.due_km,
            "remainingKm": self.remaining_km,
            "intervalKm": self.interval_km,
            "usagePercent": self.usage_percent,
            "lastServiceDate": self.last_service_date,
            "noRecord": not self.has_record,
        }
