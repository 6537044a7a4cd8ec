"""Status enum for maintenance urgency levels."""

from enum import Enum


class Status(Enum):
    """Alert status categories. Lower value = more urgent."""

    OVERDUE = 1
    DUE_SOON = 2
    OK = 3
    NO_RECORD = 4  # No service logged yet for the category

    @property
    def label(self) -> str:
        """Wire label used by the JSON API and the CLI."""
        return self.name.lower().replace("_", "-")

    @classmethod
    def from_label(cls, label: str) -> "Status":
        return cls[label.strip().upper().replace("-", "_")]
