"""Maintenance categories and their default intervals."""

from enum import Enum

from .errors import InvalidInput


class Category(Enum):
    """The fixed set of tracked maintenance types, keyed by store value."""

    OIL = "oil"
    BRAKE_PAD = "brake_pad"
    FILTER = "filter"
    TIRE = "tire"
    INSPECTION = "inspection"
    COOLANT = "coolant"
    ACCESSORY_BELT = "accessory_belt"
    TIMING_CHAIN = "timing_chain"

    @property
    def key(self) -> str:
        return self.value

    @property
    def display_name(self) -> str:
        return DISPLAY_NAMES[self]

    @property
    def default_interval(self) -> int:
        return DEFAULT_INTERVALS[self]

    @classmethod
    def from_key(cls, key) -> "Category":
        """Resolve a store key or enum name, case-insensitively."""
        if isinstance(key, Category):
            return key
        if not key or not isinstance(key, str):
            raise InvalidInput("category is required")
        normalized = key.strip().lower().replace("-", "_").replace(" ", "_")
        for category in cls:
            if category.value == normalized:
                return category
        raise InvalidInput(f"Unknown category '{key}'")


DISPLAY_NAMES = {
    Category.OIL: "Troca de Óleo",
    Category.BRAKE_PAD: "Pastilhas de Freio",
    Category.FILTER: "Filtros",
    Category.TIRE: "Pneus",
    Category.INSPECTION: "Revisão Geral",
    Category.COOLANT: "Sistema de Arrefecimento",
    Category.ACCESSORY_BELT: "Correia de Acessórios",
    Category.TIMING_CHAIN: "Corrente de Comando",
}

# Distances in km
DEFAULT_INTERVALS = {
    Category.OIL: 10000,
    Category.BRAKE_PAD: 20000,
    Category.FILTER: 10000,
    Category.TIRE: 40000,
    Category.INSPECTION: 10000,
    Category.COOLANT: 20000,
    Category.ACCESSORY_BELT: 60000,
    Category.TIMING_CHAIN: 100000,
}
