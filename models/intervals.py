"""IntervalSet class for per-user maintenance intervals."""

from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

from .category import Category, DEFAULT_INTERVALS
from .validation import parse_interval


class IntervalSet:
    """Distance interval per category. Unset categories use the defaults."""

    def __init__(self, intervals: Optional[Mapping[Any, Any]] = None):
        self._intervals: Dict[Category, int] = dict(DEFAULT_INTERVALS)
        for key, value in (intervals or {}).items():
            category = Category.from_key(key)
            self._intervals[category] = parse_interval(value, f"interval for {category.key}")

    def __getitem__(self, category) -> int:
        return self._intervals[Category.from_key(category)]

    def __iter__(self) -> Iterator[Tuple[Category, int]]:
        return ((c, self._intervals[c]) for c in Category)

    def __eq__(self, other) -> bool:
        return isinstance(other, IntervalSet) and self._intervals == other._intervals

    def with_updates(self, updates: Mapping[Any, Any]) -> "IntervalSet":
        """Return a new set with the given categories replaced."""
        merged: Dict[Any, Any] = {c.key: v for c, v in self}
        for key, value in updates.items():
            merged[Category.from_key(key).key] = value
        return IntervalSet(merged)

    def is_default(self, category) -> bool:
        category = Category.from_key(category)
        return self._intervals[category] == category.default_interval

    def to_dict(self) -> Dict[str, int]:
        return {c.key: v for c, v in self}
