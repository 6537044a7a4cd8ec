"""Parsing helpers that turn raw form/JSON/CLI values into domain values.

All helpers raise InvalidInput naming the offending field, so callers can
pass user input straight through.
"""

from datetime import date
from typing import Any, Optional

from dateutil.parser import isoparse

from .errors import InvalidInput

VEHICLE_TYPES = ("car", "motorcycle")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_odometer(value: Any, field: str = "odometer") -> int:
    """Parse a non-negative whole-number distance."""
    if _is_blank(value) or isinstance(value, bool):
        raise InvalidInput(f"{field} is required")
    if isinstance(value, str) and value.strip().isdecimal():
        value = int(value.strip())
    if isinstance(value, int):
        if value < 0:
            raise InvalidInput(f"{field} must not be negative")
        return value
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidInput(f"{field} must be a number, got {value!r}")
    if number != number or number in (float("inf"), float("-inf")):
        raise InvalidInput(f"{field} must be a finite number")
    if number < 0:
        raise InvalidInput(f"{field} must not be negative")
    if number != int(number):
        raise InvalidInput(f"{field} must be a whole number")
    return int(number)


def parse_interval(value: Any, field: str = "interval") -> int:
    """Parse a positive whole-number interval."""
    interval = parse_odometer(value, field)
    if interval == 0:
        raise InvalidInput(f"{field} must be positive")
    return interval


def parse_optional_interval(value: Any, field: str = "interval") -> Optional[int]:
    if _is_blank(value):
        return None
    return parse_interval(value, field)


def parse_cost(value: Any, field: str = "cost") -> Optional[float]:
    """Parse an optional non-negative amount."""
    if _is_blank(value):
        return None
    if isinstance(value, bool):
        raise InvalidInput(f"{field} must be a number")
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise InvalidInput(f"{field} must be a number, got {value!r}")
    if amount < 0:
        raise InvalidInput(f"{field} must not be negative")
    return round(amount, 2)


def parse_date(value: Any, field: str = "date") -> str:
    """Parse a date and return it in ISO YYYY-MM-DD form."""
    if isinstance(value, date):
        return value.isoformat()[:10]
    if _is_blank(value):
        raise InvalidInput(f"{field} is required")
    try:
        return isoparse(str(value).strip()).date().isoformat()
    except ValueError:
        raise InvalidInput(f"{field} must be an ISO date (YYYY-MM-DD), got {value!r}")


def parse_year(value: Any, field: str = "year") -> int:
    year = parse_odometer(value, field)
    if year < 1886 or year > date.today().year + 1:
        raise InvalidInput(f"{field} out of range: {year}")
    return year


def parse_vehicle_type(value: Any) -> str:
    if _is_blank(value):
        return "car"
    normalized = str(value).strip().lower()
    # Portuguese labels from the original forms
    normalized = {"carro": "car", "moto": "motorcycle"}.get(normalized, normalized)
    if normalized not in VEHICLE_TYPES:
        raise InvalidInput(f"type must be one of {', '.join(VEHICLE_TYPES)}")
    return normalized


def require_text(value: Any, field: str) -> str:
    if _is_blank(value) or not isinstance(value, str):
        raise InvalidInput(f"{field} is required")
    return value.strip()


def optional_text(value: Any) -> Optional[str]:
    if _is_blank(value):
        return None
    return str(value).strip()
