"""Request-level operations shared by the CLI and the web app.

These take raw user input, validate it, check ownership, and call the store
and the pure calculations.
"""

from typing import Any, List, Mapping, Optional

from .alert import Alert
from .calculations import DEFAULT_DUE_SOON_RATIO, apply_single_record, calculate_alerts
from .category import Category
from .errors import InvalidInput, Unauthorized
from .intervals import IntervalSet
from .service_record import ServiceRecord
from .sync_queue import SyncQueue, record_service
from .validation import (
    optional_text,
    parse_cost,
    parse_date,
    parse_odometer,
    parse_optional_interval,
    parse_vehicle_type,
    parse_year,
    require_text,
)
from .vehicle import Vehicle


def owned_vehicle(store, vehicle_id: str, user_id: Optional[str]) -> Vehicle:
    """Fetch a vehicle, raising Unauthorized unless user_id owns it."""
    if not vehicle_id:
        raise InvalidInput("vehicle_id is required")
    vehicle = store.fetch_vehicle(vehicle_id)
    if not vehicle.is_owned_by(user_id):
        raise Unauthorized("You do not own this vehicle")
    return vehicle


def register_vehicle(
    store,
    user_id: str,
    vehicle_id: str,
    make: Any,
    model: Any,
    year: Any,
    odometer: Any = 0,
    vehicle_type: Any = None,
    oil_type: Any = None,
) -> Vehicle:
    vehicle = Vehicle(
        id=require_text(vehicle_id, "vehicle id"),
        owner_id=require_text(user_id, "user id"),
        make=require_text(make, "make"),
        model=require_text(model, "model"),
        year=parse_year(year),
        odometer=parse_odometer(odometer if odometer is not None else 0),
        vehicle_type=parse_vehicle_type(vehicle_type),
        oil_type=optional_text(oil_type),
    )
    return store.create_vehicle(vehicle)


def edit_vehicle(store, user_id: str, vehicle_id: str, **fields: Any) -> Vehicle:
    """Edit profile fields; None means unchanged."""
    owned_vehicle(store, vehicle_id, user_id)
    parsers = {
        "vehicle_type": parse_vehicle_type,
        "make": lambda v: require_text(v, "make"),
        "model": lambda v: require_text(v, "model"),
        "year": parse_year,
        "oil_type": optional_text,
    }
    changes = {}
    for name, value in fields.items():
        if name not in parsers:
            raise InvalidInput(f"Not editable: {name}")
        if value is not None:
            changes[name] = parsers[name](value)
    return store.update_vehicle_profile(vehicle_id, **changes)


def new_service_record(
    vehicle_id: str,
    category: Any,
    odometer: Any,
    service_date: Any,
    interval: Any = None,
    cost: Any = None,
    notes: Any = None,
) -> ServiceRecord:
    """Build a record from raw input."""
    return ServiceRecord(
        vehicle_id=vehicle_id,
        category=Category.from_key(category),
        odometer=parse_odometer(odometer, "odometer_at_service"),
        service_date=parse_date(service_date, "service_date"),
        interval_override=parse_optional_interval(interval, "interval_used_km"),
        cost=parse_cost(cost),
        notes=optional_text(notes),
    )


def log_service(
    store,
    user_id: Optional[str],
    record: ServiceRecord,
    queue: Optional[SyncQueue] = None,
) -> ServiceRecord:
    """Store a service record for a vehicle the user owns."""
    owned_vehicle(store, record.vehicle_id, user_id)
    return record_service(store, record, queue)


def vehicle_alerts(
    store,
    vehicle_id: str,
    user_id: Optional[str],
    due_soon_ratio: float = DEFAULT_DUE_SOON_RATIO,
) -> List[Alert]:
    """Alerts for every category of a vehicle, using its owner's intervals."""
    vehicle = owned_vehicle(store, vehicle_id, user_id)
    intervals = store.fetch_intervals(vehicle.owner_id)
    last_records = store.last_records_by_category(vehicle_id)
    return calculate_alerts(vehicle.odometer, intervals, last_records, due_soon_ratio)


def record_alert(
    store,
    record: ServiceRecord,
    due_soon_ratio: float = DEFAULT_DUE_SOON_RATIO,
) -> Alert:
    """
    Card refresh for a freshly logged record's category.

    A back-logged service below the stored maximum does not move the due
    point; the alert follows the highest-odometer record of the category.
    """
    vehicle = store.fetch_vehicle(record.vehicle_id)
    intervals = store.fetch_intervals(vehicle.owner_id)
    latest = store.last_records_by_category(record.vehicle_id).get(record.category)
    if latest is None or latest.odometer < record.odometer:
        latest = record
    return apply_single_record(latest, vehicle.odometer, intervals, due_soon_ratio)


def update_intervals(store, user_id: str, updates: Mapping[Any, Any]) -> IntervalSet:
    intervals = store.fetch_intervals(require_text(user_id, "user id"))
    return store.save_intervals(user_id, intervals.with_updates(updates))
