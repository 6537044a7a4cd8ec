"""
Vehicle maintenance tracking models.

This package provides the domain model and operations:
- Status: Alert urgency levels (OVERDUE, DUE_SOON, OK, NO_RECORD)
- Category: The eight tracked maintenance types and their defaults
- Vehicle: A user's vehicle and its odometer
- ServiceRecord: Logged maintenance
- IntervalSet: Per-user maintenance intervals
- Alert: Calculated status for one category
- OdometerChange: Audit entry for odometer reductions
- YamlStore: Record store over YAML documents
- SyncQueue: Retry queue for service records the store could not take
"""

from .status import Status
from .category import Category, DEFAULT_INTERVALS
from .errors import (
    MaintenanceError,
    InvalidInput,
    Unauthenticated,
    Unauthorized,
    NotFound,
    ConflictError,
    ValidationError,
    StoreError,
)
from .vehicle import Vehicle
from .service_record import ServiceRecord
from .intervals import IntervalSet
from .alert import Alert
from .odometer_change import OdometerChange
from .calculations import (
    calc_due_km,
    check_status,
    usage_percent,
    latest_records_by_category,
    calculate_alerts,
    apply_single_record,
    sort_alerts,
    alert_summary,
)
from .odometer import OdometerUpdate, update_odometer
from .store import YamlStore
from .sync_queue import SyncQueue, SyncResult, Reconciler, record_service, reconcile
from .maintenance import (
    register_vehicle,
    edit_vehicle,
    new_service_record,
    log_service,
    vehicle_alerts,
    record_alert,
    update_intervals,
)

__all__ = [
    "Status",
    "Category",
    "DEFAULT_INTERVALS",
    "MaintenanceError",
    "InvalidInput",
    "Unauthenticated",
    "Unauthorized",
    "NotFound",
    "ConflictError",
    "ValidationError",
    "StoreError",
    "Vehicle",
    "ServiceRecord",
    "IntervalSet",
    "Alert",
    "OdometerChange",
    "calc_due_km",
    "check_status",
    "usage_percent",
    "latest_records_by_category",
    "calculate_alerts",
    "apply_single_record",
    "sort_alerts",
    "alert_summary",
    "OdometerUpdate",
    "update_odometer",
    "YamlStore",
    "SyncQueue",
    "SyncResult",
    "Reconciler",
    "record_service",
    "reconcile",
    "register_vehicle",
    "edit_vehicle",
    "new_service_record",
    "log_service",
    "vehicle_alerts",
    "record_alert",
    "update_intervals",
]
