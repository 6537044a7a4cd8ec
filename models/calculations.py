"""Alert calculations: due points, status and per-category alerts.

Everything here is pure: no store access, no clock. The store and request
handlers fetch the inputs and call in.
"""

from typing import Dict, Iterable, List, Mapping, Optional

from .alert import Alert
from .category import Category
from .intervals import IntervalSet
from .service_record import ServiceRecord
from .status import Status

DEFAULT_DUE_SOON_RATIO = 0.1


def calc_due_km(last_km: int, interval: int) -> int:
    """Calculate next due odometer reading: last service + interval."""
    return last_km + interval


def check_status(current: float, due: float, soon_threshold: float) -> Status:
    """Determine status by comparing current value to due threshold."""
    if current >= due:
        return Status.OVERDUE
    if current >= due - soon_threshold:
        return Status.DUE_SOON
    return Status.OK


def usage_percent(current: int, last: int, interval: int) -> float:
    """Share of the interval already driven, clamped to 0-100."""
    if interval <= 0:
        return 0.0
    driven = current - last
    return round(min(100.0, max(0.0, driven / interval * 100)), 1)


def latest_records_by_category(
    records: Iterable[ServiceRecord],
) -> Dict[Category, ServiceRecord]:
    """
    Pick the most recent record per category.

    Most recent means highest odometer at service, not latest date. On equal
    odometers the first record seen wins.
    """
    latest: Dict[Category, ServiceRecord] = {}
    for record in records:
        existing = latest.get(record.category)
        if existing is None or record.odometer > existing.odometer:
            latest[record.category] = record
    return latest


def alert_for_record(
    category: Category,
    record: Optional[ServiceRecord],
    current_odometer: int,
    interval: int,
    due_soon_ratio: float = DEFAULT_DUE_SOON_RATIO,
) -> Alert:
    """
    Calculate the alert for one category.

    - No record: NO_RECORD placeholder with zeroed distances
    - Record: due at record odometer + (record override or configured interval)
    """
    if record is None:
        return Alert(category=category, status=Status.NO_RECORD)

    interval_used = record.interval_override or interval
    due_km = calc_due_km(record.odometer, interval_used)
    status = check_status(current_odometer, due_km, interval_used * due_soon_ratio)

    return Alert(
        category=category,
        status=status,
        last_service_km=record.odometer,
        due_km=due_km,
        remaining_km=due_km - current_odometer,
        interval_km=interval_used,
        usage_percent=usage_percent(current_odometer, record.odometer, interval_used),
        last_service_date=record.service_date,
    )


def calculate_alerts(
    current_odometer: int,
    intervals: IntervalSet,
    last_records: Mapping[Category, ServiceRecord],
    due_soon_ratio: float = DEFAULT_DUE_SOON_RATIO,
) -> List[Alert]:
    """Calculate one alert per category, in category order."""
    return [
        alert_for_record(
            category,
            last_records.get(category),
            current_odometer,
            intervals[category],
            due_soon_ratio,
        )
        for category in Category
    ]


def apply_single_record(
    record: ServiceRecord,
    current_odometer: int,
    intervals: IntervalSet,
    due_soon_ratio: float = DEFAULT_DUE_SOON_RATIO,
) -> Alert:
    """Alert for a freshly logged record, used to refresh a single card."""
    return alert_for_record(
        record.category,
        record,
        current_odometer,
        intervals[record.category],
        due_soon_ratio,
    )


def sort_alerts(alerts: Iterable[Alert]) -> List[Alert]:
    """Sort by urgency (OVERDUE first), then by least remaining distance."""
    return sorted(alerts, key=lambda a: (a.status.value, a.remaining_km))


def alert_summary(alerts: Iterable[Alert]) -> Dict[str, int]:
    """Count alerts per status label."""
    counts = {status.label: 0 for status in Status}
    for alert in alerts:
        counts[alert.status.label] += 1
    return counts
