"""Odometer update guard with an audit trail for reductions."""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from .errors import StoreError, Unauthorized, ValidationError
from .odometer_change import OdometerChange
from .validation import parse_odometer
from .vehicle import Vehicle

logger = logging.getLogger(__name__)


@dataclass
class OdometerUpdate:
    """Outcome of an odometer update. change is None unless it was a reduction."""

    vehicle: Vehicle
    old_value: int
    change: Optional[OdometerChange] = None

    @property
    def is_reduction(self) -> bool:
        return self.change is not None


def build_odometer_change(
    vehicle: Vehicle, user_id: str, new_odometer: int, reason: Optional[str]
) -> Optional[OdometerChange]:
    """
    Audit entry required for moving vehicle to new_odometer, if any.

    Raises ValidationError for a reduction without a reason.
    """
    if new_odometer >= vehicle.odometer:
        return None
    if reason is None or not str(reason).strip():
        raise ValidationError("reason required to reduce the odometer")
    return OdometerChange(
        vehicle_id=vehicle.id,
        user_id=user_id,
        old_value=vehicle.odometer,
        new_value=new_odometer,
        reason=str(reason).strip(),
    )


def update_odometer(
    store,
    vehicle_id: str,
    user_id: Optional[str],
    new_odometer: Any,
    reason: Optional[str] = None,
) -> OdometerUpdate:
    """
    Validate and apply a new odometer reading.

    Order of checks: input, vehicle exists, ownership, reduction reason.
    The audit entry and the new reading are persisted in one store call; any
    store failure is re-raised so the caller never sees a half-applied update.
    """
    value = parse_odometer(new_odometer, "new odometer")
    vehicle = store.fetch_vehicle(vehicle_id)
    if not vehicle.is_owned_by(user_id):
        raise Unauthorized("You do not own this vehicle")

    old_value = vehicle.odometer
    change = build_odometer_change(vehicle, user_id, value, reason)

    try:
        updated = store.apply_odometer_update(vehicle_id, value, change)
    except StoreError:
        logger.error("Odometer update failed for vehicle %s (%d -> %d)", vehicle_id, old_value, value)
        raise

    if change is not None:
        logger.info(
            "Odometer reduced for vehicle %s: %d -> %d km (reason: %s)",
            vehicle_id,
            old_value,
            value,
            change.reason,
        )
    else:
        logger.info("Odometer updated for vehicle %s: %d -> %d km", vehicle_id, old_value, value)

    return OdometerUpdate(vehicle=updated, old_value=old_value, change=change)
