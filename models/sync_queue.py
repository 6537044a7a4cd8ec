"""Write-through service recording with a durable retry queue.

Service records are written straight to the store. When the store is
unavailable and a queue is configured, the record is parked in a YAML queue
file instead, and a reconciler delivers it later. Queue depth is always
visible to callers.
"""

import logging
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .errors import ConflictError, StoreError
from .store import dump_yaml_atomic
from .service_record import ServiceRecord

logger = logging.getLogger(__name__)


@dataclass
class QueueEntry:
    """A service record waiting for delivery."""

    id: str
    record: ServiceRecord
    enqueued_at: str
    attempts: int = 0
    last_error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "id": self.id,
            "enqueuedAt": self.enqueued_at,
            "attempts": self.attempts,
            "record": self.record.to_dict(),
        }
        if self.last_error is not None:
            d["lastError"] = self.last_error
        return d

    @classmethod
    def from_dict(cls, dct: Dict[str, Any]) -> "QueueEntry":
        return cls(
            id=dct["id"],
            record=ServiceRecord.from_dict(dct["record"], synced=False),
            enqueued_at=dct["enqueuedAt"],
            attempts=dct.get("attempts", 0),
            last_error=dct.get("lastError"),
        )


@dataclass
class SyncResult:
    """Outcome of one reconciliation pass."""

    delivered: int = 0
    failed: int = 0
    remaining: int = 0


class SyncQueue:
    """Durable FIFO of unsynced service records, kept in a YAML file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _load(self) -> List[QueueEntry]:
        try:
            with open(self.path, "r", encoding="utf-8") as fp:
                data = yaml.load(fp, Loader=yaml.SafeLoader) or []
        except FileNotFoundError:
            return []
        except (OSError, yaml.YAMLError) as e:
            raise StoreError(f"Could not read sync queue: {e}") from e
        return [QueueEntry.from_dict(d) for d in data]

    def _save(self, entries: List[QueueEntry]) -> None:
        try:
            dump_yaml_atomic(self.path, [e.to_dict() for e in entries])
        except (OSError, yaml.YAMLError) as e:
            raise StoreError(f"Could not write sync queue: {e}") from e

    def enqueue(self, record: ServiceRecord, error: Optional[str] = None) -> QueueEntry:
        with self._lock:
            entries = self._load()
            record.synced = False
            entry = QueueEntry(
                id=uuid.uuid4().hex,
                record=record,
                enqueued_at=datetime.now(timezone.utc).isoformat(timespec="seconds"),
                last_error=error,
            )
            entries.append(entry)
            self._save(entries)
        logger.warning(
            "Queued %s record for vehicle %s (queue depth %d)",
            record.category.key,
            record.vehicle_id,
            len(entries),
        )
        return entry

    def pending(self) -> List[QueueEntry]:
        with self._lock:
            return self._load()

    @property
    def depth(self) -> int:
        return len(self.pending())

    def mark_synced(self, entry_id: str) -> None:
        """Drop a delivered entry."""
        with self._lock:
            entries = [e for e in self._load() if e.id != entry_id]
            self._save(entries)

    def record_failure(self, entry_id: str, error: str) -> None:
        with self._lock:
            entries = self._load()
            for entry in entries:
                if entry.id == entry_id:
                    entry.attempts += 1
                    entry.last_error = error
            self._save(entries)


def record_service(
    store, record: ServiceRecord, queue: Optional[SyncQueue] = None
) -> ServiceRecord:
    """
    Write a record through to the store.

    On StoreError the record is queued when a queue is given (and returned
    with synced=False), otherwise the error propagates. ConflictError always
    propagates.
    """
    try:
        return store.append_service_record(record)
    except StoreError as e:
        if queue is None:
            raise
        queue.enqueue(record, error=e.message)
        return record


def reconcile(store, queue: SyncQueue) -> SyncResult:
    """
    Deliver queued records in order.

    Records the store already holds (ConflictError) count as delivered.
    Records hitting StoreError stay queued for the next pass.
    """
    result = SyncResult()
    for entry in queue.pending():
        try:
            store.append_service_record(entry.record)
        except ConflictError:
            logger.info("Queued record %s already stored, dropping", entry.record.id)
        except StoreError as e:
            queue.record_failure(entry.id, e.message)
            result.failed += 1
            continue
        queue.mark_synced(entry.id)
        result.delivered += 1
    result.remaining = queue.depth
    if result.delivered or result.failed:
        logger.info(
            "Sync pass: %d delivered, %d failed, %d remaining",
            result.delivered,
            result.failed,
            result.remaining,
        )
    return result


class Reconciler:
    """Runs reconcile() periodically on a background scheduler."""

    def __init__(self, store, queue: SyncQueue, interval_seconds: float = 60):
        self.store = store
        self.queue = queue
        self.interval_seconds = interval_seconds
        self.scheduler = BackgroundScheduler()
        self.last_result: Optional[SyncResult] = None

    def run_once(self) -> SyncResult:
        self.last_result = reconcile(self.store, self.queue)
        return self.last_result

    def _job(self) -> None:
        try:
            self.run_once()
        except StoreError as e:
            logger.error("Sync pass aborted: %s", e.message)

    def start(self) -> None:
        self.scheduler.add_job(
            self._job,
            IntervalTrigger(seconds=self.interval_seconds),
            id="sync_queue",
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        self.scheduler.start()
        logger.info("Sync reconciler started (every %ss)", self.interval_seconds)

    def shutdown(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)

    @property
    def running(self) -> bool:
        return self.scheduler.running
