#!/usr/bin/env python3
"""Tests for write-through recording and the retry queue."""

import pytest

from models import (
    Category,
    ConflictError,
    Reconciler,
    ServiceRecord,
    StoreError,
    SyncQueue,
    reconcile,
    record_service,
)


class FlakyStore:
    """Wraps a store; append_service_record fails while offline."""

    def __init__(self, store):
        self.store = store
        self.online = True

    def append_service_record(self, record):
        if not self.online:
            raise StoreError("connection refused")
        return self.store.append_service_record(record)

    def __getattr__(self, name):
        return getattr(self.store, name)


@pytest.fixture
def queue(tmp_path):
    return SyncQueue(tmp_path / "data" / "sync-queue.yaml")


@pytest.fixture
def flaky(store, civic):
    return FlakyStore(store)


def oil(km=40000, day="2025-01-15"):
    return ServiceRecord("civic", Category.OIL, km, day)


class TestSyncQueue:
    """Tests for the durable queue."""

    def test_empty(self, queue):
        assert queue.depth == 0
        assert queue.pending() == []

    def test_enqueue_is_durable(self, queue, tmp_path):
        queue.enqueue(oil(), error="offline")
        reopened = SyncQueue(queue.path)
        entries = reopened.pending()
        assert len(entries) == 1
        assert entries[0].record.odometer == 40000
        assert entries[0].record.synced is False
        assert entries[0].last_error == "offline"

    def test_fifo_order(self, queue):
        queue.enqueue(oil(40000))
        queue.enqueue(oil(45000))
        assert [e.record.odometer for e in queue.pending()] == [40000, 45000]

    def test_mark_synced_drops_entry(self, queue):
        entry = queue.enqueue(oil())
        queue.mark_synced(entry.id)
        assert queue.depth == 0

    def test_record_failure_counts_attempts(self, queue):
        entry = queue.enqueue(oil())
        queue.record_failure(entry.id, "timeout")
        queue.record_failure(entry.id, "timeout")
        assert queue.pending()[0].attempts == 2

    def test_failed_write_leaves_queue_intact(self, queue, monkeypatch):
        queue.enqueue(oil(40000))

        def broken_replace(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr("models.store.os.replace", broken_replace)
        with pytest.raises(StoreError):
            queue.enqueue(oil(45000))
        monkeypatch.undo()

        assert [e.record.odometer for e in queue.pending()] == [40000]
        assert list(queue.path.parent.glob("*.tmp")) == []

    def test_corrupt_file(self, queue):
        queue.path.parent.mkdir(parents=True, exist_ok=True)
        queue.path.write_text("- [unclosed")
        with pytest.raises(StoreError):
            queue.pending()


class TestRecordService:
    """Tests for write-through recording."""

    def test_online_writes_through(self, flaky, queue):
        saved = record_service(flaky, oil(), queue)
        assert saved.synced is True
        assert queue.depth == 0
        assert len(flaky.service_records("civic")) == 1

    def test_offline_without_queue_raises(self, flaky):
        flaky.online = False
        with pytest.raises(StoreError):
            record_service(flaky, oil())

    def test_offline_with_queue_parks_record(self, flaky, queue):
        flaky.online = False
        saved = record_service(flaky, oil(), queue)
        assert saved.synced is False
        assert queue.depth == 1
        assert flaky.service_records("civic") == []

    def test_conflict_is_never_queued(self, flaky, queue):
        record_service(flaky, oil(), queue)
        with pytest.raises(ConflictError):
            record_service(flaky, oil(), queue)
        assert queue.depth == 0


class TestReconcile:
    """Tests for delivering queued records."""

    def test_delivers_and_empties_queue(self, flaky, queue):
        flaky.online = False
        record_service(flaky, oil(40000), queue)
        record_service(flaky, oil(45000), queue)

        flaky.online = True
        result = reconcile(flaky, queue)
        assert (result.delivered, result.failed, result.remaining) == (2, 0, 0)
        assert [r.odometer for r in flaky.service_records("civic")] == [45000, 40000]

    def test_still_offline_keeps_entries(self, flaky, queue):
        flaky.online = False
        record_service(flaky, oil(), queue)
        result = reconcile(flaky, queue)
        assert (result.delivered, result.failed, result.remaining) == (0, 1, 1)
        assert queue.pending()[0].attempts == 1

    def test_already_stored_counts_as_delivered(self, flaky, queue):
        flaky.store.append_service_record(oil())
        queue.enqueue(oil())
        result = reconcile(flaky, queue)
        assert result.delivered == 1
        assert result.remaining == 0
        assert len(flaky.service_records("civic")) == 1

    def test_empty_queue(self, flaky, queue):
        result = reconcile(flaky, queue)
        assert (result.delivered, result.failed, result.remaining) == (0, 0, 0)


class TestReconciler:
    """Tests for the background reconciler."""

    def test_run_once_records_last_result(self, flaky, queue):
        flaky.online = False
        record_service(flaky, oil(), queue)
        flaky.online = True
        reconciler = Reconciler(flaky, queue, interval_seconds=3600)
        result = reconciler.run_once()
        assert result.delivered == 1
        assert reconciler.last_result is result

    def test_start_and_shutdown(self, flaky, queue):
        reconciler = Reconciler(flaky, queue, interval_seconds=3600)
        reconciler.start()
        try:
            assert reconciler.running
            assert reconciler.scheduler.get_job("sync_queue") is not None
        finally:
            reconciler.shutdown()
