#!/usr/bin/env python3
"""Tests for the odometer update guard."""

import pytest

from models import (
    InvalidInput,
    NotFound,
    StoreError,
    Unauthorized,
    ValidationError,
    update_odometer,
)


class TestOdometerIncrease:
    """Increases apply directly."""

    def test_increase_needs_no_reason(self, store, civic):
        result = update_odometer(store, "civic", "ana", civic.odometer + 500)
        assert result.vehicle.odometer == 50000
        assert result.change is None
        assert result.is_reduction is False
        assert store.odometer_changes("civic") == []

    def test_increase_ignores_reason(self, store, civic):
        update_odometer(store, "civic", "ana", 50000, reason="whatever")
        assert store.odometer_changes("civic") == []

    def test_same_value_is_not_a_reduction(self, store, civic):
        result = update_odometer(store, "civic", "ana", civic.odometer)
        assert result.change is None

    def test_persisted(self, store, civic):
        update_odometer(store, "civic", "ana", "51000")
        assert store.fetch_vehicle("civic").odometer == 51000


class TestOdometerReduction:
    """Reductions need a reason and leave an audit entry."""

    @pytest.mark.parametrize("reason", [None, "", "   "])
    def test_reduction_without_reason_fails(self, store, civic, reason):
        with pytest.raises(ValidationError, match="reason required"):
            update_odometer(store, "civic", "ana", civic.odometer - 1, reason=reason)
        assert store.fetch_vehicle("civic").odometer == civic.odometer
        assert store.odometer_changes("civic") == []

    def test_reduction_with_reason_writes_one_audit_entry(self, store, civic):
        result = update_odometer(store, "civic", "ana", civic.odometer - 1, reason="  typo on last update ")
        changes = store.odometer_changes("civic")
        assert len(changes) == 1
        assert changes[0].old_value == civic.odometer
        assert changes[0].new_value == civic.odometer - 1
        assert changes[0].reason == "typo on last update"
        assert changes[0].method == "manual"
        assert changes[0].user_id == "ana"
        assert result.change == changes[0]
        assert store.fetch_vehicle("civic").odometer == civic.odometer - 1

    def test_reduction_to_zero(self, store, civic):
        update_odometer(store, "civic", "ana", 0, reason="cluster replaced")
        assert store.fetch_vehicle("civic").odometer == 0


class TestOdometerGuardFailures:
    """Input, lookup and ownership failures."""

    def test_other_user_unauthorized(self, store, civic):
        with pytest.raises(Unauthorized):
            update_odometer(store, "civic", "bruno", 60000)
        assert store.fetch_vehicle("civic").odometer == civic.odometer

    def test_missing_user_unauthorized(self, store, civic):
        with pytest.raises(Unauthorized):
            update_odometer(store, "civic", None, 60000)

    @pytest.mark.parametrize("value", [None, "", "abc", -5])
    def test_invalid_odometer(self, store, civic, value):
        with pytest.raises(InvalidInput):
            update_odometer(store, "civic", "ana", value)

    def test_unknown_vehicle(self, store):
        with pytest.raises(NotFound):
            update_odometer(store, "ghost", "ana", 100)


class TestOdometerAtomicity:
    """A failed write leaves neither the audit entry nor the new reading."""

    def test_store_failure_surfaces_and_leaves_nothing(self, store, civic, monkeypatch):
        def broken_write(path, data):
            raise StoreError("disk full")

        monkeypatch.setattr(store, "_write", broken_write)
        with pytest.raises(StoreError):
            update_odometer(store, "civic", "ana", 100, reason="swap")
        monkeypatch.undo()

        assert store.fetch_vehicle("civic").odometer == civic.odometer
        assert store.odometer_changes("civic") == []

    def test_rename_failure_cleans_up(self, store, civic, monkeypatch):
        def broken_replace(src, dst):
            raise OSError("read-only file system")

        monkeypatch.setattr("models.store.os.replace", broken_replace)
        with pytest.raises(StoreError):
            update_odometer(store, "civic", "ana", 100, reason="swap")
        monkeypatch.undo()

        assert store.fetch_vehicle("civic").odometer == civic.odometer
        assert store.odometer_changes("civic") == []
        assert list(store.vehicles_dir.glob("*.tmp")) == []
