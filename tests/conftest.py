"""Shared fixtures: an on-disk store with one registered vehicle."""

import pytest

from models import Vehicle, YamlStore


@pytest.fixture
def store(tmp_path):
    return YamlStore(tmp_path / "data")


@pytest.fixture
def civic(store):
    """A car owned by 'ana' at 49,500 km."""
    return store.create_vehicle(
        Vehicle(
            id="civic",
            owner_id="ana",
            make="Honda",
            model="Civic",
            year=2019,
            odometer=49500,
            oil_type="5W-30",
        )
    )
