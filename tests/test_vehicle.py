#!/usr/bin/env python3
"""Tests for Vehicle class."""

from models import Vehicle


class TestVehicle:
    """Tests for Vehicle class."""

    def test_name(self):
        vehicle = Vehicle("civic", "ana", "Honda", "Civic", 2019)
        assert vehicle.name == "2019 Honda Civic"

    def test_defaults(self):
        vehicle = Vehicle("civic", "ana", "Honda", "Civic", 2019)
        assert vehicle.odometer == 0
        assert vehicle.vehicle_type == "car"
        assert vehicle.oil_type is None

    def test_is_owned_by(self):
        vehicle = Vehicle("civic", "ana", "Honda", "Civic", 2019)
        assert vehicle.is_owned_by("ana")
        assert not vehicle.is_owned_by("bruno")
        assert not vehicle.is_owned_by(None)

    def test_dict_uses_camel_case(self):
        vehicle = Vehicle("cg", "ana", "Honda", "CG 160", 2022, 12000, "motorcycle", "10W-30")
        d = vehicle.to_dict()
        assert d["ownerId"] == "ana"
        assert d["type"] == "motorcycle"
        assert d["oilType"] == "10W-30"

    def test_from_dict(self):
        vehicle = Vehicle.from_dict(
            {"id": "cg", "ownerId": "ana", "make": "Honda", "model": "CG 160", "year": 2022, "odometer": 12000}
        )
        assert vehicle.odometer == 12000
        assert vehicle.vehicle_type == "car"
        assert vehicle.oil_type is None
