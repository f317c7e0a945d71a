"""Tests for Ship domain logic."""

import pytest

from seabattle.engine.errors import InvalidOrientationError, InvalidShipLengthError
from seabattle.engine.ship import Coordinate, Orientation, Ship, ShipType


def test_zero_length_ship_is_already_sunk() -> None:
    assert Ship(0).is_sunk() is True


def test_unhit_ship_is_afloat() -> None:
    ship = Ship(3)
    assert ship.hit_count == 0
    assert ship.is_sunk() is False


def test_ship_sinks_after_length_hits_and_stays_sunk() -> None:
    ship = Ship(4)
    for hits in range(1, 5):
        ship.hit()
        assert ship.is_sunk() is (hits == 4)
    ship.hit()
    assert ship.hit_count == 5
    assert ship.is_sunk() is True
    assert ship.sunk is True


@pytest.mark.parametrize("length", [-1, -10])
def test_negative_length_rejected(length: int) -> None:
    with pytest.raises(InvalidShipLengthError):
        Ship(length)


@pytest.mark.parametrize("length", ["3", 2.5, 3.0, None, True])
def test_non_integer_length_rejected(length: object) -> None:
    with pytest.raises(InvalidShipLengthError) as info:
        Ship(length)  # type: ignore[arg-type]
    assert info.value.length == length


def test_catalog_lengths() -> None:
    assert [(ship.label, ship.length) for ship in ShipType] == [
        ("carrier", 5),
        ("battleship", 4),
        ("cruiser", 3),
        ("submarine", 3),
        ("destroyer", 2),
    ]
    assert ShipType.from_name("Submarine") is ShipType.SUBMARINE
    with pytest.raises(ValueError):
        ShipType.from_name("rowboat")


def test_orientation_parsing() -> None:
    assert Orientation.parse("horizontal") is Orientation.HORIZONTAL
    assert Orientation.parse(Orientation.VERTICAL) is Orientation.VERTICAL
    assert Orientation.coerce("diagonal") is None
    assert Orientation.coerce("Horizontal") is None
    with pytest.raises(InvalidOrientationError):
        Orientation.parse("diagonal")


def test_coordinate_offset() -> None:
    start = Coordinate(2, 3)
    assert start.offset(Orientation.HORIZONTAL, 2) == Coordinate(2, 5)
    assert start.offset(Orientation.VERTICAL, 2) == Coordinate(4, 3)
