"""Ship domain model for the Battleship engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .errors import InvalidOrientationError, InvalidShipLengthError


@dataclass(frozen=True)
class Coordinate:
    """Immutable zero-based board coordinate."""

    row: int
    col: int

    def offset(self, orientation: Orientation, distance: int) -> Coordinate:
        """Return the coordinate ``distance`` cells further along ``orientation``."""
        if orientation is Orientation.HORIZONTAL:
            return Coordinate(self.row, self.col + distance)
        return Coordinate(self.row + distance, self.col)


class Orientation(Enum):
    """Allowed ship orientations."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"

    @classmethod
    def coerce(cls, value: Orientation | str) -> Orientation | None:
        """Return the orientation named exactly by ``value``, or ``None``.

        Only ``"horizontal"`` and ``"vertical"`` are recognised; case and
        surrounding whitespace are significant.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value)
            except ValueError:
                return None
        return None

    @classmethod
    def parse(cls, value: Orientation | str) -> Orientation:
        """Like :meth:`coerce` but raise for unrecognized values."""
        orientation = cls.coerce(value)
        if orientation is None:
            raise InvalidOrientationError(value)
        return orientation


class ShipType(Enum):
    """The canonical fleet, in placement order, with ship lengths."""

    CARRIER = ("carrier", 5)
    BATTLESHIP = ("battleship", 4)
    CRUISER = ("cruiser", 3)
    SUBMARINE = ("submarine", 3)
    DESTROYER = ("destroyer", 2)

    def __init__(self, label: str, length: int) -> None:
        self.label = label
        self.length = length

    @classmethod
    def from_name(cls, name: ShipType | str) -> ShipType:
        """Look a ship type up by its name, ignoring case."""
        if isinstance(name, cls):
            return name
        key = str(name).strip().upper()
        try:
            return cls[key]
        except KeyError:
            raise ValueError(f"Unknown ship type {name!r}.") from None


def validate_length(length: object) -> int:
    """Ensure a ship length is a non-negative ``int`` and return it."""
    # bool is an int subclass but never a meaningful length
    if isinstance(length, bool) or not isinstance(length, int):
        raise InvalidShipLengthError("Ship length must be an integer.", length)
    if length < 0:
        raise InvalidShipLengthError("Ship length cannot be negative.", length)
    return length


@dataclass
class Ship:
    """A single vessel tracked by length and number of hits taken."""

    length: int
    hit_count: int = field(default=0, init=False)
    sunk: bool = field(default=False, init=False)

    def __post_init__(self) -> None:
        validate_length(self.length)
        self.is_sunk()

    def hit(self) -> None:
        """Register one hit. Hits past ``length`` have no further effect."""
        self.hit_count += 1

    def is_sunk(self) -> bool:
        """Refresh and return the sunk flag."""
        self.sunk = self.hit_count >= self.length
        return self.sunk
