"""Exceptions raised by the Battleship engine."""

from __future__ import annotations


class BattleshipError(Exception):
    """Base class for every engine error."""


class InvalidShipLengthError(BattleshipError, ValueError):
    """Ship length is negative, not an integer, or otherwise unplaceable."""

    def __init__(self, message: str, length: object = None) -> None:
        super().__init__(message)
        self.length = length


class PlacementError(BattleshipError, ValueError):
    """A ship cannot be placed where it was requested."""


class AttackError(BattleshipError, ValueError):
    """A shot cannot be resolved at the requested coordinate."""


class OutOfBoundsError(PlacementError, AttackError):
    """Coordinate lies outside the board."""

    def __init__(self, row: int, col: int) -> None:
        super().__init__(f"Coordinate ({row}, {col}) is out of bounds.")
        self.row = row
        self.col = col


class ShipTooLongError(PlacementError):
    """Ship would run off the edge of the board."""

    def __init__(self, row: int, col: int, length: int) -> None:
        super().__init__(f"Ship of length {length} at ({row}, {col}) does not fit on the board.")
        self.row = row
        self.col = col
        self.length = length


class OverlapError(PlacementError):
    """Ship would share a cell with an existing ship."""

    def __init__(self, row: int, col: int, message: str | None = None) -> None:
        super().__init__(message or f"Cell ({row}, {col}) is already occupied by another ship.")
        self.row = row
        self.col = col


class InvalidOrientationError(PlacementError):
    """Orientation is neither horizontal nor vertical."""

    def __init__(self, orientation: object) -> None:
        super().__init__(
            f"Orientation must be 'horizontal' or 'vertical', got {orientation!r}."
        )
        self.orientation = orientation


class FleetLayoutError(PlacementError):
    """A fleet layout is missing ships or lists a ship type twice."""


class AlreadyAttackedError(AttackError):
    """Coordinate has already been targeted."""

    def __init__(self, row: int, col: int) -> None:
        super().__init__(f"Cell ({row}, {col}) has already been attacked.")
        self.row = row
        self.col = col


class PlacementExhaustedError(BattleshipError, RuntimeError):
    """Random placement gave up after too many failed attempts."""

    def __init__(self, length: int, attempts: int) -> None:
        super().__init__(
            f"Could not place ship of length {length} after {attempts} attempts."
        )
        self.length = length
        self.attempts = attempts


class IllegalTurnError(BattleshipError, RuntimeError):
    """Move requested out of turn or after the game has finished."""
