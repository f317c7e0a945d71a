"""Validation of a human player's fleet layout before it reaches the board.

Placement requests come from an input form: one row/column/orientation per
ship type. Before any of them is handed to :meth:`Board.place_ship`, the whole
layout is checked for completeness, bounds and reciprocal overlap so the
player can be told which ships collide. The board re-validates each ship as
it is placed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

from .errors import (
    FleetLayoutError,
    InvalidOrientationError,
    OutOfBoundsError,
    OverlapError,
    ShipTooLongError,
)
from .ship import Coordinate, Orientation, ShipType

logger = logging.getLogger(__name__)

LAYOUT_SIZE = 10


@dataclass(frozen=True)
class ShipPlacement:
    """Where the player wants one ship: zero-based top/left anchor plus orientation."""

    ship_type: ShipType
    row: int
    col: int
    orientation: Orientation

    def __post_init__(self) -> None:
        # frozen dataclass, so normalise through object.__setattr__
        object.__setattr__(self, "ship_type", ShipType.from_name(self.ship_type))
        object.__setattr__(self, "orientation", Orientation.parse(self.orientation))


def parse_placement(
    ship_type: ShipType | str,
    row: int | str,
    col: int | str,
    orientation: Orientation | str = Orientation.HORIZONTAL,
    one_based: bool = True,
) -> ShipPlacement:
    """Build a placement from raw form values.

    Rows and columns are shown to players starting at 1, so by default one is
    subtracted from each. Orientation text is matched case-insensitively.
    """
    try:
        row_index, col_index = int(row), int(col)
    except (TypeError, ValueError) as exc:
        raise FleetLayoutError(f"Row and column for {ship_type} must be numbers.") from exc
    if one_based:
        row_index -= 1
        col_index -= 1
    if isinstance(orientation, str):
        orientation = orientation.strip().lower()
    return ShipPlacement(ship_type, row_index, col_index, orientation)


def ship_cells(
    row: int,
    col: int,
    length: int,
    orientation: Orientation | str,
    rows: int = LAYOUT_SIZE,
    cols: int = LAYOUT_SIZE,
) -> list[Coordinate]:
    """Return the cells a ship anchored at ``(row, col)`` covers, anchor first.

    Checks run in a fixed order: anchor bounds, orientation, then whether the
    ship fits before the edge. Occupancy is left to the caller.
    """
    if not (0 <= row < rows and 0 <= col < cols):
        raise OutOfBoundsError(row, col)
    resolved = Orientation.coerce(orientation)
    if resolved is None:
        raise InvalidOrientationError(orientation)
    if resolved is Orientation.HORIZONTAL:
        fits = col + length <= cols
    else:
        fits = row + length <= rows
    if not fits:
        raise ShipTooLongError(row, col, length)
    anchor = Coordinate(row, col)
    return [anchor.offset(resolved, step) for step in range(length)]


def placement_coordinates(
    placement: ShipPlacement,
    rows: int = LAYOUT_SIZE,
    cols: int = LAYOUT_SIZE,
) -> list[Coordinate]:
    """Return the cells a placement covers, anchor first."""
    return ship_cells(
        placement.row,
        placement.col,
        placement.ship_type.length,
        placement.orientation,
        rows,
        cols,
    )


def validate_fleet_layout(
    placements: Sequence[ShipPlacement],
    rows: int = LAYOUT_SIZE,
    cols: int = LAYOUT_SIZE,
    fleet: Iterable[ShipType] = ShipType,
) -> dict[ShipType, list[Coordinate]]:
    """Check a complete layout and return the cells covered by each ship."""
    expected = list(fleet)
    seen = [placement.ship_type for placement in placements]
    duplicates = sorted({ship.label for ship in seen if seen.count(ship) > 1})
    if duplicates:
        raise FleetLayoutError(f"Ship types placed more than once: {', '.join(duplicates)}.")
    missing = [ship.label for ship in expected if ship not in seen]
    if missing:
        raise FleetLayoutError(f"Missing placements for: {', '.join(missing)}.")
    extra = [ship.label for ship in seen if ship not in expected]
    if extra:
        raise FleetLayoutError(f"Ship types not in this fleet: {', '.join(extra)}.")

    covered: dict[ShipType, list[Coordinate]] = {}
    owners: dict[Coordinate, ShipType] = {}
    for placement in placements:
        cells = placement_coordinates(placement, rows, cols)
        for coord in cells:
            other = owners.get(coord)
            if other is not None:
                logger.info(
                    "fleet_layout_overlap",
                    extra={
                        "ship_type": placement.ship_type.name,
                        "other_ship_type": other.name,
                        "row": coord.row,
                        "col": coord.col,
                    },
                )
                raise OverlapError(
                    coord.row,
                    coord.col,
                    f"{placement.ship_type.label.title()} overlaps {other.label} "
                    f"at ({coord.row}, {coord.col}).",
                )
            owners[coord] = placement.ship_type
        covered[placement.ship_type] = cells
    return covered
