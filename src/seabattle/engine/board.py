"""Single-player board management for the Battleship engine."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from seabattle.telemetry import get_meter, get_tracer

from .errors import (
    AlreadyAttackedError,
    InvalidShipLengthError,
    OutOfBoundsError,
    OverlapError,
    PlacementError,
    PlacementExhaustedError,
    ShipTooLongError,
)
from .layout import ShipPlacement, ship_cells, validate_fleet_layout
from .ship import Coordinate, Orientation, Ship, ShipType, validate_length

logger = logging.getLogger(__name__)
tracer = get_tracer("seabattle.engine.board")
meter = get_meter("seabattle.engine.board")

BOARD_SIZE = 10
DEFAULT_MAX_PLACEMENT_ATTEMPTS = 5000

PLACEMENT_COUNTER = meter.create_counter(
    "seabattle_engine_ship_placements",
    unit="1",
    description="Number of attempted ship placements",
)

ATTACK_COUNTER = meter.create_counter(
    "seabattle_engine_attacks",
    unit="1",
    description="Attacks received by a board",
)

# Errors the random placement loop treats as "try somewhere else".
_RETRIABLE_PLACEMENT_ERRORS = (OutOfBoundsError, ShipTooLongError, OverlapError)


class CellState(Enum):
    """State of a cell from the attacker's point of view."""

    UNKNOWN = "unknown"
    MISS = "miss"
    HIT = "hit"


@dataclass(frozen=True)
class Cell:
    """Grid cell: empty, or occupied by the ship at ``ship_index`` in ``Board.ships``."""

    ship_index: int | None = None

    @property
    def occupied(self) -> bool:
        return self.ship_index is not None


EMPTY = Cell()


@dataclass
class Board:
    """A player's grid, fleet and attack history."""

    rows: int = BOARD_SIZE
    cols: int = BOARD_SIZE
    owner: str = "unknown"
    grid: list[list[Cell]] = field(init=False, repr=False)
    ships: list[Ship] = field(init=False, default_factory=list)
    shots: dict[Coordinate, CellState] = field(init=False, default_factory=dict)
    misses: list[Coordinate] = field(init=False, default_factory=list)
    _ship_cells: list[tuple[Coordinate, ...]] = field(init=False, default_factory=list, repr=False)

    def __post_init__(self) -> None:
        if self.rows <= 0 or self.cols <= 0:
            raise ValueError("Board dimensions must be positive.")
        self.grid = self._empty_grid()

    def _empty_grid(self) -> list[list[Cell]]:
        return [[EMPTY for _ in range(self.cols)] for _ in range(self.rows)]

    def reset(self) -> None:
        """Remove every ship and forget all attacks."""
        self.grid = self._empty_grid()
        self.ships.clear()
        self.shots.clear()
        self.misses.clear()
        self._ship_cells.clear()

    def is_valid_coordinate(self, coord: Coordinate) -> bool:
        """Check whether a coordinate lies inside the board boundaries."""
        return 0 <= coord.row < self.rows and 0 <= coord.col < self.cols

    def cell(self, row: int, col: int) -> Cell:
        if not self.is_valid_coordinate(Coordinate(row, col)):
            raise OutOfBoundsError(row, col)
        return self.grid[row][col]

    def ship_at(self, row: int, col: int) -> Ship | None:
        """Return the ship covering ``(row, col)``, if any."""
        index = self.cell(row, col).ship_index
        return None if index is None else self.ships[index]

    def ship_coordinates(self, index: int) -> list[Coordinate]:
        """Cells covered by the ship at ``index``, anchor first."""
        return list(self._ship_cells[index])

    def occupied_coordinates(self) -> set[Coordinate]:
        return {coord for cells in self._ship_cells for coord in cells}

    def place_ship(
        self,
        row: int,
        col: int,
        length: int,
        orientation: Orientation | str,
    ) -> bool:
        """Place a ship with its top/left end at ``(row, col)``.

        The anchor is bounds-checked first, then the ship must fit on the board
        and must not cover an occupied cell. An unrecognized orientation fails
        once the anchor is known to be in bounds. Nothing is mutated unless
        every check passes.
        """
        with tracer.start_as_current_span("board.place_ship") as span:
            span.set_attribute("ship.length", length if isinstance(length, int) else -1)
            span.set_attribute("ship.start.row", row)
            span.set_attribute("ship.start.col", col)
            span.set_attribute("board.owner", self.owner)
            try:
                cells = self._placement_cells(row, col, length, orientation)
            except (InvalidShipLengthError, PlacementError) as exc:
                PLACEMENT_COUNTER.add(1, attributes={"result": "failed", "owner": self.owner})
                span.set_attribute("placement.error", type(exc).__name__)
                logger.debug(
                    "ship_placement_failed",
                    extra={
                        "owner": self.owner,
                        "length": length,
                        "orientation": str(orientation),
                        "row": row,
                        "col": col,
                        "reason": type(exc).__name__,
                    },
                )
                raise

            ship = Ship(length)
            index = len(self.ships)
            self.ships.append(ship)
            self._ship_cells.append(cells)
            occupied = Cell(index)
            for coord in cells:
                self.grid[coord.row][coord.col] = occupied

            PLACEMENT_COUNTER.add(1, attributes={"result": "success", "owner": self.owner})
            logger.info(
                "ship_placed",
                extra={
                    "owner": self.owner,
                    "length": length,
                    "orientation": Orientation.parse(orientation).value,
                    "row": row,
                    "col": col,
                },
            )
            return True

    def _placement_cells(
        self,
        row: int,
        col: int,
        length: int,
        orientation: Orientation | str,
    ) -> tuple[Coordinate, ...]:
        if validate_length(length) == 0:
            raise InvalidShipLengthError("A ship must cover at least one cell.", length)
        cells = tuple(ship_cells(row, col, length, orientation, self.rows, self.cols))
        for coord in cells:
            if self.grid[coord.row][coord.col].occupied:
                raise OverlapError(coord.row, coord.col)
        return cells

    def receive_attack(self, row: int, col: int) -> CellState:
        """Resolve a shot at ``(row, col)`` and return HIT or MISS."""
        with tracer.start_as_current_span("board.receive_attack") as span:
            span.set_attribute("attack.row", row)
            span.set_attribute("attack.col", col)
            span.set_attribute("board.owner", self.owner)
            coord = Coordinate(row, col)
            if not self.is_valid_coordinate(coord):
                logger.debug(
                    "attack_out_of_bounds",
                    extra={"row": row, "col": col, "owner": self.owner},
                )
                raise OutOfBoundsError(row, col)
            if coord in self.shots:
                logger.debug(
                    "attack_duplicate",
                    extra={"row": row, "col": col, "owner": self.owner},
                )
                raise AlreadyAttackedError(row, col)

            cell = self.grid[row][col]
            if not cell.occupied:
                self.misses.append(coord)
                self.shots[coord] = CellState.MISS
                span.set_attribute("attack.outcome", "miss")
                ATTACK_COUNTER.add(1, attributes={"outcome": "miss", "owner": self.owner})
                logger.info("attack_miss", extra={"row": row, "col": col, "owner": self.owner})
                return CellState.MISS

            ship = self.ships[cell.ship_index]
            ship.hit()
            self.shots[coord] = CellState.HIT
            span.set_attribute("attack.outcome", "hit")
            ATTACK_COUNTER.add(1, attributes={"outcome": "hit", "owner": self.owner})
            logger.info(
                "attack_hit",
                extra={
                    "row": row,
                    "col": col,
                    "ship_index": cell.ship_index,
                    "sunk": ship.is_sunk(),
                    "owner": self.owner,
                },
            )
            return CellState.HIT

    def all_ships_sunk(self) -> bool:
        """True once every placed ship is sunk; False while no ships are placed."""
        if not self.ships:
            return False
        return all(ship.is_sunk() for ship in self.ships)

    def list_misses(self) -> list[Coordinate]:
        """Missed coordinates in the order they were attacked."""
        return list(self.misses)

    def list_attacked_coordinates(self) -> list[Coordinate]:
        """Every attacked coordinate in the order it was attacked."""
        return list(self.shots)

    def get_cell_state(self, coord: Coordinate) -> CellState:
        """Return the state of a cell after shots have been taken."""
        return self.shots.get(coord, CellState.UNKNOWN)

    def untargeted_coordinates(self) -> list[Coordinate]:
        return [
            Coordinate(row, col)
            for row in range(self.rows)
            for col in range(self.cols)
            if Coordinate(row, col) not in self.shots
        ]

    def place_fleet(self, placements: Iterable[ShipPlacement]) -> None:
        """Place a pre-validated human fleet layout, re-checking every ship."""
        placements = list(placements)
        validate_fleet_layout(placements, rows=self.rows, cols=self.cols)
        for placement in placements:
            self.place_ship(
                placement.row,
                placement.col,
                placement.ship_type.length,
                placement.orientation,
            )

    def random_placement(
        self,
        rng: random.Random,
        fleet: Iterable[ShipType] = ShipType,
        max_attempts: int = DEFAULT_MAX_PLACEMENT_ATTEMPTS,
    ) -> None:
        """Clear the board and place one ship of each type at random."""
        with tracer.start_as_current_span("board.random_placement") as span:
            span.set_attribute("board.owner", self.owner)
            self.reset()
            orientations = list(Orientation)
            for ship_type in fleet:
                attempts = 0
                while True:
                    if attempts >= max_attempts:
                        logger.warning(
                            "random_placement_exhausted",
                            extra={
                                "ship_type": ship_type.name,
                                "attempts": attempts,
                                "owner": self.owner,
                            },
                        )
                        raise PlacementExhaustedError(ship_type.length, attempts)
                    attempts += 1
                    start_row = rng.randrange(self.rows)
                    start_col = rng.randrange(self.cols)
                    orientation = rng.choice(orientations)
                    try:
                        self.place_ship(start_row, start_col, ship_type.length, orientation)
                    except _RETRIABLE_PLACEMENT_ERRORS:
                        continue
                    break
                logger.debug(
                    "random_ship_placed",
                    extra={"ship_type": ship_type.name, "attempts": attempts, "owner": self.owner},
                )
            span.set_attribute("board.ships", len(self.ships))
