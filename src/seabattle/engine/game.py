"""Human-versus-computer Battleship turn coordinator."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from seabattle.telemetry import get_meter, get_tracer

from .board import BOARD_SIZE, Board, CellState
from .config import GameConfig
from .errors import AlreadyAttackedError, IllegalTurnError
from .layout import ShipPlacement
from .ship import Coordinate
from .side import Side, SideRole

logger = logging.getLogger(__name__)
tracer = get_tracer("seabattle.engine.game")
meter = get_meter("seabattle.engine.game")

TURN_COUNTER = meter.create_counter(
    "seabattle_engine_turns",
    unit="1",
    description="Completed turns in a TurnCoordinator",
)


class TurnState(Enum):
    """Where the match currently is."""

    SETUP = "setup"
    AWAITING_HUMAN_MOVE = "awaiting_human_move"
    AUTOMATED_MOVE_IN_PROGRESS = "automated_move_in_progress"
    GAME_OVER = "game_over"


_STATE_FOR_ROLE = {
    SideRole.HUMAN: TurnState.AWAITING_HUMAN_MOVE,
    SideRole.AUTOMATED: TurnState.AUTOMATED_MOVE_IN_PROGRESS,
}


@dataclass(frozen=True)
class TurnRecord:
    """Outcome of one successful attack."""

    turn: int
    role: SideRole
    coordinate: Coordinate
    outcome: CellState
    sunk: bool
    attempts: int = 1


@dataclass(frozen=True)
class BoardSnapshot:
    """Read-only view of a board for presentation layers."""

    ships: tuple[tuple[Coordinate, ...], ...]
    sunk: tuple[bool, ...]
    attacked: tuple[Coordinate, ...]
    misses: tuple[Coordinate, ...]


@dataclass(frozen=True)
class GameState:
    """Immutable snapshot of the current match."""

    state: TurnState
    active: SideRole | None
    winner: SideRole | None
    turns: int
    boards: dict[SideRole, BoardSnapshot]


class TurnCoordinator:
    """Drives a match one external event at a time.

    The host calls :meth:`setup` once, then :meth:`human_attack` whenever the
    player picks a cell and :meth:`advance` to let the computer reply. Nothing
    here blocks or recurses; an automated move always runs to completion.
    """

    def __init__(
        self,
        config: GameConfig | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.config = config or GameConfig()
        self._rng = rng or random.Random(self.config.rng_seed)
        self.sides: dict[SideRole, Side] = {}
        self.state: TurnState = TurnState.SETUP
        self.active: SideRole | None = None
        self.winner: SideRole | None = None
        self.history: list[TurnRecord] = []
        self._new_boards()

    def _new_boards(self) -> None:
        self.sides = {
            role: Side(role, Board(BOARD_SIZE, BOARD_SIZE, owner=role.value))
            for role in SideRole
        }

    @property
    def is_over(self) -> bool:
        return self.state is TurnState.GAME_OVER

    def board(self, role: SideRole) -> Board:
        return self.sides[role].board

    def setup(self, human_placements: Iterable[ShipPlacement] | None = None) -> SideRole:
        """Place both fleets and pick who moves first.

        ``human_placements`` is the player's validated layout; pass ``None``
        to have the player's fleet placed at random as well.
        """
        with tracer.start_as_current_span("game.setup") as span:
            if self.state is not TurnState.SETUP:
                logger.info("setup_rejected", extra={"state": self.state.value})
                raise IllegalTurnError("Game has already been set up.")

            attempts = self.config.max_placement_attempts
            try:
                self.board(SideRole.AUTOMATED).random_placement(self._rng, max_attempts=attempts)
                human_board = self.board(SideRole.HUMAN)
                if human_placements is None:
                    human_board.random_placement(self._rng, max_attempts=attempts)
                else:
                    human_board.place_fleet(human_placements)
            except Exception:
                for side in self.sides.values():
                    side.board.reset()
                raise

            first = self._pick_first_mover()
            self.active = first
            self.state = _STATE_FOR_ROLE[first]
            span.set_attribute("game.first_mover", first.value)
            logger.info(
                "game_setup_complete",
                extra={
                    "first_mover": first.value,
                    "human_random_placement": human_placements is None,
                },
            )
            return first

    def _pick_first_mover(self) -> SideRole:
        if self.config.first_mover == "random":
            return self._rng.choice(list(SideRole))
        return SideRole(self.config.first_mover)

    def human_attack(self, row: int, col: int) -> TurnRecord:
        """Fire the player's shot at the computer's board.

        Board errors propagate unchanged and leave the turn with the player.
        """
        with tracer.start_as_current_span("game.human_attack") as span:
            span.set_attribute("row", row)
            span.set_attribute("col", col)
            self._require_turn(SideRole.HUMAN)
            target = self.board(SideRole.AUTOMATED)
            outcome = target.receive_attack(row, col)
            record = self._finish_turn(SideRole.HUMAN, Coordinate(row, col), outcome, attempts=1)
            span.set_attribute("attack.outcome", outcome.value)
            return record

    def automated_attack(self) -> TurnRecord:
        """Let the computer fire at a uniformly random untargeted cell."""
        with tracer.start_as_current_span("game.automated_attack") as span:
            self._require_turn(SideRole.AUTOMATED)
            target = self.board(SideRole.HUMAN)
            attempts = 0
            while attempts < self.config.max_target_attempts:
                attempts += 1
                row = self._rng.randrange(target.rows)
                col = self._rng.randrange(target.cols)
                try:
                    outcome = target.receive_attack(row, col)
                except AlreadyAttackedError:
                    logger.debug(
                        "automated_target_repeat",
                        extra={"row": row, "col": col, "attempts": attempts},
                    )
                    continue
                break
            else:
                # Same distribution as redrawing, but bounded.
                coord = self._rng.choice(target.untargeted_coordinates())
                row, col = coord.row, coord.col
                outcome = target.receive_attack(row, col)
                logger.info(
                    "automated_target_fallback",
                    extra={"row": row, "col": col, "attempts": attempts},
                )
            span.set_attribute("row", row)
            span.set_attribute("col", col)
            span.set_attribute("attempts", attempts)
            span.set_attribute("attack.outcome", outcome.value)
            return self._finish_turn(SideRole.AUTOMATED, Coordinate(row, col), outcome, attempts)

    def advance(self) -> list[TurnRecord]:
        """Play every pending automated move and return the resulting records."""
        records: list[TurnRecord] = []
        while self.state is TurnState.AUTOMATED_MOVE_IN_PROGRESS:
            records.append(self.automated_attack())
        return records

    def _require_turn(self, role: SideRole) -> None:
        expected = _STATE_FOR_ROLE[role]
        if self.state is expected:
            return
        logger.info(
            "move_rejected",
            extra={"role": role.value, "state": self.state.value},
        )
        if self.state is TurnState.GAME_OVER:
            raise IllegalTurnError("Game is over.")
        if self.state is TurnState.SETUP:
            raise IllegalTurnError("Game has not been set up.")
        raise IllegalTurnError(f"It is not the {role.value} side's turn.")

    def _finish_turn(
        self,
        role: SideRole,
        coord: Coordinate,
        outcome: CellState,
        attempts: int,
    ) -> TurnRecord:
        target = self.board(role.opponent())
        ship = target.ship_at(coord.row, coord.col) if outcome is CellState.HIT else None
        record = TurnRecord(
            turn=len(self.history) + 1,
            role=role,
            coordinate=coord,
            outcome=outcome,
            sunk=bool(ship and ship.is_sunk()),
            attempts=attempts,
        )
        self.history.append(record)
        TURN_COUNTER.add(1, attributes={"result": outcome.value, "role": role.value})

        if target.all_ships_sunk():
            self.winner = role
            self.active = None
            self.state = TurnState.GAME_OVER
            logger.info("game_finished", extra={"winner": role.value, "turns": record.turn})
        else:
            self.active = role.opponent()
            self.state = _STATE_FOR_ROLE[self.active]
        return record

    def restart(self) -> None:
        """Abandon the current match and return to setup with empty boards."""
        self._new_boards()
        self.state = TurnState.SETUP
        self.active = None
        self.winner = None
        self.history.clear()
        logger.info("game_restarted")

    def valid_targets(self, role: SideRole) -> list[Coordinate]:
        """Return all coordinates ``role`` can legally target right now."""
        if self.state in (TurnState.SETUP, TurnState.GAME_OVER):
            return []
        return self.board(role.opponent()).untargeted_coordinates()

    def get_state(self) -> GameState:
        """Return an immutable view of the current match."""
        boards = {}
        for role, side in self.sides.items():
            board = side.board
            boards[role] = BoardSnapshot(
                ships=tuple(tuple(board.ship_coordinates(i)) for i in range(len(board.ships))),
                sunk=tuple(ship.is_sunk() for ship in board.ships),
                attacked=tuple(board.list_attacked_coordinates()),
                misses=tuple(board.list_misses()),
            )
        return GameState(
            state=self.state,
            active=self.active,
            winner=self.winner,
            turns=len(self.history),
            boards=boards,
        )
