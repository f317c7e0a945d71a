"""High-level gameplay tests."""

import logging

import pytest

from seabattle.engine.board import CellState
from seabattle.engine.config import GameConfig
from seabattle.engine.errors import (
    AlreadyAttackedError,
    IllegalTurnError,
    OutOfBoundsError,
    OverlapError,
)
from seabattle.engine.game import TurnCoordinator, TurnState
from seabattle.engine.layout import ShipPlacement
from seabattle.engine.ship import Coordinate, Orientation, ShipType
from seabattle.engine.side import SideRole


def stacked_layout() -> list[ShipPlacement]:
    return [
        ShipPlacement(ship_type, row * 2, 0, Orientation.HORIZONTAL)
        for row, ship_type in enumerate(ShipType)
    ]


def human_first(seed: int = 0, **overrides) -> TurnCoordinator:
    return TurnCoordinator(GameConfig(rng_seed=seed, first_mover="human", **overrides))


def test_new_game_waits_for_setup() -> None:
    game = TurnCoordinator()
    assert game.state is TurnState.SETUP
    assert game.valid_targets(SideRole.HUMAN) == []
    with pytest.raises(IllegalTurnError):
        game.human_attack(0, 0)
    with pytest.raises(IllegalTurnError):
        game.automated_attack()


def test_setup_places_both_fleets() -> None:
    game = human_first()
    assert game.setup(stacked_layout()) is SideRole.HUMAN
    assert game.state is TurnState.AWAITING_HUMAN_MOVE
    assert game.active is SideRole.HUMAN
    for role in SideRole:
        assert [ship.length for ship in game.board(role).ships] == [5, 4, 3, 3, 2]
    assert game.board(SideRole.HUMAN).ship_at(8, 1) is not None


def test_setup_twice_rejected() -> None:
    game = human_first()
    game.setup()
    with pytest.raises(IllegalTurnError):
        game.setup()


def test_failed_setup_leaves_boards_empty() -> None:
    game = human_first()
    layout = stacked_layout()
    layout[1] = ShipPlacement(ShipType.BATTLESHIP, 0, 2, Orientation.VERTICAL)
    with pytest.raises(OverlapError):
        game.setup(layout)
    assert game.state is TurnState.SETUP
    assert all(not side.board.ships for side in game.sides.values())


def test_first_mover_is_random_per_game() -> None:
    movers = {TurnCoordinator(GameConfig(rng_seed=seed)).setup() for seed in range(30)}
    assert movers == {SideRole.HUMAN, SideRole.AUTOMATED}


def test_automated_first_mover_waits_for_advance() -> None:
    game = TurnCoordinator(GameConfig(rng_seed=4, first_mover="automated"))
    game.setup()
    assert game.state is TurnState.AUTOMATED_MOVE_IN_PROGRESS
    with pytest.raises(IllegalTurnError):
        game.human_attack(0, 0)
    records = game.advance()
    assert len(records) == 1
    assert records[0].role is SideRole.AUTOMATED
    assert game.state is TurnState.AWAITING_HUMAN_MOVE


def test_turns_alternate() -> None:
    game = human_first(seed=11)
    game.setup()
    record = game.human_attack(0, 0)
    assert record.turn == 1
    assert record.role is SideRole.HUMAN
    assert game.state is TurnState.AUTOMATED_MOVE_IN_PROGRESS
    with pytest.raises(IllegalTurnError):
        game.human_attack(0, 1)
    reply = game.automated_attack()
    assert reply.turn == 2
    assert reply.role is SideRole.AUTOMATED
    assert game.state is TurnState.AWAITING_HUMAN_MOVE
    assert game.board(SideRole.HUMAN).list_attacked_coordinates() == [reply.coordinate]


def test_rejected_human_move_keeps_the_turn() -> None:
    game = human_first(seed=2)
    game.setup()
    game.human_attack(5, 5)
    game.advance()

    with pytest.raises(AlreadyAttackedError):
        game.human_attack(5, 5)
    with pytest.raises(OutOfBoundsError):
        game.human_attack(10, 0)
    assert game.state is TurnState.AWAITING_HUMAN_MOVE
    assert len(game.history) == 2
    assert game.board(SideRole.AUTOMATED).list_attacked_coordinates() == [Coordinate(5, 5)]


def test_automated_side_never_repeats_a_target() -> None:
    game = TurnCoordinator(GameConfig(rng_seed=5, first_mover="automated"))
    game.setup(stacked_layout())
    human_targets = iter(game.board(SideRole.AUTOMATED).untargeted_coordinates())
    while not game.is_over:
        game.advance()
        if game.is_over:
            break
        target = next(human_targets)
        game.human_attack(target.row, target.col)

    attacked = game.board(SideRole.HUMAN).list_attacked_coordinates()
    assert len(attacked) == len(set(attacked))
    assert game.winner in {SideRole.HUMAN, SideRole.AUTOMATED}


def test_automated_targeting_falls_back_after_repeated_draws(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    game = TurnCoordinator(GameConfig(rng_seed=8, first_mover="automated", max_target_attempts=3))
    game.setup(stacked_layout())
    human_board = game.board(SideRole.HUMAN)
    human_board.receive_attack(0, 0)
    monkeypatch.setattr(game._rng, "randrange", lambda _stop: 0)

    record = game.automated_attack()
    assert record.attempts == 3
    assert record.coordinate != Coordinate(0, 0)
    assert human_board.get_cell_state(record.coordinate) is record.outcome


def test_human_wins_by_sinking_every_ship() -> None:
    game = human_first(seed=21)
    game.setup()
    fleet = sorted(game.board(SideRole.AUTOMATED).occupied_coordinates(), key=lambda c: (c.row, c.col))

    for index, coord in enumerate(fleet, start=1):
        record = game.human_attack(coord.row, coord.col)
        assert record.outcome is CellState.HIT
        if index < len(fleet):
            assert game.advance()

    assert game.state is TurnState.GAME_OVER
    assert game.winner is SideRole.HUMAN
    assert game.active is None
    assert sum(record.sunk for record in game.history if record.role is SideRole.HUMAN) == 5


def test_no_moves_after_game_over() -> None:
    game = human_first(seed=3)
    game.setup()
    for coord in game.board(SideRole.AUTOMATED).occupied_coordinates():
        game.human_attack(coord.row, coord.col)
        game.advance()

    assert game.is_over
    assert game.advance() == []
    with pytest.raises(IllegalTurnError):
        game.human_attack(9, 9)
    with pytest.raises(IllegalTurnError):
        game.automated_attack()
    assert game.valid_targets(SideRole.HUMAN) == []


def test_restart_returns_to_setup() -> None:
    game = human_first(seed=9)
    game.setup()
    game.human_attack(0, 0)
    game.restart()
    assert game.state is TurnState.SETUP
    assert game.history == []
    assert game.winner is None
    assert all(not side.board.ships for side in game.sides.values())
    game.setup()
    assert game.state is TurnState.AWAITING_HUMAN_MOVE


def test_game_state_snapshot_reflects_attacks() -> None:
    game = human_first(seed=5)
    game.setup()
    game.human_attack(4, 4)
    state = game.get_state()
    assert state.turns == 1
    assert state.state is TurnState.AUTOMATED_MOVE_IN_PROGRESS
    assert state.active is SideRole.AUTOMATED
    assert Coordinate(4, 4) in state.boards[SideRole.AUTOMATED].attacked
    assert len(state.boards[SideRole.HUMAN].ships) == 5
    assert state.boards[SideRole.HUMAN].sunk == (False,) * 5


def test_valid_targets_exclude_attacked_cells() -> None:
    game = human_first(seed=6)
    game.setup()
    game.human_attack(0, 0)
    game.advance()
    targets = game.valid_targets(SideRole.HUMAN)
    assert len(targets) == 99
    assert Coordinate(0, 0) not in targets


def test_sides_face_each_other() -> None:
    game = human_first()
    assert SideRole.HUMAN.opponent() is SideRole.AUTOMATED
    assert SideRole.AUTOMATED.opponent() is SideRole.HUMAN
    assert game.sides[SideRole.HUMAN].name == "human"
    assert game.board(SideRole.HUMAN) is not game.board(SideRole.AUTOMATED)


def test_rejected_moves_are_not_logged_as_errors(caplog: pytest.LogCaptureFixture) -> None:
    game = human_first(seed=4)
    game.setup()
    game.human_attack(0, 0)
    game.advance()
    with caplog.at_level(logging.DEBUG, logger="seabattle.engine"):
        with pytest.raises(AlreadyAttackedError):
            game.human_attack(0, 0)
        with pytest.raises(IllegalTurnError):
            game.automated_attack()
    assert any(r.getMessage() == "move_rejected" for r in caplog.records)
    assert all(r.levelno < logging.WARNING for r in caplog.records)
