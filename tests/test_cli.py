"""Tests for the terminal host."""

from __future__ import annotations

import pytest

from seabattle import cli
from seabattle.engine.board import Board, CellState
from seabattle.engine.config import GameConfig
from seabattle.engine.game import TurnCoordinator, TurnRecord
from seabattle.engine.ship import Coordinate, ShipType
from seabattle.engine.side import SideRole


def scripted_input(monkeypatch: pytest.MonkeyPatch, answers) -> None:
    feed = iter(answers)
    monkeypatch.setattr("builtins.input", lambda *_: next(feed))


@pytest.mark.parametrize(
    ("text", "expected"),
    [("A1", Coordinate(0, 0)), ("j10", Coordinate(9, 9)), (" c5 ", Coordinate(2, 4)), ("3 7", Coordinate(2, 6)), ("10,1", Coordinate(9, 0))],
)
def test_coordinate_from_input(text: str, expected: Coordinate) -> None:
    assert cli.coordinate_from_input(text) == expected


@pytest.mark.parametrize("text", ["", "K1", "A0", "A11", "Ax", "1 2 3", "0 4"])
def test_coordinate_from_input_rejects(text: str) -> None:
    with pytest.raises(ValueError):
        cli.coordinate_from_input(text)


def test_format_board_hides_enemy_ships() -> None:
    board = Board()
    board.place_ship(0, 0, 2, "horizontal")
    board.receive_attack(0, 0)
    board.receive_attack(1, 1)
    own = cli.format_board(board, show_ships=True).splitlines()
    enemy = cli.format_board(board, show_ships=False).splitlines()
    assert own[1].split("|")[1].split()[:2] == ["X", "S"]
    assert enemy[1].split("|")[1].split()[:2] == ["X", "."]
    assert enemy[2].split("|")[1].split()[1] == "o"


def test_describe_turn_mentions_sinking() -> None:
    record = TurnRecord(3, SideRole.AUTOMATED, Coordinate(1, 4), CellState.HIT, sunk=True)
    assert cli.describe_turn(record) == "The computer fired at B5: hit and sank a ship!"


def test_prompt_fleet_layout_retries_overlapping_layout(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    good = [("H", f"{row}1") for row in "ACEGI"]
    overlapping = [("H", "A1"), ("V", "A2")] + good[2:]
    answers = [value for pair in overlapping + good for value in pair]
    scripted_input(monkeypatch, answers)

    placements = cli.prompt_fleet_layout()
    assert [p.ship_type for p in placements] == list(ShipType)
    assert [(p.row, p.col) for p in placements] == [(0, 0), (2, 0), (4, 0), (6, 0), (8, 0)]
    assert "overlaps" in capsys.readouterr().out


def test_play_game_runs_to_completion(monkeypatch: pytest.MonkeyPatch) -> None:
    cells = [f"{row}{col}" for row in cli.ROW_LABELS for col in range(1, 11)]
    scripted_input(monkeypatch, ["Z9", "A1", "A1"] + cells[1:])
    game = TurnCoordinator(GameConfig(rng_seed=13, first_mover="human"))

    winner = cli.play_game(game.config, manual_placement=False, game=game)
    assert winner is game.winner
    assert game.is_over
    attacked = game.board(SideRole.AUTOMATED).list_attacked_coordinates()
    assert len(attacked) == len(set(attacked))


def test_quit_exits(monkeypatch: pytest.MonkeyPatch) -> None:
    scripted_input(monkeypatch, ["q"])
    game = TurnCoordinator(GameConfig(rng_seed=1, first_mover="human"))
    with pytest.raises(SystemExit):
        cli.play_game(game.config, manual_placement=False, game=game)


def test_parser_options() -> None:
    args = cli.build_parser().parse_args(["--seed", "5", "--random-placement", "--first", "human"])
    assert args.seed == 5
    assert args.random_placement is True
    assert args.first == "human"
