"""Command-line host for playing Battleship against a random computer opponent."""

from __future__ import annotations

import argparse
import logging
from typing import Sequence

from opentelemetry.instrumentation.logging import LoggingInstrumentor

from seabattle.engine.board import Board, CellState
from seabattle.engine.config import GameConfig
from seabattle.engine.errors import BattleshipError
from seabattle.engine.game import TurnCoordinator, TurnRecord
from seabattle.engine.instrumented_game import InstrumentedTurnCoordinator
from seabattle.engine.layout import ShipPlacement, parse_placement, validate_fleet_layout
from seabattle.engine.ship import Coordinate, Orientation, ShipType
from seabattle.engine.side import SideRole
from seabattle.telemetry import init_telemetry

logger = logging.getLogger(__name__)

ROW_LABELS = "ABCDEFGHIJ"


def coordinate_from_input(text: str) -> Coordinate:
    """Parse ``A5`` or ``'1 5'`` (both 1-based for display) into a zero-based coordinate."""
    cleaned = text.strip().upper()
    if not cleaned:
        raise ValueError("Empty coordinate.")
    if cleaned[0].isalpha():
        if cleaned[0] not in ROW_LABELS:
            raise ValueError("Row must be between A and J.")
        row = ROW_LABELS.index(cleaned[0])
        try:
            col = int(cleaned[1:]) - 1
        except ValueError as exc:
            raise ValueError("Column must be a number between 1 and 10.") from exc
    else:
        parts = cleaned.replace(",", " ").split()
        if len(parts) != 2:
            raise ValueError("Use formats like A5 or '3 7'.")
        try:
            row, col = (int(part) - 1 for part in parts)
        except ValueError as exc:
            raise ValueError("Row and column must be numbers.") from exc
    if row not in range(len(ROW_LABELS)) or col not in range(len(ROW_LABELS)):
        raise ValueError("Coordinates must be within the 10x10 board.")
    return Coordinate(row, col)


def label(coord: Coordinate) -> str:
    return f"{ROW_LABELS[coord.row]}{coord.col + 1}"


def format_board(board: Board, show_ships: bool) -> str:
    ship_cells = board.occupied_coordinates() if show_ships else set()
    header = "    " + " ".join(f"{col + 1:>2}" for col in range(board.cols))
    rows = [header]
    for row in range(board.rows):
        symbols = []
        for col in range(board.cols):
            coord = Coordinate(row, col)
            state = board.get_cell_state(coord)
            if state is CellState.HIT:
                symbol = "X"
            elif state is CellState.MISS:
                symbol = "o"
            else:
                symbol = "S" if coord in ship_cells else "."
            symbols.append(f"{symbol:>2}")
        rows.append(f"{ROW_LABELS[row]} |" + " ".join(symbols))
    return "\n".join(rows)


def describe_turn(record: TurnRecord) -> str:
    who = "You" if record.role is SideRole.HUMAN else "The computer"
    outcome = "hit" if record.outcome is CellState.HIT else "miss"
    if record.sunk:
        outcome = "hit and sank a ship!"
    return f"{who} fired at {label(record.coordinate)}: {outcome}"


def _prompt_orientation(ship_type: ShipType) -> Orientation:
    while True:
        raw = input(
            f"Place your {ship_type.label.title()} (length {ship_type.length}). Orientation [H/V]: "
        ).strip().upper()
        if raw in {"H", "HOR", "HORIZONTAL"}:
            return Orientation.HORIZONTAL
        if raw in {"V", "VER", "VERTICAL"}:
            return Orientation.VERTICAL
        print("Please enter H for horizontal or V for vertical.")


def prompt_fleet_layout() -> list[ShipPlacement]:
    """Ask for every ship, then check the layout as a whole before the game starts."""
    while True:
        placements: list[ShipPlacement] = []
        for ship_type in ShipType:
            orientation = _prompt_orientation(ship_type)
            while True:
                raw = input("Enter starting coordinate (e.g., A1): ")
                try:
                    start = coordinate_from_input(raw)
                except ValueError as exc:
                    print(f"Invalid coordinate: {exc}")
                    continue
                break
            placements.append(
                parse_placement(ship_type, start.row, start.col, orientation, one_based=False)
            )
        try:
            validate_fleet_layout(placements)
        except BattleshipError as exc:
            print(f"That layout does not work: {exc} Please place your ships again.")
            continue
        return placements


def _prompt_manual_setup() -> bool:
    while True:
        raw = input("Would you like to place your ships manually? [Y/n]: ").strip().lower()
        if raw in {"", "y", "yes"}:
            return True
        if raw in {"n", "no"}:
            return False
        print("Please answer with 'y' or 'n'.")


def _prompt_for_attack(game: TurnCoordinator) -> TurnRecord:
    while True:
        raw = input("Enter target coordinate (e.g., A5) or 'q' to quit: ").strip()
        if raw.lower() == "q":
            raise SystemExit("Goodbye!")
        try:
            coord = coordinate_from_input(raw)
            return game.human_attack(coord.row, coord.col)
        except ValueError as exc:
            print(f"Invalid target: {exc}")


def play_game(
    config: GameConfig,
    manual_placement: bool | None = None,
    game: TurnCoordinator | None = None,
) -> SideRole:
    """Run one match in the terminal and return the winner."""
    print("Welcome to Battleship!\n")
    game = game or InstrumentedTurnCoordinator(config)

    if manual_placement is None:
        manual_placement = _prompt_manual_setup()
    placements = prompt_fleet_layout() if manual_placement else None
    first = game.setup(placements)
    if placements is None:
        print("\nYour ships have been positioned automatically.")
    print("You fire first." if first is SideRole.HUMAN else "The computer fires first.")

    human_board = game.board(SideRole.HUMAN)
    computer_board = game.board(SideRole.AUTOMATED)
    while not game.is_over:
        for record in game.advance():
            print(describe_turn(record))
        if game.is_over:
            break
        print("\nYour Board:")
        print(format_board(human_board, show_ships=True))
        print("\nEnemy Waters:")
        print(format_board(computer_board, show_ships=False))
        print(describe_turn(_prompt_for_attack(game)))

    if game.winner is SideRole.HUMAN:
        print("\nCongratulations, you won!")
    else:
        print("\nThe computer won this time. Better luck next battle!")
    return game.winner


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Play Battleship via the CLI.")
    parser.add_argument(
        "--seed", type=int, default=None, help="Optional RNG seed for reproducibility."
    )
    parser.add_argument(
        "--random-placement",
        action="store_true",
        help="Place your fleet automatically instead of being asked.",
    )
    parser.add_argument(
        "--first",
        choices=("random", "human", "automated"),
        default=None,
        help="Who fires first (default: random).",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    init_telemetry()
    LoggingInstrumentor().instrument(set_logging_format=False)
    config = GameConfig.from_env(rng_seed=args.seed, first_mover=args.first)
    logger.debug("cli_start", extra={"seed": config.rng_seed, "first_mover": config.first_mover})
    play_game(config, manual_placement=False if args.random_placement else None)


if __name__ == "__main__":
    main()
