"""Turn coordinator with whole-game telemetry."""

from __future__ import annotations

import time
from typing import Iterable

from seabattle.engine.errors import BattleshipError
from seabattle.engine.game import TurnCoordinator, TurnRecord
from seabattle.engine.layout import ShipPlacement
from seabattle.engine.side import SideRole
from seabattle.telemetry import get_logger, get_tracer, record_game_metric


class InstrumentedTurnCoordinator(TurnCoordinator):
    """Wraps TurnCoordinator with a per-game span, metrics and logging."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._logger = get_logger("seabattle.engine")
        self._tracer = get_tracer("seabattle.engine")
        self._game_span_cm = None
        self._game_span = None
        self._game_start_time: float | None = None
        self._game_id_counter = 0

    def setup(self, human_placements: Iterable[ShipPlacement] | None = None) -> SideRole:
        self._start_game_span()
        with self._tracer.start_as_current_span("seabattle.engine.setup") as span:
            self._logger.info("Setup started")
            first = super().setup(human_placements)
            span.set_attribute("first_mover", first.value)
            record_game_metric(
                "seabattle_game_setup_total",
                1,
                {
                    "first_mover": first.value,
                    "human_random_placement": human_placements is None,
                },
            )
            self._logger.info("Setup finished, %s moves first", first.value)
            return first

    def human_attack(self, row: int, col: int) -> TurnRecord:
        with self._tracer.start_as_current_span("seabattle.engine.human_attack") as span:
            span.set_attribute("game.id", self._game_id_counter)
            span.set_attribute("coord.row", row)
            span.set_attribute("coord.col", col)
            try:
                record = super().human_attack(row, col)
            except BattleshipError as exc:
                record_game_metric(
                    "seabattle_game_invalid_moves_total",
                    1,
                    {"role": SideRole.HUMAN.value, "reason": type(exc).__name__},
                )
                span.record_exception(exc)
                span.set_attribute("error", True)
                self._logger.info("Rejected human move at (%d,%d): %s", row, col, exc)
                raise
            self._after_turn(record, span)
            return record

    def automated_attack(self) -> TurnRecord:
        with self._tracer.start_as_current_span("seabattle.engine.automated_attack") as span:
            span.set_attribute("game.id", self._game_id_counter)
            record = super().automated_attack()
            span.set_attribute("attempts", record.attempts)
            record_game_metric(
                "seabattle_automated_target_attempts_total",
                record.attempts,
                {"role": SideRole.AUTOMATED.value},
            )
            self._after_turn(record, span)
            return record

    def restart(self) -> None:
        self._close_game_span()
        super().restart()

    def _after_turn(self, record: TurnRecord, span) -> None:
        span.set_attribute("shot_outcome", record.outcome.value)
        span.set_attribute("sunk", record.sunk)
        record_game_metric("seabattle_attacks_total", 1, {"role": record.role.value})
        record_game_metric(
            "seabattle_attacks_by_result_total",
            1,
            {"role": record.role.value, "result": record.outcome.value},
        )
        self._logger.info(
            "turn=%d role=%s coord=(%d,%d) outcome=%s sunk=%s",
            record.turn,
            record.role.value,
            record.coordinate.row,
            record.coordinate.col,
            record.outcome.value,
            record.sunk,
        )
        if self.is_over and self.winner is not None:
            span.set_attribute("winner", self.winner.value)
            self._finish_game()

    def _start_game_span(self) -> None:
        self._close_game_span()
        self._game_start_time = time.perf_counter()
        self._game_id_counter += 1
        self._game_span_cm = self._tracer.start_as_current_span("seabattle.engine.game")
        self._game_span = self._game_span_cm.__enter__()
        self._game_span.set_attribute("game.id", self._game_id_counter)

    def _finish_game(self) -> None:
        duration = (time.perf_counter() - self._game_start_time) if self._game_start_time else 0.0
        winner = self.winner.value if self.winner else "unknown"
        turns = len(self.history)

        record_game_metric("seabattle_game_completed_total", 1, {"winner": winner})
        record_game_metric("seabattle_game_duration_seconds", duration, {"winner": winner})

        with self._tracer.start_as_current_span("seabattle.engine.game_complete") as span:
            span.set_attribute("game.id", self._game_id_counter)
            span.set_attribute("winner", winner)
            span.set_attribute("turns", turns)
            span.set_attribute("duration_ms", duration * 1000)

        if self._game_span is not None:
            self._game_span.set_attribute("winner", winner)
            self._game_span.set_attribute("turns", turns)

        self._logger.info("Game finished. Winner=%s turns=%d duration_s=%.3f", winner, turns, duration)
        self._close_game_span()

    def _close_game_span(self) -> None:
        if self._game_span_cm is not None:
            self._game_span_cm.__exit__(None, None, None)
            self._game_span_cm = None
            self._game_span = None
