"""Participants in a match."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .board import Board


class SideRole(Enum):
    """Who supplies a side's coordinates."""

    HUMAN = "human"
    AUTOMATED = "automated"

    def opponent(self) -> SideRole:
        """Return the opposing role."""
        return SideRole.AUTOMATED if self is SideRole.HUMAN else SideRole.HUMAN


@dataclass
class Side:
    """Binds a board to a participant role."""

    role: SideRole
    board: Board

    @property
    def name(self) -> str:
        return self.role.value
