from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .piece import Side


class StatusKind(Enum):
    IN_PROGRESS = "in_progress"
    CHECK = "check"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    DRAW = "draw"  # insufficient material


@dataclass(frozen=True)
class GameStatus:
    """Derived game status.

    ``side`` is the side in check for CHECK and the side that is mated for
    CHECKMATE; it is ``None`` for every other kind.
    """

    kind: StatusKind
    side: Optional[Side] = None

    @classmethod
    def in_progress(cls) -> "GameStatus":
        return cls(StatusKind.IN_PROGRESS)

    @classmethod
    def check(cls, side: Side) -> "GameStatus":
        return cls(StatusKind.CHECK, side)

    @classmethod
    def checkmate(cls, side: Side) -> "GameStatus":
        return cls(StatusKind.CHECKMATE, side)

    @classmethod
    def stalemate(cls) -> "GameStatus":
        return cls(StatusKind.STALEMATE)

    @classmethod
    def draw(cls) -> "GameStatus":
        return cls(StatusKind.DRAW)

    @property
    def is_terminal(self) -> bool:
        return self.kind in (StatusKind.CHECKMATE, StatusKind.STALEMATE, StatusKind.DRAW)

    @property
    def is_draw(self) -> bool:
        return self.kind in (StatusKind.STALEMATE, StatusKind.DRAW)
