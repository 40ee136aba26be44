from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .board import Board
from .move import Move, Square
from .piece import Piece, Side
from .status import GameStatus


@dataclass
class Game:
    """Game wrapper around a board with helper operations.

    Responsibility: track board state, expose legal moves, apply validated
    moves and take them back again.
    """

    board: Board
    snapshots: List[Board] = field(default_factory=list)

    @classmethod
    def new(cls) -> "Game":
        return cls(board=Board.startpos())

    @classmethod
    def from_fen(cls, fen: str) -> "Game":
        return cls(board=Board.from_fen(fen))

    def to_fen(self) -> str:
        return self.board.to_fen()

    @property
    def side_to_move(self) -> Side:
        return self.board.side_to_move

    def legal_moves(self) -> List[Move]:
        return self.board.legal_moves()

    def legal_moves_from(self, sq: Square) -> List[Move]:
        return self.board.legal_moves_from(sq)

    def apply_move(self, move: Move) -> Optional[Piece]:
        """Validate ``move`` against the legal list, then apply it.

        Raises:
            ValueError: If the move is not legal in the current position.
        """
        if move not in self.board.legal_moves():
            raise ValueError("illegal move")
        self.snapshots.append(self.board.copy())
        return self.board.apply_move(move)

    def undo_move(self) -> None:
        if not self.snapshots:
            raise ValueError("no moves to undo")
        self.board = self.snapshots.pop()

    # --- State flags for protocol ---
    def status(self) -> GameStatus:
        return self.board.game_status()

    def in_check(self) -> bool:
        return self.board.is_in_check(self.board.side_to_move)

    def last_move(self) -> Optional[Move]:
        return self.board.history[-1] if self.board.history else None

    def move_history_uci(self) -> List[str]:
        return [m.to_uci() for m in self.board.history]
