from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Optional


class Side(Enum):
    """Side to move. WHITE is the reference side for evaluation."""

    WHITE = "w"
    BLACK = "b"

    @property
    def opposite(self) -> "Side":
        return Side.BLACK if self is Side.WHITE else Side.WHITE

    @property
    def sign(self) -> int:
        return 1 if self is Side.WHITE else -1

    @property
    def forward(self) -> int:
        # Rank delta of a pawn advance
        return 1 if self is Side.WHITE else -1

    @property
    def home_rank(self) -> int:
        return 0 if self is Side.WHITE else 7


class PieceType(Enum):
    PAWN = "p"
    KNIGHT = "n"
    BISHOP = "b"
    ROOK = "r"
    QUEEN = "q"
    KING = "k"

    @property
    def material(self) -> int:
        return MATERIAL[self]

    @property
    def is_minor(self) -> bool:
        return self in (PieceType.KNIGHT, PieceType.BISHOP)


# Centipawn material values
MATERIAL: Dict[PieceType, int] = {
    PieceType.PAWN: 100,
    PieceType.KNIGHT: 320,
    PieceType.BISHOP: 330,
    PieceType.ROOK: 500,
    PieceType.QUEEN: 900,
    PieceType.KING: 20_000,
}

PROMOTION_TYPES = (PieceType.QUEEN, PieceType.ROOK, PieceType.BISHOP, PieceType.KNIGHT)

CHAR_TO_TYPE: Dict[str, PieceType] = {pt.value: pt for pt in PieceType}


def piece_type_from_char(ch: str) -> Optional[PieceType]:
    """Map a piece letter (either case) to its type, or ``None``."""
    return CHAR_TO_TYPE.get(ch.lower()) if ch else None


@dataclass(frozen=True)
class Piece:
    """A piece on the board.

    ``has_moved`` is the only record of castling eligibility: a king or rook
    that has moved can never castle again.
    """

    type: PieceType
    side: Side
    has_moved: bool = False

    def moved(self) -> "Piece":
        return self if self.has_moved else replace(self, has_moved=True)

    def fen_char(self) -> str:
        ch = self.type.value
        return ch.upper() if self.side is Side.WHITE else ch

    @classmethod
    def from_fen_char(cls, ch: str) -> "Piece":
        pt = CHAR_TO_TYPE.get(ch.lower())
        if pt is None:
            raise ValueError(f"invalid piece in FEN: {ch!r}")
        side = Side.WHITE if ch.isupper() else Side.BLACK
        return cls(pt, side)
