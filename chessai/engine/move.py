from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .piece import PieceType, piece_type_from_char, PROMOTION_TYPES


# (rank, file), both 0..7 with rank 0 = white's back rank and file 0 = a-file
Square = Tuple[int, int]

FILES = "abcdefgh"


def is_valid_square(sq: Square) -> bool:
    rank, file = sq
    return 0 <= rank < 8 and 0 <= file < 8


def offset(sq: Square, rank_delta: int, file_delta: int) -> Square:
    return (sq[0] + rank_delta, sq[1] + file_delta)


@dataclass(frozen=True)
class Move:
    """Engine move representation.

    Equality is structural over (from, to, promotion). Captures, checks and
    castling are derived from the board, never stored on the move.

    Attributes:
        from_sq (Square): Origin square.
        to_sq (Square): Destination square.
        promotion (Optional[PieceType]): Promotion piece type, if any.
    """

    from_sq: Square
    to_sq: Square
    promotion: Optional[PieceType] = None

    def to_uci(self) -> str:
        """Serialize the move into long algebraic UCI form.

        Returns:
            str: Move encoded like ``"e2e4"`` or ``"e7e8q"``.
        """
        promo = self.promotion.value if self.promotion else ""
        return f"{square_to_str(self.from_sq)}{square_to_str(self.to_sq)}{promo}"


def parse_uci(uci: str) -> Move:
    """Parse a UCI move string.

    Args:
        uci (str): Move encoded in long algebraic notation (e.g. ``"e2e4"``).

    Returns:
        Move: Parsed move.

    Raises:
        ValueError: If the string has an invalid length, squares, or promotion
            piece.
    """
    if len(uci) not in (4, 5):
        raise ValueError(f"invalid UCI move length: {uci!r}")
    from_sq = str_to_square(uci[0:2])
    to_sq = str_to_square(uci[2:4])
    if from_sq is None or to_sq is None:
        raise ValueError(f"invalid square in move: {uci!r}")
    promo: Optional[PieceType] = None
    if len(uci) == 5:
        promo = piece_type_from_char(uci[4])
        if promo not in PROMOTION_TYPES:
            raise ValueError(f"invalid promotion piece: {uci[4]!r}")
    return Move(from_sq, to_sq, promo)


def str_to_square(s: str) -> Optional[Square]:
    """Convert algebraic notation such as ``"e4"`` into a square.

    Returns ``None`` for anything that is not a board square.
    """
    if len(s) != 2 or s[0] not in FILES or s[1] < "1" or s[1] > "8":
        return None
    return (int(s[1]) - 1, FILES.index(s[0]))


def square_to_str(sq: Square) -> str:
    """Convert a square into algebraic notation; ``"??"`` when off-board."""
    if not is_valid_square(sq):
        return "??"
    return f"{FILES[sq[1]]}{sq[0] + 1}"
