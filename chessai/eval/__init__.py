"""Evaluation heuristics.

Pure, deterministic, and side-effect free. Scores are in centipawns and
positive values favour White, the reference side; search decides how to use
the sign.
"""

from __future__ import annotations

from typing import Dict, Final, List, Set

from chessai.engine.board import Board
from chessai.engine.move import Square
from chessai.engine.piece import PieceType, Side


# Hanging pieces lose a tenth of their value, contested ones a hundredth
HANGING_DIVISOR: Final = 10
CONTESTED_DIVISOR: Final = 100
# Value of attacked enemy material is scaled down by this divisor
ACTIVITY_DIVISOR: Final = 20


# Piece-square tables from White's point of view, written as seen from White's
# side of the board: row 0 is rank 8, row 7 is rank 1.
PSQT_P: Final = [
    [0, 0, 0, 0, 0, 0, 0, 0],
    [50, 50, 50, 50, 50, 50, 50, 50],
    [10, 10, 20, 30, 30, 20, 10, 10],
    [5, 5, 10, 25, 25, 10, 5, 5],
    [0, 0, 0, 20, 20, 0, 0, 0],
    [5, -5, -10, 0, 0, -10, -5, 5],
    [5, 10, 10, -20, -20, 10, 10, 5],
    [0, 0, 0, 0, 0, 0, 0, 0],
]
PSQT_N: Final = [
    [-50, -40, -30, -30, -30, -30, -40, -50],
    [-40, -20, 0, 0, 0, 0, -20, -40],
    [-30, 0, 10, 15, 15, 10, 0, -30],
    [-30, 5, 15, 20, 20, 15, 5, -30],
    [-30, 0, 15, 20, 20, 15, 0, -30],
    [-30, 5, 10, 15, 15, 10, 5, -30],
    [-40, -20, 0, 5, 5, 0, -20, -40],
    [-50, -40, -30, -30, -30, -30, -40, -50],
]
PSQT_B: Final = [
    [-20, -10, -10, -10, -10, -10, -10, -20],
    [-10, 0, 0, 0, 0, 0, 0, -10],
    [-10, 0, 5, 10, 10, 5, 0, -10],
    [-10, 5, 5, 10, 10, 5, 5, -10],
    [-10, 0, 10, 10, 10, 10, 0, -10],
    [-10, 10, 10, 10, 10, 10, 10, -10],
    [-10, 5, 0, 0, 0, 0, 5, -10],
    [-20, -10, -10, -10, -10, -10, -10, -20],
]
PSQT_R: Final = [
    [0, 0, 0, 0, 0, 0, 0, 0],
    [5, 10, 10, 10, 10, 10, 10, 5],
    [-5, 0, 0, 0, 0, 0, 0, -5],
    [-5, 0, 0, 0, 0, 0, 0, -5],
    [-5, 0, 0, 0, 0, 0, 0, -5],
    [-5, 0, 0, 0, 0, 0, 0, -5],
    [-5, 0, 0, 0, 0, 0, 0, -5],
    [0, 0, 0, 5, 5, 0, 0, 0],
]
PSQT_Q: Final = [
    [-20, -10, -10, -5, -5, -10, -10, -20],
    [-10, 0, 0, 0, 0, 0, 0, -10],
    [-10, 0, 5, 5, 5, 5, 0, -10],
    [-5, 0, 5, 5, 5, 5, 0, -5],
    [0, 0, 5, 5, 5, 5, 0, -5],
    [-10, 5, 5, 5, 5, 5, 0, -10],
    [-10, 0, 5, 0, 0, 0, 0, -10],
    [-20, -10, -10, -5, -5, -10, -10, -20],
]
PSQT_K: Final = [
    [-30, -40, -40, -50, -50, -40, -40, -30],
    [-30, -40, -40, -50, -50, -40, -40, -30],
    [-30, -40, -40, -50, -50, -40, -40, -30],
    [-30, -40, -40, -50, -50, -40, -40, -30],
    [-20, -30, -30, -40, -40, -30, -30, -20],
    [-10, -20, -20, -20, -20, -20, -20, -10],
    [20, 20, 0, 0, 0, 0, 20, 20],
    [20, 30, 10, 0, 0, 10, 30, 20],
]

PSQT: Final[Dict[PieceType, List[List[int]]]] = {
    PieceType.PAWN: PSQT_P,
    PieceType.KNIGHT: PSQT_N,
    PieceType.BISHOP: PSQT_B,
    PieceType.ROOK: PSQT_R,
    PieceType.QUEEN: PSQT_Q,
    PieceType.KING: PSQT_K,
}


def psqt_bonus(pt: PieceType, side: Side, sq: Square) -> int:
    """Table bonus for a piece of ``side`` on ``sq`` (unsigned)."""
    rank, file = sq
    # Mirror by rank for Black so tables always read from the owner's side
    own_rank = rank if side is Side.WHITE else 7 - rank
    return PSQT[pt][7 - own_rank][file]


def attacked_squares(board: Board, side: Side) -> Set[Square]:
    attacked: Set[Square] = set()
    for sq, p in board.pieces(side):
        for mv in board.attack_moves(p, sq):
            attacked.add(mv.to_sq)
    return attacked


def material(board: Board) -> int:
    return sum(p.side.sign * p.type.material for _, p in board.pieces())


def tension(board: Board) -> int:
    """Penalise hanging pieces heavily and contested pieces lightly."""
    attacks = {
        Side.WHITE: attacked_squares(board, Side.WHITE),
        Side.BLACK: attacked_squares(board, Side.BLACK),
    }
    score = 0
    for sq, p in board.pieces():
        if sq not in attacks[p.side.opposite]:
            continue
        # Penalty goes against the owner
        if sq in attacks[p.side]:
            score -= p.side.sign * (p.type.material // CONTESTED_DIVISOR)
        else:
            score -= p.side.sign * (p.type.material // HANGING_DIVISOR)
    return score


def activity(board: Board) -> int:
    """Reward pressure: value of enemy pieces under attack."""
    total = 0
    for sq, p in board.pieces():
        for mv in board.attack_moves(p, sq):
            target = board.piece_at(mv.to_sq)
            if target is not None and target.side is not p.side:
                total += p.side.sign * target.type.material
    return int(total / ACTIVITY_DIVISOR)


def positional(board: Board) -> int:
    return sum(p.side.sign * psqt_bonus(p.type, p.side, sq) for sq, p in board.pieces())


def evaluate(board: Board) -> int:
    """Return material + tension + activity + PSQT in centipawns.

    Positive means advantage for White. No term depends on search depth or on
    move history.
    """
    return material(board) + tension(board) + activity(board) + positional(board)
