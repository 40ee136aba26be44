from __future__ import annotations

import pytest

from chessai.engine.board import Board
from chessai.engine.move import str_to_square
from chessai.engine.piece import Piece, PieceType, Side
from chessai.eval import activity, evaluate, material, positional, psqt_bonus, tension


HANGING_QUEEN = "4k3/8/8/3q4/8/8/8/3RK3 w - - 0 1"


def mirrored(b: Board) -> Board:
    """Flip ranks and swap colours; the evaluation must change sign."""
    m = Board.empty()
    for (rank, file), p in b.pieces():
        m.set_piece((7 - rank, file), Piece(p.type, p.side.opposite, p.has_moved))
    m.side_to_move = b.side_to_move.opposite
    return m


def test_startpos_is_balanced() -> None:
    b = Board.startpos()
    assert material(b) == 0
    assert tension(b) == 0
    assert activity(b) == 0
    assert positional(b) == 0
    assert evaluate(b) == 0


@pytest.mark.parametrize(
    "fen",
    [
        HANGING_QUEEN,
        "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1",
        "8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - - 0 1",
    ],
)
def test_colour_mirror_negates_score(fen: str) -> None:
    b = Board.from_fen(fen)
    assert evaluate(mirrored(b)) == -evaluate(b)


def test_hanging_piece_costs_a_tenth_and_contested_a_hundredth() -> None:
    b = Board.from_fen(HANGING_QUEEN)
    # Black queen hangs (+90 for White); white rook is attacked but defended (-5)
    assert tension(b) == 85


def test_activity_counts_attacked_enemy_material() -> None:
    b = Board.from_fen(HANGING_QUEEN)
    # Rook hits the queen (+900), queen hits the rook (-500)
    assert activity(b) == 20


def test_material_counts_both_sides() -> None:
    b = Board.from_fen(HANGING_QUEEN)
    assert material(b) == 500 - 900


def test_psqt_mirrors_for_black() -> None:
    e7, e2 = str_to_square("e7"), str_to_square("e2")
    assert psqt_bonus(PieceType.PAWN, Side.WHITE, e7) == 50
    assert psqt_bonus(PieceType.PAWN, Side.BLACK, e2) == 50
    assert psqt_bonus(PieceType.KNIGHT, Side.WHITE, str_to_square("d4")) > psqt_bonus(
        PieceType.KNIGHT, Side.WHITE, str_to_square("a1")
    )


def test_evaluate_does_not_depend_on_history() -> None:
    a = Board.from_fen(HANGING_QUEEN)
    b = a.copy()
    b.history = list(Board.startpos().legal_moves())
    assert evaluate(a) == evaluate(b)
