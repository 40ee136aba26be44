from __future__ import annotations

from chessai.engine.board import Board
from chessai.engine.fen import castling_rights
from chessai.engine.move import parse_uci, str_to_square
from chessai.engine.piece import PieceType, Side


def moves_set(b: Board) -> set[str]:
    return {m.to_uci() for m in b.legal_moves()}


def test_white_castling_available_when_clear_and_not_in_check() -> None:
    b = Board.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    ms = moves_set(b)
    assert "e1g1" in ms
    assert "e1c1" in ms


def test_black_castling_available() -> None:
    b = Board.from_fen("r3k2r/8/8/8/8/8/8/R3K2R b KQkq - 0 1")
    ms = moves_set(b)
    assert "e8g8" in ms
    assert "e8c8" in ms


def test_castling_blocked_when_in_check() -> None:
    b = Board.from_fen("4r2r/8/8/8/8/8/8/R3K2R w KQ - 0 1")
    ms = moves_set(b)
    assert "e1g1" not in ms
    assert "e1c1" not in ms


def test_castling_through_attacked_square_is_illegal() -> None:
    # Black rook on f3 covers f1
    b = Board.from_fen("r3k2r/8/8/8/8/5r2/8/R3K2R w KQkq - 0 1")
    ms = moves_set(b)
    assert "e1g1" not in ms
    assert "e1c1" in ms


def test_attacked_b_file_does_not_stop_queen_side_castling() -> None:
    b = Board.from_fen("r3k2r/8/8/8/8/1r6/8/R3K2R w KQkq - 0 1")
    assert "e1c1" in moves_set(b)


def test_castling_blocked_by_piece_between() -> None:
    b = Board.from_fen("r3k2r/8/8/8/8/8/8/RN2K1NR w KQkq - 0 1")
    ms = moves_set(b)
    assert "e1g1" not in ms
    assert "e1c1" not in ms


def test_castling_moves_rook() -> None:
    b = Board.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    b.apply_move(parse_uci("e1g1"))
    rook = b.piece_at(str_to_square("f1"))
    assert rook is not None and rook.type is PieceType.ROOK and rook.side is Side.WHITE
    assert b.piece_at(str_to_square("h1")) is None
    assert b.piece_at(str_to_square("g1")).type is PieceType.KING

    b.apply_move(parse_uci("e8c8"))
    rook = b.piece_at(str_to_square("d8"))
    assert rook is not None and rook.type is PieceType.ROOK and rook.side is Side.BLACK
    assert b.piece_at(str_to_square("a8")) is None


def test_rights_lost_after_king_or_rook_moves() -> None:
    b = Board.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    b.apply_move(parse_uci("a1b1"))
    assert castling_rights(b) == "Kkq"
    b.apply_move(parse_uci("e8e7"))
    assert castling_rights(b) == "K"


def test_king_returning_home_does_not_regain_rights() -> None:
    b = Board.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    for uci in ("e1e2", "e8e7", "e2e1", "e7e8"):
        b.apply_move(parse_uci(uci))
    assert castling_rights(b) == ""
    assert "e1g1" not in moves_set(b)
