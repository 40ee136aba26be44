from __future__ import annotations

import pytest

from chessai.engine.board import STARTPOS_FEN
from chessai.engine.game import Game
from chessai.engine.move import Move, parse_uci, square_to_str, str_to_square
from chessai.engine.piece import PieceType


def test_apply_and_undo_restore_position() -> None:
    g = Game.new()
    g.apply_move(parse_uci("e2e4"))
    g.apply_move(parse_uci("e7e5"))
    assert g.move_history_uci() == ["e2e4", "e7e5"]
    assert g.last_move() == parse_uci("e7e5")
    g.undo_move()
    g.undo_move()
    assert g.to_fen() == STARTPOS_FEN
    assert g.last_move() is None


def test_undo_without_moves_raises() -> None:
    with pytest.raises(ValueError):
        Game.new().undo_move()


def test_illegal_move_rejected_and_position_unchanged() -> None:
    g = Game.new()
    with pytest.raises(ValueError):
        g.apply_move(parse_uci("e2e5"))
    with pytest.raises(ValueError):
        g.apply_move(parse_uci("e7e5"))  # not white's piece
    assert g.to_fen() == STARTPOS_FEN
    assert g.snapshots == []


def test_undo_restores_captured_lists() -> None:
    g = Game.from_fen("4k3/8/8/3p4/4P3/8/8/4K3 w - - 0 1")
    g.apply_move(parse_uci("e4d5"))
    assert len(g.board.captured_by_white) == 1
    g.undo_move()
    assert g.board.captured_by_white == []


def test_parse_uci_and_square_helpers() -> None:
    mv = parse_uci("e7e8q")
    assert mv == Move(str_to_square("e7"), str_to_square("e8"), PieceType.QUEEN)
    assert mv.to_uci() == "e7e8q"
    assert str_to_square("a1") == (0, 0)
    assert str_to_square("h8") == (7, 7)
    assert str_to_square("i9") is None
    assert str_to_square("e") is None
    assert square_to_str((8, 0)) == "??"
    for bad in ("", "e2", "e2e9", "e7e8k", "e2e4qq"):
        with pytest.raises(ValueError):
            parse_uci(bad)
