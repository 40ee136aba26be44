from __future__ import annotations

import pytest

from chessai.assets.book import OpeningBook, load_book
from chessai.engine.board import Board
from chessai.engine.move import parse_uci
from chessai.engine.piece import Side
from chessai.search.service import SearchConfig, SearchService, best_move


START_KEY = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"


def test_book_move_comes_first() -> None:
    res = SearchService(load_book()).search(Board.startpos(), SearchConfig.minimax(3))
    assert res.source == "book"
    assert res.best_move == parse_uci("e2e4")
    assert res.opening_name == "Caro-Kann Defense: Advance Variation"
    assert res.nodes == 0


def test_minimax_when_out_of_book() -> None:
    board = Board.from_fen("6k1/5ppp/8/8/8/8/8/R5K1 w - - 0 1")
    res = SearchService(load_book()).search(board, SearchConfig.minimax(2))
    assert res.source == "minimax"
    assert res.best_move == parse_uci("a1a8")
    assert res.score is not None and res.nodes > 0


def test_mcts_strategy_is_seeded() -> None:
    board = Board.from_fen("q6k/8/8/8/8/8/7K/R7 w - - 0 1")
    config = SearchConfig.mcts(1000, seed=5)
    first = SearchService().search(board, config)
    second = SearchService().search(board, config)
    assert first.source == "mcts"
    assert first.best_move == second.best_move == parse_uci("a1a8")


def test_depth_below_one_still_moves() -> None:
    board = Board.from_fen("6k1/5ppp/8/8/8/8/8/R5K1 w - - 0 1")
    assert SearchService().search(board, SearchConfig(depth=0)).best_move is not None


def test_terminal_position_reports_none() -> None:
    board = Board.from_fen("R5k1/5ppp/8/8/8/8/8/6K1 b - - 0 1")
    for config in (SearchConfig.minimax(2), SearchConfig.mcts(20, seed=1)):
        res = SearchService().search(board, config)
        assert res.best_move is None
        assert res.source == "none"


def test_wrong_side_rejected() -> None:
    with pytest.raises(ValueError):
        SearchService().search(Board.startpos(), SearchConfig(), side=Side.BLACK)


def test_unknown_strategy_rejected() -> None:
    with pytest.raises(ValueError):
        SearchConfig(strategy="random")


def test_locked_opening_falls_through_to_search() -> None:
    book = OpeningBook([{START_KEY: {"moves": "1. d4 d5", "name": "Queen Pawn"}}])
    board = Board.startpos()
    locked = SearchService(book, opening="Something Else").search(board, SearchConfig.minimax(1))
    assert locked.source == "minimax"
    open_ = SearchService(book, opening="Queen Pawn").search(board, SearchConfig.minimax(1))
    assert open_.best_move == parse_uci("d2d4")


def test_best_move_helper_does_not_mutate() -> None:
    board = Board.startpos()
    mv = best_move(board, SearchConfig.minimax(1))
    assert mv in board.legal_moves()
    assert board.history == []
