from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from typing import Optional

from chessai.assets.book import OpeningBook
from chessai.engine.board import Board
from chessai.engine.move import Move
from chessai.engine.piece import Side
from chessai.search.mcts import DEFAULT_EXPLORATION, MCTSSearch
from chessai.search.minimax import MinimaxSearch


logger = logging.getLogger(__name__)

STRATEGIES = ("minimax", "mcts")


@dataclass(frozen=True)
class SearchConfig:
    """Which strategy to run and its budget.

    ``depth`` applies to minimax, ``iterations`` to MCTS; the other is
    ignored.
    """

    strategy: str = "minimax"
    depth: int = 3
    iterations: int = 500
    exploration: float = DEFAULT_EXPLORATION
    rollout_plies: int = 1
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.strategy not in STRATEGIES:
            raise ValueError(f"unknown strategy: {self.strategy!r}")

    @classmethod
    def minimax(cls, depth: int = 3) -> "SearchConfig":
        return cls(strategy="minimax", depth=depth)

    @classmethod
    def mcts(cls, iterations: int = 500, *, seed: Optional[int] = None) -> "SearchConfig":
        return cls(strategy="mcts", iterations=iterations, seed=seed)


@dataclass
class SearchResult:
    best_move: Optional[Move]
    source: str  # "book", "minimax", "mcts" or "none"
    score: Optional[int]
    nodes: int
    time_ms: int
    opening_name: Optional[str] = None


class SearchService:
    """AI facade: opening book first, then the configured search.

    The caller's board is never mutated; every search runs on its own copy.
    """

    def __init__(
        self, book: Optional[OpeningBook] = None, *, opening: Optional[str] = None
    ) -> None:
        self.book = book
        self.opening = opening

    def search(
        self, board: Board, config: SearchConfig, side: Optional[Side] = None
    ) -> SearchResult:
        """Pick a move for ``side`` (default: the side to move).

        Raises:
            ValueError: If ``side`` is given and it is not that side's turn.
        """
        if side is not None and side is not board.side_to_move:
            raise ValueError(f"not {side.name.lower()}'s turn")
        start = time.perf_counter()
        snapshot = board.copy()

        if self.book is not None:
            book_move = self.book.next_move(snapshot, opening=self.opening)
            if book_move is not None:
                return SearchResult(
                    best_move=book_move,
                    source="book",
                    score=None,
                    nodes=0,
                    time_ms=_elapsed_ms(start),
                    opening_name=self.book.opening_name(snapshot),
                )

        if config.strategy == "mcts":
            mcts = MCTSSearch(
                config.iterations,
                exploration=config.exploration,
                rollout_plies=config.rollout_plies,
                rng=random.Random(config.seed),
            )
            mres = mcts.search(snapshot, side)
            result = SearchResult(
                best_move=mres.best_move,
                source="mcts" if mres.best_move else "none",
                score=None,
                nodes=mres.tree_size,
                time_ms=_elapsed_ms(start),
            )
        else:
            # Depth below one still has to produce a move
            depth = max(1, config.depth)
            res = MinimaxSearch().search(snapshot, depth)
            result = SearchResult(
                best_move=res.best_move,
                source="minimax" if res.best_move else "none",
                score=res.score,
                nodes=res.nodes,
                time_ms=_elapsed_ms(start),
            )
        logger.debug(
            "search strategy=%s move=%s nodes=%d time_ms=%d",
            config.strategy,
            result.best_move.to_uci() if result.best_move else None,
            result.nodes,
            result.time_ms,
        )
        return result


def best_move(
    board: Board, config: SearchConfig, book: Optional[OpeningBook] = None
) -> Optional[Move]:
    """Engine API entry point: the move only, or ``None`` without legal moves."""
    return SearchService(book).search(board, config).best_move


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)
