from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from chessai.engine.board import Board
from chessai.engine.move import Move
from chessai.engine.piece import Side
from chessai.eval import evaluate


logger = logging.getLogger(__name__)

INF = 10_000_000
MATE_SCORE = 1_000_000  # mate scores are within +/- MATE_SCORE window

Evaluator = Callable[[Board], int]


@dataclass
class MinimaxResult:
    best_move: Optional[Move]
    score: int
    nodes: int
    cutoffs: int


class MinimaxSearch:
    """Fixed-depth minimax over a White-positive evaluation.

    White is always the maximizing side. With ``alpha_beta`` enabled children
    are pre-ordered by a one-ply static evaluation and branches are cut as
    soon as the running best reaches beta (max) or falls to alpha (min).
    Disabling it gives a plain full-width minimax with identical values.
    """

    def __init__(self, *, alpha_beta: bool = True, evaluator: Evaluator = evaluate) -> None:
        self.alpha_beta = alpha_beta
        self.evaluator = evaluator

    def search(self, board: Board, depth: int) -> MinimaxResult:
        """Search ``board`` to ``depth`` plies; ``board`` itself is not mutated."""
        nodes = 0
        cutoffs = 0
        evaluator = self.evaluator
        use_pruning = self.alpha_beta

        def minimax(
            b: Board, d: int, maximizing: bool, alpha: int, beta: int, ply: int
        ) -> Tuple[Optional[Move], int]:
            nonlocal nodes, cutoffs
            nodes += 1

            side = Side.WHITE if maximizing else Side.BLACK
            legal = b.legal_moves(side)
            # Terminal states override the depth horizon
            if not legal:
                if b.is_in_check(side):
                    # Prefer quicker mates
                    mate = MATE_SCORE - ply
                    return None, (-mate if side is Side.WHITE else mate)
                return None, 0
            if b.has_insufficient_material():
                return None, 0
            if d <= 0:
                return None, evaluator(b)

            # One-ply static ordering
            children: List[Tuple[int, Move, Board]] = []
            for mv in legal:
                child = b.copy()
                child.apply_move(mv)
                children.append((evaluator(child), mv, child))
            children.sort(key=lambda c: c[0], reverse=maximizing)

            best_move: Optional[Move] = legal[0]
            best = -INF if maximizing else INF
            for _, mv, child in children:
                _, score = minimax(child, d - 1, not maximizing, alpha, beta, ply + 1)
                if (maximizing and score > best) or (not maximizing and score < best):
                    best = score
                    best_move = mv
                if not use_pruning:
                    continue
                if maximizing:
                    if best >= beta:
                        cutoffs += 1
                        return best_move, best
                    alpha = max(alpha, best)
                else:
                    if best <= alpha:
                        cutoffs += 1
                        return best_move, best
                    beta = min(beta, best)
            return best_move, best

        root = board.copy()
        move, score = minimax(
            root, depth, root.side_to_move is Side.WHITE, -INF, INF, 0
        )
        logger.debug(
            "minimax depth=%d move=%s score=%d nodes=%d cutoffs=%d",
            depth,
            move.to_uci() if move else None,
            score,
            nodes,
            cutoffs,
        )
        return MinimaxResult(best_move=move, score=score, nodes=nodes, cutoffs=cutoffs)
