from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from chessai.engine.board import Board
from chessai.engine.move import Move
from chessai.engine.piece import Side
from chessai.engine.status import StatusKind
from chessai.eval import evaluate


logger = logging.getLogger(__name__)

DEFAULT_EXPLORATION = math.sqrt(2)
# Evaluations are mapped onto [0, 1] as score / EVAL_SCALE + 0.5, then clamped
DEFAULT_EVAL_SCALE = 6000.0

Evaluator = Callable[[Board], int]


@dataclass
class MCTSNode:
    """Tree node stored in an arena list.

    ``parent`` and ``children`` are arena indices; the arena owns every node
    so the upward link never owns anything. ``wins`` is accumulated from the
    perspective of the side that made ``move``.
    """

    board: Board
    move: Optional[Move]
    parent: Optional[int]
    untried_moves: List[Move]
    terminal: bool
    children: List[int] = field(default_factory=list)
    visits: int = 0
    wins: float = 0.0

    @property
    def is_fully_expanded(self) -> bool:
        return not self.untried_moves

    @property
    def win_rate(self) -> float:
        return self.wins / self.visits if self.visits else 0.0


@dataclass
class MCTSResult:
    best_move: Optional[Move]
    iterations: int
    tree_size: int
    root_visits: int
    win_rate: Optional[float]


class MCTSSearch:
    """Monte Carlo Tree Search with UCB1 selection and shallow rollouts.

    One iteration is selection, expansion, simulation and backpropagation.
    Rollouts play ``rollout_plies`` random replies (default one) and score
    the result with the static evaluator; the result is flipped at every level
    on the way back up.
    """

    def __init__(
        self,
        iterations: int = 500,
        *,
        exploration: float = DEFAULT_EXPLORATION,
        rollout_plies: int = 1,
        eval_scale: float = DEFAULT_EVAL_SCALE,
        final_selection: str = "win_rate",
        rng: Optional[random.Random] = None,
        evaluator: Evaluator = evaluate,
    ) -> None:
        if final_selection not in ("win_rate", "visits"):
            raise ValueError(f"unknown final selection: {final_selection!r}")
        self.iterations = max(0, iterations)
        self.exploration = exploration
        self.rollout_plies = max(0, rollout_plies)
        self.eval_scale = eval_scale
        self.final_selection = final_selection
        self.rng = rng or random.Random()
        self.evaluator = evaluator
        self.nodes: List[MCTSNode] = []

    # --- Tree helpers ---
    def _new_node(self, board: Board, move: Optional[Move], parent: Optional[int]) -> int:
        untried = board.legal_moves()
        terminal = not untried or board.has_insufficient_material()
        self.nodes.append(
            MCTSNode(
                board=board,
                move=move,
                parent=parent,
                untried_moves=untried,
                terminal=terminal,
            )
        )
        return len(self.nodes) - 1

    def ucb1(self, idx: int) -> float:
        node = self.nodes[idx]
        if node.visits == 0 or node.parent is None:
            return math.inf
        parent = self.nodes[node.parent]
        explore = math.sqrt(math.log(parent.visits) / node.visits)
        return node.win_rate + self.exploration * explore

    def best_child(self, idx: int) -> Optional[int]:
        children = self.nodes[idx].children
        if not children:
            return None
        return max(children, key=self.ucb1)

    # --- Phases ---
    def select(self, root: int) -> int:
        idx = root
        while not self.nodes[idx].terminal:
            if not self.nodes[idx].is_fully_expanded:
                return self.expand(idx)
            nxt = self.best_child(idx)
            if nxt is None:
                break
            idx = nxt
        return idx

    def expand(self, idx: int) -> int:
        node = self.nodes[idx]
        move = node.untried_moves.pop(self.rng.randrange(len(node.untried_moves)))
        board = node.board.copy()
        board.apply_move(move)
        child = self._new_node(board, move, idx)
        node.children.append(child)
        return child

    def simulate(self, idx: int) -> float:
        """Value in [0, 1] for the side that just moved into node ``idx``."""
        node = self.nodes[idx]
        just_moved = node.board.side_to_move.opposite
        if node.terminal:
            status = node.board.game_status()
            if status.kind is StatusKind.CHECKMATE:
                return 0.0 if status.side is just_moved else 1.0
            return 0.5

        board = node.board.copy()
        for _ in range(self.rollout_plies):
            replies = board.legal_moves()
            if not replies:
                break
            board.apply_move(self.rng.choice(replies))
        normalized = self.evaluator(board) / self.eval_scale + 0.5
        clamped = min(max(normalized, 0.0), 1.0)
        return clamped if just_moved is Side.WHITE else 1.0 - clamped

    def backpropagate(self, idx: Optional[int], result: float) -> None:
        while idx is not None:
            node = self.nodes[idx]
            node.visits += 1
            node.wins += result
            # Each level up is the other side's perspective
            result = 1.0 - result
            idx = node.parent

    # --- Driver ---
    def search(self, board: Board, side: Optional[Side] = None) -> MCTSResult:
        """Run the iteration budget on a copy of ``board`` and pick a move.

        The tree is discarded afterwards. Without any expanded child the
        result falls back to a random legal move for ``side``.
        """
        side = side or board.side_to_move
        self.nodes = []
        root = self._new_node(board.copy(), None, None)
        for _ in range(self.iterations):
            leaf = self.select(root)
            self.backpropagate(leaf, self.simulate(leaf))

        children = self.nodes[root].children
        best_move: Optional[Move] = None
        win_rate: Optional[float] = None
        if children:
            if self.final_selection == "visits":
                key = lambda i: (self.nodes[i].visits, self.nodes[i].win_rate)  # noqa: E731
            else:
                key = lambda i: (self.nodes[i].win_rate, self.nodes[i].visits)  # noqa: E731
            best = max(children, key=key)
            best_move = self.nodes[best].move
            win_rate = self.nodes[best].win_rate
        else:
            fallback = board.legal_moves(side)
            if fallback:
                best_move = self.rng.choice(fallback)

        result = MCTSResult(
            best_move=best_move,
            iterations=self.iterations,
            tree_size=len(self.nodes),
            root_visits=self.nodes[root].visits,
            win_rate=win_rate,
        )
        logger.debug(
            "mcts iterations=%d move=%s win_rate=%s tree=%d",
            self.iterations,
            best_move.to_uci() if best_move else None,
            f"{win_rate:.3f}" if win_rate is not None else None,
            result.tree_size,
        )
        self.nodes = []
        return result
