from __future__ import annotations

from typing import Dict

from .board import Board


def perft(board: Board, depth: int) -> int:
    """Count the leaf positions of the legal move tree below ``board``.

    Node counts for well-known positions are published, so any mismatch points
    at a move generation bug. Children are built on copies; ``board`` is left
    as it was.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1
    moves = board.legal_moves()
    if depth == 1:
        return len(moves)
    total = 0
    for mv in moves:
        child = board.copy()
        child.apply_move(mv)
        total += perft(child, depth - 1)
    return total


def divide(board: Board, depth: int) -> Dict[str, int]:
    """Per-root-move perft counts keyed by UCI, for narrowing down a mismatch."""
    if depth < 1:
        raise ValueError("depth must be >= 1")
    counts: Dict[str, int] = {}
    for mv in board.legal_moves():
        child = board.copy()
        child.apply_move(mv)
        counts[mv.to_uci()] = perft(child, depth - 1)
    return counts
