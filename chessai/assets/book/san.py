"""Compact algebraic (SAN) tokens from book lines -> concrete legal moves."""

from __future__ import annotations

import re
from typing import List, Optional

from ...engine.board import Board
from ...engine.move import Move, str_to_square
from ...engine.piece import PieceType, PROMOTION_TYPES, piece_type_from_char


_MOVE_NUMBER = re.compile(r"\d+\.(?:\.\.)?")
_RESULTS = {"1-0", "0-1", "1/2-1/2", "*"}
_PIECE_LETTERS = "NBRQK"
_KING_SIDE = {"O-O", "0-0"}
_QUEEN_SIDE = {"O-O-O", "0-0-0"}


def parse_san_moves(line: str) -> List[str]:
    """Split a book line into SAN tokens.

    ``"1. e4 c6 2. d4 d5"`` -> ``["e4", "c6", "d4", "d5"]``
    """
    stripped = _MOVE_NUMBER.sub(" ", line)
    return [tok for tok in stripped.split() if tok and tok not in _RESULTS]


def san_to_move(san: str, board: Board) -> Optional[Move]:
    """Resolve ``san`` against the side to move's legal moves.

    Returns ``None`` when the token cannot be parsed or does not match exactly
    one legal move.
    """
    s = san.strip().rstrip("+#!?")
    if not s:
        return None
    legal = board.legal_moves()

    if s in _KING_SIDE or s in _QUEEN_SIDE:
        target_file = 6 if s in _KING_SIDE else 2
        for m in legal:
            p = board.piece_at(m.from_sq)
            if (
                p is not None
                and p.type is PieceType.KING
                and m.to_sq[1] == target_file
                and abs(m.to_sq[1] - m.from_sq[1]) == 2
            ):
                return m
        return None

    promotion: Optional[PieceType] = None
    if "=" in s:
        s, _, promo = s.partition("=")
        promotion = piece_type_from_char(promo[:1])
        if promotion not in PROMOTION_TYPES:
            return None
    elif len(s) > 2 and s[-1] in "QRBN" and s[-2].isdigit():
        promotion = piece_type_from_char(s[-1])
        s = s[:-1]

    if len(s) < 2:
        return None
    to_sq = str_to_square(s[-2:])
    if to_sq is None:
        return None

    piece_type = PieceType.PAWN
    if s[0] in _PIECE_LETTERS:
        piece_type = piece_type_from_char(s[0]) or PieceType.PAWN
        s = s[1:]
    disambiguation = s[:-2].replace("x", "").replace(":", "")

    candidates = []
    for m in legal:
        p = board.piece_at(m.from_sq)
        if p is None or p.type is not piece_type or m.to_sq != to_sq:
            continue
        if m.promotion is not promotion:
            continue
        candidates.append(m)

    if len(candidates) == 1:
        return candidates[0]

    matches = [m for m in candidates if _matches_origin(m, disambiguation)]
    return matches[0] if len(matches) == 1 else None


def _matches_origin(move: Move, text: str) -> bool:
    rank, file = move.from_sq
    if len(text) == 1:
        if text in "abcdefgh":
            return file == "abcdefgh".index(text)
        if text in "12345678":
            return rank == int(text) - 1
        return False
    if len(text) == 2:
        return str_to_square(text) == move.from_sq
    return False
