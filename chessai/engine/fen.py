"""Canonical position encoding (FEN-style) used as the opening-book key.

The encoding is a pure function of the visible board state:
- castling rights are derived from king/rook ``has_moved`` flags,
- the en passant square is emitted only when a pawn of the side to move could
  actually capture onto it,
- the halfmove clock is always 0 and the fullmove number comes from the ply
  count.
"""

from __future__ import annotations

from typing import List, Optional

from .board import Board
from .move import Square, square_to_str, str_to_square
from .piece import Piece, PieceType, Side


def encode(board: Board) -> str:
    """Serialize ``board`` into its canonical single-line key."""
    ranks_str: List[str] = []
    for rank in range(7, -1, -1):  # far rank first
        run = 0
        row: List[str] = []
        for file in range(8):
            p = board.squares[rank][file]
            if p is None:
                run += 1
                continue
            if run > 0:
                row.append(str(run))
                run = 0
            row.append(p.fen_char())
        if run > 0:
            row.append(str(run))
        ranks_str.append("".join(row))
    placement = "/".join(ranks_str)

    stm = board.side_to_move.value
    castling = castling_rights(board) or "-"
    ep = "-"
    if board.ep_square is not None and _can_capture_en_passant(board, board.ep_square):
        ep = square_to_str(board.ep_square)
    fullmove = board.ply // 2 + 1
    return f"{placement} {stm} {castling} {ep} 0 {fullmove}"


def castling_rights(board: Board) -> str:
    """Castling letters in ``KQkq`` order, computed from ``has_moved`` flags."""
    rights = ""
    for side, king_ch, queen_ch in ((Side.WHITE, "K", "Q"), (Side.BLACK, "k", "q")):
        rank = side.home_rank
        king = board.squares[rank][4]
        if king is None or king.type is not PieceType.KING or king.side is not side:
            continue
        if king.has_moved:
            continue
        for file, ch in ((7, king_ch), (0, queen_ch)):
            rook = board.squares[rank][file]
            if (
                rook is not None
                and rook.type is PieceType.ROOK
                and rook.side is side
                and not rook.has_moved
            ):
                rights += ch
    return rights


def _can_capture_en_passant(board: Board, ep: Square) -> bool:
    side = board.side_to_move
    capture_rank = ep[0] - side.forward
    for df in (-1, 1):
        p = board.piece_at((capture_rank, ep[1] + df))
        if p is not None and p.type is PieceType.PAWN and p.side is side:
            return True
    return False


def decode(fen: str) -> Board:
    """Build a board from a FEN string.

    Castling letters are mapped back onto ``has_moved``: a king or corner rook
    without a matching right is marked as moved. The halfmove clock is
    validated but not tracked.

    Raises:
        ValueError: If ``fen`` is empty, has the wrong number of fields, or
            contains invalid piece placement, castling rights, en passant
            square, or move counters.
    """
    if not fen or not isinstance(fen, str):
        raise ValueError("FEN must be a non-empty string")
    parts = fen.strip().split()
    if len(parts) != 6:
        raise ValueError("FEN must have 6 fields")
    placement, stm, castling, ep, halfmove, fullmove = parts

    ranks = placement.split("/")
    if len(ranks) != 8:
        raise ValueError("FEN board must have 8 ranks")
    board = Board.empty()
    for rank_idx, rank in enumerate(ranks[::-1]):  # start from rank 1 (bottom)
        file_idx = 0
        for ch in rank:
            if ch.isdigit():
                n = int(ch)
                if n < 1 or n > 8:
                    raise ValueError("invalid empty count in FEN rank")
                file_idx += n
                continue
            if file_idx >= 8:
                raise ValueError("too many squares in FEN rank")
            board.squares[rank_idx][file_idx] = Piece.from_fen_char(ch)
            file_idx += 1
        if file_idx != 8:
            raise ValueError("rank does not sum to 8 squares in FEN")

    if stm not in ("w", "b"):
        raise ValueError("side to move must be 'w' or 'b'")
    board.side_to_move = Side(stm)

    if castling != "-":
        if any(ch not in "KQkq" for ch in castling) or len(set(castling)) != len(castling):
            raise ValueError("invalid castling rights")
    else:
        castling = ""
    _apply_castling_flags(board, castling)

    ep_square: Optional[Square] = None
    if ep != "-":
        ep_square = str_to_square(ep)
        if ep_square is None:
            raise ValueError("invalid en passant square")
        # The target sits behind a pawn the opponent just pushed two squares
        if ep_square[0] != (5 if board.side_to_move is Side.WHITE else 2):
            raise ValueError("invalid en passant square rank")
    board.ep_square = ep_square

    try:
        halfmove_clock = int(halfmove)
        fullmove_number = int(fullmove)
    except ValueError as e:
        raise ValueError("invalid move counters in FEN") from e
    if halfmove_clock < 0 or fullmove_number <= 0:
        raise ValueError("invalid move counters in FEN")
    board.ply_offset = (fullmove_number - 1) * 2 + (1 if board.side_to_move is Side.BLACK else 0)
    return board


def _apply_castling_flags(board: Board, castling: str) -> None:
    for side, king_ch, queen_ch in ((Side.WHITE, "K", "Q"), (Side.BLACK, "k", "q")):
        rank = side.home_rank
        rook_rights = {7: king_ch in castling, 0: queen_ch in castling}
        for sq, p in list(board.pieces(side)):
            if p.type is PieceType.KING:
                keeps = sq == (rank, 4) and any(rook_rights.values())
            elif p.type is PieceType.ROOK:
                keeps = sq[0] == rank and rook_rights.get(sq[1], False)
            else:
                continue
            if not keeps:
                board.set_piece(sq, p.moved())
