from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from .move import Move, Square, is_valid_square, offset
from .piece import Piece, PieceType, Side, PROMOTION_TYPES
from .status import GameStatus


STARTPOS_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

BACK_RANK = (
    PieceType.ROOK,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.QUEEN,
    PieceType.KING,
    PieceType.BISHOP,
    PieceType.KNIGHT,
    PieceType.ROOK,
)

KNIGHT_OFFSETS = ((2, 1), (2, -1), (-2, 1), (-2, -1), (1, 2), (1, -2), (-1, 2), (-1, -2))
KING_OFFSETS = ((1, 1), (1, 0), (1, -1), (0, 1), (0, -1), (-1, 1), (-1, 0), (-1, -1))
DIAGONALS = ((1, 1), (1, -1), (-1, 1), (-1, -1))
ORTHOGONALS = ((1, 0), (-1, 0), (0, 1), (0, -1))

SLIDER_DIRS: Dict[PieceType, Tuple[Tuple[int, int], ...]] = {
    PieceType.BISHOP: DIAGONALS,
    PieceType.ROOK: ORTHOGONALS,
    PieceType.QUEEN: DIAGONALS + ORTHOGONALS,
}

Grid = List[List[Optional[Piece]]]


def _empty_grid() -> Grid:
    return [[None] * 8 for _ in range(8)]


@dataclass
class Board:
    """Board state and rules.

    Notes:
    - ``squares[rank][file]``, rank 0 is white's back rank, file 0 the a-file.
    - Legality is decided by copy, try, reject: every pseudo-legal move is
      applied to a throwaway copy and dropped if the mover's king is attacked.
    - ``ply_offset`` counts plies played before this board was set up from a
      FEN, so move counters survive a round trip.
    """

    squares: Grid = field(default_factory=_empty_grid)
    side_to_move: Side = Side.WHITE
    ep_square: Optional[Square] = None
    history: List[Move] = field(default_factory=list)
    captured_by_white: List[Piece] = field(default_factory=list)
    captured_by_black: List[Piece] = field(default_factory=list)
    ply_offset: int = 0

    # --- Construction ---
    @classmethod
    def empty(cls) -> "Board":
        return cls()

    @classmethod
    def startpos(cls) -> "Board":
        """Create a board initialized to the standard starting position."""
        board = cls()
        for f, pt in enumerate(BACK_RANK):
            board.squares[0][f] = Piece(pt, Side.WHITE)
            board.squares[1][f] = Piece(PieceType.PAWN, Side.WHITE)
            board.squares[6][f] = Piece(PieceType.PAWN, Side.BLACK)
            board.squares[7][f] = Piece(pt, Side.BLACK)
        return board

    @classmethod
    def from_fen(cls, fen: str) -> "Board":
        from .fen import decode

        return decode(fen)

    def to_fen(self) -> str:
        from .fen import encode

        return encode(self)

    def copy(self) -> "Board":
        """Value copy; pieces are immutable so copying the rows is enough."""
        return Board(
            squares=[list(row) for row in self.squares],
            side_to_move=self.side_to_move,
            ep_square=self.ep_square,
            history=list(self.history),
            captured_by_white=list(self.captured_by_white),
            captured_by_black=list(self.captured_by_black),
            ply_offset=self.ply_offset,
        )

    # --- Accessors ---
    @property
    def ply(self) -> int:
        """Number of plies played since the start of the game."""
        return self.ply_offset + len(self.history)

    def piece_at(self, sq: Square) -> Optional[Piece]:
        if not is_valid_square(sq):
            return None
        return self.squares[sq[0]][sq[1]]

    def set_piece(self, sq: Square, piece: Optional[Piece]) -> None:
        if is_valid_square(sq):
            self.squares[sq[0]][sq[1]] = piece

    def is_empty(self, sq: Square) -> bool:
        return self.piece_at(sq) is None

    def is_enemy(self, sq: Square, side: Side) -> bool:
        p = self.piece_at(sq)
        return p is not None and p.side is not side

    def pieces(self, side: Optional[Side] = None) -> Iterator[Tuple[Square, Piece]]:
        """Yield ``(square, piece)`` pairs, optionally for one side only."""
        for rank in range(8):
            for file in range(8):
                p = self.squares[rank][file]
                if p is not None and (side is None or p.side is side):
                    yield (rank, file), p

    def piece_count(self) -> int:
        return sum(1 for _ in self.pieces())

    def find_king(self, side: Side) -> Optional[Square]:
        for sq, p in self.pieces(side):
            if p.type is PieceType.KING:
                return sq
        return None

    def captured_by(self, side: Side) -> List[Piece]:
        return self.captured_by_white if side is Side.WHITE else self.captured_by_black

    # --- Pseudo-legal generation ---
    def pseudo_legal_moves(self, piece: Piece, sq: Square) -> List[Move]:
        """Moves obeying piece geometry; may leave the mover's king attacked."""
        if piece.type is PieceType.PAWN:
            return self._pawn_moves(piece, sq)
        if piece.type is PieceType.KNIGHT:
            return self._step_moves(piece, sq, KNIGHT_OFFSETS)
        if piece.type is PieceType.KING:
            return self._king_moves(piece, sq, include_castling=True)
        return self._sliding_moves(piece, sq, SLIDER_DIRS[piece.type])

    def attack_moves(self, piece: Piece, sq: Square) -> List[Move]:
        """Squares ``piece`` attacks or defends from ``sq``.

        Castling is never included, so attack detection cannot recurse into
        castling legality. Pawns attack their two forward diagonals only, and
        squares holding a friendly piece count as defended.
        """
        targets: List[Square] = []
        if piece.type is PieceType.PAWN:
            for df in (-1, 1):
                targets.append(offset(sq, piece.side.forward, df))
        elif piece.type is PieceType.KNIGHT:
            targets = [offset(sq, dr, df) for dr, df in KNIGHT_OFFSETS]
        elif piece.type is PieceType.KING:
            targets = [offset(sq, dr, df) for dr, df in KING_OFFSETS]
        else:
            for dr, df in SLIDER_DIRS[piece.type]:
                cur = offset(sq, dr, df)
                while is_valid_square(cur):
                    targets.append(cur)
                    if self.squares[cur[0]][cur[1]] is not None:
                        break
                    cur = offset(cur, dr, df)
        return [Move(sq, t) for t in targets if is_valid_square(t)]

    def _pawn_moves(self, piece: Piece, sq: Square) -> List[Move]:
        moves: List[Move] = []
        side = piece.side
        direction = side.forward
        start_rank = 1 if side is Side.WHITE else 6
        promo_rank = 7 if side is Side.WHITE else 0
        # En passant targets sit on rank 6 for white captures and rank 3 for black
        ep_rank = 5 if side is Side.WHITE else 2

        def add(to: Square) -> None:
            if to[0] == promo_rank:
                for promo in PROMOTION_TYPES:
                    moves.append(Move(sq, to, promo))
            else:
                moves.append(Move(sq, to))

        one = offset(sq, direction, 0)
        if is_valid_square(one) and self.is_empty(one):
            add(one)
            two = offset(sq, 2 * direction, 0)
            if sq[0] == start_rank and self.is_empty(two):
                moves.append(Move(sq, two))

        for df in (-1, 1):
            cap = offset(sq, direction, df)
            if not is_valid_square(cap):
                continue
            if self.is_enemy(cap, side):
                add(cap)
            elif cap == self.ep_square and cap[0] == ep_rank:
                moves.append(Move(sq, cap))
        return moves

    def _step_moves(
        self, piece: Piece, sq: Square, offsets: Tuple[Tuple[int, int], ...]
    ) -> List[Move]:
        moves: List[Move] = []
        for dr, df in offsets:
            to = offset(sq, dr, df)
            if not is_valid_square(to):
                continue
            target = self.squares[to[0]][to[1]]
            if target is None or target.side is not piece.side:
                moves.append(Move(sq, to))
        return moves

    def _sliding_moves(
        self, piece: Piece, sq: Square, dirs: Tuple[Tuple[int, int], ...]
    ) -> List[Move]:
        moves: List[Move] = []
        for dr, df in dirs:
            cur = offset(sq, dr, df)
            while is_valid_square(cur):
                target = self.squares[cur[0]][cur[1]]
                if target is not None:
                    if target.side is not piece.side:
                        moves.append(Move(sq, cur))
                    break
                moves.append(Move(sq, cur))
                cur = offset(cur, dr, df)
        return moves

    def _king_moves(self, piece: Piece, sq: Square, *, include_castling: bool) -> List[Move]:
        moves = self._step_moves(piece, sq, KING_OFFSETS)
        if not include_castling or piece.has_moved:
            return moves
        rank = piece.side.home_rank
        if sq != (rank, 4) or self.is_in_check(piece.side):
            return moves
        enemy = piece.side.opposite

        def rook_ready(file: int) -> bool:
            rook = self.squares[rank][file]
            return (
                rook is not None
                and rook.type is PieceType.ROOK
                and rook.side is piece.side
                and not rook.has_moved
            )

        # King side: f and g empty, neither attacked
        if (
            rook_ready(7)
            and self.is_empty((rank, 5))
            and self.is_empty((rank, 6))
            and not self.is_square_attacked((rank, 5), enemy)
            and not self.is_square_attacked((rank, 6), enemy)
        ):
            moves.append(Move(sq, (rank, 6)))
        # Queen side: b, c, d empty; the king crosses d and lands on c
        if (
            rook_ready(0)
            and self.is_empty((rank, 1))
            and self.is_empty((rank, 2))
            and self.is_empty((rank, 3))
            and not self.is_square_attacked((rank, 3), enemy)
            and not self.is_square_attacked((rank, 2), enemy)
        ):
            moves.append(Move(sq, (rank, 2)))
        return moves

    # --- Attack detection ---
    def is_square_attacked(self, sq: Square, by_side: Side) -> bool:
        """Return True if ``by_side`` has an attack move landing on ``sq``.

        Scans outward from ``sq`` (pawn diagonals, knight jumps, king ring and
        slider rays) instead of generating every attacker's move list.
        """
        if not is_valid_square(sq):
            return False
        # An attacking pawn stands one rank behind the square from its own view
        pawn_rank = sq[0] - by_side.forward
        for df in (-1, 1):
            p = self.piece_at((pawn_rank, sq[1] + df))
            if p is not None and p.side is by_side and p.type is PieceType.PAWN:
                return True
        for dr, df in KNIGHT_OFFSETS:
            p = self.piece_at(offset(sq, dr, df))
            if p is not None and p.side is by_side and p.type is PieceType.KNIGHT:
                return True
        for dr, df in KING_OFFSETS:
            p = self.piece_at(offset(sq, dr, df))
            if p is not None and p.side is by_side and p.type is PieceType.KING:
                return True
        for dirs, kinds in (
            (DIAGONALS, (PieceType.BISHOP, PieceType.QUEEN)),
            (ORTHOGONALS, (PieceType.ROOK, PieceType.QUEEN)),
        ):
            for dr, df in dirs:
                cur = offset(sq, dr, df)
                while is_valid_square(cur):
                    p = self.squares[cur[0]][cur[1]]
                    if p is not None:
                        if p.side is by_side and p.type in kinds:
                            return True
                        break
                    cur = offset(cur, dr, df)
        return False

    def is_in_check(self, side: Side) -> bool:
        king = self.find_king(side)
        if king is None:
            return False
        return self.is_square_attacked(king, side.opposite)

    # --- Legal generation ---
    def legal_moves(self, side: Optional[Side] = None) -> List[Move]:
        """All legal moves for ``side`` (default: side to move)."""
        if side is None:
            side = self.side_to_move
        legal: List[Move] = []
        for sq, p in list(self.pieces(side)):
            for mv in self.pseudo_legal_moves(p, sq):
                trial = self.copy()
                trial.apply_move(mv)
                if not trial.is_in_check(side):
                    legal.append(mv)
        return legal

    def legal_moves_from(self, sq: Square) -> List[Move]:
        """Legal moves of the piece on ``sq``; empty for empty/off-board squares."""
        p = self.piece_at(sq)
        if p is None:
            return []
        return [m for m in self.legal_moves(p.side) if m.from_sq == sq]

    # --- Apply ---
    def apply_move(self, move: Move) -> Optional[Piece]:
        """Apply ``move`` in place without validating it.

        Handles en passant (removes the passed pawn), castling (moves the rook
        on a two-file king shift), the en passant target, promotion, history
        and capture lists, then flips the side to move.

        Returns:
            Optional[Piece]: The captured piece, including en passant captures.
        """
        moving = self.piece_at(move.from_sq)
        if moving is None:
            return None
        from_sq, to_sq = move.from_sq, move.to_sq
        captured = self.piece_at(to_sq)

        if (
            moving.type is PieceType.PAWN
            and captured is None
            and self.ep_square is not None
            and to_sq == self.ep_square
            and from_sq[1] != to_sq[1]
        ):
            passed = (from_sq[0], to_sq[1])
            captured = self.piece_at(passed)
            self.set_piece(passed, None)

        if captured is not None:
            self.captured_by(moving.side).append(captured)

        if moving.type is PieceType.KING and abs(to_sq[1] - from_sq[1]) == 2:
            rank = from_sq[0]
            if to_sq[1] > from_sq[1]:  # h-rook -> f-file
                rook_from, rook_to = (rank, 7), (rank, 5)
            else:  # a-rook -> d-file
                rook_from, rook_to = (rank, 0), (rank, 3)
            rook = self.piece_at(rook_from)
            if rook is not None:
                self.set_piece(rook_to, rook.moved())
                self.set_piece(rook_from, None)

        if moving.type is PieceType.PAWN and abs(to_sq[0] - from_sq[0]) == 2:
            self.ep_square = ((from_sq[0] + to_sq[0]) // 2, from_sq[1])
        else:
            self.ep_square = None

        placed = moving.moved()
        if move.promotion is not None:
            placed = Piece(move.promotion, moving.side, has_moved=True)

        self.set_piece(to_sq, placed)
        self.set_piece(from_sq, None)
        self.history.append(move)
        self.side_to_move = self.side_to_move.opposite
        return captured

    # --- Status ---
    def has_insufficient_material(self) -> bool:
        """Bare kings, or a single extra piece that is a minor."""
        pieces = [p for _, p in self.pieces()]
        if len(pieces) == 2:
            return True
        return len(pieces) == 3 and any(p.type.is_minor for p in pieces)

    def game_status(self) -> GameStatus:
        side = self.side_to_move
        if not self.legal_moves(side):
            if self.is_in_check(side):
                return GameStatus.checkmate(side)
            return GameStatus.stalemate()
        if self.has_insufficient_material():
            return GameStatus.draw()
        if self.is_in_check(side):
            return GameStatus.check(side)
        return GameStatus.in_progress()
