from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ...engine.board import Board
from ...engine.fen import encode
from ...engine.move import Move
from .san import parse_san_moves, san_to_move


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OpeningEntry:
    """One recorded line: ``"1. e4 c6 2. d4 d5"``, a display name and an ECO code."""

    moves: str
    name: str
    eco: str

    @property
    def tokens(self) -> List[str]:
        return parse_san_moves(self.moves)


def parse_source(data: Any) -> Dict[str, OpeningEntry]:
    """Validate one decoded source mapping ``position -> {moves, name, eco}``.

    Raises:
        ValueError: If the source is not a mapping of well-formed entries.
    """
    if not isinstance(data, dict):
        raise ValueError("invalid book format")
    entries: Dict[str, OpeningEntry] = {}
    for key, ent in data.items():
        if not isinstance(ent, dict):
            raise ValueError(f"invalid book entry for {key!r}")
        moves = ent.get("moves")
        name = ent.get("name")
        if not isinstance(moves, str) or not isinstance(name, str):
            raise ValueError(f"book entry for {key!r} needs 'moves' and 'name'")
        eco = str(ent.get("eco", ""))
        entries[str(key).strip()] = OpeningEntry(moves=moves, name=name, eco=eco)
    return entries


class OpeningBook:
    """Opening book keyed by canonical position encoding.

    Notes:
    - Several sources are merged; on a key collision the entry with the longer
      line wins (ties keep the entry loaded first).
    - The book move for a position is the line's token at index ``board.ply``.
    - Any failure during lookup is a book miss (``None``), never an error.
    """

    def __init__(self, sources: Iterable[Mapping[str, Any]] = ()) -> None:
        self._index: Dict[str, OpeningEntry] = {}
        for source in sources:
            self.add_source(source)

    @classmethod
    def from_files(cls, paths: Iterable[str]) -> "OpeningBook":
        """Load JSON sources, skipping any that are unreadable or malformed."""
        book = cls()
        for path in paths:
            try:
                with open(path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                book.add_source(data)
            except (OSError, ValueError, TypeError) as e:
                logger.warning("OpeningBook: could not load %s: %s", path, e)
                continue
        logger.info("OpeningBook: loaded %d positions", len(book))
        return book

    def add_source(self, data: Any) -> int:
        """Merge one source into the book and return its entry count."""
        entries = parse_source(data)
        for key, entry in entries.items():
            existing = self._index.get(key)
            if existing is None or len(entry.tokens) > len(existing.tokens):
                self._index[key] = entry
        return len(entries)

    def __len__(self) -> int:
        return len(self._index)

    def __contains__(self, key: object) -> bool:
        return key in self._index

    @property
    def available_openings(self) -> List[str]:
        return sorted({e.name for e in self._index.values()})

    def entry(self, board: Board) -> Optional[OpeningEntry]:
        return self._index.get(encode(board))

    def opening_name(self, board: Board) -> Optional[str]:
        e = self.entry(board)
        return e.name if e else None

    def next_move(self, board: Board, *, opening: Optional[str] = None) -> Optional[Move]:
        """Return the next book move, or ``None`` when out of book.

        When ``opening`` is given only that named line may supply the move.
        """
        key = encode(board)
        e = self._index.get(key)
        if e is None:
            logger.debug("book miss: %s", key)
            return None
        if opening is not None and e.name != opening:
            return None
        tokens = e.tokens
        ply = board.ply
        if ply >= len(tokens):
            return None
        move = san_to_move(tokens[ply], board)
        if move is None:
            logger.debug("book token %r unresolved in %s", tokens[ply], key)
        else:
            logger.debug("book hit: %s -> %s (%s)", e.name, move.to_uci(), tokens[ply])
        return move
