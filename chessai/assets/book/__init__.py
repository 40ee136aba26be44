from __future__ import annotations

import os
from typing import Iterable, List, Optional

from .json_book import OpeningBook, OpeningEntry
from .san import parse_san_moves, san_to_move


DATA_DIR = os.path.join(os.path.dirname(__file__), "data")


def default_book_paths() -> List[str]:
    """Bundled ECO sources, in load order."""
    if not os.path.isdir(DATA_DIR):
        return []
    return [
        os.path.join(DATA_DIR, name)
        for name in sorted(os.listdir(DATA_DIR))
        if name.lower().endswith(".json")
    ]


def load_book(paths: Optional[Iterable[str]] = None) -> OpeningBook:
    if paths is None:
        paths = default_book_paths()
    return OpeningBook.from_files(paths)


__all__ = [
    "OpeningBook",
    "OpeningEntry",
    "default_book_paths",
    "load_book",
    "parse_san_moves",
    "san_to_move",
]
