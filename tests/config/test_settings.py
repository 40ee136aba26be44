from __future__ import annotations

import os

import pytest
from pydantic import ValidationError

from chessai.assets.book import default_book_paths
from chessai.config import Settings


def test_defaults() -> None:
    s = Settings.from_env({})
    assert s.book_paths == default_book_paths()
    assert s.log_level == "INFO"
    assert s.port == 8000
    assert s.default_depth == 3
    assert s.default_iterations == 500


def test_env_overrides() -> None:
    env = {
        "CHESSAI_BOOK_PATHS": os.pathsep.join(["a.json", "b.json"]),
        "CHESSAI_LOG_LEVEL": "debug",
        "CHESSAI_HOST": "127.0.0.1",
        "CHESSAI_PORT": "9001",
    }
    s = Settings.from_env(env)
    assert s.book_paths == ["a.json", "b.json"]
    assert s.log_level == "DEBUG"
    assert s.host == "127.0.0.1"
    assert s.port == 9001


def test_invalid_port_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings.from_env({"CHESSAI_PORT": "0"})


def test_missing_book_files_give_empty_book() -> None:
    from chessai.assets.book import load_book

    book = load_book(Settings.from_env({"CHESSAI_BOOK_PATHS": "/nonexistent/book.json"}).book_paths)
    assert len(book) == 0
    assert book.available_openings == []
