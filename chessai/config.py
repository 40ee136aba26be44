from __future__ import annotations

import os
from typing import List, Mapping, Optional

from pydantic import BaseModel, Field

from .assets.book import default_book_paths


class Settings(BaseModel):
    """Runtime settings for the HTTP service."""

    book_paths: List[str] = Field(default_factory=default_book_paths)
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)
    default_depth: int = Field(default=3, ge=1, le=8)
    default_iterations: int = Field(default=500, ge=0)

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """Read ``CHESSAI_*`` variables; unset ones keep their defaults."""
        if env is None:
            env = os.environ
        values = {}
        if env.get("CHESSAI_BOOK_PATHS"):
            values["book_paths"] = [p for p in env["CHESSAI_BOOK_PATHS"].split(os.pathsep) if p]
        if env.get("CHESSAI_LOG_LEVEL"):
            values["log_level"] = env["CHESSAI_LOG_LEVEL"].upper()
        if env.get("CHESSAI_HOST"):
            values["host"] = env["CHESSAI_HOST"]
        if env.get("CHESSAI_PORT"):
            values["port"] = env["CHESSAI_PORT"]
        return cls(**values)
