from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from typing import Dict, Optional

from ...engine.game import Game
from ...engine.piece import Side
from ...search.service import SearchConfig


@dataclass
class GameSession:
    """One game plus how the AI (if any) takes part in it.

    ``generation`` is bumped whenever the position changes (move, undo, reset,
    new position) so an AI decision computed for an older position can be
    recognised and discarded. ``opening`` locks book moves to one named line.
    """

    game: Game
    ai_side: Optional[Side] = None
    ai_config: SearchConfig = field(default_factory=SearchConfig)
    opening: Optional[str] = None
    generation: int = 0
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    @property
    def vs_ai(self) -> bool:
        return self.ai_side is not None

    def replace_game(self, game: Game) -> None:
        with self.lock:
            self.game = game
            self.generation += 1

    def bump(self) -> None:
        with self.lock:
            self.generation += 1


class InMemorySessionStore:
    """Thread-safe in-memory game session store.

    Responsibilities:
    - Create new sessions with unique `game_id`s
    - Retrieve existing sessions by `game_id`
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._sessions: Dict[str, GameSession] = {}

    def create(self, session: Optional[GameSession] = None) -> str:
        """Create a new game session and return its `game_id`."""
        gid = str(uuid.uuid4())
        if session is None:
            session = GameSession(game=Game.new())
        with self._lock:
            self._sessions[gid] = session
        return gid

    def get(self, game_id: str) -> Optional[GameSession]:
        with self._lock:
            return self._sessions.get(game_id)
