from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from typing import Dict, Optional

from ...ai.service import PentagoAI
from ...engine.game import Game


@dataclass
class Session:
    """A game plus the AI opponent attached to it, if any."""

    game: Game = field(default_factory=Game.new)
    ai: Optional[PentagoAI] = None
    ai_player: Optional[int] = None
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False)


class InMemorySessionStore:
    """Thread-safe in-memory session store.

    Responsibilities:
    - Create new sessions with unique `game_id`s
    - Retrieve existing sessions by `game_id`
    - Replace the game of a session
    - Delete sessions
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._sessions: Dict[str, Session] = {}

    def create(self, session: Optional[Session] = None) -> str:
        """Create a new session and return its `game_id`."""
        gid = str(uuid.uuid4())
        if session is None:
            session = Session()
        with self._lock:
            self._sessions[gid] = session
        return gid

    def get(self, game_id: str) -> Optional[Session]:
        with self._lock:
            return self._sessions.get(game_id)

    def set_game(self, game_id: str, game: Game) -> None:
        with self._lock:
            session = self._sessions.get(game_id)
            if session is None:
                raise KeyError(game_id)
            session.game = game

    def delete(self, game_id: str) -> None:
        with self._lock:
            self._sessions.pop(game_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
