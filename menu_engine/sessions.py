from __future__ import annotations

import threading
from typing import Any, Dict, List, Optional

from .data_models import Session


class SessionRegistry:
    """One live Session per actor id. All reads hand out snapshots."""

    def __init__(self):
        self._lock = threading.RLock()
        self._sessions: Dict[str, Session] = {}

    def put(self, session: Session) -> Optional[Session]:
        """Store `session`, returning the one it replaced, if any."""
        with self._lock:
            previous = self._sessions.get(session.actor_id)
            self._sessions[session.actor_id] = session
            return previous

    def get(self, actor_id: str) -> Optional[Session]:
        with self._lock:
            return self._sessions.get(actor_id)

    def remove(self, actor_id: str) -> Optional[Session]:
        with self._lock:
            return self._sessions.pop(actor_id, None)

    def snapshot(self) -> List[Session]:
        with self._lock:
            return list(self._sessions.values())

    def set_page(self, actor_id: str, page: int) -> bool:
        with self._lock:
            session = self._sessions.get(actor_id)
            if session is None:
                return False
            session.page = page
            return True

    def set_context(self, actor_id: str, context: Any) -> bool:
        with self._lock:
            session = self._sessions.get(actor_id)
            if session is None:
                return False
            session.context = context
            return True

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()

    def __contains__(self, actor_id: str) -> bool:
        with self._lock:
            return actor_id in self._sessions

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
