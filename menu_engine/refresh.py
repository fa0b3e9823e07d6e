from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Dict, Optional

from .data_models import Actor, MenuDefinition, RefreshPolicy

if TYPE_CHECKING:
    from .engine import MenuEngine

logger = logging.getLogger(__name__)

DEFAULT_TICK_SECONDS = 0.05


class RefreshScheduler:
    """
    Single driver loop that re-renders open menus on their refresh interval.

    `start()` runs `tick()` every `tick_seconds` on a daemon thread. Hosts that
    already own a loop can skip `start()` and call `tick()` themselves.
    """

    def __init__(self, engine: "MenuEngine", tick_seconds: float = DEFAULT_TICK_SECONDS):
        self.engine = engine
        self.tick_seconds = tick_seconds
        self._lock = threading.RLock()
        self._tick = 0
        self._last_refresh: Dict[str, int] = {}
        self._policies: Dict[str, RefreshPolicy] = {}
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    # Lifecycle

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        with self._lock:
            if self.running:
                return
            self._stop_event = threading.Event()
            self._thread = threading.Thread(target=self._run, name="menu-refresh", daemon=True)
            self._thread.start()
        logger.info("[RefreshScheduler] Started (tick every %.3fs)", self.tick_seconds)

    def _run(self) -> None:
        while not self._stop_event.wait(self.tick_seconds):
            self.tick()

    def stop(self) -> None:
        with self._lock:
            thread = self._thread
            self._thread = None
            self._stop_event.set()
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=max(1.0, self.tick_seconds * 4))
        with self._lock:
            self._last_refresh.clear()
            self._tick = 0
        if thread is not None:
            logger.info("[RefreshScheduler] Stopped")

    # Policies

    def register_policy(self, menu_id: str, policy: RefreshPolicy) -> None:
        with self._lock:
            self._policies[menu_id.lower()] = policy

    def policy_for(self, menu: MenuDefinition) -> RefreshPolicy:
        """A registered policy overrides the one the menu was loaded with."""
        with self._lock:
            return self._policies.get(menu.menu_id.lower(), menu.refresh)

    # Ticking

    @property
    def current_tick(self) -> int:
        with self._lock:
            return self._tick

    def tick(self) -> int:
        with self._lock:
            self._tick += 1
            current = self._tick
        for session in self.engine.sessions.snapshot():
            try:
                menu = self.engine.get_menu(session.menu_id)
                if menu is None:
                    continue
                policy = self.policy_for(menu)
                if not policy.fires_on(current):
                    continue
                if policy.refresh_all:
                    self.engine.refresh(session.actor)
                else:
                    self.engine.refresh_slots(session.actor, policy.slots)
                with self._lock:
                    self._last_refresh[session.actor_id] = current
            except Exception as e:
                logger.error("[RefreshScheduler] Refresh failed for %s: %s", session.actor.name, e)
        return current

    def last_refresh_tick(self, actor_id: str) -> Optional[int]:
        with self._lock:
            return self._last_refresh.get(actor_id)

    def on_session_closed(self, actor_id: str) -> None:
        with self._lock:
            self._last_refresh.pop(actor_id, None)

    def force_refresh(self, actor: Actor) -> None:
        self.engine.refresh(actor)
        with self._lock:
            self._last_refresh[actor.id] = self._tick

    def force_refresh_all(self) -> None:
        for session in self.engine.sessions.snapshot():
            self.force_refresh(session.actor)
