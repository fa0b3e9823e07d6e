from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, Iterable, List, Optional, Protocol, Tuple

from .data_models import Actor, RenderedItem, Session

logger = logging.getLogger(__name__)

ROW_WIDTH = 9
# Effects kept by LoggingHost; older ones are dropped first
MAX_RECORDED_EFFECTS = 500


class RendererProtocol(Protocol):
    def open_surface(self, session: Session, title: str, size: int) -> Any: ...
    def render(self, session: Session, title: str, items: Dict[int, RenderedItem], slots: Optional[Iterable[int]] = None) -> None: ...
    def close_surface(self, session: Session) -> None: ...
    def item_at(self, actor_id: str, slot: int) -> Optional[RenderedItem]: ...


class HostProtocol(Protocol):
    """Effects the engine asks the host platform to carry out."""
    def dispatch_console_command(self, command: str) -> None: ...
    def run_player_command(self, actor: Actor, command: str) -> None: ...
    def send_message(self, actor: Actor, text: str) -> None: ...
    def broadcast(self, text: str) -> None: ...
    def play_sound(self, actor: Actor, sound: str, volume: float, pitch: float) -> None: ...


@dataclass
class GridSurface:
    actor_id: str
    title: str
    size: int
    items: Dict[int, RenderedItem] = field(default_factory=dict)
    # Number of full or partial renders pushed to this surface
    renders: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "actor_id": self.actor_id,
            "title": self.title,
            "size": self.size,
            "renders": self.renders,
            "items": {str(slot): item.to_dict() for slot, item in sorted(self.items.items())},
        }


class GridRenderer:
    """Keeps the current contents of every open menu in memory, one grid per actor."""

    def __init__(self):
        self._lock = threading.RLock()
        self.surfaces: Dict[str, GridSurface] = {}

    def open_surface(self, session: Session, title: str, size: int) -> GridSurface:
        surface = GridSurface(actor_id=session.actor_id, title=title, size=size)
        with self._lock:
            self.surfaces[session.actor_id] = surface
        return surface

    def render(self, session: Session, title: str, items: Dict[int, RenderedItem], slots: Optional[Iterable[int]] = None) -> None:
        with self._lock:
            surface = self.surfaces.get(session.actor_id)
            if surface is None:
                return
            surface.title = title
            if slots is None:
                surface.items = dict(items)
            else:
                for slot in slots:
                    if slot in items:
                        surface.items[slot] = items[slot]
                    else:
                        surface.items.pop(slot, None)
            surface.renders += 1

    def close_surface(self, session: Session) -> None:
        with self._lock:
            self.surfaces.pop(session.actor_id, None)

    def item_at(self, actor_id: str, slot: int) -> Optional[RenderedItem]:
        with self._lock:
            surface = self.surfaces.get(actor_id)
            return surface.items.get(slot) if surface else None

    def surface_for(self, actor_id: str) -> Optional[GridSurface]:
        with self._lock:
            return self.surfaces.get(actor_id)


def format_surface(surface: GridSurface, cell_width: int = 12) -> str:
    """Plain-text grid of a surface, nine cells per row; empty slots show their index."""
    lines = [f"== {surface.title} =="]
    for row_start in range(0, surface.size, ROW_WIDTH):
        cells = []
        for slot in range(row_start, min(row_start + ROW_WIDTH, surface.size)):
            item = surface.items.get(slot)
            label = (item.name or item.material) if item else f"[{slot}]"
            cells.append(label[:cell_width].ljust(cell_width))
        lines.append("|".join(cells))
    return "\n".join(lines)


class LoggingHost:
    """Host that logs every effect and keeps the most recent ones, for the CLI and tests."""

    def __init__(self, max_effects: int = MAX_RECORDED_EFFECTS):
        self.effects: Deque[Tuple[Any, ...]] = deque(maxlen=max_effects)

    def dispatch_console_command(self, command: str) -> None:
        logger.info("[Host] console: %s", command)
        self._record(("console", command))

    def run_player_command(self, actor: Actor, command: str) -> None:
        logger.info("[Host] %s runs: /%s", actor.name, command)
        self._record(("player", actor.id, command))

    def send_message(self, actor: Actor, text: str) -> None:
        logger.info("[Host] to %s: %s", actor.name, text)
        self._record(("message", actor.id, text))

    def broadcast(self, text: str) -> None:
        logger.info("[Host] broadcast: %s", text)
        self._record(("broadcast", text))

    def play_sound(self, actor: Actor, sound: str, volume: float, pitch: float) -> None:
        logger.info("[Host] sound for %s: %s (%.1f, %.1f)", actor.name, sound, volume, pitch)
        self._record(("sound", actor.id, sound, volume, pitch))

    def _record(self, effect: Tuple[Any, ...]) -> None:
        self.effects.append(effect)

    def effects_of(self, kind: str) -> List[Tuple[Any, ...]]:
        return [effect for effect in self.effects if effect[0] == kind]
