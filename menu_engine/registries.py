from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

ACTOR_SCOPE = "actor"
MENU_SCOPE = "menu"
GLOBAL_SCOPE = "global"
KNOWN_SCOPES = (ACTOR_SCOPE, MENU_SCOPE, GLOBAL_SCOPE)

LEGACY_SCOPES = (ACTOR_SCOPE, MENU_SCOPE, GLOBAL_SCOPE)
CONTEXT_SCOPES = (MENU_SCOPE, GLOBAL_SCOPE)


class LookupResult(str, Enum):
    HANDLED = "handled"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class HandlerLookup:
    result: LookupResult
    handler: Optional[Callable[..., Any]] = None
    # Scope the handler was found in
    scope: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.result is LookupResult.HANDLED

    @classmethod
    def not_found(cls) -> "HandlerLookup":
        return cls(LookupResult.NOT_FOUND)


def _scope_key(scope: str, key: Optional[str]) -> Optional[str]:
    if scope == GLOBAL_SCOPE:
        return None
    if not key:
        raise ValueError(f"A {scope}-scoped handler needs a scope key")
    # Menu ids are case-insensitive, actor ids are not
    return key.lower() if scope == MENU_SCOPE else key


class ScopedHandlerRegistry:
    """
    Named handlers stored per scope and looked up in a fixed scope order.

    `scopes` is the consultation order, e.g. ("actor", "menu", "global"):
    the first scope holding a handler under the requested name wins.
    Handler names are case-insensitive.
    """

    def __init__(self, scopes: Sequence[str] = LEGACY_SCOPES, name: str = "handlers"):
        unknown = [scope for scope in scopes if scope not in KNOWN_SCOPES]
        if unknown:
            raise ValueError(f"Unknown handler scopes {unknown}; expected some of {KNOWN_SCOPES}")
        self.scopes: Tuple[str, ...] = tuple(scopes)
        self.name = name
        self._lock = threading.RLock()
        self._handlers: Dict[Tuple[str, Optional[str]], Dict[str, Callable[..., Any]]] = {}

    def register(self, action_name: str, handler: Callable[..., Any], scope: str = GLOBAL_SCOPE, scope_key: Optional[str] = None) -> None:
        if not callable(handler):
            raise TypeError(f"Handler for {action_name!r} is not callable")
        if scope not in self.scopes:
            raise ValueError(f"Registry '{self.name}' does not consult the {scope!r} scope")
        bucket = (scope, _scope_key(scope, scope_key))
        with self._lock:
            self._handlers.setdefault(bucket, {})[action_name.strip().upper()] = handler

    def unregister(self, action_name: str, scope: str = GLOBAL_SCOPE, scope_key: Optional[str] = None) -> None:
        bucket = (scope, _scope_key(scope, scope_key))
        with self._lock:
            handlers = self._handlers.get(bucket)
            if handlers is not None:
                handlers.pop(action_name.strip().upper(), None)

    def lookup(self, action_name: str, keys: Optional[Mapping[str, Optional[str]]] = None) -> HandlerLookup:
        """`keys` maps scope -> key for this click, e.g. {"actor": actor_id, "menu": menu_id}."""
        keys = keys or {}
        name = action_name.strip().upper()
        with self._lock:
            for scope in self.scopes:
                if scope == GLOBAL_SCOPE:
                    bucket = (scope, None)
                else:
                    key = keys.get(scope)
                    if not key:
                        continue
                    bucket = (scope, _scope_key(scope, key))
                handler = self._handlers.get(bucket, {}).get(name)
                if handler is not None:
                    return HandlerLookup(LookupResult.HANDLED, handler, scope)
        return HandlerLookup.not_found()

    def clear_scope(self, scope: str, scope_key: Optional[str] = None) -> None:
        with self._lock:
            self._handlers.pop((scope, _scope_key(scope, scope_key)), None)

    def clear(self) -> None:
        with self._lock:
            self._handlers.clear()

    def snapshot(self) -> Dict[str, List[str]]:
        """Registered handler names per "scope[:key]" bucket."""
        with self._lock:
            return {
                scope if key is None else f"{scope}:{key}": sorted(handlers)
                for (scope, key), handlers in self._handlers.items()
            }


class SlotClickRegistry:
    """Raw per-slot callbacks: callback(actor, clicked_item, click_type)."""

    def __init__(self):
        self._lock = threading.RLock()
        self._callbacks: Dict[Tuple[str, int], Callable[..., Any]] = {}

    def register(self, menu_id: str, slot: int, callback: Callable[..., Any]) -> None:
        if not callable(callback):
            raise TypeError(f"Slot callback for {menu_id}:{slot} is not callable")
        with self._lock:
            self._callbacks[(menu_id.lower(), slot)] = callback

    def get(self, menu_id: str, slot: int) -> Optional[Callable[..., Any]]:
        with self._lock:
            return self._callbacks.get((menu_id.lower(), slot))

    def unregister(self, menu_id: str, slot: int) -> None:
        with self._lock:
            self._callbacks.pop((menu_id.lower(), slot), None)

    def clear_menu(self, menu_id: str) -> None:
        menu_key = menu_id.lower()
        with self._lock:
            for key in [k for k in self._callbacks if k[0] == menu_key]:
                del self._callbacks[key]

    def clear(self) -> None:
        with self._lock:
            self._callbacks.clear()


class InventoryClickResult(str, Enum):
    ALLOW = "ALLOW"
    CANCEL = "CANCEL"
    # Cancelled without asking the host to resync the actor's inventory
    CANCEL_SILENT = "CANCEL_SILENT"


class InventoryHandlerRegistry:
    """Per-menu handlers for clicks in the actor's own inventory while a menu is open."""

    def __init__(self):
        self._lock = threading.RLock()
        self._handlers: Dict[str, Callable[..., InventoryClickResult]] = {}

    def register(self, menu_id: str, handler: Callable[..., InventoryClickResult]) -> None:
        if not callable(handler):
            raise TypeError(f"Inventory handler for {menu_id!r} is not callable")
        with self._lock:
            self._handlers[menu_id.lower()] = handler

    def get(self, menu_id: str) -> Optional[Callable[..., InventoryClickResult]]:
        with self._lock:
            return self._handlers.get(menu_id.lower())

    def has_handler(self, menu_id: str) -> bool:
        return self.get(menu_id) is not None

    def unregister(self, menu_id: str) -> None:
        with self._lock:
            self._handlers.pop(menu_id.lower(), None)

    def clear(self) -> None:
        with self._lock:
            self._handlers.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._handlers)
