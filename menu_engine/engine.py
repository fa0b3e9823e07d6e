from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Optional, Type, TypeVar

from .config import EngineConfig
from .data_models import Actor, MenuDefinition, RefreshPolicy, RenderedItem, Session
from .dispatcher import ClickDispatcher
from .events import ClickEvent, ClickOutcome, ClickType
from .loader import load_menu_directory, menu_id_for
from .placeholders import GLOBAL, MENU, PlaceholderPipeline, apply_placeholders
from .refresh import RefreshScheduler
from .registries import (
    ACTOR_SCOPE,
    GLOBAL_SCOPE,
    MENU_SCOPE,
    InventoryHandlerRegistry,
    ScopedHandlerRegistry,
    SlotClickRegistry,
)
from .renderer import GridRenderer, HostProtocol, LoggingHost, RendererProtocol
from .sessions import SessionRegistry
from .visibility import layout

logger = logging.getLogger(__name__)

T = TypeVar("T")


class MenuEngine:
    """
    Owns every registry, the open sessions and the refresh scheduler.

    Construct one per process (or one per test); `start()` launches the
    refresh loop and `stop()` tears it down and closes every open menu.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        renderer: Optional[RendererProtocol] = None,
        host: Optional[HostProtocol] = None,
    ):
        self.config = config or EngineConfig()
        self.renderer = renderer or GridRenderer()
        self.host = host or LoggingHost()

        self._menus_lock = threading.RLock()
        self.menus: Dict[str, MenuDefinition] = {}
        self._menus_dir: Optional[Path] = None

        self.sessions = SessionRegistry()
        self.legacy_handlers = ScopedHandlerRegistry(self.config.legacy_handler_scopes, name="legacy")
        self.context_handlers = ScopedHandlerRegistry(self.config.context_handler_scopes, name="context")
        self.slot_handlers = SlotClickRegistry()
        self.inventory_handlers = InventoryHandlerRegistry()
        self.placeholders = PlaceholderPipeline()
        self.dispatcher = ClickDispatcher(self)
        self.scheduler = RefreshScheduler(self, self.config.tick_seconds)

    # Lifecycle

    def start(self) -> None:
        self.scheduler.start()

    def stop(self) -> None:
        self.scheduler.stop()
        for session in self.sessions.snapshot():
            self.close(session.actor)

    # Menus

    def register_menu(self, menu: MenuDefinition) -> None:
        with self._menus_lock:
            self.menus[menu.menu_id] = menu

    def unregister_menu(self, menu_id: str) -> Optional[MenuDefinition]:
        menu = self.get_menu(menu_id)
        if menu is None:
            return None
        with self._menus_lock:
            self.menus.pop(menu.menu_id, None)
        for session in self.sessions.snapshot():
            if session.menu_id == menu.menu_id:
                self.close(session.actor)
        return menu

    def get_menu(self, menu_id: str) -> Optional[MenuDefinition]:
        """Look a menu up by id or file name ("shop" or "shop.yml"), ignoring case."""
        key = menu_id_for(menu_id)
        with self._menus_lock:
            menu = self.menus.get(key)
            if menu is not None:
                return menu
            lowered = key.lower()
            for candidate_id, candidate in self.menus.items():
                if candidate_id.lower() == lowered:
                    return candidate
        return None

    def load_menus(self, directory: Optional[Path] = None) -> Dict[str, MenuDefinition]:
        self._menus_dir = Path(directory or self.config.menus_dir)
        loaded = load_menu_directory(self._menus_dir, self.config.default_size)
        for menu in loaded.values():
            self.register_menu(menu)
        return loaded

    def reload_menus(self) -> Dict[str, MenuDefinition]:
        """Re-read the last loaded directory; open menus are re-rendered or closed if gone."""
        if self._menus_dir is None:
            logger.warning("[MenuEngine] reload_menus called before load_menus")
            return {}
        loaded = load_menu_directory(self._menus_dir, self.config.default_size)
        with self._menus_lock:
            self.menus = dict(loaded)
        for session in self.sessions.snapshot():
            menu = self.get_menu(session.menu_id)
            if menu is None:
                self.close(session.actor)
                continue
            if session.page >= menu.total_pages:
                self.sessions.set_page(session.actor_id, 0)
            self.refresh(session.actor)
        logger.info("[MenuEngine] Reloaded %d menu(s)", len(loaded))
        return loaded

    # Handlers

    def _handler_registry(self, legacy: bool) -> ScopedHandlerRegistry:
        return self.legacy_handlers if legacy else self.context_handlers

    def register_global_handler(self, action_name: str, handler: Callable[..., Any], legacy: bool = False) -> None:
        self._handler_registry(legacy).register(action_name, handler, GLOBAL_SCOPE)

    def register_scoped_handler(self, menu_id: str, action_name: str, handler: Callable[..., Any], legacy: bool = False) -> None:
        self._handler_registry(legacy).register(action_name, handler, MENU_SCOPE, menu_id_for(menu_id))

    def register_actor_handler(self, actor_id: str, action_name: str, handler: Callable[..., Any]) -> None:
        """Legacy handler for one actor; dropped again when that actor's menu closes."""
        self.legacy_handlers.register(action_name, handler, ACTOR_SCOPE, actor_id)

    def register_slot_handler(self, menu_id: str, slot: int, handler: Callable[..., Any]) -> None:
        self.slot_handlers.register(menu_id_for(menu_id), slot, handler)

    def register_inventory_handler(self, menu_id: str, handler: Callable[..., Any]) -> None:
        self.inventory_handlers.register(menu_id_for(menu_id), handler)

    # Placeholders and refresh policies

    def register_placeholder(self, token: str, resolver: Callable[[Actor], Any], scope: str = GLOBAL, scope_key: Optional[str] = None) -> None:
        if scope == MENU and scope_key:
            scope_key = menu_id_for(scope_key)
        self.placeholders.registry.register(token, resolver, scope, scope_key)

    def register_context_type_resolver(self, context_type: Type[Any], token: str, resolver: Callable[[Actor, Any], Any]) -> None:
        self.placeholders.context_registry.register(context_type, token, resolver)

    def register_refresh_policy(self, menu_id: str, policy: RefreshPolicy) -> None:
        self.scheduler.register_policy(menu_id_for(menu_id), policy)

    # Sessions

    def open(self, actor: Actor, menu_id: str, context: Any = None, preserve_context: bool = False) -> bool:
        menu = self.get_menu(menu_id)
        if menu is None:
            logger.warning("[MenuEngine] Unknown menu '%s' requested by %s", menu_id, actor.name)
            return False

        previous = self.sessions.get(actor.id)
        if preserve_context and context is None and previous is not None:
            context = previous.context
        if previous is not None:
            self._teardown(previous)

        session = Session(
            actor=actor,
            menu_id=menu.menu_id,
            context=context,
            opened_tick=self.scheduler.current_tick,
        )
        self.sessions.put(session)
        session.surface = self.renderer.open_surface(session, menu.title, menu.size)
        self._render(session, menu)
        logger.debug("[MenuEngine] %s opened '%s'", actor.name, menu.menu_id)
        return True

    def close(self, actor: Actor) -> bool:
        session = self.sessions.remove(actor.id)
        if session is None:
            return False
        self._teardown(session)
        logger.debug("[MenuEngine] %s closed '%s'", actor.name, session.menu_id)
        return True

    def _teardown(self, session: Session) -> None:
        self.renderer.close_surface(session)
        self.scheduler.on_session_closed(session.actor_id)
        if ACTOR_SCOPE in self.legacy_handlers.scopes:
            self.legacy_handlers.clear_scope(ACTOR_SCOPE, session.actor_id)

    def get_session(self, actor_id: str) -> Optional[Session]:
        return self.sessions.get(actor_id)

    def get_context(self, actor_id: str, expected_type: Optional[Type[T]] = None) -> Optional[T]:
        session = self.sessions.get(actor_id)
        if session is None or session.context is None:
            return None
        if expected_type is not None and not isinstance(session.context, expected_type):
            return None
        return session.context

    def update_context(self, actor: Actor, context: Any) -> bool:
        return self.sessions.set_context(actor.id, context)

    def set_page(self, actor: Actor, page: int) -> bool:
        session = self.sessions.get(actor.id)
        if session is None:
            return False
        menu = self.get_menu(session.menu_id)
        if menu is None or not menu.paginated:
            return False
        if not 0 <= page < menu.total_pages:
            return False
        self.sessions.set_page(actor.id, page)
        self._render(session, menu)
        return True

    # Rendering

    def build_placeholders(self, actor: Actor) -> Dict[str, str]:
        session = self.sessions.get(actor.id)
        if session is None:
            return {}
        menu = self.get_menu(session.menu_id)
        if menu is None:
            return {}
        return self.placeholders.build(actor, menu, session)

    def _render(self, session: Session, menu: MenuDefinition, slots: Optional[Iterable[int]] = None) -> None:
        slot_list = list(slots) if slots is not None else None
        title = apply_placeholders(menu.title, self.placeholders.build(session.actor, menu, session))
        grid = layout(menu, session.actor, session, self.placeholders, only_slots=slot_list)
        self.renderer.render(session, title, grid, slot_list)

    def refresh(self, actor: Actor) -> bool:
        session = self.sessions.get(actor.id)
        if session is None:
            return False
        menu = self.get_menu(session.menu_id)
        if menu is None:
            return False
        self._render(session, menu)
        return True

    def refresh_slots(self, actor: Actor, slots: Iterable[int]) -> bool:
        session = self.sessions.get(actor.id)
        if session is None:
            return False
        menu = self.get_menu(session.menu_id)
        if menu is None:
            return False
        self._render(session, menu, slots)
        return True

    def rendered_item(self, actor: Actor, slot: int) -> Optional[RenderedItem]:
        return self.renderer.item_at(actor.id, slot)

    # Clicks

    def click(self, actor: Actor, slot: int, click_type: Any = ClickType.LEFT) -> ClickOutcome:
        event = ClickEvent(
            actor=actor,
            slot=slot,
            click_type=ClickType.parse(click_type),
        )
        return self.dispatcher.dispatch(event)

    def open_menus(self) -> Dict[str, str]:
        """actor id -> menu id for every open session."""
        return {session.actor_id: session.menu_id for session in self.sessions.snapshot()}
