from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .actions import Action, NamedTrigger, TriggerStyle
from .data_models import MenuDefinition
from .events import ActionContext, ClickEvent, ClickOutcome
from .registries import InventoryClickResult

if TYPE_CHECKING:
    from .engine import MenuEngine

logger = logging.getLogger(__name__)


class ClickDispatcher:
    """
    Routes one click on an open menu.

      1. slot past the menu's size: the actor's own inventory
      2. placeable slot: left alone
      3. item at the slot: its actions in order, then its on_click callback
      4. the raw slot callback for (menu, slot), if any, always last
    """

    def __init__(self, engine: "MenuEngine"):
        self.engine = engine

    def dispatch(self, event: ClickEvent) -> ClickOutcome:
        actor = event.actor
        session = self.engine.get_session(actor.id)
        if session is None:
            # Not one of ours
            return ClickOutcome(cancelled=False)
        menu = self.engine.get_menu(session.menu_id)
        if menu is None:
            logger.warning("[ClickDispatcher] Session of %s points at unknown menu '%s'", actor.name, session.menu_id)
            return ClickOutcome(cancelled=True)
        if event.slot < 0:
            return ClickOutcome(cancelled=True)
        if event.slot >= menu.size:
            return self._inventory_click(event, menu)
        if menu.is_slot_placeable(event.slot):
            return ClickOutcome(cancelled=False)

        outcome = ClickOutcome(cancelled=True)
        ctx = self._context(event, menu)
        found = menu.item_at_slot(event.slot, session.page)
        if found is not None:
            item_key, entry = found
            outcome.item_key = item_key
            if entry.clickable:
                for action in entry.actions:
                    self.run_action(action, ctx)
                    outcome.executed.append(action.serialize())
                if entry.on_click is not None:
                    try:
                        entry.on_click(actor, entry)
                    except Exception as e:
                        logger.exception("[ClickDispatcher] on_click for '%s' failed for %s: %s", item_key, actor.name, e)

        callback = self.engine.slot_handlers.get(menu.menu_id, event.slot)
        if callback is not None:
            try:
                callback(actor, ctx.clicked_item, event.click_type)
            except Exception as e:
                logger.exception(
                    "[ClickDispatcher] Slot callback %s:%d failed for %s: %s", menu.menu_id, event.slot, actor.name, e
                )
        return outcome

    def _context(self, event: ClickEvent, menu: MenuDefinition) -> ActionContext:
        return ActionContext(
            engine=self.engine,
            actor=event.actor,
            menu_id=menu.menu_id,
            slot=event.slot,
            clicked_item=self.engine.rendered_item(event.actor, event.slot),
            click_type=event.click_type,
        )

    def run_action(self, action: Action, ctx: ActionContext) -> None:
        try:
            action.execute(ctx)
        except Exception as e:
            logger.exception("[ClickDispatcher] Action %s failed for %s: %s", action.serialize(), ctx.actor.name, e)

    def fire_trigger(self, trigger: NamedTrigger, ctx: ActionContext) -> bool:
        """Call the handler registered for `trigger`; a missing handler is a no-op."""
        if trigger.style is TriggerStyle.LEGACY:
            lookup = self.engine.legacy_handlers.lookup(
                trigger.action_name, {"actor": ctx.actor.id, "menu": ctx.menu_id}
            )
            if lookup.found:
                lookup.handler(ctx.actor, ctx.clicked_item, ctx.click_type, ctx.menu_id, ctx.slot)
        else:
            lookup = self.engine.context_handlers.lookup(trigger.action_name, {"menu": ctx.menu_id})
            if lookup.found:
                lookup.handler(ctx)
        if not lookup.found:
            logger.debug("[ClickDispatcher] No handler for %s in menu '%s'", trigger.action_name, ctx.menu_id)
        return lookup.found

    def _inventory_click(self, event: ClickEvent, menu: MenuDefinition) -> ClickOutcome:
        if not menu.player_inventory_enabled:
            return ClickOutcome(cancelled=True)
        handler = self.engine.inventory_handlers.get(menu.menu_id)
        if handler is None:
            if menu.player_inventory_handler:
                logger.debug(
                    "[ClickDispatcher] Inventory handler '%s' for menu '%s' is not registered",
                    menu.player_inventory_handler, menu.menu_id,
                )
            return ClickOutcome(cancelled=True)

        ctx = ActionContext(
            engine=self.engine,
            actor=event.actor,
            menu_id=menu.menu_id,
            slot=event.slot,
            click_type=event.click_type,
        )
        try:
            result = InventoryClickResult(handler(ctx))
        except ValueError:
            logger.warning("[ClickDispatcher] Inventory handler for '%s' returned an unknown result", menu.menu_id)
            return ClickOutcome(cancelled=True)
        if result is InventoryClickResult.ALLOW:
            return ClickOutcome(cancelled=False)
        return ClickOutcome(cancelled=True, silent=result is InventoryClickResult.CANCEL_SILENT)
