from __future__ import annotations

import logging
from typing import Dict, Iterable, Mapping, Optional

from .data_models import Actor, ItemEntry, MenuDefinition, RenderedItem, Session
from .placeholders import PlaceholderPipeline, apply_placeholders

logger = logging.getLogger(__name__)


def evaluate_visible_if(expression: Optional[str], placeholders: Mapping[str, str]) -> bool:
    """
    Examples:
      "true" / "false"
      "{rank} == vip"
      "{context.status} != closed"
    Anything else counts as visible.
    """
    if expression is None or not expression.strip():
        return True
    text = apply_placeholders(expression, placeholders).strip()
    lowered = text.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False

    eq_at = text.find("==")
    ne_at = text.find("!=")
    if eq_at == -1 and ne_at == -1:
        return True
    if ne_at == -1 or (eq_at != -1 and eq_at < ne_at):
        left, right = text[:eq_at], text[eq_at + 2:]
        return left.strip().lower() == right.strip().lower()
    left, right = text[:ne_at], text[ne_at + 2:]
    return left.strip().lower() != right.strip().lower()


def is_visible(entry: ItemEntry, actor: Actor, session: Optional[Session], placeholders: Mapping[str, str]) -> bool:
    if entry.visibility_predicate is not None:
        try:
            return bool(entry.visibility_predicate(actor, session))
        except Exception as e:
            logger.warning("[Visibility] Predicate failed for %s: %s", actor.name, e)
            return True
    return evaluate_visible_if(entry.visible_if, placeholders)


def render_item(item_key: str, entry: ItemEntry, placeholders: Mapping[str, str]) -> RenderedItem:
    template = entry.template
    return RenderedItem(
        item_key=item_key,
        material=template.material,
        name=apply_placeholders(template.name, placeholders),
        lore=[apply_placeholders(line, placeholders) for line in template.lore],
        amount=template.amount,
    )


def layout(
    menu: MenuDefinition,
    actor: Actor,
    session: Optional[Session],
    pipeline: PlaceholderPipeline,
    only_slots: Optional[Iterable[int]] = None,
) -> Dict[int, RenderedItem]:
    """Slot -> rendered item for everything visible; higher priority items are written last."""
    wanted = set(only_slots) if only_slots is not None else None
    base = pipeline.build(actor, menu, session)
    grid: Dict[int, RenderedItem] = {}

    def place(item_key: str, entry: ItemEntry, slots: Iterable[int]) -> None:
        targets = [
            slot for slot in slots
            if 0 <= slot < menu.size and (wanted is None or slot in wanted)
        ]
        if not targets:
            return
        placeholders = pipeline.item_placeholders(base, entry, actor)
        if not is_visible(entry, actor, session, placeholders):
            return
        rendered = render_item(item_key, entry, placeholders)
        for slot in targets:
            grid[slot] = rendered

    # sorted() is stable, so equal priorities keep declaration order
    for item_key, entry in sorted(menu.items.items(), key=lambda kv: kv[1].priority):
        place(item_key, entry, entry.slots)

    if menu.pagination is not None:
        page = session.page if session else 0
        offset = page * menu.pagination.slots_per_page
        for index, (slot, entry) in enumerate(menu.pagination.items_on_page(page)):
            place(f"page:{offset + index}", entry, [slot])
    return grid
