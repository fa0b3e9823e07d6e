"""
Builds MenuDefinitions from configuration documents (YAML or JSON).

Document layout:

  title: "&8Shop"
  size: 27                      # multiple of 9 in [9, 54], anything else -> 54
  placeable-slots: "10-12"
  context-aware: true
  items:
    sell:
      material: GOLD_INGOT
      name: "Sell ({context.gold} gold)"
      lore: ["Click to sell"]
      slot: "13"                # int, "a,b", "a-b" or a list of those
      actions: ["[ACTION] SELL", "[SOUND] ENTITY_PLAYER_LEVELUP"]
      priority: 0
      clickable: true
      visible-if: "{context.gold} != 0"
      metadata: {price: "10"}   # becomes {price}
  pagination: {enabled: true, slots: "0-8", pages: 2, items: [...]}
  auto-refresh: {enabled: true, interval: 20, slots: [13]}
  player-inventory: {enabled: true, handler: sell_items}
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from .action_parser import parse_actions
from .data_models import (
    DEFAULT_MENU_SIZE,
    ItemEntry,
    ItemTemplate,
    MenuDefinition,
    Pagination,
    RefreshPolicy,
)

logger = logging.getLogger(__name__)

MENU_SUFFIXES = (".yml", ".yaml", ".json")
DEFAULT_REFRESH_INTERVAL = 20


def menu_id_for(name: str) -> str:
    """Menu id for a name: "shop.yml" -> "shop"; plain ids pass through."""
    path = Path(name)
    if path.suffix.lower() in MENU_SUFFIXES:
        return path.stem
    return name


def normalize_size(raw: Any, default: int = DEFAULT_MENU_SIZE) -> int:
    """Rows of nine, one to six; anything else falls back to `default`."""
    try:
        size = int(raw)
    except (TypeError, ValueError):
        return default
    if size % 9 != 0 or size < 9 or size > DEFAULT_MENU_SIZE:
        return default
    return size


def _parse_slot_string(text: str) -> List[int]:
    slots: List[int] = []
    for part in text.split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part:
            bounds = part.split("-")
            if len(bounds) != 2:
                continue
            try:
                start, end = int(bounds[0].strip()), int(bounds[1].strip())
            except ValueError:
                continue
            slots.extend(range(min(start, end), max(start, end) + 1))
        else:
            try:
                slots.append(int(part))
            except ValueError:
                continue
    return slots


def parse_slots(raw: Any) -> List[int]:
    if raw is None or isinstance(raw, bool):
        return []
    if isinstance(raw, int):
        return [raw]
    if isinstance(raw, str):
        return _parse_slot_string(raw)
    if isinstance(raw, (list, tuple)):
        slots: List[int] = []
        for item in raw:
            slots.extend(parse_slots(item))
        return slots
    return []


def _section(document: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = document.get(key)
    return value if isinstance(value, Mapping) else {}


def _as_bool(raw: Any, default: bool = False) -> bool:
    if raw is None:
        return default
    if isinstance(raw, str):
        return raw.strip().lower() in ("true", "yes", "on", "1")
    return bool(raw)


def _as_int(raw: Any, default: int) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


def load_item(section: Mapping[str, Any], item_key: str, require_slots: bool = True) -> Optional[ItemEntry]:
    material = section.get("material")
    if not material:
        logger.debug("[MenuLoader] Item '%s' has no material; skipped", item_key)
        return None
    slots = parse_slots(section.get("slot", section.get("slots")))
    if require_slots and not slots:
        logger.debug("[MenuLoader] Item '%s' has no slots; skipped", item_key)
        return None

    lore = section.get("lore") or []
    if isinstance(lore, str):
        lore = [lore]
    actions = section.get("actions") or []
    if isinstance(actions, str):
        actions = [actions]
    metadata = _section(section, "metadata")
    visible_if = section.get("visible-if")

    return ItemEntry(
        template=ItemTemplate(
            material=str(material).upper(),
            name=str(section.get("name", "")),
            lore=[str(line) for line in lore],
            amount=max(1, _as_int(section.get("amount"), 1)),
        ),
        slots=slots,
        actions=parse_actions(actions),
        priority=_as_int(section.get("priority"), 0),
        clickable=_as_bool(section.get("clickable"), True),
        placeholders={"{" + str(key) + "}": "" if value is None else str(value) for key, value in metadata.items()},
        visible_if=str(visible_if) if visible_if else None,
    )


def _load_page_items(raw: Any) -> List[ItemEntry]:
    if isinstance(raw, Mapping):
        sections = list(raw.items())
    elif isinstance(raw, list):
        sections = [(f"page:{index}", section) for index, section in enumerate(raw)]
    else:
        return []
    items: List[ItemEntry] = []
    for key, section in sections:
        if not isinstance(section, Mapping):
            continue
        entry = load_item(section, str(key), require_slots=False)
        if entry is not None:
            items.append(entry)
    return items


def _warn_overlaps(menu: MenuDefinition) -> None:
    claimed: Dict[int, str] = {}
    for key, entry in menu.items.items():
        for slot in entry.slots:
            owner = claimed.setdefault(slot, key)
            if owner != key:
                logger.warning(
                    "[MenuLoader] Menu '%s': slot %d claimed by '%s' and '%s'; clicks resolve to '%s'",
                    menu.menu_id, slot, owner, key, owner,
                )


def load_menu(document: Mapping[str, Any], menu_id: str, default_size: int = DEFAULT_MENU_SIZE) -> MenuDefinition:
    document = document or {}
    menu = MenuDefinition(
        menu_id=menu_id,
        title=str(document.get("title", "Menu")),
        size=normalize_size(document.get("size", default_size), normalize_size(default_size)),
        placeable_slots=set(parse_slots(document.get("placeable-slots"))),
        context_aware=_as_bool(document.get("context-aware"), False),
    )

    for key, section in _section(document, "items").items():
        if not isinstance(section, Mapping):
            continue
        entry = load_item(section, str(key))
        if entry is not None:
            menu.items[str(key)] = entry
    _warn_overlaps(menu)

    pagination = _section(document, "pagination")
    if _as_bool(pagination.get("enabled"), False):
        pages = pagination.get("pages")
        menu.pagination = Pagination(
            slots=parse_slots(pagination.get("slots")),
            items=_load_page_items(pagination.get("items")),
            pages=_as_int(pages, 1) if pages is not None else None,
        )

    refresh = _section(document, "auto-refresh")
    if _as_bool(refresh.get("enabled"), False):
        interval = _as_int(refresh.get("interval"), DEFAULT_REFRESH_INTERVAL)
        slots = parse_slots(refresh.get("slots"))
        menu.refresh = RefreshPolicy.for_slots(interval, slots) if slots else RefreshPolicy.all_slots(interval)

    inventory = _section(document, "player-inventory")
    if inventory:
        menu.player_inventory_enabled = _as_bool(inventory.get("enabled"), False)
        handler = inventory.get("handler")
        if handler:
            menu.player_inventory_handler = str(handler)

    return menu


def read_document(path: Path) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        if path.suffix.lower() == ".json":
            data = json.load(f)
        else:
            data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"top level of {path.name} is not a mapping")
    return data


def load_menu_file(path: Path, default_size: int = DEFAULT_MENU_SIZE) -> Optional[MenuDefinition]:
    path = Path(path)
    try:
        document = read_document(path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.error("[MenuLoader] Could not read menu file '%s': %s", path, e)
        return None
    return load_menu(document, path.stem, default_size)


def load_menu_directory(directory: Path, default_size: int = DEFAULT_MENU_SIZE) -> Dict[str, MenuDefinition]:
    directory = Path(directory)
    menus: Dict[str, MenuDefinition] = {}
    if not directory.is_dir():
        logger.warning("[MenuLoader] Menu directory '%s' does not exist", directory)
        return menus
    for path in sorted(directory.iterdir()):
        if path.suffix.lower() not in MENU_SUFFIXES:
            continue
        menu = load_menu_file(path, default_size)
        if menu is not None:
            menus[menu.menu_id] = menu
    logger.info("[MenuLoader] Loaded %d menu(s) from %s", len(menus), directory)
    return menus
