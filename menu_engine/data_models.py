from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Set, Tuple

DEFAULT_MENU_SIZE = 54


@dataclass
class Actor:
    """Whoever has a menu open: the host's player."""
    id: str
    name: str
    health: float = 20.0
    level: int = 0
    permissions: Set[str] = field(default_factory=set)

    def has_permission(self, permission: str) -> bool:
        return permission in self.permissions


@dataclass
class ItemTemplate:
    material: str
    name: str = ""
    lore: List[str] = field(default_factory=list)
    amount: int = 1


@dataclass
class RenderedItem:
    """An ItemTemplate with placeholders already substituted, placed in a slot."""
    item_key: str
    material: str
    name: str = ""
    lore: List[str] = field(default_factory=list)
    amount: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "item_key": self.item_key,
            "material": self.material,
            "name": self.name,
            "lore": list(self.lore),
            "amount": self.amount,
        }


@dataclass
class ItemEntry:
    template: ItemTemplate
    slots: List[int] = field(default_factory=list)
    actions: List[Any] = field(default_factory=list)
    # Higher priority is laid out later and therefore ends up on top
    priority: int = 0
    clickable: bool = True
    placeholders: Dict[str, str] = field(default_factory=dict)
    dynamic_placeholders: Dict[str, Callable[[Actor], str]] = field(default_factory=dict)
    visible_if: Optional[str] = None
    visibility_predicate: Optional[Callable[[Actor, "Session"], bool]] = None
    on_click: Optional[Callable[[Actor, "ItemEntry"], None]] = None


@dataclass(frozen=True)
class RefreshPolicy:
    enabled: bool = False
    interval_ticks: int = 0
    # Empty means every slot
    slots: Tuple[int, ...] = ()

    def __post_init__(self):
        for slot in self.slots:
            if not isinstance(slot, int):
                raise TypeError(f"Refresh slots must be ints, got {slot!r}")

    @classmethod
    def disabled(cls) -> "RefreshPolicy":
        return cls()

    @classmethod
    def all_slots(cls, interval_ticks: int) -> "RefreshPolicy":
        return cls(enabled=True, interval_ticks=interval_ticks)

    @classmethod
    def for_slots(cls, interval_ticks: int, slots: Sequence[int]) -> "RefreshPolicy":
        return cls(enabled=True, interval_ticks=interval_ticks, slots=tuple(slots))

    @property
    def refresh_all(self) -> bool:
        return not self.slots

    def fires_on(self, tick: int) -> bool:
        if not self.enabled or self.interval_ticks <= 0:
            return False
        return tick % self.interval_ticks == 0


@dataclass
class Pagination:
    slots: List[int] = field(default_factory=list)
    items: List[ItemEntry] = field(default_factory=list)
    # Fixed page count from configuration; overrides the computed count
    pages: Optional[int] = None

    @property
    def slots_per_page(self) -> int:
        return len(self.slots)

    @property
    def total_pages(self) -> int:
        if self.pages is not None:
            return max(1, self.pages)
        if not self.slots:
            return 1
        return max(1, math.ceil(len(self.items) / len(self.slots)))

    def items_on_page(self, page: int) -> List[Tuple[int, ItemEntry]]:
        """Pairs of (slot, item) for the given 0-based page."""
        per_page = self.slots_per_page
        if per_page == 0:
            return []
        start = page * per_page
        chunk = self.items[start:start + per_page]
        return list(zip(self.slots, chunk))


@dataclass
class MenuDefinition:
    menu_id: str
    title: str = "Menu"
    size: int = DEFAULT_MENU_SIZE
    items: Dict[str, ItemEntry] = field(default_factory=dict)
    placeholders: Dict[str, str] = field(default_factory=dict)
    pagination: Optional[Pagination] = None
    refresh: RefreshPolicy = field(default_factory=RefreshPolicy.disabled)
    placeable_slots: Set[int] = field(default_factory=set)
    player_inventory_enabled: bool = False
    player_inventory_handler: Optional[str] = None
    context_aware: bool = False

    @property
    def paginated(self) -> bool:
        return self.pagination is not None

    @property
    def total_pages(self) -> int:
        return self.pagination.total_pages if self.pagination else 1

    def is_slot_placeable(self, slot: int) -> bool:
        return slot in self.placeable_slots

    def item_at_slot(self, slot: int, page: int = 0) -> Optional[Tuple[str, ItemEntry]]:
        """First item claiming the slot; page items win on their own page slots."""
        if self.pagination is not None:
            for index, (page_slot, entry) in enumerate(self.pagination.items_on_page(page)):
                if page_slot == slot:
                    return f"page:{page * self.pagination.slots_per_page + index}", entry
        for key, entry in self.items.items():
            if slot in entry.slots:
                return key, entry
        return None


@dataclass
class Session:
    actor: Actor
    menu_id: str
    page: int = 0
    # Opaque payload supplied by the caller on open
    context: Any = None
    surface: Any = None
    opened_tick: int = 0

    @property
    def actor_id(self) -> str:
        return self.actor.id

    @property
    def has_context(self) -> bool:
        return self.context is not None
