from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, List, Optional, Type, TypeVar

from .data_models import Actor, RenderedItem, Session

if TYPE_CHECKING:
    from .engine import MenuEngine

T = TypeVar("T")


class ClickType(str, Enum):
    LEFT = "LEFT"
    RIGHT = "RIGHT"
    SHIFT_LEFT = "SHIFT_LEFT"
    SHIFT_RIGHT = "SHIFT_RIGHT"
    MIDDLE = "MIDDLE"

    @classmethod
    def parse(cls, raw: Any) -> "ClickType":
        if isinstance(raw, ClickType):
            return raw
        try:
            return cls(str(raw).upper())
        except ValueError:
            return cls.LEFT


class MenuContextError(LookupError):
    """Raised when a handler requires a session context that is absent or of another type."""


@dataclass
class ClickEvent:
    """Core click envelope delivered by the host."""
    actor: Actor
    slot: int
    click_type: ClickType = ClickType.LEFT


@dataclass
class ClickOutcome:
    # Whether the host should block the underlying item movement
    cancelled: bool = True
    item_key: Optional[str] = None
    executed: List[str] = field(default_factory=list)
    # Cancelled, but the host should not resync the actor's inventory
    silent: bool = False


@dataclass
class ActionContext:
    """Everything a named action handler gets to see about one click."""
    engine: "MenuEngine"
    actor: Actor
    menu_id: str
    slot: int
    clicked_item: Optional[RenderedItem] = None
    click_type: ClickType = ClickType.LEFT

    @property
    def session(self) -> Optional[Session]:
        return self.engine.get_session(self.actor.id)

    # Context access

    def get_context(self, expected_type: Optional[Type[T]] = None) -> Optional[T]:
        return self.engine.get_context(self.actor.id, expected_type)

    def require_context(self, expected_type: Type[T]) -> T:
        value = self.get_context(expected_type)
        if value is None:
            raise MenuContextError(
                f"Menu context of type {expected_type.__name__} not found for {self.actor.name}"
            )
        return value

    def has_context(self, expected_type: Type[Any]) -> bool:
        return self.get_context(expected_type) is not None

    # Click type helpers

    @property
    def is_left_click(self) -> bool:
        return self.click_type in (ClickType.LEFT, ClickType.SHIFT_LEFT)

    @property
    def is_right_click(self) -> bool:
        return self.click_type in (ClickType.RIGHT, ClickType.SHIFT_RIGHT)

    @property
    def is_shift_click(self) -> bool:
        return self.click_type in (ClickType.SHIFT_LEFT, ClickType.SHIFT_RIGHT)

    # Shortcuts into the engine and host

    def refresh(self) -> None:
        self.engine.refresh(self.actor)

    def close(self) -> None:
        self.engine.close(self.actor)

    def open(self, menu_id: str, context: Any = None) -> bool:
        return self.engine.open(self.actor, menu_id, context)

    def open_preserve_context(self, menu_id: str) -> bool:
        return self.engine.open(self.actor, menu_id, preserve_context=True)

    def send_message(self, text: str) -> None:
        self.engine.host.send_message(self.actor, text)

    def play_sound(self, name: str, volume: float = 1.0, pitch: float = 1.0) -> None:
        self.engine.host.play_sound(self.actor, name, volume, pitch)

    def update_context(self, context: Any) -> None:
        self.engine.update_context(self.actor, context)
        self.refresh()
