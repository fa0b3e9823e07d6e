from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .base import Action


class TriggerStyle(str, Enum):
    # Handlers receiving an ActionContext, scoped menu > global
    CONTEXT = "context"
    # Handlers receiving (actor, item, click_type, menu_id, slot), scoped actor > menu > global
    LEGACY = "legacy"


@dataclass(frozen=True)
class NamedTrigger(Action):
    """
    Fires a handler registered under `action_name`.

    Nothing is bound here: the handler is looked up at click time, so it may
    be registered after the menu was loaded.
    """
    action_name: str
    style: TriggerStyle = TriggerStyle.CONTEXT
    tag = "ACTION"

    def __post_init__(self):
        object.__setattr__(self, "action_name", self.action_name.strip().upper())

    @property
    def value(self) -> str:
        return self.action_name

    def execute(self, ctx) -> None:
        ctx.engine.dispatcher.fire_trigger(self, ctx)
