from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from ..conditions import Condition
from .base import Action


@dataclass(frozen=True)
class Conditional(Action):
    """
    Runs exactly one branch, decided when the click happens.

    Example:
      [IF] {page} == 0 [THEN] [OPEN] main.yml [ELSE] [PAGE] -1
    """
    condition: Condition
    then_actions: Tuple[Action, ...] = ()
    else_actions: Tuple[Action, ...] = ()
    # Original condition text, kept for serialize()
    condition_text: str = ""
    tag = "IF"

    @property
    def value(self) -> str:
        parts = [self.condition_text, "[THEN]"]
        parts.extend(action.serialize() for action in self.then_actions)
        if self.else_actions:
            parts.append("[ELSE]")
            parts.extend(action.serialize() for action in self.else_actions)
        return " ".join(parts)

    def branch_for(self, ctx) -> Tuple[Action, ...]:
        if self.condition.evaluate(ctx.actor, ctx.session):
            return self.then_actions
        return self.else_actions

    def execute(self, ctx) -> None:
        for action in self.branch_for(ctx):
            ctx.engine.dispatcher.run_action(action, ctx)
