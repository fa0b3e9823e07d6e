from dataclasses import dataclass

from .base import Action


@dataclass(frozen=True)
class Refresh(Action):
    """Re-renders the clicker's open menu."""
    tag = "REFRESH"

    def execute(self, ctx) -> None:
        ctx.engine.refresh(ctx.actor)
