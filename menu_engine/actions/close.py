from dataclasses import dataclass

from .base import Action


@dataclass(frozen=True)
class Close(Action):
    tag = "CLOSE"

    def execute(self, ctx) -> None:
        ctx.engine.close(ctx.actor)
