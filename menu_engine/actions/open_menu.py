from dataclasses import dataclass

from .base import Action


@dataclass(frozen=True)
class OpenMenu(Action):
    # Menu id or file name, e.g. "shop" or "shop.yml"
    target_id: str
    tag = "OPEN"

    @property
    def value(self) -> str:
        return self.target_id

    def execute(self, ctx) -> None:
        ctx.engine.open(ctx.actor, self.target_id)
