from dataclasses import dataclass

from .base import Action, substitute_player


@dataclass(frozen=True)
class Message(Action):
    text: str
    tag = "MESSAGE"

    @property
    def value(self) -> str:
        return self.text

    def execute(self, ctx) -> None:
        ctx.engine.host.send_message(ctx.actor, substitute_player(self.text, ctx))


@dataclass(frozen=True)
class Broadcast(Action):
    """Sends `text` to every actor the host knows about."""
    text: str
    tag = "BROADCAST"

    @property
    def value(self) -> str:
        return self.text

    def execute(self, ctx) -> None:
        ctx.engine.host.broadcast(substitute_player(self.text, ctx))
