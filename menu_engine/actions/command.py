from dataclasses import dataclass, field

from .base import Action, substitute_player


@dataclass(frozen=True)
class ConsoleCommand(Action):
    """
    Runs `text` with console authority; `{player}` becomes the clicker's name.

    Written as either [CONSOLE] or [COMMAND]; serialize() gives back the one used.
    """
    text: str
    source_tag: str = field(default="CONSOLE", compare=False)
    tag = "CONSOLE"

    def serialize(self) -> str:
        return f"[{self.source_tag}] {self.text}"

    @property
    def value(self) -> str:
        return self.text

    def execute(self, ctx) -> None:
        ctx.engine.host.dispatch_console_command(substitute_player(self.text, ctx))


@dataclass(frozen=True)
class PlayerCommand(Action):
    text: str
    tag = "PLAYER"

    @property
    def value(self) -> str:
        return self.text

    def execute(self, ctx) -> None:
        ctx.engine.host.run_player_command(ctx.actor, substitute_player(self.text, ctx))
