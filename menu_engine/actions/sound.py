from dataclasses import dataclass

from .base import Action

DEFAULT_VOLUME = 1.0
DEFAULT_PITCH = 1.0


@dataclass(frozen=True)
class Sound(Action):
    name: str
    volume: float = DEFAULT_VOLUME
    pitch: float = DEFAULT_PITCH
    tag = "SOUND"

    @property
    def value(self) -> str:
        if self.volume == DEFAULT_VOLUME and self.pitch == DEFAULT_PITCH:
            return self.name
        return f"{self.name} {self.volume:g} {self.pitch:g}"

    def execute(self, ctx) -> None:
        ctx.engine.host.play_sound(ctx.actor, self.name, self.volume, self.pitch)
