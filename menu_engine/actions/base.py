from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from ..events import ActionContext


@dataclass(frozen=True)
class Action:
    tag: ClassVar[str] = ""

    @property
    def value(self) -> str:
        return ""

    def serialize(self) -> str:
        value = self.value
        return f"[{self.tag}] {value}" if value else f"[{self.tag}]"

    def execute(self, ctx: "ActionContext") -> None:
        raise NotImplementedError


def substitute_player(text: str, ctx: "ActionContext") -> str:
    return text.replace("{player}", ctx.actor.name)
