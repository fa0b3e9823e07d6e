from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .base import Action

PAGE_TURN_SOUND = "UI_BUTTON_CLICK"


def parse_page_change(raw: str) -> Optional[str]:
    """Normalize "+1", "-2" or "3"; None when it is not a page change at all."""
    change = raw.strip()
    digits = change[1:] if change[:1] in ("+", "-") else change
    if not digits.isdigit():
        return None
    return change


@dataclass(frozen=True)
class ChangePage(Action):
    """
    Examples:
      [PAGE] +1   next page
      [PAGE] -1   previous page
      [PAGE] 0    first page
    """
    change: str
    tag = "PAGE"

    @property
    def value(self) -> str:
        return self.change

    @property
    def relative(self) -> bool:
        return self.change[:1] in ("+", "-")

    def target_page(self, current_page: int) -> int:
        if self.relative:
            return current_page + int(self.change)
        return int(self.change)

    def execute(self, ctx) -> None:
        session = ctx.session
        if session is None:
            return
        menu = ctx.engine.get_menu(session.menu_id)
        if menu is None or not menu.paginated:
            return
        if ctx.engine.set_page(ctx.actor, self.target_page(session.page)):
            ctx.engine.host.play_sound(ctx.actor, PAGE_TURN_SOUND, 1.0, 1.0)
