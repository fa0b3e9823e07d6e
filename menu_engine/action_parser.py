"""
Turns action lines from menu configuration into Action objects.

  [CONSOLE] give {player} diamond 1
  [SOUND] ENTITY_EXPERIENCE_ORB_PICKUP 1.0 1.2
  [IF] {level} >= 10 [THEN] [MESSAGE] Welcome [ELSE] [CLOSE]

A line that cannot be parsed produces no action; nothing is raised.
"""
from __future__ import annotations

import logging
import re
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .actions import (
    Action,
    Broadcast,
    ChangePage,
    Close,
    Conditional,
    ConsoleCommand,
    Message,
    NamedTrigger,
    OpenMenu,
    PlayerCommand,
    Refresh,
    Sound,
    TriggerStyle,
)
from .actions.page import parse_page_change
from .conditions import parse_condition

logger = logging.getLogger(__name__)

IF_TAG = "[IF]"
THEN_TAG = "[THEN]"
ELSE_TAG = "[ELSE]"

# Zero-width split in front of every "[", so "[A] x [B] y" -> ["[A] x ", "[B] y"]
_TAG_BOUNDARY = re.compile(r"(?=\[)")


def _sound(value: str) -> Optional[Action]:
    parts = value.split(" ")
    if len(parts) == 3:
        try:
            return Sound(parts[0], float(parts[1]), float(parts[2]))
        except ValueError:
            return Sound(parts[0])
    return Sound(value)


def _page(value: str) -> Optional[Action]:
    change = parse_page_change(value)
    return ChangePage(change) if change is not None else None


def _required(factory: Callable[[str], Action]) -> Callable[[str], Optional[Action]]:
    def build(value: str) -> Optional[Action]:
        return factory(value) if value else None
    return build


BUILDERS: Dict[str, Callable[[str], Optional[Action]]] = {
    "COMMAND": _required(lambda value: ConsoleCommand(value, "COMMAND")),
    "CONSOLE": _required(ConsoleCommand),
    "PLAYER": _required(PlayerCommand),
    "SOUND": _required(_sound),
    "MESSAGE": Message,
    "CLOSE": lambda value: Close(),
    "OPEN": _required(OpenMenu),
    "BROADCAST": Broadcast,
    "PAGE": _required(_page),
    "ACTION": _required(lambda value: NamedTrigger(value, TriggerStyle.CONTEXT)),
    "REFRESH": lambda value: Refresh(),
}


def split_tag(line: str) -> Optional[Tuple[str, str]]:
    """Split "[TAG] value" into ("TAG", "value"); None when there is no bracketed tag."""
    line = line.strip()
    if not line.startswith("[") or "]" not in line:
        return None
    end = line.index("]")
    return line[1:end].strip().upper(), line[end + 1:].strip()


def parse_simple_action(line: str) -> Optional[Action]:
    parts = split_tag(line)
    if parts is None:
        logger.debug("[ActionParser] Not an action line: %r", line)
        return None
    tag, value = parts
    builder = BUILDERS.get(tag)
    if builder is None:
        logger.debug("[ActionParser] Unknown action tag %r in %r", tag, line)
        return None
    action = builder(value)
    if action is None:
        logger.debug("[ActionParser] Malformed %s action: %r", tag, line)
    return action


def _parse_branch(text: str) -> Tuple[Action, ...]:
    actions: List[Action] = []
    for chunk in _TAG_BOUNDARY.split(text):
        chunk = chunk.strip()
        if not chunk:
            continue
        # Branches are a single level deep; nested [IF] is not an action tag
        action = parse_simple_action(chunk)
        if action is not None:
            actions.append(action)
    return tuple(actions)


def parse_conditional(line: str) -> Optional[Conditional]:
    body = line.strip()[len(IF_TAG):]
    upper = body.upper()
    then_at = upper.find(THEN_TAG)
    if then_at == -1:
        logger.debug("[ActionParser] Conditional without %s: %r", THEN_TAG, line)
        return None

    condition_text = body[:then_at].strip()
    rest = body[then_at + len(THEN_TAG):]
    else_at = rest.upper().find(ELSE_TAG)
    if else_at == -1:
        then_text, else_text = rest, ""
    else:
        then_text, else_text = rest[:else_at], rest[else_at + len(ELSE_TAG):]

    condition = parse_condition(condition_text)
    if condition is None:
        logger.debug("[ActionParser] Unusable condition %r in %r", condition_text, line)
        return None

    return Conditional(
        condition=condition,
        then_actions=_parse_branch(then_text),
        else_actions=_parse_branch(else_text),
        condition_text=condition_text,
    )


def parse_action(line: str) -> Optional[Action]:
    if line is None:
        return None
    stripped = line.strip()
    if stripped.upper().startswith(IF_TAG):
        return parse_conditional(stripped)
    return parse_simple_action(stripped)


def parse_actions(lines: Iterable[str]) -> List[Action]:
    actions: List[Action] = []
    for line in lines or []:
        action = parse_action(str(line))
        if action is not None:
            actions.append(action)
    return actions
