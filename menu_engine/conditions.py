"""
Condition strings used by `[IF]` actions.

Supported forms:
  {page} == 0            (0-based page of the open menu)
  {health} >= 10.5
  {level} < 30
  {permission} has shop.vip
  {name} equals Steve
"""
from __future__ import annotations

import logging
import operator
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from .data_models import Actor, Session

logger = logging.getLogger(__name__)

PAGE = "page"
HEALTH = "health"
LEVEL = "level"
PERMISSION = "permission"
NAME = "name"

# Checked in this order; the first token found in the string picks the subject
SUBJECT_ORDER = (PAGE, HEALTH, LEVEL, PERMISSION, NAME)

NUMERIC_SUBJECTS: Dict[str, Callable[[str], Any]] = {
    PAGE: int,
    HEALTH: float,
    LEVEL: int,
}

COMPARATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "==": operator.eq,
    "equals": operator.eq,
    "!=": operator.ne,
    ">": operator.gt,
    "<": operator.lt,
    ">=": operator.ge,
    "<=": operator.le,
}


@dataclass(frozen=True)
class Condition:
    subject: str
    operator: str = ""
    operand: Any = None
    # Set when the string had no operator/operand pair
    always_false: bool = False

    def evaluate(self, actor: Actor, session: Optional[Session]) -> bool:
        if self.always_false:
            return False
        if self.subject == PERMISSION:
            return actor.has_permission(self.operand)
        if self.subject == NAME:
            return actor.name.lower() == str(self.operand).lower()

        compare = COMPARATORS.get(self.operator)
        if compare is None:
            return False
        if self.subject == PAGE:
            if session is None:
                return False
            current = session.page
        elif self.subject == HEALTH:
            current = float(actor.health)
        else:
            current = int(actor.level)
        return compare(current, self.operand)

    def __call__(self, actor: Actor, session: Optional[Session]) -> bool:
        return self.evaluate(actor, session)


def _find_subject(text: str) -> Optional[str]:
    for subject in SUBJECT_ORDER:
        if "{" + subject + "}" in text:
            return subject
    return None


def parse_condition(text: str) -> Optional[Condition]:
    """Return a Condition, or None when no known subject is named or the operand is unusable."""
    text = text.strip()
    subject = _find_subject(text)
    if subject is None:
        return None
    remainder = text.replace("{" + subject + "}", "").strip()

    if subject == PERMISSION:
        permission = remainder.replace("has", "", 1).strip()
        return Condition(PERMISSION, "has", permission)
    if subject == NAME:
        name = remainder.replace("equals", "", 1).strip()
        return Condition(NAME, "equals", name)

    parts = remainder.split(None, 1)
    if len(parts) < 2:
        return Condition(subject, always_false=True)
    op, raw_operand = parts[0], parts[1].strip()
    try:
        operand = NUMERIC_SUBJECTS[subject](raw_operand)
    except ValueError:
        logger.debug("[ConditionParser] Unusable operand %r in %r", raw_operand, text)
        return None
    return Condition(subject, op, operand)
