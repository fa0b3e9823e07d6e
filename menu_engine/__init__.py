"""Menu engine package exports"""

from .data_models import Actor, ItemEntry, ItemTemplate, MenuDefinition, Pagination, RefreshPolicy, Session
from .events import ActionContext, ClickOutcome, ClickType, MenuContextError
from .action_parser import parse_action, parse_actions
from .conditions import parse_condition
from .config import EngineConfig, configure_logging
from .engine import MenuEngine
from .loader import load_menu, load_menu_directory, load_menu_file
from .registries import InventoryClickResult
from .renderer import GridRenderer, LoggingHost

__all__ = [
    "Actor",
    "ItemEntry",
    "ItemTemplate",
    "MenuDefinition",
    "Pagination",
    "RefreshPolicy",
    "Session",
    "ActionContext",
    "ClickOutcome",
    "ClickType",
    "MenuContextError",
    "parse_action",
    "parse_actions",
    "parse_condition",
    "EngineConfig",
    "configure_logging",
    "MenuEngine",
    "load_menu",
    "load_menu_directory",
    "load_menu_file",
    "InventoryClickResult",
    "GridRenderer",
    "LoggingHost",
]
