from .base import Action
from .command import ConsoleCommand, PlayerCommand
from .sound import Sound
from .message import Message, Broadcast
from .close import Close
from .open_menu import OpenMenu
from .page import ChangePage
from .refresh import Refresh
from .trigger import NamedTrigger, TriggerStyle
from .conditional import Conditional

__all__ = [
    "Action",
    "ConsoleCommand",
    "PlayerCommand",
    "Sound",
    "Message",
    "Broadcast",
    "Close",
    "OpenMenu",
    "ChangePage",
    "Refresh",
    "NamedTrigger",
    "TriggerStyle",
    "Conditional",
]
