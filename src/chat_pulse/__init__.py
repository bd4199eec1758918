"""chat-pulse: live like/lurk counts from Twitch chat commands."""

from chat_pulse.commands import UserAction, parse_command
from chat_pulse.state import Data, UserState, UserStateStore, apply_action

__all__ = [
    "UserAction",
    "parse_command",
    "Data",
    "UserState",
    "UserStateStore",
    "apply_action",
]
