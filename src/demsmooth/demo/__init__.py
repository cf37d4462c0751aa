from __future__ import annotations

from .codec import DemoFormatError, dump, dumps, load, loads
from .messages import MessageSplitWarning, entity_update_message, join_messages, split_messages, time_message
from .types import (
    PITCH,
    PROTOCOL_FITZQUAKE,
    PROTOCOL_NETQUAKE,
    ROLL,
    SVC_TIME,
    YAW,
    Block,
    Demo,
    FieldRef,
    Message,
)

__all__ = [
    "PITCH",
    "PROTOCOL_FITZQUAKE",
    "PROTOCOL_NETQUAKE",
    "ROLL",
    "SVC_TIME",
    "YAW",
    "Block",
    "Demo",
    "DemoFormatError",
    "FieldRef",
    "Message",
    "MessageSplitWarning",
    "dump",
    "dumps",
    "entity_update_message",
    "join_messages",
    "load",
    "loads",
    "split_messages",
    "time_message",
]
