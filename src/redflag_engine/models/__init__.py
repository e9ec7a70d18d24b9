# Data models for the red-flag engine

from .engine_version import EngineVersion
from .message import CalendarEvent, EmailAddress, Message, MessageThread
from .registry import Contact, VipEntry, normalize_email

__all__ = [
    "EngineVersion",
    "EmailAddress",
    "Message",
    "MessageThread",
    "CalendarEvent",
    "Contact",
    "VipEntry",
    "normalize_email",
]
