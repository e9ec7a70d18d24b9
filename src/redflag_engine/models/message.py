"""
Message model - standardized representation produced by provider adapters.

Messages, threads and calendar events arrive already normalized; the engine
only reads them. All models are frozen so detectors can share them freely.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..datetime_utils import ensure_utc


class EmailAddress(BaseModel):
    """Address with optional display name."""

    model_config = ConfigDict(frozen=True)

    email: str = Field(description="Email address")
    name: Optional[str] = Field(None, description="Display name")

    @property
    def display(self) -> str:
        """``"{name} {email}"`` with surrounding whitespace trimmed."""
        return f"{self.name or ''} {self.email}".strip()


class Message(BaseModel):
    """
    Standardized email message.

    Immutable once produced by upstream adapters. ``sender`` is exposed as
    ``from`` in JSON payloads.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(description="Provider-unique message ID")
    thread_id: str = Field("", description="Conversation/thread ID (empty if unknown)")
    source: str = Field("other", description="Provider tag: gmail, outlook, ...")
    sender: EmailAddress = Field(alias="from", description="Sender address")
    to: List[EmailAddress] = Field(default_factory=list, description="To recipients")
    cc: List[EmailAddress] = Field(default_factory=list, description="CC recipients")
    subject: str = Field("", description="Subject line")
    snippet: str = Field("", description="Short preview text")
    body: Optional[str] = Field(None, description="Plain-text body")
    received_at: datetime = Field(description="Receive timestamp")
    is_read: bool = Field(False, description="Read flag")
    is_starred: bool = Field(False, description="Starred/flagged by user")
    labels: List[str] = Field(default_factory=list, description="Provider labels/folders")

    @field_validator("received_at")
    @classmethod
    def normalize_received_at(cls, v: datetime) -> datetime:
        """Store timestamps as aware UTC so ordering never mixes naive/aware values."""
        return ensure_utc(v)

    @property
    def body_or_snippet(self) -> str:
        """Body text, falling back to the snippet."""
        return self.body if self.body is not None else self.snippet

    @property
    def analysis_text(self) -> str:
        """Subject and body (or snippet) joined for text heuristics."""
        return f"{self.subject} {self.body_or_snippet}"


class MessageThread(BaseModel):
    """A conversation thread with its messages."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Thread ID")
    messages: List[Message] = Field(default_factory=list, description="Messages in the thread")


class CalendarEvent(BaseModel):
    """Standardized calendar event from the recipient's calendar."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Event ID")
    title: str = Field(description="Event title")
    description: Optional[str] = Field(None, description="Event description")
    location: Optional[str] = Field(None, description="Event location")
    start_time: datetime = Field(description="Start time")
    end_time: datetime = Field(description="End time")
    is_all_day: bool = Field(False, description="All-day event")
    attendees: List[EmailAddress] = Field(default_factory=list, description="Invited attendees")
    organizer: EmailAddress = Field(description="Event organizer")
    status: Literal["confirmed", "tentative", "cancelled"] = Field(
        "confirmed", description="Event status"
    )

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_times(cls, v: datetime) -> datetime:
        """Store timestamps as aware UTC."""
        return ensure_utc(v)

    @property
    def analysis_text(self) -> str:
        """Title, description and location joined for content matching."""
        return f"{self.title} {self.description or ''} {self.location or ''}"
