"""
VIP and contact records supplied by the user-preferences collaborator.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..datetime_utils import ensure_utc


def normalize_email(email: str) -> str:
    """Lowercase and trim an address for comparison."""
    return email.strip().lower()


class VipEntry(BaseModel):
    """Explicit VIP registration."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="VIP entry ID")
    email: str = Field(description="VIP email address")
    name: Optional[str] = Field(None, description="Display name")
    added_at: datetime = Field(description="When the VIP was registered")
    source: Literal["manual", "suggested", "learned"] = Field(
        "manual", description="How the VIP entered the registry"
    )

    @field_validator("added_at")
    @classmethod
    def normalize_added_at(cls, v: datetime) -> datetime:
        return ensure_utc(v)


class Contact(BaseModel):
    """Known contact with interaction history."""

    model_config = ConfigDict(frozen=True)

    email: str = Field(description="Contact email address")
    id: Optional[str] = Field(None, description="Provider contact ID")
    source: Optional[str] = Field(None, description="Provider tag")
    name: Optional[str] = Field(None, description="Display name")
    company: Optional[str] = Field(None, description="Company")
    job_title: Optional[str] = Field(None, description="Job title")
    interaction_count: int = Field(0, ge=0, description="Number of past interactions")
    last_interaction_at: Optional[datetime] = Field(None, description="Most recent interaction")

    @field_validator("last_interaction_at")
    @classmethod
    def normalize_last_interaction(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)
