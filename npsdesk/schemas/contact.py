"""Pydantic schemas for contacts and segments."""
from datetime import date, datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


def _clean_labels(values: List[str]) -> List[str]:
    cleaned: List[str] = []
    for value in values:
        label = value.strip()
        if label and label not in cleaned:
            cleaned.append(label)
    return cleaned


class ContactBase(BaseModel):
    name: str = Field(..., min_length=1, description="Contact name")
    email: EmailStr = Field(..., description="Contact e-mail")
    phone: str = Field(..., min_length=1, description="Phone number")
    company: Optional[str] = None
    position: Optional[str] = None
    groups: List[str] = Field(default_factory=list, description="Segments the contact belongs to")
    tags: List[str] = Field(default_factory=list, description="Free-form labels")
    notes: Optional[str] = None
    last_contact_date: Optional[date] = None

    @field_validator("groups", "tags")
    @classmethod
    def _normalise_labels(cls, values: List[str]) -> List[str]:
        return _clean_labels(values)


class ContactCreate(ContactBase):
    """Schema for creating a contact."""


class ContactUpdate(ContactBase):
    """Full replacement of a contact's fields."""


class ContactRead(BaseModel):
    id: UUID
    account_id: UUID
    name: str
    email: str
    phone: str
    company: Optional[str] = None
    position: Optional[str] = None
    groups: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    notes: Optional[str] = None
    last_contact_date: Optional[date] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class SegmentSummary(BaseModel):
    """Contact counts per group and per tag."""

    total: int
    groups: Dict[str, int]
    tags: Dict[str, int]
