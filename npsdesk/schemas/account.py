"""Pydantic schemas for accounts."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class AccountCreate(BaseModel):
    email: EmailStr = Field(..., description="Login e-mail")
    name: str = Field(default="", description="Display name")


class AccountRead(BaseModel):
    id: UUID
    email: str
    name: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
