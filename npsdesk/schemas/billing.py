"""Pydantic schemas for billing endpoints."""
from pydantic import BaseModel, Field


class CancelBody(BaseModel):
    reason: str | None = Field(default=None, description="Why the customer cancelled")
