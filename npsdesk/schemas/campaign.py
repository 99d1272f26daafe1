"""Pydantic schemas for Campaign and response resources"""
from datetime import date, datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class CampaignCreate(BaseModel):
    """Schema for creating a campaign."""

    name: str = Field(..., min_length=1, description="Campaign name")
    description: Optional[str] = Field(default=None, description="Free-form description")
    start_date: Optional[date] = Field(default=None, description="First day of the campaign")
    end_date: Optional[date] = Field(default=None, description="Last day of the campaign")


class CampaignRead(BaseModel):
    """Schema returned when reading a campaign."""

    id: UUID = Field(..., description="Campaign identifier")
    account_id: UUID = Field(..., description="Owning account")
    name: str = Field(..., description="Campaign name")
    description: Optional[str] = None
    active: bool = True
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    created_at: Optional[datetime] = Field(
        default=None, description="Creation timestamp"
    )

    model_config = ConfigDict(from_attributes=True)


class ResponseCreate(BaseModel):
    """Payload submitted by a survey respondent."""

    score: int = Field(..., ge=0, le=10, description="Likelihood to recommend, 0-10")
    feedback: Optional[str] = Field(default=None, description="Optional comment")
    source: Optional[str] = Field(default=None, description="Channel the answer came from")


class ResponseRead(BaseModel):
    id: UUID
    campaign_id: UUID
    score: int
    feedback: Optional[str] = None
    source: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class NpsPeriod(BaseModel):
    start: date
    nps: int


class SourceBreakdown(BaseModel):
    total: int
    nps: int


class NpsSummary(BaseModel):
    """Aggregated NPS figures for one campaign."""

    campaign_id: UUID
    nps: int
    promoters: int
    passives: int
    detractors: int
    total: int
    by_score: Dict[int, int]
    by_source: Dict[str, SourceBreakdown]
    over_time: List[NpsPeriod]
