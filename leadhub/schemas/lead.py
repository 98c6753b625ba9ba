from __future__ import annotations

import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from leadhub.models.lead import LeadSource, LeadStatus

SortField = Literal["created_at", "updated_at", "name", "email"]
SortDir = Literal["asc", "desc"]

MAX_PAGE_SIZE = 100


def _parse_bound(value: str, *, end_of_day: bool) -> datetime.datetime:
    """
    Parse an ISO date or datetime into a naive UTC datetime.

    A bare date as an upper bound covers the whole day.
    """
    text = value.strip()
    try:
        day = datetime.date.fromisoformat(text)
    except ValueError:
        day = None
    if day is not None:
        if end_of_day:
            return datetime.datetime.combine(day, datetime.time.max)
        return datetime.datetime.combine(day, datetime.time.min)

    parsed = datetime.datetime.fromisoformat(text.replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(datetime.timezone.utc).replace(tzinfo=None)
    return parsed


class LeadQuery(BaseModel):
    """
    Console list query, parsed from the /api/leads query string.

    Wire names (pageSize, sortField, ...) are accepted as aliases; blank
    values are treated as absent so the console can send empty filters.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=20, ge=1, le=MAX_PAGE_SIZE, alias="pageSize")
    q: Optional[str] = None
    source: Optional[LeadSource] = None
    status: Optional[LeadStatus] = None
    date_from: Optional[datetime.datetime] = Field(default=None, alias="dateFrom")
    date_to: Optional[datetime.datetime] = Field(default=None, alias="dateTo")
    sort_field: SortField = Field(default="created_at", alias="sortField")
    sort_dir: SortDir = Field(default="desc", alias="sortDir")

    @model_validator(mode="before")
    @classmethod
    def drop_blank_params(cls, data):
        if isinstance(data, dict):
            return {
                key: value
                for key, value in data.items()
                if not (value is None or (isinstance(value, str) and not value.strip()))
            }
        return data

    @field_validator("date_from", mode="before")
    @classmethod
    def parse_date_from(cls, v):
        if isinstance(v, str):
            return _parse_bound(v, end_of_day=False)
        return v

    @field_validator("date_to", mode="before")
    @classmethod
    def parse_date_to(cls, v):
        if isinstance(v, str):
            return _parse_bound(v, end_of_day=True)
        return v

    @field_validator("sort_dir", mode="before")
    @classmethod
    def lower_sort_dir(cls, v):
        return v.lower() if isinstance(v, str) else v

    @model_validator(mode="after")
    def check_date_range(self) -> "LeadQuery":
        if self.date_from and self.date_to and self.date_from > self.date_to:
            raise ValueError("dateFrom must not be after dateTo")
        return self

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


class LeadUpdate(BaseModel):
    """PATCH body. Only status and assignment are editable from the console."""

    model_config = ConfigDict(extra="forbid")

    status: Optional[LeadStatus] = None
    assigned_to: Optional[str] = None


class LeadOut(BaseModel):
    """Full lead record as returned to the console."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    source: LeadSource
    source_id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    message: Optional[str] = None
    page_url: Optional[str] = None
    campaign_id: Optional[str] = None
    campaign_name: Optional[str] = None
    status: LeadStatus
    assigned_to: Optional[str] = None
    meta: Optional[str] = None
    created_at: datetime.datetime
    updated_at: datetime.datetime


class LeadPage(BaseModel):
    """One page of query results plus the independently counted total."""

    model_config = ConfigDict(populate_by_name=True)

    leads: List[LeadOut]
    total: int
    page: int
    page_size: int = Field(alias="pageSize")
    total_pages: int = Field(alias="totalPages")


class LeadStats(BaseModel):
    """Dashboard counters over the whole lead table."""

    total: int = 0
    new_count: int = 0
    contacted_count: int = 0
    qualified_count: int = 0
    closed_count: int = 0
    instagram_count: int = 0
    google_count: int = 0
    website_count: int = 0


class SuccessResponse(BaseModel):
    success: bool = True
