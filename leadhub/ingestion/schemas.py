from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from leadhub.models.lead import LeadSource


class InstagramFieldData(BaseModel):
    """One answered question on a lead-ad form."""

    name: str
    values: List[str] = Field(default_factory=list)


class InstagramLeadValue(BaseModel):
    """The `value` object of a leadgen change notification."""

    leadgen_id: str
    page_id: Optional[str] = None
    form_id: Optional[str] = None
    adgroup_id: Optional[str] = None
    ad_id: Optional[str] = None
    created_time: Optional[int] = None
    field_data: Optional[List[InstagramFieldData]] = None


class InstagramChange(BaseModel):
    field: Optional[str] = None
    value: InstagramLeadValue


class InstagramEntry(BaseModel):
    id: Optional[str] = None
    time: Optional[int] = None
    changes: List[InstagramChange]


class InstagramWebhookPayload(BaseModel):
    """Lead-ad webhook envelope: entry[] -> changes[] -> value."""

    object: Optional[str] = None
    entry: List[InstagramEntry]


class GoogleWebhookPayload(BaseModel):
    """Search-ads lead form webhook. Every field is optional."""

    lead_id: Optional[str] = None
    campaign_id: Optional[str] = None
    campaign_name: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    message: Optional[str] = None


class WebsiteFormPayload(BaseModel):
    """Website contact form submission. Every field is optional."""

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    message: Optional[str] = None
    page_url: Optional[str] = Field(default=None, alias="pageUrl")

    model_config = ConfigDict(populate_by_name=True)


class NormalizedLead(BaseModel):
    """Canonical lead fields produced by a source normalizer, before storage."""

    model_config = ConfigDict(frozen=True)

    source: LeadSource
    source_id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    message: Optional[str] = None
    page_url: Optional[str] = None
    campaign_id: Optional[str] = None
    campaign_name: Optional[str] = None
    raw: Dict[str, Any] = Field(
        default_factory=dict,
        description="Inbound payload element this lead came from (stored as meta).",
    )

    @field_validator(
        "source_id",
        "name",
        "email",
        "phone",
        "message",
        "page_url",
        "campaign_id",
        "campaign_name",
        mode="before",
    )
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None


class IngestResponse(BaseModel):
    """Acknowledgement returned to webhook senders."""

    success: bool = True
    lead_ids: List[int] = Field(default_factory=list)
