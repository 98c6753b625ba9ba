from __future__ import annotations

import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import Column, DateTime, Index, Integer, String, Text

from leadhub.db import Base


class LeadStatus(str, Enum):
    """Console workflow states for a lead."""

    NEW = "new"
    CONTACTED = "contacted"
    QUALIFIED = "qualified"
    CLOSED = "closed"


class LeadSource(str, Enum):
    """Inbound channel a lead arrived from."""

    INSTAGRAM = "instagram"
    GOOGLE = "google"
    WEBSITE = "website"
    OTHER = "other"


def utcnow() -> datetime.datetime:
    """Naive UTC timestamp, the format every lead timestamp is stored in."""
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


class Lead(Base):
    """Canonical lead record shared by every inbound channel."""

    __tablename__ = "leads"

    id: int = Column(Integer, primary_key=True, autoincrement=True, index=True)
    source: str = Column(String(32), index=True, nullable=False)
    source_id: Optional[str] = Column(String(255), index=True, nullable=True)
    name: Optional[str] = Column(String(255), nullable=True)
    email: Optional[str] = Column(String(255), index=True, nullable=True)
    phone: Optional[str] = Column(String(64), nullable=True)
    message: Optional[str] = Column(Text, nullable=True)
    page_url: Optional[str] = Column(Text, nullable=True)
    campaign_id: Optional[str] = Column(String(255), nullable=True)
    campaign_name: Optional[str] = Column(String(255), nullable=True)
    status: str = Column(
        String(32), index=True, nullable=False, default=LeadStatus.NEW.value
    )
    assigned_to: Optional[str] = Column(String(255), nullable=True)
    # JSON snapshot of the inbound payload; audit only, never parsed back.
    meta: Optional[str] = Column(Text, nullable=True)
    created_at: datetime.datetime = Column(
        DateTime, default=utcnow, nullable=False, index=True
    )
    updated_at: datetime.datetime = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        Index("ix_leads_source_status_created", "source", "status", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Lead id={self.id} source={self.source} status={self.status}>"

