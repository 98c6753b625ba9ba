"""
Models package for LeadHub.

Imports and exposes ORM models so they are registered with Base.metadata.
"""

from leadhub.db import Base
from .lead import Lead, LeadSource, LeadStatus, utcnow  # noqa: F401

__all__ = [
    "Base",
    "Lead",
    "LeadSource",
    "LeadStatus",
    "utcnow",
]
