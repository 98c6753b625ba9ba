"""Ingestion package for LeadHub.

Contains configuration, wire schemas, per-source normalizers and the
pipeline that persists leads arriving through webhooks.
"""

from .config import get_ingestion_settings  # noqa: F401
