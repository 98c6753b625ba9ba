from __future__ import annotations

import logging

from leadhub.schemas.lead import LeadStats
from leadhub.store import LeadStore

logger = logging.getLogger("leadhub.services.lead_stats")


def lead_summary(store: LeadStore) -> LeadStats:
    """Dashboard counters over the whole table; takes no filters."""
    counts = store.aggregate_counts()
    stats = LeadStats(**counts)
    logger.debug("Lead summary computed (total=%s)", stats.total)
    return stats
