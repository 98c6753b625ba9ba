from __future__ import annotations

import logging
import math
from typing import Any, Mapping

from pydantic import ValidationError as PydanticValidationError

from leadhub.errors import ValidationError, error_locations
from leadhub.schemas.lead import LeadOut, LeadPage, LeadQuery
from leadhub.store import LeadCriteria, LeadSort, LeadStore

logger = logging.getLogger("leadhub.services.lead_query")


def parse_lead_query(params: Mapping[str, Any]) -> LeadQuery:
    """Validate raw query-string params into a LeadQuery."""
    try:
        return LeadQuery.model_validate(dict(params))
    except PydanticValidationError as exc:
        logger.warning(
            "Rejected lead query: %s",
            exc.errors(include_url=False, include_input=False),
        )
        raise ValidationError(
            f"Invalid query parameters (fields: {error_locations(exc)})."
        ) from exc


def criteria_for(query: LeadQuery) -> LeadCriteria:
    return LeadCriteria(
        search=query.q,
        source=query.source,
        status=query.status,
        created_from=query.date_from,
        created_to=query.date_to,
    )


def query_leads(store: LeadStore, query: LeadQuery) -> LeadPage:
    """
    Filter, sort and paginate leads.

    The total and the page come from two separate reads of the same
    criteria. Under concurrent writes they can disagree by the rows that
    landed in between.
    """
    criteria = criteria_for(query)
    sort = LeadSort(field=query.sort_field, direction=query.sort_dir)

    total = store.count(criteria)
    if query.offset >= total:
        # past the last row; offset may not fit the database's integer type
        leads = []
    else:
        leads = store.fetch_page(
            criteria,
            sort,
            offset=query.offset,
            limit=query.page_size,
        )

    total_pages = math.ceil(total / query.page_size)

    logger.debug(
        "Lead query (q=%s, source=%s, status=%s, page=%d, page_size=%d) -> %d/%d",
        query.q,
        query.source,
        query.status,
        query.page,
        query.page_size,
        len(leads),
        total,
    )

    return LeadPage(
        leads=[LeadOut.model_validate(lead) for lead in leads],
        total=total,
        page=query.page,
        page_size=query.page_size,
        total_pages=total_pages,
    )
