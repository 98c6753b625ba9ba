from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from leadhub.auth import RequestContext, authenticated_admin
from leadhub.db import get_db
from leadhub.errors import ValidationError
from leadhub.schemas.lead import LeadOut, LeadPage, LeadStats, SuccessResponse
from leadhub.services.lead_query import parse_lead_query, query_leads
from leadhub.services.lead_stats import lead_summary
from leadhub.services.lead_updates import delete_lead, get_lead, update_lead
from leadhub.store import LeadStore

logger = logging.getLogger("leadhub.routers.leads")

router = APIRouter(prefix="/api/leads", tags=["leads"])


async def read_json_body(request: Request) -> Any:
    """Decode the JSON body up front; a missing body decodes to None."""
    raw = await request.body()
    try:
        return json.loads(raw or b"null")
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ValidationError("Request body is not valid JSON.") from exc


@router.get("", response_model=LeadPage, summary="Search, filter and page through leads")
def list_leads(
    request: Request,
    ctx: RequestContext = Depends(authenticated_admin),
    db: Session = Depends(get_db),
) -> LeadPage:
    """
    Query params: page, pageSize, q, source, status, dateFrom, dateTo,
    sortField, sortDir. All optional.
    """
    query = parse_lead_query(request.query_params)
    result = query_leads(LeadStore(db), query)
    logger.info(
        "Listed leads (page=%d, returned=%d, total=%d, mode=%s)",
        result.page,
        len(result.leads),
        result.total,
        ctx.user.get("mode"),
    )
    return result


# Registered before /{lead_id} so "stats" is never taken for an id.
@router.get("/stats/summary", response_model=LeadStats, summary="Lead counters")
def lead_stats_summary(
    ctx: RequestContext = Depends(authenticated_admin),
    db: Session = Depends(get_db),
) -> LeadStats:
    return lead_summary(LeadStore(db))


@router.get("/{lead_id}", response_model=LeadOut)
def read_lead(
    lead_id: int,
    ctx: RequestContext = Depends(authenticated_admin),
    db: Session = Depends(get_db),
) -> LeadOut:
    return LeadOut.model_validate(get_lead(LeadStore(db), lead_id))


@router.patch("/{lead_id}", response_model=LeadOut, summary="Update status / assignment")
def patch_lead(
    lead_id: int,
    ctx: RequestContext = Depends(authenticated_admin),
    db: Session = Depends(get_db),
    body: Any = Depends(read_json_body),
) -> LeadOut:
    lead = update_lead(LeadStore(db), lead_id, body)
    logger.info("Lead id=%s patched (mode=%s)", lead_id, ctx.user.get("mode"))
    return LeadOut.model_validate(lead)


@router.delete("/{lead_id}", response_model=SuccessResponse)
def remove_lead(
    lead_id: int,
    ctx: RequestContext = Depends(authenticated_admin),
    db: Session = Depends(get_db),
) -> SuccessResponse:
    delete_lead(LeadStore(db), lead_id)
    logger.info("Lead id=%s deleted (mode=%s)", lead_id, ctx.user.get("mode"))
    return SuccessResponse(success=True)
