from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from leadhub.db import get_db
from leadhub.errors import LeadHubError
from leadhub.ingestion.config import IngestionSettings, get_ingestion_settings
from leadhub.ingestion.schemas import IngestResponse
from leadhub.ingestion.services import (
    ingest_payload,
    read_json_object,
    verify_subscription,
)
from leadhub.models.lead import LeadSource
from leadhub.store import LeadStore

logger = logging.getLogger("leadhub.routers.webhooks")

router = APIRouter(
    prefix="/webhook",
    tags=["webhooks"],
)


async def read_raw_body(request: Request) -> bytes:
    """Await the request body so the handlers themselves can run in the threadpool."""
    return await request.body()


def _ingest(
    raw_body: bytes,
    source: LeadSource,
    db: Session,
    settings: IngestionSettings,
) -> IngestResponse:
    logger.info("Received %s webhook (len=%s)", source.value, len(raw_body))

    try:
        payload = read_json_object(raw_body, settings.max_payload_bytes)
        lead_ids = ingest_payload(LeadStore(db), source, payload)
    except LeadHubError as exc:
        logger.warning("%s webhook rejected: %s", source.value, exc.message)
        raise

    return IngestResponse(success=True, lead_ids=lead_ids)


@router.get(
    "/instagram",
    response_class=PlainTextResponse,
    summary="Instagram webhook subscription handshake",
)
def verify_instagram_webhook(
    mode: Optional[str] = Query(default=None, alias="hub.mode"),
    token: Optional[str] = Query(default=None, alias="hub.verify_token"),
    challenge: Optional[str] = Query(default=None, alias="hub.challenge"),
    settings: IngestionSettings = Depends(get_ingestion_settings),
) -> PlainTextResponse:
    return PlainTextResponse(verify_subscription(settings, mode, token, challenge))


@router.post(
    "/instagram",
    response_model=IngestResponse,
    summary="Ingest an Instagram lead-ad envelope",
)
def instagram_webhook(
    raw_body: bytes = Depends(read_raw_body),
    db: Session = Depends(get_db),
    settings: IngestionSettings = Depends(get_ingestion_settings),
) -> IngestResponse:
    return _ingest(raw_body, LeadSource.INSTAGRAM, db, settings)


@router.post(
    "/google",
    response_model=IngestResponse,
    summary="Ingest a Google Ads lead form submission",
)
def google_webhook(
    raw_body: bytes = Depends(read_raw_body),
    db: Session = Depends(get_db),
    settings: IngestionSettings = Depends(get_ingestion_settings),
) -> IngestResponse:
    return _ingest(raw_body, LeadSource.GOOGLE, db, settings)


@router.post(
    "/form",
    response_model=IngestResponse,
    summary="Ingest a website contact form submission",
)
def website_form_webhook(
    raw_body: bytes = Depends(read_raw_body),
    db: Session = Depends(get_db),
    settings: IngestionSettings = Depends(get_ingestion_settings),
) -> IngestResponse:
    return _ingest(raw_body, LeadSource.WEBSITE, db, settings)
