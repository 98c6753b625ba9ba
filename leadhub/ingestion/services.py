# leadhub/ingestion/services.py
import json
import logging
from typing import Any, Dict, List, Optional

from leadhub.errors import StoreError, ValidationError, VerificationError
from leadhub.ingestion.config import IngestionSettings
from leadhub.ingestion.normalizers import normalize
from leadhub.models.lead import LeadSource
from leadhub.store import LeadStore

logger = logging.getLogger("leadhub.ingestion.services")


def read_json_object(raw_body: bytes, max_bytes: int) -> Dict[str, Any]:
    """Decode a webhook body, requiring a JSON object within the size limit."""
    if len(raw_body) > max_bytes:
        raise ValidationError(
            f"Payload too large. Max allowed is {max_bytes // 1024} KB."
        )

    try:
        payload = json.loads(raw_body.decode("utf-8-sig") or "null")
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ValidationError("Payload is not valid JSON.") from exc

    if not isinstance(payload, dict):
        raise ValidationError("Payload must be a JSON object.")
    return payload


def ingest_payload(
    store: LeadStore,
    source: LeadSource,
    raw_payload: Any,
) -> List[int]:
    """
    Normalize one webhook delivery and persist every lead it describes.

    - The payload is fully normalized before the first insert, so a
      validation failure writes nothing.
    - Each lead is then its own insert. If insert k fails, leads 1..k-1
      stay committed and the StoreError propagates.
    - No dedupe on source_id: a redelivered event creates another lead.
    """
    normalized = normalize(source, raw_payload)

    lead_ids: List[int] = []
    for index, item in enumerate(normalized):
        try:
            lead = store.insert(item)
        except StoreError:
            logger.error(
                "Ingestion stopped at item %d/%d (source=%s, committed_ids=%s)",
                index + 1,
                len(normalized),
                source.value,
                lead_ids,
            )
            raise
        lead_ids.append(lead.id)

    logger.info(
        "Ingested %d lead(s) via %s webhook (ids=%s)",
        len(lead_ids),
        source.value,
        lead_ids,
    )
    return lead_ids


def verify_subscription(
    settings: IngestionSettings,
    mode: Optional[str],
    token: Optional[str],
    challenge: Optional[str],
) -> str:
    """
    Webhook subscription handshake.

    Echo the challenge back when the sender asks to subscribe with the
    configured verify token; anything else is refused.
    """
    expected = settings.instagram_verify_token
    if not expected:
        logger.warning("Webhook verification attempted but INSTAGRAM_VERIFY_TOKEN is not set")
        raise VerificationError("Verification failed")

    if mode != "subscribe" or token != expected:
        logger.warning("Webhook verification failed (mode=%s)", mode)
        raise VerificationError("Verification failed")

    logger.info("Webhook subscription verified")
    return challenge or ""
