"""Per-source payload normalizers.

Each normalizer is a pure function taking the decoded JSON body of one
webhook delivery and returning the canonical leads it describes. Dispatch
happens on the declared source tag (the route the payload arrived on), never
on the shape of the payload itself.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError

from leadhub.errors import ValidationError, error_locations
from leadhub.ingestion.schemas import (
    GoogleWebhookPayload,
    InstagramFieldData,
    InstagramLeadValue,
    InstagramWebhookPayload,
    NormalizedLead,
    WebsiteFormPayload,
)
from leadhub.models.lead import LeadSource

logger = logging.getLogger("leadhub.ingestion.normalizers")

Normalizer = Callable[[Any], List[NormalizedLead]]

# Lead-ad form question names, tried in order; first non-empty answer wins.
INSTAGRAM_FIELD_CANDIDATES: Dict[str, Sequence[str]] = {
    "name": ("full_name", "name"),
    "email": ("email",),
    "phone": ("phone_number", "phone"),
    "message": ("message", "comments"),
}


def _require_object(payload: Any, source: LeadSource) -> Dict[str, Any]:
    if not isinstance(payload, dict):
        raise ValidationError(f"{source.value} payload must be a JSON object.")
    return payload


def _parse(model, payload: Dict[str, Any], source: LeadSource):
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        logger.warning(
            "Rejected %s payload: %s",
            source.value,
            exc.errors(include_url=False, include_input=False),
        )
        raise ValidationError(
            f"Invalid {source.value} payload (fields: {error_locations(exc)})."
        ) from exc


def _pick_field(
    field_data: List[InstagramFieldData],
    candidates: Sequence[str],
) -> Optional[str]:
    """Return the first non-empty answer among the candidate names (case-insensitive)."""
    answers: Dict[str, Optional[str]] = {}
    for field in field_data:
        key = field.name.lower()
        if key not in answers:
            answers[key] = field.values[0] if field.values else None

    for candidate in candidates:
        value = answers.get(candidate.lower())
        if value:
            return value
    return None


def _instagram_lead(value: InstagramLeadValue, raw_value: Dict[str, Any]) -> NormalizedLead:
    field_data = value.field_data or []
    picked = {
        target: _pick_field(field_data, candidates)
        for target, candidates in INSTAGRAM_FIELD_CANDIDATES.items()
    }
    return NormalizedLead(
        source=LeadSource.INSTAGRAM,
        source_id=value.leadgen_id,
        campaign_id=value.ad_id or value.adgroup_id or None,
        campaign_name=None,
        raw=raw_value,
        **picked,
    )


def normalize_instagram(payload: Any) -> List[NormalizedLead]:
    """
    Lead-ad envelope -> one lead per change.

    The whole envelope is validated before anything is returned, so a
    malformed change anywhere in the batch rejects the batch.
    """
    body = _require_object(payload, LeadSource.INSTAGRAM)
    envelope: InstagramWebhookPayload = _parse(
        InstagramWebhookPayload, body, LeadSource.INSTAGRAM
    )

    leads: List[NormalizedLead] = []
    for entry_index, entry in enumerate(envelope.entry):
        raw_changes = body["entry"][entry_index]["changes"]
        for change_index, change in enumerate(entry.changes):
            raw_value = raw_changes[change_index]["value"]
            leads.append(_instagram_lead(change.value, raw_value))

    logger.debug(
        "Normalized instagram envelope (entries=%d, leads=%d)",
        len(envelope.entry),
        len(leads),
    )
    return leads


def normalize_google(payload: Any) -> List[NormalizedLead]:
    body = _require_object(payload, LeadSource.GOOGLE)
    parsed: GoogleWebhookPayload = _parse(GoogleWebhookPayload, body, LeadSource.GOOGLE)
    return [
        NormalizedLead(
            source=LeadSource.GOOGLE,
            source_id=parsed.lead_id,
            name=parsed.name,
            email=parsed.email,
            phone=parsed.phone,
            message=parsed.message,
            campaign_id=parsed.campaign_id,
            campaign_name=parsed.campaign_name,
            raw=body,
        )
    ]


def normalize_website(payload: Any) -> List[NormalizedLead]:
    body = _require_object(payload, LeadSource.WEBSITE)
    parsed: WebsiteFormPayload = _parse(WebsiteFormPayload, body, LeadSource.WEBSITE)
    return [
        NormalizedLead(
            source=LeadSource.WEBSITE,
            source_id=None,
            name=parsed.name,
            email=parsed.email,
            phone=parsed.phone,
            message=parsed.message,
            page_url=parsed.page_url,
            raw=body,
        )
    ]


NORMALIZERS: Dict[LeadSource, Normalizer] = {
    LeadSource.INSTAGRAM: normalize_instagram,
    LeadSource.GOOGLE: normalize_google,
    LeadSource.WEBSITE: normalize_website,
}


def normalize(source: LeadSource, payload: Any) -> List[NormalizedLead]:
    """Dispatch to the normalizer registered for the declared source."""
    normalizer = NORMALIZERS.get(source)
    if normalizer is None:
        raise ValidationError(f"No inbound channel accepts source '{source.value}'.")
    return normalizer(payload)
