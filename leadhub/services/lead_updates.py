from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from leadhub.errors import NotFoundError, ValidationError, error_locations
from leadhub.models.lead import Lead
from leadhub.schemas.lead import LeadUpdate
from leadhub.store import LeadChanges, LeadStore

logger = logging.getLogger("leadhub.services.lead_updates")


def get_lead(store: LeadStore, lead_id: int) -> Lead:
    lead = store.get(lead_id)
    if lead is None:
        logger.warning("Lead not found: id=%s", lead_id)
        raise NotFoundError("Lead not found")
    return lead


def _changes_from_body(body: Any) -> LeadChanges:
    if not isinstance(body, dict):
        raise ValidationError("Update body must be a JSON object.")

    try:
        update = LeadUpdate.model_validate(body)
    except PydanticValidationError as exc:
        logger.warning(
            "Rejected lead update: %s",
            exc.errors(include_url=False, include_input=False),
        )
        raise ValidationError(
            f"Invalid lead update (fields: {error_locations(exc)})."
        ) from exc

    supplied = update.model_dump(exclude_unset=True)
    if not supplied:
        raise ValidationError("No updates provided")

    changes: LeadChanges = {}
    if "status" in supplied:
        if update.status is None:
            raise ValidationError("status cannot be null")
        changes["status"] = update.status.value
    if "assigned_to" in supplied:
        # null clears the assignment
        changes["assigned_to"] = update.assigned_to
    return changes


def update_lead(store: LeadStore, lead_id: int, body: Any) -> Lead:
    """
    Apply a console edit to status and/or assignment.

    The body is validated before the store is touched, so an empty or
    malformed body is rejected even for ids that do not exist.
    """
    changes = _changes_from_body(body)

    updated = store.update_fields(lead_id, changes)
    if updated == 0:
        logger.warning("Update targeted missing lead id=%s", lead_id)
        raise NotFoundError("Lead not found")

    lead = get_lead(store, lead_id)
    logger.info(
        "Lead id=%s updated (status=%s, assigned_to=%s)",
        lead.id,
        lead.status,
        lead.assigned_to,
    )
    return lead


def delete_lead(store: LeadStore, lead_id: int) -> None:
    """Hard delete. Deleting an id that is already gone is not an error."""
    deleted = store.delete(lead_id)
    if not deleted:
        logger.info("Delete for lead id=%s matched no rows", lead_id)
