from __future__ import annotations

from fastapi import status
from pydantic import ValidationError as PydanticValidationError


class LeadHubError(Exception):
    """Base exception for lead ingestion and console failures."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(LeadHubError):
    """Raised for malformed webhook envelopes, query params or update bodies."""

    status_code = status.HTTP_400_BAD_REQUEST


class VerificationError(LeadHubError):
    """Raised when a webhook subscription handshake does not match."""

    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(LeadHubError):
    """Raised when no lead exists for the requested id."""

    status_code = status.HTTP_404_NOT_FOUND


class StoreError(LeadHubError):
    """Raised when the lead store fails to read or write."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class UnauthorizedError(LeadHubError):
    """Raised when a console request carries no valid session credential."""

    status_code = status.HTTP_401_UNAUTHORIZED


def error_locations(exc: PydanticValidationError) -> str:
    """Comma-separated field paths of a pydantic failure, without input values."""
    locations = [
        ".".join(str(part) for part in err.get("loc", ())) or "body"
        for err in exc.errors(include_url=False, include_input=False)
    ]
    return ", ".join(locations)
