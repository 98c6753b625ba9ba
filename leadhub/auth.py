# leadhub/auth.py

"""
Console session guard for LeadHub.

Identity is owned by an external service; this module only checks the
session credential it hands the console:
- Set ADMIN_API_SECRET in your environment.
- Send `X-Admin-Secret: <that_value>` (or the `leadhub_session` cookie).

If ADMIN_API_SECRET is not set, authenticated_admin() allows all
requests (useful for local dev).
"""

import hmac
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from fastapi import Depends, Request

from leadhub.config import Settings, get_settings
from leadhub.errors import UnauthorizedError

logger = logging.getLogger("leadhub.auth")

SESSION_COOKIE_NAME = "leadhub_session"


@dataclass(frozen=True)
class RequestContext:
    """Per-request values handed explicitly to console handlers."""

    user: Dict[str, Any]
    settings: Settings = field(repr=False)


def _provided_secret(request: Request) -> Optional[str]:
    return request.headers.get("X-Admin-Secret") or request.cookies.get(
        SESSION_COOKIE_NAME
    )


def authenticated_admin(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> RequestContext:
    """
    Dependency used on /api routes.

    - If ADMIN_API_SECRET is set:
        Require the header or session cookie to match that value.
    - If not set:
        Allow all requests (dev mode).
    """
    admin_secret = settings.admin_api_secret
    if not admin_secret:
        logger.warning(
            "ADMIN_API_SECRET is not set; console endpoints are effectively unprotected."
        )
        return RequestContext(user={"admin": True, "mode": "unprotected"}, settings=settings)

    provided = _provided_secret(request)
    if not provided or not hmac.compare_digest(
        provided.encode("utf-8"), admin_secret.encode("utf-8")
    ):
        logger.warning(
            "Unauthorized console access attempt from %s",
            request.client.host if request.client else "unknown",
        )
        raise UnauthorizedError("Unauthorized")

    return RequestContext(user={"admin": True, "mode": "shared-secret"}, settings=settings)
