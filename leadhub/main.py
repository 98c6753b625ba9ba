from __future__ import annotations

import logging
from typing import Dict

from dotenv import load_dotenv

# Load environment variables from .env at project root
# before the app and settings are created.
load_dotenv()

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from leadhub.config import settings
from leadhub.db import init_db
from leadhub.errors import LeadHubError
from leadhub.routers import leads as leads_router
from leadhub.routers import webhooks as webhooks_router

logger = logging.getLogger("leadhub.main")


async def handle_leadhub_error(request: Request, exc: LeadHubError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info(
            "%s %s -> %s: %s",
            request.method,
            request.url.path,
            exc.status_code,
            exc.message,
        )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


def _error_summary(exc: RequestValidationError) -> list:
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.info("%s %s -> 400: %s", request.method, request.url.path, _error_summary(exc))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request", "detail": _error_summary(exc)},
    )


def create_app() -> FastAPI:
    app = FastAPI(title=settings.app_name, debug=settings.debug)

    # The console polls from its own origin.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    app.add_exception_handler(LeadHubError, handle_leadhub_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)

    # Inbound webhooks (no session)
    app.include_router(webhooks_router.router)

    # Management console API
    app.include_router(leads_router.router)

    @app.on_event("startup")
    async def on_startup() -> None:
        """Initialize resources on startup."""
        logger.info("Starting LeadHub app...")
        init_db()
        logger.info("LeadHub app started.")

    @app.get("/healthz")
    async def healthcheck() -> Dict[str, str]:
        return {"status": "ok", "app": settings.app_name}

    return app


app = create_app()
