"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures logging, routes, and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from ticketflow.adapters.clock.ticker import Ticker
from ticketflow.adapters.http.verification_client import HttpVerificationClient
from ticketflow.adapters.repository.memory import InMemoryFlowRepository
from ticketflow.api.v1 import router as v1_router
from ticketflow.config.settings import get_settings

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "v1",
        "description": "Registration Flow API v1 - Drive the student ticket and guest pass journeys",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates the verification service client and the flow repository
    - Starts the clock ticker that advances every flow's resend timers
      and evicts idle flows
    - Stops the ticker and closes the client on shutdown
    """
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    logger.info("Starting application...")
    logger.info("Verification service at %s", settings.api_base_url)

    repository = InMemoryFlowRepository(idle_ttl=settings.flow_idle_ttl_seconds)
    verification = HttpVerificationClient(
        settings.api_base_url,
        write_timeout=settings.write_timeout_seconds,
    )

    def tick_all() -> None:
        repository.evict_idle()
        for orchestrator in repository.all():
            orchestrator.tick()

    ticker = Ticker(tick_all, interval=settings.tick_interval_seconds)
    ticker.start()

    # Store adapters in app state for dependency injection
    app.state.repository = repository
    app.state.verification = verification

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    await ticker.stop()
    await verification.aclose()
    logger.info("Verification client closed")


app = FastAPI(
    title="ticketflow",
    description="Registration Flow API - Email verification, registration and payment for event tickets",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

# Include v1 API routes
app.include_router(v1_router, prefix="/v1")


@app.get("/health")
async def health_check(request: Request) -> dict[str, str]:
    """
    Health check endpoint.

    Returns 200 OK once startup has wired the flow repository.
    """
    return {"status": "healthy", "flows": str(len(request.app.state.repository))}
