"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
"""

from fastapi import Depends, HTTPException, Request, status

from ticketflow.adapters.reconciliation.console import ConsoleReconciliationSink
from ticketflow.adapters.repository.memory import InMemoryFlowRepository
from ticketflow.config.settings import Settings, get_settings
from ticketflow.domain.exceptions import FlowNotFound
from ticketflow.domain.flow import FlowOrchestrator
from ticketflow.domain.ports import VerificationService

# Module-level singleton - ConsoleReconciliationSink is stateless
_reconciliation_sink = ConsoleReconciliationSink()


def get_repository(request: Request) -> InMemoryFlowRepository:
    """
    Get flow repository from app state.

    The repository is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.repository


def get_verification_service(request: Request) -> VerificationService:
    """Get the HTTP verification client created at startup."""
    return request.app.state.verification


def get_reconciliation_sink() -> ConsoleReconciliationSink:
    """Get console reconciliation sink (singleton)."""
    return _reconciliation_sink


def new_orchestrator(
    verification: VerificationService = Depends(get_verification_service),
    reconciliation: ConsoleReconciliationSink = Depends(get_reconciliation_sink),
    settings: Settings = Depends(get_settings),
) -> FlowOrchestrator:
    """
    Create a fresh orchestrator for a new participant.

    Wires the verification service and reconciliation sink with the
    configured timing and code settings.
    """
    return FlowOrchestrator(
        verification=verification,
        reconciliation=reconciliation,
        resend_seconds=settings.otp_resend_seconds,
        otp_length=settings.otp_length,
        write_timeout=settings.write_timeout_seconds,
        pass_id_prefix=settings.pass_id_prefix,
    )


def get_orchestrator(
    flow_id: str,
    repository: InMemoryFlowRepository = Depends(get_repository),
) -> FlowOrchestrator:
    """
    Look up the orchestrator for the flow id in the path.

    Raises:
        HTTPException: 404 if the flow is unknown
    """
    try:
        return repository.get(flow_id)
    except FlowNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Flow not found",
        ) from None
