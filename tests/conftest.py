"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- A stubbed verification service (every call succeeds by default)
- A mock reconciliation sink
- An orchestrator wired to both, with a short write timeout
"""

from unittest.mock import AsyncMock, Mock

import pytest

from ticketflow.domain.flow import FlowOrchestrator
from ticketflow.domain.outcomes import Success


@pytest.fixture
def verification() -> AsyncMock:
    """Verification service double; override return values per test."""
    service = AsyncMock()
    service.request_code.return_value = Success({"success": True})
    service.confirm_code.return_value = Success({"verified": True})
    service.submit_profile.return_value = Success({"success": True})
    service.confirm_payment.return_value = Success({"success": True})
    return service


@pytest.fixture
def reconciliation() -> Mock:
    return Mock()


@pytest.fixture
def orchestrator(verification: AsyncMock, reconciliation: Mock) -> FlowOrchestrator:
    """Orchestrator on HOME; writes time out after 50ms instead of 10s."""
    return FlowOrchestrator(
        verification=verification,
        reconciliation=reconciliation,
        write_timeout=0.05,
    )
