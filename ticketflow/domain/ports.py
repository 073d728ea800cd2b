"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Protocol

from .forms import Flow, GuestForm, StudentForm
from .outcomes import RemoteOutcome

if TYPE_CHECKING:
    from .flow import FlowOrchestrator


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class PendingReconciliation:
    """
    A backend write that failed while the participant moved on anyway.

    Emitted by the orchestrator for every soft write that did not
    succeed, so operators can bring the backend back in line with
    what the participant was shown.
    """

    operation: str
    flow: Flow
    email: str
    reason: str
    payload: dict[str, Any] = field(default_factory=dict)
    recorded_at: datetime = field(default_factory=_utcnow)


class VerificationService(Protocol):
    """Port interface for the remote verification/registration service."""

    async def request_code(self, email: str) -> RemoteOutcome:
        """
        Ask the service to email a one-time code.

        Args:
            email: Address entered by the participant

        Returns:
            Success, Rejected(message) or TransportFailure(reason)
        """
        ...

    async def confirm_code(self, email: str, code: str) -> RemoteOutcome:
        """
        Check a one-time code.

        A code the service does not accept comes back as Rejected.
        """
        ...

    async def submit_profile(self, flow: Flow, form: StudentForm | GuestForm) -> RemoteOutcome:
        """
        Save the participant's profile for the given flow.

        Student profiles are saved with payment status "pending".
        """
        ...

    async def confirm_payment(self, email: str, transaction_id: str) -> RemoteOutcome:
        """Mark the student's payment as completed."""
        ...


class ReconciliationSink(Protocol):
    """Port interface for recording local/remote divergence."""

    def record(self, entry: PendingReconciliation) -> None:
        """
        Persist or forward a reconciliation entry.

        Must not raise: it runs on the participant's path.
        """
        ...


class FlowRepository(Protocol):
    """Port interface for holding live flows between display events."""

    def add(self, orchestrator: "FlowOrchestrator") -> str:
        """Register a flow and return its id."""
        ...

    def get(self, flow_id: str) -> "FlowOrchestrator":
        """
        Look up a flow.

        Raises:
            FlowNotFound: If no flow has this id
        """
        ...

    def remove(self, flow_id: str) -> None:
        """
        Forget a flow.

        Raises:
            FlowNotFound: If no flow has this id
        """
        ...

    def all(self) -> list["FlowOrchestrator"]:
        """Every live flow (used by the clock ticker)."""
        ...
