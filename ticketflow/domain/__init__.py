"""
Domain layer - Pure flow logic with zero framework imports.

This package contains the screen state machine, the form store, the
resend timer and the orchestrator for the student ticket and guest pass
journeys. It defines its own port interfaces for infrastructure
abstraction, ensuring true hexagonal architecture decoupling.
"""

from .exceptions import (
    FlowError,
    FlowNotFound,
    InvalidFieldValue,
    InvalidTransition,
    ReadOnlyFormField,
    UnknownFormField,
)
from .flow import Action, FlowOrchestrator, OtpFlowState, Overlay, ViewState
from .forms import Flow, FormMutation, FormStore, GuestForm, PaymentStatus, ProfileForm, StudentForm
from .outcomes import Rejected, RemoteOutcome, Success, TransportFailure, perform_softly, settle
from .ports import FlowRepository, PendingReconciliation, ReconciliationSink, VerificationService
from .screens import FlowEvent, Screen, Step, resolve, transition
from .timer import CountdownTimer

__all__ = [
    "Action",
    "CountdownTimer",
    "Flow",
    "FlowError",
    "FlowEvent",
    "FlowNotFound",
    "FlowOrchestrator",
    "FlowRepository",
    "FormMutation",
    "FormStore",
    "GuestForm",
    "InvalidFieldValue",
    "InvalidTransition",
    "OtpFlowState",
    "Overlay",
    "PaymentStatus",
    "PendingReconciliation",
    "ProfileForm",
    "ReadOnlyFormField",
    "ReconciliationSink",
    "Rejected",
    "RemoteOutcome",
    "Screen",
    "Step",
    "StudentForm",
    "Success",
    "TransportFailure",
    "UnknownFormField",
    "VerificationService",
    "ViewState",
    "perform_softly",
    "resolve",
    "settle",
    "transition",
]
