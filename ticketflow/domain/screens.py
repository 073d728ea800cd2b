"""
Screen State Machine - pure transition function for the registration flow.

Screens (initial state: HOME)
=============================

Student flow:  email -> otp -> registration -> payment -> transaction -> success
Guest flow:    guest-email -> guest-otp -> guest-registration
               -> guest-processing -> guest-success

Terminal screens (SUCCESS, GUEST_SUCCESS) accept only RESET, which returns
to HOME and clears the whole profile form.

Fallback-advance
================

PROFILE_SAVED and SAVE_FAILED lead to the same screen, as do
PAYMENT_CONFIRMED and UPDATE_FAILED: a failed backend write is reported to
operators but never strands the participant. OTP sending and verification
have no failure edge; a rejected code keeps the participant where they are.

The machine holds no state. resolve() maps (screen, event) to the next
screen plus the form mutation that goes with it.
"""

from dataclasses import dataclass
from enum import Enum

from .exceptions import InvalidTransition
from .forms import NO_CHANGE, Flow, FormMutation, PaymentStatus


class Screen(str, Enum):
    """Currently visible step. Exactly one is active at a time."""

    HOME = "home"

    EMAIL = "email"
    OTP = "otp"
    REGISTRATION = "registration"
    PAYMENT = "payment"
    TRANSACTION = "transaction"
    SUCCESS = "success"

    GUEST_EMAIL = "guest-email"
    GUEST_OTP = "guest-otp"
    GUEST_REGISTRATION = "guest-registration"
    GUEST_PROCESSING = "guest-processing"
    GUEST_SUCCESS = "guest-success"

    @property
    def flow(self) -> Flow | None:
        """The journey this screen belongs to, None for HOME."""
        if self is Screen.HOME:
            return None
        if self.value.startswith("guest-"):
            return Flow.GUEST
        return Flow.STUDENT

    @property
    def is_terminal(self) -> bool:
        return self in (Screen.SUCCESS, Screen.GUEST_SUCCESS)


class FlowEvent(str, Enum):
    """Inputs to the state machine, produced by the orchestrator."""

    START_TICKET = "start-ticket"
    START_GUEST = "start-guest"
    OTP_SENT = "otp-sent"
    CODE_VERIFIED = "code-verified"
    SUBMIT_STARTED = "submit-started"
    PROFILE_SAVED = "profile-saved"
    SAVE_FAILED = "save-failed"
    PAID_CLAIMED = "paid-claimed"
    PAYMENT_CONFIRMED = "payment-confirmed"
    UPDATE_FAILED = "update-failed"
    RESET = "reset"
    ABANDON = "abandon"


@dataclass(frozen=True)
class Step:
    """Result of a transition: where to go and what to change in the form."""

    screen: Screen
    mutation: FormMutation = NO_CHANGE


_PAYMENT_PENDING = FormMutation(Flow.STUDENT, {"payment_status": PaymentStatus.PENDING})
_PAYMENT_COMPLETED = FormMutation(Flow.STUDENT, {"payment_status": PaymentStatus.COMPLETED})
_PASS_GENERATED = FormMutation(Flow.GUEST, {"pass_generated": True})
_RESET_ALL = FormMutation(reset=True)

_TRANSITIONS: dict[tuple[Screen, FlowEvent], Step] = {
    (Screen.HOME, FlowEvent.START_TICKET): Step(Screen.EMAIL),
    (Screen.HOME, FlowEvent.START_GUEST): Step(Screen.GUEST_EMAIL),
    # Student flow
    (Screen.EMAIL, FlowEvent.OTP_SENT): Step(Screen.OTP),
    (Screen.OTP, FlowEvent.OTP_SENT): Step(Screen.OTP),
    (Screen.OTP, FlowEvent.CODE_VERIFIED): Step(Screen.REGISTRATION),
    (Screen.REGISTRATION, FlowEvent.PROFILE_SAVED): Step(Screen.PAYMENT, _PAYMENT_PENDING),
    (Screen.REGISTRATION, FlowEvent.SAVE_FAILED): Step(Screen.PAYMENT, _PAYMENT_PENDING),
    (Screen.PAYMENT, FlowEvent.PAID_CLAIMED): Step(Screen.TRANSACTION),
    (Screen.TRANSACTION, FlowEvent.PAYMENT_CONFIRMED): Step(Screen.SUCCESS, _PAYMENT_COMPLETED),
    (Screen.TRANSACTION, FlowEvent.UPDATE_FAILED): Step(Screen.SUCCESS, _PAYMENT_COMPLETED),
    (Screen.SUCCESS, FlowEvent.RESET): Step(Screen.HOME, _RESET_ALL),
    # Guest flow
    (Screen.GUEST_EMAIL, FlowEvent.OTP_SENT): Step(Screen.GUEST_OTP),
    (Screen.GUEST_OTP, FlowEvent.OTP_SENT): Step(Screen.GUEST_OTP),
    (Screen.GUEST_OTP, FlowEvent.CODE_VERIFIED): Step(Screen.GUEST_REGISTRATION),
    (Screen.GUEST_REGISTRATION, FlowEvent.SUBMIT_STARTED): Step(Screen.GUEST_PROCESSING),
    (Screen.GUEST_REGISTRATION, FlowEvent.PROFILE_SAVED): Step(Screen.GUEST_SUCCESS, _PASS_GENERATED),
    (Screen.GUEST_REGISTRATION, FlowEvent.SAVE_FAILED): Step(Screen.GUEST_SUCCESS, _PASS_GENERATED),
    (Screen.GUEST_PROCESSING, FlowEvent.PROFILE_SAVED): Step(Screen.GUEST_SUCCESS, _PASS_GENERATED),
    (Screen.GUEST_PROCESSING, FlowEvent.SAVE_FAILED): Step(Screen.GUEST_SUCCESS, _PASS_GENERATED),
    (Screen.GUEST_SUCCESS, FlowEvent.RESET): Step(Screen.HOME, _RESET_ALL),
}

# The navigation bar can jump into the guest flow or back home from any
# screen that is neither HOME nor terminal. Abandoning keeps the form.
for _screen in Screen:
    if _screen is Screen.HOME or _screen.is_terminal:
        continue
    _TRANSITIONS[(_screen, FlowEvent.ABANDON)] = Step(Screen.HOME)
    if _screen.flow is Flow.STUDENT:
        _TRANSITIONS[(_screen, FlowEvent.START_GUEST)] = Step(Screen.GUEST_EMAIL)
del _screen


def accepts(screen: Screen, event: FlowEvent) -> bool:
    return (screen, event) in _TRANSITIONS


def resolve(screen: Screen, event: FlowEvent) -> Step:
    """
    Compute the next screen and the accompanying form mutation.

    Raises:
        InvalidTransition: If the screen has no edge for the event
    """
    try:
        return _TRANSITIONS[(screen, event)]
    except KeyError:
        raise InvalidTransition(screen.value, event.value) from None


def transition(screen: Screen, event: FlowEvent) -> Screen:
    """Next screen for (screen, event); see resolve()."""
    return resolve(screen, event).screen


def events_for(screen: Screen) -> list[FlowEvent]:
    """Events the screen accepts, in declaration order."""
    return [event for event in FlowEvent if (screen, event) in _TRANSITIONS]
