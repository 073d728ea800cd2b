"""
Flow Orchestrator - wires the state machine, timers and form store.

One orchestrator holds one participant's journey. Display events come in
as method calls; remote calls go out through the VerificationService
port; the outcome is fed to the state machine and the resulting form
mutation is applied to the store.

Failure policy:
- Sending and verifying a code block on failure: the screen stays and the
  flow's otp_error is set.
- Saving a profile and confirming a payment are soft: failures are logged
  and recorded for reconciliation, and the participant moves on.
"""

import asyncio
import logging
import secrets
import string
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from .exceptions import InvalidTransition
from .forms import Flow, FormStore, GuestForm, ProfileForm, StudentForm
from .outcomes import RemoteOutcome, Success, TransportFailure, failure_reason, perform_softly, settle
from .ports import PendingReconciliation, ReconciliationSink, VerificationService
from .screens import FlowEvent, Screen, accepts, events_for, resolve
from .timer import DEFAULT_RESEND_SECONDS, CountdownTimer

logger = logging.getLogger(__name__)

SEND_CODE_ERROR = "Error sending OTP. Please try again."
VERIFY_CODE_ERROR = "Error verifying OTP. Please try again."

_PASS_ALPHABET = string.ascii_uppercase + string.digits


class Overlay(str, Enum):
    """Informational panels shown on top of the current screen."""

    ABOUT = "about"
    EVENTS = "events"
    SCHEDULE = "schedule"
    CONTACT = "contact"


class Action(str, Enum):
    """Buttons the display can press."""

    START_TICKET = "start_ticket"
    START_GUEST = "start_guest"
    SEND_CODE = "send_code"
    VERIFY_CODE = "verify_code"
    SUBMIT_PROFILE = "submit_profile"
    CLAIM_PAID = "claim_paid"
    CONFIRM_PAYMENT = "confirm_payment"
    GO_HOME = "go_home"


# Events that a button press can feed to the state machine.
_ACTION_EVENTS: dict[Action, set[FlowEvent]] = {
    Action.START_TICKET: {FlowEvent.START_TICKET},
    Action.START_GUEST: {FlowEvent.START_GUEST},
    Action.SEND_CODE: {FlowEvent.OTP_SENT},
    Action.VERIFY_CODE: {FlowEvent.CODE_VERIFIED},
    Action.SUBMIT_PROFILE: {FlowEvent.PROFILE_SAVED},
    Action.CLAIM_PAID: {FlowEvent.PAID_CLAIMED},
    Action.CONFIRM_PAYMENT: {FlowEvent.PAYMENT_CONFIRMED},
    Action.GO_HOME: {FlowEvent.ABANDON, FlowEvent.RESET},
}


@dataclass(frozen=True)
class OtpFlowState:
    can_resend: bool
    resend_timer: int
    otp_error: str | None


@dataclass(frozen=True)
class ViewState:
    """Read-only projection handed to the display layer."""

    screen: Screen
    form: ProfileForm
    otp: dict[Flow, OtpFlowState]
    loading: bool
    overlay: Overlay | None
    actions: list[Action] = field(default_factory=list)


@dataclass
class FlowOrchestrator:
    """
    One participant's registration journey.

    The loading flag is advisory: it tells the display to suppress
    buttons while any remote call is in flight, it does not lock anything.
    """

    verification: VerificationService
    reconciliation: ReconciliationSink
    resend_seconds: int = DEFAULT_RESEND_SECONDS
    otp_length: int = 6
    write_timeout: float | None = 10.0
    pass_id_prefix: str = "VYM"
    store: FormStore = field(default_factory=FormStore)
    screen: Screen = Screen.HOME
    timers: dict[Flow, CountdownTimer] = field(
        default_factory=lambda: {flow: CountdownTimer() for flow in Flow}
    )
    otp_errors: dict[Flow, str | None] = field(default_factory=lambda: {flow: None for flow in Flow})
    _in_flight: int = field(default=0, init=False, repr=False)
    _screen_changes: int = field(default=0, init=False, repr=False)
    _overlay: tuple[Overlay, int] | None = field(default=None, init=False, repr=False)

    @property
    def loading(self) -> bool:
        return self._in_flight > 0

    # -- navigation -------------------------------------------------------

    def start_ticket(self) -> Screen:
        return self._advance(FlowEvent.START_TICKET)

    def start_guest(self) -> Screen:
        """Enter the guest flow; pressing it again inside the flow does nothing."""
        if self.screen.flow is Flow.GUEST:
            return self.screen
        return self._advance(FlowEvent.START_GUEST)

    def claim_paid(self) -> Screen:
        return self._advance(FlowEvent.PAID_CLAIMED)

    def go_home(self) -> Screen:
        """
        Return to HOME.

        From a terminal screen this resets the whole form; from anywhere
        else the journey is abandoned and the entered values are kept.
        """
        if self.screen is Screen.HOME:
            return self.screen
        if self.screen.is_terminal:
            return self._advance(FlowEvent.RESET)
        return self._advance(FlowEvent.ABANDON)

    # -- one-time code ----------------------------------------------------

    async def send_code(self) -> Screen:
        """
        Request a code for the active flow's email (also used for resend).

        Not dispatched while the email is empty or the cooldown runs.
        """
        self._require(FlowEvent.OTP_SENT)
        flow = self._active_flow()
        form = self.store.get().for_flow(flow)
        timer = self.timers[flow]
        if not form.email or not timer.can_resend:
            return self.screen

        started_on = self.screen
        timer.arm(self.resend_seconds)
        self.otp_errors[flow] = None
        with self._busy():
            outcome = await settle(self.verification.request_code(form.email))

        if isinstance(outcome, Success):
            return self._advance_from(started_on, FlowEvent.OTP_SENT)

        timer.cancel()
        self.otp_errors[flow] = self._otp_error(outcome, SEND_CODE_ERROR)
        logger.info("Code request for %s flow failed: %s", flow.value, failure_reason(outcome))
        return self.screen

    async def verify_code(self) -> Screen:
        """Check the entered code; only dispatched once it has otp_length digits."""
        self._require(FlowEvent.CODE_VERIFIED)
        flow = self._active_flow()
        form = self.store.get().for_flow(flow)
        if len(form.otp) != self.otp_length:
            return self.screen

        started_on = self.screen
        with self._busy():
            outcome = await settle(self.verification.confirm_code(form.email, form.otp))

        if isinstance(outcome, Success):
            self.otp_errors[flow] = None
            return self._advance_from(started_on, FlowEvent.CODE_VERIFIED)

        self.otp_errors[flow] = self._otp_error(outcome, VERIFY_CODE_ERROR)
        logger.info("Code verification for %s flow failed: %s", flow.value, failure_reason(outcome))
        return self.screen

    # -- soft writes ------------------------------------------------------

    async def submit_profile(self) -> Screen:
        """
        Save the active flow's profile and move on whatever the outcome.

        The guest flow shows GUEST_PROCESSING while the save is in flight
        and is issued a pass id when it completes.
        """
        flow = self._active_flow(FlowEvent.PROFILE_SAVED)
        self._require(FlowEvent.SUBMIT_STARTED if flow is Flow.GUEST else FlowEvent.PROFILE_SAVED)
        form = self.store.get().for_flow(flow)
        if form.missing_profile_fields():
            return self.screen

        if flow is Flow.GUEST:
            self._advance(FlowEvent.SUBMIT_STARTED)
        expected = self.screen

        def on_any_outcome(outcome: RemoteOutcome) -> Screen:
            self._reconcile_if_failed("submit_profile", flow, form.email, outcome, _profile_payload(form))
            if flow is Flow.GUEST and self.screen is expected:
                self.store.merge(Flow.GUEST, {"pass_id": self._new_pass_id()})
            event = FlowEvent.PROFILE_SAVED if isinstance(outcome, Success) else FlowEvent.SAVE_FAILED
            return self._advance_from(expected, event)

        with self._busy():
            return await perform_softly(
                self.verification.submit_profile(flow, form),
                on_any_outcome,
                timeout=self.write_timeout,
            )

    async def confirm_payment(self) -> Screen:
        """
        Report the student's payment and move to SUCCESS whatever the outcome.

        Not dispatched until a transaction id is entered and the payment
        confirmation box is ticked.
        """
        self._require(FlowEvent.PAYMENT_CONFIRMED)
        form = self.store.get().student
        if not form.transaction_id or not form.payment_confirmed:
            return self.screen

        expected = self.screen
        payload = {"transaction_id": form.transaction_id, "payment_status": "completed"}

        def on_any_outcome(outcome: RemoteOutcome) -> Screen:
            self._reconcile_if_failed("confirm_payment", Flow.STUDENT, form.email, outcome, payload)
            event = FlowEvent.PAYMENT_CONFIRMED if isinstance(outcome, Success) else FlowEvent.UPDATE_FAILED
            return self._advance_from(expected, event)

        with self._busy():
            return await perform_softly(
                self.verification.confirm_payment(form.email, form.transaction_id),
                on_any_outcome,
                timeout=self.write_timeout,
            )

    # -- display events ---------------------------------------------------

    async def press(self, action: Action) -> Screen:
        handlers = {
            Action.START_TICKET: self.start_ticket,
            Action.START_GUEST: self.start_guest,
            Action.SEND_CODE: self.send_code,
            Action.VERIFY_CODE: self.verify_code,
            Action.SUBMIT_PROFILE: self.submit_profile,
            Action.CLAIM_PAID: self.claim_paid,
            Action.CONFIRM_PAYMENT: self.confirm_payment,
            Action.GO_HOME: self.go_home,
        }
        result = handlers[action]()
        if asyncio.iscoroutine(result):
            return await result
        return result

    def edit(self, flow: Flow, field_name: str, value: Any) -> ProfileForm:
        """Write one user-entered field; see FormStore.edit()."""
        return self.store.edit(flow, field_name, value)

    def open_overlay(self, overlay: Overlay) -> None:
        self._overlay = (overlay, self._screen_changes)

    def close_overlay(self) -> None:
        self._overlay = None

    @property
    def overlay(self) -> Overlay | None:
        """The open overlay, or None once the screen has changed since it opened."""
        if self._overlay is None:
            return None
        overlay, opened_at = self._overlay
        return overlay if opened_at == self._screen_changes else None

    def tick(self) -> None:
        """One second elapsed."""
        for timer in self.timers.values():
            timer.tick()

    def available_actions(self) -> list[Action]:
        """Buttons that would move the current screen, in declaration order."""
        accepted = set(events_for(self.screen))
        return [action for action in Action if self._triggers(action) & accepted]

    def otp_state(self, flow: Flow) -> OtpFlowState:
        timer = self.timers[flow]
        return OtpFlowState(
            can_resend=timer.can_resend,
            resend_timer=timer.resend_timer,
            otp_error=self.otp_errors[flow],
        )

    def view(self) -> ViewState:
        return ViewState(
            screen=self.screen,
            form=self.store.get(),
            otp={flow: self.otp_state(flow) for flow in Flow},
            loading=self.loading,
            overlay=self.overlay,
            actions=self.available_actions(),
        )

    # -- internals --------------------------------------------------------

    def _require(self, event: FlowEvent) -> None:
        if not accepts(self.screen, event):
            raise InvalidTransition(self.screen.value, event.value)

    def _triggers(self, action: Action) -> set[FlowEvent]:
        if action is Action.SUBMIT_PROFILE and self.screen.flow is Flow.GUEST:
            return {FlowEvent.SUBMIT_STARTED}
        return _ACTION_EVENTS[action]

    @contextmanager
    def _busy(self) -> Iterator[None]:
        self._in_flight += 1
        try:
            yield
        finally:
            self._in_flight -= 1

    def _active_flow(self, event: FlowEvent = FlowEvent.OTP_SENT) -> Flow:
        flow = self.screen.flow
        if flow is None:
            raise InvalidTransition(self.screen.value, event.value)
        return flow

    def _advance(self, event: FlowEvent) -> Screen:
        step = resolve(self.screen, event)
        self.store.apply(step.mutation)
        if step.screen is not self.screen:
            logger.info("Screen %s -> %s on %s", self.screen.value, step.screen.value, event.value)
            self.screen = step.screen
            self._screen_changes += 1
        return self.screen

    def _advance_from(self, expected: Screen, event: FlowEvent) -> Screen:
        # The participant may have navigated away while the call was in flight.
        if self.screen is not expected:
            logger.info(
                "Dropping %s: screen moved from %s to %s during the call",
                event.value,
                expected.value,
                self.screen.value,
            )
            return self.screen
        return self._advance(event)

    def _reconcile_if_failed(
        self,
        operation: str,
        flow: Flow,
        email: str,
        outcome: RemoteOutcome,
        payload: dict[str, Any],
    ) -> None:
        reason = failure_reason(outcome)
        if reason is None:
            return
        logger.warning("%s for %s failed, advancing anyway: %s", operation, email, reason)
        self.reconciliation.record(
            PendingReconciliation(
                operation=operation,
                flow=flow,
                email=email,
                reason=reason,
                payload=payload,
            )
        )

    @staticmethod
    def _otp_error(outcome: RemoteOutcome, transport_message: str) -> str:
        if isinstance(outcome, TransportFailure):
            return transport_message
        return failure_reason(outcome) or transport_message

    def _new_pass_id(self) -> str:
        suffix = "".join(secrets.choice(_PASS_ALPHABET) for _ in range(8))
        return f"{self.pass_id_prefix}-{suffix}"


def _profile_payload(form: StudentForm | GuestForm) -> dict[str, Any]:
    payload = asdict(form)
    payload.pop("otp", None)
    return payload
