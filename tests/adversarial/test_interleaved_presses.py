"""
Adversarial tests for interleaved button presses on one flow.

The loading flag is advisory, so a display may fire the same action
several times before the first call returns. These tests verify the
orchestrator still ends in a consistent state.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from ticketflow.domain.flow import FlowOrchestrator
from ticketflow.domain.forms import Flow
from ticketflow.domain.outcomes import Rejected, Success
from ticketflow.domain.screens import Screen

pytestmark = pytest.mark.adversarial


def slow(outcome, delay: float = 0.01):
    async def call(*args: object):
        await asyncio.sleep(delay)
        return outcome

    return call


class TestDoublePress:
    """Tests for the same action pressed repeatedly."""

    @pytest.mark.asyncio
    async def test_rapid_send_code_sends_once(
        self, orchestrator: FlowOrchestrator, verification: AsyncMock
    ) -> None:
        """The cooldown is armed before the call, so extra presses are not dispatched."""
        verification.request_code.side_effect = slow(Success())
        orchestrator.start_ticket()
        orchestrator.edit(Flow.STUDENT, "email", "s@example.com")

        screens = await asyncio.gather(*(orchestrator.send_code() for _ in range(10)))

        assert verification.request_code.await_count == 1
        assert Screen.OTP in screens
        assert orchestrator.screen is Screen.OTP

    @pytest.mark.asyncio
    async def test_double_submit_lands_once(
        self, orchestrator: FlowOrchestrator, verification: AsyncMock
    ) -> None:
        """The second completion finds the screen moved and is dropped."""
        verification.submit_profile.side_effect = slow(Success())
        orchestrator.start_ticket()
        orchestrator.edit(Flow.STUDENT, "email", "s@example.com")
        await orchestrator.send_code()
        orchestrator.edit(Flow.STUDENT, "otp", "123456")
        await orchestrator.verify_code()
        orchestrator.store.merge(
            Flow.STUDENT,
            {
                "full_name": "A",
                "registration_number": "1",
                "department": "CS",
                "year": "2",
                "phone_number": "999",
            },
        )

        screens = await asyncio.gather(orchestrator.submit_profile(), orchestrator.submit_profile())

        assert screens == [Screen.PAYMENT, Screen.PAYMENT]
        assert orchestrator.screen is Screen.PAYMENT
        assert orchestrator.loading is False


class TestCodeGuessing:
    """Tests for repeated wrong codes."""

    @pytest.mark.asyncio
    async def test_wrong_codes_never_advance(
        self, orchestrator: FlowOrchestrator, verification: AsyncMock
    ) -> None:
        verification.confirm_code.return_value = Rejected("Invalid or expired OTP")
        orchestrator.start_guest()
        orchestrator.edit(Flow.GUEST, "email", "g@example.com")
        await orchestrator.send_code()

        for guess in range(100):
            orchestrator.edit(Flow.GUEST, "otp", f"{guess:06d}")
            assert await orchestrator.verify_code() is Screen.GUEST_OTP

        assert orchestrator.otp_state(Flow.GUEST).otp_error == "Invalid or expired OTP"
        assert orchestrator.store.get().guest.pass_generated is False

    @pytest.mark.asyncio
    async def test_going_home_mid_verification_drops_result(
        self, orchestrator: FlowOrchestrator, verification: AsyncMock
    ) -> None:
        """A late verification does not pull the participant back into the flow."""
        verification.confirm_code.side_effect = slow(Success({"verified": True}))
        orchestrator.start_ticket()
        orchestrator.edit(Flow.STUDENT, "email", "s@example.com")
        await orchestrator.send_code()
        orchestrator.edit(Flow.STUDENT, "otp", "123456")

        pending = asyncio.ensure_future(orchestrator.verify_code())
        await asyncio.sleep(0)
        orchestrator.go_home()

        assert await pending is Screen.HOME
        assert orchestrator.screen is Screen.HOME
