"""
Unit tests for HttpVerificationClient adapter.

Tests run the client against httpx.MockTransport handlers to verify:
- Endpoint paths and JSON bodies
- Normalization of success, rejection, non-2xx and non-JSON responses
- Network errors and write timeouts become TransportFailure
"""

import asyncio
import json

import httpx
import pytest

from ticketflow.adapters.http.verification_client import (
    SERVER_RESPONSE_ERROR,
    HttpVerificationClient,
)
from ticketflow.domain.forms import Flow, GuestForm, StudentForm
from ticketflow.domain.outcomes import Rejected, Success, TransportFailure

BASE_URL = "http://verify.test"


def make_client(handler, write_timeout: float = 10.0) -> HttpVerificationClient:
    return HttpVerificationClient(
        BASE_URL,
        write_timeout=write_timeout,
        transport=httpx.MockTransport(handler),
    )


class Recorder:
    """Handler that records requests and replies with a fixed response."""

    def __init__(self, response: httpx.Response) -> None:
        self.response = response
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.response

    @property
    def body(self) -> dict:
        return json.loads(self.requests[-1].content)


class TestVerificationClientProtocol:
    """Tests for VerificationService protocol compliance."""

    def test_implements_verification_service_protocol(self) -> None:
        from ticketflow.domain.ports import VerificationService

        client = make_client(Recorder(httpx.Response(200, json={})))
        for name in ("request_code", "confirm_code", "submit_profile", "confirm_payment"):
            assert callable(getattr(client, name))

        def accepts_service(s: VerificationService) -> None:
            pass

        accepts_service(client)

    def test_no_explicit_inheritance(self) -> None:
        assert HttpVerificationClient.__bases__ == (object,)


class TestRequestCode:
    """Tests for request_code()."""

    @pytest.mark.asyncio
    async def test_posts_email(self) -> None:
        recorder = Recorder(httpx.Response(200, json={"success": True}))
        client = make_client(recorder)

        outcome = await client.request_code("user@example.com")

        request = recorder.requests[0]
        assert request.method == "POST"
        assert request.url == f"{BASE_URL}/api/send-otp"
        assert request.headers["content-type"] == "application/json"
        assert recorder.body == {"email": "user@example.com"}
        assert outcome == Success({"success": True})

    @pytest.mark.asyncio
    async def test_rejection_carries_message(self) -> None:
        client = make_client(Recorder(httpx.Response(200, json={"success": False, "message": "bad"})))
        assert await client.request_code("user@example.com") == Rejected("bad")

    @pytest.mark.asyncio
    async def test_rejection_default_message(self) -> None:
        client = make_client(Recorder(httpx.Response(200, json={"success": False})))
        assert await client.request_code("user@example.com") == Rejected("Failed to send OTP")

    @pytest.mark.asyncio
    async def test_non_json_body_is_server_response_error(self) -> None:
        client = make_client(Recorder(httpx.Response(502, text="<html>Bad Gateway</html>")))
        assert await client.request_code("user@example.com") == Rejected(SERVER_RESPONSE_ERROR)

    @pytest.mark.asyncio
    async def test_json_array_is_server_response_error(self) -> None:
        client = make_client(Recorder(httpx.Response(200, json=[1, 2])))
        assert await client.request_code("user@example.com") == Rejected(SERVER_RESPONSE_ERROR)

    @pytest.mark.asyncio
    async def test_network_error_is_transport_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        outcome = await make_client(handler).request_code("user@example.com")

        assert isinstance(outcome, TransportFailure)
        assert "connection refused" in outcome.reason


class TestConfirmCode:
    """Tests for confirm_code()."""

    @pytest.mark.asyncio
    async def test_verified(self) -> None:
        recorder = Recorder(httpx.Response(200, json={"verified": True}))
        outcome = await make_client(recorder).confirm_code("user@example.com", "123456")

        assert recorder.requests[0].url.path == "/api/verify-otp"
        assert recorder.body == {"email": "user@example.com", "otp": "123456"}
        assert isinstance(outcome, Success)

    @pytest.mark.asyncio
    async def test_not_verified_is_rejected(self) -> None:
        client = make_client(Recorder(httpx.Response(200, json={"verified": False})))
        assert await client.confirm_code("user@example.com", "000000") == Rejected(
            "Invalid or expired OTP"
        )

    @pytest.mark.asyncio
    async def test_success_key_is_not_enough(self) -> None:
        """Verification is read from "verified", not "success"."""
        client = make_client(Recorder(httpx.Response(200, json={"success": True})))
        assert isinstance(await client.confirm_code("user@example.com", "123456"), Rejected)


class TestSubmitProfile:
    """Tests for submit_profile()."""

    @pytest.mark.asyncio
    async def test_student_body(self) -> None:
        recorder = Recorder(httpx.Response(200, json={"success": True}))
        form = StudentForm(
            email="s@example.com",
            otp="123456",
            full_name="A",
            registration_number="1",
            department="CS",
            year="2",
            phone_number="999",
        )

        outcome = await make_client(recorder).submit_profile(Flow.STUDENT, form)

        assert recorder.requests[0].url.path == "/api/save-student"
        assert recorder.body == {
            "name": "A",
            "regNo": "1",
            "department": "CS",
            "year": "2",
            "email": "s@example.com",
            "phone": "999",
            "paymentStatus": "pending",
        }
        assert isinstance(outcome, Success)

    @pytest.mark.asyncio
    async def test_guest_body(self) -> None:
        recorder = Recorder(httpx.Response(200, json={"success": True}))
        form = GuestForm(
            email="g@example.com",
            name="B",
            roll_number="R7",
            college="Other College",
            department="EE",
            phone_number="888",
        )

        await make_client(recorder).submit_profile(Flow.GUEST, form)

        assert recorder.requests[0].url.path == "/api/save-guest"
        assert recorder.body == {
            "name": "B",
            "rollNo": "R7",
            "college": "Other College",
            "department": "EE",
            "email": "g@example.com",
            "phone": "888",
        }

    @pytest.mark.asyncio
    async def test_non_2xx_is_rejected_even_with_success_flag(self) -> None:
        """A non-2xx status is treated like success=false."""
        client = make_client(
            Recorder(httpx.Response(500, json={"success": True, "message": "sheet locked"}))
        )
        assert await client.submit_profile(Flow.GUEST, GuestForm()) == Rejected("sheet locked")

    @pytest.mark.asyncio
    async def test_write_timeout_is_transport_failure(self) -> None:
        """A save that outlives the write timeout is cancelled."""

        async def slow(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(5)
            return httpx.Response(200, json={"success": True})

        client = make_client(slow, write_timeout=0.05)

        outcome = await client.submit_profile(Flow.STUDENT, StudentForm())

        assert isinstance(outcome, TransportFailure)
        assert "timed out" in outcome.reason


class TestConfirmPayment:
    """Tests for confirm_payment()."""

    @pytest.mark.asyncio
    async def test_body(self) -> None:
        recorder = Recorder(httpx.Response(200, json={"success": True}))

        outcome = await make_client(recorder).confirm_payment("s@example.com", "TXN1")

        assert recorder.requests[0].url.path == "/api/update-payment-status"
        assert recorder.body == {
            "email": "s@example.com",
            "transactionId": "TXN1",
            "paymentStatus": "completed",
        }
        assert isinstance(outcome, Success)

    @pytest.mark.asyncio
    async def test_failure(self) -> None:
        client = make_client(Recorder(httpx.Response(200, json={"success": False})))
        assert await client.confirm_payment("s@example.com", "TXN1") == Rejected("Unknown error")


class TestClose:
    """Tests for aclose()."""

    @pytest.mark.asyncio
    async def test_aclose_closes_client(self) -> None:
        client = make_client(Recorder(httpx.Response(200, json={})))
        await client.aclose()

        assert client._client.is_closed
