"""
HTTP verification client adapter - Implements VerificationService protocol.

This module talks to the remote verification/registration service over
JSON/HTTP using httpx. Every failure mode is normalized to a
RemoteOutcome; no httpx or JSON exception leaves this module.

Normalization rules:
- Network errors and cancelled (timed-out) writes -> TransportFailure
- Body that is not a JSON object -> Rejected("Server response error...")
- Non-2xx status, success=false or verified=false -> Rejected(message)

Only write operations (profile saves, payment update) are bounded by a
timeout; code requests and checks wait as long as the service takes.
"""

import asyncio
import logging
from typing import Any

import httpx

from ticketflow.domain.forms import Flow, GuestForm, StudentForm
from ticketflow.domain.outcomes import Rejected, RemoteOutcome, Success, TransportFailure

logger = logging.getLogger(__name__)

SERVER_RESPONSE_ERROR = "Server response error. Please try again."

SEND_OTP_PATH = "/api/send-otp"
VERIFY_OTP_PATH = "/api/verify-otp"
SAVE_STUDENT_PATH = "/api/save-student"
SAVE_GUEST_PATH = "/api/save-guest"
UPDATE_PAYMENT_PATH = "/api/update-payment-status"


class HttpVerificationClient:
    """
    Implements VerificationService protocol via httpx.AsyncClient.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(
        self,
        base_url: str,
        *,
        write_timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize client.

        Args:
            base_url: Service root, e.g. "https://api.example.org"
            write_timeout: Seconds before a write request is cancelled
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self._write_timeout = write_timeout
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=None,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    async def request_code(self, email: str) -> RemoteOutcome:
        return await self._post(
            SEND_OTP_PATH,
            {"email": email},
            success_key="success",
            default_message="Failed to send OTP",
        )

    async def confirm_code(self, email: str, code: str) -> RemoteOutcome:
        return await self._post(
            VERIFY_OTP_PATH,
            {"email": email, "otp": code},
            success_key="verified",
            default_message="Invalid or expired OTP",
        )

    async def submit_profile(self, flow: Flow, form: StudentForm | GuestForm) -> RemoteOutcome:
        """
        Save a student or guest profile.

        Student profiles always go out with paymentStatus "pending";
        payment is completed separately by confirm_payment().
        """
        if flow is Flow.STUDENT:
            path, body = SAVE_STUDENT_PATH, student_body(form)
        else:
            path, body = SAVE_GUEST_PATH, guest_body(form)
        return await self._post(
            path,
            body,
            success_key="success",
            default_message="Unknown error",
            timeout=self._write_timeout,
        )

    async def confirm_payment(self, email: str, transaction_id: str) -> RemoteOutcome:
        return await self._post(
            UPDATE_PAYMENT_PATH,
            {"email": email, "transactionId": transaction_id, "paymentStatus": "completed"},
            success_key="success",
            default_message="Unknown error",
            timeout=self._write_timeout,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _post(
        self,
        path: str,
        body: dict[str, Any],
        *,
        success_key: str,
        default_message: str,
        timeout: float | None = None,
    ) -> RemoteOutcome:
        try:
            request = self._client.post(path, json=body)
            if timeout is None:
                response = await request
            else:
                response = await asyncio.wait_for(request, timeout)
        except asyncio.TimeoutError:
            logger.warning("POST %s cancelled after %ss", path, timeout)
            return TransportFailure(f"Request timed out after {timeout}s")
        except httpx.HTTPError as exc:
            logger.warning("POST %s failed: %s", path, exc)
            return TransportFailure(str(exc) or type(exc).__name__)

        try:
            data = response.json()
        except ValueError:
            logger.error("POST %s returned a non-JSON body (status %s)", path, response.status_code)
            return Rejected(SERVER_RESPONSE_ERROR)
        if not isinstance(data, dict):
            logger.error("POST %s returned JSON that is not an object", path)
            return Rejected(SERVER_RESPONSE_ERROR)

        message = data.get("message") or default_message
        if not response.is_success:
            logger.warning("POST %s returned %s: %s", path, response.status_code, message)
            return Rejected(message)
        if not data.get(success_key):
            return Rejected(message)
        return Success(data)


def student_body(form: StudentForm) -> dict[str, Any]:
    return {
        "name": form.full_name,
        "regNo": form.registration_number,
        "department": form.department,
        "year": form.year,
        "email": form.email,
        "phone": form.phone_number,
        "paymentStatus": "pending",
    }


def guest_body(form: GuestForm) -> dict[str, Any]:
    return {
        "name": form.name,
        "rollNo": form.roll_number,
        "college": form.college,
        "department": form.department,
        "email": form.email,
        "phone": form.phone_number,
    }
