"""
Remote call outcomes and the soft-dependency combinator.

Every call to the verification service settles into exactly one of three
outcomes. The flow never sees a raw network or parse exception: adapters
normalize them, and settle() converts anything that still escapes (or a
call that hangs past its deadline) into a TransportFailure.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Success:
    """The service accepted the request."""

    payload: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Rejected:
    """The service answered but refused (success=false, verified=false, non-2xx)."""

    message: str


@dataclass(frozen=True)
class TransportFailure:
    """No usable answer: network error, timeout, or cancelled request."""

    reason: str


RemoteOutcome = Success | Rejected | TransportFailure


def failure_reason(outcome: RemoteOutcome) -> str | None:
    """Human-readable reason for a failed outcome, None for Success."""
    if isinstance(outcome, Rejected):
        return outcome.message
    if isinstance(outcome, TransportFailure):
        return outcome.reason
    return None


async def settle(call: Awaitable[RemoteOutcome], timeout: float | None = None) -> RemoteOutcome:
    """
    Await a remote call and always come back with an outcome.

    Args:
        call: Awaitable returning a RemoteOutcome
        timeout: Seconds before the call is cancelled, None for no bound

    Returns:
        The call's own outcome, or TransportFailure if it timed out or raised
    """
    try:
        if timeout is None:
            return await call
        return await asyncio.wait_for(call, timeout)
    except asyncio.TimeoutError:
        logger.warning("Remote call cancelled after %ss", timeout)
        return TransportFailure(f"Request timed out after {timeout}s")
    except Exception as exc:
        logger.exception("Remote call raised instead of returning an outcome")
        return TransportFailure(str(exc) or type(exc).__name__)


async def perform_softly(
    call: Awaitable[RemoteOutcome],
    on_any_outcome: Callable[[RemoteOutcome], T],
    timeout: float | None = None,
) -> T:
    """
    Run a remote call whose failure must not block the user.

    The continuation is invoked with whatever outcome the call settles
    into, success or not, and its result is returned.
    """
    outcome = await settle(call, timeout)
    return on_any_outcome(outcome)
