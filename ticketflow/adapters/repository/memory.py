"""
In-memory flow repository adapter - Implements FlowRepository protocol.

Live journeys are kept in process memory, keyed by an unguessable id.
They do not survive a restart. Flows nobody has looked up for longer
than the idle TTL are dropped by evict_idle().
"""

import logging
import secrets
import time
from collections.abc import Callable

from ticketflow.domain.exceptions import FlowNotFound
from ticketflow.domain.flow import FlowOrchestrator

logger = logging.getLogger(__name__)


class InMemoryFlowRepository:
    """
    Implements FlowRepository protocol with a plain dict.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(
        self,
        idle_ttl: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize repository.

        Args:
            idle_ttl: Seconds without a lookup before a flow is evicted,
                None to keep flows until removed
            clock: Monotonic time source (tests pass a fake)
        """
        self._flows: dict[str, FlowOrchestrator] = {}
        self._last_seen: dict[str, float] = {}
        self._idle_ttl = idle_ttl
        self._clock = clock

    def add(self, orchestrator: FlowOrchestrator) -> str:
        flow_id = secrets.token_urlsafe(16)
        self._flows[flow_id] = orchestrator
        self._last_seen[flow_id] = self._clock()
        logger.info("Flow %s started", flow_id)
        return flow_id

    def get(self, flow_id: str) -> FlowOrchestrator:
        try:
            orchestrator = self._flows[flow_id]
        except KeyError:
            raise FlowNotFound(flow_id) from None
        self._last_seen[flow_id] = self._clock()
        return orchestrator

    def remove(self, flow_id: str) -> None:
        """
        Forget a flow.

        Raises:
            FlowNotFound: If no flow has this id
        """
        try:
            del self._flows[flow_id]
        except KeyError:
            raise FlowNotFound(flow_id) from None
        del self._last_seen[flow_id]
        logger.info("Flow %s removed", flow_id)

    def evict_idle(self) -> int:
        """Remove flows idle past the TTL and return how many were removed."""
        if self._idle_ttl is None:
            return 0
        now = self._clock()
        stale = [
            flow_id for flow_id, seen in self._last_seen.items() if now - seen > self._idle_ttl
        ]
        for flow_id in stale:
            self.remove(flow_id)
        if stale:
            logger.info("Evicted %d idle flows", len(stale))
        return len(stale)

    def all(self) -> list[FlowOrchestrator]:
        return list(self._flows.values())

    def __len__(self) -> int:
        return len(self._flows)
