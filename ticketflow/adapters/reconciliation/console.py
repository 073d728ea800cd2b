"""
Console reconciliation sink adapter - Implements ReconciliationSink protocol.

This module provides a log-based implementation of the domain's
reconciliation port: every failed soft write is written to the
application log where an operator job can pick it up.
"""

import logging

from ticketflow.domain.ports import PendingReconciliation

logger = logging.getLogger(__name__)


class ConsoleReconciliationSink:
    """
    Implements ReconciliationSink protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def record(self, entry: PendingReconciliation) -> None:
        """
        Log a reconciliation entry at WARNING level.

        Args:
            entry: The failed write, as the participant was shown it
        """
        logger.warning(
            "[RECONCILIATION] Operation: %s Flow: %s Email: %s Reason: %s Payload: %s At: %s",
            entry.operation,
            entry.flow.value,
            entry.email,
            entry.reason,
            entry.payload,
            entry.recorded_at.isoformat(),
        )
