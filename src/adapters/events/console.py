"""
Console event sink adapter - Implements EventSink protocol.

This module provides a logging-based implementation of the domain's
event sink port, narrating registrar events to stdout for demo purposes.
"""

import json
import logging

from src.domain.ports import RegistrarEvent

logger = logging.getLogger(__name__)


class LoggingEventSink:
    """
    Implements EventSink protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    For demo/development purposes - prints events to stdout.
    """

    def emit(self, event: RegistrarEvent) -> None:
        """
        Log an event at INFO level (visible in docker-compose logs).

        Args:
            event: Committed registrar event
        """
        logger.info(
            "[EVENT] %s at=%s %s",
            event.kind.value,
            event.at,
            json.dumps(event.data, sort_keys=True, default=str),
        )
