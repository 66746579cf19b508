"""
Loop suppression.

Every mutation we issue comes back to us as a webhook. Before issuing one we
register a SuppressionEntry for the card and the direction of the echo; the
first matching notification consumes the entry and is dropped.

Entries never expire by time. A mutation that fails (or never echoes) leaves
its entry behind, so the registry is bounded: past `max_pending` entries the
oldest are evicted.
"""
import logging
import threading
from collections import deque
from typing import List

from .schema import Direction, SuppressionEntry

logger = logging.getLogger(__name__)

DEFAULT_MAX_PENDING = 1000


class LoopSuppressor:
    """Registry of outstanding self-caused mutations."""

    def __init__(self, max_pending: int = DEFAULT_MAX_PENDING):
        if max_pending < 1:
            raise ValueError(f"max_pending must be positive, got {max_pending}")
        self.max_pending = max_pending
        self._entries: deque = deque()
        self._lock = threading.Lock()

    def register(self, card_id: str, direction: Direction) -> None:
        """Expect one echo for `card_id` in `direction`."""
        with self._lock:
            if len(self._entries) >= self.max_pending:
                dropped = self._entries.popleft()
                logger.warning(
                    f"Suppression registry full, dropping entry for card {dropped.card_id} "
                    f"({dropped.direction.value})"
                )
            self._entries.append(SuppressionEntry(card_id, direction))

    def should_suppress(self, card_id: str, direction: Direction) -> bool:
        """Consume a matching entry. True means the notification is our own echo."""
        entry = SuppressionEntry(card_id, direction)
        with self._lock:
            try:
                self._entries.remove(entry)
            except ValueError:
                return False
        return True

    def pending(self) -> List[SuppressionEntry]:
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
