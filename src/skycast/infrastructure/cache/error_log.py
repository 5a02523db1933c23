"""Bounded, deduplicating store of error messages.

Used by the chat endpoint adapter to avoid re-logging identical failures.
"""

from collections import OrderedDict


class ErrorLog:
    """Insertion-ordered set of distinct error messages with a size cap.

    When the cap is reached the oldest message is evicted.

    Example:
        >>> log = ErrorLog(capacity=2)
        >>> log.record("boom")
        True
        >>> log.record("boom")
        False
        >>> "boom" in log
        True
    """

    def __init__(self, capacity: int = 32) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._capacity = capacity
        self._messages: OrderedDict[str, None] = OrderedDict()

    @property
    def capacity(self) -> int:
        return self._capacity

    def record(self, message: str) -> bool:
        """Store a message.

        Returns:
            True if the message had not been seen before, False otherwise
        """
        if message in self._messages:
            return False
        self._messages[message] = None
        if len(self._messages) > self._capacity:
            self._messages.popitem(last=False)
        return True

    def messages(self) -> list[str]:
        """Return stored messages, oldest first."""
        return list(self._messages)

    def clear(self) -> None:
        self._messages.clear()

    def __len__(self) -> int:
        return len(self._messages)

    def __contains__(self, message: object) -> bool:
        return message in self._messages
