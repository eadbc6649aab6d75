"""Fake processed-event ledger for testing."""

from sqlalchemy.ext.asyncio import AsyncSession


class FakeProcessedEventLedger:
    """In-memory fake for ProcessedEventLedgerProtocol.

    Insertion order stands in for ``seen_at``.
    """

    def __init__(self) -> None:
        """Initialize an empty ledger."""
        self._events: dict[str, str] = {}
        self._calls: list[tuple] = []

    def seed(self, event_id: str, event_type: str = "test.event") -> None:
        """Mark an event id as already processed."""
        self._events[event_id] = event_type

    def call_count(self, method: str) -> int:
        """Return the number of times a method was called."""
        return sum(1 for name, *_ in self._calls if name == method)

    @property
    def event_ids(self) -> list[str]:
        """Recorded ids, oldest first."""
        return list(self._events)

    async def has_processed(self, db: AsyncSession, *, event_id: str) -> bool:
        """Whether the event id has been recorded."""
        self._calls.append(("has_processed", event_id))
        return event_id in self._events

    async def record(self, db: AsyncSession, *, event_id: str, event_type: str) -> bool:
        """Record the event id. Returns False if it was already present."""
        self._calls.append(("record", event_id, event_type))
        if event_id in self._events:
            return False
        self._events[event_id] = event_type
        return True

    async def prune(self, db: AsyncSession, *, keep: int) -> int:
        """Drop all but the ``keep`` most recent ids."""
        self._calls.append(("prune", keep))
        excess = len(self._events) - keep
        if excess <= 0:
            return 0
        for event_id in list(self._events)[:excess]:
            del self._events[event_id]
        return excess
