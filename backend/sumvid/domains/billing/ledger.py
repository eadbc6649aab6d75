"""Idempotency ledger for Stripe webhook events.

Backed by the ``processed_webhook_event`` table. The primary key on
``event_id`` is what suppresses duplicates: an INSERT that conflicts means the
event was already applied (or is being applied by a concurrent delivery, in
which case the INSERT waits for that transaction and then conflicts).
"""

from typing import Protocol, runtime_checkable

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from sumvid.models.processed_webhook_event import ProcessedWebhookEvent


@runtime_checkable
class ProcessedEventLedgerProtocol(Protocol):
    """Record of already-processed webhook event ids."""

    async def has_processed(self, db: AsyncSession, *, event_id: str) -> bool:
        """Whether the event id has been recorded."""
        ...

    async def record(self, db: AsyncSession, *, event_id: str, event_type: str) -> bool:
        """Record the event id. Returns False if it was already present.

        Does not commit: the record becomes visible together with the changes
        made while processing the event.
        """
        ...

    async def prune(self, db: AsyncSession, *, keep: int) -> int:
        """Delete all but the ``keep`` most recent ids. Returns rows deleted."""
        ...


class ProcessedEventLedger(ProcessedEventLedgerProtocol):
    """SQLAlchemy implementation of ProcessedEventLedgerProtocol."""

    async def has_processed(self, db: AsyncSession, *, event_id: str) -> bool:
        """Whether the event id has been recorded."""
        result = await db.execute(
            select(ProcessedWebhookEvent.event_id).where(
                ProcessedWebhookEvent.event_id == event_id
            )
        )
        return result.scalar_one_or_none() is not None

    async def record(self, db: AsyncSession, *, event_id: str, event_type: str) -> bool:
        """Insert the event id, doing nothing on conflict."""
        stmt = (
            insert(ProcessedWebhookEvent)
            .values(event_id=event_id, event_type=event_type)
            .on_conflict_do_nothing(index_elements=["event_id"])
            .returning(ProcessedWebhookEvent.event_id)
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def prune(self, db: AsyncSession, *, keep: int) -> int:
        """Delete all but the ``keep`` most recent ids."""
        newest = (
            select(ProcessedWebhookEvent.event_id)
            .order_by(ProcessedWebhookEvent.seen_at.desc())
            .limit(keep)
        )
        result = await db.execute(
            delete(ProcessedWebhookEvent).where(ProcessedWebhookEvent.event_id.not_in(newest))
        )
        return result.rowcount or 0
