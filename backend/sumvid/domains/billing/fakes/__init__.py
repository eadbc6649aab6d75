"""Fakes for the billing domain."""

from sumvid.domains.billing.fakes.ledger import FakeProcessedEventLedger

__all__ = ["FakeProcessedEventLedger"]
