"""Fake generation client for testing."""

from typing import Optional

from sumvid.core.protocols.generation import GenerationClient


class FakeGenerationClient(GenerationClient):
    """Returns a canned reply and records the messages it was sent."""

    def __init__(self, reply: str = "fake completion", should_raise: Optional[Exception] = None):
        """Initialize with the reply to return and optional error injection."""
        self.reply = reply
        self._should_raise = should_raise
        self.calls: list[dict] = []

    async def complete(
        self,
        messages: list[dict[str, str]],
        max_tokens: int = 1500,
        temperature: float = 0.7,
    ) -> str:
        """Record the call and return the canned reply."""
        self.calls.append({"messages": messages, "max_tokens": max_tokens})
        if self._should_raise:
            raise self._should_raise
        return self.reply
