"""Text generation client protocol.

Direct consumer: GenerationService.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class GenerationClient(Protocol):
    """Forwards a chat conversation to a hosted language model."""

    async def complete(
        self,
        messages: list[dict[str, str]],
        max_tokens: int = 1500,
        temperature: float = 0.7,
    ) -> str:
        """Return the model's reply. Raises ExternalServiceError on failure."""
        ...
