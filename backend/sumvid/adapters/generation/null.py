"""Null generation client for when no OpenAI key is configured."""

from sumvid.core.exceptions import ExternalServiceError
from sumvid.core.protocols.generation import GenerationClient


class NullGenerationClient(GenerationClient):
    """Fails every call so the problem surfaces as an upstream error."""

    async def complete(
        self,
        messages: list[dict[str, str]],
        max_tokens: int = 1500,
        temperature: float = 0.7,
    ) -> str:
        """Raise: no model is configured."""
        raise ExternalServiceError("OpenAI", "OPENAI_API_KEY is not configured")
