"""OpenAI chat completion client.

Retries on transient errors are delegated to the AsyncOpenAI client
(``max_retries``); every failure that survives them becomes
ExternalServiceError.
"""

import time
from typing import Optional

import openai
from openai import AsyncOpenAI

from sumvid.core.config import settings
from sumvid.core.exceptions import ExternalServiceError
from sumvid.core.logging import logger
from sumvid.core.protocols.generation import GenerationClient

generation_logger = logger.with_prefix("OpenAI: ").with_context(component="generation_client")


class OpenAIGenerationClient(GenerationClient):
    """GenerationClient backed by the OpenAI chat completions API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        """Create the client. Arguments default to the application settings."""
        api_key = api_key or settings.OPENAI_API_KEY
        if client is None and not api_key:
            raise ValueError("OPENAI_API_KEY required for generation")

        self.model = model or settings.OPENAI_MODEL
        self._client = client or AsyncOpenAI(
            api_key=api_key,
            timeout=settings.GENERATION_TIMEOUT_SECONDS,
            max_retries=settings.GENERATION_MAX_RETRIES,
        )

    async def complete(
        self,
        messages: list[dict[str, str]],
        max_tokens: int = 1500,
        temperature: float = 0.7,
    ) -> str:
        """Return the first choice's message content."""
        start = time.monotonic()
        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=messages,
                max_tokens=max_tokens,
                temperature=temperature,
            )
        except openai.APIError as e:
            generation_logger.error(f"Chat completion failed: {e}")
            raise ExternalServiceError("OpenAI", str(e)) from e

        elapsed = time.monotonic() - start
        if elapsed > 10.0:
            generation_logger.debug(f"Slow completion: {elapsed:.2f}s for {max_tokens} max tokens")

        if not response.choices or response.choices[0].message.content is None:
            raise ExternalServiceError("OpenAI", "Empty completion")
        return response.choices[0].message.content
