"""Generation client adapters (OpenAI, null, fake)."""
