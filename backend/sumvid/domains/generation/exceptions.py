"""Generation domain exceptions."""

from sumvid.core.exceptions import BadRequestError, ExternalServiceError


class TranscriptTooShortError(BadRequestError):
    """Raised when the cleaned transcript is too short to work with."""

    def __init__(self, message: str = "Transcript is too short or empty"):
        """Initialize with default message."""
        super().__init__(message)


class GenerationUpstreamError(ExternalServiceError):
    """Wraps generation client failures at the domain boundary."""

    def __init__(self, message: str = "Generation service failed"):
        """Initialize with default message."""
        super().__init__(service_name="GenerationClient", message=message)
