"""Request and response schemas for the HTTP API."""

from .checkout import CheckoutSessionResponse, CheckoutSessionStatusResponse
from .generation import (
    GenerationResponse,
    QaRequest,
    QuizRequest,
    SummaryRequest,
)
from .health import HealthResponse
from .usage import IncrementUsageResponse, UsageResponse
from .user import RegisterRequest, RegisterResponse, UserProfile
from .webhook import WebhookAck

__all__ = [
    "CheckoutSessionResponse",
    "CheckoutSessionStatusResponse",
    "GenerationResponse",
    "HealthResponse",
    "IncrementUsageResponse",
    "QaRequest",
    "QuizRequest",
    "RegisterRequest",
    "RegisterResponse",
    "SummaryRequest",
    "UsageResponse",
    "UserProfile",
    "WebhookAck",
]
