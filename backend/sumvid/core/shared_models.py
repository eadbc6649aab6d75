"""Shared models for the backend."""

from enum import Enum


class AuthMethod(str, Enum):
    """How the caller of an operation was identified."""

    BEARER = "bearer"
    GUEST = "guest"
    STRIPE_WEBHOOK = "stripe_webhook"
    SYSTEM = "system"
