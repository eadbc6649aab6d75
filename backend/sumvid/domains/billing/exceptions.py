"""Billing domain exceptions."""

import functools

from sumvid.core.exceptions import ConfigurationError, ExternalServiceError, InvalidStateError


class BillingConfigurationError(ConfigurationError):
    """Raised when a Stripe setting needed for the operation is missing."""

    def __init__(self, setting_name: str, message: str = "Billing is not configured"):
        """Initialize with the missing setting's name."""
        super().__init__(setting_name=setting_name, message=message)


class BillingNotAvailableError(InvalidStateError):
    """Raised by NullPaymentGateway when billing is not enabled."""

    def __init__(self, message: str = "Billing is not enabled for this instance"):
        """Initialize with default message."""
        super().__init__(message)


class WebhookSignatureError(InvalidStateError):
    """Raised when a webhook payload fails signature verification."""

    kind = "signature_invalid"

    def __init__(self, message: str = "Invalid webhook signature"):
        """Initialize with default message."""
        super().__init__(message)


class PaymentGatewayError(ExternalServiceError):
    """Wraps ExternalServiceError from the payment adapter at the domain boundary."""

    def __init__(self, message: str = "Payment gateway error"):
        """Initialize with default message."""
        super().__init__(service_name="PaymentGateway", message=message)


def wrap_gateway_errors(fn):
    """Decorator: catch ExternalServiceError from payment gateway, wrap as PaymentGatewayError."""

    @functools.wraps(fn)
    async def wrapper(*args, **kwargs):
        try:
            return await fn(*args, **kwargs)
        except PaymentGatewayError:
            raise
        except ExternalServiceError as e:
            raise PaymentGatewayError(message=e.message) from e

    return wrapper
