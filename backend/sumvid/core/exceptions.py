"""Shared exceptions module.

Every exception carries a machine-readable ``kind`` so the API layer can map
it to a status code and clients can branch on it without parsing messages.
"""

from typing import Optional


class SumvidException(Exception):
    """Base exception for SumVid services."""

    kind: str = "internal_error"

    def __init__(self, message: Optional[str] = "Internal error"):
        """Create a new SumvidException instance.

        Args:
        ----
            message (str, optional): The error message. Has default message.

        """
        self.message = message
        super().__init__(self.message)


class NotFoundException(SumvidException):
    """Exception raised when an object is not found."""

    kind = "not_found"

    def __init__(self, message: Optional[str] = "Object not found"):
        """Create a new NotFoundException instance.

        Args:
        ----
            message (str, optional): The error message. Has default message.

        """
        super().__init__(message)


class UnauthorizedException(SumvidException):
    """Exception raised when a request carries no valid credentials."""

    kind = "unauthorized"

    def __init__(self, message: Optional[str] = "Authentication required"):
        """Create a new UnauthorizedException instance.

        Args:
        ----
            message (str, optional): The error message. Has default message.

        """
        super().__init__(message)


class InvalidStateError(SumvidException):
    """Exception raised when an operation is invalid for the current state."""

    kind = "invalid_state"

    def __init__(self, message: Optional[str] = "Object has invalid state for this operation"):
        """Create a new InvalidStateError instance.

        Args:
        ----
            message (str, optional): The error message. Has default message.

        """
        super().__init__(message)


class BadRequestError(SumvidException):
    """Exception raised when the request payload is unusable."""

    kind = "bad_request"

    def __init__(self, message: Optional[str] = "Bad request"):
        """Create a new BadRequestError instance."""
        super().__init__(message)


class ConfigurationError(SumvidException):
    """Exception raised when a required setting is missing or invalid."""

    kind = "config_error"

    def __init__(self, setting_name: str, message: Optional[str] = "Missing configuration"):
        """Create a new ConfigurationError instance.

        Args:
        ----
            setting_name (str): The name of the offending setting.
            message (str, optional): The error message. Has default message.

        """
        self.setting_name = setting_name
        super().__init__(f"{message}: {setting_name}")


class ExternalServiceError(SumvidException):
    """Exception raised when an external service fails."""

    kind = "upstream_error"

    def __init__(self, service_name: str, message: Optional[str] = "External service failed"):
        """Create a new ExternalServiceError instance.

        Args:
        ----
            service_name (str): The name of the external service.
            message (str, optional): The error message. Has default message.

        """
        self.service_name = service_name
        super().__init__(message)

    def __str__(self) -> str:
        return f"{self.service_name}: {self.message}"
