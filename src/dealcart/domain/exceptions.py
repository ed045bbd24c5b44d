"""Domain-level exceptions.

Rule violations and remote failures both derive from DomainException, so
the front end has one type to catch.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class CheckoutRejected(ValidationError):
    """A checkout precondition failed before anything reached the network.

    ``reason`` is a stable machine-readable code (``empty_cart``,
    ``phone_required``...); the message is meant for the customer.
    """

    def __init__(self, reason: str, message: str) -> None:
        super().__init__(message)
        self.reason = reason
        self.message = message


class CartServiceError(DomainException):
    """The remote cart service failed or answered with an error status.

    ``message`` is the server-provided text when there was one, ``code``
    mirrors the service's error code (``NETWORK_ERROR``, ``HTTP_ERROR``...)
    and ``status`` is the HTTP status when a response was received.
    """

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        status: int | None = None,
        server_message: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status
        self.server_message = server_message

    @property
    def user_message(self) -> str | None:
        """The message to show a customer, or None when only generic text fits."""
        if self.server_message or self.code == "NETWORK_ERROR":
            return self.message
        return None
