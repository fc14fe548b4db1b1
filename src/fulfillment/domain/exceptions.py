"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated.

    ``field`` names the offending input (e.g. ``items[0].quantity``) when
    the error can be pinned to one.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class InvalidTransitionError(ValidationError):
    """The order cannot move from its current status to the requested one."""


class InvalidStatusError(DomainException):
    """An unrecognized order status value was requested."""


class ProductUnavailableError(DomainException):
    """An order item references a missing or inactive product."""


class InsufficientStockError(DomainException):
    """Requested quantity exceeds the tracked stock of a product."""


class MissingTransactionIdError(DomainException):
    """A bank transfer payment was submitted without a transaction reference."""


class DuplicateOrderNumberError(DomainException):
    """The order number is already assigned to another order."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class ForbiddenError(DomainException):
    """The requester may not access the entity."""
