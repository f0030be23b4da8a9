"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
Each subclass is a distinct rejection reason callers can branch on.
"""


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class InsufficientStock(ValidationError):
    """The product does not have enough available stock."""


class OverbookingError(ValidationError):
    """The delivery slot cannot take the requested quantity."""


class InvalidCapacity(ValidationError):
    """A slot capacity is not acceptable for the product's stock or date."""


class CapacityBelowReserved(ValidationError):
    """A slot capacity would drop below what is already reserved."""


class InvalidStateTransition(ValidationError):
    """The entity's current status does not allow the requested change."""


class InsufficientBalance(ValidationError):
    """The wallet's available balance does not cover the amount."""


class AlreadyProcessed(DomainException):
    """A withdrawal was already resolved by someone else."""


class ConcurrencyConflict(DomainException):
    """A concurrent writer won the race; the operation may be retried."""
