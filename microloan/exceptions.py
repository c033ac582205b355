"""Custom exception hierarchy for microloan."""


class MicroloanError(Exception):
    """Base exception for all microloan errors."""


class InvalidScheduleInput(MicroloanError):
    """Raised when a schedule cannot be built from the given loan terms."""


class EntityNotFoundError(MicroloanError):
    """Raised when a referenced entity does not exist."""


class ReferentialIntegrityError(EntityNotFoundError):
    """Raised when a foreign key reference is violated."""


class InvalidEntityStateError(MicroloanError):
    """Raised when an entity is in an invalid state for the operation."""


class ConcurrentModificationError(InvalidEntityStateError):
    """Raised when a loan was modified since the caller last read it."""


class ConfigurationError(MicroloanError):
    """Raised when configuration is invalid or missing."""


class SinkError(MicroloanError):
    """Raised when a sink operation fails."""
