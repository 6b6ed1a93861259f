"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidArgumentError(DomainException, ValueError):
    """Caller passed a value the engine cannot work with (wrong type, NaN, negative count)"""

    pass


class MalformedRecordError(DomainException):
    """A single parser record cannot be turned into a Transaction"""

    pass
