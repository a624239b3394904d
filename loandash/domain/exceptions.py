"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class StorageError(DomainException):
    """The backing document store could not be read or written"""

    pass


class ObligationNotFoundError(DomainException):
    """No debt or loan with the requested identifier"""

    pass


class PaymentNotFoundError(DomainException):
    """No payment with the requested identifier on the obligation"""

    pass


class ReleaseCheckError(DomainException):
    """Release feed was unreachable or returned an unusable payload"""

    pass
