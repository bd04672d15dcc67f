"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidInstallmentCount(DomainException):
    """Installment count is lower than one"""

    pass


class InvalidAmount(DomainException):
    """Monetary amount is negative where a non-negative one is required"""

    pass


class InvalidCalendarDay(DomainException):
    """Card closing or due day is outside 1..31"""

    pass


class InvalidMonetaryValue(DomainException):
    """Monetary input could not be parsed"""

    pass


class InvalidTransferError(DomainException):
    """Transfer between programs is malformed"""

    pass


class EntityNotFoundError(DomainException):
    """Referenced card, program, account or schedule does not exist"""

    pass


class InsufficientBalanceError(DomainException):
    """Outflow exceeds the miles available in the position"""

    pass
