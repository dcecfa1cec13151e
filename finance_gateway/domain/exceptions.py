"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ValidationError(DomainException):
    """Input violates a domain rule (card days, amounts, installment counts)"""

    pass


class CardNotFoundError(DomainException):
    """Referenced credit card does not exist"""

    pass


class TransactionNotFoundError(DomainException):
    """Referenced transaction does not exist"""

    pass


class InvoiceNotFoundError(DomainException):
    """No transactions belong to the requested (card, due date) invoice"""

    pass


class CategoryNotFoundError(DomainException):
    """Referenced custom category does not exist"""

    pass
