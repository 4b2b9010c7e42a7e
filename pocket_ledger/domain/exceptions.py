"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidLoanTerms(DomainException):
    """Loan principal, term, rate or due day cannot produce a schedule"""

    pass


class InvalidAmount(DomainException):
    """Edited installment amount is not positive"""

    pass


class InvalidBudgetLimit(DomainException):
    """Budget limit is zero or negative"""

    pass


class InvalidTransaction(DomainException):
    """Transaction data is malformed or references the wrong kind of entity"""

    pass


class InvalidWallet(DomainException):
    """Wallet details are missing or not editable"""

    pass


class InvalidCategory(DomainException):
    """Category type does not fit the operation (income vs expense)"""

    pass


class AlreadyPaid(DomainException):
    """Schedule record was already marked paid"""

    pass


class BudgetAlreadyExists(DomainException):
    """A budget for this category already exists"""

    pass


class NotFound(DomainException):
    """Referenced entity does not exist for this user"""

    pass


class LoanNotFound(NotFound):
    pass


class ScheduleNotFound(NotFound):
    pass


class BudgetNotFound(NotFound):
    pass


class CategoryNotFound(NotFound):
    pass


class WalletNotFound(NotFound):
    pass


class TransactionNotFound(NotFound):
    pass


class DocumentNotFound(NotFound):
    """Store-level miss on update/delete"""

    pass


class PersistenceError(DomainException):
    """Document store read or write failed"""

    pass
