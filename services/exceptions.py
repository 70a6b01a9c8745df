"""Error types raised by the expense validator and store gateway."""
from typing import List


class ExpenseError(Exception):
    """Base class for every expense-related failure."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ExpenseValidationError(ExpenseError):
    """One or more fields failed validation. Nothing was written."""

    def __init__(self, errors: List[str]):
        super().__init__("; ".join(errors))
        self.errors = list(errors)


class InvalidIdError(ExpenseError):
    """The identifier is not a well-formed ObjectId."""

    def __init__(self, message: str = "Invalid expense ID"):
        super().__init__(message)


class NotFoundError(ExpenseError):
    """Well-formed identifier, but no expense document has it."""

    def __init__(self, message: str = "Expense not found"):
        super().__init__(message)


class EmptyUpdateError(ExpenseError):
    def __init__(self, message: str = "No valid fields to update"):
        super().__init__(message)


class StoreError(ExpenseError, ConnectionError):
    """The database failed (connection loss, timeout, unavailable at startup)."""
