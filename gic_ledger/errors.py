"""
Ledger Errors Module

Typed failures raised by the ledger core. Every error is a ValueError so
callers can handle the whole family the same way they handle bad input,
or catch the precise kind they care about.
"""

from datetime import date
from decimal import Decimal
from typing import Optional


class LedgerError(ValueError):
    """Base class for all recoverable ledger failures"""


class InvalidAmount(LedgerError):
    """Posting amount is not a positive number"""

    def __init__(self, amount, message: Optional[str] = None):
        self.amount = amount
        super().__init__(message or f"Invalid amount: {amount}. Amount must be a positive number")


class InsufficientFunds(LedgerError):
    """Withdrawal would take the account balance below zero"""

    def __init__(self, account_id: str, requested: Decimal, available: Decimal):
        self.account_id = account_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient balance in account {account_id}: "
            f"requested {requested:.2f}, available {available:.2f}"
        )


class InvalidRate(LedgerError):
    """Interest rate outside the open interval (0, 100)"""

    def __init__(self, rate, message: Optional[str] = None):
        self.rate = rate
        super().__init__(
            message or f"Invalid interest rate: {rate}. Rate must be greater than 0 and less than 100"
        )


class NoApplicableRate(LedgerError):
    """No rate rule is in effect on the requested day"""

    def __init__(self, day: date):
        self.day = day
        super().__init__(f"No interest rule in effect on {day:%Y%m%d}")


class AccountNotFound(LedgerError):
    """Account has no postings"""

    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__(f"Account {account_id} not found")


class InvalidMonth(LedgerError):
    """Month outside 1-12"""

    def __init__(self, month):
        self.month = month
        super().__init__(f"Invalid month: {month}. Month must be between 1 and 12")


class InvalidYear(LedgerError):
    """Year outside the supported calendar range"""

    def __init__(self, year, message: Optional[str] = None):
        self.year = year
        super().__init__(message or f"Invalid year: {year}")


class InvalidInput(LedgerError):
    """Raw input could not be parsed into a command"""
