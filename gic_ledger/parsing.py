"""
Input Parsing Module

Turns raw text fields from the console or the HTTP API into typed engine
commands. Dates use the 8-digit YYYYMMDD form; transaction and rule lines
are `|`-separated.
"""

import re
from datetime import date, datetime
from typing import List, Union

from .accounts import PostingKind
from .engine import Deposit, DefineRate, RequestStatement, Withdraw
from .errors import InvalidAmount, InvalidInput, InvalidRate
from .interest import validate_month
from .money import ZERO, to_amount
from .rates import MAX_RATE, MIN_RATE

DATE_PATTERN = re.compile(r"^\d{8}$")


def parse_date(text: str) -> date:
    """Parse a YYYYMMDD date"""
    text = text.strip()
    if not DATE_PATTERN.match(text):
        raise InvalidInput(f"Invalid date: {text!r}. Please use YYYYMMdd format")
    try:
        return datetime.strptime(text, "%Y%m%d").date()
    except ValueError:
        raise InvalidInput(f"Invalid date: {text!r}. Please use YYYYMMdd format")


def _split(line: str, expected: int, fmt: str) -> List[str]:
    parts = [part.strip() for part in line.split("|")]
    if len(parts) != expected:
        raise InvalidInput(f"Invalid format. Please use {fmt}")
    return parts


def build_transaction(date_text: str, account_id: str, type_code: str,
                      amount_text: str) -> Union[Deposit, Withdraw]:
    """
    Build a deposit or withdrawal command from its text fields

    Raises:
        InvalidInput: If the date, account or type code is malformed
        InvalidAmount: If the amount is not a positive number
    """
    day = parse_date(date_text)
    account_id = account_id.strip()
    if not account_id:
        raise InvalidInput("Account must not be empty")

    kind = PostingKind.from_code(type_code)
    if kind is PostingKind.INTEREST:
        raise InvalidInput("Invalid transaction type. Use 'D' for deposit or 'W' for withdrawal")

    amount = to_amount(amount_text)
    if amount <= ZERO:
        raise InvalidAmount(amount_text)

    if kind is PostingKind.DEPOSIT:
        return Deposit(account_id, day, amount)
    return Withdraw(account_id, day, amount)


def build_rule(date_text: str, rule_id: str, rate_text: str) -> DefineRate:
    """Build a rate definition command from its text fields"""
    day = parse_date(date_text)
    rule_id = rule_id.strip()
    if not rule_id:
        raise InvalidInput("Rule id must not be empty")
    try:
        rate = to_amount(rate_text)
    except InvalidAmount:
        raise InvalidRate(rate_text, f"Invalid interest rate: {rate_text!r}. Rate must be a number")
    if not (MIN_RATE < rate < MAX_RATE):
        raise InvalidRate(rate_text)
    return DefineRate(day, rule_id, rate)


def parse_transaction(line: str) -> Union[Deposit, Withdraw]:
    """Parse `<Date>|<Account>|<Type>|<Amount>`"""
    return build_transaction(*_split(line, 4, "<Date>|<Account>|<Type>|<Amount>"))


def parse_rule(line: str) -> DefineRate:
    """Parse `<Date>|<RuleId>|<Rate in %>`"""
    return build_rule(*_split(line, 3, "<Date>|<RuleId>|<Rate in %>"))


def parse_statement_request(line: str, today: date) -> RequestStatement:
    """Parse `<Account>|<Month>`; the statement year is today's year"""
    account_id, month_text = _split(line, 2, "<Account>|<Month>")
    if not account_id:
        raise InvalidInput("Account must not be empty")
    try:
        month = int(month_text)
    except ValueError:
        raise InvalidInput(f"Invalid month: {month_text!r}. Please enter a month between 1 and 12")
    validate_month(month)
    return RequestStatement(account_id, month, today)
