"""
Statement Assembler Module

Builds monthly account statements: the month's postings with the running
balance after each one, followed by the month-end interest line.

Viewing a statement with `preview` never changes the ledger. `build` is the
committing variant: on the last day of the statement month it credits the
month's interest to the account as an Interest posting.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from typing import List, Optional

from .accounts import AccountLedger, PostingKind
from .interest import InterestAccrual, InterestCalculator, month_bounds
from .logging_config import get_logger, log_action
from .money import ZERO


@dataclass(frozen=True)
class StatementLine:
    """One statement row"""
    date: date
    txn_id: str
    kind: PostingKind
    amount: Decimal
    balance: Decimal
    provisional: bool = False  # Interest computed but not yet posted


@dataclass(frozen=True)
class Statement:
    """Account statement for one calendar month"""
    account_id: str
    year: int
    month: int
    opening_balance: Decimal
    accrual: InterestAccrual
    lines: List[StatementLine] = field(default_factory=list)
    interest_posted: bool = False

    @property
    def closing_balance(self) -> Decimal:
        if self.lines:
            return self.lines[-1].balance
        return self.opening_balance

    @property
    def interest_line(self) -> Optional[StatementLine]:
        for line in reversed(self.lines):
            if line.kind is PostingKind.INTEREST:
                return line
        return None


class StatementAssembler:
    """
    Combines ledger postings and interest accrual into statements
    """

    def __init__(self, ledger: AccountLedger, calculator: InterestCalculator):
        self.ledger = ledger
        self.calculator = calculator
        self.logger = get_logger("gic_ledger.statements")

    def preview(self, account_id: str, year: int, month: int) -> Statement:
        """
        Build a read-only statement; month-end interest shows as a provisional line

        Raises:
            AccountNotFound: If the account does not exist
            InvalidMonth: If month is outside 1-12
        """
        start, end = month_bounds(year, month)
        self.ledger.get_account(account_id)
        accrual = self.calculator.accrue(account_id, start, end)
        return self._assemble(account_id, year, month, accrual, include_provisional=True)

    def build(self, account_id: str, year: int, month: int, as_of: date) -> Statement:
        """
        Build a statement, posting month-end interest when `as_of` is the
        last day of the month

        Posting is idempotent: a month that already has its interest posting
        is never credited twice.

        Args:
            account_id: Account identifier
            year: Statement year
            month: Statement month (1-12)
            as_of: Caller's current date

        Returns:
            Statement including the interest line when interest was posted
        """
        start, end = month_bounds(year, month)
        self.ledger.get_account(account_id)
        accrual = self.calculator.accrue(account_id, start, end)

        month_end = end - timedelta(days=1)
        if (self.calculator.is_trigger_date(year, month, as_of)
                and not accrual.is_zero
                and self.ledger.find_posting(account_id, month_end, PostingKind.INTEREST) is None):
            result = self.ledger.post(account_id, month_end, PostingKind.INTEREST, accrual.accrued_amount)
            log_action(
                self.logger, "info", "Month-end interest posted",
                account_id=account_id, action="post_interest",
                resource=f"posting:{result.txn_id}",
                extra={
                    "period": f"{year:04d}-{month:02d}",
                    "amount": str(accrual.accrued_amount),
                    "balance": str(result.balance)
                }
            )

        return self._assemble(account_id, year, month, accrual, include_provisional=False)

    def _assemble(self, account_id: str, year: int, month: int,
                  accrual: InterestAccrual, include_provisional: bool) -> Statement:
        start, end = month_bounds(year, month)
        month_end = end - timedelta(days=1)

        opening = ZERO
        running = ZERO
        lines = []
        interest_posted = False
        for posting in self.ledger.postings_for(account_id):
            if posting.date >= end:
                break
            running += posting.signed_amount
            if posting.date < start:
                opening = running
                continue
            if posting.kind is PostingKind.INTEREST and posting.date == month_end:
                interest_posted = True
            lines.append(StatementLine(
                date=posting.date,
                txn_id=posting.txn_id,
                kind=posting.kind,
                amount=posting.amount,
                balance=running
            ))

        if include_provisional and not interest_posted and not accrual.is_zero:
            lines.append(StatementLine(
                date=month_end,
                txn_id="",
                kind=PostingKind.INTEREST,
                amount=accrual.accrued_amount,
                balance=running + accrual.accrued_amount,
                provisional=True
            ))

        return Statement(
            account_id=account_id,
            year=year,
            month=month,
            opening_balance=opening,
            accrual=accrual,
            lines=lines,
            interest_posted=interest_posted
        )
