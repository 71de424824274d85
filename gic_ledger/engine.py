"""
Banking Engine Module

Single entry point for the ledger core. Owns one rate timeline, one account
ledger and the calculators built on them, and applies typed commands that
callers have already parsed and validated.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Optional, Union

from .accounts import AccountLedger, PostingKind, PostingResult
from .config import LedgerConfig, get_config
from .errors import LedgerError
from .interest import DayCountConvention, InterestCalculator, MissingRatePolicy
from .logging_config import get_logger, log_action
from .money import to_amount
from .rates import RateRule, RateTimeline
from .statements import Statement, StatementAssembler


@dataclass(frozen=True)
class Deposit:
    account_id: str
    date: date
    amount: Decimal


@dataclass(frozen=True)
class Withdraw:
    account_id: str
    date: date
    amount: Decimal


@dataclass(frozen=True)
class DefineRate:
    date: date
    rule_id: str
    rate: Decimal


@dataclass(frozen=True)
class RequestStatement:
    """Statement request; year defaults to the year of current_date"""
    account_id: str
    month: int
    current_date: date
    year: Optional[int] = None
    commit: bool = True


Command = Union[Deposit, Withdraw, DefineRate, RequestStatement]


class BankingEngine:
    """
    Ledger core with all components initialized
    """

    def __init__(self, config: Optional[LedgerConfig] = None):
        self.config = config or get_config()
        self.logger = get_logger("gic_ledger.engine")

        self.timeline = RateTimeline()
        self.ledger = AccountLedger(
            amount_precision=self.config.amount_precision,
            max_amount=to_amount(self.config.max_amount)
        )
        self.calculator = InterestCalculator(
            self.timeline,
            self.ledger,
            day_count=DayCountConvention(self.config.day_count_convention),
            missing_rate_policy=MissingRatePolicy(self.config.missing_rate_policy)
        )
        self.statements = StatementAssembler(self.ledger, self.calculator)

    def deposit(self, account_id: str, day: date, amount) -> PostingResult:
        return self.ledger.post(account_id, day, PostingKind.DEPOSIT, amount)

    def withdraw(self, account_id: str, day: date, amount) -> PostingResult:
        return self.ledger.post(account_id, day, PostingKind.WITHDRAWAL, amount)

    def define_rate(self, day: date, rule_id: str, rate) -> List[RateRule]:
        """Define a rate rule and return all rules ordered by date"""
        self.timeline.define_rule(day, rule_id, rate)
        return self.timeline.all_rules_by_date()

    def rate_on(self, day: date) -> Decimal:
        return self.timeline.rate_on(day)

    def rules(self) -> List[RateRule]:
        return self.timeline.all_rules_by_date()

    def statement(self, account_id: str, month: int, current_date: date,
                  year: Optional[int] = None) -> Statement:
        """Build a statement, posting month-end interest on the trigger date"""
        year = current_date.year if year is None else year
        return self.statements.build(account_id, year, month, current_date)

    def preview_statement(self, account_id: str, month: int, year: int) -> Statement:
        """Build a statement without changing the ledger"""
        return self.statements.preview(account_id, year, month)

    def execute(self, command: Command):
        """
        Apply a typed command

        Returns:
            PostingResult for deposits and withdrawals, the ordered rule list
            for rate definitions, a Statement for statement requests

        Raises:
            LedgerError: If the command is rejected (state is unchanged)
            TypeError: If the command type is not supported
        """
        try:
            if isinstance(command, Deposit):
                return self.deposit(command.account_id, command.date, command.amount)
            elif isinstance(command, Withdraw):
                return self.withdraw(command.account_id, command.date, command.amount)
            elif isinstance(command, DefineRate):
                return self.define_rate(command.date, command.rule_id, command.rate)
            elif isinstance(command, RequestStatement):
                if command.commit:
                    return self.statement(
                        command.account_id, command.month, command.current_date, command.year
                    )
                year = command.current_date.year if command.year is None else command.year
                return self.preview_statement(command.account_id, command.month, year)
            else:
                raise TypeError(f"Unsupported command: {type(command).__name__}")
        except LedgerError as e:
            log_action(
                self.logger, "warning", f"Command rejected: {e}",
                action="command_rejected", resource=type(command).__name__,
                account_id=getattr(command, "account_id", None),
                extra={"error": type(e).__name__}
            )
            raise
