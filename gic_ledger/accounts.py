"""
Account Ledger Module

Per-account sequence of immutable postings (deposits, withdrawals and
interest credits). Balances are never stored; they are derived by folding
over postings in ledger order (date, then insertion order within a day).
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Dict, Iterator, List, Optional

from .errors import AccountNotFound, InsufficientFunds, InvalidAmount, InvalidInput
from .logging_config import get_logger, log_action
from .money import ZERO, round_amount, to_amount


class PostingKind(Enum):
    """Kinds of ledger postings"""
    DEPOSIT = "D"        # Cash in
    WITHDRAWAL = "W"     # Cash out
    INTEREST = "I"       # Interest credited

    @property
    def sign(self) -> int:
        return -1 if self is PostingKind.WITHDRAWAL else 1

    @classmethod
    def from_code(cls, code: str) -> 'PostingKind':
        """Parse a one-letter type code (case-insensitive)"""
        try:
            return cls(code.strip().upper())
        except ValueError:
            raise InvalidInput(
                f"Invalid transaction type: {code!r}. Use 'D' for deposit or 'W' for withdrawal"
            )


@dataclass(frozen=True)
class Posting:
    """
    One ledger entry. Amount is a positive magnitude; the sign comes from kind
    """
    date: date
    txn_id: str
    kind: PostingKind
    amount: Decimal

    def __post_init__(self):
        if not self.amount > ZERO:
            raise InvalidAmount(self.amount)

    @property
    def signed_amount(self) -> Decimal:
        return self.amount * self.kind.sign


def _ledger_order(postings: List[Posting]) -> List[Posting]:
    # sorted() is stable, so insertion order is kept within a day
    return sorted(postings, key=lambda p: p.date)


class PostingsView:
    """
    Lazy, restartable view of an account's postings in ledger order.

    Every iteration re-reads the account, so postings appended after the
    view was created are included.
    """

    def __init__(self, account: 'Account'):
        self._account = account

    def __iter__(self) -> Iterator[Posting]:
        return iter(_ledger_order(self._account.postings))

    def __len__(self) -> int:
        return len(self._account.postings)


@dataclass
class Account:
    """
    Account keyed by identifier, owning its postings in insertion order
    """
    account_id: str
    postings: List[Posting] = field(default_factory=list)

    @property
    def balance(self) -> Decimal:
        """Current balance: fold over all postings"""
        return sum((p.signed_amount for p in self.postings), ZERO)

    def balance_as_of(self, day: date) -> Decimal:
        """End-of-day balance: fold over postings dated on or before day"""
        return sum((p.signed_amount for p in self.postings if p.date <= day), ZERO)

    def next_txn_id(self, day: date) -> str:
        """Identifier for the next posting: date plus 1-based account sequence"""
        return f"{day:%Y%m%d}-{len(self.postings) + 1:02d}"


@dataclass(frozen=True)
class PostingResult:
    """Outcome of a successful post"""
    posting: Posting
    balance: Decimal

    @property
    def txn_id(self) -> str:
        return self.posting.txn_id


class AccountLedger:
    """
    Manages accounts, postings and balance calculations
    """

    def __init__(self, amount_precision: int = 2, max_amount: Optional[Decimal] = None):
        self._accounts: Dict[str, Account] = {}
        self.amount_precision = amount_precision
        self.max_amount = max_amount
        self.logger = get_logger("gic_ledger.accounts")

    def post(self, account_id: str, day: date, kind: PostingKind, amount) -> PostingResult:
        """
        Append a posting to an account, creating the account on first use

        Args:
            account_id: Account identifier
            day: Posting date
            kind: Deposit, withdrawal or interest
            amount: Positive amount

        Returns:
            PostingResult with the new posting and running balance

        Raises:
            InvalidAmount: If amount is not positive or above the maximum
            InsufficientFunds: If a withdrawal exceeds the current balance
        """
        value = to_amount(amount)
        if value <= ZERO:
            raise InvalidAmount(amount)
        if self.max_amount is not None and value > self.max_amount:
            raise InvalidAmount(
                amount, f"Invalid amount: {amount}. Amount exceeds the maximum of {self.max_amount}"
            )
        value = round_amount(value, self.amount_precision)
        if value <= ZERO:
            raise InvalidAmount(amount, f"Invalid amount: {amount}. Amount rounds to zero")

        account = self._accounts.get(account_id)
        balance = account.balance if account else ZERO

        if kind is PostingKind.WITHDRAWAL and value > balance:
            log_action(
                self.logger, "warning", "Withdrawal rejected: insufficient balance",
                account_id=account_id, action="post_rejected",
                extra={"requested": str(value), "available": str(balance)}
            )
            raise InsufficientFunds(account_id, value, balance)

        if account is None:
            account = Account(account_id)
            self._accounts[account_id] = account

        posting = Posting(
            date=day,
            txn_id=account.next_txn_id(day),
            kind=kind,
            amount=value
        )
        account.postings.append(posting)
        new_balance = balance + posting.signed_amount

        log_action(
            self.logger, "info", f"Posting recorded: {kind.name.lower()}",
            account_id=account_id, action="post", resource=f"posting:{posting.txn_id}",
            extra={
                "date": day.isoformat(),
                "kind": kind.value,
                "amount": str(value),
                "balance": str(new_balance)
            }
        )
        return PostingResult(posting, new_balance)

    def has_account(self, account_id: str) -> bool:
        return account_id in self._accounts

    def get_account(self, account_id: str) -> Account:
        """
        Get account by identifier

        Raises:
            AccountNotFound: If the account has no postings
        """
        account = self._accounts.get(account_id)
        if account is None:
            raise AccountNotFound(account_id)
        return account

    def account_ids(self) -> List[str]:
        return sorted(self._accounts)

    def balance(self, account_id: str) -> Decimal:
        return self.get_account(account_id).balance

    def balance_as_of(self, account_id: str, day: date) -> Decimal:
        return self.get_account(account_id).balance_as_of(day)

    def postings_for(self, account_id: str) -> PostingsView:
        return PostingsView(self.get_account(account_id))

    def find_posting(self, account_id: str, day: date, kind: PostingKind) -> Optional[Posting]:
        """Get the first posting of a kind on a day, if any"""
        for posting in self.get_account(account_id).postings:
            if posting.date == day and posting.kind is kind:
                return posting
        return None
