"""
Test suite for statements module

Tests statement assembly, the read-only preview and the month-end
interest posting performed by the committing variant.
"""

import pytest
from decimal import Decimal
from datetime import date

from gic_ledger.accounts import AccountLedger, PostingKind
from gic_ledger.errors import AccountNotFound, InvalidMonth
from gic_ledger.interest import InterestCalculator
from gic_ledger.rates import RateTimeline
from gic_ledger.statements import StatementAssembler


class TestStatementAssembler:
    """Test statement preview and build"""

    def setup_method(self):
        """Set up test fixtures"""
        self.timeline = RateTimeline()
        self.ledger = AccountLedger()
        self.calculator = InterestCalculator(self.timeline, self.ledger)
        self.assembler = StatementAssembler(self.ledger, self.calculator)

        self.timeline.define_rule(date(2023, 1, 1), "RULE01", Decimal('1.95'))
        self.ledger.post("AC1", date(2023, 5, 5), PostingKind.DEPOSIT, "9000")
        self.ledger.post("AC1", date(2023, 6, 1), PostingKind.DEPOSIT, "1000")
        self.ledger.post("AC1", date(2023, 6, 26), PostingKind.WITHDRAWAL, "20")
        self.ledger.post("AC1", date(2023, 7, 3), PostingKind.DEPOSIT, "5")

    def test_preview_lines(self):
        """Test only the month's postings appear, with running balance"""
        statement = self.assembler.preview("AC1", 2023, 6)

        assert statement.opening_balance == Decimal('9000.00')
        assert [(l.txn_id, l.balance) for l in statement.lines[:2]] == [
            ("20230601-02", Decimal('10000.00')),
            ("20230626-03", Decimal('9980.00')),
        ]

    def test_preview_has_provisional_interest(self):
        """Test preview shows month-end interest without posting it"""
        statement = self.assembler.preview("AC1", 2023, 6)
        line = statement.interest_line

        # (10000 * 25 + 9980 * 5) * 1.95% / 30 = 194.935
        assert line.amount == Decimal('194.94')
        assert line.date == date(2023, 6, 30)
        assert line.provisional
        assert line.balance == Decimal('10174.94')
        assert not statement.interest_posted
        assert len(self.ledger.postings_for("AC1")) == 4

    def test_build_before_month_end_posts_nothing(self):
        """Test build on a non-trigger date leaves the ledger alone"""
        statement = self.assembler.build("AC1", 2023, 6, as_of=date(2023, 6, 29))

        assert statement.interest_line is None
        assert statement.closing_balance == Decimal('9980.00')
        assert len(self.ledger.postings_for("AC1")) == 4

    def test_build_on_month_end_posts_interest(self):
        """Test build on the last day of the month credits interest"""
        statement = self.assembler.build("AC1", 2023, 6, as_of=date(2023, 6, 30))
        line = statement.interest_line

        assert statement.interest_posted
        assert not line.provisional
        assert line.txn_id == "20230630-05"
        assert line.amount == Decimal('194.94')
        assert statement.closing_balance == Decimal('10174.94')
        assert self.ledger.balance("AC1") == Decimal('10179.94')

    def test_build_is_idempotent(self):
        """Test interest for a month is only posted once"""
        self.assembler.build("AC1", 2023, 6, as_of=date(2023, 6, 30))
        statement = self.assembler.build("AC1", 2023, 6, as_of=date(2023, 6, 30))

        interest = [p for p in self.ledger.postings_for("AC1") if p.kind is PostingKind.INTEREST]
        assert len(interest) == 1
        assert statement.interest_posted

    def test_preview_after_posting_shows_posted_line(self):
        """Test a posted month shows the real posting, not a provisional one"""
        self.assembler.build("AC1", 2023, 6, as_of=date(2023, 6, 30))
        statement = self.assembler.preview("AC1", 2023, 6)

        assert [l.provisional for l in statement.lines].count(True) == 0
        assert statement.interest_line.txn_id == "20230630-05"

    def test_month_without_postings_is_empty(self):
        """Test a known account with nothing in the month returns no lines"""
        ledger = AccountLedger()
        assembler = StatementAssembler(ledger, InterestCalculator(RateTimeline(), ledger))
        ledger.post("AC2", date(2023, 1, 10), PostingKind.DEPOSIT, "100")

        statement = assembler.preview("AC2", 2023, 3)

        assert statement.lines == []
        assert statement.opening_balance == Decimal('100.00')
        assert statement.closing_balance == Decimal('100.00')

    def test_unknown_account(self):
        """Test statements for unknown accounts fail"""
        with pytest.raises(AccountNotFound):
            self.assembler.preview("NOPE", 2023, 6)
        with pytest.raises(AccountNotFound):
            self.assembler.build("NOPE", 2023, 6, as_of=date(2023, 6, 30))

    def test_invalid_month(self):
        """Test months outside 1-12 fail"""
        with pytest.raises(InvalidMonth):
            self.assembler.build("AC1", 2023, 13, as_of=date(2023, 6, 30))
