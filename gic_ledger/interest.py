"""
Interest Engine Module

Computes simple interest accrued by one account over a half-open date
range. The range is split into sub-intervals on which both the rate and
the end-of-day principal are constant; interest for each sub-interval is
prorated with the configured day count convention and the total is
rounded to cents once.

The default convention prorates by the actual days of the calendar month:
a balance held for a whole month earns the full rate for that month.
"""

from dataclasses import dataclass, field
from datetime import MAXYEAR, MINYEAR, date, timedelta
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Tuple
import calendar

from .accounts import AccountLedger, Posting, PostingKind
from .errors import InvalidMonth, InvalidYear, NoApplicableRate
from .logging_config import get_logger, log_action
from .money import ZERO, round_amount
from .rates import RateTimeline

HUNDRED = Decimal('100')
MONTHS_PER_YEAR = Decimal('12')


class DayCountConvention(Enum):
    """How many days the rate is spread over"""
    ACTUAL_MONTH = "actual_month"      # Actual days / days in that month
    MONTHLY_ACTUAL = "monthly_actual"  # Actual days / (days in that month * 12)
    ACTUAL_365 = "actual_365"          # Actual days / 365
    ACTUAL_360 = "actual_360"          # Actual days / 360

    def period_days(self, start: date) -> Decimal:
        """Days the full rate is spread over, for a sub-interval starting on `start`"""
        if self is DayCountConvention.ACTUAL_MONTH:
            return Decimal(days_in_month(start.year, start.month))
        elif self is DayCountConvention.MONTHLY_ACTUAL:
            return Decimal(days_in_month(start.year, start.month)) * MONTHS_PER_YEAR
        elif self is DayCountConvention.ACTUAL_365:
            return Decimal('365')
        elif self is DayCountConvention.ACTUAL_360:
            return Decimal('360')
        else:
            raise ValueError(f"Unsupported day count convention: {self}")

    def accrual_fraction(self, start: date, days: int) -> Decimal:
        """Share of the full rate earned over `days` days starting on `start`"""
        return Decimal(days) / self.period_days(start)


class MissingRatePolicy(Enum):
    """What to do with days that have no rate rule in effect"""
    ZERO = "zero"    # Day earns nothing
    RAISE = "raise"  # Fail with NoApplicableRate


def validate_month(month) -> int:
    if isinstance(month, bool) or not isinstance(month, int) or not 1 <= month <= 12:
        raise InvalidMonth(month)
    return month


def validate_year(year) -> int:
    # December of MAXYEAR has no following month start
    if isinstance(year, bool) or not isinstance(year, int) or not MINYEAR <= year < MAXYEAR:
        raise InvalidYear(
            year, f"Invalid year: {year}. Year must be between {MINYEAR} and {MAXYEAR - 1}"
        )
    return year


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """First day of the month and first day of the following month"""
    validate_year(year)
    validate_month(month)
    start = date(year, month, 1)
    return start, start + timedelta(days=days_in_month(year, month))


def last_day_of_month(year: int, month: int) -> date:
    validate_year(year)
    validate_month(month)
    return date(year, month, days_in_month(year, month))


def _month_starts_within(start: date, end: date) -> List[date]:
    """First-of-month dates strictly inside (start, end)"""
    result = []
    current = date(start.year, start.month, 1)
    while (current.year, current.month) != (MAXYEAR, 12):
        current = current + timedelta(days=days_in_month(current.year, current.month))
        if current >= end:
            break
        result.append(current)
    return result


@dataclass(frozen=True)
class AccrualSegment:
    """Sub-interval [start, end) with constant rate and principal"""
    start: date
    end: date
    days: int
    rate: Optional[Decimal]   # None when no rule is in effect
    principal: Decimal
    interest: Decimal         # Unrounded


@dataclass(frozen=True)
class InterestAccrual:
    """Interest accrued by an account over [period_start, period_end)"""
    account_id: str
    period_start: date
    period_end: date
    principal_basis: Decimal
    accrued_amount: Decimal
    segments: List[AccrualSegment] = field(default_factory=list)

    @property
    def is_zero(self) -> bool:
        return self.accrued_amount == ZERO

    @property
    def unrounded_amount(self) -> Decimal:
        return sum((s.interest for s in self.segments), ZERO)


class InterestCalculator:
    """
    Calculates accrued interest from an account ledger and a rate timeline
    """

    def __init__(
        self,
        timeline: RateTimeline,
        ledger: AccountLedger,
        day_count: DayCountConvention = DayCountConvention.ACTUAL_MONTH,
        missing_rate_policy: MissingRatePolicy = MissingRatePolicy.ZERO
    ):
        self.timeline = timeline
        self.ledger = ledger
        self.day_count = day_count
        self.missing_rate_policy = missing_rate_policy
        self.logger = get_logger("gic_ledger.interest")

    def accrue(self, account_id: str, start: date, end: date) -> InterestAccrual:
        """
        Calculate interest accrued over [start, end)

        Args:
            account_id: Account to accrue for
            start: First day of the range
            end: Day after the last day of the range

        Returns:
            InterestAccrual with per-segment breakdown

        Raises:
            AccountNotFound: If the account does not exist
            NoApplicableRate: If a day has no rate and the policy is RAISE
        """
        postings = list(self.ledger.postings_for(account_id))

        if end <= start or not any(p.date < end for p in postings):
            return InterestAccrual(account_id, start, end, ZERO, ZERO)

        boundaries = {start}
        boundaries.update(self.timeline.change_dates_within(start, end))
        boundaries.update(
            p.date for p in postings
            if start < p.date < end and p.kind is not PostingKind.INTEREST
        )
        boundaries.update(_month_starts_within(start, end))
        points = sorted(boundaries) + [end]

        segments = []
        for seg_start, seg_end in zip(points, points[1:]):
            segments.append(self._segment(postings, start, seg_start, seg_end))

        total = sum((s.interest for s in segments), ZERO)
        accrual = InterestAccrual(
            account_id=account_id,
            period_start=start,
            period_end=end,
            principal_basis=segments[0].principal,
            accrued_amount=round_amount(total, self.ledger.amount_precision),
            segments=segments
        )

        log_action(
            self.logger, "debug", "Interest accrued",
            account_id=account_id, action="accrue",
            extra={
                "period_start": start.isoformat(),
                "period_end": end.isoformat(),
                "segments": len(segments),
                "accrued_amount": str(accrual.accrued_amount)
            }
        )
        return accrual

    def accrue_month(self, account_id: str, year: int, month: int) -> InterestAccrual:
        """Calculate interest accrued over one calendar month"""
        start, end = month_bounds(year, month)
        return self.accrue(account_id, start, end)

    def is_trigger_date(self, year: int, month: int, as_of: date) -> bool:
        """Check if `as_of` is the day month-end interest gets posted"""
        return as_of == last_day_of_month(year, month)

    def _segment(self, postings: List[Posting], period_start: date,
                 seg_start: date, seg_end: date) -> AccrualSegment:
        days = (seg_end - seg_start).days
        principal = self._principal_as_of(postings, period_start, seg_start)

        rule = self.timeline.rule_on(seg_start)
        if rule is None:
            if self.missing_rate_policy is MissingRatePolicy.RAISE:
                raise NoApplicableRate(seg_start)
            return AccrualSegment(seg_start, seg_end, days, None, principal, ZERO)

        interest = ZERO
        if principal > ZERO:
            # Single division keeps whole-month results exact
            interest = (principal * rule.rate * Decimal(days)
                        / (HUNDRED * self.day_count.period_days(seg_start)))
        return AccrualSegment(seg_start, seg_end, days, rule.rate, principal, interest)

    @staticmethod
    def _principal_as_of(postings: List[Posting], period_start: date, day: date) -> Decimal:
        # Interest credited inside the period does not earn interest in the same period
        return sum(
            (
                p.signed_amount for p in postings
                if p.date <= day
                and not (p.kind is PostingKind.INTEREST and p.date >= period_start)
            ),
            ZERO
        )
