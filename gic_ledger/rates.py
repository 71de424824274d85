"""
Rate Timeline Module

Piecewise-constant history of annual interest rates keyed by effective
date. The rate in effect on a day is the rate of the latest rule whose
effective date is on or before that day. Defining a rule for a date that
already has one replaces it (last write wins per date, not per rule id).
"""

from bisect import bisect_left, bisect_right
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterator, List, Optional

from .errors import InvalidAmount, InvalidRate, NoApplicableRate
from .logging_config import get_logger, log_action
from .money import to_amount

MIN_RATE = Decimal('0')
MAX_RATE = Decimal('100')


@dataclass(frozen=True)
class RateRule:
    """Annual interest rate (in percent) effective from a date"""
    effective_date: date
    rule_id: str
    rate: Decimal

    def __post_init__(self):
        if isinstance(self.rate, (bool, float)):
            raise InvalidRate(
                self.rate,
                f"Invalid interest rate: {self.rate!r}. Use a string or Decimal, not {type(self.rate).__name__}"
            )
        try:
            rate = to_amount(self.rate)
        except InvalidAmount:
            raise InvalidRate(self.rate, f"Invalid interest rate: {self.rate!r}. Rate must be a number")
        if not (MIN_RATE < rate < MAX_RATE):
            raise InvalidRate(self.rate)
        object.__setattr__(self, 'rate', rate)


class RateTimeline:
    """
    Ordered set of rate rules, one per effective date
    """

    def __init__(self):
        # Parallel lists kept sorted by effective date
        self._dates: List[date] = []
        self._rules: List[RateRule] = []
        self.logger = get_logger("gic_ledger.rates")

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[RateRule]:
        return iter(list(self._rules))

    def define_rule(self, effective_date: date, rule_id: str, rate) -> RateRule:
        """
        Define the rate effective from a date

        Args:
            effective_date: First day the rate applies
            rule_id: Caller supplied rule identifier
            rate: Annual rate in percent, strictly between 0 and 100

        Returns:
            The stored RateRule

        Raises:
            InvalidRate: If rate is outside (0, 100)
        """
        rule = RateRule(effective_date, rule_id.strip(), rate)

        idx = bisect_left(self._dates, effective_date)
        replaced = None
        if idx < len(self._dates) and self._dates[idx] == effective_date:
            replaced = self._rules[idx]
            self._rules[idx] = rule
        else:
            self._dates.insert(idx, effective_date)
            self._rules.insert(idx, rule)

        log_action(
            self.logger, "info", f"Interest rule defined: {rule.rule_id}",
            action="define_rule", resource=f"rule:{rule.rule_id}",
            extra={
                "effective_date": effective_date.isoformat(),
                "rate": str(rule.rate),
                "replaced_rule_id": replaced.rule_id if replaced else None
            }
        )
        return rule

    def rule_on(self, day: date) -> Optional[RateRule]:
        """Get the rule in effect on a day, or None if no rule applies yet"""
        idx = bisect_right(self._dates, day)
        if idx == 0:
            return None
        return self._rules[idx - 1]

    def rate_on(self, day: date) -> Decimal:
        """
        Get the annual rate (percent) in effect on a day

        Raises:
            NoApplicableRate: If the timeline is empty or every rule post-dates the day
        """
        rule = self.rule_on(day)
        if rule is None:
            raise NoApplicableRate(day)
        return rule.rate

    def all_rules_by_date(self) -> List[RateRule]:
        """Get all rules in ascending effective date order"""
        return list(self._rules)

    def change_dates_within(self, start: date, end: date) -> List[date]:
        """Get effective dates strictly inside (start, end), ascending"""
        lo = bisect_right(self._dates, start)
        hi = bisect_left(self._dates, end)
        return self._dates[lo:hi]
