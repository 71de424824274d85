"""
Test suite for input parsing

Tests the YYYYMMDD date form and the `|`-separated transaction, rule and
statement lines shared by the console and the HTTP API.
"""

import pytest
from decimal import Decimal
from datetime import date

from gic_ledger.engine import Deposit, DefineRate, Withdraw
from gic_ledger.errors import InvalidAmount, InvalidInput, InvalidMonth, InvalidRate
from gic_ledger.parsing import (
    build_rule, build_transaction, parse_date, parse_rule, parse_statement_request, parse_transaction
)


class TestParsing:
    """Test raw input parsing"""

    def test_parse_date(self):
        """Test YYYYMMDD parsing"""
        assert parse_date("20230626") == date(2023, 6, 26)

    @pytest.mark.parametrize("text", ["2023626", "20230631", "2023-06-26", "abcdefgh", ""])
    def test_parse_bad_date(self, text):
        """Test malformed or impossible dates are rejected"""
        with pytest.raises(InvalidInput):
            parse_date(text)

    def test_parse_deposit(self):
        """Test deposit line"""
        command = parse_transaction("20230505|AC001|D|100.00")
        assert command == Deposit("AC001", date(2023, 5, 5), Decimal('100.00'))

    def test_parse_withdrawal_lowercase(self):
        """Test type code is case-insensitive"""
        command = parse_transaction(" 20230626 | AC001 | w | 20.00 ")
        assert isinstance(command, Withdraw)
        assert command.account_id == "AC001"

    @pytest.mark.parametrize("line,error", [
        ("20230505|AC001|D", InvalidInput),
        ("20230505|AC001|X|100", InvalidInput),
        ("20230505|AC001|I|100", InvalidInput),
        ("20230505||D|100", InvalidInput),
        ("20230505|AC001|D|0", InvalidAmount),
        ("20230505|AC001|D|-5", InvalidAmount),
        ("20230505|AC001|D|ten", InvalidAmount),
    ])
    def test_parse_bad_transaction(self, line, error):
        """Test invalid transaction lines"""
        with pytest.raises(error):
            parse_transaction(line)

    def test_parse_rule(self):
        """Test rule line"""
        assert parse_rule("20230615|RULE03|2.20") == DefineRate(date(2023, 6, 15), "RULE03", Decimal('2.20'))

    @pytest.mark.parametrize("line,error", [
        ("20230615|RULE03", InvalidInput),
        ("20230615||2.20", InvalidInput),
        ("20230615|RULE03|105", InvalidRate),
        ("20230615|RULE03|0", InvalidRate),
        ("20230615|RULE03|high", InvalidRate),
    ])
    def test_parse_bad_rule(self, line, error):
        """Test invalid rule lines"""
        with pytest.raises(error):
            parse_rule(line)

    def test_parse_statement_request(self):
        """Test statement year comes from today"""
        command = parse_statement_request("AC001|6", date(2023, 6, 30))

        assert command.account_id == "AC001"
        assert command.month == 6
        assert command.current_date == date(2023, 6, 30)
        assert command.year is None

    @pytest.mark.parametrize("line,error", [
        ("AC001", InvalidInput),
        ("AC001|June", InvalidInput),
        ("AC001|13", InvalidMonth),
        ("AC001|0", InvalidMonth),
    ])
    def test_parse_bad_statement_request(self, line, error):
        """Test invalid statement lines"""
        with pytest.raises(error):
            parse_statement_request(line, date(2023, 6, 30))



class TestBuilders:
    """Test command builders used by the HTTP API"""

    def test_build_transaction_from_fields(self):
        """Test separate text fields build the same command as a line"""
        command = build_transaction("20230626", " AC001 ", "W", "20.00")
        assert command == Withdraw("AC001", date(2023, 6, 26), Decimal('20.00'))
        assert command == parse_transaction("20230626|AC001|W|20.00")

    def test_build_rule_reports_non_numeric_rate(self):
        """Test a non-numeric rate names the problem"""
        with pytest.raises(InvalidRate) as exc_info:
            build_rule("20230615", "RULE03", "high")
        assert "must be a number" in str(exc_info.value)
