"""
Console Front-End Module

Interactive menu for entering transactions, defining interest rules and
printing monthly statements. Raw input lines are parsed into typed
commands by the parsing module; engine results are rendered as text tables.
"""

import sys
from datetime import date
from typing import Callable, List, Optional, TextIO

from .config import LedgerConfig, get_config
from .engine import BankingEngine
from .errors import LedgerError
from .logging_config import setup_logging
from .money import ZERO, format_amount
from .parsing import parse_rule, parse_statement_request, parse_transaction
from .rates import RateRule
from .statements import Statement


def render_account(account_id: str, engine: BankingEngine) -> str:
    """Render all postings of an account with the balance after each"""
    rows = [f"Account: {account_id}", "| Date     | Txn Id      | Type | Amount | Balance |"]
    balance = ZERO
    for posting in engine.ledger.postings_for(account_id):
        balance += posting.signed_amount
        rows.append(
            f"| {posting.date:%Y%m%d} | {posting.txn_id:<11} | {posting.kind.value:<4} "
            f"| {format_amount(posting.amount):>6} | {format_amount(balance):>7} |"
        )
    return "\n".join(rows)


def render_rules(rules: List[RateRule]) -> str:
    rows = ["Interest rules:", "| Date     | RuleId | Rate (%) |"]
    for rule in rules:
        rows.append(f"| {rule.effective_date:%Y%m%d} | {rule.rule_id:<6} | {format_amount(rule.rate):>8} |")
    return "\n".join(rows)


def render_statement(statement: Statement) -> str:
    rows = [
        f"Account: {statement.account_id}",
        "| Date     | Txn Id      | Type | Amount | Balance |"
    ]
    for line in statement.lines:
        rows.append(
            f"| {line.date:%Y%m%d} | {line.txn_id:<11} | {line.kind.value:<4} "
            f"| {format_amount(line.amount):>6} | {format_amount(line.balance):>7} |"
        )
    return "\n".join(rows)


class ConsoleApp:
    """
    Menu loop over a BankingEngine. Streams and clock are injectable
    """

    MENU = (
        "[I] Input transactions\n"
        "[D] Define interest rules\n"
        "[P] Print statement\n"
        "[Q] Quit"
    )

    def __init__(
        self,
        engine: BankingEngine,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
        today: Callable[[], date] = date.today
    ):
        self.engine = engine
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout
        self.today = today

    def _print(self, text: str = "") -> None:
        print(text, file=self.stdout)

    def _prompt(self, text: str) -> Optional[str]:
        """Print a prompt and read one line; None on end of input"""
        self._print(text)
        self.stdout.write("> ")
        self.stdout.flush()
        line = self.stdin.readline()
        if not line:
            return None
        return line.strip()

    def run(self) -> None:
        greeting = "Welcome to AwesomeGIC Bank! What would you like to do?"
        while True:
            choice = self._prompt(f"{greeting}\n{self.MENU}")
            if choice is None:
                return
            choice = choice.upper()

            if choice == "I":
                self.input_transactions()
            elif choice == "D":
                self.define_interest_rules()
            elif choice == "P":
                self.print_statement()
            elif choice == "Q":
                self._print("Thank you for banking with AwesomeGIC Bank.")
                self._print("Have a nice day!")
                return
            else:
                self._print("Invalid choice. Please select a valid option.")
            greeting = "Is there anything else you'd like to do?"

    def input_transactions(self) -> None:
        while True:
            line = self._prompt(
                "Please enter transaction details in <Date>|<Account>|<Type>|<Amount> format\n"
                "(or enter blank to go back to main menu):"
            )
            if not line:
                return
            try:
                command = parse_transaction(line)
                self.engine.execute(command)
            except LedgerError as e:
                self._print(str(e))
                continue
            self._print(render_account(command.account_id, self.engine))

    def define_interest_rules(self) -> None:
        line = self._prompt(
            "Please enter interest rules details in <Date>|<RuleId>|<Rate in %> format\n"
            "(or enter blank to go back to main menu):"
        )
        if not line:
            return
        try:
            rules = self.engine.execute(parse_rule(line))
        except LedgerError as e:
            self._print(str(e))
            return
        self._print(render_rules(rules))

    def print_statement(self) -> None:
        line = self._prompt(
            "Please enter account and month to generate the statement <Account>|<Month>\n"
            "(or enter blank to go back to main menu):"
        )
        if not line:
            return
        try:
            statement = self.engine.execute(parse_statement_request(line, self.today()))
        except LedgerError as e:
            self._print(str(e))
            return
        self._print(render_statement(statement))


def main(config: Optional[LedgerConfig] = None) -> None:
    """Console script entry point"""
    config = config or get_config()
    # Keep the interactive console readable unless logs go to a file
    level = config.log_level if config.log_file else "WARNING"
    setup_logging(level=level, fmt=config.log_format, log_file=config.log_file)
    ConsoleApp(BankingEngine(config)).run()
