"""
FastAPI REST API Module

Provides REST API endpoints for posting transactions, defining interest
rules and generating monthly statements. Runs on port 8090 by default.
"""

from datetime import datetime, timezone
from typing import Optional
from fastapi import Depends, FastAPI, HTTPException, Request, status
from pydantic import BaseModel, Field
import uvicorn

from .config import LedgerConfig, get_config
from .engine import BankingEngine, RequestStatement
from .errors import AccountNotFound, LedgerError, NoApplicableRate
from .money import ZERO, format_amount
from .parsing import build_rule, build_transaction, parse_date
from .rates import RateRule
from .statements import Statement
from . import __version__


# Pydantic models for API requests
class TransactionRequest(BaseModel):
    date: str = Field(..., description="Posting date in YYYYMMDD format")
    account: str = Field(..., min_length=1)
    type: str = Field(..., description="D for deposit, W for withdrawal")
    amount: str = Field(..., description="Decimal amount as string")


class InterestRuleRequest(BaseModel):
    date: str = Field(..., description="Effective date in YYYYMMDD format")
    rule_id: str = Field(..., min_length=1)
    rate: str = Field(..., description="Annual rate in percent, as string")


def _rule_to_dict(rule: RateRule) -> dict:
    return {
        "date": rule.effective_date.strftime("%Y%m%d"),
        "rule_id": rule.rule_id,
        "rate": format_amount(rule.rate)
    }


def _statement_to_dict(statement: Statement) -> dict:
    return {
        "account": statement.account_id,
        "year": statement.year,
        "month": statement.month,
        "opening_balance": format_amount(statement.opening_balance),
        "closing_balance": format_amount(statement.closing_balance),
        "interest": format_amount(statement.accrual.accrued_amount),
        "interest_posted": statement.interest_posted,
        "lines": [
            {
                "date": line.date.strftime("%Y%m%d"),
                "txn_id": line.txn_id,
                "type": line.kind.value,
                "amount": format_amount(line.amount),
                "balance": format_amount(line.balance),
                "provisional": line.provisional
            }
            for line in statement.lines
        ]
    }


def _http_error(e: LedgerError) -> HTTPException:
    if isinstance(e, (AccountNotFound, NoApplicableRate)):
        return HTTPException(status_code=404, detail=str(e))
    return HTTPException(status_code=400, detail=str(e))


def get_engine(request: Request) -> BankingEngine:
    return request.app.state.engine


def create_app(engine: Optional[BankingEngine] = None) -> FastAPI:
    """Create and configure the FastAPI application"""

    app = FastAPI(
        title="GIC Ledger API",
        description="Account ledger with month-end interest accrual",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc"
    )
    app.state.engine = engine or BankingEngine()

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}

    @app.get("/")
    async def root():
        """Root endpoint with system information"""
        return {
            "system": "GIC Ledger",
            "version": __version__,
            "endpoints": {
                "docs": "/docs",
                "health": "/health",
                "transactions": "/transactions",
                "interest_rules": "/interest-rules",
                "statements": "/accounts/{account}/statements/{month}"
            }
        }

    @app.post("/transactions", status_code=status.HTTP_201_CREATED)
    async def post_transaction(
        request: TransactionRequest,
        engine: BankingEngine = Depends(get_engine)
    ):
        """Post a deposit or withdrawal"""
        try:
            command = build_transaction(request.date, request.account, request.type, request.amount)
            result = engine.execute(command)
        except LedgerError as e:
            raise _http_error(e)

        return {
            "txn_id": result.txn_id,
            "account": command.account_id,
            "balance": format_amount(result.balance)
        }

    @app.get("/accounts/{account}/transactions")
    async def get_transactions(
        account: str,
        engine: BankingEngine = Depends(get_engine)
    ):
        """Get all postings of an account with running balance"""
        try:
            postings = engine.ledger.postings_for(account)
        except LedgerError as e:
            raise _http_error(e)

        result = []
        balance = ZERO
        for posting in postings:
            balance += posting.signed_amount
            result.append({
                "date": posting.date.strftime("%Y%m%d"),
                "txn_id": posting.txn_id,
                "type": posting.kind.value,
                "amount": format_amount(posting.amount),
                "balance": format_amount(balance)
            })
        return {"account": account, "transactions": result}

    @app.post("/interest-rules", status_code=status.HTTP_201_CREATED)
    async def define_interest_rule(
        request: InterestRuleRequest,
        engine: BankingEngine = Depends(get_engine)
    ):
        """Define (or replace) the rule for an effective date"""
        try:
            rules = engine.execute(build_rule(request.date, request.rule_id, request.rate))
        except LedgerError as e:
            raise _http_error(e)
        return {"rules": [_rule_to_dict(rule) for rule in rules]}

    @app.get("/interest-rules")
    async def list_interest_rules(engine: BankingEngine = Depends(get_engine)):
        """Get all rules ordered by effective date"""
        return {"rules": [_rule_to_dict(rule) for rule in engine.rules()]}

    @app.get("/interest-rules/{day}")
    async def rate_on(day: str, engine: BankingEngine = Depends(get_engine)):
        """Get the rate in effect on a day"""
        try:
            rate = engine.rate_on(parse_date(day))
        except LedgerError as e:
            raise _http_error(e)
        return {"date": day, "rate": format_amount(rate)}

    @app.get("/accounts/{account}/statements/{month}")
    async def get_statement(
        account: str,
        month: int,
        year: Optional[int] = None,
        as_of: Optional[str] = None,
        preview: bool = False,
        engine: BankingEngine = Depends(get_engine)
    ):
        """
        Generate a monthly statement

        Posts month-end interest when `as_of` (default: today) is the last
        day of the month, unless `preview` is set.
        """
        try:
            current_date = parse_date(as_of) if as_of else datetime.now(timezone.utc).date()
            statement = engine.execute(RequestStatement(
                account_id=account,
                month=month,
                current_date=current_date,
                year=year,
                commit=not preview
            ))
        except LedgerError as e:
            raise _http_error(e)
        return _statement_to_dict(statement)

    return app


app = create_app()


def run_server(host: Optional[str] = None, port: Optional[int] = None, debug: bool = False,
               config: Optional[LedgerConfig] = None):
    """Run the FastAPI server"""
    config = config or get_config()
    uvicorn.run(
        "gic_ledger.api:app",
        host=host or config.api_host,
        port=port or config.api_port,
        reload=debug,
        log_level=config.log_level.lower()
    )
