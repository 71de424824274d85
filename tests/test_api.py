"""
Integration tests for the GIC Ledger API
Tests end-to-end workflows using FastAPI TestClient
"""

import pytest
from fastapi.testclient import TestClient

from gic_ledger.api import create_app
from gic_ledger.config import LedgerConfig
from gic_ledger.engine import BankingEngine


@pytest.fixture
def client():
    """Create a test client backed by a fresh engine"""
    app = create_app(BankingEngine(LedgerConfig()))
    return TestClient(app)


def post_transaction(client, date, account, type_, amount):
    return client.post("/transactions", json={
        "date": date, "account": account, "type": type_, "amount": amount
    })


class TestHealthEndpoints:
    """Test basic health and root endpoints"""

    def test_health(self, client):
        """Test health endpoint"""
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "healthy"

    def test_root(self, client):
        """Test root endpoint"""
        r = client.get("/")
        assert r.status_code == 200
        data = r.json()
        assert data["system"] == "GIC Ledger"
        assert "endpoints" in data


class TestTransactionFlow:
    """End-to-end posting tests"""

    def test_deposit(self, client):
        """Test a deposit returns the posting id and balance"""
        r = post_transaction(client, "20230101", "AC1", "D", "100")
        assert r.status_code == 201
        assert r.json() == {"txn_id": "20230101-01", "account": "AC1", "balance": "100.00"}

    def test_insufficient_funds(self, client):
        """Test overdraw returns 400 and leaves the balance alone"""
        post_transaction(client, "20230101", "AC1", "D", "100")
        post_transaction(client, "20230101", "AC1", "W", "100")

        r = post_transaction(client, "20230101", "AC1", "W", "50")
        assert r.status_code == 400
        assert "Insufficient balance" in r.json()["detail"]

        r = client.get("/accounts/AC1/transactions")
        assert r.json()["transactions"][-1]["balance"] == "0.00"

    @pytest.mark.parametrize("payload", [
        {"date": "20230231", "account": "AC1", "type": "D", "amount": "10"},
        {"date": "20230201", "account": "AC1", "type": "I", "amount": "10"},
        {"date": "20230201", "account": "AC1", "type": "D", "amount": "-10"},
    ])
    def test_invalid_transaction(self, client, payload):
        """Test invalid payloads return 400"""
        r = client.post("/transactions", json=payload)
        assert r.status_code == 400

    def test_unknown_account_transactions(self, client):
        """Test listing an unknown account returns 404"""
        r = client.get("/accounts/NOPE/transactions")
        assert r.status_code == 404


class TestInterestRuleFlow:
    """End-to-end rate rule tests"""

    def test_define_and_list(self, client):
        """Test rules come back ordered by date"""
        client.post("/interest-rules", json={"date": "20230520", "rule_id": "RULE02", "rate": "1.90"})
        r = client.post("/interest-rules", json={"date": "20230101", "rule_id": "RULE01", "rate": "1.95"})

        assert r.status_code == 201
        assert [rule["rule_id"] for rule in r.json()["rules"]] == ["RULE01", "RULE02"]

        r = client.get("/interest-rules")
        assert r.json()["rules"][1] == {"date": "20230520", "rule_id": "RULE02", "rate": "1.90"}

    def test_rate_on(self, client):
        """Test rate lookup and missing rate"""
        client.post("/interest-rules", json={"date": "20230101", "rule_id": "RULE01", "rate": "1.95"})

        assert client.get("/interest-rules/20230301").json()["rate"] == "1.95"
        assert client.get("/interest-rules/20221231").status_code == 404

    def test_invalid_rate(self, client):
        """Test out-of-range rate returns 400"""
        r = client.post("/interest-rules", json={"date": "20230101", "rule_id": "RULE01", "rate": "100"})
        assert r.status_code == 400


class TestStatementFlow:
    """End-to-end statement tests"""

    def setup_rules_and_postings(self, client):
        client.post("/interest-rules", json={"date": "20230101", "rule_id": "RULE01", "rate": "1.95"})
        post_transaction(client, "20230601", "AC1", "D", "100")

    def test_preview_statement(self, client):
        """Test preview shows provisional interest without posting"""
        self.setup_rules_and_postings(client)

        r = client.get("/accounts/AC1/statements/6", params={"year": 2023, "as_of": "20230630", "preview": True})
        assert r.status_code == 200
        data = r.json()
        assert data["interest"] == "1.95"
        assert data["lines"][-1]["provisional"] is True
        assert not data["interest_posted"]

        r = client.get("/accounts/AC1/transactions")
        assert len(r.json()["transactions"]) == 1

    def test_month_end_statement_posts_interest(self, client):
        """Test statement on the last day of the month credits interest"""
        self.setup_rules_and_postings(client)

        r = client.get("/accounts/AC1/statements/6", params={"as_of": "20230630"})
        data = r.json()
        assert data["interest_posted"]
        assert data["lines"][-1] == {
            "date": "20230630", "txn_id": "20230630-02", "type": "I",
            "amount": "1.95", "balance": "101.95", "provisional": False
        }
        assert data["closing_balance"] == "101.95"

    def test_statement_errors(self, client):
        """Test unknown account and invalid month"""
        self.setup_rules_and_postings(client)

        assert client.get("/accounts/NOPE/statements/6", params={"as_of": "20230630"}).status_code == 404
        assert client.get("/accounts/AC1/statements/13", params={"as_of": "20230630"}).status_code == 400

    @pytest.mark.parametrize("params", [
        {"year": 0, "preview": True},
        {"year": 9999, "as_of": "99991231"},
        {"year": 100000, "as_of": "20230630"},
    ])
    def test_statement_year_out_of_range(self, client, params):
        """Test years outside the calendar answer 400"""
        self.setup_rules_and_postings(client)

        r = client.get("/accounts/AC1/statements/12", params=params)
        assert r.status_code == 400
        assert "Invalid year" in r.json()["detail"]

    def test_oversized_amount(self, client):
        """Test an amount above the maximum answers 400"""
        r = post_transaction(client, "20230101", "AC1", "D", "1e30")
        assert r.status_code == 400
        assert "exceeds the maximum" in r.json()["detail"]
