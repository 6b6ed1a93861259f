"""Pytest fixtures for testing"""

import pytest
from datetime import date, timedelta
from typing import Any, Callable, Dict, Optional

from finsight_engine.domain.models import Transaction
from finsight_engine.domain.thresholds import AlertThresholds


@pytest.fixture
def as_of() -> date:
    """Fixed evaluation date so registry-age rules are deterministic"""
    return date(2024, 6, 15)


@pytest.fixture
def alert_thresholds() -> AlertThresholds:
    """Default table, independent of any FINSIGHT_ environment overrides"""
    return AlertThresholds()


@pytest.fixture
def sample_transactions() -> list[Transaction]:
    """Sample 90-day statement: bi-weekly payroll, weekly spending"""
    base_date = date(2024, 1, 1)
    transactions = []

    # Bi-weekly payroll deposits
    for period in range(6):
        transactions.append(
            Transaction(
                date=base_date + timedelta(days=period * 14),
                description="ACME PAYROLL DIRECT DEP",
                amount=2500.0,
            )
        )

    # Regular spending
    for day in range(0, 90, 7):
        transactions.append(
            Transaction(
                date=base_date + timedelta(days=day),
                description="Grocery Store",
                amount=-400.0,
            )
        )

    return transactions


@pytest.fixture
def nsf_transactions() -> list[Transaction]:
    """Statement with five bounced payments that drives the balance negative"""
    base_date = date(2024, 3, 1)
    return [
        Transaction(date=base_date + timedelta(days=i), description="NSF Fee", amount=-35.0)
        for i in range(5)
    ] + [Transaction(date=base_date + timedelta(days=5), description="Rent", amount=-1500.0)]


@pytest.fixture
def application_data() -> Dict[str, Any]:
    """Complete self-reported application (camelCase wire shape)"""
    return {
        "statedAnnualRevenue": 120000,
        "businessStartDate": "2019-03-01",
        "businessName": "Acme Widgets LLC",
        "industry": "Manufacturing",
        "requestedAmount": 50000,
    }


@pytest.fixture
def sos_data() -> Dict[str, Any]:
    """Registry result consistent with application_data"""
    return {
        "matchedBusinessName": "ACME WIDGETS, L.L.C.",
        "registrationDate": "2019-03-12",
        "status": "Active",
        "businessType": "LLC",
    }


@pytest.fixture
def make_report() -> Callable[..., Dict[str, Any]]:
    """Factory for finsight report payloads; defaults describe a healthy account"""

    def _make_report(
        account_id: Optional[str] = None,
        total_deposits: float = 30000.0,
        period_days: int = 90,
        nsf_count: int = 0,
        average_daily_balance: float = 8000.0,
        withdrawal_ratio: float = 0.7,
        risk_score: Optional[int] = 0,
        risk_level: Optional[str] = "VERY_LOW",
        veritas_score: Optional[int] = 85,
        negative_day_count: int = 0,
        total_withdrawals: Optional[float] = None,
        net_cash_flow: Optional[float] = None,
        stability_score: Optional[float] = None,
    ) -> Dict[str, Any]:
        report: Dict[str, Any] = {
            "analysis": {
                "totalDeposits": total_deposits,
                "periodDays": period_days,
                "balanceAnalysis": {"negativeDayCount": negative_day_count},
            },
            "riskAnalysis": {
                "nsfCount": nsf_count,
                "averageDailyBalance": average_daily_balance,
                "withdrawalRatio": withdrawal_ratio,
                "riskScore": risk_score,
                "riskLevel": risk_level,
            },
        }
        if account_id is not None:
            report["id"] = account_id
        if veritas_score is not None:
            report["veritasScore"] = {"score": veritas_score, "grade": "A"}
        if total_withdrawals is not None:
            report["analysis"]["financialSummary"] = {"totalWithdrawals": total_withdrawals}
        if net_cash_flow is not None:
            report["riskAnalysis"]["netCashFlow"] = net_cash_flow
        if stability_score is not None:
            report["incomeStability"] = {"stabilityScore": stability_score, "level": "MODERATE"}
        return report

    return _make_report
