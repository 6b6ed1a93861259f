"""Unit tests for the underwriting facade"""

import pytest
from prometheus_client import REGISTRY
from finsight_engine.domain.models import RiskLevel, Severity
from finsight_engine.domain.exceptions import InvalidArgumentError
from finsight_engine.service import analyze_application


def _sample(name, labels=None):
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


def test_analyze_application_single_account(alert_thresholds, application_data, sos_data, sample_transactions, as_of):
    """Test complete flow for one healthy payroll account"""
    accounts = [{"transactions": sample_transactions, "opening_balance": 1000, "account_id": "chk-1"}]

    assessment = analyze_application(application_data, accounts, sos_data, as_of=as_of, thresholds=alert_thresholds)

    assert len(assessment.risk_profiles) == 1
    assert assessment.risk_profiles[0].risk_level == RiskLevel.VERY_LOW
    assert assessment.veritas_scores[0].grade == "A"

    report = assessment.reports[0]
    assert report.id == "chk-1"
    assert report.risk_analysis.nsf_count == 0
    assert report.veritas_score.score == assessment.veritas_scores[0].score
    assert report.analysis.balance_analysis.negative_day_count == 0

    # $15k of deposits over 85 days annualizes to ~$64k against a stated $120k
    assert [alert.code for alert in assessment.alerts] == ["GROSS_ANNUAL_REVENUE_MISMATCH"]
    assert assessment.alerts[0].severity == Severity.HIGH
    assert assessment.alerts[0].account_id == "chk-1"


def test_analyze_application_multiple_accounts(
    alert_thresholds, application_data, sample_transactions, nsf_transactions, as_of
):
    """Test per-account results stay index-aligned and cross-report alerts run"""
    accounts = [
        {"transactions": sample_transactions, "opening_balance": 1000, "account_id": "chk-1"},
        {"transactions": nsf_transactions, "opening_balance": 0, "account_id": "chk-2"},
    ]

    assessment = analyze_application(application_data, accounts, as_of=as_of, thresholds=alert_thresholds)

    assert [p.risk_level for p in assessment.risk_profiles] == [RiskLevel.VERY_LOW, RiskLevel.HIGH]
    assert [r.id for r in assessment.reports] == ["chk-1", "chk-2"]

    codes = [alert.code for alert in assessment.alerts]
    assert "HIGH_NSF_COUNT" in codes
    assert "NEGATIVE_BALANCE_DAYS" in codes
    assert "INCONSISTENT_NSF_PATTERN" in codes
    assert "BALANCE_INCONSISTENCY" in codes
    assert "MULTI_ACCOUNT_HIGH_RISK" not in codes  # one of two is not a majority

    nsf_alert = next(a for a in assessment.alerts if a.code == "HIGH_NSF_COUNT")
    assert nsf_alert.account_index == 1


def test_analyze_application_parses_transaction_records(alert_thresholds, as_of):
    """Test raw parser dicts are accepted and unusable records skipped"""
    accounts = [
        {
            "transactions": [
                {"date": "2024-01-01", "description": "Deposit", "amount": "500.00"},
                {"date": "not a date", "description": "Broken", "amount": -9999},
                {"date": "2024-01-02", "description": "Utility", "amount": -200},
            ],
            "opening_balance": 1000,
        }
    ]

    assessment = analyze_application({}, accounts, as_of=as_of, thresholds=alert_thresholds)

    profile = assessment.risk_profiles[0]
    assert profile.average_daily_balance == 1400.0
    assert profile.period_days == 2
    assert assessment.reports[0].id is None


def test_analyze_application_no_accounts(alert_thresholds, application_data, as_of):
    """Test an application without accounts yields an empty assessment"""
    assessment = analyze_application(application_data, [], as_of=as_of, thresholds=alert_thresholds)

    assert assessment.risk_profiles == []
    assert assessment.alerts == []


def test_analyze_application_rejects_invalid_input(alert_thresholds):
    with pytest.raises(InvalidArgumentError):
        analyze_application({}, "accounts", thresholds=alert_thresholds)

    with pytest.raises(InvalidArgumentError):
        analyze_application({}, [{"transactions": "none", "opening_balance": 0}], thresholds=alert_thresholds)

    with pytest.raises(InvalidArgumentError):
        analyze_application({}, [{"transactions": [], "opening_balance": "lots"}], thresholds=alert_thresholds)


def test_analyze_application_records_metrics(alert_thresholds, application_data, nsf_transactions, as_of):
    """Test risk profiles and alerts are counted"""
    high_before = _sample("finsight_risk_profiles_total", {"risk_level": "HIGH"})
    alerts_before = _sample("finsight_alerts_total", {"severity": "HIGH"})
    runs_before = _sample("finsight_assessment_duration_seconds_count")

    assessment = analyze_application(
        application_data,
        [{"transactions": nsf_transactions, "opening_balance": 0}],
        as_of=as_of,
        thresholds=alert_thresholds,
    )

    high_alerts = sum(1 for a in assessment.alerts if a.severity == Severity.HIGH)
    assert _sample("finsight_risk_profiles_total", {"risk_level": "HIGH"}) == high_before + 1
    assert _sample("finsight_alerts_total", {"severity": "HIGH"}) == alerts_before + high_alerts
    assert _sample("finsight_assessment_duration_seconds_count") == runs_before + 1


def test_analyze_application_report_matches_profile(alert_thresholds, nsf_transactions, as_of):
    """Test each report reflects the account's own balance walk and income signal"""
    accounts = [{"transactions": nsf_transactions, "opening_balance": 0, "account_id": "chk-2"}]

    assessment = analyze_application({}, accounts, as_of=as_of, thresholds=alert_thresholds)

    profile, report = assessment.risk_profiles[0], assessment.reports[0]
    assert report.analysis.balance_analysis.negative_day_count == 6
    assert report.average_daily_balance == profile.average_daily_balance
    assert report.net_cash_flow == -1675.0
    assert report.income_stability.level == "INSUFFICIENT_DATA"
    assert assessment.veritas_scores[0].component_scores.stability_score == 0


def test_analyze_application_cash_flow_alerts(alert_thresholds, application_data, nsf_transactions, as_of):
    """Test an account with no deposits raises cash flow and debt service alerts"""
    accounts = [{"transactions": nsf_transactions, "opening_balance": 0}]

    assessment = analyze_application(application_data, accounts, as_of=as_of, thresholds=alert_thresholds)

    by_code = {alert.code: alert for alert in assessment.alerts}
    assert by_code["NEGATIVE_CASH_FLOW"].severity == Severity.MEDIUM
    assert by_code["HIGH_DEBT_SERVICE_RATIO"].severity == Severity.CRITICAL
    assert "INCOME_INSTABILITY" not in by_code


def test_analyze_application_regular_income_is_not_flagged(
    alert_thresholds, application_data, sample_transactions, as_of
):
    accounts = [{"transactions": sample_transactions, "opening_balance": 1000}]

    assessment = analyze_application(application_data, accounts, as_of=as_of, thresholds=alert_thresholds)

    assert assessment.reports[0].income_stability.stability_score == 100
    assert assessment.reports[0].net_cash_flow == 9800.0
