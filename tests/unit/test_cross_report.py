"""Unit tests for cross-report analysis"""

import pytest
from finsight_engine.domain.alerts import generate_alerts
from finsight_engine.domain.cross_report import analyze_cross_report
from finsight_engine.domain.models import Severity
from finsight_engine.domain.schemas import parse_finsight_report


def _indexed(*reports):
    return [(index, parse_finsight_report(report)) for index, report in enumerate(reports)]


def _codes(alerts):
    return [alert.code for alert in alerts]


def test_concentration_scenario_two_of_three(alert_thresholds, application_data, make_report, as_of):
    """Test two HIGH accounts out of three raise a concentration alert"""
    reports = [
        make_report("a", risk_level="HIGH", risk_score=85),
        make_report("b", risk_level="HIGH", risk_score=90),
        make_report("c"),
    ]

    alerts = generate_alerts(application_data, reports, as_of=as_of, thresholds=alert_thresholds)

    concentration = [a for a in alerts if a.code == "MULTI_ACCOUNT_HIGH_RISK"]
    assert len(concentration) == 1
    assert concentration[0].severity == Severity.HIGH
    assert concentration[0].account_index is None
    assert concentration[0].data["accountIndexes"] == [0, 1]


def test_concentration_scenario_one_of_three(alert_thresholds, application_data, make_report, as_of):
    """Test one HIGH account out of three is not a concentration"""
    reports = [make_report("a", risk_level="HIGH", risk_score=85), make_report("b"), make_report("c")]

    alerts = generate_alerts(application_data, reports, as_of=as_of, thresholds=alert_thresholds)

    assert "MULTI_ACCOUNT_HIGH_RISK" not in _codes(alerts)


def test_concentration_all_high_is_critical(alert_thresholds, make_report):
    reports = _indexed(make_report(risk_level="HIGH"), make_report(risk_level="HIGH"))

    alerts = analyze_cross_report(reports, alert_thresholds)

    assert _codes(alerts) == ["MULTI_ACCOUNT_HIGH_RISK"]
    assert alerts[0].severity == Severity.CRITICAL


def test_concentration_half_is_not_majority(alert_thresholds, make_report):
    reports = _indexed(make_report(risk_level="HIGH"), make_report(risk_level="MEDIUM"))

    assert analyze_cross_report(reports, alert_thresholds) == []


def test_concentration_derives_level_from_score(alert_thresholds, make_report):
    """Test a report with only a score is banded like a risk profile"""
    reports = _indexed(
        make_report(risk_level=None, risk_score=92),
        make_report(risk_level=None, risk_score=80),
        make_report(risk_level=None, risk_score=10),
    )

    alerts = analyze_cross_report(reports, alert_thresholds)

    assert _codes(alerts) == ["MULTI_ACCOUNT_HIGH_RISK"]
    assert alerts[0].data["highRiskCount"] == 2


@pytest.mark.parametrize("counts,expected", [((0, 3), True), ((1, 5, 2), True), ((0, 2), False), ((4, 4), False)])
def test_inconsistent_nsf_pattern(alert_thresholds, make_report, counts, expected):
    reports = _indexed(*(make_report(nsf_count=count) for count in counts))

    alerts = analyze_cross_report(reports, alert_thresholds)

    assert ("INCONSISTENT_NSF_PATTERN" in _codes(alerts)) is expected


def test_inconsistent_nsf_pattern_ignores_unknown_counts(alert_thresholds, make_report):
    reports = _indexed(make_report(nsf_count=None), make_report(nsf_count=6))

    assert analyze_cross_report(reports, alert_thresholds) == []


@pytest.mark.parametrize(
    "balances,expected",
    [
        ((8000, 1000), True),  # 8x apart
        ((-200, 800), True),  # one account overdrawn
        ((8000, 4000), False),  # only 2x apart
        ((300, 100), False),  # 3x but a $200 spread
        ((-500, -100), False),  # nothing positive
    ],
)
def test_balance_inconsistency(alert_thresholds, make_report, balances, expected):
    reports = _indexed(*(make_report(average_daily_balance=balance) for balance in balances))

    alerts = analyze_cross_report(reports, alert_thresholds)

    assert ("BALANCE_INCONSISTENCY" in _codes(alerts)) is expected


def test_balance_inconsistency_data(alert_thresholds, make_report):
    reports = _indexed(make_report(average_daily_balance=9000), make_report(average_daily_balance=1500))

    alert = analyze_cross_report(reports, alert_thresholds)[0]

    assert alert.code == "BALANCE_INCONSISTENCY"
    assert alert.severity == Severity.MEDIUM
    assert alert.data["lowestBalance"] == 1500
    assert alert.data["highestBalance"] == 9000
    assert alert.data["ratio"] == 6.0


def test_single_report_has_no_cross_alerts(alert_thresholds, make_report):
    reports = _indexed(make_report(risk_level="HIGH", nsf_count=9))

    assert analyze_cross_report(reports, alert_thresholds) == []


def test_cross_report_rule_order(alert_thresholds, make_report):
    reports = _indexed(
        make_report(nsf_count=0, average_daily_balance=9000, risk_level="HIGH"),
        make_report(nsf_count=5, average_daily_balance=-50, risk_level="HIGH"),
    )

    alerts = analyze_cross_report(reports, alert_thresholds)

    assert _codes(alerts) == ["INCONSISTENT_NSF_PATTERN", "BALANCE_INCONSISTENCY", "MULTI_ACCOUNT_HIGH_RISK"]


def test_concentration_accepts_lowercase_levels(alert_thresholds, application_data, make_report, as_of):
    """Test risk levels are matched regardless of case"""
    reports = [
        make_report("a", risk_level="high", risk_score=None),
        make_report("b", risk_level="High", risk_score=None),
        make_report("c", risk_level="low", risk_score=None),
    ]

    alerts = generate_alerts(application_data, reports, as_of=as_of, thresholds=alert_thresholds)

    concentration = [a for a in alerts if a.code == "MULTI_ACCOUNT_HIGH_RISK"]
    assert len(concentration) == 1
    assert concentration[0].data["accountIndexes"] == [0, 1]
