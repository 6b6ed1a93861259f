"""Cross-report analysis - patterns only visible when comparing accounts"""

from typing import Callable, List, Optional, Sequence, Tuple

from finsight_engine.domain.models import Alert, RiskLevel, Severity
from finsight_engine.domain.schemas import FinsightReport
from finsight_engine.domain.scoring import determine_risk_level
from finsight_engine.domain.thresholds import DEFAULT_ALERT_THRESHOLDS, AlertThresholds
from finsight_engine.utils.money import round_half_up

IndexedReport = Tuple[int, FinsightReport]
CrossReportRule = Callable[[Sequence[IndexedReport], AlertThresholds], Optional[Alert]]


def check_nsf_consistency(reports: Sequence[IndexedReport], thresholds: AlertThresholds) -> Optional[Alert]:
    known = [(index, r.risk_analysis.nsf_count) for index, r in reports if r.risk_analysis.nsf_count is not None]
    if len(known) < 2:
        return None

    counts = [count for _, count in known]
    spread = max(counts) - min(counts)
    if spread < thresholds.nsf_spread:
        return None

    return Alert(
        code="INCONSISTENT_NSF_PATTERN",
        severity=Severity.MEDIUM,
        message=f"NSF counts vary widely across accounts ({min(counts)} to {max(counts)})",
        data={
            "nsfCounts": counts,
            "accountIndexes": [index for index, _ in known],
            "spread": spread,
            "threshold": thresholds.nsf_spread,
        },
    )


def check_balance_consistency(reports: Sequence[IndexedReport], thresholds: AlertThresholds) -> Optional[Alert]:
    """
    Flags accounts whose average balances differ by a large multiple.

    Requires a positive highest balance and an absolute spread above the
    configured minimum, so small accounts are not flagged for noise.
    """
    known = [(index, r.average_daily_balance) for index, r in reports if r.average_daily_balance is not None]
    if len(known) < 2:
        return None

    balances = [balance for _, balance in known]
    highest, lowest = max(balances), min(balances)
    spread = highest - lowest
    if highest <= 0 or spread <= thresholds.balance_variance_min_spread:
        return None
    if lowest > 0 and highest / lowest <= thresholds.balance_variance_multiple:
        return None

    return Alert(
        code="BALANCE_INCONSISTENCY",
        severity=Severity.MEDIUM,
        message=f"Average balances vary significantly across accounts (${lowest:,.2f} to ${highest:,.2f})",
        data={
            "averageBalances": balances,
            "accountIndexes": [index for index, _ in known],
            "lowestBalance": lowest,
            "highestBalance": highest,
            "ratio": round_half_up(highest / lowest, 2) if lowest > 0 else None,
        },
    )


def _risk_level(report: FinsightReport) -> Optional[RiskLevel]:
    if report.risk_analysis.risk_level is not None:
        return report.risk_analysis.risk_level
    if report.risk_analysis.risk_score is not None:
        return determine_risk_level(report.risk_analysis.risk_score)
    return None


def check_risk_concentration(reports: Sequence[IndexedReport], thresholds: AlertThresholds) -> Optional[Alert]:
    """HIGH when most accounts are high-risk, CRITICAL when all of them are"""
    total = len(reports)
    high_risk = [index for index, r in reports if _risk_level(r) == RiskLevel.HIGH]
    if len(high_risk) * 2 <= total:
        return None

    severity = Severity.CRITICAL if len(high_risk) == total else Severity.HIGH
    return Alert(
        code="MULTI_ACCOUNT_HIGH_RISK",
        severity=severity,
        message=f"{len(high_risk)} of {total} accounts are high risk",
        data={"highRiskCount": len(high_risk), "totalAccounts": total, "accountIndexes": high_risk},
    )


CROSS_REPORT_RULES: Sequence[CrossReportRule] = (
    check_nsf_consistency,
    check_balance_consistency,
    check_risk_concentration,
)


def analyze_cross_report(
    reports: Sequence[IndexedReport],
    thresholds: AlertThresholds = DEFAULT_ALERT_THRESHOLDS,
) -> List[Alert]:
    """
    Compare accounts of one application. reports is [(original_index, report)].

    Alerts carry no account_index since they describe the set, not one account.
    """
    if len(reports) < 2:
        return []

    alerts = []
    for rule in CROSS_REPORT_RULES:
        alert = rule(reports, thresholds)
        if alert is not None:
            alerts.append(alert)
    return alerts
