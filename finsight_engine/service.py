"""Underwriting facade - one call from raw accounts to risk profiles, scores and alerts"""

import time
from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Sequence

from finsight_engine.domain.alerts import AlertsEngine
from finsight_engine.domain.exceptions import InvalidArgumentError
from finsight_engine.domain.income_stability import estimate_income_stability
from finsight_engine.domain.models import Alert, RiskProfile, Transaction, VeritasInputs, VeritasScore
from finsight_engine.domain.schemas import FinsightReport, parse_sos_data
from finsight_engine.domain.scoring import score_account
from finsight_engine.domain.thresholds import AlertThresholds
from finsight_engine.domain.validation import require_transactions
from finsight_engine.domain.veritas import calculate_veritas_score
from finsight_engine.infrastructure.observability.logging import log_assessment
from finsight_engine.infrastructure.observability.metrics import (
    assessment_duration_histogram,
    record_alerts,
    record_risk_profile,
)


@dataclass(frozen=True)
class ApplicationAssessment:
    """Everything computed for one application, index-aligned per account"""

    risk_profiles: List[RiskProfile] = field(default_factory=list)
    veritas_scores: List[VeritasScore] = field(default_factory=list)
    reports: List[FinsightReport] = field(default_factory=list)
    alerts: List[Alert] = field(default_factory=list)


def _coerce_transactions(raw: Any, account_index: int) -> List[Transaction]:
    """Accept Transaction objects or parser dicts; unusable dict records are skipped"""
    if not isinstance(raw, (list, tuple)):
        raise InvalidArgumentError(
            f"Account {account_index} transactions must be a list, got {type(raw).__name__}"
        )
    return require_transactions(raw)


def analyze_application(
    application_data: Any,
    accounts: Sequence[Mapping[str, Any]],
    sos_data: Any = None,
    *,
    as_of: Optional[date] = None,
    alerts_engine: Optional[AlertsEngine] = None,
    thresholds: Optional[AlertThresholds] = None,
) -> ApplicationAssessment:
    """
    Assess every bank account attached to an application.

    Flow:
    1. Score each account (NSF, totals, balance walk -> RiskProfile)
    2. Estimate income stability and compute the Veritas score from it and the profile
    3. Build one finsight report per account
    4. Run the alerts engine over the reports and registry data
    5. Record metrics and log the outcome

    Each account is a mapping with "transactions", "opening_balance" and an
    optional "account_id" / "sos_data".

    Raises:
        InvalidArgumentError: accounts is not a list, or an account's inputs are invalid
    """
    start_time = time.time()

    if not isinstance(accounts, (list, tuple)):
        raise InvalidArgumentError(f"Accounts must be a list, got {type(accounts).__name__}")

    engine = alerts_engine or AlertsEngine(thresholds)

    risk_profiles: List[RiskProfile] = []
    veritas_scores: List[VeritasScore] = []
    reports: List[FinsightReport] = []

    for account_index, account in enumerate(accounts):
        transactions = _coerce_transactions(account.get("transactions"), account_index)
        opening_balance = account.get("opening_balance", 0)

        # 1. Risk profile and the balance walk it came from
        profile, projection = score_account(transactions, opening_balance)

        # 2. Veritas score
        stability = estimate_income_stability(transactions)
        veritas = calculate_veritas_score(
            VeritasInputs(
                nsf_count=profile.nsf_count,
                average_balance=profile.average_daily_balance,
                stability_ratio=stability.stability_ratio,
            ),
        )

        # 3. Finsight report
        account_id = account.get("account_id")
        report = FinsightReport.from_risk_profile(
            profile,
            account_id=str(account_id) if account_id is not None else None,
            veritas=veritas,
            negative_day_count=projection.negative_day_count,
            sos_data=parse_sos_data(account.get("sos_data")),
            income_stability=stability,
        )

        risk_profiles.append(profile)
        veritas_scores.append(veritas)
        reports.append(report)

    # 4. Alerts
    alerts = engine.generate_alerts(application_data, reports, sos_data, as_of=as_of)

    # 5. Metrics and logs
    duration = time.time() - start_time
    for profile in risk_profiles:
        record_risk_profile(profile)
    record_alerts(alerts)
    assessment_duration_histogram.observe(duration)

    risk_levels: Dict[str, int] = dict(Counter(p.risk_level.value for p in risk_profiles))
    alert_counts: Dict[str, int] = dict(Counter(a.severity.value for a in alerts))
    log_assessment(len(accounts), risk_levels, alert_counts, duration * 1000)

    return ApplicationAssessment(
        risk_profiles=risk_profiles,
        veritas_scores=veritas_scores,
        reports=reports,
        alerts=alerts,
    )
