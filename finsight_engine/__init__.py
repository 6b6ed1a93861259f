"""
FinSight scoring engine - per-account risk profiles, Veritas scores and
underwriting alerts for small-business lending applications
"""

from finsight_engine.domain.alerts import (
    AlertsEngine,
    generate_alerts,
    sort_alerts_by_severity,
    summarize_alerts,
)
from finsight_engine.domain.balance import project_average_balance
from finsight_engine.domain.cross_report import analyze_cross_report
from finsight_engine.domain.exceptions import DomainException, InvalidArgumentError, MalformedRecordError
from finsight_engine.domain.income_stability import estimate_income_stability
from finsight_engine.domain.models import (
    Alert,
    BalanceProjection,
    DepositWithdrawalTotals,
    EvaluationContext,
    IncomeStability,
    RiskLevel,
    RiskProfile,
    Severity,
    Transaction,
    VeritasInputs,
    VeritasScore,
)
from finsight_engine.domain.nsf import detect_nsf
from finsight_engine.domain.schemas import ApplicationData, FinsightReport, SOSVerificationResult
from finsight_engine.domain.scoring import calculate_risk_score, determine_risk_level, score_account, score_risk
from finsight_engine.domain.thresholds import AlertThresholds, RiskThresholds, VeritasConfig
from finsight_engine.domain.totals import totalize
from finsight_engine.domain.veritas import calculate_veritas_score, from_credit_scale, to_credit_scale
from finsight_engine.service import ApplicationAssessment, analyze_application

__all__ = [
    # Models
    "Transaction",
    "DepositWithdrawalTotals",
    "BalanceProjection",
    "RiskLevel",
    "RiskProfile",
    "VeritasInputs",
    "VeritasScore",
    "IncomeStability",
    "Severity",
    "EvaluationContext",
    "Alert",
    "ApplicationData",
    "FinsightReport",
    "SOSVerificationResult",
    # Thresholds
    "RiskThresholds",
    "VeritasConfig",
    "AlertThresholds",
    # Exceptions
    "DomainException",
    "InvalidArgumentError",
    "MalformedRecordError",
    # Per-account scoring
    "detect_nsf",
    "totalize",
    "project_average_balance",
    "calculate_risk_score",
    "determine_risk_level",
    "score_account",
    "score_risk",
    "estimate_income_stability",
    # Veritas
    "calculate_veritas_score",
    "to_credit_scale",
    "from_credit_scale",
    # Alerts
    "AlertsEngine",
    "generate_alerts",
    "sort_alerts_by_severity",
    "summarize_alerts",
    "analyze_cross_report",
    # Facade
    "ApplicationAssessment",
    "analyze_application",
]
