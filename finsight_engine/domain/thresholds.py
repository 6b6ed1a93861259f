"""
Tunable scoring and alerting tables.

Every number the engines compare against lives here so it can be tuned and
tested without touching the algorithms. Components take one of these tables
as an argument and default to the module-level DEFAULT_* instance.
"""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class RiskThresholds:
    """Additive 0-100 risk score (higher = riskier)"""

    points_per_nsf: int = 30
    low_balance_limit: float = 1000.0  # $1000
    low_balance_points: int = 20
    withdrawal_ratio_limit: float = 0.8
    withdrawal_ratio_points: int = 25
    negative_balance_points: int = 40
    max_score: int = 100

    # Band floors, checked top-down
    high_floor: int = 80
    medium_floor: int = 40
    low_floor: int = 20


@dataclass(frozen=True)
class VeritasConfig:
    """
    Weighted creditworthiness score on a 0-100 scale (higher = better).

    grade_bands is ordered best-first as (floor, grade, level, description, recommendation).
    """

    nsf_weight: float = 0.4
    balance_weight: float = 0.3
    stability_weight: float = 0.3

    nsf_penalty_per_incident: int = 20
    balance_baseline: float = 5000.0  # ADB at which the balance component maxes out

    grade_bands: Tuple[Tuple[int, str, str, str, str], ...] = (
        (80, "A", "EXCELLENT", "Strong financial health with minimal risk", "Approve with preferred terms"),
        (65, "B", "GOOD", "Good financial health with manageable risk", "Approve with standard terms"),
        (50, "C", "FAIR", "Moderate financial health with notable risk factors", "Approve with conditions or additional review"),
        (0, "D", "POOR", "Weak financial health with significant risk", "Decline or require substantial mitigation"),
    )

    # 300-850 bureau-style presentation range
    credit_scale_floor: int = 300
    credit_scale_ceiling: int = 850


@dataclass(frozen=True)
class AlertThresholds:
    """Cut-offs used by the alerts engine and the cross-report analyzer"""

    # Revenue: discrepancy relative to the smaller of stated vs annualized
    revenue_mismatch_pct: float = 50.0
    revenue_mismatch_critical_pct: float = 100.0
    default_period_days: int = 30

    high_nsf_count: int = 3  # at or above
    low_average_balance: float = 500.0
    negative_days_high: int = 5  # at or above → HIGH, any → MEDIUM

    withdrawal_ratio_medium: float = 0.9
    withdrawal_ratio_high: float = 1.1

    negative_cash_flow_high: float = 5000.0  # shortfall beyond this → HIGH, any → MEDIUM

    # Debt service: requested amount at an annual rate, paid monthly, vs monthly net cash flow
    debt_service_annual_rate: float = 0.1
    debt_service_medium: float = 0.4
    debt_service_high: float = 0.6
    debt_service_critical: float = 0.8

    # Income stability score (0-100), checked strictest first
    income_instability_high_below: int = 40
    income_instability_medium_below: int = 55
    income_instability_low_below: int = 70

    veritas_critical_below: int = 30
    veritas_high_below: int = 50
    veritas_medium_below: int = 70

    time_in_business_months: float = 3.0
    newly_registered_months: float = 6.0

    name_similarity_medium: float = 0.8
    name_similarity_high: float = 0.6

    active_statuses: Tuple[str, ...] = (
        "active",
        "active/compliance",
        "active - good standing",
        "good standing",
        "in good standing",
        "current",
        "in existence",
        "existing",
    )
    high_risk_industries: Tuple[str, ...] = (
        "cannabis",
        "marijuana",
        "adult entertainment",
        "gambling",
        "cryptocurrency",
        "money services",
        "pawn shop",
        "check cashing",
        "payday lending",
    )

    # Cross-report
    nsf_spread: int = 3
    balance_variance_multiple: float = 3.0
    balance_variance_min_spread: float = 500.0

    @classmethod
    def from_settings(cls, settings) -> "AlertThresholds":
        """Overlay the env-tunable subset from Settings onto the defaults"""
        return cls(
            revenue_mismatch_pct=settings.revenue_mismatch_pct,
            revenue_mismatch_critical_pct=settings.revenue_mismatch_critical_pct,
            high_nsf_count=settings.high_nsf_count,
            low_average_balance=settings.low_average_balance,
            negative_days_high=settings.negative_days_high,
            time_in_business_months=settings.time_in_business_months,
            nsf_spread=settings.cross_report_nsf_spread,
            balance_variance_multiple=settings.cross_report_balance_multiple,
        )


DEFAULT_RISK_THRESHOLDS = RiskThresholds()
DEFAULT_VERITAS_CONFIG = VeritasConfig()
DEFAULT_ALERT_THRESHOLDS = AlertThresholds()
