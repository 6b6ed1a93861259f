"""Prometheus metrics for monitoring risk distribution, alert volume, and assessment latency"""

from typing import Iterable

from prometheus_client import Counter, Histogram

from finsight_engine.domain.models import Alert, RiskProfile

# Scoring metrics
risk_profile_counter = Counter(
    "finsight_risk_profiles_total",
    "Account risk profiles computed",
    ["risk_level"],  # VERY_LOW | LOW | MEDIUM | HIGH
)

# Alert metrics
alert_counter = Counter(
    "finsight_alerts_total",
    "Alerts raised",
    ["severity"],  # CRITICAL | HIGH | MEDIUM | LOW
)

assessment_duration_histogram = Histogram(
    "finsight_assessment_duration_seconds",
    "End-to-end application assessment time",
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
)


def record_risk_profile(profile: RiskProfile) -> None:
    risk_profile_counter.labels(risk_level=profile.risk_level.value).inc()


def record_alerts(alerts: Iterable[Alert]) -> None:
    """Count alerts by severity for dashboarding alert volume"""
    for alert in alerts:
        alert_counter.labels(severity=alert.severity.value).inc()
