"""
Alerts engine - cross-checks self-reported application data against computed
account financials and business-registry data.

Rules run per finsight report in a fixed order and their alerts are appended
in that order; the returned list is NOT sorted by severity. Callers that need
severity order use sort_alerts_by_severity().
"""

import logging
from collections import Counter
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Sequence

from pydantic import ValidationError

from finsight_engine.config import settings
from finsight_engine.domain.cross_report import analyze_cross_report
from finsight_engine.domain.models import Alert, EvaluationContext, Severity
from finsight_engine.domain.schemas import (
    ApplicationData,
    FinsightReport,
    SOSVerificationResult,
    parse_application_data,
    parse_finsight_report,
    parse_sos_data,
)
from finsight_engine.domain.thresholds import AlertThresholds
from finsight_engine.utils.date_utils import fractional_months_between, months_between
from finsight_engine.utils.money import round_half_up
from finsight_engine.utils.text_utils import name_similarity


@dataclass(frozen=True)
class RuleInputs:
    """
    Everything a single-report rule may look at.

    carries_application_facts is True for the first evaluated report only, so
    application-scoped findings (registry, completeness, industry) are
    reported once instead of once per account.
    """

    application: ApplicationData
    report: FinsightReport
    sos: Optional[SOSVerificationResult]
    thresholds: AlertThresholds
    as_of: date
    carries_application_facts: bool


Rule = Callable[[EvaluationContext, RuleInputs], Optional[Alert]]


def _alert(ctx: EvaluationContext, code: str, severity: Severity, message: str, data: Dict[str, Any]) -> Alert:
    return Alert(
        code=code,
        severity=severity,
        message=message,
        data=data,
        account_index=ctx.report_index,
        account_id=ctx.account_id,
    )


def _account_label(ctx: EvaluationContext) -> str:
    return f"Account {ctx.report_index + 1}"


# --- Financial rules -------------------------------------------------------


def check_revenue_mismatch(ctx: EvaluationContext, inputs: RuleInputs) -> Optional[Alert]:
    """
    Stated annual revenue vs this account's deposits projected to 365 days.

    The discrepancy is measured against the smaller of the two figures, so
    overstating 36k as 120k and understating 120k as 36k score the same.
    """
    t = inputs.thresholds
    stated = inputs.application.stated_annual_revenue
    deposits = inputs.report.analysis.resolved_total_deposits
    if stated is None or stated <= 0 or deposits is None or deposits <= 0:
        return None

    period_days = inputs.report.analysis.resolved_period_days
    if not period_days or period_days <= 0:
        period_days = t.default_period_days

    annualized = deposits / period_days * 365
    discrepancy_pct = abs(stated - annualized) / min(stated, annualized) * 100
    if discrepancy_pct <= t.revenue_mismatch_pct:
        return None

    severity = Severity.CRITICAL if discrepancy_pct > t.revenue_mismatch_critical_pct else Severity.HIGH
    is_overstated = stated > annualized
    direction = "exceeds" if is_overstated else "is below"
    return _alert(
        ctx,
        "GROSS_ANNUAL_REVENUE_MISMATCH",
        severity,
        f"{_account_label(ctx)}: stated annual revenue of ${stated:,.2f} {direction} annualized "
        f"deposits of ${annualized:,.2f} ({discrepancy_pct:.1f}% discrepancy)",
        {
            "discrepancyPercentage": round_half_up(discrepancy_pct),
            "statedAnnualRevenue": stated,
            "annualizedDeposits": round_half_up(annualized),
            "totalDeposits": deposits,
            "periodDays": period_days,
            "isOverstated": is_overstated,
            "threshold": t.revenue_mismatch_pct,
        },
    )


def check_high_nsf_count(ctx: EvaluationContext, inputs: RuleInputs) -> Optional[Alert]:
    nsf_count = inputs.report.risk_analysis.nsf_count
    if nsf_count is None and inputs.carries_application_facts:
        nsf_count = inputs.application.nsf_analysis.nsf_count
    if nsf_count is None or nsf_count < inputs.thresholds.high_nsf_count:
        return None

    return _alert(
        ctx,
        "HIGH_NSF_COUNT",
        Severity.HIGH,
        f"{_account_label(ctx)} has {nsf_count} non-sufficient funds incidents, indicating cash flow strain",
        {"nsfCount": nsf_count, "threshold": inputs.thresholds.high_nsf_count},
    )


def check_low_average_balance(ctx: EvaluationContext, inputs: RuleInputs) -> Optional[Alert]:
    balance = inputs.report.average_daily_balance
    if balance is None and inputs.carries_application_facts:
        balance = inputs.application.balance_analysis.average_balance
    threshold = inputs.thresholds.low_average_balance
    if balance is None or balance >= threshold:
        return None

    return _alert(
        ctx,
        "LOW_AVERAGE_BALANCE",
        Severity.MEDIUM,
        f"{_account_label(ctx)}: average daily balance of ${balance:,.2f} is below ${threshold:,.2f}",
        {
            "averageDailyBalance": balance,
            "threshold": threshold,
            "shortfall": round_half_up(threshold - balance),
        },
    )


def check_negative_balance_days(ctx: EvaluationContext, inputs: RuleInputs) -> Optional[Alert]:
    count = inputs.report.analysis.balance_analysis.negative_day_count
    if count is None and inputs.carries_application_facts:
        count = inputs.application.balance_analysis.negative_day_count
    if not count or count <= 0:
        return None

    severity = Severity.HIGH if count >= inputs.thresholds.negative_days_high else Severity.MEDIUM
    return _alert(
        ctx,
        "NEGATIVE_BALANCE_DAYS",
        severity,
        f"{_account_label(ctx)} had a negative balance on {count} day(s)",
        {"negativeDayCount": count, "highThreshold": inputs.thresholds.negative_days_high},
    )


def check_withdrawal_ratio(ctx: EvaluationContext, inputs: RuleInputs) -> Optional[Alert]:
    t = inputs.thresholds
    ratio = inputs.report.withdrawal_ratio
    if ratio is None or ratio <= t.withdrawal_ratio_medium:
        return None

    severity = Severity.HIGH if ratio > t.withdrawal_ratio_high else Severity.MEDIUM
    return _alert(
        ctx,
        "HIGH_WITHDRAWAL_RATIO",
        severity,
        f"{_account_label(ctx)}: withdrawals are {ratio * 100:.1f}% of deposits",
        {"withdrawalRatio": round_half_up(ratio, 4), "threshold": t.withdrawal_ratio_medium},
    )


def check_negative_cash_flow(ctx: EvaluationContext, inputs: RuleInputs) -> Optional[Alert]:
    net = inputs.report.net_cash_flow
    if net is None or net >= 0:
        return None

    t = inputs.thresholds
    shortfall = abs(net)
    deposits = inputs.report.analysis.resolved_total_deposits
    severity = Severity.HIGH if shortfall > t.negative_cash_flow_high else Severity.MEDIUM
    return _alert(
        ctx,
        "NEGATIVE_CASH_FLOW",
        severity,
        f"{_account_label(ctx)}: negative cash flow of ${shortfall:,.2f}",
        {
            "netCashFlow": net,
            "totalDeposits": deposits or 0,
            "totalWithdrawals": inputs.report.analysis.financial_summary.total_withdrawals or 0,
            "cashFlowRatio": round_half_up(net / deposits, 4) if deposits else 0,
            "highThreshold": t.negative_cash_flow_high,
        },
    )


def check_debt_service(ctx: EvaluationContext, inputs: RuleInputs) -> Optional[Alert]:
    """
    Estimated monthly payment on the requested amount vs the account's net cash flow.

    The payment is requested_amount * annual rate / 12. A net cash flow at or
    below $1 is floored to $1, so a shortfall always reads as CRITICAL.
    """
    requested = inputs.application.requested_amount
    net = inputs.report.net_cash_flow
    if not requested or not net:
        return None

    t = inputs.thresholds
    monthly_payment = requested * t.debt_service_annual_rate / 12
    ratio = monthly_payment / max(net, 1)
    if ratio <= t.debt_service_medium:
        return None

    if ratio > t.debt_service_critical:
        severity = Severity.CRITICAL
    elif ratio > t.debt_service_high:
        severity = Severity.HIGH
    else:
        severity = Severity.MEDIUM
    return _alert(
        ctx,
        "HIGH_DEBT_SERVICE_RATIO",
        severity,
        f"{_account_label(ctx)}: estimated debt service ratio of {ratio * 100:.1f}% may strain cash flow",
        {
            "requestedAmount": requested,
            "estimatedMonthlyPayment": round_half_up(monthly_payment),
            "netCashFlow": net,
            "debtServiceRatio": round_half_up(ratio, 4),
            "maxRecommendedRatio": t.debt_service_medium,
        },
    )


def check_credit_risk(ctx: EvaluationContext, inputs: RuleInputs) -> Optional[Alert]:
    veritas = inputs.report.veritas_score
    if veritas is None or veritas.score is None:
        return None

    t = inputs.thresholds
    score = veritas.score
    if score < t.veritas_critical_below:
        code, severity, label = "VERY_HIGH_CREDIT_RISK", Severity.CRITICAL, "very high"
    elif score < t.veritas_high_below:
        code, severity, label = "HIGH_CREDIT_RISK", Severity.HIGH, "high"
    elif score < t.veritas_medium_below:
        code, severity, label = "MODERATE_CREDIT_RISK", Severity.MEDIUM, "moderate"
    else:
        return None

    return _alert(
        ctx,
        code,
        severity,
        f"{_account_label(ctx)}: Veritas score of {score} indicates {label} credit risk",
        {"veritasScore": score, "grade": veritas.grade},
    )


def check_income_stability(ctx: EvaluationContext, inputs: RuleInputs) -> Optional[Alert]:
    stability = inputs.report.income_stability
    if stability is None or stability.stability_score is None or stability.level == "INSUFFICIENT_DATA":
        return None

    t = inputs.thresholds
    score = stability.stability_score
    if score < t.income_instability_high_below:
        severity, label = Severity.HIGH, "highly irregular"
    elif score < t.income_instability_medium_below:
        severity, label = Severity.MEDIUM, "irregular"
    elif score < t.income_instability_low_below:
        severity, label = Severity.LOW, "somewhat irregular"
    else:
        return None

    return _alert(
        ctx,
        "INCOME_INSTABILITY",
        severity,
        f"{_account_label(ctx)}: income stability score of {score:g} indicates {label} income",
        {
            "stabilityScore": score,
            "level": stability.level,
            "benchmarkScore": t.income_instability_low_below,
            "improvementNeeded": round_half_up(t.income_instability_low_below - score),
        },
    )


# --- Registry rules --------------------------------------------------------


def check_time_in_business(ctx: EvaluationContext, inputs: RuleInputs) -> Optional[Alert]:
    """
    Stated business tenure vs the registry's registration date.

    With a stated start date only month and year are compared. With only a
    stated tenure in months, it is compared to months registered as of as_of.
    """
    sos = inputs.sos
    if sos is None or sos.registration_date is None:
        return None

    application = inputs.application
    registration = sos.registration_date
    data: Dict[str, Any] = {"registrationDate": registration.isoformat()}

    if application.business_start_date is not None:
        discrepancy = months_between(application.business_start_date, registration)
        data["statedStartDate"] = application.business_start_date.isoformat()
    elif application.stated_time_in_business_months is not None:
        registered_months = months_between(registration, inputs.as_of)
        discrepancy = application.stated_time_in_business_months - registered_months
        data["statedTimeInBusinessMonths"] = application.stated_time_in_business_months
        data["registeredMonths"] = registered_months
    else:
        return None

    threshold = inputs.thresholds.time_in_business_months
    if discrepancy <= threshold:
        return None

    data["discrepancyMonths"] = discrepancy
    data["threshold"] = threshold
    return _alert(
        ctx,
        "TIME_IN_BUSINESS_DISCREPANCY",
        Severity.HIGH,
        f"Stated time in business exceeds the registry record by {discrepancy:g} months "
        f"(registered {registration.isoformat()})",
        data,
    )


def check_registry_status(ctx: EvaluationContext, inputs: RuleInputs) -> Optional[Alert]:
    sos = inputs.sos
    if sos is None or not sos.status:
        return None
    if sos.status.strip().lower() in inputs.thresholds.active_statuses:
        return None

    return _alert(
        ctx,
        "BUSINESS_INACTIVE_STATUS",
        Severity.HIGH,
        f"Business registry status is '{sos.status}', not active",
        {
            "status": sos.status,
            "matchedBusinessName": sos.matched_business_name,
            "businessType": sos.business_type,
        },
    )


def check_business_name(ctx: EvaluationContext, inputs: RuleInputs) -> Optional[Alert]:
    sos = inputs.sos
    applied = inputs.application.business_name
    if sos is None or not sos.matched_business_name or not applied:
        return None

    t = inputs.thresholds
    similarity = name_similarity(applied, sos.matched_business_name)
    if similarity >= t.name_similarity_medium:
        return None

    severity = Severity.HIGH if similarity < t.name_similarity_high else Severity.MEDIUM
    return _alert(
        ctx,
        "BUSINESS_NAME_MISMATCH",
        severity,
        f"Applied as '{applied}' but registered as '{sos.matched_business_name}'",
        {
            "appliedName": applied,
            "registeredName": sos.matched_business_name,
            "similarity": round_half_up(similarity, 3),
        },
    )


def check_newly_registered(ctx: EvaluationContext, inputs: RuleInputs) -> Optional[Alert]:
    sos = inputs.sos
    if sos is None or sos.registration_date is None:
        return None

    months_old = fractional_months_between(sos.registration_date, inputs.as_of)
    if months_old < 0 or months_old >= inputs.thresholds.newly_registered_months:
        return None

    return _alert(
        ctx,
        "NEWLY_REGISTERED_BUSINESS",
        Severity.MEDIUM,
        f"Business registered only {months_old:.1f} months ago",
        {"registrationDate": sos.registration_date.isoformat(), "monthsOld": round_half_up(months_old, 1)},
    )


# --- Application rules -----------------------------------------------------


def check_application_completeness(ctx: EvaluationContext, inputs: RuleInputs) -> Optional[Alert]:
    if not inputs.carries_application_facts:
        return None

    application = inputs.application
    missing = []
    if not application.business_name:
        missing.append("business name")
    if not application.industry:
        missing.append("industry")
    if not application.requested_amount:
        missing.append("requested amount")
    if not missing:
        return None

    return _alert(
        ctx,
        "INCOMPLETE_APPLICATION_DATA",
        Severity.LOW,
        f"Missing application data: {', '.join(missing)}",
        {"missingFields": missing},
    )


def check_industry_risk(ctx: EvaluationContext, inputs: RuleInputs) -> Optional[Alert]:
    industry = inputs.application.industry
    if not inputs.carries_application_facts or not industry:
        return None

    lowered = industry.lower()
    matched = next((k for k in inputs.thresholds.high_risk_industries if k in lowered), None)
    if matched is None:
        return None

    return _alert(
        ctx,
        "HIGH_RISK_INDUSTRY",
        Severity.HIGH,
        f"Business operates in a high-risk industry: {industry}",
        {"industry": industry, "matchedKeyword": matched},
    )


# Evaluation order is part of the contract
SINGLE_REPORT_RULES: Sequence[Rule] = (
    check_revenue_mismatch,
    check_high_nsf_count,
    check_low_average_balance,
    check_negative_balance_days,
    check_withdrawal_ratio,
    check_negative_cash_flow,
    check_debt_service,
    check_credit_risk,
    check_income_stability,
    check_time_in_business,
    check_registry_status,
    check_business_name,
    check_newly_registered,
    check_application_completeness,
    check_industry_risk,
)


class AlertsEngine:
    """Runs single-report rules, then cross-report rules, with one bound threshold table"""

    def __init__(self, thresholds: Optional[AlertThresholds] = None, rules: Sequence[Rule] = SINGLE_REPORT_RULES):
        self.thresholds = thresholds or AlertThresholds.from_settings(settings)
        self.rules = tuple(rules)

    def generate_alerts(
        self,
        application_data: Any,
        finsight_reports: Any,
        sos_data: Any = None,
        *,
        as_of: Optional[date] = None,
    ) -> List[Alert]:
        """
        Generate the flat alert list for one application.

        An empty or non-list finsight_reports yields [] so a missing account
        never blocks underwriting review. Unusable report entries are skipped.

        Raises:
            InvalidArgumentError: application_data is present but unparseable
        """
        if not isinstance(finsight_reports, (list, tuple)) or not finsight_reports:
            logging.warning(
                "No finsight reports provided for alert generation",
                extra={"step": "generate_alerts", "reports_type": type(finsight_reports).__name__},
            )
            return []

        application = parse_application_data(application_data)
        shared_sos = parse_sos_data(sos_data)
        as_of = as_of or date.today()

        alerts: List[Alert] = []
        evaluated = []

        for index, raw_report in enumerate(finsight_reports):
            if raw_report is None:
                logging.warning("Skipping empty finsight report", extra={"report_index": index})
                continue
            try:
                report = parse_finsight_report(raw_report)
            except ValidationError as e:
                logging.warning(
                    "Skipping malformed finsight report",
                    extra={"report_index": index, "errors": e.error_count()},
                )
                continue

            carries_application_facts = not evaluated
            evaluated.append((index, report))

            own_sos = parse_sos_data(report.sos_data)
            ctx = EvaluationContext(report_index=index, account_id=report.id)
            inputs = RuleInputs(
                application=application,
                report=report,
                sos=own_sos or (shared_sos if carries_application_facts else None),
                thresholds=self.thresholds,
                as_of=as_of,
                carries_application_facts=carries_application_facts,
            )

            for rule in self.rules:
                alert = rule(ctx, inputs)
                if alert is not None:
                    alerts.append(alert)

        if len(evaluated) > 1:
            alerts.extend(analyze_cross_report(evaluated, self.thresholds))

        counts = Counter(alert.severity.value for alert in alerts)
        logging.info(
            "Alert generation completed",
            extra={
                "step": "generate_alerts",
                "reports": len(finsight_reports),
                "reports_evaluated": len(evaluated),
                "total_alerts": len(alerts),
                "critical": counts.get("CRITICAL", 0),
                "high": counts.get("HIGH", 0),
                "medium": counts.get("MEDIUM", 0),
                "low": counts.get("LOW", 0),
            },
        )
        return alerts


def generate_alerts(
    application_data: Any,
    finsight_reports: Any,
    sos_data: Any = None,
    *,
    as_of: Optional[date] = None,
    thresholds: Optional[AlertThresholds] = None,
) -> List[Alert]:
    """Functional entry point; see AlertsEngine.generate_alerts"""
    return AlertsEngine(thresholds).generate_alerts(application_data, finsight_reports, sos_data, as_of=as_of)


def sort_alerts_by_severity(alerts: Sequence[Alert]) -> List[Alert]:
    """New list, CRITICAL first; equal severities keep evaluation order"""
    return sorted(alerts, key=lambda alert: alert.severity, reverse=True)


# (code fragment, category), first match wins
_ALERT_CATEGORIES = (
    ("NSF", "NSF & Overdrafts"),
    ("BALANCE", "Balance Issues"),
    ("WITHDRAWAL", "Cash Flow"),
    ("CASH_FLOW", "Cash Flow"),
    ("DEBT", "Cash Flow"),
    ("INCOME", "Income Stability"),
    ("REVENUE", "Revenue Verification"),
    ("BUSINESS", "Business Verification"),
    ("INDUSTRY", "Industry Risk"),
    ("CREDIT", "Credit Risk"),
    ("RISK", "Credit Risk"),
    ("DATA", "Data Quality"),
)


def categorize_alert_code(code: str) -> str:
    for fragment, category in _ALERT_CATEGORIES:
        if fragment in code:
            return category
    return "Other"


def summarize_alerts(alerts: Sequence[Alert]) -> Dict[str, Any]:
    """Counts per severity plus alert codes grouped by category"""
    counts = Counter(alert.severity for alert in alerts)
    categories: Dict[str, List[str]] = {}
    for alert in alerts:
        categories.setdefault(categorize_alert_code(alert.code), []).append(alert.code)
    return {
        "total": len(alerts),
        "critical": counts.get(Severity.CRITICAL, 0),
        "high": counts.get(Severity.HIGH, 0),
        "medium": counts.get(Severity.MEDIUM, 0),
        "low": counts.get(Severity.LOW, 0),
        "categories": categories,
    }
