"""Pydantic schemas for the loosely-shaped payloads the alerts engine consumes"""

from datetime import date
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from finsight_engine.domain.exceptions import InvalidArgumentError
from finsight_engine.domain.models import IncomeStability, RiskLevel, RiskProfile, VeritasScore
from finsight_engine.utils.date_utils import to_calendar_day
from finsight_engine.utils.money import round_half_up


class PayloadModel(BaseModel):
    """Accepts camelCase or snake_case keys, ignores anything unknown"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


def _parse_optional_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    day = to_calendar_day(value)
    if day is None:
        raise ValueError(f"unparseable date: {value!r}")
    return day


class NsfAnalysisSummary(PayloadModel):
    nsf_count: Optional[int] = None


class BalanceAnalysisSummary(PayloadModel):
    average_balance: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("averageBalance", "averageDailyBalance", "average_balance"),
    )
    negative_day_count: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("negativeDayCount", "negativeBalanceDays", "negative_day_count"),
    )
    period_days: Optional[int] = None


class ApplicationData(PayloadModel):
    """Self-reported business application fields"""

    stated_annual_revenue: Optional[float] = None
    stated_time_in_business_months: Optional[float] = None
    business_start_date: Optional[date] = None
    business_name: Optional[str] = None
    industry: Optional[str] = None
    requested_amount: Optional[float] = None
    nsf_analysis: NsfAnalysisSummary = Field(default_factory=NsfAnalysisSummary)
    balance_analysis: BalanceAnalysisSummary = Field(default_factory=BalanceAnalysisSummary)

    @field_validator("business_start_date", mode="before")
    @classmethod
    def parse_start_date(cls, value: Any) -> Optional[date]:
        return _parse_optional_date(value)


class SOSVerificationResult(PayloadModel):
    """Business-registry lookup produced by the external verifier"""

    matched_business_name: Optional[str] = None
    registration_date: Optional[date] = None
    status: Optional[str] = None
    business_type: Optional[str] = None

    @field_validator("registration_date", mode="before")
    @classmethod
    def parse_registration_date(cls, value: Any) -> Optional[date]:
        return _parse_optional_date(value)

    @property
    def is_known(self) -> bool:
        """An all-empty result means verification failed or never ran"""
        return any(
            value not in (None, "")
            for value in (self.matched_business_name, self.registration_date, self.status)
        )


class FinancialSummary(PayloadModel):
    total_deposits: Optional[float] = None
    total_withdrawals: Optional[float] = None
    average_daily_balance: Optional[float] = None


class ReportAnalysis(PayloadModel):
    total_deposits: Optional[float] = None
    period_days: Optional[int] = None
    financial_summary: FinancialSummary = Field(default_factory=FinancialSummary)
    balance_analysis: BalanceAnalysisSummary = Field(default_factory=BalanceAnalysisSummary)

    @property
    def resolved_total_deposits(self) -> Optional[float]:
        if self.total_deposits is not None:
            return self.total_deposits
        return self.financial_summary.total_deposits

    @property
    def resolved_period_days(self) -> Optional[int]:
        if self.period_days is not None:
            return self.period_days
        return self.balance_analysis.period_days


class RiskAnalysisSummary(PayloadModel):
    nsf_count: Optional[int] = None
    average_daily_balance: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("averageDailyBalance", "avgDailyBalance", "average_daily_balance"),
    )
    risk_score: Optional[float] = None
    risk_level: Optional[RiskLevel] = None
    withdrawal_ratio: Optional[float] = None
    net_cash_flow: Optional[float] = None

    @field_validator("risk_level", mode="before")
    @classmethod
    def normalize_risk_level(cls, value: Any) -> Optional[RiskLevel]:
        """Case-insensitive ("high", "Very Low"); unknown labels read as None"""
        if isinstance(value, RiskLevel):
            return value
        if not isinstance(value, str):
            return None
        label = value.strip().upper().replace(" ", "_").replace("-", "_")
        return RiskLevel(label) if label in RiskLevel._value2member_map_ else None


class VeritasSummary(PayloadModel):
    score: Optional[float] = None
    grade: Optional[str] = None


class IncomeStabilitySummary(PayloadModel):
    stability_score: Optional[float] = None
    level: Optional[str] = None


class FinsightReport(PayloadModel):
    """Computed view of one bank account"""

    id: Optional[str] = Field(default=None, validation_alias=AliasChoices("id", "accountId", "account_id"))
    analysis: ReportAnalysis = Field(default_factory=ReportAnalysis)
    risk_analysis: RiskAnalysisSummary = Field(default_factory=RiskAnalysisSummary)
    veritas_score: Optional[VeritasSummary] = None
    income_stability: Optional[IncomeStabilitySummary] = None
    sos_data: Optional[SOSVerificationResult] = None

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, value: Any) -> Any:
        return str(value) if value is not None else None

    @field_validator("sos_data", mode="before")
    @classmethod
    def resolve_sos_data(cls, value: Any) -> Optional[SOSVerificationResult]:
        """A malformed registry block reads as unknown instead of rejecting the report"""
        return parse_sos_data(value)

    @property
    def average_daily_balance(self) -> Optional[float]:
        if self.risk_analysis.average_daily_balance is not None:
            return self.risk_analysis.average_daily_balance
        if self.analysis.financial_summary.average_daily_balance is not None:
            return self.analysis.financial_summary.average_daily_balance
        return self.analysis.balance_analysis.average_balance

    @property
    def withdrawal_ratio(self) -> Optional[float]:
        if self.risk_analysis.withdrawal_ratio is not None:
            return self.risk_analysis.withdrawal_ratio
        summary = self.analysis.financial_summary
        deposits = self.analysis.resolved_total_deposits
        if deposits and summary.total_withdrawals is not None:
            return summary.total_withdrawals / deposits
        return None

    @property
    def net_cash_flow(self) -> Optional[float]:
        """Deposits minus withdrawals over the statement period"""
        if self.risk_analysis.net_cash_flow is not None:
            return self.risk_analysis.net_cash_flow
        deposits = self.analysis.resolved_total_deposits
        withdrawals = self.analysis.financial_summary.total_withdrawals
        if deposits is None or withdrawals is None:
            return None
        return round_half_up(deposits - withdrawals)

    @classmethod
    def from_risk_profile(
        cls,
        profile: RiskProfile,
        account_id: Optional[str] = None,
        veritas: Optional[VeritasScore] = None,
        negative_day_count: Optional[int] = None,
        sos_data: Optional[SOSVerificationResult] = None,
        income_stability: Optional[IncomeStability] = None,
    ) -> "FinsightReport":
        """Bridge a scored account into the alerts pipeline"""
        stability = None
        if income_stability is not None:
            stability = IncomeStabilitySummary(
                stability_score=income_stability.stability_score,
                level=income_stability.level,
            )
        return cls(
            id=account_id,
            analysis=ReportAnalysis(
                total_deposits=profile.total_deposits,
                period_days=profile.period_days,
                financial_summary=FinancialSummary(
                    total_deposits=profile.total_deposits,
                    total_withdrawals=profile.total_withdrawals,
                    average_daily_balance=profile.average_daily_balance,
                ),
                balance_analysis=BalanceAnalysisSummary(
                    average_balance=profile.average_daily_balance,
                    negative_day_count=negative_day_count,
                    period_days=profile.period_days,
                ),
            ),
            risk_analysis=RiskAnalysisSummary(
                nsf_count=profile.nsf_count,
                average_daily_balance=profile.average_daily_balance,
                risk_score=profile.risk_score,
                risk_level=profile.risk_level,
                withdrawal_ratio=profile.withdrawal_ratio,
                net_cash_flow=round_half_up(profile.total_deposits - profile.total_withdrawals),
            ),
            veritas_score=VeritasSummary(score=veritas.score, grade=veritas.grade) if veritas else None,
            income_stability=stability,
            sos_data=sos_data,
        )


def parse_application_data(value: Any) -> ApplicationData:
    """
    Accept an ApplicationData, a dict payload, or None (treated as empty).

    Raises:
        InvalidArgumentError: payload present but not parseable
    """
    if value is None:
        return ApplicationData()
    if isinstance(value, ApplicationData):
        return value
    try:
        return ApplicationData.model_validate(value)
    except ValidationError as e:
        raise InvalidArgumentError(f"Invalid application data: {e}") from e


def parse_sos_data(value: Any) -> Optional[SOSVerificationResult]:
    """Registry results are optional; anything unusable reads as 'unknown' (None)"""
    if value is None:
        return None
    if isinstance(value, SOSVerificationResult):
        return value if value.is_known else None
    try:
        result = SOSVerificationResult.model_validate(value)
    except ValidationError:
        return None
    return result if result.is_known else None


def parse_finsight_report(value: Any) -> FinsightReport:
    """
    Raises:
        ValidationError: payload does not fit the report shape
    """
    if isinstance(value, FinsightReport):
        return value
    return FinsightReport.model_validate(value)
