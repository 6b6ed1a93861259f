"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from finsight_engine.domain.exceptions import MalformedRecordError
from finsight_engine.utils.date_utils import to_calendar_day
from finsight_engine.utils.money import is_finite_number


@dataclass(frozen=True)
class Transaction:
    """Parsed bank statement line. Positive amount = credit, negative = debit"""

    date: date
    description: Optional[str]
    amount: float
    type: str = ""  # "credit" or "debit"; derived from the sign when empty
    balance: Optional[float] = None

    def __post_init__(self) -> None:
        if not self.type and is_finite_number(self.amount):
            object.__setattr__(self, "type", "credit" if self.amount > 0 else "debit")

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Transaction":
        """
        Build a Transaction from a parser record.

        Raises:
            MalformedRecordError: record has no usable date
        """
        day = to_calendar_day(payload.get("date"))
        if day is None:
            raise MalformedRecordError(f"Unparseable transaction date: {payload.get('date')!r}")

        amount = payload.get("amount")
        if isinstance(amount, str):
            try:
                amount = float(amount.replace(",", ""))
            except ValueError:
                amount = None

        return cls(
            date=day,
            description=payload.get("description"),
            amount=amount,
            type=payload.get("type") or "",
            balance=payload.get("balance"),
        )


@dataclass(frozen=True)
class DepositWithdrawalTotals:
    """Deposits vs withdrawals for one statement"""

    total_deposits: float
    total_withdrawals: float
    deposit_count: int = 0
    withdrawal_count: int = 0
    skipped_count: int = 0


@dataclass(frozen=True)
class BalanceProjection:
    """Day-by-day balance walk summary"""

    average_daily_balance: float
    period_days: int
    lowest_balance: float
    highest_balance: float
    negative_day_count: int = 0
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class RiskLevel(str, Enum):
    VERY_LOW = "VERY_LOW"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


@dataclass(frozen=True)
class RiskProfile:
    """Calculated risk metrics for one account; risk_score derives from the other fields"""

    nsf_count: int
    total_deposits: float
    total_withdrawals: float
    average_daily_balance: float
    period_days: int
    withdrawal_ratio: float
    risk_score: int
    risk_level: RiskLevel


@dataclass(frozen=True)
class VeritasInputs:
    """Signals feeding the Veritas score. stability_ratio is in [0, 1] when supplied"""

    nsf_count: int
    average_balance: float
    stability_ratio: Optional[float] = None


@dataclass(frozen=True)
class ComponentScores:
    nsf_score: int
    balance_score: int
    stability_score: int


@dataclass(frozen=True)
class ScoreWeights:
    nsf: float
    balance: float
    stability: float


@dataclass(frozen=True)
class ScoreInterpretation:
    level: str
    description: str
    recommendation: str


@dataclass(frozen=True)
class VeritasScore:
    """Composite creditworthiness score on the 0-100 scale"""

    score: int
    grade: str
    component_scores: ComponentScores
    weights: ScoreWeights
    interpretation: ScoreInterpretation


@dataclass(frozen=True)
class IncomeStability:
    """Regularity of income deposits"""

    stability_score: int
    stability_ratio: float
    level: str
    income_transaction_count: int = 0
    total_income_amount: float = 0.0
    average_income_amount: float = 0.0
    intervals: List[int] = field(default_factory=list)
    mean_interval: float = 0.0
    standard_deviation: float = 0.0
    recommendations: List[str] = field(default_factory=list)


class Severity(str, Enum):
    """Alert severity. Ordered LOW < MEDIUM < HIGH < CRITICAL"""

    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    def __lt__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank >= other.rank


_SEVERITY_RANK = {
    Severity.LOW: 1,
    Severity.MEDIUM: 2,
    Severity.HIGH: 3,
    Severity.CRITICAL: 4,
}


@dataclass(frozen=True)
class EvaluationContext:
    """Which account a single-report rule is looking at"""

    report_index: int
    account_id: Optional[str] = None


@dataclass(frozen=True)
class Alert:
    """Severity-tagged finding handed to CRM/dashboards as-is"""

    code: str
    severity: Severity
    message: str
    data: Dict[str, Any] = field(default_factory=dict)
    account_index: Optional[int] = None
    account_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """camelCase wire shape used by downstream collaborators"""
        payload: Dict[str, Any] = {
            "code": self.code,
            "severity": self.severity.value,
            "message": self.message,
            "data": dict(self.data),
        }
        if self.account_index is not None:
            payload["accountIndex"] = self.account_index
        if self.account_id is not None:
            payload["accountId"] = self.account_id
        return payload
