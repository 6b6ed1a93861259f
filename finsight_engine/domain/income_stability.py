"""Income stability estimation from the regularity of income deposits"""

import logging
import statistics
from typing import List, Sequence, Tuple

from finsight_engine.domain.models import IncomeStability, Transaction
from finsight_engine.domain.validation import require_transactions
from finsight_engine.utils.date_utils import to_calendar_day
from finsight_engine.utils.money import is_finite_number, round_half_up

INCOME_KEYWORDS: Tuple[str, ...] = (
    "payroll", "salary", "wage", "pay", "deposit", "direct dep", "dd",
    "paycheck", "income", "earnings", "compensation", "stipend",
    "pension", "retirement", "social security", "unemployment", "benefits",
    "freelance", "contractor", "commission", "bonus", "overtime",
    "transfer from", "ach credit", "wire transfer", "electronic deposit",
    "recurring deposit", "automatic deposit", "govt payment", "refund",
)

MIN_INCOME_AMOUNT = 50.0
MAX_INCOME_INTERVAL_DAYS = 45
IDEAL_INTERVALS = (7, 14, 15, 30, 31)  # weekly, bi-weekly, semi-monthly, monthly

# (floor, level)
STABILITY_LEVELS = (
    (80, "VERY_STABLE"),
    (60, "STABLE"),
    (40, "MODERATE"),
    (20, "UNSTABLE"),
    (0, "VERY_UNSTABLE"),
)


def _is_income(txn: Transaction) -> bool:
    amount = getattr(txn, "amount", None)
    if not is_finite_number(amount) or amount < MIN_INCOME_AMOUNT:
        return False
    if to_calendar_day(getattr(txn, "date", None)) is None:
        return False
    description = (getattr(txn, "description", None) or "").lower()
    return any(keyword in description for keyword in INCOME_KEYWORDS)


def _intervals(income: List[Transaction]) -> List[int]:
    days = [to_calendar_day(t.date) for t in income]
    gaps = [(later - earlier).days for earlier, later in zip(days, days[1:])]
    return [gap for gap in gaps if 0 < gap <= MAX_INCOME_INTERVAL_DAYS]


def _level(score: int) -> str:
    for floor, level in STABILITY_LEVELS:
        if score >= floor:
            return level
    return STABILITY_LEVELS[-1][1]


def _score(intervals: List[int]) -> Tuple[int, float, float]:
    """
    Score 0-100 from interval consistency.

    Components:
    - base: 100 * (1 - coefficient of variation)
    - up to 10 for a mean interval close to a payroll cadence
    - up to 10 for a small standard deviation (in days)
    - up to 5 for having more data points
    """
    mean = statistics.mean(intervals)
    stdev = statistics.stdev(intervals) if len(intervals) > 1 else 0.0
    if mean == 0:
        return 0, mean, stdev

    base = max(0.0, 100 - (stdev / mean) * 100)
    closest = min(IDEAL_INTERVALS, key=lambda ideal: abs(ideal - mean))
    interval_bonus = max(0.0, 10 - abs(mean - closest))
    consistency_bonus = max(0.0, 10 - stdev)
    data_bonus = min(5, len(intervals) - 1)

    score = min(100.0, base + interval_bonus + consistency_bonus + data_bonus)
    return int(round_half_up(score, 0)), mean, stdev


def _recommendations(score: int, intervals: List[int], mean: float, stdev: float) -> List[str]:
    recommendations = []
    if score < 40:
        recommendations.append("Consider requesting additional income documentation")
        recommendations.append("Review for alternative income sources")
    if stdev > 10:
        recommendations.append("High variability in income timing detected")
    if len(intervals) < 3:
        recommendations.append("Limited transaction history - consider longer analysis period")
    if mean > 35:
        recommendations.append("Income frequency appears to be monthly or less frequent")
    elif mean < 10:
        recommendations.append("Very frequent income deposits detected - may include non-salary income")
    if not recommendations:
        recommendations.append("Income stability analysis shows positive results")
    return recommendations


def _insufficient(reason: str) -> IncomeStability:
    logging.info("Income stability defaulted", extra={"step": "income_stability", "reason": reason})
    return IncomeStability(
        stability_score=0,
        stability_ratio=0.0,
        level="INSUFFICIENT_DATA",
        recommendations=["Provide more transaction data for accurate analysis"],
    )


def estimate_income_stability(transactions: Sequence[Transaction]) -> IncomeStability:
    """
    Estimate how regular the account's income is.

    stability_ratio (score / 100) is what the Veritas engine consumes.
    """
    transactions = require_transactions(transactions)

    income = sorted((t for t in transactions if _is_income(t)), key=lambda t: to_calendar_day(t.date))
    if len(income) < 2:
        return _insufficient("Insufficient income transactions for analysis")

    intervals = _intervals(income)
    if len(intervals) < 2:
        return _insufficient("Insufficient intervals for stability calculation")

    score, mean, stdev = _score(intervals)
    total_income = sum(t.amount for t in income)

    return IncomeStability(
        stability_score=score,
        stability_ratio=score / 100,
        level=_level(score),
        income_transaction_count=len(income),
        total_income_amount=round_half_up(total_income),
        average_income_amount=round_half_up(total_income / len(income)),
        intervals=intervals,
        mean_interval=round_half_up(mean),
        standard_deviation=round_half_up(stdev),
        recommendations=_recommendations(score, intervals, mean, stdev),
    )
