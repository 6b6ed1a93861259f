"""Risk scoring engine - per-account risk profile from statement transactions"""

from typing import List, Tuple

from finsight_engine.domain.balance import project_average_balance
from finsight_engine.domain.models import BalanceProjection, RiskLevel, RiskProfile, Transaction
from finsight_engine.domain.nsf import detect_nsf
from finsight_engine.domain.thresholds import DEFAULT_RISK_THRESHOLDS, RiskThresholds
from finsight_engine.domain.totals import totalize
from finsight_engine.domain.validation import require_transactions


def calculate_withdrawal_ratio(total_deposits: float, total_withdrawals: float) -> float:
    """Withdrawals / deposits. No deposits at all counts as full burn (1.0)"""
    if total_deposits == 0:
        return 1.0
    return total_withdrawals / total_deposits


def calculate_risk_score(
    nsf_count: int,
    average_daily_balance: float,
    withdrawal_ratio: float,
    thresholds: RiskThresholds = DEFAULT_RISK_THRESHOLDS,
) -> int:
    """
    Calculate risk score from 0 (lowest risk) to 100 (highest risk).

    Additive points, capped at max_score:
    - 30 per NSF incident: every bounced payment is a repayment red flag
    - 20 if ADB < $1000: thin cash cushion
    - 25 if withdrawals > 80% of deposits: most income is burned
    - 40 if ADB < 0: account lives in overdraft (stacks with the low-balance points)
    """
    score = nsf_count * thresholds.points_per_nsf

    if average_daily_balance < thresholds.low_balance_limit:
        score += thresholds.low_balance_points

    if withdrawal_ratio > thresholds.withdrawal_ratio_limit:
        score += thresholds.withdrawal_ratio_points

    if average_daily_balance < 0:
        score += thresholds.negative_balance_points

    return min(score, thresholds.max_score)


def determine_risk_level(score: int, thresholds: RiskThresholds = DEFAULT_RISK_THRESHOLDS) -> RiskLevel:
    """
    Map risk score to a band.

    Score bands:
    - 80+:     HIGH
    - 40 - 79: MEDIUM
    - 20 - 39: LOW
    - 0 - 19:  VERY_LOW
    """
    if score >= thresholds.high_floor:
        return RiskLevel.HIGH
    elif score >= thresholds.medium_floor:
        return RiskLevel.MEDIUM
    elif score >= thresholds.low_floor:
        return RiskLevel.LOW
    else:
        return RiskLevel.VERY_LOW


def score_account(
    transactions: List[Transaction],
    opening_balance: float,
    thresholds: RiskThresholds = DEFAULT_RISK_THRESHOLDS,
) -> Tuple[RiskProfile, BalanceProjection]:
    """
    Build the risk profile and hand back the balance walk it was scored from.

    Raises:
        InvalidArgumentError: non-list transactions or non-numeric opening balance
    """
    transactions = require_transactions(transactions)

    nsf_count = detect_nsf(transactions)
    totals = totalize(transactions)
    projection = project_average_balance(transactions, opening_balance)

    withdrawal_ratio = calculate_withdrawal_ratio(totals.total_deposits, totals.total_withdrawals)
    score = calculate_risk_score(nsf_count, projection.average_daily_balance, withdrawal_ratio, thresholds)

    profile = RiskProfile(
        nsf_count=nsf_count,
        total_deposits=totals.total_deposits,
        total_withdrawals=totals.total_withdrawals,
        average_daily_balance=projection.average_daily_balance,
        period_days=projection.period_days,
        withdrawal_ratio=withdrawal_ratio,
        risk_score=score,
        risk_level=determine_risk_level(score, thresholds),
    )
    return profile, projection


def score_risk(
    transactions: List[Transaction],
    opening_balance: float,
    thresholds: RiskThresholds = DEFAULT_RISK_THRESHOLDS,
) -> RiskProfile:
    """
    Main entry point: analyze one account's transactions and build its risk profile.

    Transactions may be Transaction objects or parser records (mappings).

    Raises:
        InvalidArgumentError: non-list transactions or non-numeric opening balance
    """
    profile, _ = score_account(transactions, opening_balance, thresholds)
    return profile
