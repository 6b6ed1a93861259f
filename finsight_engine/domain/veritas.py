"""
Veritas score - composite creditworthiness score.

Scale: the score is 0-100 (higher = more creditworthy). Some product material
quotes a 300-850 bureau-style range; to_credit_scale / from_credit_scale are
the only sanctioned conversion between the two:

    credit = 300 + score * 5.5        (0 -> 300, 100 -> 850)
"""

from typing import Callable, Optional, Sequence

from finsight_engine.domain.exceptions import InvalidArgumentError
from finsight_engine.domain.income_stability import estimate_income_stability
from finsight_engine.domain.models import (
    ComponentScores,
    IncomeStability,
    ScoreInterpretation,
    ScoreWeights,
    Transaction,
    VeritasInputs,
    VeritasScore,
)
from finsight_engine.domain.thresholds import DEFAULT_VERITAS_CONFIG, VeritasConfig
from finsight_engine.domain.validation import require_number, require_transactions
from finsight_engine.utils.money import round_half_up

StabilityEstimator = Callable[[Sequence[Transaction]], IncomeStability]


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _to_int(value: float) -> int:
    return int(round_half_up(value, 0))


def score_nsf(nsf_count: int, config: VeritasConfig = DEFAULT_VERITAS_CONFIG) -> int:
    """100 with no NSFs, minus a fixed penalty per incident, floored at 0"""
    return max(0, 100 - nsf_count * config.nsf_penalty_per_incident)


def score_balance(average_balance: float, config: VeritasConfig = DEFAULT_VERITAS_CONFIG) -> int:
    """Linear up to the baseline balance, 0 for zero or negative balances"""
    return _to_int(_clamp(average_balance / config.balance_baseline * 100, 0, 100))


def score_stability(stability_ratio: float) -> int:
    return _to_int(_clamp(stability_ratio, 0.0, 1.0) * 100)


def grade_score(score: int, config: VeritasConfig = DEFAULT_VERITAS_CONFIG):
    """Return (grade, interpretation) for a 0-100 score"""
    for floor, grade, level, description, recommendation in config.grade_bands:
        if score >= floor:
            return grade, ScoreInterpretation(level, description, recommendation)
    _, grade, level, description, recommendation = config.grade_bands[-1]
    return grade, ScoreInterpretation(level, description, recommendation)


def _coerce_inputs(inputs) -> VeritasInputs:
    if isinstance(inputs, VeritasInputs):
        candidate = inputs
    elif isinstance(inputs, dict):
        candidate = VeritasInputs(
            nsf_count=inputs.get("nsf_count", inputs.get("nsfCount")),
            average_balance=inputs.get("average_balance", inputs.get("averageBalance")),
            stability_ratio=inputs.get("stability_ratio", inputs.get("stabilityRatio")),
        )
    else:
        raise InvalidArgumentError(f"Veritas inputs must be VeritasInputs or dict, got {type(inputs).__name__}")

    require_number(candidate.nsf_count, "nsf_count")
    require_number(candidate.average_balance, "average_balance")
    if candidate.nsf_count < 0:
        raise InvalidArgumentError(f"nsf_count must be non-negative, got {candidate.nsf_count}")
    if candidate.stability_ratio is not None:
        require_number(candidate.stability_ratio, "stability_ratio")
    return candidate


def resolve_stability_ratio(
    inputs: VeritasInputs,
    transactions: Optional[Sequence[Transaction]],
    stability_estimator: StabilityEstimator = estimate_income_stability,
) -> float:
    """
    Supplied ratio wins; otherwise estimate from transactions; otherwise 0.

    Raises:
        InvalidArgumentError: transactions given but not a list/tuple
    """
    if transactions is not None:
        transactions = require_transactions(transactions)
    if inputs.stability_ratio is not None:
        return float(inputs.stability_ratio)
    if transactions:
        return stability_estimator(transactions).stability_ratio
    return 0.0


def calculate_veritas_score(
    inputs,
    transactions: Optional[Sequence[Transaction]] = None,
    config: VeritasConfig = DEFAULT_VERITAS_CONFIG,
    stability_estimator: StabilityEstimator = estimate_income_stability,
) -> VeritasScore:
    """
    Weighted combination of three 0-100 components:

    - 40%: NSF history (fewer is better)
    - 30%: average balance (higher is better, capped at the baseline)
    - 30%: income stability (regular income is better)

    Raises:
        InvalidArgumentError: non-numeric nsf_count / average_balance, negative nsf_count
    """
    inputs = _coerce_inputs(inputs)

    nsf_score = score_nsf(int(inputs.nsf_count), config)
    balance_score = score_balance(float(inputs.average_balance), config)
    stability_score = score_stability(resolve_stability_ratio(inputs, transactions, stability_estimator))

    weighted = (
        nsf_score * config.nsf_weight
        + balance_score * config.balance_weight
        + stability_score * config.stability_weight
    )
    score = _to_int(_clamp(weighted, 0, 100))
    grade, interpretation = grade_score(score, config)

    return VeritasScore(
        score=score,
        grade=grade,
        component_scores=ComponentScores(
            nsf_score=nsf_score,
            balance_score=balance_score,
            stability_score=stability_score,
        ),
        weights=ScoreWeights(
            nsf=config.nsf_weight,
            balance=config.balance_weight,
            stability=config.stability_weight,
        ),
        interpretation=interpretation,
    )


def to_credit_scale(score: float, config: VeritasConfig = DEFAULT_VERITAS_CONFIG) -> int:
    """0-100 Veritas score -> 300-850 presentation range"""
    span = config.credit_scale_ceiling - config.credit_scale_floor
    return _to_int(config.credit_scale_floor + _clamp(score, 0, 100) * span / 100)


def from_credit_scale(value: float, config: VeritasConfig = DEFAULT_VERITAS_CONFIG) -> int:
    """300-850 presentation value -> 0-100 Veritas score"""
    span = config.credit_scale_ceiling - config.credit_scale_floor
    bounded = _clamp(value, config.credit_scale_floor, config.credit_scale_ceiling)
    return _to_int((bounded - config.credit_scale_floor) * 100 / span)
