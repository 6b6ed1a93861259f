"""Unit tests for the Veritas score"""

import pytest
from datetime import date
from finsight_engine.domain.models import IncomeStability, Transaction, VeritasInputs
from finsight_engine.domain.veritas import (
    calculate_veritas_score,
    from_credit_scale,
    grade_score,
    score_balance,
    score_nsf,
    to_credit_scale,
)
from finsight_engine.domain.exceptions import InvalidArgumentError


def _fixed_stability(ratio):
    def estimator(transactions):
        return IncomeStability(stability_score=int(ratio * 100), stability_ratio=ratio, level="TEST")

    return estimator


def test_component_scores():
    """Test each component is normalized to 0-100"""
    assert score_nsf(0) == 100
    assert score_nsf(2) == 60
    assert score_nsf(7) == 0

    assert score_balance(5000) == 100
    assert score_balance(25000) == 100
    assert score_balance(2500) == 50
    assert score_balance(-400) == 0


def test_calculate_veritas_score_perfect():
    """Test no NSFs, full balance, perfectly regular income"""
    result = calculate_veritas_score(VeritasInputs(nsf_count=0, average_balance=5000, stability_ratio=1.0))

    assert result.score == 100
    assert result.grade == "A"
    assert result.interpretation.level == "EXCELLENT"


def test_calculate_veritas_score_weighted():
    """Test 100*0.4 + 50*0.3 + 50*0.3 = 70"""
    result = calculate_veritas_score(VeritasInputs(nsf_count=0, average_balance=2500, stability_ratio=0.5))

    assert result.component_scores.nsf_score == 100
    assert result.component_scores.balance_score == 50
    assert result.component_scores.stability_score == 50
    assert result.score == 70
    assert result.grade == "B"
    assert result.weights.nsf == 0.4
    assert result.weights.balance == 0.3
    assert result.weights.stability == 0.3


def test_calculate_veritas_score_floor():
    """Test worst-case inputs bottom out at 0 / D"""
    result = calculate_veritas_score({"nsfCount": 9, "averageBalance": -1200})

    assert result.score == 0
    assert result.grade == "D"
    assert result.interpretation.level == "POOR"


def test_calculate_veritas_score_accepts_snake_case_dict():
    result = calculate_veritas_score({"nsf_count": 1, "average_balance": 5000, "stability_ratio": 1.0})

    # 80*0.4 + 100*0.3 + 100*0.3
    assert result.score == 92


def test_calculate_veritas_score_stability_from_transactions():
    """Test the estimator runs when no ratio is supplied"""
    transactions = [Transaction(date=date(2024, 1, 1), description="Payroll", amount=1000.0)]

    result = calculate_veritas_score(
        VeritasInputs(nsf_count=0, average_balance=5000),
        transactions,
        stability_estimator=_fixed_stability(0.8),
    )

    assert result.component_scores.stability_score == 80
    assert result.score == 94


def test_calculate_veritas_score_supplied_ratio_wins():
    """Test an externally supplied ratio overrides the estimator"""
    transactions = [Transaction(date=date(2024, 1, 1), description="Payroll", amount=1000.0)]

    result = calculate_veritas_score(
        VeritasInputs(nsf_count=0, average_balance=5000, stability_ratio=0.2),
        transactions,
        stability_estimator=_fixed_stability(0.9),
    )

    assert result.component_scores.stability_score == 20


def test_calculate_veritas_score_no_stability_signal():
    """Test missing ratio and transactions scores stability as 0"""
    result = calculate_veritas_score(VeritasInputs(nsf_count=0, average_balance=5000))

    assert result.component_scores.stability_score == 0
    assert result.score == 70


def test_calculate_veritas_score_is_deterministic():
    inputs = VeritasInputs(nsf_count=2, average_balance=1234.56, stability_ratio=0.37)

    assert calculate_veritas_score(inputs) == calculate_veritas_score(inputs)


def test_calculate_veritas_score_rejects_invalid_input():
    """Test non-numeric and negative inputs fail fast"""
    with pytest.raises(InvalidArgumentError):
        calculate_veritas_score({"nsfCount": "three", "averageBalance": 100})

    with pytest.raises(InvalidArgumentError):
        calculate_veritas_score({"nsfCount": 1})

    with pytest.raises(InvalidArgumentError):
        calculate_veritas_score(VeritasInputs(nsf_count=-1, average_balance=100))

    with pytest.raises(InvalidArgumentError):
        calculate_veritas_score([0, 100])


def test_grade_bands():
    """Test grade boundaries"""
    assert grade_score(80)[0] == "A"
    assert grade_score(79)[0] == "B"
    assert grade_score(65)[0] == "B"
    assert grade_score(64)[0] == "C"
    assert grade_score(50)[0] == "C"
    assert grade_score(49)[0] == "D"
    assert grade_score(0)[0] == "D"


@pytest.mark.parametrize(
    "score,credit",
    [
        (0, 300),
        (50, 575),
        (73, 702),
        (100, 850),
    ],
)
def test_credit_scale_conversion(score, credit):
    """Test the 0-100 score maps onto the 300-850 presentation range and back"""
    assert to_credit_scale(score) == credit
    assert from_credit_scale(credit) == score


def test_credit_scale_clamps_out_of_range():
    assert to_credit_scale(140) == 850
    assert to_credit_scale(-5) == 300
    assert from_credit_scale(900) == 100
    assert from_credit_scale(120) == 0


@pytest.mark.parametrize("transactions", [{}, "", "abc", 0])
def test_calculate_veritas_score_rejects_non_list_transactions(transactions):
    """Test a transactions argument that is not a list fails even when a ratio is supplied"""
    inputs = VeritasInputs(nsf_count=0, average_balance=5000, stability_ratio=0.8)

    with pytest.raises(InvalidArgumentError):
        calculate_veritas_score(inputs, transactions)


def test_calculate_veritas_score_estimates_from_parser_records():
    """Test dict records reach the estimator as Transaction objects"""
    seen = []

    def estimator(transactions):
        seen.extend(transactions)
        return IncomeStability(stability_score=50, stability_ratio=0.5, level="TEST")

    result = calculate_veritas_score(
        VeritasInputs(nsf_count=0, average_balance=5000),
        [{"date": "2024-01-01", "description": "Payroll", "amount": 1000}],
        stability_estimator=estimator,
    )

    assert result.component_scores.stability_score == 50
    assert all(isinstance(t, Transaction) for t in seen)
