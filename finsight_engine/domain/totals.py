"""Deposit / withdrawal totals"""

import logging
from decimal import Decimal
from typing import Sequence

from finsight_engine.domain.models import DepositWithdrawalTotals, Transaction
from finsight_engine.domain.validation import require_transactions
from finsight_engine.utils.money import is_finite_number, round_half_up, to_decimal


def totalize(transactions: Sequence[Transaction]) -> DepositWithdrawalTotals:
    """
    Split transactions into deposits (amount > 0) and withdrawals (amount <= 0).

    Withdrawals are summed as absolute values. Records with a missing or
    non-finite amount are skipped, never fatal.
    """
    transactions = require_transactions(transactions)

    deposits = Decimal("0")
    withdrawals = Decimal("0")
    deposit_count = 0
    withdrawal_count = 0
    skipped = 0

    for index, txn in enumerate(transactions):
        amount = getattr(txn, "amount", None)
        if not is_finite_number(amount):
            skipped += 1
            logging.warning(
                "Skipping transaction with non-finite amount",
                extra={"step": "totalize", "index": index, "amount": repr(amount)},
            )
            continue

        value = to_decimal(amount)
        if value > 0:
            deposits += value
            deposit_count += 1
        else:
            withdrawals += abs(value)
            withdrawal_count += 1

    return DepositWithdrawalTotals(
        total_deposits=round_half_up(deposits),
        total_withdrawals=round_half_up(withdrawals),
        deposit_count=deposit_count,
        withdrawal_count=withdrawal_count,
        skipped_count=skipped,
    )
