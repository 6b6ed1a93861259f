"""Average daily balance projection"""

import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Dict, List, Sequence

from finsight_engine.domain.models import BalanceProjection, Transaction
from finsight_engine.domain.validation import require_number, require_transactions
from finsight_engine.utils.date_utils import generate_date_range, to_calendar_day
from finsight_engine.utils.money import is_finite_number, round_half_up, to_decimal


def project_average_balance(transactions: Sequence[Transaction], opening_balance: float) -> BalanceProjection:
    """
    Walk the statement one calendar day at a time from an opening balance.

    Requirements:
    - Every day between the first and last transaction counts, including
      days with no activity (balance carries forward)
    - A day's balance is taken after all of that day's transactions
    - Average = sum of end-of-day balances / number of days

    A balance held for ten days weighs ten times as much as one held for a
    day, which is how lenders read "average daily balance".

    Raises:
        InvalidArgumentError: non-list transactions or non-numeric opening balance
    """
    transactions = require_transactions(transactions)
    require_number(opening_balance, "opening_balance")

    # Bucket amounts by calendar day
    amounts_by_day: Dict[date, List[Decimal]] = defaultdict(list)
    for index, txn in enumerate(transactions):
        day = to_calendar_day(getattr(txn, "date", None))
        amount = getattr(txn, "amount", None)
        if day is None or not is_finite_number(amount):
            logging.warning(
                "Skipping malformed transaction in balance projection",
                extra={"step": "balance_projection", "index": index},
            )
            continue
        amounts_by_day[day].append(to_decimal(amount))

    if not amounts_by_day:
        opening = round_half_up(opening_balance)
        return BalanceProjection(
            average_daily_balance=opening,
            period_days=0,
            lowest_balance=opening,
            highest_balance=opening,
        )

    start_date = min(amounts_by_day)
    end_date = max(amounts_by_day)

    current_balance = to_decimal(opening_balance)
    total_balance = Decimal("0")
    lowest = None
    highest = None
    negative_days = 0
    day_count = 0

    for day in generate_date_range(start_date, end_date):
        for amount in amounts_by_day.get(day, ()):
            current_balance += amount
        total_balance += current_balance
        day_count += 1

        if current_balance < 0:
            negative_days += 1
        lowest = current_balance if lowest is None else min(lowest, current_balance)
        highest = current_balance if highest is None else max(highest, current_balance)

    return BalanceProjection(
        average_daily_balance=round_half_up(total_balance / day_count),
        period_days=day_count,
        lowest_balance=round_half_up(lowest),
        highest_balance=round_half_up(highest),
        negative_day_count=negative_days,
        start_date=start_date,
        end_date=end_date,
    )
