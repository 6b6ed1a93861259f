"""Argument guards shared by the scoring entry points"""

import logging
from typing import Any, List, Mapping

from finsight_engine.domain.exceptions import InvalidArgumentError, MalformedRecordError
from finsight_engine.domain.models import Transaction
from finsight_engine.utils.money import is_finite_number


def require_transactions(transactions: Any) -> List[Transaction]:
    """
    Transactions must arrive as a list or tuple.

    Parser records (mappings) are converted with Transaction.from_dict;
    records without a usable date are skipped and logged.

    Raises:
        InvalidArgumentError: transactions is not a list/tuple
    """
    if not isinstance(transactions, (list, tuple)):
        raise InvalidArgumentError(
            f"Transactions must be a list, got {type(transactions).__name__}"
        )

    coerced = []
    for index, item in enumerate(transactions):
        if isinstance(item, Mapping):
            try:
                item = Transaction.from_dict(item)
            except MalformedRecordError as e:
                logging.warning(
                    f"Skipping malformed transaction record: {e}",
                    extra={"step": "coerce_transactions", "index": index},
                )
                continue
        coerced.append(item)
    return coerced


def require_number(value: Any, name: str) -> Any:
    """Reject non-numeric, NaN and infinite values"""
    if not is_finite_number(value):
        raise InvalidArgumentError(f"{name} must be a finite number, got {value!r}")
    return value
