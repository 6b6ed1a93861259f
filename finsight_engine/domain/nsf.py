"""NSF (non-sufficient funds) detection from transaction descriptions"""

from typing import List, Optional, Sequence, Tuple

from finsight_engine.domain.models import Transaction
from finsight_engine.domain.validation import require_transactions

NSF_KEYWORDS: Tuple[str, ...] = (
    "nsf",
    "insufficient funds",
    "overdraft",
    "returned check",
    "returned item",
    "bounce",
    "non-sufficient",
    "overdraw",
    "insufficient",
    "returned deposit",
    "reject",
    "decline",
    "unavailable funds",
    "return fee",
    "chargeback",
    "reversal",
    "dishonored",
    "unpaid",
    "refer to maker",
    "od fee",
    "overdraft charge",
    "return item",
)


def match_nsf_keyword(description: Optional[str], keywords: Sequence[str] = NSF_KEYWORDS) -> Optional[str]:
    """Return the first keyword found in the description, or None"""
    if not isinstance(description, str) or not description:
        return None
    lowered = description.lower()
    for keyword in keywords:
        if keyword in lowered:
            return keyword
    return None


def find_nsf_transactions(
    transactions: Sequence[Transaction],
    keywords: Sequence[str] = NSF_KEYWORDS,
) -> List[Tuple[Transaction, str]]:
    """Transactions flagged as NSF events, paired with the keyword that matched"""
    transactions = require_transactions(transactions)
    flagged = []
    for txn in transactions:
        keyword = match_nsf_keyword(getattr(txn, "description", None), keywords)
        if keyword is not None:
            flagged.append((txn, keyword))
    return flagged


def detect_nsf(transactions: Sequence[Transaction], keywords: Sequence[str] = NSF_KEYWORDS) -> int:
    """
    Count NSF incidents.

    A transaction counts once no matter how many keywords it contains.
    Missing descriptions never match.

    Raises:
        InvalidArgumentError: transactions is not a list/tuple
    """
    return len(find_nsf_transactions(transactions, keywords))
