"""Business-name comparison helpers"""

import re

_ENTITY_SUFFIXES = {
    "llc", "inc", "incorporated", "corp", "corporation", "co", "company",
    "ltd", "limited", "lp", "llp", "pllc", "pc",
}
_NON_WORD = re.compile(r"[^a-z0-9 ]+")


def normalize_business_name(name: str) -> str:
    """Lower-case, strip punctuation and trailing entity suffixes ("Acme, L.L.C." -> "acme")"""
    cleaned = _NON_WORD.sub(" ", (name or "").lower().replace(".", ""))
    words = cleaned.split()
    while words and words[-1] in _ENTITY_SUFFIXES:
        words.pop()
    return " ".join(words)


def levenshtein_distance(a: str, b: str) -> int:
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            cost = 0 if char_a == char_b else 1
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost))
        previous = current
    return previous[-1]


def name_similarity(first: str, second: str) -> float:
    """1.0 for identical normalized names, 0.0 for nothing in common"""
    a = normalize_business_name(first)
    b = normalize_business_name(second)
    if not a and not b:
        return 1.0
    if not a or not b:
        return 0.0
    longest = max(len(a), len(b))
    return (longest - levenshtein_distance(a, b)) / longest
