"""Company and job-title canonicalization.

Normalized strings are what the matcher compares and indexes on, so these
functions must stay deterministic: the same raw input always yields the same
output, and normalizing an already-normalized value is a no-op.
"""
from __future__ import annotations

import re

# Corporate suffixes dropped from the end of a company name ("Acme Inc." -> "acme").
COMPANY_SUFFIXES: tuple[str, ...] = (
    "inc",
    "llc",
    "corp",
    "corporation",
    "ltd",
    "limited",
    "co",
)

_WS_RE = re.compile(r"\s+")
_SUFFIX_RE = re.compile(r"\s+(?:%s)\.?$" % "|".join(COMPANY_SUFFIXES))

# Words this short ("the", "of", "inc") carry no identity in fuzzy matching.
_MIN_SIGNIFICANT_WORD_LEN = 4


def _collapse(s: str) -> str:
    return _WS_RE.sub(" ", (s or "").lower().strip())


def normalize_company_name(name: str) -> str:
    normalized = _collapse(name)
    # Repeat so "Acme Holdings Co. Ltd" collapses fully and a second pass is a no-op.
    while True:
        stripped = _SUFFIX_RE.sub("", normalized)
        if stripped == normalized:
            return normalized
        normalized = stripped.strip()


def normalize_job_title(title: str) -> str:
    return _collapse(title)


def fuzzy_match_company(company1: str, company2: str) -> bool:
    """Loose company identity: equality, containment, or shared significant words.

    "Google" matches "Google LLC" (equal after normalization) and
    "Google Cloud" (containment). Word overlap requires the shared words to
    cover at least half of the shorter name.
    """
    n1 = normalize_company_name(company1)
    n2 = normalize_company_name(company2)

    if n1 == n2:
        return True

    if n1 in n2 or n2 in n1:
        return True

    words1 = n1.split(" ")
    words2 = n2.split(" ")
    common = {w for w in words1 if len(w) >= _MIN_SIGNIFICANT_WORD_LEN} & set(words2)

    return bool(common) and len(common) >= min(len(words1), len(words2)) / 2
