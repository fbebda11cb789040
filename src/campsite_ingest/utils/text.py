"""String normalization and fuzzy similarity for place records."""

import re
from urllib.parse import urlsplit

from rapidfuzz import fuzz

SUBSTRING_MATCH_SCORE = 0.8

# Token-set matches are scaled to stay below the substring tier
PARTIAL_MATCH_CEILING = 0.75

_TOKEN_SEPARATORS = re.compile(r"[\s,.;:/|()\[\]\"'&+-]+")
_SCHEME_PATTERN = re.compile(r"^[a-z][a-z0-9+.-]*://")


def normalize_text(value: str) -> str:
    return " ".join(value.casefold().split())


def tokenize(value: str) -> set[str]:
    """Casefolded tokens split on whitespace and punctuation."""
    return {t for t in _TOKEN_SEPARATORS.split(normalize_text(value)) if t}


def string_similarity(a: str, b: str) -> float:
    """Similarity between two names or addresses in [0, 1].

    Tiers, in order: empty input scores 0, equal strings 1, one string
    contained in the other 0.8, otherwise the rapidfuzz token-set ratio
    scaled to at most PARTIAL_MATCH_CEILING.
    """
    s1 = normalize_text(a or "")
    s2 = normalize_text(b or "")

    if not s1 or not s2:
        return 0.0
    if s1 == s2:
        return 1.0
    if s1 in s2 or s2 in s1:
        return SUBSTRING_MATCH_SCORE

    tokens1 = tokenize(s1)
    tokens2 = tokenize(s2)
    if not tokens1 or not tokens2:
        return 0.0

    ratio = fuzz.token_set_ratio(" ".join(sorted(tokens1)), " ".join(sorted(tokens2)))
    return PARTIAL_MATCH_CEILING * ratio / 100.0


def normalize_phone(phone: str, country_code: str = "66") -> str:
    """Reduce a phone number to digits in national format.

    "+66 81 234 5678", "081-234-5678" and "0812345678" all become
    "0812345678".
    """
    if not phone:
        return ""
    digits = re.sub(r"\D", "", phone)
    international = phone.strip().startswith("+") or phone.strip().startswith("00")
    if digits.startswith("00"):
        digits = digits[2:]
    if international and country_code and digits.startswith(country_code):
        digits = "0" + digits[len(country_code):]
    return digits


def normalize_website(url: str) -> str:
    """Canonical host and path of a website for equality checks.

    Drops scheme, a leading "www.", query, fragment and trailing slashes.
    """
    if not url:
        return ""
    value = url.strip().lower()
    if not _SCHEME_PATTERN.match(value):
        value = f"http://{value}"

    parts = urlsplit(value)
    host = parts.hostname or ""
    if host.startswith("www."):
        host = host[4:]
    path = parts.path.rstrip("/")
    return f"{host}{path}"
