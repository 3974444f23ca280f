"""
Fuzzy string matching utilities.

Wraps the thefuzz library to score how close a product name is to names
already in the catalog.  Used by processing/catalog.py to report possible
near-duplicates after an import.
"""

import logging

from thefuzz import fuzz

logger = logging.getLogger(__name__)


def closest_name(
    value: str,
    candidates: list[str],
    threshold: int = 90,
) -> tuple[str | None, int]:
    """
    Find the candidate name most similar to *value*, ignoring exact matches.

    Uses token_sort_ratio which handles word reordering well (e.g.
    "Oil Olive 500ml" vs "Olive Oil 500ml").  Candidates equal to *value*
    case-insensitively are skipped: those are the same product, not a
    near-duplicate.

    Args:
        value: The name to match.
        candidates: Names to compare against.
        threshold: Minimum score (0-100) to accept a match.

    Returns:
        (candidate, score) for the best match at or above threshold,
        or (None, 0) if no candidate qualifies.
    """
    if not value or not candidates:
        return None, 0

    value_lower = value.strip().lower()

    best_candidate: str | None = None
    best_score: int = 0

    for candidate in candidates:
        candidate_lower = candidate.strip().lower()
        if candidate_lower == value_lower:
            continue
        score = fuzz.token_sort_ratio(value_lower, candidate_lower)
        if score > best_score:
            best_score = score
            best_candidate = candidate

    if best_score >= threshold:
        logger.debug(
            f"Near-duplicate name '{value}' ~ '{best_candidate}' (score={best_score})"
        )
        return best_candidate, best_score

    return None, 0
