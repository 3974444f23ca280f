"""
Locale-aware price parser — turns free-form price text into a number.

Handles currency symbols, thousands separators, and both decimal
conventions ("1.234,56" and "1,234.56").  Unparseable input degrades to 0
instead of raising; callers drop zero prices as part of normal filtering.

Public API:
    parse_price(raw_value) → float
    detect_currency(raw_value) → str | None
"""

import logging
import math
import re

logger = logging.getLogger(__name__)

# Everything except digits and the two separator characters
_NON_NUMERIC_PATTERN = re.compile(r"[^0-9.,]")

# Multi-character markers come first so "US$" wins over "$".
_CURRENCY_MARKERS: tuple[str, ...] = ("US$", "R$", "$", "€", "£", "¥")

# A lone separator followed by exactly this many digits is a decimal point.
_DECIMAL_DIGITS = 2


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def parse_price(raw_value: object) -> float:
    """
    Parse a price cell into a float.

    Rules:
      1. Real numbers (int / float, not bool) pass through; negative or NaN → 0.
      2. Strip every character that is not a digit, "." or ",".
      3. Both separators present → the rightmost one is the decimal
         separator, every other separator is thousands grouping.
      4. One separator type present → decimal only if it occurs exactly once
         and is followed by exactly two digits; otherwise thousands grouping.
      5. Anything left unparseable → 0.

    Args:
        raw_value: Cell value (usually a string).

    Returns:
        Parsed, non-negative price, or 0.0.
    """
    if isinstance(raw_value, bool) or raw_value is None:
        return 0.0

    if isinstance(raw_value, (int, float)):
        value = float(raw_value)
        if math.isnan(value) or value < 0:
            return 0.0
        return value

    cleaned = _NON_NUMERIC_PATTERN.sub("", str(raw_value))
    if not any(char.isdigit() for char in cleaned):
        return 0.0

    normalized = _normalize_separators(cleaned)

    try:
        value = float(normalized)
    except ValueError:
        logger.debug(f"Cannot parse price from '{raw_value}' — using 0")
        return 0.0

    return value if math.isfinite(value) else 0.0


def detect_currency(raw_value: object) -> str | None:
    """
    Return the first currency marker found in *raw_value*, or None.

    Args:
        raw_value: Cell value; non-strings never carry a marker.
    """
    if not isinstance(raw_value, str):
        return None

    text = raw_value.upper()
    for marker in _CURRENCY_MARKERS:
        if marker in text:
            return marker
    return None


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

def _normalize_separators(cleaned: str) -> str:
    """
    Rewrite a digits-and-separators string into float() syntax.

    Args:
        cleaned: String containing only digits, "." and ",".

    Returns:
        String with thousands separators removed and "." as decimal point.
    """
    has_dot = "." in cleaned
    has_comma = "," in cleaned

    if has_dot and has_comma:
        decimal_idx = max(cleaned.rfind("."), cleaned.rfind(","))
        integer_part = _strip_separators(cleaned[:decimal_idx])
        fraction_part = cleaned[decimal_idx + 1 :]
        return f"{integer_part}.{fraction_part}"

    if not has_dot and not has_comma:
        return cleaned

    separator = "." if has_dot else ","
    if cleaned.count(separator) == 1:
        integer_part, _, fraction_part = cleaned.partition(separator)
        if len(fraction_part) == _DECIMAL_DIGITS:
            return f"{integer_part}.{fraction_part}"

    return _strip_separators(cleaned)


def _strip_separators(text: str) -> str:
    return text.replace(".", "").replace(",", "")
