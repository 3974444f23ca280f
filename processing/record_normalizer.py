"""
Record normalizer — converts raw extraction items into RawProductRecords.

The extraction collaborator returns loosely-typed dicts: prices may be
numbers or strings ("$1.250,00"), brand may be null, key names vary
("originalPrice" / "price" / "original_price").  This module gives every
ingestion path the same canonical records.

Public API:
    normalize_records(items) → list[RawProductRecord]
"""

import logging

from config.column_keywords import DEFAULT_CURRENCY
from processing.models import RawProductRecord
from processing.numeric_parser import detect_currency, parse_price

logger = logging.getLogger(__name__)

_PRICE_KEYS: tuple[str, ...] = ("originalPrice", "original_price", "price")


def normalize_records(items: list[dict] | None) -> list[RawProductRecord]:
    """
    Convert raw item dicts into records, dropping unusable ones.

    An item is dropped when it is not a dict, its name is empty after
    trimming, or its price parses to zero or less.

    Args:
        items: Raw item dicts from an extraction result.

    Returns:
        Records in input order.
    """
    records: list[RawProductRecord] = []
    dropped = 0

    for item in items or []:
        record = _normalize_item(item)
        if record is None:
            dropped += 1
            continue
        records.append(record)

    logger.info(
        f"Normalized {len(records)} extracted records ({dropped} dropped)"
    )
    return records


def _normalize_item(item: object) -> RawProductRecord | None:
    if not isinstance(item, dict):
        logger.debug(f"Skipping non-object item: {item!r}")
        return None

    name = _text(item.get("name"))
    if not name:
        return None

    raw_price = next((item[key] for key in _PRICE_KEYS if key in item), None)
    price = parse_price(raw_price)
    if price <= 0:
        logger.debug(f"Skipping '{name}': no usable price ({raw_price!r})")
        return None

    currency = _text(item.get("currency")) or detect_currency(raw_price) or DEFAULT_CURRENCY

    return RawProductRecord(
        name=name,
        brand=_text(item.get("brand")),
        original_price=price,
        currency=currency,
    )


def _text(value: object) -> str:
    return "" if value is None else str(value).strip()
