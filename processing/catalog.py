"""
Catalog merge engine — upserts extracted records into the master catalog.

The catalog is a plain list of immutable CatalogProduct objects.  Every
operation returns a NEW list; the input list and its products are never
modified, so callers decide when the new state is persisted.

Identity is the product name, trimmed and compared case-insensitively.
Brand is informational only.  Near-duplicate names ("Olive Oil 500ml" vs
"Olive Oil 500 ml") stay separate products; they are only reported in the
import summary for the operator to review.

Public API:
    upsert_products(catalog, incoming, source, now) → UpsertResult
    add_manual_product(catalog, now) → list[CatalogProduct]
    update_product(catalog, product_id, now, **updates) → list[CatalogProduct]
    delete_product(catalog, product_id) → list[CatalogProduct]
    clear_catalog() → list[CatalogProduct]
"""

import logging
from dataclasses import dataclass, field, replace

from config.column_keywords import DEFAULT_CURRENCY
from processing.models import (
    PRODUCT_SOURCES,
    SOURCE_MANUAL,
    CatalogProduct,
    ImportSummary,
    PossibleDuplicate,
    RawProductRecord,
    generate_id,
    utc_now_iso,
)
from utils.fuzzy_match import closest_name

logger = logging.getLogger(__name__)

# Minimum thefuzz score for a new name to be reported as a possible duplicate
DUPLICATE_NAME_THRESHOLD: int = 90

NEW_PRODUCT_NAME: str = "New Product"

# Fields an operator may edit by hand
EDITABLE_FIELDS: set[str] = {"name", "brand", "original_price", "currency"}


# ═══════════════════════════════════════════════════════════════════════════
# Data classes
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class UpsertResult:
    """Output of the upsert_products() function."""

    catalog: list[CatalogProduct] = field(default_factory=list)
    summary: ImportSummary = field(default_factory=ImportSummary)


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def upsert_products(
    catalog: list[CatalogProduct],
    incoming: list[RawProductRecord],
    source: str,
    now: str | None = None,
) -> UpsertResult:
    """
    Merge *incoming* records into *catalog*.

    Per record:
      - Name already in the catalog (case-insensitive) → overwrite brand,
        price, currency, source, and timestamp; count as updated.
      - Otherwise → new product with a fresh id; count as added.

    Products not mentioned in *incoming* are kept as they are.  New
    products are placed before existing ones, in incoming order; existing
    products keep their position.  A name repeated within *incoming* is
    added once and then updated.

    Records with an empty name or a price ≤ 0 are skipped.

    Args:
        catalog: Current catalog.
        incoming: Records from one import.
        source: Provenance tag (see processing.models.PRODUCT_SOURCES).
        now: Timestamp to stamp on written products (defaults to current UTC).

    Returns:
        UpsertResult with the new catalog and the import summary.
    """
    if source not in PRODUCT_SOURCES:
        logger.warning(f"Unknown source tag '{source}' on upsert")

    timestamp = now or utc_now_iso()
    summary = ImportSummary()

    existing = list(catalog)
    added: list[CatalogProduct] = []
    existing_names = [product.name for product in existing]

    # key → ("existing" | "added", position)
    positions: dict[str, tuple[str, int]] = {
        _identity_key(product.name): ("existing", idx)
        for idx, product in enumerate(existing)
    }

    for record in incoming:
        name = record.name.strip()
        if not name or record.original_price <= 0:
            logger.warning(
                f"Skipping record '{record.name}' with price {record.original_price}"
            )
            continue

        key = _identity_key(name)
        location = positions.get(key)

        if location is not None:
            bucket, idx = location
            target = existing if bucket == "existing" else added
            target[idx] = replace(
                target[idx],
                brand=record.brand,
                original_price=record.original_price,
                currency=record.currency or DEFAULT_CURRENCY,
                source=source,
                last_updated=timestamp,
            )
            summary.updated += 1
            logger.debug(f"Updated '{name}' from {source}")
            continue

        product = CatalogProduct(
            id=generate_id(),
            name=name,
            brand=record.brand,
            original_price=record.original_price,
            currency=record.currency or DEFAULT_CURRENCY,
            source=source,
            last_updated=timestamp,
        )
        positions[key] = ("added", len(added))
        added.append(product)
        summary.added += 1

        similar_name, score = closest_name(
            name, existing_names, threshold=DUPLICATE_NAME_THRESHOLD
        )
        if similar_name is not None:
            summary.possible_duplicates.append(
                PossibleDuplicate(new_name=name, existing_name=similar_name, score=score)
            )

    logger.info(
        f"Upsert complete ({source}): {summary.added} added, "
        f"{summary.updated} updated, {len(summary.possible_duplicates)} possible "
        f"duplicates, catalog size {len(added) + len(existing)}"
    )

    return UpsertResult(catalog=added + existing, summary=summary)


def add_manual_product(
    catalog: list[CatalogProduct],
    now: str | None = None,
) -> list[CatalogProduct]:
    """Prepend a blank placeholder product (price 0) for the operator to fill in."""
    product = CatalogProduct(
        id=generate_id(),
        name=NEW_PRODUCT_NAME,
        brand="",
        original_price=0.0,
        currency=DEFAULT_CURRENCY,
        source=SOURCE_MANUAL,
        last_updated=now or utc_now_iso(),
    )
    return [product] + list(catalog)


def update_product(
    catalog: list[CatalogProduct],
    product_id: str,
    now: str | None = None,
    **updates: object,
) -> list[CatalogProduct]:
    """
    Apply a manual edit to one product.

    Editable fields: name, brand, original_price, currency.  The edit marks
    the product as manually sourced and refreshes its timestamp.

    Raises:
        ValueError: Unknown product id, non-editable field, or a negative /
            non-numeric price.
    """
    unknown_fields = set(updates) - EDITABLE_FIELDS
    if unknown_fields:
        raise ValueError(f"Fields not editable: {', '.join(sorted(unknown_fields))}")

    changes = dict(updates)
    if "original_price" in changes:
        try:
            price = float(changes["original_price"])
        except (TypeError, ValueError):
            raise ValueError(f"Price '{changes['original_price']}' is not a number")
        if price < 0:
            raise ValueError(f"Price cannot be negative (got {price})")
        changes["original_price"] = price

    for text_field in ("name", "brand", "currency"):
        if text_field in changes:
            changes[text_field] = str(changes[text_field] or "").strip()

    result: list[CatalogProduct] = []
    found = False
    for product in catalog:
        if product.id == product_id:
            product = replace(
                product,
                **changes,
                source=SOURCE_MANUAL,
                last_updated=now or utc_now_iso(),
            )
            found = True
        result.append(product)

    if not found:
        raise ValueError(f"No product with id '{product_id}'")

    logger.info(f"Product {product_id} edited: {', '.join(sorted(changes))}")
    return result


def delete_product(
    catalog: list[CatalogProduct],
    product_id: str,
) -> list[CatalogProduct]:
    """Remove one product.  An unknown id leaves the catalog unchanged."""
    result = [product for product in catalog if product.id != product_id]
    if len(result) == len(catalog):
        logger.warning(f"Delete requested for unknown product id '{product_id}'")
    return result


def clear_catalog() -> list[CatalogProduct]:
    """Empty catalog (the "clear view" action)."""
    logger.info("Catalog cleared")
    return []


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

def _identity_key(name: str) -> str:
    return name.strip().lower()
