"""
Pricing engine — projects the catalog into priced, searchable view rows.

Per product:
  1. Search filter on name / brand (case-insensitive substring).
  2. Local cost      = original price × exchange rate.
  3. Seller price    = local cost × (1 + active tier markup / 100).
  4. Suggested price = seller price × (1 + client adjustment / 100).
  5. The rounding rule is applied to seller and suggested price separately.
  6. Display currency = product currency, unless a global override is set.

The projection is read-only: it never changes the catalog and can be
recomputed on every settings change.  Visibility flags only matter when the
view is turned into a table for display or export.

Public API:
    project_catalog(catalog, config, search_term) → list[PricedProduct]
    apply_rounding(value, rule) → float
    priced_view_to_dataframe(priced, visibility) → pd.DataFrame
"""

import logging
import math
from dataclasses import dataclass

import pandas as pd

from config.column_keywords import DEFAULT_CURRENCY
from config.pricing_defaults import (
    AUTO_CURRENCY,
    ROUNDING_NEAREST_INTEGER,
    ROUNDING_NONE,
    ROUNDING_UP_TO_10,
    ROUNDING_UP_TO_100,
    ROUNDING_UP_TO_99,
)
from processing.models import CatalogProduct, PricingConfiguration, Visibility

logger = logging.getLogger(__name__)

# Values are rounded to this many decimals before a rounding rule is applied,
# so float noise (200 × 1.1 = 220.00000000000003) does not push a price up a step.
_NOISE_DECIMALS = 6


# ═══════════════════════════════════════════════════════════════════════════
# Data classes
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class PricedProduct:
    """One row of the priced view."""

    product: CatalogProduct
    local_cost: float
    seller_price: float
    suggested_price: float
    currency: str


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def project_catalog(
    catalog: list[CatalogProduct],
    config: PricingConfiguration,
    search_term: str = "",
) -> list[PricedProduct]:
    """
    Compute the priced view for every product matching *search_term*.

    Args:
        catalog: Current catalog (not modified).
        config: Pricing settings.
        search_term: Case-insensitive substring of name or brand; "" = all.

    Returns:
        PricedProduct rows in catalog order.
    """
    term = (search_term or "").strip().lower()
    markup = config.active_markup

    priced: list[PricedProduct] = []
    for product in catalog:
        if term and not _matches_search(product, term):
            continue

        local_cost = product.original_price * config.exchange_rate
        seller_price = local_cost * (1 + markup / 100)
        suggested_price = seller_price * (1 + config.client_adjustment / 100)

        priced.append(PricedProduct(
            product=product,
            local_cost=local_cost,
            seller_price=apply_rounding(seller_price, config.rounding_rule),
            suggested_price=apply_rounding(suggested_price, config.rounding_rule),
            currency=_display_currency(product, config.global_currency),
        ))

    logger.debug(
        f"Projected {len(priced)}/{len(catalog)} products "
        f"(tier={config.active_tier} {markup}%, client={config.client_adjustment}%, "
        f"rate={config.exchange_rate}, rounding={config.rounding_rule})"
    )
    return priced


def apply_rounding(value: float, rule: str) -> float:
    """
    Apply a rounding rule to a price.

    Rules:
      - none: unchanged.
      - nearest-integer: nearest whole unit, halves round up.
      - up-to-.99: whole unit (floor) plus 0.99.
      - round-up-to-10: smallest multiple of 10 ≥ value.
      - round-up-to-100: smallest multiple of 100 ≥ value.

    Unknown rules leave the value unchanged.
    """
    if rule == ROUNDING_NONE:
        return value

    clean = round(value, _NOISE_DECIMALS)

    if rule == ROUNDING_NEAREST_INTEGER:
        return float(math.floor(clean + 0.5))
    if rule == ROUNDING_UP_TO_99:
        return round(math.floor(clean) + 0.99, 2)
    if rule == ROUNDING_UP_TO_10:
        return float(math.ceil(clean / 10) * 10)
    if rule == ROUNDING_UP_TO_100:
        return float(math.ceil(clean / 100) * 100)

    logger.warning(f"Unknown rounding rule '{rule}' — price left unrounded")
    return value


def priced_view_to_dataframe(
    priced: list[PricedProduct],
    visibility: Visibility,
) -> pd.DataFrame:
    """
    Build a display table with only the visible price columns.

    Columns: Name, Brand, Currency, then Base Cost / Seller Price /
    Suggested Price as enabled by *visibility*, then Source and Id.
    """
    columns = ["Name", "Brand", "Currency"]
    if visibility.show_base_cost:
        columns.append("Base Cost")
    if visibility.show_seller_price:
        columns.append("Seller Price")
    if visibility.show_suggested_price:
        columns.append("Suggested Price")
    columns += ["Source", "Id"]

    rows = [
        {
            "Name": row.product.name,
            "Brand": row.product.brand,
            "Currency": row.currency,
            "Base Cost": round(row.local_cost, 2),
            "Seller Price": round(row.seller_price, 2),
            "Suggested Price": round(row.suggested_price, 2),
            "Source": row.product.source,
            "Id": row.product.id,
        }
        for row in priced
    ]

    return pd.DataFrame(rows, columns=columns)


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

def _matches_search(product: CatalogProduct, term: str) -> bool:
    return term in product.name.lower() or term in product.brand.lower()


def _display_currency(product: CatalogProduct, global_currency: str) -> str:
    if global_currency and global_currency != AUTO_CURRENCY:
        return global_currency
    return product.currency or DEFAULT_CURRENCY
