"""
Core records shared across the pipeline.

RawProductRecord   — one extracted product, not yet in the catalog.
CatalogProduct     — one persisted catalog entry (immutable; edits produce a copy).
SavedList          — a named snapshot of the catalog.
ImportSummary      — counts from one merge.
PricingConfiguration / Visibility — operator settings for the priced view.

Persisted forms use camelCase keys (originalPrice, lastUpdated, ...); the
to_dict() / from_dict() helpers translate.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from config.column_keywords import DEFAULT_CURRENCY
from config.pricing_defaults import (
    AUTO_CURRENCY,
    DEFAULT_ACTIVE_TIER,
    DEFAULT_CLIENT_ADJUSTMENT,
    DEFAULT_EXCHANGE_RATE,
    DEFAULT_ROUNDING_RULE,
    DEFAULT_TIERS,
    ROUNDING_RULES,
)

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# Provenance tags
# ═══════════════════════════════════════════════════════════════════════════

SOURCE_FILE = "file"
SOURCE_TEXT_BLOCK = "text-block"
SOURCE_IMAGE = "image"
SOURCE_URL = "url"
SOURCE_MANUAL = "manual"

PRODUCT_SOURCES: set[str] = {
    SOURCE_FILE,
    SOURCE_TEXT_BLOCK,
    SOURCE_IMAGE,
    SOURCE_URL,
    SOURCE_MANUAL,
}


def generate_id() -> str:
    """Return a fresh opaque identifier."""
    return uuid.uuid4().hex


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


# ═══════════════════════════════════════════════════════════════════════════
# Products
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class RawProductRecord:
    """One product as extracted from a source, before it reaches the catalog."""

    name: str
    brand: str = ""
    original_price: float = 0.0
    currency: str = DEFAULT_CURRENCY


@dataclass(frozen=True)
class CatalogProduct:
    """A catalog entry.  ``id`` is assigned once and never changes."""

    id: str
    name: str
    brand: str
    original_price: float
    currency: str
    source: str
    last_updated: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "brand": self.brand,
            "originalPrice": self.original_price,
            "currency": self.currency,
            "source": self.source,
            "lastUpdated": self.last_updated,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CatalogProduct":
        """
        Build a product from its persisted form.

        Missing optional fields get defaults; a missing id gets a fresh one.
        A negative or non-numeric price is stored as 0.
        """
        try:
            price = float(data.get("originalPrice", 0) or 0)
        except (TypeError, ValueError):
            price = 0.0
        if price < 0:
            price = 0.0

        return cls(
            id=str(data.get("id") or generate_id()),
            name=str(data.get("name", "")),
            brand=str(data.get("brand", "") or ""),
            original_price=price,
            currency=str(data.get("currency") or DEFAULT_CURRENCY),
            source=str(data.get("source") or SOURCE_MANUAL),
            last_updated=str(data.get("lastUpdated") or utc_now_iso()),
        )


@dataclass(frozen=True)
class SavedList:
    """Named snapshot of the catalog at one point in time."""

    id: str
    name: str
    date: str
    items: tuple[CatalogProduct, ...] = ()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "date": self.date,
            "items": [item.to_dict() for item in self.items],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SavedList":
        return cls(
            id=str(data.get("id") or generate_id()),
            name=str(data.get("name", "")),
            date=str(data.get("date") or utc_now_iso()),
            items=tuple(
                CatalogProduct.from_dict(item) for item in data.get("items", [])
            ),
        )


@dataclass
class PossibleDuplicate:
    """A newly added name that closely resembles an existing catalog name."""

    new_name: str
    existing_name: str
    score: int


@dataclass
class ImportSummary:
    """Outcome of one merge: how many records were added vs. updated."""

    added: int = 0
    updated: int = 0
    possible_duplicates: list[PossibleDuplicate] = field(default_factory=list)


@dataclass
class GroundingSource:
    """A citation returned by a web-search-backed extraction."""

    uri: str
    title: str


# ═══════════════════════════════════════════════════════════════════════════
# Pricing configuration
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class Visibility:
    """Which computed prices the priced view shows.  Never affects computation."""

    show_base_cost: bool = True
    show_seller_price: bool = True
    show_suggested_price: bool = True


@dataclass
class PricingConfiguration:
    """Operator-editable pricing settings, persisted apart from the catalog."""

    exchange_rate: float = DEFAULT_EXCHANGE_RATE
    rounding_rule: str = DEFAULT_ROUNDING_RULE
    tiers: dict[str, float] = field(default_factory=lambda: dict(DEFAULT_TIERS))
    active_tier: str = DEFAULT_ACTIVE_TIER
    client_adjustment: float = DEFAULT_CLIENT_ADJUSTMENT
    visibility: Visibility = field(default_factory=Visibility)
    global_currency: str = AUTO_CURRENCY

    @property
    def active_markup(self) -> float:
        """Markup percentage of the active tier (0 if the tier is unknown)."""
        markup = self.tiers.get(self.active_tier)
        if markup is None:
            logger.warning(
                f"Active tier '{self.active_tier}' not configured — using 0% markup"
            )
            return 0.0
        return float(markup)

    def to_dict(self) -> dict:
        return {
            "exchangeRate": self.exchange_rate,
            "roundingRule": self.rounding_rule,
            "tiers": dict(self.tiers),
            "activeTier": self.active_tier,
            "clientAdjustment": self.client_adjustment,
            "visibility": {
                "showBaseCost": self.visibility.show_base_cost,
                "showSellerPrice": self.visibility.show_seller_price,
                "showSuggestedPrice": self.visibility.show_suggested_price,
            },
            "globalCurrency": self.global_currency,
        }

    @classmethod
    def from_dict(cls, data: dict | None) -> "PricingConfiguration":
        """
        Build a configuration from persisted settings.

        Missing keys take the defaults from config/pricing_defaults.py.
        Invalid values (non-positive exchange rate, unknown rounding rule,
        unknown active tier, non-numeric markups) are replaced by defaults
        and logged as warnings.
        """
        config = cls()
        if not data:
            return config

        rate = _as_float(data.get("exchangeRate"), DEFAULT_EXCHANGE_RATE)
        if rate <= 0:
            logger.warning(
                f"Invalid exchange rate {rate} — using {DEFAULT_EXCHANGE_RATE}"
            )
            rate = DEFAULT_EXCHANGE_RATE
        config.exchange_rate = rate

        rule = data.get("roundingRule", DEFAULT_ROUNDING_RULE)
        if rule not in ROUNDING_RULES:
            logger.warning(
                f"Unknown rounding rule '{rule}' — using '{DEFAULT_ROUNDING_RULE}'"
            )
            rule = DEFAULT_ROUNDING_RULE
        config.rounding_rule = rule

        tiers = dict(DEFAULT_TIERS)
        for tier_name, markup in (data.get("tiers") or {}).items():
            tiers[str(tier_name)] = _as_float(markup, tiers.get(tier_name, 0.0))
        config.tiers = tiers

        active_tier = data.get("activeTier", DEFAULT_ACTIVE_TIER)
        if active_tier not in tiers:
            logger.warning(
                f"Unknown active tier '{active_tier}' — using '{DEFAULT_ACTIVE_TIER}'"
            )
            active_tier = DEFAULT_ACTIVE_TIER
        config.active_tier = active_tier

        config.client_adjustment = _as_float(
            data.get("clientAdjustment"), DEFAULT_CLIENT_ADJUSTMENT
        )

        visibility = data.get("visibility") or {}
        config.visibility = Visibility(
            show_base_cost=bool(visibility.get("showBaseCost", True)),
            show_seller_price=bool(visibility.get("showSellerPrice", True)),
            show_suggested_price=bool(visibility.get("showSuggestedPrice", True)),
        )

        config.global_currency = str(data.get("globalCurrency") or AUTO_CURRENCY)
        return config


def _as_float(value: object, default: float) -> float:
    """Convert *value* to float, returning *default* for None / garbage."""
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning(f"Non-numeric setting '{value}' — using {default}")
        return default
