"""
Tests for processing/pricing_engine.py

Covers: the price chain (exchange rate → tier markup → client adjustment),
every rounding rule, search filtering, currency override, unknown tiers,
and the visibility-aware DataFrame view.
"""

import pytest

from config.pricing_defaults import (
    ROUNDING_NEAREST_INTEGER,
    ROUNDING_NONE,
    ROUNDING_UP_TO_10,
    ROUNDING_UP_TO_100,
    ROUNDING_UP_TO_99,
)
from processing.catalog import upsert_products
from processing.models import (
    SOURCE_FILE,
    PricingConfiguration,
    RawProductRecord,
    Visibility,
)
from processing.pricing_engine import (
    apply_rounding,
    priced_view_to_dataframe,
    project_catalog,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_catalog():
    records = [
        RawProductRecord(name="Blue Widget", brand="Acme", original_price=100.0, currency="$"),
        RawProductRecord(name="Olive Oil", brand="WidgetCo", original_price=50.0, currency="€"),
        RawProductRecord(name="Rice", brand="Farm", original_price=10.0, currency="$"),
    ]
    return upsert_products([], records, SOURCE_FILE, now="2024-05-01T00:00:00+00:00").catalog


def _make_config(**overrides) -> PricingConfiguration:
    config = PricingConfiguration(
        exchange_rate=2.0,
        tiers={"t1": 10.0},
        active_tier="t1",
        client_adjustment=20.0,
        rounding_rule=ROUNDING_NONE,
    )
    for key, value in overrides.items():
        setattr(config, key, value)
    return config


# ═══════════════════════════════════════════════════════════════════════════
# Price chain
# ═══════════════════════════════════════════════════════════════════════════

class TestProjectCatalog:
    def test_price_chain(self):
        priced = project_catalog(_make_catalog(), _make_config())

        widget = priced[0]
        assert widget.local_cost == pytest.approx(200.0)
        assert widget.seller_price == pytest.approx(220.0)
        assert widget.suggested_price == pytest.approx(264.0)

    def test_rounding_applied_to_seller_and_suggested(self):
        priced = project_catalog(_make_catalog(), _make_config(rounding_rule=ROUNDING_UP_TO_100))

        widget = priced[0]
        assert widget.local_cost == pytest.approx(200.0)
        assert widget.seller_price == 300.0
        assert widget.suggested_price == 300.0

    def test_float_noise_does_not_push_up_a_step(self):
        priced = project_catalog(_make_catalog(), _make_config(rounding_rule=ROUNDING_UP_TO_10))
        assert priced[0].seller_price == 220.0

    def test_unknown_active_tier_means_no_markup(self):
        priced = project_catalog(_make_catalog(), _make_config(active_tier="gone"))
        assert priced[0].seller_price == pytest.approx(priced[0].local_cost)

    def test_catalog_not_modified(self):
        catalog = _make_catalog()
        snapshot = list(catalog)
        project_catalog(catalog, _make_config())
        assert catalog == snapshot

    def test_search_matches_name_or_brand(self):
        priced = project_catalog(_make_catalog(), _make_config(), search_term="widget")
        assert [row.product.name for row in priced] == ["Blue Widget", "Olive Oil"]

    def test_blank_search_returns_all(self):
        assert len(project_catalog(_make_catalog(), _make_config(), search_term="  ")) == 3

    def test_product_currency_when_auto(self):
        priced = project_catalog(_make_catalog(), _make_config())
        assert [row.currency for row in priced] == ["$", "€", "$"]

    def test_global_currency_override(self):
        priced = project_catalog(_make_catalog(), _make_config(global_currency="US$"))
        assert {row.currency for row in priced} == {"US$"}


# ═══════════════════════════════════════════════════════════════════════════
# Rounding rules
# ═══════════════════════════════════════════════════════════════════════════

class TestApplyRounding:
    @pytest.mark.parametrize("value, rule, expected", [
        (219.4, ROUNDING_UP_TO_99, 219.99),
        (219.0, ROUNDING_UP_TO_99, 219.99),
        (221.0, ROUNDING_UP_TO_10, 230.0),
        (220.0, ROUNDING_UP_TO_10, 220.0),
        (101.0, ROUNDING_UP_TO_100, 200.0),
        (100.0, ROUNDING_UP_TO_100, 100.0),
        (2.5, ROUNDING_NEAREST_INTEGER, 3.0),
        (2.4, ROUNDING_NEAREST_INTEGER, 2.0),
        (12.345, ROUNDING_NONE, 12.345),
    ])
    def test_rules(self, value, rule, expected):
        assert apply_rounding(value, rule) == pytest.approx(expected)

    def test_up_to_10_never_lowers(self):
        for value in (0.5, 9.99, 10.01, 99.5):
            assert apply_rounding(value, ROUNDING_UP_TO_10) >= value

    def test_unknown_rule_leaves_value(self):
        assert apply_rounding(12.345, "banker") == 12.345


# ═══════════════════════════════════════════════════════════════════════════
# DataFrame view
# ═══════════════════════════════════════════════════════════════════════════

class TestPricedViewToDataframe:
    def test_internal_view_columns(self):
        priced = project_catalog(_make_catalog(), _make_config())

        df = priced_view_to_dataframe(priced, Visibility())

        assert list(df.columns) == [
            "Name", "Brand", "Currency", "Base Cost", "Seller Price",
            "Suggested Price", "Source", "Id",
        ]
        assert len(df) == 3
        assert df.at[0, "Seller Price"] == pytest.approx(220.0)

    def test_client_view_hides_costs(self):
        priced = project_catalog(_make_catalog(), _make_config())
        visibility = Visibility(show_base_cost=False, show_seller_price=False)

        df = priced_view_to_dataframe(priced, visibility)

        assert "Base Cost" not in df.columns
        assert "Seller Price" not in df.columns
        assert "Suggested Price" in df.columns

    def test_empty_view_keeps_columns(self):
        df = priced_view_to_dataframe([], Visibility())
        assert df.empty
        assert "Name" in df.columns
