"""
Pricing configuration defaults.

Tier names, default markups, rounding-rule names, and the visibility presets
offered in the sidebar.  Loaded settings that are missing a key fall back to
the values here.
"""

# ---------------------------------------------------------------------------
# Markup tiers: tier name → markup percentage
# "custom" is the one tier the operator edits freely.
# ---------------------------------------------------------------------------
CUSTOM_TIER: str = "custom"

DEFAULT_TIERS: dict[str, float] = {
    "tier1": 10.0,
    "tier2": 20.0,
    "tier3": 30.0,
    "tier4": 50.0,
    "tier5": 100.0,
    CUSTOM_TIER: 15.0,
}

DEFAULT_ACTIVE_TIER: str = "tier3"
DEFAULT_CLIENT_ADJUSTMENT: float = 15.0
DEFAULT_EXCHANGE_RATE: float = 1.0

# ---------------------------------------------------------------------------
# Rounding rules
# ---------------------------------------------------------------------------
ROUNDING_NONE = "none"
ROUNDING_NEAREST_INTEGER = "nearest-integer"
ROUNDING_UP_TO_99 = "up-to-.99"
ROUNDING_UP_TO_10 = "round-up-to-10"
ROUNDING_UP_TO_100 = "round-up-to-100"

ROUNDING_RULES: list[str] = [
    ROUNDING_NONE,
    ROUNDING_NEAREST_INTEGER,
    ROUNDING_UP_TO_99,
    ROUNDING_UP_TO_10,
    ROUNDING_UP_TO_100,
]

# Labels shown in the sidebar dropdown
ROUNDING_LABELS: dict[str, str] = {
    ROUNDING_NONE: "No rounding",
    ROUNDING_NEAREST_INTEGER: "Nearest whole unit (.00)",
    ROUNDING_UP_TO_99: "Ends in .99",
    ROUNDING_UP_TO_10: "Up to next 10",
    ROUNDING_UP_TO_100: "Up to next 100",
}

DEFAULT_ROUNDING_RULE: str = ROUNDING_NONE

# ---------------------------------------------------------------------------
# Currency
# ---------------------------------------------------------------------------
AUTO_CURRENCY: str = "auto"
CURRENCY_OVERRIDES: list[str] = [AUTO_CURRENCY, "$", "US$", "€", "£", "R$"]

# ---------------------------------------------------------------------------
# Visibility presets: which computed prices the view shows
# ---------------------------------------------------------------------------
VISIBILITY_PRESETS: dict[str, dict[str, bool]] = {
    "internal": {
        "show_base_cost": True,
        "show_seller_price": True,
        "show_suggested_price": True,
    },
    "reseller": {
        "show_base_cost": False,
        "show_seller_price": True,
        "show_suggested_price": True,
    },
    "client": {
        "show_base_cost": False,
        "show_seller_price": False,
        "show_suggested_price": True,
    },
}
