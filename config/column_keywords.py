"""
Column keyword tables for price-list ingestion.

Used by processing/tabular_normalizer.py to find the header row and to tag
each header cell with a column role (name / price / brand / unknown), and by
processing/messy_detector.py to spot free-text columns with embedded prices.

All keywords are lowercase and matched as substrings of the lowercased
header cell, so "Unit Price (USD)" matches "unit" and "price".
Price lists arrive in both English and Spanish, so both vocabularies live here.
"""

# ---------------------------------------------------------------------------
# Column roles
# ---------------------------------------------------------------------------
ROLE_NAME = "name"
ROLE_PRICE = "price"
ROLE_BRAND = "brand"
ROLE_UNKNOWN = "unknown"

# ---------------------------------------------------------------------------
# Keyword sets per role
# ---------------------------------------------------------------------------
NAME_KEYWORDS: tuple[str, ...] = (
    "name",
    "product",
    "description",
    "item",
    "title",
    "label",
    "nombre",
    "producto",
    "descripcion",
    "articulo",
    "detalle",
)

PRICE_KEYWORDS: tuple[str, ...] = (
    "price",
    "cost",
    "unit",
    "rate",
    "amount",
    "total",
    "precio",
    "costo",
    "venta",
    "p.u",
    "valor",
    "monto",
    "final",
    "lista",
    "unitario",
)

BRAND_KEYWORDS: tuple[str, ...] = (
    "brand",
    "sku",
    "code",
    "manufacturer",
    "marca",
    "fabricante",
    "cod",
)

# ---------------------------------------------------------------------------
# Header detection
# ---------------------------------------------------------------------------

# Only the first rows are scanned; price sheets put their header near the top,
# below an optional title / company banner.
HEADER_SCAN_ROWS: int = 20

# Positional fallback when no name + price column pair can be identified.
FALLBACK_NAME_COLUMN: int = 0
FALLBACK_PRICE_COLUMN: int = 1

# Rows whose trimmed name is shorter than this are dropped.
MIN_NAME_LENGTH: int = 2

DEFAULT_CURRENCY: str = "$"

# ---------------------------------------------------------------------------
# Messy (free-text) column detection
# ---------------------------------------------------------------------------

# Number of leading rows sampled when looking for a messy column.
MESSY_SAMPLE_ROWS: int = 20

# A sampled cell counts as "messy" when it carries a currency marker and is
# longer than this many characters.
MESSY_CELL_MIN_LENGTH: int = 10

# Fraction of sampled rows that must be messy for the column to qualify.
MESSY_ROW_FRACTION: float = 0.4

CURRENCY_MARKERS: tuple[str, ...] = ("$", "€", "£", "¥")

# Cells shorter than or equal to this are left out of the text block.
TEXT_BLOCK_MIN_CELL_LENGTH: int = 5

# Character budget for the text block handed to the cleaning collaborator.
TEXT_BLOCK_MAX_CHARS: int = 8000
