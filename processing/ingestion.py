"""
Ingestion — runs one user-triggered import end to end.

Every import returns an IngestionResult: either success with records (and,
for URL imports, grounding sources) or failure with an error kind and a
user-facing message.  A failed result carries no records, so applying it
never changes the catalog.

Tabular flow:
  1. Read the file into a grid (empty → empty_source).
  2. Sample the first rows for a messy free-text column.
  3. Messy column + extractor available → send the column as a text block
     to clean_messy_data.  If that fails or finds nothing, fall back to
     column extraction on the full grid.
  4. Column extraction via the tabular normalizer.
  5. No records left → no_valid_records.

Public API:
    import_tabular_file(file_path, extractor) → IngestionResult
    import_grid(grid, extractor) → IngestionResult
    import_image(image_bytes, mime_type, extractor) → IngestionResult
    import_url(url, extractor) → IngestionResult
    apply_import(catalog, result, now) → UpsertResult
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from config.column_keywords import MESSY_SAMPLE_ROWS
from processing.catalog import UpsertResult, upsert_products
from processing.file_reader import read_tabular_file
from processing.llm_extractor import (
    ExtractionError,
    ExtractionPayload,
    MalformedResponseError,
)
from processing.messy_detector import build_text_block, detect_messy_column
from processing.models import (
    SOURCE_FILE,
    SOURCE_IMAGE,
    SOURCE_TEXT_BLOCK,
    SOURCE_URL,
    CatalogProduct,
    GroundingSource,
    ImportSummary,
    RawProductRecord,
)
from processing.tabular_normalizer import normalize_grid

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# Error kinds and user-facing messages
# ═══════════════════════════════════════════════════════════════════════════

EMPTY_SOURCE = "empty_source"
NO_VALID_RECORDS = "no_valid_records"
EXTRACTION_FAILURE = "extraction_failure"
MALFORMED_RESPONSE = "malformed_response"

ERROR_MESSAGES: dict[str, str] = {
    EMPTY_SOURCE: "The source has no rows to import.",
    NO_VALID_RECORDS: "No valid products were detected (each needs a name and a price above 0).",
    EXTRACTION_FAILURE: "The AI extraction service failed. Please try again.",
    MALFORMED_RESPONSE: "The AI extraction service returned an unreadable answer.",
}


class Extractor(Protocol):
    """The extraction collaborator (see processing.llm_extractor.ClaudeExtractor)."""

    def extract_from_image(self, image_bytes: bytes, mime_type: str) -> ExtractionPayload: ...

    def clean_messy_data(self, text_block: str) -> ExtractionPayload: ...

    def extract_from_url(self, url: str) -> ExtractionPayload: ...


# ═══════════════════════════════════════════════════════════════════════════
# Data classes
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class IngestionResult:
    """Outcome of one import: success with records, or failure with a reason."""

    success: bool = False
    records: list[RawProductRecord] = field(default_factory=list)
    source: str = SOURCE_FILE
    sources: list[GroundingSource] = field(default_factory=list)
    error_kind: str | None = None
    message: str = ""
    used_ai_cleanup: bool = False

    @classmethod
    def failure(cls, error_kind: str, source: str, detail: str = "") -> "IngestionResult":
        message = ERROR_MESSAGES[error_kind]
        if detail:
            message = f"{message} ({detail})"
        return cls(success=False, source=source, error_kind=error_kind, message=message)


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def import_tabular_file(
    file_path: Path,
    extractor: Extractor | None = None,
) -> IngestionResult:
    """
    Import a CSV / TSV / TXT / XLSX price list.

    Args:
        file_path: Path to the file.
        extractor: Optional collaborator for messy free-text columns.
    """
    read_result = read_tabular_file(Path(file_path))

    if read_result.errors:
        logger.error(f"Import of '{Path(file_path).name}' failed: {read_result.errors}")
        return IngestionResult.failure(
            EMPTY_SOURCE, SOURCE_FILE, detail="; ".join(read_result.errors)
        )

    return import_grid(read_result.grid, extractor)


def import_grid(
    grid: list[list[object]],
    extractor: Extractor | None = None,
) -> IngestionResult:
    """
    Import an already-read grid of cells.

    Args:
        grid: Rows of cell values.
        extractor: Optional collaborator for messy free-text columns.
    """
    if not grid or all(not row for row in grid):
        return IngestionResult.failure(EMPTY_SOURCE, SOURCE_FILE)

    messy_column = detect_messy_column(grid[:MESSY_SAMPLE_ROWS])

    if messy_column is not None and extractor is not None:
        text_block = build_text_block(grid, messy_column)
        try:
            payload = extractor.clean_messy_data(text_block)
        except ExtractionError as exc:
            logger.warning(
                f"AI cleanup of column {messy_column} failed ({exc}) — "
                "falling back to column extraction"
            )
        else:
            if payload.items:
                return IngestionResult(
                    success=True,
                    records=payload.items,
                    source=SOURCE_TEXT_BLOCK,
                    sources=payload.sources,
                    used_ai_cleanup=True,
                )
            logger.warning(
                "AI cleanup returned no products — falling back to column extraction"
            )
    elif messy_column is not None:
        logger.info("Messy column found but no extractor configured — using column extraction")

    normalized = normalize_grid(grid)
    if not normalized.records:
        return IngestionResult.failure(NO_VALID_RECORDS, SOURCE_FILE)

    return IngestionResult(success=True, records=normalized.records, source=SOURCE_FILE)


def import_image(
    image_bytes: bytes,
    mime_type: str,
    extractor: Extractor,
) -> IngestionResult:
    """Import a photograph of a price sheet through the extraction collaborator."""
    if not image_bytes:
        return IngestionResult.failure(EMPTY_SOURCE, SOURCE_IMAGE)

    return _run_extraction(
        lambda: extractor.extract_from_image(image_bytes, mime_type),
        SOURCE_IMAGE,
    )


def import_url(url: str, extractor: Extractor) -> IngestionResult:
    """Import a web page's price listing; grounding sources pass through untouched."""
    if not url or not url.strip():
        return IngestionResult.failure(EMPTY_SOURCE, SOURCE_URL)

    return _run_extraction(lambda: extractor.extract_from_url(url.strip()), SOURCE_URL)


def apply_import(
    catalog: list[CatalogProduct],
    result: IngestionResult,
    now: str | None = None,
) -> UpsertResult:
    """
    Merge a successful import into the catalog.

    A failed result returns the catalog unchanged with an empty summary.
    """
    if not result.success:
        logger.info(f"Import not applied: {result.error_kind}")
        return UpsertResult(catalog=list(catalog), summary=ImportSummary())

    return upsert_products(catalog, result.records, result.source, now=now)


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

def _run_extraction(call, source: str) -> IngestionResult:
    """Run one collaborator call and wrap its outcome."""
    try:
        payload = call()
    except MalformedResponseError as exc:
        logger.error(f"Malformed extraction response ({source}): {exc}")
        return IngestionResult.failure(MALFORMED_RESPONSE, source)
    except ExtractionError as exc:
        logger.error(f"Extraction failed ({source}): {exc}")
        return IngestionResult.failure(EXTRACTION_FAILURE, source)

    if not payload.items:
        result = IngestionResult.failure(NO_VALID_RECORDS, source)
        result.sources = payload.sources
        return result

    return IngestionResult(
        success=True,
        records=payload.items,
        source=source,
        sources=payload.sources,
    )
