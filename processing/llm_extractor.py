"""
LLM extractor — pulls product/price lists out of images, text, and web pages.

Three operations, each one Claude call returning a JSON object with an
"items" array (name, brand, originalPrice, currency):
  - extract_from_image: vision extraction from a photo of a price sheet.
  - clean_messy_data: structure a free-text block (messy spreadsheet column).
  - extract_from_url: web search for the page, then extraction; citations
    found along the way are returned as grounding sources.

Any failure — network, API, quota, empty or unparseable response — raises
ExtractionError (MalformedResponseError for bad JSON).  Callers treat that
as a failed import; no partial result is ever returned.

Public API:
    ClaudeExtractor(api_key).extract_from_image(image_bytes, mime_type) → ExtractionPayload
    ClaudeExtractor(api_key).clean_messy_data(text_block) → ExtractionPayload
    ClaudeExtractor(api_key).extract_from_url(url) → ExtractionPayload
    parse_extraction_response(response_text) → list[dict]
"""

import base64
import json
import logging
import re
import time
from dataclasses import dataclass, field

from processing.models import GroundingSource, RawProductRecord
from processing.record_normalizer import normalize_records

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# Constants
# ═══════════════════════════════════════════════════════════════════════════

_MODEL_ID = "claude-sonnet-4-20250514"

_MAX_TOKENS = 8192

_RETRY_DELAY_SECONDS = 2

_WEB_SEARCH_TOOL = {
    "type": "web_search_20250305",
    "name": "web_search",
    "max_uses": 5,
}

_EXTRACTION_PROMPT = """Extract all distinct product names, their brands or variants, and their unit prices.

Rules:
1. Extract "name" (the product's primary identity).
2. Extract "brand" (manufacturer or variant; "" if none).
3. Extract "originalPrice" as a plain number, no currency symbols or
   thousands separators.
4. Identify "currency" as the symbol used in the source (e.g. "$", "€").
5. Skip headers, totals, shipping costs, and anything without a price.

Return ONLY a JSON object of the form:
{"items": [{"name": "...", "brand": "...", "originalPrice": 0.0, "currency": "$"}]}"""

_CLEAN_PROMPT_TEMPLATE = """Clean this messy price-list data:

{text_block}

{extraction_prompt}"""

_URL_PROMPT_TEMPLATE = """Extract prices from this web page: {url}

Search for the page and read its product listing.

{extraction_prompt}"""


# ═══════════════════════════════════════════════════════════════════════════
# Errors and data classes
# ═══════════════════════════════════════════════════════════════════════════

class ExtractionError(Exception):
    """The extraction service failed (network, API, quota, empty response)."""


class MalformedResponseError(ExtractionError):
    """The extraction service answered, but not with the expected JSON."""


@dataclass
class ExtractionPayload:
    """Successful result of one extraction call."""

    items: list[RawProductRecord] = field(default_factory=list)
    sources: list[GroundingSource] = field(default_factory=list)
    input_tokens: int = 0
    output_tokens: int = 0
    api_cost_estimate: float = 0.0


@dataclass
class _ClaudeResponse:
    text: str
    sources: list[GroundingSource]
    input_tokens: int
    output_tokens: int
    cost: float


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

class ClaudeExtractor:
    """Extraction collaborator backed by the Anthropic Messages API."""

    def __init__(self, api_key: str, model: str = _MODEL_ID):
        self.api_key = api_key
        self.model = model

    def extract_from_image(self, image_bytes: bytes, mime_type: str) -> ExtractionPayload:
        """Extract products from a photograph or scan of a price sheet."""
        if not image_bytes:
            raise ExtractionError("Image is empty")

        content = [
            {
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": mime_type,
                    "data": base64.b64encode(image_bytes).decode("ascii"),
                },
            },
            {"type": "text", "text": _EXTRACTION_PROMPT},
        ]
        return self._extract(content, label="image")

    def clean_messy_data(self, text_block: str) -> ExtractionPayload:
        """Structure a free-text block of products and prices."""
        if not text_block.strip():
            raise ExtractionError("Text block is empty")

        prompt = _CLEAN_PROMPT_TEMPLATE.format(
            text_block=text_block,
            extraction_prompt=_EXTRACTION_PROMPT,
        )
        return self._extract(prompt, label="text block")

    def extract_from_url(self, url: str) -> ExtractionPayload:
        """Fetch a web page via web search and extract its prices."""
        if not url.strip():
            raise ExtractionError("URL is empty")

        prompt = _URL_PROMPT_TEMPLATE.format(
            url=url.strip(),
            extraction_prompt=_EXTRACTION_PROMPT,
        )
        return self._extract(prompt, label="url", tools=[_WEB_SEARCH_TOOL])

    # ── Internal ──────────────────────────────────────────────────────

    def _extract(
        self,
        content: str | list[dict],
        label: str,
        tools: list[dict] | None = None,
    ) -> ExtractionPayload:
        try:
            response = _call_claude_api(self.api_key, self.model, content, tools)
        except Exception as exc:
            logger.error(f"Extraction API call failed ({label}): {exc}")
            # Try once more after a short delay
            try:
                time.sleep(_RETRY_DELAY_SECONDS)
                response = _call_claude_api(self.api_key, self.model, content, tools)
            except Exception as retry_exc:
                logger.error(f"Extraction API retry also failed ({label}): {retry_exc}")
                raise ExtractionError(f"Extraction service error: {retry_exc}") from retry_exc

        raw_items = parse_extraction_response(response.text)
        items = normalize_records(raw_items)

        logger.info(
            f"Extraction complete ({label}): {len(raw_items)} items returned, "
            f"{len(items)} usable, {len(response.sources)} sources, "
            f"estimated cost: ${response.cost:.4f}"
        )

        return ExtractionPayload(
            items=items,
            sources=response.sources,
            input_tokens=response.input_tokens,
            output_tokens=response.output_tokens,
            api_cost_estimate=response.cost,
        )


def parse_extraction_response(response_text: str) -> list[dict]:
    """
    Parse the "items" array out of the model's response text.

    Handles markdown code fences, prose before/after the JSON object,
    trailing commas, and a bare top-level array.

    Args:
        response_text: Raw text from the model.

    Returns:
        List of raw item dicts.

    Raises:
        MalformedResponseError: No parseable JSON object/array was found,
            or "items" is not a list.
    """
    if not response_text or not response_text.strip():
        raise MalformedResponseError("Empty response from extraction service")

    # Try to extract JSON from markdown code fences
    fenced_match = re.search(r"```(?:json)?\s*\n?(.*?)```", response_text, re.DOTALL)
    json_text = fenced_match.group(1).strip() if fenced_match else response_text.strip()

    json_text = _slice_json(json_text)
    if json_text is None:
        raise MalformedResponseError("No JSON object found in extraction response")

    # Fix common JSON issues: trailing commas before ] or }
    json_text = re.sub(r",\s*([}\]])", r"\1", json_text)

    try:
        parsed = json.loads(json_text)
    except json.JSONDecodeError as exc:
        raise MalformedResponseError(f"Invalid JSON in extraction response: {exc}") from exc

    items = parsed.get("items", []) if isinstance(parsed, dict) else parsed
    if not isinstance(items, list):
        raise MalformedResponseError("'items' in extraction response is not a list")

    return items


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

def _slice_json(text: str) -> str | None:
    """Cut *text* down to its outermost JSON object or array, whichever opens first."""
    candidates = [
        (text.find(open_char), close_char)
        for open_char, close_char in (("{", "}"), ("[", "]"))
        if text.find(open_char) != -1
    ]
    if not candidates:
        return None

    start_idx, close_char = min(candidates)
    end_idx = text.rfind(close_char)
    if end_idx <= start_idx:
        return None
    return text[start_idx : end_idx + 1]


def _call_claude_api(
    api_key: str,
    model: str,
    content: str | list[dict],
    tools: list[dict] | None = None,
) -> _ClaudeResponse:
    """
    Send one message to Claude and collect text, citations, and usage.

    Raises:
        Exception: On API errors (network, auth, rate limit, etc.), or when
            the response has no text.
    """
    import anthropic

    client = anthropic.Anthropic(api_key=api_key)

    request: dict = {
        "model": model,
        "max_tokens": _MAX_TOKENS,
        "messages": [{"role": "user", "content": content}],
    }
    if tools:
        request["tools"] = tools

    message = client.messages.create(**request)

    text_parts: list[str] = []
    for block in message.content:
        if getattr(block, "type", None) == "text":
            text_parts.append(block.text)

    response_text = "\n".join(text_parts)
    if not response_text.strip():
        raise ExtractionError("Extraction service returned no text")

    # Estimate cost from token usage (Sonnet pricing: ~$3/M input, ~$15/M output)
    input_tokens = message.usage.input_tokens
    output_tokens = message.usage.output_tokens
    estimated_cost = (input_tokens * 3.0 / 1_000_000) + (output_tokens * 15.0 / 1_000_000)

    logger.info(
        f"Claude API call: {input_tokens} input tokens, "
        f"{output_tokens} output tokens, est. cost ${estimated_cost:.4f}"
    )

    return _ClaudeResponse(
        text=response_text,
        sources=_collect_sources(message.content),
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        cost=estimated_cost,
    )


def _collect_sources(blocks: list) -> list[GroundingSource]:
    """
    Gather web citations from a response, first occurrence of each URL wins.

    Looks at web_search_tool_result blocks (search hits) and at citations
    attached to text blocks.
    """
    sources: list[GroundingSource] = []
    seen: set[str] = set()

    def _add(url: str | None, title: str | None) -> None:
        if not url or url in seen:
            return
        seen.add(url)
        sources.append(GroundingSource(uri=url, title=title or url))

    for block in blocks:
        block_type = getattr(block, "type", None)

        if block_type == "web_search_tool_result":
            results = getattr(block, "content", None)
            if isinstance(results, list):
                for hit in results:
                    _add(getattr(hit, "url", None), getattr(hit, "title", None))

        elif block_type == "text":
            for citation in getattr(block, "citations", None) or []:
                _add(getattr(citation, "url", None), getattr(citation, "title", None))

    return sources
