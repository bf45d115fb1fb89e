# /brandflow/services/response_parser.py

import json
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

import structlog

from brandflow.utils.metrics import parse_fallback_counter

# Turns raw model text into a flow output. Parsing never raises: anything that
# is not a JSON object is replaced by the flow's deterministic fallback object.
# A parsed object is trusted as-is; its shape is not checked against the
# flow's output model.

log = structlog.get_logger(__name__)

PARSED_CONFIDENCE = 0.85
FALLBACK_CONFIDENCE = 0.5
RAW_TEXT_LOG_LIMIT = 500


def iso_timestamp(moment: Optional[datetime] = None) -> str:
    """UTC timestamp with millisecond precision and a `Z` suffix."""
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _reject_constant(name: str):
    # NaN and Infinity are not JSON.
    raise ValueError(f"Invalid JSON constant: {name}")


def strip_code_fences(text: str) -> str:
    clean_text = text.strip()
    if clean_text.startswith("```json"):
        clean_text = clean_text[7:]
    if clean_text.startswith("```"):
        clean_text = clean_text[3:]
    if clean_text.endswith("```"):
        clean_text = clean_text[:-3]
    return clean_text.strip()


def parse_flow_response(
    raw_text: str,
    fallback: Callable[[], Dict[str, Any]],
    flow_name: str,
    generated_at: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Parse `raw_text` into a flow output.

    On success the parsed object gets `confidence` = PARSED_CONFIDENCE and a fresh
    `generatedAt`. On failure `fallback()` is returned; fallbacks carry
    FALLBACK_CONFIDENCE themselves.
    """
    try:
        parsed = json.loads(strip_code_fences(raw_text or ""), parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        parsed = None

    if isinstance(parsed, dict):
        return {
            **parsed,
            "confidence": PARSED_CONFIDENCE,
            "generatedAt": generated_at or iso_timestamp(),
        }

    log.error("parse_error", flow=flow_name, raw_text=(raw_text or "")[:RAW_TEXT_LOG_LIMIT])
    parse_fallback_counter.labels(flow=flow_name).inc()
    return fallback()
