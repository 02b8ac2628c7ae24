# medlist/services/llm/recovery.py
"""
Turn a free-form vision model reply into a MedicationList.

The model is told to answer with bare JSON but often wraps it in prose or a
markdown fence. Parsing strategies run from strictest to loosest and the first
one that yields JSON wins:

1. the whole reply
2. the first ``` fenced block (optionally tagged json)
3. the span from the first "{" to the last "}", then a balanced scan over
   every "{" when that span is not valid JSON

The recovered value is then sanitized and validated against MedicationList.
"""
import json
import logging
import re
from typing import Any, Callable, List, Optional, Tuple

from pydantic import ValidationError

from medlist.schemas.models import MedicationList
from medlist.services.errors import ExtractionError, SchemaValidationError
from medlist.services.llm.extraction_sanitize import sanitize_medication_list

logger = logging.getLogger(__name__)

NO_JSON_MESSAGE = "Could not parse response as JSON"

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")

_decoder = json.JSONDecoder()

_PARSE_ERRORS = (ValueError, RecursionError)


def _direct(text: str) -> Any:
    return json.loads(text)


def _fenced(text: str) -> Any:
    m = _FENCE_RE.search(text)
    if not m:
        raise ValueError("no fenced block")
    return json.loads(m.group(1).strip())


def _scan_objects(text: str) -> Any:
    idx = text.find("{")
    while idx != -1:
        try:
            value, _ = _decoder.raw_decode(text, idx)
            return value
        except _PARSE_ERRORS:
            idx = text.find("{", idx + 1)
    raise ValueError("no decodable object")


def _brace_span(text: str) -> Any:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end < start:
        raise ValueError("no brace span")
    try:
        return json.loads(text[start : end + 1])
    except _PARSE_ERRORS:
        # prose around the object may itself contain braces
        return _scan_objects(text)


STAGES: List[Tuple[str, Callable[[str], Any]]] = [
    ("direct", _direct),
    ("fenced", _fenced),
    ("brace_span", _brace_span),
]


def recover_json(raw_text: Optional[str]) -> Any:
    """Return the first JSON value any stage can decode; raise ExtractionError otherwise."""
    text = (raw_text or "").strip()
    for name, stage in STAGES:
        try:
            value = stage(text)
        except _PARSE_ERRORS:
            # JSONDecodeError, or RecursionError on deeply nested input; the next stage takes over
            continue
        logger.debug("Recovered model JSON via %s stage", name)
        return value

    logger.debug("No JSON recovered from model reply: %r", text[:200])
    raise ExtractionError(NO_JSON_MESSAGE)


def validate_medication_list(value: Any) -> MedicationList:
    try:
        return MedicationList.model_validate(sanitize_medication_list(value))
    except ValidationError as e:
        raise SchemaValidationError(
            f"Model JSON does not match the medication list schema ({e.error_count()} errors)"
        ) from e


def recover(raw_text: Optional[str]) -> MedicationList:
    return validate_medication_list(recover_json(raw_text))
