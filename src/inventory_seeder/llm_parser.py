from __future__ import annotations

import json
import re
from typing import Any, List, Optional, Type

from pydantic import ValidationError

from inventory_seeder.models import Record

_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)


class RecordValidationError(ValueError):
    """Raised when generated output does not match the record schema."""


def validate_record(candidate: Any, schema: Type[Record] = Record) -> Record:
    """
    Validate one candidate object against the record schema.
    Raises RecordValidationError with the pydantic details on failure.
    """
    if isinstance(candidate, schema):
        return candidate

    try:
        return schema.model_validate(candidate)
    except ValidationError as e:
        item_id = candidate.get("item_id") if isinstance(candidate, dict) else None
        raise RecordValidationError(f"Invalid record (item_id={item_id!r}): {e}") from e


def _strip_code_fence(raw_text: str) -> str:
    text = raw_text.strip()
    match = _FENCE_RE.match(text)
    return match.group(1) if match else text


def parse_llm_output(
    raw_text: str,
    schema: Type[Record] = Record,
    expected_count: Optional[int] = None,
) -> List[Record]:
    """
    Parse and validate raw LLM output into a list of records.

    Accepts a JSON array, or an object with an "items" array, optionally
    wrapped in a Markdown code fence. All-or-nothing: a single malformed
    element rejects the whole response.
    Raises RecordValidationError if JSON, shape, count or schema is invalid.
    """
    try:
        data = json.loads(_strip_code_fence(raw_text))
    except json.JSONDecodeError as e:
        raise RecordValidationError(f"Invalid JSON from LLM: {e}") from e

    if isinstance(data, dict) and "items" in data:
        data = data["items"]

    if not isinstance(data, list):
        raise RecordValidationError(f"Expected a JSON array of records, got {type(data).__name__}")
    if not data:
        raise RecordValidationError("LLM returned no records")
    if expected_count is not None and len(data) != expected_count:
        raise RecordValidationError(f"Expected {expected_count} records, got {len(data)}")

    return [validate_record(obj, schema) for obj in data]
