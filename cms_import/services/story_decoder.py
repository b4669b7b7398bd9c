"""
Story decoder: one raw line in, one StoryRecord (or nothing) out.
"""

import json

from pydantic import ValidationError

from cms_import.schemas.story import StoryRecord
from cms_import.services.errors import StoryDecodeError


def _describe_validation_error(e: ValidationError) -> str:
    parts = []
    for err in e.errors()[:3]:
        loc = ".".join(str(p) for p in err.get("loc", ())) or "<root>"
        parts.append(f"{loc}: {err.get('msg')}")
    return "Invalid story record: " + "; ".join(parts)


def decode_line(line: str, line_number: int) -> StoryRecord | None:
    """
    Parse one export line.

    Returns:
        StoryRecord, or None for a blank line

    Raises:
        StoryDecodeError: malformed JSON or a record that fails validation
    """
    if not line or not line.strip():
        return None

    try:
        payload = json.loads(line)
    except json.JSONDecodeError as e:
        raise StoryDecodeError(line_number, f"JSON parse error: {e}") from e

    if not isinstance(payload, dict):
        raise StoryDecodeError(line_number, f"Expected a JSON object, got {type(payload).__name__}")

    try:
        return StoryRecord.model_validate(payload)
    except ValidationError as e:
        raise StoryDecodeError(line_number, _describe_validation_error(e)) from e
