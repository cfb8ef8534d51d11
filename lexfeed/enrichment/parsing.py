"""Extract JSON objects from free-form model output."""

import json
from typing import Any, Dict, Optional, Tuple

from ..exceptions import ResponseParseError


def find_balanced_object(text: str) -> Optional[Tuple[int, int]]:
    """
    Locate the first balanced `{...}` span.

    Braces inside JSON string literals are ignored. Returns (start, end) with
    end exclusive, or None when no span closes.
    """
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return start, i + 1

    return None


def extract_json_object(text: Optional[str]) -> Dict[str, Any]:
    """
    Parse the first JSON object embedded in `text`.

    Markdown fences or prose around the object are tolerated.

    Raises:
        ResponseParseError: No balanced object, invalid JSON, or not an object
    """
    if not text:
        raise ResponseParseError("Empty response")

    span = find_balanced_object(text)
    if span is None:
        raise ResponseParseError("No JSON found in response")

    try:
        data = json.loads(text[span[0]:span[1]])
    except json.JSONDecodeError as e:
        raise ResponseParseError(f"Invalid JSON in response: {e}") from e

    if not isinstance(data, dict):
        raise ResponseParseError("JSON in response is not an object")
    return data
