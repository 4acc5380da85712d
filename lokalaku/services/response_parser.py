# lokalaku/services/response_parser.py
# Two-stage JSON extraction for free-text generations: strict parse, then a bounded brace scan.

import json
import re
from typing import Any, Dict, Iterable, Optional

# Generations longer than this are not scanned for an embedded object
MAX_SCAN_CHARS = 20_000

_FENCE_RE = re.compile(r"^```[ \t]*(?:json|JSON)?[ \t]*\r?\n?(.*?)\r?\n?```$", re.DOTALL)

def strip_code_fences(text: str) -> str:
    """Remove a surrounding ```json ... ``` (or bare ```) fence, if present."""
    stripped = text.strip()
    match = _FENCE_RE.match(stripped)
    if match:
        return match.group(1).strip()
    return stripped

def find_first_json_object(text: str) -> Optional[str]:
    """Return the first balanced ``{...}`` substring of ``text``.

    Braces inside JSON string literals (including escaped quotes) do not
    count towards the balance. Returns None when no object closes.
    """
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    end_limit = min(len(text), start + MAX_SCAN_CHARS)
    for i in range(start, end_limit):
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
                return text[start:i + 1]
    return None

def _loads_object(text: str) -> Optional[Dict[str, Any]]:
    try:
        value = json.loads(text)
    except (ValueError, RecursionError):
        return None
    return value if isinstance(value, dict) else None

def _has_keys(obj: Dict[str, Any], required_keys: Iterable[str]) -> bool:
    return all(key in obj for key in required_keys)

def extract_json_object(text: str, required_keys: Iterable[str]) -> Optional[Dict[str, Any]]:
    """Best-effort extraction of a JSON object carrying all ``required_keys``.

    1. Strip code fences and parse the whole payload.
    2. Otherwise parse the first balanced ``{...}`` block of the raw text.
    Returns None when neither stage yields a complete object.
    """
    required = tuple(required_keys)

    parsed = _loads_object(strip_code_fences(text))
    if parsed is not None and _has_keys(parsed, required):
        return parsed

    block = find_first_json_object(text)
    if block is not None:
        parsed = _loads_object(block)
        if parsed is not None and _has_keys(parsed, required):
            return parsed
    return None
