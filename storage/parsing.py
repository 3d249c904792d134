"""storage.parsing

Tolerant JSON parsing for persisted snapshots.

Stored blobs may come from an older build, a hand-edited file, or a browser
export. We do NOT execute anything; we only:
- strip a UTF-8 BOM and surrounding whitespace
- extract the outermost JSON object block
- remove trailing commas
- json.loads
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ParseResult:
    data: Optional[Dict[str, Any]]
    raw: str
    cleaned: str
    error: str = ""


def extract_first_object(s: str) -> str:
    """Extract the outermost {...} block (best effort)."""
    s = (s or "").strip()
    if not s:
        return s
    i = s.find("{")
    if i < 0:
        return s
    j = s.rfind("}")
    if j <= i:
        return s[i:]
    return s[i : j + 1]


def remove_trailing_commas(s: str) -> str:
    return re.sub(r",\s*([}\]])", r"\1", s)


def try_parse_json(raw: str) -> ParseResult:
    """Best-effort parse. Returns ParseResult(data=None, error=...) on failure."""
    raw = (raw or "").lstrip("\ufeff").strip()
    if not raw:
        return ParseResult(data=None, raw=raw, cleaned="", error="empty input")

    s = extract_first_object(raw)
    s = remove_trailing_commas(s)

    try:
        obj = json.loads(s)
    except ValueError as e:
        return ParseResult(data=None, raw=raw, cleaned=s, error=f"json.loads: {type(e).__name__}: {e}")
    if not isinstance(obj, dict):
        return ParseResult(data=None, raw=raw, cleaned=s, error="JSON root is not an object")
    return ParseResult(data=obj, raw=raw, cleaned=s)


def must_parse_json(raw: str) -> Dict[str, Any]:
    res = try_parse_json(raw)
    if res.data is None:
        raise ValueError(res.error or "JSON parse failed")
    return res.data
