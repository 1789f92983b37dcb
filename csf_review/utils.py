from __future__ import annotations

from datetime import datetime, timezone
import json
from typing import Any


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def file_timestamp() -> str:
    # ISO timestamp without the colons some filesystems reject.
    return utc_now_iso().replace(":", "-")


def to_json(value: Any) -> str:
    # Keep accented Spanish text readable in the stored JSON.
    return json.dumps(value, ensure_ascii=False)


def from_json(raw: str | None, default: Any) -> Any:
    if not raw:
        return default
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return default


def compact_whitespace(text: str) -> str:
    """Collapse every whitespace run into one space and trim both ends.

    Text from PDF pages and HTML cells arrives with arbitrary line breaks; every
    pattern downstream is written against this single-spaced form.
    """
    return " ".join(text.split())


def canonical_identifier(value: str | None) -> str:
    """Upper-case RFC/CURP form with all inner whitespace removed; ``""`` for a missing value."""
    return "".join((value or "").split()).upper()
