from __future__ import annotations

from datetime import date
import re
from dateutil import parser as date_parser

from ..domain import NormalizationResult
from ..utils import canonical_identifier, compact_whitespace


ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class SpanishParserInfo(date_parser.parserinfo):
    """Month names and filler words used on SAT certificates ("01 DE ENERO DE 2020")."""

    JUMP = date_parser.parserinfo.JUMP + ["de", "del"]
    MONTHS = [
        ("ene", "enero"),
        ("feb", "febrero"),
        ("mar", "marzo"),
        ("abr", "abril"),
        ("may", "mayo"),
        ("jun", "junio"),
        ("jul", "julio"),
        ("ago", "agosto"),
        ("sep", "sept", "septiembre"),
        ("oct", "octubre"),
        ("nov", "noviembre"),
        ("dic", "diciembre"),
    ]

    def __init__(self) -> None:
        super().__init__(dayfirst=True)


SPANISH_DATES = SpanishParserInfo()


def normalize_text(value: str) -> NormalizationResult:
    cleaned = compact_whitespace(value)
    return NormalizationResult(value=cleaned if cleaned else None, success=bool(cleaned), reason="text_cleanup")


def normalize_identifier(value: str) -> NormalizationResult:
    cleaned = canonical_identifier(value)
    return NormalizationResult(value=cleaned if cleaned else None, success=bool(cleaned), reason="identifier_cleanup")


def normalize_date(value: str) -> NormalizationResult:
    cleaned = compact_whitespace(value)
    try:
        if ISO_DATE_PATTERN.match(cleaned):
            parsed = date_parser.isoparse(cleaned).date()
        else:
            parsed = date_parser.parse(cleaned, parserinfo=SPANISH_DATES, fuzzy=True).date()
        if not isinstance(parsed, date):
            return NormalizationResult(value=None, success=False, reason="date_parse_failed")
        return NormalizationResult(value=parsed.isoformat(), success=True, reason="date_parsed")
    except (ValueError, OverflowError):
        return NormalizationResult(value=None, success=False, reason="date_parse_failed")


NORMALIZERS = {
    "text": normalize_text,
    "identifier": normalize_identifier,
    "date": normalize_date,
}


def normalize_value(value: str, normalizer_name: str) -> NormalizationResult:
    normalizer = NORMALIZERS.get(normalizer_name, normalize_text)
    return normalizer(value)
