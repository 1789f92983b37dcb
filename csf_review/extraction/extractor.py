from __future__ import annotations

from dataclasses import dataclass, fields
from functools import lru_cache
import logging
import re

from ..domain import AddressRecord, ExtractionResult, IDENTITY_FIELDS
from ..settings import DEFAULT_TEMPLATE_PATH
from ..utils import compact_whitespace
from .normalizers import normalize_value
from .segmenters import extract_activities, extract_obligations, extract_regimes
from .template import ExtractionTemplate, FieldTemplate, load_template


logger = logging.getLogger(__name__)

ADDRESS_BLOCK_PATTERN = re.compile(
    r"Datos\s*del\s*domicilio\s*registrado(.*?)(?=Actividades\s*Econ[oó]micas|$)",
    flags=re.IGNORECASE | re.DOTALL,
)
CROSS_STREET_KEYS = ("between_street", "and_street")
ADDRESS_FIELDS = {item.name for item in fields(AddressRecord)}


@dataclass
class FieldMatch:
    field_key: str
    value: str
    pattern_index: int
    match_start: int
    match_end: int


@lru_cache(maxsize=None)
def default_template() -> ExtractionTemplate:
    return load_template(DEFAULT_TEMPLATE_PATH)


@lru_cache(maxsize=512)
def _compile(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern, flags=re.IGNORECASE)


def _pick_value(match: re.Match[str]) -> str:
    groups = [group for group in match.groups() if group is not None]
    return groups[0] if groups else match.group(0)


def extract_field(field: FieldTemplate, text: str) -> FieldMatch | None:
    """Try the field's patterns in order and return the first non-empty capture.

    Later patterns are never consulted once an earlier one produced a value, even
    if a later one would match closer to the label or capture more text.
    """
    for pattern_index, pattern in enumerate(field.search.patterns):
        match = _compile(pattern).search(text)
        if not match:
            continue

        normalized = normalize_value(_pick_value(match), field.normalizer)
        if not normalized.success or not normalized.value:
            continue

        return FieldMatch(
            field_key=field.key,
            value=normalized.value,
            pattern_index=pattern_index,
            match_start=match.start(),
            match_end=match.end(),
        )

    return None


def extract_section_fields(field_templates: list[FieldTemplate], text: str) -> dict[str, str]:
    values: dict[str, str] = {}
    for field in field_templates:
        found = extract_field(field, text)
        if found:
            values[field.key] = found.value
    return values


def extract_identity(text: str, template: ExtractionTemplate | None = None) -> dict[str, str]:
    template = template or default_template()
    values = extract_section_fields(template.section_fields("identity"), text)
    return {key: value for key, value in values.items() if key in IDENTITY_FIELDS}


def address_block(text: str) -> str:
    match = ADDRESS_BLOCK_PATTERN.search(text)
    if not match or not match.group(1).strip():
        return text
    return match.group(1)


def extract_address(text: str, template: ExtractionTemplate | None = None) -> AddressRecord | None:
    template = template or default_template()
    values = extract_section_fields(template.section_fields("address"), address_block(text))

    cross_streets = [values.pop(key) for key in CROSS_STREET_KEYS if key in values]
    if cross_streets:
        values["cross_streets"] = " y ".join(cross_streets)

    values = {key: value for key, value in values.items() if key in ADDRESS_FIELDS}
    if not values:
        return None
    return AddressRecord(**values)


def extract_constancia(raw_text: str, template: ExtractionTemplate | None = None) -> ExtractionResult:
    """Recover the structured record from the linear text of one certificate.

    Never raises on odd input: whatever cannot be found is left as ``None`` or an
    empty list.
    """
    text = compact_whitespace(raw_text or "")
    template = template or default_template()

    result = ExtractionResult(
        **extract_identity(text, template),
        address=extract_address(text, template),
        economic_activities=extract_activities(text),
        fiscal_regimes=extract_regimes(text),
        obligations=extract_obligations(text),
    )

    logger.debug(
        "extracted rfc=%s activities=%d regimes=%d obligations=%d",
        result.taxpayer_id,
        len(result.economic_activities),
        len(result.fiscal_regimes),
        len(result.obligations),
    )
    return result
