"""Table segmenters for the three repeating sections of a certificate.

Text extraction loses the table grid, so every row has to be recovered from a
flat single-spaced string. Each segmenter first cuts its section out of the
document (heading to next heading), removes the column header row and then
scans left to right without revisiting consumed text.
"""

from __future__ import annotations

import re

from ..domain import EconomicActivityRecord, FiscalRegimeRecord, ObligationRecord
from ..utils import compact_whitespace


DATE = r"\d{2}/\d{2}/\d{4}"
DATE_PATTERN = re.compile(DATE)

ACTIVITY_MIN_DESCRIPTION_LENGTH = 3
REGIME_END_DATE_MAX_GAP = 15
REGIME_MIN_NAME_LENGTH = 5
REGIME_NAME_PREFIX = "Régimen"
REGIME_NAME_PREFIX_FILL = "Régimen de "
OBLIGATION_MIN_DESCRIPTION_LENGTH = 5

ACTIVITIES_SECTION_PATTERN = re.compile(
    r"Actividades\s*Econ[oó]micas[\s:]+(.+?)(?=Reg[ií]menes[\s:]+|$)",
    flags=re.IGNORECASE | re.DOTALL,
)
REGIMES_SECTION_PATTERN = re.compile(
    r"Reg[ií]menes[\s:]+(.+?)(?=Obligaciones[\s:]+|$)",
    flags=re.IGNORECASE | re.DOTALL,
)
OBLIGATIONS_SECTION_PATTERN = re.compile(
    r"Obligaciones[\s:]+(.+?)(?=Sus\s+datos\s+personales|Cadena\s+Original|$)",
    flags=re.IGNORECASE | re.DOTALL,
)

ACTIVITIES_HEADER_PATTERN = re.compile(
    r"Orden\s+Actividad\s*Econ[oó]mica\s+Porcentaje\s+Fecha\s*Inicio\s+Fecha\s*Fin",
    flags=re.IGNORECASE,
)
REGIMES_HEADER_PATTERN = re.compile(r"R[eé]gimen\s+Fecha\s*Inicio\s+Fecha\s*Fin", flags=re.IGNORECASE)
OBLIGATIONS_HEADER_PATTERN = re.compile(
    r"Descripci[oó]n\s+de\s+la\s+Obligaci[oó]n\s+Descripci[oó]n\s+Vencimiento\s+Fecha\s*Inicio\s+Fecha\s*Fin",
    flags=re.IGNORECASE,
)

# The order column is a single digit; a tenth row ("10 ...") is read with order 0.
ACTIVITY_ROW_PATTERN = re.compile(
    r"(\d)\s+([A-Za-záéíóúñÁÉÍÓÚÑ\s,\.\(\)]+?)\s+(\d{1,3})\s+(" + DATE + r")(?:\s+(" + DATE + r"))?",
    flags=re.IGNORECASE,
)

# "A más tardar ..." always opens the deadline column, followed by the start date
# and an optional end date. The clause itself may contain day numbers but never
# runs into the next row's anchor.
OBLIGATION_ANCHOR_PATTERN = re.compile(
    r"A\s+m[aá]s\s+tardar(?:(?!" + DATE + r"|A\s+m[aá]s\s+tardar).)+?(" + DATE + r")(?:\s+(" + DATE + r"))?",
    flags=re.IGNORECASE | re.DOTALL,
)

LEADING_DIGITS_PATTERN = re.compile(r"^\d+\s*")
LEADING_DATE_PATTERN = re.compile(r"^" + DATE + r"\s*")
LEADING_COLUMN_LABELS_PATTERN = re.compile(r"^(?:Fecha\s*Inicio\s*)?(?:Fecha\s*Fin\s*)?", flags=re.IGNORECASE)
NAME_TRIM_CHARS = " ,.;:-"


def section_text(text: str, section_pattern: re.Pattern[str], header_pattern: re.Pattern[str]) -> str | None:
    """Return a section's body without its column header row, or None if the heading is missing."""
    match = section_pattern.search(text)
    if not match:
        return None
    return header_pattern.sub("", match.group(1)).strip()


def segment_activities(section: str) -> list[EconomicActivityRecord]:
    activities: list[EconomicActivityRecord] = []

    for match in ACTIVITY_ROW_PATTERN.finditer(section):
        description = LEADING_DIGITS_PATTERN.sub("", compact_whitespace(match.group(2)))
        if len(description) <= ACTIVITY_MIN_DESCRIPTION_LENGTH:
            continue
        activities.append(
            EconomicActivityRecord(
                order=int(match.group(1)),
                description=description,
                percentage=int(match.group(3)),
                start_date=match.group(4),
                end_date=match.group(5),
            )
        )

    return activities


def clean_regime_name(raw: str) -> str:
    name = compact_whitespace(raw).strip(NAME_TRIM_CHARS)
    return LEADING_COLUMN_LABELS_PATTERN.sub("", name).strip(NAME_TRIM_CHARS)


def ensure_regime_prefix(name: str) -> str:
    # Only the very start is checked, so a prefix further in is doubled.
    if name.lower().startswith(REGIME_NAME_PREFIX.lower()):
        return name
    return REGIME_NAME_PREFIX_FILL + name


def segment_regimes(section: str) -> list[FiscalRegimeRecord]:
    """Pair dates into rows and take the text before each start date as the regime name.

    A date that begins less than ``REGIME_END_DATE_MAX_GAP`` characters after the
    previous one is read as that row's end date. A short regime name between two
    rows therefore gets swallowed and its start date becomes the previous row's
    end date.
    """
    dates = [(match.group(0), match.start(), match.end()) for match in DATE_PATTERN.finditer(section)]
    regimes: list[FiscalRegimeRecord] = []

    name_start = 0
    index = 0
    while index < len(dates):
        start_date, start_at, start_end = dates[index]
        end_date = None
        row_end = start_end

        if index + 1 < len(dates):
            next_date, next_at, next_end = dates[index + 1]
            if next_at - start_end < REGIME_END_DATE_MAX_GAP:
                end_date = next_date
                row_end = next_end
                index += 1

        name = clean_regime_name(section[name_start:start_at])
        name_start = row_end
        index += 1

        if len(name) <= REGIME_MIN_NAME_LENGTH:
            continue
        regimes.append(FiscalRegimeRecord(name=ensure_regime_prefix(name), start_date=start_date, end_date=end_date))

    return regimes


def segment_obligations(section: str) -> list[ObligationRecord]:
    obligations: list[ObligationRecord] = []

    description_start = 0
    for match in OBLIGATION_ANCHOR_PATTERN.finditer(section):
        description = compact_whitespace(section[description_start:match.start()])
        description = LEADING_DATE_PATTERN.sub("", description)
        description_start = match.end()

        if len(description) <= OBLIGATION_MIN_DESCRIPTION_LENGTH:
            continue
        obligations.append(
            ObligationRecord(
                description=description,
                due_description=compact_whitespace(DATE_PATTERN.sub("", match.group(0))),
                start_date=match.group(1),
                end_date=match.group(2),
            )
        )

    return obligations


def extract_activities(text: str) -> list[EconomicActivityRecord]:
    section = section_text(text, ACTIVITIES_SECTION_PATTERN, ACTIVITIES_HEADER_PATTERN)
    return segment_activities(section) if section else []


def extract_regimes(text: str) -> list[FiscalRegimeRecord]:
    section = section_text(text, REGIMES_SECTION_PATTERN, REGIMES_HEADER_PATTERN)
    return segment_regimes(section) if section else []


def extract_obligations(text: str) -> list[ObligationRecord]:
    section = section_text(text, OBLIGATIONS_SECTION_PATTERN, OBLIGATIONS_HEADER_PATTERN)
    return segment_obligations(section) if section else []
