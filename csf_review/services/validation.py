"""Consistency checks run by the upload flow after extraction.

The extractor reports what the certificate says, even when that is partial or
inconsistent. These checks produce warnings for the reviewer and never block a
merge.
"""

from __future__ import annotations

from typing import Any, Iterable

from ..domain import ExtractionResult
from ..extraction.normalizers import normalize_date

EXPECTED_PERCENTAGE_TOTAL = 100


def _warning(code: str, message: str, **details: Any) -> dict[str, Any]:
    return {"code": code, "message": message, "details": details}


def check_activity_percentages(result: ExtractionResult) -> list[dict[str, Any]]:
    if not result.economic_activities:
        return []
    total = sum(activity.percentage for activity in result.economic_activities)
    if total == EXPECTED_PERCENTAGE_TOTAL:
        return []
    return [
        _warning(
            "activity_percentages",
            f"Economic activity percentages add up to {total}, expected {EXPECTED_PERCENTAGE_TOTAL}",
            total=total,
        )
    ]


def _periods(result: ExtractionResult) -> Iterable[tuple[str, int, str, str | None]]:
    for index, activity in enumerate(result.economic_activities):
        yield "economic_activities", index, activity.start_date, activity.end_date
    for index, regime in enumerate(result.fiscal_regimes):
        yield "fiscal_regimes", index, regime.start_date, regime.end_date
    for index, obligation in enumerate(result.obligations):
        yield "obligations", index, obligation.start_date, obligation.end_date


def check_date_order(result: ExtractionResult) -> list[dict[str, Any]]:
    warnings: list[dict[str, Any]] = []
    for table, index, start, end in _periods(result):
        if not end:
            continue
        start_iso = normalize_date(start)
        end_iso = normalize_date(end)
        if not (start_iso.success and end_iso.success):
            continue
        if start_iso.value > end_iso.value:
            warnings.append(
                _warning(
                    "date_order",
                    f"{table}[{index}] starts on {start} after it ends on {end}",
                    table=table,
                    index=index,
                )
            )
    return warnings


def validate_result(result: ExtractionResult) -> list[dict[str, Any]]:
    return check_activity_percentages(result) + check_date_order(result)
