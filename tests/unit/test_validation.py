from __future__ import annotations

from csf_review.domain import EconomicActivityRecord, ExtractionResult, FiscalRegimeRecord
from csf_review.extraction.extractor import extract_constancia
from csf_review.services.validation import check_activity_percentages, check_date_order, validate_result


def test_consistent_certificate_has_no_warnings(csf_text: str) -> None:
    assert validate_result(extract_constancia(csf_text)) == []


def test_percentages_not_adding_to_hundred_warn() -> None:
    result = ExtractionResult(
        economic_activities=[
            EconomicActivityRecord(1, "Comercio al por menor", 60, "01/01/2019"),
            EconomicActivityRecord(2, "Servicios profesionales", 30, "01/01/2019"),
        ]
    )

    warnings = check_activity_percentages(result)

    assert len(warnings) == 1
    assert warnings[0]["code"] == "activity_percentages"
    assert warnings[0]["details"] == {"total": 90}


def test_no_activities_means_no_percentage_warning() -> None:
    assert check_activity_percentages(ExtractionResult()) == []


def test_end_before_start_warns() -> None:
    result = ExtractionResult(
        fiscal_regimes=[
            FiscalRegimeRecord("Régimen de Arrendamiento", "01/01/2020", "31/12/2019"),
            FiscalRegimeRecord("Régimen General de Ley", "01/01/2010", "31/12/2019"),
        ]
    )

    warnings = check_date_order(result)

    assert len(warnings) == 1
    assert warnings[0]["code"] == "date_order"
    assert warnings[0]["details"] == {"table": "fiscal_regimes", "index": 0}
