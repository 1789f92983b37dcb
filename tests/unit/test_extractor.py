from __future__ import annotations

from csf_review.domain import ExtractionResult
from csf_review.extraction.extractor import extract_constancia
from csf_review.utils import compact_whitespace


def test_full_certificate(csf_text: str) -> None:
    result = extract_constancia(csf_text)

    assert result.taxpayer_id == "GOMA850101AB1"
    assert result.personal_id == "GOMA850101HDFMRN09"
    assert result.legal_name is None
    assert result.address is not None
    assert result.address.cross_streets == "PUEBLA y DURANGO"
    assert [activity.percentage for activity in result.economic_activities] == [60, 40]
    assert [activity.description for activity in result.economic_activities] == [
        "Servicios de contabilidad y auditoría",
        "Alquiler de oficinas y locales comerciales",
    ]
    assert [regime.start_date for regime in result.fiscal_regimes] == ["01/02/2015", "15/06/2018"]
    assert len(result.obligations) == 2


def test_extraction_is_deterministic_and_insensitive_to_line_breaks(csf_text: str) -> None:
    first = extract_constancia(csf_text)

    assert extract_constancia(csf_text) == first
    assert extract_constancia(compact_whitespace(csf_text)) == first


def test_empty_text_yields_empty_result() -> None:
    assert extract_constancia("") == ExtractionResult()
    assert extract_constancia("   \n  ") == ExtractionResult()


def test_result_dict_has_nested_tables(csf_text: str) -> None:
    data = extract_constancia(csf_text).to_dict()

    assert data["address"]["postal_code"] == "06700"
    assert data["fiscal_regimes"][0]["is_default"] is False
    assert data["obligations"][1]["start_date"] == "01/02/2015"
