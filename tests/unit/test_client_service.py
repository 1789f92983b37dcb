from __future__ import annotations

import pytest

from csf_review.domain import ExtractionResult
from csf_review.extraction.extractor import extract_constancia
from csf_review.services import client_service


def test_create_client_rejects_duplicates(unique_rfc: str) -> None:
    client = client_service.create_client(unique_rfc.lower(), "  Juan Carlos Gomez ")

    assert client["rfc"] == unique_rfc
    assert client["name"] == "Juan Carlos Gomez"
    assert client["fiscal_regimes"] == []
    with pytest.raises(ValueError):
        client_service.create_client(unique_rfc, "Otro")


def test_merge_copies_found_fields_and_defaults_first_regime(unique_rfc: str, csf_text_factory) -> None:
    client = client_service.create_client(unique_rfc, "Juan Carlos Gomez")

    merged = client_service.merge_extraction(client["id"], extract_constancia(csf_text_factory(unique_rfc)))

    assert merged is not None
    assert merged["rfc"] == unique_rfc
    assert "taxpayer_id" not in merged["identity"]
    assert merged["identity"]["personal_id"] == "GOMA850101HDFMRN09"
    assert merged["address"]["postal_code"] == "06700"
    assert [regime["is_default"] for regime in merged["fiscal_regimes"]] == [True, False]
    assert len(merged["economic_activities"]) == 2
    assert merged["last_csf_date"] is not None


def test_empty_tables_do_not_erase_stored_rows(unique_rfc: str, csf_text_factory) -> None:
    client = client_service.create_client(unique_rfc, "Juan Carlos Gomez")
    client_service.merge_extraction(client["id"], extract_constancia(csf_text_factory(unique_rfc)))

    merged = client_service.merge_extraction(client["id"], ExtractionResult(registration_status="SUSPENDIDO"))

    assert merged is not None
    assert merged["identity"]["registration_status"] == "SUSPENDIDO"
    assert merged["identity"]["given_names"] == "JUAN CARLOS"
    assert len(merged["fiscal_regimes"]) == 2
    assert len(merged["obligations"]) == 2
    assert merged["address"]["street_name"] == "ORIZABA"


def test_merge_into_unknown_client_returns_none() -> None:
    assert client_service.merge_extraction("missing", ExtractionResult()) is None


def test_default_regime_can_be_changed_and_is_audited(unique_rfc: str, csf_text_factory) -> None:
    client = client_service.create_client(unique_rfc, "Juan Carlos Gomez")
    client_service.merge_extraction(client["id"], extract_constancia(csf_text_factory(unique_rfc)))

    updated = client_service.set_default_regime(client["id"], 1, actor="ana")

    assert updated is not None
    assert [regime["is_default"] for regime in updated["fiscal_regimes"]] == [False, True]
    logs = client_service.get_audit_logs(client["id"])
    assert logs[-1]["action"] == "DEFAULT_REGIME_SET"
    assert logs[-1]["actor"] == "ana"
    assert logs[-1]["new_value"] == "Régimen de Arrendamiento"
    assert {log["action"] for log in logs[:-1]} == {"CSF_MERGED"}

    with pytest.raises(ValueError):
        client_service.set_default_regime(client["id"], 5)
