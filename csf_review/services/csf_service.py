from __future__ import annotations

import logging
import uuid
from typing import Any

from ..database import store
from ..domain import DocumentRecord, ExtractionResult
from ..extraction.extractor import extract_constancia
from ..extraction.gate import TaxpayerIdMismatch, check_taxpayer_id
from ..parsers import document_text, parse_document
from ..utils import from_json, to_json, utc_now_iso
from . import client_service
from .validation import validate_result


logger = logging.getLogger(__name__)

STATUS_RUNNING = "RUNNING"
STATUS_COMPLETED = "COMPLETED"
STATUS_REJECTED = "REJECTED"
STATUS_FAILED = "FAILED"


def create_run(client_id: str, document_id: str) -> str:
    run_id = uuid.uuid4().hex
    store.execute(
        """
        INSERT INTO csf_runs (id, client_id, document_id, status, created_at)
        VALUES (?, ?, ?, ?, ?)
        """,
        (run_id, client_id, document_id, STATUS_RUNNING, utc_now_iso()),
    )
    return run_id


def _finish_run(
    run_id: str,
    status: str,
    error_message: str | None = None,
    result: ExtractionResult | None = None,
    warnings: list[dict[str, Any]] | None = None,
) -> None:
    store.execute(
        """
        UPDATE csf_runs
        SET status = ?, error_message = ?, result_json = ?, warnings_json = ?, finished_at = ?
        WHERE id = ?
        """,
        (
            status,
            error_message,
            to_json(result.to_dict()) if result is not None else None,
            to_json(warnings or []),
            utc_now_iso(),
            run_id,
        ),
    )


def _row_to_run(row: Any) -> dict[str, Any]:
    return {
        "id": row["id"],
        "client_id": row["client_id"],
        "document_id": row["document_id"],
        "status": row["status"],
        "error_message": row["error_message"],
        "result": from_json(row["result_json"], None),
        "warnings": from_json(row["warnings_json"], []),
        "created_at": row["created_at"],
        "finished_at": row["finished_at"],
    }


def get_run(run_id: str) -> dict[str, Any] | None:
    row = store.fetchone("SELECT * FROM csf_runs WHERE id = ?", (run_id,))
    return _row_to_run(row) if row else None


def list_client_runs(client_id: str) -> list[dict[str, Any]]:
    rows = store.fetchall(
        "SELECT * FROM csf_runs WHERE client_id = ? ORDER BY created_at DESC, rowid DESC",
        (client_id,),
    )
    return [_row_to_run(row) for row in rows]


def extract_document(document: DocumentRecord) -> ExtractionResult:
    return extract_constancia(document_text(parse_document(document)))


def extract_text(text: str, known_rfc: str | None = None) -> tuple[ExtractionResult, list[dict[str, Any]]]:
    """Extract from already-linear text; with ``known_rfc`` the identity gate is applied too."""
    result = extract_constancia(text)
    check_taxpayer_id(result.taxpayer_id, known_rfc)
    return result, validate_result(result)


def process_upload(client_id: str, document: DocumentRecord, actor: str = "csf_upload") -> dict[str, Any]:
    """Extract a stored certificate and merge it into the client record.

    Raises ``TaxpayerIdMismatch`` when the certificate's RFC is not the client's;
    the run is recorded as rejected and nothing is merged.
    """
    client = client_service.get_client(client_id)
    if client is None:
        raise ValueError(f"Unknown client: {client_id}")

    run_id = create_run(client_id, document.id)

    try:
        result = extract_document(document)
    except Exception as exc:  # noqa: BLE001
        logger.warning("could not read %s for client %s: %s", document.identifier, client_id, exc)
        _finish_run(run_id, STATUS_FAILED, error_message=str(exc))
        return get_run(run_id) or {}

    try:
        check_taxpayer_id(result.taxpayer_id, client["rfc"])
    except TaxpayerIdMismatch as exc:
        logger.warning("rejected CSF %s for client %s: %s", document.identifier, client_id, exc)
        _finish_run(run_id, STATUS_REJECTED, error_message=str(exc), result=result)
        raise

    warnings = validate_result(result)
    client_service.merge_extraction(client_id, result, actor=actor, document_id=document.id)
    _finish_run(run_id, STATUS_COMPLETED, result=result, warnings=warnings)
    logger.info("processed CSF %s for client %s with %d warning(s)", document.identifier, client_id, len(warnings))

    return get_run(run_id) or {}
