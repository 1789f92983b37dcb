from __future__ import annotations

from dataclasses import asdict
import shutil
from pathlib import Path

from fastapi import APIRouter, File, HTTPException, UploadFile
from fastapi.responses import FileResponse

from ..extraction.gate import TaxpayerIdMismatch
from ..services import client_service, csf_service, export_service, inventory
from .models import ClientCreateRequest, DefaultRegimeRequest, ExportRequest, ExtractRequest


router = APIRouter()


def _mismatch_detail(exc: TaxpayerIdMismatch) -> dict[str, str]:
    return {"message": str(exc), "extracted_rfc": exc.extracted, "client_rfc": exc.known}


def _require_client(client_id: str) -> dict:
    client = client_service.get_client(client_id)
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")
    return client


@router.get("/health")
def health_check() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/clients")
def create_client(request: ClientCreateRequest) -> dict:
    try:
        client = client_service.create_client(request.rfc, request.name)
    except ValueError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return {"client": client}


@router.get("/clients")
def list_clients() -> dict:
    return {"clients": client_service.list_clients()}


@router.get("/clients/{client_id}")
def get_client(client_id: str) -> dict:
    return {"client": _require_client(client_id)}


@router.post("/clients/{client_id}/csf")
async def upload_csf(client_id: str, file: UploadFile = File(...)) -> dict:
    _require_client(client_id)

    suffix = Path(file.filename or "").suffix.lower()
    if suffix not in inventory.SUPPORTED_EXTENSIONS:
        raise HTTPException(status_code=400, detail="Unsupported file type. Use PDF or HTML.")

    target = inventory.new_upload_path(client_id, suffix)
    with target.open("wb") as handle:
        shutil.copyfileobj(file.file, handle)
    document = inventory.register_document(target, client_id, identifier=Path(file.filename or target.name).name)

    try:
        run = csf_service.process_upload(client_id, document)
    except TaxpayerIdMismatch as exc:
        raise HTTPException(status_code=409, detail=_mismatch_detail(exc)) from exc

    return {"run": run, "client": client_service.get_client(client_id)}


@router.get("/clients/{client_id}/documents")
def list_documents(client_id: str) -> dict:
    _require_client(client_id)
    return {"documents": [asdict(document) for document in inventory.list_client_documents(client_id)]}


@router.get("/clients/{client_id}/csf/runs")
def list_runs(client_id: str) -> dict:
    _require_client(client_id)
    return {"runs": csf_service.list_client_runs(client_id)}


@router.get("/runs/{run_id}")
def get_run(run_id: str) -> dict:
    run = csf_service.get_run(run_id)
    if not run:
        raise HTTPException(status_code=404, detail="Run not found")
    return {"run": run}


@router.patch("/clients/{client_id}/regimes/default")
def set_default_regime(client_id: str, request: DefaultRegimeRequest) -> dict:
    try:
        client = client_service.set_default_regime(client_id, request.index, actor=request.actor)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    if not client:
        raise HTTPException(status_code=404, detail="Client not found")
    return {"client": client}


@router.get("/clients/{client_id}/audit")
def get_client_audit(client_id: str) -> dict:
    _require_client(client_id)
    return {"logs": client_service.get_audit_logs(client_id)}


@router.post("/extract")
def extract(request: ExtractRequest) -> dict:
    try:
        result, warnings = csf_service.extract_text(request.text, known_rfc=request.known_rfc)
    except TaxpayerIdMismatch as exc:
        raise HTTPException(status_code=409, detail=_mismatch_detail(exc)) from exc
    return {"result": result.to_dict(), "warnings": warnings}


@router.post("/exports/csv")
def export_csv(request: ExportRequest) -> FileResponse:
    _require_client(request.client_id)
    path = export_service.export_csv(request.client_id)
    return FileResponse(path, media_type="text/csv", filename=path.name)


@router.post("/exports/xlsx")
def export_xlsx(request: ExportRequest) -> FileResponse:
    _require_client(request.client_id)
    path = export_service.export_xlsx(request.client_id)
    return FileResponse(
        path,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        filename=path.name,
    )
