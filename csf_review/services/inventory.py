from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Any
import uuid

from ..database import store
from ..domain import DocumentRecord
from ..settings import UPLOADS_DIR
from ..utils import file_timestamp, utc_now_iso

SUPPORTED_EXTENSIONS = {".pdf", ".html", ".htm"}


def _build_document_id(path: Path) -> str:
    digest = hashlib.sha1(str(path.resolve()).encode("utf-8")).hexdigest()
    return digest[:16]


def _row_to_document(row: Any) -> DocumentRecord:
    return DocumentRecord(
        id=row["id"],
        identifier=row["identifier"],
        path=row["path"],
        client_id=row["client_id"],
        kind=row["kind"],
    )


def client_upload_dir(client_id: str) -> Path:
    directory = UPLOADS_DIR / client_id
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def new_upload_path(client_id: str, suffix: str) -> Path:
    # Every upload gets its own file; the client-supplied name is only kept as the identifier.
    return client_upload_dir(client_id) / f"csf_{file_timestamp()}_{uuid.uuid4().hex[:8]}{suffix}"


def register_document(path: Path, client_id: str, identifier: str | None = None) -> DocumentRecord:
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_EXTENSIONS:
        raise ValueError(f"Unsupported file type: {suffix or 'none'}")

    record = DocumentRecord(
        id=_build_document_id(path),
        identifier=identifier or path.name,
        path=str(path.resolve()),
        client_id=client_id,
        kind=suffix.lstrip("."),
    )
    now = utc_now_iso()
    store.execute(
        """
        INSERT INTO documents (id, client_id, identifier, path, kind, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT(id) DO UPDATE SET
            client_id=excluded.client_id,
            identifier=excluded.identifier,
            path=excluded.path,
            kind=excluded.kind,
            updated_at=excluded.updated_at
        """,
        (record.id, record.client_id, record.identifier, record.path, record.kind, now, now),
    )
    return record


def list_client_documents(client_id: str) -> list[DocumentRecord]:
    rows = store.fetchall(
        """
        SELECT id, client_id, identifier, path, kind
        FROM documents
        WHERE client_id = ?
        ORDER BY created_at DESC, identifier ASC
        """,
        (client_id,),
    )
    return [_row_to_document(row) for row in rows]
