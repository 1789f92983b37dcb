from __future__ import annotations

from dataclasses import asdict
import logging
import uuid
from typing import Any

from ..database import store
from ..domain import ExtractionResult
from ..utils import canonical_identifier, from_json, to_json, utc_now_iso


logger = logging.getLogger(__name__)

SEQUENCE_COLUMNS = {
    "economic_activities": "activities_json",
    "fiscal_regimes": "regimes_json",
    "obligations": "obligations_json",
}


def _row_to_client(row: Any) -> dict[str, Any]:
    return {
        "id": row["id"],
        "rfc": row["rfc"],
        "name": row["name"],
        "identity": from_json(row["identity_json"], {}),
        "address": from_json(row["address_json"], None),
        "economic_activities": from_json(row["activities_json"], []),
        "fiscal_regimes": from_json(row["regimes_json"], []),
        "obligations": from_json(row["obligations_json"], []),
        "last_csf_document_id": row["last_csf_document_id"],
        "last_csf_date": row["last_csf_date"],
        "created_at": row["created_at"],
        "updated_at": row["updated_at"],
    }


def create_client(rfc: str, name: str) -> dict[str, Any]:
    canonical = canonical_identifier(rfc)
    if not canonical:
        raise ValueError("RFC is required")
    if store.fetchone("SELECT id FROM clients WHERE rfc = ?", (canonical,)) is not None:
        raise ValueError(f"Client with RFC {canonical} already exists")

    client_id = uuid.uuid4().hex
    now = utc_now_iso()
    store.execute(
        """
        INSERT INTO clients (
            id, rfc, name, identity_json, address_json, activities_json, regimes_json, obligations_json,
            created_at, updated_at
        )
        VALUES (?, ?, ?, '{}', NULL, '[]', '[]', '[]', ?, ?)
        """,
        (client_id, canonical, name.strip(), now, now),
    )
    logger.info("created client %s (%s)", client_id, canonical)
    client = get_client(client_id)
    if client is None:
        raise RuntimeError(f"Failed to create client {canonical}")
    return client


def get_client(client_id: str) -> dict[str, Any] | None:
    row = store.fetchone("SELECT * FROM clients WHERE id = ?", (client_id,))
    return _row_to_client(row) if row else None


def list_clients() -> list[dict[str, Any]]:
    rows = store.fetchall("SELECT * FROM clients ORDER BY name ASC")
    return [_row_to_client(row) for row in rows]


def _write_audit(client_id: str, actor: str, action: str, changes: list[tuple[str, Any, Any]], reason: str | None) -> None:
    now = utc_now_iso()
    store.executemany(
        """
        INSERT INTO audit_logs (id, client_id, action, actor, field_key, old_value, new_value, reason, created_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        [
            (uuid.uuid4().hex, client_id, action, actor, key, to_json(old), to_json(new), reason, now)
            for key, old, new in changes
        ],
    )


def merge_extraction(
    client_id: str,
    result: ExtractionResult,
    actor: str = "csf_upload",
    document_id: str | None = None,
) -> dict[str, Any] | None:
    """Copy what a certificate yielded into the stored client record.

    Only fields that were found are written. The stored RFC is never replaced.
    A table that yielded rows replaces the stored one wholesale; an empty table
    leaves the stored one alone. The first merged regime becomes the default.
    """
    client = get_client(client_id)
    if client is None:
        return None

    changes: list[tuple[str, Any, Any]] = []

    identity = dict(client["identity"])
    for key, value in result.identity().items():
        if key == "taxpayer_id":
            continue
        if identity.get(key) != value:
            changes.append((key, identity.get(key), value))
            identity[key] = value

    address = client["address"]
    if result.address is not None:
        found = {key: value for key, value in asdict(result.address).items() if value is not None}
        merged = {**(address or {}), **found}
        if merged != address:
            changes.append(("address", address, merged))
            address = merged

    sequences = {key: client[key] for key in SEQUENCE_COLUMNS}
    for key in SEQUENCE_COLUMNS:
        rows = [asdict(row) for row in getattr(result, key)]
        if not rows:
            continue
        if key == "fiscal_regimes":
            for index, row in enumerate(rows):
                row["is_default"] = index == 0
        if rows != sequences[key]:
            changes.append((key, sequences[key], rows))
            sequences[key] = rows

    now = utc_now_iso()
    store.execute(
        """
        UPDATE clients
        SET identity_json = ?, address_json = ?, activities_json = ?, regimes_json = ?, obligations_json = ?,
            last_csf_document_id = COALESCE(?, last_csf_document_id), last_csf_date = ?, updated_at = ?
        WHERE id = ?
        """,
        (
            to_json(identity),
            to_json(address) if address is not None else None,
            to_json(sequences["economic_activities"]),
            to_json(sequences["fiscal_regimes"]),
            to_json(sequences["obligations"]),
            document_id,
            now,
            now,
            client_id,
        ),
    )
    _write_audit(client_id, actor, "CSF_MERGED", changes, reason=document_id)
    logger.info("merged CSF into client %s: %d field(s) changed", client_id, len(changes))

    return get_client(client_id)


def set_default_regime(client_id: str, index: int, actor: str = "reviewer") -> dict[str, Any] | None:
    client = get_client(client_id)
    if client is None:
        return None

    regimes = client["fiscal_regimes"]
    if index < 0 or index >= len(regimes):
        raise ValueError(f"Regime index out of range: {index}")

    old_default = next((regime["name"] for regime in regimes if regime.get("is_default")), None)
    updated = [{**regime, "is_default": position == index} for position, regime in enumerate(regimes)]

    store.execute(
        "UPDATE clients SET regimes_json = ?, updated_at = ? WHERE id = ?",
        (to_json(updated), utc_now_iso(), client_id),
    )
    _write_audit(
        client_id,
        actor,
        "DEFAULT_REGIME_SET",
        [("fiscal_regimes", old_default, updated[index]["name"])],
        reason=None,
    )
    return get_client(client_id)


def get_audit_logs(client_id: str) -> list[dict[str, Any]]:
    rows = store.fetchall(
        """
        SELECT id, action, actor, field_key, old_value, new_value, reason, created_at
        FROM audit_logs
        WHERE client_id = ?
        ORDER BY created_at ASC, rowid ASC
        """,
        (client_id,),
    )

    return [
        {
            "id": row["id"],
            "action": row["action"],
            "actor": row["actor"],
            "field_key": row["field_key"],
            "old_value": from_json(row["old_value"], None),
            "new_value": from_json(row["new_value"], None),
            "reason": row["reason"],
            "created_at": row["created_at"],
        }
        for row in rows
    ]
