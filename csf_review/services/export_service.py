from __future__ import annotations

import csv
from pathlib import Path
from typing import Any
from openpyxl import Workbook

from ..settings import EXPORTS_DIR
from ..utils import file_timestamp
from . import client_service


TABLE_COLUMNS = {
    "economic_activities": ["order", "description", "percentage", "start_date", "end_date"],
    "fiscal_regimes": ["name", "start_date", "end_date", "is_default"],
    "obligations": ["description", "due_description", "start_date", "end_date"],
}
CSV_COLUMNS = ["section", "row", "field", "value"]


def _load_client(client_id: str) -> dict[str, Any]:
    client = client_service.get_client(client_id)
    if client is None:
        raise ValueError(f"Unknown client: {client_id}")
    return client


def _profile_pairs(client: dict[str, Any]) -> list[tuple[str, Any]]:
    pairs: list[tuple[str, Any]] = [("rfc", client["rfc"]), ("name", client["name"])]
    pairs.extend(sorted(client["identity"].items()))
    return pairs


def _build_rows(client: dict[str, Any]) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []

    for key, value in _profile_pairs(client):
        rows.append({"section": "identity", "row": "", "field": key, "value": value})

    for key, value in (client["address"] or {}).items():
        rows.append({"section": "address", "row": "", "field": key, "value": value})

    for table, columns in TABLE_COLUMNS.items():
        for index, record in enumerate(client[table], start=1):
            for column in columns:
                rows.append({"section": table, "row": index, "field": column, "value": record.get(column)})

    return rows


def _target(client: dict[str, Any], extension: str) -> Path:
    filename = f"csf_{client['rfc']}_{file_timestamp()}.{extension}"
    return EXPORTS_DIR / filename


def export_csv(client_id: str) -> Path:
    client = _load_client(client_id)
    target = _target(client, "csv")

    with open(target, "w", encoding="utf-8", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=CSV_COLUMNS)
        writer.writeheader()
        for row in _build_rows(client):
            writer.writerow(row)

    return target


def export_xlsx(client_id: str) -> Path:
    client = _load_client(client_id)
    target = _target(client, "xlsx")

    workbook = Workbook()
    profile = workbook.active
    profile.title = "identity"
    profile.append(["field", "value"])
    for key, value in _profile_pairs(client):
        profile.append([key, value])

    address = workbook.create_sheet("address")
    address.append(["field", "value"])
    for key, value in (client["address"] or {}).items():
        address.append([key, value])

    for table, columns in TABLE_COLUMNS.items():
        sheet = workbook.create_sheet(table)
        sheet.append(columns)
        for record in client[table]:
            sheet.append([record.get(column) for column in columns])

    workbook.save(target)
    return target
