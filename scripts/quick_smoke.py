from __future__ import annotations

from pathlib import Path
import sys
import uuid

from fastapi.testclient import TestClient

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from app import app  # noqa: E402
from csf_review.settings import EXPORTS_DIR  # noqa: E402


SMOKE_CERTIFICATE = """
<html><body>
<p>RFC: {rfc}</p>
<p>CURP: GOMA850101HDFMRN09</p>
<p>Nombre (s): JUAN CARLOS</p>
<p>Primer Apellido: GOMEZ</p>
<p>Segundo Apellido: MARTINEZ</p>
<p>Estatus en el padrón: ACTIVO</p>
<p>Datos del domicilio registrado</p>
<p>Código Postal:06700 Tipo de Vialidad: CALLE Nombre de Vialidad: ORIZABA Número Exterior: 120</p>
<p>Actividades Económicas:</p>
<p>1 Servicios de contabilidad y auditoría 100 01/02/2015</p>
<p>Regímenes:</p>
<p>Régimen de las Personas Físicas con Actividades Empresariales y Profesionales 01/02/2015</p>
<p>Obligaciones:</p>
<p>Pago definitivo mensual de IVA. A más tardar el día 17 del mes inmediato posterior. 01/02/2015</p>
<p>Sus datos personales son incorporados y protegidos en los sistemas del SAT.</p>
</body></html>
"""


def fail(message: str) -> None:
    print(f"SMOKE_FAIL: {message}")
    raise SystemExit(1)


def main() -> None:
    client = TestClient(app)
    rfc = f"SMK{uuid.uuid4().int % 10**6:06d}AB1"

    create_response = client.post("/clients", json={"rfc": rfc, "name": "Smoke Test"})
    if create_response.status_code != 200:
        fail(f"client creation failed ({create_response.status_code})")
    client_id = create_response.json()["client"]["id"]

    upload_response = client.post(
        f"/clients/{client_id}/csf",
        files={"file": ("constancia.html", SMOKE_CERTIFICATE.format(rfc=rfc).encode("utf-8"), "text/html")},
    )
    if upload_response.status_code != 200:
        fail(f"CSF upload failed ({upload_response.status_code})")

    payload = upload_response.json()
    if payload["run"].get("status") != "COMPLETED":
        fail(f"CSF run did not complete: {payload['run']}")

    stored = payload["client"]
    if not stored["fiscal_regimes"] or not stored["fiscal_regimes"][0].get("is_default"):
        fail("no default regime after merge")
    if not stored["economic_activities"] or not stored["obligations"]:
        fail("activity or obligation tables are empty")

    before_csv = {p.name for p in EXPORTS_DIR.glob("*.csv")}
    before_xlsx = {p.name for p in EXPORTS_DIR.glob("*.xlsx")}

    csv_response = client.post("/exports/csv", json={"client_id": client_id})
    xlsx_response = client.post("/exports/xlsx", json={"client_id": client_id})

    if csv_response.status_code != 200:
        fail("CSV export failed")
    if xlsx_response.status_code != 200:
        fail("XLSX export failed")

    after_csv = {p.name for p in EXPORTS_DIR.glob("*.csv")}
    after_xlsx = {p.name for p in EXPORTS_DIR.glob("*.xlsx")}

    if not (after_csv - before_csv):
        fail("no new CSV artifact detected")
    if not (after_xlsx - before_xlsx):
        fail("no new XLSX artifact detected")

    print("SMOKE_OK")


if __name__ == "__main__":
    main()
