from __future__ import annotations

import html
import itertools
import os
import tempfile
from typing import Callable

import pytest

# Keep the SQLite store and uploads out of the working tree.
os.environ["CSF_REVIEW_HOME"] = tempfile.mkdtemp(prefix="csf_review_tests_")


SAMPLE_RFC = "GOMA850101AB1"

SAMPLE_CSF_TEXT = """
CÉDULA DE IDENTIFICACIÓN FISCAL
GOMA850101AB1
Registro Federal de Contribuyentes
JUAN CARLOS GOMEZ MARTINEZ
Nombre, denominación o razón social
idCIF: 19010123456
VALIDA TU INFORMACIÓN FISCAL
CONSTANCIA DE SITUACIÓN FISCAL
Lugar y Fecha de Emisión
CUAUHTEMOC , CIUDAD DE MEXICO A 15 DE MARZO DE 2024
Datos de Identificación del Contribuyente:
RFC: GOMA850101AB1
CURP: GOMA850101HDFMRN09
Nombre (s): JUAN CARLOS
Primer Apellido: GOMEZ
Segundo Apellido: MARTINEZ
Fecha inicio de operaciones: 01 DE FEBRERO DE 2015
Estatus en el padrón: ACTIVO
Fecha de último cambio de estado: 01 DE FEBRERO DE 2015
Nombre Comercial: DESPACHO GOMEZ
Datos del domicilio registrado
Código Postal:06700    Tipo de Vialidad: CALLE
Nombre de Vialidad: ORIZABA    Número Exterior: 120
Número Interior: 4B    Nombre de la Colonia: ROMA NORTE
Nombre de la Localidad: CIUDAD DE MEXICO    Nombre del Municipio o Demarcación Territorial: CUAUHTEMOC
Nombre de la Entidad Federativa: CIUDAD DE MEXICO    Entre Calle: PUEBLA
Y Calle: DURANGO
Actividades Económicas:
Orden Actividad Económica Porcentaje Fecha Inicio Fecha Fin
1 Servicios de contabilidad y auditoría 60 01/02/2015
2 Alquiler de oficinas y locales comerciales 40 15/06/2018
Regímenes:
Régimen Fecha Inicio Fecha Fin
Régimen de las Personas Físicas con Actividades Empresariales y Profesionales 01/02/2015
Régimen de Arrendamiento 15/06/2018
Obligaciones:
Descripción de la Obligación Descripción Vencimiento Fecha Inicio Fecha Fin
Declaración anual de ISR. Personas Físicas. A más tardar el 30 de abril del ejercicio siguiente. 01/02/2015
Pago definitivo mensual de IVA. A más tardar el día 17 del mes inmediato posterior al periodo que corresponda. 01/02/2015
Sus datos personales son incorporados y protegidos en los sistemas del SAT, de conformidad con los Lineamientos de Protección de Datos Personales.
Cadena Original Sello: ||2024/03/15|GOMA850101AB1|CONSTANCIA DE SITUACIÓN FISCAL|200001088888800000031||
"""

_rfc_sequence = itertools.count(1)


def csf_text_for(rfc: str) -> str:
    return SAMPLE_CSF_TEXT.replace(SAMPLE_RFC, rfc)


def csf_html_for(rfc: str) -> str:
    rows = "\n".join(f"<p>{html.escape(line)}</p>" for line in csf_text_for(rfc).splitlines() if line)
    return (
        "<html><head><title>Constancia</title>"
        "<script>window.onload = function () {};</script>"
        "<style>p { margin: 0; }</style></head>"
        f"<body>\n{rows}\n</body></html>"
    )


@pytest.fixture
def csf_text() -> str:
    return SAMPLE_CSF_TEXT


@pytest.fixture
def unique_rfc() -> str:
    return f"GOMA850101{next(_rfc_sequence):03d}"


@pytest.fixture
def csf_text_factory() -> Callable[[str], str]:
    return csf_text_for


@pytest.fixture
def csf_html_factory() -> Callable[[str], str]:
    return csf_html_for
