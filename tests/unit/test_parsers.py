from __future__ import annotations

from pathlib import Path

import pytest

from csf_review.domain import DocumentRecord
from csf_review.extraction.extractor import extract_constancia
from csf_review.parsers import document_text, parse_document
from csf_review.parsers import pdf_parser
from csf_review.parsers.html_parser import html_to_text


def _document(path: Path, kind: str) -> DocumentRecord:
    return DocumentRecord(id="doc-1", identifier=path.name, path=str(path), client_id="client-1", kind=kind)


def test_html_text_drops_scripts_styles_and_page_furniture() -> None:
    text = html_to_text(
        "<html><head><script>var x = 1;</script><style>p {}</style></head>"
        "<body><nav>Inicio</nav><p>RFC: GOMA850101AB1</p>"
        "<p>Consulta el aviso de privacidad</p><footer>Contáctanos</footer></body></html>"
    )

    assert text == "RFC: GOMA850101AB1"


def test_html_certificate_is_extractable(tmp_path: Path, csf_html_factory) -> None:
    path = tmp_path / "constancia.html"
    path.write_text(csf_html_factory("GOMA850101AB1"), encoding="utf-8")

    chunks = parse_document(_document(path, "html"))
    result = extract_constancia(document_text(chunks))

    assert len(chunks) == 1
    assert "window.onload" not in chunks[0].text
    assert result.taxpayer_id == "GOMA850101AB1"
    assert len(result.fiscal_regimes) == 2


class _FakePage:
    def __init__(self, text: str | None) -> None:
        self._text = text

    def extract_text(self) -> str | None:
        return self._text


class _FakeReader:
    decrypted_with: list[str] = []

    def __init__(self, path: str) -> None:
        self.path = path
        self.is_encrypted = True
        self.pages = [_FakePage("RFC: GOMA850101AB1"), _FakePage(None), _FakePage("CURP: GOMA850101HDFMRN09")]

    def decrypt(self, password: str) -> int:
        self.decrypted_with.append(password)
        return 1


def test_pdf_pages_become_chunks(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(pdf_parser, "PdfReader", _FakeReader)
    monkeypatch.setattr(_FakeReader, "decrypted_with", [])
    document = _document(tmp_path / "constancia.pdf", "pdf")

    chunks = parse_document(document)

    assert [chunk.location_value for chunk in chunks] == ["1", "2", "3"]
    assert chunks[1].text == ""
    assert _FakeReader.decrypted_with == [""]
    assert document_text(chunks) == "RFC: GOMA850101AB1\n\nCURP: GOMA850101HDFMRN09"


def test_pdf_page_limit(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(pdf_parser, "PdfReader", _FakeReader)

    chunks = parse_document(_document(tmp_path / "constancia.pdf", "pdf"), max_pages=1)

    assert [chunk.text for chunk in chunks] == ["RFC: GOMA850101AB1"]


def test_unsupported_document_kind(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        parse_document(_document(tmp_path / "notes.txt", "txt"))
