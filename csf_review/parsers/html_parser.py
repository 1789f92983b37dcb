from __future__ import annotations

from bs4 import BeautifulSoup

from ..domain import DocumentRecord, TextChunk


# Page furniture of the SAT validation page that is not certificate data.
NOISE_PATTERNS = (
    "javascript",
    "aviso de privacidad",
    "contáctanos",
)


def _looks_like_noise(text: str) -> bool:
    lower = text.lower()
    return any(pattern in lower for pattern in NOISE_PATTERNS)


def _clean_html(raw_html: str) -> BeautifulSoup:
    soup = BeautifulSoup(raw_html, "lxml")

    for tag in soup(["script", "style", "noscript", "header", "footer", "nav"]):
        tag.decompose()

    return soup


def html_to_text(raw_html: str) -> str:
    soup = _clean_html(raw_html)
    lines = [line.strip() for line in soup.get_text("\n").splitlines()]
    return "\n".join(line for line in lines if line and not _looks_like_noise(line))


def parse_html(document: DocumentRecord) -> list[TextChunk]:
    """Read a certificate saved as HTML (the SAT validation page behind the QR code)."""
    with open(document.path, "r", encoding="utf-8", errors="replace") as handle:
        raw = handle.read()

    return [
        TextChunk(
            document_id=document.id,
            location_type="document",
            location_value="1",
            text=html_to_text(raw),
        )
    ]
