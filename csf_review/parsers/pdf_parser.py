from __future__ import annotations

import logging

from pypdf import PdfReader

from ..domain import DocumentRecord, TextChunk


logger = logging.getLogger(__name__)


def _open_reader(path: str) -> PdfReader:
    reader = PdfReader(path)
    # SAT certificates are often owner-protected with an empty user password.
    if reader.is_encrypted:
        reader.decrypt("")
    return reader


def parse_pdf(document: DocumentRecord, max_pages: int | None = None) -> list[TextChunk]:
    reader = _open_reader(document.path)
    total_pages = len(reader.pages)
    limit = min(total_pages, max_pages) if max_pages else total_pages

    chunks = [
        TextChunk(
            document_id=document.id,
            location_type="page",
            location_value=str(index + 1),
            text=reader.pages[index].extract_text() or "",
        )
        for index in range(limit)
    ]

    logger.debug("read %d of %d pages from %s", limit, total_pages, document.identifier)
    return chunks
