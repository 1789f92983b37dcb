from __future__ import annotations

from ..utils import canonical_identifier


class TaxpayerIdMismatch(Exception):
    """The certificate belongs to a different RFC than the client it was uploaded for."""

    def __init__(self, extracted: str, known: str) -> None:
        self.extracted = extracted
        self.known = known
        super().__init__(
            f"El RFC de la CSF ({extracted}) no coincide con el RFC del cliente ({known})"
        )


def ids_match(extracted: str | None, known: str | None) -> bool:
    """Compare two RFCs ignoring case and whitespace. A missing side always matches."""
    left = canonical_identifier(extracted)
    right = canonical_identifier(known)
    if not left or not right:
        return True
    return left == right


def check_taxpayer_id(extracted: str | None, known: str | None) -> None:
    if not ids_match(extracted, known):
        raise TaxpayerIdMismatch(extracted or "", known or "")
