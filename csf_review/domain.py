from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass
class DocumentRecord:
    id: str
    identifier: str
    path: str
    client_id: str
    kind: str


@dataclass
class TextChunk:
    document_id: str
    location_type: str
    location_value: str
    text: str


@dataclass
class NormalizationResult:
    value: str | None
    success: bool
    reason: str


@dataclass
class AddressRecord:
    postal_code: str | None = None
    street_type: str | None = None
    street_name: str | None = None
    exterior_number: str | None = None
    interior_number: str | None = None
    neighborhood: str | None = None
    locality: str | None = None
    municipality: str | None = None
    state: str | None = None
    cross_streets: str | None = None


@dataclass
class EconomicActivityRecord:
    order: int
    description: str
    percentage: int
    start_date: str
    end_date: str | None = None


@dataclass
class FiscalRegimeRecord:
    name: str
    start_date: str
    end_date: str | None = None
    # Assigned by whoever stores the regimes, never by the extractor.
    is_default: bool = False


@dataclass
class ObligationRecord:
    description: str
    due_description: str
    start_date: str
    end_date: str | None = None


IDENTITY_FIELDS = (
    "validation_id",
    "taxpayer_id",
    "personal_id",
    "given_names",
    "first_surname",
    "second_surname",
    "legal_name",
    "trade_name",
    "registration_status",
    "operations_start_date",
    "last_status_change_date",
)


@dataclass
class ExtractionResult:
    """Everything recovered from one certificate text.

    Identity fields are flattened onto the result. ``None`` means the field was
    not found and an empty list means the table section was absent or yielded
    no rows. Table rows keep document order.
    """

    validation_id: str | None = None
    taxpayer_id: str | None = None
    personal_id: str | None = None
    given_names: str | None = None
    first_surname: str | None = None
    second_surname: str | None = None
    legal_name: str | None = None
    trade_name: str | None = None
    registration_status: str | None = None
    operations_start_date: str | None = None
    last_status_change_date: str | None = None
    address: AddressRecord | None = None
    economic_activities: list[EconomicActivityRecord] = field(default_factory=list)
    fiscal_regimes: list[FiscalRegimeRecord] = field(default_factory=list)
    obligations: list[ObligationRecord] = field(default_factory=list)

    def identity(self) -> dict[str, str]:
        return {key: getattr(self, key) for key in IDENTITY_FIELDS if getattr(self, key) is not None}

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
