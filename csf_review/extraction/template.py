from __future__ import annotations

from dataclasses import dataclass
import json
from pathlib import Path


@dataclass
class FieldSearchConfig:
    patterns: list[str]


@dataclass
class FieldTemplate:
    key: str
    label: str
    section: str
    normalizer: str
    search: FieldSearchConfig


@dataclass
class ExtractionTemplate:
    template_id: str
    description: str
    fields: list[FieldTemplate]

    def section_fields(self, section: str) -> list[FieldTemplate]:
        return [field for field in self.fields if field.section == section]


def load_template(path: str | Path) -> ExtractionTemplate:
    template_path = Path(path)
    payload = json.loads(template_path.read_text(encoding="utf-8"))
    fields = []

    for raw_field in payload["fields"]:
        search_payload = raw_field.get("search", {})
        fields.append(
            FieldTemplate(
                key=raw_field["key"],
                label=raw_field.get("label", raw_field["key"]),
                section=raw_field.get("section", "identity"),
                normalizer=raw_field.get("normalizer", "text"),
                search=FieldSearchConfig(patterns=search_payload.get("patterns", [])),
            )
        )

    return ExtractionTemplate(
        template_id=payload.get("template_id", template_path.stem),
        description=payload.get("description", ""),
        fields=fields,
    )
