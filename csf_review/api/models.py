from __future__ import annotations

from pydantic import BaseModel, Field


class ClientCreateRequest(BaseModel):
    rfc: str = Field(min_length=12, max_length=13, description="RFC of the client; stored upper-case.")
    name: str


class DefaultRegimeRequest(BaseModel):
    index: int = Field(ge=0)
    actor: str = "reviewer"


class ExtractRequest(BaseModel):
    text: str
    known_rfc: str | None = Field(default=None, description="When set, the certificate RFC must match it.")


class ExportRequest(BaseModel):
    client_id: str
