from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, StrictInt, StrictStr
from pydantic.alias_generators import to_camel

from snowy.constants import SnowyModel


@dataclass(frozen=True)
class GenerateInput:
    model: str
    prompt: str
    temperature: float
    max_tokens: int
    # Milliseconds since Unix epoch; the current time when omitted.
    timestamp: int | None = None


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class HashableRequest(_WireModel):
    model_config = ConfigDict(extra="forbid")

    program_id: str
    model: SnowyModel
    prompt: str
    temperature: float
    max_tokens: int
    timestamp: int
    signer: str

    def to_payload(self) -> dict[str, Any]:
        """Exactly the fields covered by the request hash, under wire names."""
        return self.model_dump(by_alias=True, include=set(HashableRequest.model_fields))


class SignedRequest(HashableRequest):
    request_hash: str
    signature: str

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class Usage(_WireModel):
    prompt_tokens: StrictInt
    completion_tokens: StrictInt
    total_tokens: StrictInt


class Verification(_WireModel):
    request_hash: StrictStr
    signer: StrictStr
    program_id: StrictStr


class GenerateResponse(_WireModel):
    output: StrictStr
    model: SnowyModel
    usage: Usage
    verification: Verification

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)
