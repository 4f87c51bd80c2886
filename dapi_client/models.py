"""Structured (schema-validated) request/response models.

Field names match the wire messages in ``dapi_client.schema`` one to one;
response defaults mirror proto3 defaults so that decoding an empty message
produces a fully populated model.
"""
from __future__ import annotations

from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

UInt32 = Annotated[int, Field(ge=0, le=2**32 - 1)]


class PlatformModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class ApplyStateTransitionRequest(PlatformModel):
    state_transition: bytes


class ApplyStateTransitionResponse(PlatformModel):
    pass


class GetIdentityRequest(PlatformModel):
    id: str


class GetIdentityResponse(PlatformModel):
    identity: bytes = b""


class GetDataContractRequest(PlatformModel):
    id: str


class GetDataContractResponse(PlatformModel):
    data_contract: bytes = b""


class GetDocumentsRequest(PlatformModel):
    data_contract_id: str
    document_type: str
    where: bytes = b""
    order_by: bytes = b""
    limit: UInt32 = 0
    # oneof start
    start_after: Optional[UInt32] = None
    start_at: Optional[UInt32] = None

    @model_validator(mode="after")
    def _check_start(self):
        if self.start_after is not None and self.start_at is not None:
            raise ValueError("only one of start_after and start_at may be set")
        return self


class GetDocumentsResponse(PlatformModel):
    documents: list[bytes] = Field(default_factory=list)


class GetIdentityByFirstPublicKeyRequest(PlatformModel):
    public_key_hash: bytes


class GetIdentityByFirstPublicKeyResponse(PlatformModel):
    identity: bytes = b""


class GetIdentityIdByFirstPublicKeyRequest(PlatformModel):
    public_key_hash: bytes


class GetIdentityIdByFirstPublicKeyResponse(PlatformModel):
    id: str = ""
