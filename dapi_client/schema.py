"""Wire-level protobuf schema for the DAPI Platform service.

The descriptor is assembled with ``descriptor_pb2`` in a private pool, so no
protoc step is needed. Equivalent proto source::

    syntax = "proto3";
    package org.dash.platform.dapi.v0;

    service Platform {
      rpc applyStateTransition (ApplyStateTransitionRequest) returns (ApplyStateTransitionResponse);
      rpc getIdentity (GetIdentityRequest) returns (GetIdentityResponse);
      rpc getDataContract (GetDataContractRequest) returns (GetDataContractResponse);
      rpc getDocuments (GetDocumentsRequest) returns (GetDocumentsResponse);
      rpc getIdentityByFirstPublicKey (GetIdentityByFirstPublicKeyRequest) returns (GetIdentityByFirstPublicKeyResponse);
      rpc getIdentityIdByFirstPublicKey (GetIdentityIdByFirstPublicKeyRequest) returns (GetIdentityIdByFirstPublicKeyResponse);
    }
"""

from __future__ import annotations

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

PROTO_FILE = "org/dash/platform/dapi/v0/platform.proto"
PACKAGE = "org.dash.platform.dapi.v0"
SERVICE_NAME = f"{PACKAGE}.Platform"

_FieldProto = descriptor_pb2.FieldDescriptorProto

_STRING = _FieldProto.TYPE_STRING
_BYTES = _FieldProto.TYPE_BYTES
_UINT32 = _FieldProto.TYPE_UINT32


def _field(name: str, number: int, type_: int, *, repeated: bool = False, oneof: int | None = None) -> dict:
    return {"name": name, "number": number, "type": type_, "repeated": repeated, "oneof": oneof}


# message name -> (fields, oneof names)
_MESSAGES: dict[str, tuple[list[dict], list[str]]] = {
    "ApplyStateTransitionRequest": ([_field("state_transition", 1, _BYTES)], []),
    "ApplyStateTransitionResponse": ([], []),
    "GetIdentityRequest": ([_field("id", 1, _STRING)], []),
    "GetIdentityResponse": ([_field("identity", 1, _BYTES)], []),
    "GetDataContractRequest": ([_field("id", 1, _STRING)], []),
    "GetDataContractResponse": ([_field("data_contract", 1, _BYTES)], []),
    "GetDocumentsRequest": (
        [
            _field("data_contract_id", 1, _STRING),
            _field("document_type", 2, _STRING),
            _field("where", 3, _BYTES),
            _field("order_by", 4, _BYTES),
            _field("limit", 5, _UINT32),
            _field("start_after", 6, _UINT32, oneof=0),
            _field("start_at", 7, _UINT32, oneof=0),
        ],
        ["start"],
    ),
    "GetDocumentsResponse": ([_field("documents", 1, _BYTES, repeated=True)], []),
    "GetIdentityByFirstPublicKeyRequest": ([_field("public_key_hash", 1, _BYTES)], []),
    "GetIdentityByFirstPublicKeyResponse": ([_field("identity", 1, _BYTES)], []),
    "GetIdentityIdByFirstPublicKeyRequest": ([_field("public_key_hash", 1, _BYTES)], []),
    "GetIdentityIdByFirstPublicKeyResponse": ([_field("id", 1, _STRING)], []),
}

# rpc name -> (request message, response message)
RPC_METHODS: dict[str, tuple[str, str]] = {
    "applyStateTransition": ("ApplyStateTransitionRequest", "ApplyStateTransitionResponse"),
    "getIdentity": ("GetIdentityRequest", "GetIdentityResponse"),
    "getDataContract": ("GetDataContractRequest", "GetDataContractResponse"),
    "getDocuments": ("GetDocumentsRequest", "GetDocumentsResponse"),
    "getIdentityByFirstPublicKey": (
        "GetIdentityByFirstPublicKeyRequest",
        "GetIdentityByFirstPublicKeyResponse",
    ),
    "getIdentityIdByFirstPublicKey": (
        "GetIdentityIdByFirstPublicKeyRequest",
        "GetIdentityIdByFirstPublicKeyResponse",
    ),
}


def _build_file() -> descriptor_pb2.FileDescriptorProto:
    file_proto = descriptor_pb2.FileDescriptorProto(
        name=PROTO_FILE,
        package=PACKAGE,
        syntax="proto3",
    )
    for message_name, (fields, oneofs) in _MESSAGES.items():
        message = file_proto.message_type.add(name=message_name)
        for oneof_name in oneofs:
            message.oneof_decl.add(name=oneof_name)
        for spec in fields:
            field = message.field.add(
                name=spec["name"],
                number=spec["number"],
                type=spec["type"],
                label=_FieldProto.LABEL_REPEATED if spec["repeated"] else _FieldProto.LABEL_OPTIONAL,
            )
            if spec["oneof"] is not None:
                field.oneof_index = spec["oneof"]

    service = file_proto.service.add(name="Platform")
    for rpc_name, (request_name, response_name) in RPC_METHODS.items():
        service.method.add(
            name=rpc_name,
            input_type=f".{PACKAGE}.{request_name}",
            output_type=f".{PACKAGE}.{response_name}",
        )
    return file_proto


pool = descriptor_pool.DescriptorPool()
_classes = message_factory.GetMessages([_build_file()], pool=pool)

DESCRIPTOR = pool.FindFileByName(PROTO_FILE)
PLATFORM_SERVICE = pool.FindServiceByName(SERVICE_NAME)

ApplyStateTransitionRequest = _classes[f"{PACKAGE}.ApplyStateTransitionRequest"]
ApplyStateTransitionResponse = _classes[f"{PACKAGE}.ApplyStateTransitionResponse"]
GetIdentityRequest = _classes[f"{PACKAGE}.GetIdentityRequest"]
GetIdentityResponse = _classes[f"{PACKAGE}.GetIdentityResponse"]
GetDataContractRequest = _classes[f"{PACKAGE}.GetDataContractRequest"]
GetDataContractResponse = _classes[f"{PACKAGE}.GetDataContractResponse"]
GetDocumentsRequest = _classes[f"{PACKAGE}.GetDocumentsRequest"]
GetDocumentsResponse = _classes[f"{PACKAGE}.GetDocumentsResponse"]
GetIdentityByFirstPublicKeyRequest = _classes[f"{PACKAGE}.GetIdentityByFirstPublicKeyRequest"]
GetIdentityByFirstPublicKeyResponse = _classes[f"{PACKAGE}.GetIdentityByFirstPublicKeyResponse"]
GetIdentityIdByFirstPublicKeyRequest = _classes[f"{PACKAGE}.GetIdentityIdByFirstPublicKeyRequest"]
GetIdentityIdByFirstPublicKeyResponse = _classes[f"{PACKAGE}.GetIdentityIdByFirstPublicKeyResponse"]


def method_path(rpc_name: str) -> str:
    """Full gRPC method path, e.g. ``/org.dash.platform.dapi.v0.Platform/getIdentity``."""
    method = PLATFORM_SERVICE.methods_by_name[rpc_name]
    return f"/{PLATFORM_SERVICE.full_name}/{method.name}"
