from __future__ import annotations

import asyncio
from collections.abc import Mapping
from dataclasses import replace
from types import MappingProxyType
from typing import Any, Optional, Type

import grpc
from google.protobuf.message import Message
from pydantic import BaseModel

from core.config import PlatformClientSettings, settings
from core.exceptions import InvalidArgumentException
from core.logging_config import get_logger
from dapi_client import models, schema
from dapi_client.converters import (
    convert_object_to_metadata,
    is_object,
    request_serializer_factory,
    response_deserializer_factory,
)
from dapi_client.interceptors.conversion import ConversionInterceptor
from dapi_client.interceptors.logging import LoggingInterceptor
from dapi_client.interceptors.request_id import RequestIdInterceptor
from dapi_client.options import CallOptions
from dapi_client.transport import (
    PLATFORM_METHODS,
    ChannelOptions,
    PlatformTransportClient,
    build_channel_credentials,
    insecure_credentials,
)
from dapi_client.utils import promisify, strip_hostname


logger = get_logger(__name__)

_EMPTY_METADATA: Mapping[str, str] = MappingProxyType({})


class PlatformPromiseClient:
    """Awaitable, typed facade over the callback-based Platform transport.

    Every call method validates ``metadata`` synchronously and returns an
    ``asyncio.Future`` resolving to the structured response model. Transport
    errors (``grpc.RpcError``) and ``ConversionException`` surface through the
    future unchanged; nothing is retried here.
    """

    def __init__(
        self,
        hostname: str,
        credentials: Optional[grpc.ChannelCredentials] = None,
        options: ChannelOptions = None,
        *,
        call_options: CallOptions | Mapping[str, Any] | None = None,
    ) -> None:
        """
        Args:
            hostname: server address, a ``scheme://`` prefix is stripped
            credentials: channel credentials, insecure when omitted
            options: grpc channel options (mapping or ``(key, value)`` pairs)
            call_options: defaults applied to every call, before per-call options;
                their interceptors are appended to the conversion interceptor
        """
        if credentials is None:
            credentials = insecure_credentials()

        stripped_hostname = strip_hostname(hostname)

        self.client = PlatformTransportClient(stripped_hostname, credentials, options or {})

        # Transport methods become future-returning; bound methods keep their receiver
        for name in PLATFORM_METHODS:
            setattr(self.client, name, promisify(getattr(self.client, name)))

        # Defaults always extend the conversion interceptor, never replace it
        self.default_call_options = replace(CallOptions.coerce(call_options), replace_interceptors=False)
        self.protocol_version: Optional[str] = None

        logger.debug("platform_client_created", target=stripped_hostname)

    @classmethod
    def from_settings(cls, config: PlatformClientSettings | None = None) -> "PlatformPromiseClient":
        """Build a client from ``settings.platform`` (or the given config)."""
        config = config or settings.platform

        credentials = build_channel_credentials(config.tls) if config.tls.enabled else None
        channel_options = {
            "grpc.max_receive_message_length": config.max_receive_message_length,
            "grpc.max_send_message_length": config.max_send_message_length,
        }
        interceptors = [RequestIdInterceptor(), LoggingInterceptor()] if config.request_logging else []
        call_options = CallOptions(
            interceptors=interceptors,
            timeout=config.timeout,
            wait_for_ready=config.wait_for_ready,
        )
        return cls(config.address, credentials, channel_options, call_options=call_options)

    def _unary(
        self,
        method: str,
        request: Any,
        metadata: Mapping[str, str],
        options: CallOptions | Mapping[str, Any] | None,
        request_message: Type[Message],
        response_message: Type[Message],
        response_model: Type[BaseModel],
    ) -> asyncio.Future:
        if not is_object(metadata):
            raise InvalidArgumentException("metadata must be a mapping", field="metadata")

        call_options = (
            CallOptions(
                interceptors=[
                    ConversionInterceptor(
                        response_deserializer_factory(response_message, response_model),
                        request_serializer_factory(request_message),
                    ),
                ],
            )
            .merge(self.default_call_options)
            .merge(CallOptions.coerce(options))
        )

        return getattr(self.client, method)(
            request,
            convert_object_to_metadata(metadata),
            call_options,
        )

    def apply_state_transition(
        self,
        request: models.ApplyStateTransitionRequest,
        metadata: Mapping[str, str] = _EMPTY_METADATA,
        options: CallOptions | Mapping[str, Any] | None = None,
    ) -> "asyncio.Future[models.ApplyStateTransitionResponse]":
        return self._unary(
            "apply_state_transition",
            request,
            metadata,
            options,
            schema.ApplyStateTransitionRequest,
            schema.ApplyStateTransitionResponse,
            models.ApplyStateTransitionResponse,
        )

    def get_identity(
        self,
        request: models.GetIdentityRequest,
        metadata: Mapping[str, str] = _EMPTY_METADATA,
        options: CallOptions | Mapping[str, Any] | None = None,
    ) -> "asyncio.Future[models.GetIdentityResponse]":
        return self._unary(
            "get_identity",
            request,
            metadata,
            options,
            schema.GetIdentityRequest,
            schema.GetIdentityResponse,
            models.GetIdentityResponse,
        )

    def get_data_contract(
        self,
        request: models.GetDataContractRequest,
        metadata: Mapping[str, str] = _EMPTY_METADATA,
        options: CallOptions | Mapping[str, Any] | None = None,
    ) -> "asyncio.Future[models.GetDataContractResponse]":
        return self._unary(
            "get_data_contract",
            request,
            metadata,
            options,
            schema.GetDataContractRequest,
            schema.GetDataContractResponse,
            models.GetDataContractResponse,
        )

    def get_documents(
        self,
        request: models.GetDocumentsRequest,
        metadata: Mapping[str, str] = _EMPTY_METADATA,
        options: CallOptions | Mapping[str, Any] | None = None,
    ) -> "asyncio.Future[models.GetDocumentsResponse]":
        return self._unary(
            "get_documents",
            request,
            metadata,
            options,
            schema.GetDocumentsRequest,
            schema.GetDocumentsResponse,
            models.GetDocumentsResponse,
        )

    def get_identity_by_first_public_key(
        self,
        request: models.GetIdentityByFirstPublicKeyRequest,
        metadata: Mapping[str, str] = _EMPTY_METADATA,
        options: CallOptions | Mapping[str, Any] | None = None,
    ) -> "asyncio.Future[models.GetIdentityByFirstPublicKeyResponse]":
        return self._unary(
            "get_identity_by_first_public_key",
            request,
            metadata,
            options,
            schema.GetIdentityByFirstPublicKeyRequest,
            schema.GetIdentityByFirstPublicKeyResponse,
            models.GetIdentityByFirstPublicKeyResponse,
        )

    def get_identity_id_by_first_public_key(
        self,
        request: models.GetIdentityIdByFirstPublicKeyRequest,
        metadata: Mapping[str, str] = _EMPTY_METADATA,
        options: CallOptions | Mapping[str, Any] | None = None,
    ) -> "asyncio.Future[models.GetIdentityIdByFirstPublicKeyResponse]":
        return self._unary(
            "get_identity_id_by_first_public_key",
            request,
            metadata,
            options,
            schema.GetIdentityIdByFirstPublicKeyRequest,
            schema.GetIdentityIdByFirstPublicKeyResponse,
            models.GetIdentityIdByFirstPublicKeyResponse,
        )

    def set_protocol_version(self, protocol_version: str) -> None:
        self.protocol_version = protocol_version

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "PlatformPromiseClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    async def __aenter__(self) -> "PlatformPromiseClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
