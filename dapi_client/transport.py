"""Callback-style client for the Platform service.

Each call method has the shape ``(request, metadata, options, callback)``;
``callback(error, response)`` fires exactly once, from a grpc thread.
Requests and responses travel as raw bytes here; turning them into
structured objects is the job of the interceptors in ``options``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable, Optional, Sequence, Tuple, Union

import grpc
import grpc.experimental

from core.config import GrpcTlsSettings
from core.logging_config import get_logger
from dapi_client import schema
from dapi_client.options import CallOptions


logger = get_logger(__name__)

Callback = Callable[[Optional[BaseException], Any], None]
ChannelOptions = Union[Mapping[str, Any], Sequence[Tuple[str, Any]], None]

# python method name -> rpc name
PLATFORM_METHODS = {
    "apply_state_transition": "applyStateTransition",
    "get_identity": "getIdentity",
    "get_data_contract": "getDataContract",
    "get_documents": "getDocuments",
    "get_identity_by_first_public_key": "getIdentityByFirstPublicKey",
    "get_identity_id_by_first_public_key": "getIdentityIdByFirstPublicKey",
}


def insecure_credentials() -> grpc.ChannelCredentials:
    return grpc.experimental.insecure_channel_credentials()


def is_insecure(credentials: grpc.ChannelCredentials) -> bool:
    # Current grpcio hands out one module-level insecure ChannelCredentials;
    # older releases wrapped a shared sentinel in a fresh ChannelCredentials
    sentinel = grpc.experimental._insecure_channel_credentials
    if credentials is sentinel or credentials is grpc.experimental.insecure_channel_credentials():
        return True
    return getattr(credentials, "_credentials", None) is sentinel


def build_channel_credentials(tls: GrpcTlsSettings) -> grpc.ChannelCredentials:
    root_certificates = None
    private_key = None
    certificate_chain = None
    if tls.ca:
        with open(tls.ca, "rb") as f:
            root_certificates = f.read()
    if tls.key or tls.cert:
        if not (tls.key and tls.cert):
            raise RuntimeError("GRPC client TLS requires both cert and key when either is provided")
        with open(tls.key, "rb") as f:
            private_key = f.read()
        with open(tls.cert, "rb") as f:
            certificate_chain = f.read()
    return grpc.ssl_channel_credentials(
        root_certificates=root_certificates,
        private_key=private_key,
        certificate_chain=certificate_chain,
    )


def _channel_options(options: ChannelOptions) -> list[tuple[str, Any]]:
    if not options:
        return []
    if isinstance(options, Mapping):
        return list(options.items())
    return list(options)


def create_channel(target: str, credentials: grpc.ChannelCredentials, options: ChannelOptions = None) -> grpc.Channel:
    channel_options = _channel_options(options)
    if is_insecure(credentials):
        channel = grpc.insecure_channel(target, options=channel_options)
    else:
        channel = grpc.secure_channel(target, credentials, options=channel_options)
    logger.debug("grpc_channel_created", target=target, secure=not is_insecure(credentials))
    return channel


class PlatformTransportClient:
    """Low-level Platform client over a single channel."""

    def __init__(
        self,
        target: str,
        credentials: grpc.ChannelCredentials,
        options: ChannelOptions = None,
    ) -> None:
        self.target = target
        self.credentials = credentials
        self._channel = create_channel(target, credentials, options)

    def _invoke(
        self,
        rpc_name: str,
        request: Any,
        metadata: Sequence[Tuple[str, Any]],
        options: CallOptions,
        callback: Callback,
    ) -> grpc.Future:
        channel = self._channel
        if options.interceptors:
            channel = grpc.intercept_channel(channel, *options.interceptors)
        # No serializers: bytes in, bytes out
        multicallable = channel.unary_unary(schema.method_path(rpc_name))

        call = multicallable.future(
            request,
            timeout=options.timeout,
            metadata=metadata,
            credentials=options.credentials,
            wait_for_ready=options.wait_for_ready,
            compression=options.compression,
        )

        def _on_done(future) -> None:
            if future.cancelled():
                callback(grpc.FutureCancelledError(), None)
                return
            error = future.exception()
            if error is not None:
                callback(error, None)
            else:
                callback(None, future.result())

        call.add_done_callback(_on_done)
        return call

    def apply_state_transition(self, request, metadata, options: CallOptions, callback: Callback) -> grpc.Future:
        return self._invoke("applyStateTransition", request, metadata, options, callback)

    def get_identity(self, request, metadata, options: CallOptions, callback: Callback) -> grpc.Future:
        return self._invoke("getIdentity", request, metadata, options, callback)

    def get_data_contract(self, request, metadata, options: CallOptions, callback: Callback) -> grpc.Future:
        return self._invoke("getDataContract", request, metadata, options, callback)

    def get_documents(self, request, metadata, options: CallOptions, callback: Callback) -> grpc.Future:
        return self._invoke("getDocuments", request, metadata, options, callback)

    def get_identity_by_first_public_key(self, request, metadata, options: CallOptions, callback: Callback) -> grpc.Future:
        return self._invoke("getIdentityByFirstPublicKey", request, metadata, options, callback)

    def get_identity_id_by_first_public_key(self, request, metadata, options: CallOptions, callback: Callback) -> grpc.Future:
        return self._invoke("getIdentityIdByFirstPublicKey", request, metadata, options, callback)

    def close(self) -> None:
        self._channel.close()
