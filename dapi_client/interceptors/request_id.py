from __future__ import annotations

import collections
import uuid

import grpc
from structlog.contextvars import get_contextvars


REQUEST_ID_META_KEY = "x-request-id"


class _ClientCallDetails(
    collections.namedtuple(
        "_ClientCallDetails",
        ("method", "timeout", "metadata", "credentials", "wait_for_ready", "compression"),
    ),
    grpc.ClientCallDetails,
):
    pass


def get_request_id() -> str | None:
    """Request id bound via ``structlog.contextvars.bind_contextvars(request_id=...)``."""
    value = get_contextvars().get("request_id")
    return str(value) if value else None


class RequestIdInterceptor(grpc.UnaryUnaryClientInterceptor):
    """Make sure every outgoing call carries ``x-request-id``.

    An explicit header wins, then the bound structlog context, then a new uuid4.
    """

    def intercept_unary_unary(self, continuation, client_call_details, request):
        metadata = list(client_call_details.metadata or [])
        if not any(key == REQUEST_ID_META_KEY for key, _ in metadata):
            metadata.append((REQUEST_ID_META_KEY, get_request_id() or str(uuid.uuid4())))

        details = _ClientCallDetails(
            client_call_details.method,
            client_call_details.timeout,
            metadata,
            client_call_details.credentials,
            getattr(client_call_details, "wait_for_ready", None),
            getattr(client_call_details, "compression", None),
        )
        return continuation(details, request)
