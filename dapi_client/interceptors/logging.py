from __future__ import annotations

import time

import grpc

from core.logging_config import get_logger
from dapi_client.interceptors.request_id import REQUEST_ID_META_KEY


logger = get_logger(__name__)


def _request_id(metadata) -> str | None:
    for key, value in metadata or ():
        if key == REQUEST_ID_META_KEY:
            return value
    return None


class LoggingInterceptor(grpc.UnaryUnaryClientInterceptor):
    def intercept_unary_unary(self, continuation, client_call_details, request):
        method = client_call_details.method
        request_id = _request_id(client_call_details.metadata)
        start = time.perf_counter()
        logger.info(
            "grpc_request",
            method=method,
            request_bytes=len(request) if isinstance(request, bytes) else None,
            request_id=request_id,
        )

        call = continuation(client_call_details, request)

        def _done(future) -> None:
            elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
            if future.cancelled():
                logger.info("grpc_request_cancelled", method=method, elapsed_ms=elapsed_ms, request_id=request_id)
                return
            code = future.code()
            if code != grpc.StatusCode.OK:
                # Errors are returned to the caller; log concisely without stack
                logger.warning(
                    "grpc_request_failed",
                    method=method,
                    status=str(code),
                    details=future.details(),
                    request_id=request_id,
                )
            logger.info(
                "grpc_request_done",
                method=method,
                status=str(code),
                elapsed_ms=elapsed_ms,
                request_id=request_id,
            )

        call.add_done_callback(_done)
        return call
