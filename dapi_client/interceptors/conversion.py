from __future__ import annotations

import threading
from typing import Any, Callable

import grpc

from core.exceptions import ConversionException
from dapi_client.converters import RequestSerializer, ResponseDeserializer

_UNSET = object()


class _DeserializingCall(grpc.Call, grpc.Future):
    """Wraps an in-flight unary call; ``result()`` yields the structured response.

    Transport failures pass through untouched, conversion failures are
    reported as ``ConversionException``.
    """

    def __init__(self, call: Any, deserialize: ResponseDeserializer) -> None:
        self._call = call
        self._deserialize = deserialize
        self._lock = threading.Lock()
        self._response: Any = _UNSET
        self._error: ConversionException | None = None

    def _convert(self, timeout: float | None) -> Any:
        raw = self._call.result(timeout)
        with self._lock:
            if self._response is _UNSET and self._error is None:
                try:
                    self._response = self._deserialize(raw)
                except ConversionException as exc:
                    self._error = exc
            if self._error is not None:
                raise self._error
            return self._response

    # grpc.Future
    def result(self, timeout: float | None = None) -> Any:
        return self._convert(timeout)

    def exception(self, timeout: float | None = None) -> BaseException | None:
        error = self._call.exception(timeout)
        if error is not None:
            return error
        try:
            self._convert(timeout)
        except ConversionException as exc:
            return exc
        return None

    def traceback(self, timeout: float | None = None):
        error = self.exception(timeout)
        if isinstance(error, ConversionException):
            return error.__traceback__
        return self._call.traceback(timeout)

    def add_done_callback(self, fn: Callable[[Any], None]) -> None:
        self._call.add_done_callback(lambda _: fn(self))

    def cancel(self) -> bool:
        return self._call.cancel()

    def cancelled(self) -> bool:
        return self._call.cancelled()

    def running(self) -> bool:
        return self._call.running()

    def done(self) -> bool:
        return self._call.done()

    # grpc.Call / grpc.RpcContext
    def is_active(self) -> bool:
        return self._call.is_active()

    def time_remaining(self):
        return self._call.time_remaining()

    def add_callback(self, callback: Callable[[], None]) -> bool:
        return self._call.add_callback(callback)

    def initial_metadata(self):
        return self._call.initial_metadata()

    def trailing_metadata(self):
        return self._call.trailing_metadata()

    def code(self) -> grpc.StatusCode:
        return self._call.code()

    def details(self) -> str:
        return self._call.details()


class ConversionInterceptor(grpc.UnaryUnaryClientInterceptor):
    """Structured request -> wire bytes on the way out, wire bytes -> structured response on the way back."""

    def __init__(self, response_deserializer: ResponseDeserializer, request_serializer: RequestSerializer) -> None:
        self._deserialize = response_deserializer
        self._serialize = request_serializer

    def intercept_unary_unary(self, continuation, client_call_details, request):
        # ConversionException raised here becomes a failed future inside grpc
        payload = self._serialize(request)
        call = continuation(client_call_details, payload)
        return _DeserializingCall(call, self._deserialize)
