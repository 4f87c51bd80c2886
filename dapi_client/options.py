from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from typing import Any, List, Optional

import grpc

from core.exceptions import InvalidArgumentException


@dataclass(slots=True)
class CallOptions:
    """Per-call settings handed through to the grpc multicallable.

    ``interceptors`` run in list order, the first one outermost.
    """

    interceptors: List[grpc.UnaryUnaryClientInterceptor] = field(default_factory=list)
    timeout: Optional[float] = None
    credentials: Optional[grpc.CallCredentials] = None
    wait_for_ready: Optional[bool] = None
    compression: Optional[grpc.Compression] = None
    # When set on the overriding side of merge(), its interceptors replace the base list
    replace_interceptors: bool = False

    @classmethod
    def coerce(cls, value: Any) -> "CallOptions":
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        if isinstance(value, Mapping):
            known = {f.name for f in fields(cls)}
            unknown = set(value) - known
            if unknown:
                raise InvalidArgumentException(
                    f"unknown call options: {', '.join(sorted(map(str, unknown)))}",
                    field="options",
                )
            return cls(**value)
        raise InvalidArgumentException("options must be CallOptions or a mapping", field="options")

    def merge(self, overrides: Optional["CallOptions"]) -> "CallOptions":
        """Return a new CallOptions with ``overrides`` applied on top of self."""
        if overrides is None:
            return replace(self, interceptors=list(self.interceptors))

        if overrides.replace_interceptors:
            interceptors = list(overrides.interceptors)
        else:
            interceptors = [*self.interceptors, *overrides.interceptors]

        return CallOptions(
            interceptors=interceptors,
            timeout=overrides.timeout if overrides.timeout is not None else self.timeout,
            credentials=overrides.credentials if overrides.credentials is not None else self.credentials,
            wait_for_ready=overrides.wait_for_ready if overrides.wait_for_ready is not None else self.wait_for_ready,
            compression=overrides.compression if overrides.compression is not None else self.compression,
        )
