"""
客户端异常定义

Transport failures are not wrapped: callers receive the original
``grpc.RpcError`` raised by the channel.
"""
from __future__ import annotations

from typing import Optional

from shared.codes import BusinessCode


class PlatformClientException(Exception):
    """客户端异常基类"""

    def __init__(
        self,
        code: int,
        message: str,
        error_type: str = "PlatformClientError",
        details: Optional[dict] = None,
        field: Optional[str] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.error_type = error_type
        self.details = details
        self.field = field
        super().__init__(self.message)


class InvalidArgumentException(PlatformClientException):
    """参数类型错误，调用在发出前即被拒绝"""

    def __init__(self, message: str, *, field: str | None = None, details: dict | None = None):
        super().__init__(
            code=BusinessCode.PARAM_TYPE_ERROR,
            message=message,
            error_type="InvalidArgument",
            details=details,
            field=field,
        )


class ConversionException(PlatformClientException):
    """结构化对象与 wire 格式之间转换失败"""

    def __init__(
        self,
        message: str,
        *,
        code: int = BusinessCode.CONVERSION_ERROR,
        message_type: str | None = None,
        field: str | None = None,
    ):
        details = {"message_type": message_type} if message_type else None
        super().__init__(
            code=code,
            message=message,
            error_type="ConversionError",
            details=details,
            field=field,
        )


class RequestSerializationException(ConversionException):
    def __init__(self, message: str, *, message_type: str | None = None, field: str | None = None):
        super().__init__(
            message,
            code=BusinessCode.SERIALIZATION_ERROR,
            message_type=message_type,
            field=field,
        )


class ResponseDeserializationException(ConversionException):
    def __init__(self, message: str, *, message_type: str | None = None, field: str | None = None):
        super().__init__(
            message,
            code=BusinessCode.DESERIALIZATION_ERROR,
            message_type=message_type,
            field=field,
        )
