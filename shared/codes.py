"""
Shared business codes used across layers (Core/Client).

This module provides a single source of truth to avoid drift between
multiple enum definitions scattered across the codebase.
"""
from enum import IntEnum


class BusinessCode(IntEnum):
    """业务状态码定义（单一来源）"""

    # 成功
    SUCCESS = 0

    # 参数错误 (1xxxx)
    PARAM_ERROR = 10000
    PARAM_MISSING = 10001
    PARAM_TYPE_ERROR = 10002
    PARAM_VALIDATION_ERROR = 10003

    # 转换错误 (2xxxx)
    CONVERSION_ERROR = 20000
    SERIALIZATION_ERROR = 20001
    DESERIALIZATION_ERROR = 20002

    # 系统错误 (4xxxx)
    SYSTEM_ERROR = 40000
    NETWORK_ERROR = 40002


__all__ = ["BusinessCode"]
