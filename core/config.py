"""
配置文件 - 项目配置管理
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field, field_validator
from typing import Optional


class GrpcTlsSettings(BaseModel):
    enabled: bool = False
    cert: Optional[str] = None
    key: Optional[str] = None
    ca: Optional[str] = None


class PlatformClientSettings(BaseModel):
    # DAPI gRPC endpoint, scheme prefix is accepted and stripped
    address: str = "127.0.0.1:3010"
    # Default per-call deadline in seconds (None = no deadline)
    timeout: Optional[float] = None
    wait_for_ready: Optional[bool] = None
    # These map to GRPC options grpc.max_receive_message_length / grpc.max_send_message_length
    max_receive_message_length: int = 4 * 1024 * 1024
    max_send_message_length: int = 4 * 1024 * 1024
    # Attach RequestIdInterceptor/LoggingInterceptor to every call
    request_logging: bool = True
    tls: GrpcTlsSettings = Field(default_factory=GrpcTlsSettings)

    @field_validator("timeout")
    @classmethod
    def _validate_timeout(cls, v):
        if v is not None and v <= 0:
            raise ValueError("timeout must be positive")
        return v


class Settings(BaseSettings):
    """项目配置"""

    # 基础配置
    PROJECT_NAME: str = Field(default="DAPI Platform Client")
    VERSION: str = Field(default="0.1.0")
    DEBUG: bool = Field(default=True)
    ENVIRONMENT: str = Field(default="development")
    # 覆盖默认日志级别（DEBUG 模式下为 DEBUG，否则 INFO）
    LOG_LEVEL: Optional[str] = Field(default=None)

    # 分组配置：PLATFORM__ADDRESS, PLATFORM__TLS__ENABLED ...
    platform: PlatformClientSettings = Field(default_factory=PlatformClientSettings)

    # pydantic-settings v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="allow",
        env_nested_delimiter="__",
    )


settings = Settings()
