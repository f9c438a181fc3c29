"""Shared Pydantic data models for push2tweet."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# --- Enums ---


class RelayCode(str, Enum):
    SUCCESS = "TWEET_SUCCESSFULLY_PUBLISHED"
    ERROR = "ERROR"


class ServerState(str, Enum):
    STOPPED = "stopped"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"


class OperationType:
    """Operation tags attached to every log line."""

    PREFIX = "OP_P2T_"
    NOT_AVAILABLE = "NA"
    STARTUP = "OP_P2T_STARTUP"
    SHUTDOWN = "OP_P2T_SHUTDOWN"
    SERVER_START = "OP_P2T_SERVER_START"
    SERVER_LOG = "OP_P2T_SERVER_LOG"
    SERVER_STOP = "OP_P2T_SERVER_STOP"


# --- Configuration ---


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    host: str
    port: int = Field(ge=0, le=65535)
    path: str
    default_service: str
    default_service_path: str
    response_timeout: int = Field(ge=0)  # milliseconds
    proof_of_life_interval: int = Field(gt=0)  # seconds
    log_level: str
    twitter_consumer_key: str = ""
    twitter_consumer_secret: str = ""
    twitter_access_token_key: str = ""
    twitter_access_token_secret: str = ""


# --- Request models ---


class OperationDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    button: str
    action: str
    extra: str
    callback: str | None = None


class RequestContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    correlation_id: str
    transaction_id: str
    operation_type: str

    def log_extra(self) -> dict[str, str]:
        """Fields consumed by ContextFormatter."""
        return {
            "corr": self.correlation_id,
            "trans": self.transaction_id,
            "op": self.operation_type,
        }


class RelayResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: RelayCode
    message: str
    provider_payload: Any = None
    error_code: str | None = None

    @property
    def ok(self) -> bool:
        return self.code is RelayCode.SUCCESS
