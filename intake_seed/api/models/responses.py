"""Response models for the intake-seed API."""

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import Field

from intake_seed.domain.models import CamelModel


class DatabaseHealth(CamelModel):
    """Database health status.

    Attributes:
        environment: Environment that was checked
        status: Connection status
        response_time_ms: Round trip of a trivial query
        error: Failure message when disconnected
    """
    environment: str
    status: Literal["connected", "disconnected"]
    response_time_ms: Optional[float] = Field(None, description="Database response time in milliseconds")
    error: Optional[str] = None


class HealthResponse(CamelModel):
    status: Literal["healthy", "degraded", "unhealthy"]
    timestamp: datetime
    version: str
    environments: list[str] = Field(default_factory=list, description="Configured environments")
    database: Optional[DatabaseHealth] = None


class DataTypeInfo(CamelModel):
    type: str
    label: str
    options: list[str]


class TableSchemaResponse(CamelModel):
    environment: str
    table_name: str
    schema_: list[dict[str, Any]] = Field(..., alias="schema")


class ServiceSchemaResponse(CamelModel):
    environment: str
    service_type: str
    mode: str
    schema_: list[dict[str, Any]] = Field(..., alias="schema")


class ServiceExecuteResponse(CamelModel):
    environment: str
    service_type: str
    data: Optional[dict[str, Any]] = None
    message: str


class IntakeCreatedResponse(CamelModel):
    message: str
    environment: str
    service_type: str
    attempts: int
    data: list[dict[str, Any]]


class GeneratedDataResponse(CamelModel):
    format: str
    extension: str
    row_count: int
    content: str
