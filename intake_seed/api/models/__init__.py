"""Request and response models for the intake-seed API."""

from intake_seed.api.models.requests import (
    ExternalCallRequest,
    GenerateDataRequest,
    IntakeCreateRequest,
    ServiceExecuteRequest,
)
from intake_seed.api.models.responses import (
    DatabaseHealth,
    DataTypeInfo,
    GeneratedDataResponse,
    HealthResponse,
    IntakeCreatedResponse,
    ServiceExecuteResponse,
    ServiceSchemaResponse,
    TableSchemaResponse,
)

__all__ = [
    "DatabaseHealth",
    "DataTypeInfo",
    "ExternalCallRequest",
    "GenerateDataRequest",
    "GeneratedDataResponse",
    "HealthResponse",
    "IntakeCreateRequest",
    "IntakeCreatedResponse",
    "ServiceExecuteRequest",
    "ServiceExecuteResponse",
    "ServiceSchemaResponse",
    "TableSchemaResponse",
]
