"""Request bodies for the intake-seed API.

Keys are camelCase on the wire (``serviceType``, ``selectedColumnNames``)
and snake_case in Python.
"""

from typing import Any, Optional, Union

from pydantic import Field

from intake_seed.domain.models import CamelModel, DataField, Environment


class ServiceExecuteRequest(CamelModel):
    """Lookup over a service join."""

    environment: Environment
    service_type: str = Field(..., min_length=1, description="Service identifier")
    selected_column_names: list[str] = Field(default_factory=list, description="Projection, in order")
    filters: Optional[dict[str, Any]] = Field(None, description="Column -> value equality filters")


class IntakeCreateRequest(CamelModel):
    """Synthetic intake creation.

    ``data_fields`` may be a list of fields, a list of single-key
    ``{COLUMN: value}`` objects, or one ``{COLUMN: value}`` object.
    """

    environment: Environment
    service_type: str = Field(..., min_length=1, description="Service identifier")
    data_fields: Optional[Union[list[dict[str, Any]], dict[str, Any]]] = Field(
        None, description="Column overrides"
    )


class GenerateDataRequest(CamelModel):
    """Offline row generation."""

    fields: list[DataField] = Field(..., min_length=1, description="Fields to generate")
    row_count: int = Field(10, ge=1, le=1000, description="Number of rows (1-1000)")
    format: str = Field("json", description="Output format")
    table_name: Optional[str] = Field(None, description="Target table for the sql format")
    download: bool = Field(False, description="Return the content as a file attachment")
    seed: Optional[int] = Field(None, description="Random seed for reproducible output")


class ExternalCallRequest(CamelModel):
    """Payload forwarded to the case-management API."""

    api_type: str = Field(..., description="initial, cos or edit")
    environment: Environment
    request_body: Any = Field(None, description="JSON body forwarded verbatim")
