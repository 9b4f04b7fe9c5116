"""Schema endpoints: table column lists and service form descriptions."""

import logging

from fastapi import APIRouter, Query

from intake_seed.api.dependencies import RegistryDep, resolve_service
from intake_seed.api.errors import unwrap
from intake_seed.api.models import ServiceSchemaResponse, TableSchemaResponse
from intake_seed.domain.models import Environment
from intake_seed.services import schema_inspector

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["schema"])


@router.get("/schema", response_model=TableSchemaResponse)
def get_table_schema(
    registry: RegistryDep,
    environment: Environment = Query(..., description="Target environment"),
    table_name: str = Query(..., alias="tableName", description="Table to describe"),
) -> TableSchemaResponse:
    """List the catalog columns of one table (404 when it has none)."""
    with registry.get(environment).session() as session:
        columns = unwrap(schema_inspector.table_schema(session, table_name))

    return TableSchemaResponse(
        environment=environment.value,
        table_name=table_name.strip().upper(),
        schema=columns,
    )


@router.get("/service-schema", response_model=ServiceSchemaResponse)
def get_service_schema(
    registry: RegistryDep,
    environment: Environment = Query(..., description="Target environment"),
    service_type: str = Query(..., alias="serviceType", description="Service identifier"),
    mode: str = Query(schema_inspector.QUERY_MODE, description="query or create-intake"),
) -> ServiceSchemaResponse:
    """Describe a service as editable form fields."""
    service = resolve_service(service_type)

    with registry.get(environment).session() as session:
        fields = unwrap(schema_inspector.service_schema(session, service, mode))

    return ServiceSchemaResponse(
        environment=environment.value,
        service_type=service.service_type,
        mode=mode,
        schema=fields,
    )
