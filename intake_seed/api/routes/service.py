"""Service endpoints: lookups over the service join and synthetic intake creation."""

import logging

from fastapi import APIRouter

from intake_seed.api.dependencies import RegistryDep, SettingsDep, resolve_service
from intake_seed.api.errors import unwrap
from intake_seed.api.models import (
    IntakeCreatedResponse,
    IntakeCreateRequest,
    ServiceExecuteRequest,
    ServiceExecuteResponse,
)
from intake_seed.domain.ports import ValidationError
from intake_seed.services.intake_creator import IntakeCreator, override_entries
from intake_seed.services.query_executor import QueryExecutor

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["service"])


@router.post("/service-execute", response_model=ServiceExecuteResponse)
def execute_service_query(body: ServiceExecuteRequest, registry: RegistryDep) -> ServiceExecuteResponse:
    """Return the most recent matching row (by DOB), or ``data: null``."""
    service = resolve_service(body.service_type)
    if not body.selected_column_names:
        raise ValidationError("selectedColumnNames must contain at least one column")

    with registry.get(body.environment).session() as session:
        outcome = unwrap(QueryExecutor(service).execute(session, body.selected_column_names, body.filters))

    return ServiceExecuteResponse(
        environment=body.environment.value,
        service_type=service.service_type,
        data=outcome.row,
        message=outcome.message,
    )


def _create_intake(body: IntakeCreateRequest, registry, max_attempts: int) -> IntakeCreatedResponse:
    service = resolve_service(body.service_type)
    creator = IntakeCreator(max_attempts=max_attempts)

    logger.info(
        f"Creating intake data in {body.environment.value} (max {max_attempts} attempts)",
        extra={"environment": body.environment.value, "service_type": service.service_type}
    )
    with registry.get(body.environment).session() as session:
        created = unwrap(creator.create(session, body.data_fields))

    return IntakeCreatedResponse(
        message=f"Intake data created and verified in {body.environment.value}",
        environment=body.environment.value,
        service_type=service.service_type,
        attempts=created.attempts,
        data=[created.record],
    )


@router.post("/service-create", response_model=IntakeCreatedResponse)
def service_create(body: IntakeCreateRequest, registry: RegistryDep, settings: SettingsDep) -> IntakeCreatedResponse:
    """Create intake data from caller-supplied values.

    Every entry in ``dataFields`` must carry a value; the short attempt bound
    applies.
    """
    entries = override_entries(body.data_fields)
    if not entries:
        raise ValidationError("dataFields must contain at least one field")
    missing = [str(key) for key, value in entries if value is None or str(value).strip() == ""]
    if missing:
        raise ValidationError("Every dataFields entry requires a value", details=", ".join(missing))

    return _create_intake(body, registry, settings.service_create_max_attempts)


@router.post("/create-intake-data", response_model=IntakeCreatedResponse)
def create_intake_data(body: IntakeCreateRequest, registry: RegistryDep, settings: SettingsDep) -> IntakeCreatedResponse:
    """Create intake data; blank or missing fields are generated."""
    return _create_intake(body, registry, settings.intake_max_attempts)
