"""Health check endpoint for the intake-seed API."""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Query

from intake_seed import __version__
from intake_seed.adapters.storage import StorageRegistry
from intake_seed.api.dependencies import RegistryDep
from intake_seed.api.models import DatabaseHealth, HealthResponse
from intake_seed.domain.models import Environment
from intake_seed.domain.ports import IntakeSeedError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["health"])


def check_database_health(registry: StorageRegistry, environment: Environment) -> DatabaseHealth:
    """Ping one environment's database.

    Security Impact:
        - Only checks connectivity; connection details are not returned
    """
    try:
        with registry.get(environment).session() as session:
            result = session.ping()
    except IntakeSeedError as e:
        logger.warning(f"Database health check failed for {environment.value}: {str(e)}")
        return DatabaseHealth(environment=environment.value, status="disconnected", error=str(e))

    if result.is_success():
        return DatabaseHealth(environment=environment.value, status="connected", response_time_ms=result.value)

    logger.warning(f"Database ping failed for {environment.value}: {result.error}")
    return DatabaseHealth(environment=environment.value, status="disconnected", error=result.error)


@router.get("/health", response_model=HealthResponse)
def health_check(
    registry: RegistryDep,
    environment: Optional[Environment] = Query(None, description="Also ping this environment's database")
) -> HealthResponse:
    """Health check endpoint.

    Without ``environment`` this only reports the process and the configured
    environments; with it, the environment's database is pinged as well.
    """
    database = check_database_health(registry, environment) if environment else None

    if database is None or database.status == "connected":
        overall_status = "healthy"
    else:
        overall_status = "degraded"

    return HealthResponse(
        status=overall_status,
        timestamp=datetime.now(timezone.utc),
        version=__version__,
        environments=[env.value for env in registry.configured_environments()],
        database=database,
    )
