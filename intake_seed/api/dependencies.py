"""Dependency injection for the intake-seed API.

Long-lived objects (settings, storage registry, external API client) are
built once in the application lifespan and stored on ``app.state``; these
functions hand them to route handlers.
"""

import logging
from typing import Annotated

from fastapi import Depends, Request

from intake_seed.adapters.external import CaseManagementClient
from intake_seed.adapters.storage import StorageRegistry
from intake_seed.domain.ports import ValidationError
from intake_seed.domain.service_catalog import SERVICE_CATALOG, ServiceDefinition, get_service
from intake_seed.infrastructure.settings import Settings

logger = logging.getLogger(__name__)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_storage_registry(request: Request) -> StorageRegistry:
    """Get the per-environment storage registry created at startup."""
    return request.app.state.storage_registry


def get_case_management_client(request: Request) -> CaseManagementClient:
    return request.app.state.case_management_client


def resolve_service(service_type: str) -> ServiceDefinition:
    """Look up a service definition.

    Raises:
        ValidationError: If the service type is missing or unknown
    """
    service = get_service(service_type)
    if service is None:
        raise ValidationError(
            f"Unknown serviceType: {service_type}",
            details=f"Expected one of: {', '.join(SERVICE_CATALOG)}"
        )
    return service


# Type aliases for dependency injection
SettingsDep = Annotated[Settings, Depends(get_app_settings)]
RegistryDep = Annotated[StorageRegistry, Depends(get_storage_registry)]
CaseManagementDep = Annotated[CaseManagementClient, Depends(get_case_management_client)]
