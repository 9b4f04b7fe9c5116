"""Proxy endpoint for the external case-management API."""

import logging

from fastapi import APIRouter, Response

from intake_seed.api.dependencies import CaseManagementDep
from intake_seed.api.models import ExternalCallRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["external"])


@router.post("/external-call")
async def external_call(body: ExternalCallRequest, client: CaseManagementDep) -> Response:
    """Forward ``requestBody`` and relay the downstream status, body and content type."""
    downstream = await client.forward(body.api_type, body.environment, body.request_body)
    return Response(
        content=downstream.content,
        status_code=downstream.status_code,
        media_type=downstream.media_type,
    )
