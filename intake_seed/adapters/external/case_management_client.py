"""External case-management API client.

Forwards a caller's JSON payload to the case-management REST API of the
selected environment and relays whatever comes back.

Security Impact:
    - Basic auth credentials come from ExternalApiConfig (SecretStr) and are never logged
    - Requests go only to hosts built from the configured domain
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from intake_seed.domain.models import Environment
from intake_seed.domain.ports import ConfigurationError, ExternalApiError, ValidationError
from intake_seed.infrastructure.config_manager import ExternalApiConfig

logger = logging.getLogger(__name__)

DEFAULT_MEDIA_TYPE = "application/json"


@dataclass(frozen=True)
class ProxyResponse:
    """Downstream response as relayed to the caller."""

    status_code: int
    content: bytes
    media_type: str


class CaseManagementClient:
    """Async client for the case-management REST API.

    Parameters:
        config: External API settings (domain, credentials, paths, timeout)
        transport: Optional httpx transport (tests pass ``httpx.MockTransport``)

    Example Usage:
        ```python
        client = CaseManagementClient(config_manager.get_external_api_config())
        response = await client.forward("initial", Environment.Q2, {"memberId": "..."})
        await client.aclose()
        ```
    """

    def __init__(self, config: ExternalApiConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            auth = None
            if self.config.user_id and self.config.password:
                auth = httpx.BasicAuth(self.config.user_id, self.config.password.get_secret_value())
            self._client = httpx.AsyncClient(
                auth=auth,
                timeout=self.config.timeout_seconds,
                transport=self._transport,
            )
        return self._client

    def build_url(self, api_type: str, environment: Environment) -> str:
        """Resolve the downstream URL for an apiType.

        Raises:
            ValidationError: If the apiType has no configured path
            ConfigurationError: If the domain is not configured
        """
        path = self.config.paths.get((api_type or "").strip().lower())
        if not path:
            raise ValidationError(
                f"Unknown apiType: {api_type}",
                details=f"Expected one of: {', '.join(sorted(self.config.paths))}"
            )
        return f"{self.config.base_url(environment)}{path}"

    async def forward(self, api_type: str, environment: Environment, body: Any) -> ProxyResponse:
        """POST the body to the environment's API and return the downstream response.

        Parameters:
            api_type: initial, cos or edit
            environment: Target environment (selects the host prefix)
            body: JSON-serializable payload, forwarded verbatim

        Returns:
            ProxyResponse: Downstream status, body and content type

        Raises:
            ValidationError: Unknown apiType
            ConfigurationError: Domain or credentials missing
            ExternalApiError: The request could not be completed
        """
        url = self.build_url(api_type, environment)
        if not self.config.is_configured():
            raise ConfigurationError("External API credentials are not configured")

        logger.info(f"Forwarding {api_type} request to {url}")
        try:
            response = await self._get_client().post(url, json=body)
        except httpx.HTTPError as e:
            logger.error(f"External API call to {url} failed: {str(e)}")
            raise ExternalApiError("Failed to call external API", details=str(e) or type(e).__name__)

        logger.info(f"External API responded {response.status_code} for {api_type}")
        media_type = response.headers.get("content-type", DEFAULT_MEDIA_TYPE)
        return ProxyResponse(
            status_code=response.status_code,
            content=response.content,
            media_type=media_type,
        )

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
