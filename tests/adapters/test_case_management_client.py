"""Tests for the case-management API client using httpx.MockTransport."""

import asyncio
import base64
import json

import httpx
import pytest
from pydantic import SecretStr

from intake_seed.adapters.external import CaseManagementClient
from intake_seed.domain.models import Environment
from intake_seed.domain.ports import ConfigurationError, ExternalApiError, ValidationError
from intake_seed.infrastructure.config_manager import ExternalApiConfig


@pytest.fixture
def api_config():
    return ExternalApiConfig(
        domain="https://casemgmt.example.com/",
        user_id="svc_seed",
        password=SecretStr("pw"),
    )


def _run(coro):
    return asyncio.run(coro)


class TestBuildUrl:
    def test_host_prefix_and_path(self, api_config):
        client = CaseManagementClient(api_config)
        assert client.build_url("initial", Environment.Q2) == (
            "https://q2-casemgmt.example.com/api/v1/intake/initial-request"
        )
        assert client.build_url("EDIT", Environment.PROD).startswith("https://prod-casemgmt.example.com/")

    def test_unknown_api_type(self, api_config):
        with pytest.raises(ValidationError):
            CaseManagementClient(api_config).build_url("delete", Environment.Q1)

    def test_missing_domain(self):
        with pytest.raises(ConfigurationError):
            CaseManagementClient(ExternalApiConfig()).build_url("cos", Environment.Q1)


class TestForward:
    def test_relays_downstream_response(self, api_config):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["url"] = str(request.url)
            captured["auth"] = request.headers["authorization"]
            captured["body"] = json.loads(request.content)
            return httpx.Response(422, json={"error": "memberId required"})

        async def scenario():
            client = CaseManagementClient(api_config, transport=httpx.MockTransport(handler))
            try:
                return await client.forward("cos", Environment.Q3, {"caseId": 7})
            finally:
                await client.aclose()

        response = _run(scenario())

        assert response.status_code == 422
        assert json.loads(response.content) == {"error": "memberId required"}
        assert response.media_type.startswith("application/json")
        assert captured["url"] == "https://q3-casemgmt.example.com/api/v1/intake/cos"
        assert captured["auth"] == "Basic " + base64.b64encode(b"svc_seed:pw").decode()
        assert captured["body"] == {"caseId": 7}

    def test_transport_failure_is_external_api_error(self, api_config):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async def scenario():
            client = CaseManagementClient(api_config, transport=httpx.MockTransport(handler))
            try:
                await client.forward("initial", Environment.Q1, {})
            finally:
                await client.aclose()

        with pytest.raises(ExternalApiError) as exc_info:
            _run(scenario())
        assert "connection refused" in exc_info.value.details

    def test_missing_credentials(self):
        client = CaseManagementClient(ExternalApiConfig(domain="casemgmt.example.com"))
        with pytest.raises(ConfigurationError):
            _run(client.forward("initial", Environment.Q1, {}))
