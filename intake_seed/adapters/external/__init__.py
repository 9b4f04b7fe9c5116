"""Client for the external case-management REST API."""

from intake_seed.adapters.external.case_management_client import CaseManagementClient, ProxyResponse

__all__ = ["CaseManagementClient", "ProxyResponse"]
