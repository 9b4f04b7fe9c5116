"""Configuration Manager for Environment Targets and Credentials.

This module maps each environment tag (Q1-Q5, PROD) to an Oracle connection
descriptor and holds the external case-management API settings. The mapping is
data: it is read from environment variables or a JSON file, never hard-coded.

Security Impact:
    - Credentials are stored as SecretStr and never logged
    - Configuration is validated before use (fail-fast)
    - Missing environments are reported without echoing other settings

Architecture:
    - Infrastructure layer, isolated from the domain
    - Type-safe configuration using Pydantic models
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, SecretStr, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from intake_seed.domain.models import Environment
from intake_seed.domain.ports import ConfigurationError

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent.parent

DEFAULT_API_PATHS = {
    "initial": "/api/v1/intake/initial-request",
    "cos": "/api/v1/intake/cos",
    "edit": "/api/v1/intake/edit-request",
}


class DatabaseConfig(BaseModel):
    """Oracle connection settings for one environment.

    Parameters:
        environment: Environment this target serves
        dsn: Easy Connect string (host:port/service) or TNS alias
        username: Database username
        password: Database password (SecretStr - never logged)
        schema_owner: Owner used to disambiguate catalog lookups
        pool_min: Minimum pooled connections
        pool_max: Maximum pooled connections
        pool_increment: Connections opened when the pool grows
    """

    environment: Environment
    dsn: str = Field(..., description="Easy Connect string or TNS alias")
    username: Optional[str] = Field(None, description="Database username")
    password: Optional[SecretStr] = Field(None, description="Database password (secret)")
    schema_owner: Optional[str] = Field(None, description="Schema owner for catalog queries")
    pool_min: int = Field(default=2, ge=0, description="Minimum pool size")
    pool_max: int = Field(default=10, ge=1, description="Maximum pool size")
    pool_increment: int = Field(default=1, ge=1, description="Pool growth step")

    @field_validator("dsn")
    @classmethod
    def validate_dsn(cls, v: str) -> str:
        """Reject blank connection descriptors."""
        v = v.strip()
        if not v:
            raise ValueError("dsn must not be empty")
        return v

    @field_validator("schema_owner")
    @classmethod
    def normalize_owner(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().upper() if v and v.strip() else None

    @model_validator(mode="after")
    def validate_pool_bounds(self) -> "DatabaseConfig":
        if self.pool_min > self.pool_max:
            raise ValueError(f"pool_min ({self.pool_min}) exceeds pool_max ({self.pool_max})")
        return self

    @staticmethod
    def _parse_easy_connect(dsn: str) -> Dict[str, Any]:
        """Split an Easy Connect string into host, port and service name.

        Supports:
        - host:port/service_name
        - host/service_name
        - tcp://host:port/service_name

        TNS aliases and full descriptors yield an empty dictionary.
        """
        text = dsn.split("://", 1)[1] if "://" in dsn else dsn
        if "(" in text or "/" not in text:
            return {}

        address, service = text.split("/", 1)
        result: Dict[str, Any] = {"service_name": service.split("?", 1)[0] or None}
        if ":" in address:
            host, port = address.rsplit(":", 1)
            result["host"] = host
            result["port"] = int(port) if port.isdigit() else None
        else:
            result["host"] = address
            result["port"] = None
        return result

    @property
    def host(self) -> Optional[str]:
        """Database host for log messages (None for TNS aliases)."""
        return self._parse_easy_connect(self.dsn).get("host")

    def get_pool_params(self) -> Dict[str, Any]:
        """Keyword arguments for ``oracledb.create_pool``.

        Security Impact:
            - Password is read from SecretStr here only; never log the result
        """
        return {
            "user": self.username,
            "password": self.password.get_secret_value() if self.password else None,
            "dsn": self.dsn,
            "min": self.pool_min,
            "max": self.pool_max,
            "increment": self.pool_increment,
        }


class ExternalApiConfig(BaseModel):
    """Settings for the external case-management REST API.

    Parameters:
        domain: Host suffix; requests go to https://{env}-{domain}{path}
        user_id: Basic auth user
        password: Basic auth password (SecretStr - never logged)
        paths: apiType -> request path
        timeout_seconds: Request timeout
    """

    domain: Optional[str] = Field(None, description="Core API domain")
    user_id: Optional[str] = Field(None, description="Basic auth user")
    password: Optional[SecretStr] = Field(None, description="Basic auth password (secret)")
    paths: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_API_PATHS))
    timeout_seconds: float = Field(default=30.0, gt=0)

    @field_validator("domain")
    @classmethod
    def strip_scheme(cls, v: Optional[str]) -> Optional[str]:
        """Accept a bare domain even when configured with a scheme or trailing slash."""
        if not v:
            return None
        v = v.strip()
        for scheme in ("https://", "http://"):
            if v.startswith(scheme):
                v = v[len(scheme):]
        return v.rstrip("/") or None

    @field_validator("paths")
    @classmethod
    def normalize_paths(cls, v: Dict[str, str]) -> Dict[str, str]:
        merged = dict(DEFAULT_API_PATHS)
        for api_type, path in v.items():
            if path:
                merged[api_type.lower()] = path if path.startswith("/") else f"/{path}"
        return merged

    def is_configured(self) -> bool:
        return bool(self.domain and self.user_id and self.password)

    def base_url(self, environment: Environment) -> str:
        """Host URL for an environment.

        Raises:
            ConfigurationError: If the domain is not configured
        """
        if not self.domain:
            raise ConfigurationError("External API domain is not configured")
        return f"https://{environment.host_prefix}-{self.domain}"


class ConfigManager:
    """Configuration manager for environment targets and API credentials.

    Example Usage:
        ```python
        config = ConfigManager.from_environment()
        db_config = config.get_database_config(Environment.Q1)

        config = ConfigManager.from_file("config.json")
        api_config = config.get_external_api_config()
        ```

    Configuration layout (file or assembled from environment variables):
        ```json
        {
          "database": {
            "username": "...", "password": "...", "schema_owner": "...",
            "pool_min": 2, "pool_max": 10,
            "environments": {"Q1": {"dsn": "q1-db:1521/INTAKE"}}
          },
          "external_api": {"domain": "...", "user_id": "...", "password": "..."}
        }
        ```
        Entries under ``environments`` may override any shared database key.
    """

    def __init__(self, config_data: Dict[str, Any]):
        """Initialize configuration manager.

        Parameters:
            config_data: Configuration dictionary
        """
        self._config_data = config_data
        self._database_configs: Dict[Environment, DatabaseConfig] = {}
        self._external_api_config: Optional[ExternalApiConfig] = None

    @classmethod
    def from_environment(cls) -> "ConfigManager":
        """Load configuration from environment variables.

        Environment Variables:
            - DB_USER / DB_PASSWORD: Shared database credentials (secret)
            - DB_DSN_<ENV>: Connection descriptor per environment (DB_DSN_Q1 ... DB_DSN_PROD)
            - DB_USER_<ENV> / DB_PASSWORD_<ENV>: Optional per-environment credentials
            - DB_SCHEMA_OWNER: Owner for catalog queries
            - DB_POOL_MIN / DB_POOL_MAX: Pool bounds (default 2 / 10)
            - EXTERNAL_API_DOMAIN_CORE: External API domain
            - API_USER_ID / API_PASSWORD: External API credentials (secret)
            - EXTERNAL_API_PATH_INITIAL / _COS / _EDIT: Request paths
            - EXTERNAL_API_TIMEOUT: Request timeout in seconds

        A ``.env`` file in the project root is loaded first when present;
        variables already set in the process win.
        """
        env_path = PROJECT_ROOT / ".env"
        if env_path.exists():
            load_dotenv(env_path)
            logger.debug(f"Loaded environment variables from {env_path}")

        environments: Dict[str, Dict[str, Any]] = {}
        for environment in Environment:
            dsn = os.getenv(f"DB_DSN_{environment.value}")
            if not dsn:
                continue
            entry: Dict[str, Any] = {"dsn": dsn}
            if os.getenv(f"DB_USER_{environment.value}"):
                entry["username"] = os.getenv(f"DB_USER_{environment.value}")
            if os.getenv(f"DB_PASSWORD_{environment.value}"):
                entry["password"] = os.getenv(f"DB_PASSWORD_{environment.value}")
            environments[environment.value] = entry

        database: Dict[str, Any] = {
            "username": os.getenv("DB_USER"),
            "password": os.getenv("DB_PASSWORD"),
            "schema_owner": os.getenv("DB_SCHEMA_OWNER"),
            "environments": environments,
        }
        if os.getenv("DB_POOL_MIN"):
            database["pool_min"] = os.getenv("DB_POOL_MIN")
        if os.getenv("DB_POOL_MAX"):
            database["pool_max"] = os.getenv("DB_POOL_MAX")

        paths = {
            api_type: os.getenv(f"EXTERNAL_API_PATH_{api_type.upper()}")
            for api_type in DEFAULT_API_PATHS
            if os.getenv(f"EXTERNAL_API_PATH_{api_type.upper()}")
        }
        external_api: Dict[str, Any] = {
            "domain": os.getenv("EXTERNAL_API_DOMAIN_CORE"),
            "user_id": os.getenv("API_USER_ID"),
            "password": os.getenv("API_PASSWORD"),
            "paths": paths,
        }
        if os.getenv("EXTERNAL_API_TIMEOUT"):
            external_api["timeout_seconds"] = os.getenv("EXTERNAL_API_TIMEOUT")

        return cls({"database": database, "external_api": external_api})

    @classmethod
    def from_file(cls, config_path: str) -> "ConfigManager":
        """Load configuration from a JSON file.

        Parameters:
            config_path: Path to configuration file

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config file is invalid

        Security Impact:
            - File permissions should be restricted (600) for credential files
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        stat_info = config_file.stat()
        if stat_info.st_mode & 0o077 != 0:
            logger.warning(
                f"Configuration file has overly permissive permissions: {config_path}. "
                "Consider setting to 600 for credential files."
            )

        try:
            with open(config_file, "r") as f:
                config_data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in configuration file: {str(e)}")

        return cls(config_data)

    def configured_environments(self) -> list[Environment]:
        """Environments that have a connection descriptor, in enum order."""
        entries = self._config_data.get("database", {}).get("environments", {}) or {}
        configured = {key.upper() for key, value in entries.items() if value and value.get("dsn")}
        return [environment for environment in Environment if environment.value in configured]

    def get_database_config(self, environment: Environment) -> DatabaseConfig:
        """Get the database configuration for one environment.

        Raises:
            ConfigurationError: If the environment has no connection descriptor or its settings are invalid
        """
        if environment not in self._database_configs:
            database = dict(self._config_data.get("database", {}))
            entries = database.pop("environments", {}) or {}
            entry = next(
                (value for key, value in entries.items() if key.upper() == environment.value),
                None
            )
            if not entry or not entry.get("dsn"):
                raise ConfigurationError(f"No database configured for environment {environment.value}")

            merged = {k: v for k, v in database.items() if v is not None}
            merged.update({k: v for k, v in entry.items() if v is not None})
            merged["environment"] = environment
            if merged.get("password") and not isinstance(merged["password"], SecretStr):
                merged["password"] = SecretStr(str(merged["password"]))

            try:
                self._database_configs[environment] = DatabaseConfig(**merged)
            except PydanticValidationError as e:
                raise ConfigurationError(
                    f"Invalid database configuration for environment {environment.value}",
                    details=str(e)
                ) from e

        return self._database_configs[environment]

    def get_external_api_config(self) -> ExternalApiConfig:
        """Get the external API configuration."""
        if self._external_api_config is None:
            api_data = {k: v for k, v in self._config_data.get("external_api", {}).items() if v is not None}
            if api_data.get("password") and not isinstance(api_data["password"], SecretStr):
                api_data["password"] = SecretStr(str(api_data["password"]))
            try:
                self._external_api_config = ExternalApiConfig(**api_data)
            except PydanticValidationError as e:
                raise ConfigurationError("Invalid external API configuration", details=str(e)) from e
        return self._external_api_config
