"""Application Settings and Configuration.

This module provides application-wide settings that combine configuration
from the configuration manager with application-specific defaults.

Security Impact:
    - Settings are loaded from secure configuration sources
    - Sensitive values are never logged
"""

import os
from typing import Optional

from intake_seed.infrastructure.config_manager import ConfigManager


DEFAULT_PORT = 3000

# Attempt bounds for the creation loop
DEFAULT_INTAKE_MAX_ATTEMPTS = 50
DEFAULT_SERVICE_CREATE_MAX_ATTEMPTS = 5

DEFAULT_CORS_ORIGINS = "http://localhost:5173,http://localhost:8080,http://127.0.0.1:5173"


class Settings:
    """Application settings loaded from the environment.

    Attributes:
        port: HTTP port (PORT)
        log_level: Logging level (LOG_LEVEL)
        json_logs: Emit JSON log lines (JSON_LOGS)
        intake_max_attempts: Attempt bound for create-intake-data (INTAKE_MAX_ATTEMPTS)
        service_create_max_attempts: Attempt bound for service-create (SERVICE_CREATE_MAX_ATTEMPTS)
        cors_origins: Allowed browser origins (CORS_ORIGINS, comma separated)
        config_file: Optional JSON configuration file (INTAKE_CONFIG_FILE)
    """

    def __init__(self):
        """Initialize settings from environment."""
        self._config_manager: Optional[ConfigManager] = None

        self.port = int(os.getenv("PORT", str(DEFAULT_PORT)))

        # Logging
        self.log_level = os.getenv("LOG_LEVEL", "INFO")
        self.json_logs = os.getenv("JSON_LOGS", "false").lower() == "true"

        # Creation loop
        self.intake_max_attempts = int(os.getenv("INTAKE_MAX_ATTEMPTS", str(DEFAULT_INTAKE_MAX_ATTEMPTS)))
        self.service_create_max_attempts = int(
            os.getenv("SERVICE_CREATE_MAX_ATTEMPTS", str(DEFAULT_SERVICE_CREATE_MAX_ATTEMPTS))
        )

        self.cors_origins = [
            origin.strip()
            for origin in os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS).split(",")
            if origin.strip()
        ]
        self.config_file = os.getenv("INTAKE_CONFIG_FILE")

    @property
    def config_manager(self) -> ConfigManager:
        """Get configuration manager instance.

        Loads from INTAKE_CONFIG_FILE when set, otherwise from environment variables.
        """
        if self._config_manager is None:
            if self.config_file:
                self._config_manager = ConfigManager.from_file(self.config_file)
            else:
                self._config_manager = ConfigManager.from_environment()
        return self._config_manager


def get_settings() -> Settings:
    """Build settings from the current environment."""
    return Settings()
