"""Main FastAPI application for intake-seed.

This module wires settings, logging, middleware and routers, and owns the
lifecycle of the per-environment connection pools and the external API
client.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from intake_seed import __version__
from intake_seed.adapters.external import CaseManagementClient
from intake_seed.adapters.storage import StorageRegistry
from intake_seed.api.logging_config import setup_logging
from intake_seed.api.middleware import setup_middleware
from intake_seed.api.routes import external, generation, health, schema, service
from intake_seed.infrastructure.settings import get_settings

settings = get_settings()
setup_logging(use_json=settings.json_logs, log_level=settings.log_level)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build connection owners at startup and release them at shutdown."""
    logger.info("intake-seed API starting up...")
    config_manager = settings.config_manager
    app.state.settings = settings
    app.state.storage_registry = StorageRegistry(config_manager)
    app.state.case_management_client = CaseManagementClient(config_manager.get_external_api_config())

    configured = [env.value for env in config_manager.configured_environments()]
    logger.info(f"Configured environments: {', '.join(configured) or 'none'}")
    logger.info(f"Logging level: {settings.log_level}, JSON logs: {settings.json_logs}")
    try:
        yield
    finally:
        logger.info("intake-seed API shutting down...")
        app.state.storage_registry.close_all()
        await app.state.case_management_client.aclose()


app = FastAPI(
    title="intake-seed API",
    description="Synthetic test data for the patient intake schema",
    version=__version__,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Process-Time", "Content-Disposition"],
)

setup_middleware(app)

app.include_router(health.router)
app.include_router(schema.router)
app.include_router(service.router)
app.include_router(generation.router)
app.include_router(external.router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "intake-seed API",
        "version": __version__,
        "docs": "/api/docs",
        "health": "/api/health"
    }


def main() -> None:
    import uvicorn
    uvicorn.run(
        "intake_seed.api.main:app",
        host="0.0.0.0",
        port=settings.port,
        log_level=settings.log_level.lower()
    )


if __name__ == "__main__":
    main()
