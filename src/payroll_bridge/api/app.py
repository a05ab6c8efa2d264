"""FastAPI application with lifespan and router mounting."""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from payroll_bridge.adapters.registry import AdapterRegistry
from payroll_bridge.api.routes import health, payroll
from payroll_bridge.core.config import AppSettings
from payroll_bridge.core.exceptions import (
    ApiExportNotImplementedError,
    ExportNotFoundError,
    UnsupportedFormatError,
    UnsupportedSystemError,
)
from payroll_bridge.core.logging import configure_logging
from payroll_bridge.persistence import Persistence, create_persistence
from payroll_bridge.services.export_service import ExportService


@dataclass
class AppContext:
    """Long-lived objects built once per process."""

    settings: AppSettings
    persistence: Persistence
    registry: AdapterRegistry
    export_service: ExportService


def build_context(settings: AppSettings | None = None,
                  persistence: Persistence | None = None) -> AppContext:
    settings = settings or AppSettings()
    persistence = persistence or create_persistence(settings)
    registry = AdapterRegistry.from_store(persistence.mapping_store, settings.export)
    service = ExportService(
        registry,
        file_store=persistence.file_store,
        export_log=persistence.export_log,
        settings=settings,
    )
    return AppContext(settings=settings, persistence=persistence, registry=registry,
                      export_service=service)


def _error_handler(status_code: int):
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})
    return handler


def create_app(context: AppContext | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Initialize and tear down application resources."""
        ctx = context or build_context()
        configure_logging(ctx.settings.log_level)
        app.state.settings = ctx.settings
        app.state.context = ctx
        yield

    app = FastAPI(
        title="payroll-bridge",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(health.router)
    app.include_router(payroll.router, prefix="/payroll")
    app.add_exception_handler(UnsupportedSystemError, _error_handler(404))
    app.add_exception_handler(ExportNotFoundError, _error_handler(404))
    app.add_exception_handler(UnsupportedFormatError, _error_handler(400))
    app.add_exception_handler(ApiExportNotImplementedError, _error_handler(501))
    return app
