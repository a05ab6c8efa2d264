"""Payroll export endpoints: capabilities, mapping checks, file export."""

from __future__ import annotations

from datetime import date
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, Request, Response
from pydantic import BaseModel, Field

from payroll_bridge.adapters.registry import AdapterRegistry
from payroll_bridge.models.export import EmployeePayrollSummary, PayrollExport
from payroll_bridge.models.payroll import AdapterCapabilities, MappingPartition, PayrollLineDTO
from payroll_bridge.services.export_service import ExportService

router = APIRouter(tags=["payroll"])


def get_registry(request: Request) -> AdapterRegistry:
    return request.app.state.context.registry


def get_export_service(request: Request) -> ExportService:
    return request.app.state.context.export_service


Registry = Annotated[AdapterRegistry, Depends(get_registry)]
Service = Annotated[ExportService, Depends(get_export_service)]


class ValidateRequest(BaseModel):
    employee_ids: list[str] = Field(default_factory=list)


class PreviewRequest(BaseModel):
    lines: list[PayrollLineDTO] = Field(default_factory=list)


class ExportRequest(BaseModel):
    period_start: date
    period_end: date
    lines: list[PayrollLineDTO] = Field(default_factory=list)


@router.get("/systems")
def list_systems(registry: Registry) -> list[AdapterCapabilities]:
    return registry.capabilities()


@router.post("/{system_type}/validate")
def validate_employees(system_type: str, body: ValidateRequest, registry: Registry) -> MappingPartition:
    return registry.get_adapter(system_type).validate_employee_ids(body.employee_ids)


@router.post("/{system_type}/preview")
def preview_export(system_type: str, body: PreviewRequest, service: Service) -> list[EmployeePayrollSummary]:
    return service.preview(system_type, body.lines)


@router.post("/{system_type}/export")
def export_file(
    system_type: str,
    body: ExportRequest,
    service: Service,
    file_format: Annotated[str | None, Query()] = None,
) -> Response:
    result = service.run_export(
        system_type, body.period_start, body.period_end, body.lines, file_format,
    )
    headers: dict[str, Any] = {
        "Content-Disposition": f'attachment; filename="{result.file.filename}"',
        "X-Export-Id": result.export.id,
        "X-Missing-Employees": str(result.missing_count),
    }
    return Response(content=result.file.as_bytes(), media_type=result.file.mime_type, headers=headers)


@router.get("/exports")
def list_exports(service: Service, limit: Annotated[int, Query(ge=1, le=200)] = 20) -> list[PayrollExport]:
    return service.list_exports(limit)
