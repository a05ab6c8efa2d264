"""Export run records: the history of each file handed to a payroll system."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from enum import StrEnum
from typing import Literal, Optional

from pydantic import BaseModel, Field

from payroll_bridge.models.payroll import (
    ExportFile,
    ExportFileFormat,
    PayrollSystemType,
    SourceType,
)


class ExportStatus(StrEnum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    PARTIAL = "partial"  # file produced, some employees had no external id
    FAILED = "failed"
    CANCELLED = "cancelled"


class ExportLineStatus(StrEnum):
    PENDING = "pending"
    EXPORTED = "exported"
    ERROR = "error"
    SKIPPED = "skipped"


class ExportWarning(BaseModel):
    employee_id: Optional[str] = None
    message: str


class PayrollExport(BaseModel):
    """One export run against a payroll system."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    target_system: PayrollSystemType
    export_type: Literal["api", "file"] = "file"
    file_format: Optional[ExportFileFormat] = None
    period_start: date
    period_end: date
    status: ExportStatus = ExportStatus.PENDING
    employee_count: int = 0
    transaction_count: int = 0
    total_amount: Decimal = Decimal("0")
    filename: Optional[str] = None
    export_file_path: Optional[str] = None
    error_message: Optional[str] = None
    warnings: list[ExportWarning] = Field(default_factory=list)
    created_at: datetime
    exported_at: Optional[datetime] = None


class PayrollExportLine(BaseModel):
    """A payroll line as it was included in an export run."""

    export_id: str
    employee_id: str
    external_employee_id: Optional[str] = None
    salary_type_code: str
    salary_type_name: str = ""
    quantity: Decimal
    rate: Optional[Decimal] = None
    amount: Decimal
    work_date: Optional[date] = None
    period_start: date
    period_end: date
    source_type: SourceType = SourceType.MANUAL
    source_id: Optional[str] = None
    department_code: Optional[str] = None
    project_code: Optional[str] = None
    status: ExportLineStatus = ExportLineStatus.PENDING


class EmployeePayrollSummary(BaseModel):
    """Per-employee totals shown before an export is confirmed."""

    employee_id: str
    employee_name: str = ""
    external_employee_id: Optional[str] = None
    has_external_id: bool = False
    period_start: date
    period_end: date
    line_count: int = 0
    total_hours: Decimal = Decimal("0")
    total_amount: Decimal = Decimal("0")


class ExportRunResult(BaseModel):
    """Everything a caller needs after a completed export run."""

    export: PayrollExport
    lines: list[PayrollExportLine] = Field(default_factory=list)
    file: ExportFile
    stored_path: Optional[str] = None
    valid_count: int = 0
    missing_count: int = 0
