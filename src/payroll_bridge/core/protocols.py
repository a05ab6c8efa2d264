"""Protocol interfaces for all payroll-bridge abstractions.

All inter-layer communication uses these Protocols: structural typing,
no inheritance required, easy to test with isinstance().
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from payroll_bridge.models.export import PayrollExport
    from payroll_bridge.models.payroll import (
        AdapterCapabilities,
        ExportFile,
        ExportFileFormat,
        MappingPartition,
        PayrollLineDTO,
        TransformResult,
    )


# ---------------------------------------------------------------------------
# Persistence: Mapping Store
# ---------------------------------------------------------------------------

@runtime_checkable
class IMappingStore(Protocol):
    """Read-only reference data: external employee ids and salary codes.

    Only active mappings are ever returned.
    """

    def get_external_ids(self, employee_ids: Sequence[str], system_type: str) -> dict[str, str]: ...

    def get_external_id(self, employee_id: str, system_type: str) -> str | None: ...

    def get_salary_code_map(self, system_type: str) -> dict[str, str]: ...

    def get_salary_code(self, internal_code: str, system_type: str) -> str | None: ...


# ---------------------------------------------------------------------------
# Persistence: Cache Backend
# ---------------------------------------------------------------------------

@runtime_checkable
class ICacheBackend(Protocol):
    """Redis-compatible cache interface."""

    def get(self, key: str) -> str | None: ...

    def setex(self, key: str, ttl: int, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


# ---------------------------------------------------------------------------
# Persistence: File Store
# ---------------------------------------------------------------------------

@runtime_checkable
class IFileStore(Protocol):
    """S3-compatible file storage interface."""

    def read(self, path: str) -> bytes: ...

    def write(self, path: str, data: bytes, content_type: str = "application/octet-stream") -> str: ...

    def list_files(self, prefix: str) -> list[str]: ...


# ---------------------------------------------------------------------------
# Persistence: Export Log
# ---------------------------------------------------------------------------

@runtime_checkable
class IExportLog(Protocol):
    """History of export runs."""

    def save(self, export: PayrollExport) -> None: ...

    def get(self, export_id: str) -> PayrollExport: ...

    def list_recent(self, limit: int = 20) -> list[PayrollExport]: ...


# ---------------------------------------------------------------------------
# Payroll Export Adapter
# ---------------------------------------------------------------------------

@runtime_checkable
class IPayrollExportAdapter(Protocol):
    """Transforms normalized payroll lines into one external system's format."""

    system_type: str
    supports_api: bool
    supports_file_export: bool

    def capabilities(self) -> AdapterCapabilities: ...

    def validate_employee_ids(self, employee_ids: Sequence[str]) -> MappingPartition: ...

    def transform(self, lines: Sequence[PayrollLineDTO]) -> list[Any]: ...

    def transform_with_report(self, lines: Sequence[PayrollLineDTO]) -> TransformResult: ...

    def check_format(self, file_format: str) -> ExportFileFormat: ...

    def export_to_file(
        self, lines: Sequence[PayrollLineDTO], file_format: str, *, export_date: date | None = None
    ) -> ExportFile: ...

    def render_file(
        self, records: Sequence[Any], file_format: str, *, export_date: date | None = None
    ) -> ExportFile: ...

    def export_to_api(self, lines: Sequence[PayrollLineDTO]) -> dict[str, Any]: ...
