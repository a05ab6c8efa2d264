"""Export runs: validate, generate the file, record the outcome."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date, datetime, timezone
from decimal import Decimal

from payroll_bridge.adapters.registry import AdapterRegistry
from payroll_bridge.core.config import AppSettings
from payroll_bridge.core.protocols import IExportLog, IFileStore
from payroll_bridge.models.export import (
    EmployeePayrollSummary,
    ExportLineStatus,
    ExportRunResult,
    ExportStatus,
    ExportWarning,
    PayrollExport,
    PayrollExportLine,
)
from payroll_bridge.models.payroll import ExportFile, ExportFileFormat, PayrollLineDTO, PayrollSystemType

logger = logging.getLogger(__name__)

MISSING_EXTERNAL_ID = "Missing employee number in external system"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _known_format(file_format: str) -> ExportFileFormat | None:
    try:
        return ExportFileFormat(file_format)
    except ValueError:
        return None


class ExportService:
    """Runs one payroll export ("approved" lines to "exported").

    The export record is saved to the export log before the file is built so
    a failed run is still visible afterwards.
    """

    def __init__(
        self,
        registry: AdapterRegistry,
        *,
        file_store: IFileStore | None = None,
        export_log: IExportLog | None = None,
        settings: AppSettings | None = None,
    ) -> None:
        self._registry = registry
        self._file_store = file_store
        self._export_log = export_log
        self._settings = settings or AppSettings()

    def preview(
        self, system_type: str, lines: Sequence[PayrollLineDTO]
    ) -> list[EmployeePayrollSummary]:
        """Per-employee totals and mapping status, in first-seen order."""
        adapter = self._registry.get_adapter(system_type)
        by_employee: dict[str, list[PayrollLineDTO]] = {}
        for line in lines:
            by_employee.setdefault(line.employee_id, []).append(line)
        external_ids = adapter.get_external_employee_id_map(list(by_employee))

        summaries = []
        for employee_id, emp_lines in by_employee.items():
            external_id = external_ids.get(employee_id)
            summaries.append(EmployeePayrollSummary(
                employee_id=employee_id,
                employee_name=next((line.employee_name for line in emp_lines if line.employee_name), ""),
                external_employee_id=external_id,
                has_external_id=external_id is not None,
                period_start=min(line.period_start for line in emp_lines),
                period_end=max(line.period_end for line in emp_lines),
                line_count=len(emp_lines),
                total_hours=sum((line.quantity for line in emp_lines), Decimal("0")),
                total_amount=sum((line.amount for line in emp_lines), Decimal("0")),
            ))
        return summaries

    def run_export(
        self,
        system_type: str,
        period_start: date,
        period_end: date,
        lines: Sequence[PayrollLineDTO],
        file_format: str | None = None,
        *,
        export_date: date | None = None,
    ) -> ExportRunResult:
        """Export ``lines`` to one payroll system and record the run.

        Employee mappings are resolved once; the counts, warnings, export
        lines and file all come from that single resolution. Any failure
        after the run is recorded marks it failed and is re-raised.
        """
        file_format = file_format or self._settings.export.default_format
        adapter = self._registry.get_adapter(system_type)

        export = PayrollExport(
            target_system=PayrollSystemType(adapter.system_type),
            export_type="file",
            file_format=_known_format(file_format),
            period_start=period_start,
            period_end=period_end,
            status=ExportStatus.PROCESSING,
            created_at=_now(),
        )
        self._save(export)
        logger.info("Export %s to %s started: %d lines", export.id, adapter.system_type, len(lines))

        try:
            adapter.check_format(file_format)
            report = adapter.transform_with_report(lines)
            external_ids = report.external_ids
            valid_lines = [line for line in lines if line.employee_id in external_ids]

            export.employee_count = len({line.employee_id for line in valid_lines})
            export.transaction_count = len(valid_lines)
            export_lines = [
                PayrollExportLine(
                    export_id=export.id,
                    employee_id=line.employee_id,
                    external_employee_id=external_ids[line.employee_id],
                    salary_type_code=line.salary_type_code,
                    salary_type_name=line.salary_type_name,
                    quantity=line.quantity,
                    rate=line.rate,
                    amount=line.amount,
                    work_date=line.work_date,
                    period_start=period_start,
                    period_end=period_end,
                    source_type=line.source_type,
                    source_id=line.source_id,
                    department_code=line.department,
                    project_code=line.project,
                )
                for line in valid_lines
            ]

            export_file = adapter.render_file(report.records, file_format, export_date=export_date)
            stored_path = self._store_file(adapter.system_type, export_file)
        except Exception as exc:
            export.status = ExportStatus.FAILED
            export.error_message = str(exc)
            self._save(export)
            logger.error("Export %s to %s failed: %s", export.id, adapter.system_type, exc)
            raise

        missing = report.skipped_employee_ids
        for employee_id in missing:
            logger.warning("Employee %s has no %s mapping; left out of export", employee_id, adapter.system_type)
        export.warnings = [
            ExportWarning(employee_id=employee_id, message=MISSING_EXTERNAL_ID)
            for employee_id in missing
        ]
        export.status = ExportStatus.PARTIAL if missing else ExportStatus.COMPLETED
        export.total_amount = sum((line.amount for line in valid_lines), Decimal("0"))
        export.filename = export_file.filename
        export.export_file_path = stored_path
        export.exported_at = _now()
        self._save(export)

        for export_line in export_lines:
            export_line.status = ExportLineStatus.EXPORTED

        logger.info(
            "Export %s finished with status %s: %d lines, %d employees (%d missing mapping)",
            export.id, export.status, len(valid_lines), export.employee_count, len(missing),
        )
        return ExportRunResult(
            export=export,
            lines=export_lines,
            file=export_file,
            stored_path=stored_path,
            valid_count=len(valid_lines),
            missing_count=len(missing),
        )

    def list_exports(self, limit: int = 20) -> list[PayrollExport]:
        if self._export_log is None:
            return []
        return self._export_log.list_recent(limit)

    def _save(self, export: PayrollExport) -> None:
        if self._export_log is not None:
            self._export_log.save(export)

    def _store_file(self, system_type: str, export_file: ExportFile) -> str | None:
        if self._file_store is None:
            return None
        prefix = self._settings.s3.export_prefix.strip("/")
        path = f"{prefix}/{system_type}/{export_file.filename}"
        return self._file_store.write(path, export_file.as_bytes(), export_file.mime_type)
