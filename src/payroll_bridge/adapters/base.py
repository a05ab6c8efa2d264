"""Base payroll export adapter with shared lookups and the transform pipeline."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import date, datetime, timezone
from typing import Any, ClassVar

from pydantic import BaseModel

from payroll_bridge.adapters import serializers
from payroll_bridge.core.config import ExportConfig
from payroll_bridge.core.exceptions import ApiExportNotImplementedError, UnsupportedFormatError
from payroll_bridge.mapping.identity_resolver import IdentityResolver
from payroll_bridge.mapping.salary_code_resolver import SalaryCodeResolver
from payroll_bridge.models.payroll import (
    AdapterCapabilities,
    ExportFile,
    ExportFileFormat,
    MappingPartition,
    PayrollLineDTO,
    PayrollSystemType,
    TransformResult,
    display_name,
)

logger = logging.getLogger(__name__)


class BasePayrollAdapter(ABC):
    """Common base for all payroll system adapters.

    Subclasses declare their capabilities, their record shape
    (``build_record``) and their file columns (``CSV_COLUMNS``, a list of
    ``(header, record attribute)`` pairs). Mapping lookups and resolvers are
    injected at construction time.
    """

    system_type: ClassVar[PayrollSystemType]
    supports_api: ClassVar[bool] = False
    supports_file_export: ClassVar[bool] = True
    supported_formats: ClassVar[tuple[ExportFileFormat, ...]] = (ExportFileFormat.CSV,)
    CSV_COLUMNS: ClassVar[tuple[tuple[str, str], ...]] = ()

    def __init__(
        self,
        *,
        identity_resolver: IdentityResolver,
        salary_code_resolver: SalaryCodeResolver,
        export_config: ExportConfig | None = None,
    ) -> None:
        self._identities = identity_resolver
        self._salary_codes = salary_code_resolver
        self._config = export_config or ExportConfig()

    def capabilities(self) -> AdapterCapabilities:
        return AdapterCapabilities(
            system_type=self.system_type,
            display_name=display_name(self.system_type),
            supports_api=self.supports_api,
            supports_file_export=self.supports_file_export,
            supported_formats=list(self.supported_formats),
        )

    # ---- mapping helpers ----

    def validate_employee_ids(self, employee_ids: Sequence[str]) -> MappingPartition:
        return self._identities.partition_by_mapping_presence(employee_ids, self.system_type)

    def get_external_employee_id(self, employee_id: str) -> str | None:
        return self._identities.resolve_one(employee_id, self.system_type)

    def get_external_employee_id_map(self, employee_ids: Sequence[str]) -> dict[str, str]:
        return self._identities.resolve_many(employee_ids, self.system_type)

    def get_external_salary_code(self, internal_code: str) -> str:
        return self._salary_codes.resolve_one(internal_code, self.system_type)

    def get_salary_code_map(self) -> dict[str, str]:
        return self._salary_codes.build_code_map(self.system_type)

    # ---- transform ----

    @abstractmethod
    def build_record(self, line: PayrollLineDTO, external_id: str, salary_code: str) -> BaseModel:
        """Build this system's record for one line."""

    def transform_with_report(self, lines: Sequence[PayrollLineDTO]) -> TransformResult:
        """Transform ``lines``, also reporting which employees were left out."""
        employee_map = self.get_external_employee_id_map([line.employee_id for line in lines])
        code_map = self.get_salary_code_map()

        records: list[BaseModel] = []
        skipped: dict[str, None] = {}
        for line in lines:
            external_id = employee_map.get(line.employee_id)
            if not external_id:
                skipped[line.employee_id] = None
                continue
            code = self._salary_codes.resolve(line.salary_type_code, code_map)
            records.append(self.build_record(line, external_id, code))

        if skipped:
            logger.debug(
                "%s: skipped %d lines for %d unmapped employees",
                self.system_type, len(lines) - len(records), len(skipped),
            )
        return TransformResult(
            records=records, skipped_employee_ids=list(skipped), external_ids=employee_map,
        )

    def transform(self, lines: Sequence[PayrollLineDTO]) -> list[Any]:
        """Records for every line whose employee is mapped, in input order.

        Lines for unmapped employees are dropped without error; use
        ``validate_employee_ids`` or ``transform_with_report`` to see which.
        """
        return self.transform_with_report(lines).records

    # ---- export ----

    def check_format(self, file_format: str) -> ExportFileFormat:
        """Raise ``UnsupportedFormatError`` unless this adapter writes ``file_format``."""
        try:
            fmt = ExportFileFormat(file_format)
        except ValueError:
            raise UnsupportedFormatError(
                self.system_type, str(file_format), self.supported_formats
            ) from None
        if not self.supports_file_export or fmt not in self.supported_formats:
            raise UnsupportedFormatError(self.system_type, fmt, self.supported_formats)
        return fmt

    def filename(self, file_format: ExportFileFormat, export_date: date | None = None) -> str:
        day = export_date or datetime.now(timezone.utc).date()
        return f"{self.system_type}_{self._config.file_subject}_{day.isoformat()}.{file_format}"

    def _rows(self, records: Sequence[BaseModel]) -> list[list[Any]]:
        return [[getattr(r, attr) for _, attr in self.CSV_COLUMNS] for r in records]

    def export_to_file(
        self,
        lines: Sequence[PayrollLineDTO],
        file_format: str,
        *,
        export_date: date | None = None,
    ) -> ExportFile:
        fmt = self.check_format(file_format)
        return self.render_file(self.transform(lines), fmt, export_date=export_date)

    def render_file(
        self,
        records: Sequence[BaseModel],
        file_format: str,
        *,
        export_date: date | None = None,
    ) -> ExportFile:
        """Write already transformed records in ``file_format``."""
        fmt = self.check_format(file_format)
        headers = [header for header, _ in self.CSV_COLUMNS]
        name = self.filename(fmt, export_date)

        if fmt == ExportFileFormat.CSV:
            content = serializers.write_delimited(headers, self._rows(records), self._config.delimiter)
            return ExportFile(content=content, filename=name, mime_type=serializers.CSV_MIME)

        if fmt == ExportFileFormat.JSON:
            payload = [r.model_dump(by_alias=True, exclude_none=True) for r in records]
            return ExportFile(
                content=serializers.write_json(payload), filename=name, mime_type=serializers.JSON_MIME,
            )

        if fmt == ExportFileFormat.XLSX:
            content = serializers.write_xlsx(headers, self._rows(records))
            return ExportFile(content=content, filename=name, mime_type=serializers.XLSX_MIME)

        raise UnsupportedFormatError(self.system_type, fmt, self.supported_formats)

    def export_to_api(self, lines: Sequence[PayrollLineDTO]) -> dict[str, Any]:
        raise ApiExportNotImplementedError(self.system_type)
