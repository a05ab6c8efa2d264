"""In-memory backends: dict-backed fakes for local development and unit tests."""

from __future__ import annotations

from collections.abc import Sequence

from payroll_bridge.core.exceptions import ExportNotFoundError
from payroll_bridge.models.export import PayrollExport


class MemoryMappingStore:
    """Dict-backed IMappingStore.

    ``lookup_count`` counts store reads so tests can assert batch behaviour.
    """

    def __init__(self) -> None:
        self._external_ids: dict[tuple[str, str], tuple[str, bool]] = {}
        self._salary_codes: dict[tuple[str, str], tuple[str, bool]] = {}
        self.lookup_count = 0

    def add_external_id(
        self, employee_id: str, system_type: str, external_id: str, is_active: bool = True
    ) -> None:
        self._external_ids[(employee_id, str(system_type))] = (external_id, is_active)

    def add_salary_code_mapping(
        self, internal_code: str, system_type: str, external_code: str, is_active: bool = True
    ) -> None:
        self._salary_codes[(internal_code, str(system_type))] = (external_code, is_active)

    def get_external_ids(self, employee_ids: Sequence[str], system_type: str) -> dict[str, str]:
        self.lookup_count += 1
        out: dict[str, str] = {}
        for emp_id in employee_ids:
            ext_id, active = self._external_ids.get((emp_id, system_type), ("", False))
            if active:
                out[emp_id] = ext_id
        return out

    def get_external_id(self, employee_id: str, system_type: str) -> str | None:
        return self.get_external_ids([employee_id], system_type).get(employee_id)

    def get_salary_code_map(self, system_type: str) -> dict[str, str]:
        self.lookup_count += 1
        return {
            code: ext_code
            for (code, system), (ext_code, active) in self._salary_codes.items()
            if system == system_type and active
        }

    def get_salary_code(self, internal_code: str, system_type: str) -> str | None:
        self.lookup_count += 1
        ext_code, active = self._salary_codes.get((internal_code, system_type), ("", False))
        return ext_code if active else None


class MemoryCacheBackend:
    """Dict-backed ICacheBackend for unit tests."""

    def __init__(self) -> None:
        self._store: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._store.get(key)

    def setex(self, key: str, ttl: int, value: str) -> None:
        self._store[key] = value

    def delete(self, key: str) -> None:
        self._store.pop(key, None)


class MemoryFileStore:
    """Dict-backed IFileStore for unit tests."""

    def __init__(self) -> None:
        self._files: dict[str, bytes] = {}
        self.content_types: dict[str, str] = {}

    def read(self, path: str) -> bytes:
        return self._files[path]

    def write(self, path: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        self._files[path] = data
        self.content_types[path] = content_type
        return path

    def list_files(self, prefix: str) -> list[str]:
        return [k for k in self._files if k.startswith(prefix)]


class MemoryExportLog:
    """Dict-backed IExportLog."""

    def __init__(self) -> None:
        self._exports: dict[str, PayrollExport] = {}

    def save(self, export: PayrollExport) -> None:
        self._exports[export.id] = export.model_copy(deep=True)

    def get(self, export_id: str) -> PayrollExport:
        try:
            return self._exports[export_id]
        except KeyError:
            raise ExportNotFoundError(export_id) from None

    def list_recent(self, limit: int = 20) -> list[PayrollExport]:
        # newest first; ties keep the later save first
        ordered = sorted(reversed(list(self._exports.values())), key=lambda e: e.created_at, reverse=True)
        return ordered[:limit]
