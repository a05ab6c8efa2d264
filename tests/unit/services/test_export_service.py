"""Tests for ExportService runs."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from payroll_bridge.adapters.registry import AdapterRegistry
from payroll_bridge.core.config import AppSettings
from payroll_bridge.core.exceptions import (
    MappingStoreError,
    UnsupportedFormatError,
    UnsupportedSystemError,
)
from payroll_bridge.models.export import ExportLineStatus, ExportStatus
from payroll_bridge.services.export_service import MISSING_EXTERNAL_ID, ExportService
from tests.fakes import MemoryExportLog, MemoryFileStore, MemoryMappingStore

PERIOD = (date(2024, 3, 1), date(2024, 3, 31))


class UnavailableMappingStore(MemoryMappingStore):
    def get_external_ids(self, employee_ids, system_type):
        raise MappingStoreError("External id lookup failed: table unavailable")


class CountingMappingStore(MemoryMappingStore):
    def __init__(self) -> None:
        super().__init__()
        self.identity_batches = 0

    def get_external_ids(self, employee_ids, system_type):
        self.identity_batches += 1
        return super().get_external_ids(employee_ids, system_type)


@pytest.fixture
def export_log():
    return MemoryExportLog()


@pytest.fixture
def file_store():
    return MemoryFileStore()


@pytest.fixture
def service(registry, export_log, file_store):
    return ExportService(registry, file_store=file_store, export_log=export_log, settings=AppSettings())


class TestRunExport:
    def test_complete_run(self, service, export_log, make_line):
        lines = [make_line("emp-a"), make_line("emp-c", amount=Decimal("250.50"))]
        result = service.run_export("tripletex", *PERIOD, lines, "csv", export_date=date(2024, 4, 2))

        assert result.export.status == ExportStatus.COMPLETED
        assert result.export.employee_count == 2
        assert result.export.transaction_count == 2
        assert result.export.total_amount == Decimal("1750.50")
        assert result.export.exported_at is not None
        assert result.export.warnings == []
        assert result.valid_count == 2
        assert result.missing_count == 0
        assert all(line.status == ExportLineStatus.EXPORTED for line in result.lines)
        assert [line.external_employee_id for line in result.lines] == ["1001", "1003"]
        assert export_log.get(result.export.id).status == ExportStatus.COMPLETED

    def test_partial_run_warns_about_missing_employees(self, service, make_line):
        lines = [make_line("emp-a"), make_line("emp-b"), make_line("emp-b")]
        result = service.run_export("tripletex", *PERIOD, lines, "csv")

        assert result.export.status == ExportStatus.PARTIAL
        assert result.valid_count == 1
        assert result.missing_count == 1
        assert [(w.employee_id, w.message) for w in result.export.warnings] == [
            ("emp-b", MISSING_EXTERNAL_ID)
        ]
        assert len(result.file.content.splitlines()) == 2

    def test_file_written_to_store(self, service, file_store, make_line):
        result = service.run_export(
            "poweroffice", *PERIOD, [make_line()], "json", export_date=date(2024, 4, 2)
        )
        assert result.stored_path == "exports/poweroffice/poweroffice_lonn_2024-04-02.json"
        assert file_store.read(result.stored_path) == result.file.content.encode("utf-8")
        assert file_store.content_types[result.stored_path] == "application/json"
        assert result.export.export_file_path == result.stored_path

    def test_default_format_from_settings(self, service, make_line):
        result = service.run_export("tripletex", *PERIOD, [make_line()])
        assert result.file.filename.endswith(".csv")

    def test_unsupported_format_marks_export_failed(self, service, export_log, make_line):
        with pytest.raises(UnsupportedFormatError):
            service.run_export("poweroffice", *PERIOD, [make_line()], "xlsx")

        [failed] = export_log.list_recent()
        assert failed.status == ExportStatus.FAILED
        assert "xlsx" in failed.error_message

    def test_mapping_store_failure_marks_export_failed(self, export_log, make_line):
        registry = AdapterRegistry.from_store(UnavailableMappingStore())
        service = ExportService(registry, export_log=export_log)

        with pytest.raises(MappingStoreError):
            service.run_export("tripletex", *PERIOD, [make_line()], "csv")

        [failed] = export_log.list_recent()
        assert failed.status == ExportStatus.FAILED
        assert "table unavailable" in failed.error_message
        assert failed.exported_at is None

    def test_one_identity_lookup_per_run(self, export_log, make_line):
        store = CountingMappingStore()
        store.add_external_id("emp-a", "tripletex", "1001")
        store.add_external_id("emp-c", "tripletex", "1003")
        service = ExportService(AdapterRegistry.from_store(store), export_log=export_log)

        lines = [make_line("emp-a"), make_line("emp-b"), make_line("emp-c"), make_line("emp-a")]
        result = service.run_export("tripletex", *PERIOD, lines, "csv")

        assert store.identity_batches == 1
        assert result.export.transaction_count == 3
        assert result.export.employee_count == 2
        assert len(result.file.content.splitlines()) - 1 == result.export.transaction_count
        assert [line.employee_id for line in result.lines] == ["emp-a", "emp-c", "emp-a"]

    def test_rejected_format_skips_mapping_lookups(self, service, store, make_line):
        with pytest.raises(UnsupportedFormatError):
            service.run_export("poweroffice", *PERIOD, [make_line()], "xlsx")
        assert store.lookup_count == 0

    def test_unsupported_system_raises_before_logging(self, service, export_log, make_line):
        with pytest.raises(UnsupportedSystemError):
            service.run_export("unknown_system", *PERIOD, [make_line()], "csv")
        assert export_log.list_recent() == []

    def test_runs_without_log_or_store(self, registry, make_line):
        result = ExportService(registry).run_export("tripletex", *PERIOD, [make_line()], "csv")
        assert result.stored_path is None
        assert result.export.status == ExportStatus.COMPLETED


class TestPreview:
    def test_summaries_per_employee(self, service, make_line):
        lines = [
            make_line("emp-b", quantity=Decimal("4"), amount=Decimal("800")),
            make_line("emp-a"),
            make_line("emp-b", quantity=Decimal("2"), amount=Decimal("400")),
        ]
        summaries = service.preview("tripletex", lines)

        assert [s.employee_id for s in summaries] == ["emp-b", "emp-a"]
        b, a = summaries
        assert not b.has_external_id
        assert b.external_employee_id is None
        assert b.line_count == 2
        assert b.total_hours == Decimal("6")
        assert b.total_amount == Decimal("1200")
        assert a.has_external_id
        assert a.external_employee_id == "1001"
        assert a.employee_name == "Name emp-a"


def test_list_exports_most_recent_first(service, make_line):
    first = service.run_export("tripletex", *PERIOD, [make_line()], "csv")
    second = service.run_export("poweroffice", *PERIOD, [make_line()], "csv")
    assert [e.id for e in service.list_exports()] == [second.export.id, first.export.id]
    assert len(service.list_exports(limit=1)) == 1
