"""payroll-bridge exception hierarchy."""

from __future__ import annotations

from collections.abc import Iterable


class PayrollBridgeError(Exception):
    """Base exception for all payroll-bridge errors."""


class UnsupportedSystemError(PayrollBridgeError):
    """No adapter is registered for the requested payroll system."""

    def __init__(self, system_type: str) -> None:
        self.system_type = system_type
        super().__init__(f"No adapter available for system: {system_type}")


class UnsupportedFormatError(PayrollBridgeError):
    """Adapter was asked for a file format it does not declare."""

    def __init__(self, system_type: str, file_format: str, supported: Iterable[str] = ()) -> None:
        self.system_type = str(system_type)
        self.file_format = str(file_format)
        self.supported = [str(f) for f in supported]
        allowed = ", ".join(self.supported) or "none"
        super().__init__(
            f"Unsupported format: {self.file_format} for {self.system_type} (supported: {allowed})"
        )


class ApiExportNotImplementedError(PayrollBridgeError, NotImplementedError):
    """Direct API submission has not been built for this payroll system."""

    def __init__(self, system_type: str) -> None:
        self.system_type = system_type
        super().__init__(
            f"API export to {system_type} not yet implemented. Use file export instead."
        )


class MappingStoreError(PayrollBridgeError):
    """Reading external-ID or salary-code mappings failed."""


class CacheError(PayrollBridgeError):
    """Redis cache operation failed."""


class FileStoreError(PayrollBridgeError):
    """Export file storage operation failed."""


class ExportLogError(PayrollBridgeError):
    """Reading or writing the export run log failed."""


class ExportNotFoundError(PayrollBridgeError):
    """No export record exists for the given id."""

    def __init__(self, export_id: str) -> None:
        self.export_id = export_id
        super().__init__(f"Export {export_id} not found")
