"""Re-export persistence protocols from core for convenience."""

from __future__ import annotations

from payroll_bridge.core.protocols import (
    ICacheBackend,
    IExportLog,
    IFileStore,
    IMappingStore,
)

__all__ = ["ICacheBackend", "IExportLog", "IFileStore", "IMappingStore"]
