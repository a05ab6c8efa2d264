"""Shared test doubles: re-exports of the memory backends."""

from __future__ import annotations

from payroll_bridge.persistence.memory_backend import (
    MemoryCacheBackend,
    MemoryExportLog,
    MemoryFileStore,
    MemoryMappingStore,
)

__all__ = ["MemoryCacheBackend", "MemoryExportLog", "MemoryFileStore", "MemoryMappingStore"]
