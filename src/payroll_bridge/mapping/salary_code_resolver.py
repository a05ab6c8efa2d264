"""Salary-type code mapping with fall-through to the internal code."""

from __future__ import annotations

from collections.abc import Mapping

from payroll_bridge.core.protocols import IMappingStore


class SalaryCodeResolver:
    """Maps internal salary codes to a payroll system's codes.

    A code with no mapping resolves to itself, so unmapped codes still reach
    the export file instead of dropping the line.
    """

    def __init__(self, store: IMappingStore) -> None:
        self._store = store

    def build_code_map(self, system_type: str) -> dict[str, str]:
        return dict(self._store.get_salary_code_map(str(system_type)))

    @staticmethod
    def resolve(code: str, code_map: Mapping[str, str]) -> str:
        return code_map.get(code) or code

    def resolve_one(self, code: str, system_type: str) -> str:
        return self._store.get_salary_code(code, str(system_type)) or code
