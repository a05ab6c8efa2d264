"""Unit test fixtures: seeded in-memory mapping store and a registry over it."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from payroll_bridge.adapters.registry import AdapterRegistry
from payroll_bridge.models.payroll import PayrollLineDTO
from tests.fakes import MemoryMappingStore

PERIOD_START = date(2024, 3, 1)
PERIOD_END = date(2024, 3, 31)


@pytest.fixture
def store() -> MemoryMappingStore:
    s = MemoryMappingStore()
    s.add_external_id("emp-a", "tripletex", "1001")
    s.add_external_id("emp-c", "tripletex", "1003")
    s.add_external_id("emp-old", "tripletex", "0999", is_active=False)
    s.add_external_id("emp-a", "poweroffice", "PO-A")
    s.add_external_id("emp-c", "poweroffice", "PO-C")
    s.add_salary_code_mapping("1000", "tripletex", "10")
    s.add_salary_code_mapping("3010", "tripletex", "310")
    s.add_salary_code_mapping("1000", "poweroffice", "TL")
    s.add_salary_code_mapping("2010", "poweroffice", "KV", is_active=False)
    return s


@pytest.fixture
def registry(store) -> AdapterRegistry:
    return AdapterRegistry.from_store(store)


@pytest.fixture
def make_line():
    def _make(employee_id: str = "emp-a", code: str = "1000", **overrides) -> PayrollLineDTO:
        fields = {
            "employee_id": employee_id,
            "employee_name": f"Name {employee_id}",
            "salary_type_code": code,
            "salary_type_name": "Timelønn",
            "quantity": Decimal("7.5"),
            "rate": Decimal("200"),
            "amount": Decimal("1500"),
            "period_start": PERIOD_START,
            "period_end": PERIOD_END,
        }
        fields.update(overrides)
        return PayrollLineDTO(**fields)

    return _make
