"""Payroll line, mapping, and system-specific record models.

``PayrollLineDTO`` is the normalized, system-agnostic unit every adapter
consumes. The ``*PayrollLine`` records carry the field names each external
payroll system expects in its import files (exposed as pydantic aliases).
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from enum import StrEnum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class PayrollSystemType(StrEnum):
    TRIPLETEX = "tripletex"
    POWEROFFICE = "poweroffice"
    TWENTYFOURSEVENOFFICE = "24sevenoffice"
    VISMA = "visma"
    XLEDGER = "xledger"
    FIKEN = "fiken"
    FILE_EXPORT = "file_export"


class ExportFileFormat(StrEnum):
    CSV = "csv"
    XLSX = "xlsx"
    JSON = "json"
    XML = "xml"


class SourceType(StrEnum):
    TIME_ENTRY = "time_entry"
    SHIFT = "shift"
    MANUAL = "manual"
    CALCULATED = "calculated"


SYSTEM_DISPLAY_NAMES: dict[PayrollSystemType, str] = {
    PayrollSystemType.TRIPLETEX: "Tripletex",
    PayrollSystemType.POWEROFFICE: "PowerOffice Go",
    PayrollSystemType.TWENTYFOURSEVENOFFICE: "24SevenOffice",
    PayrollSystemType.VISMA: "Visma eAccounting",
    PayrollSystemType.XLEDGER: "Xledger",
    PayrollSystemType.FIKEN: "Fiken",
    PayrollSystemType.FILE_EXPORT: "Fil-eksport",
}


def display_name(system_type: str) -> str:
    """Human-readable label for a payroll system, falling back to the raw id."""
    try:
        return SYSTEM_DISPLAY_NAMES[PayrollSystemType(system_type)]
    except ValueError:
        return str(system_type)


class PayrollLineDTO(BaseModel):
    """Internal payroll line before transformation to a system format.

    ``amount`` is expected to equal ``quantity * rate`` when both are given;
    that is the caller's concern and is not checked here.
    """

    model_config = ConfigDict(frozen=True)

    employee_id: str
    employee_name: str = ""

    salary_type_code: str
    salary_type_name: str = ""
    salary_type_id: Optional[str] = None

    quantity: Decimal = Decimal("0")
    rate: Optional[Decimal] = None
    amount: Decimal = Decimal("0")

    work_date: Optional[date] = None
    period_start: date
    period_end: date

    department: Optional[str] = None
    project: Optional[str] = None

    source_type: SourceType = SourceType.MANUAL
    source_id: Optional[str] = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class EmployeeExternalId(BaseModel):
    """Link between an internal employee and their id in an external system."""

    employee_id: str
    system_type: PayrollSystemType
    external_id: str
    external_name: Optional[str] = None
    is_active: bool = True


class SalaryTypeMapping(BaseModel):
    """Internal salary/earnings code mapped to an external system's code."""

    internal_code: str
    system_type: PayrollSystemType
    external_code: str
    external_name: Optional[str] = None
    is_active: bool = True


# ---------------------------------------------------------------------------
# System-specific records
# ---------------------------------------------------------------------------

class TripletexPayrollLine(BaseModel):
    """Tripletex payroll import row."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    ansattnummer: str
    lonnsart_nummer: str = Field(alias="lønnsartNummer")
    lonnsart_navn: Optional[str] = Field(default=None, alias="lønnsartNavn")
    antall: Decimal
    sats: Optional[Decimal] = None
    belop: Decimal = Field(alias="beløp")
    fra_dato: date = Field(alias="fraDato")
    til_dato: date = Field(alias="tilDato")
    prosjekt_nummer: Optional[str] = Field(default=None, alias="prosjektNummer")
    avdeling_nummer: Optional[str] = Field(default=None, alias="avdelingNummer")
    kommentar: Optional[str] = None


class PowerOfficePayrollLine(BaseModel):
    """PowerOffice Go payroll import row."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    employee_code: str = Field(alias="employeeCode")
    salary_code: str = Field(alias="salaryCode")
    hours: Optional[Decimal] = None
    amount: Decimal
    period_from: date = Field(alias="periodFrom")
    period_to: date = Field(alias="periodTo")
    department_code: Optional[str] = Field(default=None, alias="departmentCode")
    project_code: Optional[str] = Field(default=None, alias="projectCode")
    description: Optional[str] = None


SystemRecord = Union[TripletexPayrollLine, PowerOfficePayrollLine]


# ---------------------------------------------------------------------------
# Adapter results
# ---------------------------------------------------------------------------

class MappingPartition(BaseModel):
    """Employees split by whether they have an active external-ID mapping."""

    valid: list[str] = Field(default_factory=list)
    missing: list[str] = Field(default_factory=list)


class TransformResult(BaseModel):
    """Transformed records plus the employees whose lines were left out."""

    records: list[Any] = Field(default_factory=list)
    skipped_employee_ids: list[str] = Field(default_factory=list)
    external_ids: dict[str, str] = Field(default_factory=dict)  # employee id -> external id


class ExportFile(BaseModel):
    """A generated export file ready for download or storage."""

    content: Union[str, bytes]
    filename: str
    mime_type: str

    def as_bytes(self) -> bytes:
        if isinstance(self.content, bytes):
            return self.content
        return self.content.encode("utf-8")


class AdapterCapabilities(BaseModel):
    """What a payroll adapter declares it can do."""

    system_type: PayrollSystemType
    display_name: str = ""
    supports_api: bool = False
    supports_file_export: bool = True
    supported_formats: list[ExportFileFormat] = Field(default_factory=list)
