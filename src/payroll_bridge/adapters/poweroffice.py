"""PowerOffice Go payroll import adapter."""

from __future__ import annotations

from payroll_bridge.adapters.base import BasePayrollAdapter
from payroll_bridge.models.payroll import (
    ExportFileFormat,
    PayrollLineDTO,
    PayrollSystemType,
    PowerOfficePayrollLine,
)


class PowerOfficeAdapter(BasePayrollAdapter):
    system_type = PayrollSystemType.POWEROFFICE
    supports_api = False
    supports_file_export = True
    supported_formats = (ExportFileFormat.CSV, ExportFileFormat.JSON)

    CSV_COLUMNS = (
        ("Ansattkode", "employee_code"),
        ("Lønnskode", "salary_code"),
        ("Timer", "hours"),
        ("Beløp", "amount"),
        ("Fra", "period_from"),
        ("Til", "period_to"),
        ("Avdeling", "department_code"),
        ("Prosjekt", "project_code"),
        ("Beskrivelse", "description"),
    )

    def build_record(
        self, line: PayrollLineDTO, external_id: str, salary_code: str
    ) -> PowerOfficePayrollLine:
        # PowerOffice has no salary-type name column; the name goes in the description.
        return PowerOfficePayrollLine(
            employee_code=external_id,
            salary_code=salary_code,
            hours=line.quantity,
            amount=line.amount,
            period_from=line.period_start,
            period_to=line.period_end,
            department_code=line.department,
            project_code=line.project,
            description=line.salary_type_name or None,
        )
