"""Tripletex payroll import adapter."""

from __future__ import annotations

from payroll_bridge.adapters.base import BasePayrollAdapter
from payroll_bridge.models.payroll import (
    ExportFileFormat,
    PayrollLineDTO,
    PayrollSystemType,
    TripletexPayrollLine,
)


class TripletexAdapter(BasePayrollAdapter):
    """Writes Tripletex salary import files (CSV, XLSX or JSON).

    Tripletex requires session tokens for its API, which is not wired up, so
    ``export_to_api`` is unavailable.
    """

    system_type = PayrollSystemType.TRIPLETEX
    supports_api = False
    supports_file_export = True
    supported_formats = (ExportFileFormat.CSV, ExportFileFormat.XLSX, ExportFileFormat.JSON)

    CSV_COLUMNS = (
        ("Ansattnummer", "ansattnummer"),
        ("Lønnsart nummer", "lonnsart_nummer"),
        ("Lønnsart navn", "lonnsart_navn"),
        ("Antall", "antall"),
        ("Sats", "sats"),
        ("Beløp", "belop"),
        ("Fra dato", "fra_dato"),
        ("Til dato", "til_dato"),
        ("Prosjekt", "prosjekt_nummer"),
        ("Avdeling", "avdeling_nummer"),
    )

    def build_record(
        self, line: PayrollLineDTO, external_id: str, salary_code: str
    ) -> TripletexPayrollLine:
        return TripletexPayrollLine(
            ansattnummer=external_id,
            lonnsart_nummer=salary_code,
            lonnsart_navn=line.salary_type_name or None,
            antall=line.quantity,
            sats=line.rate,
            belop=line.amount,
            fra_dato=line.period_start,
            til_dato=line.period_end,
            prosjekt_nummer=line.project,
            avdeling_nummer=line.department,
        )
