"""File serializers shared by the payroll adapters."""

from __future__ import annotations

import csv
import io
import json
from collections.abc import Iterable, Sequence
from datetime import date
from decimal import Decimal
from typing import Any

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

CSV_MIME = "text/csv;charset=utf-8"
JSON_MIME = "application/json"
XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

HEADER_FONT = Font(bold=True)


class _ExportEncoder(json.JSONEncoder):
    """Encode Decimal as int or float and dates as ISO strings."""

    def default(self, o: Any) -> Any:
        if isinstance(o, Decimal):
            return int(o) if o == int(o) else float(o)
        if isinstance(o, date):
            return o.isoformat()
        return super().default(o)


def _cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, Decimal):
        return format(value, "f")  # never scientific notation
    if isinstance(value, date):
        return value.isoformat()
    return value


def write_delimited(
    headers: Sequence[str], rows: Iterable[Sequence[Any]], delimiter: str = ";"
) -> str:
    """Header row plus one row per record.

    Cells holding the delimiter, a quote or a line break are quoted with
    inner quotes doubled; ``None`` becomes an empty cell.
    """
    buf = io.StringIO()
    writer = csv.writer(
        buf, delimiter=delimiter, quotechar='"', quoting=csv.QUOTE_MINIMAL,
        doublequote=True, lineterminator="\n",
    )
    writer.writerow(headers)
    for row in rows:
        writer.writerow([_cell(v) for v in row])
    return buf.getvalue()


def write_json(records: Sequence[dict[str, Any]]) -> str:
    return json.dumps(list(records), cls=_ExportEncoder, indent=2, ensure_ascii=False)


def write_xlsx(
    headers: Sequence[str], rows: Iterable[Sequence[Any]], sheet_title: str = "Lønn"
) -> bytes:
    """Single-sheet workbook with a bold header row."""
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_title
    ws.append(list(headers))
    for cell in ws[1]:
        cell.font = HEADER_FONT
    for row in rows:
        ws.append(list(row))

    for col in range(1, len(headers) + 1):
        width = max(
            (len(str(c.value)) for c in ws[get_column_letter(col)] if c.value is not None),
            default=0,
        )
        ws.column_dimensions[get_column_letter(col)].width = max(width + 2, 10)

    out = io.BytesIO()
    wb.save(out)
    return out.getvalue()
