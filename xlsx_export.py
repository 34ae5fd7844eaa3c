"""Monthly timesheet export to an .xlsx workbook."""

from __future__ import annotations

import io
import re
from typing import Iterable, Sequence

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter

from entries import TimeEntry

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# (header, width)
COLUMNS = [
    ("Date", 15),
    ("Day", 12),
    ("Site Location", 20),
    ("Start Time", 12),
    ("End Time", 12),
    ("Total Hours", 12),
]
HOURS_COLUMN = len(COLUMNS)

HEADER_FILL = PatternFill(start_color="FF4472C4", end_color="FF4472C4", fill_type="solid")
BOLD = Font(bold=True)

# Characters Excel refuses in sheet titles, and its title length limit.
_INVALID_TITLE_CHARS = re.compile(r"[\\/*?:\[\]]")
MAX_TITLE_LENGTH = 31


def sheet_title(period_label: str) -> str:
    title = _INVALID_TITLE_CHARS.sub("", period_label or "").strip()
    return title[:MAX_TITLE_LENGTH] or "Timesheet"


def export_filename(month: str, year: int) -> str:
    return f"timesheet-{month}-{year}.xlsx"


def _entry_row(entry: TimeEntry) -> list:
    return [
        entry.date.strftime("%d/%m/%Y"),
        entry.day,
        entry.site_location or "Office",
        entry.start_time,
        entry.end_time,
        entry.total_hours,
    ]


def total_hours(entries: Iterable[TimeEntry]) -> float:
    return sum(entry.total_hours for entry in entries)


def export_entries(entries: Sequence[TimeEntry], period_label: str) -> bytes:
    """Render `entries` (already filtered and sorted by date) to .xlsx bytes.

    Layout: styled header row, one row per entry, a blank row, then a bold
    TOTAL row whose hours cell holds the sum formatted to 2 decimals.
    """
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_title(period_label)

    for col_idx, (header, width) in enumerate(COLUMNS, start=1):
        cell = ws.cell(1, col_idx, value=header)
        cell.font = BOLD
        cell.fill = HEADER_FILL
        ws.column_dimensions[get_column_letter(col_idx)].width = width

    last_row = 1
    for entry in entries:
        ws.append(_entry_row(entry))
        last_row += 1

    # one blank row between the entries and the totals
    total_row = last_row + 2
    ws.cell(total_row, 1, value="TOTAL")
    ws.cell(total_row, HOURS_COLUMN, value=f"{total_hours(entries):.2f}")
    for col_idx in range(1, HOURS_COLUMN + 1):
        ws.cell(total_row, col_idx).font = BOLD

    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()
