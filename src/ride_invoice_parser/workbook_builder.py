#!/usr/bin/env python3
"""
Excel export of extracted invoice records.

Writes an "All Data" sheet plus one sheet per licence plate. Every sheet ends
with a GROSS TOTAL row whose Total cell is a SUM formula, so totals stay
correct when rows are edited in the spreadsheet.
"""

import io
import math
import re
import logging
from collections import OrderedDict
from typing import Dict, Iterable, List, Optional, Sequence

import openpyxl
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from .models import COLUMNS, MONEY_COLUMNS, PLACEHOLDER, InvoiceRecord

logger = logging.getLogger(__name__)

ALL_DATA_SHEET = "All Data"
UNKNOWN_PLATE = "Unknown"
GROSS_TOTAL_LABEL = "GROSS TOTAL"
MAX_SHEET_NAME = 31
ILLEGAL_SHEET_CHARS_RE = re.compile(r'[:\\/?*\[\]]')

COLUMN_WIDTHS = [12, 12, 18, 22, 14, 50, 50, 12, 14, 10, 10, 12]
MONEY_FORMAT = '#,##0.00'
HEADER_FONT = Font(bold=True)

TOTAL_COLUMN = COLUMNS.index('Total') + 1
MONEY_COLUMN_INDEXES = [COLUMNS.index(name) for name in MONEY_COLUMNS]


def to_number(value) -> Optional[float]:
    """
    Coerce a monetary string to a float.

    "(12.34)" is negative, thousands separators are dropped, and anything
    that does not parse becomes None (an empty cell).
    """
    if value is None:
        return None
    raw = str(value).strip()
    if not raw:
        return None

    stripped = re.sub(r'[(),]', '', raw)
    if raw.startswith('(') and raw.endswith(')'):
        stripped = '-' + stripped

    try:
        number = float(stripped)
    except ValueError:
        logger.debug(f"Amount {raw!r} is not numeric, leaving cell empty")
        return None

    if not math.isfinite(number):
        logger.debug(f"Amount {raw!r} is not finite, leaving cell empty")
        return None
    return number


def plate_key(record: InvoiceRecord) -> str:
    plate = record.license_plate.strip()
    if not plate or plate == PLACEHOLDER:
        return UNKNOWN_PLATE
    return plate


def group_by_plate(records: Iterable[InvoiceRecord]) -> Dict[str, List[InvoiceRecord]]:
    """Group records by plate key, keeping first-seen order."""
    groups: Dict[str, List[InvoiceRecord]] = OrderedDict()
    for record in records:
        groups.setdefault(plate_key(record), []).append(record)
    return groups


def sanitize_sheet_name(name: str) -> str:
    """Remove characters Excel forbids in sheet names and truncate."""
    safe = ILLEGAL_SHEET_CHARS_RE.sub('', name or '').strip().strip("'")
    return safe[:MAX_SHEET_NAME] or UNKNOWN_PLATE


def total_formula(row_count: int) -> str:
    """SUM over the Total column of data rows 2..row_count+1."""
    column = get_column_letter(TOTAL_COLUMN)
    return f"=SUM({column}2:{column}{row_count + 1})"


class WorkbookBuilder:
    """Builds the grouped, formula-bearing workbook."""

    def build(self, records: Sequence[InvoiceRecord]) -> bytes:
        """
        Build the workbook and serialize it.

        Args:
            records: Extracted records in document order

        Returns:
            .xlsx file content
        """
        wb = openpyxl.Workbook()
        wb.remove(wb.active)

        self._write_sheet(wb.create_sheet(title=ALL_DATA_SHEET), records)

        groups = group_by_plate(records)
        for plate, group in groups.items():
            title = self._unique_title(wb, sanitize_sheet_name(plate))
            self._write_sheet(wb.create_sheet(title=title), group)

        buffer = io.BytesIO()
        wb.save(buffer)
        content = buffer.getvalue()
        logger.info(f"Built workbook with {len(records)} rows, {len(groups)} plate sheets ({len(content)} bytes)")
        return content

    def _write_sheet(self, ws: Worksheet, records: Sequence[InvoiceRecord]) -> None:
        ws.append(COLUMNS)
        for cell in ws[1]:
            cell.font = HEADER_FONT
        ws.freeze_panes = "A2"

        for record in records:
            values: List = record.to_row()
            for idx in MONEY_COLUMN_INDEXES:
                values[idx] = to_number(values[idx])
            ws.append(values)

        total_row = [None] * len(COLUMNS)
        total_row[0] = GROSS_TOTAL_LABEL
        total_row[TOTAL_COLUMN - 1] = total_formula(len(records))
        ws.append(total_row)
        ws.cell(row=ws.max_row, column=1).font = HEADER_FONT

        for idx in MONEY_COLUMN_INDEXES:
            for row in range(2, ws.max_row + 1):
                ws.cell(row=row, column=idx + 1).number_format = MONEY_FORMAT

        for col_idx, width in enumerate(COLUMN_WIDTHS, start=1):
            ws.column_dimensions[get_column_letter(col_idx)].width = width

    def _unique_title(self, wb: openpyxl.Workbook, title: str) -> str:
        existing = {name.lower() for name in wb.sheetnames}
        if title.lower() not in existing:
            return title
        counter = 2
        while True:
            suffix = f" ({counter})"
            candidate = title[:MAX_SHEET_NAME - len(suffix)] + suffix
            if candidate.lower() not in existing:
                return candidate
            counter += 1


def build_workbook(records: Sequence[InvoiceRecord]) -> bytes:
    """Convenience function to build workbook bytes."""
    return WorkbookBuilder().build(records)
