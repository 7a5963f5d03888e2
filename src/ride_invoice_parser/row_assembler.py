#!/usr/bin/env python3
"""
Reassembly of wrapped invoice rows.

An invoice row starts on a line beginning with a running index and a 9-digit
booking number; long pickup/destination addresses wrap onto the following
lines. The assembler buffers those lines until the next row start, a table
footer, or the end of the page.
"""

import re
import logging
from enum import Enum
from typing import Iterable, Iterator, List, Optional, Sequence

from .field_extractor import FieldExtractor
from .models import InvoiceRecord

logger = logging.getLogger(__name__)

ROW_START_RE = re.compile(r'^\d+\s+\d{9}\b')
FOOTER_RE = re.compile(r'Subtotal|Total gross|Page \d+ of|\bSumme\b|Gesamtpreis', re.IGNORECASE)


class AssemblerState(Enum):
    IDLE = "idle"
    IN_ROW = "in_row"


def is_row_start(line: str) -> bool:
    return ROW_START_RE.match(line) is not None


def is_footer(line: str) -> bool:
    return FOOTER_RE.search(line) is not None


def iter_rows(lines: Iterable[str]) -> Iterator[str]:
    """
    Yield the logical row strings of one page.

    A row start always begins a new row, so two consecutive row starts never
    merge. Lines outside a row (cover text, table headers) are dropped. A row
    still open when the lines run out is yielded as well.
    """
    state = AssemblerState.IDLE
    buffer = ""

    for line in lines:
        if is_row_start(line):
            if buffer:
                yield buffer
            buffer = line
            state = AssemblerState.IN_ROW
            continue

        if state is AssemblerState.IN_ROW:
            if is_footer(line):
                yield buffer
                buffer = ""
                state = AssemblerState.IDLE
            else:
                buffer += ' ' + line

    if buffer:
        yield buffer


class RowAssembler:
    """Builds InvoiceRecords from the lines of each page."""

    def __init__(self, field_extractor: Optional[FieldExtractor] = None):
        self.field_extractor = field_extractor or FieldExtractor()

    def assemble_page(self, lines: Iterable[str]) -> List[InvoiceRecord]:
        """Extract the records of one page, skipping rows that do not parse."""
        records = []
        rejected = 0
        for row in iter_rows(lines):
            record = self.field_extractor.extract(row)
            if record is None:
                rejected += 1
                continue
            records.append(record)

        if rejected:
            logger.debug(f"Dropped {rejected} rows without booking number or credit marker")
        return records

    def assemble_pages(self, pages_lines: Sequence[Iterable[str]]) -> List[InvoiceRecord]:
        """
        Extract records from every page after the cover page.

        Args:
            pages_lines: Lines of each page, in page order

        Returns:
            Records of all table pages, in document order
        """
        records = []
        for page_number, lines in enumerate(pages_lines[1:], start=2):
            page_records = self.assemble_page(lines)
            logger.info(f"Page {page_number}: {len(page_records)} rows")
            records.extend(page_records)
        return records
