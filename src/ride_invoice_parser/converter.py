#!/usr/bin/env python3
"""
Ride Invoice Converter
Runs the full PDF to Excel pipeline for one document.
"""

import time
import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union

from .config import ConverterConfig
from .exceptions import DocumentTooShort, NoRowsFound
from .field_extractor import FieldExtractor
from .models import GeometryItem, InvoiceRecord
from .pdf_extractor import GeometryExtractor, iter_page_lines
from .row_assembler import RowAssembler, iter_rows
from .workbook_builder import WorkbookBuilder

logger = logging.getLogger(__name__)

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def default_output_name() -> str:
    """File name for a converted workbook, e.g. rides_1718000000000.xlsx."""
    return f"rides_{int(time.time() * 1000)}.xlsx"


class InvoiceConverter:
    """Converts ride invoice PDFs into grouped Excel workbooks."""

    def __init__(self, config: Optional[ConverterConfig] = None):
        self.config = config or ConverterConfig()
        self.geometry_extractor = GeometryExtractor()
        self.row_assembler = RowAssembler(FieldExtractor(self.config.currency_marker))
        self.workbook_builder = WorkbookBuilder()

    def load_pages(self, pdf_bytes: bytes) -> List[List[GeometryItem]]:
        """Read page geometry, rejecting documents without table pages."""
        pages = self.geometry_extractor.load_pages(pdf_bytes)
        if len(pages) <= 1:
            logger.warning(f"Document has {len(pages)} page(s), nothing after the cover page")
            raise DocumentTooShort(len(pages))
        return pages

    def page_lines(self, pages: Sequence[Sequence[GeometryItem]]) -> List[List[str]]:
        return [list(iter_page_lines(page, self.config.y_precision)) for page in pages]

    def extract_records(self, pages: Sequence[Sequence[GeometryItem]]) -> List[InvoiceRecord]:
        """
        Extract invoice records from page geometry.

        Args:
            pages: GeometryItems of each page, cover page first

        Returns:
            Records in document order
        """
        if len(pages) <= 1:
            raise DocumentTooShort(len(pages))

        records = self.row_assembler.assemble_pages(self.page_lines(pages))
        if not records:
            logger.warning(f"No invoice rows found in {len(pages)} pages")
            raise NoRowsFound(len(pages))

        logger.info(f"Extracted {len(records)} invoice rows")
        return records

    def extract_rows(self, pdf_bytes: bytes) -> List[List[str]]:
        """Raw assembled row strings of each table page, for debugging."""
        pages = self.load_pages(pdf_bytes)
        return [list(iter_rows(lines)) for lines in self.page_lines(pages)[1:]]

    def extract_records_from_pdf(self, pdf_bytes: bytes) -> List[InvoiceRecord]:
        return self.extract_records(self.load_pages(pdf_bytes))

    def convert(self, pdf_bytes: bytes) -> bytes:
        """
        Convert one PDF document into workbook bytes.

        Raises:
            DocumentLoadError: bytes are not a readable PDF
            DocumentTooShort: only a cover page
            NoRowsFound: no invoice rows on the table pages
        """
        records = self.extract_records_from_pdf(pdf_bytes)
        return self.workbook_builder.build(records)

    def convert_file(self, pdf_path: Union[str, Path],
                     output_path: Optional[Union[str, Path]] = None) -> Path:
        """Convert a PDF file and write the workbook, returning its path."""
        pdf_path = Path(pdf_path)
        logger.info(f"Converting invoice: {pdf_path}")

        content = self.convert(pdf_path.read_bytes())

        output = Path(output_path) if output_path else Path.cwd() / default_output_name()
        output.write_bytes(content)
        logger.info(f"Workbook saved to: {output}")
        return output


def convert_pdf_to_workbook(pdf_bytes: bytes, config: Optional[ConverterConfig] = None) -> bytes:
    """Convenience function for a one-off conversion."""
    return InvoiceConverter(config).convert(pdf_bytes)
