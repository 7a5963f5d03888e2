"""
Ride Invoice Parser

Converts ride invoice PDFs into Excel workbooks grouped by licence plate.
"""

__version__ = "1.0.0"

from .config import ConverterConfig
from .converter import InvoiceConverter, convert_pdf_to_workbook
from .exceptions import ConversionError, DocumentLoadError, DocumentTooShort, NoRowsFound
from .field_extractor import FieldExtractor
from .models import GeometryItem, InvoiceRecord
from .row_assembler import RowAssembler
from .workbook_builder import WorkbookBuilder

__all__ = [
    "ConverterConfig",
    "InvoiceConverter",
    "convert_pdf_to_workbook",
    "ConversionError",
    "DocumentLoadError",
    "DocumentTooShort",
    "NoRowsFound",
    "FieldExtractor",
    "GeometryItem",
    "InvoiceRecord",
    "RowAssembler",
    "WorkbookBuilder",
]
