#!/usr/bin/env python3
"""
Positioned text extraction from invoice PDFs.

Pages are read with pdfplumber into GeometryItem fragments (one per word,
positioned by its left edge and top edge), then regrouped into visual lines.
"""

import io
import re
import logging
from collections import defaultdict
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Union

import pdfplumber

from .exceptions import DocumentLoadError
from .models import GeometryItem

logger = logging.getLogger(__name__)

CID_ARTIFACT_RE = re.compile(r'\(cid:\d+\)')
NBSP_RE = re.compile('[\u00A0\u2007\u202F]')
WHITESPACE_RE = re.compile(r'\s+')


def decode_fragment(text: str) -> str:
    """
    Decode one text fragment as pdfplumber delivers it.

    Unmapped glyphs come through as "(cid:NN)" markers and some layouts use
    non-breaking space variants; both are normalized away.
    """
    if not text:
        return ""
    text = CID_ARTIFACT_RE.sub('', text)
    text = NBSP_RE.sub(' ', text)
    return WHITESPACE_RE.sub(' ', text).strip()


def iter_page_lines(items: Iterable[GeometryItem], y_precision: int = 1) -> Iterator[str]:
    """
    Yield the visual lines of one page, top to bottom.

    Fragments whose y position agrees to `y_precision` decimals form one line;
    inside a line fragments are ordered left to right and joined by a space.
    """
    rows: Dict[str, List[GeometryItem]] = defaultdict(list)
    for item in items:
        text = decode_fragment(item.text)
        if not text:
            continue
        key = f"{item.y:.{y_precision}f}"
        rows[key].append(GeometryItem(item.x, item.y, text))

    for key in sorted(rows, key=float):
        ordered = sorted(rows[key], key=lambda it: it.x)
        yield ' '.join(it.text for it in ordered)


class GeometryExtractor:
    """Loads per-page GeometryItem lists from PDF bytes using pdfplumber."""

    def __init__(self, x_tolerance: float = 3, y_tolerance: float = 3):
        self.x_tolerance = x_tolerance
        self.y_tolerance = y_tolerance

    def load_pages(self, pdf_bytes: bytes) -> List[List[GeometryItem]]:
        """
        Read every page of a PDF into positioned fragments.

        Args:
            pdf_bytes: Raw PDF document

        Returns:
            One list of GeometryItem per page, in page order
        """
        if not pdf_bytes:
            raise DocumentLoadError("Empty document")

        try:
            with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
                pages = [self._page_geometry(page) for page in pdf.pages]
        except Exception as e:
            logger.error(f"pdfplumber could not read document: {e}")
            raise DocumentLoadError("Could not read PDF document", original_error=e) from e

        logger.info(f"Loaded {len(pages)} pages, {sum(len(p) for p in pages)} text fragments")
        return pages

    def _page_geometry(self, page) -> List[GeometryItem]:
        words = page.extract_words(
            x_tolerance=self.x_tolerance,
            y_tolerance=self.y_tolerance,
            keep_blank_chars=False,
        )
        return [
            GeometryItem(x=float(w['x0']), y=float(w['top']), text=w['text'])
            for w in words
        ]


def extract_pdf_geometry(pdf_path: Union[str, Path]) -> List[List[GeometryItem]]:
    """
    Convenience function to load geometry from a PDF file.

    Args:
        pdf_path: Path to the PDF file

    Returns:
        One list of GeometryItem per page
    """
    extractor = GeometryExtractor()
    return extractor.load_pages(Path(pdf_path).read_bytes())
