#!/usr/bin/env python3
"""
Field extraction for one reassembled invoice row.

Each field is found by an independent pattern search over the whole row
string. The rules are plain functions so they can be tested one by one;
FieldExtractor runs them in order and assembles an InvoiceRecord.
"""

import re
import logging
from typing import List, Optional, Tuple

from .models import (
    InvoiceRecord,
    CREDIT_BOOKING_NO,
    CREDIT_PICKUP,
    PLACEHOLDER,
)

logger = logging.getLogger(__name__)

BOOKING_RE = re.compile(r'\b\d{9}\b')
CREDIT_RE = re.compile(r'fee\s+for\s+ride\s+given\s+back|credit|refund', re.IGNORECASE)
DATE_RE = re.compile(r'\b\d{4}-\d{2}-\d{2}\b')
TIME_RE = re.compile(r'\b\d{2}:\d{2}\b')

# Capitalized words that are part of an address are not a driver name
DRIVER_RE = re.compile(
    r'\b[A-Z][a-z]+(?:\s+[A-Z][a-z]+){0,2}\b'
    r'(?!\s*(?:Road|Street|Drive|Avenue|Airport|Hotel|International))'
)

ADDRESS_KEYWORD_RE = re.compile(
    r'\b(?:Airport|International|Hotel|Street|Road|Drive|Avenue|Place|'
    r'Crescent|Terrace|Lane|Harbour|Quay|Terminal)\b',
    re.IGNORECASE,
)

PLATE_CANDIDATE_RE = re.compile(r'\b[A-Z0-9]{1,4}-?[A-Z0-9]{1,4}\b')

AMOUNT_NUMBER = r'-?\(?(?:\d{1,3}(?:,\d{3})+|\d+)\.\d{2}\)?'

# Order of amounts in a row; the fourth (net total) is not exported
AMOUNT_FIELDS = ['net_amount', 'waiting_charge', 'added_km', None, 'gst', 'total']
DEFAULT_AMOUNT = "0.00"


def find_booking_number(row: str) -> str:
    match = BOOKING_RE.search(row)
    return match.group(0) if match else ""


def is_credit_phrase(row: str) -> bool:
    """True when the row reads like a refund or fee reversal."""
    return CREDIT_RE.search(row) is not None


def find_dates(row: str) -> List[str]:
    return DATE_RE.findall(row)


def find_time(row: str) -> str:
    match = TIME_RE.search(row)
    return match.group(0) if match else ""


def find_driver(row: str) -> Optional[re.Match]:
    return DRIVER_RE.search(row)


def find_address_keyword(text: str, start: int = 0) -> Optional[re.Match]:
    return ADDRESS_KEYWORD_RE.search(text, start)


def _is_plate_candidate(row: str, match: re.Match) -> bool:
    token = match.group(0)
    if not 2 <= len(token) <= 8:
        return False
    if token.replace('-', '').isdigit():
        # booking numbers, row indices, date, clock and amount fragments
        return False
    if row.startswith('$', match.end()):
        # currency code such as NZ$
        return False
    return True


def plate_candidates(row: str) -> List[re.Match]:
    """All tokens shaped like a licence plate, left to right."""
    return [m for m in PLATE_CANDIDATE_RE.finditer(row) if _is_plate_candidate(row, m)]


def find_license_plate(row: str, driver_match: Optional[re.Match] = None) -> Optional[re.Match]:
    """
    Pick the licence plate token.

    When both a driver name and an address keyword are present the plate is
    expected between them (driver, plate, pickup address); otherwise the first
    candidate wins.
    """
    candidates = plate_candidates(row)
    if not candidates:
        return None

    address_match = find_address_keyword(row)
    if driver_match and address_match:
        driver_start = driver_match.start()
        address_start = address_match.start()
        for candidate in candidates:
            if driver_start < candidate.start() < address_start:
                return candidate

    return candidates[0]


def normalize_plate(token: str) -> str:
    return token.replace('-', '')


def split_addresses(row: str, plate_end: int) -> Tuple[str, str]:
    """
    Split the text after the plate into pickup and destination.

    The text is cut at the first '%' after the plate (bonus/fee percentage
    column). With two address keywords the pickup runs through the first
    keyword and the destination is everything after it; with one keyword the
    text is halved; with none, both get the whole text.
    """
    percent_idx = row.find('%', plate_end)
    remainder = row[plate_end:percent_idx] if percent_idx >= 0 else row[plate_end:]
    remainder = remainder.strip()

    first = find_address_keyword(remainder)
    if not first:
        return remainder, remainder

    second = find_address_keyword(remainder, first.end())
    if second:
        split_at = first.end()
    else:
        split_at = len(remainder) // 2

    return remainder[:split_at].strip(), remainder[split_at:].strip()


def normalize_amount(raw: str) -> str:
    """Strip separators; "(12.34)" becomes "-12.34"."""
    stripped = re.sub(r'[(),]', '', raw)
    if raw.startswith('(') and raw.endswith(')'):
        return '-' + stripped
    return stripped


def find_amounts(row: str, currency_marker: str = "NZ$") -> List[str]:
    """All monetary values tagged with the currency marker, in row order."""
    pattern = r'(?<![\d.,])(' + AMOUNT_NUMBER + r')\s*' + re.escape(currency_marker)
    return [normalize_amount(m.group(1)) for m in re.finditer(pattern, row)]


class FieldExtractor:
    """Turns one reassembled row string into an InvoiceRecord."""

    def __init__(self, currency_marker: str = "NZ$"):
        self.currency_marker = currency_marker

    def extract(self, row: str) -> Optional[InvoiceRecord]:
        """
        Parse a row string.

        Args:
            row: One logical invoice row, wrapped lines already joined

        Returns:
            InvoiceRecord, or None when the row is neither a booking nor a credit
        """
        booking_no = find_booking_number(row)
        credit_row = is_credit_phrase(row)
        if not booking_no and not credit_row:
            logger.debug(f"Rejected row without booking number: {row[:80]!r}")
            return None

        dates = find_dates(row)
        accept_date = dates[0] if len(dates) > 0 else ""
        ride_day = dates[1] if len(dates) > 1 else ""
        ride_date = ' '.join(part for part in (ride_day, find_time(row)) if part)

        amounts = self._assign_amounts(find_amounts(row, self.currency_marker))

        if credit_row:
            return InvoiceRecord(
                booking_no=booking_no or CREDIT_BOOKING_NO,
                accept_date=accept_date,
                ride_date=ride_date,
                driver=PLACEHOLDER,
                license_plate=PLACEHOLDER,
                pickup=CREDIT_PICKUP,
                destination="",
                **amounts,
            )

        driver_match = find_driver(row)
        plate_match = find_license_plate(row, driver_match)

        pickup, destination = "", ""
        if plate_match:
            pickup, destination = split_addresses(row, plate_match.end())

        return InvoiceRecord(
            booking_no=booking_no,
            accept_date=accept_date,
            ride_date=ride_date,
            driver=driver_match.group(0) if driver_match else "",
            license_plate=normalize_plate(plate_match.group(0)) if plate_match else "",
            pickup=pickup,
            destination=destination,
            **amounts,
        )

    def _assign_amounts(self, amounts: List[str]) -> dict:
        assigned = {}
        for position, field_name in enumerate(AMOUNT_FIELDS):
            if field_name is None:
                continue
            assigned[field_name] = amounts[position] if position < len(amounts) else DEFAULT_AMOUNT
        return assigned


def parse_row(row: str, currency_marker: str = "NZ$") -> Optional[InvoiceRecord]:
    """Convenience function to extract one row."""
    return FieldExtractor(currency_marker).extract(row)
