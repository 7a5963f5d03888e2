"""
Data models for the Ride Invoice Parser.
"""

from dataclasses import dataclass, astuple
from typing import Dict, List

# Column labels in workbook order
COLUMNS = [
    'Booking No',
    'Accept date',
    'Ride date',
    'Driver',
    'License plate',
    'Pickup',
    'Destination',
    'Net amount',
    'Waiting charge',
    'Added km',
    'GST',
    'Total',
]

MONEY_COLUMNS = ['Net amount', 'Waiting charge', 'Added km', 'GST', 'Total']

CREDIT_BOOKING_NO = "CREDIT"
CREDIT_PICKUP = "Fee for ride given back"
PLACEHOLDER = "—"


@dataclass(frozen=True)
class GeometryItem:
    """One positioned text fragment from page layout extraction."""
    x: float
    y: float
    text: str


@dataclass
class InvoiceRecord:
    """One extracted invoice row. Monetary fields stay strings until export."""
    booking_no: str
    accept_date: str
    ride_date: str
    driver: str
    license_plate: str
    pickup: str
    destination: str
    net_amount: str = "0.00"
    waiting_charge: str = "0.00"
    added_km: str = "0.00"
    gst: str = "0.00"
    total: str = "0.00"

    @property
    def is_credit(self) -> bool:
        return self.pickup == CREDIT_PICKUP and self.license_plate == PLACEHOLDER

    def to_row(self) -> List[str]:
        """Values in COLUMNS order."""
        return list(astuple(self))

    def to_dict(self) -> Dict[str, str]:
        return dict(zip(COLUMNS, self.to_row()))
