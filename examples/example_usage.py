#!/usr/bin/env python3
"""
Example usage of the Ride Invoice Parser
Runs the row assembly and workbook export on sample invoice lines.
"""

import json
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from ride_invoice_parser import FieldExtractor, RowAssembler, WorkbookBuilder


def create_sample_page_lines():
    """Lines of one invoice table page, as the layout step produces them."""
    return [
        "No. Booking No Accept date Ride date Driver License plate Pickup Destination",
        "1 123456789 2024-01-01 2024-01-02 09:15 John Smith ABC123 Auckland Airport",
        "City Hotel 0.00% 50.00 NZ$ 5.00 NZ$ 0.00 NZ$ 55.00 NZ$ 8.25 NZ$ 63.25 NZ$",
        "2 987654321 2024-01-03 2024-01-03 14:40 Mary Jones XY-987 Hotel Grand Terminal 2",
        "0.00% 30.00 NZ$ 0.00 NZ$ 0.00 NZ$ 30.00 NZ$ 4.50 NZ$ 34.50 NZ$",
        "Subtotal 97.75 NZ$",
    ]


def demonstrate_row_extraction():
    """Show the records extracted from the sample page."""
    print("=" * 60)
    print("DEMONSTRATION: Row extraction")
    print("=" * 60)

    assembler = RowAssembler(FieldExtractor())
    records = assembler.assemble_page(create_sample_page_lines())

    print(json.dumps([r.to_dict() for r in records], indent=2, ensure_ascii=False))
    return records


def demonstrate_workbook(records, output_path: Path):
    """Write the grouped workbook for the sample records."""
    print("\n" + "=" * 60)
    print("DEMONSTRATION: Workbook export")
    print("=" * 60)

    output_path.write_bytes(WorkbookBuilder().build(records))
    print(f"Workbook saved to: {output_path}")


if __name__ == "__main__":
    sample_records = demonstrate_row_extraction()
    demonstrate_workbook(sample_records, Path("sample_rides.xlsx"))
