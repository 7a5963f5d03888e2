#!/usr/bin/env python3
"""
Tests for the command line interface.
"""

import unittest
from pathlib import Path
from unittest.mock import patch

import openpyxl
from click.testing import CliRunner

from ride_invoice_parser.cli import cli

from invoice_fixtures import COVER_PAGE, SECOND_PAGE, TABLE_PAGE, fake_pdf

PDFPLUMBER_OPEN = 'ride_invoice_parser.pdf_extractor.pdfplumber.open'


class TestCli(unittest.TestCase):
    """Test cases for the ride-invoice commands."""

    def setUp(self):
        """Set up test fixtures."""
        self.runner = CliRunner()

    @patch(PDFPLUMBER_OPEN)
    def test_convert(self, mock_open):
        mock_open.return_value = fake_pdf([COVER_PAGE, TABLE_PAGE, SECOND_PAGE])

        with self.runner.isolated_filesystem():
            Path("invoice.pdf").write_bytes(b"%PDF-1.4")
            result = self.runner.invoke(cli, ["convert", "invoice.pdf", "-o", "rides.xlsx"])

            self.assertEqual(result.exit_code, 0, result.output)
            wb = openpyxl.load_workbook("rides.xlsx")
            self.assertEqual(wb.sheetnames, ["All Data", "ABC123", "XY987"])

    @patch(PDFPLUMBER_OPEN)
    def test_convert_json(self, mock_open):
        mock_open.return_value = fake_pdf([COVER_PAGE, TABLE_PAGE])

        with self.runner.isolated_filesystem():
            Path("invoice.pdf").write_bytes(b"%PDF-1.4")
            result = self.runner.invoke(cli, ["convert", "invoice.pdf", "-o", "rides.xlsx", "--json"])

            self.assertEqual(result.exit_code, 0, result.output)
            self.assertIn('"Booking No": "987654321"', result.output)
            self.assertIn('"License plate": "XY987"', result.output)

    @patch(PDFPLUMBER_OPEN)
    def test_convert_cover_only_fails(self, mock_open):
        mock_open.return_value = fake_pdf([COVER_PAGE])

        with self.runner.isolated_filesystem():
            Path("invoice.pdf").write_bytes(b"%PDF-1.4")
            result = self.runner.invoke(cli, ["convert", "invoice.pdf", "-o", "rides.xlsx"])

            self.assertEqual(result.exit_code, 1)
            self.assertFalse(Path("rides.xlsx").exists())

    def test_convert_missing_file(self):
        with self.runner.isolated_filesystem():
            result = self.runner.invoke(cli, ["convert", "missing.pdf"])
        self.assertNotEqual(result.exit_code, 0)

    @patch(PDFPLUMBER_OPEN)
    def test_rows(self, mock_open):
        mock_open.return_value = fake_pdf([COVER_PAGE, TABLE_PAGE])

        with self.runner.isolated_filesystem():
            Path("invoice.pdf").write_bytes(b"%PDF-1.4")
            result = self.runner.invoke(cli, ["rows", "invoice.pdf"])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("555666777", result.output)

    @patch(PDFPLUMBER_OPEN)
    def test_unknown_log_level_does_not_crash(self, mock_open):
        mock_open.return_value = fake_pdf([COVER_PAGE, TABLE_PAGE])

        with self.runner.isolated_filesystem():
            Path("invoice.pdf").write_bytes(b"%PDF-1.4")
            result = self.runner.invoke(
                cli, ["rows", "invoice.pdf"], env={"RIDE_INVOICE_LOG_LEVEL": "verbose"}
            )

        self.assertIsNone(result.exception)
        self.assertEqual(result.exit_code, 0, result.output)


if __name__ == '__main__':
    unittest.main()
