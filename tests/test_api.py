#!/usr/bin/env python3
"""
Tests for the HTTP upload API.
"""

import io
import unittest
from unittest.mock import patch

import openpyxl
from fastapi.testclient import TestClient

from ride_invoice_parser.api import create_app
from ride_invoice_parser.config import ConverterConfig
from ride_invoice_parser.converter import XLSX_CONTENT_TYPE

from invoice_fixtures import COVER_PAGE, NOISE_PAGE, SECOND_PAGE, TABLE_PAGE, fake_pdf

PDFPLUMBER_OPEN = 'ride_invoice_parser.pdf_extractor.pdfplumber.open'


def upload(content: bytes = b"%PDF-1.4"):
    return {"file": ("invoice.pdf", content, "application/pdf")}


class TestConvertEndpoint(unittest.TestCase):
    """Test cases for POST /api/convert-pdf."""

    def setUp(self):
        """Set up test fixtures."""
        self.client = TestClient(create_app(ConverterConfig()))

    @patch(PDFPLUMBER_OPEN)
    def test_convert_pdf(self, mock_open):
        mock_open.return_value = fake_pdf([COVER_PAGE, TABLE_PAGE, SECOND_PAGE])

        response = self.client.post("/api/convert-pdf", files=upload())

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.headers["content-type"], XLSX_CONTENT_TYPE)
        self.assertRegex(
            response.headers["content-disposition"],
            r'^attachment; filename="rides_\d+\.xlsx"$',
        )
        wb = openpyxl.load_workbook(io.BytesIO(response.content))
        self.assertEqual(wb.sheetnames, ["All Data", "ABC123", "XY987"])

    def test_empty_upload(self):
        response = self.client.post("/api/convert-pdf", files=upload(b""))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "No file uploaded"})

    def test_missing_file_field(self):
        response = self.client.post("/api/convert-pdf", data={"other": "value"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "No file uploaded"})

    def test_upload_too_large(self):
        client = TestClient(create_app(ConverterConfig(max_upload_bytes=4)))
        response = client.post("/api/convert-pdf", files=upload(b"%PDF-1.4"))
        self.assertEqual(response.status_code, 413)
        self.assertEqual(response.json(), {"error": "File too large (limit 4 bytes)"})

    @patch('starlette.datastructures.UploadFile.read')
    def test_oversized_upload_is_not_read(self, mock_read):
        client = TestClient(create_app(ConverterConfig(max_upload_bytes=4)))

        response = client.post("/api/convert-pdf", files=upload(b"%PDF-1.4"))

        self.assertEqual(response.status_code, 413)
        mock_read.assert_not_called()

    @patch(PDFPLUMBER_OPEN)
    def test_upload_at_limit_is_accepted(self, mock_open):
        mock_open.return_value = fake_pdf([COVER_PAGE, TABLE_PAGE])
        client = TestClient(create_app(ConverterConfig(max_upload_bytes=4)))

        response = client.post("/api/convert-pdf", files=upload(b"%PDF"))

        self.assertEqual(response.status_code, 200)

    @patch(PDFPLUMBER_OPEN)
    def test_cover_only_document(self, mock_open):
        mock_open.return_value = fake_pdf([COVER_PAGE])

        response = self.client.post("/api/convert-pdf", files=upload())

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "No tabular pages found (only cover page?)."})

    @patch(PDFPLUMBER_OPEN)
    def test_document_without_rows(self, mock_open):
        mock_open.return_value = fake_pdf([COVER_PAGE, NOISE_PAGE])

        response = self.client.post("/api/convert-pdf", files=upload())

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "No table rows found after skipping the first page."})

    @patch(PDFPLUMBER_OPEN)
    def test_unreadable_document(self, mock_open):
        mock_open.side_effect = ValueError("not a PDF")

        response = self.client.post("/api/convert-pdf", files=upload(b"garbage"))

        self.assertEqual(response.status_code, 400)
        self.assertIn("not a readable PDF", response.json()["error"])

    @patch('ride_invoice_parser.converter.WorkbookBuilder.build')
    @patch(PDFPLUMBER_OPEN)
    def test_unexpected_failure(self, mock_open, mock_build):
        mock_open.return_value = fake_pdf([COVER_PAGE, TABLE_PAGE])
        mock_build.side_effect = RuntimeError("boom")

        response = self.client.post("/api/convert-pdf", files=upload())

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "Failed to convert PDF. See server logs for details."})


class TestStatusEndpoints(unittest.TestCase):
    """Test cases for health and root endpoints."""

    def setUp(self):
        """Set up test fixtures."""
        self.client = TestClient(create_app())

    def test_health(self):
        response = self.client.get("/api/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "ok")

    def test_root(self):
        response = self.client.get("/")
        self.assertEqual(response.status_code, 200)
        self.assertIn("converter is running", response.text)


if __name__ == '__main__':
    unittest.main()
