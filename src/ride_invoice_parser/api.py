"""
HTTP API for PDF to Excel conversion.

Endpoints:
- POST /api/convert-pdf: upload one invoice PDF, download the workbook
- GET /api/health: liveness
- GET /: plain-text banner
"""

import logging
from typing import Optional

from fastapi import FastAPI, File, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from starlette.concurrency import run_in_threadpool

from . import __version__
from .config import ConverterConfig
from .converter import InvoiceConverter, XLSX_CONTENT_TYPE, default_output_name
from .exceptions import DocumentLoadError, DocumentTooShort, NoRowsFound

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def create_app(config: Optional[ConverterConfig] = None) -> FastAPI:
    """Build the FastAPI app around one converter instance."""
    config = config or ConverterConfig()
    converter = InvoiceConverter(config)

    app = FastAPI(title="Ride Invoice Parser", version=__version__)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.post("/api/convert-pdf")
    async def convert_pdf(file: Optional[UploadFile] = File(default=None)):
        """Convert an uploaded invoice PDF into an Excel workbook."""
        too_large = _error(413, f"File too large (limit {config.max_upload_bytes} bytes)")
        if file is not None and file.size is not None and file.size > config.max_upload_bytes:
            return too_large

        # one byte past the limit is enough to tell an oversized upload
        content = await file.read(config.max_upload_bytes + 1) if file is not None else b""
        if not content:
            return _error(400, "No file uploaded")
        if len(content) > config.max_upload_bytes:
            return too_large

        try:
            workbook = await run_in_threadpool(converter.convert, content)
        except (DocumentTooShort, NoRowsFound) as e:
            return _error(400, e.message)
        except DocumentLoadError as e:
            logger.warning(f"Rejected upload {file.filename!r}: {e.details}")
            return _error(400, "Uploaded file is not a readable PDF.")
        except Exception:
            logger.exception("Conversion failed")
            return _error(500, "Failed to convert PDF. See server logs for details.")

        filename = default_output_name()
        return Response(
            content=workbook,
            media_type=XLSX_CONTENT_TYPE,
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    @app.get("/api/health")
    async def health_check():
        return {"status": "ok", "version": __version__}

    @app.get("/", response_class=PlainTextResponse)
    async def root():
        return "PDF → Excel converter is running."

    return app
