"""
Document routes — PDF text extraction and Excel analysis reports (authenticated).
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Tuple

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.responses import Response

from api.dependencies import get_current_user_id
from config.settings import config
from document_pipeline.document_processor import (
    analyze_pdfs_to_excel,
    process_pdf,
    process_pdfs,
)
from document_pipeline.excel_report import XLSX_CONTENT_TYPE
from utils.schemas import DocumentResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["document"], dependencies=[Depends(get_current_user_id)])

PDF_CONTENT_TYPE = "application/pdf"


async def _read_pdfs(files: List[UploadFile], limit: int) -> List[Tuple[str, bytes]]:
    if not files:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No files were provided")

    for f in files:
        if f.content_type != PDF_CONTENT_TYPE:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"The file {f.filename} is not a PDF",
            )

    loaded = []
    total = 0
    for f in files:
        data = await f.read()
        if not data:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"The file {f.filename} is empty",
            )
        total += len(data)
        if total > limit:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"Upload exceeds {limit} bytes",
            )
        loaded.append((f.filename or "document.pdf", data))
    return loaded


def _unreadable(exc: Exception) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=f"Could not read PDF: {exc}",
    )


@router.post("/process-pdf", response_model=DocumentResponse)
async def process_single_pdf(file: UploadFile = File(...)) -> DocumentResponse:
    """Return the text extracted from one PDF."""
    [(name, data)] = await _read_pdfs([file], config.max_upload_bytes)
    try:
        return await process_pdf(name, data)
    except RuntimeError as exc:
        logger.warning("Unreadable PDF %s: %s", name, exc)
        raise _unreadable(exc)


@router.post("/process-pdfs", response_model=List[DocumentResponse])
async def process_multiple_pdfs(files: List[UploadFile] = File(...)) -> List[DocumentResponse]:
    """Return the text extracted from each PDF."""
    loaded = await _read_pdfs(files, config.max_batch_upload_bytes)
    try:
        return await process_pdfs(loaded)
    except RuntimeError as exc:
        logger.warning("Unreadable PDF in batch: %s", exc)
        raise _unreadable(exc)


@router.post("/analyze-pdfs")
async def analyze_pdfs(files: List[UploadFile] = File(...)) -> Response:
    """Analyse the PDFs and download the results as an Excel workbook."""
    loaded = await _read_pdfs(files, config.max_batch_upload_bytes)
    workbook = await analyze_pdfs_to_excel(loaded)
    filename = f"document_analysis_{datetime.now():%Y%m%d_%H%M%S}.xlsx"
    return Response(
        content=workbook,
        media_type=XLSX_CONTENT_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
