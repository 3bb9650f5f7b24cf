"""
Document processor – orchestrates extract → analyse → report.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from document_pipeline.analyzer import DocumentAnalyzer
from document_pipeline.excel_report import build_excel_report
from document_pipeline.parser import extract_pdf
from utils.schemas import DocumentResponse

logger = logging.getLogger(__name__)


async def process_pdf(file_name: str, file_bytes: bytes) -> DocumentResponse:
    """Extract the text of one PDF."""
    parsed = extract_pdf(file_bytes, file_name)
    return DocumentResponse(
        file_name=file_name,
        text=parsed["content"],
        file_size=len(file_bytes),
        page_count=parsed["metadata"]["page_count"],
    )


async def process_pdfs(files: List[Tuple[str, bytes]]) -> List[DocumentResponse]:
    return [await process_pdf(name, data) for name, data in files]


async def analyze_pdfs_to_excel(
    files: List[Tuple[str, bytes]],
    analyzer: Optional[DocumentAnalyzer] = None,
) -> bytes:
    """
    Full pipeline: analyse every PDF → render one workbook.
    """
    analyzer = analyzer or DocumentAnalyzer()
    analyses = await analyzer.analyze_many(files)
    return build_excel_report(analyses)
