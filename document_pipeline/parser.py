"""PDF parsing — text, metadata, table and image detection."""

from __future__ import annotations

import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List

import pymupdf

logger = logging.getLogger(__name__)

# Fewer extractable characters than this means a scanned/image-only PDF.
MIN_CHARACTERS_FOR_TEXT_PDF = 20
# Header plus two rows.
MIN_TABLE_LINES = 3

_PDF_DATE = re.compile(r"^D:(\d{4})(\d{2})(\d{2})")


def extract_pdf(file_bytes: bytes, filename: str) -> Dict[str, Any]:
    """
    Open a PDF from memory and pull out everything the analyzer needs.

    Returns
    -------
    {
        "content": str,               # full text, pages separated by blank lines
        "pages": [str, ...],
        "has_text": bool,
        "metadata": {"title", "author", "creator", "keywords", "page_count", "creation_date"},
        "tables": [{"page": int, "rows": int}, ...],
        "images": [{"page": int, "count": int}, ...],
    }

    Raises whatever PyMuPDF raises for unreadable input.
    """
    with pymupdf.open(stream=file_bytes, filetype="pdf") as doc:
        pages = [page.get_text() for page in doc]
        images = _detect_images(doc)
        metadata = _extract_metadata(doc, pages, filename)

    content = "\n\n".join(pages)
    letter_count = sum(1 for ch in content if not ch.isspace())
    return {
        "content": content,
        "pages": pages,
        "has_text": letter_count > MIN_CHARACTERS_FOR_TEXT_PDF,
        "metadata": metadata,
        "tables": detect_tables(pages),
        "images": images,
    }


def format_pdf_date(raw: str | None) -> str:
    """``D:20240131…`` → ``31/01/2024``; anything unparsable → today."""
    if raw:
        match = _PDF_DATE.match(raw)
        if match:
            year, month, day = (int(part) for part in match.groups())
            try:
                return datetime(year, month, day).strftime("%d/%m/%Y")
            except ValueError:
                logger.warning("Invalid PDF creation date %r, using today", raw)
    return datetime.now().strftime("%d/%m/%Y")


def detect_tables(pages: List[str]) -> List[Dict[str, int]]:
    """Pages with at least three tab/double-space separated lines count as holding a table."""
    tables = []
    for idx, text in enumerate(pages, start=1):
        rows = [line for line in text.split("\n") if "\t" in line or "  " in line]
        if len(rows) >= MIN_TABLE_LINES:
            tables.append({"page": idx, "rows": len(rows)})
    return tables


def _detect_images(doc) -> List[Dict[str, int]]:
    images = []
    for idx, page in enumerate(doc, start=1):
        count = len(page.get_images(full=True))
        if count:
            images.append({"page": idx, "count": count})
    return images


def _extract_metadata(doc, pages: List[str], filename: str) -> Dict[str, Any]:
    info = doc.metadata or {}
    title = (info.get("title") or "").strip()
    if not title and pages:
        # First words of page one stand in for a missing title.
        title = " ".join(pages[0].split()[:10])
    return {
        "title": title or Path(filename).stem,
        "author": info.get("author") or "",
        "creator": info.get("creator") or "",
        "keywords": info.get("keywords") or "",
        "page_count": doc.page_count,
        "creation_date": format_pdf_date(info.get("creationDate")),
    }
