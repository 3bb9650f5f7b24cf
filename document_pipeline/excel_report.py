"""
Excel report for a batch of document analyses.

One "Summary" sheet with a row per document, then one detail sheet per
document.  Written with pandas on the openpyxl engine; openpyxl styles the
headers and flags documents that failed to process.
"""

from __future__ import annotations

import logging
import re
from io import BytesIO
from pathlib import Path
from typing import Iterable, List, Set

import pandas as pd
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from utils.schemas import DocumentAnalysis

logger = logging.getLogger(__name__)

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
SUMMARY_SHEET = "Summary"
MAX_SHEET_NAME = 31
MAX_COLUMN_WIDTH = 80
ERROR_CREATOR = "Processing error"

HEADER_FILL = PatternFill(start_color="5B9BD5", end_color="5B9BD5", fill_type="solid")
ERROR_FILL = PatternFill(start_color="FFC8C8", end_color="FFC8C8", fill_type="solid")
HEADER_FONT = Font(bold=True, color="FFFFFF")

_INVALID_SHEET_CHARS = re.compile(r"[\[\]:*?/\\]")


def sheet_name_for(file_name: str, taken: Set[str], index: int) -> str:
    """Excel-safe, unique (case-insensitive) sheet name of at most 31 characters."""
    name = _INVALID_SHEET_CHARS.sub("_", Path(file_name).stem) or f"Document {index}"
    if len(name) > 28:
        name = name[:25] + "..."
    candidate = name
    if candidate.lower() in taken:
        suffix = f"_{index}"
        candidate = name[: MAX_SHEET_NAME - len(suffix)] + suffix
    taken.add(candidate.lower())
    return candidate


def _summary_frame(analyses: List[DocumentAnalysis]) -> pd.DataFrame:
    rows = []
    for a in analyses:
        meta = a.metadata
        rows.append({
            "File name": a.file_name,
            "Title": a.document_title,
            "Pages": meta.page_count if meta else "",
            "Author": meta.author if meta else "",
            "Creation date": meta.creation_date if meta else "",
            "Size (KB)": round(a.file_size / 1024, 1),
            "Tables": len(a.tables),
            "Images": len(a.images),
            "Summary": a.summary,
        })
    return pd.DataFrame(rows, columns=[
        "File name", "Title", "Pages", "Author", "Creation date",
        "Size (KB)", "Tables", "Images", "Summary",
    ])


def _detail_frame(a: DocumentAnalysis) -> pd.DataFrame:
    rows = [("File name", a.file_name), ("Title", a.document_title), ("Summary", a.summary)]
    rows += [(f"Key point {i}", p) for i, p in enumerate(a.key_points, start=1)]
    rows += [(f"Conclusion {i}", c) for i, c in enumerate(a.conclusions, start=1)]
    rows += [(t.title or "Table", t.description) for t in a.tables]
    rows += [(f"Image (page {img.page_number})", img.description) for img in a.images]
    if a.metadata:
        m = a.metadata
        rows += [
            ("Author", m.author),
            ("Creator", m.creator),
            ("Keywords", m.keywords),
            ("Pages", str(m.page_count)),
            ("Creation date", m.creation_date),
        ]
    return pd.DataFrame(rows, columns=["Field", "Value"])


def _style_sheet(ws, highlight_rows: Iterable[int] = ()) -> None:
    for cell in ws[1]:
        cell.fill = HEADER_FILL
        cell.font = HEADER_FONT
    for row in highlight_rows:
        for cell in ws[row]:
            cell.fill = ERROR_FILL
    for col_idx, column in enumerate(ws.columns, start=1):
        width = max((len(str(c.value)) for c in column if c.value is not None), default=10)
        ws.column_dimensions[get_column_letter(col_idx)].width = min(width + 2, MAX_COLUMN_WIDTH)
        for cell in column:
            cell.alignment = Alignment(wrap_text=True, vertical="top")


def build_excel_report(analyses: List[DocumentAnalysis]) -> bytes:
    logger.info("Generating Excel report for %d documents", len(analyses))
    buffer = BytesIO()
    taken = {SUMMARY_SHEET.lower()}

    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        _summary_frame(analyses).to_excel(writer, sheet_name=SUMMARY_SHEET, index=False)
        failed = [
            row for row, a in enumerate(analyses, start=2)
            if a.metadata is not None and a.metadata.creator == ERROR_CREATOR
        ]
        _style_sheet(writer.sheets[SUMMARY_SHEET], failed)

        for idx, analysis in enumerate(analyses, start=1):
            name = sheet_name_for(analysis.file_name, taken, idx)
            _detail_frame(analysis).to_excel(writer, sheet_name=name, index=False)
            _style_sheet(writer.sheets[name])

    return buffer.getvalue()
