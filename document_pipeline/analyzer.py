"""
Document analysis — turn an extracted PDF into a ``DocumentAnalysis``.

Text PDFs go to the configured LLM for a title, summary, key points and
conclusions.  Without LLM credentials, or when the call fails, a heuristic
built from the document's own sentences is used instead.  Unreadable files
yield an error analysis so a batch never aborts on one bad upload.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from config.settings import Settings, config
from document_pipeline.excel_report import ERROR_CREATOR
from document_pipeline.parser import extract_pdf
from utils.llm_providers import BaseLLMProvider, get_llm_provider
from utils.schemas import DocumentAnalysis, DocumentMetadata, ImageInfo, TableData

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an assistant specialised in analysing PDF documents. Extract "
    "structured information from the document and answer in the requested JSON format."
)

KEYWORD_INDICATORS = ("important", "key", "highlight", "significant", "main", "essential")

_SENTENCE_SPLIT = re.compile(r"[.!?]")

Insights = Tuple[str, str, List[str], List[str]]


def truncate_text(text: str, max_length: int) -> str:
    """Keep the head and the tail when ``text`` is longer than ``max_length``."""
    if len(text) <= max_length:
        return text
    half = max_length // 2
    return f"{text[:half]}\n\n[...content omitted for length...]\n\n{text[-half:]}"


def build_analysis_prompt(text: str, page_count: int) -> str:
    return f"""Analyse the following {page_count}-page PDF document and reply with JSON.

DOCUMENT TEXT:
{text}

Provide:
1. A suitable title for the document
2. A concise summary of the content
3. The key points or main ideas (at most 5)
4. Important conclusions (at most 3)

Response format (JSON):
{{
  "documentTitle": "Document title",
  "summary": "Concise summary...",
  "keyPoints": ["Key point 1", "Key point 2"],
  "conclusions": ["Conclusion 1", "Conclusion 2"]
}}"""


def parse_llm_response(response: Dict[str, Any] | str) -> Insights:
    """Accept the provider's dict, a JSON string, or JSON-ish text."""
    if isinstance(response, str):
        try:
            response = json.loads(response)
        except json.JSONDecodeError:
            response = {"raw": response}
    if not isinstance(response, dict):
        response = {"raw": json.dumps(response)}

    if "raw" in response and len(response) == 1:
        raw = str(response["raw"])
        return (
            _regex_value(raw, "documentTitle") or "Title not available",
            _regex_value(raw, "summary") or "Summary not available",
            _regex_array(raw, "keyPoints"),
            _regex_array(raw, "conclusions"),
        )

    lowered = {str(k).lower(): v for k, v in response.items()}
    return (
        str(lowered.get("documenttitle") or "Title not available"),
        str(lowered.get("summary") or "Summary not available"),
        [str(item) for item in lowered.get("keypoints") or []],
        [str(item) for item in lowered.get("conclusions") or []],
    )


def _regex_value(text: str, name: str) -> Optional[str]:
    match = re.search(rf'"{name}"\s*:\s*"(.*?)"', text)
    return match.group(1) if match else None


def _regex_array(text: str, name: str) -> List[str]:
    match = re.search(rf'"{name}"\s*:\s*\[(.*?)\]', text, re.DOTALL)
    return re.findall(r'"(.*?)"', match.group(1)) if match else []


def heuristic_insights(text: str, page_count: int) -> Insights:
    """Title, summary, key points and conclusions picked from the text itself."""
    clean = text.replace("\r", " ").replace("\n", " ")
    sentences = [s.strip() for s in _SENTENCE_SPLIT.split(clean) if len(s.strip()) > 15]

    if sentences and len(sentences[0]) > 10:
        first = sentences[0]
        title = first[:50] + "..." if len(first) > 50 else first
    else:
        title = " ".join(text.split()[:5]) + "..."

    summary_lines = [f"PDF document with {page_count} pages."]
    if len(sentences) > 3:
        summary_lines += [sentences[0], sentences[len(sentences) // 2], sentences[-1]]
    else:
        summary_lines += sentences
    summary = "\n".join(summary_lines)

    key_points = [
        s for s in sentences
        if any(word in s.lower() for word in KEYWORD_INDICATORS)
    ][:3]
    if len(key_points) < 3 and len(sentences) > 5:
        for idx in (0, 1, 3):
            if sentences[idx] not in key_points:
                key_points.append(sentences[idx])
    while len(key_points) < 3:
        key_points.append(f"Key point identified in the document ({page_count} pages)")

    if len(sentences) > 3:
        conclusions = [sentences[-1], sentences[-2]]
    else:
        conclusions = [
            "Main conclusion of the document (generated automatically)",
            "Recommendation based on the document analysis (generated automatically)",
        ]
    return title, summary, key_points, conclusions


def ensure_basic_data(analysis: DocumentAnalysis) -> DocumentAnalysis:
    """Fill every field the Excel report relies on."""
    stem = Path(analysis.file_name).stem
    if analysis.metadata is None:
        analysis.metadata = DocumentMetadata(title=stem)
    if not analysis.metadata.creation_date:
        analysis.metadata.creation_date = datetime.now().strftime("%d/%m/%Y")
    if not analysis.document_title:
        analysis.document_title = analysis.metadata.title or stem
    if not analysis.summary:
        analysis.summary = f"Document: {stem}"
    if not analysis.key_points:
        analysis.key_points = ["Information extracted automatically"]
    if not analysis.conclusions:
        analysis.conclusions = ["Document processed automatically"]
    return analysis


def error_analysis(file_name: str, file_size: int, exc: Exception) -> DocumentAnalysis:
    return DocumentAnalysis(
        file_name=file_name,
        file_size=file_size,
        summary=f"Error processing the document: {exc}",
        key_points=["The document could not be analysed"],
        metadata=DocumentMetadata(
            title=Path(file_name).stem,
            creator=ERROR_CREATOR,
            keywords="error, processing failed",
            page_count=1,
            creation_date=datetime.now().strftime("%d/%m/%Y"),
        ),
    )


class DocumentAnalyzer:
    def __init__(
        self,
        llm_provider: Optional[BaseLLMProvider] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or config
        if llm_provider is None and self.settings.llm_configured():
            provider = self.settings.document_model_provider
            llm_provider = get_llm_provider(
                provider,
                settings=self.settings,
                # Azure takes its deployment name from settings.
                default_model=self.settings.document_model if provider == "openai" else None,
            )
        self.llm = llm_provider

    async def insights(self, text: str, page_count: int) -> Insights:
        if self.llm is None:
            logger.info("No LLM configured — using heuristic document analysis")
            return heuristic_insights(text, page_count)

        prompt = build_analysis_prompt(
            truncate_text(text, self.settings.document_text_limit), page_count,
        )
        try:
            response = await self.llm.generate(
                prompt,
                system=SYSTEM_PROMPT,
                temperature=self.settings.document_temperature,
                max_tokens=self.settings.document_max_tokens,
                json_output=True,
            )
        except Exception:
            logger.exception("LLM document analysis failed — falling back to heuristics")
            return heuristic_insights(text, page_count)
        return parse_llm_response(response)

    async def analyze(self, file_name: str, file_bytes: bytes) -> DocumentAnalysis:
        logger.info("Analysing document %s (%d bytes)", file_name, len(file_bytes))
        try:
            parsed = extract_pdf(file_bytes, file_name)
        except Exception as exc:
            logger.exception("Could not open PDF %s", file_name)
            return ensure_basic_data(error_analysis(file_name, len(file_bytes), exc))

        meta = parsed["metadata"]
        analysis = DocumentAnalysis(
            file_name=file_name,
            file_size=len(file_bytes),
            metadata=DocumentMetadata(**meta),
            tables=[
                TableData(
                    title="Detected table",
                    description=f"Table detected on page {t['page']} with about {t['rows']} rows",
                    text_representation="Automatic format",
                )
                for t in parsed["tables"]
            ],
            images=[
                ImageInfo(
                    page_number=img["page"],
                    description=f"Page {img['page']}: {img['count']} images detected",
                )
                for img in parsed["images"]
            ],
        )

        if parsed["has_text"]:
            (
                analysis.document_title,
                analysis.summary,
                analysis.key_points,
                analysis.conclusions,
            ) = await self.insights(parsed["content"], meta["page_count"])
        else:
            logger.warning("PDF %s has little or no extractable text", file_name)
            analysis.summary = "The document has no extractable text (scanned or image-only PDF)."
            analysis.key_points = ["Manual review recommended"]

        return ensure_basic_data(analysis)

    async def analyze_many(self, files: List[Tuple[str, bytes]]) -> List[DocumentAnalysis]:
        logger.info("Analysing %d PDF files", len(files))
        results = []
        for idx, (name, data) in enumerate(files, start=1):
            results.append(await self.analyze(name, data))
            logger.info("Processed file %d/%d: %s", idx, len(files), name)
        return results
