# retailready/extractor.py
# Routing guide -> ExtractionResult
# - Extracts text via pypdf; falls back to OCR if available + low text
# - Detects the retailer, asks the extraction model, validates its output

import io
import logging
import re
import shutil
from typing import Any, Optional, Tuple

from pypdf import PdfReader

from .errors import EmptyDocumentError
from .llm import complete_extraction
from .normalizer import normalize_extraction
from .prompts import prepare_extraction
from .schemas import ExtractionResult
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

# Optional OCR (works only if poppler + tesseract exist in the runtime)
try:
    from pdf2image import convert_from_bytes
    from pdf2image.exceptions import PDFInfoNotInstalledError, PDFPageCountError, PDFSyntaxError
    import pytesseract

    OCR_AVAILABLE = shutil.which("tesseract") is not None
    # poppler missing, bytes that are not a PDF, tesseract failures
    OCR_ERRORS: Tuple[type, ...] = (
        PDFInfoNotInstalledError,
        PDFPageCountError,
        PDFSyntaxError,
        pytesseract.TesseractError,
        pytesseract.TesseractNotFoundError,
    )
except ImportError:
    OCR_AVAILABLE = False
    OCR_ERRORS = ()


# ---------------------------
# Text extraction (PDF + OCR)
# ---------------------------

def extract_pdf_text(file_bytes: bytes) -> str:
    """Selectable text of every page (digital PDFs); empty if unreadable."""
    try:
        reader = PdfReader(io.BytesIO(file_bytes))
        return "\n".join(page.extract_text() or "" for page in reader.pages).strip()
    except Exception as exc:
        # pypdf raises many different errors on malformed files
        logger.warning("pypdf could not read document: %s", exc)
        return ""


def ocr_pdf(file_bytes: bytes, max_pages: int) -> str:
    """OCR scanned PDFs (requires poppler + tesseract)."""
    if not OCR_AVAILABLE:
        return ""
    images = convert_from_bytes(file_bytes, dpi=220, last_page=max_pages)
    return "\n".join(pytesseract.image_to_string(img) for img in images).strip()


def _normalize_text(text: str) -> str:
    # non-breaking spaces and whitespace runs from PDF/OCR; keep line breaks
    text = (text or "").replace("\u00a0", " ")
    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def get_document_text(file_bytes: bytes, settings: Optional[Settings] = None) -> Tuple[str, str]:
    """
    Returns (text, method) where method is:
    - "pdf_text" or "ocr" or "empty"
    """
    settings = settings or get_settings()
    text = _normalize_text(extract_pdf_text(file_bytes))

    if len(text) < settings.ocr_min_chars and OCR_AVAILABLE:
        try:
            ocr_text = _normalize_text(ocr_pdf(file_bytes, settings.ocr_max_pages))
        except OCR_ERRORS as exc:
            logger.warning("OCR failed, keeping pdf text: %s", exc)
            ocr_text = ""
        if len(ocr_text) > len(text):
            logger.info("Using OCR text (%d chars, pdf text had %d)", len(ocr_text), len(text))
            return ocr_text, "ocr"

    if text:
        return text, "pdf_text"
    return "", "empty"


# ---------------------------
# Extraction pipeline
# ---------------------------

def extract_requirements(
    document_text: str,
    client: Any = None,
    settings: Optional[Settings] = None,
) -> ExtractionResult:
    """
    detect retailer -> build prompt -> extraction call -> normalize.
    Schema and upstream errors propagate; the batch is accepted whole or not at all.
    """
    settings = settings or get_settings()
    if not isinstance(document_text, str) or not document_text.strip():
        raise EmptyDocumentError("No text content found in document")

    request = prepare_extraction(document_text, max_chars=settings.max_text_length)
    raw = complete_extraction(request, client=client, settings=settings)
    result = normalize_extraction(raw, retailer=request.profile.name)

    logger.info("Extracted %d requirements for %s", len(result.requirements), result.retailer)
    return result


def extract_document(file_bytes: bytes, client: Any = None, settings: Optional[Settings] = None) -> ExtractionResult:
    """Used by the upload endpoint."""
    text, method = get_document_text(file_bytes, settings)
    logger.info("Document text via %s: %d chars", method, len(text))
    return extract_requirements(text, client=client, settings=settings)
