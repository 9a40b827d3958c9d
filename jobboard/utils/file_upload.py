"""
File Upload Utility - Extract text from resume files.

Supported formats:
- PDF (.pdf) using PyPDF2
- Word (.docx) using python-docx

Legacy Word (.doc) is rejected with a dedicated message.
Max file size: settings.max_resume_size_mb (10MB by default).
"""

import io
import logging
from typing import Tuple

from docx import Document
from fastapi import UploadFile
from PyPDF2 import PdfReader

from jobboard.core.config import get_settings
from jobboard.core.errors import AppError

settings = get_settings()
logger = logging.getLogger(__name__)

MIN_TEXT_LENGTH = 100

PDF_TYPES = {"application/pdf"}
DOCX_TYPES = {"application/vnd.openxmlformats-officedocument.wordprocessingml.document"}
DOC_TYPES = {"application/msword"}

ALLOWED_EXTENSIONS = {'.pdf', '.docx'}


def get_file_extension(filename: str) -> str:
    """Get lowercase file extension."""
    if '.' not in filename:
        return ''
    return '.' + filename.rsplit('.', 1)[1].lower()


def detect_resume_format(filename: str, content_type: str = None) -> str:
    """
    Return 'pdf' or 'docx'; raise AppError for anything else.
    The extension wins; the MIME type covers extension-less uploads.
    """
    ext = get_file_extension(filename or "")
    content_type = (content_type or "").lower()

    if ext == '.doc' or (not ext and content_type in DOC_TYPES):
        raise AppError(
            "Legacy .doc files are not supported. Please convert to .docx format and try again."
        )
    if ext == '.pdf' or (not ext and content_type in PDF_TYPES):
        return "pdf"
    if ext == '.docx' or (not ext and content_type in DOCX_TYPES):
        return "docx"
    raise AppError("Invalid file type. Please upload PDF or Word document")


def check_file_size(content: bytes) -> None:
    max_bytes = settings.max_resume_size_mb * 1024 * 1024
    if len(content) > max_bytes:
        raise AppError(f"File too large. Maximum size is {settings.max_resume_size_mb}MB")


async def extract_text_from_file(file: UploadFile) -> Tuple[str, str]:
    """
    Extract text from uploaded file.

    Args:
        file: FastAPI UploadFile

    Returns:
        Tuple of (extracted_text, filename)

    Raises:
        AppError on validation/extraction errors
    """
    if not file or not file.filename:
        raise AppError("No file provided")

    content = await file.read()
    check_file_size(content)

    fmt = detect_resume_format(file.filename, file.content_type)
    text = extract_text(content, fmt)

    if len(text.strip()) < MIN_TEXT_LENGTH:
        raise AppError("Could not extract enough text from the resume. Please try a different format.")

    return text, file.filename


def extract_text(content: bytes, fmt: str) -> str:
    try:
        if fmt == "pdf":
            return extract_from_pdf(content)
        return extract_from_docx(content)
    except Exception as e:
        logger.error("Text extraction error (%s): %s", fmt, e)
        raise AppError("Failed to extract text from file", status_code=500)


def extract_from_pdf(content: bytes) -> str:
    """Extract text from PDF bytes."""
    reader = PdfReader(io.BytesIO(content))
    text_parts = []
    for page in reader.pages:
        page_text = page.extract_text()
        if page_text:
            text_parts.append(page_text)
    return '\n'.join(text_parts)


def extract_from_docx(content: bytes) -> str:
    """Extract text from DOCX bytes."""
    doc = Document(io.BytesIO(content))
    text_parts = []

    # Extract paragraphs
    for para in doc.paragraphs:
        if para.text.strip():
            text_parts.append(para.text)

    # Extract tables
    for table in doc.tables:
        for row in table.rows:
            row_text = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if row_text:
                text_parts.append(' | '.join(row_text))

    return '\n'.join(text_parts)


def get_supported_formats() -> dict:
    """Get info about supported file formats."""
    return {
        "supported_formats": [
            {"extension": ".pdf", "name": "PDF"},
            {"extension": ".docx", "name": "Word Document"},
        ],
        "max_size_mb": settings.max_resume_size_mb,
        "min_text_length": MIN_TEXT_LENGTH,
    }
