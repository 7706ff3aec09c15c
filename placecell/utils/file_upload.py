"""
File Upload Utility - Turn an uploaded registration form into plain text.

PDF is read with PyPDF2, Word with python-docx, anything .txt as-is.
The size limit comes from settings.upload_max_mb.
"""

import io
from typing import Callable, Dict, Tuple

from docx import Document
from fastapi import HTTPException, UploadFile
from PyPDF2 import PdfReader

from placecell.core.config import get_settings
from placecell.core.errors import ValidationFailed


def pdf_to_text(content: bytes) -> str:
    try:
        pages = PdfReader(io.BytesIO(content)).pages
        return '\n'.join(filter(None, (page.extract_text() for page in pages)))
    except Exception as e:
        raise ValidationFailed(f"Could not read PDF form: {e}")


def docx_to_text(content: bytes) -> str:
    """Paragraphs, then each table row as 'question | answer'."""
    try:
        document = Document(io.BytesIO(content))
    except Exception as e:
        raise ValidationFailed(f"Could not read Word form: {e}")

    lines = [para.text for para in document.paragraphs if para.text.strip()]
    for table in document.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if cells:
                lines.append(' | '.join(cells))
    return '\n'.join(lines)


def txt_to_text(content: bytes) -> str:
    try:
        return content.decode('utf-8')
    except UnicodeDecodeError:
        # latin-1 maps every byte, so this cannot fail
        return content.decode('latin-1')


EXTRACTORS: Dict[str, Callable[[bytes], str]] = {
    '.pdf': pdf_to_text,
    '.docx': docx_to_text,
    '.txt': txt_to_text,
}


def file_extension(filename: str) -> str:
    _, dot, ext = filename.rpartition('.')
    return f'.{ext.lower()}' if dot else ''


async def extract_text_from_file(file: UploadFile) -> Tuple[str, str]:
    """
    Returns (text, filename).

    Raises ValidationFailed for missing names, unsupported types and forms
    with no readable text; HTTPException 413 when over the size limit.
    """
    if not file.filename:
        raise ValidationFailed("No filename provided")

    extractor = EXTRACTORS.get(file_extension(file.filename))
    if extractor is None:
        raise ValidationFailed("Unsupported file type. Upload the registration form as PDF, DOCX or TXT")

    max_mb = get_settings().upload_max_mb
    limit = max_mb * 1024 * 1024
    content = await file.read(limit + 1)
    if len(content) > limit:
        raise HTTPException(status_code=413, detail=f"File too large. Maximum size: {max_mb}MB")

    text = extractor(content)
    if not text.strip():
        raise ValidationFailed("No text found in the registration form. Is it a scanned image?")
    return text, file.filename
