import io
import logging

import pypdf

from ..exceptions import DocumentError

logger = logging.getLogger("medmap.documents")

PDF_MAGIC = b"%PDF"


def extract_pdf_text(data: bytes) -> str:
    """
    Extracts the textual content of a PDF as a single string.

    Parameters
    ----------
    data : bytes
        Raw PDF bytes as uploaded by the client.

    Returns
    -------
    str
        Text of every page that has any, joined by newlines.
    """
    try:
        reader = pypdf.PdfReader(io.BytesIO(data))
        text_chunks = []
        for i, page in enumerate(reader.pages):
            page_text = page.extract_text()
            if page_text and page_text.strip():
                text_chunks.append(page_text)
            else:
                logger.debug("Page %d has no extractable text", i)
    except Exception as e:
        # pypdf reports broken files with PdfReadError and assorted builtin errors
        raise DocumentError(f"Could not read PDF: {e}") from e
    return "\n".join(text_chunks)


def extract_text(data: bytes) -> str:
    """Turns uploaded bytes into text; non-PDF uploads are read as UTF-8."""
    if not data:
        raise DocumentError("Uploaded file is empty")

    if data.lstrip()[:4] == PDF_MAGIC:
        text = extract_pdf_text(data)
    else:
        text = data.decode("utf-8", errors="ignore")

    if not text.strip():
        # Image-only PDFs end up here; they would need OCR.
        raise DocumentError("No text could be extracted from the document")
    return text
