"""Best-effort text extraction from uploaded documents.

This is a heuristic, not a format implementation. PDF and Word files are
scanned for text runs in the raw byte stream; compressed or encrypted
content streams and scanned documents are expected to fail. Failure never
raises: the caller gets a guidance placeholder telling the user to paste
the text manually.
"""

import logging
import mimetypes
import re
from dataclasses import dataclass

logger = logging.getLogger("liaise.extraction")

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
DOC_MIME = "application/msword"
TEXT_MIME = "text/plain"

MIN_EXTRACTED_CHARS = 50
MIN_EXTRACTED_WORDS = 10

_PDF_TEXT_OBJECT = re.compile(rb"\bBT\b(.*?)\bET\b", re.DOTALL)
_PDF_LITERAL = rb"\(((?:\\.|[^\\)])*)\)"
_PDF_SHOW_TEXT = re.compile(
    rb"\[((?:" + _PDF_LITERAL + rb"|[^\]])*)\]\s*TJ|" + _PDF_LITERAL + rb"\s*(?:Tj|'|\")",
    re.DOTALL,
)
_PDF_ARRAY_LITERAL = re.compile(_PDF_LITERAL, re.DOTALL)
_PDF_ESCAPES = {
    b"n": b"\n",
    b"r": b"\r",
    b"t": b"\t",
    b"b": b"\b",
    b"f": b"\f",
    b"(": b"(",
    b")": b")",
    b"\\": b"\\",
}
_PDF_ESCAPE = re.compile(rb"\\([0-7]{1,3}|.)", re.DOTALL)

_DOCX_RUN = re.compile(r"<w:t[^>]*>(.*?)</w:t>", re.DOTALL)
_XML_TEXT = re.compile(r">([^<>]+)<")
_DOC_READABLE = re.compile(r"[a-zA-Z][a-zA-Z0-9\s.,;:!?()-]{20,}")
_HAS_LETTER = re.compile(r"[a-zA-Z]")
_NON_PRINTABLE = re.compile(r"[^\x20-\x7E\s]")
_WHITESPACE = re.compile(r"\s+")


@dataclass
class ExtractionResult:
    """Text pulled from a file, or a placeholder when nothing usable was found."""

    text: str
    is_placeholder: bool = False


def guess_mime_type(filename: str, content_type: str | None = None) -> str:
    if content_type and content_type != "application/octet-stream":
        return content_type.split(";")[0].strip().lower()
    lowered = filename.lower()
    if lowered.endswith(".docx"):
        return DOCX_MIME
    guessed, _ = mimetypes.guess_type(lowered)
    return guessed or "application/octet-stream"


def manual_entry_placeholder(filename: str, kind: str = "file") -> str:
    return (
        f"[{kind}: {filename}]\n\n"
        "We could not extract readable text from this file.\n\n"
        "To proceed, please open the document, copy its text and paste it into "
        "the notes field, or upload it as a plain text (.txt) file instead."
    )


def image_placeholder(filename: str) -> str:
    return (
        f"[Image file: {filename}]\n\n"
        "This appears to be an image. For best results, convert it to text with "
        "an OCR tool and paste the text into the notes field, or convert the "
        "image to a PDF with selectable text."
    )


def _clean(text: str) -> str:
    text = _NON_PRINTABLE.sub("", text)
    return _WHITESPACE.sub(" ", text).strip()


def _is_usable(text: str) -> bool:
    return len(text) > MIN_EXTRACTED_CHARS and len(text.split(" ")) > MIN_EXTRACTED_WORDS


def _unescape_pdf_literal(raw: bytes) -> bytes:
    def replace(match: re.Match) -> bytes:
        token = match.group(1)
        if token[:1].isdigit():
            return bytes([int(token, 8) & 0xFF])
        if token in (b"\n", b"\r"):
            # Backslash-newline is a line continuation.
            return b""
        return _PDF_ESCAPES.get(token, token)

    return _PDF_ESCAPE.sub(replace, raw)


def extract_pdf_text(data: bytes) -> str:
    """Collect literal strings shown inside ``BT ... ET`` text objects."""
    pieces: list[str] = []
    for block in _PDF_TEXT_OBJECT.finditer(data):
        for match in _PDF_SHOW_TEXT.finditer(block.group(1)):
            array_body, _, single = match.group(1), match.group(2), match.group(3)
            if array_body is not None:
                raw = b"".join(
                    _unescape_pdf_literal(m.group(1))
                    for m in _PDF_ARRAY_LITERAL.finditer(array_body)
                )
            else:
                raw = _unescape_pdf_literal(single or b"")
            if raw:
                pieces.append(raw.decode("latin-1"))
    return _clean(" ".join(pieces))


def extract_docx_text(data: bytes) -> str:
    """Collect ``<w:t>`` runs, falling back to generic XML text nodes."""
    document = data.decode("utf-8", errors="ignore")
    runs = [
        run.strip()
        for run in _DOCX_RUN.findall(document)
        if run.strip() and _HAS_LETTER.search(run)
    ]
    text = " ".join(runs)
    if len(text) < MIN_EXTRACTED_CHARS:
        generic = [
            node.strip()
            for node in _XML_TEXT.findall(document)
            if len(node.strip()) > 3
            and _HAS_LETTER.search(node)
            and "<?xml" not in node
            and "xmlns" not in node
            and "w:" not in node
            and "r:" not in node
        ]
        text = " ".join([text, *generic]) if text else " ".join(generic)
    return _clean(text)


def extract_doc_text(data: bytes) -> str:
    document = data.decode("utf-8", errors="ignore")
    return _clean(" ".join(_DOC_READABLE.findall(document)))


def extract_text_from_file(
    filename: str,
    data: bytes,
    content_type: str | None = None,
) -> ExtractionResult:
    """Return plain text for a file, or a guidance placeholder naming it."""
    mime_type = guess_mime_type(filename, content_type)

    if mime_type == TEXT_MIME:
        return ExtractionResult(text=data.decode("utf-8", errors="replace"))

    if mime_type.startswith("image/"):
        return ExtractionResult(text=image_placeholder(filename), is_placeholder=True)

    extractors = {
        PDF_MIME: ("PDF Document", extract_pdf_text),
        DOCX_MIME: ("Word Document", extract_docx_text),
        DOC_MIME: ("Word Document", extract_doc_text),
    }
    if mime_type not in extractors:
        logger.info("No extractor for %s (%s)", filename, mime_type)
        return ExtractionResult(
            text=manual_entry_placeholder(filename), is_placeholder=True
        )

    kind, extractor = extractors[mime_type]
    try:
        text = extractor(data)
    except (ValueError, re.error):
        logger.warning("Text extraction failed for %s", filename, exc_info=True)
        text = ""

    if not _is_usable(text):
        return ExtractionResult(
            text=manual_entry_placeholder(filename, kind), is_placeholder=True
        )
    return ExtractionResult(text=f"{kind} Content from {filename}:\n\n{text}")


def validate_upload(
    content_type: str,
    size: int,
    *,
    max_size: int,
    allowed_mime_types: list[str],
) -> str | None:
    """Return an error message for an unacceptable upload, else ``None``."""
    if size > max_size:
        return f"File size must be less than {max_size // (1024 * 1024)}MB"
    if content_type not in allowed_mime_types:
        return "File type not supported"
    return None
