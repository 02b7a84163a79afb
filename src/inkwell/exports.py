"""
Export functions for documents in various formats.

Document content is editor HTML; it is converted to Markdown first and each
renderer works from that. Renderers return bytes so the CLI can write files
directly; ``export_document`` wraps them in a Flask download response.
"""

import re
import logging
from html import escape
from typing import Dict, Any, Callable, NamedTuple
from io import BytesIO
from flask import send_file, Response

from .utils.errors import (
    ValidationError,
    MissingDependencyError,
    ServiceUnavailableError
)
from .utils.html_text import html_to_markdown

logger = logging.getLogger(__name__)

_PATH_TRAVERSAL_PATTERN = re.compile(r'\.\.+')
_DANGEROUS_CHARS_PATTERN = re.compile(r'[<>:"|?*\\/;&`$]')
_WHITESPACE_PATTERN = re.compile(r'\s+')
_NON_ALPHANUMERIC_PATTERN = re.compile(r'[^a-zA-Z0-9_-]')
_HEADER_PATTERN = re.compile(r'^(#+)\s+(.+)$')
_BOLD_PATTERN = re.compile(r'\*\*(.+?)\*\*')
_ITALIC_PATTERN = re.compile(r'\*(.+?)\*')


def sanitize_filename(title: str, document_id: str, max_length: int = 50) -> str:
    """
    Sanitize a title for use in filenames.

    Removes path traversal sequences, shell and OS-reserved characters, and
    anything else that is not alphanumeric, underscore or hyphen.

    Args:
        title: Original title
        document_id: Document ID for fallback
        max_length: Maximum length for filename

    Returns:
        Sanitized filename-safe string
    """
    safe_id = _NON_ALPHANUMERIC_PATTERN.sub('', document_id or '')[:8]
    fallback = f"Document_{safe_id}" if safe_id else "Document_export"
    if not title:
        return fallback

    safe = _PATH_TRAVERSAL_PATTERN.sub('', title)
    safe = _DANGEROUS_CHARS_PATTERN.sub('', safe)
    safe = _WHITESPACE_PATTERN.sub('_', safe)
    safe = _NON_ALPHANUMERIC_PATTERN.sub('', safe)
    safe = safe.strip('_-')[:max_length]

    return safe or fallback


def _strip_markdown(line: str) -> str:
    line = _BOLD_PATTERN.sub(r'\1', line)
    return _ITALIC_PATTERN.sub(r'\1', line)


def render_pdf(markdown_text: str, title: str) -> bytes:
    """
    Render document as PDF.

    Raises:
        MissingDependencyError: If reportlab is not installed
        ServiceUnavailableError: If PDF generation fails
    """
    try:
        from reportlab.lib.pagesizes import letter
        from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
        from reportlab.lib.units import inch
        from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer
        from reportlab.lib.enums import TA_LEFT
    except ImportError:
        raise MissingDependencyError("reportlab", "pip install reportlab")

    try:
        buffer = BytesIO()
        doc = SimpleDocTemplate(buffer, pagesize=letter, rightMargin=72, leftMargin=72,
                                topMargin=72, bottomMargin=36, title=title)

        styles = getSampleStyleSheet()
        title_style = ParagraphStyle('DocTitle', parent=styles['Heading1'], fontSize=20,
                                     spaceAfter=24, alignment=TA_LEFT)
        body_style = ParagraphStyle('DocBody', parent=styles['Normal'], fontSize=11,
                                    leading=16, spaceAfter=10, alignment=TA_LEFT)

        flowables = [Paragraph(escape(title), title_style), Spacer(1, 0.2 * inch)]
        for line in markdown_text.split('\n'):
            if not line.strip():
                flowables.append(Spacer(1, 0.1 * inch))
                continue
            header_match = _HEADER_PATTERN.match(line)
            if header_match:
                level = min(len(header_match.group(1)) + 1, 4)
                flowables.append(Paragraph(escape(header_match.group(2)), styles[f'Heading{level}']))
                continue
            # reportlab parses paragraph text as markup
            clean_line = escape(line, quote=False)
            clean_line = _BOLD_PATTERN.sub(r'<b>\1</b>', clean_line)
            clean_line = _ITALIC_PATTERN.sub(r'<i>\1</i>', clean_line)
            flowables.append(Paragraph(clean_line, body_style))

        doc.build(flowables)
        return buffer.getvalue()
    except (IOError, OSError) as e:
        logger.error(f"I/O error during PDF export: {str(e)}", exc_info=True)
        raise ServiceUnavailableError("export", f"PDF export failed due to I/O issue: {str(e)}")
    except Exception as e:
        logger.error(f"Unexpected error during PDF export: {str(e)}", exc_info=True)
        raise ServiceUnavailableError("export", f"PDF export failed: {str(e)}")


def render_markdown(markdown_text: str, title: str) -> bytes:
    """Render document as Markdown with the title as a top-level heading."""
    return f"# {title}\n\n{markdown_text}\n".encode('utf-8')


def render_txt(markdown_text: str, title: str) -> bytes:
    """Render document as plain text (markdown formatting removed)."""
    lines = []
    for line in markdown_text.split('\n'):
        header_match = _HEADER_PATTERN.match(line)
        lines.append(_strip_markdown(header_match.group(2) if header_match else line))
    return (f"{title}\n\n" + '\n'.join(lines) + '\n').encode('utf-8')


def render_docx(markdown_text: str, title: str) -> bytes:
    """
    Render document as DOCX.

    Raises:
        MissingDependencyError: If python-docx is not installed
        ServiceUnavailableError: If DOCX generation fails
    """
    try:
        from docx import Document
        from docx.shared import Pt
        from docx.enum.text import WD_ALIGN_PARAGRAPH
    except ImportError:
        raise MissingDependencyError("python-docx", "pip install python-docx")

    try:
        doc = Document()
        doc.core_properties.title = title
        title_para = doc.add_heading(title, level=1)
        title_para.alignment = WD_ALIGN_PARAGRAPH.LEFT

        for line in markdown_text.split('\n'):
            if not line.strip():
                continue
            header_match = _HEADER_PATTERN.match(line)
            if header_match:
                level = len(header_match.group(1)) + 1
                doc.add_heading(_strip_markdown(header_match.group(2)), level=min(level, 4))
                continue
            para = doc.add_paragraph()
            # Odd segments of the split are the **bold** spans
            for index, segment in enumerate(_BOLD_PATTERN.split(line)):
                if not segment:
                    continue
                run = para.add_run(_ITALIC_PATTERN.sub(r'\1', segment))
                run.bold = index % 2 == 1
                run.font.size = Pt(11)

        buffer = BytesIO()
        doc.save(buffer)
        return buffer.getvalue()
    except (IOError, OSError) as e:
        logger.error(f"I/O error during DOCX export: {str(e)}", exc_info=True)
        raise ServiceUnavailableError("export", f"DOCX export failed due to I/O issue: {str(e)}")
    except Exception as e:
        logger.error(f"Unexpected error during DOCX export: {str(e)}", exc_info=True)
        raise ServiceUnavailableError("export", f"DOCX export failed: {str(e)}")


def render_epub(markdown_text: str, title: str, author: str = "Inkwell") -> bytes:
    """
    Render document as EPUB.

    Raises:
        MissingDependencyError: If ebooklib is not installed
        ServiceUnavailableError: If EPUB generation fails
    """
    try:
        from ebooklib import epub
    except ImportError:
        raise MissingDependencyError("ebooklib", "pip install ebooklib")

    try:
        book = epub.EpubBook()
        book.set_identifier(f"inkwell_{sanitize_filename(title, '')}")
        book.set_title(title)
        book.set_language('en')
        book.add_author(author)

        blocks = []
        for block in re.split(r'\n{2,}', markdown_text):
            block = block.strip()
            if not block:
                continue
            header_match = _HEADER_PATTERN.match(block)
            if header_match:
                level = min(len(header_match.group(1)) + 1, 6)
                blocks.append(f"<h{level}>{escape(header_match.group(2))}</h{level}>")
                continue
            html_block = escape(block, quote=False)
            html_block = _BOLD_PATTERN.sub(r'<strong>\1</strong>', html_block)
            html_block = _ITALIC_PATTERN.sub(r'<em>\1</em>', html_block)
            blocks.append("<p>" + html_block.replace('\n', '<br/>') + "</p>")

        chapter = epub.EpubHtml(title=title, file_name='chapter.xhtml', lang='en')
        chapter.content = f"<h1>{escape(title)}</h1>" + "".join(blocks)

        book.add_item(chapter)
        book.toc = [chapter]
        book.spine = ['nav', chapter]
        book.add_item(epub.EpubNcx())
        book.add_item(epub.EpubNav())

        buffer = BytesIO()
        epub.write_epub(buffer, book, {})
        return buffer.getvalue()
    except (IOError, OSError) as e:
        logger.error(f"I/O error during EPUB export: {str(e)}", exc_info=True)
        raise ServiceUnavailableError("export", f"EPUB export failed due to I/O issue: {str(e)}")
    except Exception as e:
        logger.error(f"Unexpected error during EPUB export: {str(e)}", exc_info=True)
        raise ServiceUnavailableError("export", f"EPUB export failed: {str(e)}")


class ExportFormat(NamedTuple):
    render: Callable[[str, str], bytes]
    mimetype: str
    extension: str


EXPORT_FORMATS: Dict[str, ExportFormat] = {
    "pdf": ExportFormat(render_pdf, "application/pdf", "pdf"),
    "markdown": ExportFormat(render_markdown, "text/markdown", "md"),
    "txt": ExportFormat(render_txt, "text/plain", "txt"),
    "docx": ExportFormat(
        render_docx, "application/vnd.openxmlformats-officedocument.wordprocessingml.document", "docx"
    ),
    "epub": ExportFormat(render_epub, "application/epub+zip", "epub"),
}


class RenderedExport(NamedTuple):
    data: bytes
    mimetype: str
    filename: str


def render_document(document: Dict[str, Any], format_type: str) -> RenderedExport:
    """
    Render a stored document in the specified format.

    Args:
        document: Stored document record
        format_type: Export format (pdf, markdown, txt, docx, epub)

    Returns:
        RenderedExport with file bytes, mimetype and a safe filename

    Raises:
        ValidationError: If format is invalid or the document has no content
        MissingDependencyError: If required library is not installed
        ServiceUnavailableError: If rendering fails
    """
    format_type = (format_type or "").lower()
    if format_type not in EXPORT_FORMATS:
        raise ValidationError(
            f"Invalid format '{format_type}'. Supported formats: {', '.join(EXPORT_FORMATS)}",
            details={"format_type": format_type, "valid_formats": list(EXPORT_FORMATS)}
        )

    document_id = document["_id"]
    markdown_text = html_to_markdown(document.get("content", ""))
    if not markdown_text.strip():
        raise ValidationError(
            "Document has no content to export.",
            details={"document_id": document_id}
        )

    title = (document.get("title") or "").strip() or f"Document {document_id}"
    export_format = EXPORT_FORMATS[format_type]
    logger.info(f"Exporting document {document_id} as {format_type}")

    return RenderedExport(
        data=export_format.render(markdown_text, title),
        mimetype=export_format.mimetype,
        filename=f"{sanitize_filename(title, document_id)}_{document_id}.{export_format.extension}",
    )


def export_document(document: Dict[str, Any], format_type: str) -> Response:
    """
    Export a document as a Flask download response.

    This is the main entry point for document exports from Flask routes.
    """
    rendered = render_document(document, format_type)
    return send_file(
        BytesIO(rendered.data),
        mimetype=rendered.mimetype,
        as_attachment=True,
        download_name=rendered.filename
    )
