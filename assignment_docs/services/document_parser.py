"""
Document parsing service for DOCX and PDF assignment files.

Turns uploaded bytes into a ParsedDocument: order-preserving text, headings,
heuristically classified sections, cover-page text, formatting defaults,
embedded images (DOCX only) and metadata.

Headings are found in the same pass that builds the text, so every heading
knows its character span and sections are sliced by offset rather than by
matching heading strings against the text a second time.
"""
from __future__ import annotations

import io
import logging
import re
import zipfile
from typing import Any, Dict, Iterator, List, Optional, Tuple

import fitz  # PyMuPDF
from docx import Document as DocxDocument
from docx.document import Document as DocumentObject
from docx.oxml.ns import qn
from docx.oxml.table import CT_Tbl
from docx.oxml.text.paragraph import CT_P
from docx.table import Table
from docx.text.paragraph import Paragraph
from PIL import Image

from assignment_docs.exceptions import ParseError
from assignment_docs.models.document import (
    DocumentMetadata,
    DocumentStyles,
    DocumentType,
    FontInfo,
    HeadingInfo,
    ImageInfo,
    ParsedDocument,
)
from assignment_docs.services import structure
from assignment_docs.services.ooxml import WORD_DOCUMENT_PART
from assignment_docs.services.structure import PositionedHeading
from assignment_docs.services.style_extractor import (
    DefaultStyleExtractor,
    StyleExtractor,
)

logger = logging.getLogger(__name__)

# "Heading1" (style id) or "Heading 1" (style name)
_HEADING_STYLE_RE = re.compile(r"^heading\s?(\d+)$", re.IGNORECASE)
_PAGES_RE = re.compile(r"<Pages>(\d+)</Pages>")

_BLIP_TAG = qn("a:blip")
_EMBED_KEY = qn("r:embed")

_MAX_HEADING_LEVEL = 6
_APP_PROPERTIES_PART = "docProps/app.xml"


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

class DocumentParser:
    """Parses DOCX and PDF bytes into immutable ParsedDocument objects."""

    def __init__(
        self,
        style_extractor: Optional[StyleExtractor] = None,
        cover_page_fallback: int = structure.COVER_PAGE_FALLBACK_PARAGRAPHS,
        heading_max_length: int = structure.HEADING_MAX_LENGTH,
    ) -> None:
        self.style_extractor = style_extractor or DefaultStyleExtractor()
        self.cover_page_fallback = cover_page_fallback
        self.heading_max_length = heading_max_length

    def parse(self, data: bytes, document_type: str) -> ParsedDocument:
        """
        Parse document bytes of the declared type.

        Args:
            data:          Raw file bytes.
            document_type: "docx" or "pdf", with or without a leading dot.

        Returns:
            ParsedDocument.

        Raises:
            ValueError: Unsupported document type.
            ParseError: Bytes are not a readable package of that type.
        """
        ft = document_type.lower().lstrip(".")
        if ft == DocumentType.DOCX.value:
            return self.parse_docx(data)
        elif ft == DocumentType.PDF.value:
            return self.parse_pdf(data)
        else:
            raise ValueError(f"Unsupported document type: {document_type!r}")

    # ------------------------------------------------------------------
    # DOCX
    # ------------------------------------------------------------------

    def parse_docx(self, data: bytes) -> ParsedDocument:
        """Parse a DOCX package: text, styled headings, sections, images, cover page."""
        page_count = _check_docx_package(data)

        try:
            doc = DocxDocument(io.BytesIO(data))
        except Exception as exc:
            raise ParseError(f"Failed to parse DOCX file: {exc}") from exc

        parts: List[str] = []
        positioned: List[PositionedHeading] = []
        offset = 0

        for para in _iter_paragraphs(doc):
            text = para.text
            level = _heading_level(para)
            heading_text = text.strip()
            if level and heading_text:
                lead = len(text) - len(text.lstrip())
                positioned.append(
                    PositionedHeading(
                        start=offset + lead,
                        end=offset + lead + len(heading_text),
                        heading=HeadingInfo(
                            level=level,
                            text=heading_text,
                            style=_heading_style(para),
                        ),
                    )
                )
            # Paragraphs are separated the way a raw-text extractor does it
            parts.append(text + "\n\n")
            offset += len(text) + 2

        full_text = "".join(parts)

        if not positioned:
            # No heading styles: fall back to the layout heuristic used for PDFs
            positioned = structure.detect_layout_headings(
                full_text, self.heading_max_length
            )

        images = _extract_docx_images(doc)
        sections = structure.build_sections(full_text, positioned)

        logger.info(
            "Parsed DOCX: %d headings, %d sections, %d images, %d words",
            len(positioned),
            len(sections),
            len(images),
            structure.count_words(full_text),
        )

        return ParsedDocument(
            text=full_text,
            cover_page_text=structure.slice_cover_page(
                full_text, self.cover_page_fallback
            ),
            headings=tuple(p.heading for p in positioned),
            sections=sections,
            styles=self.style_extractor.extract(data, DocumentType.DOCX),
            images=images,
            metadata=DocumentMetadata(
                page_count=page_count,
                word_count=structure.count_words(full_text),
                document_type=DocumentType.DOCX,
            ),
        )

    # ------------------------------------------------------------------
    # PDF
    # ------------------------------------------------------------------

    def parse_pdf(self, data: bytes) -> ParsedDocument:
        """Parse a PDF: page text, layout-heuristic headings and sections.

        No cover-page slicing and no image extraction for PDF input.
        """
        try:
            pdf = fitz.open(stream=data, filetype="pdf")
        except Exception as exc:
            raise ParseError(f"Failed to parse PDF file: {exc}") from exc

        try:
            if pdf.needs_pass:
                raise ParseError("Failed to parse PDF file: document is password-protected")
            page_count = pdf.page_count
            if page_count == 0:
                raise ParseError("Failed to parse PDF file: document has no pages")
            try:
                page_texts = [page.get_text() for page in pdf]
            except Exception as exc:
                raise ParseError(f"Failed to parse PDF file: {exc}") from exc
        finally:
            pdf.close()

        full_text = "\n\n".join(page_texts)
        positioned = structure.detect_layout_headings(full_text, self.heading_max_length)
        sections = structure.build_sections(full_text, positioned)

        logger.info(
            "Parsed PDF: %d pages, %d headings, %d sections",
            page_count,
            len(positioned),
            len(sections),
        )

        return ParsedDocument(
            text=full_text,
            headings=tuple(p.heading for p in positioned),
            sections=sections,
            styles=self.style_extractor.extract(data, DocumentType.PDF),
            images=(),
            metadata=DocumentMetadata(
                page_count=page_count,
                word_count=structure.count_words(full_text),
                document_type=DocumentType.PDF,
            ),
        )


# ---------------------------------------------------------------------------
# Module-level API
# ---------------------------------------------------------------------------

def parse_docx(data: bytes) -> ParsedDocument:
    return DocumentParser().parse_docx(data)


def parse_pdf(data: bytes) -> ParsedDocument:
    return DocumentParser().parse_pdf(data)


def extract_formatting(document: ParsedDocument) -> DocumentStyles:
    return document.styles


def extract_images(document: ParsedDocument) -> Tuple[ImageInfo, ...]:
    return document.images


# ---------------------------------------------------------------------------
# DOCX helpers
# ---------------------------------------------------------------------------

def _check_docx_package(data: bytes) -> int:
    """
    Verify ``data`` is a ZIP package with a main document part.

    Returns the page count recorded in the extended properties (0 if absent).
    """
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            names = set(archive.namelist())
            if WORD_DOCUMENT_PART not in names:
                raise ParseError("Invalid DOCX file: document.xml not found")
            if _APP_PROPERTIES_PART not in names:
                return 0
            app_xml = archive.read(_APP_PROPERTIES_PART).decode("utf-8", "replace")
    except zipfile.BadZipFile as exc:
        raise ParseError(f"Failed to parse DOCX file: {exc}") from exc

    match = _PAGES_RE.search(app_xml)
    return int(match.group(1)) if match else 0


def _iter_paragraphs(doc: DocumentObject) -> Iterator[Paragraph]:
    """Yield every paragraph in body order, descending into table cells."""
    yield from _iter_block_paragraphs(doc.element.body, doc)


def _iter_block_paragraphs(element, parent) -> Iterator[Paragraph]:
    for child in element.iterchildren():
        if isinstance(child, CT_P):
            yield Paragraph(child, parent)
        elif isinstance(child, CT_Tbl):
            table = Table(child, parent)
            seen = set()
            for row in table.rows:
                for cell in row.cells:
                    # Merged cells are returned once per grid column
                    if cell._tc in seen:
                        continue
                    seen.add(cell._tc)
                    yield from _iter_block_paragraphs(cell._tc, cell)


def _heading_level(para: Paragraph) -> int:
    """Heading level from the paragraph's style marker, 0 for non-headings."""
    candidates = [para._p.style]
    try:
        candidates.append(para.style.name if para.style is not None else None)
    except KeyError:
        pass

    for candidate in candidates:
        if not candidate:
            continue
        match = _HEADING_STYLE_RE.match(candidate.strip())
        if match:
            level = int(match.group(1))
            if level >= 1:
                return min(level, _MAX_HEADING_LEVEL)
    return 0


def _heading_style(para: Paragraph) -> Dict[str, Any]:
    """Alignment and font explicitly set on a heading paragraph, if any."""
    style: Dict[str, Any] = {}
    if para.alignment is not None:
        style["alignment"] = _alignment_name(para.alignment)

    run = next((r for r in para.runs if r.text.strip()), None)
    if run is not None and (run.font.name or run.font.size):
        style["font"] = FontInfo(
            name=run.font.name or "",
            size=run.font.size.pt if run.font.size else 0.0,
            bold=run.font.bold,
            italic=run.font.italic,
        )
    return style


def _alignment_name(alignment) -> str:
    name = str(getattr(alignment, "name", alignment)).lower()
    if name.startswith("justify"):
        return "justify"
    return name


def _extract_docx_images(doc: DocumentObject) -> Tuple[ImageInfo, ...]:
    """
    Resolve every embedded blip to its media part, in document order.

    Relationship ids that do not resolve to a part are skipped.
    """
    images: List[ImageInfo] = []
    related = doc.part.related_parts

    for blip in doc.element.body.iter(_BLIP_TAG):
        rid = blip.get(_EMBED_KEY)
        if not rid:
            continue
        part = related.get(rid)
        if part is None:
            logger.debug("Skipping dangling image relationship %s", rid)
            continue

        blob = part.blob
        width, height = _image_size(blob)
        images.append(
            ImageInfo(
                data=blob,
                format=part.partname.ext.lower() or "png",
                width=width,
                height=height,
            )
        )
    return tuple(images)


def _image_size(blob: bytes) -> Tuple[Optional[int], Optional[int]]:
    try:
        with Image.open(io.BytesIO(blob)) as img:
            return img.size
    except OSError as exc:
        logger.debug("Image header not readable: %s", exc)
        return None, None
