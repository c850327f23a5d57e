"""
OOXML primitives: paragraph and run construction on top of python-docx.

Both the structure rebuilder and the template merger's content fragment are
assembled from these helpers, so generated prose and reference lists look the
same whichever path produced the document.
"""
from __future__ import annotations

import io
import re
import zipfile
from typing import Optional, Sequence

from docx import Document
from docx.document import Document as DocumentObject
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Inches, Pt
from docx.text.paragraph import Paragraph

from assignment_docs.models.document import DocumentStyles, FontInfo


WORD_DOCUMENT_PART = "word/document.xml"
PAGE_BREAK_PARAGRAPH_XML = '<w:p><w:r><w:br w:type="page"/></w:r></w:p>'

HEADING_SIZE_DELTA = 2.0          # points added to the body size for headings and titles
HANGING_INDENT = Inches(0.5)
FIRST_LINE_HANGING = Inches(-0.5)

# A chunk that only repeats a section name is dropped from generated prose
SECTION_ECHO_RE = re.compile(
    r"^(Introduction|Intro|Body|Body Paragraphs?|Conclusion|Concluding"
    r"|Methodology|Results|Discussion|References)$",
    re.IGNORECASE,
)
_PARAGRAPH_BREAK_RE = re.compile(r"\n\s*\n")

ALIGNMENTS = {
    "left": WD_ALIGN_PARAGRAPH.LEFT,
    "center": WD_ALIGN_PARAGRAPH.CENTER,
    "right": WD_ALIGN_PARAGRAPH.RIGHT,
    "justify": WD_ALIGN_PARAGRAPH.JUSTIFY,
}


def new_document(styles: Optional[DocumentStyles] = None) -> DocumentObject:
    """
    Create an empty document with page margins, body font and line spacing
    taken from ``styles`` (defaults when None).
    """
    styles = styles or DocumentStyles()
    doc = Document()

    for section in doc.sections:
        section.top_margin = Inches(styles.margins.top)
        section.bottom_margin = Inches(styles.margins.bottom)
        section.left_margin = Inches(styles.margins.left)
        section.right_margin = Inches(styles.margins.right)

    normal = doc.styles["Normal"]
    normal.font.name = styles.default_font.name
    normal.font.size = Pt(styles.default_font.size)
    normal.paragraph_format.line_spacing = styles.spacing.line
    return doc


def add_text_paragraph(
    doc: DocumentObject,
    text: str,
    font: FontInfo,
    *,
    bold: bool = False,
    size_delta: float = 0.0,
    alignment: Optional[str] = None,
    space_before: Optional[float] = None,
    space_after: Optional[float] = None,
    line_spacing: Optional[float] = None,
    style: Optional[str] = None,
) -> Paragraph:
    """Append a single-run paragraph. Spacing arguments are in points."""
    paragraph = doc.add_paragraph(style=style)
    run = paragraph.add_run(text)
    run.font.name = font.name
    run.font.size = Pt(font.size + size_delta)
    if bold:
        run.bold = True

    if alignment is not None:
        paragraph.alignment = ALIGNMENTS[alignment]
    fmt = paragraph.paragraph_format
    if space_before is not None:
        fmt.space_before = Pt(space_before)
    if space_after is not None:
        fmt.space_after = Pt(space_after)
    if line_spacing is not None:
        fmt.line_spacing = line_spacing
    return paragraph


def add_heading_paragraph(
    doc: DocumentObject, text: str, level: int, font: FontInfo
) -> Paragraph:
    """Append a ``Heading <level>`` paragraph, bold and slightly larger than body text."""
    return add_text_paragraph(
        doc,
        text,
        font,
        bold=True,
        size_delta=HEADING_SIZE_DELTA,
        space_before=20,
        space_after=10,
        style=f"Heading {level}",
    )


def add_page_break(doc: DocumentObject) -> None:
    doc.add_page_break()


def add_content_paragraphs(
    doc: DocumentObject, content: str, font: FontInfo, line_spacing: float
) -> int:
    """
    Split ``content`` on blank lines and emit one justified paragraph per chunk.

    Chunks that are only a section name are skipped. Returns the number of
    paragraphs written.
    """
    written = 0
    for chunk in _PARAGRAPH_BREAK_RE.split(content):
        text = chunk.strip()
        if not text or SECTION_ECHO_RE.match(text):
            continue
        add_text_paragraph(
            doc,
            text,
            font,
            alignment="justify",
            space_after=round(line_spacing * 12, 2),
            line_spacing=line_spacing,
        )
        written += 1
    return written


def add_references_section(
    doc: DocumentObject, references: Sequence[str], font: FontInfo
) -> int:
    """
    Page break, centered bold "REFERENCES" heading, then one hanging-indent
    paragraph per non-empty reference line. Returns the number of entries.
    """
    entries = [ref.strip() for ref in references if ref and ref.strip()]
    if not entries:
        return 0

    add_page_break(doc)
    add_text_paragraph(
        doc,
        "REFERENCES",
        font,
        bold=True,
        size_delta=HEADING_SIZE_DELTA,
        alignment="center",
        space_before=20,
        space_after=20,
    )
    for entry in entries:
        paragraph = add_text_paragraph(doc, entry, font, space_after=10)
        paragraph.paragraph_format.left_indent = HANGING_INDENT
        paragraph.paragraph_format.first_line_indent = FIRST_LINE_HANGING
    return len(entries)


def document_to_bytes(doc: DocumentObject) -> bytes:
    buffer = io.BytesIO()
    doc.save(buffer)
    return buffer.getvalue()


def read_part_text(docx_bytes: bytes, part: str = WORD_DOCUMENT_PART) -> str:
    """Read one XML part of a DOCX package as UTF-8 text."""
    with zipfile.ZipFile(io.BytesIO(docx_bytes)) as archive:
        return archive.read(part).decode("utf-8")
