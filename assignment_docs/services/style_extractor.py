"""
Formatting extraction extension point.

Neither parser reads real style definitions yet: DefaultStyleExtractor returns
fixed defaults (Times New Roman 12pt, 1in margins, 1.5 line spacing) for
every input. A real extractor (styles.xml / sectPr for DOCX, font statistics
for PDF) can be passed to DocumentParser without changing ParsedDocument.
"""
from __future__ import annotations

from typing import Protocol

from assignment_docs.models.document import (
    DEFAULT_FONT_NAME,
    DEFAULT_FONT_SIZE,
    DEFAULT_LINE_SPACING,
    DEFAULT_MARGIN,
    DocumentStyles,
    DocumentType,
    FontInfo,
    MarginInfo,
    SpacingInfo,
)


class StyleExtractor(Protocol):
    def extract(self, data: bytes, document_type: DocumentType) -> DocumentStyles:
        """Return best-effort formatting for the raw document bytes."""
        ...


class DefaultStyleExtractor:
    """Returns the same fixed defaults for every document."""

    def extract(self, data: bytes, document_type: DocumentType) -> DocumentStyles:
        return DocumentStyles(
            fonts={"default": FontInfo(name=DEFAULT_FONT_NAME, size=DEFAULT_FONT_SIZE)},
            margins=MarginInfo(
                top=DEFAULT_MARGIN,
                bottom=DEFAULT_MARGIN,
                left=DEFAULT_MARGIN,
                right=DEFAULT_MARGIN,
            ),
            spacing=SpacingInfo(line=DEFAULT_LINE_SPACING),
        )
