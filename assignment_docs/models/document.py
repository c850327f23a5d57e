"""
Data model shared by the parser and the rebuilders.

A ParsedDocument is produced fresh by every parse call and is never mutated
afterwards: all records are frozen dataclasses and every sequence is a tuple.
Callers that want to "edit" a document build new generation inputs from it.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple


DEFAULT_FONT_NAME = "Times New Roman"
DEFAULT_FONT_SIZE = 12.0     # points
DEFAULT_MARGIN = 1.0         # inches, all four sides
DEFAULT_LINE_SPACING = 1.5   # multiple of single spacing


class DocumentType(str, Enum):
    """Declared type of an uploaded document."""

    DOCX = "docx"
    PDF = "pdf"


class SectionType(str, Enum):
    """Closed classification of a document section; BODY is the fallback."""

    COVER_PAGE = "cover_page"
    INTRODUCTION = "introduction"
    METHODOLOGY = "methodology"
    RESULTS = "results"
    DISCUSSION = "discussion"
    CONCLUSION = "conclusion"
    REFERENCES = "references"
    ABSTRACT = "abstract"
    ACKNOWLEDGMENTS = "acknowledgments"
    BODY = "body"


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FontInfo:
    name: str
    size: float                     # points
    bold: Optional[bool] = None
    italic: Optional[bool] = None
    color: Optional[str] = None     # hex RGB, e.g. "1F3864"

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name, "size": self.size}
        for key in ("bold", "italic", "color"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data


@dataclass(frozen=True)
class MarginInfo:
    top: float = DEFAULT_MARGIN      # inches
    bottom: float = DEFAULT_MARGIN
    left: float = DEFAULT_MARGIN
    right: float = DEFAULT_MARGIN

    def to_dict(self) -> Dict[str, float]:
        return {
            "top": self.top,
            "bottom": self.bottom,
            "left": self.left,
            "right": self.right,
        }


@dataclass(frozen=True)
class SpacingInfo:
    line: float = DEFAULT_LINE_SPACING
    before: Optional[float] = None   # points
    after: Optional[float] = None    # points

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"line": self.line}
        if self.before is not None:
            data["before"] = self.before
        if self.after is not None:
            data["after"] = self.after
        return data


def _default_fonts() -> Dict[str, FontInfo]:
    return {"default": FontInfo(name=DEFAULT_FONT_NAME, size=DEFAULT_FONT_SIZE)}


@dataclass(frozen=True)
class DocumentStyles:
    """Best-effort document formatting; ``fonts["default"]`` drives the body font."""

    fonts: Mapping[str, FontInfo] = field(default_factory=_default_fonts)
    margins: MarginInfo = field(default_factory=MarginInfo)
    spacing: SpacingInfo = field(default_factory=SpacingInfo)

    @property
    def default_font(self) -> FontInfo:
        return self.fonts.get("default") or FontInfo(
            name=DEFAULT_FONT_NAME, size=DEFAULT_FONT_SIZE
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fonts": {name: font.to_dict() for name, font in self.fonts.items()},
            "margins": self.margins.to_dict(),
            "spacing": self.spacing.to_dict(),
        }


# ---------------------------------------------------------------------------
# Structure
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class HeadingInfo:
    level: int                                   # 1..6
    text: str
    style: Mapping[str, Any] = field(default_factory=dict)   # font / alignment when known


@dataclass(frozen=True)
class SectionInfo:
    title: Optional[str]
    content: str
    type: SectionType
    word_count: int


@dataclass(frozen=True)
class ImageInfo:
    data: bytes
    format: str                      # file extension of the media part: "png", "jpeg", ...
    width: Optional[int] = None      # pixels
    height: Optional[int] = None
    position: Optional[Mapping[str, Any]] = None


@dataclass(frozen=True)
class DocumentMetadata:
    page_count: int
    word_count: int
    document_type: DocumentType


@dataclass(frozen=True)
class ParsedDocument:
    """
    Output of DocumentParser.

    Attributes:
        text:             Full extracted plain text, in document order.
        cover_page_text:  Leading slice of ``text`` before the first content
                          marker (DOCX only).
        headings:         Detected headings, in document order.
        sections:         Never empty; a single BODY section when no heading
                          was detected.
        styles:           Formatting defaults (see StyleExtractor).
        images:           Embedded images (DOCX only).
        metadata:         Page count, word count and document type.
    """

    text: str
    headings: Tuple[HeadingInfo, ...]
    sections: Tuple[SectionInfo, ...]
    styles: DocumentStyles
    images: Tuple[ImageInfo, ...]
    metadata: DocumentMetadata
    cover_page_text: Optional[str] = None


@dataclass(frozen=True)
class MergeResult:
    """Outcome of a template merge.

    ``content_appended`` is False when there was nothing to append, or when
    generated content could not be spliced in. In the second case
    ``warning`` says why and ``document`` holds the template-only output.
    """

    document: bytes
    content_appended: bool
    warning: Optional[str] = None
