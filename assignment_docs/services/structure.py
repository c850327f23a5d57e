"""
Content heuristics shared by the DOCX and PDF parsers.

Everything here works on plain extracted text: section classification by
keyword, the canonical word count, layout-based heading detection, section
assembly by character offsets, and cover-page slicing.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from assignment_docs.models.document import HeadingInfo, SectionInfo, SectionType

# Lines at or above this length are never treated as layout headings
HEADING_MAX_LENGTH = 100

# Paragraphs kept as cover page when no content marker is found
COVER_PAGE_FALLBACK_PARAGRAPHS = 8

_NUMBERED_HEADING_RE = re.compile(r"^\d+[.)]\s+[A-Z]")
_SECTION_KEYWORD_RE = re.compile(
    r"^(INTRODUCTION|METHODOLOGY|RESULTS|DISCUSSION|CONCLUSION|REFERENCES)",
    re.IGNORECASE,
)
_CONTENT_START_RE = re.compile(
    r"^(QUESTION|INTRODUCTION|CONTENT|BODY|ABSTRACT|ACKNOWLEDGMENTS)",
    re.IGNORECASE,
)
_PARAGRAPH_BREAK_RE = re.compile(r"\n\s*\n")

# Checked in order; the first keyword contained in the title wins
_SECTION_KEYWORDS: Tuple[Tuple[SectionType, Tuple[str, ...]], ...] = (
    (SectionType.COVER_PAGE, ("cover", "title page")),
    (SectionType.INTRODUCTION, ("introduction", "intro")),
    (SectionType.METHODOLOGY, ("methodology", "methods")),
    (SectionType.RESULTS, ("results", "findings")),
    (SectionType.DISCUSSION, ("discussion",)),
    (SectionType.CONCLUSION, ("conclusion",)),
    (SectionType.REFERENCES, ("reference", "bibliography")),
    (SectionType.ABSTRACT, ("abstract",)),
    (SectionType.ACKNOWLEDGMENTS, ("acknowledgment", "acknowledgement")),
)


@dataclass(frozen=True)
class PositionedHeading:
    """A heading together with its ``[start, end)`` span inside the document text."""

    start: int
    end: int
    heading: HeadingInfo


def count_words(text: str) -> int:
    """Number of non-empty whitespace-delimited tokens."""
    return len(text.split())


def classify_section(title: Optional[str]) -> SectionType:
    """Map a heading's text to a SectionType by keyword; BODY when nothing matches."""
    if not title:
        return SectionType.BODY

    lowered = title.lower()
    for section_type, keywords in _SECTION_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return section_type
    return SectionType.BODY


def is_layout_heading(line: str, max_length: int = HEADING_MAX_LENGTH) -> bool:
    """
    Heading heuristic for text without style information.

    A trimmed line shorter than ``max_length`` qualifies when it is fully
    upper-case, starts like a numbered heading ("2. Method", "3) Results"),
    or starts with a known academic section keyword.
    """
    if not line or len(line) >= max_length:
        return False
    return (
        line.isupper()
        or bool(_NUMBERED_HEADING_RE.match(line))
        or bool(_SECTION_KEYWORD_RE.match(line))
    )


def detect_layout_headings(
    text: str, max_length: int = HEADING_MAX_LENGTH
) -> List[PositionedHeading]:
    """
    Scan ``text`` line by line and return every layout heading with its offsets.

    Level is 1 for all-caps lines and 2 otherwise.
    """
    found: List[PositionedHeading] = []
    offset = 0
    for raw_line in text.split("\n"):
        start = offset
        offset += len(raw_line) + 1

        line = raw_line.strip()
        if not is_layout_heading(line, max_length):
            continue

        lead = len(raw_line) - len(raw_line.lstrip())
        found.append(
            PositionedHeading(
                start=start + lead,
                end=start + lead + len(line),
                heading=HeadingInfo(level=1 if line.isupper() else 2, text=line),
            )
        )
    return found


def _content_lines(chunk: str) -> str:
    return "".join(f"{line.strip()}\n" for line in chunk.split("\n") if line.strip())


def build_sections(
    text: str, headings: Sequence[PositionedHeading]
) -> Tuple[SectionInfo, ...]:
    """
    Slice ``text`` into sections at heading offsets.

    Text before the first heading belongs to the cover page and is not part of
    any section. Section content is every non-empty trimmed line between the
    end of its heading and the start of the next one, each followed by a
    newline. With no headings the result is a single BODY section holding the
    whole text.
    """
    if not headings:
        return (
            SectionInfo(
                title=None,
                content=text,
                type=SectionType.BODY,
                word_count=count_words(text),
            ),
        )

    ordered = sorted(headings, key=lambda h: h.start)
    sections: List[SectionInfo] = []
    for index, positioned in enumerate(ordered):
        stop = ordered[index + 1].start if index + 1 < len(ordered) else len(text)
        content = _content_lines(text[positioned.end:stop])
        title = positioned.heading.text
        sections.append(
            SectionInfo(
                title=title,
                content=content,
                type=classify_section(title),
                word_count=count_words(content),
            )
        )
    return tuple(sections)


def split_paragraphs(text: str) -> List[str]:
    """Split on blank-line boundaries, dropping blank chunks."""
    return [chunk for chunk in _PARAGRAPH_BREAK_RE.split(text) if chunk.strip()]


def slice_cover_page(
    text: str, fallback_paragraphs: int = COVER_PAGE_FALLBACK_PARAGRAPHS
) -> Optional[str]:
    """
    Return the paragraphs preceding the first content marker
    (QUESTION, INTRODUCTION, CONTENT, BODY, ABSTRACT, ACKNOWLEDGMENTS).

    When no marker exists the first ``fallback_paragraphs`` paragraphs are
    used. Returns None when the slice is empty.
    """
    paragraphs = split_paragraphs(text)
    end = next(
        (i for i, p in enumerate(paragraphs) if _CONTENT_START_RE.match(p.strip())),
        min(fallback_paragraphs, len(paragraphs)),
    )
    cover = "\n\n".join(paragraphs[:end])
    return cover or None
