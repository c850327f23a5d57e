"""
Structure-driven DOCX generation.

Lays a cover page, the generated prose for each declared section and a
reference list into a fresh document. Missing optional inputs (no cover page,
no formatting, no content for a section) degrade to defaults or omission;
only serialization failures propagate.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from assignment_docs.models.document import DocumentStyles, ImageInfo, SectionType
from assignment_docs.models.schemas import (
    CoverPageElement,
    CoverPageStructure,
    DocumentStructure,
    SectionStructure,
)
from assignment_docs.services import ooxml
from assignment_docs.utils.helpers import coerce_str

logger = logging.getLogger(__name__)

PLACEHOLDER_TEXT = "Document content"
COVER_ELEMENT_SPACE_AFTER = 15.0     # points
SECTION_SPACER_AFTER = 10.0          # points

_TOP_LEVEL_SECTIONS = {SectionType.INTRODUCTION.value, SectionType.CONCLUSION.value}

# Per element type: keys tried in the cover-page map, then in the outer field map
COVER_FIELD_LOOKUPS: Dict[str, Tuple[Tuple[str, ...], Tuple[str, ...]]] = {
    "title": (("assignment_title", "title", "task"), ("title", "task")),
    "student_name": (("student_name", "studentName"), ("student_name",)),
    "registration_number": (
        ("registration_number", "registrationNumber"),
        ("registration_number",),
    ),
    "college_name": (("college_name", "collegeName"), ("college_name",)),
    "course_name": (("course_name", "courseName", "module_name"), ("course_name",)),
    "course_code": (("course_code", "courseCode", "module_code"), ("course_code",)),
    "instructor_name": (("instructor_name", "instructor"), ("instructor_name",)),
    "submission_date": (("submission_date", "submissionDate"), ("submission_date",)),
    "group_name": (("group_name", "groupName"), ("group_name",)),
}


def resolve_cover_value(
    element: CoverPageElement, fields: Optional[Mapping[str, Any]]
) -> str:
    """
    Value rendered for a cover-page element.

    Tries the element type's lookup chain against ``cover_page_data`` (or
    ``coverPageData``) and then the outer field map. Falls back to the
    element's original text, then its label, so unmapped fields survive
    verbatim.
    """
    fields = fields or {}
    cover = fields.get("cover_page_data") or fields.get("coverPageData") or {}

    cover_keys, field_keys = COVER_FIELD_LOOKUPS.get(element.type, ((), ()))
    for source, keys in ((cover, cover_keys), (fields, field_keys)):
        for key in keys:
            value = coerce_str(source.get(key))
            if value:
                return value

    return coerce_str(element.text) or coerce_str(element.label)


class DocumentRebuilder:
    """Builds DOCX bytes from a DocumentStructure and generated section text."""

    def rebuild(
        self,
        structure: DocumentStructure,
        generated_content: Mapping[str, str],
        formatting: Optional[DocumentStyles] = None,
        images: Sequence[ImageInfo] = (),
        assignment_data: Optional[Mapping[str, Any]] = None,
    ) -> bytes:
        """
        Generate a document.

        Args:
            structure:         Cover page and declared sections, in order.
            generated_content: Prose keyed by section type or title; the
                               ``references`` key holds newline-separated
                               reference lines.
            formatting:        Page geometry and body font (defaults when None).
            images:            Images from the parsed source; not placed yet.
            assignment_data:   Field map used to fill cover-page elements.

        Returns:
            DOCX bytes.
        """
        styles = formatting or DocumentStyles()
        font = styles.default_font
        doc = ooxml.new_document(styles)
        written = 0

        if structure.cover_page is not None:
            written += self._write_cover_page(
                doc, structure.cover_page, font, assignment_data
            )

        for section in structure.sections:
            if section.type == SectionType.REFERENCES.value:
                continue
            written += self._write_section(
                doc, section, generated_content, font, styles.spacing.line
            )

        references = (generated_content.get("references") or "").split("\n")
        written += ooxml.add_references_section(doc, references, font)

        if images:
            logger.info("Image placement not supported; %d image(s) ignored", len(images))

        if written == 0:
            ooxml.add_text_paragraph(doc, PLACEHOLDER_TEXT, font)

        data = ooxml.document_to_bytes(doc)
        logger.info(
            "Rebuilt document: %d sections declared, %d paragraphs, %d bytes",
            len(structure.sections),
            written,
            len(data),
        )
        return data

    # ------------------------------------------------------------------
    # Cover page
    # ------------------------------------------------------------------

    def _write_cover_page(self, doc, cover: CoverPageStructure, font, fields) -> int:
        alignment = "center" if cover.layout == "centered" else "left"
        written = 0

        for element in cover.elements:
            if element.type == "logo":
                logger.info("Cover page logo (%s) is not rendered", cover.logo_position)
                continue

            value = resolve_cover_value(element, fields)
            if not value:
                continue

            is_title = element.type == "title"
            ooxml.add_text_paragraph(
                doc,
                value,
                font,
                bold=is_title,
                size_delta=ooxml.HEADING_SIZE_DELTA if is_title else 0.0,
                alignment=alignment,
                space_after=COVER_ELEMENT_SPACE_AFTER,
            )
            written += 1

        if written:
            ooxml.add_page_break(doc)
        return written

    # ------------------------------------------------------------------
    # Body
    # ------------------------------------------------------------------

    def _write_section(
        self,
        doc,
        section: SectionStructure,
        generated_content: Mapping[str, str],
        font,
        line_spacing: float,
    ) -> int:
        content = generated_content.get(section.type)
        if not content and section.title:
            content = generated_content.get(section.title)
        if not content or not content.strip():
            return 0

        written = 0
        if section.title:
            level = 1 if section.type in _TOP_LEVEL_SECTIONS else 2
            ooxml.add_heading_paragraph(doc, section.title, level, font)
            written += 1

        written += ooxml.add_content_paragraphs(doc, content, font, line_spacing)
        ooxml.add_text_paragraph(doc, "", font, space_after=SECTION_SPACER_AFTER)
        return written


def rebuild(
    structure: DocumentStructure,
    generated_content: Mapping[str, str],
    formatting: Optional[DocumentStyles] = None,
    images: Sequence[ImageInfo] = (),
    assignment_data: Optional[Mapping[str, Any]] = None,
) -> bytes:
    return DocumentRebuilder().rebuild(
        structure, generated_content, formatting, images, assignment_data
    )
