"""
Raw OOXML body splicing.

The template engine only fills what a template already declares, so free
prose and variable-length reference lists are built as a separate document
and their body markup is spliced into the rendered template's
``word/document.xml`` as text. The result is validated before the archive is
re-serialized; any failure raises AppendError.
"""
from __future__ import annotations

import io
import logging
import re
import zipfile

from assignment_docs.exceptions import AppendError
from assignment_docs.services.ooxml import PAGE_BREAK_PARAGRAPH_XML, WORD_DOCUMENT_PART

logger = logging.getLogger(__name__)

BODY_OPEN_RE = re.compile(r"<w:body(?:\s[^>]*)?>")
BODY_CLOSE = "</w:body>"
SECT_PR_OPEN = "<w:sectPr"
# "<w:body>" and "<w:body ...>" but not "<w:bodyPr>"
_BODY_OPEN_COUNT_RE = re.compile(r"<w:body[\s>/]")


def read_document_xml(docx_bytes: bytes) -> str:
    """Main document part of a DOCX package as text."""
    try:
        with zipfile.ZipFile(io.BytesIO(docx_bytes)) as archive:
            return archive.read(WORD_DOCUMENT_PART).decode("utf-8")
    except (zipfile.BadZipFile, KeyError, UnicodeDecodeError) as exc:
        raise AppendError(f"Cannot read {WORD_DOCUMENT_PART}: {exc}") from exc


def extract_body_inner(document_xml: str) -> str:
    """
    Markup between the body open tag and the last body close tag, without
    the trailing body-level section properties.
    """
    validate_body(document_xml, "Fragment")
    match = BODY_OPEN_RE.search(document_xml)
    end = document_xml.rfind(BODY_CLOSE)
    if match is None or end == -1 or end < match.end():
        raise AppendError("Fragment has no <w:body> element")

    inner = document_xml[match.end():end]
    sect = _trailing_sect_pr(inner)
    return inner if sect == -1 else inner[:sect]


def find_insertion_point(document_xml: str) -> int:
    """
    Offset where appended markup goes: before the trailing body-level
    ``<w:sectPr>`` if there is one, otherwise before the last ``</w:body>``.
    """
    end = document_xml.rfind(BODY_CLOSE)
    if end == -1:
        raise AppendError("Template document has no </w:body>")

    sect = _trailing_sect_pr(document_xml[:end])
    return end if sect == -1 else sect


def _trailing_sect_pr(body_xml: str) -> int:
    """Offset of a body-level <w:sectPr> ending ``body_xml``, or -1."""
    sect = body_xml.rfind(SECT_PR_OPEN)
    if sect == -1:
        return -1
    tail = body_xml[sect:]
    # A sectPr followed by more block content belongs to a paragraph
    if "</w:p>" in tail or "</w:tbl>" in tail:
        return -1
    return sect


def validate_body(document_xml: str, label: str = "Merged document") -> None:
    opens = len(_BODY_OPEN_COUNT_RE.findall(document_xml))
    closes = document_xml.count(BODY_CLOSE)
    if opens != 1 or closes != 1:
        raise AppendError(
            f"{label} has {opens} <w:body> and {closes} </w:body> tags"
        )


def splice_body(base_xml: str, fragment_xml: str) -> str:
    """Insert a page break and the fragment's body content into ``base_xml``."""
    inner = extract_body_inner(fragment_xml)
    at = find_insertion_point(base_xml)
    merged = base_xml[:at] + PAGE_BREAK_PARAGRAPH_XML + inner + base_xml[at:]
    validate_body(merged)
    return merged


def append_docx_content(base: bytes, fragment: bytes) -> bytes:
    """
    Append the body of ``fragment`` to the document in ``base``.

    Every archive entry is copied unchanged except the main document part,
    and the archive is rewritten with DEFLATE compression.

    Raises:
        AppendError: Either package is unreadable, the splice point cannot be
                     found, or the merged XML fails the body-tag check.
    """
    merged_xml = splice_body(read_document_xml(base), read_document_xml(fragment))

    output = io.BytesIO()
    try:
        with zipfile.ZipFile(io.BytesIO(base)) as source, zipfile.ZipFile(
            output, "w", zipfile.ZIP_DEFLATED
        ) as target:
            for item in source.infolist():
                if item.filename == WORD_DOCUMENT_PART:
                    target.writestr(item.filename, merged_xml.encode("utf-8"))
                else:
                    target.writestr(
                        item, source.read(item.filename), zipfile.ZIP_DEFLATED
                    )
    except zipfile.BadZipFile as exc:
        raise AppendError(f"Cannot rewrite package: {exc}") from exc

    data = output.getvalue()
    if not data:
        raise AppendError("Merged package is empty")

    logger.debug("Appended %d bytes of body markup", len(merged_xml))
    return data
