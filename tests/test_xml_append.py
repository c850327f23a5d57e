"""Tests for raw body splicing of DOCX document parts."""
import io
import zipfile

import pytest

from assignment_docs.exceptions import AppendError
from assignment_docs.services.ooxml import PAGE_BREAK_PARAGRAPH_XML
from assignment_docs.services.xml_append import (
    append_docx_content,
    extract_body_inner,
    find_insertion_point,
    splice_body,
    validate_body,
)
from tests.factories import document_xml, make_docx, paragraph_texts, rewrite_part

BASE = (
    '<w:document><w:body><w:p>A</w:p>'
    '<w:sectPr><w:pgSz w:w="11906"/></w:sectPr></w:body></w:document>'
)
FRAGMENT = '<w:document><w:body><w:p>B</w:p><w:sectPr/></w:body></w:document>'


def test_splice_inserts_before_trailing_section_properties():
    merged = splice_body(BASE, FRAGMENT)

    assert merged == (
        '<w:document><w:body><w:p>A</w:p>'
        + PAGE_BREAK_PARAGRAPH_XML
        + '<w:p>B</w:p>'
        + '<w:sectPr><w:pgSz w:w="11906"/></w:sectPr></w:body></w:document>'
    )


def test_fragment_section_properties_are_dropped():
    assert extract_body_inner(FRAGMENT) == "<w:p>B</w:p>"


def test_paragraph_level_section_properties_are_not_a_splice_point():
    base = (
        "<w:document><w:body>"
        "<w:p><w:pPr><w:sectPr/></w:pPr></w:p><w:p>X</w:p>"
        "</w:body></w:document>"
    )
    assert find_insertion_point(base) == base.rindex("</w:body>")


def test_body_open_tag_with_attributes():
    fragment = '<w:document><w:body w:foo="1"><w:p>C</w:p></w:body></w:document>'
    assert extract_body_inner(fragment) == "<w:p>C</w:p>"


def test_validate_body_ignores_body_pr():
    validate_body("<w:body><w:bodyPr/><w:p/></w:body>")


def test_stray_closing_tag_in_fragment_is_rejected():
    fragment = (
        "<w:document><w:body><w:p>B</w:p></w:body>"
        "<w:p>junk</w:p></w:body></w:document>"
    )
    with pytest.raises(AppendError):
        splice_body(BASE, fragment)


def test_stray_closing_tag_after_section_properties_is_rejected():
    fragment = FRAGMENT.replace("</w:body>", "</w:body></w:body>")
    with pytest.raises(AppendError):
        extract_body_inner(fragment)
    with pytest.raises(AppendError):
        splice_body(BASE, fragment)


def test_stray_closing_tag_in_fragment_package_is_rejected():
    fragment = rewrite_part(
        make_docx(["junk"]),
        "word/document.xml",
        lambda xml: xml.replace("</w:body>", "</w:body></w:body>"),
    )
    with pytest.raises(AppendError):
        append_docx_content(make_docx(["Cover"]), fragment)


def test_fragment_without_body_is_rejected():
    with pytest.raises(AppendError):
        extract_body_inner("<w:document/>")


def test_append_docx_content_produces_valid_package():
    merged = append_docx_content(make_docx(["Cover"]), make_docx(["Appended"]))

    xml = document_xml(merged)
    assert xml.count("<w:body>") == 1
    assert xml.count("</w:body>") == 1
    assert xml.rstrip().endswith("</w:sectPr></w:body></w:document>")
    assert [t for t in paragraph_texts(merged) if t] == ["Cover", "Appended"]

    with zipfile.ZipFile(io.BytesIO(merged)) as archive:
        assert archive.testzip() is None
        info = archive.getinfo("word/document.xml")
        assert info.compress_type == zipfile.ZIP_DEFLATED


def test_append_docx_content_rejects_unreadable_package():
    with pytest.raises(AppendError):
        append_docx_content(b"not a zip", make_docx(["x"]))
