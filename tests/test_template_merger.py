"""Tests for template rendering and generated-content appending."""
import io

import pytest
from docx import Document

from assignment_docs.exceptions import TemplateError, TemplateNotFoundError, TemplateRenderError
from assignment_docs.models.schemas import AssignmentData
from assignment_docs.services.template_merger import TemplateMerger
from assignment_docs.services.template_registry import TemplateRegistry
from generate_templates import build_template
from tests.conftest import SAMPLE_ASSIGNMENT
from tests.factories import docx_bytes, document_xml, make_docx, paragraph_texts, rewrite_part


@pytest.fixture
def merger() -> TemplateMerger:
    return TemplateMerger()


def _texts(data: bytes) -> list:
    return [t for t in paragraph_texts(data) if t]


def _body_pairs(data: bytes) -> tuple:
    xml = document_xml(data)
    return xml.count("<w:body>"), xml.count("</w:body>")


# ---------------------------------------------------------------------------
# Variable map
# ---------------------------------------------------------------------------

def test_group_members_keep_partial_rows_in_order(merger):
    context = merger.prepare_template_data(
        {
            "group_members": [
                {"name": "", "registration_no": "X1"},
                {"name": "Jane", "registration_no": ""},
                {"name": " ", "registration_no": None},
            ]
        }
    )

    assert context["group_members"] == [
        {"sn": 1, "name": "", "registration_no": "X1", "phone_number": ""},
        {"sn": 2, "name": "Jane", "registration_no": "", "phone_number": ""},
    ]
    assert context["has_group_members"] is True


def test_member_and_representative_aliases(merger):
    context = merger.prepare_template_data(
        {
            "group_members": [
                {"name": "Ann", "registration_number": 42, "phone": "0700"},
            ],
            "group_representatives": [
                {"name": "Ben", "role": "Leader", "registration_number": "R7", "extra": 1},
            ],
        }
    )

    assert context["group_members"][0] == {
        "sn": 1,
        "name": "Ann",
        "registration_no": "42",
        "phone_number": "0700",
    }
    assert context["group_representatives"] == [
        {"name": "Ben", "role": "Leader", "registration_no": "R7"}
    ]


def test_defaults_and_flags(merger):
    context = merger.prepare_template_data({"task": "Essay on policy"})

    assert context["college_name"] == "Local Government Training Institute"
    assert context["college_code"] == "LGTI"
    assert context["title"] == "Essay on policy"
    assert context["task"] == "Essay on policy"
    assert context["is_group"] is False
    assert context["is_individual"] is True
    assert context["has_group_members"] is False
    assert context["has_representatives"] is False
    assert context["has_references"] is False
    assert context["references"] == ""
    assert context["submission_date"] == ""


def test_untitled_default_and_group_flag():
    merger = TemplateMerger(default_college_name="Other College", default_college_code="OC")
    context = merger.prepare_template_data({"type_of_work": "Group Assignment"})

    assert context["title"] == "Untitled Assignment"
    assert context["task"] == ""
    assert context["college_name"] == "Other College"
    assert context["is_group"] is True
    assert context["is_individual"] is False


def test_scalars_dates_references_and_extras(merger):
    context = merger.prepare_template_data(
        {
            "student_name": "  Jane  ",
            "submission_date": "2024-03-05",
            "references": [
                {"author": "Doe", "year": 2020, "title": "T", "source": "S"},
                {"title": "U", "source": "V", "url": "http://x"},
            ],
            "assignment_content": "## Heading\n\nLine.",
            "semester": 2,
        }
    )

    assert context["student_name"] == "Jane"
    assert context["submission_date"] == "05/03/2024"
    assert context["references"] == (
        "Doe. (2020). T. S.\nUnknown. (n.d.). U. V. Retrieved from http://x."
    )
    assert context["has_references"] is True
    assert context["assignment_content"] == "Heading\n\nLine."
    assert context["semester"] == "2"


def test_numeric_scalars_become_strings(merger):
    context = merger.prepare_template_data(
        {"registration_number": 12345, "module_code": 101, "group_number": 7}
    )

    assert context["registration_number"] == "12345"
    assert context["module_code"] == "101"
    assert context["group_number"] == "7"


def test_group_number_defaults_to_empty(merger):
    assert merger.prepare_template_data({})["group_number"] == ""

    result = merger.merge_template(make_docx(["Group {{ group_number }}"]), {})
    assert [t.strip() for t in _texts(result.document)] == ["Group"]


def test_assignment_references_key_is_accepted(merger):
    fields = {
        "assignment_references": [{"author": "Doe", "year": 2020, "title": "T", "source": "S"}]
    }
    context = merger.prepare_template_data(fields)

    assert context["has_references"] is True
    assert context["references"] == "Doe. (2020). T. S."
    assert "assignment_references" not in context

    result = merger.merge_template(make_docx(["Cover"]), fields)
    assert result.content_appended is True
    assert _texts(result.document)[-2:] == ["REFERENCES", "Doe. (2020). T. S."]


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

def test_template_only_merge(merger):
    template = make_docx(["Name: {{ student_name }}", "{{ title }}"])
    result = merger.merge_template(template, {"student_name": "A & B", "title": "T"})

    assert result.content_appended is False
    assert result.warning is None
    assert _texts(result.document) == ["Name: A & B", "T"]
    assert _body_pairs(result.document) == (1, 1)


def test_group_template_repeats_member_rows(merger):
    template = docx_bytes(build_template("group"))
    fields = dict(
        SAMPLE_ASSIGNMENT,
        type_of_work="Group Work",
        group_name="Team Alpha",
        group_members=[
            {"name": "Ann", "registration_no": "R1", "phone_number": "1"},
            {"name": "Ben", "registration_no": "R2"},
        ],
    )
    result = merger.merge_template(template, fields)

    doc = Document(io.BytesIO(result.document))
    rows = [[c.text for c in row.cells] for row in doc.tables[0].rows]
    assert rows == [
        ["S/N", "Name", "Registration No.", "Phone"],
        ["1", "Ann", "R1", "1"],
        ["2", "Ben", "R2", ""],
    ]
    assert "Group: Team Alpha" in _texts(result.document)


def test_undefined_variables_are_reported_together(merger):
    template = make_docx(["{{ unknown_one }}", "{{ title }}", "{{ unknown_two }}"])

    with pytest.raises(TemplateRenderError) as info:
        merger.merge_template(template, {})

    assert info.value.errors == [
        "UndefinedError: 'unknown_one' is not defined",
        "UndefinedError: 'unknown_two' is not defined",
    ]
    assert str(info.value).startswith("Template rendering error:\n")


def test_syntax_error_is_a_render_error(merger):
    template = make_docx(["{% if title %}", "never closed"])

    with pytest.raises(TemplateRenderError) as info:
        merger.merge_template(template, {"title": "x"})

    assert info.value.errors[0].startswith("TemplateSyntaxError")


def test_empty_or_unreadable_template(merger):
    with pytest.raises(TemplateError):
        merger.merge_template(b"", {})
    with pytest.raises(TemplateError):
        merger.merge_template(b"not a docx", {})


# ---------------------------------------------------------------------------
# Appending
# ---------------------------------------------------------------------------

def test_content_and_references_are_appended(merger):
    template = make_docx(["Cover for {{ student_name }}"])
    fields = {
        "student_name": "Jane",
        "assignment_content": "## Introduction\nFirst body line.\nSecond body line.",
        "references": [{"authors": "Doe", "year": 2020, "title": "T", "source": "S"}],
    }
    result = merger.merge_template(template, fields)

    assert result.content_appended is True
    assert result.warning is None
    assert _texts(result.document) == [
        "Cover for Jane",
        "First body line.",
        "Second body line.",
        "REFERENCES",
        "Doe. (2020). T. S.",
    ]
    assert _body_pairs(result.document) == (1, 1)
    assert document_xml(result.document).rstrip().endswith("</w:sectPr></w:body></w:document>")


def test_fragment_uses_requested_font(merger):
    fragment = merger.build_content_fragment(
        AssignmentData(assignment_content="Body.", font_family="Arial", font_size=14)
    )
    run = Document(io.BytesIO(fragment)).paragraphs[0].runs[0]

    assert run.font.name == "Arial"
    assert run.font.size.pt == 14


def test_no_fragment_without_content(merger):
    assert merger.build_content_fragment({"assignment_content": "  \n "}) is None


def test_failed_append_falls_back_to_template_only(merger, monkeypatch):
    broken = rewrite_part(
        make_docx(["junk"]),
        "word/document.xml",
        lambda xml: xml.replace("</w:body>", "</w:body></w:body>"),
    )
    monkeypatch.setattr(merger, "build_content_fragment", lambda fields: broken)

    template = make_docx(["{{ title }}"])
    result = merger.merge_template(template, {"title": "Kept", "assignment_content": "x"})

    assert result.content_appended is False
    assert "could not be appended" in result.warning
    assert _texts(result.document) == ["Kept"]
    assert _body_pairs(result.document) == (1, 1)


# ---------------------------------------------------------------------------
# Template lookup
# ---------------------------------------------------------------------------

def test_generate_from_college_template(merger, registry):
    result = merger.generate_from_template(registry, "lgti", "individual", SAMPLE_ASSIGNMENT)

    texts = _texts(result.document)
    assert "Institute of Testing" in texts
    assert "Student: Jane Student" in texts
    assert "Submission Date: 05/03/2024" in texts


def test_generate_falls_back_to_default_template(merger, registry):
    result = merger.generate_from_template(registry, "XYZ", "group", SAMPLE_ASSIGNMENT)
    assert "Local Governance" in _texts(result.document)


def test_generate_without_templates(merger, tmp_path):
    with pytest.raises(TemplateNotFoundError):
        merger.generate_from_template(
            TemplateRegistry(tmp_path), "LGTI", "individual", SAMPLE_ASSIGNMENT
        )
