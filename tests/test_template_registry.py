"""Tests for template lookup and listing."""
import pytest

from assignment_docs.exceptions import TemplateNotFoundError
from assignment_docs.services.template_registry import TemplateRegistry
from tests.factories import make_docx


def test_college_code_is_matched_case_insensitively(registry, template_dir):
    path = registry.get_template_path("lgti", "INDIVIDUAL")
    assert path == template_dir / "LGTI_individual.docx"


def test_unknown_college_falls_back_to_default(registry, template_dir):
    assert registry.get_template_path("XYZ", "group") == template_dir / "default_group.docx"
    assert registry.get_template_path("  ", "group") == template_dir / "default_group.docx"


def test_missing_template_and_default(tmp_path):
    (tmp_path / "LGTI_individual.docx").write_bytes(make_docx(["x"]))
    registry = TemplateRegistry(tmp_path)

    with pytest.raises(TemplateNotFoundError):
        registry.get_template_path("LGTI", "group")


def test_unknown_template_type(registry):
    with pytest.raises(ValueError):
        registry.get_template_path("LGTI", "thesis")


def test_lock_files_are_ignored(tmp_path):
    (tmp_path / "~$LGTI_group.docx").write_bytes(b"lock")
    registry = TemplateRegistry(tmp_path)

    assert registry.list_templates() == []
    with pytest.raises(TemplateNotFoundError):
        registry.get_template_path("~$LGTI", "group")


def test_list_templates(registry, template_dir):
    (template_dir / "notes.docx").write_bytes(make_docx(["not a template"]))
    (template_dir / "kcc_Group.DOCX").write_bytes(make_docx(["x"]))

    listed = {(t.college_code, t.template_type, t.filename) for t in registry.list_templates()}
    assert listed == {
        ("LGTI", "individual", "LGTI_individual.docx"),
        ("DEFAULT", "individual", "default_individual.docx"),
        ("DEFAULT", "group", "default_group.docx"),
        ("KCC", "group", "kcc_Group.DOCX"),
    }
    info = next(t for t in registry.list_templates() if t.college_code == "KCC")
    assert info.size > 0
    assert info.path == str(template_dir / "kcc_Group.DOCX")


def test_missing_directory_lists_nothing(tmp_path):
    assert TemplateRegistry(tmp_path / "nope").list_templates() == []
