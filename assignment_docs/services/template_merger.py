"""
Template merging: DOCX template + assignment field map -> DOCX bytes.

Phase 1 renders the template with docxtpl (Jinja2 tags inside the DOCX)
against a normalized variable map. Phase 2 builds the free-form assignment
content and reference list as a separate document and splices its body into
the rendered template. Phase 2 is best-effort: when it fails the template-only
document is returned and the MergeResult says so.
"""
from __future__ import annotations

import io
import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from docxtpl import DocxTemplate
from jinja2 import TemplateError as JinjaTemplateError
from jinja2 import TemplateSyntaxError
from lxml import etree

from assignment_docs.exceptions import TemplateError, TemplateRenderError
from assignment_docs.models.document import (
    DEFAULT_FONT_NAME,
    DEFAULT_FONT_SIZE,
    DocumentStyles,
    FontInfo,
    MergeResult,
)
from assignment_docs.models.schemas import AssignmentData, GroupMember, Representative
from assignment_docs.services import ooxml
from assignment_docs.services.template_registry import TemplateRegistry
from assignment_docs.services.xml_append import append_docx_content
from assignment_docs.utils.helpers import (
    clean_content,
    coerce_str,
    first_present,
    format_date,
    format_reference,
)

logger = logging.getLogger(__name__)

DEFAULT_COLLEGE_NAME = "Local Government Training Institute"
DEFAULT_COLLEGE_CODE = "LGTI"
DEFAULT_TITLE = "Untitled Assignment"

FieldMap = Union[AssignmentData, Mapping[str, Any], None]

# Plain fields copied into the variable map as stripped strings
_STRING_FIELDS = (
    "program_name",
    "module_name",
    "module_code",
    "course_name",
    "course_code",
    "instructor_name",
    "student_name",
    "registration_number",
    "group_name",
    "group_number",
    "type_of_work",
)


def _as_assignment_data(fields: FieldMap) -> AssignmentData:
    if isinstance(fields, AssignmentData):
        return fields
    return AssignmentData.model_validate(dict(fields or {}))


class TemplateMerger:
    """Renders templates and appends generated content to them."""

    def __init__(
        self,
        default_college_name: str = DEFAULT_COLLEGE_NAME,
        default_college_code: str = DEFAULT_COLLEGE_CODE,
    ) -> None:
        self.default_college_name = default_college_name
        self.default_college_code = default_college_code

    # ------------------------------------------------------------------
    # Variable map
    # ------------------------------------------------------------------

    def prepare_template_data(self, fields: FieldMap) -> Dict[str, Any]:
        """
        Normalize a field map into the variables a template is rendered with.

        Scalars become stripped strings, the submission date is formatted
        DD/MM/YYYY, member and representative lists are reshaped to fixed keys
        and presence flags are derived from the raw lists.
        """
        data = _as_assignment_data(fields)

        context: Dict[str, Any] = {}
        for key, value in (data.model_extra or {}).items():
            if isinstance(value, (list, dict)):
                context[key] = value
            else:
                context[key] = coerce_str(value)

        for key in _STRING_FIELDS:
            context[key] = coerce_str(getattr(data, key))

        task = coerce_str(data.task)
        title = coerce_str(data.title)
        is_group = "group" in coerce_str(data.type_of_work).lower()

        context.update(
            college_name=coerce_str(data.college_name) or self.default_college_name,
            college_code=coerce_str(data.college_code) or self.default_college_code,
            task=task or title,
            title=title or task or DEFAULT_TITLE,
            submission_date=format_date(data.submission_date),
            group_members=self._group_members(data.group_members),
            group_representatives=self._representatives(data.group_representatives),
            assignment_content=clean_content(data.assignment_content),
            references="\n".join(format_reference(r) for r in data.references),
            font_family=coerce_str(data.font_family),
            font_size=coerce_str(data.font_size),
            cover_page_data=data.cover_page_data or {},
            is_group=is_group,
            is_individual=not is_group,
            has_group_members=len(data.group_members) > 0,
            has_representatives=len(data.group_representatives) > 0,
            has_references=len(data.references) > 0,
        )
        return context

    @staticmethod
    def _group_members(members: List[Mapping[str, Any]]) -> List[Dict[str, Any]]:
        # Rows with neither a name nor a registration number are dropped
        kept = [
            m
            for m in members
            if coerce_str(m.get("name"))
            or first_present(m, "registration_no", "registration_number")
        ]
        return [
            GroupMember(
                sn=index,
                name=coerce_str(m.get("name")),
                registration_no=first_present(m, "registration_no", "registration_number"),
                phone_number=first_present(m, "phone_number", "phone"),
            ).model_dump()
            for index, m in enumerate(kept, start=1)
        ]

    @staticmethod
    def _representatives(reps: List[Mapping[str, Any]]) -> List[Dict[str, Any]]:
        return [
            Representative(
                name=coerce_str(r.get("name")),
                role=coerce_str(r.get("role")),
                registration_no=first_present(r, "registration_no", "registration_number"),
            ).model_dump()
            for r in reps
        ]

    # ------------------------------------------------------------------
    # Phase 1: template rendering
    # ------------------------------------------------------------------

    def render_template(self, template_bytes: bytes, context: Mapping[str, Any]) -> bytes:
        """
        Render a docxtpl template against ``context``.

        Raises:
            TemplateError:       Template empty or not a readable DOCX.
            TemplateRenderError: Every syntax error and every variable the
                                 context does not provide, in one exception.
        """
        if not template_bytes:
            raise TemplateError("Template file is empty")

        tpl = DocxTemplate(io.BytesIO(template_bytes))
        try:
            tpl.init_docx()
        except Exception as exc:
            raise TemplateError(f"Template is not a readable DOCX: {exc}") from exc

        errors: List[str] = []
        try:
            undeclared = tpl.get_undeclared_template_variables()
        except TemplateSyntaxError as exc:
            errors.append(f"TemplateSyntaxError: {exc.message} (line {exc.lineno})")
            undeclared = set()

        errors.extend(
            f"UndefinedError: '{name}' is not defined"
            for name in sorted(undeclared)
            if name not in context
        )
        if errors:
            raise TemplateRenderError(errors)

        try:
            tpl.render(dict(context), autoescape=True)
        except JinjaTemplateError as exc:
            raise TemplateRenderError([f"{type(exc).__name__}: {exc}"]) from exc
        except etree.XMLSyntaxError as exc:
            raise TemplateRenderError([f"XMLSyntaxError: {exc}"]) from exc

        buffer = io.BytesIO()
        tpl.save(buffer)
        return buffer.getvalue()

    # ------------------------------------------------------------------
    # Phase 2: generated content
    # ------------------------------------------------------------------

    def build_content_fragment(self, fields: FieldMap) -> Optional[bytes]:
        """
        Standalone DOCX holding the assignment content and reference list,
        or None when there is nothing to append.
        """
        data = _as_assignment_data(fields)
        content = clean_content(data.assignment_content)
        references = [format_reference(r) for r in data.references]
        if not content.strip() and not references:
            return None

        font = FontInfo(
            name=coerce_str(data.font_family) or DEFAULT_FONT_NAME,
            size=data.font_size or DEFAULT_FONT_SIZE,
        )
        styles = DocumentStyles(fonts={"default": font})
        doc = ooxml.new_document(styles)
        ooxml.add_content_paragraphs(doc, content, font, styles.spacing.line)
        ooxml.add_references_section(doc, references, font)
        return ooxml.document_to_bytes(doc)

    def merge_template(self, template_bytes: bytes, fields: FieldMap) -> MergeResult:
        """
        Render the template, then append generated content when there is any.

        Rendering errors propagate. A failure while building or splicing the
        content is logged and reported through ``MergeResult.warning``; the
        template-only document is returned in that case.
        """
        data = _as_assignment_data(fields)
        rendered = self.render_template(template_bytes, self.prepare_template_data(data))

        try:
            fragment = self.build_content_fragment(data)
            if fragment is None:
                logger.info("Template rendered (%d bytes), nothing to append", len(rendered))
                return MergeResult(document=rendered, content_appended=False)
            merged = append_docx_content(rendered, fragment)
        except Exception as exc:
            logger.warning("Content append failed, returning template only: %s", exc)
            return MergeResult(
                document=rendered,
                content_appended=False,
                warning=f"Generated content could not be appended: {exc}",
            )

        logger.info("Template rendered and content appended (%d bytes)", len(merged))
        return MergeResult(document=merged, content_appended=True)

    def generate_from_template(
        self,
        registry: TemplateRegistry,
        college_code: str,
        template_type: str,
        fields: FieldMap,
    ) -> MergeResult:
        """Look up the college's template and merge ``fields`` into it."""
        path = registry.get_template_path(college_code, template_type)
        logger.info("Generating %s document for %s from %s", template_type, college_code, path.name)
        return self.merge_template(path.read_bytes(), fields)
