"""
Service dependencies for FastAPI routes.

Each provider wires ``settings`` into one core service. Tests replace them
through ``app.dependency_overrides`` (e.g. to point at a temporary template
directory).
"""
from __future__ import annotations

from assignment_docs.config import settings
from assignment_docs.services.document_parser import DocumentParser
from assignment_docs.services.document_rebuilder import DocumentRebuilder
from assignment_docs.services.template_merger import TemplateMerger
from assignment_docs.services.template_registry import TemplateRegistry


def get_template_registry() -> TemplateRegistry:
    return TemplateRegistry(settings.TEMPLATE_DIR)


def get_document_parser() -> DocumentParser:
    return DocumentParser()


def get_document_rebuilder() -> DocumentRebuilder:
    return DocumentRebuilder()


def get_template_merger() -> TemplateMerger:
    """Merger using the configured default college identity."""
    return TemplateMerger(
        default_college_name=settings.DEFAULT_COLLEGE_NAME,
        default_college_code=settings.DEFAULT_COLLEGE_CODE,
    )
