"""
Error taxonomy for the document pipeline.

ParseError and TemplateNotFoundError are fatal to the calling operation.
TemplateRenderError aggregates every problem the template engine reported.
AppendError never escapes TemplateMerger: the merge degrades to the
template-only document instead.
"""
from __future__ import annotations

from typing import Iterable, List


class DocumentPipelineError(Exception):
    """Base class for every error raised by the document pipeline."""


class ParseError(DocumentPipelineError):
    """Input bytes are not a readable package of the declared type."""


class TemplateError(DocumentPipelineError):
    """A template could not be read or rendered."""


class TemplateNotFoundError(TemplateError):
    """Neither a college-specific nor a default template exists."""


class TemplateRenderError(TemplateError):
    """The template engine reported unresolved or malformed expressions."""

    def __init__(self, errors: Iterable[str]) -> None:
        self.errors: List[str] = list(errors)
        super().__init__(
            "Template rendering error:\n" + "\n".join(self.errors)
        )


class AppendError(DocumentPipelineError):
    """The raw-XML splice failed or produced a structurally invalid document."""
