"""Document model and API schemas for the assignment document pipeline."""
from assignment_docs.models.document import (
    DocumentMetadata,
    DocumentStyles,
    DocumentType,
    FontInfo,
    HeadingInfo,
    ImageInfo,
    MarginInfo,
    MergeResult,
    ParsedDocument,
    SectionInfo,
    SectionType,
    SpacingInfo,
)
from assignment_docs.models.schemas import (
    AssignmentData,
    CoverPageElement,
    CoverPageStructure,
    DocumentStructure,
    FormattingOptions,
    HealthCheckResponse,
    ParsedDocumentResponse,
    RebuildRequest,
    SectionStructure,
    TemplateGenerateRequest,
    TemplateInfo,
    TemplateListResponse,
)

__all__ = [
    # Document model
    "DocumentMetadata",
    "DocumentStyles",
    "DocumentType",
    "FontInfo",
    "HeadingInfo",
    "ImageInfo",
    "MarginInfo",
    "MergeResult",
    "ParsedDocument",
    "SectionInfo",
    "SectionType",
    "SpacingInfo",
    # Pydantic schemas
    "AssignmentData",
    "CoverPageElement",
    "CoverPageStructure",
    "DocumentStructure",
    "FormattingOptions",
    "HealthCheckResponse",
    "ParsedDocumentResponse",
    "RebuildRequest",
    "SectionStructure",
    "TemplateGenerateRequest",
    "TemplateInfo",
    "TemplateListResponse",
]
