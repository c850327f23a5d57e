"""
Pydantic schemas for request/response validation.
"""
import base64

from pydantic import AliasChoices, BaseModel, Field, ConfigDict
from typing import Optional, List, Dict, Any, Literal
from datetime import datetime

from assignment_docs.models.document import (
    DEFAULT_FONT_NAME,
    DEFAULT_FONT_SIZE,
    DEFAULT_LINE_SPACING,
    DEFAULT_MARGIN,
    DocumentStyles,
    FontInfo,
    MarginInfo,
    ParsedDocument,
    SpacingInfo,
)


TemplateType = Literal["individual", "group"]


# Document structure (input to the rebuilder)
class CoverPageElement(BaseModel):
    """One element of the original cover page, in document order."""

    type: str
    label: Optional[str] = None
    text: Optional[str] = None


class CoverPageStructure(BaseModel):
    """Declared cover-page layout."""

    layout: str = "centered"
    elements: List[CoverPageElement] = Field(default_factory=list)
    logo_position: Optional[str] = None


class SectionStructure(BaseModel):
    """A declared body section."""

    type: str
    title: Optional[str] = None
    word_count_range: Optional[List[int]] = None


class DocumentStructure(BaseModel):
    """Structure the rebuilder lays generated content into."""

    cover_page: Optional[CoverPageStructure] = None
    sections: List[SectionStructure] = Field(default_factory=list)
    academic_style: Optional[str] = None
    confidence_score: Optional[float] = None


# Formatting
class FormattingOptions(BaseModel):
    """Page geometry and body font; every field falls back to the defaults."""

    font_name: str = DEFAULT_FONT_NAME
    font_size: float = Field(DEFAULT_FONT_SIZE, gt=0)
    margin_top: float = Field(DEFAULT_MARGIN, ge=0)
    margin_bottom: float = Field(DEFAULT_MARGIN, ge=0)
    margin_left: float = Field(DEFAULT_MARGIN, ge=0)
    margin_right: float = Field(DEFAULT_MARGIN, ge=0)
    line_spacing: float = Field(DEFAULT_LINE_SPACING, gt=0)

    def to_styles(self) -> DocumentStyles:
        return DocumentStyles(
            fonts={"default": FontInfo(name=self.font_name, size=self.font_size)},
            margins=MarginInfo(
                top=self.margin_top,
                bottom=self.margin_bottom,
                left=self.margin_left,
                right=self.margin_right,
            ),
            spacing=SpacingInfo(line=self.line_spacing),
        )


# Template field map
class GroupMember(BaseModel):
    """Normalized group-member row; every value is a string."""

    sn: int
    name: str = ""
    registration_no: str = ""
    phone_number: str = ""


class Representative(BaseModel):
    """Normalized group-representative row."""

    name: str = ""
    role: str = ""
    registration_no: str = ""


class AssignmentData(BaseModel):
    """
    Caller-supplied field map for template generation.

    Everything is optional and loosely typed; TemplateMerger normalizes it into
    the flat variable map the template is rendered against. Unknown keys are
    kept so templates may reference extra fields.
    """

    college_name: Optional[str] = None
    college_code: Optional[str] = None
    program_name: Optional[str] = None
    module_name: Optional[str] = None
    module_code: Optional[str] = None
    course_name: Optional[str] = None
    course_code: Optional[str] = None
    instructor_name: Optional[str] = None
    student_name: Optional[str] = None
    registration_number: Optional[str] = None
    group_name: Optional[str] = None
    group_number: Optional[str] = None
    type_of_work: Optional[str] = None
    task: Optional[str] = None
    title: Optional[str] = None
    submission_date: Optional[Any] = None
    group_members: List[Dict[str, Any]] = Field(default_factory=list)
    group_representatives: List[Dict[str, Any]] = Field(default_factory=list)
    assignment_content: Optional[str] = None
    references: List[Dict[str, Any]] = Field(
        default_factory=list,
        validation_alias=AliasChoices("references", "assignment_references"),
    )
    font_family: Optional[str] = None
    font_size: Optional[float] = None
    cover_page_data: Optional[Dict[str, Any]] = None

    # Numeric ids and codes arrive as numbers from some clients
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)


# Requests
class RebuildRequest(BaseModel):
    """Body of POST /api/documents/rebuild."""

    structure: DocumentStructure
    generated_content: Dict[str, str] = Field(default_factory=dict)
    formatting: Optional[FormattingOptions] = None
    assignment_data: Optional[Dict[str, Any]] = None
    filename: str = "assignment.docx"


class TemplateGenerateRequest(BaseModel):
    """Body of POST /api/templates/generate."""

    college_code: str = Field(..., min_length=1)
    template_type: TemplateType = "individual"
    data: AssignmentData = Field(default_factory=AssignmentData)
    filename: Optional[str] = None


# Responses
class HeadingResponse(BaseModel):
    level: int
    text: str
    style: Dict[str, Any] = Field(default_factory=dict)


class SectionResponse(BaseModel):
    title: Optional[str] = None
    content: str
    type: str
    word_count: int


class ImageResponse(BaseModel):
    format: str
    width: Optional[int] = None
    height: Optional[int] = None
    data_base64: str


class MetadataResponse(BaseModel):
    page_count: int
    word_count: int
    document_type: str


class ParsedDocumentResponse(BaseModel):
    """Parsed upload returned by POST /api/documents/parse."""

    filename: str
    text: str
    cover_page_text: Optional[str] = None
    headings: List[HeadingResponse]
    sections: List[SectionResponse]
    styles: Dict[str, Any]
    images: List[ImageResponse]
    metadata: MetadataResponse

    @classmethod
    def from_parsed(cls, filename: str, doc: ParsedDocument) -> "ParsedDocumentResponse":
        return cls(
            filename=filename,
            text=doc.text,
            cover_page_text=doc.cover_page_text,
            headings=[
                HeadingResponse(
                    level=h.level,
                    text=h.text,
                    style={
                        k: (v.to_dict() if isinstance(v, FontInfo) else v)
                        for k, v in h.style.items()
                    },
                )
                for h in doc.headings
            ],
            sections=[
                SectionResponse(
                    title=s.title,
                    content=s.content,
                    type=s.type.value,
                    word_count=s.word_count,
                )
                for s in doc.sections
            ],
            styles=doc.styles.to_dict(),
            images=[
                ImageResponse(
                    format=img.format,
                    width=img.width,
                    height=img.height,
                    data_base64=base64.b64encode(img.data).decode("ascii"),
                )
                for img in doc.images
            ],
            metadata=MetadataResponse(
                page_count=doc.metadata.page_count,
                word_count=doc.metadata.word_count,
                document_type=doc.metadata.document_type.value,
            ),
        )


class TemplateInfo(BaseModel):
    """One template file discovered in the template directory."""

    college_code: str
    template_type: TemplateType
    filename: str
    path: str
    size: int
    modified_at: datetime


class TemplateListResponse(BaseModel):
    templates: List[TemplateInfo]
    count: int


class HealthCheckResponse(BaseModel):
    """Schema for health check response."""

    status: str
    template_dir: str
    templates_available: int
    timestamp: datetime
