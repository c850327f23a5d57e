"""
Template endpoints.

GET  /          — list templates found in TEMPLATE_DIR.
GET  /preview   — download the template a college/type resolves to.
POST /generate  — render a template with assignment data and append content.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import FileResponse, Response

from assignment_docs.dependencies.services import (
    get_template_merger,
    get_template_registry,
)
from assignment_docs.exceptions import TemplateError, TemplateNotFoundError
from assignment_docs.models.schemas import (
    TemplateGenerateRequest,
    TemplateListResponse,
    TemplateType,
)
from assignment_docs.routers.documents import DOCX_MEDIA_TYPE
from assignment_docs.services.template_merger import TemplateMerger
from assignment_docs.services.template_registry import TemplateRegistry

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=TemplateListResponse)
async def list_templates(
    registry: TemplateRegistry = Depends(get_template_registry),
) -> TemplateListResponse:
    """Return every ``{CODE}_{type}.docx`` template in the template directory."""
    templates = registry.list_templates()
    return TemplateListResponse(templates=templates, count=len(templates))


@router.get("/preview")
async def preview_template(
    code: str = Query(..., min_length=1),
    type: TemplateType = Query("individual"),
    registry: TemplateRegistry = Depends(get_template_registry),
) -> FileResponse:
    """Download the template file a college code and type resolve to."""
    try:
        path = registry.get_template_path(code, type)
    except TemplateNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))

    return FileResponse(path, media_type=DOCX_MEDIA_TYPE, filename=path.name)


@router.post("/generate")
async def generate_document(
    request: TemplateGenerateRequest,
    registry: TemplateRegistry = Depends(get_template_registry),
    merger: TemplateMerger = Depends(get_template_merger),
) -> Response:
    """
    Render the college's template with the supplied assignment data.

    ``X-Content-Appended`` tells whether generated content made it into the
    document; ``X-Merge-Warning`` carries the reason when it did not.
    """
    try:
        result = await run_in_threadpool(
            merger.generate_from_template,
            registry,
            request.college_code,
            request.template_type,
            request.data,
        )
    except TemplateNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    except TemplateError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        )

    filename = request.filename or (
        f"{request.college_code.upper()}_{request.template_type}_assignment.docx"
    )
    headers = {
        "Content-Disposition": f'attachment; filename="{filename}"',
        "X-Content-Appended": "true" if result.content_appended else "false",
    }
    if result.warning:
        logger.warning("Generated %s without appended content: %s", filename, result.warning)
        # Header values must be single-line latin-1
        headers["X-Merge-Warning"] = " ".join(result.warning.split()).encode(
            "latin-1", "replace"
        ).decode("latin-1")

    return Response(content=result.document, media_type=DOCX_MEDIA_TYPE, headers=headers)
