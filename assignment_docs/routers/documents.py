"""
Document parsing and rebuilding endpoints.

POST /parse    — parse an uploaded PDF or DOCX into structure, styles and images.
POST /rebuild  — generate a DOCX from a declared structure and generated text.
"""
from __future__ import annotations

import logging
from pathlib import Path

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response

from assignment_docs.config import settings
from assignment_docs.dependencies.services import (
    get_document_parser,
    get_document_rebuilder,
)
from assignment_docs.exceptions import ParseError
from assignment_docs.models.schemas import ParsedDocumentResponse, RebuildRequest
from assignment_docs.services.document_parser import DocumentParser
from assignment_docs.services.document_rebuilder import DocumentRebuilder

logger = logging.getLogger(__name__)

router = APIRouter()

DOCX_MEDIA_TYPE = (
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
)


# ---------------------------------------------------------------------------
# Parse
# ---------------------------------------------------------------------------

@router.post("/parse", response_model=ParsedDocumentResponse)
async def parse_document(
    file: UploadFile = File(...),
    parser: DocumentParser = Depends(get_document_parser),
) -> ParsedDocumentResponse:
    """
    Parse a PDF or DOCX upload.

    - Max file size: 10 MB (configurable via MAX_FILE_SIZE)
    - Images are returned base64-encoded (DOCX only)
    """
    if not file.filename:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Upload must include a filename.",
        )

    file_ext = Path(file.filename).suffix.lower()
    if file_ext not in settings.SUPPORTED_FILE_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=(
                f"Unsupported file type '{file_ext}'. "
                f"Accepted: {', '.join(settings.SUPPORTED_FILE_TYPES)}"
            ),
        )

    # Read in slices while enforcing the size limit
    data = bytearray()
    while True:
        chunk = await file.read(1024 * 1024)   # 1 MB slices
        if not chunk:
            break
        data.extend(chunk)
        if len(data) > settings.MAX_FILE_SIZE:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=(
                    f"File exceeds the {settings.MAX_FILE_SIZE // (1024 * 1024)} MB "
                    "size limit."
                ),
            )

    logger.info(f"Parsing {file.filename!r} ({len(data):,} bytes)")

    try:
        parsed = await run_in_threadpool(parser.parse, bytes(data), file_ext)
    except ParseError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        )

    return ParsedDocumentResponse.from_parsed(file.filename, parsed)


# ---------------------------------------------------------------------------
# Rebuild
# ---------------------------------------------------------------------------

@router.post("/rebuild")
async def rebuild_document(
    request: RebuildRequest,
    rebuilder: DocumentRebuilder = Depends(get_document_rebuilder),
) -> Response:
    """Generate a DOCX from a declared structure and per-section content."""
    formatting = request.formatting.to_styles() if request.formatting else None

    document = await run_in_threadpool(
        rebuilder.rebuild,
        request.structure,
        request.generated_content,
        formatting,
        (),
        request.assignment_data,
    )

    return Response(
        content=document,
        media_type=DOCX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{request.filename}"'},
    )
