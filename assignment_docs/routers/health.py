"""
Health check endpoint.
"""
from fastapi import APIRouter, Depends
from datetime import datetime
import logging

from assignment_docs.dependencies.services import get_template_registry
from assignment_docs.models.schemas import HealthCheckResponse
from assignment_docs.services.template_registry import TemplateRegistry

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=HealthCheckResponse)
async def health_check(registry: TemplateRegistry = Depends(get_template_registry)):
    """
    Health check endpoint to verify system status.

    Returns:
        HealthCheckResponse with the template directory status
    """
    templates_available = 0
    if registry.template_dir.is_dir():
        templates_available = len(registry.list_templates())
    else:
        logger.error(f"Template directory missing: {registry.template_dir}")

    # Without templates only parse and rebuild are usable
    overall_status = "healthy" if templates_available else "degraded"

    return HealthCheckResponse(
        status=overall_status,
        template_dir=str(registry.template_dir),
        templates_available=templates_available,
        timestamp=datetime.utcnow()
    )
