"""
Shared fixtures for the assignment document service tests.

Templates are generated per test into a temporary directory with the same
builder the ``generate_templates.py`` script uses, and the API's template
registry dependency is overridden to point at it.
"""
from __future__ import annotations

from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from assignment_docs.dependencies.services import get_template_registry
from assignment_docs.main import app
from assignment_docs.services.template_registry import TemplateRegistry
from generate_templates import build_template


# ---------------------------------------------------------------------------
# Per-test fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    """default_individual, default_group and LGTI_individual templates."""
    directory = tmp_path / "templates"
    directory.mkdir()
    build_template("individual").save(str(directory / "default_individual.docx"))
    build_template("group").save(str(directory / "default_group.docx"))
    build_template("individual").save(str(directory / "LGTI_individual.docx"))
    return directory


@pytest.fixture
def registry(template_dir: Path) -> TemplateRegistry:
    return TemplateRegistry(template_dir)


@pytest_asyncio.fixture
async def client(registry: TemplateRegistry) -> AsyncGenerator[AsyncClient, None]:
    """
    httpx AsyncClient wired to the FastAPI app with the template registry
    overridden to use the per-test template directory.
    """
    app.dependency_overrides[get_template_registry] = lambda: registry

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

SAMPLE_ASSIGNMENT = {
    "college_name": "Institute of Testing",
    "program_name": "Diploma in Public Administration",
    "module_code": "PA101",
    "module_name": "Public Policy",
    "instructor_name": "Dr. Smith",
    "student_name": "Jane Student",
    "registration_number": "REG-001",
    "type_of_work": "Individual Assignment",
    "title": "Local Governance",
    "submission_date": "2024-03-05",
}
